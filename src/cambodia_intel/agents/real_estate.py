"""Real Estate Agent - Cambodian property investment intelligence."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..config.reference import get_reference_table
from ..config.schemas import Location, ProjectType, PropertyType
from ..utils.helpers import format_amount, thaw
from .base import AnalysisResult, detect_tag, find_term, parse_amount, run_analysis
from .executor import CommandExecutor

logger = logging.getLogger(__name__)


def _table() -> Mapping[str, Any]:
    return get_reference_table("real_estate")


def _location_name(location: Optional[str]) -> str:
    tag = Location.lookup(location)
    if tag is None or tag == Location.OTHER:
        return location or "Not specified"
    return tag.value


# =============================================================================
# REFERENCE HELPERS
# =============================================================================

def get_market_data(location: Optional[str]) -> Dict[str, Any]:
    """Hotspot profile for a location, or generic guidance."""
    table = _table()
    tag = Location.lookup(location)
    hotspot = table["property_hotspots"].get(tag.value) if tag else None
    if hotspot is None:
        return thaw(table["default_market_data"])
    return thaw(hotspot)


def get_investment_types_for_budget(budget: Any) -> Dict[str, Any]:
    """Investment types whose minimum investment the budget covers."""
    amount = parse_amount(budget) or 0
    return {
        name: thaw(details)
        for name, details in _table()["investment_types"].items()
        if amount >= details["min_investment"]
    }


def get_next_steps() -> List[str]:
    return list(_table()["next_steps"])


def get_rental_yield_range(property_type: Optional[str]) -> Dict[str, Any]:
    """Gross yield band in percent, with a "6-12%" display string."""
    table = _table()
    tag = PropertyType.lookup(property_type)
    band = table["rental_yield_ranges"].get(tag.value) if tag else None
    band = band or table["default_rental_yield"]
    return {"min": band["min"], "max": band["max"], "display": f"{band['min']}-{band['max']}%"}


def calculate_feasibility_score(project_type: Optional[str], location: Optional[str], investment: Any) -> int:
    """Base score plus location, investment-size and project-type points, capped."""
    scoring = _table()["feasibility_scoring"]
    score = scoring["base"]

    location_tag = Location.lookup(location)
    if location_tag:
        score += scoring["location_points"].get(location_tag.value, 0)

    amount = parse_amount(investment) or 0
    for threshold, points in scoring["investment_points"]:
        if amount > threshold:
            score += points
            break

    project_tag = ProjectType.lookup(project_type)
    if project_tag:
        score += scoring["project_points"].get(project_tag.value, 0)

    return min(score, scoring["cap"])


# =============================================================================
# FREE-TEXT EXTRACTION
# =============================================================================

def extract_location(text: str) -> str:
    tag = detect_tag(Location, text)
    return tag.value if tag else _table()["quick_analysis_defaults"]["location"]


def extract_budget(text: str) -> str:
    amount = parse_amount(text)
    if not amount:
        return _table()["quick_analysis_defaults"]["budget"]
    return format_amount(amount)


def extract_strategy(text: str) -> str:
    term = find_term(text, _table()["strategy_terms"])
    return term.title() if term else _table()["quick_analysis_defaults"]["strategy"]


# =============================================================================
# ANALYSES
# =============================================================================

async def analyze_property_investment(
    location: Optional[str] = None,
    budget: Any = None,
    strategy: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Property investment analysis for a location, budget and strategy."""
    variables = {
        "location": _location_name(location),
        "budget": format_amount(parse_amount(budget), "Not specified"),
        "strategy": strategy or "Not specified",
    }

    def derive() -> Dict[str, Any]:
        suitable = get_investment_types_for_budget(budget)
        return {
            "investment_summary": {**variables, "suitable_investment_types": list(suitable)},
            "market_data": get_market_data(location),
            "investment_options": suitable,
            "next_steps": get_next_steps(),
        }

    return await run_analysis(
        "property_investment",
        variables,
        summary_key="investment_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_rental_yield(
    property_type: Optional[str] = None,
    location: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    tag = PropertyType.lookup(property_type)
    yield_range = get_rental_yield_range(property_type)
    variables = {
        "property_type": tag.value if tag and tag != PropertyType.OTHER else (property_type or "Not specified"),
        "location": _location_name(location),
        "yield_range": yield_range["display"],
    }

    def derive() -> Dict[str, Any]:
        return {
            "yield_summary": {
                "property_type": variables["property_type"],
                "location": variables["location"],
                "expected_yield_range": yield_range,
            },
            "market_data": get_market_data(location),
        }

    return await run_analysis(
        "rental_yield",
        variables,
        summary_key="yield_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_development_opportunity(
    project_type: Optional[str] = None,
    location: Optional[str] = None,
    investment: Any = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    score = calculate_feasibility_score(project_type, location, investment)
    tag = ProjectType.lookup(project_type)
    variables = {
        "project_type": tag.value if tag and tag != ProjectType.OTHER else (project_type or "Not specified"),
        "location": _location_name(location),
        "investment": format_amount(parse_amount(investment), "Not specified"),
        "feasibility_score": score,
    }

    def derive() -> Dict[str, Any]:
        return {
            "development_summary": {
                "project_type": variables["project_type"],
                "location": variables["location"],
                "investment": variables["investment"],
                "feasibility_score": score,
            },
            "market_data": get_market_data(location),
        }

    return await run_analysis(
        "development_opportunity",
        variables,
        summary_key="development_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def get_market_update(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    def derive() -> Dict[str, Any]:
        hotspots = _table()["property_hotspots"]
        return {
            "market_summary": {
                name: {"price_range": data["price_range"], "growth": data["growth"]}
                for name, data in hotspots.items()
            },
        }

    return await run_analysis(
        "real_estate_market_update",
        {},
        summary_key="market_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def quick_property_analysis(
    query: str,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Free-text entry point: extract parameters, then run the investment analysis."""
    params = {
        "location": extract_location(query),
        "budget": extract_budget(query),
        "strategy": extract_strategy(query),
    }
    logger.info(f"Quick property analysis: {params}")

    result = await analyze_property_investment(
        **params, executor=executor, session_id=session_id, transport=transport
    )
    result.fields["extracted_parameters"] = params
    return result


__all__ = [
    "get_market_data",
    "get_investment_types_for_budget",
    "get_next_steps",
    "get_rental_yield_range",
    "calculate_feasibility_score",
    "extract_location",
    "extract_budget",
    "extract_strategy",
    "analyze_property_investment",
    "analyze_rental_yield",
    "analyze_development_opportunity",
    "get_market_update",
    "quick_property_analysis",
]
