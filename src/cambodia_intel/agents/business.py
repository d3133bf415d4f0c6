"""Business Wealth Agent - Cambodian business opportunity intelligence.

Analyses:
- Sector opportunities and business models
- Market entry strategy
- Scaling strategy
- Business trends and sector deep dives
- Quick free-text analysis
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from ..config.reference import get_reference_table
from ..config.schemas import Sector
from ..utils.helpers import format_amount, thaw
from .base import AnalysisResult, detect_tag, find_term, parse_amount, run_analysis
from .executor import CommandExecutor

logger = logging.getLogger(__name__)


def _table() -> Mapping[str, Any]:
    return get_reference_table("business")


# =============================================================================
# REFERENCE HELPERS
# =============================================================================

def get_sector_data(sector: Optional[str]) -> Dict[str, Any]:
    """Sector profile, or the generic profile for unknown sectors."""
    table = _table()
    tag = Sector.lookup(sector)
    if tag is None:
        return thaw(table["default_sector"])
    return thaw(table["business_sectors"][tag.value])


def get_relevant_business_models(sector: Optional[str]) -> Dict[str, Any]:
    """Business models suited to a sector. Unmapped sectors get every model."""
    table = _table()
    models = table["business_models"]
    tag = Sector.lookup(sector)
    names = table["sector_business_models"].get(tag.value) if tag else None
    if not names:
        return thaw(models)
    return {name: thaw(models[name]) for name in names}


def get_competitive_intelligence(sector: Optional[str]) -> Dict[str, Any]:
    table = _table()
    tag = Sector.lookup(sector)
    factors = table["competitive_factors"].get(tag.value) if tag else None
    return {
        "key_success_factors": list(factors or table["default_competitive_factors"]),
        "startup_costs": thaw(table["startup_costs"]),
    }


def get_market_data(target_market: Optional[str]) -> Dict[str, Any]:
    """Customer segment profile (Urban Youth, Middle Class, ...)."""
    table = _table()
    profiles = table["market_profiles"]
    for name, profile in profiles.items():
        if target_market and name.lower() in target_market.lower():
            return {"segment": name, **thaw(profile)}
    return {"segment": target_market or "General Market", **thaw(table["default_market_profile"])}


def get_entry_barriers(business_type: Optional[str]) -> List[str]:
    table = _table()
    tag = detect_tag(Sector, business_type)
    barriers = table["entry_barriers"].get(tag.value) if tag else None
    return list(barriers or table["default_entry_barriers"])


def get_scaling_options() -> List[str]:
    return list(_table()["scaling_options"])


# =============================================================================
# FREE-TEXT EXTRACTION
# =============================================================================

def extract_sector(text: str) -> str:
    tag = detect_tag(Sector, text)
    return tag.value if tag else _table()["quick_analysis_defaults"]["sector"]


def extract_investment(text: str) -> str:
    amount = parse_amount(text) if re.search(r"\d", text or "") else None
    if not amount:
        return _table()["quick_analysis_defaults"]["investment"]
    return format_amount(amount)


def extract_timeframe(text: str) -> str:
    match = re.search(r"(\d+\s*-\s*\d+|\d+)\s*years?", text or "", re.IGNORECASE)
    if match:
        return f"{match.group(1).replace(' ', '')} years"
    term = find_term(text, _table()["timeframe_terms"])
    return term or _table()["quick_analysis_defaults"]["timeframe"]


# =============================================================================
# ANALYSES
# =============================================================================

async def analyze_business_opportunity(
    sector: Optional[str] = None,
    investment: Any = None,
    timeframe: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Opportunity analysis for a sector, budget and time horizon."""
    tag = Sector.lookup(sector)
    sector_name = tag.value if tag else (sector or "General Business")
    investment_text = format_amount(parse_amount(investment), "Not specified")
    timeframe = timeframe or "Not specified"

    def derive() -> Dict[str, Any]:
        data = get_sector_data(sector)
        return {
            "opportunity_summary": {
                "sector": sector_name,
                "investment": investment_text,
                "timeframe": timeframe,
                "expected_roi": data["roi"],
                "typical_investment": data["investment"],
            },
            "sector_data": data,
            "business_models": get_relevant_business_models(sector),
            "competitive_intelligence": get_competitive_intelligence(sector),
        }

    return await run_analysis(
        "business_opportunity",
        {"sector": sector_name, "investment": investment_text, "timeframe": timeframe},
        summary_key="opportunity_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_market_entry(
    business_type: Optional[str] = None,
    target_market: Optional[str] = None,
    strategy: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    business_type = business_type or "Not specified"
    target_market = target_market or "Not specified"
    strategy = strategy or "Not specified"

    def derive() -> Dict[str, Any]:
        return {
            "entry_summary": {
                "business_type": business_type,
                "target_market": target_market,
                "strategy": strategy,
            },
            "market_data": get_market_data(target_market),
            "entry_barriers": get_entry_barriers(business_type),
        }

    return await run_analysis(
        "business_market_entry",
        {"business_type": business_type, "target_market": target_market, "strategy": strategy},
        summary_key="entry_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_scaling_strategy(
    current_business: Optional[str] = None,
    growth_targets: Optional[str] = None,
    expansion: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    variables = {
        "current_business": current_business or "Not specified",
        "growth_targets": growth_targets or "Not specified",
        "expansion": expansion or "Not specified",
    }

    def derive() -> Dict[str, Any]:
        return {
            "scaling_summary": dict(variables),
            "scaling_options": get_scaling_options(),
        }

    return await run_analysis(
        "business_scaling",
        variables,
        summary_key="scaling_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def get_business_trends(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    def derive() -> Dict[str, Any]:
        sectors = _table()["business_sectors"]
        return {
            "trends_summary": {
                "sectors_tracked": len(sectors),
                "sector_returns": {name: data["roi"] for name, data in sectors.items()},
            },
        }

    return await run_analysis(
        "business_trends",
        {},
        summary_key="trends_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def get_sector_analysis(
    sector: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    tag = Sector.lookup(sector)
    sector_name = tag.value if tag else (sector or "General Business")

    def derive() -> Dict[str, Any]:
        data = get_sector_data(sector)
        return {
            "sector_summary": {
                "sector": sector_name,
                "expected_roi": data["roi"],
                "time_horizon": data["time_horizon"],
            },
            "sector_data": data,
            "business_models": get_relevant_business_models(sector),
            "entry_barriers": get_entry_barriers(sector_name),
        }

    return await run_analysis(
        "business_sector_analysis",
        {"sector": sector_name},
        summary_key="sector_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def quick_business_analysis(
    query: str,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Free-text entry point: extract parameters, then run the opportunity analysis."""
    params = {
        "sector": extract_sector(query),
        "investment": extract_investment(query),
        "timeframe": extract_timeframe(query),
    }
    logger.info(f"Quick business analysis: {params}")

    result = await analyze_business_opportunity(
        **params, executor=executor, session_id=session_id, transport=transport
    )
    result.fields["extracted_parameters"] = params
    return result


__all__ = [
    "get_sector_data",
    "get_relevant_business_models",
    "get_competitive_intelligence",
    "get_market_data",
    "get_entry_barriers",
    "get_scaling_options",
    "extract_sector",
    "extract_investment",
    "extract_timeframe",
    "analyze_business_opportunity",
    "analyze_market_entry",
    "analyze_scaling_strategy",
    "get_business_trends",
    "get_sector_analysis",
    "quick_business_analysis",
]
