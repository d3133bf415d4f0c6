"""Market Research Agent - Cambodia lending market intelligence.

Builds market overviews, competitive maps, sector rankings, forecasts and
customer segmentation from the research framework tables, then asks the
AI service for the narrative.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..config.reference import get_reference_table
from ..utils.helpers import format_currency, thaw
from .base import AnalysisResult, format_bullets, run_analysis
from .executor import CommandExecutor

logger = logging.getLogger(__name__)


def _table() -> Mapping[str, Any]:
    return get_reference_table("market_research")


def get_research_framework() -> Dict[str, Any]:
    table = _table()
    return {
        "research_categories": thaw(table["research_categories"]),
        "data_collection": thaw(table["data_collection"]),
        "analysis_framework": thaw(table["analysis_framework"]),
        "cambodia_focus": thaw(table["cambodia_focus"]),
    }


# =============================================================================
# MARKET ANALYSIS
# =============================================================================

def generate_market_overview(market_data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Market size, growth and player count (caller figures override defaults)."""
    table = _table()
    market_data = market_data or {}
    overview = {
        key: market_data.get(key) if market_data.get(key) is not None else default
        for key, default in table["market_defaults"].items()
    }
    overview.update(thaw(table["market_overview"]))
    return overview


def perform_competitive_analysis() -> Dict[str, Any]:
    return thaw(_table()["competitive_profile"])


def analyze_sector_opportunities() -> Dict[str, Any]:
    return thaw(_table()["sector_opportunities"])


def assess_market_risks() -> Dict[str, Any]:
    """Risk register. More than two high-impact risks make the market High risk."""
    risks = thaw(_table()["market_risks"])
    high_impact = sum(1 for risk in risks if risk["impact"] == "High")
    level = "High" if high_impact > 2 else "Medium" if high_impact > 0 else "Low"
    return {
        "overall_risk_level": level,
        "key_risks": risks,
        "high_impact_risks": high_impact,
        "risk_mitigation": list(_table()["market_risk_mitigation"]),
    }


def identify_market_opportunities() -> Dict[str, Any]:
    """Opportunity list scored by the share of high-potential items."""
    opportunities = thaw(_table()["market_opportunities"])
    high = sum(1 for item in opportunities if item["potential"] == "High")
    score = round(high / len(opportunities) * 100) if opportunities else 0
    return {
        "opportunities": opportunities,
        "opportunity_score": score,
        "priority_actions": list(_table()["opportunity_actions"]),
    }


def generate_market_forecast_summary() -> Dict[str, Any]:
    return thaw(_table()["forecast"])


# =============================================================================
# COMPETITIVE LANDSCAPE
# =============================================================================

def map_competitors() -> Dict[str, Any]:
    table = _table()
    return {"market_structure": thaw(table["market_structure"]), **thaw(table["competitor_map"])}


def analyze_competitive_positioning() -> Dict[str, Any]:
    return thaw(_table()["competitive_positioning"])


def assess_competitive_threats() -> Dict[str, Any]:
    return thaw(_table()["competitive_threats"])


def develop_competitive_strategy() -> Dict[str, Any]:
    return thaw(_table()["competitive_strategy"])


# =============================================================================
# SECTOR OPPORTUNITIES
# =============================================================================

def generate_sector_overview() -> Dict[str, Any]:
    return thaw(_table()["sector_overview"])


def rank_sectors() -> List[Dict[str, Any]]:
    """Sectors ordered by opportunity score, highest first."""
    scores = sorted(thaw(_table()["sector_scores"]), key=lambda s: s["score"], reverse=True)
    return [{"rank": i, **sector} for i, sector in enumerate(scores, start=1)]


def analyze_credit_demand() -> Dict[str, Any]:
    table = _table()
    demand = thaw(table["credit_demand_by_sector"])
    total = sum(demand.values())
    return {
        "demand_by_sector": demand,
        "total_demand": total,
        "growth_rate": table["credit_demand_growth_rate"],
        "addressable_market": round(total * table["addressable_share"]),
    }


def assess_sector_risks() -> Dict[str, Any]:
    return thaw(_table()["sector_risks"])


def generate_sector_recommendations() -> Dict[str, Any]:
    return thaw(_table()["sector_investment_recommendations"])


# =============================================================================
# FORECASTING
# =============================================================================

def build_forecast_model() -> Dict[str, Any]:
    return thaw(_table()["forecast_model"])


def generate_forecast_scenarios() -> Dict[str, Any]:
    return thaw(_table()["forecast_scenarios"])


def analyze_market_trends() -> Dict[str, Any]:
    return thaw(_table()["market_trends"])


def derive_strategic_implications() -> Dict[str, Any]:
    return thaw(_table()["strategic_implications"])


# =============================================================================
# CUSTOMER SEGMENTATION
# =============================================================================

def analyze_segments() -> Dict[str, Any]:
    return thaw(_table()["customer_segments"])


def analyze_segment_demand() -> Dict[str, Any]:
    demand = thaw(_table()["segment_demand"])
    demand["total_demand"] = sum(demand["demand_by_segment"].values())
    return demand


def develop_targeting_strategy() -> Dict[str, Any]:
    return thaw(_table()["targeting_strategy"])


# =============================================================================
# ANALYSES
# =============================================================================

async def generate_market_analysis(
    research_scope: Optional[str] = None,
    market_data: Optional[Dict[str, Any]] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Comprehensive market analysis for the lending fund."""
    overview = generate_market_overview(market_data)
    extra = {k: v for k, v in (market_data or {}).items() if k not in overview}
    variables = {
        "research_scope": research_scope or "Comprehensive Market Analysis",
        "market_size": format_currency(overview["market_size"]),
        "growth_rate": overview["growth_rate"],
        "number_of_players": overview["number_of_players"],
        "details": format_bullets(extra) if extra else "• None provided",
    }

    def derive() -> Dict[str, Any]:
        return {
            "market_overview": overview,
            "competitive_analysis": perform_competitive_analysis(),
            "sector_opportunities": analyze_sector_opportunities(),
            "risk_assessment": assess_market_risks(),
            "market_opportunities": identify_market_opportunities(),
            "forecast_summary": generate_market_forecast_summary(),
        }

    return await run_analysis(
        "market_analysis",
        variables,
        summary_key="market_overview",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_competitive_landscape(
    competitor_data: Optional[Dict[str, Any]] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    competitor_map = map_competitors()
    details = {
        "market_structure": competitor_map["market_structure"]["structure"],
        "direct_competitors": [c["name"] for c in competitor_map["direct_competitors"]],
        "indirect_competitors": [c["name"] for c in competitor_map["indirect_competitors"]],
        **(competitor_data or {}),
    }

    def derive() -> Dict[str, Any]:
        return {
            "competitor_mapping": competitor_map,
            "competitive_positioning": analyze_competitive_positioning(),
            "competitive_threats": assess_competitive_threats(),
            "competitive_strategy": develop_competitive_strategy(),
        }

    return await run_analysis(
        "competitive_landscape",
        {"details": format_bullets(details)},
        summary_key="competitive_positioning",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def assess_sector_opportunities(
    sector_data: Optional[Dict[str, Any]] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    overview = generate_sector_overview()
    details = {
        "sector_growth_rates": [f"{k}: {v}%" for k, v in overview["sector_growth_rates"].items()],
        **(sector_data or {}),
    }

    def derive() -> Dict[str, Any]:
        return {
            "sector_overview": overview,
            "sector_ranking": rank_sectors(),
            "credit_demand": analyze_credit_demand(),
            "sector_risks": assess_sector_risks(),
            "investment_recommendations": generate_sector_recommendations(),
        }

    return await run_analysis(
        "sector_opportunities",
        {"details": format_bullets(details)},
        summary_key="sector_ranking",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def generate_market_forecast(
    forecast_parameters: Optional[Dict[str, Any]] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    model = build_forecast_model()
    details = {
        "methodology": model["methodology"],
        "key_variables": model["key_variables"],
        **(forecast_parameters or {}),
    }

    def derive() -> Dict[str, Any]:
        return {
            "forecast_model": model,
            "scenario_analysis": generate_forecast_scenarios(),
            "trend_analysis": analyze_market_trends(),
            "strategic_implications": derive_strategic_implications(),
        }

    return await run_analysis(
        "market_forecast",
        {"details": format_bullets(details)},
        summary_key="forecast_model",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_customer_segmentation(
    segment_data: Optional[Dict[str, Any]] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    segments = analyze_segments()
    details = {
        "segments": [s["name"] for s in segments["segments"]],
        "target_segments": segments["target_segments"],
        **(segment_data or {}),
    }

    def derive() -> Dict[str, Any]:
        return {
            "segment_analysis": segments,
            "demand_analysis": analyze_segment_demand(),
            "targeting_strategy": develop_targeting_strategy(),
        }

    return await run_analysis(
        "customer_segmentation",
        {"details": format_bullets(details)},
        summary_key="segment_analysis",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


__all__ = [
    "get_research_framework",
    "generate_market_overview",
    "perform_competitive_analysis",
    "analyze_sector_opportunities",
    "assess_market_risks",
    "identify_market_opportunities",
    "generate_market_forecast_summary",
    "map_competitors",
    "rank_sectors",
    "analyze_credit_demand",
    "generate_market_analysis",
    "analyze_competitive_landscape",
    "assess_sector_opportunities",
    "generate_market_forecast",
    "analyze_customer_segmentation",
]
