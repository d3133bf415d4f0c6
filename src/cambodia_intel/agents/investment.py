"""Investment Wealth Agent - Cambodian financial markets intelligence.

Covers portfolio strategy, CSX equities, government and corporate bonds,
market updates, sector analysis and wealth optimization.
"""

import logging
import re
from typing import Any, Dict, Mapping, Optional

from ..config.reference import get_reference_table
from ..config.schemas import BondCurrency, RiskTolerance
from ..utils.helpers import format_amount, thaw
from .base import AnalysisResult, detect_tag, find_term, parse_amount, run_analysis
from .executor import CommandExecutor

logger = logging.getLogger(__name__)


def _table() -> Mapping[str, Any]:
    return get_reference_table("investment")


# =============================================================================
# REFERENCE HELPERS
# =============================================================================

def get_recommended_strategy(risk_tolerance: Optional[str]) -> str:
    """Portfolio strategy name for a risk tolerance (Balanced Growth by default)."""
    table = _table()
    tag = RiskTolerance.lookup(risk_tolerance)
    if tag is None:
        return table["default_strategy"]
    return table["strategy_by_risk_tolerance"].get(tag.value, table["default_strategy"])


def get_asset_allocation(strategy_name: str) -> Dict[str, Any]:
    strategies = _table()["portfolio_strategies"]
    strategy = strategies.get(strategy_name) or strategies[_table()["default_strategy"]]
    return thaw(strategy)


def _sector_key(sector: Optional[str], table: Mapping[str, Any]) -> Optional[str]:
    for name in table:
        if sector and name.lower() in sector.lower():
            return name
    return None


def get_market_data(sector: Optional[str]) -> Dict[str, Any]:
    """Listed-sector profile (Banking, Insurance, Real Estate)."""
    table = _table()
    key = _sector_key(sector, table["stock_sector_data"])
    if key is None:
        return thaw(table["default_stock_sector_data"])
    return thaw(table["stock_sector_data"][key])


def get_stock_risk_profile(sector: Optional[str]) -> Dict[str, Any]:
    table = _table()
    profile = thaw(table["stock_risk_profile"])
    key = _sector_key(sector, table["sector_specific_risk"])
    profile["sector_specific_risk"] = (
        table["sector_specific_risk"][key] if key else table["default_sector_specific_risk"]
    )
    return profile


def _currency(currency: Optional[str]) -> BondCurrency:
    return BondCurrency.lookup(currency) or BondCurrency.USD


def get_bond_yield_data(currency: Optional[str] = None, maturity: Optional[str] = None) -> Dict[str, Any]:
    """Yield curve for USD or KHR bonds, plus the point matching the maturity."""
    code = _currency(currency)
    curve = thaw(_table()["bond_yield_curves"][code.value])
    indicative = None
    if maturity:
        for tenor, band in curve.items():
            if tenor.lower() in maturity.lower():
                indicative = band
                break
    return {"currency": code.value, "yield_curve": curve, "indicative_yield": indicative}


def get_bond_risk_profile(bond_type: Optional[str], currency: Optional[str]) -> Dict[str, Any]:
    """Bond risks. Government paper carries lower credit risk; KHR adds currency risk."""
    profile = thaw(_table()["bond_risk_profile"])
    if bond_type and "government" in bond_type.lower():
        profile["credit_risk"] = "Low-Medium"
    else:
        profile["credit_risk"] = "Medium-High"
    if _currency(currency) == BondCurrency.KHR:
        profile["currency_risk"] = "High"
    else:
        profile["currency_risk"] = "Low"
    return profile


# =============================================================================
# FREE-TEXT EXTRACTION
# =============================================================================

def extract_amount(text: str) -> str:
    amount = parse_amount(text)
    if not amount:
        return _table()["quick_analysis_defaults"]["amount"]
    return format_amount(amount)


def extract_risk_tolerance(text: str) -> str:
    tag = detect_tag(RiskTolerance, text)
    return tag.value if tag else _table()["quick_analysis_defaults"]["risk_tolerance"]


def extract_timeframe(text: str) -> str:
    match = re.search(r"(\d+\s*-\s*\d+|\d+\+?)\s*years?", text or "", re.IGNORECASE)
    if match:
        return f"{match.group(1).replace(' ', '')} years"
    term = find_term(text, _table()["timeframe_terms"])
    return term or _table()["quick_analysis_defaults"]["timeframe"]


def extract_objectives(text: str) -> str:
    term = find_term(text, _table()["objective_terms"])
    return term.title() if term else _table()["quick_analysis_defaults"]["objectives"]


# =============================================================================
# ANALYSES
# =============================================================================

async def analyze_portfolio_strategy(
    investment_amount: Any = None,
    risk_tolerance: Optional[str] = None,
    time_horizon: Optional[str] = None,
    objectives: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Portfolio strategy for an investor profile."""
    strategy_name = get_recommended_strategy(risk_tolerance)
    tag = RiskTolerance.lookup(risk_tolerance)
    variables = {
        "investment_amount": format_amount(parse_amount(investment_amount), "Not specified"),
        "risk_tolerance": tag.value if tag else (risk_tolerance or "Not specified"),
        "time_horizon": time_horizon or "Not specified",
        "objectives": objectives or "Not specified",
        "strategy_name": strategy_name,
    }

    def derive() -> Dict[str, Any]:
        allocation = get_asset_allocation(strategy_name)
        return {
            "strategy_summary": {
                "recommended_strategy": strategy_name,
                "allocation": allocation["allocation"],
                "expected_return": allocation["expected_return"],
                "risk_level": allocation["risk_level"],
            },
            "strategy_details": allocation,
            "risk_factors": thaw(_table()["risk_factors"]),
        }

    return await run_analysis(
        "portfolio_strategy",
        variables,
        summary_key="strategy_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_stock_investment(
    sector: Optional[str] = None,
    company: Optional[str] = None,
    investment_size: Any = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    variables = {
        "sector": sector or "Not specified",
        "company": company or "Not specified",
        "investment_size": format_amount(parse_amount(investment_size), "Not specified"),
    }

    def derive() -> Dict[str, Any]:
        data = get_market_data(sector)
        return {
            "stock_summary": {
                "sector": variables["sector"],
                "company": variables["company"],
                "avg_pe": data["avg_pe"],
                "dividend_yield": data["dividend_yield"],
            },
            "market_data": data,
            "risk_profile": get_stock_risk_profile(sector),
        }

    return await run_analysis(
        "stock_investment",
        variables,
        summary_key="stock_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def analyze_bond_investment(
    bond_type: Optional[str] = None,
    maturity: Optional[str] = None,
    amount: Any = None,
    currency: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    yield_data = get_bond_yield_data(currency, maturity)
    variables = {
        "bond_type": bond_type or "Government Bonds",
        "maturity": maturity or "Not specified",
        "amount": format_amount(parse_amount(amount), "Not specified"),
        "currency": yield_data["currency"],
        "yield_range": yield_data["indicative_yield"] or "See yield curve",
    }

    def derive() -> Dict[str, Any]:
        return {
            "bond_summary": {
                "bond_type": variables["bond_type"],
                "maturity": variables["maturity"],
                "currency": variables["currency"],
                "indicative_yield": yield_data["indicative_yield"],
            },
            "yield_data": yield_data,
            "risk_profile": get_bond_risk_profile(variables["bond_type"], currency),
        }

    return await run_analysis(
        "bond_investment",
        variables,
        summary_key="bond_summary",
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
        markets = _table()["financial_markets"]
        csx = markets["Cambodia Stock Exchange (CSX)"]
        return {
            "market_summary": {
                "csx_market_cap": csx["market_cap"],
                "csx_listed_companies": csx["total_companies"],
                "government_bond_yields": markets["Government Bonds"]["yields"],
                "banking_sector_growth": markets["Banking Sector"]["growth"],
            },
            "financial_markets": thaw(markets),
        }

    return await run_analysis(
        "investment_market_update",
        {},
        summary_key="market_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def get_detailed_sector_analysis(
    sector: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    sector = sector or "Banking"

    def derive() -> Dict[str, Any]:
        data = get_market_data(sector)
        return {
            "sector_summary": {
                "sector": sector,
                "companies": data["companies"],
                "growth": data["growth"],
            },
            "market_data": data,
            "risk_profile": get_stock_risk_profile(sector),
        }

    return await run_analysis(
        "investment_sector_analysis",
        {"sector": sector},
        summary_key="sector_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def get_wealth_optimization_strategy(
    current_portfolio: Optional[str] = None,
    goals: Optional[str] = None,
    timeframe: Optional[str] = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    variables = {
        "current_portfolio": current_portfolio or "Not specified",
        "goals": goals or "Not specified",
        "timeframe": timeframe or "Not specified",
    }

    def derive() -> Dict[str, Any]:
        return {
            "optimization_summary": dict(variables),
            "investment_vehicles": thaw(_table()["investment_vehicles"]),
            "portfolio_strategies": thaw(_table()["portfolio_strategies"]),
        }

    return await run_analysis(
        "wealth_optimization",
        variables,
        summary_key="optimization_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def quick_investment_analysis(
    query: str,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Free-text entry point: extract an investor profile, then run the strategy analysis."""
    params = {
        "investment_amount": extract_amount(query),
        "risk_tolerance": extract_risk_tolerance(query),
        "time_horizon": extract_timeframe(query),
        "objectives": extract_objectives(query),
    }
    logger.info(f"Quick investment analysis: {params}")

    result = await analyze_portfolio_strategy(
        **params, executor=executor, session_id=session_id, transport=transport
    )
    result.fields["extracted_parameters"] = params
    return result


__all__ = [
    "get_recommended_strategy",
    "get_asset_allocation",
    "get_market_data",
    "get_stock_risk_profile",
    "get_bond_yield_data",
    "get_bond_risk_profile",
    "extract_amount",
    "extract_risk_tolerance",
    "extract_timeframe",
    "extract_objectives",
    "analyze_portfolio_strategy",
    "analyze_stock_investment",
    "analyze_bond_investment",
    "get_market_update",
    "get_detailed_sector_analysis",
    "get_wealth_optimization_strategy",
    "quick_investment_analysis",
]
