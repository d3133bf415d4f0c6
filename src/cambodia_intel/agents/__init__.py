"""Cambodia Lending Intelligence Agents.

One module per domain. Each analyze coroutine awaits a single executor
call and returns an AnalysisResult.
"""

from typing import Awaitable, Callable, Dict, Tuple

from . import (
    business,
    due_diligence,
    investment,
    loan_servicing,
    market_research,
    real_estate,
    resources,
)
from .base import AnalysisResult, format_bullets, run_analysis
from .executor import (
    CommandExecutor,
    ExecutionOptions,
    ExecutionResult,
    LangChainExecutor,
    get_default_executor,
)

# (domain, operation) -> analyze coroutine, as mounted by the HTTP API
OPERATIONS: Dict[Tuple[str, str], Callable[..., Awaitable[AnalysisResult]]] = {
    # Business wealth
    ("business", "opportunity"): business.analyze_business_opportunity,
    ("business", "market-entry"): business.analyze_market_entry,
    ("business", "scaling"): business.analyze_scaling_strategy,
    ("business", "trends"): business.get_business_trends,
    ("business", "sector"): business.get_sector_analysis,
    ("business", "quick"): business.quick_business_analysis,
    # Real estate
    ("real-estate", "investment"): real_estate.analyze_property_investment,
    ("real-estate", "rental-yield"): real_estate.analyze_rental_yield,
    ("real-estate", "development"): real_estate.analyze_development_opportunity,
    ("real-estate", "market-update"): real_estate.get_market_update,
    ("real-estate", "quick"): real_estate.quick_property_analysis,
    # Investment wealth
    ("investment", "portfolio"): investment.analyze_portfolio_strategy,
    ("investment", "stock"): investment.analyze_stock_investment,
    ("investment", "bond"): investment.analyze_bond_investment,
    ("investment", "market-update"): investment.get_market_update,
    ("investment", "sector"): investment.get_detailed_sector_analysis,
    ("investment", "wealth-optimization"): investment.get_wealth_optimization_strategy,
    ("investment", "quick"): investment.quick_investment_analysis,
    # Natural resources
    ("resources", "gold"): resources.analyze_gold_mining,
    ("resources", "bauxite"): resources.analyze_bauxite_development,
    ("resources", "gemstones"): resources.analyze_gemstones_industry,
    ("resources", "oil-gas"): resources.analyze_oil_gas_sector,
    ("resources", "forestry"): resources.analyze_sustainable_forestry,
    ("resources", "energy"): resources.analyze_energy_resources,
    ("resources", "portfolio"): resources.get_natural_resources_portfolio_analysis,
    ("resources", "regional"): resources.analyze_regional_resource_comparison,
    # Market research
    ("market-research", "market"): market_research.generate_market_analysis,
    ("market-research", "competitive"): market_research.analyze_competitive_landscape,
    ("market-research", "sectors"): market_research.assess_sector_opportunities,
    ("market-research", "forecast"): market_research.generate_market_forecast,
    ("market-research", "segmentation"): market_research.analyze_customer_segmentation,
    # Borrower due diligence
    ("due-diligence", "comprehensive"): due_diligence.conduct_comprehensive_due_diligence,
    ("due-diligence", "aml-kyc"): due_diligence.perform_aml_kyc_screening,
    ("due-diligence", "business"): due_diligence.verify_business_entity,
    ("due-diligence", "red-flags"): due_diligence.detect_and_analyze_red_flags,
    # Loan servicing
    ("loan-servicing", "portfolio"): loan_servicing.monitor_portfolio_performance,
    ("loan-servicing", "loan"): loan_servicing.process_loan_servicing,
    ("loan-servicing", "collection-notice"): loan_servicing.generate_collection_notice,
    ("loan-servicing", "payment-arrangement"): loan_servicing.process_payment_arrangement,
}


def get_operation(domain: str, operation: str) -> Callable[..., Awaitable[AnalysisResult]]:
    """Look up an analyze coroutine. Raises KeyError for unknown pairs."""
    try:
        return OPERATIONS[(domain, operation)]
    except KeyError:
        raise KeyError(f"Unknown operation: {domain}/{operation}") from None


__all__ = [
    "AnalysisResult",
    "CommandExecutor",
    "ExecutionOptions",
    "ExecutionResult",
    "LangChainExecutor",
    "OPERATIONS",
    "format_bullets",
    "get_default_executor",
    "get_operation",
    "run_analysis",
]
