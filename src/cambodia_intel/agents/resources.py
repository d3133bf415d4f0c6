"""Natural Resources Agent - mining, energy and forestry intelligence for Cambodia."""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from ..config.reference import get_reference_table
from ..utils.helpers import thaw
from .base import AnalysisResult, format_bullets, run_analysis
from .executor import CommandExecutor

logger = logging.getLogger(__name__)


def _table() -> Mapping[str, Any]:
    return get_reference_table("resources")


def get_resource_data(resource: str) -> Dict[str, Any]:
    """Reference profile for one resource (gold, bauxite, timber, ...)."""
    sectors = _table()["sectors"]
    if resource not in sectors:
        raise KeyError(f"Unknown resource: {resource}")
    return thaw(sectors[resource])


def get_analysis_profile(name: str) -> Dict[str, Any]:
    return thaw(_table()["analysis_profiles"][name])


def _profile_text(*sections: Tuple[str, Mapping[str, Any]]) -> str:
    """Titled bullet blocks for the resource_profile prompt variable."""
    blocks = []
    for title, data in sections:
        flat = {k: v for k, v in data.items() if not isinstance(v, Mapping)}
        blocks.append(f"{title}:\n{format_bullets(flat)}")
    return "\n\n".join(blocks)


async def _analyze_resource(
    prompt_id: str,
    profile_name: str,
    resource_label: str,
    sections: Tuple[Tuple[str, Mapping[str, Any]], ...],
    executor: Optional[CommandExecutor],
    session_id: Optional[str],
    transport: Any,
    summary_key: str = "key_metrics",
) -> AnalysisResult:
    def derive() -> Dict[str, Any]:
        return {"resource": resource_label, **get_analysis_profile(profile_name)}

    return await run_analysis(
        prompt_id,
        {"resource_profile": _profile_text(*sections)},
        summary_key=summary_key,
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


# =============================================================================
# ANALYSES
# =============================================================================

async def analyze_gold_mining(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    return await _analyze_resource(
        "resources_gold", "gold", "Gold Mining",
        (("Gold", get_resource_data("gold")),),
        executor, session_id, transport,
    )


async def analyze_bauxite_development(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    table = _table()
    return await _analyze_resource(
        "resources_bauxite", "bauxite", "Bauxite",
        (
            ("Bauxite", get_resource_data("bauxite")),
            ("Processing Infrastructure", table["infrastructure"]["processing"]),
        ),
        executor, session_id, transport,
    )


async def analyze_gemstones_industry(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    return await _analyze_resource(
        "resources_gemstones", "gemstones", "Precious Gemstones",
        (("Gemstones", get_resource_data("gemstones")),),
        executor, session_id, transport,
    )


async def analyze_oil_gas_sector(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    return await _analyze_resource(
        "resources_oil_gas", "oil_gas", "Oil & Gas",
        (("Oil & Gas", get_resource_data("oil_gas")),),
        executor, session_id, transport,
    )


async def analyze_sustainable_forestry(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    return await _analyze_resource(
        "resources_forestry", "forestry", "Sustainable Forestry",
        (
            ("Forestry", get_resource_data("timber")),
            ("Sustainability", _table()["sustainability"]),
        ),
        executor, session_id, transport,
    )


async def analyze_energy_resources(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    energy = _table()["energy_resources"]
    return await _analyze_resource(
        "resources_energy", "energy", "Energy Resources",
        tuple((name.title(), data) for name, data in energy.items()),
        executor, session_id, transport,
    )


async def get_natural_resources_portfolio_analysis(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    table = _table()
    return await _analyze_resource(
        "resources_portfolio", "portfolio", "Natural Resources Portfolio",
        (
            ("Sector Economics", table["economics"]),
            ("Upstream", table["opportunities"]["upstream"]),
            ("Midstream", table["opportunities"]["midstream"]),
            ("Downstream", table["opportunities"]["downstream"]),
        ),
        executor, session_id, transport,
    )


async def analyze_regional_resource_comparison(
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    return await _analyze_resource(
        "resources_regional_comparison", "regional", "Regional Comparison",
        (("Cambodia Sector Economics", _table()["economics"]),),
        executor, session_id, transport,
        summary_key="comparison",
    )


def get_natural_resources_quick_insights() -> Dict[str, Any]:
    """Static overview of the resources sector. No AI call."""
    return thaw(_table()["quick_insights"])


__all__ = [
    "get_resource_data",
    "get_analysis_profile",
    "analyze_gold_mining",
    "analyze_bauxite_development",
    "analyze_gemstones_industry",
    "analyze_oil_gas_sector",
    "analyze_sustainable_forestry",
    "analyze_energy_resources",
    "get_natural_resources_portfolio_analysis",
    "analyze_regional_resource_comparison",
    "get_natural_resources_quick_insights",
]
