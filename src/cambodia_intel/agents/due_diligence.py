"""Borrower Due Diligence Agent.

Four assessments, each combining deterministic scoring from
scoring.due_diligence with an AI-written narrative:
- Comprehensive borrower due diligence
- AML/KYC screening
- Business entity verification
- Red flag detection and analysis
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from ..config.schemas import (
    BusinessVerificationRecord,
    DueDiligenceRecord,
    RedFlagRecord,
    ScreeningRecord,
)
from ..scoring import due_diligence as dd
from .base import AnalysisResult, run_analysis
from .executor import CommandExecutor

logger = logging.getLogger(__name__)

RecordInput = Optional[Union[Mapping[str, Any], Any]]


async def conduct_comprehensive_due_diligence(
    borrower_id: str,
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """
    Full borrower assessment: verification completeness, weighted risk
    score, red flags, compliance status, recommendations and next steps.
    """
    record = DueDiligenceRecord.coerce(record)

    def derive() -> Dict[str, Any]:
        verification = dd.analyze_verification_results(record)
        risk = dd.calculate_due_diligence_risk_score(record)
        red_flags = dd.identify_red_flags(record)
        compliance = dd.assess_compliance_status(record)
        recommendations = dd.generate_due_diligence_recommendations(risk, red_flags, compliance)

        return {
            "due_diligence_summary": {
                "borrower_id": borrower_id,
                "borrower_name": record.borrower_name,
                "overall_risk_rating": risk.label,
                "risk_score": risk.composite_score,
                "completeness_score": verification["completeness_score"],
                "compliance_status": compliance["overall_status"],
                "recommendation_level": recommendations["recommendation_level"],
            },
            "verification_results": verification,
            "risk_assessment": risk.to_dict(),
            "red_flags": red_flags,
            "compliance_status": compliance,
            "recommendations": recommendations,
            "next_steps": dd.generate_next_steps(recommendations),
        }

    return await run_analysis(
        "dd_comprehensive",
        {"borrower_id": borrower_id, **record.prompt_variables()},
        summary_key="due_diligence_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def perform_aml_kyc_screening(
    borrower_id: str,
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    record = ScreeningRecord.coerce(record)

    def derive() -> Dict[str, Any]:
        screening = dd.process_screening_results(record)
        risk = dd.assess_compliance_risk(record, screening)

        return {
            "screening_summary": {
                "borrower_id": borrower_id,
                "overall_screening_result": screening["overall_screening_result"],
                "risk_level": risk["overall_risk_level"],
                "compliance_rating": risk["compliance_rating"],
                "enhanced_due_diligence_required": risk["enhanced_due_diligence_required"],
            },
            "screening_results": screening,
            "compliance_risk": risk,
            "regulatory_requirements": dd.identify_regulatory_requirements(risk),
            "monitoring_plan": dd.develop_monitoring_plan(risk, screening),
            "documentation_requirements": dd.generate_documentation_requirements(risk),
        }

    return await run_analysis(
        "dd_aml_kyc",
        {"borrower_id": borrower_id, **record.prompt_variables()},
        summary_key="screening_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def verify_business_entity(
    business_id: str,
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    record = BusinessVerificationRecord.coerce(record)

    def derive() -> Dict[str, Any]:
        verification = dd.analyze_business_verification(record)
        legitimacy = dd.assess_business_legitimacy(record)
        operational_risk = dd.evaluate_operational_risk(record)
        recommendations = dd.generate_business_recommendations(legitimacy, operational_risk)

        return {
            "verification_summary": {
                "business_id": business_id,
                "business_name": record.business_legal_name,
                "verification_status": verification["compliance_status"],
                "legitimacy_score": legitimacy["legitimacy_score"],
                "operational_risk_level": operational_risk["risk_level"],
                "recommended_action": recommendations["recommended_action"],
            },
            "verification_results": verification,
            "legitimacy_assessment": legitimacy,
            "operational_risk": operational_risk,
            "recommendations": recommendations,
            "required_documents": dd.identify_required_business_documents(legitimacy),
        }

    return await run_analysis(
        "dd_business_verification",
        {"business_id": business_id, **record.prompt_variables()},
        summary_key="verification_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


def _join_flags(flags) -> str:
    return "; ".join(flags) if flags else "None identified"


async def detect_and_analyze_red_flags(
    borrower_id: str,
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    record = RedFlagRecord.coerce(record)

    variables = {"borrower_id": borrower_id, **record.prompt_variables()}
    for category, flags in record.flags_by_category().items():
        variables[f"{category}_red_flags"] = _join_flags(flags)

    def derive() -> Dict[str, Any]:
        analysis = dd.analyze_identified_red_flags(record)
        severity = dd.assess_red_flag_severity(record)
        plan = dd.develop_investigation_plan(analysis, severity)
        mitigation = dd.create_red_flag_mitigation_strategy(severity)

        return {
            "red_flag_summary": {
                "borrower_id": borrower_id,
                "total_red_flags": analysis["total_red_flags"],
                "overall_severity": severity["overall_severity"],
                "highest_risk_category": analysis["highest_risk_category"],
                "investigation_required": plan["investigation_required"],
                "recommended_action": mitigation["recommended_action"],
            },
            "red_flag_analysis": analysis,
            "severity_assessment": severity,
            "investigation_plan": plan,
            "mitigation_strategy": mitigation,
            "next_actions": dd.generate_red_flag_next_actions(severity, plan),
        }

    return await run_analysis(
        "dd_red_flags",
        variables,
        summary_key="red_flag_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


__all__ = [
    "conduct_comprehensive_due_diligence",
    "perform_aml_kyc_screening",
    "verify_business_entity",
    "detect_and_analyze_red_flags",
]
