"""Loan Servicing Agent.

Portfolio monitoring, individual loan servicing, collection notices and
payment arrangements. Status, metrics and feasibility come from
scoring.loan_servicing; the AI service writes the narrative (or, for
collection notices, the notice text itself).
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from ..config.schemas import (
    ArrangementRecord,
    NoticeRecord,
    NoticeType,
    PortfolioRecord,
    ServicingRecord,
)
from ..scoring import loan_servicing as ls
from ..utils.helpers import format_amount
from .base import AnalysisResult, run_analysis
from .executor import CommandExecutor

logger = logging.getLogger(__name__)

RecordInput = Optional[Union[Mapping[str, Any], Any]]


async def monitor_portfolio_performance(
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """Portfolio metrics, risk analysis, recommendations and a performance grade."""
    record = PortfolioRecord.coerce(record)

    def derive() -> Dict[str, Any]:
        metrics = ls.calculate_portfolio_metrics(record)
        risk_analysis = ls.analyze_portfolio_risk(record)
        benchmarks = ls.generate_portfolio_benchmarks(metrics)

        return {
            "portfolio_summary": {
                "total_active_loans": record.total_active_loans or 0,
                "total_outstanding": record.total_outstanding or 0,
                "total_past_due": ls.calculate_total_past_due(record),
                "performance_grade": benchmarks["performance_grade"],
                "overall_risk_level": risk_analysis["overall_risk_level"],
            },
            "performance_metrics": metrics,
            "risk_analysis": risk_analysis,
            "recommendations": ls.generate_portfolio_recommendations(metrics, risk_analysis),
            "benchmarks": benchmarks,
        }

    return await run_analysis(
        "portfolio_monitoring",
        record.prompt_variables(),
        summary_key="performance_metrics",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def process_loan_servicing(
    loan_id: str,
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    record = ServicingRecord.coerce(record)
    status = ls.determine_record_status(record)

    variables = {"loan_id": loan_id, **record.prompt_variables()}
    if not record.provided("current_status"):
        variables["current_status"] = status.status

    def derive() -> Dict[str, Any]:
        return {
            "account_summary": {
                "loan_id": loan_id,
                "borrower_name": record.borrower_name,
                "current_status": status.status,
                "status_code": status.code.value,
                "risk_level": status.risk_level,
                "days_past_due": record.days_past_due or 0,
                "outstanding_balance": record.outstanding_balance or 0,
            },
            "loan_status": status.to_dict(),
            "servicing_actions": ls.generate_servicing_actions(status, record.days_past_due),
            "risk_assessment": ls.assess_individual_loan_risk(record),
            "next_review_date": ls.calculate_next_review_date(status),
        }

    return await run_analysis(
        "loan_servicing",
        variables,
        summary_key="account_summary",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def generate_collection_notice(
    loan_id: str,
    notice_type: Union[NoticeType, str, None] = None,
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    """
    Draft a collection notice. The analysis text is the notice itself;
    metadata carries due and escalation dates and delivery methods.
    """
    record = NoticeRecord.coerce(record)
    if notice_type is None or not str(getattr(notice_type, "value", notice_type)).strip():
        notice_type = NoticeType.FORMAL_DEMAND.value
    metadata = ls.build_notice_metadata(loan_id, notice_type, record.borrower_name)

    variables = {
        "loan_id": loan_id,
        **record.prompt_variables(),
        "notice_type": metadata["notice_type"],
        "due_date": metadata["due_date"],
    }

    def derive() -> Dict[str, Any]:
        return {
            "notice_metadata": metadata,
            "delivery_instructions": ls.generate_delivery_instructions(notice_type),
            "follow_up_actions": ls.generate_follow_up_actions(notice_type),
        }

    return await run_analysis(
        "collection_notice",
        variables,
        summary_key="notice_metadata",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


async def process_payment_arrangement(
    loan_id: str,
    record: RecordInput = None,
    executor: Optional[CommandExecutor] = None,
    session_id: Optional[str] = None,
    transport: Any = None,
) -> AnalysisResult:
    record = ArrangementRecord.coerce(record)

    def derive() -> Dict[str, Any]:
        feasibility = ls.analyze_feasibility(record)
        impact = ls.calculate_financial_impact(record)

        return {
            "arrangement_summary": {
                "loan_id": loan_id,
                "arrangement_type": record.arrangement_type.value if record.arrangement_type else None,
                "new_payment": format_amount(record.new_payment_amount),
                "duration_months": record.duration,
                "feasibility_score": feasibility["feasibility_score"],
                "feasibility_level": feasibility["feasibility_level"],
            },
            "feasibility_analysis": feasibility,
            "financial_impact": impact,
            "recommendation": ls.generate_arrangement_recommendation(feasibility, impact),
            "required_documents": ls.generate_required_documents(),
            "monitoring_plan": ls.generate_monitoring_plan(record),
        }

    return await run_analysis(
        "payment_arrangement",
        {"loan_id": loan_id, **record.prompt_variables()},
        summary_key="recommendation",
        derive=derive,
        executor=executor,
        session_id=session_id,
        transport=transport,
    )


__all__ = [
    "monitor_portfolio_performance",
    "process_loan_servicing",
    "generate_collection_notice",
    "process_payment_arrangement",
]
