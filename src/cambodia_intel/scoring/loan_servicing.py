"""Loan servicing scoring.

Covers:
- Delinquency staging (LoanStatus state machine) and servicing actions
- Individual loan risk and probability of default
- Portfolio metrics, risk, recommendations and performance grade
- Collection notice scheduling
- Payment arrangement feasibility, financial impact and monitoring
"""

import logging
import math
import sys
import time
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

from ..config.reference import get_reference_table
from ..config.schemas import (
    ArrangementRecord,
    ArrangementType,
    LoanStatus,
    NoticeType,
    PortfolioRecord,
    ServicingRecord,
)
from ..utils.helpers import format_percentage, iso_date_after, thaw
from .classifier import label_for
from .models import ActionItem

logger = logging.getLogger(__name__)

NO_COVENANT_VIOLATION = ("none reported", "none")


def _framework() -> Mapping[str, Any]:
    return get_reference_table("loan_servicing")


# =============================================================================
# DELINQUENCY STATE MACHINE
# =============================================================================

@dataclass(frozen=True)
class StatusInfo:
    """Display attributes for one LoanStatus."""
    code: LoanStatus
    status: str
    description: str
    risk_level: str
    action_required: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["code"] = self.code.value
        return data


# Severity order for the delinquency ladder; later is worse
SEVERITY_ORDER = (
    LoanStatus.CURRENT,
    LoanStatus.PAST_DUE_1_30,
    LoanStatus.PAST_DUE_31_60,
    LoanStatus.PAST_DUE_61_90,
    LoanStatus.DEFAULT,
)


def status_info(code: LoanStatus) -> StatusInfo:
    entry = _framework()["loan_statuses"][code.value]
    return StatusInfo(
        code=code,
        status=entry["status"],
        description=entry["description"],
        risk_level=entry["risk_level"],
        action_required=entry["action_required"],
    )


def severity_rank(code: LoanStatus) -> int:
    """Position on the delinquency ladder. States off the ladder rank with Default."""
    if code in SEVERITY_ORDER:
        return SEVERITY_ORDER.index(code)
    return SEVERITY_ORDER.index(LoanStatus.DEFAULT)


def _days(value: Any) -> int:
    """Day counts that are negative or unparsable count as zero. Infinity saturates."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or number <= 0:
        return 0
    if math.isinf(number):
        return sys.maxsize
    return int(number)


def has_covenant_violation(covenant_violations: Optional[str]) -> bool:
    if covenant_violations is None:
        return False
    text = str(covenant_violations).strip()
    return bool(text) and text.lower() not in NO_COVENANT_VIOLATION


def determine_loan_status(
    days_past_due: Any = None,
    covenant_violations: Optional[str] = None,
    status_override: Union[LoanStatus, str, None] = None,
) -> StatusInfo:
    """
    Stage a loan from its delinquency and covenant position.

    Args:
        days_past_due: Days since the missed payment (absent means current)
        covenant_violations: Free-text covenant findings
        status_override: Workout, Foreclosure, ChargedOff or PaidOff set by servicing

    Returns:
        StatusInfo for the resulting LoanStatus
    """
    override = LoanStatus.lookup(status_override)
    days = _days(days_past_due)
    violation = has_covenant_violation(covenant_violations)

    if override in (LoanStatus.PAID_OFF, LoanStatus.CHARGED_OFF):
        return status_info(override)
    if override == LoanStatus.FORECLOSURE:
        return status_info(LoanStatus.FORECLOSURE)

    if violation or days > 90:
        return status_info(LoanStatus.DEFAULT)

    if override == LoanStatus.WORKOUT:
        # A fully performing workout loan returns to current
        if days == 0:
            return status_info(LoanStatus.CURRENT)
        return status_info(LoanStatus.WORKOUT)

    if days >= 61:
        code = LoanStatus.PAST_DUE_61_90
    elif days >= 31:
        code = LoanStatus.PAST_DUE_31_60
    elif days >= 1:
        code = LoanStatus.PAST_DUE_1_30
    else:
        code = LoanStatus.CURRENT
    return status_info(code)


def determine_record_status(record: ServicingRecord) -> StatusInfo:
    return determine_loan_status(
        record.days_past_due, record.covenant_violations, record.status_override
    )


def generate_servicing_actions(loan_status: StatusInfo, days_past_due: Any = None) -> List[Dict[str, str]]:
    """Servicing actions for the loan's stage."""
    code = loan_status.code
    days = _days(days_past_due)
    actions: List[ActionItem] = []

    if code == LoanStatus.CURRENT:
        actions.append(ActionItem("Routine monitoring", "low", "Next scheduled review", "Loan Servicer"))

    elif code in (LoanStatus.PAST_DUE_1_30, LoanStatus.PAST_DUE_31_60, LoanStatus.PAST_DUE_61_90):
        if days <= 15:
            actions.append(ActionItem("Friendly payment reminder call", "medium", "Within 24 hours", "Loan Officer"))
        elif days <= 30:
            actions.append(ActionItem("Formal collection call and email notice", "high", "Within 24 hours",
                                      "Collections Team"))
            actions.append(ActionItem("Assess and apply late fees", "medium", "Within 48 hours", "Loan Servicer"))
        elif days <= 60:
            actions.append(ActionItem("Send formal collection notice", "high", "Immediately", "Collections Manager"))
            actions.append(ActionItem("Schedule borrower meeting", "high", "Within 5 days", "Loan Officer"))
        else:
            actions.append(ActionItem("Issue default notice", "urgent", "Immediately", "Collections Manager"))
            actions.append(ActionItem("Initiate legal review", "urgent", "Within 3 days", "Legal Team"))

    elif code == LoanStatus.DEFAULT:
        actions.append(ActionItem("Engage legal counsel", "urgent", "Immediately", "Credit Manager"))
        actions.append(ActionItem("Initiate asset preservation measures", "urgent", "Within 48 hours",
                                  "Collections Team"))
        actions.append(ActionItem("Notify guarantors", "high", "Within 3 days", "Loan Officer"))

    elif code == LoanStatus.WORKOUT:
        actions.append(ActionItem("Monitor compliance with workout agreement", "high", "Weekly",
                                  "Workout Specialist"))

    elif code == LoanStatus.FORECLOSURE:
        actions.append(ActionItem("Manage foreclosure proceedings", "urgent", "Ongoing", "Legal Team"))

    elif code == LoanStatus.CHARGED_OFF:
        actions.append(ActionItem("Pursue recovery efforts", "high", "Within 30 days", "Recovery Team"))

    elif code == LoanStatus.PAID_OFF:
        actions.append(ActionItem("Close loan file and release collateral", "low", "Within 10 days",
                                  "Loan Servicer"))

    return [a.to_dict() for a in actions]


def calculate_probability_of_default(days_past_due: Any, late_payments_ytd: Any) -> int:
    """Heuristic default probability in percent."""
    days = _days(days_past_due)
    late = _days(late_payments_ytd)

    rate = 2.0
    if days >= 90:
        rate = 50
    elif days >= 60:
        rate = 25
    elif days >= 30:
        rate = 10
    elif days >= 15:
        rate = 5

    if late > 6:
        rate *= 1.5
    elif late > 3:
        rate *= 1.2

    return min(100, round(rate))


def assess_individual_loan_risk(record: ServicingRecord) -> Dict[str, Any]:
    days = record.days_past_due or 0
    late = record.late_payments_ytd or 0
    factors = []

    if days > 0:
        factors.append(f"Currently {days} days past due")
    if late > 3:
        factors.append("Chronic late payment pattern")
    if has_covenant_violation(record.covenant_violations):
        factors.append("Financial covenant violations")

    balance = record.outstanding_balance or 0
    payment = record.monthly_payment or 1
    if balance / payment > 36:
        factors.append("Extended remaining term")

    if days >= 60:
        level, action = "High", "Immediate attention"
    elif days >= 30:
        level, action = "Medium", "Enhanced monitoring"
    else:
        level, action = "Low", "Routine monitoring"

    return {
        "risk_level": level,
        "risk_factors": factors,
        "probability_of_default": calculate_probability_of_default(days, late),
        "recommended_action": action,
    }


REVIEW_INTERVAL_DAYS = {"critical": 1, "high": 7, "medium": 14}


def calculate_next_review_date(loan_status: StatusInfo, today: Optional[date] = None) -> str:
    """Daily, weekly, bi-weekly or monthly review depending on risk level."""
    return iso_date_after(REVIEW_INTERVAL_DAYS.get(loan_status.risk_level, 30), today)


# =============================================================================
# PORTFOLIO MONITORING
# =============================================================================

def calculate_total_past_due(record: PortfolioRecord) -> int:
    return (record.past_due_30 or 0) + (record.past_due_60 or 0) + (record.past_due_90 or 0)


def assess_concentration_risk(record: PortfolioRecord) -> str:
    score = 0
    if (record.largest_loan_percentage or 0) > 15:
        score += 2
    if (record.top10_loans_percentage or 0) > 50:
        score += 2
    if (record.single_industry_percentage or 0) > 30:
        score += 1
    return "Low" if score <= 1 else "Medium" if score <= 3 else "High"


def assess_quality_trend(record: PortfolioRecord) -> str:
    if record.default_percentage is None or record.previous_period_default is None:
        return "Unknown"
    trend = record.default_percentage - record.previous_period_default
    if trend > 1:
        return "Deteriorating"
    if trend < -1:
        return "Improving"
    return "Stable"


def calculate_portfolio_metrics(record: PortfolioRecord) -> Dict[str, Any]:
    """Portfolio ratios in percent, kept as numbers."""
    total = record.total_active_loans or 1
    outstanding = record.total_outstanding or 1
    cost_of_funds = record.cost_of_funds
    if cost_of_funds is None:
        cost_of_funds = _framework()["portfolio_assumptions"]["cost_of_funds"]

    metrics = {
        "current_ratio": round((record.current_loans or 0) / total * 100, 1),
        "delinquency_rate": round(calculate_total_past_due(record) / total * 100, 1),
        "default_rate": round((record.default_loans or 0) / total * 100, 1),
        "net_yield": None,
        "charge_off_rate": None,
    }

    if record.portfolio_yield:
        metrics["net_yield"] = round(record.portfolio_yield - cost_of_funds, 2)
    if record.charge_offs:
        metrics["charge_off_rate"] = round(record.charge_offs / outstanding * 100, 2)

    metrics["concentration_risk"] = assess_concentration_risk(record)
    metrics["quality_trend"] = assess_quality_trend(record)
    return metrics


def analyze_portfolio_risk(record: PortfolioRecord) -> Dict[str, Any]:
    factors = []
    opportunities = []

    delinquency = (
        (record.past_due_30_percentage or 0)
        + (record.past_due_60_percentage or 0)
        + (record.past_due_90_percentage or 0)
    )
    if delinquency > 10:
        factors.append("High delinquency rate requires immediate attention")
    if (record.default_percentage or 0) > 5:
        factors.append("Default rate above acceptable threshold")
    current = 100 if record.current_percentage is None else record.current_percentage
    if current < 85:
        factors.append("Low current payment percentage indicates collection issues")

    if (record.portfolio_yield or 0) < 18:
        opportunities.append("Potential for yield optimization through repricing")
    if (record.collection_rate or 0) < 80:
        opportunities.append("Collection process improvements needed")

    return {
        "risk_factors": factors,
        "opportunities": opportunities,
        "overall_risk_level": "High" if len(factors) > 2 else "Medium" if factors else "Low",
        "risk_score": max(0, 100 - len(factors) * 15),
    }


def generate_portfolio_recommendations(metrics: Dict[str, Any], risk_analysis: Dict[str, Any]) -> List[str]:
    recommendations = []

    if risk_analysis["overall_risk_level"] == "High":
        recommendations += [
            "Implement enhanced collection procedures immediately",
            "Review and tighten underwriting standards",
            "Increase loan loss provisions",
        ]
    if metrics["delinquency_rate"] > 8:
        recommendations += [
            "Focus on early-stage collection effectiveness",
            "Implement borrower payment assistance programs",
        ]
    if metrics["concentration_risk"] == "High":
        recommendations += [
            "Diversify loan portfolio across industries and geographies",
            "Implement concentration limits and monitoring",
        ]
    if risk_analysis["opportunities"]:
        recommendations.append("Explore identified growth and optimization opportunities")

    recommendations.append("Regular stress testing and scenario analysis")
    return recommendations


def _tier_points(value: Optional[float], tiers, higher_is_better: bool = True) -> int:
    if value is None:
        return 0
    for threshold, points in tiers:
        if (value >= threshold) if higher_is_better else (value <= threshold):
            return points
    return 0


def calculate_performance_grade(metrics: Dict[str, Any]) -> str:
    """Letter grade from current, delinquency, default and net yield (25 points each)."""
    score = (
        _tier_points(metrics.get("current_ratio"), ((90, 25), (85, 20), (80, 15)))
        + _tier_points(metrics.get("delinquency_rate"), ((3, 25), (5, 20), (8, 15)), higher_is_better=False)
        + _tier_points(metrics.get("default_rate"), ((1, 25), (2, 20), (3, 15)), higher_is_better=False)
        + _tier_points(metrics.get("net_yield"), ((12, 25), (8, 20), (5, 15)))
    )
    return label_for(score, ((90, "A+"), (80, "A"), (70, "B+"), (60, "B"), (50, "C")), "F")


def _display_rate(value: Optional[float]) -> str:
    return "Not available" if value is None else f"{value}%"


def generate_portfolio_benchmarks(metrics: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "industry_benchmarks": thaw(_framework()["industry_benchmarks"]),
        "portfolio_performance": {
            "current_ratio": _display_rate(metrics["current_ratio"]),
            "delinquency_rate": _display_rate(metrics["delinquency_rate"]),
            "default_rate": _display_rate(metrics["default_rate"]),
            "net_yield": _display_rate(metrics["net_yield"]),
        },
        "performance_grade": calculate_performance_grade(metrics),
    }


# =============================================================================
# COLLECTION NOTICES
# =============================================================================

def _notice_schedule(notice_type: Union[NoticeType, str, None]) -> Mapping[str, Any]:
    framework = _framework()
    parsed = NoticeType.lookup(notice_type)
    if parsed is None:
        return framework["default_notice_schedule"]
    return framework["collection_notices"][parsed.value]


def calculate_notice_due_date(notice_type: Union[NoticeType, str, None], today: Optional[date] = None) -> str:
    return iso_date_after(_notice_schedule(notice_type)["due_days"], today)


def calculate_escalation_date(notice_type: Union[NoticeType, str, None], today: Optional[date] = None) -> str:
    return iso_date_after(_notice_schedule(notice_type)["escalation_days"], today)


def determine_delivery_method(notice_type: Union[NoticeType, str, None]) -> List[str]:
    return list(_notice_schedule(notice_type)["delivery_methods"])


def generate_delivery_instructions(notice_type: Union[NoticeType, str, None]) -> Dict[str, List[str]]:
    """Preparation, delivery and follow-up steps. Unknown types get none."""
    return thaw(_notice_schedule(notice_type).get("delivery_instructions", {}))


def generate_follow_up_actions(notice_type: Union[NoticeType, str, None]) -> List[Dict[str, str]]:
    return thaw(_notice_schedule(notice_type).get("follow_up_actions", ()))


def build_notice_metadata(
    loan_id: str,
    notice_type: Union[NoticeType, str, None],
    borrower_name: Optional[str],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    parsed = NoticeType.lookup(notice_type)
    label = parsed.value if parsed else (notice_type or "")
    return {
        "notice_id": f"CN-{loan_id}-{int(time.time() * 1000)}",
        "loan_id": loan_id,
        "notice_type": label,
        "borrower_name": borrower_name,
        "generation_date": (today or date.today()).isoformat(),
        "due_date": calculate_notice_due_date(notice_type, today),
        "delivery_method": determine_delivery_method(notice_type),
        "follow_up_required": True,
        "escalation_date": calculate_escalation_date(notice_type, today),
    }


# =============================================================================
# PAYMENT ARRANGEMENTS
# =============================================================================

ARRANGEMENT_TYPE_POINTS = {
    ArrangementType.PAYMENT_REDUCTION: 20,
    ArrangementType.TERM_EXTENSION: 15,
    ArrangementType.INTEREST_RATE_REDUCTION: 10,
}


def analyze_feasibility(record: ArrangementRecord) -> Dict[str, Any]:
    """
    Score whether the borrower can sustain the proposed arrangement.

    Payment-to-income (PTI) and payment-to-cash-flow (PTCF) ratios carry
    most of the weight. Missing income or non-positive cash flow count as
    a 100% ratio.
    """
    score = 0
    factors = []
    risks = []

    income = record.monthly_income or 0
    expenses = record.monthly_expenses or 0
    payment = record.new_payment_amount or 0
    cash_flow = income - expenses

    pti = payment / income * 100 if income > 0 else 100
    if pti <= 25:
        score += 25
        factors.append("Payment-to-income ratio acceptable")
    elif pti <= 35:
        score += 15
        factors.append("Payment-to-income ratio manageable")
    else:
        risks.append("High payment-to-income ratio")

    ptcf = payment / cash_flow * 100 if cash_flow > 0 else 100
    if ptcf <= 60:
        score += 25
        factors.append("Sufficient cash flow coverage")
    elif ptcf <= 80:
        score += 15
        factors.append("Adequate cash flow coverage")
    else:
        risks.append("Tight cash flow coverage")

    score += ARRANGEMENT_TYPE_POINTS.get(record.arrangement_type, 0)

    duration = record.duration or 0
    if duration <= 6:
        score += 15
        factors.append("Short-term arrangement")
    elif duration <= 12:
        score += 10
        factors.append("Medium-term arrangement")
    else:
        risks.append("Extended arrangement period")

    if record.hardship_temporary:
        score += 15
        factors.append("Temporary hardship identified")

    pti = round(pti, 1)
    ptcf = round(ptcf, 1)
    return {
        "feasibility_score": score,
        "feasibility_level": label_for(score, ((70, "High"), (50, "Medium")), "Low"),
        "positive_factors": factors,
        "risk_factors": risks,
        "payment_to_income": pti,
        "payment_to_cash_flow": ptcf,
        "payment_to_income_ratio": format_percentage(pti),
        "payment_to_cash_flow_ratio": format_percentage(ptcf),
    }


def calculate_yield_impact(reduction_percentage: float, duration: int) -> Dict[str, Any]:
    base = _framework()["arrangement_assumptions"]["base_yield"]
    factor = (reduction_percentage / 100) * (duration / 12)
    projected = base * (1 - factor)
    return {
        "original_yield": round(base, 1),
        "projected_yield": round(projected, 1),
        "yield_reduction": round(base - projected, 1),
    }


def compare_with_recovery_alternatives(current_balance: float, new_payment: float) -> Dict[str, Any]:
    assumptions = _framework()["arrangement_assumptions"]
    foreclosure = current_balance * assumptions["foreclosure_recovery_rate"]
    charge_off = current_balance * assumptions["charge_off_recovery_rate"]
    projection = new_payment * assumptions["projection_months"]
    return {
        "foreclosure_recovery": round(foreclosure),
        "charge_off_recovery": round(charge_off),
        "arrangement_projection": round(projection),
        "best_alternative": "Payment Arrangement" if projection > foreclosure else "Foreclosure",
    }


def calculate_financial_impact(record: ArrangementRecord) -> Dict[str, Any]:
    assumptions = _framework()["arrangement_assumptions"]
    original = record.original_payment or 0
    new = record.new_payment_amount or 0
    duration = record.duration or assumptions["default_duration_months"]
    balance = record.current_balance or 0

    monthly_reduction = original - new
    total_reduction = monthly_reduction * duration
    reduction_percentage = monthly_reduction / original * 100 if original > 0 else 0
    extension = math.ceil(total_reduction / new) if total_reduction > 0 and new > 0 else 0

    monthly_rate = assumptions["annual_discount_rate"] / 12
    npv = sum(monthly_reduction / (1 + monthly_rate) ** i for i in range(1, duration + 1))

    reduction_percentage = round(reduction_percentage, 1)
    return {
        "monthly_payment_reduction": monthly_reduction,
        "total_payment_reduction": total_reduction,
        "reduction_percentage": reduction_percentage,
        "reduction_percentage_display": format_percentage(reduction_percentage),
        "estimated_term_extension_months": extension,
        "npv_impact": round(npv),
        "yield_impact": calculate_yield_impact(reduction_percentage, duration),
        "recovery_comparison": compare_with_recovery_alternatives(balance, new),
    }


def generate_arrangement_recommendation(feasibility: Dict[str, Any], impact: Dict[str, Any]) -> Dict[str, Any]:
    recommendation = {"approved": False, "conditions": [], "reasoning": [], "alternatives": []}
    level = feasibility["feasibility_level"]

    if level == "High" and impact["reduction_percentage"] < 30:
        recommendation["approved"] = True
        recommendation["reasoning"].append("High feasibility score and manageable financial impact")
        if feasibility["risk_factors"]:
            recommendation["conditions"] += ["Address identified risk factors", "Enhanced monitoring required"]
    elif level == "Medium":
        recommendation["approved"] = True
        recommendation["conditions"] += [
            "Require additional collateral or guarantee",
            "Monthly financial reporting",
            "Quarterly performance review",
        ]
        recommendation["reasoning"].append("Medium feasibility requires enhanced risk mitigation")
    else:
        recommendation["reasoning"].append("Low feasibility score indicates high re-default risk")
        recommendation["alternatives"] += [
            "Short-term forbearance with full catch-up plan",
            "Asset liquidation to reduce principal",
            "Third-party workout specialist engagement",
        ]

    return recommendation


def generate_required_documents() -> List[str]:
    return list(_framework()["arrangement_required_documents"])


def generate_monitoring_plan(record: ArrangementRecord) -> Dict[str, Any]:
    table = _framework()
    duration = record.duration or table["arrangement_assumptions"]["default_duration_months"]
    monitoring = table["arrangement_monitoring"]

    return {
        "frequency": "Monthly" if duration <= 6 else "Bi-monthly",
        "requirements": list(monitoring["requirements"]),
        "milestones": [
            {"month": math.ceil(duration / 4), "action": "First quarter performance review"},
            {"month": math.ceil(duration / 2), "action": "Mid-term arrangement assessment"},
            {"month": duration, "action": "Arrangement completion and return to regular terms"},
        ],
        "escalation_triggers": list(monitoring["escalation_triggers"]),
    }
