"""Tests for loan servicing scoring."""

from datetime import date

import pytest

from cambodia_intel.config.schemas import ArrangementRecord, LoanStatus, PortfolioRecord, ServicingRecord
from cambodia_intel.scoring import loan_servicing as ls

TODAY = date(2024, 1, 1)


# =============================================================================
# Delinquency staging
# =============================================================================

@pytest.mark.parametrize("days, expected", [
    (None, LoanStatus.CURRENT),
    (0, LoanStatus.CURRENT),
    (1, LoanStatus.PAST_DUE_1_30),
    (30, LoanStatus.PAST_DUE_1_30),
    (31, LoanStatus.PAST_DUE_31_60),
    (60, LoanStatus.PAST_DUE_31_60),
    (61, LoanStatus.PAST_DUE_61_90),
    (90, LoanStatus.PAST_DUE_61_90),
    (91, LoanStatus.DEFAULT),
])
def test_days_past_due_partition(days, expected):
    assert ls.determine_loan_status(days).code == expected


def test_forty_five_days_past_due():
    status = ls.determine_loan_status(45)
    assert status.status == "Past Due 31-60 Days"
    assert status.risk_level == "high"

    actions = [a["action"] for a in ls.generate_servicing_actions(status, 45)]
    assert actions == ["Send formal collection notice", "Schedule borrower meeting"]


def test_covenant_violation_defaults_current_loan():
    assert ls.determine_loan_status(0, "DSCR below 1.25").code == LoanStatus.DEFAULT
    assert ls.determine_loan_status(0, "None reported").code == LoanStatus.CURRENT
    assert ls.determine_loan_status(0, "  ").code == LoanStatus.CURRENT


def test_negative_or_garbage_days_count_as_current():
    assert ls.determine_loan_status(-5).code == LoanStatus.CURRENT
    assert ls.determine_loan_status("unknown").code == LoanStatus.CURRENT


def test_terminal_overrides_win():
    assert ls.determine_loan_status(120, status_override="Paid Off").code == LoanStatus.PAID_OFF
    assert ls.determine_loan_status(10, status_override="ChargedOff").code == LoanStatus.CHARGED_OFF
    assert ls.determine_loan_status(0, status_override="Foreclosure").code == LoanStatus.FORECLOSURE


def test_workout_override():
    assert ls.determine_loan_status(0, status_override="Workout").code == LoanStatus.CURRENT
    assert ls.determine_loan_status(10, status_override="Workout").code == LoanStatus.WORKOUT
    assert ls.determine_loan_status(95, status_override="Workout").code == LoanStatus.DEFAULT


def test_severity_rank_is_monotonic():
    ranks = [ls.severity_rank(code) for code in ls.SEVERITY_ORDER]
    assert ranks == sorted(ranks)


def test_more_days_past_due_never_lowers_severity():
    for days in range(0, 200):
        today = ls.severity_rank(ls.determine_loan_status(days).code)
        tomorrow = ls.severity_rank(ls.determine_loan_status(days + 1).code)
        assert tomorrow >= today, days


def test_status_is_stable_for_the_same_input():
    for days in (0, 15, 45, 75, 120):
        assert ls.determine_loan_status(days, "None reported") == ls.determine_loan_status(days, "None reported")


@pytest.mark.parametrize("days", [float("inf"), "1e400", "inf", 10**30])
def test_overflowing_day_counts_are_default(days):
    assert ls.determine_loan_status(days).code == LoanStatus.DEFAULT


@pytest.mark.parametrize("days", [float("-inf"), float("nan"), "nan"])
def test_non_finite_day_counts_count_as_current(days):
    assert ls.determine_loan_status(days).code == LoanStatus.CURRENT


def test_record_saturates_overflowing_counts():
    record = ServicingRecord.coerce({"daysPastDue": "1e400", "latePaymentsYtd": "-inf"})
    assert record.days_past_due > 90
    assert record.late_payments_ytd == 0
    assert ls.determine_record_status(record).code == LoanStatus.DEFAULT
    assert ServicingRecord.coerce({"daysPastDue": "nan"}).days_past_due is None
    assert ls.severity_rank(LoanStatus.FORECLOSURE) == ls.severity_rank(LoanStatus.DEFAULT)


def test_next_review_date_follows_risk_level():
    assert ls.calculate_next_review_date(ls.determine_loan_status(45), TODAY) == "2024-01-08"
    assert ls.calculate_next_review_date(ls.determine_loan_status(0), TODAY) == "2024-01-31"
    assert ls.calculate_next_review_date(ls.determine_loan_status(100), TODAY) == "2024-01-02"


def test_individual_loan_risk():
    record = ServicingRecord(
        days_past_due=95,
        late_payments_ytd=7,
        covenant_violations="Insurance lapsed",
        outstanding_balance=100000,
        monthly_payment=2000,
    )
    risk = ls.assess_individual_loan_risk(record)

    assert risk["risk_level"] == "High"
    assert risk["probability_of_default"] == 75
    assert "Chronic late payment pattern" in risk["risk_factors"]
    assert "Extended remaining term" in risk["risk_factors"]


def test_status_to_dict_uses_code_value():
    data = ls.determine_loan_status(10).to_dict()
    assert data["code"] == "PastDue_1_30"
    assert data["action_required"] == "collection_calls"


# =============================================================================
# Portfolio
# =============================================================================

def test_portfolio_metrics(portfolio_record):
    record = PortfolioRecord.coerce(portfolio_record)
    metrics = ls.calculate_portfolio_metrics(record)

    assert metrics["current_ratio"] == 92.0
    assert metrics["delinquency_rate"] == 4.0
    assert metrics["default_rate"] == 1.0
    assert metrics["net_yield"] == 14.0
    assert metrics["charge_off_rate"] == 0.5
    assert metrics["concentration_risk"] == "Low"
    assert metrics["quality_trend"] == "Stable"
    assert ls.calculate_performance_grade(metrics) == "A+"


def test_healthy_portfolio_risk(portfolio_record):
    record = PortfolioRecord.coerce(portfolio_record)
    risk = ls.analyze_portfolio_risk(record)

    assert risk["overall_risk_level"] == "Low"
    assert risk["risk_score"] == 100
    assert risk["opportunities"] == []


def test_troubled_portfolio():
    record = PortfolioRecord(
        total_active_loans=50,
        current_loans=35,
        current_percentage=70,
        past_due_30=5,
        past_due_30_percentage=10,
        past_due_60=3,
        past_due_60_percentage=6,
        default_loans=4,
        default_percentage=8,
        previous_period_default=5,
        largest_loan_percentage=20,
        top10_loans_percentage=60,
        single_industry_percentage=40,
    )
    metrics = ls.calculate_portfolio_metrics(record)
    risk = ls.analyze_portfolio_risk(record)

    assert metrics["delinquency_rate"] == 16.0
    assert metrics["net_yield"] is None
    assert metrics["concentration_risk"] == "High"
    assert metrics["quality_trend"] == "Deteriorating"
    assert risk["overall_risk_level"] == "High"
    assert ls.calculate_performance_grade(metrics) == "F"

    recommendations = ls.generate_portfolio_recommendations(metrics, risk)
    assert "Increase loan loss provisions" in recommendations
    assert recommendations[-1] == "Regular stress testing and scenario analysis"

    benchmarks = ls.generate_portfolio_benchmarks(metrics)
    assert benchmarks["portfolio_performance"]["net_yield"] == "Not available"
    assert benchmarks["industry_benchmarks"]["default_rate"] == "≤ 2%"


def test_empty_portfolio_does_not_divide_by_zero():
    metrics = ls.calculate_portfolio_metrics(PortfolioRecord())
    assert metrics["current_ratio"] == 0.0
    assert metrics["quality_trend"] == "Unknown"


# =============================================================================
# Collection notices
# =============================================================================

def test_formal_demand_schedule():
    metadata = ls.build_notice_metadata("L-100", "Formal Demand", "Sok Dara", today=TODAY)

    assert metadata["notice_id"].startswith("CN-L-100-")
    assert metadata["generation_date"] == "2024-01-01"
    assert metadata["due_date"] == "2024-01-16"
    assert metadata["escalation_date"] == "2024-01-21"
    assert metadata["delivery_method"] == ["Certified Mail", "Email", "Hand Delivery"]


def test_notice_type_synonym():
    metadata = ls.build_notice_metadata("L-1", "reminder", None, today=TODAY)
    assert metadata["notice_type"] == "Friendly Reminder"
    assert metadata["due_date"] == "2024-01-11"


def test_unknown_notice_type_gets_default_schedule():
    metadata = ls.build_notice_metadata("L-1", "Courtesy call", None, today=TODAY)
    assert metadata["notice_type"] == "Courtesy call"
    assert metadata["due_date"] == "2024-01-16"
    assert metadata["delivery_method"] == ["Email", "Regular Mail"]
    assert ls.generate_delivery_instructions("Courtesy call") == {}
    assert ls.generate_follow_up_actions("Courtesy call") == []


# =============================================================================
# Payment arrangements
# =============================================================================

def arrangement(**overrides):
    data = {
        "current_balance": 10000,
        "original_payment": 220,
        "arrangement_type": "Payment Reduction",
        "new_payment_amount": 200,
        "duration": 6,
        "monthly_income": 1000,
        "monthly_expenses": 600,
        "hardship_reason": "Temporary loss of a major customer",
        "hardship_temporary": True,
    }
    data.update(overrides)
    return ArrangementRecord.coerce(data)


def test_feasibility_ratios():
    feasibility = ls.analyze_feasibility(arrangement())

    assert feasibility["payment_to_income"] == 20.0
    assert feasibility["payment_to_cash_flow"] == 50.0
    assert feasibility["payment_to_income_ratio"] == "20.0%"
    assert feasibility["feasibility_score"] == 100
    assert feasibility["feasibility_level"] == "High"


def test_missing_income_counts_as_full_ratio():
    feasibility = ls.analyze_feasibility(arrangement(monthly_income=None, hardship_reason=None, hardship_temporary=None, duration=18))

    assert feasibility["payment_to_income"] == 100
    assert feasibility["payment_to_cash_flow"] == 100
    assert feasibility["feasibility_level"] == "Low"
    assert "Extended arrangement period" in feasibility["risk_factors"]


def test_financial_impact():
    impact = ls.calculate_financial_impact(arrangement(original_payment=300))

    assert impact["monthly_payment_reduction"] == 100
    assert impact["total_payment_reduction"] == 600
    assert impact["reduction_percentage"] == 33.3
    assert impact["estimated_term_extension_months"] == 3
    assert impact["yield_impact"]["original_yield"] == 18
    assert impact["yield_impact"]["projected_yield"] == 15.0
    assert impact["recovery_comparison"]["foreclosure_recovery"] == 7000
    assert impact["recovery_comparison"]["best_alternative"] == "Foreclosure"


def test_small_reduction_is_approved():
    record = arrangement()
    feasibility = ls.analyze_feasibility(record)
    impact = ls.calculate_financial_impact(record)

    recommendation = ls.generate_arrangement_recommendation(feasibility, impact)
    assert recommendation["approved"] is True
    assert recommendation["alternatives"] == []


def test_monitoring_plan_milestones():
    plan = ls.generate_monitoring_plan(arrangement())
    assert plan["frequency"] == "Monthly"
    assert [m["month"] for m in plan["milestones"]] == [2, 3, 6]
    assert "Missed payment under arrangement" in plan["escalation_triggers"]


def test_hardship_points_need_the_temporary_flag():
    narrative_only = ls.analyze_feasibility(arrangement(
        hardship_reason="Permanent, not temporary, disability", hardship_temporary=None,
    ))
    flagged = ls.analyze_feasibility(arrangement(hardship_temporary="yes"))

    assert "Temporary hardship identified" not in narrative_only["positive_factors"]
    assert "Temporary hardship identified" in flagged["positive_factors"]
    assert flagged["feasibility_score"] - narrative_only["feasibility_score"] == 15
