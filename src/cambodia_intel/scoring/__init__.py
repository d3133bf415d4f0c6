"""Deterministic scoring for due diligence and loan servicing."""

from .classifier import (
    CategoryRule,
    ClassificationResult,
    ClassifierConfig,
    Deduction,
    Trigger,
    classify,
)
from .due_diligence import (
    assess_compliance_risk,
    assess_compliance_status,
    assess_red_flag_severity,
    calculate_due_diligence_risk_score,
    process_screening_results,
)
from .loan_servicing import (
    StatusInfo,
    analyze_feasibility,
    calculate_portfolio_metrics,
    determine_loan_status,
)
from .models import ActionItem, NextStep, Recommendation

__all__ = [
    # Classifier
    "CategoryRule",
    "ClassificationResult",
    "ClassifierConfig",
    "Deduction",
    "Trigger",
    "classify",
    # Due diligence
    "assess_compliance_risk",
    "assess_compliance_status",
    "assess_red_flag_severity",
    "calculate_due_diligence_risk_score",
    "process_screening_results",
    # Loan servicing
    "StatusInfo",
    "analyze_feasibility",
    "calculate_portfolio_metrics",
    "determine_loan_status",
    # Records
    "ActionItem",
    "NextStep",
    "Recommendation",
]
