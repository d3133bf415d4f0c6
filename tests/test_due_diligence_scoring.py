"""Tests for borrower due diligence scoring."""

import pytest
from pydantic import ValidationError

from cambodia_intel.config.schemas import (
    BusinessVerificationRecord,
    DueDiligenceRecord,
    RedFlagRecord,
    ScreeningOutcome,
    ScreeningRecord,
)
from cambodia_intel.scoring import due_diligence as dd


# =============================================================================
# Comprehensive due diligence
# =============================================================================

def test_clean_individual_is_low_risk(clean_borrower):
    record = DueDiligenceRecord.coerce(clean_borrower)
    risk = dd.calculate_due_diligence_risk_score(record)

    assert risk.composite_score == 100
    assert risk.label == "Low Risk"
    assert risk.category_scores["business"] == 5
    assert risk.triggered_overrides == []


def test_sanctions_match_forces_high_risk(clean_borrower):
    record = DueDiligenceRecord.coerce({**clean_borrower, "sanctions_list_check": "Match found"})
    risk = dd.calculate_due_diligence_risk_score(record)

    assert risk.label == "High Risk"
    assert "sanctions_match" in risk.triggered_overrides
    assert risk.category_scores["compliance"] == 2

    flags = dd.identify_red_flags(record)
    assert "Sanctions list match found" in flags["compliance_red_flags"]

    recommendations = dd.generate_due_diligence_recommendations(
        risk, flags, dd.assess_compliance_status(record)
    )
    assert recommendations["recommendation_level"] == "Decline"
    assert recommendations["critical_recommendations"] >= 1


def test_empty_record_uses_defaults():
    record = DueDiligenceRecord.coerce(None)
    risk = dd.calculate_due_diligence_risk_score(record)

    assert risk.composite_score == 66
    assert risk.label == "Medium Risk"
    assert "business" not in risk.defaulted_categories
    assert "identity" in risk.defaulted_categories

    verification = dd.analyze_verification_results(record)
    assert verification["total_verifications"] == 0
    assert verification["completeness_score"] == 0
    assert verification["completeness_level"] == "Insufficient"


def test_absent_compliance_checks_count_as_not_completed():
    status = dd.assess_compliance_status(DueDiligenceRecord())
    assert status["compliance_percentage"] == 0
    assert status["overall_status"] == "Non-Compliant"
    assert len(status["missing_compliance"]) == 4


def test_fully_compliant_borrower(clean_borrower):
    record = DueDiligenceRecord.coerce(clean_borrower)
    status = dd.assess_compliance_status(record)
    verification = dd.analyze_verification_results(record)

    assert status["overall_status"] == "Fully Compliant"
    assert verification["completeness_score"] == 100
    assert verification["completeness_level"] == "Complete"


def test_camel_case_keys_are_accepted():
    record = DueDiligenceRecord.coerce({"borrowerName": "Chan Sophea", "sanctionsListCheck": "no match"})
    assert record.borrower_name == "Chan Sophea"
    assert record.sanctions_list_check == ScreeningOutcome.CLEAR


def test_decline_next_steps():
    steps = dd.generate_next_steps({"recommendation_level": "Decline"})
    assert steps[0]["step"].startswith("Prepare decline letter")
    assert "priority" not in steps[0]


# =============================================================================
# AML / KYC
# =============================================================================

def test_sanctions_match_is_non_compliant_high():
    record = ScreeningRecord(sanctions_list_results="Match found")
    screening = dd.process_screening_results(record)
    risk = dd.assess_compliance_risk(record, screening)

    assert screening["overall_screening_result"] == "Fail"
    assert risk["overall_risk_level"] == "High"
    assert risk["compliance_rating"] == "Non-Compliant"
    assert risk["enhanced_due_diligence_required"] is True

    requirements = [r["requirement"] for r in dd.identify_regulatory_requirements(risk)]
    assert "Senior Management Approval" in requirements


def test_pep_requires_review():
    record = ScreeningRecord(pep_screening_status="PEP identified")
    screening = dd.process_screening_results(record)
    risk = dd.assess_compliance_risk(record, screening)

    assert screening["pep_status"] == "PEP Identified"
    assert screening["overall_screening_result"] == "Requires Review"
    assert risk["risk_score"] == 30
    assert risk["overall_risk_level"] == "Medium"
    assert risk["compliance_rating"] == "Conditional"


def test_clear_screening_is_compliant():
    record = ScreeningRecord(
        pep_screening_status="Clear",
        sanctions_list_results="No match",
        adverse_media_check="Clear",
        transaction_amount=20000,
    )
    screening = dd.process_screening_results(record)
    risk = dd.assess_compliance_risk(record, screening)

    assert screening["overall_screening_result"] == "Pass"
    assert risk["overall_risk_level"] == "Low"
    assert risk["compliance_rating"] == "Compliant"

    plan = dd.develop_monitoring_plan(risk, screening)
    assert plan["monitoring_frequency"] == "Annual"
    assert plan["alert_thresholds"]["single_transaction"] == 250000


def test_unknown_screening_outcome_is_rejected():
    with pytest.raises(ValidationError):
        ScreeningRecord(sanctions_list_results="maybe")


# =============================================================================
# Business verification
# =============================================================================

def test_established_business_is_legitimate():
    record = BusinessVerificationRecord(
        business_license_status="Valid",
        years_in_operation="6",
        business_premises="Verified",
        financial_statements_available="yes",
        audited_statements=True,
        tax_compliance_status="Compliant",
        management_team="Experienced founders",
        employee_count=20,
        industry="Services",
    )
    legitimacy = dd.assess_business_legitimacy(record)
    operational = dd.evaluate_operational_risk(record)

    assert legitimacy["legitimacy_score"] == 100
    assert legitimacy["legitimacy_status"] == "Fully Legitimate"
    assert operational["risk_score"] == 100
    assert operational["risk_level"] == "Low"
    assert dd.generate_business_recommendations(legitimacy, operational)["recommended_action"] == "Approve"


def test_unknown_business_is_declined():
    record = BusinessVerificationRecord()
    legitimacy = dd.assess_business_legitimacy(record)
    operational = dd.evaluate_operational_risk(record)

    assert legitimacy["legitimacy_status"] == "Illegitimate Concerns"
    assert operational["risk_score"] == 25
    assert operational["risk_level"] == "Very High"
    assert dd.generate_business_recommendations(legitimacy, operational)["recommended_action"] == "Decline"

    verification = dd.analyze_business_verification(record)
    assert verification["compliance_status"] == "Unverified"
    assert len(verification["verification_gaps"]) == 4


# =============================================================================
# Red flags
# =============================================================================

def test_critical_flag_makes_severity_critical():
    record = RedFlagRecord(compliance_red_flags=["Sanctions list match on director"])
    severity = dd.assess_red_flag_severity(record)

    assert severity["overall_severity"] == "Critical"
    assert severity["critical_count"] == 1
    assert severity["severity_score"] == 50

    strategy = dd.create_red_flag_mitigation_strategy(severity)
    assert strategy["recommended_action"] == "Immediate Decline"
    assert strategy["review_period"] == "Immediate"

    plan = dd.develop_investigation_plan(dd.analyze_identified_red_flags(record), severity)
    assert plan["escalation_required"] is True
    assert plan["estimated_timeline"] == "2-5 business days"


def test_minor_flags_are_low_or_medium():
    two = RedFlagRecord(behavioral_red_flags=["Late documents", "Missed meeting"])
    assert dd.assess_red_flag_severity(two)["overall_severity"] == "Low"

    four = RedFlagRecord(
        behavioral_red_flags=["Late documents", "Missed meeting"],
        financial_red_flags=["Round-number deposits", "Frequent cash withdrawals"],
    )
    severity = dd.assess_red_flag_severity(four)
    assert severity["severity_score"] == 40
    assert severity["overall_severity"] == "Medium"


def test_red_flag_patterns_and_highest_category():
    record = RedFlagRecord(
        identity_red_flags=["Identity inconsistencies in records"],
        financial_red_flags=["Unexplained wealth", "Cash structuring"],
    )
    analysis = dd.analyze_identified_red_flags(record)

    assert analysis["total_red_flags"] == 3
    assert analysis["highest_risk_category"] == "financial"
    assert "Identity and financial irregularities suggest potential fraud" in analysis["red_flag_patterns"]


def test_no_flags():
    record = RedFlagRecord()
    analysis = dd.analyze_identified_red_flags(record)
    severity = dd.assess_red_flag_severity(record)

    assert analysis["highest_risk_category"] == "None"
    assert severity["overall_severity"] == "Low"
    assert dd.develop_investigation_plan(analysis, severity)["investigation_required"] is False


# =============================================================================
# Exact status and flag handling
# =============================================================================

def test_risk_score_is_repeatable(clean_borrower):
    record = DueDiligenceRecord.coerce({**clean_borrower, "national_id_status": "Not completed"})
    first = dd.calculate_due_diligence_risk_score(record)
    second = dd.calculate_due_diligence_risk_score(record)
    assert first.to_dict() == second.to_dict()


def test_completeness_matches_whole_statuses():
    record = DueDiligenceRecord(
        national_id_status="Verified - notarized copy",
        address_verification="Pending",
        income_verification="Not verified",
        credit_bureau_report="Not obtained",
    )
    verification = dd.analyze_verification_results(record)

    assert verification["total_verifications"] == 4
    assert verification["completed_verifications"] == 1


def test_geography_narrative_alone_adds_no_points():
    base = dict(pep_screening_status="Clear", sanctions_list_results="No match", adverse_media_check="Clear")
    narrative = ScreeningRecord(**base, geographic_risk_factors="No high-risk jurisdictions involved")
    flagged = ScreeningRecord(**base, high_risk_geography="yes")

    narrative_risk = dd.assess_compliance_risk(narrative, dd.process_screening_results(narrative))
    flagged_risk = dd.assess_compliance_risk(flagged, dd.process_screening_results(flagged))

    assert flagged.high_risk_geography is True
    assert flagged_risk["risk_score"] - narrative_risk["risk_score"] == 15
