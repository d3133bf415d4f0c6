"""Borrower due diligence scoring.

Covers four assessments:
- Comprehensive due diligence (verification completeness, weighted risk
  score, red flags, compliance status, recommendations)
- AML/KYC screening (screening results, compliance risk, regulatory
  requirements, monitoring plan, documentation)
- Business entity verification (area scores, legitimacy, operational risk)
- Red flag detection (patterns, severity, investigation and mitigation)

All functions are pure. Absent fields never raise.
"""

import logging
from datetime import date
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional

from ..config.reference import get_reference_table
from ..config.schemas import (
    BorrowerType,
    BusinessVerificationRecord,
    DueDiligenceRecord,
    Industry,
    RedFlagRecord,
    ScreeningOutcome,
    ScreeningRecord,
)
from ..utils.helpers import add_months
from .classifier import (
    CategoryRule,
    ClassificationResult,
    ClassifierConfig,
    Deduction,
    Trigger,
    clamp,
    classify,
    contains_any,
    label_for,
    matches_status,
)
from .models import NextStep, Recommendation

logger = logging.getLogger(__name__)

NOT_COMPLETED = "Not completed"

# Verification outcomes that do not count as complete
INCOMPLETE_STATUSES = (NOT_COMPLETED, "Pending", "Not obtained", "Not verified")


def _framework() -> Mapping[str, Any]:
    return get_reference_table("due_diligence")


# =============================================================================
# COMPREHENSIVE DUE DILIGENCE
# =============================================================================

# Fields that count toward verification completeness
VERIFICATION_FIELDS = (
    "national_id_status",
    "address_verification",
    "income_verification",
    "asset_verification",
    "credit_bureau_report",
    "business_license_status",
    "pep_screening_results",
    "sanctions_list_check",
    "title_verification",
)

CATEGORY_DEDUCTIONS = {
    "identity": (
        Deduction("national_id_status", (NOT_COMPLETED,), 2),
        Deduction("address_verification", (NOT_COMPLETED,), 1),
        Deduction("document_authentication", ("Failed",), 2),
    ),
    "financial": (
        Deduction("income_verification", (NOT_COMPLETED,), 2),
        Deduction("asset_verification", (NOT_COMPLETED,), 1),
        Deduction("bank_statement_review", (NOT_COMPLETED,), 1),
    ),
    "credit": (
        Deduction("credit_bureau_report", ("Not obtained",), 2),
        Deduction("banking_history", ("Poor",), 2),
    ),
    "business": (
        Deduction("business_license_status", ("Not verified",), 2),
        Deduction("business_operations_verification", ("Failed",), 2),
    ),
    "reputation": (
        Deduction("criminal_background_check", ("Issues identified",), 3),
        Deduction("litigation_history", ("Multiple cases",), 1),
    ),
    "compliance": (
        Deduction("pep_screening_results", (ScreeningOutcome.IDENTIFIED.value,), 2),
        Deduction("sanctions_list_check", (ScreeningOutcome.MATCH.value,), 3),
    ),
}

RISK_TRIGGERS = (
    Trigger("sanctions_match", "sanctions_list_check", (ScreeningOutcome.MATCH.value,)),
    Trigger("criminal_record", "criminal_background_check", ("Issues identified",)),
)


def _is_business_borrower(record: Mapping[str, Any]) -> bool:
    return record.get("borrower_type") == BorrowerType.BUSINESS


@lru_cache(maxsize=1)
def get_risk_classifier_config() -> ClassifierConfig:
    """Build the borrower risk classifier from the due diligence framework."""
    framework = _framework()
    weights = framework["risk_scoring_framework"]

    categories = {}
    for name, deductions in CATEGORY_DEDUCTIONS.items():
        categories[name] = CategoryRule(
            weight=weights[name]["weight"],
            deductions=deductions,
            subfactors=tuple(weights[name].get("factors", ())),
            applies=_is_business_borrower if name == "business" else None,
        )

    fallback = framework["risk_rating_fallback"]
    return ClassifierConfig(
        categories=categories,
        cut_points=tuple((minimum, label) for minimum, label in framework["risk_rating_cut_points"]),
        fallback_label=fallback,
        triggers=RISK_TRIGGERS,
        worst_label=fallback,
    )


def analyze_verification_results(record: DueDiligenceRecord) -> Dict[str, Any]:
    """Share of submitted verifications that are complete."""
    completed = 0
    total = 0
    details = {}

    for name in VERIFICATION_FIELDS:
        if not record.provided(name):
            continue
        total += 1
        value = getattr(record, name)
        details[name] = getattr(value, "value", value)
        if not matches_status(value, *INCOMPLETE_STATUSES):
            completed += 1

    score = round(completed / total * 100) if total else 0

    return {
        "completeness_score": score,
        "completed_verifications": completed,
        "total_verifications": total,
        "verification_details": details,
        "completeness_level": label_for(
            score, ((90, "Complete"), (70, "Substantial"), (50, "Partial")), "Insufficient"
        ),
    }


def calculate_due_diligence_risk_score(record: DueDiligenceRecord) -> ClassificationResult:
    """Weighted borrower risk score. Sanctions or criminal findings force High Risk."""
    result = classify(record.model_dump(), get_risk_classifier_config())
    if result.triggered_overrides:
        logger.info(f"Risk rating overridden by: {', '.join(result.triggered_overrides)}")
    return result


def identify_red_flags(record: DueDiligenceRecord) -> Dict[str, Any]:
    """Red flags visible in the verification outcomes."""
    flags = {category: [] for category in RedFlagRecord.CATEGORIES}

    # Identity
    if matches_status(record.national_id_status, NOT_COMPLETED, "Failed"):
        flags["identity"].append("National ID verification failed or incomplete")
    if matches_status(record.document_authentication, "Failed") or contains_any(
        record.document_authentication, "suspicious"
    ):
        flags["identity"].append("Document authentication issues identified")

    # Financial
    if contains_any(record.income_verification, "inconsistent"):
        flags["financial"].append("Inconsistent income verification")
    if contains_any(record.source_of_funds_verification, "unclear", "suspicious"):
        flags["financial"].append("Unclear or suspicious source of funds")

    # Business
    if matches_status(record.business_license_status, "Expired", "Invalid"):
        flags["business"].append("Business license expired or invalid")
    if contains_any(record.business_operations_verification, "shell", "inactive"):
        flags["business"].append("Shell company or inactive business operations")

    # Behavioral
    if contains_any(record.borrower_cooperation, "evasive", "uncooperative"):
        flags["behavioral"].append("Evasive or uncooperative borrower behavior")

    # Compliance
    if record.pep_screening_results == ScreeningOutcome.IDENTIFIED:
        flags["compliance"].append("Politically Exposed Person (PEP) identified")
    if record.sanctions_list_check == ScreeningOutcome.MATCH:
        flags["compliance"].append("Sanctions list match found")
    if contains_any(record.criminal_background_check, "criminal history", "convictions"):
        flags["compliance"].append("Criminal history or convictions identified")

    total = sum(len(items) for items in flags.values())

    return {
        "identity_red_flags": flags["identity"],
        "financial_red_flags": flags["financial"],
        "business_red_flags": flags["business"],
        "behavioral_red_flags": flags["behavioral"],
        "compliance_red_flags": flags["compliance"],
        "total_red_flags": total,
        "red_flag_severity": "High" if total > 5 else "Medium" if total > 2 else "Low",
    }


def _completed(record: DueDiligenceRecord, name: str) -> bool:
    """A check is complete when present and not marked Not completed."""
    return record.provided(name) and not matches_status(getattr(record, name), NOT_COMPLETED)


def assess_compliance_status(record: DueDiligenceRecord) -> Dict[str, Any]:
    """Regulatory compliance checks. Absent checks count as not completed."""
    checks = {
        "aml_compliance": _completed(record, "pep_screening_results")
        and _completed(record, "sanctions_list_check"),
        "kyc_compliance": _completed(record, "national_id_status")
        and _completed(record, "address_verification"),
        "document_compliance": _completed(record, "document_authentication"),
        "source_of_funds_compliance": _completed(record, "source_of_funds_verification"),
    }

    passed = sum(1 for ok in checks.values() if ok)
    percentage = round(passed / len(checks) * 100)

    return {
        "overall_status": label_for(
            percentage,
            ((100, "Fully Compliant"), (75, "Substantially Compliant"), (50, "Partially Compliant")),
            "Non-Compliant",
        ),
        "compliance_percentage": percentage,
        "compliance_checks": checks,
        "missing_compliance": [name for name, ok in checks.items() if not ok],
    }


def generate_due_diligence_recommendations(
    risk_assessment: ClassificationResult,
    red_flags: Dict[str, Any],
    compliance_status: Dict[str, Any],
) -> Dict[str, Any]:
    """Recommendation level plus itemised recommendations."""
    recommendations: List[Recommendation] = []
    level = "Standard"

    if risk_assessment.label == "High Risk":
        level = "Decline"
        recommendations.append(Recommendation(
            category="Application Decision",
            recommendation="Recommend loan application decline",
            priority="Critical",
            rationale="High overall risk rating indicates unacceptable risk level",
        ))
    elif risk_assessment.label == "Medium-High Risk":
        level = "Enhanced Due Diligence"
        recommendations.append(Recommendation(
            category="Enhanced Due Diligence",
            recommendation="Require comprehensive enhanced due diligence",
            priority="High",
            rationale="Medium-high risk requires additional verification and monitoring",
        ))

    if red_flags.get("total_red_flags", 0) > 3:
        recommendations.append(Recommendation(
            category="Red Flag Investigation",
            recommendation="Conduct thorough investigation of all identified red flags",
            priority="High",
            rationale="Multiple red flags require comprehensive investigation before approval",
        ))

    if compliance_status.get("overall_status") in ("Non-Compliant", "Partially Compliant"):
        recommendations.append(Recommendation(
            category="Compliance Remediation",
            recommendation="Complete all outstanding compliance requirements",
            priority="Critical",
            rationale="Regulatory compliance must be achieved before loan approval",
        ))

    scores = risk_assessment.category_scores
    if scores.get("identity", 5) < 3:
        recommendations.append(Recommendation(
            category="Identity Verification",
            recommendation="Enhanced identity verification with third-party validation",
            priority="High",
            rationale="Identity risk concerns require additional verification",
        ))
    if scores.get("financial", 5) < 3:
        recommendations.append(Recommendation(
            category="Financial Verification",
            recommendation="Independent financial verification and asset confirmation",
            priority="Medium",
            rationale="Financial risk concerns require independent verification",
        ))

    return {
        "recommendation_level": level,
        "recommendations": [r.to_dict() for r in recommendations],
        "total_recommendations": len(recommendations),
        "critical_recommendations": sum(1 for r in recommendations if r.priority == "Critical"),
    }


def generate_next_steps(recommendations: Dict[str, Any]) -> List[Dict[str, Any]]:
    level = recommendations.get("recommendation_level")

    if level == "Decline":
        steps = [
            NextStep("Prepare decline letter with specific reasons", "Within 2 business days", "Credit Manager"),
            NextStep("Document all findings for regulatory compliance", "Within 5 business days", "Compliance Officer"),
        ]
    else:
        steps = [NextStep("Complete outstanding due diligence items", "Within 10 business days", "Due Diligence Team")]
        if level == "Enhanced Due Diligence":
            steps.append(NextStep("Engage third-party verification services", "Within 5 business days", "Operations Manager"))
            steps.append(NextStep("Schedule enhanced customer interview", "Within 7 business days", "Relationship Manager"))
        steps.append(NextStep("Prepare credit committee presentation", "After due diligence completion", "Credit Analyst"))

    return [s.to_dict() for s in steps]


# =============================================================================
# AML / KYC SCREENING
# =============================================================================

COMPLIANCE_RISK_POINTS = {
    "pep": 30,
    "sanctions": 50,
    "adverse_media": 20,
    "high_value_transaction": 10,
    "high_risk_geography": 15,
}
HIGH_VALUE_TRANSACTION = 100000
COMPLIANCE_RISK_CUT_POINTS = ((50, "High"), (25, "Medium"))


def process_screening_results(record: ScreeningRecord) -> Dict[str, str]:
    results = {
        "pep_status": "Clear",
        "sanctions_status": "Clear",
        "adverse_media_status": "Clear",
        "overall_screening_result": "Pass",
    }

    if record.pep_screening_status in (ScreeningOutcome.IDENTIFIED, ScreeningOutcome.MATCH):
        results["pep_status"] = "PEP Identified"
        results["overall_screening_result"] = "Requires Review"

    if record.sanctions_list_results in (ScreeningOutcome.MATCH, ScreeningOutcome.IDENTIFIED):
        results["sanctions_status"] = "Match Found"
        results["overall_screening_result"] = "Fail"

    if record.adverse_media_check == ScreeningOutcome.ADVERSE:
        results["adverse_media_status"] = "Adverse Media Found"
        if results["overall_screening_result"] == "Pass":
            results["overall_screening_result"] = "Requires Review"

    return results


def identify_compliance_risk_factors(record: ScreeningRecord, screening: Dict[str, str]) -> List[str]:
    factors = []
    if screening["pep_status"] == "PEP Identified":
        factors.append("Politically Exposed Person identified")
    if screening["sanctions_status"] == "Match Found":
        factors.append("Sanctions list match found")
    if screening["adverse_media_status"] == "Adverse Media Found":
        factors.append("Negative media coverage identified")
    if (record.transaction_amount or 0) > HIGH_VALUE_TRANSACTION:
        factors.append("High-value transaction above threshold")
    return factors


def assess_compliance_risk(record: ScreeningRecord, screening: Dict[str, str]) -> Dict[str, Any]:
    """
    Score compliance risk from screening results.

    A sanctions match always yields High risk and a Non-Compliant rating,
    whatever the other inputs.
    """
    points = COMPLIANCE_RISK_POINTS
    score = 0
    edd_required = False
    sanctions_match = screening["sanctions_status"] == "Match Found"

    if screening["pep_status"] == "PEP Identified":
        score += points["pep"]
        edd_required = True
    if sanctions_match:
        score += points["sanctions"]
        edd_required = True
    if screening["adverse_media_status"] == "Adverse Media Found":
        score += points["adverse_media"]
        edd_required = True

    if (record.transaction_amount or 0) > HIGH_VALUE_TRANSACTION:
        score += points["high_value_transaction"]
    if record.high_risk_geography:
        score += points["high_risk_geography"]

    score = int(clamp(score))
    level = label_for(score, COMPLIANCE_RISK_CUT_POINTS, "Low")

    if sanctions_match:
        level = "High"
        rating = "Non-Compliant"
    elif edd_required:
        rating = "Conditional"
    else:
        rating = "Compliant"

    return {
        "risk_score": score,
        "overall_risk_level": level,
        "compliance_rating": rating,
        "enhanced_due_diligence_required": edd_required,
        "risk_factors": identify_compliance_risk_factors(record, screening),
    }


def identify_regulatory_requirements(compliance_risk: Dict[str, Any]) -> List[Dict[str, str]]:
    requirements = []

    if compliance_risk["enhanced_due_diligence_required"]:
        requirements.append({
            "requirement": "Enhanced Due Diligence (EDD)",
            "description": "Comprehensive background investigation and verification",
            "deadline": "Before account opening",
            "authority": "Cambodia AML Law",
        })

    if compliance_risk["overall_risk_level"] == "High":
        requirements.append({
            "requirement": "Senior Management Approval",
            "description": "High-risk relationship requires senior management approval",
            "deadline": "Before relationship establishment",
            "authority": "NBC Regulations",
        })

    requirements.append({
        "requirement": "Ongoing Monitoring",
        "description": "Regular review and monitoring of customer activities",
        "deadline": "Continuous",
        "authority": "AML/CFT Guidelines",
    })

    if compliance_risk["risk_score"] > 30:
        requirements.append({
            "requirement": "Increased Reporting Frequency",
            "description": "Enhanced transaction monitoring and reporting",
            "deadline": "Monthly reviews",
            "authority": "CAFIU Guidelines",
        })

    return requirements


def calculate_compliance_review_date(frequency: str, today: Optional[date] = None) -> str:
    """Next review date (YYYY-MM-DD) for a monitoring frequency."""
    today = today or date.today()
    months = {"Monthly": 1, "Quarterly": 3}.get(frequency, 12)
    return add_months(today, months).isoformat()


def define_alert_thresholds(compliance_risk: Dict[str, Any]) -> Dict[str, int]:
    thresholds = _framework()["compliance_alert_thresholds"]
    level = compliance_risk.get("overall_risk_level", "Low")
    return dict(thresholds.get(level, thresholds["Low"]))


def develop_monitoring_plan(
    compliance_risk: Dict[str, Any],
    screening: Dict[str, str],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    level = compliance_risk["overall_risk_level"]
    if level == "High":
        frequency, intensity = "Monthly", "Enhanced"
    elif level == "Medium":
        frequency, intensity = "Quarterly", "Standard Plus"
    else:
        frequency, intensity = "Annual", "Standard"

    elements = [
        "Transaction pattern analysis",
        "Source of funds verification",
        "Beneficial ownership updates",
    ]
    if screening["pep_status"] == "PEP Identified":
        elements += ["PEP status monitoring", "Political exposure assessment"]
    if compliance_risk["enhanced_due_diligence_required"]:
        elements += ["Enhanced customer profiling", "Adverse media monitoring"]

    return {
        "monitoring_level": intensity,
        "monitoring_frequency": frequency,
        "monitoring_elements": elements,
        "next_review_date": calculate_compliance_review_date(frequency, today),
        "alert_thresholds": define_alert_thresholds(compliance_risk),
    }


def generate_documentation_requirements(compliance_risk: Dict[str, Any]) -> List[Dict[str, str]]:
    requirements = [
        {
            "document": "Customer Identification Program (CIP) Documentation",
            "description": "Complete identity verification documentation",
            "retention": "5 years after relationship termination",
        },
        {
            "document": "Risk Assessment Documentation",
            "description": "Formal risk assessment and classification",
            "retention": "7 years",
        },
    ]

    if compliance_risk["enhanced_due_diligence_required"]:
        requirements += [
            {
                "document": "Enhanced Due Diligence File",
                "description": "Comprehensive EDD investigation documentation",
                "retention": "7 years after relationship termination",
            },
            {
                "document": "Source of Wealth Documentation",
                "description": "Detailed documentation of wealth accumulation",
                "retention": "7 years",
            },
        ]

    if compliance_risk["overall_risk_level"] == "High":
        requirements += [
            {
                "document": "Senior Management Approval",
                "description": "Documented approval from senior management",
                "retention": "Life of relationship + 5 years",
            },
            {
                "document": "Ongoing Monitoring Records",
                "description": "Enhanced monitoring and review documentation",
                "retention": "5 years from date of review",
            },
        ]

    return requirements


# =============================================================================
# BUSINESS ENTITY VERIFICATION
# =============================================================================

def assess_legal_status(record: BusinessVerificationRecord) -> Dict[str, Any]:
    score = 1
    if matches_status(record.business_license_status, "Valid"):
        score = 5
    elif matches_status(record.business_license_status, "Expired"):
        score = 2
    return {"area": "Legal Status", "score": score}


def assess_operational_status(record: BusinessVerificationRecord) -> Dict[str, Any]:
    score = 1
    if matches_status(record.business_premises, "Verified"):
        score += 2
    if (record.years_in_operation or 0) >= 3:
        score += 2
    if (record.employee_count or 0) >= 5:
        score += 1
    return {"area": "Operational Status", "score": min(5, score)}


def _banking_disclosed(record: BusinessVerificationRecord) -> bool:
    return record.provided("banking_relationships") and not matches_status(
        record.banking_relationships, "Not disclosed"
    )


def assess_financial_status(record: BusinessVerificationRecord) -> Dict[str, Any]:
    score = 1
    if record.audited_statements:
        score += 2
    elif record.financial_statements_available:
        score += 1
    if _banking_disclosed(record):
        score += 1
    if (record.annual_revenue or 0) > 100000:
        score += 1
    return {"area": "Financial Status", "score": min(5, score)}


def assess_business_compliance(record: BusinessVerificationRecord) -> Dict[str, Any]:
    score = 1
    if matches_status(record.tax_compliance_status, "Compliant"):
        score += 2
    if matches_status(record.industry_specific_permits, "Verified"):
        score += 1
    if matches_status(record.professional_licenses, "Valid"):
        score += 1
    return {"area": "Compliance Status", "score": min(5, score)}


def identify_verification_gaps(areas: Dict[str, Dict[str, Any]]) -> List[str]:
    return [f"{area['area']}: Requires additional verification" for area in areas.values() if area["score"] < 3]


def analyze_business_verification(record: BusinessVerificationRecord) -> Dict[str, Any]:
    """Score legal, operational, financial and compliance areas (1-5 each)."""
    areas = {
        "legal_status": assess_legal_status(record),
        "operational_status": assess_operational_status(record),
        "financial_status": assess_financial_status(record),
        "compliance_status": assess_business_compliance(record),
    }
    overall = sum(area["score"] for area in areas.values()) / len(areas)

    return {
        "verification_areas": areas,
        "overall_score": round(overall, 1),
        "compliance_status": label_for(
            overall,
            ((4, "Verified"), (3, "Substantially Verified"), (2, "Partially Verified")),
            "Unverified",
        ),
        "verification_gaps": identify_verification_gaps(areas),
    }


def assess_business_legitimacy(record: BusinessVerificationRecord) -> Dict[str, Any]:
    score = 0
    factors = []

    if matches_status(record.business_license_status, "Valid"):
        score += 25
        factors.append("Valid business license confirmed")
    elif matches_status(record.business_license_status, "Expired"):
        factors.append("Business license expired - renewal required")

    years = record.years_in_operation or 0
    if years >= 5:
        score += 25
        factors.append("Established operating history (5+ years)")
    elif years >= 2:
        score += 15
        factors.append("Moderate operating history (2-5 years)")
    else:
        factors.append("Limited operating history (<2 years)")

    if matches_status(record.business_premises, "Verified"):
        score += 20
        factors.append("Business premises verified and operational")
    else:
        factors.append("Business premises not verified")

    if record.audited_statements:
        score += 15
        factors.append("Audited financial statements available")
    elif record.financial_statements_available:
        score += 10
        factors.append("Unaudited financial statements available")

    if matches_status(record.tax_compliance_status, "Compliant"):
        score += 15
        factors.append("Tax compliance verified")
    else:
        factors.append("Tax compliance issues identified")

    return {
        "legitimacy_score": score,
        "legitimacy_status": label_for(
            score,
            ((80, "Fully Legitimate"), (60, "Substantially Legitimate"), (40, "Questionable Legitimacy")),
            "Illegitimate Concerns",
        ),
        "legitimacy_factors": factors,
        "legitimacy_risk": "High" if score < 60 else "Medium" if score < 80 else "Low",
    }


def generate_operational_risk_mitigation(risk_level: str, risk_factors: List[str]) -> List[str]:
    mitigation = []

    if risk_level in ("Very High", "High"):
        mitigation += [
            "Require personal guarantees from business owners",
            "Implement enhanced collateral requirements",
            "Monthly financial reporting and monitoring",
        ]
    if any("Limited operating history" in f for f in risk_factors):
        mitigation += [
            "Require demonstrated management experience",
            "Consider lower initial loan amounts",
        ]
    if any("Financial statements" in f for f in risk_factors):
        mitigation += [
            "Require third-party financial verification",
            "Mandate regular accounting oversight",
        ]

    return mitigation


def evaluate_operational_risk(record: BusinessVerificationRecord) -> Dict[str, Any]:
    """Operational risk score, starting from 100 (no risk)."""
    score = 100
    factors = []

    if record.industry in (Industry.CONSTRUCTION, Industry.REAL_ESTATE_DEVELOPMENT):
        score -= 20
        factors.append("High-risk industry (construction/real estate)")
    elif record.industry == Industry.TOURISM_HOSPITALITY:
        score -= 15
        factors.append("Cyclical industry risk (tourism/hospitality)")

    if (record.years_in_operation or 0) < 2:
        score -= 25
        factors.append("Limited operating history increases risk")

    if not record.financial_statements_available:
        score -= 15
        factors.append("Financial statements not available")
    if not record.audited_statements:
        score -= 10
        factors.append("No audited financial statements")

    if not record.provided("management_team") or matches_status(record.management_team, "Not provided"):
        score -= 15
        factors.append("Management team information not provided")

    if (record.employee_count or 0) < 5:
        score -= 10
        factors.append("Small employee base indicates limited scale")

    score = int(clamp(score))
    level = label_for(score, ((80, "Low"), (60, "Medium"), (40, "High")), "Very High")

    return {
        "risk_score": score,
        "risk_level": level,
        "risk_factors": factors,
        "mitigation_recommendations": generate_operational_risk_mitigation(level, factors),
    }


def generate_business_recommendations(
    legitimacy: Dict[str, Any],
    operational_risk: Dict[str, Any],
) -> Dict[str, Any]:
    recommendations: List[Recommendation] = []
    action = "Approve"

    status = legitimacy["legitimacy_status"]
    if status == "Illegitimate Concerns":
        action = "Decline"
        recommendations.append(Recommendation(
            category="Business Legitimacy",
            recommendation="Decline loan application due to legitimacy concerns",
            priority="Critical",
            rationale="Significant questions about business legitimacy",
        ))
    elif status == "Questionable Legitimacy":
        action = "Conditional Approval"
        recommendations.append(Recommendation(
            category="Enhanced Verification",
            recommendation="Require additional business verification before approval",
            priority="High",
            rationale="Legitimacy questions require additional verification",
        ))

    level = operational_risk["risk_level"]
    if level == "Very High":
        action = "Decline"
        recommendations.append(Recommendation(
            category="Operational Risk",
            recommendation="Decline due to excessive operational risk",
            priority="Critical",
            rationale="Operational risk exceeds acceptable thresholds",
        ))
    elif level == "High":
        if action != "Decline":
            action = "Conditional Approval"
        recommendations.append(Recommendation(
            category="Risk Mitigation",
            recommendation="Implement enhanced risk mitigation measures",
            priority="High",
            rationale="High operational risk requires additional protections",
        ))

    if legitimacy["legitimacy_score"] < 80:
        recommendations.append(Recommendation(
            category="Documentation",
            recommendation="Obtain additional business documentation and verification",
            priority="Medium",
            rationale="Strengthen business legitimacy documentation",
        ))
    if operational_risk["risk_score"] < 70:
        recommendations.append(Recommendation(
            category="Monitoring",
            recommendation="Implement enhanced ongoing monitoring",
            priority="Medium",
            rationale="Higher risk profile requires closer monitoring",
        ))

    return {
        "recommended_action": action,
        "recommendations": [r.to_dict() for r in recommendations],
        "total_recommendations": len(recommendations),
        "critical_recommendations": sum(1 for r in recommendations if r.priority == "Critical"),
    }


def identify_required_business_documents(legitimacy: Dict[str, Any]) -> List[Dict[str, Any]]:
    factors = legitimacy["legitimacy_factors"]

    def obtained(fragment: str) -> bool:
        return any(fragment in f for f in factors)

    documents = [
        {
            "document": "Business License/Registration Certificate",
            "description": "Current and valid business operating license",
            "priority": "Critical",
            "obtained": obtained("Valid business license"),
        },
        {
            "document": "Financial Statements",
            "description": "Latest 2-3 years of financial statements",
            "priority": "High",
            "obtained": obtained("financial statements"),
        },
        {
            "document": "Tax Returns and Compliance Certificates",
            "description": "Tax returns and compliance verification",
            "priority": "High",
            "obtained": obtained("Tax compliance verified"),
        },
    ]

    if legitimacy["legitimacy_score"] < 70:
        documents += [
            {
                "document": "Business Premises Lease/Ownership",
                "description": "Proof of business premises ownership or lease agreement",
                "priority": "High",
                "obtained": False,
            },
            {
                "document": "Management Team CVs",
                "description": "Detailed background of key management personnel",
                "priority": "Medium",
                "obtained": False,
            },
            {
                "document": "Major Customer/Supplier Contracts",
                "description": "Evidence of ongoing business relationships",
                "priority": "Medium",
                "obtained": False,
            },
        ]

    return documents


# =============================================================================
# RED FLAG DETECTION
# =============================================================================

def identify_red_flag_patterns(by_category: Dict[str, List[str]]) -> List[str]:
    patterns = []
    if by_category["identity"] and by_category["financial"]:
        patterns.append("Identity and financial irregularities suggest potential fraud")
    if by_category["business"] and by_category["compliance"]:
        patterns.append("Business legitimacy and compliance issues indicate high risk")
    if sum(1 for flags in by_category.values() if flags) >= 3:
        patterns.append("Multiple categories affected suggest systemic issues")
    return patterns


def identify_highest_risk_category(by_category: Dict[str, List[str]]) -> str:
    """Category with the most flags; ties go to the earlier category."""
    highest, most = "None", 0
    for category, flags in by_category.items():
        if len(flags) > most:
            highest, most = category, len(flags)
    return highest


def analyze_identified_red_flags(record: RedFlagRecord) -> Dict[str, Any]:
    by_category = record.flags_by_category()
    return {
        "total_red_flags": len(record.all_flags()),
        "red_flags_by_category": by_category,
        "red_flag_patterns": identify_red_flag_patterns(by_category),
        "highest_risk_category": identify_highest_risk_category(by_category),
    }


def assess_red_flag_severity(record: RedFlagRecord) -> Dict[str, Any]:
    """
    Weight each flag by the severity indicator it mentions.

    Any critical flag makes the overall severity Critical, whatever the
    point total.
    """
    table = _framework()["red_flag_severity"]
    points = table["points"]
    score = 0
    counts = {"critical": 0, "high": 0, "medium": 0}

    flags = record.all_flags()
    for flag in flags:
        if contains_any(flag, *table["critical"]):
            score += points["critical"]
            counts["critical"] += 1
        elif contains_any(flag, *table["high"]):
            score += points["high"]
            counts["high"] += 1
        else:
            score += points["medium"]
            counts["medium"] += 1

    score = int(clamp(score))
    if counts["critical"] > 0:
        severity = "Critical"
    else:
        severity = label_for(score, ((75, "High"), (35, "Medium")), "Low")

    return {
        "severity_score": score,
        "overall_severity": severity,
        "critical_count": counts["critical"],
        "high_count": counts["high"],
        "medium_count": counts["medium"],
        "total_flags": len(flags),
        "risk_level": severity,
    }


def calculate_investigation_timeline(steps: List[Dict[str, Any]]) -> str:
    if not steps:
        return "No investigation required"
    priorities = {step["priority"] for step in steps}
    if "Critical" in priorities:
        return "2-5 business days"
    if "High" in priorities:
        return "5-10 business days"
    return "3-7 business days"


def extract_resource_requirements(steps: List[Dict[str, Any]]) -> List[str]:
    resources = []
    for step in steps:
        for resource in step["resources"]:
            if resource not in resources:
                resources.append(resource)
    return resources


def develop_investigation_plan(analysis: Dict[str, Any], severity: Dict[str, Any]) -> Dict[str, Any]:
    overall = severity["overall_severity"]
    required = overall != "Low"
    steps = []

    if required:
        if severity["critical_count"] > 0:
            steps.append({
                "step": "Immediate escalation to compliance officer",
                "priority": "Critical",
                "timeline": "Immediate",
                "resources": ["Compliance Officer", "Legal Counsel"],
            })
            steps.append({
                "step": "Comprehensive background investigation",
                "priority": "Critical",
                "timeline": "48 hours",
                "resources": ["Private Investigator", "Legal Team"],
            })

        if overall in ("High", "Critical"):
            steps.append({
                "step": "Third-party verification of identity and business",
                "priority": "High",
                "timeline": "5 business days",
                "resources": ["Verification Service Provider"],
            })
            steps.append({
                "step": "Enhanced source of funds investigation",
                "priority": "High",
                "timeline": "7 business days",
                "resources": ["Financial Investigator"],
            })

        steps.append({
            "step": "Document all red flag findings",
            "priority": "Medium",
            "timeline": "3 business days",
            "resources": ["Due Diligence Team"],
        })
        steps.append({
            "step": "Prepare investigation summary report",
            "priority": "Medium",
            "timeline": "Upon completion of investigations",
            "resources": ["Credit Analyst", "Compliance Officer"],
        })

    return {
        "investigation_required": required,
        "investigation_steps": steps,
        "estimated_timeline": calculate_investigation_timeline(steps),
        "resource_requirements": extract_resource_requirements(steps),
        "escalation_required": severity["critical_count"] > 0,
    }


def generate_ongoing_monitoring_plan(severity: Dict[str, Any]) -> Dict[str, Any]:
    overall = severity["overall_severity"]
    if overall in ("Critical", "High"):
        return {
            "frequency": "Monthly",
            "elements": [
                "Enhanced transaction monitoring",
                "Regular compliance screening updates",
                "Periodic risk reassessment",
                "Management review of red flag status",
            ],
        }
    if overall == "Medium":
        return {
            "frequency": "Quarterly",
            "elements": [
                "Standard transaction monitoring",
                "Periodic screening updates",
                "Annual risk reassessment",
            ],
        }
    return {
        "frequency": "Annual",
        "elements": ["Standard risk review", "Compliance screening refresh"],
    }


def determine_review_period(severity: Dict[str, Any]) -> str:
    return {
        "Critical": "Immediate",
        "High": "30 days",
        "Medium": "90 days",
    }.get(severity["overall_severity"], "Annual")


def create_red_flag_mitigation_strategy(severity: Dict[str, Any]) -> Dict[str, Any]:
    overall = severity["overall_severity"]

    if severity["critical_count"] > 0:
        action = "Immediate Decline"
        measures = [
            {
                "measure": "Immediately decline loan application",
                "rationale": "Critical red flags present unacceptable risk",
                "implementation": "Immediate",
            },
            {
                "measure": "File suspicious activity report if required",
                "rationale": "Regulatory compliance obligation",
                "implementation": "Within regulatory timeframes",
            },
        ]
    elif overall == "High":
        action = "Conditional Decline Pending Investigation"
        measures = [
            {
                "measure": "Suspend application processing pending investigation",
                "rationale": "High-risk red flags require thorough investigation",
                "implementation": "Immediate",
            },
            {
                "measure": "Require enhanced due diligence and verification",
                "rationale": "Additional verification may resolve red flag concerns",
                "implementation": "Before any approval consideration",
            },
        ]
    elif overall == "Medium":
        action = "Enhanced Due Diligence Required"
        measures = [
            {
                "measure": "Require additional documentation and verification",
                "rationale": "Medium-risk concerns require additional comfort",
                "implementation": "Before approval",
            },
            {
                "measure": "Implement enhanced ongoing monitoring",
                "rationale": "Ongoing risk management for identified concerns",
                "implementation": "Throughout relationship",
            },
        ]
    else:
        action = "Standard Processing with Documentation"
        measures = [
            {
                "measure": "Document red flag assessment and resolution",
                "rationale": "Maintain complete audit trail",
                "implementation": "Before approval",
            },
        ]

    return {
        "recommended_action": action,
        "mitigation_measures": measures,
        "ongoing_monitoring": generate_ongoing_monitoring_plan(severity),
        "review_period": determine_review_period(severity),
    }


def generate_red_flag_next_actions(severity: Dict[str, Any], plan: Dict[str, Any]) -> List[Dict[str, Any]]:
    if severity["critical_count"] > 0:
        actions = [
            NextStep("Immediately notify senior management and compliance", "Within 2 hours",
                     "Due Diligence Manager", "Critical"),
            NextStep("Prepare decline notification and documentation", "Within 24 hours",
                     "Credit Manager", "Critical"),
        ]
    elif plan["investigation_required"]:
        actions = [
            NextStep("Initiate investigation procedures", "Within 24 hours", "Due Diligence Team", "High"),
            NextStep("Engage required external resources", "Within 48 hours", "Operations Manager", "High"),
            NextStep("Set investigation review meeting", "Upon investigation completion", "Credit Committee", "Medium"),
        ]
    else:
        actions = []

    actions.append(NextStep("Update risk assessment and borrower profile", "Upon red flag resolution",
                            "Risk Management", "Medium"))

    return [
        {"action": a.step, "deadline": a.deadline, "responsibility": a.responsibility, "priority": a.priority}
        for a in actions
    ]
