"""Request Schemas and Enumerated Tags.

Provides typed, permissive request records for:
- Borrower due diligence (comprehensive, AML/KYC, business, red flags)
- Loan servicing (portfolio, individual loan, notices, arrangements)

Every field is optional. Scoring code asks ``provided(name)`` to tell an
absent field from a present one; prompt builders use ``with_defaults()``
which fills documented placeholders ("Not specified", 0 or []).
"""

import math
import re
import sys
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..utils.helpers import format_amount

NOT_SPECIFIED = "Not specified"


def _normalize(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value.lower())


# =============================================================================
# Enumerated Tags
# =============================================================================

class TagEnum(str, Enum):
    """String enum that also accepts member names and known synonyms.

    Matching ignores case, spacing and punctuation, so "past due 1-30",
    "PastDue_1_30" and "PAST_DUE_1_30" all resolve to the same member.
    Enums with an OTHER member map unrecognised text to it.
    """

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = _normalize(value)
        if not key:
            return None
        for member in cls:
            if key in (_normalize(member.value), _normalize(member.name)):
                return member
        synonym = TAG_SYNONYMS.get(cls.__name__, {}).get(key)
        if synonym is not None:
            return cls(synonym)
        return cls.__members__.get("OTHER")

    @classmethod
    def parse(cls, value: Any):
        """Coerce input to a member. Blank input gives None, unknown text raises ValueError."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str) and not value.strip():
            return None
        return cls(value)

    @classmethod
    def lookup(cls, value: Any):
        """Like parse(), but returns None for unknown text instead of raising."""
        try:
            return cls.parse(value)
        except ValueError:
            return None


class BorrowerType(TagEnum):
    INDIVIDUAL = "Individual"
    BUSINESS = "Business"


class Industry(TagEnum):
    CONSTRUCTION = "Construction"
    REAL_ESTATE_DEVELOPMENT = "Real Estate Development"
    TOURISM_HOSPITALITY = "Tourism & Hospitality"
    MANUFACTURING = "Manufacturing"
    AGRICULTURE = "Agriculture"
    TRADE = "Trade & Retail"
    SERVICES = "Services"
    TECHNOLOGY = "Technology"
    OTHER = "Other"


class Sector(TagEnum):
    """Business wealth sectors (values are the reference-table keys)."""
    MANUFACTURING = "Manufacturing"
    AGRICULTURE = "Agriculture & Processing"
    TOURISM = "Tourism & Hospitality"
    IMPORT_EXPORT = "Import/Export"
    TECHNOLOGY = "Technology & Digital"
    CONSTRUCTION = "Construction & Infrastructure"


class Location(TagEnum):
    PHNOM_PENH = "Phnom Penh"
    SIEM_REAP = "Siem Reap"
    SIHANOUKVILLE = "Sihanoukville"
    BATTAMBANG = "Battambang"
    KAMPONG_CHAM = "Kampong Cham"
    OTHER = "Other"


class ProjectType(TagEnum):
    CONDO = "Condo"
    COMMERCIAL = "Commercial"
    HOTEL = "Hotel"
    RESIDENTIAL = "Residential"
    MIXED_USE = "Mixed Use"
    OTHER = "Other"


class PropertyType(TagEnum):
    APARTMENT = "Apartment"
    CONDO = "Condo"
    HOUSE = "House"
    COMMERCIAL = "Commercial"
    OFFICE = "Office"
    OTHER = "Other"


class RiskTolerance(TagEnum):
    CONSERVATIVE = "Conservative"
    MODERATE = "Moderate"
    AGGRESSIVE = "Aggressive"
    CAMBODIA_FOCUSED = "Cambodia Focused"


class BondCurrency(TagEnum):
    USD = "USD"
    KHR = "KHR"


class NoticeType(TagEnum):
    FRIENDLY_REMINDER = "Friendly Reminder"
    FORMAL_DEMAND = "Formal Demand"
    DEFAULT_NOTICE = "Default Notice"
    LEGAL_NOTICE = "Legal Notice"


class ArrangementType(TagEnum):
    PAYMENT_REDUCTION = "Payment Reduction"
    TERM_EXTENSION = "Term Extension"
    INTEREST_RATE_REDUCTION = "Interest Rate Reduction"
    FORBEARANCE = "Forbearance"
    OTHER = "Other"


class LoanStatus(TagEnum):
    """Delinquency states (values are the loan_statuses table keys)."""
    CURRENT = "Current"
    PAST_DUE_1_30 = "PastDue_1_30"
    PAST_DUE_31_60 = "PastDue_31_60"
    PAST_DUE_61_90 = "PastDue_61_90"
    DEFAULT = "Default"
    WORKOUT = "Workout"
    FORECLOSURE = "Foreclosure"
    CHARGED_OFF = "ChargedOff"
    PAID_OFF = "PaidOff"


class ScreeningOutcome(TagEnum):
    """Result of a PEP, sanctions or adverse-media screen."""
    CLEAR = "Clear"
    MATCH = "Match found"
    IDENTIFIED = "Identified"
    ADVERSE = "Adverse"
    PENDING = "Pending"
    NOT_COMPLETED = "Not completed"


TAG_SYNONYMS: Dict[str, Dict[str, str]] = {
    "Industry": {
        "realestate": "Real Estate Development",
        "tourism": "Tourism & Hospitality",
        "hospitality": "Tourism & Hospitality",
        "retail": "Trade & Retail",
        "trade": "Trade & Retail",
        "importexport": "Trade & Retail",
        "agricultureprocessing": "Agriculture",
        "tech": "Technology",
    },
    "Sector": {
        "agriculture": "Agriculture & Processing",
        "agribusiness": "Agriculture & Processing",
        "tourism": "Tourism & Hospitality",
        "hospitality": "Tourism & Hospitality",
        "import": "Import/Export",
        "export": "Import/Export",
        "trade": "Import/Export",
        "technology": "Technology & Digital",
        "tech": "Technology & Digital",
        "digital": "Technology & Digital",
        "construction": "Construction & Infrastructure",
        "infrastructure": "Construction & Infrastructure",
    },
    "Location": {
        "pp": "Phnom Penh",
        "kompongsom": "Sihanoukville",
    },
    "ProjectType": {
        "condominium": "Condo",
        "mixeduse": "Mixed Use",
        "resort": "Hotel",
    },
    "PropertyType": {
        "condominium": "Condo",
        "flat": "Apartment",
        "villa": "House",
        "shophouse": "Commercial",
        "retail": "Commercial",
    },
    "RiskTolerance": {
        "low": "Conservative",
        "medium": "Moderate",
        "balanced": "Moderate",
        "high": "Aggressive",
        "cambodiafocus": "Cambodia Focused",
    },
    "BondCurrency": {
        "riel": "KHR",
        "dollar": "USD",
        "usdollar": "USD",
    },
    "NoticeType": {
        "reminder": "Friendly Reminder",
        "demand": "Formal Demand",
        "default": "Default Notice",
        "legal": "Legal Notice",
    },
    "ArrangementType": {
        "reducedpayment": "Payment Reduction",
        "extension": "Term Extension",
        "ratereduction": "Interest Rate Reduction",
    },
    "LoanStatus": {
        "pastdue130days": "PastDue_1_30",
        "pastdue3160days": "PastDue_31_60",
        "pastdue6190days": "PastDue_61_90",
        "workoutrestructure": "Workout",
        "restructure": "Workout",
    },
    "ScreeningOutcome": {
        "nomatch": "Clear",
        "nomatchfound": "Clear",
        "noissues": "Clear",
        "notpep": "Clear",
        "nopep": "Clear",
        "passed": "Clear",
        "match": "Match found",
        "hit": "Match found",
        "positivematch": "Match found",
        "pepidentified": "Identified",
        "pep": "Identified",
        "negative": "Adverse",
        "negativemedia": "Adverse",
        "adversemediafound": "Adverse",
        "inprogress": "Pending",
        "notdone": "Not completed",
    },
}


# =============================================================================
# Request Records
# =============================================================================

def _placeholder_for(annotation: Any) -> Any:
    """Placeholder for an absent field, chosen from its annotation."""
    args = [a for a in get_args(annotation) if a is not type(None)] or [annotation]
    kind = args[0]
    if get_origin(kind) is list:
        return []
    if kind in (int, float):
        return 0
    return NOT_SPECIFIED


class RequestRecord(BaseModel):
    """Base for caller-supplied records. Accepts snake_case or camelCase keys."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    # Field-specific placeholders that differ from the annotation default
    PLACEHOLDERS: ClassVar[Dict[str, Any]] = {}
    # Dollar amounts rendered with format_amount() in prompt text
    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def coerce(cls, data: Union["RequestRecord", Mapping[str, Any], None]):
        """Accept an instance, a plain mapping or None."""
        if isinstance(data, cls):
            return data
        return cls.model_validate(dict(data or {}))

    def provided(self, name: str) -> bool:
        value = getattr(self, name, None)
        if value is None:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        if isinstance(value, list):
            return len(value) > 0
        return True

    def with_defaults(self) -> Dict[str, Any]:
        """Every field, with absent ones replaced by their placeholder."""
        values = {}
        for name, info in type(self).model_fields.items():
            if self.provided(name):
                value = getattr(self, name)
                values[name] = value.value if isinstance(value, Enum) else value
            elif name in self.PLACEHOLDERS:
                values[name] = self.PLACEHOLDERS[name]
            else:
                values[name] = _placeholder_for(info.annotation)
        return values

    def prompt_variables(self) -> Dict[str, Any]:
        """with_defaults() plus display-formatted amounts."""
        values = self.with_defaults()
        for name in self.AMOUNT_FIELDS:
            values[name] = format_amount(getattr(self, name))
        return values


def _to_int(value: Any) -> Optional[int]:
    """Parse counts like "45" or 45.0. Unparsable text gives None, infinities saturate."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(value) if isinstance(value, float) else float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(number):
        return None
    if math.isinf(number):
        return sys.maxsize if number > 0 else -sys.maxsize
    return int(number)


_TRUTHY = {"yes", "true", "y", "1", "available", "verified", "provided"}
_FALSY = {"no", "false", "n", "0", "notavailable", "unavailable", "notprovided", "none"}


def _to_flag(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    key = _normalize(str(value))
    if key in _TRUTHY:
        return True
    if key in _FALSY:
        return False
    return None


class DueDiligenceRecord(RequestRecord):
    """Borrower record for the comprehensive due diligence assessment."""
    borrower_name: Optional[str] = None
    borrower_type: Optional[BorrowerType] = None
    requested_loan_amount: Optional[float] = None
    loan_purpose: Optional[str] = None
    relationship_type: Optional[str] = None

    # Identity
    national_id_status: Optional[str] = None
    address_verification: Optional[str] = None
    document_authentication: Optional[str] = None
    biometric_verification: Optional[str] = None

    # Financial
    income_verification: Optional[str] = None
    asset_verification: Optional[str] = None
    bank_statement_review: Optional[str] = None
    tax_records_verification: Optional[str] = None
    source_of_funds_verification: Optional[str] = None

    # Credit
    credit_bureau_report: Optional[str] = None
    banking_history: Optional[str] = None

    # Business
    business_license_status: Optional[str] = None
    business_operations_verification: Optional[str] = None
    management_background_checks: Optional[str] = None

    # Reputation
    criminal_background_check: Optional[str] = None
    litigation_history: Optional[str] = None
    industry_standing: Optional[str] = None
    borrower_cooperation: Optional[str] = None

    # Compliance
    pep_screening_results: Optional[ScreeningOutcome] = None
    sanctions_list_check: Optional[ScreeningOutcome] = None
    ultimate_beneficial_ownership: Optional[str] = None

    # Collateral
    collateral_type: Optional[str] = None
    title_verification: Optional[str] = None
    valuation_report: Optional[str] = None
    insurance_coverage: Optional[str] = None

    PLACEHOLDERS: ClassVar[Dict[str, Any]] = {
        "relationship_type": "New",
        "national_id_status": "Not completed",
        "address_verification": "Not completed",
        "document_authentication": "Not completed",
        "income_verification": "Not completed",
        "asset_verification": "Not completed",
        "bank_statement_review": "Not completed",
        "source_of_funds_verification": "Not completed",
        "credit_bureau_report": "Not obtained",
        "criminal_background_check": "Not completed",
        "pep_screening_results": "Not completed",
        "sanctions_list_check": "Not completed",
    }
    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = ("requested_loan_amount",)

    @field_validator("borrower_type", mode="before")
    @classmethod
    def parse_borrower_type(cls, v):
        return BorrowerType.parse(v)

    @field_validator("pep_screening_results", "sanctions_list_check", mode="before")
    @classmethod
    def parse_screening(cls, v):
        return ScreeningOutcome.parse(v)


class ScreeningRecord(RequestRecord):
    """Customer record for AML/KYC screening."""
    full_legal_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None
    identification_numbers: Optional[str] = None
    business_legal_name: Optional[str] = None
    business_registration_number: Optional[str] = None
    ultimate_beneficial_owners: Optional[str] = None
    industry: Optional[Industry] = None

    pep_screening_status: Optional[ScreeningOutcome] = None
    sanctions_list_results: Optional[ScreeningOutcome] = None
    adverse_media_check: Optional[ScreeningOutcome] = None
    law_enforcement_database: Optional[str] = None

    declared_source_of_funds: Optional[str] = None
    funds_origin_verification: Optional[str] = None
    supporting_documentation: Optional[str] = None
    legitimacy_assessment: Optional[str] = None

    transaction_amount: Optional[float] = None
    transaction_type: Optional[str] = None
    geographic_risk_factors: Optional[str] = None
    high_risk_geography: Optional[bool] = None
    customer_risk_classification: Optional[str] = None

    PLACEHOLDERS: ClassVar[Dict[str, Any]] = {
        "pep_screening_status": "Not completed",
        "sanctions_list_results": "Not completed",
        "adverse_media_check": "Not completed",
    }
    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = ("transaction_amount",)

    @field_validator("industry", mode="before")
    @classmethod
    def parse_industry(cls, v):
        return Industry.parse(v)

    @field_validator("high_risk_geography", mode="before")
    @classmethod
    def parse_geography_flag(cls, v):
        return _to_flag(v)

    @field_validator(
        "pep_screening_status", "sanctions_list_results", "adverse_media_check", mode="before"
    )
    @classmethod
    def parse_screening(cls, v):
        return ScreeningOutcome.parse(v)


class BusinessVerificationRecord(RequestRecord):
    """Business entity record for legitimacy and operational checks."""
    business_legal_name: Optional[str] = None
    registration_number: Optional[str] = None
    registration_date: Optional[str] = None
    business_type: Optional[str] = None
    industry: Optional[Industry] = None
    operating_address: Optional[str] = None

    business_license_status: Optional[str] = None
    license_expiry_date: Optional[str] = None
    industry_specific_permits: Optional[str] = None
    professional_licenses: Optional[str] = None
    tax_compliance_status: Optional[str] = None

    years_in_operation: Optional[int] = None
    employee_count: Optional[int] = None
    business_premises: Optional[str] = None
    management_team: Optional[str] = None
    ownership_structure: Optional[str] = None
    key_shareholders: Optional[str] = None
    ultimate_beneficial_owners: Optional[str] = None

    annual_revenue: Optional[float] = None
    financial_statements_available: Optional[bool] = None
    audited_statements: Optional[bool] = None
    banking_relationships: Optional[str] = None

    PLACEHOLDERS: ClassVar[Dict[str, Any]] = {
        "business_license_status": "Not verified",
        "banking_relationships": "Not disclosed",
        "management_team": "Not provided",
    }
    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = ("annual_revenue",)

    @field_validator("industry", mode="before")
    @classmethod
    def parse_industry(cls, v):
        return Industry.parse(v)

    @field_validator("years_in_operation", "employee_count", mode="before")
    @classmethod
    def parse_counts(cls, v):
        return _to_int(v)

    @field_validator("financial_statements_available", "audited_statements", mode="before")
    @classmethod
    def parse_flags(cls, v):
        return _to_flag(v)


class RedFlagRecord(RequestRecord):
    """Red flags reported against a borrower, grouped by category."""
    borrower_name: Optional[str] = None
    identity_red_flags: Optional[List[str]] = None
    financial_red_flags: Optional[List[str]] = None
    business_red_flags: Optional[List[str]] = None
    behavioral_red_flags: Optional[List[str]] = None
    compliance_red_flags: Optional[List[str]] = None
    review_trigger: Optional[str] = None
    investigation_completed: Optional[str] = None
    third_party_verification_needed: Optional[str] = None
    legal_review_required: Optional[str] = None
    additional_info_required: Optional[str] = None

    CATEGORIES: ClassVar[Tuple[str, ...]] = (
        "identity", "financial", "business", "behavioral", "compliance",
    )

    def flags_by_category(self) -> Dict[str, List[str]]:
        return {
            category: list(getattr(self, f"{category}_red_flags") or [])
            for category in self.CATEGORIES
        }

    def all_flags(self) -> List[str]:
        return [flag for flags in self.flags_by_category().values() for flag in flags]


class PortfolioRecord(RequestRecord):
    """Portfolio snapshot for performance monitoring."""
    total_active_loans: Optional[int] = None
    total_outstanding: Optional[float] = None
    average_loan_size: Optional[float] = None
    weighted_average_maturity: Optional[float] = None

    current_loans: Optional[int] = None
    current_percentage: Optional[float] = None
    past_due_30: Optional[int] = None
    past_due_30_percentage: Optional[float] = None
    past_due_60: Optional[int] = None
    past_due_60_percentage: Optional[float] = None
    past_due_90: Optional[int] = None
    past_due_90_percentage: Optional[float] = None
    default_loans: Optional[int] = None
    default_percentage: Optional[float] = None
    previous_period_default: Optional[float] = None

    portfolio_yield: Optional[float] = None
    cost_of_funds: Optional[float] = None
    charge_offs: Optional[float] = None
    provision_coverage: Optional[float] = None
    collection_rate: Optional[float] = None

    largest_loan_percentage: Optional[float] = None
    top10_loans_percentage: Optional[float] = None
    single_industry_percentage: Optional[float] = None

    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = ("total_outstanding", "average_loan_size", "charge_offs")


class ServicingRecord(RequestRecord):
    """Single-loan servicing snapshot."""
    borrower_name: Optional[str] = None
    original_amount: Optional[float] = None
    outstanding_balance: Optional[float] = None
    monthly_payment: Optional[float] = None

    current_status: Optional[str] = None
    days_past_due: Optional[int] = None
    last_payment_date: Optional[str] = None
    last_payment_amount: Optional[float] = None
    next_payment_due: Optional[str] = None
    status_override: Optional[LoanStatus] = None

    payment_history: Optional[str] = None
    late_payments_ytd: Optional[int] = None
    total_late_fees: Optional[float] = None
    covenant_violations: Optional[str] = None

    PLACEHOLDERS: ClassVar[Dict[str, Any]] = {
        "days_past_due": "Current",
        "last_payment_date": "Not recorded",
        "covenant_violations": "None reported",
    }
    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = (
        "original_amount", "outstanding_balance", "monthly_payment",
        "last_payment_amount", "total_late_fees",
    )

    @field_validator("days_past_due", "late_payments_ytd", mode="before")
    @classmethod
    def parse_counts(cls, v):
        count = _to_int(v)
        return None if count is None else max(0, count)

    @field_validator("status_override", mode="before")
    @classmethod
    def parse_status(cls, v):
        return LoanStatus.parse(v)


class NoticeRecord(RequestRecord):
    """Borrower details printed on a collection notice."""
    borrower_name: Optional[str] = None
    outstanding_balance: Optional[float] = None
    days_past_due: Optional[int] = None
    past_due_amount: Optional[float] = None
    late_fees: Optional[float] = None

    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = ("outstanding_balance", "past_due_amount")

    @field_validator("days_past_due", mode="before")
    @classmethod
    def parse_days(cls, v):
        count = _to_int(v)
        return None if count is None else max(0, count)


class ArrangementRecord(RequestRecord):
    """Proposed payment arrangement and the borrower's cash position."""
    borrower_name: Optional[str] = None
    current_balance: Optional[float] = None
    past_due_amount: Optional[float] = None
    original_payment: Optional[float] = None

    arrangement_type: Optional[ArrangementType] = None
    new_payment_amount: Optional[float] = None
    payment_frequency: Optional[str] = None
    duration: Optional[int] = None
    catch_up_plan: Optional[str] = None

    monthly_income: Optional[float] = None
    monthly_expenses: Optional[float] = None
    available_cash_flow: Optional[float] = None
    hardship_reason: Optional[str] = None
    hardship_temporary: Optional[bool] = None

    PLACEHOLDERS: ClassVar[Dict[str, Any]] = {
        "payment_frequency": "Monthly",
        "duration": NOT_SPECIFIED,
    }
    AMOUNT_FIELDS: ClassVar[Tuple[str, ...]] = (
        "current_balance", "past_due_amount", "original_payment",
        "new_payment_amount", "monthly_income", "monthly_expenses",
        "available_cash_flow",
    )

    @field_validator("arrangement_type", mode="before")
    @classmethod
    def parse_arrangement_type(cls, v):
        return ArrangementType.parse(v)

    @field_validator("duration", mode="before")
    @classmethod
    def parse_duration(cls, v):
        return _to_int(v)

    @field_validator("hardship_temporary", mode="before")
    @classmethod
    def parse_hardship_flag(cls, v):
        return _to_flag(v)


__all__ = [
    "NOT_SPECIFIED",
    "TagEnum",
    "BorrowerType",
    "Industry",
    "Sector",
    "Location",
    "ProjectType",
    "PropertyType",
    "RiskTolerance",
    "BondCurrency",
    "NoticeType",
    "ArrangementType",
    "LoanStatus",
    "ScreeningOutcome",
    "RequestRecord",
    "DueDiligenceRecord",
    "ScreeningRecord",
    "BusinessVerificationRecord",
    "RedFlagRecord",
    "PortfolioRecord",
    "ServicingRecord",
    "NoticeRecord",
    "ArrangementRecord",
]
