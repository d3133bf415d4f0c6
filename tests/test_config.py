"""Tests for reference tables, request records and the prompt registry."""

import pytest

from cambodia_intel.config import (
    DEFAULT_PROMPTS,
    REFERENCE_TABLES,
    build_prompt,
    get_all_prompts,
    get_execution_options,
    get_prompt,
    get_prompt_categories,
    get_prompt_text,
    get_reference_table,
    reset_all_prompts,
    reset_prompt,
    update_prompt,
)
from cambodia_intel.config.schemas import (
    LoanStatus,
    NoticeType,
    RiskTolerance,
    Sector,
    ServicingRecord,
)


# =============================================================================
# Reference tables
# =============================================================================

@pytest.mark.parametrize("name", REFERENCE_TABLES)
def test_every_table_loads(name):
    assert len(get_reference_table(name)) > 0


def test_tables_are_read_only():
    table = get_reference_table("loan_servicing")
    with pytest.raises(TypeError):
        table["loan_statuses"] = {}
    with pytest.raises(TypeError):
        table["loan_statuses"]["Current"]["risk_level"] = "high"
    assert isinstance(table["arrangement_required_documents"], tuple)


def test_tables_are_cached():
    assert get_reference_table("business") is get_reference_table("business")


def test_unknown_table():
    with pytest.raises(KeyError):
        get_reference_table("crypto")


def test_every_loan_status_has_an_entry():
    statuses = get_reference_table("loan_servicing")["loan_statuses"]
    assert set(statuses) == {status.value for status in LoanStatus}


# =============================================================================
# Tags and records
# =============================================================================

def test_tag_parsing_ignores_case_and_punctuation():
    assert LoanStatus.parse("past due 1-30") == LoanStatus.PAST_DUE_1_30
    assert LoanStatus.parse("PAST_DUE_61_90") == LoanStatus.PAST_DUE_61_90
    assert NoticeType.parse("legal") == NoticeType.LEGAL_NOTICE
    assert Sector.parse("tech") == Sector.TECHNOLOGY
    assert RiskTolerance.parse("  ") is None


def test_lookup_returns_none_for_unknown_text():
    assert RiskTolerance.lookup("yolo") is None
    with pytest.raises(ValueError):
        RiskTolerance.parse("yolo")


def test_record_placeholders():
    record = ServicingRecord.coerce({"borrowerName": "Sok Dara", "outstandingBalance": 12500.5})
    values = record.prompt_variables()

    assert values["borrower_name"] == "Sok Dara"
    assert values["outstanding_balance"] == "$12,500.50 USD"
    assert values["monthly_payment"] == "Not provided"
    assert values["days_past_due"] == "Current"
    assert values["covenant_violations"] == "None reported"
    assert values["late_payments_ytd"] == 0


def test_record_counts_are_clamped():
    record = ServicingRecord(days_past_due="-4", late_payments_ytd="3")
    assert record.days_past_due == 0
    assert record.late_payments_ytd == 3
    assert record.provided("days_past_due")
    assert not record.provided("borrower_name")


# =============================================================================
# Prompt registry
# =============================================================================

def test_every_prompt_renders_with_its_declared_variables():
    for prompt_id, prompt in DEFAULT_PROMPTS.items():
        variables = {name: f"<{name}>" for name in prompt["variables"]}
        text = build_prompt(prompt_id, **variables)
        assert prompt["system_prompt"] in text, prompt_id
        get_execution_options(prompt_id, **variables)


def test_prompt_text_split():
    system_prompt, user_prompt = get_prompt_text(
        "business_opportunity", sector="Manufacturing", investment="$100,000 USD", timeframe="3-5 years"
    )
    assert "Manufacturing" in user_prompt
    assert "Manufacturing" not in system_prompt


def test_execution_options_title_is_formatted():
    options = get_execution_options(
        "business_opportunity", sector="Manufacturing", investment="$1", timeframe="1 year"
    )
    assert options["title"] == "Cambodia Business Opportunity - Manufacturing"


def test_unknown_prompt():
    assert get_prompt("nope") is None
    with pytest.raises(ValueError):
        build_prompt("nope")
    with pytest.raises(ValueError):
        update_prompt("nope", {"system_prompt": "x"})


def test_update_and_reset_prompt():
    original = get_prompt("rental_yield")["system_prompt"]

    updated = update_prompt("rental_yield", {"system_prompt": "You are a landlord."})
    assert updated["system_prompt"] == "You are a landlord."
    assert updated["is_custom"] is True
    assert "updated_at" in updated
    assert get_all_prompts()["rental_yield"]["source"] == "custom"

    restored = reset_prompt("rental_yield")
    assert restored["system_prompt"] == original
    assert restored["is_custom"] is False


def test_reset_all_prompts():
    update_prompt("loan_servicing", {"user_template": "Loan {loan_id}"})
    update_prompt("dd_red_flags", {"user_template": "Flags"})
    prompts = reset_all_prompts()
    assert not any(p["is_custom"] for p in prompts.values())


def test_prompt_categories_cover_every_prompt():
    categories = get_prompt_categories()
    assert sum(len(items) for items in categories.values()) == len(DEFAULT_PROMPTS)
    assert {"business", "due_diligence", "loan_servicing"} <= set(categories)
