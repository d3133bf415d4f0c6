"""Tests for the domain agents and the shared analysis plumbing."""

import asyncio
import json

import pytest

from cambodia_intel.agents import OPERATIONS, AnalysisResult, get_operation
from cambodia_intel.agents import business, investment, real_estate, resources
from cambodia_intel.agents import due_diligence, loan_servicing, market_research
from cambodia_intel.agents.base import detect_tag, format_bullets, parse_amount
from cambodia_intel.config import update_prompt
from cambodia_intel.config.schemas import Location, RiskTolerance, Sector
from cambodia_intel.scoring import loan_servicing as ls


# =============================================================================
# AnalysisResult and helpers
# =============================================================================

def test_analysis_result_wire_form_round_trip():
    result = AnalysisResult(
        analysis="Text",
        ai_used="model-x",
        fields={"summary": {"score": 80}, "steps": ("a", "b")},
    )
    data = result.to_dict()

    assert data["analysis"] == "Text"
    assert data["success"] is True
    assert data["summary"] == {"score": 80}
    assert data["steps"] == ["a", "b"]

    restored = AnalysisResult.from_json(result.to_json())
    assert restored.fields == {"summary": {"score": 80}, "steps": ["a", "b"]}
    assert restored.timestamp == result.timestamp
    assert json.loads(restored.to_json()) == data
    assert restored["summary"]["score"] == 80


def test_format_bullets():
    text = format_bullets({"market_size": "$1B", "key_players": ["ABA", "ACLEDA"]})
    assert text == "• Market Size: $1B\n• Key Players: ABA, ACLEDA"


@pytest.mark.parametrize("value, expected", [
    (150000, 150000.0),
    ("$150,000", 150000.0),
    ("2.5M", 2500000.0),
    ("about 50k for 3 years", 50000.0),
    ("$200 thousand", 200000.0),
    ("no numbers", None),
    (None, None),
])
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


def test_detect_tag():
    assert detect_tag(Location, "Condo in Siem Reap near the river") == Location.SIEM_REAP
    assert detect_tag(Sector, "an agribusiness venture") == Sector.AGRICULTURE
    assert detect_tag(RiskTolerance, "I prefer conservative growth") == RiskTolerance.CONSERVATIVE
    assert detect_tag(Location, "happy shopping") is None


def test_every_operation_is_registered():
    assert len(OPERATIONS) == 39
    assert get_operation("loan-servicing", "loan") is loan_servicing.process_loan_servicing
    with pytest.raises(KeyError):
        get_operation("crypto", "moon")


# =============================================================================
# Outcome handling
# =============================================================================

def test_success_path(ok_executor):
    result = asyncio.run(business.analyze_business_opportunity(
        sector="Manufacturing", investment="$250,000", timeframe="5 years", executor=ok_executor,
    ))

    assert result.success is True
    assert result.analysis == "Narrative analysis"
    assert result.ai_used == "fake-model"
    assert result.error is None
    summary = result.fields["opportunity_summary"]
    assert summary["sector"] == "Manufacturing"
    assert summary["investment"] == "$250,000 USD"
    assert "Manufacturing" in ok_executor.last_prompt
    assert ok_executor.last_options.title == "Cambodia Business Opportunity - Manufacturing"


def test_unsuccessful_response_keeps_derived_fields(failing_executor):
    result = asyncio.run(real_estate.analyze_rental_yield(
        property_type="Condo", location="Phnom Penh", executor=failing_executor,
    ))

    assert result.success is False
    assert result.analysis == "Rate limit reached"
    assert result.error == "Rate limit reached"
    assert result.fields["yield_summary"] != {"status": "error"}


def test_raising_executor_produces_failure_record(raising_executor):
    result = asyncio.run(investment.analyze_bond_investment(
        bond_type="Government", maturity="5 years", amount=100000, currency="KHR",
        executor=raising_executor,
    ))

    assert result.success is False
    assert result.error == "connection refused"
    assert result.analysis.endswith("unavailable: connection refused")
    assert result.fields["bond_summary"] == {"status": "error"}


def test_session_id_is_forwarded(ok_executor):
    asyncio.run(resources.analyze_gold_mining(executor=ok_executor, session_id="s-1"))
    assert ok_executor.calls[0]["session_id"] == "s-1"


# =============================================================================
# Business, real estate, investment
# =============================================================================

def test_quick_business_analysis_extracts_parameters(ok_executor):
    result = asyncio.run(business.quick_business_analysis(
        "I want to invest $80,000 in a tech startup over 3 years", executor=ok_executor,
    ))
    params = result.fields["extracted_parameters"]

    assert params["sector"] == "Technology & Digital"
    assert params["investment"] == "$80,000 USD"
    assert params["timeframe"] == "3 years"


def test_business_extraction_defaults():
    assert business.extract_sector("something vague") == "General Business"
    assert business.extract_investment("no budget yet") == "$100,000"
    assert business.extract_timeframe("soon") == "3-5 years"


def test_market_entry_and_scaling(ok_executor):
    entry = asyncio.run(business.analyze_market_entry(
        business_type="Coffee import", target_market="Phnom Penh", executor=ok_executor,
    ))
    assert "entry_summary" in entry.fields
    assert entry.fields["entry_barriers"]

    scaling = asyncio.run(business.analyze_scaling_strategy(executor=ok_executor))
    assert scaling.fields["scaling_options"]


def test_development_feasibility_score(ok_executor):
    assert real_estate.calculate_feasibility_score("Commercial", "Phnom Penh", 600000) == 100
    assert real_estate.calculate_feasibility_score("Hotel", "Battambang", "$150,000") == 60

    result = asyncio.run(real_estate.analyze_development_opportunity(
        project_type="Condo", location="Siem Reap", investment=250000, executor=ok_executor,
    ))
    assert result.fields["development_summary"]["feasibility_score"] == 85
    assert "85/100" in ok_executor.last_prompt


def test_quick_property_analysis(ok_executor):
    result = asyncio.run(real_estate.quick_property_analysis(
        "Looking for rental condos in Sihanoukville with $120k", executor=ok_executor,
    ))
    params = result.fields["extracted_parameters"]
    assert params["location"] == "Sihanoukville"
    assert params["budget"] == "$120,000 USD"
    assert params["strategy"] == "Rental"


def test_rental_yield_band():
    band = real_estate.get_rental_yield_range("condominium")
    assert band["display"] == f"{band['min']}-{band['max']}%"


def test_investment_extraction():
    assert investment.extract_risk_tolerance("high risk please") == "Aggressive"
    assert investment.extract_amount("invest 2.5M") == "$2,500,000 USD"
    assert investment.extract_timeframe("for 10+ years") == "10+ years"


def test_bond_risk_profile():
    khr_government = investment.get_bond_risk_profile("Government bond", "riel")
    assert khr_government["credit_risk"] == "Low-Medium"
    assert khr_government["currency_risk"] == "High"

    usd_corporate = investment.get_bond_risk_profile("Corporate", None)
    assert usd_corporate["credit_risk"] == "Medium-High"
    assert usd_corporate["currency_risk"] == "Low"


def test_portfolio_strategy_uses_risk_tolerance(ok_executor):
    result = asyncio.run(investment.analyze_portfolio_strategy(
        investment_amount=50000, risk_tolerance="Conservative", executor=ok_executor,
    ))
    assert result.success is True
    assert "strategy_summary" in result.fields


# =============================================================================
# Resources and market research
# =============================================================================

@pytest.mark.parametrize("analyze, summary_key", [
    (resources.analyze_gold_mining, "key_metrics"),
    (resources.analyze_bauxite_development, "key_metrics"),
    (resources.analyze_gemstones_industry, "key_metrics"),
    (resources.analyze_oil_gas_sector, "key_metrics"),
    (resources.analyze_sustainable_forestry, "key_metrics"),
    (resources.analyze_energy_resources, "key_metrics"),
    (resources.get_natural_resources_portfolio_analysis, "key_metrics"),
    (resources.analyze_regional_resource_comparison, "comparison"),
])
def test_resource_failures_replace_summary(analyze, summary_key, raising_executor):
    result = asyncio.run(analyze(executor=raising_executor))
    assert result.success is False
    assert result.fields[summary_key] == {"status": "error"}
    assert result.fields["resource"]


def test_resources_quick_insights():
    insights = resources.get_natural_resources_quick_insights()
    assert insights


def test_unknown_resource():
    with pytest.raises(KeyError):
        resources.get_resource_data("unobtainium")


def test_market_analysis_uses_caller_data(ok_executor):
    result = asyncio.run(market_research.generate_market_analysis(
        research_scope="Microfinance",
        market_data={"growth_rate": 18.0, "focus": "SME lending"},
        executor=ok_executor,
    ))
    assert result.fields["market_overview"]["growth_rate"] == 18.0
    assert "Growth Rate: 18.0%" in ok_executor.last_prompt
    assert "SME lending" in ok_executor.last_prompt


def test_sector_ranking_is_ordered(ok_executor):
    result = asyncio.run(market_research.assess_sector_opportunities(executor=ok_executor))
    ranks = [entry["rank"] for entry in result.fields["sector_ranking"]]
    assert ranks == list(range(1, len(ranks) + 1))


@pytest.mark.parametrize("analyze, summary_key", [
    (market_research.analyze_competitive_landscape, "competitive_positioning"),
    (market_research.generate_market_forecast, "forecast_model"),
    (market_research.analyze_customer_segmentation, "segment_analysis"),
])
def test_market_research_failures(analyze, summary_key, raising_executor):
    result = asyncio.run(analyze(executor=raising_executor))
    assert result.fields[summary_key] == {"status": "error"}


# =============================================================================
# Due diligence and loan servicing
# =============================================================================

def test_comprehensive_due_diligence(ok_executor, clean_borrower):
    result = asyncio.run(due_diligence.conduct_comprehensive_due_diligence(
        "B-001", clean_borrower, executor=ok_executor,
    ))
    summary = result.fields["due_diligence_summary"]

    assert summary["borrower_id"] == "B-001"
    assert summary["overall_risk_rating"] == "Low Risk"
    assert summary["risk_score"] == 100
    assert "Sok Dara" in ok_executor.last_prompt
    assert "$150,000 USD" in ok_executor.last_prompt


def test_due_diligence_failure_keeps_scores(raising_executor, clean_borrower):
    result = asyncio.run(due_diligence.conduct_comprehensive_due_diligence(
        "B-001", clean_borrower, executor=raising_executor,
    ))
    assert result.fields["due_diligence_summary"] == {"status": "error"}
    assert result.fields["risk_assessment"]["label"] == "Low Risk"


def test_aml_screening_summary(ok_executor):
    result = asyncio.run(due_diligence.perform_aml_kyc_screening(
        "B-002", {"sanctionsListResults": "Match found"}, executor=ok_executor,
    ))
    summary = result.fields["screening_summary"]
    assert summary["overall_screening_result"] == "Fail"
    assert summary["compliance_rating"] == "Non-Compliant"


def test_red_flag_prompt_lists(ok_executor):
    result = asyncio.run(due_diligence.detect_and_analyze_red_flags(
        "B-003", {"financial_red_flags": ["Unexplained wealth", "Cash structuring"]}, executor=ok_executor,
    ))
    assert "Unexplained wealth; Cash structuring" in ok_executor.last_prompt
    assert "None identified" in ok_executor.last_prompt
    assert result.fields["red_flag_summary"]["total_red_flags"] == 2


def test_verify_business_entity(ok_executor):
    result = asyncio.run(due_diligence.verify_business_entity("BIZ-1", {}, executor=ok_executor))
    assert result.fields["verification_summary"]["recommended_action"] == "Decline"


def test_loan_servicing_status_in_prompt(ok_executor):
    result = asyncio.run(loan_servicing.process_loan_servicing(
        "L-45", {"days_past_due": 45, "outstanding_balance": 50000}, executor=ok_executor,
    ))
    summary = result.fields["account_summary"]

    assert summary["current_status"] == "Past Due 31-60 Days"
    assert summary["risk_level"] == "high"
    assert "Current Status: Past Due 31-60 Days" in ok_executor.last_prompt


def test_collection_notice_failure(raising_executor):
    result = asyncio.run(loan_servicing.generate_collection_notice(
        "L-9", "Default Notice", {"borrower_name": "Sok Dara"}, executor=raising_executor,
    ))
    assert result.fields["notice_metadata"] == {"status": "error"}
    assert result.fields["follow_up_actions"]


def test_collection_notice_prompt(ok_executor):
    result = asyncio.run(loan_servicing.generate_collection_notice(
        "L-9", "legal", {"borrower_name": "Sok Dara"}, executor=ok_executor,
    ))
    metadata = result.fields["notice_metadata"]
    assert metadata["notice_type"] == "Legal Notice"
    assert f"Payment Due By: {metadata['due_date']}" in ok_executor.last_prompt


def test_collection_notice_defaults_to_formal_demand(ok_executor):
    result = asyncio.run(loan_servicing.generate_collection_notice(
        "L-9", None, {"borrower_name": "Sok Dara"}, executor=ok_executor,
    ))
    metadata = result.fields["notice_metadata"]

    assert metadata["notice_type"] == "Formal Demand"
    assert metadata["delivery_method"] == ["Certified Mail", "Email", "Hand Delivery"]
    assert "NOTICE TYPE: Formal Demand" in ok_executor.last_prompt
    assert result.fields["follow_up_actions"] == ls.generate_follow_up_actions("Formal Demand")


def test_broken_custom_template_returns_failure_record(ok_executor):
    update_prompt("loan_servicing", {"user_template": "Loan {loan_id} {not_a_variable}"})

    result = asyncio.run(loan_servicing.process_loan_servicing(
        "L-1", {"daysPastDue": 45}, executor=ok_executor,
    ))

    assert result.success is False
    assert "not_a_variable" in result.error
    assert result.fields["account_summary"] == {"status": "error"}
    assert result.fields["loan_status"]["status"] == "Past Due 31-60 Days"
    assert ok_executor.calls == []


def test_portfolio_monitoring(ok_executor, portfolio_record):
    result = asyncio.run(loan_servicing.monitor_portfolio_performance(portfolio_record, executor=ok_executor))
    assert result.fields["portfolio_summary"]["performance_grade"] == "A+"
    assert result.fields["portfolio_summary"]["total_past_due"] == 4


def test_payment_arrangement(ok_executor):
    record = {
        "original_payment": 220,
        "new_payment_amount": 200,
        "arrangement_type": "Payment Reduction",
        "duration": 6,
        "monthly_income": 1000,
        "monthly_expenses": 600,
    }
    result = asyncio.run(loan_servicing.process_payment_arrangement("L-7", record, executor=ok_executor))
    summary = result.fields["arrangement_summary"]

    assert summary["new_payment"] == "$200 USD"
    assert summary["feasibility_level"] == "High"
    assert result.fields["feasibility_analysis"]["payment_to_income"] == 20.0
