"""Shared fixtures: scripted executors and sample borrower records."""

from typing import Any, List, Optional

import pytest

from cambodia_intel.agents.executor import CommandExecutor, ExecutionOptions, ExecutionResult
from cambodia_intel.config.prompts import reset_all_prompts


class FakeExecutor(CommandExecutor):
    """Returns a canned result (or raises) and records every call."""

    def __init__(self, response: str = "Narrative analysis", success: bool = True,
                 error: Optional[Exception] = None, ai_used: str = "fake-model"):
        self.response = response
        self.success = success
        self.error = error
        self.ai_used = ai_used
        self.calls: List[dict] = []

    async def execute(self, prompt: str, session_id: Optional[str] = None,
                      transport: Optional[Any] = None,
                      options: Optional[ExecutionOptions] = None) -> ExecutionResult:
        self.calls.append({"prompt": prompt, "session_id": session_id, "options": options})
        if self.error is not None:
            raise self.error
        return ExecutionResult(
            response=self.response,
            success=self.success,
            ai_used=self.ai_used if self.success else None,
        )

    @property
    def last_prompt(self) -> str:
        return self.calls[-1]["prompt"]

    @property
    def last_options(self) -> ExecutionOptions:
        return self.calls[-1]["options"]


@pytest.fixture
def make_executor():
    return FakeExecutor


@pytest.fixture
def ok_executor():
    return FakeExecutor()


@pytest.fixture
def failing_executor():
    return FakeExecutor(response="Rate limit reached", success=False)


@pytest.fixture
def raising_executor():
    return FakeExecutor(error=RuntimeError("connection refused"))


@pytest.fixture(autouse=True)
def clean_prompts():
    yield
    reset_all_prompts()


@pytest.fixture
def clean_borrower():
    return {
        "borrower_name": "Sok Dara",
        "borrower_type": "Individual",
        "requested_loan_amount": 150000,
        "loan_purpose": "Working capital",
        "national_id_status": "Verified",
        "address_verification": "Verified",
        "document_authentication": "Passed",
        "income_verification": "Verified",
        "asset_verification": "Verified",
        "bank_statement_review": "Completed",
        "source_of_funds_verification": "Verified",
        "credit_bureau_report": "Obtained",
        "banking_history": "Good",
        "criminal_background_check": "Clear",
        "litigation_history": "None",
        "pep_screening_results": "Clear",
        "sanctions_list_check": "Clear",
    }


@pytest.fixture
def portfolio_record():
    return {
        "total_active_loans": 100,
        "total_outstanding": 5000000,
        "current_loans": 92,
        "current_percentage": 92,
        "past_due_30": 3,
        "past_due_30_percentage": 3,
        "past_due_60": 1,
        "past_due_60_percentage": 1,
        "past_due_90": 0,
        "past_due_90_percentage": 0,
        "default_loans": 1,
        "default_percentage": 1,
        "previous_period_default": 1.5,
        "portfolio_yield": 22,
        "cost_of_funds": 8,
        "charge_offs": 25000,
        "collection_rate": 95,
        "largest_loan_percentage": 8,
        "top10_loans_percentage": 35,
        "single_industry_percentage": 20,
    }
