"""
Cambodia Lending Intelligence API - FastAPI Backend

Exposes:
- Deterministic scoring endpoints (loan status, due diligence, compliance,
  red flags, payment feasibility, portfolio metrics)
- AI-backed analysis endpoints for every domain agent
- Prompt registry management
"""

import inspect
import os
import sys
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

# Add src to path for imports when running from a checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from dotenv import load_dotenv
load_dotenv()

from cambodia_intel import __version__
from cambodia_intel.agents import OPERATIONS, CommandExecutor, get_default_executor, get_operation
from cambodia_intel.agents.resources import get_natural_resources_quick_insights
from cambodia_intel.config import (
    get_all_prompts,
    get_prompt,
    get_prompt_categories,
    get_settings,
    preload_reference_tables,
    reset_all_prompts,
    reset_prompt,
    update_prompt,
)
from cambodia_intel.config.schemas import (
    ArrangementRecord,
    DueDiligenceRecord,
    PortfolioRecord,
    RedFlagRecord,
    ScreeningRecord,
    ServicingRecord,
)
from cambodia_intel.scoring import due_diligence as dd
from cambodia_intel.scoring import loan_servicing as ls
from cambodia_intel.utils import setup_logging

settings = get_settings()
setup_logging(level=settings.logging.level, log_file=settings.logging.file)
logger = logging.getLogger(__name__)


# =============================================================================
# FASTAPI APP
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting Cambodia Lending Intelligence API...")
    preload_reference_tables()
    yield
    logger.info("Shutting down Cambodia Lending Intelligence API...")


app = FastAPI(
    title="Cambodia Lending Intelligence API",
    description="Scoring and AI analysis for Cambodia lending and wealth advisory",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Invalid records built inside an analysis call."""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False)},
    )


def get_executor() -> CommandExecutor:
    """Executor used by the analysis endpoints (overridden in tests)."""
    return get_default_executor()


# =============================================================================
# REST ENDPOINTS
# =============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Cambodia Lending Intelligence API",
        "version": __version__,
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "llm_provider": settings.llm.provider,
        "operations": len(OPERATIONS),
    }


# =============================================================================
# SCORING ENDPOINTS
# =============================================================================

@app.post("/scoring/loan-status")
async def score_loan_status(record: ServicingRecord):
    """Delinquency stage, servicing actions and next review date for a loan."""
    status = ls.determine_record_status(record)
    return {
        "loan_status": status.to_dict(),
        "servicing_actions": ls.generate_servicing_actions(status, record.days_past_due),
        "risk_assessment": ls.assess_individual_loan_risk(record),
        "next_review_date": ls.calculate_next_review_date(status),
    }


@app.post("/scoring/due-diligence")
async def score_due_diligence(record: DueDiligenceRecord):
    risk = dd.calculate_due_diligence_risk_score(record)
    red_flags = dd.identify_red_flags(record)
    compliance = dd.assess_compliance_status(record)
    return {
        "risk_assessment": risk.to_dict(),
        "verification_results": dd.analyze_verification_results(record),
        "red_flags": red_flags,
        "compliance_status": compliance,
        "recommendations": dd.generate_due_diligence_recommendations(risk, red_flags, compliance),
    }


@app.post("/scoring/compliance-risk")
async def score_compliance_risk(record: ScreeningRecord):
    screening = dd.process_screening_results(record)
    risk = dd.assess_compliance_risk(record, screening)
    return {
        "screening_results": screening,
        "compliance_risk": risk,
        "regulatory_requirements": dd.identify_regulatory_requirements(risk),
    }


@app.post("/scoring/red-flag-severity")
async def score_red_flag_severity(record: RedFlagRecord):
    analysis = dd.analyze_identified_red_flags(record)
    severity = dd.assess_red_flag_severity(record)
    return {
        "red_flag_analysis": analysis,
        "severity_assessment": severity,
        "mitigation_strategy": dd.create_red_flag_mitigation_strategy(severity),
    }


@app.post("/scoring/payment-feasibility")
async def score_payment_feasibility(record: ArrangementRecord):
    feasibility = ls.analyze_feasibility(record)
    impact = ls.calculate_financial_impact(record)
    return {
        "feasibility_analysis": feasibility,
        "financial_impact": impact,
        "recommendation": ls.generate_arrangement_recommendation(feasibility, impact),
    }


@app.post("/scoring/portfolio-metrics")
async def score_portfolio_metrics(record: PortfolioRecord):
    metrics = ls.calculate_portfolio_metrics(record)
    return {
        "performance_metrics": metrics,
        "risk_analysis": ls.analyze_portfolio_risk(record),
        "benchmarks": ls.generate_portfolio_benchmarks(metrics),
    }


# =============================================================================
# ANALYSIS ENDPOINTS
# =============================================================================

@app.get("/analysis")
async def list_operations():
    """Available domain/operation pairs."""
    return {"operations": [f"{domain}/{operation}" for domain, operation in OPERATIONS]}


@app.get("/analysis/resources/quick-insights")
async def resources_quick_insights():
    return get_natural_resources_quick_insights()


@app.post("/analysis/{domain}/{operation}")
async def run_operation(
    domain: str,
    operation: str,
    body: Optional[Dict[str, Any]] = Body(default=None),
    executor: CommandExecutor = Depends(get_executor),
):
    """
    Run one analysis.

    The JSON body holds the coroutine's keyword arguments, e.g.
    {"loan_id": "L-1", "record": {...}} for loan-servicing/loan.
    """
    try:
        fn = get_operation(domain, operation)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))

    try:
        bound = inspect.signature(fn).bind(**(body or {}), executor=executor)
    except TypeError as e:
        raise HTTPException(status_code=422, detail=f"Invalid arguments: {e}")

    result = await fn(*bound.args, **bound.kwargs)
    return result.to_dict()


# =============================================================================
# PROMPT MANAGEMENT
# =============================================================================

@app.get("/prompts")
async def list_prompts(by_category: bool = False):
    return get_prompt_categories() if by_category else get_all_prompts()


@app.get("/prompts/{prompt_id}")
async def read_prompt(prompt_id: str):
    prompt = get_prompt(prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return prompt


@app.put("/prompts/{prompt_id}")
async def edit_prompt(prompt_id: str, updates: Dict[str, Any] = Body(...)):
    try:
        return update_prompt(prompt_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/prompts/reset")
async def reset_prompts():
    return reset_all_prompts()


@app.post("/prompts/{prompt_id}/reset")
async def reset_one_prompt(prompt_id: str):
    prompt = reset_prompt(prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return prompt


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
