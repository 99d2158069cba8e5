import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from scalar_fastapi import get_scalar_api_reference

from app.api.deps import get_engine
from app.api.v1.router import v1_router
from app.config import settings
from app.services.department_service import load_department_summary
from app.services.policy.knowledge_base import load_knowledge_base
from app.services.policy.past_decisions import load_decision_log

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# OpenAPI tag metadata
# ---------------------------------------------------------------------------
TAG_METADATA = [
    {
        "name": "funding",
        "description": "Funding requests: submit and list requests, view the department "
        "summary, and rank pending requests with viability and denial-risk hints.",
    },
    {
        "name": "policy",
        "description": "Policy knowledge: pre-submission checks and approval statistics "
        "per category, including policy grey areas.",
    },
    {
        "name": "health",
        "description": "Service health: reference data counts and the active scorer.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load static reference data once; a missing category entry aborts startup."""
    logger.info("=" * 60)
    logger.info("  Funding Request Portal starting")
    logger.info("=" * 60)

    load_knowledge_base()
    load_decision_log()
    load_department_summary()

    engine = get_engine()
    if engine.model_scorer is None:
        logger.info("Scorer: heuristic (LLM_API_URL / LLM_API_KEY not set)")
    else:
        logger.info("Scorer: model %s with heuristic fallback", settings.LLM_MODEL)

    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown complete")


app = FastAPI(
    title="Funding Request Portal API",
    summary="Departmental funding requests, triage and policy insights",
    description=(
        "## Overview\n\n"
        "Requesters submit funding requests; administrators list and triage them. "
        "The recommendation engine ranks pending requests, labels their viability "
        "from historical approval rates and flags categories where policy is applied "
        "inconsistently.\n\n"
        "## Stack\n\n"
        "FastAPI + pydantic + httpx (optional model endpoint)"
    ),
    version="0.1.0",
    openapi_tags=TAG_METADATA,
    lifespan=lifespan,
    # Swagger UI at /swagger; Scalar takes /docs
    docs_url="/swagger",
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router)


@app.get("/", tags=["default"], summary="API entry", include_in_schema=False)
async def root():
    return {
        "message": "Funding Request Portal API",
        "version": "0.1.0",
        "docs": "/docs",
        "swagger": "/swagger",
        "openapi": "/openapi.json",
    }


@app.get("/docs", include_in_schema=False)
async def scalar_html():
    return get_scalar_api_reference(
        openapi_url=app.openapi_url,
        title=app.title,
    )
