"""
Credit Assessment Service: FastAPI application entry point

POST /v1/assessments               → score → status, persisted
GET  /v1/assessments/{id}/messages → follow-up thread (poll)
POST /v1/questions/generate        → AI-generated supplemental questions
GET  /v1/health                    → health check
GET  /docs                         → OpenAPI / Swagger UI
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from app.api.assessment_endpoint import router as assessment_router
from app.api.customer_endpoint import router as customer_router
from app.api.followup_endpoint import router as followup_router
from app.api.questions_endpoint import router as questions_router
from app.core.config import get_settings
from app.core.errors import AppError, ErrorKind
from app.models.database import build_engine, build_session_factory
from app.services.completion_client import GeminiCompletionClient
from app.services.document_storage import LocalDocumentStorage

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer() if get_settings().app_env == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(get_settings().log_level),
)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(engine)
    app.state.completion_client = GeminiCompletionClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout_seconds=settings.gemini_timeout_seconds,
    )
    app.state.document_storage = LocalDocumentStorage(settings.upload_dir)
    logger.info("assessment_service_starting", env=settings.app_env, model=settings.gemini_model)
    yield
    await engine.dispose()
    logger.info("assessment_service_shutting_down")


app = FastAPI(
    title="Credit Assessment Service",
    description="Questionnaire scoring, decisioning and reviewer follow-up for credit assessments",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["POST", "GET", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# ── Error kinds → HTTP ──

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("request_failed", path=request.url.path, kind=exc.kind.value, error=exc.message)
    return JSONResponse(status_code=exc.http_status, content={"error": exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": {"kind": ErrorKind.INVALID_INPUT.value, "message": detail}},
    )


# ── Prometheus metrics ──
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── Routes ──
app.include_router(assessment_router)
app.include_router(customer_router)
app.include_router(followup_router)
app.include_router(questions_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "credit-assessment-service",
        "version": "1.0.0",
        "docs": "/docs",
        "submit": "POST /v1/assessments",
    }
