# typeahead/main.py
import os
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from typeahead.api.routes import router
from typeahead.config import AI_PROVIDER
from typeahead.observability.logger import get_logger, setup_logging
from typeahead.observability.metrics import metrics_tracker
from typeahead.observability.posthog_client import posthog_client

# Initialize logging FIRST
setup_logging(log_level=os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Typeahead RAG API",
    description="Retrieval-augmented autocomplete over a trained corpus",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Attach a request id, log the request, and record latency metrics."""

    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(
        "request_started",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        },
    )

    start_time = time.time()

    try:

        response = await call_next(request)

    except Exception as e:

        metrics_tracker.record_failure()

        posthog_client.track_error(
            distinct_id=request_id,
            error_type=type(e).__name__,
            error_message=str(e),
            endpoint=request.url.path,
        )

        logger.error(
            "request_failed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "latency_seconds": round(time.time() - start_time, 3),
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )

        raise

    latency = time.time() - start_time

    if response.status_code >= 500:
        metrics_tracker.record_failure()
    else:
        metrics_tracker.record_success(latency)

    response.headers["X-Request-ID"] = request_id

    logger.info(
        "request_completed",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "latency_seconds": round(latency, 3),
        },
    )

    return response


app.include_router(router)


@app.on_event("startup")
async def startup_event():

    logger.info("application_startup", extra={"version": VERSION, "ai_provider": AI_PROVIDER})

    if not os.getenv("OPENAI_API_KEY"):
        logger.warning(
            "missing_api_key",
            extra={"warning_detail": "OPENAI_API_KEY not set. Embedding and OpenAI generation will fail."},
        )


@app.on_event("shutdown")
async def shutdown_event():

    logger.info("application_shutdown")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors: 400 with an error message."""

    errors = exc.errors()

    field = "request"
    if errors:
        location = [str(part) for part in errors[0].get("loc", ()) if part != "body"]
        field = ".".join(location) or field

    logger.info(
        "request_rejected",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "path": request.url.path,
            "field": field,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid {field} provided"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):

    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "unhandled_exception",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        exc_info=True,
    )

    posthog_client.track_error(
        distinct_id=request_id,
        error_type=type(exc).__name__,
        error_message=str(exc),
        endpoint=request.url.path,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An internal error occurred. Please try again.",
            "request_id": request_id,
            "error_type": type(exc).__name__,
        },
    )


@app.get("/")
async def root():

    return {
        "message": "Typeahead RAG API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
    }
