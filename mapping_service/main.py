"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from mapping_service.core.config import settings
from mapping_service.core.errors import DuplicateMappingError, NotFoundError, ValidationFailure
from mapping_service.db.session import engine
from mapping_service.schemas import DuplicateMappingErrorResponse, ErrorResponse

logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Don't send PII to Sentry
    )
    logging.info("Sentry initialized for error tracking")


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Mapping API",
    description="Legacy id to new id crosswalk and migration tracking",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)


# ============================================================================
# Error envelopes
# ============================================================================

def _error(status_code: int, prefix: str, message: str) -> JSONResponse:
    body = ErrorResponse(
        status=status_code,
        user_message=f"{prefix}: {message}",
        developer_message=message,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, "Not Found", str(exc))


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return _error(status.HTTP_400_BAD_REQUEST, "Validation failure", str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed or oversized body/path values
    messages = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return _error(status.HTTP_400_BAD_REQUEST, "Validation failure", messages)


@app.exception_handler(DuplicateMappingError)
async def duplicate_mapping_handler(request: Request, exc: DuplicateMappingError):
    body = {
        "moreInfo": {
            "duplicate": _wire(exc.duplicate),
            "existing": _wire(exc.existing),
        },
        "status": status.HTTP_409_CONFLICT,
        "errorCode": 1409,
        "userMessage": f"Conflict: {exc}",
        "developerMessage": str(exc),
    }
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=DuplicateMappingErrorResponse.model_validate(body).model_dump(mode="json", by_alias=True),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error handling %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Unexpected error", str(exc))


def _wire(mapping):
    return mapping.wire() if mapping is not None else None


# ============================================================================
# Routers
# ============================================================================

from mapping_service.routers import mappings

for mapping_router in mappings.routers:
    app.include_router(mapping_router)

# Aggregates (atomic multi-table registration)
from mapping_service.routers import court_sentencing, csip
app.include_router(court_sentencing.router)
app.include_router(csip.router)

# Cross-kind prisoner merge
from mapping_service.routers import merges
app.include_router(merges.router)

# Internal endpoints (scheduled/cron jobs - protected by INTERNAL_SECRET)
from mapping_service.routers import internal
app.include_router(internal.router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
