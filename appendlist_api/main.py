"""FastAPI application entry point."""
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from appendlist_api.core.config import settings
from appendlist_api.core.errors import AppendListError
from appendlist_api.core.structured_logging import request_log_context
from appendlist_api.core.deps import get_db

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
        send_default_pii=False,  # Member names and emails stay out of Sentry
    )
    logging.info("Sentry initialized for error tracking")


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Append Lists API",
    description="Shareable sign-up lists with identity-based membership",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# Web-push transport; the hosting deployment assigns a PushSender here
app.state.push_sender = None

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
    expose_headers=["Content-Disposition"],
)


@app.exception_handler(AppendListError)
async def append_list_error_handler(request: Request, exc: AppendListError):
    """Map service error kinds onto HTTP responses."""
    if exc.status_code == 403:
        logger.warning(
            "Access denied: %s",
            exc.detail,
            extra=request_log_context(request),
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ============================================================================
# Routers
# ============================================================================

from appendlist_api.routers import append_lists, notifications

app.include_router(append_lists.router, prefix="/append-lists", tags=["append-lists"])

# Admin broadcasts and push subscriptions
app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    db.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
