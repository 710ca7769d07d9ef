from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from tokenauth.api.account import router as account_router
from tokenauth.api.health import router as health_router
from tokenauth.api.metrics_endpoint import router as metrics_router
from tokenauth.api.token import router as token_router
from tokenauth.core.config import SETTINGS
from tokenauth.core.logging import setup_logging
from tokenauth.db.engine import lifespan_db
from tokenauth.middleware.metrics import MetricsMiddleware
from tokenauth.middleware.request_context import RequestContextMiddleware
from tokenauth.services.errors import GrantError

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db():
        yield


app = FastAPI(
    title="token-auth-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext (outermost) → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(GrantError)
async def grant_error_handler(_request: Request, exc: GrantError) -> Response:
    # Upstream failures get no body at all; the details are in the logs.
    if exc.error_code is None:
        return Response(status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error_code})


app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(token_router)
app.include_router(account_router)

logger.info(
    "token-auth-service started  env=%s log_level=%s port=%d store=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "postgres" if SETTINGS.database_url else "in-memory",
)
