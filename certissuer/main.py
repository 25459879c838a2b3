from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from certissuer.api.certifications import router as certifications_router
from certissuer.api.error_handlers import register_error_handlers
from certissuer.api.health import router as health_router
from certissuer.api.requirements import router as requirements_router
from certissuer.api.roles import router as roles_router
from certissuer.api.system import router as system_router
from certissuer.core.config import SETTINGS
from certissuer.core.logging import setup_logging
from certissuer.db.engine import lifespan_db
from certissuer.middleware.metrics import MetricsMiddleware
from certissuer.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
for _handler in logging.getLogger().handlers:
    install_request_context_filter(_handler)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db():
        yield


# only app setup + router registration

app = FastAPI(
    title="cert-issuer-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

register_error_handlers(app)

app.include_router(health_router)
app.include_router(roles_router)
app.include_router(system_router)
app.include_router(requirements_router)
app.include_router(certifications_router)

logger.info(
    "cert-issuer-service started  env=%s log_level=%s port=%d deployer=%s "
    "renewal_eligibility=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.deployer_id,
    SETTINGS.renewal_eligibility,
    "on" if SETTINGS.is_dev else "off",
)
