"""
FastAPI application factory.

* Registers routes for drivers, rides, bookings, reviews and admin.
* Maps domain errors onto HTTP responses as ``{"detail", "code"}``.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tareeqi.api.middleware import limiter
from tareeqi.api.routes import (
    admin,
    bookings,
    drivers,
    reviews,
    rides,
    universities,
)
from tareeqi.config import settings
from tareeqi.domain.exceptions import CarpoolError

logger = logging.getLogger(__name__)


async def carpool_error_handler(request: Request, exc: CarpoolError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="Tareeqi Carpooling API",
        description=(
            "University carpooling: drivers publish rides, passengers book "
            "seats against an atomic per-ride inventory, and both sides "
            "review each other once a trip completes."
        ),
        version="1.0.0",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(CarpoolError, carpool_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Routers
    for module in (drivers, universities, rides, bookings, reviews, admin):
        app.include_router(module.router, prefix="/api/v1")

    return app

