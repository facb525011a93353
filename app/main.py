import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.v1.router import router as api_v1_router
from app.core.config import settings as app_settings
from app.core.exceptions import (
    ConfigurationError,
    LeadRouterError,
    NoEligibleRepresentativeError,
)
from app.core.rate_limit import limiter

# Configure logging
logging.basicConfig(level=getattr(logging, app_settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


def _error_body(message: str, code: str) -> dict:
    return {"error": {"message": message, "code": code}}


app = FastAPI(
    title="Lead Router",
    description="Assigns inbound sales leads to representatives via a "
    "source → city → weighted-percentage routing cascade",
    version="0.1.0",
)

# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.exception_handler(NoEligibleRepresentativeError)
async def no_eligible_representative_handler(
    request: Request, exc: NoEligibleRepresentativeError
):
    logger.warning("No eligible representative: %s", exc.detail)
    return JSONResponse(
        status_code=422,
        content=_error_body(exc.detail, exc.code),
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Routing configuration error: %s", exc.detail)
    return JSONResponse(
        status_code=500,
        content=_error_body(exc.detail, exc.code),
    )


@app.exception_handler(LeadRouterError)
async def lead_router_error_handler(request: Request, exc: LeadRouterError):
    logger.error("Unhandled routing error (%s): %s", exc.code, exc.detail)
    return JSONResponse(
        status_code=500,
        content=_error_body(exc.detail, exc.code),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            **_error_body("Request validation failed", "INVALID_REQUEST"),
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(
            "An unexpected internal error occurred. Please try again later.",
            "INTERNAL_ERROR",
        ),
    )
