import logging

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.middleware.cors import CORSMiddleware

from sqlregistry.api.main import api_router
from sqlregistry.core.config import settings
from sqlregistry.registry import (
    DriverOpenError,
    QueryNotFound,
    QueryRegistryError,
    UnknownDatabaseType,
    UnsupportedDatabaseType,
)

_logger = logging.getLogger(__name__)

# Registry lookup errors that escape a route, by HTTP status.
_REGISTRY_ERROR_STATUS: tuple[tuple[type[QueryRegistryError], int], ...] = (
    (UnknownDatabaseType, status.HTTP_404_NOT_FOUND),
    (QueryNotFound, status.HTTP_404_NOT_FOUND),
    (UnsupportedDatabaseType, status.HTTP_400_BAD_REQUEST),
    (DriverOpenError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


def registry_error_status(exc: QueryRegistryError) -> int:
    for exc_type, code in _REGISTRY_ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    generate_unique_id_function=custom_generate_unique_id,
)


@app.exception_handler(QueryRegistryError)
async def registry_exception_handler(
    request: Request, exc: QueryRegistryError
) -> JSONResponse:
    """Lookup errors become 404/400/503 with the error message as detail."""
    code = registry_error_status(exc)
    _logger.info("%s %s -> %d: %s", request.method, request.url.path, code, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 with one "field: message" string per invalid input, joined by "; "."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{field}: {err.get('msg', 'invalid')}" if field else err.get("msg", "invalid"))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "; ".join(parts)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """500 for anything else; the exception text is only exposed locally."""
    _logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = f"Internal server error: {exc}" if settings.ENVIRONMENT == "local" else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": detail},
    )


if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_V1_STR)
