"""Middleware and exception handler setup for the FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from users_common.errors import UserStoreError

logger = logging.getLogger(__name__)


def get_allowed_origins(cors_origin: str | None = None, environment: str = "development") -> list[str]:
    """Get list of allowed CORS origins based on configuration.

    Args:
        cors_origin: Origin of a browser client calling the API, if any
        environment: Environment name (development, test, production)

    Returns:
        List of allowed origin URLs
    """
    allowed_origins: list[str] = []

    if cors_origin:
        allowed_origins.append(cors_origin.rstrip("/"))

    # Local front-end dev servers
    if environment.lower() in {"development", "test"}:
        allowed_origins.extend(["http://localhost:5173", "http://127.0.0.1:5173"])

    # Deduplicate while preserving order
    return list(dict.fromkeys(allowed_origins))


def get_cors_headers(
    origin: str | None, cors_origin: str | None = None, environment: str = "development"
) -> dict[str, str]:
    """Get CORS headers for a given origin, empty if the origin is not allowed."""
    if not origin or origin not in get_allowed_origins(cors_origin, environment):
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE",
        "Access-Control-Allow-Headers": "*",
    }


def setup_middleware(app: FastAPI, cors_origin: str | None = None, environment: str = "development") -> None:
    """Setup middleware for the FastAPI application.

    Args:
        app: FastAPI application instance
        cors_origin: Origin of a browser client allowed to call the API
        environment: Environment name (development, test, production)
    """
    allowed_origins = get_allowed_origins(cors_origin, environment)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    logger.info("CORS enabled for origins: %s (environment=%s)", allowed_origins, environment)


def _error_response(status_code: int, detail, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": jsonable_encoder(detail), "status": status_code},
        headers=headers,
    )


def setup_exception_handlers(
    app: FastAPI, cors_origin: str | None = None, environment: str = "development"
) -> None:
    """Map store errors, validation errors and unexpected failures to JSON responses.

    Args:
        app: FastAPI application instance
        cors_origin: Allowed browser origin, for CORS headers on 500 responses
        environment: Environment name (development, test, production)
    """

    async def user_store_error_handler(request: Request, exc: UserStoreError) -> JSONResponse:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        return _error_response(exc.status_code, exc.message)

    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("%s %s -> 400: invalid payload", request.method, request.url.path)
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.errors(include_url=False))

    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.errors())

    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Routes bind method and path together; a known path with another method is unmatched too
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return _error_response(status.HTTP_404_NOT_FOUND, "Not Found")
        return _error_response(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))

    # Unhandled exceptions bypass CORSMiddleware, so add its headers here
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        cors_headers = get_cors_headers(request.headers.get("origin"), cors_origin=cors_origin, environment=environment)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), headers=cors_headers)

    app.add_exception_handler(UserStoreError, user_store_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
