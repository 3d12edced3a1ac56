"""API middleware for the catalog API.

Provides:
- Request ID correlation
- Bearer token resolution into an AuthContext
- Error handling
"""

import time
from typing import Any, Callable
from uuid import uuid4

import jwt
import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shopcatalog.domain.access import AuthContext
from shopcatalog.infrastructure.config import settings

logger = structlog.get_logger()

# Claim names used by the identity service
USER_ID_CLAIMS = ("id", "sub")
ROLE_CLAIMS = ("role", "http://schemas.microsoft.com/ws/2008/06/identity/claims/role")


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )

            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id

        return response


# ============================================================================
# Authentication Middleware
# ============================================================================


def _first_claim(payload: dict[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        if payload.get(name) not in (None, ""):
            return payload[name]
    return None


def decode_access_token(token: str) -> AuthContext:
    """Verify a bearer token and build the caller context.

    Args:
        token: Encoded JWT issued by the identity service.

    Returns:
        Authenticated context carrying user ID, username and role.

    Raises:
        jwt.PyJWTError: If the token is invalid, expired or has a bad user ID.
    """
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
    )

    raw_user_id = _first_claim(payload, USER_ID_CLAIMS)
    try:
        user_id = int(raw_user_id) if raw_user_id is not None else None
    except (TypeError, ValueError) as e:
        raise jwt.InvalidTokenError(f"Invalid user id claim: {raw_user_id!r}") from e

    return AuthContext(
        authenticated=True,
        user_id=user_id,
        username=payload.get("username"),
        role=_first_claim(payload, ROLE_CLAIMS),
    )


class AuthContextMiddleware(BaseHTTPMiddleware):
    """Middleware resolving the caller's AuthContext.

    Reads "Authorization: Bearer <token>". Requests without a valid token
    continue as anonymous; operations that need a caller reject them.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Attach the caller context to request state.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response from the handler.
        """
        request.state.auth = AuthContext.anonymous()

        auth_header = request.headers.get("Authorization")
        if auth_header:
            parts = auth_header.split(" ", 1)
            if len(parts) != 2 or parts[0].lower() != "bearer":
                logger.warning(
                    "Invalid authorization format",
                    path=request.url.path,
                    method=request.method,
                )
            else:
                try:
                    request.state.auth = decode_access_token(parts[1])
                except jwt.PyJWTError as e:
                    logger.warning(
                        "Rejected bearer token",
                        path=request.url.path,
                        method=request.method,
                        error=str(e),
                    )

        return await call_next(request)


def get_auth_context(request: Request) -> AuthContext:
    """Dependency returning the caller context of a request."""
    return getattr(request.state, "auth", None) or AuthContext.anonymous()


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": request_id,
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (innermost, wraps the routes)
    app.add_middleware(ErrorHandlerMiddleware)

    # Caller context
    app.add_middleware(AuthContextMiddleware)

    # Request ID correlation (outermost, so every log line carries it)
    app.add_middleware(RequestIdMiddleware)
