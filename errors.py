"""
Error taxonomy for the storefront and the FastAPI handlers that turn
these errors into responses.

Browser requests (those that explicitly accept HTML) get redirects or
plain-text pages; API clients get a JSON body ``{key: message}`` with the
matching status code.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None, key: str = "error"):
        self.message = message or self.default_message
        self.key = key
        super().__init__(self.message)


class ValidationError(StorefrontError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(StorefrontError):
    status_code = 401
    default_message = "Authentication required"

    def __init__(self, message: str = None, key: str = "message"):
        super().__init__(message, key)


class AuthorizationError(StorefrontError):
    status_code = 403
    default_message = "Admin privileges required"

    def __init__(self, message: str = None, key: str = "message"):
        super().__init__(message, key)


class NotFound(StorefrontError):
    status_code = 404
    default_message = "Not found"


class StoreError(StorefrontError):
    status_code = 500
    default_message = "Database error"


def wants_html(request: Request) -> bool:
    """True when the client explicitly lists an HTML media type in Accept."""
    accept = request.headers.get("accept", "").lower()
    return "text/html" in accept or "application/xhtml+xml" in accept


async def storefront_error_handler(request: Request, exc: StorefrontError):
    if wants_html(request):
        if isinstance(exc, AuthError):
            return RedirectResponse(url="/login", status_code=302)
        if isinstance(exc, AuthorizationError):
            return PlainTextResponse("Admin access required", status_code=403)
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    return JSONResponse({exc.key: exc.message}, status_code=exc.status_code)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
