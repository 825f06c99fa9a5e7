# vocalkart/core/errors.py
"""
Error taxonomy shared by services and routers.

Services raise these; `register_error_handlers` turns them into
`{"error": "..."}` JSON responses with the matching HTTP status.
Anything else becomes a 500 with the same body shape.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class VocalKartError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(VocalKartError):
    """Missing or invalid request field. Raised before any work is done."""
    status_code = 400


class ProductNotFoundError(VocalKartError):
    status_code = 404


class GenerationServiceError(VocalKartError):
    """The text-generation gateway failed (network, HTTP status, missing key)."""
    status_code = 502


class MalformedLLMOutputError(VocalKartError, ValueError):
    """Generated text did not contain the expected JSON payload."""
    status_code = 502


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(VocalKartError)
    async def _vocalkart_error(request: Request, exc: VocalKartError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} crashed: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
