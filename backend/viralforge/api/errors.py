"""
Exception handlers

Convert the error taxonomy into `{error, message, ...details}` JSON bodies.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from viralforge.infrastructure.exceptions import ViralForgeError


logger = logging.getLogger(__name__)


async def viralforge_error_handler(request: Request, exc: ViralForgeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies, paths and queries are 400s, like every other validation error."""
    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_error",
            "message": "Invalid request",
            "details": jsonable_encoder(exc.errors()),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ViralForgeError, viralforge_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
