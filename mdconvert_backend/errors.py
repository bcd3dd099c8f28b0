from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_setup import capture_exception
from .pdf_renderer import PdfRenderError

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": _validation_details(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(PdfRenderError)
    async def render_exception_handler(request: Request, exc: PdfRenderError) -> JSONResponse:
        error_id = str(uuid.uuid4())
        logger.error("PDF rendering failed id=%s path=%s: %s", error_id, request.url.path, exc)
        capture_exception(exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "PDF conversion failed",
                "message": "The document could not be rendered. Please try again.",
                "error_id": error_id,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        error_id = str(uuid.uuid4())
        logger.exception("Unhandled error id=%s path=%s", error_id, request.url.path, exc_info=exc)
        capture_exception(exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "Something went wrong. Reference this error_id with support.",
                "error_id": error_id,
            },
        )
