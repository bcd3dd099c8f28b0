from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from mdconvert_backend.config import (
    ADMIN_API_KEY,
    ALLOWED_UPLOAD_EXTS,
    CLEANUP_INTERVAL_SECONDS,
    GENERAL_RATE_LIMIT_MAX_REQUESTS,
    GENERAL_RATE_LIMIT_WINDOW_MS,
    LOG_LEVEL,
    MAX_CONTENT_SIZE,
    MAX_REQUEST_BYTES,
    MAX_UPLOAD_BYTES,
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_MS,
    SENTRY_DSN,
    SHARE_ENABLED,
)
from mdconvert_backend.body_limit import RequestBodyLimitMiddleware
from mdconvert_backend.errors import register_error_handlers
from mdconvert_backend.feedback import FeedbackStore, InvalidFeedbackError
from mdconvert_backend.logging_setup import configure_logging, init_sentry, log_requests
from mdconvert_backend.markdown_render import render_markdown
from mdconvert_backend.pdf_renderer import PdfRenderer
from mdconvert_backend.rate_limit import FixedWindowLimiter, is_admin_key
from mdconvert_backend.schemas import ConvertRequest, FeedbackRequest, PreviewRequest
from mdconvert_backend.security import (
    ContentTooLargeError,
    is_safe_basename,
    sanitize_filename,
    validate_content_size,
)
from mdconvert_backend.share_store import PdfShareStore
from mdconvert_backend.templates import build_document


configure_logging(LOG_LEVEL)
init_sentry(SENTRY_DSN)
logger = logging.getLogger("mdconvert.server")

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"

share_store = PdfShareStore()
feedback_store = FeedbackStore()
renderer = PdfRenderer()

conversion_limiter = FixedWindowLimiter(
    "convert",
    max_requests=RATE_LIMIT_MAX_REQUESTS,
    window_ms=RATE_LIMIT_WINDOW_MS,
    admin_key=ADMIN_API_KEY,
    enabled=RATE_LIMIT_ENABLED,
    message="You have exceeded the maximum number of PDF conversions allowed. Please try again later.",
)
api_limiter = FixedWindowLimiter(
    "api",
    max_requests=GENERAL_RATE_LIMIT_MAX_REQUESTS,
    window_ms=GENERAL_RATE_LIMIT_WINDOW_MS,
    admin_key=ADMIN_API_KEY,
    enabled=RATE_LIMIT_ENABLED,
)


async def _cleanup_worker() -> None:
    # Periodically evict expired shared PDFs so memory does not grow between reads.
    while True:
        await asyncio.sleep(max(30, CLEANUP_INTERVAL_SECONDS))
        try:
            share_store.sweep()
        except Exception:
            logger.exception("Shared PDF sweep failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    share_store.sweep()
    task = asyncio.create_task(_cleanup_worker())
    app.state._cleanup_task = task
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        try:
            await renderer.close()
        except Exception:
            logger.exception("Failed to shut down Chromium cleanly")


app = FastAPI(title="Markdown to PDF", lifespan=lifespan)
register_error_handlers(app)

# Innermost, so a 413 raised while the endpoint reads the body reaches the app's handlers.
app.add_middleware(RequestBodyLimitMiddleware, max_bytes=lambda: MAX_REQUEST_BYTES)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _no_cache_static_assets(request: Request, call_next):
    response = await call_next(request)
    path = (request.url.path or "").lower()
    # The UI is a handful of static files; always serve the current copy.
    if path.endswith((".css", ".js", ".html")) and not path.startswith("/api/"):
        response.headers["Cache-Control"] = "no-store"
    return response


# Registered last so it wraps every other middleware.
app.middleware("http")(log_requests)


def _content_disposition(kind: str, filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "").strip()
    if not ascii_name or ascii_name.startswith("."):
        ascii_name = "document.pdf"
    return f"{kind}; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def _pdf_response(pdf_bytes: bytes, filename: str, inline: bool) -> Response:
    headers = {
        "Content-Disposition": _content_disposition("inline" if inline else "attachment", filename),
        "Cache-Control": "no-store",
        "X-Content-Type-Options": "nosniff",
    }
    return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)


def _check_content_size(markdown_text: str) -> None:
    try:
        validate_content_size(markdown_text, MAX_CONTENT_SIZE)
    except ContentTooLargeError as exc:
        logger.warning("Content size validation failed: %s", exc)
        raise HTTPException(status_code=413, detail={"error": "Content too large", "message": str(exc)})


def _sharing_unavailable() -> HTTPException:
    return HTTPException(
        status_code=503,
        detail={
            "error": "PDF sharing is not configured",
            "message": "Sharing is disabled on this server. Set MDPDF_SHARE_ENABLED=true to enable it.",
        },
    )


api = APIRouter(prefix="/api", dependencies=[Depends(api_limiter)])


@api.post("/convert", dependencies=[Depends(conversion_limiter)])
async def convert(payload: ConvertRequest) -> Response:
    # Render Markdown -> sanitized HTML -> full document -> PDF.
    _check_content_size(payload.markdown)
    if payload.action == "share" and not SHARE_ENABLED:
        raise _sharing_unavailable()

    safe_name = sanitize_filename(payload.filename)
    options = payload.resolved_options()
    logger.info(
        "Starting conversion file=%s action=%s theme=%s template=%s page=%s/%s",
        safe_name,
        payload.action,
        options.theme,
        options.template,
        options.page_size,
        options.orientation,
    )

    started = time.perf_counter()
    content_html = render_markdown(payload.markdown).sanitized_html
    document = build_document(content_html, safe_name, options)
    pdf_bytes = await renderer.render(document, options)
    logger.info("Conversion of %s finished in %.0fms (%d bytes)", safe_name, (time.perf_counter() - started) * 1000, len(pdf_bytes))

    pdf_filename = f"{safe_name}.pdf"
    if payload.action == "share":
        entry = share_store.put(pdf_bytes, pdf_filename)
        expires_at = datetime.fromtimestamp(entry.expires_at, tz=timezone.utc)
        return JSONResponse(
            {
                "success": True,
                "url": f"/api/pdf/{entry.id}",
                "id": entry.id,
                "expiresAt": expires_at.isoformat().replace("+00:00", "Z"),
            }
        )
    return _pdf_response(pdf_bytes, pdf_filename, inline=payload.action == "view")


@api.get("/pdf/{share_id}")
async def get_shared_pdf(share_id: str) -> Response:
    if not SHARE_ENABLED:
        raise _sharing_unavailable()
    entry = share_store.get(share_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="PDF not found")
    return _pdf_response(entry.content, entry.filename, inline=True)


@api.post("/upload-md")
async def upload_markdown(file: Optional[UploadFile] = File(None)) -> JSONResponse:
    """Validate an uploaded Markdown file and echo its text back to the editor."""
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    filename = Path((file.filename or "").replace("\\", "/")).name
    if not is_safe_basename(filename) or Path(filename).suffix.lower() not in ALLOWED_UPLOAD_EXTS:
        raise HTTPException(status_code=400, detail="Only .md or .markdown files are allowed")

    # Limit read to prevent accidental huge uploads.
    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail={"error": "File too large", "message": f"Maximum upload size is {MAX_UPLOAD_BYTES} bytes"},
        )

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File is not valid UTF-8 text")

    return JSONResponse({"filename": filename, "text": text})


@api.post("/preview")
async def preview(payload: PreviewRequest) -> JSONResponse:
    _check_content_size(payload.markdown)
    return JSONResponse({"html": render_markdown(payload.markdown).sanitized_html})


@api.post("/feedback")
async def submit_feedback(payload: FeedbackRequest) -> JSONResponse:
    try:
        feedback_store.add(payload.message)
    except InvalidFeedbackError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse({"success": True, "message": "Feedback submitted successfully"})


@api.get("/feedback")
async def list_feedback(key: Optional[str] = None) -> JSONResponse:
    if not ADMIN_API_KEY:
        raise HTTPException(status_code=401, detail="Admin access not configured")
    if not is_admin_key(key, ADMIN_API_KEY):
        raise HTTPException(status_code=401, detail="Unauthorized")
    items = feedback_store.all()
    return JSONResponse({"feedback": [item.to_dict() for item in items], "count": len(items)})


@app.get("/api/health")
async def health() -> JSONResponse:
    return JSONResponse(
        {
            "status": "ok",
            "shared_pdfs": len(share_store),
            "sharing_enabled": SHARE_ENABLED,
            "browser_connected": renderer.is_connected,
        }
    )


app.include_router(api)

# The single-page UI is served from static/ at the site root.
# Mounted last so it never shadows /api routes.
app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")


if __name__ == "__main__":
    # Convenience: python server.py
    import uvicorn

    port = int(os.environ.get("PORT", "8010"))
    uvicorn.run("server:app", host=os.environ.get("HOST", "127.0.0.1"), port=port, reload=False)
