from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import Request

logger = logging.getLogger("mdconvert.requests")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=_LOG_FORMAT)


def init_sentry(dsn: Optional[str]) -> bool:
    """Enable Sentry error reporting when a DSN is configured."""
    if not dsn:
        return False
    import sentry_sdk

    sentry_sdk.init(dsn=dsn, traces_sample_rate=0.1)
    logging.getLogger(__name__).info("Sentry initialized")
    return True


def capture_exception(exc: BaseException) -> None:
    import sentry_sdk

    sentry_sdk.capture_exception(exc)


async def log_requests(request: Request, call_next):
    """HTTP middleware: one log line per request with status and duration."""
    started = time.perf_counter()
    client = request.client.host if request.client else "unknown"
    try:
        response = await call_next(request)
    except Exception:
        # Answered with a 500 by the server error handler further out.
        duration_ms = (time.perf_counter() - started) * 1000
        logger.error("%s %s -> 500 (%.0fms) client=%s", request.method, request.url.path, duration_ms, client)
        raise
    duration_ms = (time.perf_counter() - started) * 1000

    status = response.status_code
    if status >= 500:
        level = logging.ERROR
    elif status >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.log(level, "%s %s -> %d (%.0fms) client=%s", request.method, request.url.path, status, duration_ms, client)
    return response
