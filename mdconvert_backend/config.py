from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# Content limits. Markdown size is measured in UTF-8 bytes.
MAX_CONTENT_SIZE = int(os.environ.get("MAX_CONTENT_SIZE", str(2 * 1024 * 1024)))  # 2MB
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024)))  # 2MB
# Raw request body cap, enforced from Content-Length before the body is parsed.
MAX_REQUEST_BYTES = int(os.environ.get("MAX_REQUEST_BYTES", str(10 * 1024 * 1024)))  # 10MB

ALLOWED_UPLOAD_EXTS = {".md", ".markdown"}

# Conversion endpoint limiter.
RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", True)
RATE_LIMIT_WINDOW_MS = int(os.environ.get("RATE_LIMIT_WINDOW_MS", "60000"))
RATE_LIMIT_MAX_REQUESTS = int(os.environ.get("RATE_LIMIT_MAX_REQUESTS", "10"))

# Every other /api route.
GENERAL_RATE_LIMIT_WINDOW_MS = int(os.environ.get("GENERAL_RATE_LIMIT_WINDOW_MS", "60000"))
GENERAL_RATE_LIMIT_MAX_REQUESTS = int(os.environ.get("GENERAL_RATE_LIMIT_MAX_REQUESTS", "100"))

# Reads feedback and bypasses the rate limiters. Unset disables both.
ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY") or None

# Shared PDFs live for exactly one hour.
SHARE_ENABLED = _env_bool("MDPDF_SHARE_ENABLED", True)
SHARE_TTL_SECONDS = 3600

# How often the server sweeps expired shares.
CLEANUP_INTERVAL_SECONDS = int(os.environ.get("MDPDF_CLEANUP_INTERVAL_SECONDS", "300"))

FEEDBACK_MAX_LENGTH = 1000

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
SENTRY_DSN = os.environ.get("SENTRY_DSN") or None
