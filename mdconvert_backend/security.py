from __future__ import annotations

import re
import uuid
from pathlib import Path


_SHARE_ID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-4[0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$")
_FILENAME_BAD_CHARS_RE = re.compile(r'[<>:"|?*]')
_FILENAME_MAX = 255
DEFAULT_FILENAME = "document"


class ContentTooLargeError(ValueError):
    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f"Content size ({size_bytes / (1024 * 1024):.2f}MB) exceeds maximum "
            f"allowed size ({max_bytes / (1024 * 1024):.2f}MB)"
        )


def new_share_id() -> str:
    return str(uuid.uuid4())


def normalize_share_id(share_id: str) -> str:
    """Validate and normalize a share id.

    Share ids are capability tokens: anyone holding one can download the PDF
    until it expires. Only canonical UUID4 strings are accepted.
    """
    if not isinstance(share_id, str):
        raise ValueError("Invalid share id")
    share_id = share_id.strip()
    if not _SHARE_ID_RE.match(share_id):
        raise ValueError("Invalid share id")
    return str(uuid.UUID(share_id))


def is_safe_basename(name: str) -> bool:
    """Allow only simple filenames (no directories)."""
    if not isinstance(name, str) or not name:
        return False
    if name != Path(name).name:
        return False
    if "/" in name or "\\" in name:
        return False
    return True


def sanitize_filename(filename: str | None) -> str:
    """Reduce a user supplied name to something safe for Content-Disposition.

    Path separators, parent references, reserved characters and NUL bytes are
    dropped. A trailing .pdf/.md/.markdown is removed so callers can append
    their own extension.
    """
    name = str(filename or "")
    name = re.sub(r"[/\\]", "", name)
    name = name.replace("..", "")
    name = _FILENAME_BAD_CHARS_RE.sub("", name)
    name = name.replace("\0", "")
    name = "".join(ch for ch in name if ch.isprintable())
    name = name.strip()
    name = re.sub(r"\.(pdf|md|markdown)$", "", name, flags=re.IGNORECASE).strip()
    name = name[:_FILENAME_MAX]
    return name or DEFAULT_FILENAME


def content_size_bytes(text: str) -> int:
    return len((text or "").encode("utf-8"))


def validate_content_size(text: str, max_bytes: int) -> int:
    """Return the UTF-8 size of text, raising ContentTooLargeError above max_bytes."""
    size = content_size_bytes(text)
    if size > max_bytes:
        raise ContentTooLargeError(size, max_bytes)
    return size
