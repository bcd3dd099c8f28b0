from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .config import SHARE_TTL_SECONDS
from .security import new_share_id, normalize_share_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredPdf:
    id: str
    content: bytes
    filename: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class PdfShareStore:
    """Process-local store for PDFs shared by link.

    Entries expire ttl_seconds after creation. Expired entries are evicted on
    read and by sweep(), which the server runs periodically.
    """

    def __init__(self, ttl_seconds: float = SHARE_TTL_SECONDS, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._items: dict[str, StoredPdf] = {}

    def put(self, content: bytes, filename: str) -> StoredPdf:
        now = self._clock()
        share_id = new_share_id()
        while share_id in self._items:
            share_id = new_share_id()
        entry = StoredPdf(
            id=share_id,
            content=bytes(content),
            filename=filename,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        self._items[share_id] = entry
        logger.info("Stored shared PDF id=%s bytes=%d ttl=%ss", share_id, len(entry.content), int(self.ttl_seconds))
        return entry

    def get(self, share_id: str) -> StoredPdf | None:
        try:
            sid = normalize_share_id(share_id)
        except ValueError:
            return None
        entry = self._items.get(sid)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._items.pop(sid, None)
            logger.info("Evicted expired shared PDF id=%s on read", sid)
            return None
        return entry

    def delete(self, share_id: str) -> bool:
        try:
            sid = normalize_share_id(share_id)
        except ValueError:
            return False
        return self._items.pop(sid, None) is not None

    def sweep(self) -> int:
        """Delete every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [sid for sid, entry in self._items.items() if entry.is_expired(now)]
        for sid in expired:
            self._items.pop(sid, None)
        if expired:
            logger.info("Swept %d expired shared PDF(s)", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, share_id: object) -> bool:
        return isinstance(share_id, str) and self.get(share_id) is not None
