from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from .config import FEEDBACK_MAX_LENGTH

logger = logging.getLogger(__name__)


class InvalidFeedbackError(ValueError):
    pass


@dataclass(frozen=True)
class Feedback:
    message: str
    timestamp: str

    def to_dict(self) -> dict:
        return asdict(self)


class FeedbackStore:
    """Append-only, in-memory list of user feedback."""

    def __init__(self, max_length: int = FEEDBACK_MAX_LENGTH) -> None:
        self.max_length = max_length
        self._items: list[Feedback] = []

    def add(self, message: object) -> Feedback:
        if not isinstance(message, str) or not message.strip():
            raise InvalidFeedbackError("Invalid feedback message")
        if len(message) > self.max_length:
            raise InvalidFeedbackError(f"Feedback message too long (max {self.max_length} characters)")

        item = Feedback(
            message=message.strip(),
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )
        self._items.append(item)
        logger.info("Feedback received (%d chars, %d total)", len(item.message), len(self._items))
        return item

    def all(self) -> list[Feedback]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
