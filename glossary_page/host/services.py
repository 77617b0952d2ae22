from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Protocol


class Clipboard(Protocol):
    async def write_text(self, text: str) -> None:
        ...


class InMemoryClipboard:
    """
    Clipboard stub for tests and headless hosts. Set `fail_with` to make
    writes raise.
    """

    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.history: List[str] = []

    @property
    def text(self) -> Optional[str]:
        return self.history[-1] if self.history else None

    async def write_text(self, text: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.history.append(text)


def current_date_time_iso() -> str:
    """UTC timestamp in the `2024-05-01T12:00:00.000Z` form."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_uuid() -> str:
    return str(uuid.uuid4())
