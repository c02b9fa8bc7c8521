# backend/care_companion/services/history.py

from collections import deque
from itertools import islice
from typing import Deque, Iterable, List

from care_companion.core.config import settings
from care_companion.models.care import HistoryEntry


class HistoryLedger:
    """Fixed-capacity log of dose status changes, newest first."""

    def __init__(self, entries: Iterable[HistoryEntry] = (), limit: int = settings.HISTORY_LIMIT):
        # entries arrive newest-first; anything past `limit` is the oldest and is dropped
        self._entries: Deque[HistoryEntry] = deque(islice(entries, limit), maxlen=limit)

    @property
    def limit(self) -> int:
        return self._entries.maxlen

    def record(self, entry: HistoryEntry) -> None:
        # appendleft on a full deque evicts from the right, i.e. the oldest entry
        self._entries.appendleft(entry)

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def copy(self) -> "HistoryLedger":
        return HistoryLedger(self._entries, limit=self.limit)

    def __len__(self) -> int:
        return len(self._entries)
