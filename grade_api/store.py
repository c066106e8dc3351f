from __future__ import annotations

import hashlib
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Callable, Deque, Dict, Generic, List, TypeVar

T = TypeVar("T")

DAY_SECONDS = 86400.0
HOUR_SECONDS = 3600.0
RECENT_SCANS = 30


class RingBuffer(Generic[T]):
    """Keeps the last `capacity` items; the oldest is evicted first."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._items: Deque[T] = deque(maxlen=int(capacity))

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def append(self, item: T) -> None:
        self._items.append(item)

    def items(self) -> List[T]:
        """Oldest to newest."""
        return list(self._items)

    def latest(self, n: int) -> List[T]:
        """Up to n most recent items, newest first."""
        if n <= 0:
            return []
        return list(reversed(self._items))[:n]

    def __len__(self) -> int:
        return len(self._items)


def hash_ip(ip: str) -> str:
    # only a short digest is kept, never the raw address
    return hashlib.sha256((ip or "").encode("utf-8")).hexdigest()[:12]


@dataclass(frozen=True)
class ScanRecord:
    timestamp: float  # epoch seconds
    ipHash: str
    fileName: str


class ScanStore:
    """In-memory scan counters for the admin dashboard. Resets on restart."""

    def __init__(self, capacity: int = 500, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._history: RingBuffer[ScanRecord] = RingBuffer(capacity)
        self._total = 0
        self._started = clock()

    def record_scan(self, ip: str, file_name: str | None = None) -> ScanRecord:
        rec = ScanRecord(timestamp=self._clock(), ipHash=hash_ip(ip), fileName=file_name or "unknown")
        self._total += 1
        self._history.append(rec)
        return rec

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        history = self._history.items()
        return {
            "totalScans": self._total,
            "todayScans": sum(1 for s in history if s.timestamp > now - DAY_SECONDS),
            "hourScans": sum(1 for s in history if s.timestamp > now - HOUR_SECONDS),
            "uniqueVisitors": len({s.ipHash for s in history}),
            "recentScans": [
                {**asdict(s), "timestamp": int(s.timestamp * 1000)} for s in self._history.latest(RECENT_SCANS)
            ],
            # milliseconds, as the dashboard expects JS timestamps
            "upSince": int(self._started * 1000),
            "uptimeMs": int((now - self._started) * 1000),
        }


class DebugLog:
    """Bounded sink for client-side diagnostic payloads."""

    def __init__(self, capacity: int = 200, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: RingBuffer[Dict[str, Any]] = RingBuffer(capacity)

    def add(self, entry: Any) -> None:
        self._entries.append({"receivedAt": int(self._clock() * 1000), "entry": entry})

    def entries(self) -> List[Dict[str, Any]]:
        """Newest first."""
        return self._entries.latest(len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
