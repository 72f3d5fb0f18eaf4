"""In-memory record of delivered booking alerts."""

from __future__ import annotations

import logging
import threading

from .models import AlertKind

_LOGGER = logging.getLogger(__name__)


class AlertLedger:
    """Tracks which ``(booking_id, kind)`` alerts have been delivered.

    Entries are never evicted and never persisted; a new process starts with
    every alert re-armed. ``claim`` reserves a pair for an in-flight dispatch so
    two overlapping scans cannot both deliver it. A claim is either confirmed
    with ``mark_fired`` or dropped with ``release``.
    """

    def __init__(self) -> None:
        self._fired: set[tuple[str, AlertKind]] = set()
        self._claimed: set[tuple[str, AlertKind]] = set()
        self._lock = threading.Lock()

    def has_fired(self, booking_id: str, kind: AlertKind | str) -> bool:
        key = self._key(booking_id, kind)
        with self._lock:
            return key in self._fired

    def mark_fired(self, booking_id: str, kind: AlertKind | str) -> None:
        key = self._key(booking_id, kind)
        with self._lock:
            self._claimed.discard(key)
            self._fired.add(key)

    def claim(self, booking_id: str, kind: AlertKind | str) -> bool:
        key = self._key(booking_id, kind)
        with self._lock:
            if key in self._fired or key in self._claimed:
                return False
            self._claimed.add(key)
            return True

    def release(self, booking_id: str, kind: AlertKind | str) -> None:
        key = self._key(booking_id, kind)
        with self._lock:
            self._claimed.discard(key)
        _LOGGER.debug("Released alert claim %s for booking %s", key[1].value, booking_id)

    def fired_kinds(self, booking_id: str) -> set[AlertKind]:
        with self._lock:
            return {kind for fired_id, kind in self._fired if fired_id == booking_id}

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        return self.has_fired(*item)

    def __len__(self) -> int:
        with self._lock:
            return len(self._fired)

    def _key(self, booking_id: str, kind: AlertKind | str) -> tuple[str, AlertKind]:
        return str(booking_id), AlertKind(kind)
