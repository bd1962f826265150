from __future__ import annotations

import threading
import uuid
from collections import deque
from typing import Any, Callable

from loguru import logger

from ..utils import _now_iso

Listener = Callable[[dict[str, Any]], None]


class EventBus:
    """In-process publish/subscribe channel for board notifications.

    The presentation layer subscribes to learn about events it cannot get from
    an operation's return value, such as a background save that failed.
    """

    def __init__(self, project_id: str = "", *, history: int = 100) -> None:
        self._project_id = project_id
        self._listeners: list[Listener] = []
        self._recent: deque[dict[str, Any]] = deque(maxlen=max(history, 1))
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a callable that removes it again."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, *, channel: str, event_type: str, entity_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        event = {
            "id": f"evt-{uuid.uuid4().hex[:10]}",
            "ts": _now_iso(),
            "channel": channel,
            "type": event_type,
            "entity_id": entity_id,
            "payload": payload,
            "project_id": self._project_id,
        }
        with self._lock:
            self._recent.append(event)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed for {}", event_type)
        return event

    def list_recent(self, limit: int = 100) -> list[dict[str, Any]]:
        if limit <= 0:
            return []
        with self._lock:
            return list(self._recent)[-limit:]
