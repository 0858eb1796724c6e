"""Persistence for the single running-timer record.

``TimerStore`` is the only storage interface the timer engine needs:

* ``read()``       → the persisted :class:`TimerState`, or ``None``
* ``write(state)`` → persist it; ``write(None)`` deletes the record
* ``subscribe(cb)`` → ``cb(removed)`` whenever another context changes
  the record; returns a callable that unsubscribes

Corrupt or unreadable records read as ``None`` and failed writes return
``False``; nothing here raises for storage trouble.
"""

from __future__ import annotations

import json
import logging
from typing import Callable

from ..storage import StorageContext, StorageError
from .records import TimerState


logger = logging.getLogger(__name__)

TIMER_KEY = "gpt-active-timer"


class TimerStore:
    """JSON codec for :class:`TimerState` on top of one storage context."""

    def __init__(self, context: StorageContext, key: str = TIMER_KEY) -> None:
        self._context = context
        self._key = key

    @classmethod
    def from_settings(cls, context: StorageContext, settings) -> TimerStore:
        return cls(context, key=settings.timer_key)

    @property
    def key(self) -> str:
        return self._key

    @property
    def context(self) -> StorageContext:
        return self._context

    def read(self) -> TimerState | None:
        try:
            raw = self._context.get_item(self._key)
        except StorageError as exc:
            logger.warning("Timer record unreadable, treating as idle: %s", exc)
            return None
        if raw is None:
            return None
        try:
            return TimerState.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding corrupt timer record %r: %s", raw[:200], exc)
            return None

    def write(self, state: TimerState | None) -> bool:
        try:
            if state is None:
                self._context.remove_item(self._key)
            else:
                self._context.set_item(self._key, json.dumps(state.to_dict()))
        except StorageError as exc:
            logger.warning("Could not write timer record: %s", exc)
            return False
        return True

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """Call ``callback(removed)`` on changes made by other contexts."""

        def _on_storage_event(key: str, new_value) -> None:
            if key == self._key:
                callback(new_value is None)

        self._context.storage_event.connect(_on_storage_event)

        def unsubscribe() -> None:
            try:
                self._context.storage_event.disconnect(_on_storage_event)
            except TypeError:
                pass  # already disconnected

        return unsubscribe
