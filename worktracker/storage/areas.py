"""Key/value storage areas.

An area holds string values under string keys, like ``localStorage``.
Writes go through :meth:`StorageArea.set_item` / :meth:`remove_item`,
which notify every attached :class:`StorageContext` except the one that
made the write.  Writing a value equal to the current one is silent.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from ..database.db import get_session
from ..database.models import StorageItem
from .context import StorageContext


class StorageError(Exception):
    """The storage area could not be read or written."""


class StorageQuotaExceeded(StorageError):
    """A write would take the area past its size quota."""


class StorageArea:
    """Base class: change broadcasting plus the public item API.

    Subclasses implement ``_read``, ``_write``, ``_delete`` and ``_keys``.
    """

    def __init__(self) -> None:
        self._contexts: list[StorageContext] = []

    # ── contexts ──────────────────────────────────────────────────────

    def context(self, parent=None) -> StorageContext:
        """Attach and return a new execution context."""
        ctx = StorageContext(self, parent)
        self._contexts.append(ctx)
        return ctx

    def detach(self, ctx: StorageContext) -> None:
        if ctx in self._contexts:
            self._contexts.remove(ctx)

    @property
    def contexts(self) -> tuple[StorageContext, ...]:
        return tuple(self._contexts)

    # ── item API ──────────────────────────────────────────────────────

    def get_item(self, key: str) -> str | None:
        return self._read(key)

    def set_item(
        self, key: str, value: str, *, source: StorageContext | None = None
    ) -> None:
        old = self._read(key)
        if old == value:
            return
        self._write(key, value)
        self._broadcast(source, key, value)

    def remove_item(
        self, key: str, *, source: StorageContext | None = None
    ) -> None:
        if self._read(key) is None:
            return
        self._delete(key)
        self._broadcast(source, key, None)

    def keys(self) -> list[str]:
        return self._keys()

    def clear(self, *, source: StorageContext | None = None) -> None:
        for key in self._keys():
            self.remove_item(key, source=source)

    def _broadcast(
        self, source: StorageContext | None, key: str, value: str | None
    ) -> None:
        for ctx in list(self._contexts):
            if ctx is not source:
                ctx.storage_event.emit(key, value)

    # ── backend hooks ─────────────────────────────────────────────────

    def _read(self, key: str) -> str | None:
        raise NotImplementedError

    def _write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError

    def _keys(self) -> list[str]:
        raise NotImplementedError


class MemoryStorageArea(StorageArea):
    """Process-local area.  ``quota_bytes`` caps the total size of keys
    plus values (UTF-8), mimicking the browser's storage quota."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        super().__init__()
        self._items: dict[str, str] = {}
        self._quota = quota_bytes

    def _size_with(self, key: str, value: str) -> int:
        total = 0
        for k, v in self._items.items():
            if k != key:
                total += len(k.encode("utf-8")) + len(v.encode("utf-8"))
        return total + len(key.encode("utf-8")) + len(value.encode("utf-8"))

    def _read(self, key: str) -> str | None:
        return self._items.get(key)

    def _write(self, key: str, value: str) -> None:
        if self._quota is not None and self._size_with(key, value) > self._quota:
            raise StorageQuotaExceeded(
                f"writing {key!r} exceeds the {self._quota}-byte quota"
            )
        self._items[key] = value

    def _delete(self, key: str) -> None:
        self._items.pop(key, None)

    def _keys(self) -> list[str]:
        return list(self._items)


class SqlStorageArea(StorageArea):
    """Area persisted in the ``storage_items`` table, so values survive
    application restarts."""

    def _read(self, key: str) -> str | None:
        try:
            with get_session() as db:
                item = db.get(StorageItem, key)
                return item.value if item else None
        except SQLAlchemyError as exc:
            raise StorageError(f"could not read {key!r}") from exc

    def _write(self, key: str, value: str) -> None:
        try:
            with get_session() as db:
                item = db.get(StorageItem, key)
                if item is None:
                    db.add(StorageItem(key=key, value=value))
                else:
                    item.value = value
                    item.updated_at = datetime.utcnow()
        except SQLAlchemyError as exc:
            raise StorageError(f"could not write {key!r}") from exc

    def _delete(self, key: str) -> None:
        try:
            with get_session() as db:
                item = db.get(StorageItem, key)
                if item is not None:
                    db.delete(item)
        except SQLAlchemyError as exc:
            raise StorageError(f"could not delete {key!r}") from exc

    def _keys(self) -> list[str]:
        try:
            with get_session() as db:
                return [row.key for row in db.query(StorageItem.key).all()]
        except SQLAlchemyError as exc:
            raise StorageError("could not list keys") from exc
