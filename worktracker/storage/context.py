"""Per-context view onto a shared storage area.

A context is what a browser tab is to ``localStorage``: every context
reads and writes the same area, and each write is announced to all the
*other* contexts through :attr:`StorageContext.storage_event`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject, pyqtSignal

if TYPE_CHECKING:
    from .areas import StorageArea


class StorageContext(QObject):
    """One execution context attached to a :class:`StorageArea`.

    Signals
    -------
    storage_event(key: str, new_value: str | None)
        Emitted when *another* context (or an external writer) changed
        ``key``.  ``new_value`` is ``None`` when the key was removed.
    """

    storage_event = pyqtSignal(str, object)

    def __init__(self, area: StorageArea, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._area = area
        self._closed = False

    @property
    def area(self) -> StorageArea:
        return self._area

    @property
    def closed(self) -> bool:
        return self._closed

    def get_item(self, key: str) -> str | None:
        return self._area.get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self._area.set_item(key, value, source=self)

    def remove_item(self, key: str) -> None:
        self._area.remove_item(key, source=self)

    def close(self) -> None:
        """Stop receiving change notifications.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._area.detach(self)
