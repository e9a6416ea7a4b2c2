"""Process table: the per-session records a session controller reacts to.

Changes to a record (launch target, bundle list, closing flag) and to
the foreground process are pushed synchronously to subscribers so that
controllers can re-evaluate their state on every relevant event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from termhost.domain.models import ProcessRecord
from termhost.errors import SessionError

logger = logging.getLogger(__name__)

RecordListener = Callable[[ProcessRecord], None]
ForegroundListener = Callable[[str | None], None]


class ProcessTable:
    """In-memory table of process records keyed by process id."""

    def __init__(self) -> None:
        self._records: dict[str, ProcessRecord] = {}
        self._listeners: dict[str, list[RecordListener]] = {}
        self._foreground_id: str | None = None
        self._foreground_listeners: list[ForegroundListener] = []

    def __contains__(self, process_id: object) -> bool:
        return process_id in self._records

    @property
    def foreground_id(self) -> str | None:
        return self._foreground_id

    def list_records(self) -> list[ProcessRecord]:
        return [self._records[key] for key in sorted(self._records)]

    def open(
        self,
        process_id: str,
        *,
        url: str = "",
        libraries: list[str] | None = None,
        title: str = "Terminal",
    ) -> ProcessRecord:
        if process_id in self._records:
            raise SessionError(f"Process already exists: {process_id}", process_id=process_id)
        record = ProcessRecord(
            process_id=process_id,
            title=title,
            url=url,
            libraries=list(libraries or []),
        )
        self._records[process_id] = record
        logger.info("Opened process %s (%s)", process_id, title)
        return record

    def get(self, process_id: str) -> ProcessRecord:
        try:
            return self._records[process_id]
        except KeyError:
            raise SessionError(f"Unknown process: {process_id}", process_id=process_id) from None

    def set_url(self, process_id: str, url: str) -> None:
        record = self.get(process_id)
        if record.url == url:
            return
        record.url = url
        self._notify(record)

    def set_libraries(self, process_id: str, libraries: list[str]) -> None:
        record = self.get(process_id)
        record.libraries = list(libraries)
        self._notify(record)

    def close(self, process_id: str) -> None:
        """Flag the process as closing; subscribers perform the teardown."""
        record = self.get(process_id)
        if record.closing:
            return
        record.closing = True
        logger.info("Closing process %s", process_id)
        self._notify(record)

    def remove(self, process_id: str) -> None:
        self._records.pop(process_id, None)
        self._listeners.pop(process_id, None)
        if self._foreground_id == process_id:
            self.set_foreground(None)

    def set_foreground(self, process_id: str | None) -> None:
        if process_id is not None:
            self.get(process_id)
        if process_id == self._foreground_id:
            return
        self._foreground_id = process_id
        for listener in list(self._foreground_listeners):
            listener(process_id)

    def subscribe(self, process_id: str, listener: RecordListener) -> Callable[[], None]:
        """Register a listener for changes to one record. Returns an unsubscribe callable."""
        self.get(process_id)
        self._listeners.setdefault(process_id, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(process_id, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def subscribe_foreground(self, listener: ForegroundListener) -> Callable[[], None]:
        self._foreground_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._foreground_listeners:
                self._foreground_listeners.remove(listener)

        return unsubscribe

    def _notify(self, record: ProcessRecord) -> None:
        for listener in list(self._listeners.get(record.process_id, [])):
            listener(record)
