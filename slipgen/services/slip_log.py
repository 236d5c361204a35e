import logging

from slipgen.core.enums import LogLevel
from slipgen.services.record_store import RecordStore
from slipgen.services.records import LogEntry

logger = logging.getLogger(__name__)

_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class SlipLogAppender:
    """Append-only writer for a slip's activity log.

    Each append re-reads the stored log, adds one entry and writes the whole
    sequence back. Calls within a run are sequential, so nothing appended
    earlier in the run can be lost.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def append(self, slip_id: str, level: LogLevel, message: str) -> list[LogEntry]:
        entries = list(self._store.fetch(slip_id).log_entries)
        entries.append(LogEntry.now(level, message))
        self._store.update_log(slip_id, entries)
        logger.log(
            _PY_LEVELS[level],
            message,
            extra={"extra": {"slip_id": slip_id, "slip_log_level": level.value}},
        )
        return entries

    def error(self, slip_id: str, message: str) -> list[LogEntry]:
        return self.append(slip_id, LogLevel.ERROR, message)
