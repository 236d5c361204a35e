from typing import Callable, Protocol

from sqlalchemy.orm import Session

from slipgen.core.enums import SlipStatus
from slipgen.core.errors import SlipNotFoundError
from slipgen.db import crud
from slipgen.services.records import ApplicantRecord, LogEntry


class RecordStore(Protocol):
    def fetch(self, slip_id: str) -> ApplicantRecord: ...

    def update_status(self, slip_id: str, status: SlipStatus) -> None: ...

    def update_log(self, slip_id: str, entries: list[LogEntry]) -> None: ...

    def update_result(
        self,
        slip_id: str,
        status: SlipStatus,
        generated_link: str | None,
        entries: list[LogEntry],
    ) -> None: ...


class SqlRecordStore:
    """RecordStore over the ``slips`` table.

    Every call runs in its own short session and commits immediately, so
    dashboards polling the table see ``processing`` and the growing log while a
    run is still going.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def _load(self, db: Session, slip_id: str):
        slip = crud.get_slip(db, slip_id)
        if slip is None:
            raise SlipNotFoundError(slip_id)
        return slip

    def fetch(self, slip_id: str) -> ApplicantRecord:
        db = self._session_factory()
        try:
            return ApplicantRecord.from_row(self._load(db, slip_id))
        finally:
            db.close()

    def update_status(self, slip_id: str, status: SlipStatus) -> None:
        db = self._session_factory()
        try:
            crud.update_slip_status(db, self._load(db, slip_id), status)
            db.commit()
        finally:
            db.close()

    def update_log(self, slip_id: str, entries: list[LogEntry]) -> None:
        db = self._session_factory()
        try:
            crud.update_slip_log(db, self._load(db, slip_id), [e.as_json() for e in entries])
            db.commit()
        finally:
            db.close()

    def update_result(
        self,
        slip_id: str,
        status: SlipStatus,
        generated_link: str | None,
        entries: list[LogEntry],
    ) -> None:
        db = self._session_factory()
        try:
            crud.update_slip_result(
                db,
                self._load(db, slip_id),
                status=status,
                generated_link=generated_link,
                entries=[e.as_json() for e in entries],
            )
            db.commit()
        finally:
            db.close()
