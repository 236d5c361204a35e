import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from slipgen.core.enums import SlipStatus
from slipgen.db import models

# Run state is owned by the automation driver and never accepted from callers.
RUN_STATE_FIELDS = {"id", "status", "generated_link", "log_entries", "created_at", "updated_at"}


def get_slip(db: Session, slip_id: str) -> Optional[models.Slip]:
    key = _as_uuid(slip_id)
    if key is None:
        return None
    return db.get(models.Slip, key)


def list_slips(db: Session, status: SlipStatus | None = None, limit: int = 100) -> list[models.Slip]:
    stmt = select(models.Slip)
    if status:
        stmt = stmt.where(models.Slip.status == status)
    stmt = stmt.order_by(models.Slip.created_at.desc()).limit(limit)
    return list(db.scalars(stmt))


def create_slip(db: Session, *, fields: dict[str, Any]) -> models.Slip:
    values = {k: v for k, v in fields.items() if k not in RUN_STATE_FIELDS}
    slip = models.Slip(**values, status=SlipStatus.PENDING, generated_link=None, log_entries=[])
    db.add(slip)
    db.flush()
    return slip


def update_slip_fields(db: Session, slip: models.Slip, *, fields: dict[str, Any]) -> models.Slip:
    for key, value in fields.items():
        if key in RUN_STATE_FIELDS:
            continue
        setattr(slip, key, value)
    db.flush()
    return slip


def delete_slip(db: Session, slip: models.Slip) -> None:
    db.delete(slip)
    db.flush()


def update_slip_status(db: Session, slip: models.Slip, status: SlipStatus) -> models.Slip:
    slip.status = status
    if status != SlipStatus.SUBMITTED:
        slip.generated_link = None
    db.flush()
    return slip


def update_slip_log(db: Session, slip: models.Slip, entries: list[dict]) -> models.Slip:
    # Assign a fresh list so the JSON column is marked dirty.
    slip.log_entries = list(entries)
    db.flush()
    return slip


def update_slip_result(
    db: Session,
    slip: models.Slip,
    *,
    status: SlipStatus,
    generated_link: str | None,
    entries: list[dict],
) -> models.Slip:
    slip.status = status
    slip.generated_link = generated_link if status == SlipStatus.SUBMITTED else None
    slip.log_entries = list(entries)
    db.flush()
    return slip


def _as_uuid(slip_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(slip_id))
    except ValueError:
        return None
