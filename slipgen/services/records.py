from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from slipgen.core.enums import AppointmentType, LogLevel, SlipStatus


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    level: LogLevel
    message: str

    @classmethod
    def now(cls, level: LogLevel, message: str) -> "LogEntry":
        stamp = datetime.now(timezone.utc).isoformat()
        return cls(timestamp=stamp, level=level, message=message)

    def as_json(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "level": self.level.value, "message": self.message}


class ApplicantRecord(BaseModel):
    """Read-only snapshot of a slip, taken at the start of a run."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    country: str | None = None
    city: str | None = None
    traveled_country: str | None = None

    appointment_type: AppointmentType = AppointmentType.STANDARD
    medical_center: str | None = None
    premium_medical_center: str | None = None
    appointment_date: str | None = None

    first_name: str | None = None
    last_name: str | None = None
    dob: str | None = None
    nationality: str | None = None
    gender: str | None = None
    marital_status: str | None = None

    passport: str | None = None
    confirm_passport: str | None = None
    passport_issue_date: str | None = None
    passport_issue_place: str | None = None
    passport_expiry_on: str | None = None
    visa_type: str | None = None

    email: str | None = None
    phone: str | None = None
    national_id: str | None = None

    applied_position: str | None = None
    applied_position_other: str | None = None

    status: SlipStatus = SlipStatus.PENDING
    generated_link: str | None = None
    log_entries: tuple[LogEntry, ...] = ()

    @classmethod
    def from_row(cls, row: Any) -> "ApplicantRecord":
        entries = tuple(LogEntry.model_validate(item) for item in (row.log_entries or []))
        data = {name: getattr(row, name, None) for name in cls.model_fields if name not in {"id", "log_entries"}}
        data = {k: v for k, v in data.items() if v is not None}
        return cls(id=str(row.id), log_entries=entries, **data)

    def value_of(self, field_name: str) -> str:
        value = getattr(self, field_name, None)
        if value is None:
            return ""
        if isinstance(value, AppointmentType):
            return value.value
        return str(value).strip()


class RunResult(BaseModel):
    slip_id: str
    status: SlipStatus
    url: str | None = None
    logs: list[LogEntry] = Field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        """True when the run aborted instead of reaching a classified outcome."""
        return self.error is not None
