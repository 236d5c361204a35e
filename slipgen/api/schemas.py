from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from slipgen.core.enums import AppointmentType, SlipStatus
from slipgen.services.records import LogEntry


class LoginRequest(BaseModel):
    api_key: str
    operator: str = "operator"


class LoginResponse(BaseModel):
    token: str
    operator: str


class SlipFields(BaseModel):
    country: str | None = None
    city: str | None = None
    traveled_country: str | None = None

    appointment_type: AppointmentType = AppointmentType.STANDARD
    medical_center: str | None = None
    premium_medical_center: str | None = None
    appointment_date: str | None = Field(default=None, description="DD/MM/YYYY")

    first_name: str | None = None
    last_name: str | None = None
    dob: str | None = Field(default=None, description="DD/MM/YYYY")
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


class SlipCreateRequest(SlipFields):
    @model_validator(mode="after")
    def passports_match(self) -> "SlipCreateRequest":
        if self.passport and self.confirm_passport and self.passport != self.confirm_passport:
            raise ValueError("Passport numbers do not match")
        return self


class SlipUpdateRequest(SlipCreateRequest):
    pass


class SlipResponse(SlipFields):
    id: UUID
    status: SlipStatus
    generated_link: str | None = None
    log_entries: list[LogEntry] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class GenerateLinkResponse(BaseModel):
    status: SlipStatus
    url: str | None = None
    logs: list[LogEntry]


class GenerateLinkFailure(BaseModel):
    error: str
    status: SlipStatus = SlipStatus.ERROR
    logs: list[LogEntry]


class EnqueueResponse(BaseModel):
    task_id: str
    slip_id: str
    detail: dict[str, Any] = Field(default_factory=dict)
