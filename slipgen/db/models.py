import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from slipgen.core.enums import AppointmentType, SlipStatus
from slipgen.db.base import Base, JsonType


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Slip(Base, TimestampMixin):
    __tablename__ = "slips"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    traveled_country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    appointment_type: Mapped[AppointmentType] = mapped_column(
        Enum(AppointmentType, name="appointment_type_enum", values_callable=_enum_values),
        nullable=False,
        default=AppointmentType.STANDARD,
    )
    medical_center: Mapped[str | None] = mapped_column(String(255), nullable=True)
    premium_medical_center: Mapped[str | None] = mapped_column(String(255), nullable=True)
    appointment_date: Mapped[str | None] = mapped_column(String(20), nullable=True)

    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dob: Mapped[str | None] = mapped_column(String(20), nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    marital_status: Mapped[str | None] = mapped_column(String(20), nullable=True)

    passport: Mapped[str | None] = mapped_column(String(50), nullable=True)
    confirm_passport: Mapped[str | None] = mapped_column(String(50), nullable=True)
    passport_issue_date: Mapped[str | None] = mapped_column(String(20), nullable=True)
    passport_issue_place: Mapped[str | None] = mapped_column(String(255), nullable=True)
    passport_expiry_on: Mapped[str | None] = mapped_column(String(20), nullable=True)
    visa_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    national_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    applied_position: Mapped[str | None] = mapped_column(String(20), nullable=True)
    applied_position_other: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[SlipStatus] = mapped_column(
        Enum(SlipStatus, name="slip_status_enum", values_callable=_enum_values),
        nullable=False,
        default=SlipStatus.PENDING,
    )
    generated_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    log_entries: Mapped[list] = mapped_column(JsonType, nullable=False, default=list)
