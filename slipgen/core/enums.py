from enum import Enum


class SlipStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUBMITTED = "submitted"
    OTP_REQUIRED = "otp_required"
    ERROR = "error"


class LogLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class AppointmentType(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"


class RunPhase(str, Enum):
    IDLE = "idle"
    LAUNCHING = "launching"
    NAVIGATING = "navigating"
    FILLING = "filling"
    SUBMITTING = "submitting"
    CLASSIFYING = "classifying"
    SUBMITTED = "submitted"
    OTP_REQUIRED = "otp_required"
    ERROR = "error"


class FieldKind(str, Enum):
    SELECT = "select"
    TEXT = "text"
    SCRIPTED = "scripted"
    CHOICE = "choice"
