from slipgen.core.enums import AppointmentType
from slipgen.services.records import ApplicantRecord

STANDARD_SLIP = {
    "country": "EG",
    "city": "3",
    "traveled_country": "SA",
    "appointment_type": AppointmentType.STANDARD,
    "first_name": "Omar",
    "last_name": "Hassan",
    "dob": "12/03/1990",
    "nationality": "EG",
    "gender": "male",
    "marital_status": "married",
    "passport": "A12345678",
    "confirm_passport": "A12345678",
    "passport_issue_date": "01/02/2020",
    "passport_issue_place": "Cairo",
    "passport_expiry_on": "01/02/2030",
    "visa_type": "wv",
    "email": "omar.hassan@example.com",
    "phone": "+201001234567",
    "national_id": "29003121234567",
    "applied_position": "31",
}

PREMIUM_SLIP = {
    **STANDARD_SLIP,
    "appointment_type": AppointmentType.PREMIUM,
    "premium_medical_center": "1120",
    "appointment_date": "15/06/2025",
}


def applicant(base: dict | None = None, **overrides) -> ApplicantRecord:
    return ApplicantRecord(id="slip-1", **{**(base or STANDARD_SLIP), **overrides})
