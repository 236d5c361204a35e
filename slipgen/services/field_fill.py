from dataclasses import dataclass
from typing import Any, Callable

from slipgen.core.config import Settings
from slipgen.core.enums import AppointmentType, FieldKind, LogLevel, RunPhase
from slipgen.core.errors import BrowserActionError, FieldFillError
from slipgen.core.timing import Deadline
from slipgen.services import page_scripts
from slipgen.services.browser_session import BrowserSession
from slipgen.services.records import ApplicantRecord

Notify = Callable[[LogLevel, str], Any]

_FAILURE_VERBS = {
    FieldKind.SELECT: "select",
    FieldKind.TEXT: "type into",
    FieldKind.SCRIPTED: "set",
    FieldKind.CHOICE: "choose",
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    required: bool = False
    # Options or the control itself are rendered by page script after an
    # earlier selection, so the fill waits for them first.
    await_load: bool = False
    announce: str | None = None

    def selector(self, value: str = "") -> str:
        if self.kind == FieldKind.SELECT:
            return f'select[name="{self.name}"]'
        if self.kind == FieldKind.TEXT:
            return f'input[name="{self.name}"], textarea[name="{self.name}"]'
        if self.kind == FieldKind.CHOICE:
            return f'input[name="{self.name}"][value="{value}"]'
        return f'input[name="{self.name}"]'

    def settle_selector(self, value: str) -> str:
        if self.kind == FieldKind.SELECT:
            return f'{self.selector()} option[value="{value}"]'
        return self.selector(value)


def _spec(name: str, kind: FieldKind, **kwargs) -> tuple[str, FieldSpec]:
    return name, FieldSpec(name=name, kind=kind, **kwargs)


FIELD_TABLE: dict[str, FieldSpec] = dict(
    [
        _spec("country", FieldKind.SELECT, required=True, announce="Country selected: {value}"),
        _spec("city", FieldKind.SELECT, await_load=True, announce="City selected: {value}"),
        _spec(
            "traveled_country",
            FieldKind.SELECT,
            required=True,
            await_load=True,
            announce="Destination country: {value}",
        ),
        _spec("appointment_type", FieldKind.CHOICE, required=True, await_load=True),
        _spec("premium_medical_center", FieldKind.SELECT, await_load=True),
        _spec(
            "appointment_date",
            FieldKind.SCRIPTED,
            await_load=True,
            announce="Appointment date set: {value}",
        ),
        _spec("medical_center", FieldKind.SELECT, await_load=True),
        _spec("first_name", FieldKind.TEXT, required=True),
        _spec(
            "last_name",
            FieldKind.TEXT,
            required=True,
            announce="Name filled: {record.first_name} {record.last_name}",
        ),
        _spec("dob", FieldKind.SCRIPTED, required=True),
        _spec("nationality", FieldKind.SELECT, required=True),
        _spec("gender", FieldKind.SELECT, required=True),
        _spec("marital_status", FieldKind.SELECT, required=True),
        _spec("passport", FieldKind.TEXT, required=True),
        _spec("confirm_passport", FieldKind.TEXT, required=True),
        _spec("passport_issue_date", FieldKind.SCRIPTED),
        _spec("passport_issue_place", FieldKind.TEXT),
        _spec("passport_expiry_on", FieldKind.SCRIPTED),
        _spec("visa_type", FieldKind.SELECT),
        _spec("email", FieldKind.TEXT, required=True),
        _spec("phone", FieldKind.TEXT, required=True),
        _spec("national_id", FieldKind.TEXT, required=True),
        _spec("applied_position", FieldKind.SELECT),
        _spec("applied_position_other", FieldKind.TEXT),
    ]
)

_LOCATION = ["country", "city", "traveled_country", "appointment_type"]
_PREMIUM = ["premium_medical_center", "appointment_date"]
_STANDARD = ["medical_center"]
_CANDIDATE = [
    "first_name",
    "last_name",
    "dob",
    "nationality",
    "gender",
    "marital_status",
    "passport",
    "confirm_passport",
    "passport_issue_date",
    "passport_issue_place",
    "passport_expiry_on",
    "visa_type",
    "email",
    "phone",
    "national_id",
    "applied_position",
]


@dataclass(frozen=True)
class FillStep:
    spec: FieldSpec
    value: str


@dataclass
class FillSummary:
    filled: int = 0
    skipped: int = 0


def build_fill_plan(
    record: ApplicantRecord,
    *,
    other_position_code: str,
    fields: dict[str, FieldSpec] = FIELD_TABLE,
) -> list[FillStep]:
    """Order the form fields so every dependent control comes after its parent."""
    names = list(_LOCATION)
    if record.appointment_type == AppointmentType.PREMIUM:
        names += _PREMIUM
    elif record.value_of("medical_center"):
        names += _STANDARD
    names += _CANDIDATE
    if record.value_of("applied_position") == other_position_code:
        names.append("applied_position_other")

    steps = []
    for name in names:
        value = record.value_of(name)
        if name == "appointment_type" and not value:
            value = AppointmentType.STANDARD.value
        steps.append(FillStep(spec=fields[name], value=value))
    return steps


@dataclass(frozen=True)
class SettlePolicy:
    timeout_ms: int
    poll_ms: int

    @classmethod
    def from_settings(cls, settings: Settings) -> "SettlePolicy":
        return cls(timeout_ms=settings.settle_timeout_ms, poll_ms=max(1, settings.settle_poll_ms))


class FieldFillStrategy:
    """Fills the booking form one field at a time, best effort.

    A failing field is reported through ``notify`` as a warning and the fill
    moves on; only the run deadline stops it.
    """

    def __init__(
        self,
        session: BrowserSession,
        *,
        settings: Settings,
        deadline: Deadline,
        notify: Notify,
    ) -> None:
        self.session = session
        self.settings = settings
        self.deadline = deadline
        self.notify = notify
        self.settle_policy = SettlePolicy.from_settings(settings)

    def _clip(self, ms: int) -> int:
        return self.deadline.clip(ms, RunPhase.FILLING.value)

    def _ready(self, selector: str, allow_disabled: bool) -> bool:
        try:
            return bool(
                self.session.evaluate(
                    page_scripts.IS_INTERACTABLE,
                    {"selector": selector, "allow_disabled": allow_disabled},
                )
            )
        except BrowserActionError:
            # The control is being re-rendered under the script; ask again.
            return False

    def settle(self, selector: str, *, allow_disabled: bool = False) -> bool:
        """Poll until ``selector`` is visible (and enabled, unless allowed), or the window closes."""
        waited = 0
        while True:
            if self._ready(selector, allow_disabled):
                return True
            if waited >= self.settle_policy.timeout_ms:
                return False
            step = min(self.settle_policy.poll_ms, self.settle_policy.timeout_ms - waited)
            self.session.wait(self._clip(step))
            waited += step

    def pause_after_select(self) -> None:
        self.session.wait(self._clip(self.settings.select_settle_ms))

    def select(self, spec: FieldSpec, value: str) -> None:
        self.session.select_option(
            spec.selector(),
            value,
            timeout_ms=self._clip(self.settings.field_action_timeout_ms),
        )
        self.pause_after_select()

    def type_text(self, spec: FieldSpec, value: str) -> None:
        selector = spec.selector()
        if not self.session.evaluate(page_scripts.CLEAR_FIELD, {"selector": selector}):
            raise FieldFillError(spec.name, "field not found")
        self.session.type_text(
            selector,
            value,
            delay_ms=self.settings.type_delay_ms,
            timeout_ms=self._clip(self.settings.field_action_timeout_ms),
        )

    def assign(self, spec: FieldSpec, value: str) -> None:
        if not self.session.evaluate(page_scripts.ASSIGN_VALUE, {"selector": spec.selector(), "value": value}):
            raise FieldFillError(spec.name, "field not found")

    def choose(self, spec: FieldSpec, value: str) -> None:
        self.session.click(
            spec.selector(value),
            timeout_ms=self._clip(self.settings.field_action_timeout_ms),
        )
        self.pause_after_select()

    def fill(self, step: FillStep, record: ApplicantRecord) -> bool:
        spec, value = step.spec, step.value
        if not value:
            if spec.required:
                self.notify(LogLevel.WARNING, f"Skipped {spec.name}: no value on record")
            return False

        self.deadline.check(RunPhase.FILLING.value)
        # Scripted widgets ship disabled; ASSIGN_VALUE enables them itself.
        allow_disabled = spec.kind == FieldKind.SCRIPTED
        if spec.await_load and not self.settle(spec.settle_selector(value), allow_disabled=allow_disabled):
            self.notify(
                LogLevel.WARNING,
                f"{spec.name} did not finish loading within {self.settle_policy.timeout_ms}ms; filling anyway",
            )

        primitive = {
            FieldKind.SELECT: self.select,
            FieldKind.TEXT: self.type_text,
            FieldKind.SCRIPTED: self.assign,
            FieldKind.CHOICE: self.choose,
        }[spec.kind]
        try:
            primitive(spec, value)
        except (BrowserActionError, FieldFillError) as exc:
            reason = exc.reason if isinstance(exc, FieldFillError) else str(exc)
            self.notify(LogLevel.WARNING, f"Could not {_FAILURE_VERBS[spec.kind]} {spec.name}: {reason}")
            return False

        if spec.announce:
            self.notify(LogLevel.INFO, spec.announce.format(value=value, record=record))
        return True

    def fill_all(self, record: ApplicantRecord) -> FillSummary:
        summary = FillSummary()
        plan = build_fill_plan(record, other_position_code=self.settings.other_position_code)
        for step in plan:
            if self.fill(step, record):
                summary.filled += 1
            elif step.value or step.spec.required:
                summary.skipped += 1
        return summary
