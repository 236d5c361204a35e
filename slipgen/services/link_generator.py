import logging
import time
from typing import Callable

from slipgen.core.config import Settings, get_settings
from slipgen.core.enums import LogLevel, RunPhase, SlipStatus
from slipgen.core.errors import (
    BrowserActionError,
    DeadlineExceeded,
    RunInProgressError,
    SlipAutomationError,
    SubmissionTimeout,
)
from slipgen.core.lease import RunLease
from slipgen.core.timing import Clock, Deadline
from slipgen.services import page_scripts
from slipgen.services.browser_session import BrowserSession, PlaywrightBrowserSession
from slipgen.services.field_fill import FieldFillStrategy
from slipgen.services.mock_browser import MockBrowserSession
from slipgen.services.outcome_classifier import Classification, classify_outcome
from slipgen.services.record_store import RecordStore
from slipgen.services.records import LogEntry, RunResult
from slipgen.services.slip_log import SlipLogAppender

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], BrowserSession]

# Time kept back from the post-submit navigation wait so a slow redirect still
# leaves room to settle and classify the page before the deadline.
_CLASSIFY_RESERVE_MS = 1000


def open_browser_session(settings: Settings) -> BrowserSession:
    if settings.browser_mode == "mock":
        return MockBrowserSession.open(settings)
    return PlaywrightBrowserSession.open(settings)


class _Run:
    def __init__(self, slip_id: str, deadline: Deadline, log: SlipLogAppender) -> None:
        self.slip_id = slip_id
        self.deadline = deadline
        self.phase = RunPhase.IDLE
        self.entries: list[LogEntry] = []
        self._log = log

    def enter(self, phase: RunPhase) -> None:
        self.deadline.check(phase.value)
        self.phase = phase

    def note(self, level: LogLevel, message: str) -> list[LogEntry]:
        self.entries = self._log.append(self.slip_id, level, message)
        return self.entries

    def clip(self, timeout_ms: int) -> int:
        return self.deadline.clip(timeout_ms, self.phase.value)


class SlipLinkGenerator:
    """Drives one slip through the booking form and records the outcome.

    Phases: idle, launching, navigating, filling, submitting, classifying, then
    one of submitted / otp_required / error. ``run`` always returns a
    ``RunResult`` once the run has started; only an unknown slip id or a run
    already in flight for the same slip raise.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        lease: RunLease,
        settings: Settings | None = None,
        session_factory: SessionFactory = open_browser_session,
        clock: Clock = time.monotonic,
    ) -> None:
        self.store = store
        self.lease = lease
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.clock = clock
        self.log = SlipLogAppender(store)

    def run(self, slip_id: str) -> RunResult:
        record = self.store.fetch(slip_id)
        token = self.lease.acquire(record.id)
        if token is None:
            raise RunInProgressError(record.id)
        try:
            return self._run_leased(record)
        finally:
            self.lease.release(record.id, token)

    def _run_leased(self, record) -> RunResult:
        settings = self.settings
        run = _Run(record.id, Deadline(settings.run_deadline_seconds, clock=self.clock), self.log)

        self.store.update_status(record.id, SlipStatus.PROCESSING)
        run.note(LogLevel.INFO, "Starting browser automation...")

        session: BrowserSession | None = None
        try:
            run.enter(RunPhase.LAUNCHING)
            session = self.session_factory(settings)

            run.enter(RunPhase.NAVIGATING)
            run.note(LogLevel.INFO, f"Navigating to {settings.form_url}...")
            session.navigate(
                settings.form_url,
                wait_until="networkidle",
                timeout_ms=run.clip(settings.navigation_timeout_ms),
            )
            run.note(LogLevel.INFO, "Page loaded. Filling form fields...")

            run.enter(RunPhase.FILLING)
            filler = FieldFillStrategy(
                session,
                settings=settings,
                deadline=run.deadline,
                notify=run.note,
            )
            summary = filler.fill_all(record)
            run.note(
                LogLevel.INFO,
                f"All form fields filled ({summary.filled} filled, {summary.skipped} skipped). "
                "Handling reCAPTCHA...",
            )

            run.enter(RunPhase.SUBMITTING)
            self._submit(session, run)

            run.enter(RunPhase.CLASSIFYING)
            return self._finish(run, classify_outcome(session, settings))
        except DeadlineExceeded:
            return self._abort(run, str(DeadlineExceeded(settings.run_deadline_seconds, run.phase.value)))
        except SlipAutomationError as exc:
            if run.deadline.expired:
                return self._abort(run, str(DeadlineExceeded(settings.run_deadline_seconds, run.phase.value)))
            return self._abort(run, f"Automation failed: {exc}")
        except Exception as exc:
            logger.exception(
                "Unexpected failure during link generation",
                extra={"extra": {"slip_id": record.id, "phase": run.phase.value}},
            )
            return self._abort(run, f"Automation failed: {type(exc).__name__}: {exc}")
        finally:
            if session is not None:
                session.close()

    def _submit(self, session: BrowserSession, run: _Run) -> None:
        settings = self.settings

        # reCAPTCHA v3 scores the page by itself; it only needs time.
        session.wait(run.clip(settings.captcha_settle_ms))

        try:
            checked = session.evaluate(page_scripts.CHECK_BOX, {"selector": settings.confirm_selector})
            if checked is None:
                run.note(LogLevel.WARNING, "Confirm checkbox not found")
        except BrowserActionError as exc:
            run.note(LogLevel.WARNING, f"Confirm checkbox issue: {exc}")

        run.note(LogLevel.INFO, "Submitting form...")
        start_url = session.current_url()
        clicked = False
        if session.wait_for_selector(settings.submit_selector, timeout_ms=run.clip(settings.field_action_timeout_ms)):
            try:
                clicked = session.evaluate(page_scripts.CLICK_ELEMENT, {"selector": settings.submit_selector})
            except BrowserActionError as exc:
                # A navigation that starts inside the click tears down the script
                # context, so the page may well be on its way already.
                run.note(LogLevel.WARNING, f"Submit click did not return cleanly: {exc}")
                clicked = True
        if not clicked:
            run.note(LogLevel.WARNING, f"Submit button not found ({settings.submit_selector})")
            navigated = False
        else:
            budget = run.deadline.remaining_ms() - settings.post_submit_settle_ms - _CLASSIFY_RESERVE_MS
            wait_ms = max(1, min(settings.submit_navigation_timeout_ms, budget))
            navigated = session.wait_for_navigation(start_url, timeout_ms=run.clip(wait_ms))
            if not navigated:
                run.note(
                    LogLevel.WARNING,
                    str(SubmissionTimeout(f"No navigation after submit within {wait_ms}ms; checking current page")),
                )

        session.wait(run.clip(settings.post_submit_settle_ms))
        current_url = session.current_url()
        if navigated:
            run.note(LogLevel.INFO, f"Redirected to: {current_url}")
        else:
            run.note(LogLevel.INFO, f"Current URL: {current_url}")

    def _finish(self, run: _Run, outcome: Classification) -> RunResult:
        if outcome.status == SlipStatus.SUBMITTED:
            run.note(LogLevel.SUCCESS, f"Payment link generated: {outcome.link}")
        elif outcome.status == SlipStatus.OTP_REQUIRED:
            run.note(LogLevel.WARNING, outcome.message or "OTP verification required")
        else:
            run.note(LogLevel.ERROR, outcome.message or f"Unrecognised page at {outcome.final_url}")

        self.store.update_result(run.slip_id, outcome.status, outcome.link, run.entries)
        run.phase = RunPhase(outcome.status.value)
        return RunResult(slip_id=run.slip_id, status=outcome.status, url=outcome.link, logs=run.entries)

    def _abort(self, run: _Run, message: str) -> RunResult:
        run.note(LogLevel.ERROR, message)
        self.store.update_result(run.slip_id, SlipStatus.ERROR, None, run.entries)
        run.phase = RunPhase.ERROR
        return RunResult(slip_id=run.slip_id, status=SlipStatus.ERROR, logs=run.entries, error=message)


def build_link_generator(settings: Settings | None = None) -> SlipLinkGenerator:
    from slipgen.core.lease import get_run_lease
    from slipgen.db.session import SessionLocal
    from slipgen.services.record_store import SqlRecordStore

    return SlipLinkGenerator(
        store=SqlRecordStore(SessionLocal),
        lease=get_run_lease(),
        settings=settings or get_settings(),
    )
