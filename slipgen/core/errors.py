"""Error taxonomy for link generation runs.

Fatal errors (launch, navigation, deadline) end a run with status ``error``.
``FieldFillError`` and ``SubmissionTimeout`` are absorbed by the driver and only
show up as warnings in the slip's log.
"""


class SlipAutomationError(Exception):
    """Base class for every error raised by the automation core."""


class SlipNotFoundError(SlipAutomationError):
    def __init__(self, slip_id: str) -> None:
        super().__init__(f"Slip not found: {slip_id}")
        self.slip_id = slip_id


class RunInProgressError(SlipAutomationError):
    def __init__(self, slip_id: str) -> None:
        super().__init__(f"A link generation run is already in progress for slip {slip_id}")
        self.slip_id = slip_id


class LaunchFailure(SlipAutomationError):
    pass


class NavigationError(SlipAutomationError):
    pass


class NavigationTimeout(NavigationError):
    pass


class BrowserActionError(SlipAutomationError):
    """A single page interaction (select, type, click, script) failed."""


class FieldFillError(SlipAutomationError):
    def __init__(self, field_name: str, reason: str) -> None:
        super().__init__(f"{field_name}: {reason}")
        self.field_name = field_name
        self.reason = reason


class SubmissionTimeout(SlipAutomationError):
    pass


class ClassificationAmbiguous(SlipAutomationError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Could not classify submission outcome at {url}")
        self.url = url


class DeadlineExceeded(SlipAutomationError):
    def __init__(self, budget_seconds: float, phase: str | None = None) -> None:
        where = f" during {phase}" if phase else ""
        super().__init__(f"Run timed out after {budget_seconds:g}s{where}")
        self.budget_seconds = budget_seconds
        self.phase = phase
