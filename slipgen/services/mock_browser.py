import re
from typing import Any, Iterable

from slipgen.core.config import Settings
from slipgen.core.errors import BrowserActionError, NavigationError, NavigationTimeout
from slipgen.core.timing import VirtualClock
from slipgen.services import page_scripts
from slipgen.services.page_scripts import PageScript

_OPTION_SELECTOR = re.compile(r'^(?P<parent>.+) option\[value="(?P<value>.*)"\]$')


class MockBrowserSession:
    """In-memory stand-in for the booking page.

    Used by ``browser_mode="mock"`` and by tests. Time only moves when the
    session waits, so every settle window and deadline is deterministic.

    With ``visible=None`` every selector exists on the page; otherwise only the
    listed selectors do, plus anything in ``reveal_at`` once its delay (ms
    after open) has elapsed. Selectors in ``disabled`` exist but fail the
    interactable check until a scripted assignment enables them.
    """

    def __init__(
        self,
        *,
        clock: VirtualClock | None = None,
        visible: Iterable[str] | None = None,
        hidden: Iterable[str] = (),
        broken: Iterable[str] = (),
        disabled: Iterable[str] = (),
        reveal_at: dict[str, int] | None = None,
        options: dict[str, set[str]] | None = None,
        submit_selector: str = 'button[type="submit"].submit',
        outcome_url: str | None = None,
        outcome_elements: dict[str, str] | None = None,
        load_ms: int = 200,
        navigate_error: str | None = None,
    ) -> None:
        self.clock = clock or VirtualClock()
        self._opened_at = self.clock()
        self._visible = set(visible) if visible is not None else None
        self._hidden = set(hidden)
        self._broken = set(broken)
        self.disabled = set(disabled)
        self._reveal_at = dict(reveal_at or {})
        self._options = {k: set(v) for k, v in (options or {}).items()}
        self.submit_selector = submit_selector
        self.outcome_url = outcome_url
        self.outcome_elements = dict(outcome_elements or {})
        self.load_ms = load_ms
        self.navigate_error = navigate_error

        self.url = "about:blank"
        self.values: dict[str, str] = {}
        self.checked: set[str] = set()
        self.actions: list[tuple[str, str, str]] = []
        self.submitted = False
        self.closed = False
        self.close_calls = 0

    @classmethod
    def open(cls, settings: Settings, clock: VirtualClock | None = None) -> "MockBrowserSession":
        return cls(
            clock=clock,
            submit_selector=settings.submit_selector,
            outcome_url=f"{settings.form_url.rstrip('/')}/pay/mock/",
        )

    def _elapsed_ms(self) -> int:
        return int((self.clock() - self._opened_at) * 1000)

    def _advance(self, ms: int) -> None:
        self.clock.advance(max(0, ms) / 1000)

    def _present_one(self, selector: str) -> bool:
        if self.submitted and selector in self.outcome_elements:
            return True
        if selector in self._hidden:
            return False
        if selector in self._reveal_at:
            return self._elapsed_ms() >= self._reveal_at[selector]
        match = _OPTION_SELECTOR.match(selector)
        if match:
            parent = match.group("parent")
            if not self._present_one(parent):
                return False
            allowed = self._options.get(parent)
            return allowed is None or match.group("value") in allowed
        if selector in self.outcome_elements:
            return False
        return self._visible is None or selector in self._visible

    def is_present(self, selector: str) -> bool:
        return any(self._present_one(part.strip()) for part in selector.split(","))

    def _require(self, action: str, selector: str, value: str = "") -> None:
        self.actions.append((action, selector, value))
        if selector in self._broken:
            raise BrowserActionError(f"{action} failed on {selector}")
        if not self.is_present(selector):
            raise BrowserActionError(f"No element matches {selector}")

    def navigate(self, url: str, *, wait_until: str, timeout_ms: int) -> None:
        self.actions.append(("navigate", url, wait_until))
        if self.navigate_error:
            raise NavigationError(self.navigate_error)
        if self.load_ms > timeout_ms:
            self._advance(timeout_ms)
            raise NavigationTimeout(f"Timed out loading {url} after {timeout_ms}ms")
        self._advance(self.load_ms)
        self.url = url

    def select_option(self, selector: str, value: str, *, timeout_ms: int) -> None:
        self._require("select", selector, value)
        allowed = self._options.get(selector)
        if allowed is not None and value not in allowed:
            self._advance(timeout_ms)
            raise BrowserActionError(f"Option {value!r} not found in {selector}")
        self.values[selector] = value

    def type_text(self, selector: str, value: str, *, delay_ms: int, timeout_ms: int) -> None:
        self._require("type", selector, value)
        self._advance(delay_ms * len(value))
        self.values[selector] = self.values.get(selector, "") + value

    def click(self, selector: str, *, timeout_ms: int) -> None:
        self._require("click", selector)
        self.checked.add(selector)
        if selector == self.submit_selector:
            self._submit()

    def evaluate(self, script: PageScript, arg: dict[str, Any] | None = None) -> Any:
        arg = arg or {}
        selector = str(arg.get("selector") or "")
        if selector in self._broken:
            raise BrowserActionError(f"{script.name}: script failed on {selector}")

        if script is page_scripts.IS_INTERACTABLE:
            if selector in self.disabled and not arg.get("allow_disabled"):
                return False
            return self.is_present(selector)
        # Modals and banners only exist once the form has been submitted.
        outcome = self._outcome_parts(selector)
        if script is page_scripts.IS_VISIBLE:
            return bool(outcome)
        if script is page_scripts.FIRST_VISIBLE_TEXT:
            return next((text for text in outcome if text), None)

        self.actions.append((script.name, selector, str(arg.get("value") or "")))
        present = self.is_present(selector)
        if script is page_scripts.CLEAR_FIELD:
            if present:
                self.values[selector] = ""
            return present
        if script is page_scripts.ASSIGN_VALUE:
            if present:
                self.disabled.discard(selector)
                self.values[selector] = str(arg.get("value") or "")
            return present
        if script is page_scripts.CHECK_BOX:
            if not present:
                return None
            self.checked.add(selector)
            return True
        if script is page_scripts.CLICK_ELEMENT:
            if present and selector == self.submit_selector:
                self._submit()
            return present
        raise BrowserActionError(f"Mock page cannot run script {script.name}")

    def wait_for_selector(self, selector: str, *, timeout_ms: int) -> bool:
        if self.is_present(selector):
            return True
        reveal = self._reveal_at.get(selector)
        if reveal is not None and reveal - self._elapsed_ms() <= timeout_ms:
            self._advance(reveal - self._elapsed_ms())
            return True
        self._advance(timeout_ms)
        return False

    def wait_for_navigation(self, from_url: str, *, timeout_ms: int) -> bool:
        if self.url != from_url:
            return True
        self._advance(timeout_ms)
        return False

    def wait(self, ms: int) -> None:
        self._advance(ms)

    def current_url(self) -> str:
        return self.url

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True

    def _outcome_parts(self, selector: str) -> list[str]:
        if not self.submitted:
            return []
        parts = [part.strip() for part in selector.split(",")]
        return [self.outcome_elements[part] for part in parts if part in self.outcome_elements]

    def _submit(self) -> None:
        self.submitted = True
        if self.outcome_url:
            self.url = self.outcome_url
