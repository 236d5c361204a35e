import logging
from typing import Any, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from slipgen.core.config import Settings
from slipgen.core.errors import BrowserActionError, LaunchFailure, NavigationError, NavigationTimeout
from slipgen.services.page_scripts import PageScript

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]


class BrowserSession(Protocol):
    """One controllable browser page. No business logic lives behind it."""

    def navigate(self, url: str, *, wait_until: str, timeout_ms: int) -> None: ...

    def select_option(self, selector: str, value: str, *, timeout_ms: int) -> None: ...

    def type_text(self, selector: str, value: str, *, delay_ms: int, timeout_ms: int) -> None: ...

    def click(self, selector: str, *, timeout_ms: int) -> None: ...

    def evaluate(self, script: PageScript, arg: dict[str, Any] | None = None) -> Any: ...

    def wait_for_selector(self, selector: str, *, timeout_ms: int) -> bool: ...

    def wait_for_navigation(self, from_url: str, *, timeout_ms: int) -> bool: ...

    def wait(self, ms: int) -> None: ...

    def current_url(self) -> str: ...

    def close(self) -> None: ...


class PlaywrightBrowserSession:
    def __init__(self, playwright, browser, context, page) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self._closed = False

    @classmethod
    def open(cls, settings: Settings) -> "PlaywrightBrowserSession":
        playwright = None
        browser = None
        try:
            playwright = sync_playwright().start()
            browser = playwright.chromium.launch(
                headless=settings.browser_headless,
                args=[*CHROMIUM_ARGS, f"--window-size={settings.viewport_width},{settings.viewport_height}"],
            )
            context = browser.new_context(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                user_agent=settings.browser_user_agent,
            )
            page = context.new_page()
        except PlaywrightError as exc:
            if browser is not None:
                browser.close()
            if playwright is not None:
                playwright.stop()
            raise LaunchFailure(f"Browser launch failed: {exc}") from exc
        return cls(playwright, browser, context, page)

    def navigate(self, url: str, *, wait_until: str, timeout_ms: int) -> None:
        try:
            self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeout(f"Timed out loading {url} after {timeout_ms}ms") from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Could not load {url}: {exc}") from exc

    def select_option(self, selector: str, value: str, *, timeout_ms: int) -> None:
        try:
            self._page.select_option(selector, value=value, timeout=timeout_ms)
        except PlaywrightError as exc:
            raise BrowserActionError(str(exc).splitlines()[0]) from exc

    def type_text(self, selector: str, value: str, *, delay_ms: int, timeout_ms: int) -> None:
        try:
            self._page.focus(selector, timeout=timeout_ms)
            self._page.type(selector, value, delay=delay_ms, timeout=timeout_ms)
        except PlaywrightError as exc:
            raise BrowserActionError(str(exc).splitlines()[0]) from exc

    def click(self, selector: str, *, timeout_ms: int) -> None:
        try:
            self._page.click(selector, timeout=timeout_ms)
        except PlaywrightError as exc:
            raise BrowserActionError(str(exc).splitlines()[0]) from exc

    def evaluate(self, script: PageScript, arg: dict[str, Any] | None = None) -> Any:
        try:
            return self._page.evaluate(script.source, arg or {})
        except PlaywrightError as exc:
            raise BrowserActionError(f"{script.name}: {str(exc).splitlines()[0]}") from exc

    def wait_for_selector(self, selector: str, *, timeout_ms: int) -> bool:
        try:
            self._page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    def wait_for_navigation(self, from_url: str, *, timeout_ms: int) -> bool:
        if self._page.url != from_url:
            return True
        try:
            self._page.wait_for_url(lambda url: url != from_url, wait_until="load", timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    def wait(self, ms: int) -> None:
        self._page.wait_for_timeout(ms)

    def current_url(self) -> str:
        return self._page.url

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._context.close()
            self._browser.close()
        except PlaywrightError as exc:
            logger.warning("Browser close failed", extra={"extra": {"error": str(exc)}})
        finally:
            self._playwright.stop()
