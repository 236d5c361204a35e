"""Post-submission outcome detection.

The booking site gives no API response, so the outcome is read off the final
page: the URL it redirected to, an OTP modal, or an inline error banner. The
signatures below track the site's current routing and markup and are the
first thing to revisit when classification starts failing.
"""

from dataclasses import dataclass

from slipgen.core.config import Settings
from slipgen.core.enums import SlipStatus
from slipgen.core.errors import BrowserActionError, ClassificationAmbiguous
from slipgen.services import page_scripts
from slipgen.services.browser_session import BrowserSession


@dataclass(frozen=True)
class Classification:
    status: SlipStatus
    final_url: str
    link: str | None = None
    message: str | None = None


def matches_success_url(url: str, patterns: list[str]) -> bool:
    return any(pattern in url for pattern in patterns)


def _safe_evaluate(session: BrowserSession, script, selector: str):
    try:
        return session.evaluate(script, {"selector": selector})
    except BrowserActionError:
        return None


def classify_outcome(session: BrowserSession, settings: Settings) -> Classification:
    final_url = session.current_url()

    if matches_success_url(final_url, settings.success_url_patterns):
        return Classification(status=SlipStatus.SUBMITTED, final_url=final_url, link=final_url)

    if _safe_evaluate(session, page_scripts.IS_VISIBLE, settings.otp_selector):
        return Classification(
            status=SlipStatus.OTP_REQUIRED,
            final_url=final_url,
            message="OTP verification required: complete manual verification on wafid.com",
        )

    error_text = _safe_evaluate(session, page_scripts.FIRST_VISIBLE_TEXT, settings.error_selector)
    if error_text:
        return Classification(status=SlipStatus.ERROR, final_url=final_url, message=str(error_text).strip())

    return Classification(
        status=SlipStatus.ERROR,
        final_url=final_url,
        message=str(ClassificationAmbiguous(final_url)),
    )
