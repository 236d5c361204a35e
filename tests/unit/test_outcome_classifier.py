from slipgen.core.config import Settings
from slipgen.core.enums import SlipStatus
from slipgen.services.mock_browser import MockBrowserSession
from slipgen.services.outcome_classifier import classify_outcome, matches_success_url

FORM_URL = "https://wafid.com/en/book-appointment/"


def _submitted_page(**kwargs):
    session = MockBrowserSession(**kwargs)
    session.url = FORM_URL
    session.click(session.submit_selector, timeout_ms=1000)
    return session


def test_matches_success_url_checks_every_pattern():
    patterns = ["/pay/", "/appointment/"]

    assert matches_success_url("https://wafid.com/en/appointment/9f2c/pay/", patterns)
    assert matches_success_url("https://wafid.com/appointment/9f2c/", patterns)
    assert not matches_success_url(FORM_URL, patterns)


def test_payment_redirect_is_submitted_with_link():
    session = _submitted_page(outcome_url="https://wafid.com/en/appointment/9f2c/pay/")

    outcome = classify_outcome(session, Settings())

    assert outcome.status == SlipStatus.SUBMITTED
    assert outcome.link == "https://wafid.com/en/appointment/9f2c/pay/"


def test_success_url_wins_over_visible_otp_modal():
    session = _submitted_page(
        outcome_url="https://wafid.com/en/appointment/9f2c/pay/",
        outcome_elements={".email-otp-modal": ""},
    )

    assert classify_outcome(session, Settings()).status == SlipStatus.SUBMITTED


def test_otp_modal_requires_manual_verification():
    session = _submitted_page(outcome_elements={".email-otp-modal": ""})

    outcome = classify_outcome(session, Settings())

    assert outcome.status == SlipStatus.OTP_REQUIRED
    assert outcome.link is None
    assert "manual verification" in outcome.message


def test_error_banner_text_becomes_the_message():
    session = _submitted_page(outcome_elements={".error-message": "  Passport already has a booking  "})

    outcome = classify_outcome(session, Settings())

    assert outcome.status == SlipStatus.ERROR
    assert outcome.link is None
    assert outcome.message == "Passport already has a booking"


def test_unrecognised_page_is_an_ambiguous_error():
    session = _submitted_page()

    outcome = classify_outcome(session, Settings())

    assert outcome.status == SlipStatus.ERROR
    assert outcome.message == f"Could not classify submission outcome at {FORM_URL}"


def test_broken_page_scripts_fall_through_to_ambiguous():
    session = _submitted_page(broken={".email-otp-modal", ".ui.error.message, .error-message"})

    assert classify_outcome(session, Settings()).status == SlipStatus.ERROR


def test_field_level_error_hint_does_not_classify_the_run():
    session = _submitted_page(outcome_elements={".field-error": "This field is required"})

    outcome = classify_outcome(session, Settings())

    assert outcome.message == f"Could not classify submission outcome at {FORM_URL}"
