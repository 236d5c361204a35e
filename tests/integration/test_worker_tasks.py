from slipgen.core.enums import SlipStatus
from slipgen.services.link_generator import SlipLinkGenerator
from slipgen.services.mock_browser import MockBrowserSession
from slipgen.services.stale_runs import recover_stale_runs
from slipgen.workers.tasks import generate_link_sync

PAY_URL = "https://wafid.com/en/appointment/c0ffee/pay/"


def _generator(store, lease, settings, clock, page=None):
    return SlipLinkGenerator(
        store=store,
        lease=lease,
        settings=settings,
        session_factory=lambda _settings: page,
        clock=clock,
    )


def test_generate_link_sync_reports_success_payload(store, lease, settings, clock, make_slip):
    slip_id = make_slip()
    generator = _generator(store, lease, settings, clock, MockBrowserSession(clock=clock, outcome_url=PAY_URL))

    payload = generate_link_sync(slip_id, generator=generator)

    assert payload["ok"] is True
    assert payload["code"] == "success"
    assert payload["status"] == "submitted"
    assert payload["url"] == PAY_URL


def test_generate_link_sync_maps_refusals_to_codes(store, lease, settings, clock, make_slip):
    slip_id = make_slip()
    generator = _generator(store, lease, settings, clock)

    assert generate_link_sync("not-a-uuid", generator=generator)["code"] == "not_found"

    lease.acquire(slip_id)
    assert generate_link_sync(slip_id, generator=generator)["code"] == "in_progress"


def test_generate_link_sync_flags_fatal_runs(store, lease, settings, clock, make_slip):
    slip_id = make_slip()
    page = MockBrowserSession(clock=clock, navigate_error="net::ERR_TIMED_OUT")

    payload = generate_link_sync(slip_id, generator=_generator(store, lease, settings, clock, page))

    assert payload["ok"] is False
    assert payload["code"] == "run_failed"
    assert payload["error"] == "Automation failed: net::ERR_TIMED_OUT"


def test_stale_processing_slip_is_moved_to_error(session_factory, store, lease, make_slip):
    abandoned = make_slip()
    running = make_slip()
    untouched = make_slip()
    store.update_status(abandoned, SlipStatus.PROCESSING)
    store.update_status(running, SlipStatus.PROCESSING)
    lease.acquire(running)

    recovered = recover_stale_runs(session_factory=session_factory, store=store, lease=lease)

    assert recovered == [abandoned]
    record = store.fetch(abandoned)
    assert record.status == SlipStatus.ERROR
    assert record.log_entries[-1].message == "Run abandoned: worker stopped before reaching a result"
    assert store.fetch(running).status == SlipStatus.PROCESSING
    assert store.fetch(untouched).status == SlipStatus.PENDING
    assert not lease.is_held(abandoned)
