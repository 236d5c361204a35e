import pytest

from slipgen.core.enums import LogLevel, SlipStatus
from slipgen.core.errors import SlipNotFoundError
from slipgen.services.records import LogEntry
from slipgen.services.slip_log import SlipLogAppender


def test_fetch_returns_snapshot_of_new_slip(store, make_slip):
    slip_id = make_slip()

    record = store.fetch(slip_id)

    assert record.id == slip_id
    assert record.status == SlipStatus.PENDING
    assert record.generated_link is None
    assert record.log_entries == ()
    assert record.value_of("passport") == "A12345678"
    assert record.value_of("appointment_type") == "standard"


def test_unknown_or_malformed_id_is_not_found(store):
    with pytest.raises(SlipNotFoundError):
        store.fetch("00000000-0000-0000-0000-000000000000")
    with pytest.raises(SlipNotFoundError):
        store.fetch("not-a-uuid")


def test_link_is_kept_only_while_submitted(store, make_slip):
    slip_id = make_slip()
    entries = [LogEntry.now(LogLevel.SUCCESS, "done")]

    store.update_result(slip_id, SlipStatus.SUBMITTED, "https://wafid.com/en/appointment/1/pay/", entries)
    assert store.fetch(slip_id).generated_link == "https://wafid.com/en/appointment/1/pay/"

    store.update_status(slip_id, SlipStatus.PROCESSING)
    assert store.fetch(slip_id).generated_link is None

    store.update_result(slip_id, SlipStatus.OTP_REQUIRED, "https://ignored.example/", entries)
    assert store.fetch(slip_id).generated_link is None


def test_log_appends_preserve_earlier_entries(store, make_slip):
    slip_id = make_slip()
    log = SlipLogAppender(store)

    log.append(slip_id, LogLevel.INFO, "Starting browser automation...")
    log.append(slip_id, LogLevel.WARNING, "Confirm checkbox not found")
    entries = log.error(slip_id, "Run abandoned: worker stopped before reaching a result")

    stored = store.fetch(slip_id).log_entries
    assert [e.message for e in stored] == [e.message for e in entries]
    assert [e.level for e in stored] == [LogLevel.INFO, LogLevel.WARNING, LogLevel.ERROR]
    assert [e.timestamp for e in stored] == sorted(e.timestamp for e in stored)
