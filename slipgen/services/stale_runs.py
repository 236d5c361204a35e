import logging
from typing import Callable

from sqlalchemy.orm import Session

from slipgen.core.enums import SlipStatus
from slipgen.core.lease import RunLease
from slipgen.db import crud
from slipgen.services.record_store import RecordStore
from slipgen.services.slip_log import SlipLogAppender

logger = logging.getLogger(__name__)


def recover_stale_runs(
    *,
    session_factory: Callable[[], Session],
    store: RecordStore,
    lease: RunLease,
    limit: int = 100,
) -> list[str]:
    """Close out slips left in ``processing`` by a worker that died mid-run.

    A slip counts as stale when it is still ``processing`` but nobody holds its
    lease any more. It is moved to ``error`` with a log entry saying why.
    """
    db = session_factory()
    try:
        candidates = [str(slip.id) for slip in crud.list_slips(db, status=SlipStatus.PROCESSING, limit=limit)]
    finally:
        db.close()

    log = SlipLogAppender(store)
    recovered: list[str] = []
    for slip_id in candidates:
        token = lease.acquire(slip_id)
        if token is None:
            continue
        try:
            if store.fetch(slip_id).status != SlipStatus.PROCESSING:
                continue
            entries = log.error(slip_id, "Run abandoned: worker stopped before reaching a result")
            store.update_result(slip_id, SlipStatus.ERROR, None, entries)
            recovered.append(slip_id)
        finally:
            lease.release(slip_id, token)

    if recovered:
        logger.warning("Recovered stale runs", extra={"extra": {"slip_ids": recovered}})
    return recovered
