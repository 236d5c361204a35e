import logging

from slipgen.core.errors import RunInProgressError, SlipNotFoundError
from slipgen.core.lease import get_run_lease
from slipgen.db.session import SessionLocal
from slipgen.services import stale_runs
from slipgen.services.link_generator import SlipLinkGenerator, build_link_generator
from slipgen.services.record_store import SqlRecordStore
from slipgen.workers.celery_app import celery

logger = logging.getLogger(__name__)


def generate_link_sync(slip_id: str, *, generator: SlipLinkGenerator | None = None) -> dict:
    generator = generator or build_link_generator()
    try:
        result = generator.run(slip_id)
    except SlipNotFoundError as exc:
        return {"ok": False, "code": "not_found", "error": str(exc)}
    except RunInProgressError as exc:
        return {"ok": False, "code": "in_progress", "error": str(exc)}

    payload = result.model_dump(mode="json")
    payload["ok"] = not result.failed
    payload["code"] = "run_failed" if result.failed else "success"
    return payload


@celery.task(name="slipgen.workers.tasks.generate_link")
def generate_link(slip_id: str, actor_id: str = "worker"):
    logger.info("Link generation requested", extra={"extra": {"slip_id": slip_id, "actor_id": actor_id}})
    return generate_link_sync(slip_id)


@celery.task(name="slipgen.workers.tasks.recover_stale_runs")
def recover_stale_runs():
    recovered = stale_runs.recover_stale_runs(
        session_factory=SessionLocal,
        store=SqlRecordStore(SessionLocal),
        lease=get_run_lease(),
    )
    return {"ok": True, "recovered": recovered}
