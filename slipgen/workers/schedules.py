from celery.schedules import crontab

from slipgen.core.config import get_settings

CELERY_BEAT_SCHEDULE = {
    "recover-stale-runs": {
        "task": "slipgen.workers.tasks.recover_stale_runs",
        "schedule": crontab(minute=f"*/{get_settings().stale_sweep_minutes}"),
    },
}
