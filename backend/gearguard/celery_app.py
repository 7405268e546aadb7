"""
Celery worker: periodic reconciliation of equipment scrap state.
"""
from celery import Celery
import logging
from .config import settings
from .database import SessionLocal
from .services.equipment_locks import get_equipment_locks
from .use_cases.stage_transitions import WorkflowHooks, reconcile_equipment_scrap_use_case

logger = logging.getLogger(__name__)

celery_app = Celery(
    "gearguard",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
)


def warn_if_locks_are_process_local() -> bool:
    """Warn at worker startup when equipment locks cannot reach the API processes."""
    if settings.EQUIPMENT_LOCK_BACKEND.strip().lower() != "redis":
        logger.warning(
            "EQUIPMENT_LOCK_BACKEND=%s does not serialize the reconcile task with API "
            "transitions in other processes; configure redis for the worker and the API.",
            settings.EQUIPMENT_LOCK_BACKEND,
        )
        return True
    return False


warn_if_locks_are_process_local()


@celery_app.task(name="reconcile_equipment_scrap")
def reconcile_equipment_scrap():
    """
    Recompute scrap-by-exhaustion for every equipment with requests.

    Takes the same per-equipment locks as the API, so it must share the
    lock backend with the API workers to be safe alongside them.
    """
    db = SessionLocal()

    try:
        result = reconcile_equipment_scrap_use_case(
            db=db,
            hooks=WorkflowHooks(locks=get_equipment_locks()),
        )
    except Exception as e:
        db.rollback()
        logger.error("Error reconciling equipment scrap state: %s", e, exc_info=True)
        raise

    finally:
        db.close()

    return {"checked": result.checked, "corrected": result.corrected}


# Schedule periodic processing
celery_app.conf.beat_schedule = {
    'reconcile-equipment-scrap': {
        'task': 'reconcile_equipment_scrap',
        'schedule': settings.RECONCILE_INTERVAL_SECONDS,
    },
}
