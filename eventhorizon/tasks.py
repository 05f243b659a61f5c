import logging
import time

from eventhorizon.core import config
from eventhorizon.core.celery_config import celery_app
from eventhorizon.database.db import SessionLocal
from eventhorizon.services.registrations import confirm_registration

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def confirm_registration_task(self, registration_id: int):
    """Confirm a registration after a delay (simulates sending the confirmation e-mail)."""
    time.sleep(config.CONFIRMATION_DELAY_SECONDS)

    db = SessionLocal()
    try:
        confirm_registration(db, registration_id)
    finally:
        db.close()


def enqueue_confirmation(registration_id: int) -> bool:
    """Queue the confirmation job. A broker outage must not fail the registration."""
    try:
        confirm_registration_task.delay(registration_id)
    except Exception:
        logger.warning("Could not enqueue confirmation for registration %s", registration_id, exc_info=True)
        return False
    return True
