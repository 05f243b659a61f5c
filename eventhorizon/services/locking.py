import logging
from contextlib import contextmanager

import redis

from eventhorizon.core import config
from eventhorizon.core.errors import LockUnavailableError

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(config.get_redis_url(), decode_responses=True)


def event_lock_key(event_id: int) -> str:
    return f"event_lock:{event_id}"


@contextmanager
def event_lock(event_id: int):
    """
    Hold the per-event lock so only one process at a time can change an
    event's registered total.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        event_lock_key(event_id),
        timeout=config.EVENT_LOCK_TIMEOUT,
        blocking_timeout=config.EVENT_LOCK_BLOCKING_TIMEOUT,
    )

    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.LockError:
        acquired = False
    if not acquired:
        logger.warning("Timed out waiting for lock on event %s", event_id)
        raise LockUnavailableError(event_id)

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockNotOwnedError:
            # The lock expired while we held it; the database constraints still hold.
            logger.warning("Lock on event %s expired before release", event_id)
