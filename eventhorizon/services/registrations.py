import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhorizon.core.errors import (
    CapacityExceededError,
    ConflictError,
    DuplicateRegistrationError,
    NotFoundError,
    PermissionDeniedError,
    RegistrationClosedError,
    ValidationFailedError,
)
from eventhorizon.models.events import Event
from eventhorizon.models.registrations import Registration, RegistrationStatus
from eventhorizon.models.users import User
from eventhorizon.services.capacity import can_register, remaining_capacity
from eventhorizon.services.events import as_utc, ensure_can_manage, get_event
from eventhorizon.services.locking import event_lock

logger = logging.getLogger(__name__)


def register(db: Session, *, event_id: int, user_id: int, attendee_count: int = 1) -> Registration:
    """
    Register ``attendee_count`` attendees for an event.

    The capacity check and the insert run in one transaction under the
    per-event lock, and the increment itself is conditional, so two
    concurrent requests can never both take the last seats.
    """
    if attendee_count < 1:
        raise ValidationFailedError("attendee_count must be at least 1")

    with event_lock(event_id):
        try:
            registration = _register_in_transaction(db, event_id, user_id, attendee_count)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning("Registration for event %s rejected by constraint: %s", event_id, e.orig)
            raise ConflictError(f"Registration for event {event_id} conflicts with existing data.") from e
        except Exception:
            db.rollback()
            raise

    db.refresh(registration)
    logger.info(
        "Registration %s: user %s registered %s attendee(s) for event %s",
        registration.id, user_id, attendee_count, event_id,
    )
    return registration


def _register_in_transaction(db: Session, event_id: int, user_id: int, attendee_count: int) -> Registration:
    """Internal function to create a registration within a transaction."""
    event = db.scalar(
        select(Event)
        .where(Event.id == event_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not event:
        raise NotFoundError("Event", event_id)
    if not event.is_active:
        raise RegistrationClosedError(f"Event {event_id} has been canceled.")
    if as_utc(event.scheduled_at) <= datetime.now(timezone.utc):
        raise RegistrationClosedError(f"Event {event_id} has already taken place.")

    existing = db.scalar(
        select(Registration.id).where(Registration.event_id == event_id, Registration.user_id == user_id)
    )
    if existing:
        raise DuplicateRegistrationError(event_id, user_id)

    if not can_register(event.max_attendees, event.registered_total, attendee_count):
        logger.info(
            "Event %s over capacity: %s/%s registered, %s requested",
            event_id, event.registered_total, event.max_attendees, attendee_count,
        )
        raise CapacityExceededError(
            event_id, attendee_count, remaining_capacity(event.max_attendees, event.registered_total)
        )

    # Check capacity and increment registered_total atomically
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.registered_total + attendee_count <= Event.max_attendees)
        .values(registered_total=Event.registered_total + attendee_count)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        raise CapacityExceededError(event_id, attendee_count, 0)

    registration = Registration(
        event_id=event_id,
        user_id=user_id,
        attendee_count=attendee_count,
        status=RegistrationStatus.PENDING.value,
    )
    db.add(registration)
    db.flush()  # gets registration.id
    return registration


def get_registration(db: Session, registration_id: int, viewer: User | None = None) -> Registration:
    registration = db.get(Registration, registration_id)
    if not registration:
        raise NotFoundError("Registration", registration_id)
    if viewer is not None and not (
        viewer.is_admin or registration.user_id == viewer.id or registration.event.organizer_id == viewer.id
    ):
        raise PermissionDeniedError("You cannot view this registration")
    return registration


def list_event_registrations(db: Session, event_id: int, actor: User) -> list[Registration]:
    event = get_event(db, event_id)
    ensure_can_manage(event, actor)
    return list(
        db.scalars(
            select(Registration).where(Registration.event_id == event_id).order_by(Registration.created_at, Registration.id)
        )
    )


def list_user_registrations(db: Session, user_id: int) -> list[Registration]:
    return list(
        db.scalars(
            select(Registration).where(Registration.user_id == user_id).order_by(Registration.created_at, Registration.id)
        )
    )


def cancel_registration(db: Session, *, registration_id: int, actor: User) -> None:
    """Delete a registration and give its seats back to the event."""
    registration = get_registration(db, registration_id)
    if not (actor.is_admin or registration.user_id == actor.id):
        raise PermissionDeniedError("Only the registrant or an administrator can cancel a registration")
    event_id = registration.event_id

    with event_lock(event_id):
        try:
            registration = db.get(Registration, registration_id, populate_existing=True)
            if not registration:
                raise NotFoundError("Registration", registration_id)
            count = registration.attendee_count
            res = db.execute(
                update(Event)
                .where(Event.id == event_id)
                .where(Event.registered_total >= count)
                .values(registered_total=Event.registered_total - count)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:  # type: ignore
                logger.error(
                    "Event %s total is out of step with registration %s (%s attendees)",
                    event_id, registration_id, count,
                )
                raise ConflictError(
                    f"Registration {registration_id} does not match the registered total of event {event_id}."
                )
            db.delete(registration)
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info("Registration %s for event %s canceled by user %s", registration_id, event_id, actor.id)


def confirm_registration(db: Session, registration_id: int) -> None:
    try:
        _confirm_registration_in_transaction(db, registration_id)
        db.commit()
    except Exception:
        db.rollback()
        raise


def _confirm_registration_in_transaction(db: Session, registration_id: int) -> None:
    """Internal function to confirm a registration within a transaction."""
    registration = db.get(Registration, registration_id)
    if not registration:
        logger.info("Registration %s no longer exists; nothing to confirm", registration_id)
        return
    registration.status = RegistrationStatus.CONFIRMED.value
