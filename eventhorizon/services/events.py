import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhorizon.core.errors import ConflictError, HasDependentsError, NotFoundError, PermissionDeniedError
from eventhorizon.models.events import Event
from eventhorizon.models.registrations import Registration, RegistrationStatus
from eventhorizon.models.users import User
from eventhorizon.schemas.events import EventCreate, EventUpdate
from eventhorizon.services.capacity import remaining_capacity
from eventhorizon.services.locking import event_lock

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event", event_id)
    return event


def ensure_can_manage(event: Event, actor: User) -> None:
    if actor.is_admin or event.organizer_id == actor.id:
        return
    raise PermissionDeniedError("Only the organizer or an administrator can manage this event")


def create_event(db: Session, payload: EventCreate, organizer: User) -> Event:
    event = Event(
        name=payload.name,
        description=payload.description,
        venue=payload.venue,
        max_attendees=payload.max_attendees,
        scheduled_at=as_utc(payload.scheduled_at),
        organizer_id=organizer.id,
        registered_total=0,
        is_active=True,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s created by user %s (max_attendees=%s)", event.id, organizer.id, event.max_attendees)
    return event


def list_events(db: Session, *, include_inactive: bool = False, limit: int = 50, offset: int = 0) -> list[Event]:
    stmt = select(Event).order_by(Event.scheduled_at, Event.id).limit(limit).offset(offset)
    if not include_inactive:
        stmt = stmt.where(Event.is_active.is_(True))
    return list(db.scalars(stmt))


def update_event(db: Session, event_id: int, payload: EventUpdate, actor: User) -> Event:
    event = get_event(db, event_id)
    ensure_can_manage(event, actor)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    new_max = changes.pop("max_attendees", None)
    if "scheduled_at" in changes:
        changes["scheduled_at"] = as_utc(changes["scheduled_at"])

    if new_max is None:
        for field, value in changes.items():
            setattr(event, field, value)
        db.commit()
        db.refresh(event)
        return event

    # Shrinking capacity races with registrations, so it goes through the event lock.
    with event_lock(event_id):
        try:
            res = db.execute(
                update(Event)
                .where(Event.id == event_id)
                .where(Event.registered_total <= new_max)
                .values(max_attendees=new_max, **changes)
            )
            if res.rowcount != 1:  # type: ignore
                registered = db.scalar(select(Event.registered_total).where(Event.id == event_id))
                raise ConflictError(
                    f"Cannot set max_attendees to {new_max}: "
                    f"{registered} attendees are already registered."
                )
            db.commit()
        except Exception:
            db.rollback()
            raise
    db.refresh(event)
    logger.info("Event %s updated by user %s", event.id, actor.id)
    return event


def cancel_event(db: Session, event_id: int, actor: User) -> Event:
    """Soft delete: the event stays with its registrations but stops accepting new ones."""
    event = get_event(db, event_id)
    ensure_can_manage(event, actor)
    event.is_active = False
    db.commit()
    db.refresh(event)
    logger.info("Event %s canceled by user %s", event.id, actor.id)
    return event


def delete_event(db: Session, event_id: int, actor: User) -> None:
    event = get_event(db, event_id)
    ensure_can_manage(event, actor)
    # Registrations are created under the same lock, so the count stays valid until commit.
    with event_lock(event_id):
        try:
            registrations = db.scalar(
                select(func.count(Registration.id)).where(Registration.event_id == event_id)
            )
            if registrations:
                raise HasDependentsError(
                    f"Event {event_id} has {registrations} registration(s); cancel it instead of deleting."
                )
            db.delete(event)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise HasDependentsError(
                f"Event {event_id} has registrations; cancel it instead of deleting."
            ) from e
        except Exception:
            db.rollback()
            raise
    logger.info("Event %s deleted by user %s", event_id, actor.id)


def get_event_stats(db: Session, event_id: int) -> dict:
    event = db.get(Event, event_id)
    if not event:
        return {}

    confirmed_total = db.scalar(
        select(func.sum(Registration.attendee_count)).where(
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.CONFIRMED.value,
        )
    )
    registration_count = db.scalar(select(func.count(Registration.id)).where(Registration.event_id == event_id))

    return {
        "event_id": event.id,
        "max_attendees": event.max_attendees,
        "registered_total": event.registered_total,
        "confirmed_total": int(confirmed_total or 0),
        "remaining": remaining_capacity(event.max_attendees, event.registered_total),
        "registration_count": int(registration_count or 0),
    }


def get_overall_report(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_capacity = db.scalar(select(func.sum(Event.max_attendees)))
    total_registered = db.scalar(select(func.sum(Event.registered_total)))
    active_events = db.scalar(select(func.count(Event.id)).where(Event.is_active.is_(True)))

    total_confirmed = db.scalar(
        select(func.sum(Registration.attendee_count)).where(
            Registration.status == RegistrationStatus.CONFIRMED.value
        )
    )

    return {
        "total_capacity": int(total_capacity or 0),
        "total_registered": int(total_registered or 0),
        "total_confirmed": int(total_confirmed or 0),
        "active_events": int(active_events or 0),
    }
