from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from eventhorizon.core.errors import NotFoundError
from eventhorizon.database.db import get_db
from eventhorizon.models.users import User
from eventhorizon.routes.deps import get_current_user
from eventhorizon.schemas.events import EventCreate, EventOut, EventStatsOut, EventUpdate
from eventhorizon.schemas.registrations import RegistrationOut, RegistrationRequest
from eventhorizon.services import events as event_service
from eventhorizon.services.registrations import list_event_registrations, register
from eventhorizon.tasks import enqueue_confirmation

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return event_service.create_event(db, payload, organizer=user)


@router.get("", response_model=list[EventOut])
def list_events(
    include_inactive: bool = False,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return event_service.list_events(db, include_inactive=include_inactive, limit=limit, offset=offset)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int, payload: EventUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)
):
    return event_service.update_event(db, event_id, payload, actor=user)


@router.post("/{event_id}/cancel", response_model=EventOut)
def cancel_event(event_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return event_service.cancel_event(db, event_id, actor=user)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    event_service.delete_event(db, event_id, actor=user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    stats = event_service.get_event_stats(db, event_id)
    if not stats:
        raise NotFoundError("Event", event_id)
    return stats


@router.post("/{event_id}/register", response_model=RegistrationOut, status_code=status.HTTP_201_CREATED)
def register_for_event(
    event_id: int,
    payload: RegistrationRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    registration = register(db, event_id=event_id, user_id=user.id, attendee_count=payload.attendee_count)

    # enqueue durable background work to confirm the registration
    enqueue_confirmation(registration.id)
    return registration


@router.get("/{event_id}/registrations", response_model=list[RegistrationOut])
def event_registrations(event_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return list_event_registrations(db, event_id, actor=user)
