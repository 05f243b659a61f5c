"""
Test database models (Event, Registration and User).
"""
import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhorizon.models.events import Event
from eventhorizon.models.registrations import Registration, RegistrationStatus
from eventhorizon.tests.conftest import future


class TestEventModel:
    """Test the Event model."""

    def test_create_event(self, db_session: Session, organizer):
        event = Event(name="Launch Party", max_attendees=100, scheduled_at=future(), organizer_id=organizer.id)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)

        assert event.id is not None
        assert event.registered_total == 0
        assert event.is_active is True
        assert event.created_at is not None
        assert event.organizer.username == "organizer"

    def test_event_relationship_with_registrations(self, db_session: Session, make_event, make_user):
        event = make_event("Concert", max_attendees=50, registered_total=3)
        first, second = make_user("first"), make_user("second")

        db_session.add(Registration(event_id=event.id, user_id=first.id, attendee_count=1))
        db_session.add(Registration(event_id=event.id, user_id=second.id, attendee_count=2))
        db_session.commit()
        db_session.refresh(event)

        assert len(event.registrations) == 2
        assert sum(r.attendee_count for r in event.registrations) == event.registered_total

    def test_registered_total_cannot_exceed_capacity(self, db_session: Session, make_event):
        event = make_event("Workshop", max_attendees=10)

        event.registered_total = 11
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_max_attendees_must_be_positive(self, db_session: Session, organizer):
        db_session.add(Event(name="Empty", max_attendees=0, scheduled_at=future(), organizer_id=organizer.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()


class TestRegistrationModel:
    """Test the Registration model."""

    def test_create_registration(self, db_session: Session, make_event, attendee):
        event = make_event("Festival", max_attendees=200)

        registration = Registration(event_id=event.id, user_id=attendee.id, attendee_count=4)
        db_session.add(registration)
        db_session.commit()
        db_session.refresh(registration)

        assert registration.id is not None
        assert registration.status == RegistrationStatus.PENDING.value
        assert registration.created_at is not None
        assert registration.event.name == "Festival"
        assert registration.user.username == "attendee"

    def test_one_registration_per_user_and_event(self, db_session: Session, make_event, attendee):
        event = make_event("Seminar", max_attendees=30)

        db_session.add(Registration(event_id=event.id, user_id=attendee.id, attendee_count=1))
        db_session.commit()

        db_session.add(Registration(event_id=event.id, user_id=attendee.id, attendee_count=1))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_attendee_count_must_be_positive(self, db_session: Session, make_event, attendee):
        event = make_event("Conference", max_attendees=500)

        db_session.add(Registration(event_id=event.id, user_id=attendee.id, attendee_count=0))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_status_transition(self, db_session: Session, make_event, attendee):
        event = make_event("Meetup")
        registration = Registration(event_id=event.id, user_id=attendee.id, attendee_count=1)
        db_session.add(registration)
        db_session.commit()

        registration.status = RegistrationStatus.CONFIRMED.value
        db_session.commit()
        db_session.refresh(registration)

        assert registration.status == RegistrationStatus.CONFIRMED.value
