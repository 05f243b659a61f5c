from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventhorizon.database.db import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    venue: Mapped[str | None] = mapped_column(String(200), nullable=True)
    max_attendees: Mapped[int] = mapped_column(Integer, nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    organizer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    # Sum of attendee_count over the event's registrations
    registered_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    organizer: Mapped["User"] = relationship(back_populates="events")  # noqa: F821
    registrations: Mapped[list["Registration"]] = relationship(back_populates="event")  # noqa: F821

    __table_args__ = (
        CheckConstraint("max_attendees > 0", name="ck_events_max_attendees_positive"),
        CheckConstraint("registered_total >= 0", name="ck_events_registered_total_non_negative"),
        CheckConstraint("registered_total <= max_attendees", name="ck_events_within_capacity"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name!r}, registered={self.registered_total}/{self.max_attendees})>"
