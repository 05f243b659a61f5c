from datetime import datetime

from pydantic import BaseModel, Field


# Upper bound of a PostgreSQL INTEGER column
MAX_INT32 = 2_147_483_647


# ---------- Event ----------
class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    venue: str | None = Field(default=None, max_length=200)
    max_attendees: int = Field(ge=1, le=MAX_INT32)
    scheduled_at: datetime


class EventUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    venue: str | None = Field(default=None, max_length=200)
    max_attendees: int | None = Field(default=None, ge=1, le=MAX_INT32)
    scheduled_at: datetime | None = None


class EventOut(BaseModel):
    id: int
    name: str
    description: str | None
    venue: str | None
    max_attendees: int
    scheduled_at: datetime
    is_active: bool
    organizer_id: int
    registered_total: int

    class Config:
        from_attributes = True


class EventStatsOut(BaseModel):
    event_id: int
    max_attendees: int
    registered_total: int
    confirmed_total: int
    remaining: int
    registration_count: int
