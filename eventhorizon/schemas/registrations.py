from datetime import datetime

from pydantic import BaseModel, Field

from eventhorizon.schemas.events import MAX_INT32


class RegistrationRequest(BaseModel):
    attendee_count: int = Field(default=1, ge=1, le=MAX_INT32)


class RegistrationOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    attendee_count: int
    status: str
    created_at: datetime

    class Config:
        from_attributes = True
