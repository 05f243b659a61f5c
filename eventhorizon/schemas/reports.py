from pydantic import BaseModel


class ReportOut(BaseModel):
    total_capacity: int
    total_registered: int
    total_confirmed: int
    active_events: int

    class Config:
        from_attributes = True
