from eventhorizon.models.events import Event
from eventhorizon.models.registrations import Registration, RegistrationStatus
from eventhorizon.models.users import User

__all__ = ["Event", "Registration", "RegistrationStatus", "User"]
