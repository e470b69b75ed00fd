from .attendee import Attendee
from .event import Event, Occurrence
from .registration import PassCounter, Registration, RegistrationOccurrence

__all__ = [
    "Attendee",
    "Event",
    "Occurrence",
    "PassCounter",
    "Registration",
    "RegistrationOccurrence",
]
