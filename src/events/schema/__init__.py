"""Events schema package.

Schemas are re-exported here so callers can use ``events.schema.<Name>``.
"""

from .event import (
    EventEditSchema,
    EventSchema,
    MinimalEventSchema,
    OccurrenceEditSchema,
    OccurrenceSchema,
    PhoneString,
    ScheduleEditSchema,
)
from .registration import (
    AttendeeSchema,
    CheckInResponseSchema,
    PassQuerySchema,
    PublicPassSchema,
    RegistrationCreateSchema,
    RegistrationSchema,
    RegistrationStatusUpdateSchema,
)

__all__ = [
    "AttendeeSchema",
    "CheckInResponseSchema",
    "EventEditSchema",
    "EventSchema",
    "MinimalEventSchema",
    "OccurrenceEditSchema",
    "OccurrenceSchema",
    "PassQuerySchema",
    "PhoneString",
    "PublicPassSchema",
    "RegistrationCreateSchema",
    "RegistrationSchema",
    "RegistrationStatusUpdateSchema",
    "ScheduleEditSchema",
]
