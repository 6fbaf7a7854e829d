from beanie import Document
from pydantic import Field
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time cut to the millisecond precision BSON dates keep."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class Appointment(Document):
    """A booked visit. Clinic and doctor details are copied in at booking time."""
    title: str
    description: str
    dateTime: str  # kept exactly as the client sent it
    clinic: str  # clinic code, e.g. "c1"
    clinicName: str
    image: str
    address: str
    doctor: str
    doctorSpecialty: str
    createdAt: datetime = Field(default_factory=utc_now)
    updatedAt: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "appointments"
