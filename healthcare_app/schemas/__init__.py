from datetime import datetime, timezone
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import Any, Dict, List, Optional

# -------------------- Appointment Schemas --------------------

APPOINTMENT_FIELDS = (
    "title",
    "description",
    "dateTime",
    "clinic",
    "clinicName",
    "image",
    "address",
    "doctor",
    "doctorSpecialty",
)


class _RequiredFields(BaseModel):
    @field_validator(*APPOINTMENT_FIELDS, mode="before", check_fields=False)
    @classmethod
    def require_value(cls, value: Any, info: ValidationInfo) -> Any:
        # An explicit null or empty string counts as missing
        if value is None or value == "":
            raise ValueError(f"Path `{info.field_name}` is required.")
        return value


class AppointmentCreate(_RequiredFields):
    """Body of POST /api/appointments: every field must be present and non-empty."""

    title: str
    description: str
    dateTime: str
    clinic: str
    clinicName: str
    image: str
    address: str
    doctor: str
    doctorSpecialty: str


class AppointmentUpdate(_RequiredFields):
    """Body of PUT /api/appointments/{id}.

    Any subset of fields may be sent; the ones that are sent go through the
    same checks as on create.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    dateTime: Optional[str] = None
    clinic: Optional[str] = None
    clinicName: Optional[str] = None
    image: Optional[str] = None
    address: Optional[str] = None
    doctor: Optional[str] = None
    doctorSpecialty: Optional[str] = None

    def changes(self) -> Dict[str, str]:
        """Only the fields the client actually sent."""
        return self.model_dump(include=self.model_fields_set)


class AppointmentOut(BaseModel):
    id: str = Field(alias="_id")
    title: str
    description: str
    dateTime: str
    clinic: str
    clinicName: str
    image: str
    address: str
    doctor: str
    doctorSpecialty: str
    createdAt: datetime
    updatedAt: datetime

    class Config:
        populate_by_name = True

    @field_validator("createdAt", "updatedAt")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # Mongo hands dates back naive; they were stored as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class MessageOut(BaseModel):
    message: str

# -------------------- GDPR Schemas --------------------

class PersonalDataPatch(BaseModel):
    """Typed view over the personal-data part of a rectification."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dateOfBirth: Optional[datetime] = None
    medicalId: Optional[str] = None


class RectifyIn(BaseModel):
    corrections: Dict[str, Any] = Field(default_factory=dict)
    requestedBy: Optional[str] = None


class EraseIn(BaseModel):
    reason: Optional[str] = None
    requestedBy: Optional[str] = None


class RestrictIn(BaseModel):
    restrictionType: Optional[str] = None
    reason: Optional[str] = None
    requestedBy: Optional[str] = None


class ObjectIn(BaseModel):
    objectionType: Optional[str] = None
    reason: Optional[str] = None
    requestedBy: Optional[str] = None


class ConsentIn(BaseModel):
    consentGiven: Optional[bool] = None
    purposes: Optional[List[str]] = None
    withdrawal: bool = False
    requestedBy: Optional[str] = None


class BreachNotificationIn(BaseModel):
    breachDetails: Any = None
    affectedUsers: List[Any] = Field(default_factory=list)


class AuditLogOut(BaseModel):
    action: str
    timestamp: datetime
    details: Dict[str, Any] = Field(default_factory=dict)
    ipAddress: Optional[str] = None


class AuditTrailOut(BaseModel):
    userId: str
    auditLogs: List[AuditLogOut]
    totalLogs: int
