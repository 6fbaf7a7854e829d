from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class User(Document):
    """Data subject for the GDPR endpoints.

    Everything is optional: records come from several intake paths and the
    rights endpoints must work on partial profiles too.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dateOfBirth: Optional[datetime] = None
    medicalId: Optional[str] = None

    consentGiven: Optional[bool] = None
    consentDate: Optional[datetime] = None
    consentWithdrawnDate: Optional[datetime] = None
    dataProcessingPurposes: List[str] = Field(default_factory=list)

    # Art. 18 restriction
    processingRestricted: bool = False
    restrictionType: Optional[str] = None
    restrictionReason: Optional[str] = None
    restrictionDate: Optional[datetime] = None

    # Art. 21 objection
    objectionFiled: bool = False
    objectionType: Optional[str] = None
    objectionReason: Optional[str] = None
    objectionDate: Optional[datetime] = None

    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updatedAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"


class AuditLog(Document):
    """Append-only trail of GDPR actions."""
    action: str
    userId: Indexed(str)
    timestamp: Indexed(datetime) = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: Dict[str, Any] = Field(default_factory=dict)
    ipAddress: Optional[str] = None
    userAgent: Optional[str] = None

    class Settings:
        name = "audit_logs"
