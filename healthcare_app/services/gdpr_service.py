from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from fastapi import HTTPException, Request
from beanie import PydanticObjectId as OID
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from healthcare_app.models import AuditLog, User
from healthcare_app.schemas import PersonalDataPatch
from healthcare_app.utils.logger import get_logger

logger = get_logger("gdpr")


async def get_user_or_404(user_id: str) -> User:
    try:
        oid = OID(user_id)
    except Exception:
        raise HTTPException(status_code=404, detail="User not found")
    user = await User.get(oid)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def log_gdpr_action(
    *,
    action: str,
    user_id: str,
    details: Dict[str, Any],
    request: Request,
) -> None:
    """Append an audit entry. A failed audit write never fails the request."""
    entry = AuditLog(
        action=action,
        userId=user_id,
        details=details,
        ipAddress=request.client.host if request.client else None,
        userAgent=request.headers.get("user-agent"),
    )
    try:
        await entry.insert()
    except PyMongoError as e:
        logger.error(f"Audit log error ({action}, {user_id}): {e}")


def legal_hold_reason(user: User) -> Optional[str]:
    """Reason erasure must be refused, or None when it may go ahead.

    No legal obligation, public interest or research exemption is tracked
    yet, so erasure is always allowed.
    """
    return None


def user_data(user: User) -> Dict[str, Any]:
    return {
        "personalData": {
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "dateOfBirth": user.dateOfBirth,
            "medicalId": user.medicalId,
        },
        "consent": {
            "given": user.consentGiven,
            "date": user.consentDate,
            "purposes": user.dataProcessingPurposes,
        },
        "metadata": {
            "createdAt": user.createdAt,
            "updatedAt": user.updatedAt,
        },
    }


def _xml_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return escape(str(value))


def user_data_xml(user: User, export_date: datetime) -> str:
    """Portable export in the XML flavour."""
    purposes = ", ".join(user.dataProcessingPurposes or [])
    return (
        "<user-data>\n"
        "  <personal-data>\n"
        f"    <name>{_xml_value(user.name)}</name>\n"
        f"    <email>{_xml_value(user.email)}</email>\n"
        f"    <phone>{_xml_value(user.phone)}</phone>\n"
        f"    <date-of-birth>{_xml_value(user.dateOfBirth)}</date-of-birth>\n"
        f"    <medical-id>{_xml_value(user.medicalId)}</medical-id>\n"
        "  </personal-data>\n"
        "  <consent>\n"
        f"    <given>{_xml_value(user.consentGiven)}</given>\n"
        f"    <date>{_xml_value(user.consentDate)}</date>\n"
        f"    <purposes>{_xml_value(purposes)}</purposes>\n"
        "  </consent>\n"
        "  <metadata>\n"
        f"    <created-at>{_xml_value(user.createdAt)}</created-at>\n"
        f"    <updated-at>{_xml_value(user.updatedAt)}</updated-at>\n"
        f"    <export-date>{_xml_value(export_date)}</export-date>\n"
        "  </metadata>\n"
        "</user-data>"
    )


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def apply_corrections(user: User, corrections: Dict[str, Any]) -> List[str]:
    """Copy known personal-data corrections onto the user; unknown keys are skipped."""
    known = {k: v for k, v in corrections.items() if k in PersonalDataPatch.model_fields}
    try:
        patch = PersonalDataPatch(**known)
    except ValidationError as e:
        field = ".".join(str(p) for p in e.errors()[0]["loc"])
        raise HTTPException(status_code=400, detail=f"Invalid correction for {field}")
    for key in known:
        setattr(user, key, getattr(patch, key))
    return list(known)
