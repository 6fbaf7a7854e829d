from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from fastapi.encoders import jsonable_encoder
from typing import Optional
from datetime import datetime, timezone

from healthcare_app.models import AuditLog
from healthcare_app.schemas import (
    AuditLogOut,
    AuditTrailOut,
    BreachNotificationIn,
    ConsentIn,
    EraseIn,
    ObjectIn,
    RectifyIn,
    RestrictIn,
)
from healthcare_app.services.gdpr_service import (
    apply_corrections,
    get_user_or_404,
    legal_hold_reason,
    log_gdpr_action,
    now_iso,
    user_data,
    user_data_xml,
)

router = APIRouter(prefix="/api/gdpr", tags=["gdpr"])


@router.get("/access/{user_id}")
async def access_data(user_id: str, request: Request, requestedBy: Optional[str] = Query(None)):
    """Right of access (Art. 15)."""
    user = await get_user_or_404(user_id)
    await log_gdpr_action(
        action="DATA_ACCESS_REQUEST", user_id=user_id, details={"requestedBy": requestedBy}, request=request
    )
    return {
        "message": "Data access request processed",
        "data": user_data(user),
        "processingDate": now_iso(),
    }


@router.put("/rectify/{user_id}")
async def rectify_data(user_id: str, payload: RectifyIn, request: Request):
    """Right to rectification (Art. 16)."""
    user = await get_user_or_404(user_id)
    updated_fields = apply_corrections(user, payload.corrections)
    user.updatedAt = datetime.now(timezone.utc)
    await user.save()
    await log_gdpr_action(
        action="DATA_RECTIFICATION",
        user_id=user_id,
        details=jsonable_encoder({"corrections": payload.corrections, "requestedBy": payload.requestedBy}),
        request=request,
    )
    return {
        "message": "Data rectification completed",
        "updatedFields": updated_fields,
        "rectificationDate": now_iso(),
    }


@router.delete("/erase/{user_id}")
async def erase_data(user_id: str, request: Request, payload: Optional[EraseIn] = None):
    """Right to erasure (Art. 17)."""
    payload = payload or EraseIn()
    user = await get_user_or_404(user_id)
    hold = legal_hold_reason(user)
    if hold:
        return JSONResponse(
            status_code=409,
            content={"message": "Erasure cannot be completed due to legal obligations", "reason": hold},
        )
    await user.delete()
    await log_gdpr_action(
        action="DATA_ERASURE",
        user_id=user_id,
        details={"reason": payload.reason, "requestedBy": payload.requestedBy},
        request=request,
    )
    return {"message": "Data erasure completed", "userId": user_id, "erasureDate": now_iso()}


@router.put("/restrict/{user_id}")
async def restrict_processing(user_id: str, payload: RestrictIn, request: Request):
    """Right to restriction of processing (Art. 18)."""
    user = await get_user_or_404(user_id)
    user.processingRestricted = True
    user.restrictionType = payload.restrictionType
    user.restrictionReason = payload.reason
    user.restrictionDate = datetime.now(timezone.utc)
    await user.save()
    await log_gdpr_action(
        action="DATA_RESTRICTION",
        user_id=user_id,
        details={
            "restrictionType": payload.restrictionType,
            "reason": payload.reason,
            "requestedBy": payload.requestedBy,
        },
        request=request,
    )
    return {
        "message": "Data processing restricted",
        "restrictionType": payload.restrictionType,
        "restrictionDate": now_iso(),
    }


@router.get("/portability/{user_id}")
async def export_data(
    user_id: str,
    request: Request,
    format: str = Query("json"),
    requestedBy: Optional[str] = Query(None),
):
    """Right to data portability (Art. 20): JSON or XML download."""
    user = await get_user_or_404(user_id)
    if format not in ("json", "xml"):
        raise HTTPException(status_code=400, detail="Unsupported format. Use 'json' or 'xml'")

    await log_gdpr_action(
        action="DATA_PORTABILITY",
        user_id=user_id,
        details={"format": format, "requestedBy": requestedBy},
        request=request,
    )

    export_date = datetime.now(timezone.utc)
    headers = {"Content-Disposition": f'attachment; filename="user-data-{user_id}.{format}"'}
    if format == "xml":
        return Response(
            content=user_data_xml(user, export_date),
            media_type="application/xml",
            headers=headers,
        )
    data = user_data(user)
    data["metadata"]["exportDate"] = export_date.isoformat()
    return JSONResponse(content=jsonable_encoder(data), headers=headers)


@router.put("/object/{user_id}")
async def object_to_processing(user_id: str, payload: ObjectIn, request: Request):
    """Right to object (Art. 21)."""
    user = await get_user_or_404(user_id)
    user.objectionFiled = True
    user.objectionType = payload.objectionType
    user.objectionReason = payload.reason
    user.objectionDate = datetime.now(timezone.utc)
    await user.save()
    await log_gdpr_action(
        action="DATA_OBJECTION",
        user_id=user_id,
        details={
            "objectionType": payload.objectionType,
            "reason": payload.reason,
            "requestedBy": payload.requestedBy,
        },
        request=request,
    )
    return {
        "message": "Objection recorded",
        "objectionType": payload.objectionType,
        "objectionDate": now_iso(),
    }


@router.post("/consent/{user_id}")
async def manage_consent(user_id: str, payload: ConsentIn, request: Request):
    """Grant, update or withdraw processing consent."""
    user = await get_user_or_404(user_id)
    now = datetime.now(timezone.utc)
    if payload.withdrawal:
        user.consentGiven = False
        user.consentWithdrawnDate = now
        user.dataProcessingPurposes = []
    else:
        user.consentGiven = payload.consentGiven
        user.consentDate = now
        user.dataProcessingPurposes = payload.purposes or []
    await user.save()

    await log_gdpr_action(
        action="CONSENT_WITHDRAWAL" if payload.withdrawal else "CONSENT_UPDATE",
        user_id=user_id,
        details={
            "consentGiven": payload.consentGiven,
            "purposes": payload.purposes,
            "withdrawal": payload.withdrawal,
            "requestedBy": payload.requestedBy,
        },
        request=request,
    )
    return {
        "message": "Consent withdrawn" if payload.withdrawal else "Consent updated",
        "consentGiven": user.consentGiven,
        "purposes": user.dataProcessingPurposes,
        "actionDate": now_iso(),
    }


@router.post("/breach-notification")
async def breach_notification(payload: BreachNotificationIn, request: Request):
    """Internal: record a detected breach for the 72h notification process."""
    await log_gdpr_action(
        action="DATA_BREACH_DETECTED",
        user_id="SYSTEM",
        details=jsonable_encoder({
            "breachDetails": payload.breachDetails,
            "affectedUsersCount": len(payload.affectedUsers),
            "notificationRequired": True,
        }),
        request=request,
    )
    now = datetime.now(timezone.utc)
    return {
        "message": "Breach notification logged",
        "breachId": f"breach-{int(now.timestamp() * 1000)}",
        "loggedAt": now.isoformat(),
        "notificationRequired": True,
    }


@router.get("/audit/{user_id}", response_model=AuditTrailOut)
async def audit_trail(
    user_id: str,
    startDate: Optional[datetime] = Query(None),
    endDate: Optional[datetime] = Query(None),
):
    """Latest 100 audit entries for a user; the date window applies only when both ends are given."""
    query = AuditLog.find(AuditLog.userId == user_id)
    if startDate and endDate:
        query = query.find(AuditLog.timestamp >= startDate, AuditLog.timestamp <= endDate)
    logs = await query.sort("-timestamp").limit(100).to_list()
    return AuditTrailOut(
        userId=user_id,
        auditLogs=[
            AuditLogOut(action=l.action, timestamp=l.timestamp, details=l.details, ipAddress=l.ipAddress)
            for l in logs
        ],
        totalLogs=len(logs),
    )
