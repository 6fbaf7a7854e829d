from fastapi import APIRouter, HTTPException, status
from typing import List
from beanie import PydanticObjectId as OID, UpdateResponse
from beanie.operators import Set

from healthcare_app.models import Appointment
from healthcare_app.models.appointment import utc_now
from healthcare_app.schemas import AppointmentCreate, AppointmentOut, AppointmentUpdate, MessageOut
from healthcare_app.utils.logger import get_logger

logger = get_logger("appointments")

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


def _appointment_out(doc: Appointment) -> AppointmentOut:
    return AppointmentOut(
        id=str(doc.id),
        title=doc.title,
        description=doc.description,
        dateTime=doc.dateTime,
        clinic=doc.clinic,
        clinicName=doc.clinicName,
        image=doc.image,
        address=doc.address,
        doctor=doc.doctor,
        doctorSpecialty=doc.doctorSpecialty,
        createdAt=doc.createdAt,
        updatedAt=doc.updatedAt,
    )


def _parse_id(appointment_id: str) -> OID:
    # A malformed id can never match a stored document
    try:
        return OID(appointment_id)
    except Exception:
        raise HTTPException(status_code=404, detail="Appointment not found")


async def _get_or_404(appointment_id: str) -> Appointment:
    doc = await Appointment.get(_parse_id(appointment_id))
    if not doc:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return doc


@router.get("", response_model=List[AppointmentOut])
async def list_appointments():
    """All appointments, unfiltered and unpaginated."""
    items = await Appointment.find_all().to_list()
    return [_appointment_out(i) for i in items]


@router.post("", response_model=AppointmentOut, status_code=status.HTTP_201_CREATED)
async def create_appointment(payload: AppointmentCreate):
    doc = Appointment(**payload.model_dump())
    await doc.insert()
    logger.info(f"Appointment created: {doc.id} ({doc.clinic}, {doc.dateTime})")
    return _appointment_out(doc)


@router.get("/{appointment_id}", response_model=AppointmentOut)
async def get_appointment(appointment_id: str):
    doc = await _get_or_404(appointment_id)
    return _appointment_out(doc)


@router.put("/{appointment_id}", response_model=AppointmentOut)
async def update_appointment(appointment_id: str, payload: AppointmentUpdate):
    """Replace the fields that were sent; the rest stay as stored."""
    changes = payload.changes()
    changes["updatedAt"] = utc_now()
    # One find-and-modify: a document deleted in the meantime comes back as None
    doc = await Appointment.find_one(Appointment.id == _parse_id(appointment_id)).update(
        Set(changes), response_type=UpdateResponse.NEW_DOCUMENT
    )
    if not doc:
        raise HTTPException(status_code=404, detail="Appointment not found")
    logger.info(f"Appointment updated: {doc.id} fields={sorted(changes)}")
    return _appointment_out(doc)


@router.delete("/{appointment_id}", response_model=MessageOut)
async def delete_appointment(appointment_id: str):
    doc = await _get_or_404(appointment_id)
    await doc.delete()
    logger.info(f"Appointment deleted: {appointment_id}")
    return {"message": "Appointment deleted successfully"}
