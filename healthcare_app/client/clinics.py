"""Static clinic and doctor directory.

The server never joins against this table: the booking form copies the
display fields into each appointment when it is submitted.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Clinic:
    id: str
    name: str
    address: str
    image: str
    specialty: str


@dataclass(frozen=True)
class Doctor:
    id: str
    name: str
    specialty: str


CLINICS: List[Clinic] = [
    Clinic(
        id="c1",
        name="City Medical Center",
        address="123 Main St, Downtown",
        image="https://images.unsplash.com/photo-1523050854058-8df90110c9f1?q=80&w=500&auto=format&fit=crop",
        specialty="General Medicine & Pediatrics",
    ),
    Clinic(
        id="c2",
        name="Westside Health Clinic",
        address="456 Park Ave, Westside",
        image="https://images.unsplash.com/photo-1519494026892-80bbd2d6fd0d?q=80&w=500&auto=format&fit=crop",
        specialty="Cardiology & Dermatology",
    ),
    Clinic(
        id="c3",
        name="Riverside Hospital",
        address="789 River Rd, Riverside",
        image="https://images.unsplash.com/photo-1586773860418-d37222d8fce3?q=80&w=500&auto=format&fit=crop",
        specialty="Neurology & Orthopedics",
    ),
]

DOCTORS: Dict[str, List[Doctor]] = {
    "c1": [
        Doctor(id="d1", name="Dr. Sarah Johnson", specialty="General Practitioner"),
        Doctor(id="d2", name="Dr. Michael Chen", specialty="Pediatrician"),
    ],
    "c2": [
        Doctor(id="d3", name="Dr. Amanda Wilson", specialty="Cardiologist"),
        Doctor(id="d4", name="Dr. Robert Garcia", specialty="Dermatologist"),
    ],
    "c3": [
        Doctor(id="d5", name="Dr. Emily Patel", specialty="Neurologist"),
        Doctor(id="d6", name="Dr. James Williams", specialty="Orthopedist"),
    ],
}

DEFAULT_CLINIC_ID = "c1"


def get_clinic_by_id(clinic_id: str) -> Optional[Clinic]:
    return next((c for c in CLINICS if c.id == clinic_id), None)


def get_doctor_by_id(doctor_id: str) -> Optional[Doctor]:
    for doctors in DOCTORS.values():
        for doctor in doctors:
            if doctor.id == doctor_id:
                return doctor
    return None


def get_all_doctors() -> List[Doctor]:
    return [d for doctors in DOCTORS.values() for d in doctors]


def doctors_for_clinic(clinic_id: str) -> List[Doctor]:
    return list(DOCTORS.get(clinic_id, []))


def build_appointment_payload(
    *,
    title: str,
    description: str,
    date_time: str,
    clinic_id: str,
    doctor_id: Optional[str] = None,
) -> Dict[str, str]:
    """Join the form input with the directory into the 9-field request body.

    When no doctor is picked the clinic's first doctor is used, matching the
    form's preselection.
    """
    clinic = get_clinic_by_id(clinic_id)
    if clinic is None:
        raise LookupError(f"Unknown clinic: {clinic_id}")
    doctors = doctors_for_clinic(clinic_id)
    if doctor_id is None and doctors:
        doctor = doctors[0]
    else:
        doctor = next((d for d in doctors if d.id == doctor_id), None)
    if doctor is None:
        raise LookupError(f"Unknown doctor for clinic {clinic_id}: {doctor_id}")
    return {
        "title": title,
        "description": description,
        "dateTime": date_time,
        "clinic": clinic.id,
        "clinicName": clinic.name,
        "image": clinic.image,
        "address": clinic.address,
        "doctor": doctor.name,
        "doctorSpecialty": doctor.specialty,
    }
