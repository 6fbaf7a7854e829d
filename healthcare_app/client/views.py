"""View-models for the booking pages.

Each class holds one page's state and the coroutines that move it between
states; whatever renders the page reads the attributes and calls the
methods. Network errors never propagate out of a view: they end up in
``error`` or go through the ``alert`` callback.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from healthcare_app.client.api import ApiError, AppointmentsClient
from healthcare_app.client.clinics import (
    CLINICS,
    DEFAULT_CLINIC_ID,
    Clinic,
    Doctor,
    build_appointment_payload,
    doctors_for_clinic,
)
from healthcare_app.client.helpers import format_date_time
from healthcare_app.client.saved import SavedAppointment, SavedAppointmentsStore
from healthcare_app.utils.logger import get_logger

logger = get_logger("client.views")

DELETE_CONFIRMATION = "Are you sure you want to delete this appointment? This action cannot be undone."
DELETE_FAILED = "Failed to delete appointment. Please try again."
LIST_FAILED = "Network response was not ok"
CREATE_FAILED = "Failed to create appointment"


class ViewState(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def _failure_text(exc: ApiError, http_failure: str) -> str:
    # Transport failures are shown verbatim, HTTP failures get a fixed text
    return exc.message if exc.is_network_error else http_failure


class AppointmentItemView:
    """One appointment card: save toggle and delete with confirmation."""

    def __init__(
        self,
        appointment: Dict[str, Any],
        *,
        client: AppointmentsClient,
        saved: SavedAppointmentsStore,
        confirm: Callable[[str], bool],
        alert: Callable[[str], None],
        on_delete: Optional[Callable[[str], None]] = None,
    ):
        self.appointment = appointment
        self.id: str = appointment["id"]
        self._client = client
        self._saved = saved
        self._confirm = confirm
        self._alert = alert
        self._on_delete = on_delete
        self.deleting = False

    @property
    def is_saved(self) -> bool:
        return self._saved.is_saved(self.id)

    @property
    def save_label(self) -> str:
        return "Remove from Saved" if self.is_saved else "Save Appointment"

    @property
    def delete_label(self) -> str:
        return "Deleting..." if self.deleting else "Delete Appointment"

    @property
    def controls_disabled(self) -> bool:
        return self.deleting

    @property
    def formatted_date_time(self) -> str:
        return format_date_time(self.appointment.get("dateTime"))

    def toggle_saved(self) -> None:
        if self.is_saved:
            self._saved.remove(self.id)
        else:
            self._saved.save(SavedAppointment.from_mapping(self.appointment))

    async def delete(self) -> bool:
        """Delete after confirmation. Returns True only if the server deleted it."""
        if not self._confirm(DELETE_CONFIRMATION):
            return False

        self.deleting = True
        try:
            await self._client.delete_appointment(self.id)
        except ApiError as e:
            logger.error(f"Error deleting appointment {self.id}: {e.message}")
            self._alert(DELETE_FAILED)
            return False
        finally:
            self.deleting = False

        # A deleted appointment should not linger among the bookmarks
        self._saved.remove(self.id)
        if self._on_delete:
            self._on_delete(self.id)
        return True


class AllAppointmentsView:
    """Landing page: every appointment on the server."""

    title = "Available Appointments"
    empty_message = "No appointments found. Book a new one!"

    def __init__(self, *, client: AppointmentsClient):
        self._client = client
        self.state = ViewState.LOADING
        self.appointments: List[Dict[str, Any]] = []
        self.error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.state == ViewState.SUCCESS and not self.appointments

    async def load(self) -> None:
        self.state = ViewState.LOADING
        self.error = None
        try:
            data = await self._client.list_appointments()
        except ApiError as e:
            logger.error(f"Error fetching appointments: {e.message}")
            self.error = _failure_text(e, LIST_FAILED)
            self.state = ViewState.ERROR
            return
        try:
            self.appointments = [{"id": a["_id"], **a} for a in data]
        except (KeyError, TypeError) as e:
            logger.error(f"Malformed appointments payload: {e!r}")
            self.error = LIST_FAILED
            self.state = ViewState.ERROR
            return
        self.state = ViewState.SUCCESS

    async def retry(self) -> None:
        await self.load()

    def handle_deleted(self, appointment_id: str) -> None:
        self.appointments = [a for a in self.appointments if a["id"] != appointment_id]


@dataclass
class AppointmentFormData:
    title: str = ""
    description: str = ""
    date_time: str = ""
    clinic_id: str = DEFAULT_CLINIC_ID
    doctor_id: Optional[str] = None


class NewAppointmentView:
    """Booking form page."""

    title = "Book New Appointment"

    def __init__(self, *, client: AppointmentsClient, navigate: Callable[[str], None]):
        self._client = client
        self._navigate = navigate
        self.form = AppointmentFormData()
        self.select_clinic(self.form.clinic_id)
        self.submitting = False
        self.error: Optional[str] = None

    @property
    def clinics(self) -> List[Clinic]:
        return CLINICS

    @property
    def available_doctors(self) -> List[Doctor]:
        return doctors_for_clinic(self.form.clinic_id)

    @property
    def button_label(self) -> str:
        return "Submitting..." if self.submitting else "Book Appointment"

    @property
    def controls_disabled(self) -> bool:
        return self.submitting

    def select_clinic(self, clinic_id: str) -> None:
        """Switching clinic preselects that clinic's first doctor."""
        self.form.clinic_id = clinic_id
        doctors = doctors_for_clinic(clinic_id)
        self.form.doctor_id = doctors[0].id if doctors else None

    def select_doctor(self, doctor_id: str) -> None:
        self.form.doctor_id = doctor_id

    async def submit(self) -> bool:
        """POST the form. On failure the entered values stay in ``form``."""
        if self.submitting:
            return False
        try:
            payload = build_appointment_payload(
                title=self.form.title,
                description=self.form.description,
                date_time=self.form.date_time,
                clinic_id=self.form.clinic_id,
                doctor_id=self.form.doctor_id,
            )
        except LookupError as e:
            self.error = str(e)
            return False

        self.submitting = True
        self.error = None
        try:
            await self._client.create_appointment(payload)
        except ApiError as e:
            self.error = _failure_text(e, CREATE_FAILED)
            return False
        finally:
            self.submitting = False

        self._navigate("/")
        return True


class SavedAppointmentsView:
    """The user's bookmarks for this session."""

    title = "My Saved Appointments"
    empty_message = "You have no saved appointments yet. Book an appointment and save it."

    def __init__(self, *, saved: SavedAppointmentsStore):
        self._saved = saved

    @property
    def appointments(self) -> List[SavedAppointment]:
        return self._saved.saved_appointments

    @property
    def is_empty(self) -> bool:
        return self._saved.total == 0
