from typing import Any, Callable, Dict, Optional

from healthcare_app.client.api import AppointmentsClient
from healthcare_app.client.saved import SavedAppointmentsStore
from healthcare_app.client.views import (
    AllAppointmentsView,
    AppointmentItemView,
    NewAppointmentView,
    SavedAppointmentsView,
)


class BookingSession:
    """Everything one user session shares: the API client and the bookmark store.

    Build it once at start-up and hand it to the pages; views get their
    collaborators from here instead of module globals.
    """

    def __init__(
        self,
        client: AppointmentsClient,
        *,
        confirm: Callable[[str], bool],
        alert: Callable[[str], None],
        navigate: Callable[[str], None],
        saved: Optional[SavedAppointmentsStore] = None,
    ):
        self.client = client
        self.saved = saved or SavedAppointmentsStore()
        self.confirm = confirm
        self.alert = alert
        self.navigate = navigate

    async def aclose(self) -> None:
        await self.client.aclose()

    def all_appointments(self) -> AllAppointmentsView:
        return AllAppointmentsView(client=self.client)

    def new_appointment(self) -> NewAppointmentView:
        return NewAppointmentView(client=self.client, navigate=self.navigate)

    def saved_appointments(self) -> SavedAppointmentsView:
        return SavedAppointmentsView(saved=self.saved)

    def appointment_item(
        self,
        appointment: Dict[str, Any],
        on_delete: Optional[Callable[[str], None]] = None,
    ) -> AppointmentItemView:
        return AppointmentItemView(
            appointment,
            client=self.client,
            saved=self.saved,
            confirm=self.confirm,
            alert=self.alert,
            on_delete=on_delete,
        )

    def list_items(self, page: AllAppointmentsView) -> list[AppointmentItemView]:
        """Item views for a loaded list page, wired to drop themselves on delete."""
        return [self.appointment_item(a, on_delete=page.handle_deleted) for a in page.appointments]
