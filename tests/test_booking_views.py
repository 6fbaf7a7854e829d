import httpx
import pytest
from httpx import ASGITransport

from healthcare_app.client import (
    AppointmentsClient,
    BookingSession,
    SavedAppointmentsStore,
    ViewState,
)
from healthcare_app.client.views import DELETE_CONFIRMATION, DELETE_FAILED
from healthcare_app.main import app


class Ui:
    """Records what the pages asked the user interface to do."""

    def __init__(self, confirm_answer: bool = True):
        self.confirm_answer = confirm_answer
        self.prompts = []
        self.alerts = []
        self.visited = []

    def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.confirm_answer

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def navigate(self, path: str) -> None:
        self.visited.append(path)


def _session(client: AppointmentsClient, ui: Ui) -> BookingSession:
    return BookingSession(client, confirm=ui.confirm, alert=ui.alert, navigate=ui.navigate)


@pytest.fixture
async def live_client(db):
    """Client wired straight into the FastAPI app over an in-memory store."""
    client = AppointmentsClient("http://test", transport=ASGITransport(app=app))
    yield client
    await client.aclose()


def _client_for(handler) -> AppointmentsClient:
    return AppointmentsClient("http://test", transport=httpx.MockTransport(handler))


def _refuse_connection(request: httpx.Request):
    raise httpx.ConnectError("Connection refused", request=request)


async def _book(session: BookingSession, title: str = "Annual Checkup") -> None:
    page = session.new_appointment()
    page.form.title = title
    page.form.description = "Routine"
    page.form.date_time = "2024-01-15T10:00"
    assert await page.submit()


async def test_list_page_empty_then_populated(live_client):
    ui = Ui()
    session = _session(live_client, ui)

    page = session.all_appointments()
    assert page.state == ViewState.LOADING
    await page.load()
    assert page.state == ViewState.SUCCESS
    assert page.is_empty

    await _book(session)
    await page.retry()
    assert not page.is_empty
    [item] = page.appointments
    assert item["id"] == item["_id"]
    assert item["clinicName"] == "City Medical Center"


async def test_list_page_network_failure_and_retry():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(200, json=[])

    page = _session(_client_for(handler), Ui()).all_appointments()
    await page.load()
    assert page.state == ViewState.ERROR
    assert page.error == "Connection refused"

    await page.retry()
    assert page.state == ViewState.SUCCESS
    assert page.error is None
    assert len(calls) == 2


async def test_list_page_http_failure_message():
    page = _session(_client_for(lambda r: httpx.Response(500, json={"message": "Internal server error"})), Ui()).all_appointments()
    await page.load()
    assert page.state == ViewState.ERROR
    assert page.error == "Network response was not ok"


async def test_new_appointment_success_navigates_home(live_client):
    ui = Ui()
    session = _session(live_client, ui)
    page = session.new_appointment()
    page.select_clinic("c3")
    page.select_doctor("d6")
    page.form.title = "Knee pain"
    page.form.description = "Since last week"
    page.form.date_time = "2024-02-01T08:15"

    assert await page.submit()
    assert ui.visited == ["/"]
    assert not page.submitting
    assert page.button_label == "Book Appointment"

    [stored] = await live_client.list_appointments()
    assert stored["clinic"] == "c3"
    assert stored["doctor"] == "Dr. James Williams"
    assert stored["doctorSpecialty"] == "Orthopedist"


async def test_new_appointment_rejected_keeps_form(live_client):
    ui = Ui()
    page = _session(live_client, ui).new_appointment()
    page.form.title = "Checkup"
    page.form.date_time = "2024-02-01T08:15"
    # description left empty

    assert not await page.submit()
    assert page.error == "Failed to create appointment"
    assert ui.visited == []
    assert not page.controls_disabled
    assert page.form.title == "Checkup"
    assert page.form.date_time == "2024-02-01T08:15"


async def test_new_appointment_network_error_is_shown_verbatim():
    page = _session(_client_for(_refuse_connection), Ui()).new_appointment()
    page.form.title, page.form.description, page.form.date_time = "t", "d", "x"
    assert not await page.submit()
    assert page.error == "Connection refused"


async def test_new_appointment_locks_while_submitting():
    seen = {}

    async def handler(request):
        seen["label"] = page.button_label
        seen["disabled"] = page.controls_disabled
        seen["second"] = await page.submit()
        return httpx.Response(201, json={})

    page = _session(_client_for(handler), Ui()).new_appointment()
    page.form.title, page.form.description, page.form.date_time = "t", "d", "x"
    assert await page.submit()
    assert seen == {"label": "Submitting...", "disabled": True, "second": False}


def test_switching_clinic_preselects_first_doctor():
    page = _session(_client_for(lambda r: httpx.Response(200, json=[])), Ui()).new_appointment()
    assert page.form.doctor_id == "d1"
    page.select_clinic("c2")
    assert page.form.doctor_id == "d3"
    assert [d.id for d in page.available_doctors] == ["d3", "d4"]


async def test_item_save_toggle(live_client):
    session = _session(live_client, Ui())
    await _book(session)
    page = session.all_appointments()
    await page.load()
    [item] = session.list_items(page)

    assert item.save_label == "Save Appointment"
    item.toggle_saved()
    assert item.is_saved
    assert item.save_label == "Remove from Saved"
    assert session.saved_appointments().appointments[0].title == "Annual Checkup"

    item.toggle_saved()
    assert not item.is_saved
    assert session.saved_appointments().is_empty


async def test_delete_declined_makes_no_call():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"message": "Appointment deleted successfully"})

    ui = Ui(confirm_answer=False)
    item = _session(_client_for(handler), ui).appointment_item({"id": "a1", "title": "t"})

    assert not await item.delete()
    assert ui.prompts == [DELETE_CONFIRMATION]
    assert calls == []


async def test_delete_cascades_into_saved_and_list(live_client):
    ui = Ui()
    session = _session(live_client, ui)
    await _book(session, "First")
    await _book(session, "Second")
    page = session.all_appointments()
    await page.load()
    first, second = session.list_items(page)
    first.toggle_saved()
    second.toggle_saved()

    assert await first.delete()

    assert [a["title"] for a in page.appointments] == ["Second"]
    assert [a.title for a in session.saved.saved_appointments] == ["Second"]
    assert not first.deleting
    assert ui.alerts == []
    assert len(await live_client.list_appointments()) == 1


async def test_delete_failure_alerts_and_keeps_state():
    ui = Ui()
    saved = SavedAppointmentsStore()
    session = BookingSession(
        _client_for(lambda r: httpx.Response(404, json={"message": "Appointment not found"})),
        confirm=ui.confirm,
        alert=ui.alert,
        navigate=ui.navigate,
        saved=saved,
    )
    removed = []
    item = session.appointment_item({"id": "a1", "title": "t"}, on_delete=removed.append)
    item.toggle_saved()

    assert not await item.delete()
    assert ui.alerts == [DELETE_FAILED]
    assert removed == []
    assert saved.is_saved("a1")
    assert item.delete_label == "Delete Appointment"


async def test_delete_shows_deleting_state_in_flight():
    seen = {}

    def handler(request):
        seen["label"] = item.delete_label
        seen["disabled"] = item.controls_disabled
        return httpx.Response(200, json={"message": "Appointment deleted successfully"})

    item = _session(_client_for(handler), Ui()).appointment_item({"id": "a1", "title": "t"})
    assert await item.delete()
    assert seen == {"label": "Deleting...", "disabled": True}
    assert not item.deleting


async def test_saved_survives_server_side_delete(live_client):
    session = _session(live_client, Ui())
    await _book(session)
    [stored] = await live_client.list_appointments()
    session.appointment_item({"id": stored["_id"], **stored}).toggle_saved()

    await live_client.delete_appointment(stored["_id"])

    assert session.saved.is_saved(stored["_id"])


def test_saved_page_empty_message():
    page = _session(_client_for(lambda r: httpx.Response(200, json=[])), Ui()).saved_appointments()
    assert page.is_empty
    assert page.empty_message == "You have no saved appointments yet. Book an appointment and save it."


async def test_list_page_non_json_body_is_an_error():
    page = _session(_client_for(lambda r: httpx.Response(200, text="<html>proxy error</html>")), Ui()).all_appointments()
    await page.load()
    assert page.state == ViewState.ERROR
    assert page.error == "Network response was not ok"


@pytest.mark.parametrize("payload", [[{"title": "no id"}], {"message": "not a list"}, None])
async def test_list_page_malformed_payload_is_an_error(payload):
    page = _session(_client_for(lambda r: httpx.Response(200, json=payload)), Ui()).all_appointments()
    await page.load()
    assert page.state == ViewState.ERROR
    assert page.error == "Network response was not ok"
    assert page.appointments == []
