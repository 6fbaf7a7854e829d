from .api import ApiError, AppointmentsClient
from .saved import SavedAppointment, SavedAppointmentsStore
from .session import BookingSession
from .views import (
    AllAppointmentsView,
    AppointmentItemView,
    NewAppointmentView,
    SavedAppointmentsView,
    ViewState,
)
