import threading
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class SavedAppointment:
    """Bookmark copy of an appointment, keyed by ``id``."""
    id: str
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    address: Optional[str] = None
    doctor: Optional[str] = None
    doctorSpecialty: Optional[str] = None
    clinicName: Optional[str] = None
    dateTime: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SavedAppointment":
        """Shallow-copy the bookmark fields out of an appointment dict."""
        return cls(**{f.name: data.get(f.name) for f in fields(cls)})


Listener = Callable[[List[SavedAppointment]], None]


class SavedAppointmentsStore:
    """Per-session set of bookmarked appointments.

    Never synced to the server. Every mutation is a function of the previous
    list applied under one lock, so concurrent saves cannot drop each other.
    """

    def __init__(self):
        self._items: List[SavedAppointment] = []
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

    @property
    def saved_appointments(self) -> List[SavedAppointment]:
        with self._lock:
            return list(self._items)

    @property
    def total(self) -> int:
        with self._lock:
            return len(self._items)

    def _update(self, updater: Callable[[List[SavedAppointment]], List[SavedAppointment]]) -> None:
        with self._lock:
            previous = self._items
            self._items = updater(previous)
            changed = self._items is not previous
            snapshot = list(self._items)
            listeners = list(self._listeners)
        if changed:
            for listener in listeners:
                listener(snapshot)

    def save(self, appointment: SavedAppointment | Mapping[str, Any]) -> None:
        """Add a bookmark; saving an id that is already there changes nothing."""
        if not isinstance(appointment, SavedAppointment):
            appointment = SavedAppointment.from_mapping(appointment)

        def add(items):
            if any(a.id == appointment.id for a in items):
                return items
            return items + [appointment]

        self._update(add)

    def remove(self, appointment_id: str) -> None:
        def drop(items):
            kept = [a for a in items if a.id != appointment_id]
            return kept if len(kept) != len(items) else items

        self._update(drop)

    def is_saved(self, appointment_id: str) -> bool:
        with self._lock:
            return any(a.id == appointment_id for a in self._items)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new list after every effective change."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(a) for a in self.saved_appointments]
