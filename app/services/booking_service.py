import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

from filelock import FileLock

from app.core.errors import InvalidPayload, MissingIdError, NotFoundError, StorageError
from app.core.logger import logger
from app.services.store_service import BOOKINGS_FILE, Booking, JsonStore

audit = logger.bind(audit=True)


def _stored_id(booking: Any) -> Optional[int]:
    """The booking's id if it is a plain integer (not a bool or float)."""
    if isinstance(booking, dict) and type(booking.get("id")) is int:
        return booking["id"]
    return None


class BookingService:
    """
    Create, list and delete bookings kept in a JsonStore.

    Every operation loads the whole collection, works on it in memory and
    (when mutating) saves it back. The load -> mutate -> save sequence runs
    under a thread lock plus a lock file next to the document, so neither
    concurrent requests nor a second process (the admin panel) can lose
    each other's writes.
    """

    def __init__(self, store: JsonStore = None):
        self.store = store or JsonStore(BOOKINGS_FILE)
        self._lock = threading.Lock()
        self._file_lock = FileLock(f"{self.store.path}.lock")
        self._last_id = 0

    @contextmanager
    def _exclusive(self):
        with self._lock:
            try:
                self.store.path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"Cannot create {self.store.path.parent}: {e}") from e
            with self._file_lock:
                yield

    def _next_id(self, now: datetime, bookings: List[Booking]) -> int:
        """
        Millisecond timestamp, bumped past the last issued id and past any id
        already stored so two bookings in the same millisecond stay distinct.
        """
        candidate = int(now.timestamp() * 1000)
        stored = {i for i in map(_stored_id, bookings) if i is not None}
        if candidate <= self._last_id or candidate in stored:
            candidate = max(stored | {self._last_id, candidate}) + 1
        self._last_id = candidate
        return candidate

    def create(self, payload: Any) -> Booking:
        if not isinstance(payload, dict):
            raise InvalidPayload(f"Expected a JSON object, got {type(payload).__name__}")

        with self._exclusive():
            bookings = self.store.load()
            now = datetime.now(timezone.utc)

            booking = dict(payload)
            booking["id"] = self._next_id(now, bookings)
            booking["timestamp"] = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")

            bookings.append(booking)
            self.store.save(bookings)

        audit.info(f"📅 Booking {booking['id']} created ({len(bookings)} stored)")
        return booking

    def list(self) -> List[Booking]:
        with self._exclusive():
            return self.store.load()

    def delete(self, booking_id: Optional[int]) -> int:
        """
        Removes every booking with the given id and returns how many went away.
        Storage is only rewritten when something matched.
        """
        if booking_id is None:
            raise MissingIdError()

        with self._exclusive():
            bookings = self.store.load()
            remaining = [b for b in bookings if _stored_id(b) != booking_id]
            removed = len(bookings) - len(remaining)
            if not removed:
                raise NotFoundError(f"No booking with id {booking_id}")
            self.store.save(remaining)

        audit.info(f"🗑️ Booking {booking_id} deleted ({removed} record(s))")
        return removed


booking_service = BookingService()


def get_booking_service() -> BookingService:
    return booking_service
