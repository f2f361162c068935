import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Union

from app.core.errors import StorageError
from app.core.logger import logger

Booking = Dict[str, Any]

BOOKINGS_FILE = "data/bookings.json"


class JsonStore:
    """
    Durable storage of the booking collection as one JSON array on disk.
    No locking happens here; BookingService serializes access.
    """

    def __init__(self, path: Union[str, Path] = BOOKINGS_FILE):
        self.path = Path(path)

    def load(self) -> List[Booking]:
        """
        Reads all bookings.
        A missing or corrupt document counts as an empty collection.
        Raises StorageError if the file exists but cannot be read.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"❌ Cannot read bookings from {self.path}: {e}")
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"⚠️ {self.path} is not valid JSON ({e}), starting from an empty list")
            return []

        if not isinstance(data, list):
            logger.warning(f"⚠️ {self.path} does not hold a JSON array, starting from an empty list")
            return []
        return data

    def save(self, bookings: List[Booking]) -> None:
        """
        Writes the full collection, replacing the previous document in one step.
        """
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(bookings, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.error(f"❌ Cannot write bookings to {self.path}: {e}")
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
