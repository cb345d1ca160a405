"""File storage for submitted checklist records.

Each submission is one JSON file named ``data_<token>.json`` where the
token is the millisecond timestamp of the submission. The same token is
used in the supervisor's validation link.
"""
import json
import logging
import re
import time
from pathlib import Path

from app.core.config import settings

logger = logging.getLogger(__name__)

FILE_ID_PATTERN = re.compile(r"^\d+$")
FILENAME_PATTERN = re.compile(r"^data_(\d+)\.json$")


def is_valid_file_id(file_id: str) -> bool:
    return bool(file_id) and bool(FILE_ID_PATTERN.match(file_id))


def filename_for(file_id: str) -> str:
    return f"data_{file_id}.json"


def file_id_from_filename(filename: str) -> str | None:
    match = FILENAME_PATTERN.match(filename or "")
    return match.group(1) if match else None


class SubmissionStore:
    """Reads and writes submission records under a data directory."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def path_for(self, file_id: str) -> Path:
        if not is_valid_file_id(file_id):
            raise ValueError(f"Invalid submission id: {file_id!r}")
        return self.data_dir / filename_for(file_id)

    def new_file_id(self) -> str:
        """Millisecond timestamp token not yet used by another submission."""
        stamp = int(time.time() * 1000)
        while self.path_for(str(stamp)).exists():
            stamp += 1
        return str(stamp)

    def exists(self, file_id: str) -> bool:
        return is_valid_file_id(file_id) and self.path_for(file_id).exists()

    def read_json(self, file_id: str) -> dict | None:
        """Return the stored record, or None if there is no such submission."""
        if not self.exists(file_id):
            return None
        return json.loads(self.path_for(file_id).read_text(encoding="utf-8"))

    def write_json(self, file_id: str, data: dict) -> Path:
        """Overwrite the record for ``file_id`` with ``data``."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(file_id)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.debug(f"Submission data saved to {path}")
        return path


def get_store() -> SubmissionStore:
    """Dependency for getting the submission store."""
    return SubmissionStore(settings.data_dir)
