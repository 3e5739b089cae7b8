import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set

from pydantic import TypeAdapter, ValidationError

from app.core.exceptions import DuplicateCode, StorageFailure
from app.db.base import RecordStore
from app.schemas.url import UrlRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(List[UrlRecord])


class JsonFileStore(RecordStore):
    """Keeps every record in one JSON list, read whole and rewritten whole.

    Mutations run under a process-wide lock. Writes land in a temp file that
    is moved over the original, so unlocked readers always see a complete
    snapshot.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _read(self) -> List[UrlRecord]:
        if not self.path.exists():
            with self._lock:
                if not self.path.exists():
                    logger.info(f"Record file {self.path} not found, initializing empty store")
                    self._write([])
            return []

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read record file {self.path}: {e}")
            raise StorageFailure(f"Failed to read record store: {e}") from e

        try:
            return _RECORDS.validate_json(raw)
        except ValidationError as e:
            # Never fall back to an empty list here, the next write would destroy the data
            logger.error(f"Record file {self.path} is corrupt: {e}")
            raise StorageFailure(f"Record store {self.path} is unreadable") from e

    def _write(self, records: List[UrlRecord]) -> None:
        payload = _RECORDS.dump_json(records, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb", dir=self.path.parent, prefix=f".{self.path.name}.", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Failed to write record file {self.path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageFailure(f"Failed to write record store: {e}") from e

    @staticmethod
    def _index_of(records: List[UrlRecord], code: str) -> Optional[int]:
        for i, record in enumerate(records):
            if record.code == code:
                return i
        return None

    def list_records(self) -> List[UrlRecord]:
        return self._read()

    def get_record(self, code: str) -> Optional[UrlRecord]:
        for record in self._read():
            if record.code == code:
                return record
        return None

    def existing_codes(self) -> Set[str]:
        return {record.code for record in self._read()}

    def insert_record(self, record: UrlRecord) -> UrlRecord:
        with self._lock:
            records = self._read()
            if self._index_of(records, record.code) is not None:
                raise DuplicateCode(record.code)
            records.append(record)
            self._write(records)
        return record

    def update_record(self, code, updated_at, url=None, new_code=None):
        with self._lock:
            records = self._read()
            i = self._index_of(records, code)
            if i is None:
                return None
            changes = {"updated_at": updated_at}
            if url is not None:
                changes["url"] = url
            if new_code is not None and new_code != code:
                if self._index_of(records, new_code) is not None:
                    raise DuplicateCode(new_code)
                changes["code"] = new_code
            records[i] = records[i].model_copy(update=changes)
            self._write(records)
            return records[i]

    def record_click(self, code: str, accessed_at: datetime) -> Optional[UrlRecord]:
        with self._lock:
            records = self._read()
            i = self._index_of(records, code)
            if i is None:
                return None
            current = records[i]
            records[i] = current.model_copy(
                update={"clicks": current.clicks + 1, "last_accessed": accessed_at}
            )
            self._write(records)
            return records[i]

    def delete_record(self, code: str) -> Optional[UrlRecord]:
        with self._lock:
            records = self._read()
            i = self._index_of(records, code)
            if i is None:
                return None
            removed = records.pop(i)
            self._write(records)
            return removed
