from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Set

from app.schemas.url import UrlRecord


class RecordStore(ABC):
    """Persistence boundary owned by the registry.

    Every mutating method is atomic with respect to other calls on the same
    store: inserts and renames never commit a duplicate code (they raise
    ``DuplicateCode`` instead) and click increments are never lost. Methods
    addressing a code that is not live return ``None``. Backend failures are
    raised as ``StorageFailure``.
    """

    @abstractmethod
    def list_records(self) -> List[UrlRecord]:
        ...

    @abstractmethod
    def get_record(self, code: str) -> Optional[UrlRecord]:
        ...

    @abstractmethod
    def existing_codes(self) -> Set[str]:
        ...

    @abstractmethod
    def insert_record(self, record: UrlRecord) -> UrlRecord:
        ...

    @abstractmethod
    def update_record(
        self,
        code: str,
        updated_at: datetime,
        url: Optional[str] = None,
        new_code: Optional[str] = None,
    ) -> Optional[UrlRecord]:
        ...

    @abstractmethod
    def record_click(self, code: str, accessed_at: datetime) -> Optional[UrlRecord]:
        ...

    @abstractmethod
    def delete_record(self, code: str) -> Optional[UrlRecord]:
        ...

    def close(self) -> None:
        pass
