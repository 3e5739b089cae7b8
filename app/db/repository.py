from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Set
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateCode, StorageFailure
from app.db.base import RecordStore
from app.db.models import UrlRow
from app.schemas.url import UrlRecord

logger = logging.getLogger(__name__)


def _to_record(row: UrlRow) -> UrlRecord:
    return UrlRecord.model_validate(row)


def _get_row(db: Session, code: str) -> Optional[UrlRow]:
    return db.query(UrlRow).filter(UrlRow.code == code).first()


def _commit_and_refresh(db: Session, row: UrlRow, code: str) -> UrlRow:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"IntegrityError committing code={code}: {e.orig if hasattr(e, 'orig') else e}")
        raise DuplicateCode(code)
    db.refresh(row)
    return row


class SqlRecordStore(RecordStore):
    """One row per record; the unique index on ``code`` serialises conflicting writers."""

    def __init__(self, session_factory, engine=None):
        self._session_factory = session_factory
        self._engine = engine

    @contextmanager
    def _session(self):
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database operation failed: {e}")
            raise StorageFailure(f"Database operation failed: {e}") from e
        finally:
            db.close()

    def list_records(self) -> List[UrlRecord]:
        with self._session() as db:
            return [_to_record(row) for row in db.query(UrlRow).order_by(UrlRow.id).all()]

    def get_record(self, code: str) -> Optional[UrlRecord]:
        with self._session() as db:
            row = _get_row(db, code)
            return _to_record(row) if row else None

    def existing_codes(self) -> Set[str]:
        with self._session() as db:
            return {code for (code,) in db.query(UrlRow.code).all()}

    def insert_record(self, record: UrlRecord) -> UrlRecord:
        with self._session() as db:
            row = UrlRow(**record.model_dump())
            db.add(row)
            return _to_record(_commit_and_refresh(db, row, record.code))

    def update_record(self, code, updated_at, url=None, new_code=None):
        with self._session() as db:
            row = _get_row(db, code)
            if row is None:
                return None
            if url is not None:
                row.url = url
            if new_code is not None and new_code != code:
                row.code = new_code
            row.updated_at = updated_at
            return _to_record(_commit_and_refresh(db, row, row.code))

    def record_click(self, code: str, accessed_at: datetime) -> Optional[UrlRecord]:
        with self._session() as db:
            updated = db.query(UrlRow).filter(UrlRow.code == code).update(
                {
                    UrlRow.clicks: UrlRow.clicks + 1,
                    UrlRow.last_accessed: accessed_at,
                },
                synchronize_session=False,
            )
            db.commit()
            if not updated:
                return None
            row = _get_row(db, code)
            return _to_record(row) if row else None

    def delete_record(self, code: str) -> Optional[UrlRecord]:
        with self._session() as db:
            row = _get_row(db, code)
            if row is None:
                return None
            removed = _to_record(row)
            db.delete(row)
            db.commit()
            return removed

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
