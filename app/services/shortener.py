from datetime import datetime
from typing import Callable, Optional
import logging

from app.core.exceptions import (
    BadRequest,
    CodeConflict,
    DuplicateCode,
    GenerationExhausted,
    NotFound,
    ReservedCode,
    ReservedPath,
)
from app.db.base import RecordStore
from app.schemas.url import RecordListing, ShortLink, UrlRecord, utcnow
from app.utils.encoding import (
    CodeGenerator,
    FAVICON,
    PLACEHOLDER_CODES,
    is_reserved,
    normalize_short_code,
)


logger = logging.getLogger(__name__)


class URLRegistry:
    """Owns short code generation, uniqueness and click accounting.

    The caller is expected to have authenticated the request already; the
    registry only enforces the record invariants.
    """

    def __init__(
        self,
        store: RecordStore,
        base_url: str,
        generator: Optional[CodeGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.base_url = base_url
        self.generator = generator or CodeGenerator()
        self.clock = clock

    def short_url(self, code: str) -> str:
        return f"{self.base_url.rstrip('/')}/{code}"

    def to_link(self, record: UrlRecord) -> ShortLink:
        return ShortLink(**record.model_dump(), short_url=self.short_url(record.code))

    @staticmethod
    def validate_custom_code(custom_code: str) -> str:
        code = normalize_short_code(custom_code)
        if not code:
            raise BadRequest("Custom code must not be empty")
        if is_reserved(code):
            logger.warning(f"Rejected reserved custom code '{code}'")
            raise ReservedCode(f"'{code}' is a reserved keyword")
        return code

    def create(self, url: Optional[str], custom_code: Optional[str] = None) -> ShortLink:
        url = (url or "").strip()
        if not url:
            raise BadRequest("URL missing")

        if custom_code is not None:
            code = self.validate_custom_code(custom_code)
            record = UrlRecord(code=code, url=url, created_at=self.clock(), clicks=0)
            try:
                record = self.store.insert_record(record)
            except DuplicateCode:
                logger.warning(f"Custom code collision: '{code}'")
                raise CodeConflict(f"Code '{code}' already exists")
        else:
            record = self._insert_generated(url)

        logger.info(f"Shortened {url[:50]} to {record.code}")
        return self.to_link(record)

    def _insert_generated(self, url: str) -> UrlRecord:
        # A snapshot check can go stale before the insert lands, so a
        # DuplicateCode from the store is treated as one more collision.
        max_attempts = self.generator.max_attempts
        for attempt in range(max_attempts):
            code = self.generator.generate(self.store.existing_codes())
            record = UrlRecord(code=code, url=url, created_at=self.clock(), clicks=0)
            try:
                return self.store.insert_record(record)
            except DuplicateCode:
                logger.info(f"Generated code {code} taken concurrently, attempt {attempt + 1}/{max_attempts}")
        raise GenerationExhausted(
            f"Failed to generate unique short code after {max_attempts} attempts"
        )

    def redirect_lookup(self, code: Optional[str]) -> Optional[str]:
        """Count a visit and return the target url.

        Returns ``None`` for favicon probes, which never reach the store.
        """
        if not code or code in PLACEHOLDER_CODES:
            raise BadRequest("Code missing")
        if code.lower() == FAVICON:
            return None
        if is_reserved(code):
            raise ReservedPath(f"'{code}' is not a short code")

        record = self.store.record_click(code, self.clock())
        if record is None:
            logger.warning(f"Redirect 404: Short code not found: {code}")
            raise NotFound(f"Code '{code}' not found")
        return record.url

    def get_one(self, code: str) -> UrlRecord:
        record = self.store.get_record(code)
        if record is None:
            logger.warning(f"Stats 404: Short code not found: {code}")
            raise NotFound(f"Code '{code}' not found")
        return record

    def get_all(self) -> RecordListing:
        records = self.store.list_records()
        return RecordListing(total=len(records), urls=records)

    def update(self, code: str, new_url: Optional[str] = None, new_code: Optional[str] = None) -> UrlRecord:
        current = self.get_one(code)

        if new_url is not None:
            new_url = new_url.strip()
            if not new_url:
                raise BadRequest("URL must not be empty")

        if new_code is not None:
            new_code = normalize_short_code(new_code)
            if new_code == current.code:
                new_code = None
            else:
                new_code = self.validate_custom_code(new_code)
                if self.store.get_record(new_code) is not None:
                    raise CodeConflict(f"Code '{new_code}' already exists")

        try:
            record = self.store.update_record(code, self.clock(), url=new_url, new_code=new_code)
        except DuplicateCode:
            raise CodeConflict(f"Code '{new_code}' already exists")
        if record is None:
            raise NotFound(f"Code '{code}' not found")

        if new_code:
            logger.info(f"Renamed {code} to {new_code}")
        else:
            logger.info(f"Updated {code}")
        return record

    def delete(self, code: str) -> UrlRecord:
        removed = self.store.delete_record(code)
        if removed is None:
            logger.warning(f"Delete 404: Short code not found: {code}")
            raise NotFound(f"Code '{code}' not found")
        logger.info(f"Deleted {code} ({removed.url[:50]})")
        return removed
