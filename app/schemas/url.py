from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import Optional, List


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Stored entity
class UrlRecord(BaseModel):
    code: str
    url: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_accessed: Optional[datetime] = None
    clicks: int = Field(0, ge=0)

    model_config = {"from_attributes": True}

    @field_validator('created_at', 'updated_at', 'last_accessed')
    def ensure_utc(cls, v):
        # SQLite hands timestamps back without tzinfo
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class RecordListing(BaseModel):
    total: int
    urls: List[UrlRecord]


# Response DTOs
class ShortLink(UrlRecord):
    short_url: str


class ShortLinkList(BaseModel):
    total: int
    urls: List[ShortLink]


class NewLinkResponse(BaseModel):
    url: str
    code: str


# Request DTOs
class URLCreateRequest(BaseModel):
    url: str
    code: Optional[str] = None


class URLUpdateRequest(BaseModel):
    url: Optional[str] = None
    code: Optional[str] = None
