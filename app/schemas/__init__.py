# re-export common schemas for simpler imports
from .url import (
    NewLinkResponse,
    RecordListing,
    ShortLink,
    ShortLinkList,
    URLCreateRequest,
    URLUpdateRequest,
    UrlRecord,
)

__all__ = [
    "NewLinkResponse",
    "RecordListing",
    "ShortLink",
    "ShortLinkList",
    "URLCreateRequest",
    "URLUpdateRequest",
    "UrlRecord",
]
