from fastapi import APIRouter, Depends, status
import logging

from app.api.deps import get_registry, require_auth
from app.schemas.url import ShortLink, ShortLinkList, URLCreateRequest, URLUpdateRequest
from app.services.shortener import URLRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/urls", tags=["admin"], dependencies=[Depends(require_auth)])


@router.get("", response_model=ShortLinkList)
def list_urls_endpoint(registry: URLRegistry = Depends(get_registry)):
    listing = registry.get_all()
    logger.info(f"Admin accessed URL list: total={listing.total}")
    return ShortLinkList(
        total=listing.total,
        urls=[registry.to_link(record) for record in listing.urls],
    )


@router.post("", response_model=ShortLink, status_code=status.HTTP_201_CREATED)
def create_url_endpoint(body: URLCreateRequest, registry: URLRegistry = Depends(get_registry)):
    return registry.create(body.url, body.code)


@router.get("/{code}", response_model=ShortLink)
def get_url_endpoint(code: str, registry: URLRegistry = Depends(get_registry)):
    """Retrieve metadata for a short code."""
    return registry.to_link(registry.get_one(code))


@router.patch("/{code}", response_model=ShortLink)
def update_url_endpoint(code: str, body: URLUpdateRequest, registry: URLRegistry = Depends(get_registry)):
    return registry.to_link(registry.update(code, new_url=body.url, new_code=body.code))


@router.delete("/{code}", response_model=ShortLink)
def delete_url_endpoint(code: str, registry: URLRegistry = Depends(get_registry)):
    return registry.to_link(registry.delete(code))
