from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from typing import Optional
import logging

from app.api.deps import get_registry, require_auth
from app.core.exceptions import NotFound
from app.schemas.url import NewLinkResponse
from app.services.shortener import URLRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/new", response_model=NewLinkResponse, dependencies=[Depends(require_auth)])
def new_link_endpoint(
    url: Optional[str] = Query(None),
    code: Optional[str] = Query(None),
    registry: URLRegistry = Depends(get_registry),
):
    """ShareX-style create: everything travels in the query string."""
    link = registry.create(url, code)
    logger.info(f"API success: Shortened {link.url[:50]}... to {link.code}")
    return NewLinkResponse(url=link.short_url, code=link.code)


@router.get("/", include_in_schema=False)
def home(request: Request):
    target = request.app.state.settings.HOME_REDIRECT_URL
    if not target:
        raise NotFound("Nothing here")
    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)


@router.get("/{code}", tags=["redirect"])
def redirect_to_url_endpoint(code: str, registry: URLRegistry = Depends(get_registry)):
    """
    Access the shortened URL and get redirected to the original long URL.
    """
    target = registry.redirect_lookup(code)
    if target is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)
