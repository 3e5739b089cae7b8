import secrets
from typing import Optional

from fastapi import Header, Query, Request

from app.core.exceptions import Unauthorized
from app.services.shortener import URLRegistry


def get_registry(request: Request) -> URLRegistry:
    return request.app.state.registry


def require_auth(
    request: Request,
    authorization: Optional[str] = Header(None),
    auth: Optional[str] = Query(None),
):
    """Accepts the token from the `auth` query parameter or the Authorization header."""
    expected = request.app.state.settings.AUTH_TOKEN
    supplied = auth or authorization
    if supplied and supplied.lower().startswith("bearer "):
        supplied = supplied[len("bearer "):]

    if not expected:
        raise Unauthorized("Authentication is not configured")
    if not supplied:
        raise Unauthorized("Auth token missing")
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise Unauthorized("Invalid auth token")
