"""Request rate limiting shared by the storage routes."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def client_address(request: Request) -> str:
    """Rate-limit key: first X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return get_remote_address(request)


def create_limiter() -> Limiter:
    """Build the limiter the app holds on ``app.state.limiter``.

    Storage is in memory and lives as long as the app object.
    """
    return Limiter(key_func=client_address)


limiter = create_limiter()
