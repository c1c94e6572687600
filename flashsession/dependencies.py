"""FastAPI dependency injection: session access."""

from __future__ import annotations

from fastapi import Request

from .payload import Payload


def get_session(request: Request) -> Payload:
    """Get the session payload from request state."""
    return request.state.session


def get_csrf_token(request: Request) -> str | None:
    """The session's CSRF token, for embedding in forms."""
    return request.state.session.token()
