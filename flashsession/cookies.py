"""Signed request cookies and queued response cookies.

The session layer never writes headers itself. It hands cookies to a
``CookieJar``, and whoever owns the response (``SessionMiddleware``) renders
``jar.headers()`` into ``Set-Cookie`` lines.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from itsdangerous import BadSignature, URLSafeTimedSerializer

if TYPE_CHECKING:
    from .config import SessionSettings

_SALT = "flashsession.cookie"


def _salt(name: str) -> str:
    # A value signed for one cookie never verifies under another name
    return f"{_SALT}.{name}"


@dataclass
class QueuedCookie:
    name: str
    value: Any
    minutes: int = 0
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    expired: bool = False


class CookieJar:
    """Request-scoped cookie collaborator.

    Incoming values are verified with an itsdangerous signature; outgoing
    values are signed when rendered. A cookie queued with ``minutes=0`` has no
    Max-Age and lives until the browser closes.
    """

    def __init__(
        self,
        cookies: Mapping[str, str] | None = None,
        secret: str = "change-me-in-production",
        max_age: int | None = None,
        same_site: str = "lax",
        http_only: bool = True,
    ) -> None:
        self._incoming = dict(cookies or {})
        self._signer = URLSafeTimedSerializer(secret, salt=_SALT)
        self.max_age = max_age
        self.same_site = same_site
        self.http_only = http_only
        self.queued: dict[str, QueuedCookie] = {}

    @classmethod
    def from_settings(cls, cookies: Mapping[str, str], settings: SessionSettings) -> CookieJar:
        return cls(
            cookies,
            secret=settings.secret,
            max_age=None if settings.expire_on_close else settings.lifetime_seconds,
            same_site=settings.same_site,
        )

    def get(self, name: str, default: Any = None) -> Any:
        queued = self.queued.get(name)
        if queued is not None:
            return default if queued.expired else queued.value

        raw = self._incoming.get(name)
        if not raw:
            return default
        try:
            return self._signer.loads(raw, max_age=self.max_age, salt=_salt(name))
        except BadSignature:
            return default

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def put(
        self,
        name: str,
        value: Any,
        minutes: int = 0,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
    ) -> None:
        self.queued[name] = QueuedCookie(name, value, minutes, path, domain, secure)

    def forget(self, name: str, path: str = "/", domain: str | None = None) -> None:
        self.queued[name] = QueuedCookie(name, "", 0, path, domain, expired=True)

    def headers(self) -> list[str]:
        """Render every queued cookie as a ``Set-Cookie`` header value."""
        return [self._render(cookie) for cookie in self.queued.values()]

    def _render(self, cookie: QueuedCookie) -> str:
        if cookie.expired:
            parts = [f"{cookie.name}=", "Max-Age=0"]
        else:
            parts = [f"{cookie.name}={self._signer.dumps(cookie.value, salt=_salt(cookie.name))}"]
            if cookie.minutes:
                parts.append(f"Max-Age={cookie.minutes * 60}")

        parts.append(f"Path={cookie.path}")
        if cookie.domain:
            parts.append(f"Domain={cookie.domain}")
        if self.http_only:
            parts.append("HttpOnly")
        parts.append(f"SameSite={self.same_site}")
        if cookie.secure:
            parts.append("Secure")
        return "; ".join(parts)
