"""ASGI session middleware.

Reads the signed session ID cookie, loads the payload through a
SessionManager and attaches it to request.state.session. When an HTTP
response starts, the payload is saved and the queued cookies are written out.
WebSocket connections get the loaded payload too, but it is never saved.
"""

from __future__ import annotations

import logging

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .cookies import CookieJar
from .manager import SessionManager

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """ASGI middleware running one load/save cycle per HTTP request."""

    def __init__(self, app: ASGIApp, manager: SessionManager | None = None) -> None:
        self.app = app
        self.manager = manager or SessionManager()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        conn = HTTPConnection(scope)
        cookies = CookieJar.from_settings(conn.cookies, self.manager.settings)
        payload = await self.manager.load(cookies)

        # Attach session to scope so request.state.session works
        scope["state"] = scope.get("state", {})
        scope["state"]["session"] = payload

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                await payload.save()
                headers = MutableHeaders(scope=message)
                for cookie in cookies.headers():
                    headers.append("set-cookie", cookie)

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper if scope["type"] == "http" else send)
        finally:
            self.manager.end()
