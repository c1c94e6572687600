"""Tests for the ASGI session middleware."""

import pytest
from fastapi import Depends, FastAPI, Request, WebSocket
from fastapi.testclient import TestClient

from flashsession.dependencies import get_csrf_token, get_session
from flashsession.manager import SessionManager
from flashsession.middleware import SessionMiddleware
from flashsession.payload import Payload


def _make_app(manager: SessionManager) -> FastAPI:
    """Minimal app for testing session middleware in isolation."""
    app = FastAPI()

    @app.get("/put")
    async def put_value(request: Request):
        request.state.session.put("name", "Robin")
        return {"ok": True}

    @app.get("/flash")
    async def flash_value(session: Payload = Depends(get_session)):
        session.flash("status", "saved")
        return {"ok": True}

    @app.get("/read")
    async def read_values(
        session: Payload = Depends(get_session),
        token: str = Depends(get_csrf_token),
    ):
        return {
            "id": session.record.id,
            "name": session.get("name"),
            "status": session.get("status"),
            "token": token,
        }

    @app.get("/regenerate")
    async def regenerate(session: Payload = Depends(get_session)):
        await session.regenerate()
        return {"ok": True}

    @app.get("/flush")
    async def flush(session: Payload = Depends(get_session)):
        session.flush()
        return {"ok": True}

    @app.websocket("/ws")
    async def session_over_websocket(websocket: WebSocket):
        await websocket.accept()
        session = websocket.state.session
        await websocket.send_json({"name": session.get("name"), "token": session.token()})
        await websocket.close()

    app.add_middleware(SessionMiddleware, manager=manager)
    return app


@pytest.fixture
def manager(test_settings):
    return SessionManager(test_settings)


@pytest.fixture
def session_client(manager):
    return TestClient(_make_app(manager), cookies={})


def test_new_session_sets_cookie(session_client):
    resp = session_client.get("/put")
    assert resp.status_code == 200
    assert "session_id" in resp.cookies


def test_session_persists_across_requests(session_client):
    session_client.get("/put")
    resp = session_client.get("/read")
    assert resp.json()["name"] == "Robin"


def test_session_empty_by_default(session_client):
    resp = session_client.get("/read")
    assert resp.json()["name"] is None


def test_flash_lives_one_more_request(session_client):
    session_client.get("/flash")
    assert session_client.get("/read").json()["status"] == "saved"
    assert session_client.get("/read").json()["status"] is None


def test_csrf_token_is_stable(session_client):
    first = session_client.get("/read").json()["token"]
    second = session_client.get("/read").json()["token"]
    assert first is not None
    assert first == second


def test_regenerate_changes_id_keeps_data(session_client):
    session_client.get("/put")
    before = session_client.get("/read").json()

    session_client.get("/regenerate")
    after = session_client.get("/read").json()

    assert after["id"] != before["id"]
    assert after["name"] == "Robin"
    assert after["token"] == before["token"]


def test_flush_clears_data(session_client):
    session_client.get("/put")
    session_client.get("/flush")
    assert session_client.get("/read").json()["name"] is None


def test_session_cookie_is_httponly(session_client):
    resp = session_client.get("/put")
    cookie_header = resp.headers.get("set-cookie", "")
    assert "HttpOnly" in cookie_header


def test_session_cookie_samesite_lax(session_client):
    resp = session_client.get("/put")
    cookie_header = resp.headers.get("set-cookie", "")
    assert "SameSite=lax" in cookie_header


def test_invalid_cookie_creates_new_session(session_client):
    session_client.cookies.set("session_id", "garbage-value")
    resp = session_client.get("/read")
    assert resp.status_code == 200
    assert resp.json()["name"] is None


def test_manager_is_released_after_request(manager, session_client):
    session_client.get("/read")
    assert manager.started() is False


def test_websocket_sees_session(session_client):
    session_client.get("/put")
    token = session_client.get("/read").json()["token"]

    with session_client.websocket_connect("/ws") as ws:
        data = ws.receive_json()

    assert data["name"] == "Robin"
    assert data["token"] == token


def test_websocket_is_released_after_connection(manager, session_client):
    with session_client.websocket_connect("/ws") as ws:
        ws.receive_json()
    assert manager.started() is False


def test_cookie_storage(test_settings):
    settings = test_settings.model_copy(update={"storage": "cookie"})
    client = TestClient(_make_app(SessionManager(settings)), cookies={})

    resp = client.get("/put")
    assert "session_payload" in resp.cookies

    body = client.get("/read").json()
    assert body["name"] == "Robin"


def test_file_storage(test_settings, tmp_path):
    settings = test_settings.model_copy(update={"storage": "file"})
    client = TestClient(_make_app(SessionManager(settings)), cookies={})

    client.get("/put")
    session_id = client.get("/read").json()["id"]

    assert (tmp_path / "sessions" / session_id).is_file()
