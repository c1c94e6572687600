"""Tests for the signed cookie jar."""

from flashsession.cookies import CookieJar


def _value(header: str) -> str:
    """Pull the cookie value out of a Set-Cookie header."""
    return header.split(";", 1)[0].split("=", 1)[1]


def test_signed_value_round_trips():
    outgoing = CookieJar(secret="s3cret")
    outgoing.put("session_id", "abc123", minutes=60)
    [header] = outgoing.headers()

    incoming = CookieJar({"session_id": _value(header)}, secret="s3cret")
    assert incoming.get("session_id") == "abc123"
    assert incoming.has("session_id")


def test_tampered_value_is_rejected():
    outgoing = CookieJar(secret="s3cret")
    outgoing.put("session_id", "abc123")
    [header] = outgoing.headers()

    assert CookieJar({"session_id": _value(header)}, secret="other").get("session_id") is None
    assert CookieJar({"session_id": "garbage-value"}, secret="s3cret").get("session_id") is None


def test_value_signed_for_one_name_is_rejected_under_another():
    outgoing = CookieJar(secret="s3cret")
    outgoing.put("session_payload", '{"id": "x"}')
    [header] = outgoing.headers()

    replayed = CookieJar({"session_id": _value(header)}, secret="s3cret")
    assert replayed.get("session_id") is None


def test_missing_cookie_returns_default():
    jar = CookieJar()
    assert jar.get("session_id") is None
    assert jar.get("session_id", "fallback") == "fallback"
    assert jar.has("session_id") is False


def test_queued_value_wins_over_incoming():
    jar = CookieJar()
    jar.put("session_id", "new-id")
    assert jar.get("session_id") == "new-id"


def test_header_attributes():
    jar = CookieJar(same_site="strict")
    jar.put("session_id", "abc", minutes=30, path="/app", domain="example.com", secure=True)
    [header] = jar.headers()

    assert header.startswith("session_id=")
    assert "Max-Age=1800" in header
    assert "Path=/app" in header
    assert "Domain=example.com" in header
    assert "HttpOnly" in header
    assert "SameSite=strict" in header
    assert header.endswith("Secure")


def test_zero_minutes_is_browser_session_cookie():
    jar = CookieJar()
    jar.put("session_id", "abc", minutes=0)
    [header] = jar.headers()

    assert "Max-Age" not in header


def test_forget_expires_cookie():
    jar = CookieJar({"session_payload": "whatever"})
    jar.forget("session_payload")
    [header] = jar.headers()

    assert header.startswith("session_payload=;")
    assert "Max-Age=0" in header
    assert jar.get("session_payload") is None


def test_from_settings(test_settings):
    jar = CookieJar.from_settings({}, test_settings)
    assert jar.max_age == test_settings.lifetime_seconds
    assert jar.same_site == test_settings.same_site

    closing = test_settings.model_copy(update={"expire_on_close": True})
    assert CookieJar.from_settings({}, closing).max_age is None
