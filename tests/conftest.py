"""
pytest configuration and fixtures.
"""

from typing import Callable

import httpx
import pytest

from core.domain.models import ResponseSpec


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep user/project .env files and REQLINE_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in ("REQLINE_DEFAULT_SCHEME", "REQLINE_JSON_INDENT", "REQLINE_USER_AGENT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def json_response() -> ResponseSpec:
    """Sample JSON response with non-sorted keys."""
    return ResponseSpec(
        status_code=200,
        headers=[
            ("Content-Type", "application/json"),
            ("Set-Cookie", "a=1"),
            ("Set-Cookie", "b=2"),
        ],
        body_bytes=b'{"b":1,"a":2}',
    )


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def mock_transport(recorded_requests: list[httpx.Request]) -> Callable[..., httpx.MockTransport]:
    """Build an httpx.MockTransport that records requests and replies with a fixed response."""

    def factory(
        status_code: int = 200,
        json: object | None = None,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            request.read()
            recorded_requests.append(request)
            if json is not None:
                return httpx.Response(status_code, json=json, headers=headers)
            return httpx.Response(status_code, content=content, headers=headers)

        return httpx.MockTransport(handler)

    return factory
