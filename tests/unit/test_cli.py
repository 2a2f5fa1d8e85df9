"""
CLI tests (Typer CliRunner).
"""

import json

import httpx
import pytest
from typer.testing import CliRunner

from adapters import http_client
from cli import main as cli_main

runner = CliRunner()


@pytest.fixture
def use_transport(monkeypatch: pytest.MonkeyPatch):
    """Route the CLI through a given httpx.MockTransport."""

    def install(transport: httpx.MockTransport) -> None:
        def fake_build_client(settings, **kwargs):
            return http_client.build_client(settings, transport=transport, **kwargs)

        monkeypatch.setattr(cli_main, "build_client", fake_build_client)

    return install


class TestOffline:
    """Requests can be built and printed without sending."""

    def test_offline_json(self):
        result = runner.invoke(
            cli_main.app,
            ["--offline", "--no-color", "example.com", "X-Token:abc", "name=Bob", "age:=30"],
        )

        assert result.exit_code == 0, result.output
        assert "POST / HTTP/1.1" in result.output
        assert "X-Token: abc" in result.output
        assert '"age": 30' in result.output
        assert '"name": "Bob"' in result.output

    def test_offline_explicit_method(self):
        result = runner.invoke(cli_main.app, ["--offline", "--no-color", "GET", ":8080/x", "q==1"])

        assert result.exit_code == 0, result.output
        assert "GET /x?q=1 HTTP/1.1" in result.output
        assert "Host: localhost:8080" in result.output

    def test_malformed_item(self, use_transport, recorded_requests, mock_transport):
        use_transport(mock_transport())
        result = runner.invoke(cli_main.app, ["--no-color", "example.com", "a=1", "broken"])

        assert result.exit_code == 2
        assert "reqline: error" in result.output
        assert "broken" in result.output
        assert recorded_requests == []

    def test_conflicting_body(self):
        result = runner.invoke(cli_main.app, ["--offline", "example.com", "a=1", "f:@x.png"])

        assert result.exit_code == 2
        assert "cannot be mixed" in result.output

    def test_auth_requires_password(self):
        result = runner.invoke(cli_main.app, ["--offline", "--auth", "bob", "example.com"])

        assert result.exit_code == 2


class TestSend:
    """Full exchange through a mocked transport."""

    def test_json_response(self, use_transport, mock_transport, recorded_requests):
        use_transport(mock_transport(json={"b": 1, "a": 2}))
        result = runner.invoke(cli_main.app, ["--no-color", "example.com", "q==1"])

        assert result.exit_code == 0, result.output
        assert "HTTP/1.1 200 OK" in result.output
        assert result.output.index('"b": 1') < result.output.index('"a": 2')
        assert recorded_requests[0].url.params["q"] == "1"

    def test_no_value_header_and_backslash_values(self, use_transport, mock_transport, recorded_requests):
        use_transport(mock_transport(json={}))
        result = runner.invoke(
            cli_main.app,
            ["--no-color", "example.com", "X-Custom;", r"path=C:\temp\new", r'quote:="a\"b"'],
        )

        assert result.exit_code == 0, result.output
        sent = recorded_requests[0]
        assert sent.headers["X-Custom"] == ""
        assert json.loads(sent.content) == {"path": "C:\\temp\\new", "quote": 'a"b'}

    def test_body_only(self, use_transport, mock_transport):
        use_transport(mock_transport(json={"ok": True}))
        result = runner.invoke(cli_main.app, ["--no-color", "--body-only", "example.com"])

        assert result.exit_code == 0, result.output
        assert "HTTP/1.1" not in result.output
        assert '"ok": true' in result.output

    def test_check_status(self, use_transport, mock_transport):
        use_transport(mock_transport(status_code=404, content=b"missing", headers={"Content-Type": "text/plain"}))
        result = runner.invoke(cli_main.app, ["--no-color", "--check-status", "200", "example.com"])

        assert result.exit_code == 1
        assert "Error Client Status: 404 Not Found" in result.output
        assert "missing" in result.output

    def test_malformed_json_warning(self, use_transport, mock_transport):
        use_transport(mock_transport(content=b"{oops", headers={"Content-Type": "application/json"}))
        result = runner.invoke(cli_main.app, ["--no-color", "example.com"])

        assert result.exit_code == 0, result.output
        assert "{oops" in result.output
        assert "Warning:" in result.output

    def test_transport_error(self, use_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        use_transport(httpx.MockTransport(handler))
        result = runner.invoke(cli_main.app, ["--no-color", "example.com"])

        assert result.exit_code == 1
        assert "timed out" in result.output

    def test_export_json(self, use_transport, mock_transport, tmp_path):
        use_transport(mock_transport(json={"id": 7}))
        target = tmp_path / "out" / "exchange.json"
        result = runner.invoke(
            cli_main.app,
            ["--no-color", "--export-json", str(target), "example.com", "name=Bob"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["request"]["method"] == "POST"
        assert data["request"]["body"] == {"type": "json", "document": {"name": "Bob"}}
        assert data["response"]["status_code"] == 200
        assert json.loads(data["response"]["body"]) == {"id": 7}

    def test_verbose_prints_request_and_response(self, use_transport, mock_transport):
        use_transport(mock_transport(json={}))
        result = runner.invoke(cli_main.app, ["--no-color", "-v", "PUT", "example.com/x", "done:=true"])

        assert result.exit_code == 0, result.output
        assert "PUT /x HTTP/1.1" in result.output
        assert "HTTP/1.1 200 OK" in result.output
