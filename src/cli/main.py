"""CLI principal: `reqline [METHOD] URL [ITEM ...]`.

Flujo:
1) Resolver posicionales y clasificar todos los items (nada sale a la red si
   alguno es inválido).
2) Enviar la request por el transporte httpx.
3) Renderizar la response en segmentos y pintarlos con Rich.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from adapters.http_client import HttpxTransport, build_client
from adapters.json_exporter import export_exchange_json
from cli.ui_components import (
    print_error,
    print_rendered,
    print_status_notice,
    print_warnings,
)
from core.config import AppSettings
from core.domain.errors import ReqlineError, TransportError
from core.domain.models import AuthSpec
from core.services.request_builder import build_from_tokens, split_invocation
from core.services.response_renderer import RenderOptions, render, render_request

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["--help"]},
    help=(
        "CLI HTTP client. Items: Header:value, param==value, field=string, "
        "field:=json, field=@file, field:@upload, @body-file, Header;"
    ),
)


class AuthType(str, Enum):
    BASIC = "basic"
    DIGEST = "digest"
    BEARER = "bearer"


def _make_consoles(color: bool | None) -> tuple[Console, Console]:
    if color is None:
        return Console(highlight=False), Console(stderr=True, highlight=False)
    return (
        Console(highlight=False, force_terminal=color, no_color=not color),
        Console(stderr=True, highlight=False, force_terminal=color, no_color=not color),
    )


def _parse_auth(auth: str | None, auth_type: AuthType) -> AuthSpec | None:
    if auth is None:
        return None
    if auth_type is not AuthType.BEARER and ":" not in auth:
        raise typer.BadParameter("expected USER:PASSWORD", param_hint="--auth")
    return AuthSpec(scheme=auth_type.value, credentials=auth)


@app.command()
def request(
    method_or_url: str = typer.Argument(..., metavar="[METHOD] URL", help="HTTP method (optional) and URL."),
    url_or_item: str | None = typer.Argument(None, metavar="", show_default=False),
    items: list[str] | None = typer.Argument(None, metavar="[ITEM]...", show_default=False),
    form: bool = typer.Option(False, "--form", "-f", help="Send `field=value` items as a form."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print the request as well."),
    offline: bool = typer.Option(False, "--offline", help="Build and print the request, do not send it."),
    headers_only: bool = typer.Option(False, "--headers-only", "-h", help="Only print the status line and headers."),
    body_only: bool = typer.Option(False, "--body-only", "-b", help="Only print the body."),
    indent: int | None = typer.Option(None, "--indent", min=0, max=8, help="JSON indentation."),
    auth: str | None = typer.Option(None, "--auth", "-a", help="USER:PASSWORD, or a token for bearer."),
    auth_type: AuthType = typer.Option(AuthType.BASIC, "--auth-type", case_sensitive=False),
    follow: bool | None = typer.Option(None, "--follow/--no-follow", "-F", help="Follow redirects."),
    timeout: float | None = typer.Option(None, "--timeout", min=0.001, help="Timeout in seconds."),
    check_status: int | None = typer.Option(
        None,
        "--check-status",
        "--code",
        help="Exit with code 1 when the response status differs.",
    ),
    export_json: Path | None = typer.Option(None, "--export-json", help="Save the exchange as JSON."),
    color: bool | None = typer.Option(None, "--color/--no-color", help="Force or disable colors."),
) -> None:
    """Send one HTTP request and print the response."""

    settings = AppSettings()
    console, err_console = _make_consoles(color)

    method, url, tokens = split_invocation(method_or_url, url_or_item, items or [])
    auth_spec = _parse_auth(auth, auth_type)

    try:
        spec = build_from_tokens(
            method,
            url,
            tokens,
            form=form,
            default_scheme=settings.default_scheme,
            auth=auth_spec,
        )
    except ReqlineError as exc:
        print_error(err_console, str(exc))
        raise typer.Exit(code=2) from exc

    options = RenderOptions(
        indent=settings.json_indent if indent is None else indent,
        show_headers=not body_only,
        show_body=not headers_only,
    )

    if verbose or offline:
        print_rendered(console, render_request(spec, options), theme=settings.syntax_theme)
        if offline:
            return
        console.print()

    try:
        with HttpxTransport(build_client(settings, follow_redirects=follow, timeout=timeout)) as transport:
            response = transport.send(spec)
    except TransportError as exc:
        print_error(err_console, str(exc))
        raise typer.Exit(code=1) from exc

    if not body_only:
        print_status_notice(console, response.status_code, response.reason or "")

    rendered = render(response, options)
    print_rendered(console, rendered, theme=settings.syntax_theme)
    print_warnings(err_console, rendered.warnings)

    if export_json is not None:
        saved = export_exchange_json(request=spec, response=response, output_path=export_json)
        err_console.print(Text.assemble(("Saved exchange to: ", "green"), str(saved)))

    if check_status is not None and response.status_code != check_status:
        raise typer.Exit(code=1)


def run() -> None:
    app()
