"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- El renderer del Core solo etiqueta segmentos con un rol; aquí se decide el color.
- Permite reutilizar la misma salida para request (verbose) y response.
"""

from __future__ import annotations

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from core.domain.models import RenderedOutput, Segment, SegmentRole

_ROLE_STYLES: dict[SegmentRole, str] = {
    SegmentRole.REQUEST_LINE: "bold blue",
    SegmentRole.STATUS_LINE: "bold blue",
    SegmentRole.BODY_TEXT: "cyan",
    SegmentRole.BODY_JSON: "cyan",
    SegmentRole.BODY_BINARY_PLACEHOLDER: "dim yellow",
}

_BODY_ROLES = frozenset(
    [
        SegmentRole.BODY_JSON,
        SegmentRole.BODY_TEXT,
        SegmentRole.BODY_BINARY_PLACEHOLDER,
    ]
)


def _header_text(segment: Segment) -> Text:
    name = str(segment.meta.get("name", ""))
    value = str(segment.meta.get("value", ""))
    if not value:
        return Text.assemble((name, "green"), ":")
    return Text.assemble((name, "green"), ": ", (value, "cyan"))


def print_rendered(console: Console, output: RenderedOutput, *, theme: str = "monokai") -> None:
    """Imprime los segmentos en orden, con una línea en blanco antes del body."""

    printed_head = False
    for segment in output.segments:
        if segment.role in _BODY_ROLES and printed_head:
            console.print()

        if segment.role is SegmentRole.HEADER_LINE:
            console.print(_header_text(segment), soft_wrap=True)
        elif segment.role is SegmentRole.BODY_JSON and console.is_terminal and console.color_system:
            console.print(
                Syntax(segment.text, "json", theme=theme, background_color="default", word_wrap=True)
            )
        else:
            console.print(Text(segment.text, style=_ROLE_STYLES.get(segment.role, "")), soft_wrap=True)

        printed_head = segment.role not in _BODY_ROLES


def print_status_notice(console: Console, status_code: int, reason: str = "") -> None:
    """Aviso rojo para 4xx/5xx (antes de la response completa)."""

    label = f"{status_code} {reason}".strip()
    if 400 <= status_code < 500:
        console.print(Text(f"Error Client Status: {label}", style="red"))
    elif status_code >= 500:
        console.print(Text(f"Error Server Status: {label}", style="red"))


def print_warnings(console: Console, warnings: list[str]) -> None:
    for warning in warnings:
        console.print(Text.assemble(("Warning: ", "yellow"), warning), soft_wrap=True)


def print_error(console: Console, message: str) -> None:
    console.print(Text.assemble(("reqline: error: ", "bold red"), message), soft_wrap=True)
