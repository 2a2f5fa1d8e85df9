"""Rendering of request/response pairs into role-tagged segments.

The renderer never decides colors: it only tags each piece of output with a
`SegmentRole`. The CLI maps roles to `rich` styles.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from urllib.parse import urlencode, urlsplit

from core.domain.errors import MalformedResponseBodyError
from core.domain.models import (
    FileBody,
    FileReference,
    FormBody,
    JsonBody,
    MultipartBody,
    RenderedOutput,
    RequestSpec,
    ResponseSpec,
    Segment,
    SegmentRole,
)
from core.services.request_builder import request_url
from core.services.value_coercer import loads_strict

_JSON_TYPES = frozenset(["application/json", "text/json"])

_TEXT_TYPES = frozenset(
    [
        "application/xml",
        "application/javascript",
        "application/x-javascript",
        "application/ecmascript",
        "application/x-www-form-urlencoded",
        "application/yaml",
        "application/x-yaml",
        "application/graphql",
        "application/x-ndjson",
    ]
)

_IMPLIED_CONTENT_TYPES: dict[str, str] = {
    "json": "application/json",
    "form": "application/x-www-form-urlencoded; charset=utf-8",
    "multipart": "multipart/form-data",
}


@dataclass(frozen=True)
class RenderOptions:
    indent: int = 2
    show_headers: bool = True
    show_body: bool = True


def _split_content_type(content_type: str | None) -> tuple[str, dict[str, str]]:
    if not content_type:
        return "", {}
    mime, *raw_params = content_type.split(";")
    params: dict[str, str] = {}
    for raw in raw_params:
        name, sep, value = raw.partition("=")
        if sep:
            params[name.strip().lower()] = value.strip().strip('"')
    return mime.strip().lower(), params


def _is_json_type(mime: str) -> bool:
    return mime in _JSON_TYPES or mime.endswith("+json")


def _is_text_type(mime: str) -> bool:
    return mime.startswith("text/") or mime in _TEXT_TYPES or mime.endswith("+xml")


def _decode(body: bytes, charset: str | None) -> str:
    encoding = charset or "utf-8"
    try:
        return body.decode(encoding, errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def detect_body_mode(content_type: str | None, body: bytes) -> SegmentRole:
    """Pick the display mode for `body` from its content type.

    Without a content type the bytes are shown as text only when they are
    valid UTF-8 without NUL bytes.
    """

    mime, _ = _split_content_type(content_type)
    if not mime:
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            return SegmentRole.BODY_BINARY_PLACEHOLDER
        if "\x00" in text:
            return SegmentRole.BODY_BINARY_PLACEHOLDER
        return SegmentRole.BODY_TEXT
    if _is_json_type(mime):
        return SegmentRole.BODY_JSON
    if _is_text_type(mime):
        return SegmentRole.BODY_TEXT
    return SegmentRole.BODY_BINARY_PLACEHOLDER


def pretty_json(text: str, *, indent: int = 2) -> str:
    """Re-indent a JSON document keeping its key order."""

    try:
        document = loads_strict(text.lstrip("\ufeff"))
    except ValueError as exc:
        raise MalformedResponseBodyError(f"malformed JSON response body: {exc}") from exc
    return json.dumps(document, indent=indent, ensure_ascii=False)


def _binary_placeholder(length: int, content_type: str | None) -> Segment:
    label = content_type or "unknown content type"
    return Segment(
        role=SegmentRole.BODY_BINARY_PLACEHOLDER,
        text=f"[binary data not shown: {length} bytes, {label}]",
        meta={"length": length, "content_type": content_type},
    )


def _render_body(
    body: bytes,
    content_type: str | None,
    *,
    indent: int,
    warnings: list[str],
) -> Segment | None:
    if not body:
        return None

    mode = detect_body_mode(content_type, body)
    _, params = _split_content_type(content_type)
    meta: dict[str, Any] = {"length": len(body), "content_type": content_type}

    if mode is SegmentRole.BODY_JSON:
        text = _decode(body, params.get("charset"))
        try:
            return Segment(role=SegmentRole.BODY_JSON, text=pretty_json(text, indent=indent), meta=meta)
        except MalformedResponseBodyError as exc:
            warnings.append(f"{exc}; showing it as text")
            return Segment(role=SegmentRole.BODY_TEXT, text=text, meta=meta)
    if mode is SegmentRole.BODY_TEXT:
        return Segment(
            role=SegmentRole.BODY_TEXT,
            text=_decode(body, params.get("charset")),
            meta=meta,
        )
    return _binary_placeholder(len(body), content_type)


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def _header_segment(name: str, value: str, *, no_value: bool = False) -> Segment:
    meta: dict[str, Any] = {"name": name, "value": value}
    if no_value:
        meta["no_value"] = True
    return Segment(
        role=SegmentRole.HEADER_LINE,
        text=f"{name}: {value}" if value else f"{name}:",
        meta=meta,
    )


def render(response: ResponseSpec, options: RenderOptions | None = None) -> RenderedOutput:
    """Render a response as status line, header lines and one body segment."""

    options = options or RenderOptions()
    output = RenderedOutput()

    if options.show_headers:
        reason = response.reason or _reason_phrase(response.status_code)
        status = f"{response.http_version} {response.status_code} {reason}".rstrip()
        output.segments.append(
            Segment(
                role=SegmentRole.STATUS_LINE,
                text=status,
                meta={"status_code": response.status_code, "reason": reason},
            )
        )
        for name, value in response.headers:
            output.segments.append(_header_segment(name, value))

    if options.show_body:
        segment = _render_body(
            response.body_bytes,
            response.content_type,
            indent=options.indent,
            warnings=output.warnings,
        )
        if segment is not None:
            output.segments.append(segment)

    return output


def _multipart_preview(fields: list[tuple[str, str | FileReference]]) -> str:
    lines: list[str] = []
    for key, value in fields:
        if isinstance(value, FileReference):
            sep = "=@" if value.embed else ":@"
            lines.append(f"{key}{sep}{value.path}")
        else:
            lines.append(f"{key}={value}")
    return "\n".join(lines)


def _request_body_segment(request: RequestSpec, *, indent: int) -> Segment | None:
    body = request.body
    if body is None:
        return None
    if isinstance(body, JsonBody):
        return Segment(
            role=SegmentRole.BODY_JSON,
            text=json.dumps(body.document, indent=indent, ensure_ascii=False),
        )
    if isinstance(body, FormBody):
        return Segment(role=SegmentRole.BODY_TEXT, text=urlencode(body.fields))
    if isinstance(body, MultipartBody):
        return Segment(role=SegmentRole.BODY_TEXT, text=_multipart_preview(body.fields))
    if isinstance(body, FileBody):
        return Segment(
            role=SegmentRole.BODY_BINARY_PLACEHOLDER,
            text=f"[body from file: {body.file.path}]",
            meta={"path": body.file.path},
        )
    raise TypeError(f"unhandled body payload: {body!r}")


def render_request(request: RequestSpec, options: RenderOptions | None = None) -> RenderedOutput:
    """Render the request as it will be sent (used by verbose/offline modes)."""

    options = options or RenderOptions()
    output = RenderedOutput()

    parts = urlsplit(request_url(request))
    target = parts.path or "/"
    if parts.query:
        target = f"{target}?{parts.query}"

    if options.show_headers:
        output.segments.append(
            Segment(
                role=SegmentRole.REQUEST_LINE,
                text=f"{request.method.value} {target} HTTP/1.1",
                meta={"method": request.method.value, "target": target},
            )
        )
        if not request.has_header("Host"):
            output.segments.append(_header_segment("Host", parts.netloc))
        for name, value in request.headers.items():
            output.segments.append(_header_segment(name, value or "", no_value=value is None))
        if request.body is not None and not request.has_header("Content-Type"):
            implied = _IMPLIED_CONTENT_TYPES.get(request.body.type)
            if implied:
                output.segments.append(_header_segment("Content-Type", implied))

    if options.show_body:
        segment = _request_body_segment(request, indent=options.indent)
        if segment is not None:
            output.segments.append(segment)

    return output
