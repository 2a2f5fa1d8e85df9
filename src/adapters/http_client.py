"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers por defecto y redirecciones.
- Traduce `RequestSpec` -> `httpx.Request` y `httpx.Response` -> `ResponseSpec`,
  así el Core nunca importa httpx.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.

Los ficheros (`=@`, `:@`, `@`) se leen aquí, nunca en el Core.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import httpx

from core.config import AppSettings
from core.domain.errors import TransportError
from core.domain.models import (
    AuthSpec,
    FileBody,
    FileReference,
    FormBody,
    JsonBody,
    MultipartBody,
    RequestSpec,
    ResponseSpec,
)
from core.services.request_builder import request_url

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


def build_client(
    settings: AppSettings | None = None,
    *,
    follow_redirects: bool | None = None,
    timeout: float | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con los defaults de la configuración.

    Los flags de la CLI (`follow_redirects`, `timeout`) tienen prioridad.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": settings.default_accept,
    }
    return httpx.Client(
        timeout=httpx.Timeout(timeout or settings.http_timeout_seconds),
        follow_redirects=settings.follow_redirects if follow_redirects is None else follow_redirects,
        max_redirects=settings.max_redirects,
        headers=headers,
        transport=transport,
    )


def _guess_mime(path: str) -> str:
    mime, _ = mimetypes.guess_type(path, strict=False)
    return mime or "application/octet-stream"


def _read_bytes(reference: FileReference) -> bytes:
    return Path(reference.path).expanduser().read_bytes()


def _read_text(reference: FileReference) -> str:
    try:
        return _read_bytes(reference).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TransportError(
            f'"{reference.path}": cannot embed the content, not a UTF-8 text file'
        ) from exc


def _multipart_files(body: MultipartBody) -> list[tuple[str, tuple[Any, ...]]]:
    # Filename None => campo de texto normal dentro del multipart.
    files: list[tuple[str, tuple[Any, ...]]] = []
    for key, value in body.fields:
        if isinstance(value, FileReference):
            if value.embed:
                files.append((key, (None, _read_text(value))))
            else:
                name = Path(value.path).name
                files.append((key, (name, _read_bytes(value), _guess_mime(value.path))))
        else:
            files.append((key, (None, value)))
    return files


def _body_kwargs(request: RequestSpec) -> tuple[dict[str, Any], str | None]:
    """kwargs de `build_request` + Content-Type implícito (si aplica)."""

    body = request.body
    if body is None:
        return {}, None
    if isinstance(body, JsonBody):
        return {"json": body.document}, None
    if isinstance(body, FormBody):
        return {"content": urlencode(body.fields).encode("utf-8")}, _FORM_CONTENT_TYPE
    if isinstance(body, MultipartBody):
        return {"files": _multipart_files(body)}, None
    if isinstance(body, FileBody):
        return {"content": _read_bytes(body.file)}, _guess_mime(body.file.path)
    raise TypeError(f"unhandled body payload: {body!r}")


def _build_auth(auth: AuthSpec | None) -> httpx.Auth | None:
    if auth is None or auth.scheme == "bearer":
        return None
    username, _, password = auth.credentials.partition(":")
    if auth.scheme == "digest":
        return httpx.DigestAuth(username, password)
    return httpx.BasicAuth(username, password)


def to_response_spec(response: httpx.Response) -> ResponseSpec:
    return ResponseSpec(
        status_code=response.status_code,
        headers=list(response.headers.multi_items()),
        body_bytes=response.content,
        http_version=response.http_version,
        reason=response.reason_phrase or None,
    )


class HttpxTransport:
    """Implementación de `core.interfaces.transport.Transport` sobre httpx."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def build_request(self, request: RequestSpec) -> httpx.Request:
        kwargs, implied_content_type = _body_kwargs(request)
        http_request = self._client.build_request(
            request.method.value,
            request_url(request),
            **kwargs,
        )

        headers = http_request.headers
        if implied_content_type and "Content-Type" not in headers:
            headers["Content-Type"] = implied_content_type
        if request.auth is not None and request.auth.scheme == "bearer":
            headers["Authorization"] = f"Bearer {request.auth.credentials}"

        # Los headers del usuario van al final: pisan defaults y auth.
        # `Name;` (None) viaja como header con valor vacío.
        for name, value in request.headers.items():
            headers[name] = "" if value is None else value
        return http_request

    def send(self, request: RequestSpec) -> ResponseSpec:
        try:
            http_request = self.build_request(request)
            response = self._client.send(http_request, auth=_build_auth(request.auth))
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        except OSError as exc:
            detail = exc.strerror or str(exc)
            message = f"{exc.filename}: {detail}" if exc.filename else detail
            raise TransportError(message) from exc
        return to_response_spec(response)
