"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los payloads de body son una unión discriminada: el builder y el transporte
  hacen dispatch exhaustivo sobre `type`, nunca sobre heurísticas.

Nota:
- Estos modelos describen *qué* se envía y *qué* se recibió, no *cómo* viaja.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

# Separadores de items (gramática posicional).
SEP_RAW_JSON = ":="
SEP_QUERY = "=="
SEP_FORM_FILE = "=@"
SEP_FILE = ":@"
SEP_HEADER = ":"
SEP_DATA = "="
SEP_BODY_FILE = "@"
SEP_HEADER_NO_VALUE = ";"

SEP_GROUP_FILE_ITEMS = frozenset([SEP_FORM_FILE, SEP_FILE, SEP_BODY_FILE])


class ItemKind(str, Enum):
    """Las seis clases de item que puede codificar un token."""

    HEADER = "header"
    QUERY = "query"
    JSON_FIELD = "json_field"
    RAW_JSON_FIELD = "raw_json_field"
    FORM_FIELD = "form_field"
    FILE_FIELD = "file_field"

    @property
    def is_json(self) -> bool:
        return self in (ItemKind.JSON_FIELD, ItemKind.RAW_JSON_FIELD)

    @property
    def is_form(self) -> bool:
        return self in (ItemKind.FORM_FIELD, ItemKind.FILE_FIELD)

    @property
    def is_body(self) -> bool:
        return self.is_json or self.is_form


class Item(BaseModel):
    """Un token de la línea de comandos ya clasificado.

    Por qué guardar `sep` y `orig`:
    - `sep` distingue variantes de un mismo kind (`=` vs `=@`, `:` vs `;`).
    - `orig` permite reportar el token exacto en los errores.
    """

    model_config = ConfigDict(frozen=True)

    kind: ItemKind = Field(..., description="Clase del item.")
    key: str = Field(
        ...,
        description="Nombre del header/param/campo. Vacío solo para `@path`.",
    )
    raw_value: str = Field(
        default="",
        description="Valor tal cual aparece tras el separador (sin escapes).",
    )
    sep: str = Field(..., min_length=1, description="Separador que decidió el kind.")
    orig: str = Field(..., min_length=1, description="Token original.")

    @model_validator(mode="after")
    def _key_required(self) -> "Item":
        if not self.key and self.sep != SEP_BODY_FILE:
            raise ValueError("item key must not be empty")
        return self

    @property
    def from_file(self) -> bool:
        return self.sep in SEP_GROUP_FILE_ITEMS

    @property
    def is_body_file(self) -> bool:
        return self.sep == SEP_BODY_FILE

    @property
    def no_value_header(self) -> bool:
        return self.sep == SEP_HEADER_NO_VALUE


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class FileReference(BaseModel):
    """Ruta a un fichero que el transporte leerá (el Core nunca lo abre)."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Ruta tal cual la escribió el usuario.")
    embed: bool = Field(
        default=False,
        description="True: el contenido se envía como texto del campo; False: adjunto.",
    )


class JsonBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["json"] = "json"
    document: dict[str, Any] = Field(default_factory=dict)


class FormBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["form"] = "form"
    fields: list[tuple[str, str]] = Field(default_factory=list)


class MultipartBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["multipart"] = "multipart"
    fields: list[tuple[str, str | FileReference]] = Field(default_factory=list)


class FileBody(BaseModel):
    """Body completo leído de un fichero (`@path`)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    file: FileReference


BodyPayload = Annotated[
    JsonBody | FormBody | MultipartBody | FileBody,
    Field(discriminator="type"),
]


class AuthSpec(BaseModel):
    """Requisito de autenticación. El Core solo lo registra; el transporte lo aplica."""

    model_config = ConfigDict(frozen=True)

    scheme: Literal["basic", "digest", "bearer"] = "basic"
    credentials: str = Field(..., min_length=1, description="`user:pass` o token.")


class RequestSpec(BaseModel):
    """Request ya ensamblada, inmutable una vez construida."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod = Field(default=HttpMethod.GET)
    url: str = Field(..., min_length=1)
    query: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Parámetros en orden; claves repetidas se conservan.",
    )
    headers: dict[str, str | None] = Field(
        default_factory=dict,
        description="Headers (identidad case-insensitive). None = marcador `Name;` (header sin valor).",
    )
    body: BodyPayload | None = None
    auth: AuthSpec | None = None

    @property
    def has_body(self) -> bool:
        return self.body is not None

    def has_header(self, name: str) -> bool:
        wanted = name.lower()
        return any(key.lower() == wanted for key in self.headers)

    def get_header(self, name: str, default: str | None = None) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


class ResponseSpec(BaseModel):
    """Response tal cual la devolvió el transporte."""

    status_code: int = Field(..., ge=100, le=999)
    headers: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Headers en orden de llegada; duplicados se conservan.",
    )
    body_bytes: bytes = b""
    content_type: str | None = Field(
        default=None,
        description="Derivado de los headers si no se indica.",
    )
    http_version: str = "HTTP/1.1"
    reason: str | None = None

    @model_validator(mode="after")
    def _derive_content_type(self) -> "ResponseSpec":
        if self.content_type is None:
            for name, value in self.headers:
                if name.lower() == "content-type":
                    self.content_type = value
                    break
        return self


class SegmentRole(str, Enum):
    REQUEST_LINE = "request-line"
    STATUS_LINE = "status-line"
    HEADER_LINE = "header-line"
    BODY_JSON = "body-json"
    BODY_TEXT = "body-text"
    BODY_BINARY_PLACEHOLDER = "body-binary-placeholder"


class Segment(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: SegmentRole
    text: str
    meta: dict[str, Any] = Field(default_factory=dict)


class RenderedOutput(BaseModel):
    """Secuencia ordenada de segmentos etiquetados + avisos no fatales."""

    segments: list[Segment] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def roles(self) -> list[SegmentRole]:
        return [s.role for s in self.segments]

    def plain_text(self) -> str:
        return "\n".join(s.text for s in self.segments)
