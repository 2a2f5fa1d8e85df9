"""Request model building.

Folds classified items into one `RequestSpec`:
- headers: case-insensitive identity, first spelling kept, last value wins;
- query: appended in order, repeated keys preserved;
- body: delegated to `BodyAccumulator` (JSON xor form).

Every token is classified before anything is built, so a single bad item
rejects the whole request before the transport is involved.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence
from urllib.parse import urlencode, urlsplit, urlunsplit

from core.domain.errors import InvalidMethodError
from core.domain.models import AuthSpec, HttpMethod, Item, ItemKind, RequestSpec
from core.services.body_assembler import BodyAccumulator
from core.services.item_classifier import classify_all
from core.services.value_coercer import coerce_item

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")

_DEFAULT_HOST = "localhost"


def normalize_url(url: str, *, default_scheme: str = "http") -> str:
    """Complete a user-typed URL.

    - `example.com`   -> `http://example.com`
    - `:3000/api`     -> `http://localhost:3000/api`
    - `/api` or ``    -> `http://localhost/api`, `http://localhost`
    """

    url = url.strip()
    if _SCHEME_RE.match(url):
        return url
    if not url:
        return f"{default_scheme}://{_DEFAULT_HOST}"
    if url.startswith("//"):
        return f"{default_scheme}:{url}"
    if url.startswith(":"):
        port, slash, path = url[1:].partition("/")
        host = f"{_DEFAULT_HOST}:{port}" if port else _DEFAULT_HOST
        return f"{default_scheme}://{host}{slash}{path}"
    if url.startswith("/"):
        return f"{default_scheme}://{_DEFAULT_HOST}{url}"
    return f"{default_scheme}://{url}"


def resolve_method(method_hint: str | None, has_body: bool) -> HttpMethod:
    if method_hint is None or not method_hint.strip():
        return HttpMethod.POST if has_body else HttpMethod.GET
    try:
        return HttpMethod(method_hint.strip().upper())
    except ValueError:
        raise InvalidMethodError(method_hint) from None


def build(
    method_hint: str | None,
    url: str,
    items: Iterable[Item],
    *,
    default_scheme: str = "http",
    auth: AuthSpec | None = None,
) -> RequestSpec:
    headers: dict[str, str | None] = {}
    spellings: dict[str, str] = {}
    query: list[tuple[str, str]] = []
    body = BodyAccumulator()

    for item in items:
        kind = item.kind
        if kind is ItemKind.HEADER:
            name = spellings.setdefault(item.key.lower(), item.key)
            headers[name] = None if item.no_value_header else coerce_item(item)
        elif kind is ItemKind.QUERY:
            query.append((item.key, coerce_item(item)))
        elif kind in (
            ItemKind.JSON_FIELD,
            ItemKind.RAW_JSON_FIELD,
            ItemKind.FORM_FIELD,
            ItemKind.FILE_FIELD,
        ):
            body.add(item)
        else:
            raise TypeError(f"unhandled item kind: {kind!r}")

    payload = body.payload()
    return RequestSpec(
        method=resolve_method(method_hint, payload is not None),
        url=normalize_url(url, default_scheme=default_scheme),
        query=query,
        headers=headers,
        body=payload,
        auth=auth,
    )


def build_from_tokens(
    method_hint: str | None,
    url: str,
    tokens: Sequence[str],
    *,
    form: bool = False,
    default_scheme: str = "http",
    auth: AuthSpec | None = None,
) -> RequestSpec:
    """Classify all `tokens` and build the request in one step."""

    items = classify_all(tokens, form=form)
    return build(method_hint, url, items, default_scheme=default_scheme, auth=auth)


def request_url(request: RequestSpec) -> str:
    """Final URL: query items appended after any query already in the URL."""

    if not request.query:
        return request.url
    parts = urlsplit(request.url)
    extra = urlencode(request.query)
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def split_invocation(
    method_or_url: str,
    url_or_item: str | None,
    items: Sequence[str],
) -> tuple[str | None, str, list[str]]:
    """Resolve `[METHOD] URL [ITEM ...]` positionals.

    When the first positional is not an HTTP method name it is the URL and
    the second positional is the first item (`reqline example.com a=1`).
    """

    if url_or_item is None:
        return None, method_or_url, list(items)
    if method_or_url.upper() in HttpMethod.__members__:
        return method_or_url, url_or_item, list(items)
    return None, method_or_url, [url_or_item, *items]
