"""Token classification for the positional request grammar.

Each CLI token (`X-Token:abc`, `q==1`, `age:=30`, ...) is mapped to exactly
one `ItemKind` by looking only at its separator. Values are never inspected
here; typing them is the job of `core.services.value_coercer`.

Backslash escapes a character in the key so it is never read as (part of) a
separator: `a\\=b=c` is the JSON field `a=b` with value `c`. Everything after
the separator is kept verbatim, backslashes included.
"""

from __future__ import annotations

from typing import Iterable

from core.domain.errors import MalformedItemError
from core.domain.models import (
    SEP_BODY_FILE,
    SEP_DATA,
    SEP_FILE,
    SEP_FORM_FILE,
    SEP_HEADER,
    SEP_HEADER_NO_VALUE,
    SEP_QUERY,
    SEP_RAW_JSON,
    Item,
    ItemKind,
)

_KIND_BY_SEPARATOR: dict[str, ItemKind] = {
    SEP_RAW_JSON: ItemKind.RAW_JSON_FIELD,
    SEP_QUERY: ItemKind.QUERY,
    SEP_FORM_FILE: ItemKind.FORM_FIELD,
    SEP_FILE: ItemKind.FILE_FIELD,
    SEP_HEADER: ItemKind.HEADER,
    SEP_DATA: ItemKind.JSON_FIELD,
}

# Longest first: at a given position the longest separator wins.
_SEPARATORS = sorted(_KIND_BY_SEPARATOR, key=len, reverse=True)

_ESCAPE = "\\"


def _separator_at(token: str, pos: int) -> str | None:
    for sep in _SEPARATORS:
        if token.startswith(sep, pos):
            return sep
    return None


def _kind_for(sep: str, *, form: bool) -> ItemKind:
    if sep == SEP_DATA and form:
        return ItemKind.FORM_FIELD
    return _KIND_BY_SEPARATOR[sep]


def classify(token: str, *, form: bool = False) -> Item:
    """Classify one raw token into an `Item`.

    `form=True` only changes the meaning of a plain `=` (form field instead
    of JSON field). Raises `MalformedItemError` on an empty token, a token
    without a separator, or an empty key.
    """

    if not token:
        raise MalformedItemError(token, "empty item")

    # `@path`: whole body from a file. Only valid with nothing before the `@`.
    if token.startswith(SEP_BODY_FILE):
        path = token[len(SEP_BODY_FILE):]
        if not path:
            raise MalformedItemError(token, "missing file path after '@'")
        return Item(
            kind=ItemKind.FILE_FIELD,
            key="",
            raw_value=path,
            sep=SEP_BODY_FILE,
            orig=token,
        )

    key_chars: list[str] = []
    last_escaped = False
    pos = 0
    while pos < len(token):
        ch = token[pos]
        if ch == _ESCAPE and pos + 1 < len(token):
            key_chars.append(token[pos + 1])
            last_escaped = True
            pos += 2
            continue

        sep = _separator_at(token, pos)
        if sep is not None:
            key = "".join(key_chars)
            if not key:
                raise MalformedItemError(token, f"missing key before '{sep}'")
            return Item(
                kind=_kind_for(sep, form=form),
                key=key,
                raw_value=token[pos + len(sep):],
                sep=sep,
                orig=token,
            )

        key_chars.append(ch)
        last_escaped = False
        pos += 1

    if not last_escaped and token.endswith(SEP_HEADER_NO_VALUE):
        key = "".join(key_chars)[: -len(SEP_HEADER_NO_VALUE)]
        if not key:
            raise MalformedItemError(token, "missing header name before ';'")
        return Item(
            kind=ItemKind.HEADER,
            key=key,
            raw_value="",
            sep=SEP_HEADER_NO_VALUE,
            orig=token,
        )

    raise MalformedItemError(token)


def classify_all(tokens: Iterable[str], *, form: bool = False) -> list[Item]:
    """Classify every token, failing on the first malformed one."""

    return [classify(token, form=form) for token in tokens]
