"""Typing of item values.

`x=5` stays the JSON string "5"; only `x:=5` yields the number 5.
"""

from __future__ import annotations

import json
import math
from typing import Any

from core.domain.errors import InvalidJsonLiteralError
from core.domain.models import Item, ItemKind


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def loads_strict(text: str) -> Any:
    """`json.loads` without NaN/Infinity and without numbers overflowing to inf."""

    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


def parse_json_literal(key: str, raw_value: str) -> Any:
    """Parse exactly one JSON value (object/array/number/bool/null/string)."""

    try:
        return loads_strict(raw_value)
    except ValueError as exc:
        raise InvalidJsonLiteralError(key, raw_value, str(exc)) from exc


def coerce(kind: ItemKind, raw_value: str, *, key: str | None = None) -> Any:
    if kind is ItemKind.RAW_JSON_FIELD:
        return parse_json_literal(key or "", raw_value)
    if kind is ItemKind.JSON_FIELD:
        return raw_value
    if kind in (
        ItemKind.HEADER,
        ItemKind.QUERY,
        ItemKind.FORM_FIELD,
        ItemKind.FILE_FIELD,
    ):
        return raw_value
    raise TypeError(f"unhandled item kind: {kind!r}")


def coerce_item(item: Item) -> Any:
    return coerce(item.kind, item.raw_value, key=item.key)
