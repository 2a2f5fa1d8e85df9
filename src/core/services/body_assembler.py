"""Body assembly: JSON object or form/multipart, never both.

The body type is locked by the first body item seen:

    EMPTY --json item--> LOCKED_JSON --form item--> ConflictingBodyTypeError
    EMPTY --form item--> LOCKED_FORM --json item--> ConflictingBodyTypeError

JSON keys are kept flat: `a.b=1` produces `{"a.b": "1"}`, never a nested
object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from core.domain.errors import ConflictingBodyTypeError
from core.domain.models import (
    BodyPayload,
    FileBody,
    FileReference,
    FormBody,
    Item,
    ItemKind,
    JsonBody,
    MultipartBody,
)
from core.services.value_coercer import coerce_item


class BodyState(str, Enum):
    EMPTY = "empty"
    LOCKED_JSON = "json"
    LOCKED_FORM = "form"


@dataclass
class BodyAccumulator:
    """Collects body items in order and enforces the body type lock."""

    state: BodyState = BodyState.EMPTY
    document: dict[str, Any] = field(default_factory=dict)
    form_fields: list[tuple[str, str | FileReference]] = field(default_factory=list)
    body_file: FileReference | None = None
    multipart: bool = False

    def add(self, item: Item) -> None:
        if not item.kind.is_body:
            raise TypeError(f"not a body item: {item.kind!r}")

        target = BodyState.LOCKED_JSON if item.kind.is_json else BodyState.LOCKED_FORM
        if self.state is BodyState.EMPTY:
            self.state = target
        elif self.state is not target:
            raise ConflictingBodyTypeError(item.orig, self.state.value)

        # `@path` replaces the whole body: nothing else may join it.
        if self.body_file is not None:
            raise ConflictingBodyTypeError(item.orig, "file")
        if item.is_body_file and self.form_fields:
            raise ConflictingBodyTypeError(item.orig, self.state.value)

        kind = item.kind
        if kind is ItemKind.JSON_FIELD or kind is ItemKind.RAW_JSON_FIELD:
            self.document[item.key] = coerce_item(item)
        elif kind is ItemKind.FILE_FIELD:
            reference = FileReference(path=item.raw_value, embed=False)
            if item.is_body_file:
                self.body_file = reference
            else:
                self.form_fields.append((item.key, reference))
                self.multipart = True
        elif kind is ItemKind.FORM_FIELD:
            if item.from_file:
                self.form_fields.append(
                    (item.key, FileReference(path=item.raw_value, embed=True))
                )
                self.multipart = True
            else:
                self.form_fields.append((item.key, coerce_item(item)))
        else:
            raise TypeError(f"unhandled body item kind: {kind!r}")

    def payload(self) -> BodyPayload | None:
        if self.state is BodyState.EMPTY:
            return None
        if self.state is BodyState.LOCKED_JSON:
            return JsonBody(document=dict(self.document))
        if self.body_file is not None:
            return FileBody(file=self.body_file)
        if self.multipart:
            return MultipartBody(fields=list(self.form_fields))
        return FormBody(fields=[(k, v) for k, v in self.form_fields if isinstance(v, str)])


def assemble(body_items: Iterable[Item]) -> BodyPayload | None:
    """Merge body items into a single payload (None when there are none)."""

    accumulator = BodyAccumulator()
    for item in body_items:
        accumulator.add(item)
    return accumulator.payload()
