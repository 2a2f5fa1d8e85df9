"""
Unit tests for body assembly and the body type lock.
"""

import pytest

from core.domain.errors import ConflictingBodyTypeError
from core.domain.models import FileBody, FileReference, FormBody, JsonBody, MultipartBody
from core.services.body_assembler import BodyAccumulator, BodyState, assemble
from core.services.item_classifier import classify, classify_all


class TestJsonBody:
    """JSON items merge into one flat object."""

    def test_merge_fields(self):
        body = assemble(classify_all(["name=Bob", "age:=30", "tags:=[\"a\"]"]))

        assert isinstance(body, JsonBody)
        assert body.document == {"name": "Bob", "age": 30, "tags": ["a"]}

    def test_dotted_keys_are_not_nested(self):
        body = assemble(classify_all(["a.b=1", "a.c:=2"]))

        assert body.document == {"a.b": "1", "a.c": 2}

    def test_last_key_wins(self):
        body = assemble(classify_all(["a=1", "b=2", "a:=3"]))

        assert body.document == {"a": 3, "b": "2"}
        assert list(body.document) == ["a", "b"]

    def test_no_items(self):
        assert assemble([]) is None


class TestFormBody:
    """Form items keep their order; files switch to multipart."""

    def test_urlencoded(self):
        body = assemble(classify_all(["a=1", "b=2", "a=3"], form=True))

        assert isinstance(body, FormBody)
        assert body.fields == [("a", "1"), ("b", "2"), ("a", "3")]

    def test_upload_switches_to_multipart(self):
        body = assemble(classify_all(["title=x", "doc:@report.pdf"], form=True))

        assert isinstance(body, MultipartBody)
        assert body.fields == [
            ("title", "x"),
            ("doc", FileReference(path="report.pdf", embed=False)),
        ]

    def test_embedded_file_switches_to_multipart(self):
        body = assemble([classify("bio=@bio.txt")])

        assert isinstance(body, MultipartBody)
        assert body.fields == [("bio", FileReference(path="bio.txt", embed=True))]

    def test_whole_body_file(self):
        body = assemble([classify("@data.bin")])

        assert isinstance(body, FileBody)
        assert body.file.path == "data.bin"


class TestBodyLock:
    """The first body item decides the body type."""

    def test_state_transitions(self):
        acc = BodyAccumulator()
        assert acc.state is BodyState.EMPTY

        acc.add(classify("a=1"))
        assert acc.state is BodyState.LOCKED_JSON

        with pytest.raises(ConflictingBodyTypeError) as exc_info:
            acc.add(classify("f:@x.png"))
        assert exc_info.value.token == "f:@x.png"
        assert exc_info.value.locked == "json"

    def test_json_after_form(self):
        with pytest.raises(ConflictingBodyTypeError):
            assemble([classify("a=1", form=True), classify("b:=2", form=True)])

    def test_form_file_after_json(self):
        with pytest.raises(ConflictingBodyTypeError):
            assemble(classify_all(["name=Bob", "bio=@bio.txt"]))

    def test_body_file_is_exclusive(self):
        with pytest.raises(ConflictingBodyTypeError):
            assemble(classify_all(["@data.bin", "f:@x.png"]))
        with pytest.raises(ConflictingBodyTypeError):
            assemble(classify_all(["f:@x.png", "@data.bin"]))

    def test_non_body_item_rejected(self):
        with pytest.raises(TypeError):
            BodyAccumulator().add(classify("X-A:1"))
