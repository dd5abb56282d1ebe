"""Unit tests for the output transformers and their registry.

WHY: Output transformers decide the shape of the JSON document. A wrong
fold (lost duplicates in the list, kept duplicates in the dict) or a
permissive registry would produce documents consumers cannot rely on.

HOW: Transformers are driven directly with hand-built OptimizedFile
objects; no file system access is needed. Documents are validated against
the shipped output schema with jsonschema.
"""

import base64
import json

import jsonschema
import pytest

from base64_indexer.core.models import Entry, OptimizedFile
from base64_indexer.core.names import PatternNameTransformer, identity_name
from base64_indexer.errors import ConfigurationError
from base64_indexer.transformers import (
    OUTPUT_SCHEMA_PATH,
    TRANSFORMER_NAMES,
    DictionaryTransformer,
    OutputShape,
    VerboseTransformer,
    resolve_output_transformer,
    transformer_for_shape,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def _load_schema():
    with open(OUTPUT_SCHEMA_PATH) as f:
        return json.load(f)


def _fold(transformer, files, name_transformer=identity_name):
    buffer = transformer.create_buffer()
    for file in files:
        transformer.update_buffer(buffer, transformer.transform(name_transformer, file))
    return buffer


class TestTransform:
    """transform() is shared by every variant."""

    @pytest.mark.parametrize("transformer", [VerboseTransformer(), DictionaryTransformer()])
    def test_builds_data_uri_and_key(self, transformer):
        entry = transformer.transform(identity_name, OptimizedFile("in/degree53.png", PNG_BYTES))
        assert entry.key == "degree53.png"
        assert entry.data.startswith("data:image/png;base64,")
        assert entry.data.count(";base64,") == 1

    def test_round_trip_reproduces_bytes(self):
        payload = bytes(range(256))
        entry = VerboseTransformer().transform(identity_name, OptimizedFile("x.gif", payload))
        prefix, encoded = entry.data.split(";base64,", 1)
        assert prefix == "data:image/gif"
        assert base64.b64decode(encoded) == payload

    def test_name_transformer_applied_to_base_name(self):
        seen = []

        def record(name):
            seen.append(name)
            return "key"

        entry = VerboseTransformer().transform(record, OptimizedFile("a/b/c.svg", b"<svg/>"))
        assert seen == ["c.svg"]
        assert entry == Entry(key="key", data=entry.data)

    def test_custom_name_error_propagates_unchanged(self):
        def broken(name):
            raise KeyError(name)

        with pytest.raises(KeyError):
            VerboseTransformer().transform(broken, OptimizedFile("a.png", PNG_BYTES))

    @pytest.mark.parametrize("result", [None, 1, b"a.png"])
    def test_non_string_key_rejected(self, result):
        with pytest.raises(ConfigurationError) as excinfo:
            VerboseTransformer().transform(lambda name: result, OptimizedFile("a.png", PNG_BYTES))
        assert "a.png" in str(excinfo.value)

    def test_transform_does_not_touch_buffers(self):
        transformer = DictionaryTransformer()
        buffer = transformer.create_buffer()
        transformer.transform(identity_name, OptimizedFile("a.png", PNG_BYTES))
        assert buffer == {}


class TestVerboseTransformer:
    def test_buffer_is_fresh_list(self):
        transformer = VerboseTransformer()
        first = transformer.create_buffer()
        first.append("x")
        assert transformer.create_buffer() == []

    def test_preserves_order_and_length(self):
        files = [OptimizedFile("{}.png".format(n), PNG_BYTES) for n in ("c", "a", "b")]
        buffer = _fold(VerboseTransformer(), files)
        assert [item["name"] for item in buffer] == ["c.png", "a.png", "b.png"]

    def test_duplicates_retained(self):
        files = [OptimizedFile("one/a.png", b"1"), OptimizedFile("two/a.png", b"2")]
        buffer = _fold(VerboseTransformer(), files)
        assert len(buffer) == 2
        assert buffer[0]["name"] == buffer[1]["name"] == "a.png"

    def test_document_matches_schema(self):
        files = [OptimizedFile("a.png", PNG_BYTES), OptimizedFile("b.svg", b"<svg/>")]
        jsonschema.validate(_fold(VerboseTransformer(), files), _load_schema())


class TestDictionaryTransformer:
    def test_single_file_has_one_property(self):
        pattern = PatternNameTransformer(r"(.*?)\.[^.]+")
        buffer = _fold(DictionaryTransformer(), [OptimizedFile("degree53.png", PNG_BYTES)], pattern)
        assert list(buffer) == ["degree53"]

    def test_duplicate_keys_last_write_wins(self):
        files = [OptimizedFile("one/a.png", b"first"), OptimizedFile("two/a.png", b"second")]
        buffer = _fold(DictionaryTransformer(), files)
        assert len(buffer) == 1
        assert buffer["a.png"] == "data:image/png;base64," + base64.b64encode(b"second").decode()

    def test_colliding_transformed_names(self):
        files = [OptimizedFile("logo.png", b"png"), OptimizedFile("logo.svg", b"svg")]
        buffer = _fold(DictionaryTransformer(), files, PatternNameTransformer(r"(.*?)\.[^.]+"))
        assert list(buffer) == ["logo"]
        assert buffer["logo"].startswith("data:image/svg+xml;base64,")

    def test_document_matches_schema(self):
        files = [OptimizedFile("a.png", PNG_BYTES), OptimizedFile("b.jpg", b"jpeg")]
        jsonschema.validate(_fold(DictionaryTransformer(), files), _load_schema())


class TestRegistry:
    def test_names(self):
        assert TRANSFORMER_NAMES == {
            "default": OutputShape.LIST,
            "verbose": OutputShape.LIST,
            "dictionary": OutputShape.KEYED,
        }

    @pytest.mark.parametrize("name, cls", [
        ("default", VerboseTransformer),
        ("verbose", VerboseTransformer),
        ("dictionary", DictionaryTransformer),
    ])
    def test_resolve_by_name(self, name, cls):
        assert isinstance(resolve_output_transformer(name), cls)

    def test_none_is_verbose(self):
        assert isinstance(resolve_output_transformer(None), VerboseTransformer)

    def test_resolve_by_shape(self):
        assert isinstance(transformer_for_shape(OutputShape.KEYED), DictionaryTransformer)
        assert isinstance(resolve_output_transformer(OutputShape.LIST), VerboseTransformer)

    def test_unknown_name_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as excinfo:
            resolve_output_transformer("bogus")
        assert "bogus" in str(excinfo.value)
        assert "dictionary" in str(excinfo.value)

    def test_names_are_case_sensitive(self):
        with pytest.raises(ConfigurationError):
            resolve_output_transformer("Dictionary")

    def test_capability_object_used_as_is(self):
        class Counting:
            def create_buffer(self):
                return {"count": 0}

            def update_buffer(self, buffer, entry):
                buffer["count"] += 1

            def transform(self, name_transformer, file):
                return Entry(key=name_transformer(file.name), data="data:x;base64,")

        custom = Counting()
        assert resolve_output_transformer(custom) is custom

    def test_incomplete_object_rejected(self):
        class NoTransform:
            def create_buffer(self):
                return []

            def update_buffer(self, buffer, entry):
                buffer.append(entry)

        with pytest.raises(ConfigurationError):
            resolve_output_transformer(NoTransform())
