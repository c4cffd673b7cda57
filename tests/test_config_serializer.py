"""Tests for document/serializer.py -- dump_config() and render_scalar()."""

import pytest
import yaml

from kit_updater.document import (
    Scalar,
    ValueKind,
    dump_config,
    from_plain,
    parse_config,
    to_plain,
)
from kit_updater.document.serializer import render_scalar


class TestDumpConfig:
    """Tests for dump_config(tree)."""

    def test_flat_and_nested(self):
        tree = from_plain({"version": "2.0", "project": {"name": "demo", "debug": False}})
        assert dump_config(tree) == (
            'version: "2.0"\n'
            "project:\n"
            "  name: demo\n"
            "  debug: false\n"
        )

    def test_custom_indent(self):
        tree = from_plain({"a": {"b": 1}})
        assert dump_config(tree, indent=4) == "a:\n    b: 1\n"

    def test_empty_tree(self):
        assert dump_config({}) == ""

    def test_empty_nested_mapping(self):
        assert dump_config({"section": {}}) == "section:\n"

    def test_parsed_literal_text_preserved(self):
        text = "version: 1.10\nname: 'quoted'\nport: 8080\nflag: null\n"
        assert dump_config(parse_config(text)) == text

    def test_reparse_gives_same_tree(self):
        tree = from_plain(
            {
                "a": "true",
                "b": "007",
                "c": " padded ",
                "d": "",
                "e": "# not a comment",
                "f": {"g": "|", "h": "x: y"},
                "i": 1.5,
                "j": None,
            }
        )
        assert parse_config(dump_config(tree)) == tree

    def test_output_is_valid_yaml(self):
        tree = from_plain({"project": {"name": "demo", "lang": "en"}, "count": 3})
        assert yaml.safe_load(dump_config(tree)) == to_plain(tree)

    @pytest.mark.parametrize("key", ["", " a", "a:b", "#x", "- x", "-", "a\nb"])
    def test_unwritable_keys_raise(self, key):
        with pytest.raises(ValueError):
            dump_config({key: Scalar(ValueKind.INT, "1")})


class TestRenderScalar:
    """Tests for render_scalar(scalar)."""

    def test_string_that_looks_like_bool_is_quoted(self):
        assert render_scalar(Scalar(ValueKind.STRING, "false")) == '"false"'

    def test_plain_string_unquoted(self):
        assert render_scalar(Scalar(ValueKind.STRING, "hello")) == "hello"

    def test_original_quote_char_kept(self):
        assert render_scalar(Scalar(ValueKind.STRING, "x", "'")) == "'x'"

    def test_non_string_uses_text(self):
        assert render_scalar(Scalar(ValueKind.FLOAT, "1.10")) == "1.10"
