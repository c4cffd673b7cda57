"""Tests for document/parser.py and document/values.py.

Covers:
- Scalar coercion (bool, null, int, float, quoted and raw strings)
- Nesting by indentation, dedent back to outer mappings
- Block scalar markers opening a mapping
- Skipped lines (sequence items, non key/value lines) recorded, never raised
- Plain-value conversion helpers
"""

import pytest

from kit_updater.document import (
    Scalar,
    ValueKind,
    from_plain,
    parse_config,
    parse_config_document,
    to_plain,
)
from kit_updater.document.values import coerce_scalar

# ---------------------------------------------------------------------------
# coerce_scalar
# ---------------------------------------------------------------------------


class TestCoerceScalar:
    """Tests for coerce_scalar(raw)."""

    @pytest.mark.parametrize(
        "raw,kind,value",
        [
            ("true", ValueKind.BOOL, True),
            ("false", ValueKind.BOOL, False),
            ("null", ValueKind.NULL, None),
            ("42", ValueKind.INT, 42),
            ("3.14", ValueKind.FLOAT, 3.14),
            ("hello world", ValueKind.STRING, "hello world"),
        ],
    )
    def test_kinds(self, raw, kind, value):
        scalar = coerce_scalar(raw)
        assert scalar.kind == kind
        assert scalar.value == value

    def test_float_keeps_literal_text(self):
        """1.10 stays 1.10, not 1.1."""
        scalar = coerce_scalar("1.10")
        assert scalar.kind == ValueKind.FLOAT
        assert scalar.text == "1.10"

    def test_double_quoted_string_unwrapped(self):
        scalar = coerce_scalar('"42"')
        assert scalar.kind == ValueKind.STRING
        assert scalar.value == "42"
        assert scalar.quote == '"'

    def test_single_quoted_string_unwrapped(self):
        assert coerce_scalar("'a b'").value == "a b"

    def test_lone_quote_is_raw_string(self):
        assert coerce_scalar('"').value == '"'

    def test_mismatched_quotes_are_raw(self):
        assert coerce_scalar("'abc\"").value == "'abc\""

    @pytest.mark.parametrize("raw", ["-1", "1e5", "1.2.3", "True", "yes", "v1"])
    def test_non_matching_numbers_and_words_are_strings(self, raw):
        scalar = coerce_scalar(raw)
        assert scalar.kind == ValueKind.STRING
        assert scalar.value == raw

    def test_equality_ignores_quote_style(self):
        assert Scalar(ValueKind.STRING, "x", '"') == Scalar(ValueKind.STRING, "x")


# ---------------------------------------------------------------------------
# parse_config
# ---------------------------------------------------------------------------


class TestParseConfig:
    """Tests for parse_config(text)."""

    def test_flat_mapping(self):
        tree = parse_config("a: 1\nb: two\n")
        assert to_plain(tree) == {"a": 1, "b": "two"}

    def test_nested_mapping(self):
        text = "project:\n  name: demo\n  meta:\n    owner: me\nversion: 2.0\n"
        assert to_plain(parse_config(text)) == {
            "project": {"name": "demo", "meta": {"owner": "me"}},
            "version": 2.0,
        }

    def test_dedent_returns_to_outer_mapping(self):
        text = "a:\n  b:\n    c: 1\n  d: 2\ne: 3\n"
        assert to_plain(parse_config(text)) == {
            "a": {"b": {"c": 1}, "d": 2},
            "e": 3,
        }

    def test_empty_value_opens_mapping(self):
        assert parse_config("section:\n") == {"section": {}}

    @pytest.mark.parametrize("marker", ["|", ">", "|-", ">+"])
    def test_block_marker_opens_mapping(self, marker):
        tree = parse_config(f"desc: {marker}\n  inner: x\n")
        assert to_plain(tree) == {"desc": {"inner": "x"}}

    def test_comments_and_blank_lines_ignored(self):
        text = "# header\n\na: 1\n   # indented comment\nb: 2\n"
        doc = parse_config_document(text)
        assert to_plain(doc.tree) == {"a": 1, "b": 2}
        assert doc.skipped == []

    def test_value_with_colon(self):
        tree = parse_config("url: https://example.com:8080/x\n")
        assert tree["url"].value == "https://example.com:8080/x"

    def test_duplicate_key_last_wins(self):
        assert to_plain(parse_config("a: 1\na: 2\n")) == {"a": 2}

    def test_key_order_is_document_order(self):
        assert list(parse_config("z: 1\na: 2\nm: 3\n")) == ["z", "a", "m"]

    def test_empty_document(self):
        assert parse_config("") == {}


class TestSkippedLines:
    """Lines outside the grammar are dropped and recorded."""

    def test_sequence_items_skipped(self):
        doc = parse_config_document("items:\n  - one\n  - two\nafter: 1\n")
        assert to_plain(doc.tree) == {"items": {}, "after": 1}
        assert [s.lineno for s in doc.skipped] == [2, 3]
        assert all(s.reason == "sequence item" for s in doc.skipped)

    def test_non_key_value_line_skipped(self):
        doc = parse_config_document("a: 1\njust some text\nb: 2\n")
        assert to_plain(doc.tree) == {"a": 1, "b": 2}
        assert len(doc.skipped) == 1
        assert doc.skipped[0].text == "just some text"
        assert doc.skipped[0].reason == "not a key: value line"

    def test_empty_key_skipped(self):
        doc = parse_config_document("   : x\na: 1\n")
        assert to_plain(doc.tree) == {"a": 1}
        assert doc.skipped[0].reason == "empty key"

    def test_malformed_input_never_raises(self):
        doc = parse_config_document("::::\n\t- \n  -\n{not: [yaml\n")
        assert isinstance(doc.tree, dict)


# ---------------------------------------------------------------------------
# Plain conversion
# ---------------------------------------------------------------------------


class TestPlainConversion:
    """Tests for from_plain / to_plain."""

    def test_from_plain_builds_scalars(self):
        tree = from_plain({"a": True, "b": {"c": None}})
        assert tree["a"] == Scalar(ValueKind.BOOL, "true")
        assert tree["b"]["c"] == Scalar(ValueKind.NULL, "null")

    def test_from_plain_rejects_lists(self):
        with pytest.raises(ValueError, match="List values"):
            from_plain({"a": [1, 2]})

    @pytest.mark.parametrize("value", [-1, 1e20, float("nan"), "a\nb", object()])
    def test_from_plain_rejects_unrepresentable(self, value):
        with pytest.raises(ValueError):
            from_plain({"a": value})
