"""Tests for document/merger.py -- merge_config() and new_keys()."""

import copy

from kit_updater.document import from_plain, merge_config, new_keys, parse_config, to_plain


def _merge(current: dict, incoming: dict) -> dict:
    return to_plain(merge_config(from_plain(current), from_plain(incoming)))


class TestMergeConfig:
    """Tests for merge_config(current, incoming)."""

    def test_user_scalar_wins_and_new_key_added(self):
        assert _merge({"a": 1}, {"a": 2, "b": 3}) == {"a": 1, "b": 3}

    def test_nested_mappings_merge_recursively(self):
        current = {"project": {"name": "custom", "lang": "en"}}
        incoming = {"project": {"name": "default", "lang": "fr", "theme": "dark"}}
        assert _merge(current, incoming) == {
            "project": {"name": "custom", "lang": "en", "theme": "dark"}
        }

    def test_keys_only_in_current_are_kept(self):
        assert _merge({"a": 1, "local": {"x": 1}}, {"a": 2}) == {
            "a": 1,
            "local": {"x": 1},
        }

    def test_incoming_mapping_replaces_current_scalar(self):
        assert _merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_incoming_scalar_does_not_replace_current_mapping(self):
        assert _merge({"a": {"b": 1}}, {"a": 5}) == {"a": {"b": 1}}

    def test_user_null_is_preserved(self):
        assert _merge({"a": None}, {"a": "default"}) == {"a": None}

    def test_inputs_not_mutated(self):
        current = from_plain({"a": {"b": 1}})
        incoming = from_plain({"a": {"c": 2}, "d": {"e": 3}})
        before = (copy.deepcopy(current), copy.deepcopy(incoming))

        merged = merge_config(current, incoming)
        merged["d"]["e"] = None

        assert (current, incoming) == before

    def test_idempotent(self):
        current = from_plain({"a": 1, "n": {"x": "u"}})
        incoming = from_plain({"a": 2, "n": {"x": "v", "y": True}, "z": 0})
        once = merge_config(current, incoming)
        assert merge_config(once, incoming) == once

    def test_key_order_current_first_then_new(self):
        merged = merge_config(
            parse_config("b: 1\na: 2\n"), parse_config("c: 3\na: 9\nb: 8\n")
        )
        assert list(merged) == ["b", "a", "c"]

    def test_literal_text_survives_merge(self):
        merged = merge_config(parse_config("version: 1.10\n"), parse_config("version: 2.0\n"))
        assert merged["version"].text == "1.10"

    def test_empty_current(self):
        assert _merge({}, {"a": {"b": 1}}) == {"a": {"b": 1}}


class TestNewKeys:
    """Tests for new_keys(current, incoming)."""

    def test_lists_nested_dotted_paths(self):
        current = from_plain({"project": {"name": "x"}})
        incoming = from_plain(
            {"project": {"name": "y", "theme": "dark"}, "features": {"t": False}}
        )
        assert new_keys(current, incoming) == ["project.theme", "features"]

    def test_nothing_new(self):
        tree = from_plain({"a": 1, "b": {"c": 2}})
        assert new_keys(tree, tree) == []

    def test_mapping_over_scalar_counts_once(self):
        assert new_keys(from_plain({"a": 1}), from_plain({"a": {"b": 1, "c": 2}})) == ["a"]
