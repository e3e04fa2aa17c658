"""Tests for operator_bundler.overrides.merger."""
from __future__ import annotations

import copy
from typing import Any

import pytest

from operator_bundler.errors import OverrideMergeError
from operator_bundler.overrides.merger import (
    apply_map_overrides,
    coerce_value,
    get_path,
    set_path,
    split_path,
)


def _make_tree() -> dict[str, Any]:
    return {
        "driver": {"enabled": True, "version": "550.54.15", "replicas": 2},
        "operator": {"nodeSelector": {"role": "system"}},
        "image": "nvcr.io/nvidia/gpu-operator",
        "ratio": 0.5,
        "list": [1, 2, 3],
    }


# ---------------------------------------------------------------------------
# split_path
# ---------------------------------------------------------------------------


class TestSplitPath:
    def test_single_segment(self) -> None:
        assert split_path("driver") == ["driver"]

    def test_nested(self) -> None:
        assert split_path("a.b.c") == ["a", "b", "c"]

    @pytest.mark.parametrize("path", ["", ".", "a..b", "a.", ".a"])
    def test_malformed_raises(self, path: str) -> None:
        with pytest.raises(ValueError):
            split_path(path)


# ---------------------------------------------------------------------------
# coerce_value
# ---------------------------------------------------------------------------


class TestCoerceValue:
    @pytest.mark.parametrize("raw", ["true", "True", "yes", "on", "1"])
    def test_truthy_strings_for_bool(self, raw: str) -> None:
        assert coerce_value(raw, False) is True

    @pytest.mark.parametrize("raw", ["false", "FALSE", "no", "off", "0"])
    def test_falsy_strings_for_bool(self, raw: str) -> None:
        assert coerce_value(raw, True) is False

    def test_unparseable_bool_keeps_string(self) -> None:
        assert coerce_value("maybe", True) == "maybe"

    def test_int(self) -> None:
        assert coerce_value("42", 1) == 42

    def test_unparseable_int_keeps_string(self) -> None:
        assert coerce_value("forty", 1) == "forty"

    def test_float(self) -> None:
        assert coerce_value("0.25", 1.0) == pytest.approx(0.25)

    def test_no_existing_value_keeps_string(self) -> None:
        assert coerce_value("true", None) == "true"

    def test_existing_string_keeps_string(self) -> None:
        assert coerce_value("42", "old") == "42"


# ---------------------------------------------------------------------------
# set_path / get_path
# ---------------------------------------------------------------------------


class TestSetPath:
    def test_creates_intermediate_maps(self) -> None:
        tree: dict[str, Any] = {}
        set_path(tree, "a.b.c", "x")
        assert tree == {"a": {"b": {"c": "x"}}}

    def test_coerces_to_existing_type(self) -> None:
        tree = _make_tree()
        set_path(tree, "driver.enabled", "false")
        set_path(tree, "driver.replicas", "5")
        assert tree["driver"]["enabled"] is False
        assert tree["driver"]["replicas"] == 5

    def test_non_string_value_stored_as_is(self) -> None:
        tree: dict[str, Any] = {}
        set_path(tree, "a", {"nested": True})
        assert tree == {"a": {"nested": True}}

    def test_intermediate_scalar_raises(self) -> None:
        tree = _make_tree()
        with pytest.raises(ValueError, match="image"):
            set_path(tree, "image.tag", "v1")
        assert tree["image"] == "nvcr.io/nvidia/gpu-operator"

    def test_intermediate_list_raises(self) -> None:
        tree = _make_tree()
        with pytest.raises(ValueError):
            set_path(tree, "list.0", "9")


class TestGetPath:
    def test_existing(self) -> None:
        assert get_path(_make_tree(), "driver.version") == "550.54.15"

    def test_missing_returns_default(self) -> None:
        assert get_path(_make_tree(), "driver.missing", "d") == "d"

    def test_through_scalar_returns_default(self) -> None:
        assert get_path(_make_tree(), "image.tag") is None


# ---------------------------------------------------------------------------
# apply_map_overrides
# ---------------------------------------------------------------------------


class TestApplyMapOverrides:
    def test_none_and_empty_are_noops(self) -> None:
        tree = _make_tree()
        before = copy.deepcopy(tree)
        apply_map_overrides(tree, None)
        apply_map_overrides(tree, {})
        assert tree == before

    def test_applies_all(self) -> None:
        tree = _make_tree()
        apply_map_overrides(
            tree, {"driver.version": "570.86.16", "toolkit.enabled": "true"}
        )
        assert tree["driver"]["version"] == "570.86.16"
        assert tree["toolkit"] == {"enabled": "true"}

    def test_untargeted_paths_untouched(self) -> None:
        tree = _make_tree()
        apply_map_overrides(tree, {"driver.version": "570.86.16"})
        assert tree["driver"]["enabled"] is True
        assert tree["driver"]["replicas"] == 2
        assert tree["operator"] == {"nodeSelector": {"role": "system"}}
        assert tree["list"] == [1, 2, 3]

    def test_idempotent(self) -> None:
        overrides = {"driver.enabled": "false", "a.b.c": "1", "ratio": "0.75"}
        once = _make_tree()
        apply_map_overrides(once, overrides)
        twice = copy.deepcopy(once)
        apply_map_overrides(twice, overrides)
        assert once == twice

    def test_collision_skipped_others_applied(self) -> None:
        tree = _make_tree()
        with pytest.raises(OverrideMergeError) as exc_info:
            apply_map_overrides(
                tree,
                {
                    "image.tag": "v1",
                    "driver.version": "570.86.16",
                    "new.key": "value",
                },
            )
        assert [f.path for f in exc_info.value.failures] == ["image.tag"]
        assert tree["image"] == "nvcr.io/nvidia/gpu-operator"
        assert tree["driver"]["version"] == "570.86.16"
        assert tree["new"] == {"key": "value"}

    def test_merge_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            apply_map_overrides({"a": 1}, {"a.b": "x"})

    def test_malformed_path_reported(self) -> None:
        tree: dict[str, Any] = {}
        with pytest.raises(OverrideMergeError) as exc_info:
            apply_map_overrides(tree, {"a..b": "x", "ok": "y"})
        assert exc_info.value.failures[0].path == "a..b"
        assert tree == {"ok": "y"}

    def test_last_write_wins_on_same_leaf(self) -> None:
        tree: dict[str, Any] = {}
        apply_map_overrides(tree, {"a.b": "first"})
        apply_map_overrides(tree, {"a.b": "second"})
        assert tree["a"]["b"] == "second"
