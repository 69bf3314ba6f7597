"""Tests for table_store.py - dotted path lookups."""

from table_store import resolve_path, resolve_list


STORE = {
    "weapon": {"melee": ["sword"], "meta": {"tier": ["1"]}},
    "name": "scalar",
    "flags": {"enabled": False},
    "zero": 0,
}


class TestResolvePath:
    """Tests for resolve_path."""

    def test_top_level(self):
        assert resolve_path(STORE, "name") == "scalar"

    def test_nested(self):
        assert resolve_path(STORE, "weapon.melee") == ["sword"]
        assert resolve_path(STORE, "weapon.meta.tier") == ["1"]

    def test_missing_segment(self):
        assert resolve_path(STORE, "weapon.ranged") is None
        assert resolve_path(STORE, "armor.light") is None

    def test_intermediate_not_mapping(self):
        """Test walking through a scalar yields None instead of raising."""
        assert resolve_path(STORE, "name.length") is None
        assert resolve_path(STORE, "weapon.melee.0") is None

    def test_falsy_values_are_found(self):
        assert resolve_path(STORE, "flags.enabled") is False
        assert resolve_path(STORE, "zero") == 0

    def test_empty_path(self):
        assert resolve_path(STORE, "") is None

    def test_non_mapping_store(self):
        assert resolve_path(None, "anything") is None


class TestResolveList:
    """Tests for resolve_list."""

    def test_list_found(self):
        assert resolve_list(STORE, "weapon.melee") == ["sword"]

    def test_non_list_terminal_is_not_found(self):
        assert resolve_list(STORE, "name") is None
        assert resolve_list(STORE, "weapon") is None
