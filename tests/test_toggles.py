"""Tests for the toggle table and file set resolution."""

from conftest import make_profile
from settings_profiles.toggles import (
    RESERVED_KEY,
    TOGGLE_ORDER,
    TOGGLES,
    clean_toggles,
    get_toggle,
    list_toggles,
    resolve,
)


class TestToggleTable:
    def test_order_covers_table(self):
        assert set(TOGGLE_ORDER) == set(TOGGLES)
        assert len(TOGGLE_ORDER) == len(set(TOGGLE_ORDER))

    def test_reserved_key_not_a_toggle(self):
        assert RESERVED_KEY not in TOGGLES

    def test_list_toggles_in_declared_order(self):
        assert [key for key, _ in list_toggles()] == list(TOGGLE_ORDER)

    def test_get_toggle(self):
        assert get_toggle("hotkeys").files == ("hotkeys.json",)
        assert get_toggle("nonexistent") is None

    def test_at_most_one_wildcard_per_entry(self):
        for spec in TOGGLES.values():
            for entry in spec.files:
                assert entry.split("/").count("*") <= 1


class TestCleanToggles:
    def test_drops_unknown_reserved_and_non_bool(self):
        toggles = clean_toggles(
            {"hotkeys": True, "active": True, "bogus": True, "app": "yes"}
        )
        assert toggles["hotkeys"] is True
        assert toggles["app"] is False
        assert "active" not in toggles
        assert "bogus" not in toggles
        assert set(toggles) == set(TOGGLE_ORDER)

    def test_none(self):
        assert not any(clean_toggles(None).values())

    def test_clean_non_mapping(self):
        for raw in ("abc", ["hotkeys"], 1):
            toggles = clean_toggles(raw)
            assert set(toggles) == set(TOGGLE_ORDER)
            assert not any(toggles.values())


class TestResolve:
    def test_nothing_enabled(self):
        fs = resolve(make_profile("A"))
        assert fs.files == ()
        assert fs.paths == ()
        assert not fs

    def test_single_toggle(self):
        fs = resolve(make_profile("A", hotkeys=True))
        assert fs.files == ("hotkeys.json",)

    def test_follows_declared_order_not_insertion_order(self):
        toggles = {"snippets": True, "hotkeys": True, "app": True}
        fs = resolve(toggles)
        assert fs.files == ("app.json", "hotkeys.json")
        assert fs.paths == ("snippets",)

    def test_wildcards_left_unexpanded(self):
        fs = resolve({"plugin_data": True})
        assert fs.files == ("plugins/*/data.json",)

    def test_depends_only_on_toggles(self):
        a = make_profile("A", active=True, auto_sync=True, hotkeys=True, themes=True)
        b = make_profile("Other", hotkeys=True, themes=True)
        assert resolve(a) == resolve(b)

    def test_groups_concatenate(self):
        fs = resolve({"plugin_data": True, "plugins": True})
        assert fs.files.count("plugins/*/data.json") == 1
        assert len(fs.files) == 4
