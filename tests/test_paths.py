"""Tests for path helpers."""

from pathlib import Path

import pytest

from settings_profiles.errors import InvalidPathError
from settings_profiles.paths import (
    ensure_path_exists,
    is_valid_path,
    join_path,
    validate_profile_name,
)


class TestIsValidPath:
    def test_valid(self, tmp_path):
        assert is_valid_path(tmp_path, "profile")

    @pytest.mark.parametrize("segments", [(), ("",), ("/root", ""), ("  ",), (None,)])
    def test_invalid(self, segments):
        assert is_valid_path(*segments) is False


class TestJoinPath:
    def test_joins(self):
        assert join_path("/tmp", "a", "b") == Path("/tmp/a/b")

    def test_rejects_empty_segment(self):
        with pytest.raises(InvalidPathError):
            join_path("/tmp", "")


class TestEnsurePathExists:
    def test_creates_nested(self, tmp_path):
        target = tmp_path / "a" / "b"
        assert ensure_path_exists(target) is True
        assert target.is_dir()

    def test_invalid(self):
        assert ensure_path_exists("") is False

    def test_blocked_by_file(self, tmp_path):
        (tmp_path / "file").write_text("x")
        assert ensure_path_exists(tmp_path / "file" / "sub") is False


class TestValidateProfileName:
    def test_ok(self):
        assert validate_profile_name("Work") == "Work"

    @pytest.mark.parametrize("name", ["", " ", "a/b", "..", "."])
    def test_rejected(self, name):
        with pytest.raises(InvalidPathError):
            validate_profile_name(name)
