"""Tests for binary path containment."""

import os

import pytest

from deploykit.exceptions import PathEscapeError
from deploykit.services.path_guard import resolve_within


class TestResolveWithin:
    """Test resolving candidate paths against a base directory."""

    def test_accepts_nested_relative_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "app").mkdir()

        resolved = resolve_within("app", "vendor/bin/dep")

        assert resolved == (tmp_path / "app" / "vendor" / "bin" / "dep").resolve()

    def test_rejects_parent_traversal(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "app").mkdir()

        with pytest.raises(PathEscapeError):
            resolve_within("app", "../secrets")

    def test_rejects_absolute_path_outside(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "app").mkdir()

        with pytest.raises(PathEscapeError):
            resolve_within("app", "/etc/passwd")

    def test_accepts_absolute_path_inside(self, tmp_path):
        target = tmp_path / "bin" / "dep"

        assert resolve_within(tmp_path, str(target)) == target.resolve()

    def test_rejects_sibling_with_shared_prefix(self, tmp_path):
        (tmp_path / "app").mkdir()
        (tmp_path / "app-old").mkdir()

        with pytest.raises(PathEscapeError):
            resolve_within(tmp_path / "app", "../app-old/dep")

    def test_traversal_that_returns_inside_is_allowed(self, tmp_path):
        base = tmp_path / "app"
        (base / "vendor").mkdir(parents=True)

        resolved = resolve_within(base, "vendor/../vendor/bin/dep")

        assert resolved == (base / "vendor" / "bin" / "dep").resolve()

    def test_symlinked_base_is_canonicalised(self, tmp_path):
        real = tmp_path / "real"
        (real / "bin").mkdir(parents=True)
        link = tmp_path / "link"
        os.symlink(real, link)

        resolved = resolve_within(link, "bin/dep")

        assert resolved == (real / "bin" / "dep").resolve()

    def test_error_names_path_and_base(self, tmp_path):
        with pytest.raises(PathEscapeError) as exc_info:
            resolve_within(tmp_path, "../outside")

        assert exc_info.value.path == "../outside"
        assert exc_info.value.base == str(tmp_path.resolve())
