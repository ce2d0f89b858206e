"""Unit tests for path and URL helpers."""

from pathlib import Path

from bundlepass.core.paths import (
    is_path_specifier,
    is_remote_module,
    relative_url,
    remove_leading_slash,
    resolve_specifier,
)


class TestSpecifiers:
    def test_remote(self):
        assert is_remote_module("https://cdn.example.com/x.js")
        assert is_remote_module("http://cdn.example.com/x.js")
        assert is_remote_module("//cdn.example.com/x.js")
        assert not is_remote_module("/x.js")

    def test_path_specifier(self):
        assert is_path_specifier("./a.js")
        assert is_path_specifier("../a.js")
        assert is_path_specifier("/a.js")
        assert not is_path_specifier("react")
        assert not is_path_specifier("//cdn.example.com/x.js")

    def test_remove_leading_slash(self):
        assert remove_leading_slash("/a/b.js") == "a/b.js"
        assert remove_leading_slash("\\a.js") == "a.js"
        assert remove_leading_slash("a.js") == "a.js"


class TestResolve:
    def test_relative(self, tmp_path):
        importer = tmp_path / "src" / "main.js"
        assert resolve_specifier("./util.js", importer, tmp_path) == (tmp_path / "src" / "util.js").resolve()
        assert resolve_specifier("../lib.js", importer, tmp_path) == (tmp_path / "lib.js").resolve()

    def test_root_relative(self, tmp_path):
        importer = tmp_path / "src" / "main.js"
        assert resolve_specifier("/web_modules/a.js", importer, tmp_path) == (
            tmp_path / "web_modules" / "a.js"
        ).resolve()

    def test_remote_not_resolved(self, tmp_path):
        assert resolve_specifier("https://x.io/a.js", tmp_path / "a.js", tmp_path) is None

    def test_bare(self, tmp_path):
        importer = tmp_path / "main.js"
        assert resolve_specifier("react", importer, tmp_path) is None
        assert resolve_specifier("x.css.proxy.js", importer, tmp_path, bare_as_relative=True) == (
            tmp_path / "x.css.proxy.js"
        ).resolve()


class TestRelativeUrl:
    def test_prefix(self):
        assert relative_url(Path("/build"), Path("/build/a/b.js")) == "./a/b.js"

    def test_parent(self):
        assert relative_url(Path("/build/app"), Path("/build/b.js")) == "../b.js"
