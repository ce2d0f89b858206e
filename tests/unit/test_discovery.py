"""Unit tests for build directory discovery."""

from bundlepass.discovery import discover_files, is_excluded


class TestIsExcluded:
    def test_relative_path_glob(self):
        assert is_excluded("vendor/lib.js", ["vendor/*"])
        assert is_excluded("vendor/lib.js", ["/vendor/*"])
        assert not is_excluded("src/lib.js", ["vendor/*"])

    def test_name_glob(self):
        assert is_excluded("deep/dir/app.min.js", ["*.min.js"])

    def test_no_patterns(self):
        assert not is_excluded("a.js", [])


class TestDiscoverFiles:
    def test_skips_meta_dir_and_excludes(self, tmp_path):
        for name in ("index.html", "a.js", "vendor/v.js", "__bundlepass__/manifest.json", "sub/__bundlepass__/x.js"):
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("")

        files = discover_files(tmp_path, "__bundlepass__", ["vendor/*"])
        names = [f.relative_to(tmp_path.resolve()).as_posix() for f in files]

        # only the top-level metadata directory is skipped
        assert names == ["a.js", "index.html", "sub/__bundlepass__/x.js"]

    def test_empty(self, tmp_path):
        assert discover_files(tmp_path, "__bundlepass__") == []
