"""Unit tests for the build configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from bundlepass.config import (
    DEFAULT_COMBINED_CSS_NAME,
    DEFAULT_META_DIR,
    BuildConfig,
    OptimizeOptions,
    as_config,
)


class TestOptimizeOptions:
    def test_defaults(self):
        options = OptimizeOptions()
        assert options.minify_js is True
        assert options.minify_css is True
        assert options.minify_html is True
        assert options.preload_modules is False
        assert options.combined_css_name == DEFAULT_COMBINED_CSS_NAME
        assert options.exclude == ()
        assert options.target is None

    def test_camel_case_aliases(self):
        options = OptimizeOptions.model_validate({"minifyJS": False, "preloadModules": True, "combinedCSSName": "s.css"})
        assert options.minify_js is False
        assert options.preload_modules is True
        assert options.combined_css_name == "/s.css"

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            OptimizeOptions.model_validate({"minifyEverything": True})

    def test_immutable(self):
        with pytest.raises(ValidationError):
            OptimizeOptions().minify_js = False


class TestBuildConfig:
    def test_paths(self, tmp_path):
        config = BuildConfig(build_directory=tmp_path)
        assert config.meta_dir == DEFAULT_META_DIR
        assert config.manifest_path == tmp_path.resolve() / DEFAULT_META_DIR / "manifest.json"
        assert config.combined_css_path == tmp_path.resolve() / "imported-styles.css"

    def test_load_yaml(self, tmp_path):
        (tmp_path / "build").mkdir()
        config_file = tmp_path / "bundlepass.yaml"
        config_file.write_text(
            "buildDirectory: build\n"
            "metaDir: _meta\n"
            "optimize:\n"
            "  minifyHTML: false\n"
            "  preloadModules: true\n"
            "  exclude:\n"
            "    - 'vendor/*'\n"
        )
        config = BuildConfig.load(config_file)

        assert config.build_directory == (tmp_path / "build").resolve()
        assert config.meta_dir == "_meta"
        assert config.options.minify_html is False
        assert config.options.preload_modules is True
        assert config.options.exclude == ("vendor/*",)

    def test_overrides_win(self, tmp_path):
        config_file = tmp_path / "bundlepass.yaml"
        config_file.write_text("buildDirectory: build\noptimize:\n  minifyJS: false\n  target: es2018\n")
        other = tmp_path / "other"

        config = BuildConfig.load(
            config_file,
            build_directory=other,
            options={"minify_js": True, "target": None, "preload_modules": None},
        )

        assert config.build_directory == other.resolve()
        assert config.options.minify_js is True
        assert config.options.target == "es2018"
        assert config.options.preload_modules is False

    def test_missing_file_means_defaults(self, tmp_path):
        config = BuildConfig.load(tmp_path / "nope.yaml", build_directory=tmp_path)
        assert config.options == OptimizeOptions()

    def test_no_build_directory(self, tmp_path):
        with pytest.raises(ValueError, match="No build directory"):
            BuildConfig.load(tmp_path / "nope.yaml")

    def test_as_config(self, tmp_path):
        config = BuildConfig(build_directory=tmp_path)
        assert as_config(config) is config
        assert as_config(str(tmp_path)).build_directory == tmp_path.resolve()
        assert as_config(Path(tmp_path)).build_directory == tmp_path.resolve()
