"""
Build configuration and global constants.

The configuration is an immutable value built once, either from keyword
arguments or from a YAML file, with every recognized option and its default
listed here. Nothing mutates it afterwards.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# --- Naming conventions ---

# Generated JS module standing in for a CSS file
CSS_PROXY_SUFFIX = ".css.proxy.js"
PROXY_SUFFIX = ".proxy.js"
# CSS files following this convention export a class-name mapping
CSS_MODULE_SUFFIX = ".module.css"
# Top-level binding holding the class-name mapping inside a CSS module proxy
PROXY_MAPPING_NAME = "json"

# --- Outputs ---

DEFAULT_META_DIR = "__bundlepass__"
MANIFEST_FILENAME = "manifest.json"
DEFAULT_COMBINED_CSS_NAME = "/imported-styles.css"
DEFAULT_CONFIG_FILENAME = "bundlepass.yaml"

JS_EXTENSIONS = (".js", ".mjs")


class OptimizeOptions(BaseModel):
    """
    Optimization switches.

    Accepts both snake_case names and the camelCase keys used in
    configuration files (`minifyJS`, `preloadModules`, ...).
    """

    minify_js: bool = Field(default=True, alias="minifyJS")
    minify_html: bool = Field(default=True, alias="minifyHTML")
    minify_css: bool = Field(default=True, alias="minifyCSS")
    preload_modules: bool = Field(default=False, alias="preloadModules")
    combined_css_name: str = Field(default=DEFAULT_COMBINED_CSS_NAME, alias="combinedCSSName")
    exclude: Tuple[str, ...] = Field(default=(), alias="exclude")
    target: Optional[str] = Field(default=None, alias="target")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    @field_validator("combined_css_name")
    @classmethod
    def _css_name_is_root_relative(cls, value: str) -> str:
        if not value.startswith("/"):
            return "/" + value
        return value


class BuildConfig(BaseModel):
    """Where the built bundle lives and how to optimize it."""

    build_directory: Path = Field(alias="buildDirectory")
    meta_dir: str = Field(default=DEFAULT_META_DIR, alias="metaDir")
    options: OptimizeOptions = Field(default_factory=OptimizeOptions, alias="optimize")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    @field_validator("build_directory")
    @classmethod
    def _absolute_build_directory(cls, value: Path) -> Path:
        return value.resolve()

    @property
    def meta_path(self) -> Path:
        return self.build_directory / self.meta_dir

    @property
    def manifest_path(self) -> Path:
        return self.meta_path / MANIFEST_FILENAME

    @property
    def combined_css_path(self) -> Path:
        return self.build_directory / self.options.combined_css_name.lstrip("/")

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        build_directory: Optional[Union[str, Path]] = None,
        meta_dir: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> "BuildConfig":
        """
        Build the configuration from an optional YAML file plus overrides.

        Arguments win over file values. `options` entries are merged key by
        key into the file's `optimize` section; None entries are ignored so
        unset CLI flags fall through. A missing file means defaults. Relative
        build directories in the file resolve against the file's directory.
        """
        data: Dict[str, Any] = {}
        base_dir = Path.cwd()
        if config_path is not None and config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            base_dir = config_path.parent
            logger.debug(f"Loaded configuration from {config_path}")

        if build_directory is None:
            from_file = data.get("buildDirectory") or data.get("build_directory")
            if from_file is None:
                raise ValueError("No build directory given and none set in the configuration file")
            build_directory = base_dir / from_file
        meta_dir = meta_dir or data.get("metaDir") or data.get("meta_dir") or DEFAULT_META_DIR

        file_options = OptimizeOptions.model_validate(data.get("optimize") or {})
        merged = file_options.model_dump()
        merged.update({k: v for k, v in (options or {}).items() if v is not None})

        return cls(
            build_directory=Path(build_directory),
            meta_dir=meta_dir,
            options=OptimizeOptions.model_validate(merged),
        )


def as_config(value: Union[BuildConfig, Path, str]) -> BuildConfig:
    """Accept a ready configuration or just a build directory."""
    if isinstance(value, BuildConfig):
        return value
    return BuildConfig(build_directory=Path(value))
