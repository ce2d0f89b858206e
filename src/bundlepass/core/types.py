"""
Core type definitions for bundlepass.

Import records carry UTF-8 byte offsets into the scanned text, matching what
the tree-sitter scanner reports. All text surgery is done on the encoded
bytes so that offsets never drift on non-ASCII sources.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Dict, List, Optional, Tuple


class ImportKind(StrEnum):
    """How a module reference was written."""
    STATIC = "static"
    DYNAMIC = "dynamic"
    META = "meta"


class FileKind(StrEnum):
    """Optimization path a file is dispatched to, by extension."""
    CSS = "css"
    JS = "js"
    HTML = "html"
    OTHER = "other"

    @classmethod
    def for_path(cls, path: Path) -> "FileKind":
        ext = path.suffix.lower()
        if ext == ".css":
            return cls.CSS
        if ext in (".js", ".mjs"):
            return cls.JS
        if ext == ".html":
            return cls.HTML
        return cls.OTHER


@dataclass(frozen=True)
class ImportBindings:
    """
    Names bound by a static import statement.

    Attributes:
        default: Local name of a default import (`import a from ...`).
        namespace: Local name of a namespace import (`import * as a from ...`).
        named: Ordered `(imported, local)` pairs of `import {a as b} from ...`.
    """
    default: Optional[str] = None
    namespace: Optional[str] = None
    named: Tuple[Tuple[str, str], ...] = ()

    @property
    def bound_names(self) -> List[str]:
        names = []
        if self.default:
            names.append(self.default)
        if self.namespace:
            names.append(self.namespace)
        names.extend(local for _, local in self.named)
        return names

    @property
    def is_empty(self) -> bool:
        return not self.bound_names


@dataclass(frozen=True)
class ImportRecord:
    """A single module reference found by the scanner."""
    specifier_start: int
    specifier_end: int
    statement_start: int
    statement_end: int
    kind: ImportKind
    specifier: Optional[str] = None
    bindings: ImportBindings = field(default_factory=ImportBindings)
    reexport: bool = False

    @property
    def is_static(self) -> bool:
        return self.kind == ImportKind.STATIC


@dataclass(frozen=True)
class CSSProxyBinding:
    """A CSS proxy import that was inlined into its consumer."""
    proxy_path: Path
    css_path: Path
    bound_names: Tuple[str, ...] = ()


CSSLedger = Dict[str, List[CSSProxyBinding]]


@dataclass
class OptimizationResult:
    """Per-file outcome. `css` is only populated for JS files."""
    file: Path
    kind: FileKind
    modified: bool = False
    css: CSSLedger = field(default_factory=dict)
