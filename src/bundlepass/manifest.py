"""
Optimization manifest.

The aggregator is the only structure written to by many pool tasks at once.
It only ever merges per-file ledgers under their own key, behind a lock, so
arrival order never changes the final result.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field

from .core.types import CSSLedger, OptimizationResult

logger = logging.getLogger(__name__)


class CSSImportEntry(BaseModel):
    """One inlined CSS proxy, with paths relative to the build directory."""
    proxy: str
    css: str
    names: List[str] = Field(default_factory=list)


class Manifest(BaseModel):
    """Persisted form of the CSS ledger, keyed by consuming JS file."""
    css: Dict[str, List[CSSImportEntry]] = Field(default_factory=dict)

    @classmethod
    def from_ledger(cls, ledger: CSSLedger, root_dir: Path) -> "Manifest":
        def rel(path) -> str:
            return os.path.relpath(path, root_dir).replace("\\", "/")

        css = {
            rel(consumer): [
                CSSImportEntry(proxy=rel(b.proxy_path), css=rel(b.css_path), names=list(b.bound_names))
                for b in bindings
            ]
            for consumer, bindings in sorted(ledger.items())
        }
        return cls(css=dict(sorted(css.items())))

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2, sort_keys=True)


class ManifestAggregator:
    """Thread-safe, merge-only collector of per-file results."""

    def __init__(self):
        self._lock = threading.Lock()
        self._css: CSSLedger = {}
        self._finalized = False

    def merge(self, result: OptimizationResult) -> None:
        """Merge one task's ledger. Keys are consumer files, so tasks never collide."""
        if not result.css:
            return
        with self._lock:
            if self._finalized:
                raise RuntimeError("Manifest already finalized")
            for consumer, bindings in result.css.items():
                self._css.setdefault(consumer, []).extend(bindings)

    @property
    def ledger(self) -> CSSLedger:
        with self._lock:
            return {k: list(v) for k, v in self._css.items()}

    def finalize(self, root_dir: Path) -> Manifest:
        """Freeze the aggregate. Call once, after the pool is idle."""
        with self._lock:
            self._finalized = True
            ledger = {k: list(v) for k, v in self._css.items()}
        return Manifest.from_ledger(ledger, root_dir)
