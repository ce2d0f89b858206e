"""
Optimizer - per-file dispatch and the end-to-end pass.

1. Discover every file in the build directory
2. Before the parallel run, determine whether any JS file imports CSS
3. Optimize all files in parallel, dispatching on extension
4. Write the manifest
5. Build the combined stylesheet
"""

import logging
import os
import stat
import tempfile
import time
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field

from .config import JS_EXTENSIONS, BuildConfig, as_config
from .core.types import FileKind, OptimizationResult
from .discovery import discover_files
from .manifest import Manifest, ManifestAggregator
from .minify import Minifiers
from .parsing.scanner import ImportScanner
from .pool import FileProcessor, ProcessReport
from .transform.css import CSSImportRewriter, concat_and_minify_css, has_css_import
from .transform.html import preload_js_and_css

logger = logging.getLogger(__name__)


class OptimizeReport(BaseModel):
    """Structured summary of an optimization run."""
    build_directory: str
    total_files: int
    files_optimized: int
    files_failed: int
    css_imports_found: bool
    css_files_inlined: int
    manifest_path: str
    combined_css_path: Optional[str] = None
    duration_sec: float
    failures: Dict[str, str] = Field(default_factory=dict)


class Optimizer:
    """Runs the optimization pass over one build directory."""

    def __init__(
        self,
        config: Union[BuildConfig, Path, str],
        minifiers: Optional[Minifiers] = None,
        max_workers: Optional[int] = None,
    ):
        self.config = as_config(config)
        self.options = self.config.options
        self.root_dir = self.config.build_directory
        self.minifiers = minifiers or Minifiers()
        self.scanner = ImportScanner()
        self.rewriter = CSSImportRewriter(self.root_dir, self.scanner)
        self.processor = FileProcessor(max_workers)

    def optimize_file(self, file: Path, preload_css: bool = False) -> OptimizationResult:
        """
        Optimize a single file in place, based on its extension.

        Nothing is written until every step succeeded, so a failure leaves
        the file exactly as it was.
        """
        kind = FileKind.for_path(file)
        result = OptimizationResult(file=file, kind=kind)

        if kind == FileKind.CSS:
            if self.options.minify_css:
                code = file.read_text(encoding="utf-8")
                self._write(file, self.minifiers.css(code))
                result.modified = True
            return result

        if kind == FileKind.JS:
            code = None

            if preload_css:
                code = file.read_text(encoding="utf-8")
                rewritten = self.rewriter.rewrite(file, code)
                code = rewritten.patched_text
                result.css = rewritten.css_ledger
                result.modified = rewritten.modified

            if self.options.minify_js:
                if code is None:
                    code = file.read_text(encoding="utf-8")
                code = self.minifiers.js(code, self.options.target)
                result.modified = True

            if result.modified:
                self._write(file, code)
            return result

        if kind == FileKind.HTML:
            if not self.options.minify_html and not self.options.preload_modules:
                return result

            code = file.read_text(encoding="utf-8")
            if self.options.preload_modules:
                code = preload_js_and_css(
                    code,
                    root_dir=self.root_dir,
                    html_file=file,
                    css_name=self.options.combined_css_name if preload_css else None,
                    scanner=self.scanner,
                )
            if self.options.minify_html:
                code = self.minifiers.html(code)
            self._write(file, code)
            result.modified = True
            return result

        # not ours: leave as-is
        return result

    def optimize(self) -> OptimizeReport:
        """Run the whole pass and return a summary."""
        start_time = time.perf_counter()

        # 1. scan directory
        files = discover_files(self.root_dir, self.config.meta_dir, self.options.exclude)
        logger.info(f"Found {len(files)} files in {self.root_dir}")

        # 2. before the parallel run, determine if CSS is being imported
        js_files = [f for f in files if f.suffix.lower() in JS_EXTENSIONS]
        preload_css = has_css_import(js_files, self.scanner)
        if preload_css:
            logger.info("CSS imports found, inlining them")

        # 3. optimize all files in parallel
        aggregator = ManifestAggregator()
        report: ProcessReport = self.processor.run(
            files,
            lambda file: self.optimize_file(file, preload_css),
            aggregator,
        )
        logger.info(
            f"Optimized {report.succeeded}/{report.attempted} files in {report.elapsed_ms:.0f}ms "
            f"({report.failed} failed)"
        )

        # 4. assemble manifest
        manifest = aggregator.finalize(self.root_dir)
        manifest.write(self.config.manifest_path)

        # 5. build the combined CSS file
        combined_css_path = None
        if preload_css:
            combined_css_path = self.config.combined_css_path
            css = concat_and_minify_css(
                aggregator.ledger,
                self.minifiers.css if self.options.minify_css else None,
            )
            self._write(combined_css_path, css)

        return OptimizeReport(
            build_directory=str(self.root_dir),
            total_files=report.attempted,
            files_optimized=sum(1 for r in report.results if r.modified),
            files_failed=report.failed,
            css_imports_found=preload_css,
            css_files_inlined=_count_inlined(manifest),
            manifest_path=str(self.config.manifest_path),
            combined_css_path=str(combined_css_path) if combined_css_path else None,
            duration_sec=round((time.perf_counter() - start_time), 2),
            failures={str(f.file): f.message for f in report.failures},
        )

    @staticmethod
    def _write(path: Path, code: str) -> None:
        """Replace a file in one step; tracers in other tasks may be reading it."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(code)
            os.chmod(tmp_name, stat.S_IMODE(path.stat().st_mode) if path.exists() else 0o644)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def _count_inlined(manifest: Manifest) -> int:
    return sum(len(entries) for entries in manifest.css.values())
