"""
Dependency Graph Tracer.

Follows static imports from a set of entry files and collects every module
they transitively load. The traversal is an explicit FIFO worklist guarded by
a visited set keyed by resolved path, so it terminates on cyclic imports and
its depth is independent of the import chain's depth.

Missing or unreadable files degrade the graph instead of aborting the trace.
"""

import logging
from collections import deque
from pathlib import Path
from typing import Iterable, Optional, Union

from ..core.errors import MissingFileError, ParseError
from ..core.graph import ModuleGraph
from ..core.paths import resolve_specifier
from ..parsing.scanner import ImportScanner

logger = logging.getLogger(__name__)


class DependencyTracer:
    """Builds a ModuleGraph for a set of entry files under a build root."""

    def __init__(self, root_dir: Union[str, Path], scanner: Optional[ImportScanner] = None):
        self.root_dir = Path(root_dir).resolve()
        self.scanner = scanner or ImportScanner()

    def trace(self, entry_files: Iterable[Union[str, Path]]) -> ModuleGraph:
        """
        Trace static imports from `entry_files`.

        Returns:
            ModuleGraph with nodes in discovery order.
        """
        graph = ModuleGraph()
        worklist = deque()

        for entry in entry_files:
            path = Path(entry).resolve()
            if path not in graph:
                graph.add_module(path)
                worklist.append(path)

        while worklist:
            current = worklist.popleft()
            if graph.is_visited(current):
                continue
            graph.mark_visited(current)

            try:
                text = self._read(current)
            except MissingFileError as e:
                logger.warning(f"module preload failed: {self._display(current)}: {e}")
                graph.exclude(current)
                continue

            try:
                specifiers = self.scanner.static_specifiers(text, current)
            except ParseError as e:
                logger.warning(f"could not scan imports of {self._display(current)}: {e.message}")
                continue

            for specifier in specifiers:
                resolved = resolve_specifier(specifier, current, self.root_dir)
                if resolved is None:
                    logger.debug(f"skipping non-local import {specifier!r} in {self._display(current)}")
                    continue
                if graph.is_excluded(resolved):
                    continue
                graph.add_import(current, resolved)
                if not graph.is_visited(resolved):
                    worklist.append(resolved)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Traced {len(graph)} modules, {graph.edge_count} imports"
                f"{' (cyclic)' if graph.has_cycle() else ''}"
            )
        return graph

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MissingFileError(path, e) from e

    def _display(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root_dir))
        except ValueError:
            return str(path)
