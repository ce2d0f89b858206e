"""
Module graph backed by rustworkx.

Nodes are resolved file paths, edges point from an importing module to the
module it imports. Node order is discovery order; callers that need a stable
order must sort explicitly.

It manages:
- The bimap between file paths and rustworkx integer indices.
- The visited set used by the tracer, so a file is scanned at most once.
- The set of files that were visited but could not be read.
"""

from pathlib import Path
from typing import Dict, Iterator, List, Set

import rustworkx as rx


class ModuleGraph:
    """
    Transitive module set reachable from a set of entry files.

    Visiting and membership are tracked separately: a file that could not be
    read is visited (it will not be retried) but excluded from the nodes.
    """

    def __init__(self):
        self._graph = rx.PyDiGraph(multigraph=False)
        self._path_to_idx: Dict[Path, int] = {}
        self._visited: Set[Path] = set()
        self._excluded: Set[Path] = set()

    def add_module(self, path: Path) -> int:
        """Add a module node if it is not already present."""
        idx = self._path_to_idx.get(path)
        if idx is None:
            idx = self._graph.add_node(path)
            self._path_to_idx[path] = idx
        return idx

    def add_import(self, importer: Path, imported: Path) -> None:
        """Record that `importer` statically imports `imported`."""
        if imported in self._excluded or importer in self._excluded:
            return
        u_idx = self.add_module(importer)
        v_idx = self.add_module(imported)
        if not self._graph.has_edge(u_idx, v_idx):
            self._graph.add_edge(u_idx, v_idx, None)

    def mark_visited(self, path: Path) -> None:
        self._visited.add(path)

    def is_visited(self, path: Path) -> bool:
        return path in self._visited

    def is_excluded(self, path: Path) -> bool:
        return path in self._excluded

    def exclude(self, path: Path) -> None:
        """Drop an unreadable module from the node set, keeping it visited."""
        self._visited.add(path)
        self._excluded.add(path)
        idx = self._path_to_idx.pop(path, None)
        if idx is not None:
            self._graph.remove_node(idx)

    @property
    def visited(self) -> Set[Path]:
        return set(self._visited)

    @property
    def excluded(self) -> Set[Path]:
        return set(self._excluded)

    @property
    def nodes(self) -> List[Path]:
        """Module paths in discovery order."""
        return list(self._path_to_idx)

    @property
    def edge_count(self) -> int:
        return self._graph.num_edges()

    def has_cycle(self) -> bool:
        return not rx.is_directed_acyclic_graph(self._graph)

    def __contains__(self, path: object) -> bool:
        return path in self._path_to_idx

    def __iter__(self) -> Iterator[Path]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self._path_to_idx)
