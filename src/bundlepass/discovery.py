"""
File discovery for a build directory.

Lists every file under the build root, skipping the metadata directory and
anything matching an exclude glob. Globs are matched against the POSIX path
relative to the build root and against the bare file name.
"""

import logging
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List


logger = logging.getLogger(__name__)


def is_excluded(rel_path: str, patterns: Iterable[str]) -> bool:
    name = rel_path.rsplit("/", 1)[-1]
    for pattern in patterns:
        pattern = pattern.lstrip("/")
        if fnmatch(rel_path, pattern) or fnmatch(name, pattern):
            return True
    return False


def discover_files(root_dir: Path, meta_dir: str, exclude: Iterable[str] = ()) -> List[Path]:
    """All files under `root_dir` to optimize, sorted for stable task order."""
    root_dir = root_dir.resolve()
    patterns = list(exclude)
    found: List[Path] = []

    for root, dirs, files in root_dir.walk():
        if root == root_dir:
            dirs[:] = [d for d in dirs if d != meta_dir]
        dirs.sort()

        for file in files:
            path = root / file
            rel_path = path.relative_to(root_dir).as_posix()
            if is_excluded(rel_path, patterns):
                logger.debug(f"Excluded {rel_path}")
                continue
            found.append(path)

    return sorted(found)
