"""
Path and URL helpers shared by the tracer, the rewriter and the HTML pass.
"""

import os
from pathlib import Path
from typing import Optional, Union

REMOTE_PREFIXES = ("//", "http://", "https://")


def is_remote_module(specifier: str) -> bool:
    """Protocol-relative and absolute URLs point outside the bundle."""
    return specifier.startswith(REMOTE_PREFIXES)


def is_path_specifier(specifier: str) -> bool:
    """True for root-relative (`/x.js`) and relative (`./x.js`, `../x.js`) specifiers."""
    if is_remote_module(specifier):
        return False
    return specifier.startswith(("/", "./", "../")) or specifier in (".", "..")


def remove_leading_slash(path: str) -> str:
    """Remove \\ and / from the beginning of a string."""
    return path.lstrip("/\\")


def relative_url(from_dir: Union[str, Path], to_path: Union[str, Path]) -> str:
    """
    POSIX URL of `to_path` relative to `from_dir`, always starting with
    `./` or `../`.
    """
    url = os.path.relpath(to_path, from_dir).replace("\\", "/")
    if not url.startswith(("./", "../")):
        url = "./" + url
    return url


def resolve_specifier(
    specifier: str,
    importer: Union[str, Path],
    root_dir: Union[str, Path],
    bare_as_relative: bool = False,
) -> Optional[Path]:
    """
    Resolve an import specifier to an absolute filesystem path.

    Root-relative specifiers resolve against `root_dir`, relative ones against
    the importing file's directory. Remote and bare package specifiers are not
    resolved and yield None, unless `bare_as_relative` is set, in which case
    bare specifiers are treated as relative to the importer.
    """
    if is_remote_module(specifier):
        return None
    if not is_path_specifier(specifier) and not bare_as_relative:
        return None
    if specifier.startswith("/"):
        resolved = os.path.join(root_dir, remove_leading_slash(specifier))
    else:
        resolved = os.path.join(os.path.dirname(importer), specifier)
    return Path(resolved).resolve()
