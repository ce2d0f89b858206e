"""
Offset-based text patching.

Rewrites are expressed as `(start, end, replacement)` patches over the
original byte offsets and applied in a single left-to-right pass, so a
replacement can never land on an unrelated copy of the same literal text
elsewhere in the file.
"""

from typing import Iterable, List, NamedTuple


class Patch(NamedTuple):
    """Replace `source[start:end]` with `replacement`."""
    start: int
    end: int
    replacement: bytes


def apply_patches(source: bytes, patches: Iterable[Patch]) -> bytes:
    """
    Apply non-overlapping patches to `source`.

    Raises:
        ValueError: If a patch is out of range or overlaps another one.
    """
    ordered = sorted(patches, key=lambda p: (p.start, p.end))
    chunks: List[bytes] = []
    cursor = 0

    for patch in ordered:
        if patch.start < cursor:
            raise ValueError(f"Overlapping patch at offset {patch.start} (previous patch ends at {cursor})")
        if patch.end < patch.start or patch.end > len(source):
            raise ValueError(f"Patch range {patch.start}:{patch.end} outside of source")
        chunks.append(source[cursor:patch.start])
        chunks.append(patch.replacement)
        cursor = patch.end

    chunks.append(source[cursor:])
    return b"".join(chunks)
