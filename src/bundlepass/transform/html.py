"""
HTML Injector and Preload Set Calculator.

Finds the module entry scripts a page declares, traces everything they load
and injects `<link rel="modulepreload">` hints (plus a `<script>` fallback for
browsers without modulepreload) so the whole module set is fetched early.

Injection is plain text insertion before the closing head or body tag. Each
tag must appear exactly once; anything else means the document is ambiguous
or malformed and the page is left alone.
"""

import logging
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from ..analysis.tracer import DependencyTracer
from ..config import CSS_PROXY_SUFFIX
from ..core.errors import StructuralError
from ..core.paths import is_remote_module, relative_url, remove_leading_slash
from ..parsing.scanner import ImportScanner

logger = logging.getLogger(__name__)

MODULE_SCRIPT_TAG = re.compile(r"<script[^>]+type=[\"']?module[\"']?[^>]*>", re.IGNORECASE)
SCRIPT_SRC_ATTR = re.compile(r"(?<![\w-])src\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s>]+))", re.IGNORECASE)
CLOSING_HEAD_TAG = re.compile(r"<\s*/\s*head\s*>", re.IGNORECASE)
CLOSING_BODY_TAG = re.compile(r"<\s*/\s*body\s*>", re.IGNORECASE)

PRELOAD_COMMENT = (
    "<!-- [bundlepass] Add modulepreload to improve unbundled load performance "
    "(More info: https://developers.google.com/web/updates/2017/12/modulepreload) -->"
)
FALLBACK_COMMENT = "<!-- [bundlepass] modulepreload fallback for browsers that do not support it yet -->"


def _inject_before(pattern: re.Pattern, tag: str, doc: str, html: str) -> str:
    matches = list(pattern.finditer(doc))
    # without the tag we cannot load the app properly
    if not matches:
        raise StructuralError(f"No </{tag}> tag found in HTML", doc)
    # perhaps commented out?
    if len(matches) > 1:
        raise StructuralError(f"Multiple </{tag}> tags found in HTML ({len(matches)})", doc)
    at = matches[0].start()
    return doc[:at] + html + doc[at:]


def inject_head(doc: str, html: str) -> str:
    """Insert `html` immediately before the single closing head tag."""
    return _inject_before(CLOSING_HEAD_TAG, "head", doc, html)


def inject_body(doc: str, html: str) -> str:
    """Insert `html` immediately before the single closing body tag."""
    return _inject_before(CLOSING_BODY_TAG, "body", doc, html)


def find_entry_scripts(code: str) -> List[str]:
    """
    `src` values of the module scripts declared in a page.

    Inline module scripts are already on the page and remote ones are not
    ours to trace, so both are skipped.
    """
    entries = []
    for tag in MODULE_SCRIPT_TAG.findall(code):
        match = SCRIPT_SRC_ATTR.search(tag)
        if not match:
            continue
        src = next(group for group in match.groups() if group is not None)
        if not src or is_remote_module(src):
            continue
        entries.append(src)
    return entries


def resolve_entry(src: str, html_file: Union[str, Path], root_dir: Union[str, Path]) -> Path:
    """Resolve a script `src` to a path: root-relative or relative to the page."""
    if src.startswith("/"):
        resolved = os.path.join(root_dir, remove_leading_slash(src))
    else:
        resolved = os.path.join(os.path.dirname(html_file), src)
    return Path(resolved).resolve()


def compute_preload_set(
    html_file: Union[str, Path],
    entry_scripts: Iterable[str],
    root_dir: Union[str, Path],
    scanner: Optional[ImportScanner] = None,
) -> List[str]:
    """
    Modules to preload for a page, as sorted `./`-prefixed URLs relative to
    `root_dir`.

    Entry scripts are excluded because the page already loads them, and CSS
    proxy modules because their imports get inlined. Modules outside
    `root_dir` have no root-absolute URL and are skipped. An empty list
    means there is nothing to inject.
    """
    root_dir = Path(root_dir).resolve()
    entries: Set[Path] = set()
    for src in entry_scripts:
        if is_remote_module(src):
            continue
        entries.add(resolve_entry(src, html_file, root_dir))

    if not entries:
        return []

    graph = DependencyTracer(root_dir, scanner).trace(sorted(entries))

    urls = set()
    for module in graph.nodes:
        if module in entries or module.name.endswith(CSS_PROXY_SUFFIX):
            continue
        # no root-absolute URL can reach it
        if not module.is_relative_to(root_dir):
            logger.debug(f"{html_file}: not preloading {module}, outside of {root_dir}")
            continue
        urls.add(relative_url(root_dir, module))
    return sorted(urls)


def preload_js_and_css(
    code: str,
    root_dir: Union[str, Path],
    html_file: Union[str, Path],
    css_name: Optional[str] = None,
    scanner: Optional[ImportScanner] = None,
) -> str:
    """
    Add the combined stylesheet and module preload hints to a page.

    Raises:
        StructuralError: If the page does not have exactly one closing head
            tag (or body tag, when there is something to preload).
    """
    entries = find_entry_scripts(code)
    if not entries:
        return code

    if css_name:
        code = inject_head(code, f'    <link rel="stylesheet" href="{css_name}" />\n')

    modules = compute_preload_set(html_file, entries, root_dir, scanner)
    if not modules:
        # don't add useless whitespace
        return code

    # "./a/b.js" -> "/a/b.js"
    hrefs = [url[1:] for url in modules]
    logger.debug(f"{html_file}: preloading {len(hrefs)} module(s)")

    code = inject_head(
        code,
        f"  {PRELOAD_COMMENT}\n"
        + "\n".join(f'    <link rel="modulepreload" href="{href}" />' for href in hrefs)
        + "\n  ",
    )
    code = inject_body(
        code,
        f"  {FALLBACK_COMMENT}\n    "
        + "".join(f'<script type="module" src="{href}"></script>' for href in hrefs)
        + "\n  ",
    )
    return code
