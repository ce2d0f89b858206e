"""
CSS Import Rewriter.

Scans JS for CSS proxy imports and embeds only what is needed:

    import './global.css.proxy.js'                 -> (removed; loaded from HTML)
    import url from './global.css.proxy.js'        -> const url = "global.css";
    import {foo} from './local.module.css.proxy.js' -> const {foo} = {"foo": "_foo_1"};

Every rewrite is an offset patch over the original source (see `patch`).
Imports whose CSS file is missing, or whose proxy has no mapping literal, are
left exactly as written.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..config import CSS_MODULE_SUFFIX, PROXY_SUFFIX
from ..core.errors import ParseError
from ..core.paths import resolve_specifier
from ..core.types import CSSLedger, CSSProxyBinding, ImportBindings, ImportRecord
from ..parsing.scanner import ImportScanner, css_proxy_imports
from .patch import Patch, apply_patches

logger = logging.getLogger(__name__)


@dataclass
class RewriteResult:
    """Patched source plus the proxies inlined into it, keyed by consumer."""
    patched_text: str
    css_ledger: CSSLedger = field(default_factory=dict)

    @property
    def modified(self) -> bool:
        return bool(self.css_ledger)


def _line_break_after(source: bytes, end: int) -> int:
    """Offset just past one line break directly following `end`, if any."""
    if source.startswith(b"\r\n", end):
        return end + 2
    if source.startswith(b"\n", end):
        return end + 1
    return end


def _module_bindings(bindings: ImportBindings, literal: str) -> str:
    """Bind a CSS module mapping literal to the names an import declared."""
    statements = []
    holder = bindings.default or bindings.namespace
    if holder:
        statements.append(f"const {holder} = {literal};")
        if bindings.default and bindings.namespace:
            statements.append(f"const {bindings.namespace} = {bindings.default};")

    if bindings.named:
        parts = [imported if imported == local else f"{imported}: {local}" for imported, local in bindings.named]
        source = holder or literal
        statements.append(f"const {{{', '.join(parts)}}} = {source};")

    return " ".join(statements)


def _url_bindings(bindings: ImportBindings, url: str) -> Optional[str]:
    """
    Bind a plain CSS file's URL to a default or namespace import.

    Named bindings have no value to take from a URL, so any import that
    declares them is not rewritten.
    """
    if bindings.named:
        return None
    names = [n for n in (bindings.default, bindings.namespace) if n]
    if not names:
        return None
    value = json.dumps(url)
    return " ".join(f"const {name} = {value};" for name in names)


class CSSImportRewriter:
    """Inlines CSS proxy imports of a single JS file."""

    def __init__(self, root_dir: Union[str, Path], scanner: Optional[ImportScanner] = None):
        self.root_dir = Path(root_dir).resolve()
        self.scanner = scanner or ImportScanner()

    def rewrite(self, file_path: Union[str, Path], text: str) -> RewriteResult:
        """
        Rewrite every CSS proxy import in `text`.

        Raises:
            ParseError: If `text` cannot be scanned.
        """
        file_path = Path(file_path).resolve()
        source = text.encode("utf-8")
        records = css_proxy_imports(self.scanner.scan(text, file_path))

        patches: List[Patch] = []
        bindings: List[CSSProxyBinding] = []

        for record in records:
            outcome = self._rewrite_one(file_path, source, record)
            if outcome is None:
                continue
            patch, binding = outcome
            patches.append(patch)
            bindings.append(binding)

        if not patches:
            return RewriteResult(patched_text=text)

        patched = apply_patches(source, patches).decode("utf-8")
        return RewriteResult(patched_text=patched, css_ledger={str(file_path): bindings})

    def _rewrite_one(self, file_path: Path, source: bytes, record: ImportRecord):
        if record.reexport:
            logger.debug(f"{file_path}: re-export of {record.specifier} left as is")
            return None

        proxy_path = resolve_specifier(record.specifier, file_path, self.root_dir, bare_as_relative=True)
        if proxy_path is None:
            return None
        css_path = proxy_path.with_name(proxy_path.name[: -len(PROXY_SUFFIX)])
        if not css_path.is_file():
            logger.warning(f"{file_path}: {record.specifier} has no CSS file at {css_path}, import left as is")
            return None

        names = record.bindings
        binding = CSSProxyBinding(
            proxy_path=proxy_path,
            css_path=css_path,
            bound_names=tuple(names.bound_names),
        )

        # 1. bare import: the stylesheet is loaded from HTML instead
        if names.is_empty:
            end = _line_break_after(source, record.statement_end)
            return Patch(record.statement_start, end, b""), binding

        # 2. CSS modules: inline the class-name mapping
        if css_path.name.endswith(CSS_MODULE_SUFFIX):
            literal = self._mapping_literal(proxy_path)
            if literal is None:
                logger.warning(f"{file_path}: no class-name mapping found in {proxy_path}, import left as is")
                return None
            replacement = _module_bindings(names, literal)

        # 3. plain CSS: the bound value is the stylesheet URL
        else:
            url = os.path.relpath(css_path, file_path.parent).replace("\\", "/")
            replacement = _url_bindings(names, url)
            if replacement is None:
                logger.warning(f"{file_path}: named bindings from plain CSS {record.specifier} left as is")
                return None

        return Patch(record.statement_start, record.statement_end, replacement.encode("utf-8")), binding

    def _mapping_literal(self, proxy_path: Path) -> Optional[str]:
        try:
            proxy_code = proxy_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read CSS proxy {proxy_path}: {e}")
            return None
        return self.scanner.find_mapping_literal(proxy_code)


def has_css_import(files: Iterable[Union[str, Path]], scanner: Optional[ImportScanner] = None) -> bool:
    """
    Early-exit check: does any of `files` statically import a CSS proxy?

    Unreadable or unscannable files are logged and skipped.
    """
    scanner = scanner or ImportScanner()
    for file in files:
        try:
            code = Path(file).read_text(encoding="utf-8")
            records = scanner.scan(code, file)
        except (OSError, UnicodeDecodeError, ParseError) as e:
            logger.warning(f"Skipping {file} while looking for CSS imports: {e}")
            continue
        if css_proxy_imports(records):
            return True
    return False


def concat_and_minify_css(
    ledger: CSSLedger,
    minify: Optional[Callable[[str], str]] = None,
) -> str:
    """Concatenate every CSS file named in `ledger`, minified when `minify` is given."""
    css_files = sorted({binding.css_path for bindings in ledger.values() for binding in bindings})

    chunks = []
    for css_file in css_files:
        try:
            chunks.append(css_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {css_file} for the combined stylesheet: {e}")

    code = "\n".join(chunks)
    return minify(code) if minify else code
