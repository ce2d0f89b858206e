"""
Minifier collaborators.

Each minifier is a pure `text -> text` function. The JS minifier accepts a
target-environment hint for API compatibility; rjsmin emits syntax-preserving
output so the hint does not change the result.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import csscompressor
import htmlmin
import rjsmin

logger = logging.getLogger(__name__)

# Drop comments and whitespace-only text between tags; attribute quoting is left alone
HTMLMIN_OPTS: Dict[str, bool] = {
    "remove_comments": True,
    "remove_empty_space": True,
    "remove_optional_attribute_quotes": False,
}


def minify_js(code: str, target: Optional[str] = None) -> str:
    if target:
        logger.debug(f"JS target hint {target!r} has no effect on rjsmin output")
    return rjsmin.jsmin(code)


def minify_css(code: str) -> str:
    return csscompressor.compress(code)


def minify_html(code: str) -> str:
    return htmlmin.minify(code, **HTMLMIN_OPTS)


@dataclass(frozen=True)
class Minifiers:
    """Minifier dispatch table, swappable in tests."""
    js: Callable[..., str] = minify_js
    css: Callable[[str], str] = minify_css
    html: Callable[[str], str] = minify_html

