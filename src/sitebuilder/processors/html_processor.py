"""HTML script-reference rewriting and minification.

Example:
    >>> processor = HTMLProcessor()
    >>> html, count = processor.rewrite_script_references(
    ...     '<script src="js/app.js"></script>', [("app.js", "1a2b3c4d.js")]
    ... )
    >>> html
    '<script src="js/1a2b3c4d.js"></script>'
"""

from __future__ import annotations

import re
from typing import Iterable

import htmlmin
import rcssmin
import rjsmin

from sitebuilder.processors.base import MinifyResult
from sitebuilder.utils.logger import get_logger

logger = get_logger("sitebuilder.processors.html_processor")

_SCRIPT_BLOCK = re.compile(r"(<script\b([^>]*)>)(.*?)(</script\s*>)", re.IGNORECASE | re.DOTALL)
_STYLE_BLOCK = re.compile(r"(<style\b[^>]*>)(.*?)(</style\s*>)", re.IGNORECASE | re.DOTALL)
_SRC_ATTRIBUTE = re.compile(r"\bsrc\s*=", re.IGNORECASE)
_TYPE_ATTRIBUTE = re.compile(r"""\btype\s*=\s*["']?([^"'\s>]+)""", re.IGNORECASE)

JAVASCRIPT_TYPES = {
    "text/javascript",
    "application/javascript",
    "application/x-javascript",
    "text/ecmascript",
    "module",
}


def _is_inline_javascript(attributes: str) -> bool:
    if _SRC_ATTRIBUTE.search(attributes):
        return False
    match = _TYPE_ATTRIBUTE.search(attributes)
    return match is None or match.group(1).lower() in JAVASCRIPT_TYPES


def _minify_script_block(match: re.Match) -> str:
    opening, attributes, body, closing = match.groups()
    if not body.strip() or not _is_inline_javascript(attributes):
        return match.group(0)
    return f"{opening}{rjsmin.jsmin(body)}{closing}"


def _minify_style_block(match: re.Match) -> str:
    opening, body, closing = match.groups()
    return f"{opening}{rcssmin.cssmin(body)}{closing}"


class HTMLProcessor:
    """Rewrites script references and minifies HTML documents."""

    def rewrite_script_references(
        self,
        html: str,
        mappings: Iterable[tuple[str, str]],
    ) -> tuple[str, int]:
        """Point ``src`` attributes at obfuscated script names.

        A ``src="..."`` or ``src='...'`` value is rewritten when it ends with
        an original filename, either as the whole value or after a ``/``.
        The directory prefix and the quote character are kept.

        Args:
            html: Document text.
            mappings: ``(original_name, obfuscated_name)`` pairs.

        Returns:
            Tuple of (rewritten html, number of attributes rewritten).
        """
        total = 0
        for original_name, obfuscated_name in mappings:
            # Name must start the value or follow a "/": src="myapp.js" is
            # intentionally left alone when renaming app.js.
            pattern = re.compile(
                r"""(\bsrc=)(["'])((?:[^"']*/)?)""" + re.escape(original_name) + r"\2"
            )
            html, count = pattern.subn(
                lambda m, new=obfuscated_name: f"{m.group(1)}{m.group(2)}{m.group(3)}{new}{m.group(2)}",
                html,
            )
            if count:
                logger.debug(f"Rewrote {count} reference(s) {original_name} -> {obfuscated_name}")
            total += count
        return html, total

    def minify(self, html: str) -> MinifyResult:
        """Collapse whitespace runs to one space, strip comments and minify inline code.

        Inline ``<script>`` bodies go through rjsmin and ``<style>`` bodies
        through rcssmin; scripts with a ``src`` or a non-JavaScript ``type``
        are left alone. On failure the result carries the input unchanged.
        """
        try:
            inlined = _SCRIPT_BLOCK.sub(_minify_script_block, html)
            inlined = _STYLE_BLOCK.sub(_minify_style_block, inlined)
            minified = htmlmin.minify(
                inlined,
                remove_comments=True,
                remove_optional_attribute_quotes=False,
                pre_tags=("pre", "textarea", "script", "style"),
            )
        except Exception as exc:
            return MinifyResult(code=html, success=False, errors=[f"{type(exc).__name__}: {exc}"])
        return MinifyResult(code=minified, success=True)
