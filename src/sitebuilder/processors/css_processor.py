"""Basic CSS minification.

Removes block comments and redundant whitespace. The transform is
idempotent: minifying its own output returns the same text.
"""

from __future__ import annotations

import re

_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION_SPACE = re.compile(r"\s*([{}:;,])\s*")


def minify_css(css: str) -> str:
    """Minify a stylesheet.

    Examples:
        >>> minify_css("/* main */\\nbody {\\n  color : red;\\n}\\n")
        'body{color:red;}'
    """
    css = _COMMENT.sub("", css)
    css = _WHITESPACE.sub(" ", css)
    css = _PUNCTUATION_SPACE.sub(r"\1", css)
    return css.strip()
