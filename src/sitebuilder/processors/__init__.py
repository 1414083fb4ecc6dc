"""Text processors for the build pipeline.

Classes:
    JavaScriptProcessor: JavaScript minification (terser or rjsmin backend)
    HTMLProcessor: Script reference rewriting and HTML minification
    MinifyResult: Outcome of a minification call

Functions:
    minify_css: Basic CSS minification
    generate_domain_guard: JavaScript domain-lock guard snippet
"""

from sitebuilder.processors.base import MinifyResult
from sitebuilder.processors.css_processor import minify_css
from sitebuilder.processors.domain_guard_runtime_js import generate_domain_guard
from sitebuilder.processors.html_processor import HTMLProcessor
from sitebuilder.processors.javascript_processor import (
    JavaScriptProcessor,
    strip_debug_statements,
)

__all__ = [
    "MinifyResult",
    "minify_css",
    "generate_domain_guard",
    "HTMLProcessor",
    "JavaScriptProcessor",
    "strip_debug_statements",
]
