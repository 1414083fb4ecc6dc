"""JavaScript minification.

Two backends are available:

* ``terser`` - the external terser CLI, run as a subprocess with dead code
  removal, console/debugger removal, top-level name mangling and comment
  removal.
* ``rjsmin`` - comment and whitespace removal via the ``rjsmin`` package,
  followed by a pass that neutralizes ``console.*(...)`` calls and removes
  ``debugger`` statements. No name mangling.

``auto`` picks terser when its executable is on PATH.

Example:
    >>> processor = JavaScriptProcessor(backend="rjsmin")
    >>> processor.minify("// note\\nconsole.log(1);\\nvar x = 1;").code
    'void 0;var x=1;'
"""

from __future__ import annotations

import shutil
import string
import subprocess

import rjsmin

from sitebuilder.processors.base import MinifyResult
from sitebuilder.utils.logger import get_logger

logger = get_logger("sitebuilder.processors.javascript_processor")

TERSER_ARGS: tuple[str, ...] = (
    "--compress", "dead_code=true,drop_console=true,drop_debugger=true",
    "--mangle", "toplevel=true",
    "--format", "comments=false",
)

_IDENTIFIER_START = set(string.ascii_letters + "_$")
_IDENTIFIER_CHARS = _IDENTIFIER_START | set(string.digits)
_QUOTES = "'\"`"


def _skip_string(code: str, start: int) -> int:
    """Return the index just past the string literal opening at *start*."""
    quote = code[start]
    index = start + 1
    while index < len(code):
        char = code[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    return len(code)


def _find_call_end(code: str, open_paren: int) -> int | None:
    """Return the index just past the parenthesis matching *open_paren*."""
    depth = 0
    index = open_paren
    while index < len(code):
        char = code[index]
        if char in _QUOTES:
            index = _skip_string(code, index)
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    return None


def _next_significant(code: str, index: int) -> str:
    """Return the first non-whitespace character at or after *index*."""
    while index < len(code) and code[index].isspace():
        index += 1
    return code[index] if index < len(code) else ""


def strip_debug_statements(code: str) -> str:
    """Neutralize ``console.<method>(...)`` calls and ``debugger`` statements.

    Console calls become ``void 0`` so they stay valid in expression
    position; ``debugger`` becomes an empty statement, while ``debugger`` as
    an object key or method name is kept. String and template
    literals are skipped. Regular expression literals are not recognized,
    so a quote inside one can hide a later call from this pass.
    """
    out: list[str] = []
    index = 0
    length = len(code)

    while index < length:
        char = code[index]

        if char in _QUOTES:
            end = _skip_string(code, index)
            out.append(code[index:end])
            index = end
            continue

        if char not in _IDENTIFIER_START:
            out.append(char)
            index += 1
            continue

        end = index
        while end < length and code[end] in _IDENTIFIER_CHARS:
            end += 1
        word = code[index:end]
        is_property = index > 0 and code[index - 1] == "."

        # debugger: as an object key, debugger() as a method name
        if (
            not is_property
            and word == "debugger"
            and _next_significant(code, end) not in (":", "(")
        ):
            if end < length and code[end] == ";":
                end += 1
            out.append(";")
            index = end
            continue

        if not is_property and word == "console" and end < length and code[end] == ".":
            method_end = end + 1
            while method_end < length and code[method_end] in _IDENTIFIER_CHARS:
                method_end += 1
            if method_end < length and code[method_end] == "(":
                call_end = _find_call_end(code, method_end)
                if call_end is not None:
                    out.append("void 0")
                    index = call_end
                    continue

        out.append(word)
        index = end

    return "".join(out)


class JavaScriptProcessor:
    """Minifies JavaScript source with the configured backend.

    Args:
        backend: "auto", "terser" or "rjsmin".
        terser_command: Executable name or path of the terser CLI.
    """

    def __init__(self, backend: str = "auto", terser_command: str = "terser") -> None:
        self.terser_command = terser_command
        self.backend = self._resolve_backend(backend)
        logger.debug(f"JavaScript minifier backend: {self.backend}")

    def _resolve_backend(self, backend: str) -> str:
        if backend == "auto":
            return "terser" if shutil.which(self.terser_command) else "rjsmin"
        if backend not in ("terser", "rjsmin"):
            raise ValueError(f"Unknown JavaScript minifier backend: {backend}")
        return backend

    def minify(self, code: str) -> MinifyResult:
        """Minify *code*; on failure the result carries the input unchanged."""
        if self.backend == "terser":
            return self._minify_with_terser(code)
        return self._minify_with_rjsmin(code)

    def _minify_with_terser(self, code: str) -> MinifyResult:
        command = [self.terser_command, *TERSER_ARGS]
        try:
            completed = subprocess.run(
                command,
                input=code,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
                check=False,
            )
        except OSError as exc:
            return MinifyResult(
                code=code,
                success=False,
                errors=[f"Could not run {self.terser_command}: {exc}"],
            )

        if completed.returncode != 0:
            message = completed.stderr.strip() or (
                f"{self.terser_command} exited with status {completed.returncode}"
            )
            return MinifyResult(code=code, success=False, errors=[message])

        return MinifyResult(code=completed.stdout.rstrip("\n"), success=True)

    def _minify_with_rjsmin(self, code: str) -> MinifyResult:
        try:
            minified = rjsmin.jsmin(code)
        except (TypeError, ValueError) as exc:
            return MinifyResult(code=code, success=False, errors=[str(exc)])
        return MinifyResult(code=strip_debug_statements(minified), success=True)
