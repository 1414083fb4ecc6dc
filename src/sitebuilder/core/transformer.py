"""Per-file transformation: minify, guard, rename, or copy.

The ``FileTransformer`` turns one source file into exactly one output file,
dispatching on the lower-cased extension:

* ``.js`` - minify, prepend the domain guard, optionally rename.
* ``.html`` / ``.htm`` - rewrite script references, minify.
* ``.css`` - minify (verbatim copy when minification is off).
* anything else - byte-for-byte copy.

Minification failures are logged as warnings and the unminified text is
written instead. Filesystem errors propagate to the caller.

In ``deferred`` HTML mode, HTML files are queued by :meth:`transform` and
written by :meth:`flush_deferred` once the whole tree has been walked, so
every JavaScript rename is visible to every document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from sitebuilder.core.config import BuildConfig
from sitebuilder.core.filename_mapping import FilenameMapping
from sitebuilder.core.output_writer import OutputWriter
from sitebuilder.processors import (
    HTMLProcessor,
    JavaScriptProcessor,
    generate_domain_guard,
    minify_css,
)
from sitebuilder.processors.base import MinifyResult
from sitebuilder.utils.logger import get_logger
from sitebuilder.utils.path_utils import get_file_extension, read_text

logger = get_logger("sitebuilder.core.transformer")

HTML_EXTENSIONS = {".html", ".htm"}


@dataclass
class TransformResult:
    """Result of transforming a single file.

    Attributes:
        source_path: Absolute path of the input file
        relative_path: Input path relative to the source root
        output_path: Path written, or None while an HTML file is deferred
        action: "processed", "copied" or "deferred"
        minified: Whether minification was applied successfully
        warnings: Warning messages (e.g. minification failures)
    """
    source_path: Path
    relative_path: Path
    output_path: Path | None
    action: str
    minified: bool = False
    warnings: list[str] = field(default_factory=list)


class FileTransformer:
    """Transforms source files into the output tree.

    Args:
        config: Build configuration.
        writer: Output writer rooted at the output directory.
        mapping: Filename mapping shared for the whole run. The transformer
            is its only writer.
        js_processor: Optional pre-built JavaScript processor.
    """

    def __init__(
        self,
        config: BuildConfig,
        writer: OutputWriter,
        mapping: FilenameMapping,
        js_processor: JavaScriptProcessor | None = None,
    ) -> None:
        self.config = config
        self.writer = writer
        self.mapping = mapping
        self.js_processor = js_processor or JavaScriptProcessor(
            backend=config.js_minifier,
            terser_command=config.terser_command,
        )
        self.html_processor = HTMLProcessor()
        self.guard = generate_domain_guard(config.allowed_domains, config.hosting_suffix)
        self._deferred: list[tuple[Path, Path]] = []

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def transform(self, source_path: Path, relative_path: Path) -> TransformResult:
        """Transform one file.

        Raises:
            OSError: If the source cannot be read or the output written.
        """
        ext = get_file_extension(source_path)

        if ext == ".js":
            return self._process_javascript(source_path, relative_path)
        if ext in HTML_EXTENSIONS:
            if self.config.html_rewrite == "deferred":
                self._deferred.append((source_path, relative_path))
                logger.debug(f"Deferred {relative_path} until all scripts are processed")
                return TransformResult(source_path, relative_path, None, action="deferred")
            return self._process_html(source_path, relative_path)
        if ext == ".css" and self.config.minify:
            return self._process_css(source_path, relative_path)
        return self._copy(source_path, relative_path)

    def flush_deferred(self) -> list[TransformResult]:
        """Process every queued HTML file in the order it was visited."""
        pending, self._deferred = self._deferred, []
        return [self._process_html(source, relative) for source, relative in pending]

    @property
    def pending_count(self) -> int:
        return len(self._deferred)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def _apply_minifier(self, result: MinifyResult, transform: TransformResult) -> str:
        if result.success:
            transform.minified = True
            return result.code
        name = transform.source_path.name
        message = f"Could not minify {name}, copying as-is"
        logger.warning(f"⚠ {message}")
        for error in result.errors:
            logger.debug(f"{name}: {error}")
        transform.warnings.append(message)
        self.writer.record_warning(message)
        return result.code

    def _process_javascript(self, source_path: Path, relative_path: Path) -> TransformResult:
        code = read_text(source_path)
        file_name = source_path.name
        transform = TransformResult(source_path, relative_path, None, action="processed")

        output_code = code
        if self.config.minify:
            output_code = self._apply_minifier(self.js_processor.minify(code), transform)

        if self.guard:
            output_code = self.guard + output_code

        output_name = file_name
        if self.config.obfuscate_filenames:
            output_name = self.mapping.obfuscate(file_name, content=code)

        output_path = self.writer.resolve(relative_path).with_name(output_name)
        self.writer.write_text(output_path, output_code, input_path=source_path)
        transform.output_path = output_path

        if self.config.obfuscate_filenames:
            logger.info(f"✓ Processed {relative_path} → {output_name}")
        else:
            logger.info(f"✓ Processed {relative_path}")
        return transform

    def _process_html(self, source_path: Path, relative_path: Path) -> TransformResult:
        html = read_text(source_path)
        transform = TransformResult(source_path, relative_path, None, action="processed")

        if self.config.obfuscate_filenames and len(self.mapping):
            html, _ = self.html_processor.rewrite_script_references(html, self.mapping.items())

        if self.config.minify:
            html = self._apply_minifier(self.html_processor.minify(html), transform)

        output_path = self.writer.resolve(relative_path)
        self.writer.write_text(output_path, html, input_path=source_path)
        transform.output_path = output_path
        logger.info(f"✓ Processed {relative_path}")
        return transform

    def _process_css(self, source_path: Path, relative_path: Path) -> TransformResult:
        css = minify_css(read_text(source_path))
        output_path = self.writer.resolve(relative_path)
        self.writer.write_text(output_path, css, input_path=source_path)
        logger.info(f"✓ Processed {relative_path}")
        return TransformResult(source_path, relative_path, output_path, action="processed", minified=True)

    def _copy(self, source_path: Path, relative_path: Path) -> TransformResult:
        output_path = self.writer.resolve(relative_path)
        self.writer.copy_file(source_path, output_path)
        logger.info(f"✓ Copied {relative_path}")
        return TransformResult(source_path, relative_path, output_path, action="copied")
