"""Output writer module for atomic file writing into the build output.

This module provides the ``OutputWriter`` class that centralizes every write
into the output root: resetting the root at the start of a build, atomic
text writes (temp file + rename), verbatim copies, and bookkeeping used for
the completion summary.

Filesystem errors are never swallowed: a failed write cleans up its
temporary file and re-raises, which aborts the build.

Example:
    Basic usage::

        from pathlib import Path
        from sitebuilder.core.output_writer import OutputWriter

        writer = OutputWriter(output_dir=Path("./dist"))
        writer.reset()
        writer.write_text(Path("./dist/index.html"), "<p>hi</p>")
        writer.copy_file(Path("logo.png"), Path("./dist/logo.png"))
        print(writer.get_summary_report())
"""

from __future__ import annotations

import os
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from sitebuilder.utils.logger import get_logger
from sitebuilder.utils.path_utils import (
    ensure_directory,
    normalize_path,
    recreate_directory,
)


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class WriteResult:
    """Result of a single file write operation.

    Attributes:
        output_path: Path the file was written to.
        input_path: Source file the output was produced from, if any.
        action: ``"written"`` for transformed text, ``"copied"`` for
            verbatim copies.
        bytes_written: Size of the output file in bytes.
    """

    output_path: Path
    input_path: Path | None = None
    action: str = "written"
    bytes_written: int = 0


@dataclass
class WriteMetadata:
    """Aggregated statistics for all writes of an ``OutputWriter``.

    Attributes:
        total_writes: Total number of files written.
        text_writes: Number of transformed text files written.
        copied_files: Number of files copied verbatim.
        bytes_written: Total output size in bytes.
        warnings: Collected warning messages for reporting.
        start_time: Unix timestamp when write tracking started.
        end_time: Unix timestamp when the summary was last generated.
    """

    total_writes: int = 0
    text_writes: int = 0
    copied_files: int = 0
    bytes_written: int = 0
    warnings: list[str] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def elapsed_seconds(self) -> float:
        """Return elapsed seconds between start and end timestamps."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        return max(0.0, self.end_time - self.start_time)

    @property
    def formatted_elapsed(self) -> str:
        """Return elapsed time as ``MM:SS``."""
        minutes = int(self.elapsed_seconds) // 60
        seconds = int(self.elapsed_seconds) % 60
        return f"{minutes:02d}:{seconds:02d}"


# ---------------------------------------------------------------------------
# OutputWriter
# ---------------------------------------------------------------------------

class OutputWriter:
    """Writer for everything that lands in the output root.

    Every text write goes through a temp file in the target directory and
    an ``os.replace``, so a crash never leaves a half-written asset.

    Args:
        output_dir: Base output directory.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = normalize_path(output_dir)
        self._logger = get_logger("sitebuilder.core.output_writer")
        self._metadata = WriteMetadata(start_time=time.time())

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _record_result(self, result: WriteResult) -> WriteResult:
        meta = self._metadata
        meta.total_writes += 1
        if result.action == "copied":
            meta.copied_files += 1
        else:
            meta.text_writes += 1
        meta.bytes_written += result.bytes_written
        return result

    def record_warning(self, message: str) -> None:
        """Keep *message* for the summary report."""
        self._metadata.warnings.append(message)

    # ------------------------------------------------------------------
    # Output root
    # ------------------------------------------------------------------

    def reset(self) -> Path:
        """Delete and recreate the output root.

        Raises:
            OSError: If the directory cannot be removed or created.
        """
        recreate_directory(self.output_dir)
        self._logger.debug(f"Recreated output directory {self.output_dir}")
        return self.output_dir

    def resolve(self, relative_path: Path) -> Path:
        """Return the absolute output path for *relative_path*."""
        return self.output_dir / relative_path

    # ------------------------------------------------------------------
    # Low-level writers
    # ------------------------------------------------------------------

    def _write_atomic(self, output_path: Path, content: str) -> None:
        """Write *content* to *output_path* atomically.

        The strategy is:
        1. Write to a temporary file **in the same directory** (so that
           ``os.replace`` is a same-filesystem rename).
        2. Flush and ``fsync``.
        3. Rename the temp file to *output_path*.

        Raises:
            OSError: On file-system errors (propagated after cleanup).
        """
        ensure_directory(output_path.parent)
        temp_path: str | None = None

        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                newline="",
                errors="surrogateescape",
                delete=False,
                dir=str(output_path.parent),
                prefix=".tmp-",
                suffix=output_path.suffix,
            ) as handle:
                temp_path = handle.name
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())

            os.replace(temp_path, output_path)
            self._logger.debug(f"Atomic write: renamed {temp_path} -> {output_path}")

        except OSError as exc:
            self._logger.error(f"Atomic write failed for {output_path}: {exc}")
            if temp_path is not None and os.path.exists(temp_path):
                try:
                    os.unlink(temp_path)
                except OSError:
                    self._logger.error(f"Failed to clean up temp file: {temp_path}")
            raise

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def write_text(
        self,
        output_path: Path,
        content: str,
        input_path: Path | None = None,
    ) -> WriteResult:
        """Write UTF-8 *content* to *output_path*, creating parent directories.

        Surrogate escapes produced by ``read_text`` are written back as the
        original bytes.

        Raises:
            OSError: If the file cannot be written.
        """
        self._write_atomic(output_path, content)

        return self._record_result(WriteResult(
            output_path=output_path,
            input_path=input_path,
            action="written",
            bytes_written=output_path.stat().st_size,
        ))

    def copy_file(self, input_path: Path, output_path: Path) -> WriteResult:
        """Copy *input_path* byte for byte to *output_path*.

        Raises:
            OSError: If the source cannot be read or the target written.
        """
        ensure_directory(output_path.parent)
        shutil.copyfile(input_path, output_path)
        self._logger.debug(f"Copied {input_path} -> {output_path}")

        return self._record_result(WriteResult(
            output_path=output_path,
            input_path=input_path,
            action="copied",
            bytes_written=output_path.stat().st_size,
        ))

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_summary_report(self) -> str:
        """Return a text summary of all writes and set the metadata ``end_time``."""
        meta = self._metadata
        meta.end_time = time.time()

        lines = [
            f"Output directory: {self.output_dir}",
            f"Files written: {meta.total_writes} "
            f"({meta.text_writes} processed, {meta.copied_files} copied, "
            f"{meta.bytes_written} bytes)",
            f"Elapsed: {meta.formatted_elapsed}",
        ]
        if meta.warnings:
            lines.append(f"Warnings: {len(meta.warnings)}")
            lines.extend(f"  - {warning}" for warning in meta.warnings)
        return "\n".join(lines)

    def get_metadata(self) -> WriteMetadata:
        """Return the live metadata object."""
        return self._metadata

