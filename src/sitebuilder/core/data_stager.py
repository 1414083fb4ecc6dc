"""Staging of the curated data directory.

The data stager mirrors one subdirectory of the source root into the same
relative location under the output root, copying only files with one
extension. It runs after the main walk, ignores the exclusion list and never
touches the filename mapping.
"""

from __future__ import annotations

import os
from pathlib import Path

from sitebuilder.core.output_writer import OutputWriter
from sitebuilder.utils.logger import get_logger
from sitebuilder.utils.path_utils import ensure_directory, get_file_extension

logger = get_logger("sitebuilder.core.data_stager")


class DataStager:
    """Copies ``source_root/subdir`` to ``output_root/subdir`` by extension.

    Args:
        source_root: Build source root.
        subdir: Directory to stage, relative to the source root
            (e.g. ``"data/llm"``).
        extension: The only extension copied, compared case-insensitively.
        writer: Output writer rooted at the output directory.
    """

    def __init__(
        self,
        source_root: Path,
        subdir: str,
        extension: str,
        writer: OutputWriter,
    ) -> None:
        self.source_root = Path(source_root)
        self.subdir = subdir
        self.extension = extension.lower()
        self.writer = writer

    @property
    def source_dir(self) -> Path:
        return self.source_root / self.subdir

    @property
    def output_dir(self) -> Path:
        return self.writer.resolve(Path(self.subdir))

    def stage(self) -> int:
        """Mirror the data directory and return the number of files copied.

        Raises:
            OSError: If a file cannot be read or written.
        """
        if not self.source_dir.is_dir():
            logger.info(f"⚠ No {self.subdir} directory found, skipping...")
            return 0

        logger.info(f"📁 Copying {self.subdir} directory...")
        return self._copy_directory(self.source_dir, self.output_dir)

    def _copy_directory(self, source: Path, destination: Path) -> int:
        ensure_directory(destination)
        copied = 0
        for name in os.listdir(source):
            source_path = source / name
            destination_path = destination / name

            if source_path.is_dir():
                copied += self._copy_directory(source_path, destination_path)
            elif get_file_extension(source_path) == self.extension:
                self.writer.copy_file(source_path, destination_path)
                logger.info(f"✓ Copied {os.path.relpath(source_path, self.source_root)}")
                copied += 1
        return copied
