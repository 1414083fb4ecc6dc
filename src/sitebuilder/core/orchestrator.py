"""Build orchestrator module for sequencing a complete site build.

The orchestrator implements a stateful workflow with the following phases:

1. **Validation** (VALIDATING): Check the configuration and the source root,
   and log the resolved configuration.
2. **Cleaning** (CLEANING): Delete and recreate the output root.
3. **Building** (BUILDING): Walk the source tree and transform every
   non-excluded file; deferred HTML files are processed at the end.
4. **Staging** (STAGING): Mirror the curated data directory.
5. **Completion** (COMPLETED/FAILED): Final state with summary metadata.

State Transitions::

    PENDING -> VALIDATING -> CLEANING -> BUILDING -> STAGING -> COMPLETED
                   |            |           |           |
                   v            v           v           v
                 FAILED       FAILED      FAILED      FAILED

Any exception ends the run in FAILED; files already written stay on disk.

Example:
    Basic usage::

        from sitebuilder.core.config import BuildConfig
        from sitebuilder.core.orchestrator import BuildOrchestrator

        result = BuildOrchestrator(BuildConfig(source_dir="site")).run()
        if result.success:
            print(f"Built {result.files_processed} files in {result.output_dir}")
        else:
            print(f"Failed: {result.errors}")
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from sitebuilder.core.config import BuildConfig
from sitebuilder.core.data_stager import DataStager
from sitebuilder.core.exclusion import ExclusionFilter
from sitebuilder.core.filename_mapping import FilenameMapping
from sitebuilder.core.output_writer import OutputWriter
from sitebuilder.core.transformer import FileTransformer, TransformResult
from sitebuilder.core.walker import DirectoryWalker
from sitebuilder.utils.logger import get_logger
from sitebuilder.utils.path_utils import get_relative_path, is_inside, normalize_path

logger = get_logger("sitebuilder.core.orchestrator")


class JobState(Enum):
    """Enumeration of possible states of a build run.

    States:
        PENDING: Initial state, build created but not started
        VALIDATING: Checking configuration and source root
        CLEANING: Recreating the output root
        BUILDING: Walking and transforming the source tree
        STAGING: Copying the curated data directory
        COMPLETED: Build finished successfully
        FAILED: An error aborted the build
    """
    PENDING = "pending"
    VALIDATING = "validating"
    CLEANING = "cleaning"
    BUILDING = "building"
    STAGING = "staging"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class BuildResult:
    """Result of a complete build run.

    Attributes:
        success: Whether the build completed
        current_state: Final state of the run
        output_dir: Resolved output root
        processed_files: Per-file results of the main walk
        files_processed: Number of files visited by the walk
        data_files_copied: Number of files copied by the data stager
        filename_mapping: Original -> obfuscated JS names of this run
        errors: Fatal error messages
        warnings: Non-fatal warnings (minification fallbacks)
        metadata: Timing and write statistics
        summary_report: Text summary generated by the OutputWriter
    """
    success: bool
    current_state: JobState = JobState.PENDING
    output_dir: Path | None = None
    processed_files: list[TransformResult] = field(default_factory=list)
    files_processed: int = 0
    data_files_copied: int = 0
    filename_mapping: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    summary_report: str | None = None


class BuildOrchestrator:
    """Sequences the walk and the data staging for one build.

    All per-run state (filename mapping, writer, deferred HTML queue) is
    created inside :meth:`run`, so an orchestrator can be run repeatedly.

    Args:
        config: Build configuration.
    """

    def __init__(self, config: BuildConfig) -> None:
        self.config = config
        self._logger = logger
        self._current_state: JobState = JobState.PENDING

    @property
    def current_state(self) -> JobState:
        return self._current_state

    def _transition_state(self, new_state: JobState, result: BuildResult) -> None:
        old_state = self._current_state
        self._current_state = new_state
        result.current_state = new_state
        self._logger.debug(f"State transition: {old_state.name} -> {new_state.name}")

    def _log_configuration(self, source_root: Path, output_root: Path) -> None:
        config = self.config
        self._logger.info("🔨 Building project...")
        self._logger.info(f"   Source: {source_root}")
        self._logger.info(f"   Output: {output_root}")
        self._logger.info(f"   Minify: {config.minify}")
        self._logger.info(f"   Obfuscate: {config.obfuscate_filenames}")
        self._logger.info(
            f"   Domain protection: {'enabled' if config.domain_protection else 'disabled'}"
        )

    def _build_exclusion_filter(self, source_root: Path, output_root: Path) -> ExclusionFilter:
        rules = ExclusionFilter(source_root, self.config.exclude)
        if is_inside(output_root, source_root) and output_root != source_root:
            rules.add(str(get_relative_path(output_root, source_root)))
        return rules

    def run(self) -> BuildResult:
        """Run the build.

        Returns:
            BuildResult; ``success`` is False when any phase raised, with the
            error message in ``errors``.
        """
        result = BuildResult(success=False)
        start_time = time.time()
        self._current_state = JobState.PENDING

        try:
            self._transition_state(JobState.VALIDATING, result)
            self.config.validate()
            source_root = normalize_path(self.config.source_dir)
            output_root = normalize_path(self.config.output_dir)
            result.output_dir = output_root
            self._log_configuration(source_root, output_root)
            if not source_root.is_dir():
                raise FileNotFoundError(f"Source directory not found: {source_root}")

            self._transition_state(JobState.CLEANING, result)
            writer = OutputWriter(output_root)
            writer.reset()

            self._transition_state(JobState.BUILDING, result)
            mapping = FilenameMapping(deterministic=self.config.deterministic_filenames)
            transformer = FileTransformer(self.config, writer, mapping)
            rules = self._build_exclusion_filter(source_root, output_root)

            def visit(source_path: Path, relative_path: Path) -> None:
                outcome = transformer.transform(source_path, relative_path)
                if outcome.action != "deferred":
                    result.processed_files.append(outcome)

            walker = DirectoryWalker(source_root, rules, visit)
            result.files_processed = walker.walk()
            if transformer.pending_count:
                self._logger.debug(f"Processing {transformer.pending_count} deferred HTML file(s)")
                result.processed_files.extend(transformer.flush_deferred())
            result.filename_mapping = dict(mapping.items())

            self._transition_state(JobState.STAGING, result)
            stager = DataStager(
                source_root,
                self.config.data_source,
                self.config.data_extension,
                writer,
            )
            result.data_files_copied = stager.stage()

            result.warnings.extend(writer.get_metadata().warnings)
            result.summary_report = writer.get_summary_report()
            result.metadata = {
                "total_processing_time_seconds": time.time() - start_time,
                "total_writes": writer.get_metadata().total_writes,
                "bytes_written": writer.get_metadata().bytes_written,
            }
            result.success = True
            self._transition_state(JobState.COMPLETED, result)

            self._logger.info("✅ Build complete!")
            for line in result.summary_report.splitlines():
                self._logger.info(f"   {line}")

        except Exception as exc:
            self._transition_state(JobState.FAILED, result)
            result.errors.append(f"{type(exc).__name__}: {exc}")
            result.metadata["total_processing_time_seconds"] = time.time() - start_time
            self._logger.exception(f"❌ Build failed: {exc}")

        return result
