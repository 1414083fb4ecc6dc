"""Core build pipeline.

Classes:
    BuildConfig: Configuration data model
    BuildOrchestrator: Sequences the walk and the data staging
    BuildResult: Outcome of a build run
    JobState: Phases of a build run
    ExclusionFilter: Decides which source paths are skipped
    FilenameMapping: Original -> obfuscated JavaScript filenames
    FileTransformer: Per-file transformation
    DirectoryWalker: Recursive source tree walk
    DataStager: Extension-filtered copy of the data directory
    OutputWriter: Atomic writes into the output root
"""

from sitebuilder.core.config import (
    DEFAULT_CONFIG,
    DEFAULT_EXCLUDES,
    BuildConfig,
    load_config,
    save_config,
)
from sitebuilder.core.data_stager import DataStager
from sitebuilder.core.exclusion import ExclusionFilter
from sitebuilder.core.filename_mapping import FilenameMapping, generate_obfuscated_name
from sitebuilder.core.orchestrator import BuildOrchestrator, BuildResult, JobState
from sitebuilder.core.output_writer import OutputWriter, WriteMetadata, WriteResult
from sitebuilder.core.transformer import FileTransformer, TransformResult
from sitebuilder.core.walker import DirectoryWalker

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_EXCLUDES",
    "BuildConfig",
    "load_config",
    "save_config",
    "DataStager",
    "ExclusionFilter",
    "FilenameMapping",
    "generate_obfuscated_name",
    "BuildOrchestrator",
    "BuildResult",
    "JobState",
    "OutputWriter",
    "WriteMetadata",
    "WriteResult",
    "FileTransformer",
    "TransformResult",
    "DirectoryWalker",
]
