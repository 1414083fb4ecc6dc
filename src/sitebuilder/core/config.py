"""Configuration data model for site builds.

This module defines the BuildConfig dataclass that holds every option of a
build run, its validation rules, and JSON serialization so that a
configuration can be kept as a reusable build profile.

Example:
    Building with a custom configuration:

    >>> config = BuildConfig(
    ...     source_dir="site",
    ...     output_dir="site/dist",
    ...     obfuscate_filenames=True,
    ...     allowed_domains=["example.com"],
    ... )
    >>> config.validate()

    Saving and reloading a profile:

    >>> save_config(config, Path("build.json"))
    >>> load_config(Path("build.json")).allowed_domains
    ['example.com']
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from sitebuilder.utils.logger import VALID_LOG_LEVELS, get_logger
from sitebuilder.utils.path_utils import ensure_directory, is_inside

logger = get_logger("sitebuilder.core.config")

# Entries never processed by the main walk. ``data`` is staged separately
# by the DataStager (JSON files of data/llm only).
DEFAULT_EXCLUDES: List[str] = [
    "node_modules",
    "dist",
    "data",
    ".git",
    ".gitignore",
    "package.json",
    "package-lock.json",
    "pyproject.toml",
    "README.md",
    ".DS_Store",
    "old-index.html",
]

VALID_JS_MINIFIERS = {"auto", "terser", "rjsmin"}
VALID_HTML_REWRITE_MODES = {"deferred", "inline"}


@dataclass
class BuildConfig:
    """Options for a single build run.

    Attributes:
        source_dir: Directory to read from.
        output_dir: Directory to write to (destroyed and recreated each run).
        exclude: Path literals or basenames never processed by the walk.
        obfuscate_filenames: Rename ``.js`` outputs to hashed names and
            rewrite HTML ``src`` references.
        minify: Enable the JavaScript, HTML and CSS minification branches.
        allowed_domains: Hostnames the domain-lock guard accepts, or None to
            disable guard injection.
        hosting_suffix: Hosting-platform hostname suffix always accepted by
            the guard.
        data_source: Subdirectory of ``source_dir`` mirrored by the data
            stager into the same relative path under ``output_dir``.
        data_extension: The only extension the data stager copies.
        js_minifier: "terser" (external CLI), "rjsmin", or "auto" to use
            terser when it is on PATH.
        terser_command: Executable name or path of the terser CLI.
        html_rewrite: "deferred" processes HTML after every JS file has been
            renamed; "inline" processes HTML in walk order, so only earlier
            JS renames are applied.
        deterministic_filenames: Hash file content instead of the wall-clock
            time when deriving obfuscated names.
        log_level: Console log level.
        log_file: Optional rotating log file path.
    """

    source_dir: str = "."
    output_dir: str = "./dist"
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDES))
    obfuscate_filenames: bool = False
    minify: bool = True
    allowed_domains: Optional[List[str]] = None
    hosting_suffix: str = ".pages.dev"
    data_source: str = "data/llm"
    data_extension: str = ".json"
    js_minifier: str = "auto"
    terser_command: str = "terser"
    html_rewrite: str = "deferred"
    deterministic_filenames: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def domain_protection(self) -> bool:
        """True when a non-empty allow-list enables the domain guard."""
        return bool(self.allowed_domains)

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If any validation check fails
        """
        for name in ("source_dir", "output_dir"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Option '{name}' must be a non-empty string")

        source = Path(self.source_dir).expanduser()
        output = Path(self.output_dir).expanduser()
        if source.resolve() == output.resolve():
            raise ValueError("Option 'output_dir' must differ from 'source_dir'")

        # The output root is deleted at the start of every build
        if is_inside(source, output):
            raise ValueError("Option 'output_dir' must not contain 'source_dir'")

        if not isinstance(self.exclude, list) or not all(
            isinstance(entry, str) and entry for entry in self.exclude
        ):
            raise ValueError("Option 'exclude' must be a list of non-empty strings")

        for name in ("obfuscate_filenames", "minify", "deterministic_filenames"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"Option '{name}' must be a boolean")

        if self.allowed_domains is not None:
            if not isinstance(self.allowed_domains, list) or not all(
                isinstance(domain, str) and domain.strip()
                for domain in self.allowed_domains
            ):
                raise ValueError(
                    "Option 'allowed_domains' must be None or a list of domain names"
                )

        if not isinstance(self.hosting_suffix, str):
            raise ValueError("Option 'hosting_suffix' must be a string")

        if not isinstance(self.data_source, str) or not self.data_source.strip():
            raise ValueError("Option 'data_source' must be a non-empty string")

        if not isinstance(self.data_extension, str) or not self.data_extension.startswith("."):
            raise ValueError("Option 'data_extension' must start with '.'")

        if self.js_minifier not in VALID_JS_MINIFIERS:
            raise ValueError(
                f"Invalid js_minifier: {self.js_minifier}. "
                f"Expected one of {sorted(VALID_JS_MINIFIERS)}"
            )

        if self.html_rewrite not in VALID_HTML_REWRITE_MODES:
            raise ValueError(
                f"Invalid html_rewrite: {self.html_rewrite}. "
                f"Expected one of {sorted(VALID_HTML_REWRITE_MODES)}"
            )

        if not isinstance(self.log_level, str) or self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}"
            )

        logger.debug("Build configuration validated successfully")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BuildConfig:
        """Create configuration from a dictionary.

        Missing keys take their default values.

        Raises:
            ValueError: If the dictionary contains unknown keys
        """
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")

        config = cls(**data)
        logger.debug(f"Created configuration from dictionary ({len(data)} keys)")
        return config


def save_config(config: BuildConfig, file_path: Path) -> None:
    """Validate *config* and write it to *file_path* as JSON.

    Raises:
        ValueError: If configuration validation fails
        OSError: If the file cannot be written
    """
    config.validate()
    ensure_directory(file_path.parent)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    logger.debug(f"Configuration saved to {file_path}")


def load_config(file_path: Path) -> BuildConfig:
    """Load and validate a configuration from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If JSON is invalid or validation fails
    """
    if not file_path.exists():
        logger.error(f"Configuration file not found: {file_path}")
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file {file_path}: {e}")
        raise ValueError(f"Invalid JSON format in configuration file: {e}")

    if not isinstance(data, dict):
        raise ValueError("Configuration file must contain a JSON object")

    config = BuildConfig.from_dict(data)
    config.validate()
    logger.debug(f"Configuration loaded from {file_path}")
    return config


# Embedded configuration used by the no-argument entry point.
DEFAULT_CONFIG = BuildConfig()
