"""
Command-line entry point for the site builder.

The build takes no arguments: every option comes from the embedded
``DEFAULT_CONFIG`` in :mod:`sitebuilder.core.config`.

Example:
    Run a build from the project directory:
    $ python -m sitebuilder.main
"""

import sys
from pathlib import Path

from sitebuilder import __version__
from sitebuilder.core.config import DEFAULT_CONFIG, BuildConfig
from sitebuilder.core.orchestrator import BuildOrchestrator
from sitebuilder.utils.logger import setup_logger


def main(config: BuildConfig = DEFAULT_CONFIG) -> int:
    """
    Run a build with *config*.

    Returns:
        Exit code (0 for success, 1 for a failed build).
    """
    logger = setup_logger(
        "sitebuilder",
        level=config.log_level,
        log_file=Path(config.log_file) if config.log_file else None,
    )
    logger.debug(f"sitebuilder {__version__}")

    result = BuildOrchestrator(config).run()
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
