"""Static-asset build pipeline: minify, guard and rename site assets into dist/."""

__version__ = "0.1.0"
