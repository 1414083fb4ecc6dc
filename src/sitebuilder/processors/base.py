"""Result types shared by the text processors."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MinifyResult:
    """Result of minifying one piece of source text.

    Attributes:
        code: Minified text, or the untouched input when minification failed
        success: Whether minification completed
        errors: Error messages (empty if successful)

    Example:
        >>> result = processor.minify(source)
        >>> if not result.success:
        ...     logger.warning(result.errors[0])
        >>> output = result.code
    """

    code: str
    success: bool
    errors: list[str] = field(default_factory=list)
