"""Obfuscated JavaScript filenames and the per-run rename table.

The mapping is keyed by original basename: HTML ``src`` attributes are
matched on their trailing filename, so two scripts sharing a basename in
different directories resolve to whichever was renamed last.
"""

from __future__ import annotations

import hashlib
import os
import time
from typing import Iterator

from sitebuilder.utils.logger import get_logger

logger = get_logger("sitebuilder.core.filename_mapping")

# Number of hex characters kept from the digest
TOKEN_LENGTH = 8


def generate_obfuscated_name(original_name: str, salt: str | None = None) -> str:
    """Return an 8-hex-character name carrying the original extension.

    Args:
        original_name: Basename of the file, e.g. ``"app.js"``.
        salt: Extra hash input. Defaults to the wall-clock time in
            milliseconds, which makes names differ between runs.

    Examples:
        >>> name = generate_obfuscated_name("app.js", salt="1700000000000")
        >>> len(name), name.endswith(".js")
        (11, True)
    """
    if salt is None:
        salt = str(int(time.time() * 1000))
    digest = hashlib.md5((original_name + salt).encode("utf-8", "surrogateescape")).hexdigest()
    _, ext = os.path.splitext(original_name)
    return f"{digest[:TOKEN_LENGTH]}{ext}"


class FilenameMapping:
    """Original -> obfuscated filename table for one build run.

    Written only by the file transformer while it processes JavaScript in
    walk order, and read when rewriting HTML script references.
    """

    def __init__(self, deterministic: bool = False) -> None:
        self.deterministic = deterministic
        self._names: dict[str, str] = {}

    def obfuscate(self, original_name: str, content: str = "") -> str:
        """Derive, record and return the obfuscated name for *original_name*.

        In deterministic mode the salt is the file *content*, so the same
        file always gets the same name.
        """
        salt = content if self.deterministic else None
        new_name = generate_obfuscated_name(original_name, salt=salt)
        if original_name in self._names:
            logger.debug(
                f"Replacing mapping for {original_name}: "
                f"{self._names[original_name]} -> {new_name}"
            )
        self._names[original_name] = new_name
        return new_name

    def get(self, original_name: str) -> str | None:
        return self._names.get(original_name)

    def items(self) -> list[tuple[str, str]]:
        """Return mappings in the order they were recorded."""
        return list(self._names.items())

    def __contains__(self, original_name: object) -> bool:
        return original_name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)
