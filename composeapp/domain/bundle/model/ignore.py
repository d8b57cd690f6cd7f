"""Exclusion patterns for bundle archives."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

from composeapp.domain.shared.error import ArchiveError

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILE = ".composeappignores"


@dataclass(frozen=True)
class IgnoreRules:
    """Glob patterns matched against archive-relative paths.

    Matching is per path segment: ``*`` and ``?`` never cross a ``/``, so
    ``*.log`` only matches files at the bundle root and ``sub/*`` matches the
    direct children of ``sub``.
    """

    patterns: tuple[str, ...] = ()

    @classmethod
    def load(cls, root: Path, filename: str = DEFAULT_IGNORE_FILE) -> IgnoreRules:
        """Read ``filename`` from ``root``.

        Blank lines and ``#`` comments are skipped. The ignore file itself is
        always excluded, whether or not it exists.

        Raises:
            ArchiveError: If the file exists but cannot be read as UTF-8 text.
        """
        patterns: list[str] = []
        path = root / filename
        if path.is_file():
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ArchiveError(f"Can't read {filename}: {e}") from e
            for line in text.splitlines():
                pattern = cls._clean(line)
                if pattern is None:
                    continue
                if pattern.startswith("!"):
                    logger.warning(f"Exception patterns are not supported, skipping: {pattern}")
                    continue
                patterns.append(pattern)
        patterns.append(filename)
        return cls(patterns=tuple(patterns))

    @staticmethod
    def _clean(line: str) -> str | None:
        line = line.strip()
        if not line or line.startswith("#"):
            return None
        if line.startswith("!"):
            return line
        pattern = posixpath.normpath(line.replace("\\", "/"))
        if len(pattern) > 1:
            pattern = pattern.lstrip("/")
        if pattern in (".", "/", ""):
            return None
        return pattern

    def match(self, relative_path: str) -> str | None:
        """Return the first pattern matching ``relative_path``, or None."""
        parts = relative_path.split("/")
        for pattern in self.patterns:
            pattern_parts = pattern.split("/")
            if len(pattern_parts) != len(parts):
                continue
            if all(fnmatchcase(p, g) for p, g in zip(parts, pattern_parts)):
                return pattern
        return None
