"""Textual reference search across the script corpus."""

import logging
from pathlib import Path

from script_usage_checker.models import ReferenceHit

logger = logging.getLogger(__name__)


class CorpusReadError(Exception):
    """Raised when a corpus file cannot be read in strict mode."""


def reference_patterns(name: str) -> tuple[str, str, str]:
    """Build the substrings that count as a mention of a script.

    Plain substring checks: ``Foo`` also matches a line containing
    ``FooBar.x``, and a bare ``Foo)`` is missed.
    """
    return (f"{name}.", f"new {name}(", f"{name} ")


def escape_quotes(text: str) -> str:
    """Double every double quote."""
    return text.replace('"', '""')


class ReferenceFinder:
    """Finds lines in other files that mention a script by name."""

    def __init__(self, corpus_files: list[Path], strict: bool = False) -> None:
        """Initialize reference finder.

        Args:
            corpus_files: Files searched for mentions
            strict: If True, an unreadable file aborts the run
        """
        self.corpus_files = sorted(Path(p) for p in corpus_files)
        self._normalized = {path: _normalize(path) for path in self.corpus_files}
        self.strict = strict
        self._lines: dict[Path, list[str] | None] = {}

    def find_references(self, name: str, exclude: Path | None = None) -> list[ReferenceHit]:
        """Find every line that mentions name.

        Args:
            name: Script name to look for
            exclude: The script's own file, which is not searched

        Returns:
            One hit per matching line, in file then line order
        """
        patterns = reference_patterns(name)
        excluded = _normalize(exclude) if exclude is not None else None
        hits: list[ReferenceHit] = []

        for file_path in self.corpus_files:
            if excluded is not None and self._normalized[file_path] == excluded:
                continue

            lines = self._read_lines(file_path)
            if lines is None:
                continue

            for line_number, line in enumerate(lines, start=1):
                if any(pattern in line for pattern in patterns):
                    hits.append(ReferenceHit(
                        file_name=file_path.name,
                        line_number=line_number,
                        text=escape_quotes(line.strip()),
                    ))

        return hits

    def _read_lines(self, file_path: Path) -> list[str] | None:
        """Read the lines of a file once per run.

        Returns:
            Lines, or None if the file was skipped as unreadable
        """
        if file_path in self._lines:
            return self._lines[file_path]

        try:
            with open(file_path, "r", encoding="utf-8-sig", errors="replace", newline=None) as f:
                text = f.read()
        except OSError as e:
            if self.strict:
                raise CorpusReadError(f"Cannot read {file_path}: {e}") from e
            logger.warning(f"Skipping unreadable file {file_path}: {e}")
            self._lines[file_path] = None
            return None

        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()

        self._lines[file_path] = lines
        return lines


def _normalize(path: Path) -> Path:
    """Normalize a path for equality checks."""
    try:
        return Path(path).resolve()
    except OSError:
        return Path(path).absolute()
