"""File discovery for game-engine projects."""

import fnmatch
from pathlib import Path

from script_usage_checker.config import get_config


class FileDiscovery:
    """Discovers source files with a given extension under a directory."""

    def __init__(
        self,
        root: Path,
        extension: str = ".cs",
        exclude_patterns: list[str] | None = None
    ) -> None:
        """Initialize file discovery.

        Args:
            root: Directory to search recursively
            extension: File extension to match, including the dot
            exclude_patterns: Glob patterns to exclude
        """
        self.root = Path(root)
        self.extension = extension if extension.startswith(".") else f".{extension}"

        if exclude_patterns is None:
            config = get_config()
            exclude_patterns = config.exclude_patterns

        self.exclude_patterns = exclude_patterns

    def find_source_files(self) -> list[Path]:
        """Find all matching source files.

        Returns:
            Sorted list of file paths
        """
        source_files: list[Path] = []

        if not self.root.is_dir():
            return source_files

        for path in self.root.rglob(f"*{self.extension}"):
            if path.suffix != self.extension or not path.is_file():
                continue
            if not self._should_exclude(path):
                source_files.append(path)

        return sorted(source_files)

    def find_meta_files(self) -> list[Path]:
        """Find the asset sidecar files of matching sources (e.g. ``Foo.cs.meta``)."""
        if not self.root.is_dir():
            return []

        return sorted(
            path for path in self.root.rglob(f"*{self.extension}.meta")
            if path.is_file() and not self._should_exclude(path)
        )

    def _should_exclude(self, file_path: Path) -> bool:
        """Check if file should be excluded based on patterns.

        Args:
            file_path: Path to file

        Returns:
            True if file should be excluded
        """
        # Get relative path for pattern matching
        try:
            relative = file_path.relative_to(self.root)
            relative_str = str(relative).replace("\\", "/")
        except ValueError:
            return False

        for pattern in self.exclude_patterns:
            pattern_normalized = pattern.replace("**", "*")

            if fnmatch.fnmatch(relative_str, pattern_normalized):
                return True

            # Also check each parent directory
            for parent in relative.parents:
                parent_str = str(parent).replace("\\", "/")
                if fnmatch.fnmatch(parent_str, pattern_normalized):
                    return True

        return False
