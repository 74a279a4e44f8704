"""Configuration management for Script Usage Checker."""

import copy
import logging
from pathlib import Path
from typing import Any

import toml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".script-usage.toml"


class Config:
    """Application configuration."""

    def __init__(self, config_file: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            config_file: Optional path to configuration file
        """
        self.config_file = config_file
        self._config: dict[str, Any] = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file or defaults."""
        config: dict[str, Any] = self._get_defaults()

        if self.config_file and self.config_file.exists():
            try:
                file_config = toml.load(self.config_file)
                _merge(config, file_config)
                logger.debug(f"Loaded config from {self.config_file}")
            except toml.TomlDecodeError as e:
                logger.warning(f"Invalid TOML in config file {self.config_file}: {e}")
            except OSError as e:
                logger.warning(f"Error loading config file {self.config_file}: {e}")

        return config

    @staticmethod
    def _get_defaults() -> dict[str, Any]:
        """Get default configuration values."""
        return {
            "paths": {
                "target_directory": "Assets/Scripts",
                "output_directory": "Assets",
                "corpus_directory": "Assets",
            },
            "scan": {
                "extension": ".cs",
                "exclude_patterns": [
                    "**/Library/**",
                    "**/Temp/**",
                    "**/obj/**",
                ],
                "strict": False,
                "lifecycle_hooks": ["Start", "Update"],
            },
            "kinds": {
                "behavior_bases": ["MonoBehaviour"],
                "data_asset_bases": ["ScriptableObject"],
            },
            "scene": {
                "paths": [],
            },
            "output": {
                "export_csv": False,
                "simple": False,
                "timestamped": True,
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "paths.target_directory")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value: Any = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value using dot notation.

        Empty strings and None are ignored so that a blank command-line
        value keeps the configured one.
        """
        if value is None or value == "":
            return

        *parents, last = key.split(".")
        section = self._config
        for k in parents:
            section = section.setdefault(k, {})
        section[last] = value

    @property
    def target_directory(self) -> str:
        """Directory whose scripts are classified."""
        return str(self.get("paths.target_directory", "Assets/Scripts"))

    @property
    def output_directory(self) -> str:
        """Directory the CSV report is written to."""
        return str(self.get("paths.output_directory", "Assets"))

    @property
    def corpus_directory(self) -> str:
        """Directory searched for references."""
        return str(self.get("paths.corpus_directory", "Assets"))

    @property
    def extension(self) -> str:
        """Source file extension."""
        return str(self.get("scan.extension", ".cs"))

    @property
    def exclude_patterns(self) -> list[str]:
        """Get file exclusion patterns."""
        return list(self.get("scan.exclude_patterns", []))

    @property
    def strict(self) -> bool:
        """Abort on unreadable files instead of skipping them."""
        return bool(self.get("scan.strict", False))

    @property
    def lifecycle_hooks(self) -> list[str]:
        """Method names treated as evidence of use on behaviors."""
        return list(self.get("scan.lifecycle_hooks", ["Start", "Update"]))

    @property
    def behavior_bases(self) -> list[str]:
        return list(self.get("kinds.behavior_bases", ["MonoBehaviour"]))

    @property
    def data_asset_bases(self) -> list[str]:
        return list(self.get("kinds.data_asset_bases", ["ScriptableObject"]))

    @property
    def scene_paths(self) -> list[str]:
        return list(self.get("scene.paths", []))

    @property
    def export_csv(self) -> bool:
        return bool(self.get("output.export_csv", False))

    @property
    def simple(self) -> bool:
        return bool(self.get("output.simple", False))

    @property
    def timestamped(self) -> bool:
        return bool(self.get("output.timestamped", True))


def _merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Merge override into base, section by section."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)


def find_config_file(project_root: Path) -> Path | None:
    """Locate the project configuration file.

    Args:
        project_root: Root directory of the project

    Returns:
        Path to the config file, or None if the project has none
    """
    candidate = project_root / CONFIG_FILENAME
    return candidate if candidate.exists() else None


# Global config instance
_config: Config | None = None


def get_config(config_file: Path | None = None) -> Config:
    """Get or create global configuration instance.

    Args:
        config_file: Optional path to configuration file

    Returns:
        Config instance
    """
    global _config

    if _config is None:
        _config = Config(config_file)

    return _config


EXAMPLE_CONFIG = """\
# Script usage checker configuration

[paths]
# Scripts under this directory are classified
target_directory = "Assets/Scripts"
# The CSV report is written here
output_directory = "Assets"
# Every script under this directory is searched for references.
# Use "." to also search embedded packages under Packages/
corpus_directory = "Assets"

[scan]
extension = ".cs"
exclude_patterns = ["**/Library/**", "**/Temp/**", "**/obj/**"]
# Abort instead of skipping files that cannot be read
strict = false
# Behaviors declaring one of these methods count as used
lifecycle_hooks = ["Start", "Update"]

[kinds]
behavior_bases = ["MonoBehaviour"]
data_asset_bases = ["ScriptableObject"]

[scene]
# Scene files whose components count as attached
paths = []

[output]
export_csv = false
# Write only Name, AttachedTo and Status
simple = false
# Suffix the report name with the current time
timestamped = true
"""


def create_example_config_file(output: Path) -> None:
    """Write an example configuration file.

    Args:
        output: Path of the file to create
    """
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    logger.debug(f"Wrote example config to {output}")
