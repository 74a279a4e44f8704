"""Scene snapshots: which script types are attached to which containers."""

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from script_usage_checker.models import SceneAttachment
from script_usage_checker.scanner.file_discovery import FileDiscovery
from script_usage_checker.scanner.type_info import TypeInfoProvider

logger = logging.getLogger(__name__)

# Serialized class ids of the engine's text scene format
GAME_OBJECT_CLASS_ID = 1
MONO_BEHAVIOUR_CLASS_ID = 114

_DOCUMENT_HEADER_RE = re.compile(
    r"^--- !u!(?P<class_id>\d+) &(?P<file_id>-?\d+)[^\n]*$", re.MULTILINE
)
_NAME_RE = re.compile(r"^  m_Name: ?(?P<name>.*)$", re.MULTILINE)
_GAME_OBJECT_REF_RE = re.compile(r"^  m_GameObject: \{fileID: (?P<file_id>-?\d+)\}", re.MULTILINE)
_SCRIPT_REF_RE = re.compile(
    r"^  m_Script: \{fileID: -?\d+, guid: (?P<guid>[0-9a-fA-F]+)", re.MULTILINE
)
_META_GUID_RE = re.compile(r"^guid: (?P<guid>[0-9a-fA-F]+)\s*$", re.MULTILINE)


class SceneSnapshotError(Exception):
    """Raised when a scene snapshot cannot be read."""


class SceneSnapshotProvider(ABC):
    """Abstract source of live (type name, container name) pairs."""

    @abstractmethod
    def snapshot(self) -> list[tuple[str, str]]:
        """Enumerate attached component instances.

        Returns:
            List of (type name, container name) pairs, one per instance
        """
        pass


class StaticSceneSnapshotProvider(SceneSnapshotProvider):
    """Snapshot backed by an in-memory list of pairs."""

    def __init__(self, pairs: list[tuple[str, str]] | None = None) -> None:
        self.pairs = list(pairs or [])

    def snapshot(self) -> list[tuple[str, str]]:
        return list(self.pairs)


class JsonSceneSnapshotProvider(SceneSnapshotProvider):
    """Snapshot exported from a running editor as JSON.

    The file holds a list of objects such as
    ``{"type": "Player", "container": "Hero"}``.
    """

    def __init__(self, snapshot_file: Path) -> None:
        self.snapshot_file = Path(snapshot_file)

    def snapshot(self) -> list[tuple[str, str]]:
        try:
            data = json.loads(self.snapshot_file.read_text(encoding="utf-8"))
        except OSError as e:
            raise SceneSnapshotError(f"Cannot read snapshot {self.snapshot_file}: {e}") from e
        except json.JSONDecodeError as e:
            raise SceneSnapshotError(f"Invalid JSON in snapshot {self.snapshot_file}: {e}") from e

        if not isinstance(data, list):
            raise SceneSnapshotError(
                f"Snapshot {self.snapshot_file} must contain a list of components"
            )

        pairs: list[tuple[str, str]] = []
        for entry in data:
            if not isinstance(entry, dict) or "type" not in entry or "container" not in entry:
                raise SceneSnapshotError(
                    f"Snapshot entry must have 'type' and 'container': {entry!r}"
                )
            pairs.append((str(entry["type"]), str(entry["container"])))

        return pairs


class UnitySceneSnapshotProvider(SceneSnapshotProvider):
    """Reads attachments from text-serialized scene files.

    Script components reference their script asset by GUID; the GUID is
    mapped back to a source file through the ``.cs.meta`` sidecar files
    under the project's asset directory.
    """

    def __init__(
        self,
        scene_files: list[Path],
        assets_root: Path,
        type_info: TypeInfoProvider | None = None,
        extension: str = ".cs",
        exclude_patterns: list[str] | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            scene_files: Scene files that are considered loaded
            assets_root: Directory holding scripts and their meta files
            type_info: Used to turn a script file into its type name
            extension: Script file extension
            exclude_patterns: Glob patterns to exclude when scanning meta files
        """
        self.scene_files = [Path(p) for p in scene_files]
        self.assets_root = Path(assets_root)
        self.type_info = type_info
        self.file_discovery = FileDiscovery(
            self.assets_root, extension=extension, exclude_patterns=exclude_patterns or []
        )
        self._guid_map: dict[str, str] | None = None

    def snapshot(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []

        for scene_file in self.scene_files:
            pairs.extend(self._read_scene(scene_file))

        return pairs

    def _read_scene(self, scene_file: Path) -> list[tuple[str, str]]:
        """Extract (type, container) pairs from one scene file."""
        try:
            text = scene_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SceneSnapshotError(f"Cannot read scene {scene_file}: {e}") from e

        containers: dict[str, str] = {}
        components: list[tuple[str, str]] = []  # (game object file id, script guid)

        for class_id, file_id, body in _split_documents(text):
            if class_id == GAME_OBJECT_CLASS_ID:
                name_match = _NAME_RE.search(body)
                containers[file_id] = _unquote(name_match.group("name")) if name_match else ""

            elif class_id == MONO_BEHAVIOUR_CLASS_ID:
                owner = _GAME_OBJECT_REF_RE.search(body)
                script = _SCRIPT_REF_RE.search(body)
                if not owner or not script:
                    logger.debug(f"Skipping component &{file_id} in {scene_file.name}: no script")
                    continue
                components.append((owner.group("file_id"), script.group("guid").lower()))

        guid_map = self._script_types_by_guid()
        pairs: list[tuple[str, str]] = []

        for owner_id, guid in components:
            type_name = guid_map.get(guid)
            if type_name is None:
                logger.debug(f"Unknown script guid {guid} in {scene_file.name}")
                continue
            pairs.append((type_name, containers.get(owner_id, "")))

        logger.debug(f"Read {len(pairs)} script components from {scene_file.name}")
        return pairs

    def _script_types_by_guid(self) -> dict[str, str]:
        """Map script asset GUIDs to type names."""
        if self._guid_map is not None:
            return self._guid_map

        guid_map: dict[str, str] = {}
        for meta_file in self.file_discovery.find_meta_files():
            try:
                match = _META_GUID_RE.search(meta_file.read_text(encoding="utf-8", errors="replace"))
            except OSError as e:
                logger.warning(f"Cannot read meta file {meta_file}: {e}")
                continue
            if not match:
                continue

            script_file = meta_file.with_suffix("")
            type_name = script_file.stem
            if self.type_info is not None:
                descriptor = self.type_info.resolve_type(script_file)
                if descriptor is not None:
                    type_name = descriptor.name
            guid_map[match.group("guid").lower()] = type_name

        self._guid_map = guid_map
        return guid_map


def _split_documents(text: str) -> list[tuple[int, str, str]]:
    """Split a scene file into (class id, file id, body) documents."""
    headers = list(_DOCUMENT_HEADER_RE.finditer(text))
    documents: list[tuple[int, str, str]] = []

    for index, header in enumerate(headers):
        end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        documents.append((
            int(header.group("class_id")),
            header.group("file_id"),
            text[header.end():end],
        ))

    return documents


def _unquote(value: str) -> str:
    """Undo scalar quoting of a serialized name."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'")
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    return value


def build_attachments(pairs: list[tuple[str, str]]) -> SceneAttachment:
    """Group container names by attached type name.

    Args:
        pairs: (type name, container name) pairs from a snapshot

    Returns:
        Mapping of type name to container names in enumeration order
    """
    attachments: SceneAttachment = {}

    for type_name, container in pairs:
        attachments.setdefault(type_name, []).append(container)

    return attachments
