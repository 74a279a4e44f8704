"""Project scanner package."""

from script_usage_checker.scanner.file_discovery import FileDiscovery
from script_usage_checker.scanner.reference_finder import CorpusReadError, ReferenceFinder
from script_usage_checker.scanner.scene_snapshot import (
    JsonSceneSnapshotProvider,
    SceneSnapshotError,
    SceneSnapshotProvider,
    StaticSceneSnapshotProvider,
    UnitySceneSnapshotProvider,
    build_attachments,
)
from script_usage_checker.scanner.type_info import CSharpTypeInfoProvider, TypeInfoProvider

__all__ = [
    "FileDiscovery",
    "ReferenceFinder",
    "CorpusReadError",
    "TypeInfoProvider",
    "CSharpTypeInfoProvider",
    "SceneSnapshotProvider",
    "SceneSnapshotError",
    "StaticSceneSnapshotProvider",
    "JsonSceneSnapshotProvider",
    "UnitySceneSnapshotProvider",
    "build_attachments",
]
