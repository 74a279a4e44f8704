"""Usage classifier: decides which scripts are used and which are not."""

import logging
from collections import Counter
from pathlib import Path

from script_usage_checker.config import Config, get_config
from script_usage_checker.models import (
    SceneAttachment,
    ScriptEntity,
    ScriptKind,
    UsageResult,
)
from script_usage_checker.scanner.file_discovery import FileDiscovery
from script_usage_checker.scanner.reference_finder import ReferenceFinder
from script_usage_checker.scanner.scene_snapshot import (
    SceneSnapshotProvider,
    StaticSceneSnapshotProvider,
    build_attachments,
)
from script_usage_checker.scanner.type_info import CSharpTypeInfoProvider, TypeInfoProvider

logger = logging.getLogger(__name__)


class UsageClassifier:
    """Cross-references scripts against the scene and the rest of the code.

    A script is used when it is attached to a container in the scene, when
    it is a behavior declaring a lifecycle hook, or when another file
    mentions it. Scripts are identified by their simple type name only, so
    two types sharing a name in different namespaces share attachments and
    reference patterns; such results are flagged with ``name_collision``.
    """

    def __init__(
        self,
        project_root: Path,
        target_root: Path | str | None = None,
        corpus_root: Path | str | None = None,
        scene_provider: SceneSnapshotProvider | None = None,
        type_info: TypeInfoProvider | None = None,
        config: Config | None = None,
    ) -> None:
        """Initialize classifier.

        Args:
            project_root: Root directory of the project
            target_root: Directory whose scripts are classified
                (relative paths resolve against project_root)
            corpus_root: Directory searched for references
            scene_provider: Source of live attachments (empty scene if None)
            type_info: Type resolution capability (C# static analysis if None)
            config: Configuration (global config if None)
        """
        self.config = config or get_config()
        self.project_root = Path(project_root)
        self.target_root = self._resolve(target_root or self.config.target_directory)
        self.corpus_root = self._resolve(corpus_root or self.config.corpus_directory)

        extension = self.config.extension
        exclude_patterns = self.config.exclude_patterns

        self.target_files = FileDiscovery(
            self.target_root, extension, exclude_patterns
        ).find_source_files()
        corpus_files = FileDiscovery(
            self.corpus_root, extension, exclude_patterns
        ).find_source_files()
        # Scripts under the target root are always part of the search universe
        self.corpus_files = sorted(set(corpus_files) | set(self.target_files))

        self.type_info = type_info or CSharpTypeInfoProvider(
            self.corpus_files,
            behavior_bases=self.config.behavior_bases,
            data_asset_bases=self.config.data_asset_bases,
        )
        self.scene_provider = scene_provider or StaticSceneSnapshotProvider()
        self.reference_finder = ReferenceFinder(self.corpus_files, strict=self.config.strict)
        self.lifecycle_hooks = self.config.lifecycle_hooks

    def _resolve(self, path: Path | str) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.project_root / path

    def discover_entities(self) -> list[ScriptEntity]:
        """Find every resolvable script under the target root.

        Returns:
            Script entities in path order
        """
        entities: list[ScriptEntity] = []

        for file_path in self.target_files:
            descriptor = self.type_info.resolve_type(file_path)
            if descriptor is None:
                logger.debug(f"No type found for {file_path}, skipping")
                continue

            entities.append(ScriptEntity(
                name=descriptor.name,
                kind=self.type_info.classify_kind(descriptor),
                file_path=file_path,
                declares_lifecycle_hook=any(
                    self.type_info.declares_method(descriptor, hook)
                    for hook in self.lifecycle_hooks
                ),
                namespace=descriptor.namespace,
            ))

        logger.debug(f"Discovered {len(entities)} scripts under {self.target_root}")
        return entities

    def build_attachments(self) -> SceneAttachment:
        """Snapshot the scene and group containers by type name."""
        return build_attachments(self.scene_provider.snapshot())

    def classify(
        self,
        entities: list[ScriptEntity] | None = None,
        attachments: SceneAttachment | None = None,
    ) -> list[UsageResult]:
        """Classify every script.

        Args:
            entities: Scripts to classify (discovered if None)
            attachments: Scene attachments (snapshotted if None)

        Returns:
            One result per script, in input order
        """
        if entities is None:
            entities = self.discover_entities()
        if attachments is None:
            attachments = self.build_attachments()

        logger.info(f"Checking script usage in {self.target_root}")

        name_counts = Counter(entity.name for entity in entities)
        for name, count in name_counts.items():
            if count > 1:
                paths = ", ".join(
                    e.file_path.name for e in entities if e.name == name
                )
                logger.warning(
                    f"{count} scripts share the name '{name}' ({paths}); "
                    f"their attachments and references cannot be told apart"
                )

        results: list[UsageResult] = []
        for entity in entities:
            result = self.classify_entity(entity, attachments)
            result.name_collision = name_counts[entity.name] > 1
            results.append(result)

        return results

    def classify_entity(self, entity: ScriptEntity, attachments: SceneAttachment) -> UsageResult:
        """Classify a single script.

        Args:
            entity: Script to classify
            attachments: Scene attachments

        Returns:
            Usage result
        """
        result = UsageResult(
            entity=entity,
            attached_to=list(attachments.get(entity.name, [])),
            has_lifecycle_hook=(
                entity.kind == ScriptKind.BEHAVIOR and entity.declares_lifecycle_hook
            ),
            references=self.reference_finder.find_references(
                entity.name, exclude=entity.file_path
            ),
        )

        logger.info(
            f"Script: {entity.name} | kind: {entity.kind.value} | "
            f"attached to: {result.attachment_summary} | status: {result.verdict.value}"
        )

        return result
