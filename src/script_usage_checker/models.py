"""Core data models for the Script Usage Checker."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ScriptKind(Enum):
    """Declared kind of a script type."""

    BEHAVIOR = "Behavior"
    DATA_ASSET = "DataAsset"
    PLAIN_TYPE = "PlainType"
    UNKNOWN = "Unknown"


class UsageVerdict(Enum):
    """Usage status of a script."""

    USED = "Used"
    UNUSED = "Unused"


# Type name -> container names, one entry per live instance
SceneAttachment = dict[str, list[str]]

ATTACHMENT_SEPARATOR = ";"
REFERENCE_SEPARATOR = " | "
NO_ATTACHMENT = "none"


@dataclass
class TypeDescriptor:
    """A type declaration found in a source file."""

    name: str
    keyword: str  # class, struct, interface, enum, record
    file_path: Path
    namespace: str | None = None
    base_types: list[str] = field(default_factory=list)
    instance_methods: set[str] = field(default_factory=set)
    partial: bool = False

    @property
    def is_class(self) -> bool:
        """Check if the declaration is a reference type with a body."""
        return self.keyword in {"class", "record"}

    @property
    def full_name(self) -> str:
        """Namespace-qualified name."""
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name


@dataclass
class ScriptEntity:
    """A script discovered under the target root."""

    name: str
    kind: ScriptKind
    file_path: Path
    declares_lifecycle_hook: bool = False
    namespace: str | None = None

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name} ({self.kind.value}) in {self.file_path.name}"


@dataclass
class ReferenceHit:
    """A line in another file that mentions a script name."""

    file_name: str
    line_number: int  # 1-based
    text: str  # trimmed, quotes doubled

    def __str__(self) -> str:
        """Report representation."""
        return f"{self.file_name}:{self.line_number}「{self.text}」"


@dataclass
class UsageResult:
    """Usage classification for a single script."""

    entity: ScriptEntity
    attached_to: list[str] = field(default_factory=list)
    has_lifecycle_hook: bool = False
    references: list[ReferenceHit] = field(default_factory=list)
    name_collision: bool = False

    @property
    def is_attached(self) -> bool:
        """Check if the script is attached to at least one container."""
        return bool(self.attached_to)

    @property
    def is_referenced(self) -> bool:
        """Check if another file mentions the script."""
        return bool(self.references)

    @property
    def verdict(self) -> UsageVerdict:
        """Derive the usage verdict."""
        if self.is_attached or self.has_lifecycle_hook or self.is_referenced:
            return UsageVerdict.USED
        return UsageVerdict.UNUSED

    @property
    def is_used(self) -> bool:
        """Check if the verdict is Used."""
        return self.verdict == UsageVerdict.USED

    @property
    def attachment_summary(self) -> str:
        """Attached containers joined for display, or the none sentinel."""
        if not self.attached_to:
            return NO_ATTACHMENT
        return ATTACHMENT_SEPARATOR.join(self.attached_to)

    @property
    def reference_summary(self) -> str:
        """Reference hits joined for display."""
        return REFERENCE_SEPARATOR.join(str(hit) for hit in self.references)
