"""Type information for C# scripts using lightweight static analysis."""

import logging
import re
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import replace
from pathlib import Path

from script_usage_checker.models import ScriptKind, TypeDescriptor

logger = logging.getLogger(__name__)

_TYPE_DECL_RE = re.compile(
    r"(?:\b(?P<partial>partial)\s+)?"
    r"\b(?P<keyword>record\s+struct|record\s+class|class|struct|interface|enum|record)\s+"
    r"(?P<name>[A-Za-z_]\w*)"
    r"(?:\s*<[^{};]*?>)?"
    r"(?:\s*\([^{};]*?\))?"
    r"(?:\s*:\s*(?P<bases>[^{};]+?))?"
    r"\s*(?:\bwhere\b[^{};]*)?"
    r"(?P<end>[{;])"
)

_NAMESPACE_RE = re.compile(r"\bnamespace\s+(?P<name>[A-Za-z_][\w.]*)")

_ATTRIBUTES_RE = re.compile(r"^\s*(?:\[[^\[\]]*\]\s*)+")
_PREPROCESSOR_RE = re.compile(r"^\s*#.*$", re.MULTILINE)

_METHOD_HEAD_RE = re.compile(
    r"^(?P<modifiers>(?:[A-Za-z_]\w*\s+)*?)"
    r"(?P<return_type>[A-Za-z_][\w.:]*(?:\s*<.*>)?(?:\s*\[[\s,]*\])*\??)"
    r"\s+(?P<name>[A-Za-z_]\w*)\s*(?:<[^<>]*>)?$",
    re.DOTALL,
)

_MODIFIERS = {
    "public", "private", "protected", "internal", "static", "virtual",
    "override", "abstract", "sealed", "extern", "unsafe", "async", "new",
    "partial", "readonly", "const", "volatile", "event", "delegate",
    "operator", "implicit", "explicit", "ref",
}

_NON_METHOD_MODIFIERS = {"delegate", "event", "operator", "implicit", "explicit"}


def _blank(text: str) -> str:
    """Replace text with spaces, keeping newlines so positions still line up."""
    return "".join("\n" if c == "\n" else " " for c in text)


def strip_comments_and_literals(source: str) -> str:
    """Blank out comments, string literals and char literals.

    Args:
        source: C# source text

    Returns:
        Text of the same length with only code left
    """
    out: list[str] = []
    i = 0
    n = len(source)

    while i < n:
        ch = source[i]
        nxt = source[i + 1] if i + 1 < n else ""

        if ch == "/" and nxt == "/":
            end = source.find("\n", i)
            end = n if end == -1 else end
            out.append(_blank(source[i:end]))
            i = end

        elif ch == "/" and nxt == "*":
            end = source.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append(_blank(source[i:end]))
            i = end

        elif ch in {'"', "'"}:
            verbatim = ch == '"' and (
                source[i - 1:i] == "@" or source[max(i - 2, 0):i] in {"@$", "$@"}
            )
            j = i + 1
            while j < n:
                c = source[j]
                if verbatim:
                    if c == '"':
                        if source[j + 1:j + 2] == '"':
                            j += 2
                            continue
                        break
                elif c == "\\":
                    j += 2
                    continue
                elif c == ch or c == "\n":
                    break
                j += 1
            end = min(j + 1, n)
            out.append(ch + _blank(source[i + 1:end - 1]) + source[end - 1:end])
            i = end

        else:
            out.append(ch)
            i += 1

    return "".join(out)


def _find_closing_brace(code: str, open_index: int) -> int:
    """Find the brace matching the one at open_index (or end of text)."""
    depth = 0
    for index in range(open_index, len(code)):
        if code[index] == "{":
            depth += 1
        elif code[index] == "}":
            depth -= 1
            if depth == 0:
                return index
    return len(code)


def _split_bases(bases: str) -> list[str]:
    """Split a base list into simple type names."""
    names: list[str] = []
    depth = 0
    current = ""

    for ch in bases:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif ch == "," and depth == 0:
            names.append(current)
            current = ""
            continue
        if depth == 0 and ch != ">":
            current += ch
    names.append(current)

    simple: list[str] = []
    for name in names:
        # Drop primary constructor arguments and namespace qualifiers
        name = name.split("(")[0].strip().replace("global::", "")
        name = name.split(".")[-1].strip()
        if name:
            simple.append(name)

    return simple


def _top_level_members(body: str) -> list[str]:
    """Split a type body into member declarations, skipping nested blocks."""
    flat: list[str] = []
    depth = 0

    for ch in body:
        if ch == "{":
            if depth == 0:
                flat.append("{")
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                flat.append("}")
        elif depth == 0:
            flat.append(ch)

    return re.split(r"[;{}]", "".join(flat))


def _instance_method_name(member: str, type_name: str) -> str | None:
    """Get the method name if member declares a non-static method."""
    member = _PREPROCESSOR_RE.sub("", member)
    member = _ATTRIBUTES_RE.sub("", member).strip()

    paren = member.find("(")
    if paren == -1:
        return None

    head = member[:paren].strip()
    if not head or "=" in head:
        return None

    match = _METHOD_HEAD_RE.match(head)
    if not match:
        return None

    modifiers = set(match.group("modifiers").split())
    return_type = match.group("return_type")
    name = match.group("name")

    if return_type in _MODIFIERS or modifiers & _NON_METHOD_MODIFIERS:
        return None
    if "static" in modifiers or name == type_name:
        return None

    return name


def parse_type_declarations(source: str, file_path: Path) -> list[TypeDescriptor]:
    """Extract type declarations from C# source.

    Args:
        source: C# source text
        file_path: Path the source was read from

    Returns:
        List of type descriptors in declaration order
    """
    code = strip_comments_and_literals(source)
    namespaces = [(m.start(), m.group("name")) for m in _NAMESPACE_RE.finditer(code)]
    descriptors: list[TypeDescriptor] = []

    for match in _TYPE_DECL_RE.finditer(code):
        keyword = match.group("keyword").split()
        keyword_name = "struct" if keyword[-1] == "struct" else keyword[0]
        name = match.group("name")

        namespace = None
        for position, ns_name in namespaces:
            if position < match.start():
                namespace = ns_name

        methods: set[str] = set()
        if match.group("end") == "{" and keyword_name != "enum":
            open_index = match.end() - 1
            body = code[open_index + 1:_find_closing_brace(code, open_index)]
            for member in _top_level_members(body):
                method_name = _instance_method_name(member, name)
                if method_name:
                    methods.add(method_name)

        descriptors.append(TypeDescriptor(
            name=name,
            keyword=keyword_name,
            file_path=file_path,
            namespace=namespace,
            base_types=_split_bases(match.group("bases") or ""),
            instance_methods=methods,
            partial=match.group("partial") is not None,
        ))

    return descriptors


class TypeInfoProvider(ABC):
    """Abstract capability for resolving and inspecting script types."""

    @abstractmethod
    def resolve_type(self, file_path: Path) -> TypeDescriptor | None:
        """Resolve the type backing a script file.

        Args:
            file_path: Path to the script

        Returns:
            Type descriptor or None if the file has no resolvable type
        """
        pass

    @abstractmethod
    def is_subtype_of(self, descriptor: TypeDescriptor, kind: ScriptKind) -> bool:
        """Check whether a type derives from the roots of a kind."""
        pass

    @abstractmethod
    def declares_method(self, descriptor: TypeDescriptor, name: str) -> bool:
        """Check whether a type declares an instance method directly."""
        pass

    def classify_kind(self, descriptor: TypeDescriptor) -> ScriptKind:
        """Determine the kind of a type.

        Args:
            descriptor: Type to classify

        Returns:
            Script kind
        """
        if self.is_subtype_of(descriptor, ScriptKind.BEHAVIOR):
            return ScriptKind.BEHAVIOR
        if self.is_subtype_of(descriptor, ScriptKind.DATA_ASSET):
            return ScriptKind.DATA_ASSET
        if descriptor.is_class:
            return ScriptKind.PLAIN_TYPE
        return ScriptKind.UNKNOWN


class CSharpTypeInfoProvider(TypeInfoProvider):
    """Resolves C# types by scanning declarations in source files.

    Inheritance is followed through every type declared in the corpus, so
    ``class Boss : Enemy`` is a behavior when ``Enemy`` derives from
    ``MonoBehaviour`` in another file.
    """

    def __init__(
        self,
        corpus_files: list[Path] | None = None,
        behavior_bases: list[str] | None = None,
        data_asset_bases: list[str] | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            corpus_files: Source files used to follow inheritance chains
            behavior_bases: Root types of the Behavior kind
            data_asset_bases: Root types of the DataAsset kind
        """
        self.corpus_files = list(corpus_files or [])
        self.behavior_bases = set(behavior_bases or ["MonoBehaviour"])
        self.data_asset_bases = set(data_asset_bases or ["ScriptableObject"])

        self._parsed: dict[Path, list[TypeDescriptor]] = {}
        self._index: dict[str, list[TypeDescriptor]] | None = None

    def parse_file(self, file_path: Path) -> list[TypeDescriptor]:
        """Parse (once) and return the type declarations of a file."""
        path = Path(file_path)

        if path not in self._parsed:
            try:
                source = path.read_text(encoding="utf-8-sig", errors="replace")
            except OSError as e:
                logger.debug(f"Cannot read {path} for type resolution: {e}")
                self._parsed[path] = []
            else:
                self._parsed[path] = parse_type_declarations(source, path)

        return self._parsed[path]

    def resolve_type(self, file_path: Path) -> TypeDescriptor | None:
        stem = Path(file_path).stem

        for descriptor in self.parse_file(file_path):
            if descriptor.name == stem:
                if descriptor.partial:
                    return self._merge_partial_parts(descriptor)
                return descriptor

        return None

    def _merge_partial_parts(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        """Combine a partial type with its other parts in the corpus.

        Only partial declarations with the same name and namespace are merged.
        """
        base_types = list(descriptor.base_types)
        methods = set(descriptor.instance_methods)

        for part in self._type_index().get(descriptor.name, []):
            if part is descriptor or not part.partial or part.namespace != descriptor.namespace:
                continue
            for base in part.base_types:
                if base not in base_types:
                    base_types.append(base)
            methods |= part.instance_methods

        return replace(descriptor, base_types=base_types, instance_methods=methods)

    def is_subtype_of(self, descriptor: TypeDescriptor, kind: ScriptKind) -> bool:
        if kind == ScriptKind.BEHAVIOR:
            roots = self.behavior_bases
        elif kind == ScriptKind.DATA_ASSET:
            roots = self.data_asset_bases
        else:
            return False

        index = self._type_index()
        seen: set[str] = {descriptor.name}
        pending = list(descriptor.base_types)

        while pending:
            base = pending.pop()
            if base in roots:
                return True
            if base in seen:
                continue
            seen.add(base)
            for parent in index.get(base, []):
                pending.extend(parent.base_types)

        return False

    def declares_method(self, descriptor: TypeDescriptor, name: str) -> bool:
        return name in descriptor.instance_methods

    def _type_index(self) -> dict[str, list[TypeDescriptor]]:
        """Build the name -> declarations index of the corpus."""
        if self._index is None:
            index: dict[str, list[TypeDescriptor]] = defaultdict(list)
            for path in self.corpus_files:
                for descriptor in self.parse_file(path):
                    index[descriptor.name].append(descriptor)
            self._index = dict(index)

        return self._index
