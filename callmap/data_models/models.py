from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from callmap.core import constants as cs


@dataclass(frozen=True)
class SourceFile:
    """A single file of the corpus as supplied by the caller.

    Attributes:
        path (str): Corpus-relative path, used as the file identity.
        language (str): Language tag, one of ``cs.SupportedLanguage`` or any
            other string (unknown tags produce no methods).
        content (str): Raw text.
        total_lines (int): Number of lines in ``content``.
    """

    path: str
    language: str
    content: str
    total_lines: int

    @classmethod
    def from_text(cls, path: str, content: str, language: str) -> SourceFile:
        return cls(
            path=path,
            language=language,
            content=content,
            total_lines=count_lines(content),
        )

    @property
    def lines(self) -> list[str]:
        return split_lines(self.content)

    @property
    def basename(self) -> str:
        return self.path.rsplit("/", 1)[-1]


def split_lines(content: str) -> list[str]:
    if not content:
        return []
    lines = content.split(cs.NEWLINE)
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]


def count_lines(content: str) -> int:
    return len(split_lines(content))


@dataclass
class Parameter:
    name: str
    type: str | None = None
    default_value: str | None = None
    kind: cs.ParameterKind | None = None


@dataclass
class CallSite:
    """A textual reference inside a method body believed to be a call."""

    method_name: str
    line: int
    context: str = ""
    import_source_line: int | None = None


@dataclass
class Method:
    name: str
    kind: cs.MethodKind
    file_path: str
    start_line: int
    end_line: int
    code: str = ""
    visibility: cs.Visibility = cs.Visibility.PUBLIC
    parameters: list[Parameter] = field(default_factory=list)
    calls: list[CallSite] = field(default_factory=list)
    return_type: str | None = None
    is_excluded: bool = False
    owner: str | None = None

    @property
    def is_private(self) -> bool:
        return self.visibility == cs.Visibility.PRIVATE

    @property
    def is_definition(self) -> bool:
        return self.kind in cs.DEFINITION_KINDS

    def contains_line(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class MethodRef:
    name: str
    file_path: str


@dataclass
class Dependency:
    """An aggregated caller to callee edge.

    Attributes:
        source (MethodRef): The calling method.
        target (MethodRef): The called definition.
        count (int): Number of call sites aggregated into this edge.
        type (cs.DependencyType): ``internal`` when both ends share a file.
        call_lines (list[int]): Line of every aggregated call site, in order.
        to_line (int | None): Start line of the target definition.
    """

    source: MethodRef
    target: MethodRef
    count: int
    type: cs.DependencyType
    call_lines: list[int] = field(default_factory=list)
    to_line: int | None = None

    @property
    def from_line(self) -> int | None:
        return self.call_lines[0] if self.call_lines else None

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (
            self.source.name,
            self.source.file_path,
            self.target.name,
            self.target.file_path,
        )

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["from_line"] = self.from_line
        return data


@dataclass
class AnalysisDiagnostic:
    message: str
    kind: cs.DiagnosticKind
    severity: cs.Severity = cs.Severity.ERROR
    line: int | None = None


@dataclass
class AnalysisMetadata:
    processing_time_ms: float
    lines_processed: int
    engine: str
    file_size: int
    timestamp: str = field(
        default_factory=lambda: datetime.now(UTC).isoformat(timespec="seconds")
    )


@dataclass
class FileAnalysisResult:
    path: str
    language: str
    methods: list[Method] = field(default_factory=list)
    errors: list[AnalysisDiagnostic] = field(default_factory=list)
    metadata: AnalysisMetadata | None = None

    @property
    def failed(self) -> bool:
        return any(
            e.kind == cs.DiagnosticKind.RUNTIME and e.severity == cs.Severity.ERROR
            for e in self.errors
        )


@dataclass
class AnalysisStats:
    total_files: int = 0
    total_methods: int = 0
    total_dependencies: int = 0
    total_calls: int = 0
    failed_files: int = 0
    language_breakdown: dict[str, int] = field(default_factory=dict)
    kind_breakdown: dict[str, int] = field(default_factory=dict)


@dataclass
class CorpusAnalysis:
    files: list[FileAnalysisResult]
    dependencies: list[Dependency]
    registry: frozenset[str]
    stats: AnalysisStats

    @property
    def methods(self) -> list[Method]:
        return [method for result in self.files for method in result.methods]

    def methods_for(self, path: str) -> list[Method]:
        for result in self.files:
            if result.path == path:
                return result.methods
        return []

    def to_dict(self) -> dict[str, object]:
        return {
            "files": [asdict(result) for result in self.files],
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "stats": asdict(self.stats),
        }
