"""
Resolution of call sites into an aggregated caller -> callee graph.

Resolution is purely by name. Every call site is matched against every
navigable definition with the same name anywhere in the corpus, and one edge
is emitted or merged per match, so a name defined in several files fans out to
all of them. Edges are keyed by caller and target identity; repeated calls
increment the edge's count and append to its call lines. Call sites whose name
matches no definition produce no edge but stay on the calling method.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from callmap.core import constants as cs
from callmap.core import logs as ls
from callmap.data_models.models import Dependency, Method, MethodRef


def index_definitions(methods: Iterable[Method]) -> dict[str, list[Method]]:
    index: dict[str, list[Method]] = {}
    for method in methods:
        if method.is_definition:
            index.setdefault(method.name, []).append(method)
    return index


def build_dependencies(methods: list[Method]) -> list[Dependency]:
    """
    Builds the dependency edges for a corpus.

    Args:
        methods (list[Method]): Every method of the corpus, in corpus order.

    Returns:
        list[Dependency]: Edges in first-seen order.
    """
    targets_by_name = index_definitions(methods)
    edges: dict[tuple[str, str, str, str], Dependency] = {}

    for source in methods:
        source_ref = MethodRef(name=source.name, file_path=source.file_path)
        for call in source.calls:
            for target in targets_by_name.get(call.method_name, ()):
                key = (source.name, source.file_path, target.name, target.file_path)
                if (edge := edges.get(key)) is None:
                    edges[key] = edge = Dependency(
                        source=source_ref,
                        target=MethodRef(name=target.name, file_path=target.file_path),
                        count=0,
                        type=(
                            cs.DependencyType.INTERNAL
                            if source.file_path == target.file_path
                            else cs.DependencyType.EXTERNAL
                        ),
                        to_line=target.start_line,
                    )
                edge.count += 1
                edge.call_lines.append(call.line)

    dependencies = list(edges.values())
    logger.info(ls.GRAPH_BUILT.format(edges=len(dependencies), methods=len(methods)))
    return dependencies


def find_definition(methods: Iterable[Method], name: str) -> Method | None:
    """First navigable definition named ``name`` in corpus order, if any."""
    for method in methods:
        if method.is_definition and method.name == name:
            return method
    return None


def find_callers(methods: Iterable[Method], name: str) -> list[Method]:
    return [
        method
        for method in methods
        if any(call.method_name == name for call in method.calls)
    ]


class DependencyGraph:
    """Read-only view over a corpus's methods and their dependency edges.

    Args:
        methods (list[Method]): Every method of the corpus.
        dependencies (list[Dependency] | None): Precomputed edges; built from
            ``methods`` when omitted.
    """

    def __init__(
        self, methods: list[Method], dependencies: list[Dependency] | None = None
    ) -> None:
        self.methods = methods
        self.dependencies = (
            dependencies if dependencies is not None else build_dependencies(methods)
        )

    def edges_from(self, name: str, file_path: str | None = None) -> list[Dependency]:
        return [
            edge
            for edge in self.dependencies
            if edge.source.name == name
            and (file_path is None or edge.source.file_path == file_path)
        ]

    def edges_to(self, name: str, file_path: str | None = None) -> list[Dependency]:
        return [
            edge
            for edge in self.dependencies
            if edge.target.name == name
            and (file_path is None or edge.target.file_path == file_path)
        ]

    def callers_of(self, name: str) -> list[Method]:
        return find_callers(self.methods, name)

    def definition_of(self, name: str) -> Method | None:
        return find_definition(self.methods, name)

    @property
    def total_calls(self) -> int:
        return sum(edge.count for edge in self.dependencies)
