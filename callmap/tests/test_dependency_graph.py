from __future__ import annotations

from callmap.analysis import DependencyGraph, build_dependencies
from callmap.analysis.dependency_graph import index_definitions
from callmap.core import constants as cs
from callmap.data_models.models import CallSite, Method


def _method(name: str, path: str, start: int = 1, calls=(), kind=cs.MethodKind.METHOD):
    return Method(
        name=name,
        kind=kind,
        file_path=path,
        start_line=start,
        end_line=start + 2,
        calls=[CallSite(method_name=callee, line=line) for callee, line in calls],
    )


def test_same_file_edge_is_internal() -> None:
    methods = [
        _method("a", "lib/a.rb", 1, calls=[("b", 2)]),
        _method("b", "lib/a.rb", 4),
    ]
    [edge] = build_dependencies(methods)
    assert (edge.source.name, edge.target.name) == ("a", "b")
    assert edge.type == cs.DependencyType.INTERNAL
    assert (edge.count, edge.call_lines, edge.to_line) == (1, [2], 4)
    assert edge.from_line == 2


def test_repeated_calls_aggregate_into_one_edge() -> None:
    methods = [
        _method("a", "lib/a.rb", 1, calls=[("b", 2), ("b", 3)]),
        _method("b", "lib/b.rb", 1),
    ]
    [edge] = build_dependencies(methods)
    assert edge.type == cs.DependencyType.EXTERNAL
    assert edge.count == 2
    assert edge.call_lines == [2, 3]


def test_same_name_fans_out_to_every_definition() -> None:
    methods = [
        _method("hello", "lib/caller.rb", 1, calls=[("greet", 2)]),
        _method("greet", "lib/english.rb", 1),
        _method("greet", "lib/french.rb", 5),
    ]
    edges = build_dependencies(methods)
    assert [(e.target.file_path, e.to_line) for e in edges] == [
        ("lib/english.rb", 1),
        ("lib/french.rb", 5),
    ]
    assert all(e.count == 1 for e in edges)


def test_unresolved_calls_stay_on_the_caller() -> None:
    caller = _method("a", "lib/a.rb", 1, calls=[("missing", 2)])
    assert build_dependencies([caller]) == []
    assert caller.calls[0].method_name == "missing"


def test_non_definitions_are_never_targets() -> None:
    methods = [
        _method("a", "src/a.js", 1, calls=[("lib", 2)]),
        _method("lib", "src/a.js", 1, kind=cs.MethodKind.IMPORT),
    ]
    assert build_dependencies(methods) == []
    assert index_definitions(methods) == {"a": [methods[0]]}


def test_counts_are_conserved() -> None:
    methods = [
        _method("a", "lib/a.rb", 1, calls=[("b", 2), ("c", 3), ("nowhere", 3)]),
        _method("b", "lib/a.rb", 5, calls=[("c", 6)]),
        _method("c", "lib/c.rb", 1),
    ]
    edges = build_dependencies(methods)
    resolved_calls = sum(
        1
        for method in methods
        for call in method.calls
        if call.method_name in {"b", "c"}
    )
    assert sum(edge.count for edge in edges) == resolved_calls == 3


class TestDependencyGraph:
    def setup_method(self) -> None:
        self.methods = [
            _method("a", "lib/a.rb", 1, calls=[("b", 2)]),
            _method("b", "lib/a.rb", 4, calls=[("c", 5)]),
            _method("c", "lib/c.rb", 1),
            _method("d", "lib/d.rb", 1, calls=[("c", 2), ("c", 3)]),
        ]
        self.graph = DependencyGraph(self.methods)

    def test_edges_from_and_to(self) -> None:
        assert [e.target.name for e in self.graph.edges_from("a")] == ["b"]
        assert [e.source.name for e in self.graph.edges_to("c")] == ["b", "d"]
        assert self.graph.edges_to("c", file_path="lib/a.rb") == []

    def test_callers_and_definition(self) -> None:
        assert [m.name for m in self.graph.callers_of("c")] == ["b", "d"]
        assert self.graph.definition_of("c") is self.methods[2]
        assert self.graph.definition_of("zzz") is None

    def test_total_calls(self) -> None:
        assert self.graph.total_calls == 4

    def test_precomputed_edges_are_reused(self) -> None:
        graph = DependencyGraph(self.methods, [])
        assert graph.dependencies == []
