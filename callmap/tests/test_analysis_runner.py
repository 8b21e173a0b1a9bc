from __future__ import annotations

import pytest

from callmap.analysis import AnalysisContext, CorpusAnalyzer, analyze_corpus
from callmap.core import constants as cs
from callmap.core.config import AppConfig
from callmap.infrastructure import exceptions as ex
from callmap.parsers.js_ts.heuristic import HeuristicJsTsExtractor
from callmap.tests.conftest import (
    by_name,
    call_names,
    erb_file,
    js_file,
    make_file,
    ruby_file,
    ts_file,
)


def _corpus():
    return [
        ruby_file("def a\n b\nend\ndef b\n  1\nend\n", "lib/a.rb"),
        ruby_file("module English\n  def greet\n  end\nend\n", "lib/english.rb"),
        ruby_file("module French\n  def greet\n  end\nend\n", "lib/french.rb"),
        ruby_file("def hello\n  greet\nend\n", "lib/caller.rb"),
        js_file("function outer(){ inner(); }\nfunction inner(){}\n"),
        erb_file("<%= greet %>\n"),
        make_file("main.py", "print(1)\n", "python"),
    ]


def _edges(analysis):
    return {
        (e.source.name, e.source.file_path, e.target.name, e.target.file_path): (
            e.type,
            e.count,
        )
        for e in analysis.dependencies
    }


def test_context_selection_is_explicit(config) -> None:
    context = AnalysisContext.create(config, use_ast=False)
    assert isinstance(context.js_strategy, HeuristicJsTsExtractor)
    assert not context.uses_ast


def test_missing_grammars_fall_back_to_heuristic(config, monkeypatch) -> None:
    def unavailable():
        raise ex.ParserUnavailableError(
            ex.GRAMMAR_MISSING.format(module="tree_sitter_javascript")
        )

    monkeypatch.setattr("callmap.analysis.context.load_js_ts_parsers", unavailable)
    context = AnalysisContext.create(config, use_ast=True)
    assert context.uses_ast is False
    assert isinstance(context.js_strategy, HeuristicJsTsExtractor)
    analysis = analyze_corpus(
        [js_file("function outer(){ inner(); }\nfunction inner(){}\n")], context
    )
    assert analysis.files[0].errors == []
    assert len(analysis.dependencies) == 1


def test_worker_count_must_be_positive(heuristic_context) -> None:
    with pytest.raises(ValueError):
        CorpusAnalyzer(heuristic_context, workers=0)


def test_corpus_analysis(heuristic_context) -> None:
    analysis = analyze_corpus(_corpus(), heuristic_context)

    assert [r.path for r in analysis.files] == [f.path for f in _corpus()]
    assert analysis.registry == frozenset(
        {"a", "b", "greet", "hello", "outer", "inner"}
    )

    edges = _edges(analysis)
    assert edges[("a", "lib/a.rb", "b", "lib/a.rb")] == (cs.DependencyType.INTERNAL, 1)
    assert edges[("outer", "src/app.js", "inner", "src/app.js")] == (
        cs.DependencyType.INTERNAL,
        1,
    )
    assert edges[("hello", "lib/caller.rb", "greet", "lib/english.rb")] == (
        cs.DependencyType.EXTERNAL,
        1,
    )
    assert edges[("hello", "lib/caller.rb", "greet", "lib/french.rb")] == (
        cs.DependencyType.EXTERNAL,
        1,
    )

    template = analysis.methods_for("app/views/users/show.html.erb")[0]
    assert call_names(template) == ["greet"]

    python = analysis.files[-1]
    assert python.methods == []
    assert python.errors[0].kind == cs.DiagnosticKind.UNSUPPORTED_LANGUAGE

    stats = analysis.stats
    assert stats.total_files == 7
    assert stats.failed_files == 0
    assert stats.total_dependencies == len(analysis.dependencies)
    assert stats.language_breakdown[cs.SupportedLanguage.RUBY] == 4


def test_parallel_run_matches_sequential(config) -> None:
    sequential = analyze_corpus(
        _corpus(), AnalysisContext.create(config, use_ast=False)
    )
    parallel = analyze_corpus(
        _corpus(), AnalysisContext.create(config, use_ast=False), workers=3
    )
    assert [r.path for r in parallel.files] == [r.path for r in sequential.files]
    assert _edges(parallel) == _edges(sequential)


def test_analysis_is_repeatable(heuristic_context) -> None:
    first = analyze_corpus(_corpus(), heuristic_context)
    second = analyze_corpus(_corpus(), heuristic_context)
    assert _edges(first) == _edges(second)
    assert [m.name for m in first.methods] == [m.name for m in second.methods]


def test_calls_only_resolve_to_known_names(heuristic_context) -> None:
    analysis = analyze_corpus(_corpus(), heuristic_context)
    for method in analysis.methods:
        assert method.start_line <= method.end_line
        for call in method.calls:
            assert method.contains_line(call.line)
            assert call.method_name not in {"if", "end", "def", "return", "function"}


def test_adding_a_definition_never_removes_edges(heuristic_context) -> None:
    base = _corpus()
    extended = base + [ruby_file("def greet\nend\n", "lib/plain.rb")]
    before = set(_edges(analyze_corpus(base, heuristic_context)))
    after = set(_edges(analyze_corpus(extended, heuristic_context)))
    assert before <= after
    assert ("hello", "lib/caller.rb", "greet", "lib/plain.rb") in after


def test_contexts_are_independent() -> None:
    first = AnalysisContext.create(AppConfig(USE_AST_PARSER=False))
    second = AnalysisContext.create(AppConfig(USE_AST_PARSER=False))
    assert first.handlers is not second.handlers
    one = analyze_corpus(
        [ruby_file("def a\n b\nend\ndef b\nend\n", "lib/a.rb")], first
    )
    other = analyze_corpus([ruby_file("def c\nend\n", "lib/c.rb")], second)
    assert one.registry == frozenset({"a", "b"})
    assert other.registry == frozenset({"c"})
    assert by_name(one.methods, "a").calls[0].method_name == "b"


def test_ast_strategy_resolves_the_same_edges(ast_context, heuristic_context) -> None:
    files = [js_file("function outer(){ inner(); }\nfunction inner(){}\n")]
    ast = analyze_corpus(files, ast_context)
    heuristic = analyze_corpus(files, heuristic_context)
    assert ast.files[0].metadata.engine == "javascript-ast"
    assert _edges(ast) == _edges(heuristic) == {
        ("outer", "src/app.js", "inner", "src/app.js"): (
            cs.DependencyType.INTERNAL,
            1,
        )
    }


INTERFACE_SOURCE = (
    "interface Api {\n"
    "  fetchUser(id: string): User;\n"
    "}\n"
    "function fetchUser(id: string) {\n"
    "  return id;\n"
    "}\n"
)


def test_interface_members_are_not_calls(heuristic_context) -> None:
    analysis = analyze_corpus([ts_file(INTERFACE_SOURCE)], heuristic_context)
    assert analysis.dependencies == []


def test_interface_members_are_not_calls_with_ast(ast_context) -> None:
    analysis = analyze_corpus([ts_file(INTERFACE_SOURCE)], ast_context)
    assert analysis.dependencies == []
