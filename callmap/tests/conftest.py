from __future__ import annotations

import pytest

from callmap.analysis import AnalysisContext
from callmap.core import constants as cs
from callmap.core.config import AppConfig
from callmap.data_models.models import Method, SourceFile


def make_file(path: str, content: str, language: str) -> SourceFile:
    return SourceFile.from_text(path, content, language)


def ruby_file(content: str, path: str = "app/models/user.rb") -> SourceFile:
    return make_file(path, content, cs.SupportedLanguage.RUBY)


def js_file(content: str, path: str = "src/app.js") -> SourceFile:
    return make_file(path, content, cs.SupportedLanguage.JS)


def ts_file(content: str, path: str = "src/app.ts") -> SourceFile:
    return make_file(path, content, cs.SupportedLanguage.TS)


def tsx_file(content: str, path: str = "src/App.tsx") -> SourceFile:
    return make_file(path, content, cs.SupportedLanguage.TSX)


def erb_file(content: str, path: str = "app/views/users/show.html.erb") -> SourceFile:
    return make_file(path, content, cs.SupportedLanguage.ERB)


def by_name(methods: list[Method], name: str) -> Method:
    matches = [method for method in methods if method.name == name]
    assert matches, f"no method named {name!r} in {[m.name for m in methods]}"
    return matches[0]


def call_names(method: Method) -> list[str]:
    return [call.method_name for call in method.calls]


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(USE_AST_PARSER=False, ANALYSIS_WORKERS=1)


@pytest.fixture
def heuristic_context(config: AppConfig) -> AnalysisContext:
    return AnalysisContext.create(config, use_ast=False)


@pytest.fixture
def ast_context(config: AppConfig) -> AnalysisContext:
    pytest.importorskip("tree_sitter_javascript")
    pytest.importorskip("tree_sitter_typescript")
    context = AnalysisContext.create(config, use_ast=True)
    if not context.uses_ast:
        pytest.skip("tree-sitter grammars could not be loaded")
    return context
