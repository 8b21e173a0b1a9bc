"""
This module defines the `JsTsHandler`, the language handler for JavaScript,
TypeScript and TSX.

The handler delegates to one extraction strategy chosen when the analysis
context is created: the tree-sitter AST walker when the grammars load, the
line-oriented heuristic extractor otherwise. Both strategies return methods of
the same shape, so the rest of the pipeline does not know which one ran.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from callmap.core import constants as cs
from callmap.data_models.models import AnalysisDiagnostic, Method, SourceFile

from .base import BaseLanguageHandler, registry_names

if TYPE_CHECKING:
    from callmap.parsers.pre_scanner import PreScanIndex


class JsTsExtractionStrategy(Protocol):
    engine: str

    def extract_methods(
        self,
        file: SourceFile,
        known_names: frozenset[str] | set[str] | None,
        diagnostics: list[AnalysisDiagnostic] | None = None,
    ) -> list[Method]: ...


class JsTsHandler(BaseLanguageHandler):
    """Language handler for JavaScript and TypeScript.

    Args:
        strategy (JsTsExtractionStrategy): The AST or heuristic extractor.
    """

    languages = cs.JS_TS_LANGUAGES

    def __init__(self, strategy: JsTsExtractionStrategy) -> None:
        self.strategy = strategy

    def engine_for(self, language: str) -> str:
        return f"{language}-{self.strategy.engine}"

    def _extract_definitions(self, file: SourceFile) -> list[Method]:
        return self.strategy.extract_methods(file, None)

    def _analyze(
        self,
        file: SourceFile,
        registry: PreScanIndex | None,
        diagnostics: list[AnalysisDiagnostic],
    ) -> list[Method]:
        return self.strategy.extract_methods(
            file, registry_names(registry), diagnostics
        )
