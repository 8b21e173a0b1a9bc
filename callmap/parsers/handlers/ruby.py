from __future__ import annotations

from typing import TYPE_CHECKING

from callmap.core import constants as cs
from callmap.core.config import AppConfig, settings
from callmap.data_models.models import AnalysisDiagnostic, Method, SourceFile
from callmap.parsers.languages.ruby import RailsImplicitMethodResolver
from callmap.parsers.ruby.ruby_parser import RubyParser

from .base import BaseLanguageHandler, registry_names

if TYPE_CHECKING:
    from callmap.parsers.pre_scanner import PreScanIndex


class RubyHandler(BaseLanguageHandler):
    """Language handler for Ruby, including Rails implicit methods."""

    languages = frozenset({cs.SupportedLanguage.RUBY})

    def __init__(self, config: AppConfig = settings) -> None:
        self.parser = RubyParser(config)

    def engine_for(self, language: str) -> str:
        return cs.ENGINE_RUBY

    def _extract_definitions(self, file: SourceFile) -> list[Method]:
        return self.parser.extract_methods(file, None)

    def _analyze(
        self,
        file: SourceFile,
        registry: PreScanIndex | None,
        diagnostics: list[AnalysisDiagnostic],
    ) -> list[Method]:
        lines = file.lines
        rails = RailsImplicitMethodResolver(registry).resolve(file.path, lines)
        known_names = (
            set(registry_names(registry))
            | self.parser.local_names(lines)
            | rails.resolved_methods
        )
        return self.parser.extract_methods(file, known_names, diagnostics)
