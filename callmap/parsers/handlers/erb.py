from __future__ import annotations

from typing import TYPE_CHECKING

from callmap.core import constants as cs
from callmap.data_models.models import AnalysisDiagnostic, Method, SourceFile
from callmap.parsers.ruby.erb_parser import ErbParser

from .base import BaseLanguageHandler, registry_names

if TYPE_CHECKING:
    from callmap.parsers.pre_scanner import PreScanIndex


class ErbHandler(BaseLanguageHandler):
    """Language handler for ERB templates. Templates contribute no definitions."""

    languages = frozenset({cs.SupportedLanguage.ERB})

    def __init__(self) -> None:
        self.parser = ErbParser()

    def engine_for(self, language: str) -> str:
        return cs.ENGINE_ERB

    def _analyze(
        self,
        file: SourceFile,
        registry: PreScanIndex | None,
        diagnostics: list[AnalysisDiagnostic],
    ) -> list[Method]:
        return self.parser.extract_methods(file, registry_names(registry))
