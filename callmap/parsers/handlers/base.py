"""
This module defines `BaseLanguageHandler`, the shared implementation behind
every concrete language handler.

It owns the file boundary of the pipeline: whatever happens inside a concrete
handler's `_extract_definitions` or `_analyze`, the public methods return a
result for that file and never propagate the exception. It also fills in the
per-file `AnalysisMetadata` (timing, engine, size) so concrete handlers only
produce methods.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from loguru import logger

from callmap.core import constants as cs
from callmap.core import logs as ls
from callmap.data_models.models import (
    AnalysisDiagnostic,
    AnalysisMetadata,
    FileAnalysisResult,
    Method,
    SourceFile,
)

if TYPE_CHECKING:
    from callmap.parsers.pre_scanner import PreScanIndex


def unsupported_result(file: SourceFile) -> FileAnalysisResult:
    message = ls.UNSUPPORTED_LANGUAGE.format(lang=file.language, path=file.path)
    logger.debug(message)
    return FileAnalysisResult(
        path=file.path,
        language=file.language,
        errors=[
            AnalysisDiagnostic(
                message=message,
                kind=cs.DiagnosticKind.UNSUPPORTED_LANGUAGE,
                severity=cs.Severity.INFO,
            )
        ],
        metadata=AnalysisMetadata(
            processing_time_ms=0.0,
            lines_processed=0,
            engine=cs.ENGINE_NONE,
            file_size=len(file.content),
        ),
    )


class BaseLanguageHandler:
    """
    Base class for language handlers.

    Subclasses declare the language tags they serve and override
    `_extract_definitions` and `_analyze`.
    """

    languages: frozenset[str] = frozenset()

    def supports(self, language: str) -> bool:
        return language in self.languages

    def engine_for(self, language: str) -> str:
        return cs.ENGINE_NONE

    def extract_definitions(self, file: SourceFile) -> list[Method]:
        """
        Runs the definitions-only pass for one file.

        Args:
            file (SourceFile): The file to scan.

        Returns:
            list[Method]: Methods with empty calls, or an empty list if the
            language is unsupported or extraction failed.
        """
        if not self.supports(file.language):
            return []
        try:
            return self._extract_definitions(file)
        except Exception as e:
            logger.warning(ls.DEFINITIONS_FAILED.format(path=file.path, error=e))
            return []

    def analyze(
        self, file: SourceFile, registry: PreScanIndex | None = None
    ) -> FileAnalysisResult:
        """
        Runs full extraction for one file inside the file boundary.

        Args:
            file (SourceFile): The file to analyze.
            registry (PreScanIndex | None): The frozen Phase 1 index.

        Returns:
            FileAnalysisResult: On failure the methods are empty and a
            ``runtime`` error diagnostic is recorded.
        """
        if not self.supports(file.language):
            return unsupported_result(file)

        start = time.perf_counter()
        diagnostics: list[AnalysisDiagnostic] = []
        try:
            methods = self._analyze(file, registry, diagnostics)
        except Exception as e:
            message = ls.FILE_ANALYSIS_FAILED.format(path=file.path, error=e)
            logger.warning(message)
            methods = []
            diagnostics.append(
                AnalysisDiagnostic(message=message, kind=cs.DiagnosticKind.RUNTIME)
            )

        return FileAnalysisResult(
            path=file.path,
            language=file.language,
            methods=methods,
            errors=diagnostics,
            metadata=AnalysisMetadata(
                processing_time_ms=(time.perf_counter() - start) * 1000,
                lines_processed=file.total_lines,
                engine=self.engine_for(file.language),
                file_size=len(file.content),
            ),
        )

    def _extract_definitions(self, file: SourceFile) -> list[Method]:
        return []

    def _analyze(
        self,
        file: SourceFile,
        registry: PreScanIndex | None,
        diagnostics: list[AnalysisDiagnostic],
    ) -> list[Method]:
        return []


def registry_names(registry: PreScanIndex | None) -> frozenset[str]:
    return registry.names if registry is not None else frozenset()
