"""
This module defines the `LanguageHandler` protocol, the capability interface
every language extractor exposes to the analysis pipeline.

A handler answers three questions about a source file: whether it can handle
the file's language tag, which definitions the file contributes to the
corpus-wide registry (Phase 1), and what methods and call sites the file
contains once that registry is known (Phase 2).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from callmap.data_models.models import FileAnalysisResult, Method, SourceFile
    from callmap.parsers.pre_scanner import PreScanIndex


class LanguageHandler(Protocol):
    """
    A protocol defining the interface for language-specific extraction.
    """

    languages: frozenset[str]

    def supports(self, language: str) -> bool:
        """
        Checks if the handler can analyze files with a language tag.

        Args:
            language (str): The file's language tag.

        Returns:
            bool: True if the tag is handled, False otherwise.
        """
        ...

    def extract_definitions(self, file: SourceFile) -> list[Method]:
        """
        Extracts definitions only, with every method's calls left empty.

        Args:
            file (SourceFile): The file to scan.

        Returns:
            list[Method]: The file's methods. Never raises.
        """
        ...

    def analyze(
        self, file: SourceFile, registry: PreScanIndex | None = None
    ) -> FileAnalysisResult:
        """
        Extracts methods and gated call sites.

        Args:
            file (SourceFile): The file to analyze.
            registry (PreScanIndex | None): The frozen Phase 1 index. When
                None, only the file's own definitions are known.

        Returns:
            FileAnalysisResult: Methods, diagnostics and metadata. Never raises.
        """
        ...
