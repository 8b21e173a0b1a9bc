"""
The two-phase corpus analysis pipeline.

Phase 1 runs every file through its handler's definitions-only pass and
freezes the resulting `PreScanIndex`. Phase 2 starts only after that, giving
each handler the frozen index so call-site gating can test registry
membership. Files are independent within a phase and can be mapped over a
thread pool; results always keep corpus order. The dependency graph is built
from the Phase 2 methods last.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from loguru import logger

from callmap.core import logs as ls
from callmap.data_models.models import (
    CorpusAnalysis,
    FileAnalysisResult,
    SourceFile,
)
from callmap.infrastructure.decorators import timing_decorator
from callmap.parsers.handlers.base import unsupported_result
from callmap.parsers.pre_scanner import PreScanIndex, PreScanner

from .context import AnalysisContext
from .dependency_graph import build_dependencies
from .stats import compute_stats

T = TypeVar("T")


class CorpusAnalyzer:
    """Runs both analysis phases over a corpus.

    Args:
        context (AnalysisContext): Handlers, strategy and settings for the run.
        workers (int | None): Thread count for each phase. Defaults to
            ``ANALYSIS_WORKERS``.
    """

    def __init__(self, context: AnalysisContext, workers: int | None = None) -> None:
        self.context = context
        self.workers = context.config.resolve_workers(workers)
        self.pre_scanner = PreScanner(context.handlers)

    def _map(
        self, func: Callable[[SourceFile], T], files: Sequence[SourceFile]
    ) -> list[T]:
        if self.workers <= 1 or len(files) <= 1:
            return [func(file) for file in files]
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(func, files))

    def build_registry(self, files: Sequence[SourceFile]) -> PreScanIndex:
        return self.pre_scanner.scan(files, self._map)

    def analyze_file(
        self, file: SourceFile, registry: PreScanIndex | None = None
    ) -> FileAnalysisResult:
        handler = self.context.handlers.get(file.language)
        if handler is None:
            return unsupported_result(file)
        return handler.analyze(file, registry)

    @timing_decorator
    def analyze(self, files: Sequence[SourceFile]) -> CorpusAnalysis:
        """
        Analyzes a whole corpus.

        Args:
            files (Sequence[SourceFile]): The corpus, in order.

        Returns:
            CorpusAnalysis: Per-file results in input order, the dependency
            edges, the registry names and summary statistics.
        """
        registry = self.build_registry(files)

        logger.info(ls.PHASE2_START.format(count=len(files), workers=self.workers))
        results = self._map(lambda file: self.analyze_file(file, registry), files)
        methods = [method for result in results for method in result.methods]
        logger.info(
            ls.PHASE2_DONE.format(
                methods=len(methods),
                calls=sum(len(method.calls) for method in methods),
            )
        )

        dependencies = build_dependencies(methods)
        return CorpusAnalysis(
            files=results,
            dependencies=dependencies,
            registry=registry.names,
            stats=compute_stats(results, dependencies),
        )


def analyze_corpus(
    files: Sequence[SourceFile],
    context: AnalysisContext | None = None,
    workers: int | None = None,
) -> CorpusAnalysis:
    """
    Convenience entry point: analyze a corpus with a fresh or supplied context.

    Args:
        files (Sequence[SourceFile]): The corpus, in order.
        context (AnalysisContext | None): A caller-owned context. A new one is
            created from the global settings when omitted.
        workers (int | None): Thread count override.

    Returns:
        CorpusAnalysis: The complete analysis.
    """
    context = context if context is not None else AnalysisContext.create()
    return CorpusAnalyzer(context, workers).analyze(files)
