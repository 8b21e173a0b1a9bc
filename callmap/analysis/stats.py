from __future__ import annotations

from collections import Counter

from callmap.data_models.models import AnalysisStats, Dependency, FileAnalysisResult


def compute_stats(
    results: list[FileAnalysisResult], dependencies: list[Dependency]
) -> AnalysisStats:
    languages: Counter[str] = Counter()
    kinds: Counter[str] = Counter()
    total_calls = 0
    for result in results:
        languages[result.language] += 1
        for method in result.methods:
            kinds[str(method.kind)] += 1
            total_calls += len(method.calls)

    return AnalysisStats(
        total_files=len(results),
        total_methods=sum(kinds.values()),
        total_dependencies=len(dependencies),
        total_calls=total_calls,
        failed_files=sum(1 for result in results if result.failed),
        language_breakdown=dict(languages),
        kind_breakdown=dict(kinds),
    )
