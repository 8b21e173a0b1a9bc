from .analysis_runner import CorpusAnalyzer, analyze_corpus
from .context import AnalysisContext
from .dependency_graph import (
    DependencyGraph,
    build_dependencies,
    find_callers,
    find_definition,
)

__all__ = [
    "AnalysisContext",
    "CorpusAnalyzer",
    "DependencyGraph",
    "analyze_corpus",
    "build_dependencies",
    "find_callers",
    "find_definition",
]
