from __future__ import annotations

# Message templates
GRAMMAR_MISSING = "tree-sitter grammar module '{module}' is not installed"
GRAMMAR_ATTR_MISSING = "module '{module}' has no attribute '{attr}'"
GRAMMAR_INIT_FAILED = "failed to initialise tree-sitter parser for {lang}: {error}"
UNSUPPORTED_LANGUAGE = "unsupported language '{lang}'"
PATH_NOT_FOUND = "path does not exist: {path}"
WORKERS_POSITIVE = "ANALYSIS_WORKERS must be at least 1"
REGISTRY_FROZEN = "the definition registry is frozen; Phase 1 has already completed"


class CallmapError(Exception):
    """Base class for errors raised by callmap."""


class ParserUnavailableError(CallmapError):
    """A tree-sitter grammar could not be imported or initialised."""


class UnsupportedLanguageError(CallmapError):
    """No handler is registered for a language tag."""

    def __init__(self, language: str) -> None:
        super().__init__(UNSUPPORTED_LANGUAGE.format(lang=language))
        self.language = language
