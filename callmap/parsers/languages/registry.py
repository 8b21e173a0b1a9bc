"""
Per-language vocabularies used to decide whether an identifier can be a call.

A `LanguageVocabulary` bundles four tables for one language:

-   `keywords`: never a valid call or definition name.
-   `builtins`: standard-library names excluded from call detection.
-   `framework_allowlist`: names accepted as calls without a local definition.
-   `control_patterns`: statement keywords easily mistaken for calls.

Ruby additionally has a `receiver_allowlist` for ActiveRecord verbs, which are
only accepted when written with an explicit receiver.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from callmap.core import constants as cs

from .js_ts import vocabulary as js
from .ruby import vocabulary as rb


@dataclass(frozen=True)
class LanguageVocabulary:
    keywords: frozenset[str]
    builtins: frozenset[str]
    framework_allowlist: frozenset[str]
    control_patterns: frozenset[str]
    receiver_allowlist: frozenset[str] = frozenset()

    def is_keyword(self, word: str) -> bool:
        return word in self.keywords

    def is_builtin(self, word: str) -> bool:
        return word in self.builtins

    def is_control_pattern(self, word: str) -> bool:
        return word in self.control_patterns

    def is_allowlisted(self, word: str, has_receiver: bool = False) -> bool:
        if word in self.framework_allowlist:
            return True
        return has_receiver and word in self.receiver_allowlist

    def is_reserved(self, word: str) -> bool:
        return (
            self.is_keyword(word)
            or self.is_builtin(word)
            or self.is_control_pattern(word)
        )

    def accepts_call(
        self, word: str, known_names: frozenset[str] | set[str], has_receiver: bool
    ) -> bool:
        """
        The registry gate: a candidate is a call when it is not reserved and is
        either a known definition name or allowlisted.

        Args:
            word (str): The candidate callee name.
            known_names (frozenset[str] | set[str]): Registry names visible to
                the file being analyzed.
            has_receiver (bool): Whether the candidate was written as
                ``receiver.word``.

        Returns:
            bool: True if the candidate should be recorded as a call site.
        """
        if not word or self.is_reserved(word):
            return False
        return word in known_names or self.is_allowlisted(word, has_receiver)


EMPTY_VOCABULARY = LanguageVocabulary(
    keywords=frozenset(),
    builtins=frozenset(),
    framework_allowlist=frozenset(),
    control_patterns=frozenset(),
)

RUBY_VOCABULARY = LanguageVocabulary(
    keywords=rb.RUBY_KEYWORDS,
    builtins=rb.RUBY_BUILTINS,
    framework_allowlist=rb.RUBY_FRAMEWORK_ALLOWLIST,
    control_patterns=rb.RUBY_CONTROL_PATTERNS,
    receiver_allowlist=rb.RUBY_RECEIVER_ALLOWLIST,
)

ERB_VOCABULARY = LanguageVocabulary(
    keywords=rb.RUBY_KEYWORDS,
    builtins=rb.RUBY_BUILTINS - rb.ERB_ALLOWED_BUILTINS,
    framework_allowlist=rb.RUBY_FRAMEWORK_ALLOWLIST | rb.ERB_ALLOWED_BUILTINS,
    control_patterns=rb.RUBY_CONTROL_PATTERNS,
    receiver_allowlist=rb.RUBY_RECEIVER_ALLOWLIST,
)

JAVASCRIPT_VOCABULARY = LanguageVocabulary(
    keywords=js.JAVASCRIPT_KEYWORDS,
    builtins=js.JAVASCRIPT_BUILTINS,
    framework_allowlist=js.JAVASCRIPT_FRAMEWORK_METHODS,
    control_patterns=js.JAVASCRIPT_CONTROL_PATTERNS,
)

TYPESCRIPT_VOCABULARY = LanguageVocabulary(
    keywords=js.JAVASCRIPT_KEYWORDS | js.TYPESCRIPT_KEYWORDS,
    builtins=js.JAVASCRIPT_BUILTINS,
    framework_allowlist=js.JAVASCRIPT_FRAMEWORK_METHODS,
    control_patterns=js.JAVASCRIPT_CONTROL_PATTERNS,
)

_VOCABULARIES: dict[str, LanguageVocabulary] = {
    cs.SupportedLanguage.RUBY: RUBY_VOCABULARY,
    cs.SupportedLanguage.ERB: ERB_VOCABULARY,
    cs.SupportedLanguage.JS: JAVASCRIPT_VOCABULARY,
    cs.SupportedLanguage.TS: TYPESCRIPT_VOCABULARY,
    cs.SupportedLanguage.TSX: TYPESCRIPT_VOCABULARY,
}


@lru_cache(maxsize=16)
def get_vocabulary(language: str) -> LanguageVocabulary:
    return _VOCABULARIES.get(language, EMPTY_VOCABULARY)


def is_keyword(word: str, language: str) -> bool:
    return get_vocabulary(language).is_keyword(word)


def is_builtin(word: str, language: str) -> bool:
    return get_vocabulary(language).is_builtin(word)


def is_allowlisted(word: str, language: str, has_receiver: bool = False) -> bool:
    return get_vocabulary(language).is_allowlisted(word, has_receiver)
