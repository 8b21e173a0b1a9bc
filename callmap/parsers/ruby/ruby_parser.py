from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from callmap.core import constants as cs
from callmap.core import logs as ls
from callmap.core.config import AppConfig, settings
from callmap.data_models.models import (
    AnalysisDiagnostic,
    CallSite,
    Method,
    SourceFile,
)
from callmap.parsers.languages.registry import LanguageVocabulary, get_vocabulary
from callmap.parsers.languages.ruby.rails import MethodExclusionService

from ..utils import clean_source_line, is_comment_line, parse_parameters, slice_code

METHOD_DEFINITION = re.compile(r"^def\s+(self\.)?(\w+[?!]?)(\([^)]*\))?")
UNPARENTHESIZED_PARAMS = re.compile(
    r"^def\s+(?:self\.)?\w+[?!]?\s+([^\s;=#(][^;#]*)$"
)
ONE_LINE_DEF = re.compile(r";\s*end\s*$")
ENDLESS_DEF = re.compile(r"^def\s+(?:self\.)?\w+[?!]?(?:\([^)]*\))?\s*=(?![=~>])")
DEF_LINE = re.compile(r"^def\s+")
NAMESPACE = re.compile(r"^(class|module)\s+(?!<<)([A-Z][\w:]*)")

BLOCK_OPENER = re.compile(
    r"^(class|module|begin|if|unless|case|while|until|for)\b"
)
INLINE_OPENER = re.compile(r"=\s*(if|unless|case|begin)\b")
DO_BLOCK = re.compile(r"\bdo(\s*\|[^|]*\|)?$")
INLINE_DO_BLOCK = re.compile(r"\bdo\b(?:\s*\|[^|]*\|)?\s.*\bend\b")

STANDALONE_CALL = re.compile(r"(^|\s+)(\w+[?!]?)(?=\s|$|\(|\)|,|&&|\|\|)")
DOT_CALL = re.compile(r"\.(\w+[?!]?)(?=\s*\(|$|\s|,|\)|\.)")
INTERPOLATION_CALL = re.compile(r"#\{(\w+[?!]?)(?:\s*\()?\}")
INTERPOLATION_OBJECT_CALL = re.compile(r"#\{\w+\.(\w+[?!]?)(?:\s*\()?\}")
ASSIGNMENT_FOLLOWS = re.compile(r"^\s*(?:\|\||&&|\*\*|[-+*/%|&^])?=(?![=~>])")


class EndResolution(Enum):
    RESOLVED = "resolved"
    SAME_LINE = "same_line"
    NEXT_DEFINITION = "next_definition"
    CAPPED = "capped"


@dataclass
class RubyDefinition:
    """A `def` line found while scanning a Ruby file."""

    name: str
    is_class_method: bool
    params: str | None
    index: int
    visibility: cs.Visibility
    owner: str | None = None


def block_delta(trimmed: str) -> int:
    """
    Net change in `end`-depth contributed by one cleaned Ruby line.

    A line may both open and close a block (`if x then y end`,
    `items.each do |i| use(i) end`), in which case the delta is zero.

    Args:
        trimmed (str): A line with strings and comments stripped.

    Returns:
        int: +1, 0 or -1.
    """
    if INLINE_DO_BLOCK.search(trimmed):
        return 0
    opens = bool(
        BLOCK_OPENER.match(trimmed)
        or INLINE_OPENER.search(trimmed)
        or DO_BLOCK.search(trimmed)
    )
    closes = (
        trimmed == cs.RUBY_END
        or trimmed.startswith(("end ", "end.", "end)"))
        or trimmed.endswith(" end")
    )
    return int(opens) - int(closes)


def is_single_line_definition(trimmed: str) -> bool:
    return bool(ONE_LINE_DEF.search(trimmed) or ENDLESS_DEF.match(trimmed))


def _standalone_is_assignment(line: str, match_end: int) -> bool:
    return bool(ASSIGNMENT_FOLLOWS.match(line[match_end:]))


def find_ruby_calls_in_line(
    cleaned: str,
    line_number: int,
    known_names: frozenset[str] | set[str],
    vocabulary: LanguageVocabulary,
    context: str = "",
) -> list[CallSite]:
    """
    Finds call sites on one cleaned Ruby line.

    Four patterns contribute candidates: bare identifiers that are not
    assignment targets, dotted calls, and the two `#{}` interpolation forms.
    Each candidate passes through the vocabulary's registry gate.

    Args:
        cleaned (str): The line with single-quoted strings and comments removed.
        line_number (int): Absolute 1-indexed line number.
        known_names (frozenset[str] | set[str]): Names visible to this file.
        vocabulary (LanguageVocabulary): Keyword/builtin/allowlist tables.
        context (str): Snippet stored on each call site.

    Returns:
        list[CallSite]: Accepted call sites, unique by name.
    """
    candidates: list[tuple[str, bool]] = []

    for match in STANDALONE_CALL.finditer(cleaned):
        if not _standalone_is_assignment(cleaned, match.end()):
            candidates.append((match.group(2), False))
    candidates.extend((m.group(1), True) for m in DOT_CALL.finditer(cleaned))
    candidates.extend(
        (m.group(1), False) for m in INTERPOLATION_CALL.finditer(cleaned)
    )
    candidates.extend(
        (m.group(1), True) for m in INTERPOLATION_OBJECT_CALL.finditer(cleaned)
    )

    calls: list[CallSite] = []
    seen: set[str] = set()
    for name, has_receiver in candidates:
        if name in seen:
            continue
        if vocabulary.accepts_call(name, known_names, has_receiver):
            seen.add(name)
            calls.append(CallSite(method_name=name, line=line_number, context=context))
    return calls


class RubyParser:
    """Regex and `end`-depth based extraction of Ruby methods and call sites."""

    language = cs.SupportedLanguage.RUBY

    def __init__(self, config: AppConfig = settings) -> None:
        self.config = config
        self.vocabulary = get_vocabulary(self.language)

    def scan_definitions(self, lines: list[str]) -> Iterator[RubyDefinition]:
        """
        Yields every `def` in the file with its visibility and owner.

        Visibility starts public; a bare `private` line makes following
        definitions private and a bare `public` or `protected` line resets it
        to public. Opening a new class or module also resets it.

        Args:
            lines (list[str]): All lines of the file.

        Yields:
            RubyDefinition: Definitions in source order.
        """
        visibility = cs.Visibility.PUBLIC
        namespaces: list[tuple[str, int]] = []
        depth = 0

        for index, raw in enumerate(lines):
            trimmed = clean_source_line(raw, self.language)
            if not trimmed:
                continue

            if trimmed == cs.RUBY_PRIVATE:
                visibility = cs.Visibility.PRIVATE
                continue
            if trimmed in (cs.RUBY_PUBLIC, cs.RUBY_PROTECTED):
                visibility = cs.Visibility.PUBLIC
                continue

            if namespace := NAMESPACE.match(trimmed):
                visibility = cs.Visibility.PUBLIC
                name = namespace.group(2).rsplit("::", 1)[-1]
                namespaces.append((name, depth))

            if definition := METHOD_DEFINITION.match(trimmed):
                selfprefix, name, params = definition.groups()
                if params is None and (bare := UNPARENTHESIZED_PARAMS.match(trimmed)):
                    params = bare.group(1)
                yield RubyDefinition(
                    name=name,
                    is_class_method=bool(selfprefix),
                    params=params,
                    index=index,
                    visibility=visibility,
                    owner=namespaces[-1][0] if namespaces else None,
                )
                if not is_single_line_definition(trimmed):
                    depth += 1
                continue

            depth += block_delta(trimmed)
            while namespaces and namespaces[-1][1] >= depth:
                namespaces.pop()

    def find_method_end(
        self, lines: list[str], start_index: int
    ) -> tuple[int, EndResolution]:
        """
        Resolves the 0-based index of the line that closes a method.

        Args:
            lines (list[str]): All lines of the file.
            start_index (int): Index of the `def` line.

        Returns:
            tuple[int, EndResolution]: The end index and how it was found.
        """
        last_index = len(lines) - 1
        first = clean_source_line(lines[start_index], self.language)
        if is_single_line_definition(first):
            return start_index, EndResolution.SAME_LINE

        depth = 1
        stop = min(len(lines), start_index + 1 + self.config.MAX_SCAN_ITERATIONS)
        for index in range(start_index + 1, stop):
            trimmed = clean_source_line(lines[index], self.language)
            if DEF_LINE.match(trimmed):
                return index - 1, EndResolution.NEXT_DEFINITION
            depth += block_delta(trimmed)
            if depth <= 0:
                return index, EndResolution.RESOLVED

        fallback = min(start_index + self.config.RUBY_FALLBACK_WINDOW, last_index)
        return fallback, EndResolution.CAPPED

    def extract_calls(
        self,
        lines: list[str],
        start_index: int,
        end_index: int,
        known_names: frozenset[str] | set[str],
    ) -> list[CallSite]:
        calls: list[CallSite] = []
        for index in range(start_index, end_index + 1):
            raw = lines[index]
            if is_comment_line(raw, self.language) or DEF_LINE.match(raw.strip()):
                continue
            cleaned = clean_source_line(raw, self.language)
            calls.extend(
                find_ruby_calls_in_line(
                    cleaned, index + 1, known_names, self.vocabulary, raw.strip()
                )
            )
        return calls

    def _is_valid_definition_name(self, name: str) -> bool:
        return not (
            self.vocabulary.is_keyword(name) or self.vocabulary.is_builtin(name)
        )

    def local_names(self, lines: list[str]) -> set[str]:
        return {
            definition.name
            for definition in self.scan_definitions(lines)
            if self._is_valid_definition_name(definition.name)
        }

    def extract_methods(
        self,
        file: SourceFile,
        known_names: frozenset[str] | set[str] | None,
        diagnostics: list[AnalysisDiagnostic] | None = None,
    ) -> list[Method]:
        """
        Extracts methods from a Ruby file.

        Args:
            file (SourceFile): The file to analyze.
            known_names (frozenset[str] | set[str] | None): Names accepted by
                the registry gate. None runs in definitions-only mode, which
                leaves every method's calls empty.
            diagnostics (list[AnalysisDiagnostic] | None): Collector for
                malformed-construct diagnostics.

        Returns:
            list[Method]: Methods in source order.
        """
        lines = file.lines
        methods: list[Method] = []

        for definition in self.scan_definitions(lines):
            if not self._is_valid_definition_name(definition.name):
                continue
            end_index, resolution = self.find_method_end(lines, definition.index)
            end_index = max(end_index, definition.index)
            self._report_end(file, definition, end_index, resolution, diagnostics)

            calls = (
                []
                if known_names is None
                else self.extract_calls(lines, definition.index, end_index, known_names)
            )
            methods.append(
                Method(
                    name=definition.name,
                    kind=(
                        cs.MethodKind.CLASS_METHOD
                        if definition.is_class_method
                        else cs.MethodKind.METHOD
                    ),
                    file_path=file.path,
                    start_line=definition.index + 1,
                    end_line=end_index + 1,
                    code=slice_code(lines, definition.index, end_index),
                    visibility=definition.visibility,
                    parameters=parse_parameters(
                        definition.params,
                        self.language,
                        self.config.PARAM_SPLIT_MAX_LENGTH,
                        self.config.PARAM_SPLIT_MAX_DEPTH,
                    ),
                    calls=calls,
                    is_excluded=MethodExclusionService.is_excluded(
                        definition.name, file.path
                    ),
                    owner=definition.owner,
                )
            )
            logger.trace(
                ls.RUBY_METHOD_FOUND.format(
                    kind=methods[-1].kind,
                    name=definition.name,
                    path=file.path,
                    start=definition.index + 1,
                    end=end_index + 1,
                )
            )
        return methods

    def _report_end(
        self,
        file: SourceFile,
        definition: RubyDefinition,
        end_index: int,
        resolution: EndResolution,
        diagnostics: list[AnalysisDiagnostic] | None,
    ) -> None:
        match resolution:
            case EndResolution.CAPPED:
                message = ls.RUBY_END_CAPPED.format(
                    name=definition.name,
                    path=file.path,
                    line=definition.index + 1,
                    end=end_index + 1,
                )
            case EndResolution.NEXT_DEFINITION:
                message = ls.RUBY_END_FORCED.format(
                    name=definition.name,
                    path=file.path,
                    line=definition.index + 1,
                    end=end_index + 1,
                )
            case _:
                return
        logger.debug(message)
        if diagnostics is not None:
            diagnostics.append(
                AnalysisDiagnostic(
                    message=message,
                    kind=cs.DiagnosticKind.MALFORMED_CONSTRUCT,
                    severity=cs.Severity.INFO,
                    line=definition.index + 1,
                )
            )
