"""
Line-oriented JavaScript/TypeScript extraction.

Used when no tree-sitter grammar is available, or when the AST strategy is
disabled. Every construct is recognised by an anchored regex on a cleaned line
(strings and comments removed); import and export statements are matched on
the raw line because their module specifiers live inside string literals. A
definition's end is found by brace depth. Arrow function bodies are measured
from the `=>`: a braced or parenthesized body ends where it balances, any other
expression body ends on the arrow's line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from callmap.core import constants as cs
from callmap.core import logs as ls
from callmap.core.config import AppConfig, settings
from callmap.data_models.models import (
    AnalysisDiagnostic,
    CallSite,
    Method,
    Parameter,
    SourceFile,
)
from callmap.parsers.languages.registry import LanguageVocabulary, get_vocabulary

from ..utils import (
    clean_source_line,
    find_brace_end,
    is_comment_line,
    parse_parameters,
    slice_code,
)
from . import utils as js

FUNCTION_DECLARATION = re.compile(
    r"^(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s+(\w+)"
    r"(?:<[^>]*>)?\s*\(([^)]*)\)(?:\s*:\s*([^{]+))?"
)
ARROW_FUNCTION = re.compile(
    r"^(?:export\s+)?(?:const|let|var)\s+(\w+)(?:\s*:\s*[^=]+)?\s*=\s*"
    r"(?:(?:useCallback|useMemo)\s*\()?\s*(?:async\s+)?(?:<[^>]*>)?\s*"
    r"\(([^)]*)\)\s*(?::\s*([^=>]+))?\s*=>"
)
ARROW_SINGLE_PARAM = re.compile(
    r"^(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(\w+)\s*=>"
)
ARROW_DESTRUCTURED_PARAMS = re.compile(
    r"^(?:export\s+)?(?:const|let|var)\s+(\w+)(?:\s*:\s*[^=]+)?\s*=\s*(?:async\s+)?\(\s*\{\s*$"
)
FUNCTION_EXPRESSION = re.compile(
    r"^(?:export\s+)?(?:const|let|var)\s+(\w+)(?:\s*:\s*[^=]+)?\s*=\s*"
    r"(?:async\s+)?function\s*\*?\s*\w*\s*\(([^)]*)\)"
)
MODIFIER_METHOD = re.compile(
    r"^(public|private|protected|static)\s+(?:static\s+)?(?:async\s+)?(\w+)"
    r"(?:<[^>]*>)?\s*\(([^)]*)\)(?:\s*:\s*([^{]+))?"
)
BARE_CLASS_METHOD = re.compile(
    r"^(?:async\s+)?(?:get\s+|set\s+)?(\w+)(?:<[^>]*>)?\s*\(([^)]*)\)"
    r"(?:\s*:\s*([^{;]+))?\s*\{?\s*$"
)
CLASS_FIELD_ARROW = re.compile(
    r"^(?:(public|private|protected)\s+)?(static\s+)?(?:readonly\s+)?(\w+)"
    r"(?:\s*:\s*[^=]+)?\s*=\s*(?:async\s+)?\(([^)]*)\)\s*(?::\s*[^=>]+)?\s*=>"
)
OBJECT_METHOD = re.compile(r"^(\w+)\s*:\s*(?:async\s+)?function\s*\(([^)]*)\)")
CLASS_DECLARATION = re.compile(
    r"^(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?class\s+(\w+)"
)
TYPE_ALIAS = re.compile(r"^(?:export\s+)?(?:declare\s+)?type\s+(\w+)(?:<[^>]*>)?\s*=")
INTERFACE = re.compile(r"^(?:export\s+)?(?:declare\s+)?interface\s+(\w+)")
INTERFACE_METHOD = re.compile(
    r"^(\w+)\??\s*(?:<[^>]*>)?\s*\(([^)]*)\)\s*:\s*([^;,]+?)\s*[;,]?$"
)
ENUM = re.compile(r"^(?:export\s+)?(?:declare\s+)?(?:const\s+)?enum\s+(\w+)")
CONTROL_STRUCTURE = re.compile(
    r"^\s*(if|else|for|while|switch|try|catch|finally)\s*[\(\{]"
)

IMPORT_KEYWORD = re.compile(r"^import\b")
EXPORT_KEYWORD = re.compile(r"^export\b")
IMPORT_FROM = re.compile(r"^import\s+(?:type\s+)?(.+?)\s+from\s+['\"]([^'\"]+)['\"]")
IMPORT_BARE = re.compile(r"^import\s+['\"]([^'\"]+)['\"]")
EXPORT_DEFAULT = re.compile(r"^export\s+default\b")
EXPORT_ALL = re.compile(r"^export\s+\*(?:\s+as\s+\w+)?\s+from\s+['\"]([^'\"]+)['\"]")
EXPORT_CLAUSE = re.compile(
    r"^export\s+(?:type\s+)?\{([^}]*)\}(?:\s+from\s+['\"]([^'\"]+)['\"])?"
)
EXPORT_DECLARATION = re.compile(
    r"^export\s+(?:declare\s+)?(?:async\s+)?(?:abstract\s+)?"
    r"(?:function\s*\*?|class|const|let|var|interface|type|enum)\s+(\w+)"
)
SPECIFIER = re.compile(r"^(?:type\s+)?([\w$*]+)(?:\s+as\s+([\w$]+))?$")

DOT_CALL = re.compile(r"\.\s*(\w+)(?:<[^>]*>)?\s*\(")
OPTIONAL_CALL = re.compile(r"\?\.\s*(\w+)(?:<[^>]*>)?\s*\(")
PLAIN_CALL = re.compile(r"(\w+)(?:<[^>]*>)?\s*\(")

ARROW_TOKEN = "=>"
NON_CALLABLE_KINDS = frozenset(
    {
        cs.MethodKind.IMPORT,
        cs.MethodKind.EXPORT,
        cs.MethodKind.INTERFACE,
        cs.MethodKind.INTERFACE_METHOD,
        cs.MethodKind.TYPE_ALIAS,
        cs.MethodKind.ENUM,
    }
)
BODY_DELIMITERS = {"{": "}", "(": ")"}


@dataclass
class ClassScope:
    name: str
    start_index: int
    end_index: int
    body_depth: int


def brace_depths(cleaned: list[str]) -> list[int]:
    """Brace depth in effect at the start of every line."""
    depths: list[int] = []
    depth = 0
    for line in cleaned:
        depths.append(depth)
        opens, closes = line.count("{"), line.count("}")
        depth = max(depth + opens - closes, 0)
    return depths


def find_js_calls_in_line(
    cleaned: str,
    line_number: int,
    known_names: frozenset[str] | set[str],
    imports: dict[str, int],
    vocabulary: LanguageVocabulary,
    context: str = "",
    declared: frozenset[str] | set[str] = frozenset(),
) -> list[CallSite]:
    """`declared` holds names whose definition starts on this line."""
    calls: list[CallSite] = []
    seen: set[str] = set()
    for pattern in (DOT_CALL, OPTIONAL_CALL, PLAIN_CALL):
        for match in pattern.finditer(cleaned):
            name = match.group(1)
            if name in seen or name in declared:
                continue
            if call := js.accept_call(
                name, line_number, known_names, imports, vocabulary, context
            ):
                seen.add(name)
                calls.append(call)
    return calls


class HeuristicJsTsExtractor:
    """Regex and brace-depth extraction for JavaScript, TypeScript and TSX."""

    engine = cs.ENGINE_REGEX_SUFFIX

    def __init__(self, config: AppConfig = settings) -> None:
        self.config = config

    def extract_methods(
        self,
        file: SourceFile,
        known_names: frozenset[str] | set[str] | None,
        diagnostics: list[AnalysisDiagnostic] | None = None,
    ) -> list[Method]:
        lines = file.lines
        vocabulary = get_vocabulary(file.language)
        methods = _FileScan(self, file, lines, vocabulary, diagnostics).run()

        if known_names is None:
            return methods

        imports = js.import_bindings(methods)
        visible = set(known_names) | js.local_definition_names(methods) | set(imports)
        declarations: dict[int, set[str]] = {}
        for method in methods:
            declarations.setdefault(method.start_line, set()).add(method.name)
        for method in methods:
            if method.kind in NON_CALLABLE_KINDS:
                continue
            method.calls = self.extract_calls(
                lines,
                method,
                visible,
                imports,
                vocabulary,
                file.language,
                declarations,
            )
        return methods

    def extract_calls(
        self,
        lines: list[str],
        method: Method,
        known_names: set[str],
        imports: dict[str, int],
        vocabulary: LanguageVocabulary,
        language: str,
        declarations: dict[int, set[str]] | None = None,
    ) -> list[CallSite]:
        declarations = declarations or {method.start_line: {method.name}}
        calls: list[CallSite] = []
        for index in range(method.start_line - 1, method.end_line):
            raw = lines[index]
            if is_comment_line(raw, language):
                continue
            calls.extend(
                find_js_calls_in_line(
                    clean_source_line(raw, language),
                    index + 1,
                    known_names,
                    imports,
                    vocabulary,
                    raw.strip(),
                    declared=declarations.get(index + 1, frozenset()),
                )
            )
        return calls


class _FileScan:
    """One pass over a file's lines producing definitions in source order."""

    def __init__(
        self,
        extractor: HeuristicJsTsExtractor,
        file: SourceFile,
        lines: list[str],
        vocabulary: LanguageVocabulary,
        diagnostics: list[AnalysisDiagnostic] | None,
    ) -> None:
        self.config = extractor.config
        self.file = file
        self.language = file.language
        self.lines = lines
        self.vocabulary = vocabulary
        self.diagnostics = diagnostics
        self.cleaned = [clean_source_line(line, self.language) for line in lines]
        self.depths = brace_depths(self.cleaned)
        self.classes: list[ClassScope] = []
        self.methods: list[Method] = []

    def run(self) -> list[Method]:
        index = 0
        while index < len(self.lines):
            index = self._scan_line(index) + 1
        return self.methods

    def _scan_line(self, index: int) -> int:
        raw = self.lines[index].strip()
        trimmed = self.cleaned[index]
        if not trimmed or is_comment_line(raw, self.language):
            return index

        if IMPORT_KEYWORD.match(raw):
            return self._scan_import(index)
        if EXPORT_KEYWORD.match(raw):
            self._scan_export(index, raw)

        if CONTROL_STRUCTURE.match(trimmed):
            return index

        if match := CLASS_DECLARATION.match(trimmed):
            end_index = self._block_end(match.group(1), index)
            self.classes.append(
                ClassScope(match.group(1), index, end_index, self.depths[index] + 1)
            )
            return index

        if match := INTERFACE.match(trimmed):
            self._scan_interface(match.group(1), index)
            return index
        if match := ENUM.match(trimmed):
            end_index = self._block_end(match.group(1), index)
            self._add(match.group(1), cs.MethodKind.ENUM, index, end_index)
            return index
        if match := TYPE_ALIAS.match(trimmed):
            end_index = index
            if "{" in trimmed:
                end_index = self._block_end(match.group(1), index)
            self._add(match.group(1), cs.MethodKind.TYPE_ALIAS, index, end_index)
            return index

        if match := FUNCTION_DECLARATION.match(trimmed):
            name, params, return_type = match.groups()
            self._add_function(name, index, params, return_type)
            return index
        if match := ARROW_FUNCTION.match(trimmed):
            name, params, return_type = match.groups()
            self._add_function(name, index, params, return_type, arrow=True)
            return index
        if match := ARROW_SINGLE_PARAM.match(trimmed):
            self._add_function(match.group(1), index, match.group(2), None, arrow=True)
            return index
        if match := ARROW_DESTRUCTURED_PARAMS.match(trimmed):
            self._add_function(match.group(1), index, None, None, arrow=True)
            return index
        if match := FUNCTION_EXPRESSION.match(trimmed):
            self._add_function(match.group(1), index, match.group(2), None)
            return index

        self._scan_class_member(index, trimmed)
        return index

    def _scan_class_member(self, index: int, trimmed: str) -> None:
        scope = self._class_scope(index)

        if match := MODIFIER_METHOD.match(trimmed):
            modifier, name, params, return_type = match.groups()
            is_static = (
                modifier == cs.TS_STATIC or "static " in trimmed[: match.start(2)]
            )
            self._add_method(
                name,
                index,
                params,
                return_type,
                cs.MethodKind.CLASS_METHOD if is_static else cs.MethodKind.METHOD,
                modifier == cs.ACCESS_PRIVATE,
                scope,
            )
            return

        if scope is None:
            if match := OBJECT_METHOD.match(trimmed):
                name, params = match.groups()
                self._add_method(
                    name, index, params, None, cs.MethodKind.METHOD, False, None
                )
            return

        if match := CLASS_FIELD_ARROW.match(trimmed):
            modifier, static, name, params = match.groups()
            self._add_method(
                name,
                index,
                params,
                None,
                cs.MethodKind.CLASS_METHOD if static else cs.MethodKind.METHOD,
                modifier == cs.ACCESS_PRIVATE,
                scope,
                arrow=True,
            )
            return

        if match := BARE_CLASS_METHOD.match(trimmed):
            name, params, return_type = match.groups()
            self._add_method(
                name, index, params, return_type, cs.MethodKind.METHOD, False, scope
            )

    def _class_scope(self, index: int) -> ClassScope | None:
        for scope in reversed(self.classes):
            if (
                scope.start_index < index <= scope.end_index
                and self.depths[index] == scope.body_depth
            ):
                return scope
        return None

    def _scan_interface(self, name: str, index: int) -> None:
        end_index = self._block_end(name, index)
        self._add(name, cs.MethodKind.INTERFACE, index, end_index)
        body_depth = self.depths[index] + 1
        for member in range(index + 1, end_index + 1):
            if self.depths[member] != body_depth:
                continue
            if match := INTERFACE_METHOD.match(self.cleaned[member]):
                member_name, params, return_type = match.groups()
                self._add(
                    member_name,
                    cs.MethodKind.INTERFACE_METHOD,
                    member,
                    member,
                    params=params,
                    return_type=return_type,
                    owner=name,
                )

    def _scan_import(self, index: int) -> int:
        end_index = index
        statement = self.lines[index].strip()
        if "{" in statement and "}" not in statement:
            stop = min(len(self.lines), index + self.config.MAX_SCAN_ITERATIONS)
            for follow in range(index + 1, stop):
                statement = f"{statement} {self.lines[follow].strip()}"
                end_index = follow
                if "}" in self.lines[follow]:
                    break

        if match := IMPORT_FROM.match(statement):
            clause, source = match.groups()
            elements, local_names = _parse_import_clause(clause)
            name = js.format_import_name(elements, source)
        elif match := IMPORT_BARE.match(statement):
            local_names = []
            name = js.format_import_name([], match.group(1))
        else:
            return index

        self.methods.append(
            Method(
                name=name,
                kind=cs.MethodKind.IMPORT,
                file_path=self.file.path,
                start_line=index + 1,
                end_line=end_index + 1,
                code=slice_code(self.lines, index, end_index),
                parameters=[Parameter(name=local) for local in local_names],
            )
        )
        return end_index

    def _scan_export(self, index: int, raw: str) -> None:
        if EXPORT_DEFAULT.match(raw):
            name = cs.DEFAULT_EXPORT
        elif match := EXPORT_ALL.match(raw):
            name = cs.EXPORT_REEXPORT
        elif match := EXPORT_CLAUSE.match(raw):
            elements = [
                js.format_specifier(*_split_specifier(part))
                for part in match.group(1).split(",")
                if part.strip()
            ]
            name = js.format_export_clause(elements, match.group(2))
        elif match := EXPORT_DECLARATION.match(raw):
            name = cs.EXPORT_NAMED.format(name=match.group(1))
        else:
            name = cs.EXPORT_DECLARATION
        self.methods.append(
            Method(
                name=name,
                kind=cs.MethodKind.EXPORT,
                file_path=self.file.path,
                start_line=index + 1,
                end_line=index + 1,
                code=self.lines[index],
            )
        )

    def _add_function(
        self,
        name: str,
        index: int,
        params: str | None,
        return_type: str | None,
        arrow: bool = False,
    ) -> None:
        if not js.is_valid_definition_name(name, self.vocabulary):
            return
        end_index = self._function_end(name, index, arrow)
        code = slice_code(self.lines, index, end_index)
        self._add(
            name,
            js.classify_function_kind(name, code),
            index,
            end_index,
            params=params,
            return_type=return_type,
        )

    def _add_method(
        self,
        name: str,
        index: int,
        params: str | None,
        return_type: str | None,
        kind: cs.MethodKind,
        is_private: bool,
        scope: ClassScope | None,
        arrow: bool = False,
    ) -> None:
        if not js.is_valid_definition_name(name, self.vocabulary):
            return
        self._add(
            name,
            kind,
            index,
            self._function_end(name, index, arrow),
            params=params,
            return_type=return_type,
            visibility=cs.Visibility.PRIVATE if is_private else cs.Visibility.PUBLIC,
            owner=scope.name if scope else None,
        )

    def _add(
        self,
        name: str,
        kind: cs.MethodKind,
        index: int,
        end_index: int,
        params: str | None = None,
        return_type: str | None = None,
        visibility: cs.Visibility = cs.Visibility.PUBLIC,
        owner: str | None = None,
    ) -> None:
        if not js.is_valid_definition_name(name, self.vocabulary):
            return
        self.methods.append(
            Method(
                name=name,
                kind=kind,
                file_path=self.file.path,
                start_line=index + 1,
                end_line=end_index + 1,
                code=slice_code(self.lines, index, end_index),
                visibility=visibility,
                parameters=parse_parameters(
                    params,
                    self.language,
                    self.config.PARAM_SPLIT_MAX_LENGTH,
                    self.config.PARAM_SPLIT_MAX_DEPTH,
                ),
                return_type=_clean_return_type(return_type),
                owner=owner,
            )
        )

    def _function_end(self, name: str, index: int, arrow: bool) -> int:
        if not arrow:
            return self._block_end(name, index)

        arrow_index = self._arrow_line(index)
        head, _, body = self.cleaned[arrow_index].partition(ARROW_TOKEN)
        stripped = body.lstrip()
        if not stripped or stripped[0] not in BODY_DELIMITERS:
            return arrow_index
        column = len(head) + len(ARROW_TOKEN) + len(body) - len(stripped)
        opener = stripped[0]
        return self._balanced_end(
            name, index, arrow_index, column, opener, BODY_DELIMITERS[opener]
        )

    def _arrow_line(self, index: int) -> int:
        stop = min(len(self.lines), index + self.config.MAX_SCAN_ITERATIONS)
        for follow in range(index, stop):
            if ARROW_TOKEN in self.cleaned[follow]:
                return follow
        return index

    def _balanced_end(
        self,
        name: str,
        start_index: int,
        line_index: int,
        column: int,
        opener: str,
        closer: str,
    ) -> int:
        depth = 0
        stop = min(len(self.lines), start_index + self.config.MAX_SCAN_ITERATIONS)
        for index in range(line_index, stop):
            text = self.cleaned[index]
            if index == line_index:
                text = text[column:]
            for char in text:
                if char == opener:
                    depth += 1
                elif char == closer:
                    depth -= 1
                    if depth == 0:
                        return index

        end_index = min(
            start_index + self.config.JS_FALLBACK_WINDOW, len(self.lines) - 1
        )
        self._report_capped(name, start_index, end_index)
        return max(end_index, start_index)

    def _block_end(self, name: str, index: int) -> int:
        end_index, resolved = find_brace_end(
            self.lines,
            index,
            self.language,
            self.config.MAX_SCAN_ITERATIONS,
            self.config.JS_FALLBACK_WINDOW,
        )
        if not resolved:
            self._report_capped(name, index, end_index)
        return max(end_index, index)

    def _report_capped(self, name: str, index: int, end_index: int) -> None:
        message = ls.JS_END_CAPPED.format(
            name=name, path=self.file.path, line=index + 1, end=end_index + 1
        )
        logger.debug(message)
        if self.diagnostics is not None:
            self.diagnostics.append(
                AnalysisDiagnostic(
                    message=message,
                    kind=cs.DiagnosticKind.MALFORMED_CONSTRUCT,
                    severity=cs.Severity.INFO,
                    line=index + 1,
                )
            )


def _split_specifier(part: str) -> tuple[str, str | None]:
    if match := SPECIFIER.match(part.strip()):
        return match.group(1), match.group(2)
    return part.strip(), None


def _parse_import_clause(clause: str) -> tuple[list[str], list[str]]:
    """
    Splits an import clause into display elements and local binding names.

    ``React, { useState as useLocal }`` yields
    ``["default as React", "useState as useLocal"]`` and
    ``["React", "useLocal"]``.
    """
    elements: list[str] = []
    local_names: list[str] = []

    named = ""
    if "{" in clause:
        head, _, rest = clause.partition("{")
        named, _, _ = rest.partition("}")
        clause = head

    for part in clause.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("*"):
            _, _, alias = part.partition(" as ")
            alias = alias.strip()
            elements.append(f"* as {alias}")
            local_names.append(alias)
        else:
            elements.append(f"default as {part}")
            local_names.append(part)

    for part in named.split(","):
        if not part.strip():
            continue
        name, alias = _split_specifier(part)
        elements.append(js.format_specifier(name, alias))
        local_names.append(alias or name)

    return elements, local_names


def _clean_return_type(return_type: str | None) -> str | None:
    if not return_type:
        return None
    cleaned = return_type.strip().rstrip("{").strip()
    return cleaned or None
