"""
tree-sitter based JavaScript/TypeScript extraction.

`AstJsTsExtractor` walks the syntax tree once per file and records a `Method`
for every function-like or type-level declaration, plus import and export
records. Line ranges come from node positions, so brace counting and string
stripping are unnecessary. The output has the same shape as the heuristic
extractor; only the precision of ranges and names differs.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from loguru import logger
from tree_sitter import Node, Parser

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

from ..utils import parse_parameters, safe_decode_text, slice_code
from . import utils as js

FUNCTION_VALUE_TYPES = frozenset(
    {cs.TS_ARROW_FUNCTION, cs.TS_FUNCTION_EXPRESSION, cs.TS_FUNCTION}
)
CLASS_TYPES = frozenset(
    {cs.TS_CLASS_DECLARATION, cs.TS_ABSTRACT_CLASS_DECLARATION, cs.TS_CLASS}
)
FUNCTION_DECLARATION_TYPES = frozenset(
    {cs.TS_FUNCTION_DECLARATION, cs.TS_GENERATOR_FUNCTION_DECLARATION}
)
FIELD_TYPES = frozenset({cs.TS_FIELD_DEFINITION, cs.TS_PUBLIC_FIELD_DEFINITION})


@dataclass
class ExtractedEntry:
    method: Method
    node: Node | None


def _row(node: Node) -> int:
    return node.start_point[0]


def _end_row(node: Node) -> int:
    return node.end_point[0]


def _field_text(node: Node, field: str) -> str | None:
    return safe_decode_text(node.child_by_field_name(field))


def _has_child(node: Node, child_type: str) -> bool:
    return any(child.type == child_type for child in node.children)


def _is_private(node: Node) -> bool:
    return any(
        child.type == cs.TS_ACCESSIBILITY_MODIFIER
        and safe_decode_text(child) == cs.ACCESS_PRIVATE
        for child in node.children
    )


def _return_type(node: Node) -> str | None:
    text = _field_text(node, cs.FIELD_RETURN_TYPE)
    if not text:
        return None
    return text.lstrip(":").strip() or None


def _parameters_text(node: Node) -> str | None:
    if (params := _field_text(node, cs.FIELD_PARAMETERS)) is not None:
        return params
    return _field_text(node, cs.FIELD_PARAMETER)


def _iter_preorder(root: Node):
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


class AstJsTsExtractor:
    """Extracts JS/TS methods from tree-sitter syntax trees.

    Args:
        parsers (dict[str, Parser]): One parser per supported language tag.
        config (AppConfig): Analysis settings.
    """

    engine = cs.ENGINE_AST_SUFFIX

    def __init__(
        self, parsers: dict[str, Parser], config: AppConfig = settings
    ) -> None:
        self.parsers = parsers
        self.config = config
        self._parse_lock = threading.Lock()

    def supports(self, language: str) -> bool:
        return language in self.parsers

    def extract_methods(
        self,
        file: SourceFile,
        known_names: frozenset[str] | set[str] | None,
        diagnostics: list[AnalysisDiagnostic] | None = None,
    ) -> list[Method]:
        source = file.content.encode(cs.ENCODING_UTF8)
        with self._parse_lock:
            tree = self.parsers[file.language].parse(source)
        if tree.root_node.has_error:
            logger.debug(ls.AST_PARSE_ERRORS.format(path=file.path))

        vocabulary = get_vocabulary(file.language)
        lines = file.lines
        entries = _TreeWalk(file, lines, vocabulary, self.config).run(tree.root_node)
        methods = [entry.method for entry in entries]
        if known_names is None:
            return methods

        imports = js.import_bindings(methods)
        visible = set(known_names) | js.local_definition_names(methods) | set(imports)
        for entry in entries:
            if entry.node is None:
                continue
            entry.method.calls = self.collect_calls(
                entry.node, lines, visible, imports, vocabulary
            )
        return methods

    def collect_calls(
        self,
        node: Node,
        lines: list[str],
        known_names: set[str],
        imports: dict[str, int],
        vocabulary: LanguageVocabulary,
    ) -> list[CallSite]:
        """
        Collects gated call sites from every `call_expression` under a node.

        Args:
            node (Node): The declaration node to search.
            lines (list[str]): File lines, used for the call-site snippet.
            known_names (set[str]): Registry, local and imported names.
            imports (dict[str, int]): Imported local name to import line.
            vocabulary (LanguageVocabulary): The file language's vocabulary.

        Returns:
            list[CallSite]: Call sites in source order, unique by (name, line).
        """
        calls: list[CallSite] = []
        seen: set[tuple[str, int]] = set()
        for child in _iter_preorder(node):
            if child.type != cs.TS_CALL_EXPRESSION:
                continue
            if not (name := self._callee_name(child)):
                continue
            line = _row(child) + 1
            if (name, line) in seen:
                continue
            context = lines[line - 1].strip() if line <= len(lines) else ""
            call = js.accept_call(
                name, line, known_names, imports, vocabulary, context
            )
            if call is not None:
                seen.add((name, line))
                calls.append(call)
        return calls

    @staticmethod
    def _callee_name(call: Node) -> str | None:
        function = call.child_by_field_name(cs.FIELD_FUNCTION)
        if function is None:
            return None
        if function.type == cs.TS_IDENTIFIER:
            return safe_decode_text(function)
        if function.type == cs.TS_MEMBER_EXPRESSION:
            return _field_text(function, cs.FIELD_PROPERTY)
        return None


class _TreeWalk:
    def __init__(
        self,
        file: SourceFile,
        lines: list[str],
        vocabulary: LanguageVocabulary,
        config: AppConfig,
    ) -> None:
        self.file = file
        self.lines = lines
        self.vocabulary = vocabulary
        self.config = config
        self.entries: list[ExtractedEntry] = []

    def run(self, root: Node) -> list[ExtractedEntry]:
        for node in _iter_preorder(root):
            self._visit(node)
        return self.entries

    def _visit(self, node: Node) -> None:
        match node.type:
            case _ if node.type in FUNCTION_DECLARATION_TYPES:
                self._function_declaration(node)
            case cs.TS_VARIABLE_DECLARATOR:
                self._variable_declarator(node)
            case _ if node.type in CLASS_TYPES:
                self._class(node)
            case cs.TS_INTERFACE_DECLARATION:
                self._interface(node)
            case cs.TS_TYPE_ALIAS_DECLARATION:
                self._named_declaration(node, cs.MethodKind.TYPE_ALIAS)
            case cs.TS_ENUM_DECLARATION:
                self._named_declaration(node, cs.MethodKind.ENUM)
            case cs.TS_IMPORT_STATEMENT:
                self._import(node)
            case cs.TS_EXPORT_STATEMENT:
                self._export(node)
            case cs.TS_CALL_EXPRESSION:
                self._hook_callback(node)

    def _function_declaration(self, node: Node) -> None:
        if not (name := _field_text(node, cs.FIELD_NAME)):
            return
        code = slice_code(self.lines, _row(node), _end_row(node))
        self._add(
            name,
            js.classify_function_kind(name, code),
            node,
            body=node,
            params=_parameters_text(node),
            return_type=_return_type(node),
        )

    def _variable_declarator(self, node: Node) -> None:
        name_node = node.child_by_field_name(cs.FIELD_NAME)
        value = node.child_by_field_name(cs.FIELD_VALUE)
        if name_node is None or name_node.type != cs.TS_IDENTIFIER:
            return
        if value is None or value.type not in FUNCTION_VALUE_TYPES:
            return
        if not (name := safe_decode_text(name_node)):
            return
        code = slice_code(self.lines, _row(node), _end_row(value))
        self._add(
            name,
            js.classify_function_kind(name, code),
            node,
            body=value,
            end_row=_end_row(value),
            params=_parameters_text(value),
            return_type=_return_type(value),
        )

    def _class(self, node: Node) -> None:
        owner = _field_text(node, cs.FIELD_NAME)
        if (body := node.child_by_field_name(cs.FIELD_BODY)) is None:
            return
        for member in body.named_children:
            if member.type == cs.TS_METHOD_DEFINITION:
                self._class_member(member, member, owner)
            elif member.type in FIELD_TYPES:
                value = member.child_by_field_name(cs.FIELD_VALUE)
                if value is not None and value.type in FUNCTION_VALUE_TYPES:
                    self._class_member(member, value, owner)

    def _class_member(self, member: Node, function: Node, owner: str | None) -> None:
        name_node = member.child_by_field_name(cs.FIELD_NAME)
        if name_node is None:
            name_node = member.child_by_field_name(cs.FIELD_PROPERTY)
        if name_node is None or not (name := safe_decode_text(name_node)):
            return
        is_private = _is_private(member)
        if name_node.type == cs.TS_PRIVATE_PROPERTY_IDENTIFIER:
            name = name.lstrip("#")
            is_private = True
        self._add(
            name,
            (
                cs.MethodKind.CLASS_METHOD
                if _has_child(member, cs.TS_STATIC)
                else cs.MethodKind.METHOD
            ),
            member,
            body=function,
            params=_parameters_text(function),
            return_type=_return_type(function),
            visibility=cs.Visibility.PRIVATE if is_private else cs.Visibility.PUBLIC,
            owner=owner,
        )

    def _interface(self, node: Node) -> None:
        if not (name := _field_text(node, cs.FIELD_NAME)):
            return
        self._add(name, cs.MethodKind.INTERFACE, node, body=None)
        if (body := node.child_by_field_name(cs.FIELD_BODY)) is None:
            return
        for member in body.named_children:
            if member.type != cs.TS_METHOD_SIGNATURE:
                continue
            if member_name := _field_text(member, cs.FIELD_NAME):
                self._add(
                    member_name,
                    cs.MethodKind.INTERFACE_METHOD,
                    member,
                    body=None,
                    params=_parameters_text(member),
                    return_type=_return_type(member),
                    owner=name,
                )

    def _named_declaration(self, node: Node, kind: cs.MethodKind) -> None:
        if name := _field_text(node, cs.FIELD_NAME):
            self._add(name, kind, node, body=node)

    def _hook_callback(self, node: Node) -> None:
        function = node.child_by_field_name(cs.FIELD_FUNCTION)
        if function is None or function.type != cs.TS_IDENTIFIER:
            return
        if safe_decode_text(function) not in cs.HOOK_CALLBACK_NAMES:
            return
        arguments = node.child_by_field_name(cs.FIELD_ARGUMENTS)
        if arguments is None or not arguments.named_children:
            return
        callback = arguments.named_children[0]
        if callback.type not in FUNCTION_VALUE_TYPES:
            return
        if not (name := js.hook_binding_name(self.lines[_row(node)])):
            return
        code = slice_code(self.lines, _row(callback), _end_row(callback))
        self._add(
            name,
            js.classify_function_kind(name, code),
            callback,
            body=callback,
            params=_parameters_text(callback),
        )

    def _import(self, node: Node) -> None:
        source = js.strip_quotes(_field_text(node, cs.FIELD_SOURCE) or "")
        elements: list[str] = []
        local_names: list[str] = []

        for clause in node.named_children:
            if clause.type != cs.TS_IMPORT_CLAUSE:
                continue
            for part in clause.named_children:
                match part.type:
                    case cs.TS_IDENTIFIER:
                        local = safe_decode_text(part) or ""
                        elements.append(f"default as {local}")
                        local_names.append(local)
                    case cs.TS_NAMED_IMPORTS:
                        for spec in part.named_children:
                            if spec.type != cs.TS_IMPORT_SPECIFIER:
                                continue
                            imported = _field_text(spec, cs.FIELD_NAME) or ""
                            alias = _field_text(spec, cs.FIELD_ALIAS)
                            elements.append(js.format_specifier(imported, alias))
                            local_names.append(alias or imported)
                    case cs.TS_NAMESPACE_IMPORT:
                        for ident in part.named_children:
                            if ident.type == cs.TS_IDENTIFIER:
                                local = safe_decode_text(ident) or ""
                                elements.append(f"* as {local}")
                                local_names.append(local)

        self._append(
            Method(
                name=js.format_import_name(elements, source),
                kind=cs.MethodKind.IMPORT,
                file_path=self.file.path,
                start_line=_row(node) + 1,
                end_line=self._clamp(_end_row(node)) + 1,
                code=slice_code(self.lines, _row(node), _end_row(node)),
                parameters=[Parameter(name=local) for local in local_names if local],
            ),
            None,
        )

    def _export(self, node: Node) -> None:
        declaration = node.child_by_field_name(cs.FIELD_DECLARATION)
        clause = next(
            (
                child
                for child in node.named_children
                if child.type == cs.TS_EXPORT_CLAUSE
            ),
            None,
        )

        if _has_child(node, cs.TS_DEFAULT):
            name = cs.DEFAULT_EXPORT
        elif declaration is not None:
            name = self._export_declaration_name(declaration)
        elif clause is not None:
            elements = [
                js.format_specifier(
                    _field_text(spec, cs.FIELD_NAME) or "",
                    _field_text(spec, cs.FIELD_ALIAS),
                )
                for spec in clause.named_children
                if spec.type == cs.TS_EXPORT_SPECIFIER
            ]
            source = _field_text(node, cs.FIELD_SOURCE)
            name = js.format_export_clause(
                elements, js.strip_quotes(source) if source else None
            )
        else:
            name = cs.EXPORT_REEXPORT

        self._append(
            Method(
                name=name,
                kind=cs.MethodKind.EXPORT,
                file_path=self.file.path,
                start_line=_row(node) + 1,
                end_line=self._clamp(_end_row(node)) + 1,
                code=slice_code(self.lines, _row(node), _end_row(node)),
            ),
            None,
        )

    @staticmethod
    def _export_declaration_name(declaration: Node) -> str:
        if name := _field_text(declaration, cs.FIELD_NAME):
            return cs.EXPORT_NAMED.format(name=name)
        if declaration.type in (cs.TS_LEXICAL_DECLARATION, cs.TS_VARIABLE_DECLARATION):
            names = [
                name
                for declarator in declaration.named_children
                if declarator.type == cs.TS_VARIABLE_DECLARATOR
                if (name := _field_text(declarator, cs.FIELD_NAME))
            ]
            if names:
                return cs.EXPORT_NAMED.format(name=", ".join(names))
        return cs.EXPORT_DECLARATION

    def _add(
        self,
        name: str,
        kind: cs.MethodKind,
        node: Node,
        body: Node | None,
        end_row: int | None = None,
        params: str | None = None,
        return_type: str | None = None,
        visibility: cs.Visibility = cs.Visibility.PUBLIC,
        owner: str | None = None,
    ) -> None:
        if not js.is_valid_definition_name(name, self.vocabulary):
            return
        start = _row(node)
        end = self._clamp(_end_row(node) if end_row is None else end_row)
        self._append(
            Method(
                name=name,
                kind=kind,
                file_path=self.file.path,
                start_line=start + 1,
                end_line=max(end, start) + 1,
                code=slice_code(self.lines, start, end),
                visibility=visibility,
                parameters=parse_parameters(
                    params,
                    self.file.language,
                    self.config.PARAM_SPLIT_MAX_LENGTH,
                    self.config.PARAM_SPLIT_MAX_DEPTH,
                ),
                return_type=return_type,
                owner=owner,
            ),
            body,
        )

    def _append(self, method: Method, body: Node | None) -> None:
        self.entries.append(ExtractedEntry(method=method, node=body))

    def _clamp(self, row: int) -> int:
        return min(row, max(len(self.lines) - 1, 0))
