import pytest

from callmap.core import constants as cs
from callmap.core.config import AppConfig
from callmap.infrastructure.parser_loader import load_js_ts_parsers
from callmap.parsers.js_ts.ast_parser import AstJsTsExtractor
from callmap.tests.conftest import by_name, call_names, js_file, ts_file, tsx_file


@pytest.fixture(scope="module")
def extractor() -> AstJsTsExtractor:
    pytest.importorskip("tree_sitter_javascript")
    pytest.importorskip("tree_sitter_typescript")
    return AstJsTsExtractor(load_js_ts_parsers(), AppConfig(ANALYSIS_WORKERS=1))


def test_supports_every_js_ts_tag(extractor):
    for language in cs.JS_TS_LANGUAGES:
        assert extractor.supports(language)
    assert not extractor.supports(cs.SupportedLanguage.RUBY)


def test_sibling_functions_and_local_call(extractor):
    content = "function outer(){ inner(); }\nfunction inner(){}\n"
    methods = extractor.extract_methods(js_file(content), frozenset())
    outer, inner = by_name(methods, "outer"), by_name(methods, "inner")
    assert (outer.start_line, outer.end_line) == (1, 1)
    assert (inner.start_line, inner.end_line) == (2, 2)
    assert [(c.method_name, c.line) for c in outer.calls] == [("inner", 1)]
    assert inner.calls == []


def test_arrow_component(extractor):
    content = "const Foo = () => { return <div/>; };\n"
    method = by_name(extractor.extract_methods(tsx_file(content), frozenset()), "Foo")
    assert method.kind == cs.MethodKind.COMPONENT


def test_multi_line_arrow_spans_its_body(extractor):
    content = (
        "const Badge = ({\n"
        "  label,\n"
        "}) => (\n"
        '  <span className="badge">{label}</span>\n'
        ");\n"
    )
    method = by_name(extractor.extract_methods(tsx_file(content), frozenset()), "Badge")
    assert (method.start_line, method.end_line) == (1, 5)
    assert method.kind == cs.MethodKind.COMPONENT


def test_class_members(extractor):
    content = (
        "class UserService {\n"
        "  private cache = new Map();\n"
        "  load(id: string) {\n"
        "    return this.fetchOne(id);\n"
        "  }\n"
        "  private fetchOne(id: string): string {\n"
        "    return id;\n"
        "  }\n"
        "  static fromDefaults() {\n"
        "    return new UserService();\n"
        "  }\n"
        "  handle = () => {\n"
        '    this.load("x");\n'
        "  };\n"
        "}\n"
    )
    methods = extractor.extract_methods(ts_file(content), frozenset())
    members = {
        m.name: (m.kind, m.visibility, m.start_line, m.end_line)
        for m in methods
        if m.owner == "UserService"
    }
    assert members == {
        "load": (cs.MethodKind.METHOD, cs.Visibility.PUBLIC, 3, 5),
        "fetchOne": (cs.MethodKind.METHOD, cs.Visibility.PRIVATE, 6, 8),
        "fromDefaults": (cs.MethodKind.CLASS_METHOD, cs.Visibility.PUBLIC, 9, 11),
        "handle": (cs.MethodKind.METHOD, cs.Visibility.PUBLIC, 12, 14),
    }
    assert by_name(methods, "fetchOne").return_type == "string"
    assert [(c.method_name, c.line) for c in by_name(methods, "load").calls] == [
        ("fetchOne", 4)
    ]
    assert call_names(by_name(methods, "handle")) == ["load"]


def test_type_level_declarations(extractor):
    content = (
        "interface Repo<T> {\n"
        "  lookup(id: string): Promise<T>;\n"
        "}\n"
        "type Id = string;\n"
        "enum Color { Red, Green }\n"
    )
    methods = extractor.extract_methods(ts_file(content), frozenset())
    kinds = {m.name: (m.kind, m.start_line, m.end_line) for m in methods}
    assert kinds == {
        "Repo": (cs.MethodKind.INTERFACE, 1, 3),
        "lookup": (cs.MethodKind.INTERFACE_METHOD, 2, 2),
        "Id": (cs.MethodKind.TYPE_ALIAS, 4, 4),
        "Color": (cs.MethodKind.ENUM, 5, 5),
    }
    lookup = by_name(methods, "lookup")
    assert lookup.owner == "Repo"
    assert lookup.return_type == "Promise<T>"


def test_imports_and_exports(extractor):
    content = (
        "import React, { useState, useEffect as useFx } from 'react';\n"
        "import './styles.css';\n"
        "export function helper() {}\n"
        "export { helper as aid };\n"
        "export default helper;\n"
    )
    methods = extractor.extract_methods(js_file(content), frozenset())
    records = [
        (m.kind, m.name, m.start_line)
        for m in methods
        if m.kind in (cs.MethodKind.IMPORT, cs.MethodKind.EXPORT)
    ]
    assert records == [
        (
            cs.MethodKind.IMPORT,
            "[Import: {default as React, useState, useEffect as useFx} "
            "from 'react']",
            1,
        ),
        (cs.MethodKind.IMPORT, "[Import: ./styles.css]", 2),
        (cs.MethodKind.EXPORT, "[Export: helper]", 3),
        (cs.MethodKind.EXPORT, "[Export: {helper as aid}]", 4),
        (cs.MethodKind.EXPORT, cs.DEFAULT_EXPORT, 5),
    ]
    react = methods[0]
    assert [p.name for p in react.parameters] == ["React", "useState", "useFx"]
    assert by_name(methods, "helper").kind == cs.MethodKind.FUNCTION


def test_imported_call_records_import_line(extractor):
    content = (
        "import { fetchUser } from './api';\n"
        "function load() {\n"
        "  return fetchUser(1);\n"
        "}\n"
    )
    methods = extractor.extract_methods(js_file(content), frozenset())
    call = by_name(methods, "load").calls[0]
    assert call.method_name == "fetchUser"
    assert (call.line, call.import_source_line) == (3, 1)


def test_hook_callback_is_named_after_its_binding(extractor):
    content = (
        "function Panel() {\n"
        "  const onClick = useCallback(() => {\n"
        "    persistDraft();\n"
        "  }, []);\n"
        '  return <div className="panel" />;\n'
        "}\n"
        "function persistDraft() {}\n"
    )
    methods = extractor.extract_methods(tsx_file(content), frozenset())
    callback = by_name(methods, "onClick")
    assert (callback.start_line, callback.end_line) == (2, 4)
    assert call_names(callback) == ["persistDraft"]
    assert by_name(methods, "Panel").kind == cs.MethodKind.COMPONENT


def test_registry_names_gate_calls(extractor):
    content = "function run() {\n  remoteTask();\n  unknownThing();\n}\n"
    methods = extractor.extract_methods(js_file(content), frozenset({"remoteTask"}))
    assert call_names(methods[0]) == ["remoteTask"]


def test_definitions_only_mode_has_no_calls(extractor):
    content = "function outer(){ inner(); }\nfunction inner(){}\n"
    methods = extractor.extract_methods(js_file(content), None)
    assert [m.name for m in methods] == ["outer", "inner"]
    assert all(m.calls == [] for m in methods)
