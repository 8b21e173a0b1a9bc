from callmap.core import constants as cs
from callmap.core.config import AppConfig
from callmap.data_models.models import AnalysisDiagnostic
from callmap.parsers.js_ts.heuristic import HeuristicJsTsExtractor
from callmap.tests.conftest import by_name, call_names, js_file, ts_file, tsx_file


def _extract(file, known=frozenset(), diagnostics=None):
    return HeuristicJsTsExtractor().extract_methods(file, known, diagnostics)


class TestFunctions:
    def test_sibling_functions_on_single_lines(self):
        content = "function outer(){ inner(); }\nfunction inner(){}\n"
        methods = _extract(js_file(content))
        outer, inner = by_name(methods, "outer"), by_name(methods, "inner")
        assert (outer.start_line, outer.end_line) == (1, 1)
        assert [(c.method_name, c.line) for c in outer.calls] == [("inner", 1)]
        assert inner.calls == []

    def test_nested_declaration_is_not_a_call(self):
        content = "function outer() {\n  function helper() {}\n  helper();\n}\n"
        methods = _extract(js_file(content))
        outer, helper = by_name(methods, "outer"), by_name(methods, "helper")
        assert (outer.start_line, outer.end_line) == (1, 4)
        assert [(c.method_name, c.line) for c in outer.calls] == [("helper", 3)]
        assert helper.calls == []

    def test_arrow_component_in_typescript(self):
        method = _extract(ts_file("const Foo = () => { return <div/>; };\n"))[0]
        assert method.name == "Foo"
        assert method.kind == cs.MethodKind.COMPONENT

    def test_custom_hook(self):
        content = (
            "function useCounter(initial) {\n"
            "  const [n, setN] = useState(initial);\n"
            "  return n;\n"
            "}\n"
        )
        method = _extract(js_file(content))[0]
        assert method.kind == cs.MethodKind.CUSTOM_HOOK
        assert (method.start_line, method.end_line) == (1, 4)
        assert [(c.method_name, c.line) for c in method.calls] == [("useState", 2)]

    def test_arrow_forms(self):
        content = (
            "const double = x => x * 2;\n"
            "const Card = ({\n"
            "  title,\n"
            "}) => {\n"
            '  return <div className="card">{title}</div>;\n'
            "};\n"
            "const Badge = ({ label }) => (\n"
            '  <span className="badge">{label}</span>\n'
            ");\n"
            "const legacy = function (a, b) {\n"
            "  return a + b;\n"
            "};\n"
        )
        methods = _extract(tsx_file(content))
        spans = {m.name: (m.kind, m.start_line, m.end_line) for m in methods}
        assert spans == {
            "double": (cs.MethodKind.FUNCTION, 1, 1),
            "Card": (cs.MethodKind.COMPONENT, 2, 6),
            "Badge": (cs.MethodKind.COMPONENT, 7, 9),
            "legacy": (cs.MethodKind.FUNCTION, 10, 12),
        }
        assert [p.name for p in by_name(methods, "legacy").parameters] == ["a", "b"]

    def test_object_literal_methods(self):
        content = (
            "function legacy(a, b) {\n"
            "  return a + b;\n"
            "}\n"
            "const api = {\n"
            "  load: function (id) {\n"
            "    return legacy(id, 1);\n"
            "  },\n"
            "};\n"
        )
        load = by_name(_extract(js_file(content)), "load")
        assert load.kind == cs.MethodKind.METHOD
        assert (load.start_line, load.end_line) == (5, 7)
        assert call_names(load) == ["legacy"]

    def test_typed_signature(self):
        content = (
            "export async function load(id: string, retries = 3): Promise<User> {\n"
            "}\n"
        )
        method = _extract(ts_file(content))[1]
        assert method.name == "load"
        assert [(p.name, p.type) for p in method.parameters] == [
            ("id", "string"),
            ("retries", None),
        ]
        assert method.return_type == "Promise<User>"

    def test_control_structures_are_not_definitions(self):
        content = "function run() {\n  if (ready) {\n    go();\n  }\n}\n"
        assert [m.name for m in _extract(js_file(content))] == ["run"]


class TestClasses:
    CONTENT = (
        "export class UserService {\n"
        "  private cache = new Map();\n"
        "\n"
        "  constructor(private api: Api) {}\n"
        "\n"
        "  public async load(id: string): Promise<User> {\n"
        "    return this.fetch(id);\n"
        "  }\n"
        "\n"
        "  private fetch(id: string) {\n"
        "    return this.api.get(id);\n"
        "  }\n"
        "\n"
        "  static fromDefaults() {\n"
        "    return new UserService(defaultApi());\n"
        "  }\n"
        "\n"
        "  handle = (event: Event) => {\n"
        "    this.load(event.id);\n"
        "  };\n"
        "}\n"
    )

    def test_members(self):
        methods = _extract(ts_file(self.CONTENT))
        members = {
            m.name: (m.kind, m.visibility, m.start_line, m.end_line, m.owner)
            for m in methods
            if m.kind != cs.MethodKind.EXPORT
        }
        assert members == {
            "load": (cs.MethodKind.METHOD, cs.Visibility.PUBLIC, 6, 8, "UserService"),
            "fetch": (
                cs.MethodKind.METHOD,
                cs.Visibility.PRIVATE,
                10,
                12,
                "UserService",
            ),
            "fromDefaults": (
                cs.MethodKind.CLASS_METHOD,
                cs.Visibility.PUBLIC,
                14,
                16,
                "UserService",
            ),
            "handle": (
                cs.MethodKind.METHOD,
                cs.Visibility.PUBLIC,
                18,
                20,
                "UserService",
            ),
        }

    def test_member_calls(self):
        methods = _extract(ts_file(self.CONTENT))
        assert [(c.method_name, c.line) for c in by_name(methods, "load").calls] == [
            ("fetch", 7)
        ]
        assert call_names(by_name(methods, "handle")) == ["load"]
        assert by_name(methods, "fetch").calls == []
        assert by_name(methods, "load").return_type == "Promise<User>"

    def test_class_export_record(self):
        methods = _extract(ts_file(self.CONTENT))
        assert methods[0].name == "[Export: UserService]"
        assert methods[0].kind == cs.MethodKind.EXPORT


class TestTypes:
    def test_interface_type_alias_and_enum(self):
        content = (
            "export interface Repo<T> {\n"
            "  lookup(id: string): Promise<T>;\n"
            "  name: string;\n"
            "}\n"
            "type Id = string;\n"
            "enum Color {\n"
            "  Red,\n"
            "}\n"
        )
        methods = _extract(ts_file(content))
        shapes = [(m.name, m.kind, m.start_line, m.end_line) for m in methods]
        assert shapes == [
            ("[Export: Repo]", cs.MethodKind.EXPORT, 1, 1),
            ("Repo", cs.MethodKind.INTERFACE, 1, 4),
            ("lookup", cs.MethodKind.INTERFACE_METHOD, 2, 2),
            ("Id", cs.MethodKind.TYPE_ALIAS, 5, 5),
            ("Color", cs.MethodKind.ENUM, 6, 8),
        ]
        lookup = by_name(methods, "lookup")
        assert lookup.owner == "Repo"
        assert lookup.return_type == "Promise<T>"

    def test_type_declarations_have_no_calls(self):
        content = (
            "interface Api {\n"
            "  fetchUser(id: string): User;\n"
            "}\n"
            "type Loader = (id: string) => Promise<User>;\n"
            "enum Mode { Read = compute(), }\n"
            "function fetchUser(id) {\n"
            "  return id;\n"
            "}\n"
        )
        methods = _extract(ts_file(content), {"compute"})
        assert by_name(methods, "fetchUser").kind == cs.MethodKind.INTERFACE_METHOD
        assert all(m.calls == [] for m in methods)


class TestImportsAndExports:
    def test_import_names(self):
        content = (
            "import React, { useState, useEffect as useFx } from 'react';\n"
            "import * as utils from './utils';\n"
            "import './styles.css';\n"
            "import {\n"
            "  a,\n"
            "  b as c,\n"
            "} from 'lib';\n"
        )
        imports = _extract(js_file(content))
        assert [(m.name, m.start_line, m.end_line) for m in imports] == [
            (
                "[Import: {default as React, useState, useEffect as useFx} "
                "from 'react']",
                1,
                1,
            ),
            ("[Import: {* as utils} from './utils']", 2, 2),
            ("[Import: ./styles.css]", 3, 3),
            ("[Import: {a, b as c} from 'lib']", 4, 7),
        ]
        assert [p.name for p in imports[0].parameters] == ["React", "useState", "useFx"]
        assert all(m.kind == cs.MethodKind.IMPORT and m.calls == [] for m in imports)

    def test_imported_calls_reference_the_import_line(self):
        content = (
            "import { fetchUser } from './api';\n"
            "\n"
            "function load(id) {\n"
            "  return fetchUser(id);\n"
            "}\n"
        )
        load = by_name(_extract(js_file(content)), "load")
        call = load.calls[0]
        assert call.method_name == "fetchUser"
        assert (call.line, call.import_source_line) == (4, 1)

    def test_export_names(self):
        content = (
            "export default App;\n"
            "export { a, b as c };\n"
            "export { x } from './x';\n"
            "export * from './all';\n"
            "export const LIMIT = 5;\n"
            "export function helper() {}\n"
        )
        methods = _extract(js_file(content))
        exports = [m.name for m in methods if m.kind == cs.MethodKind.EXPORT]
        assert exports == [
            "[Default Export]",
            "[Export: {a, b as c}]",
            "[Export: {x} from './x']",
            "[Export: re-export]",
            "[Export: LIMIT]",
            "[Export: helper]",
        ]
        assert by_name(methods, "helper").kind == cs.MethodKind.FUNCTION


class TestGate:
    def test_builtins_and_unknown_names_are_not_calls(self):
        content = (
            "function render(items) {\n"
            "  items.map(format);\n"
            "  setTimeout(refresh, 10);\n"
            "  unknownThing();\n"
            "}\n"
        )
        method = _extract(js_file(content))[0]
        assert method.calls == []

    def test_registry_names_and_optional_calls(self):
        content = "function render(client) {\n  client?.reload();\n}\n"
        method = _extract(js_file(content), frozenset({"reload"}))[0]
        assert call_names(method) == ["reload"]

    def test_definitions_only_mode(self):
        methods = _extract(js_file("function a() { b(); }\nfunction b() {}\n"), None)
        assert all(m.calls == [] for m in methods)


def test_unterminated_function_reports_capped_end():
    diagnostics: list[AnalysisDiagnostic] = []
    extractor = HeuristicJsTsExtractor(AppConfig(JS_FALLBACK_WINDOW=2))
    lines = ["function broken() {"] + ["  work();"] * 5
    file = js_file("\n".join(lines))
    methods = extractor.extract_methods(file, frozenset(), diagnostics)
    assert (methods[0].start_line, methods[0].end_line) == (1, 3)
    assert diagnostics[0].kind == cs.DiagnosticKind.MALFORMED_CONSTRUCT
