from __future__ import annotations

import pytest

from callmap.core import constants as cs
from callmap.data_models.models import Method
from callmap.infrastructure import exceptions as ex
from callmap.parsers.pre_scanner import PreScanIndex, PreScanner
from callmap.tests.conftest import erb_file, js_file, make_file, ruby_file


def _method(name: str, path: str, kind=cs.MethodKind.METHOD, owner=None) -> Method:
    return Method(
        name=name, kind=kind, file_path=path, start_line=1, end_line=1, owner=owner
    )


class TestPreScanIndex:
    def test_indexes_definitions_only(self) -> None:
        index = PreScanIndex()
        index.add(_method("greet", "lib/a.rb"))
        index.add(_method("greet", "lib/b.rb"))
        index.add(_method("[Import: lib]", "src/a.js", kind=cs.MethodKind.IMPORT))
        assert index.definitions == {"greet": {"lib/a.rb", "lib/b.rb"}}
        assert "greet" in index
        assert len(index) == 1

    def test_namespace_and_concern_methods(self) -> None:
        index = PreScanIndex()
        path = "app/models/concerns/auditable.rb"
        index.add(_method("audit", path, owner="Auditable"))
        assert index.namespace_methods == {"Auditable": {"audit"}}
        assert index.concern_methods == {"app/models/concerns": {"audit"}}

    def test_frozen_index_rejects_additions(self) -> None:
        index = PreScanIndex()
        index.add(_method("greet", "lib/a.rb"))
        index.freeze()
        assert index.is_frozen
        assert index.names == frozenset({"greet"})
        with pytest.raises(ex.CallmapError):
            index.add(_method("late", "lib/c.rb"))
        assert "late" not in index.names

    def test_non_definitions_are_ignored_after_freeze(self) -> None:
        index = PreScanIndex().freeze()
        index.add(_method("[Export: x]", "src/a.js", kind=cs.MethodKind.EXPORT))
        assert len(index) == 0


def test_scan_builds_frozen_registry(heuristic_context) -> None:
    files = [
        ruby_file("module Greeting\n  def greet\n  end\nend\n", "lib/greeting.rb"),
        js_file("function render_list(){}\nconst helper = () => 1;\n"),
        erb_file("<%= greet %>\n"),
        make_file("README.md", "# readme\n", cs.SupportedLanguage.MARKDOWN),
    ]
    index = PreScanner(heuristic_context.handlers).scan(files)
    assert index.is_frozen
    assert index.names == frozenset({"greet", "render_list", "helper"})
    assert index.namespace_methods["Greeting"] == {"greet"}
