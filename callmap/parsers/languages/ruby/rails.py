"""
Rails conventions that make methods callable without a definition in the file.

`RailsImplicitMethodResolver` widens the set of names a Ruby file may call:
methods of modules it `include`s, methods inherited from
`ApplicationController`, concern methods auto-loaded for controllers and
models, and the framework's standard controller/model/helper methods chosen by
file path. The corpus-wide data it needs (which module defines which methods)
comes from the Phase 1 `PreScanIndex`.

`MethodExclusionService` flags definitions that a framework invokes implicitly,
such as the seven RESTful actions of a Rails controller.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from callmap.core import logs as ls

from . import vocabulary as rb

if TYPE_CHECKING:
    from callmap.parsers.pre_scanner import PreScanIndex

INCLUDE_PATTERN = re.compile(r"^include\s+([A-Z][A-Za-z0-9_:]*)")
INHERITANCE_PATTERN = re.compile(r"^class\s+([\w:]+)\s*<\s*([\w:]+)")

APPLICATION_CONTROLLER = "ApplicationController"
CONTROLLERS_DIR = "controllers/"
MODELS_DIR = "models/"
HELPERS_DIR = "helpers/"
CONTROLLER_CONCERNS_DIR = "app/controllers/concerns"
MODEL_CONCERNS_DIR = "app/models/concerns"
CONCERN_DIRS = (CONTROLLER_CONCERNS_DIR, MODEL_CONCERNS_DIR)


@dataclass
class RailsResolution:
    explicit_includes: set[str] = field(default_factory=set)
    inheritance_chain: set[str] = field(default_factory=set)
    autoloaded_concerns: set[str] = field(default_factory=set)
    standard_methods: set[str] = field(default_factory=set)

    @property
    def resolved_methods(self) -> set[str]:
        return (
            self.explicit_includes
            | self.inheritance_chain
            | self.autoloaded_concerns
            | self.standard_methods
        )


class RailsImplicitMethodResolver:
    """Resolves the implicit method names available to one Ruby file.

    Args:
        index (PreScanIndex | None): The Phase 1 index. Without it only the
            path-based and superclass-based standard methods are resolved.
    """

    def __init__(self, index: PreScanIndex | None = None) -> None:
        self.index = index

    def resolve(self, path: str, lines: list[str]) -> RailsResolution:
        result = RailsResolution(
            explicit_includes=self._explicit_includes(lines),
            inheritance_chain=self._inheritance_chain(lines),
            autoloaded_concerns=self._autoloaded_concerns(path),
            standard_methods=self._standard_methods(path),
        )
        logger.trace(
            ls.RAILS_RESOLVED.format(path=path, count=len(result.resolved_methods))
        )
        return result

    def _namespace_methods(self, name: str) -> set[str]:
        if self.index is None:
            return set()
        return set(self.index.namespace_methods.get(name, ()))

    def _explicit_includes(self, lines: list[str]) -> set[str]:
        methods: set[str] = set()
        for line in lines:
            if match := INCLUDE_PATTERN.match(line.strip()):
                module = match.group(1).rsplit("::", 1)[-1]
                methods |= self._namespace_methods(module)
        return methods

    def _inheritance_chain(self, lines: list[str]) -> set[str]:
        methods: set[str] = set()
        for line in lines:
            if not (match := INHERITANCE_PATTERN.match(line.strip())):
                continue
            superclass = match.group(2)
            if superclass == APPLICATION_CONTROLLER:
                methods |= self._namespace_methods(APPLICATION_CONTROLLER)
            if "Controller" in superclass:
                methods |= rb.RAILS_CONTROLLER_METHODS
            if "Record" in superclass:
                methods |= rb.RAILS_MODEL_METHODS
        return methods

    def _autoloaded_concerns(self, path: str) -> set[str]:
        if self.index is None:
            return set()
        methods: set[str] = set()
        if CONTROLLERS_DIR in path:
            methods |= self.index.concern_methods.get(CONTROLLER_CONCERNS_DIR, set())
        if MODELS_DIR in path:
            methods |= self.index.concern_methods.get(MODEL_CONCERNS_DIR, set())
        return methods

    def _standard_methods(self, path: str) -> set[str]:
        methods: set[str] = set()
        if CONTROLLERS_DIR in path:
            methods |= rb.RAILS_CONTROLLER_METHODS | rb.RAILS_HELPER_METHODS
        if MODELS_DIR in path:
            methods |= rb.RAILS_MODEL_METHODS
        if HELPERS_DIR in path:
            methods |= rb.RAILS_HELPER_METHODS
        return methods


def concern_directory(path: str) -> str | None:
    for directory in CONCERN_DIRS:
        if directory in path:
            return directory
    return None


def is_rails_controller_file(path: str) -> bool:
    return path.endswith("_controller.rb")


def is_rails_controller_standard_action(name: str, path: str) -> bool:
    return is_rails_controller_file(path) and name in rb.RAILS_STANDARD_ACTIONS


@dataclass(frozen=True)
class ExclusionRule:
    framework: str
    file_pattern: re.Pattern[str]
    is_excluded: Callable[[str, str], bool]
    description: str


class MethodExclusionService:
    """Framework rules for definitions that are invoked implicitly."""

    rules: tuple[ExclusionRule, ...] = (
        ExclusionRule(
            framework="rails",
            file_pattern=re.compile(r"_controller\.rb$"),
            is_excluded=is_rails_controller_standard_action,
            description=(
                "Rails controller standard actions "
                "(index, show, new, edit, create, update, destroy)"
            ),
        ),
    )

    @classmethod
    def applied_rule(cls, name: str, path: str) -> ExclusionRule | None:
        for rule in cls.rules:
            if rule.file_pattern.search(path) and rule.is_excluded(name, path):
                return rule
        return None

    @classmethod
    def is_excluded(cls, name: str, path: str) -> bool:
        return cls.applied_rule(name, path) is not None

    @classmethod
    def is_clickable(cls, name: str, path: str) -> bool:
        return not cls.is_excluded(name, path)
