from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeAlias

from loguru import logger

from callmap.core import logs as ls
from callmap.data_models.models import Method, SourceFile
from callmap.infrastructure import exceptions as ex
from callmap.parsers.handlers.registry import HandlerRegistry
from callmap.parsers.languages.ruby.rails import concern_directory

ScanFunc: TypeAlias = "Callable[[SourceFile], list[Method]]"
FileMapper: TypeAlias = "Callable[[ScanFunc, Sequence[SourceFile]], list[list[Method]]]"


def sequential_map(
    func: ScanFunc, files: Sequence[SourceFile]
) -> list[list[Method]]:
    return [func(file) for file in files]


@dataclass
class PreScanIndex:
    """
    The corpus-wide definition registry built in Phase 1.

    Attributes:
        definitions (dict[str, set[str]]): Definition name -> paths defining it.
        namespace_methods (dict[str, set[str]]): Ruby class or module name ->
            names of the methods defined directly inside it.
        concern_methods (dict[str, set[str]]): Rails concern directory ->
            names of the methods defined in files under it.
    """

    definitions: dict[str, set[str]] = field(default_factory=dict)
    namespace_methods: dict[str, set[str]] = field(default_factory=dict)
    concern_methods: dict[str, set[str]] = field(default_factory=dict)
    _frozen_names: frozenset[str] | None = field(default=None, init=False, repr=False)

    def add(self, method: Method) -> None:
        """Index one method if it is a navigable definition.

        Args:
            method: A method produced by a definitions-only pass.

        Returns:
            None.
        """
        if not method.is_definition or not method.name:
            return
        if self._frozen_names is not None:
            raise ex.CallmapError(ex.REGISTRY_FROZEN)
        self.definitions.setdefault(method.name, set()).add(method.file_path)
        if method.owner:
            self.namespace_methods.setdefault(method.owner, set()).add(method.name)
        if directory := concern_directory(method.file_path):
            self.concern_methods.setdefault(directory, set()).add(method.name)

    def add_all(self, methods: Iterable[Method]) -> None:
        for method in methods:
            self.add(method)

    def freeze(self) -> PreScanIndex:
        self._frozen_names = frozenset(self.definitions)
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen_names is not None

    @property
    def names(self) -> frozenset[str]:
        if self._frozen_names is not None:
            return self._frozen_names
        return frozenset(self.definitions)

    def __contains__(self, name: object) -> bool:
        return name in self.definitions

    def __len__(self) -> int:
        return len(self.definitions)


class PreScanner:
    """
    Runs every file through its handler's definitions-only pass.

    Attributes:
        handlers (HandlerRegistry): Handlers keyed by language tag.
    """

    def __init__(self, handlers: HandlerRegistry) -> None:
        self.handlers = handlers

    def scan_file(self, file: SourceFile) -> list[Method]:
        handler = self.handlers.get(file.language)
        if handler is None:
            return []
        return handler.extract_definitions(file)

    def scan(
        self, files: Sequence[SourceFile], mapper: FileMapper = sequential_map
    ) -> PreScanIndex:
        """Builds and freezes the definition registry for a corpus.

        Args:
            files: The whole corpus, in order.
            mapper: Applies `scan_file` to every file; may run in parallel but
                must return results in input order.

        Returns:
            The frozen PreScanIndex.
        """
        logger.info(ls.PHASE1_START.format(count=len(files)))
        index = PreScanIndex()
        for methods in mapper(self.scan_file, files):
            index.add_all(methods)
        index.freeze()
        logger.info(ls.PHASE1_DONE.format(names=len(index), files=len(files)))
        return index
