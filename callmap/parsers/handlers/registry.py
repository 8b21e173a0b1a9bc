"""
This module manages the registry of language handlers.

A `HandlerRegistry` maps language tags to handler instances. It is built once
per `AnalysisContext` with the JS/TS strategy already chosen, and looked up
per file during both analysis phases. Tags with no registered handler resolve
to None, which the pipeline turns into an empty result.
"""

from __future__ import annotations

from loguru import logger

from callmap.core import logs as ls
from callmap.core.config import AppConfig, settings
from callmap.infrastructure import exceptions as ex

from .erb import ErbHandler
from .js_ts import JsTsExtractionStrategy, JsTsHandler
from .protocol import LanguageHandler
from .ruby import RubyHandler


class HandlerRegistry:
    def __init__(self) -> None:
        self._handlers: dict[str, LanguageHandler] = {}

    def register(self, handler: LanguageHandler) -> None:
        for language in handler.languages:
            self._handlers[language] = handler
        logger.debug(
            ls.HANDLER_REGISTERED.format(
                handler=type(handler).__name__,
                langs=", ".join(sorted(handler.languages)),
            )
        )

    def get(self, language: str) -> LanguageHandler | None:
        return self._handlers.get(language)

    def require(self, language: str) -> LanguageHandler:
        if (handler := self._handlers.get(language)) is None:
            raise ex.UnsupportedLanguageError(language)
        return handler

    def supports(self, language: str) -> bool:
        return language in self._handlers

    @property
    def languages(self) -> frozenset[str]:
        return frozenset(self._handlers)


def build_handler_registry(
    js_strategy: JsTsExtractionStrategy, config: AppConfig = settings
) -> HandlerRegistry:
    """
    Builds a registry holding the Ruby, ERB and JS/TS handlers.

    Args:
        js_strategy (JsTsExtractionStrategy): The extractor the JS/TS handler uses.
        config (AppConfig): Analysis settings passed to the Ruby parser.

    Returns:
        HandlerRegistry: A registry covering every supported language tag.
    """
    registry = HandlerRegistry()
    registry.register(RubyHandler(config))
    registry.register(ErbHandler())
    registry.register(JsTsHandler(js_strategy))
    return registry
