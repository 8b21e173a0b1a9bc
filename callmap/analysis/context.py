from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from callmap.core import constants as cs
from callmap.core import logs as ls
from callmap.core.config import AppConfig, settings
from callmap.infrastructure import exceptions as ex
from callmap.infrastructure.parser_loader import load_js_ts_parsers
from callmap.parsers.handlers.js_ts import JsTsExtractionStrategy
from callmap.parsers.handlers.registry import HandlerRegistry, build_handler_registry
from callmap.parsers.js_ts.ast_parser import AstJsTsExtractor
from callmap.parsers.js_ts.heuristic import HeuristicJsTsExtractor


def select_js_strategy(
    config: AppConfig, use_ast: bool | None = None
) -> JsTsExtractionStrategy:
    """Chooses the JS/TS extraction strategy once, at startup.

    Args:
        config (AppConfig): Analysis settings; ``USE_AST_PARSER`` is the default
            preference.
        use_ast (bool | None): Explicit override of the preference.

    Returns:
        JsTsExtractionStrategy: The AST extractor when the tree-sitter grammars
        load, otherwise the heuristic extractor.
    """
    prefer_ast = config.USE_AST_PARSER if use_ast is None else use_ast
    if not prefer_ast:
        logger.debug(ls.HEURISTIC_STRATEGY_SELECTED.format(reason=ls.HEURISTIC_FORCED))
        return HeuristicJsTsExtractor(config)

    try:
        parsers = load_js_ts_parsers()
    except ex.ParserUnavailableError as e:
        logger.debug(ls.HEURISTIC_STRATEGY_SELECTED.format(reason=e))
        return HeuristicJsTsExtractor(config)

    logger.debug(ls.AST_STRATEGY_SELECTED.format(langs=", ".join(sorted(parsers))))
    return AstJsTsExtractor(parsers, config)


@dataclass
class AnalysisContext:
    """Everything one analysis run needs, owned by the caller.

    Attributes:
        config (AppConfig): Analysis settings.
        handlers (HandlerRegistry): Handlers keyed by language tag.
        js_strategy (JsTsExtractionStrategy): The JS/TS extractor in use.
    """

    config: AppConfig
    handlers: HandlerRegistry
    js_strategy: JsTsExtractionStrategy

    @classmethod
    def create(
        cls, config: AppConfig = settings, use_ast: bool | None = None
    ) -> AnalysisContext:
        js_strategy = select_js_strategy(config, use_ast)
        return cls(
            config=config,
            handlers=build_handler_registry(js_strategy, config),
            js_strategy=js_strategy,
        )

    @property
    def uses_ast(self) -> bool:
        return self.js_strategy.engine == cs.ENGINE_AST_SUFFIX
