import importlib
from dataclasses import dataclass

from loguru import logger
from tree_sitter import Language, Parser

from callmap.core import constants as cs
from callmap.core import logs as ls

from . import exceptions as ex


@dataclass(frozen=True)
class GrammarImport:
    lang_key: cs.SupportedLanguage
    module_path: str
    attr_name: str


GRAMMAR_IMPORTS: tuple[GrammarImport, ...] = (
    GrammarImport(
        cs.SupportedLanguage.JS, cs.TREE_SITTER_JS_MODULE, cs.TS_LANG_ATTR_JS
    ),
    GrammarImport(
        cs.SupportedLanguage.TS, cs.TREE_SITTER_TS_MODULE, cs.TS_LANG_ATTR_TS
    ),
    GrammarImport(
        cs.SupportedLanguage.TSX, cs.TREE_SITTER_TS_MODULE, cs.TS_LANG_ATTR_TSX
    ),
)


def _import_language(grammar: GrammarImport) -> Language:
    """Imports one tree-sitter grammar and wraps it in a `Language`.

    Args:
        grammar (GrammarImport): The grammar module and attribute to load.

    Raises:
        ParserUnavailableError: If the module, its attribute, or the language
            object cannot be produced.

    Returns:
        Language: The loaded grammar.
    """
    logger.debug(ls.IMPORTING_MODULE.format(module=grammar.module_path))
    try:
        module = importlib.import_module(grammar.module_path)
    except ImportError as e:
        raise ex.ParserUnavailableError(
            ex.GRAMMAR_MISSING.format(module=grammar.module_path)
        ) from e

    loader = getattr(module, grammar.attr_name, None)
    if loader is None:
        raise ex.ParserUnavailableError(
            ex.GRAMMAR_ATTR_MISSING.format(
                module=grammar.module_path, attr=grammar.attr_name
            )
        )

    try:
        return Language(loader())
    except Exception as e:
        raise ex.ParserUnavailableError(
            ex.GRAMMAR_INIT_FAILED.format(lang=grammar.lang_key, error=e)
        ) from e


def load_js_ts_parsers() -> dict[cs.SupportedLanguage, Parser]:
    """Builds one tree-sitter `Parser` per JS/TS language tag.

    Raises:
        ParserUnavailableError: If any of the grammars cannot be loaded.

    Returns:
        dict[cs.SupportedLanguage, Parser]: Parsers keyed by language tag.
    """
    parsers: dict[cs.SupportedLanguage, Parser] = {}
    for grammar in GRAMMAR_IMPORTS:
        language = _import_language(grammar)
        try:
            parsers[grammar.lang_key] = Parser(language)
        except Exception as e:
            raise ex.ParserUnavailableError(
                ex.GRAMMAR_INIT_FAILED.format(lang=grammar.lang_key, error=e)
            ) from e
        logger.debug(ls.GRAMMAR_LOADED.format(lang=grammar.lang_key))
    return parsers
