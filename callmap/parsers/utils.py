"""
Line-oriented scanning helpers shared by every extractor.

The extractors never parse a full grammar; they work on one physical line at a
time after removing the parts of the line that can contain identifier-looking
text that is not code (string literals and comments). The helpers here do that
cleaning, split parameter lists on top-level commas, classify individual
parameter fragments, and count braces to find the end of a block.
"""

from __future__ import annotations

import re
from functools import lru_cache

from tree_sitter import Node

from callmap.core import constants as cs
from callmap.data_models.models import Parameter

_RUBY_STRINGS = (
    re.compile(r"'(?:[^'\\]|\\.)*'"),
    re.compile(r"`(?:[^`\\]|\\.)*`"),
)
_JS_STRINGS = (
    re.compile(r'"(?:[^"\\]|\\.)*"'),
    re.compile(r"'(?:[^'\\]|\\.)*'"),
    re.compile(r"`(?:[^`\\]|\\.)*`"),
)
_ERB_STRINGS = (re.compile(r"'(?:[^'\\]|\\.)*'"),)
_GENERIC_STRINGS = (re.compile(r'"(?:[^"\\]|\\.)*"'),)

_RUBY_COMMENT = re.compile(r"(?<!\\)#(?!\{).*$")
_JS_LINE_COMMENT = re.compile(r"//.*$")
_JS_BLOCK_COMMENT = re.compile(r"/\*.*?\*/")
_ERB_COMMENT = re.compile(r"<%#.*?%>")

_OPENERS = "({[<"
_CLOSERS = ")}]>"
_QUOTES = "\"'`"

_DEFAULT_SPLIT = re.compile(r"^([^=]+?)\s*=\s*(.+)$")
_TS_TYPED = re.compile(r"^([^:=]+?)\s*:\s*([^=]+?)(?:\s*=\s*(.+))?$")
_RUBY_KEYWORD_DEFAULT = re.compile(r"^(\w+):\s*(.+)$")


def _string_patterns(language: str) -> tuple[re.Pattern[str], ...]:
    match language:
        case cs.SupportedLanguage.RUBY:
            return _RUBY_STRINGS
        case cs.SupportedLanguage.ERB:
            return _ERB_STRINGS
        case _ if language in cs.JS_TS_LANGUAGES:
            return _JS_STRINGS
        case _:
            return _GENERIC_STRINGS


def _empty_quotes(match: re.Match[str]) -> str:
    quote = match.group(0)[0]
    return quote + quote


def strip_string_literals(line: str, language: str) -> str:
    """
    Replaces quoted spans with empty quote pairs.

    Ruby keeps double-quoted strings intact because their ``#{}``
    interpolations contain real calls.

    Args:
        line (str): A single source line.
        language (str): The language tag of the file.

    Returns:
        str: The line with string contents removed.
    """
    for pattern in _string_patterns(language):
        line = pattern.sub(_empty_quotes, line)
    return line


def strip_comments(line: str, language: str) -> str:
    """
    Removes trailing and inline comments from a line.

    Args:
        line (str): A single source line, ideally with strings already stripped.
        language (str): The language tag of the file.

    Returns:
        str: The line without comments.
    """
    match language:
        case cs.SupportedLanguage.RUBY:
            return _RUBY_COMMENT.sub("", line)
        case cs.SupportedLanguage.ERB:
            return _ERB_COMMENT.sub("", line)
        case _ if language in cs.JS_TS_LANGUAGES:
            return _JS_BLOCK_COMMENT.sub("", _JS_LINE_COMMENT.sub("", line))
        case _:
            return line


def clean_source_line(line: str, language: str) -> str:
    cleaned = strip_string_literals(line.strip(), language)
    return strip_comments(cleaned, language).strip()


def is_comment_line(line: str, language: str) -> bool:
    trimmed = line.strip()
    match language:
        case cs.SupportedLanguage.RUBY:
            return trimmed.startswith("#")
        case cs.SupportedLanguage.ERB:
            return trimmed.startswith("<%#")
        case _ if language in cs.JS_TS_LANGUAGES:
            return trimmed.startswith(("//", "/*", "*"))
        case _:
            return False


def split_top_level_parameters(
    text: str,
    max_length: int = cs.PARAM_SPLIT_MAX_LENGTH,
    max_depth: int = cs.PARAM_SPLIT_MAX_DEPTH,
) -> list[str]:
    """
    Splits a parameter list on commas that are not nested.

    Nesting is tracked over ``(){}[]<>`` and quoted spans are opaque. Input is
    truncated to ``max_length`` characters and scanning stops once nesting
    exceeds ``max_depth``, so the scan always terminates quickly.

    Args:
        text (str): The text between a definition's parentheses.
        max_length (int): Maximum number of characters examined.
        max_depth (int): Maximum nesting depth before scanning stops.

    Returns:
        list[str]: Trimmed, non-empty fragments in order.
    """
    fragments: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    previous = ""

    for char in text[:max_length]:
        if quote is not None:
            if char == quote and previous != "\\":
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            depth += 1
            if depth > max_depth:
                break
        elif char in _CLOSERS:
            # `=>` inside a default value is not a closer
            if not (char == ">" and previous == "="):
                depth = max(depth - 1, 0)
        elif char == "," and depth == 0:
            fragments.append("".join(current).strip())
            current = []
            previous = char
            continue
        current.append(char)
        previous = char

    tail = "".join(current).strip()
    if tail:
        fragments.append(tail)
    return [fragment for fragment in fragments if fragment]


def _classify_ruby(fragment: str) -> Parameter:
    if fragment.endswith(":"):
        return Parameter(name=fragment[:-1], kind=cs.ParameterKind.KEYWORD)
    if keyword := _RUBY_KEYWORD_DEFAULT.match(fragment):
        return Parameter(
            name=keyword.group(1),
            default_value=keyword.group(2).strip(),
            kind=cs.ParameterKind.KEYWORD,
        )
    if default := _DEFAULT_SPLIT.match(fragment):
        return Parameter(name=default.group(1).strip(), default_value=default.group(2))
    if fragment.startswith("&"):
        return Parameter(name=fragment[1:], kind=cs.ParameterKind.BLOCK)
    if fragment.startswith("*"):
        return Parameter(name=fragment.lstrip("*"), kind=cs.ParameterKind.SPLAT)
    return Parameter(name=fragment)


def _classify_javascript(fragment: str) -> Parameter:
    if fragment.startswith("..."):
        return Parameter(name=fragment[3:].strip(), kind=cs.ParameterKind.REST)
    if default := _DEFAULT_SPLIT.match(fragment):
        return Parameter(name=default.group(1).strip(), default_value=default.group(2))
    return Parameter(name=fragment)


def _classify_typescript(fragment: str) -> Parameter:
    kind = None
    if fragment.startswith("..."):
        kind = cs.ParameterKind.REST
        fragment = fragment[3:].strip()
    if fragment[:1] not in "{[" and (typed := _TS_TYPED.match(fragment)):
        default = typed.group(3)
        return Parameter(
            name=typed.group(1).strip().rstrip("?"),
            type=typed.group(2).strip(),
            default_value=default.strip() if default else None,
            kind=kind,
        )
    if default := _DEFAULT_SPLIT.match(fragment):
        return Parameter(
            name=default.group(1).strip().rstrip("?"),
            default_value=default.group(2),
            kind=kind,
        )
    return Parameter(name=fragment.rstrip("?"), kind=kind)


def classify_parameter_fragment(fragment: str, language: str) -> Parameter:
    """
    Classifies one top-level parameter fragment.

    Args:
        fragment (str): A single fragment from ``split_top_level_parameters``.
        language (str): The language tag of the file.

    Returns:
        Parameter: The parameter with name, and type/default/kind when present.
    """
    fragment = fragment.strip()
    match language:
        case cs.SupportedLanguage.RUBY | cs.SupportedLanguage.ERB:
            return _classify_ruby(fragment)
        case cs.SupportedLanguage.JS:
            return _classify_javascript(fragment)
        case _ if language in cs.TS_LANGUAGES:
            return _classify_typescript(fragment)
        case _:
            return Parameter(name=fragment)


def parse_parameters(
    text: str | None,
    language: str,
    max_length: int = cs.PARAM_SPLIT_MAX_LENGTH,
    max_depth: int = cs.PARAM_SPLIT_MAX_DEPTH,
) -> list[Parameter]:
    if not text or not text.strip():
        return []
    inner = text.strip()
    if inner.startswith("(") and inner.endswith(")"):
        inner = inner[1:-1]
    return [
        classify_parameter_fragment(fragment, language)
        for fragment in split_top_level_parameters(inner, max_length, max_depth)
    ]


def find_brace_end(
    lines: list[str],
    start_index: int,
    language: str,
    max_iterations: int = cs.MAX_SCAN_ITERATIONS,
    fallback_window: int = cs.JS_FALLBACK_WINDOW,
) -> tuple[int, bool]:
    """
    Finds the line that closes the first brace opened at or after ``start_index``.

    Braces inside strings and comments are ignored.

    Args:
        lines (list[str]): All lines of the file.
        start_index (int): 0-based index of the definition line.
        language (str): The language tag, used to clean each line.
        max_iterations (int): Maximum number of lines examined.
        fallback_window (int): Lines past the start used when no end is found.

    Returns:
        tuple[int, bool]: The 0-based end index and whether it was resolved
        (False means the capped fallback was used).
    """
    depth = 0
    seen_open = False
    last_index = len(lines) - 1
    stop = min(len(lines), start_index + max_iterations)

    for index in range(start_index, stop):
        for char in clean_source_line(lines[index], language):
            if char == "{":
                depth += 1
                seen_open = True
            elif char == "}":
                depth -= 1
                if seen_open and depth == 0:
                    return index, True

    return min(start_index + fallback_window, last_index), False


def slice_code(lines: list[str], start_index: int, end_index: int) -> str:
    return cs.NEWLINE.join(lines[start_index : end_index + 1])


@lru_cache(maxsize=10000)
def _cached_decode_bytes(text_bytes: bytes) -> str:
    return text_bytes.decode(cs.ENCODING_UTF8, errors="replace")


def safe_decode_text(node: Node | None) -> str | None:
    """
    Safely decodes the text of a tree-sitter node.

    Args:
        node (Node | None): The node to decode.

    Returns:
        str | None: The decoded text, or None if the node has no text.
    """
    if node is None or (text_bytes := node.text) is None:
        return None
    if isinstance(text_bytes, bytes):
        return _cached_decode_bytes(text_bytes)
    return str(text_bytes)
