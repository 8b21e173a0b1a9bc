from __future__ import annotations

import re

from loguru import logger

from callmap.core import constants as cs
from callmap.core import logs as ls
from callmap.data_models.models import CallSite, Method, SourceFile
from callmap.parsers.languages.registry import get_vocabulary

from ..utils import clean_source_line
from .ruby_parser import find_ruby_calls_in_line

ERB_TAG = re.compile(r"<%(?!#)=?-?\s*(.*?)\s*-?%>")


def template_display_name(basename: str) -> str:
    """`show.html.erb` -> `show`: drops `.erb`, then one format suffix."""
    name = basename.removesuffix(cs.ERB_SUFFIX)
    for suffix in cs.ERB_FORMAT_SUFFIXES:
        if name.endswith(suffix):
            return name.removesuffix(suffix)
    return name


class ErbParser:
    """Finds Ruby call sites inside ERB template tags.

    Templates never define methods. Everything found in one file is gathered
    into a single synthetic ``erb_call`` method spanning the whole file,
    followed by one display record per distinct callee.
    """

    language = cs.SupportedLanguage.ERB

    def __init__(self) -> None:
        self.vocabulary = get_vocabulary(self.language)

    def extract_calls(
        self, lines: list[str], known_names: frozenset[str] | set[str]
    ) -> list[CallSite]:
        calls: list[CallSite] = []
        for index, line in enumerate(lines):
            seen: set[str] = set()
            for tag in ERB_TAG.finditer(line):
                body = clean_source_line(tag.group(1), cs.SupportedLanguage.RUBY)
                if not body:
                    continue
                for call in find_ruby_calls_in_line(
                    body, index + 1, known_names, self.vocabulary, line.strip()
                ):
                    if call.method_name not in seen:
                        seen.add(call.method_name)
                        calls.append(call)
        return calls

    def extract_methods(
        self, file: SourceFile, known_names: frozenset[str] | set[str]
    ) -> list[Method]:
        lines = file.lines
        calls = self.extract_calls(lines, known_names)
        if not calls:
            return []

        basename = template_display_name(file.basename) or cs.ERB_FALLBACK_BASENAME
        file_method = Method(
            name=cs.ERB_FILE_NAME.format(basename=basename),
            kind=cs.MethodKind.ERB_CALL,
            file_path=file.path,
            start_line=1,
            end_line=max(file.total_lines, 1),
            code=file.content,
            calls=calls,
        )

        by_callee: dict[str, list[int]] = {}
        for call in calls:
            by_callee.setdefault(call.method_name, []).append(call.line)

        display_records = [
            Method(
                name=name,
                kind=cs.MethodKind.ERB_CALL,
                file_path=file.path,
                start_line=min(call_lines),
                end_line=max(call_lines),
                code=cs.NEWLINE.join(lines[line - 1] for line in call_lines),
            )
            for name, call_lines in by_callee.items()
        ]

        logger.debug(
            ls.ERB_CALLS_FOUND.format(
                path=file.path, count=len(calls), unique=len(by_callee)
            )
        )
        return [file_method, *display_records]
