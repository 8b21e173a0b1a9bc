import re

from callmap.core import constants as cs
from callmap.data_models.models import CallSite, Method
from callmap.parsers.languages.registry import LanguageVocabulary

CUSTOM_HOOK_NAME = re.compile(r"^use[A-Z]")
JSX_RETURN = re.compile(r"return\s*\(?\s*<[A-Za-z>]")
JSX_CLASS_NAME = "className="
HOOK_BINDING = re.compile(r"const\s+(\w+)\s*=")


def is_custom_hook_name(name: str) -> bool:
    return bool(CUSTOM_HOOK_NAME.match(name))


def looks_like_component(name: str, code: str) -> bool:
    """
    A capitalized function whose body renders markup.

    Args:
        name (str): The function name.
        code (str): The full code slice of the function.

    Returns:
        bool: True if the name starts upper-case and the body contains a JSX
        return or a ``className=`` attribute.
    """
    if not name[:1].isupper():
        return False
    return bool(JSX_RETURN.search(code)) or JSX_CLASS_NAME in code


def classify_function_kind(name: str, code: str) -> cs.MethodKind:
    if is_custom_hook_name(name):
        return cs.MethodKind.CUSTOM_HOOK
    if looks_like_component(name, code):
        return cs.MethodKind.COMPONENT
    return cs.MethodKind.FUNCTION


def hook_binding_name(line: str) -> str | None:
    """Name bound by ``const name = useCallback(...)`` on the call's line."""
    if match := HOOK_BINDING.search(line):
        return match.group(1)
    return None


def strip_quotes(text: str) -> str:
    return text.strip().strip("'\"`")


def format_import_name(elements: list[str], source: str) -> str:
    if elements:
        return cs.IMPORT_NAMED.format(names=", ".join(elements), source=source)
    return cs.IMPORT_BARE.format(source=source)


def format_export_clause(elements: list[str], source: str | None) -> str:
    if not elements:
        return cs.EXPORT_REEXPORT
    names = ", ".join(elements)
    if source:
        return cs.EXPORT_CLAUSE_FROM.format(names=names, source=source)
    return cs.EXPORT_CLAUSE.format(names=names)


def format_specifier(name: str, alias: str | None) -> str:
    if alias and alias != name:
        return f"{name} as {alias}"
    return name


def import_bindings(methods: list[Method]) -> dict[str, int]:
    """
    Maps every locally bound import name to the line of its import statement.

    Args:
        methods (list[Method]): Methods of one file, including import records.

    Returns:
        dict[str, int]: Local name to 1-indexed import line.
    """
    bindings: dict[str, int] = {}
    for method in methods:
        if method.kind != cs.MethodKind.IMPORT:
            continue
        for parameter in method.parameters:
            bindings.setdefault(parameter.name, method.start_line)
    return bindings


def local_definition_names(methods: list[Method]) -> set[str]:
    return {method.name for method in methods if method.is_definition}


def accept_call(
    name: str,
    line: int,
    known_names: frozenset[str] | set[str],
    imports: dict[str, int],
    vocabulary: LanguageVocabulary,
    context: str = "",
) -> CallSite | None:
    """
    Applies the registry gate to one JS/TS callee candidate.

    Imported local names count as known. A call to one of them records the
    import statement's line.
    """
    if not vocabulary.accepts_call(name, known_names, has_receiver=False) and not (
        name in imports and not vocabulary.is_reserved(name)
    ):
        return None
    return CallSite(
        method_name=name,
        line=line,
        context=context,
        import_source_line=imports.get(name),
    )


def is_valid_definition_name(name: str, vocabulary: LanguageVocabulary) -> bool:
    return bool(name) and not (
        vocabulary.is_keyword(name)
        or vocabulary.is_builtin(name)
        or vocabulary.is_control_pattern(name)
    )
