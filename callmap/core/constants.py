from __future__ import annotations

from enum import StrEnum


class SupportedLanguage(StrEnum):
    RUBY = "ruby"
    ERB = "erb"
    JS = "javascript"
    TS = "typescript"
    TSX = "tsx"
    YAML = "yaml"
    MARKDOWN = "markdown"
    UNKNOWN = "unknown"


class MethodKind(StrEnum):
    FUNCTION = "function"
    METHOD = "method"
    CLASS_METHOD = "class_method"
    INTERFACE_METHOD = "interface_method"
    COMPONENT = "component"
    CUSTOM_HOOK = "custom_hook"
    TYPE_ALIAS = "type_alias"
    INTERFACE = "interface"
    ENUM = "enum"
    IMPORT = "import"
    EXPORT = "export"
    ERB_CALL = "erb_call"


class Visibility(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


class ParameterKind(StrEnum):
    KEYWORD = "keyword"
    SPLAT = "splat"
    BLOCK = "block"
    REST = "rest"


class DependencyType(StrEnum):
    INTERNAL = "internal"
    EXTERNAL = "external"


class DiagnosticKind(StrEnum):
    UNSUPPORTED_LANGUAGE = "unsupported_language"
    MALFORMED_CONSTRUCT = "malformed_construct"
    RUNTIME = "runtime"


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Color(StrEnum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"


JS_TS_LANGUAGES = frozenset(
    {SupportedLanguage.JS, SupportedLanguage.TS, SupportedLanguage.TSX}
)
TS_LANGUAGES = frozenset({SupportedLanguage.TS, SupportedLanguage.TSX})

# Kinds that enter the definition registry and can be dependency targets.
DEFINITION_KINDS = frozenset(
    {
        MethodKind.FUNCTION,
        MethodKind.METHOD,
        MethodKind.CLASS_METHOD,
        MethodKind.COMPONENT,
        MethodKind.CUSTOM_HOOK,
        MethodKind.INTERFACE,
        MethodKind.TYPE_ALIAS,
        MethodKind.INTERFACE_METHOD,
        MethodKind.ENUM,
    }
)

LANGUAGE_EXTENSIONS: dict[str, SupportedLanguage] = {
    ".rb": SupportedLanguage.RUBY,
    ".rake": SupportedLanguage.RUBY,
    ".erb": SupportedLanguage.ERB,
    ".js": SupportedLanguage.JS,
    ".jsx": SupportedLanguage.JS,
    ".mjs": SupportedLanguage.JS,
    ".cjs": SupportedLanguage.JS,
    ".ts": SupportedLanguage.TS,
    ".mts": SupportedLanguage.TS,
    ".tsx": SupportedLanguage.TSX,
    ".yml": SupportedLanguage.YAML,
    ".yaml": SupportedLanguage.YAML,
    ".md": SupportedLanguage.MARKDOWN,
}

IGNORE_DIRS = frozenset(
    {
        ".git",
        "node_modules",
        "vendor",
        "tmp",
        "log",
        "dist",
        "build",
        "coverage",
        ".next",
        "__pycache__",
    }
)

ENCODING_UTF8 = "utf-8"
NEWLINE = "\n"

# Scanning bounds
MAX_SCAN_ITERATIONS = 1000
RUBY_FALLBACK_WINDOW = 100
JS_FALLBACK_WINDOW = 50
PARAM_SPLIT_MAX_LENGTH = 100_000
PARAM_SPLIT_MAX_DEPTH = 100

# Engine names reported in analysis metadata
ENGINE_RUBY = "ruby-regex"
ENGINE_ERB = "erb-regex"
ENGINE_AST_SUFFIX = "ast"
ENGINE_REGEX_SUFFIX = "regex"
ENGINE_NONE = "none"

# Synthetic method names
ERB_FILE_NAME = "[ERB File: {basename}]"
ERB_FALLBACK_BASENAME = "erb_file"
ERB_SUFFIX = ".erb"
ERB_FORMAT_SUFFIXES = (".html", ".xml", ".json", ".js", ".turbo_stream")
IMPORT_NAMED = "[Import: {{{names}}} from '{source}']"
IMPORT_BARE = "[Import: {source}]"
EXPORT_NAMED = "[Export: {name}]"
EXPORT_CLAUSE = "[Export: {{{names}}}]"
EXPORT_CLAUSE_FROM = "[Export: {{{names}}} from '{source}']"
EXPORT_REEXPORT = "[Export: re-export]"
EXPORT_DECLARATION = "[Export Declaration]"
DEFAULT_EXPORT = "[Default Export]"

HOOK_CALLBACK_NAMES = frozenset({"useCallback", "useMemo", "useEffect"})

# Ruby syntax markers
RUBY_PRIVATE = "private"
RUBY_PUBLIC = "public"
RUBY_PROTECTED = "protected"
RUBY_END = "end"

# tree-sitter modules and their language attributes
TREE_SITTER_JS_MODULE = "tree_sitter_javascript"
TREE_SITTER_TS_MODULE = "tree_sitter_typescript"
TS_LANG_ATTR_JS = "language"
TS_LANG_ATTR_TS = "language_typescript"
TS_LANG_ATTR_TSX = "language_tsx"

# tree-sitter node types
TS_FUNCTION_DECLARATION = "function_declaration"
TS_GENERATOR_FUNCTION_DECLARATION = "generator_function_declaration"
TS_CLASS_DECLARATION = "class_declaration"
TS_ABSTRACT_CLASS_DECLARATION = "abstract_class_declaration"
TS_CLASS = "class"
TS_METHOD_DEFINITION = "method_definition"
TS_FIELD_DEFINITION = "field_definition"
TS_PUBLIC_FIELD_DEFINITION = "public_field_definition"
TS_PRIVATE_PROPERTY_IDENTIFIER = "private_property_identifier"
TS_LEXICAL_DECLARATION = "lexical_declaration"
TS_VARIABLE_DECLARATION = "variable_declaration"
TS_VARIABLE_DECLARATOR = "variable_declarator"
TS_ARROW_FUNCTION = "arrow_function"
TS_FUNCTION_EXPRESSION = "function_expression"
TS_FUNCTION = "function"
TS_CALL_EXPRESSION = "call_expression"
TS_MEMBER_EXPRESSION = "member_expression"
TS_IDENTIFIER = "identifier"
TS_IMPORT_STATEMENT = "import_statement"
TS_IMPORT_CLAUSE = "import_clause"
TS_NAMED_IMPORTS = "named_imports"
TS_IMPORT_SPECIFIER = "import_specifier"
TS_NAMESPACE_IMPORT = "namespace_import"
TS_EXPORT_STATEMENT = "export_statement"
TS_EXPORT_CLAUSE = "export_clause"
TS_EXPORT_SPECIFIER = "export_specifier"
TS_TYPE_ALIAS_DECLARATION = "type_alias_declaration"
TS_INTERFACE_DECLARATION = "interface_declaration"
TS_METHOD_SIGNATURE = "method_signature"
TS_ENUM_DECLARATION = "enum_declaration"
TS_ACCESSIBILITY_MODIFIER = "accessibility_modifier"
TS_STATIC = "static"
TS_DEFAULT = "default"

FIELD_NAME = "name"
FIELD_VALUE = "value"
FIELD_BODY = "body"
FIELD_PARAMETERS = "parameters"
FIELD_RETURN_TYPE = "return_type"
FIELD_FUNCTION = "function"
FIELD_PROPERTY = "property"
FIELD_SOURCE = "source"
FIELD_ALIAS = "alias"
FIELD_PARAMETER = "parameter"
FIELD_DECLARATION = "declaration"
FIELD_ARGUMENTS = "arguments"

ACCESS_PRIVATE = "private"

IGNORE_FILENAME = ".callmapignore"


class StyleModifier(StrEnum):
    BOLD = "bold"
    DIM = "dim"
    NONE = ""


# CLI output
CLI_MSG_ANALYZING = "Analyzing {count} file(s) under {path}"
CLI_MSG_STRATEGY = "JS/TS strategy: {engine}"
CLI_MSG_NO_FILES = "No supported source files found under {path}"
CLI_MSG_NO_DEFINITION = "No definition named '{name}'"
CLI_MSG_NO_CALLERS = "No callers of '{name}'"
CLI_MSG_WROTE_OUTPUT = "Wrote analysis to {path}"
CLI_ERR_PATH_NOT_FOUND = "Path not found: {path}"
CLI_ERR_WORKERS = "Invalid worker count: {error}"
CLI_TABLE_SUMMARY = "Summary"
CLI_TABLE_DEPENDENCIES = "Dependencies"
CLI_TABLE_CALLERS = "Callers of {name}"
CLI_TABLE_DEFINITION = "Definition of {name}"
CLI_TABLE_FAILURES = "Files with diagnostics"
CLI_MAX_DEPENDENCY_ROWS = 50
JSON_INDENT = 2
