from __future__ import annotations

RUBY_KEYWORDS = frozenset(
    {
        # control flow
        "if",
        "else",
        "elsif",
        "unless",
        "case",
        "when",
        "while",
        "until",
        "for",
        "break",
        "next",
        "redo",
        "retry",
        "return",
        # definitions
        "def",
        "class",
        "module",
        "alias",
        "undef",
        # exceptions
        "begin",
        "rescue",
        "ensure",
        "raise",
        "yield",
        "super",
        "self",
        "nil",
        "true",
        "false",
        # visibility
        "private",
        "protected",
        "public",
        # blocks
        "do",
        "end",
        "in",
        "then",
        "and",
        "or",
        "not",
        "__LINE__",
        "__FILE__",
        "__ENCODING__",
    }
)

RUBY_BUILTINS = frozenset(
    {
        "puts",
        "print",
        "p",
        "gets",
        "getc",
        "putc",
        "printf",
        "sprintf",
        "require",
        "require_relative",
        "load",
        "autoload",
        "include",
        "extend",
        "prepend",
        "defined?",
        "respond_to?",
        "kind_of?",
        "instance_of?",
        "is_a?",
        "local_variables",
        "instance_variables",
        "class_variables",
        "global_variables",
        "eval",
        "instance_eval",
        "class_eval",
        "module_eval",
        "system",
        "exec",
        "spawn",
        "fork",
        "exit",
        "exit!",
        "abort",
        "length",
        "size",
        "empty?",
        "nil?",
        "to_s",
        "to_i",
        "to_f",
        "to_a",
        "to_h",
        "to_sym",
    }
)

RUBY_CRUD_METHODS = frozenset(
    {
        "find",
        "find_by",
        "where",
        "select",
        "create",
        "update",
        "delete",
        "destroy",
        "save",
        "save!",
        "reload",
        "exists?",
        "count",
        "first",
        "last",
        "all",
    }
)

RUBY_CONTROL_PATTERNS = frozenset(
    {"if", "unless", "while", "until", "case", "when", "for", "begin", "rescue"}
)

RAILS_CONTROLLER_METHODS = frozenset(
    {
        "render",
        "redirect_to",
        "redirect_back",
        "head",
        "send_data",
        "send_file",
        "before_action",
        "after_action",
        "around_action",
        "skip_before_action",
        "authenticate_user!",
        "current_user",
        "user_signed_in?",
        "params",
        "request",
        "response",
        "session",
        "cookies",
        "flash",
        "url_for",
        "link_to",
        "form_with",
        "form_for",
        "show",
        "edit",
        "create",
        "update",
        "destroy",
    }
)

RAILS_MODEL_METHODS = frozenset(
    {
        "find",
        "find_by",
        "where",
        "all",
        "first",
        "last",
        "count",
        "exists?",
        "create",
        "create!",
        "new",
        "build",
        "save",
        "save!",
        "update",
        "update!",
        "destroy",
        "delete",
        "reload",
        "valid?",
        "invalid?",
        "errors",
        "includes",
        "joins",
        "left_joins",
        "order",
        "group",
        "having",
        "limit",
        "offset",
        "select",
        "distinct",
        "pluck",
        "sum",
        "maximum",
        "minimum",
        "average",
        "ransack",
        "ransackable_attributes",
        "ransackable_associations",
    }
)

RAILS_HELPER_METHODS = frozenset(
    {
        "link_to",
        "image_tag",
        "content_for",
        "capture",
        "safe_join",
        "raw",
        "html_safe",
        "strip_tags",
        "truncate",
        "number_to_currency",
        "time_ago_in_words",
        "distance_of_time_in_words",
    }
)

# Builtins that are still meaningful calls inside templates.
ERB_ALLOWED_BUILTINS = frozenset(
    {
        "t",
        "translate",
        "l",
        "localize",
        "h",
        "html_escape",
        "j",
        "escape_javascript",
        "raw",
        "html_safe",
        "pluralize",
        "singularize",
        "humanize",
        "titleize",
        "time_ago_in_words",
        "number_to_currency",
        "truncate",
        "simple_format",
    }
)

RAILS_STANDARD_ACTIONS = frozenset(
    {"index", "show", "new", "edit", "create", "update", "destroy"}
)

RUBY_FRAMEWORK_ALLOWLIST = (
    RAILS_CONTROLLER_METHODS - RAILS_STANDARD_ACTIONS
) | RAILS_HELPER_METHODS

# ActiveRecord verbs count as calls only with an explicit receiver (`User.where`).
RUBY_RECEIVER_ALLOWLIST = RUBY_CRUD_METHODS | RAILS_MODEL_METHODS
