from __future__ import annotations

JAVASCRIPT_KEYWORDS = frozenset(
    {
        "if",
        "else",
        "switch",
        "case",
        "default",
        "while",
        "for",
        "do",
        "break",
        "continue",
        "return",
        "function",
        "class",
        "constructor",
        "static",
        "get",
        "set",
        "async",
        "await",
        "var",
        "let",
        "const",
        "try",
        "catch",
        "finally",
        "throw",
        "new",
        "this",
        "super",
        "typeof",
        "instanceof",
        "in",
        "of",
        "delete",
        "void",
        "true",
        "false",
        "null",
        "undefined",
        "import",
        "export",
        "from",
        "as",
        "with",
        "debugger",
        "enum",
        "implements",
        "interface",
        "package",
        "private",
        "protected",
        "public",
        "yield",
        "extends",
    }
)

TYPESCRIPT_KEYWORDS = frozenset(
    {
        "type",
        "namespace",
        "module",
        "declare",
        "abstract",
        "readonly",
        "keyof",
        "infer",
        "satisfies",
    }
)

JAVASCRIPT_BUILTINS = frozenset(
    {
        # console
        "log",
        "info",
        "warn",
        "error",
        "debug",
        "trace",
        "assert",
        "dir",
        "table",
        # globals
        "parseInt",
        "parseFloat",
        "isNaN",
        "isFinite",
        "encodeURI",
        "encodeURIComponent",
        "decodeURI",
        "decodeURIComponent",
        "escape",
        "unescape",
        "eval",
        "parse",
        "stringify",
        # timers
        "setTimeout",
        "setInterval",
        "clearTimeout",
        "clearInterval",
        "setImmediate",
        "clearImmediate",
        # arrays
        "push",
        "pop",
        "shift",
        "unshift",
        "slice",
        "splice",
        "concat",
        "join",
        "reverse",
        "sort",
        "indexOf",
        "lastIndexOf",
        "forEach",
        "map",
        "filter",
        "reduce",
        "reduceRight",
        "some",
        "every",
        "find",
        "findIndex",
        "includes",
        "flat",
        "flatMap",
        # strings
        "charAt",
        "charCodeAt",
        "substring",
        "substr",
        "toLowerCase",
        "toUpperCase",
        "trim",
        "trimStart",
        "trimEnd",
        "split",
        "replace",
        "match",
        "search",
        "startsWith",
        "endsWith",
        "repeat",
        "padStart",
        "padEnd",
        # objects
        "hasOwnProperty",
        "isPrototypeOf",
        "propertyIsEnumerable",
        "toString",
        "valueOf",
        "keys",
        "values",
        "entries",
        "assign",
        "create",
        "defineProperty",
        "freeze",
        "seal",
        # math
        "abs",
        "ceil",
        "floor",
        "round",
        "max",
        "min",
        "pow",
        "sqrt",
        "random",
        "sin",
        "cos",
        "tan",
        # dates
        "getTime",
        "getDate",
        "getDay",
        "getMonth",
        "getFullYear",
        "getHours",
        "getMinutes",
        "getSeconds",
        "setDate",
        "setMonth",
        "setFullYear",
        "setHours",
        "setMinutes",
        "setSeconds",
        "toISOString",
        # promises
        "then",
        "resolve",
        "reject",
        "all",
        "race",
        "allSettled",
        # DOM
        "addEventListener",
        "removeEventListener",
        "getElementById",
        "querySelector",
        "querySelectorAll",
        "createElement",
        "appendChild",
        "removeChild",
        "innerHTML",
        "textContent",
        "setAttribute",
        "getAttribute",
        "removeAttribute",
        "classList",
        "style",
    }
)

JAVASCRIPT_FRAMEWORK_METHODS = frozenset(
    {
        # React hooks
        "useState",
        "useEffect",
        "useContext",
        "useReducer",
        "useCallback",
        "useMemo",
        "useRef",
        "useLayoutEffect",
        "useImperativeHandle",
        "useDebugValue",
        # React class components
        "render",
        "setState",
        "forceUpdate",
        "componentDidMount",
        "componentDidUpdate",
        "componentWillUnmount",
        "shouldComponentUpdate",
        "getSnapshotBeforeUpdate",
        # Jest
        "describe",
        "it",
        "test",
        "expect",
        "beforeEach",
        "afterEach",
        "beforeAll",
        "afterAll",
        "jest",
        "mock",
        "spyOn",
        "mockReturnValue",
        "mockImplementation",
        # Express and HTTP clients
        "post",
        "put",
        "patch",
        "use",
        "listen",
        "send",
        "json",
        "status",
        "redirect",
        "cookie",
        "clearCookie",
        "request",
        "interceptors",
        # lodash
        "isEmpty",
        "isArray",
        "isObject",
        "isString",
        "isNumber",
        "isFunction",
        "isUndefined",
        "cloneDeep",
        "merge",
        "pick",
        "omit",
        "groupBy",
        "sortBy",
        "uniq",
        "flatten",
        # Node
        "require",
        "exports",
        "__dirname",
        "__filename",
        "process",
        "Buffer",
        # ORM
        "findOne",
        "findAll",
        "findById",
        "where",
        "include",
    }
)

JAVASCRIPT_CONTROL_PATTERNS = frozenset(
    {"if", "else", "while", "for", "switch", "case", "try", "catch", "finally", "with"}
)

