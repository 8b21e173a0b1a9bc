# Parser loading
IMPORTING_MODULE = "Importing tree-sitter grammar module {module}"
GRAMMAR_LOADED = "Loaded tree-sitter grammar for {lang}"
AST_STRATEGY_SELECTED = "JS/TS extraction strategy: AST (tree-sitter) for {langs}"
HEURISTIC_STRATEGY_SELECTED = "JS/TS extraction strategy: heuristic ({reason})"
HEURISTIC_FORCED = "disabled by configuration"

# Handler dispatch
HANDLER_REGISTERED = "Registered {handler} for {langs}"
UNSUPPORTED_LANGUAGE = "No handler for language '{lang}' ({path}); skipping"

# Extraction
RUBY_METHOD_FOUND = "Ruby {kind} {name} at {path}:{start}-{end}"
RUBY_END_CAPPED = "Could not resolve end of '{name}' in {path}:{line}; capped at {end}"
RUBY_END_FORCED = "'{name}' in {path}:{line} closed by the next definition at {end}"
JS_END_CAPPED = "Unbalanced braces for '{name}' in {path}:{line}; capped at {end}"
ERB_CALLS_FOUND = "ERB {path}: {count} call site(s) to {unique} method(s)"
AST_PARSE_ERRORS = "tree-sitter reported syntax errors in {path}; extraction continues"
FILE_ANALYSIS_FAILED = "Analysis of {path} failed: {error}"
DEFINITIONS_FAILED = "Definition scan of {path} failed: {error}"
RAILS_RESOLVED = "Rails resolution for {path}: {count} implicit method(s)"

# Pipeline
PHASE1_START = "Phase 1: scanning definitions in {count} file(s)"
PHASE1_DONE = "Phase 1 complete: {names} name(s) from {files} file(s)"
PHASE2_START = "Phase 2: analyzing {count} file(s) with {workers} worker(s)"
PHASE2_DONE = "Phase 2 complete: {methods} method(s), {calls} call site(s)"
GRAPH_BUILT = "Dependency graph: {edges} edge(s) from {methods} method(s)"
FUNC_TIMING = "{func} took {time:.2f} ms"

# Corpus loading
CORPUS_LOADED = "Loaded {count} source file(s) from {path}"
CORPUS_READ_FAILED = "Could not read {path}: {error}"
IGNORE_LOADED = "Loaded {exclude_count} exclude pattern(s) from {path}"
IGNORE_READ_FAILED = "Failed to read ignore file {path}: {error}"
