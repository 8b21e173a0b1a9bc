import json
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from callmap.analysis import AnalysisContext, CorpusAnalyzer, DependencyGraph
from callmap.core import constants as cs
from callmap.data_models.models import CorpusAnalysis
from callmap.infrastructure import exceptions as ex
from callmap.services.corpus_loader import load_corpus

from .config import settings

app = typer.Typer(
    name="callmap",
    help="Static method and call-dependency analysis for Ruby, ERB and JS/TS code.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def style(
    text: str, color: cs.Color, modifier: cs.StyleModifier = cs.StyleModifier.BOLD
) -> str:
    if modifier == cs.StyleModifier.NONE:
        return f"[{color}]{text}[/{color}]"
    return f"[{modifier} {color}]{text}[/{modifier} {color}]"


@app.callback()
def _global_options(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress messages and informational logs.",
        is_eager=True,
    ),
) -> None:
    """
    Global CLI callback to handle common options like 'quiet' mode.

    Args:
        quiet (bool): If True, suppresses non-error output.
    """
    settings.QUIET = quiet
    if quiet:
        logger.remove()
        logger.add(lambda msg: console.print(msg, end=""), level="ERROR")


def _info(msg: str) -> None:
    if not settings.QUIET:
        console.print(msg)


def _run_analysis(
    path: Path,
    workers: int | None,
    heuristic: bool,
    exclude: list[str] | None = None,
) -> CorpusAnalysis:
    try:
        resolved_workers = settings.resolve_workers(workers)
    except ValueError as e:
        console.print(style(cs.CLI_ERR_WORKERS.format(error=e), cs.Color.RED))
        raise typer.Exit(1) from e

    try:
        files = load_corpus(path, frozenset(exclude) if exclude else None)
    except ex.CallmapError as e:
        console.print(
            style(cs.CLI_ERR_PATH_NOT_FOUND.format(path=path), cs.Color.RED)
        )
        raise typer.Exit(1) from e

    if not files:
        _info(style(cs.CLI_MSG_NO_FILES.format(path=path), cs.Color.YELLOW))

    context = AnalysisContext.create(settings, use_ast=False if heuristic else None)
    _info(
        style(cs.CLI_MSG_ANALYZING.format(count=len(files), path=path), cs.Color.GREEN)
    )
    _info(
        style(
            cs.CLI_MSG_STRATEGY.format(engine=context.js_strategy.engine),
            cs.Color.CYAN,
            cs.StyleModifier.NONE,
        )
    )
    return CorpusAnalyzer(context, resolved_workers).analyze(files)


def _print_summary(analysis: CorpusAnalysis) -> None:
    stats = analysis.stats
    table = Table(title=cs.CLI_TABLE_SUMMARY, show_header=False)
    table.add_column(style="cyan")
    table.add_column(justify="right")
    table.add_row("Files", str(stats.total_files))
    table.add_row("Methods", str(stats.total_methods))
    table.add_row("Dependencies", str(stats.total_dependencies))
    table.add_row("Calls", str(stats.total_calls))
    table.add_row("Failed files", str(stats.failed_files))
    for language, count in sorted(stats.language_breakdown.items()):
        table.add_row(f"  {language}", str(count))
    console.print(table)


def _print_dependencies(analysis: CorpusAnalysis) -> None:
    if not analysis.dependencies:
        return
    table = Table(title=cs.CLI_TABLE_DEPENDENCIES)
    table.add_column("Caller", style="cyan")
    table.add_column("Callee", style="green")
    table.add_column("Type")
    table.add_column("Count", justify="right")
    for dep in analysis.dependencies[: cs.CLI_MAX_DEPENDENCY_ROWS]:
        table.add_row(
            f"{dep.source.name} ({dep.source.file_path})",
            f"{dep.target.name} ({dep.target.file_path})",
            str(dep.type),
            str(dep.count),
        )
    console.print(table)


def _print_failures(analysis: CorpusAnalysis) -> None:
    failing = [result for result in analysis.files if result.errors]
    if not failing:
        return
    table = Table(title=cs.CLI_TABLE_FAILURES)
    table.add_column("File", style="cyan")
    table.add_column("Severity")
    table.add_column("Message")
    for result in failing:
        for error in result.errors:
            table.add_row(result.path, str(error.severity), error.message)
    console.print(table)


@app.command(help="Analyze a directory and report methods and dependencies.")
def analyze(
    path: Path = typer.Argument(..., help="Repository root or single file."),
    as_json: bool = typer.Option(
        False, "--json", help="Print the full analysis as JSON."
    ),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Write the JSON analysis to a file."
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Worker threads per analysis phase."
    ),
    heuristic: bool = typer.Option(
        False, "--heuristic", help="Force the regex JS/TS strategy."
    ),
    exclude: list[str] | None = typer.Option(
        None, "--exclude", help="Additional exclude globs."
    ),
) -> None:
    """
    Analyzes every supported file under a path.

    Args:
        path (Path): Repository root or a single file.
        as_json (bool): Print the analysis as JSON instead of tables.
        output (Path | None): Optional JSON output file.
        workers (int | None): Worker thread override.
        heuristic (bool): Skip tree-sitter for JS/TS.
        exclude (list[str] | None): Extra exclude globs.
    """
    analysis = _run_analysis(path, workers, heuristic, exclude)
    payload = analysis.to_dict()

    if output:
        output.write_text(
            json.dumps(payload, indent=cs.JSON_INDENT, default=str),
            encoding=cs.ENCODING_UTF8,
        )
        _info(style(cs.CLI_MSG_WROTE_OUTPUT.format(path=output), cs.Color.GREEN))

    if as_json:
        typer.echo(json.dumps(payload, indent=cs.JSON_INDENT, default=str))
        return

    _print_summary(analysis)
    _print_dependencies(analysis)
    _print_failures(analysis)


@app.command(help="List the methods that call a given name.")
def callers(
    path: Path = typer.Argument(..., help="Repository root or single file."),
    name: str = typer.Argument(..., help="The called method name."),
    heuristic: bool = typer.Option(
        False, "--heuristic", help="Force the regex JS/TS strategy."
    ),
) -> None:
    analysis = _run_analysis(path, None, heuristic)
    graph = DependencyGraph(analysis.methods, analysis.dependencies)
    found = graph.callers_of(name)
    if not found:
        console.print(style(cs.CLI_MSG_NO_CALLERS.format(name=name), cs.Color.YELLOW))
        raise typer.Exit(1)

    table = Table(title=cs.CLI_TABLE_CALLERS.format(name=name))
    table.add_column("Caller", style="cyan")
    table.add_column("File")
    table.add_column("Lines", justify="right")
    for method in found:
        lines = [str(call.line) for call in method.calls if call.method_name == name]
        table.add_row(method.name, method.file_path, ", ".join(lines))
    console.print(table)


@app.command(help="Show where a name is defined.")
def definition(
    path: Path = typer.Argument(..., help="Repository root or single file."),
    name: str = typer.Argument(..., help="The definition name."),
    heuristic: bool = typer.Option(
        False, "--heuristic", help="Force the regex JS/TS strategy."
    ),
) -> None:
    analysis = _run_analysis(path, None, heuristic)
    method = DependencyGraph(analysis.methods, analysis.dependencies).definition_of(
        name
    )
    if method is None:
        console.print(
            style(cs.CLI_MSG_NO_DEFINITION.format(name=name), cs.Color.YELLOW)
        )
        raise typer.Exit(1)

    table = Table(title=cs.CLI_TABLE_DEFINITION.format(name=name), show_header=False)
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("File", method.file_path)
    table.add_row("Lines", f"{method.start_line}-{method.end_line}")
    table.add_row("Kind", str(method.kind))
    table.add_row("Visibility", str(method.visibility))
    if method.parameters:
        table.add_row("Parameters", ", ".join(p.name for p in method.parameters))
    console.print(table)


if __name__ == "__main__":
    app()
