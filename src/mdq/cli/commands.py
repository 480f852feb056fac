"""CLI command implementations"""

import sys
from typing import Annotated, Optional

import typer

from mdq.config import Settings, configure_logging, load_config
from mdq.core.errors import MdqError, QueryParseError
from mdq.core.pipeline import check_footnotes, read_inputs, run_query
from mdq.repl.engine import Repl


def _fail(msg: str, cause: Exception = None, code: int = 1) -> None:
    """Print a user-friendly error to stderr and exit."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(code)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then set up logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e), code=2)
    configure_logging(settings.log_level)
    return settings


def _read(files: Optional[list[str]]) -> str:
    try:
        return read_inputs(files or [])
    except RuntimeError as e:
        _fail(str(e), code=2)


def query_cmd(
    selector: Annotated[str, typer.Argument(help="Selector query, e.g. '# Section | [](*)' or '- [ ] todo'")],
    files: Annotated[Optional[list[str]], typer.Argument(help="Markdown files or directories; '-' or none reads stdin")] = None,
    output: Annotated[Optional[str], typer.Option("--output", help="Output format: md, json or plain")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    enhanced: Annotated[Optional[bool], typer.Option("--enhanced-errors/--plain-errors", help="Add suggestions to query errors")] = None,
    breaks: Annotated[Optional[bool], typer.Option("--add-breaks/--no-breaks", help="Separate md results with thematic breaks")] = None,
    ):
    """Select elements from markdown documents. Exits 1 when nothing matches."""
    settings = _settings(overrides={
        "output_format": output, "parser_config": parser,
        "enhanced_errors": enhanced, "add_breaks": breaks,
    })
    markdown = _read(files)

    try:
        result = run_query(markdown, selector, settings)
    except QueryParseError as e:
        if settings.enhanced_errors:
            typer.echo(e.to_string_with_suggestions(selector), err=True)
        else:
            typer.echo(e.to_string(selector), err=True)
        raise typer.Exit(2)
    except MdqError as e:
        _fail(str(e), code=2)

    if result.count == 0:
        raise typer.Exit(1)
    typer.echo(result.output)


def check_cmd(
    files: Annotated[Optional[list[str]], typer.Argument(help="Markdown files or directories; '-' or none reads stdin")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Report footnote references that have no definition. Exits 1 if any are found."""
    settings = _settings(overrides={"parser_config": parser})
    markdown = _read(files)
    try:
        unresolved = check_footnotes(markdown, settings.parser_config)
    except MdqError as e:
        _fail(str(e), code=2)

    if not unresolved:
        typer.echo("All footnote references resolved.")
        return
    for label in unresolved:
        typer.echo(f"  unresolved: [^{label}]")
    typer.echo(f"{len(unresolved)} unresolved footnote reference(s)")
    raise typer.Exit(1)


def repl_cmd(
    file: Annotated[Optional[str], typer.Argument(help="Markdown file to load at start; '-' reads stdin")] = None,
    output: Annotated[Optional[str], typer.Option("--output", "-o", help="Output format: md, json or plain")] = None,
    ):
    """Start an interactive query session."""
    settings = _settings(overrides={"output_format": output})
    repl = Repl(settings)
    if file:
        try:
            if file == "-":
                repl.session.load_text(sys.stdin.read())
            else:
                repl.session.load_file(file)
        except (OSError, UnicodeDecodeError) as e:
            _fail(f"Failed to read file {file}", e)
        except MdqError as e:
            _fail("Failed to load document", e)
    repl.run(sys.stdin)
