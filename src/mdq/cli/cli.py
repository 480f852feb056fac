"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdq.cli.commands import check_cmd, query_cmd, repl_cmd


app = typer.Typer(name="mdq", no_args_is_help=True, help="Query markdown documents by structure")

# No short options on query: unknown "-..." tokens such as "- item" pass through as the selector.
app.command(name="query", context_settings={"ignore_unknown_options": True})(query_cmd)
app.command(name="check")(check_cmd)
app.command(name="repl")(repl_cmd)
