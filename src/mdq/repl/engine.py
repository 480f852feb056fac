"""REPL loop: read a line, dispatch the command, print the result"""

from typing import Callable, TextIO

import typer

from mdq.config import Settings
from mdq.core.emit import render
from mdq.core.errors import MdqError, QueryParseError
from mdq.core.query.parse import parse_query
from mdq.repl.commands import HELP_TEXT, CommandKind, ReplCommand
from mdq.repl.session import ReplSession


PROMPT = "mdq> "
WELCOME = (
    "mdq REPL - Interactive Markdown Query Tool\n"
    "Type '.help' for available commands, or enter a selector query\n"
    "Press Ctrl+D or type '.exit' to quit\n"
)


class Repl:
    """Dispatch REPL commands against a ReplSession, writing through `echo`."""

    def __init__(self, settings: Settings, echo: Callable[..., None] = typer.echo):
        self.session = ReplSession(settings)
        self.echo = echo

    def run(self, stream: TextIO) -> None:
        """Read commands from stream until EOF or .exit."""
        self.echo(WELCOME)
        while True:
            self.echo(PROMPT, nl=False)
            line = stream.readline()
            if not line:
                self.echo("")
                break
            if not line.strip():
                continue
            if not self.handle(line):
                break
        self.echo("Goodbye!")

    def handle(self, line: str) -> bool:
        """Execute one input line; return False when the REPL should stop."""
        command = ReplCommand.parse(line)
        if command.kind == CommandKind.exit:
            return False
        getattr(self, f"_do_{command.kind.value}")(command)
        return True

    # --- command handlers ---

    def _do_query(self, command: ReplCommand) -> None:
        session = self.session
        if not session.has_document():
            self.echo("Error: No document loaded. Use .load <file> first.")
            return
        try:
            query = parse_query(command.arg)
        except QueryParseError as e:
            text = e.to_string_with_suggestions(command.arg) if session.settings.enhanced_errors else str(e)
            self.echo(f"Error parsing selector:\n{text}")
            return

        nodes = query.find_nodes(session.document)
        if not nodes:
            self.echo("No elements matched the selector")
            return
        self.echo(render(nodes, session.document, session.output_format, session.settings.add_breaks))

    def _do_load(self, command: ReplCommand) -> None:
        try:
            self.session.load_file(command.arg)
        except (OSError, UnicodeDecodeError) as e:
            self.echo(f"Error loading document: {e}")
            return
        except MdqError as e:
            self.echo(f"Error parsing document: {e}")
            return
        self.echo(f"Document loaded successfully: {command.arg}")
        self.echo(self.session.info())

    def _do_reload(self, command: ReplCommand) -> None:
        try:
            self.session.reload()
        except (OSError, UnicodeDecodeError, MdqError) as e:
            self.echo(f"Error reloading document: {e}")
            return
        self.echo("Document reloaded successfully")
        self.echo(self.session.info())

    def _do_format(self, command: ReplCommand) -> None:
        self.session.output_format = command.arg
        self.echo(f"Output format set to: {command.arg}")

    def _do_set(self, command: ReplCommand) -> None:
        self.session.variables[command.arg] = command.value
        self.echo(f"Set variable '{command.arg}' = '{command.value}'")

    def _do_get(self, command: ReplCommand) -> None:
        if command.arg in self.session.variables:
            self.echo(f"{command.arg} = {self.session.variables[command.arg]}")
        else:
            self.echo(f"Variable '{command.arg}' not found")

    def _do_vars(self, command: ReplCommand) -> None:
        if not self.session.variables:
            self.echo("No variables set")
            return
        self.echo("Variables:")
        for name, value in sorted(self.session.variables.items()):
            self.echo(f"  {name} = {value}")

    def _do_help(self, command: ReplCommand) -> None:
        self.echo(HELP_TEXT)

    def _do_info(self, command: ReplCommand) -> None:
        self.echo(self.session.info())

    def _do_clear(self, command: ReplCommand) -> None:
        self.session.clear()
        self.echo("Document cleared")

    def _do_unknown(self, command: ReplCommand) -> None:
        self.echo(f"Unknown command: {command.arg}")
        self.echo("Use .help for available commands")
