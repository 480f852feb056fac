"""REPL command parsing: dot-commands and selector queries"""

from dataclasses import dataclass
from enum import Enum


class CommandKind(str, Enum):
    query = "query"
    load = "load"
    reload = "reload"
    format = "format"
    set = "set"
    get = "get"
    vars = "vars"
    help = "help"
    info = "info"
    clear = "clear"
    exit = "exit"
    unknown = "unknown"


FORMAT_ALIASES = {"md": "md", "markdown": "md", "json": "json", "plain": "plain"}

NO_ARG_COMMANDS = {
    "reload": CommandKind.reload,
    "vars": CommandKind.vars,
    "variables": CommandKind.vars,
    "help": CommandKind.help,
    "info": CommandKind.info,
    "clear": CommandKind.clear,
    "exit": CommandKind.exit,
    "quit": CommandKind.exit,
}

HELP_TEXT = """\
mdq REPL - Interactive Markdown Query Tool

Available commands:
  <selector>     Execute a selector query
  .load <file>   Load a document from file
  .reload        Reload the current document
  .format <fmt>  Change output format (md|json|plain)
  .set <n> <v>   Set a variable
  .get <n>       Get a variable value
  .vars          List all variables
  .info          Show document information
  .clear         Clear current document
  .help          Show this help
  .exit          Exit REPL

Selector examples:
  # Section      Sections with a title containing 'Section'
  - List item    List items containing 'List item'
  [text](url)    Links with display text 'text'
  [^note]        Footnote definitions labelled 'note'
  > Quote        Blockquotes containing 'Quote'
  ```python      Code blocks with language 'python'"""


@dataclass(frozen=True)
class ReplCommand:
    """A parsed REPL input line."""
    kind: CommandKind
    arg: str = ""
    value: str = ""

    @classmethod
    def parse(cls, line: str) -> "ReplCommand":
        """Lines starting with '.' are commands; anything else is a selector query."""
        line = line.strip()
        if not line:
            return cls(CommandKind.unknown, line)
        if not line.startswith('.'):
            return cls(CommandKind.query, line)

        parts = line[1:].split()
        if not parts:
            return cls(CommandKind.unknown, line)
        name, args = parts[0], parts[1:]

        if name in NO_ARG_COMMANDS and not args:
            return cls(NO_ARG_COMMANDS[name])
        if name == "load" and len(args) == 1:
            return cls(CommandKind.load, args[0])
        if name == "format" and len(args) == 1 and args[0] in FORMAT_ALIASES:
            return cls(CommandKind.format, FORMAT_ALIASES[args[0]])
        if name == "set" and len(args) >= 2:
            return cls(CommandKind.set, args[0], " ".join(args[1:]))
        if name == "get" and len(args) == 1:
            return cls(CommandKind.get, args[0])
        return cls(CommandKind.unknown, line)
