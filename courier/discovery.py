"""
Command discovery from docstrings.

Handler modules declare their commands in docstrings, so no registry has to be
maintained by hand:

    def upload(cli, argv):
        '''
        Upload the build to the remote server.

        @command
        @option h Remote host|host|string
        @option v Show every transferred file|verbose
        '''

- "@command [name]" marks the docstring of the module or of a top-level
  (async) function. The brief is the first paragraph.
- "@option <char> <description>[|alias[|type[|default]]]" adds an option.
- Without an explicit name the command is named after the function (kebab-cased);
  a module docstring, or a function named like its file, declares the command
  of the file itself.

Sources are parsed with ast and never executed.
"""
import ast
import logging
import os
import re

from .faults import MalformedOptionError
from .options import Option
from .utils import *

logger = logging.getLogger(__name__)

_COMMAND = re.compile(r"@command([^\n\r]*)")
_OPTION = re.compile(r"^[ \t]*@option[ \t]+(\S+)[ \t]+([^\n\r]*)$", re.MULTILINE)


def _brief(docstring):
    paragraph = re.split(r"\n\s*\n", docstring.strip(), maxsplit=1)[0]
    lines = [line.strip() for line in paragraph.splitlines() if not line.strip().startswith("@")]
    return " ".join(line for line in lines if line)


def parse_docstring(docstring, /):
    """
    Read one docstring.

    Returns
    - tuple[str, dict] | None: the explicit command name ("" when none) and the
      command record {"": brief, <char>: Option}; None without a @command marker.
    """
    if not docstring or not (match := _COMMAND.search(docstring)):
        return None
    config = {"": _brief(docstring)}
    for name, description in sorted(_OPTION.findall(docstring), key=lambda pair: " ".join(pair).lower()):
        option = Option(f"{name}|{description.strip()}")
        config[option.name] = option
    return kebab(match[1].strip()), config


def _prefix(filename, base):
    path = os.path.splitext(os.path.relpath(filename, base) if base else os.path.basename(filename))[0]
    return ":".join(kebab(part) for part in path.split(os.sep))


def from_file(filename, base=None, /):
    """
    Harvest the commands declared in one Python source file.

    Parameters
    - filename: str
    - base: str | None
      Directory the command names are relative to; sub-directories become
      namespace segments ("ftp/upload.py" -> "ftp:upload"). Without it only the
      file stem is used.

    Returns
    - dict[str, dict]: command name -> record, file command first, then the
      others in case-insensitive order.

    Raises
    - SyntaxError: when the file cannot be parsed.
    """
    with open(filename, encoding="utf-8") as file:
        tree = ast.parse(file.read(), filename)

    prefix = _prefix(filename, base)
    stem = prefix.rpartition(":")[2]
    found = {}
    if parsed := parse_docstring(ast.get_docstring(tree)):
        found[parsed[0] or stem] = parsed[1]
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            if parsed := parse_docstring(ast.get_docstring(node)):
                found[parsed[0] or kebab(node.name)] = parsed[1]

    commands = {}
    if stem in found:
        commands[prefix] = found.pop(stem)
    for name in sorted(found, key=str.lower):
        commands[f"{prefix}:{name}"] = found[name]
    return commands


def from_files(files, base=None, /):
    """
    Harvest every Python file of files (see from_file).

    Files that fail to parse are logged with their location and skipped.
    """
    commands = {}
    for filename in files:
        if not filename.endswith(".py"):
            continue
        try:
            commands.update(from_file(filename, base))
        except SyntaxError as error:
            logger.error(
                "Exception in file %s (%s:%s): %s",
                error.filename, error.lineno, error.offset, error.msg,
            )
        except MalformedOptionError as error:
            logger.error("Skipping file %s: %s", filename, error)
    return commands


def parse_commands(commands, prefix="", /):
    """
    Convert discovered commands into their sidecar form.

    Option values become their pipe strings without the leading name, and every
    command name gets prefix prepended.
    """
    parsed = {}
    for name, config in commands.items():
        record = {}
        for key, value in config.items():
            record[key] = value.to_config() if isinstance(value, Option) else value
        parsed[prefix + name] = record
    return parsed


__all__ = (
    "parse_docstring",
    "from_file",
    "from_files",
    "parse_commands",
)
