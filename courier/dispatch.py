"""
Courier dispatcher: the Cli context object.

A Cli owns everything a dispatch needs (the command registry, the directory
map of other projects, the project root) and resolves a colon-separated command
name to a handler function on the filesystem.

Resolution
- A single segment names a built-in: config, install, readme or update.
- Otherwise handlers live below <root>/src/commands. When the first segment is
  a key of the directory map, that project's root is used and the segment is
  dropped. The path is then shortened one segment at a time:

      a:b:c   ->   a/b/c.py  c()
                   a/b.py    c()  else  b()
                   a.py      b()  else  a()

  Segments match files and directories literally, else by kebab-cased name
  (deploy-site finds deploy_site.py).
  Each probed file is loaded once per Cli and classified into a handler table:
  its own handler (the function named after the file) and its public functions.
  The search stops at the first handler returning exactly True; anything else
  (including an exception, which is logged) moves on to the next candidate.
- When nothing answered True a single error is logged. Dispatch never raises
  for a missing handler.

Handlers receive (cli, argv) and may be coroutine functions:

    async def upload(cli, argv):
        await cli.script("rsync", ["-a", "build/", argv["host"]])
        return True
"""
import importlib.util
import inspect
import json
import logging
import os
import re
import sys
import traceback
from collections.abc import Mapping

from rich.markup import escape

from . import builders
from .builtins import config as _config
from .builtins import install as _install
from .builtins import readme as _readme
from .commands import Command, CommandRegistry
from .directories import find_root, resolve_dir
from .faults import MalformedConfigError, ProjectRootNotFoundError
from .spawn import Spawn
from .templates import Tpl
from .utils import *

logger = logging.getLogger(__name__)


def _entry(directory, segment, suffix, exists):
    if exists(path := os.path.join(directory, segment + suffix)):
        return path
    try:
        entries = sorted(os.listdir(directory))
    except OSError:
        return None
    for entry in entries:
        stem, ext = os.path.splitext(entry) if suffix else (entry, "")
        if entry.startswith("_") or ext != suffix or kebab(stem) != kebab(segment):
            continue
        if exists(path := os.path.join(directory, entry)):
            return path
    return None


def locate(commands_dir, segments, /):
    """
    Find the handler file of a command path, or None.

    Each segment matches its directory (or, for the last one, its .py file)
    literally, else through the kebab-cased name: "deploy-site" finds
    deploy_site.py or deploySite.py.
    """
    *parents, stem = segments
    directory = commands_dir
    for segment in parents:
        if (directory := _entry(directory, segment, "", os.path.isdir)) is None:
            return None
    return _entry(directory, stem, ".py", os.path.isfile)


class HandlerTable:
    """
    The callable surface of one handler file.

    Attributes
    - filename: absolute path of the source file.
    - own: the function named after the file stem (snake case), or None.
    - functions: public functions defined in the file, keyed by snake-cased name.
    """

    def __init__(self, filename):
        self.filename = filename
        self.own = None
        self.functions = {}

    @property
    def stem(self):
        return os.path.splitext(os.path.basename(self.filename))[0]

    def load(self):
        """
        Execute the file as a fresh module and classify its functions.

        Raises whatever executing the module raises; the table stays empty then.
        """
        name = "courier.handlers." + re.sub(r"\W", "_", os.path.splitext(self.filename)[0].lstrip(os.sep))
        spec = importlib.util.spec_from_file_location(name, self.filename)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            del sys.modules[name]
            raise
        self.classify(module)
        return self

    def classify(self, module):
        for name, value in vars(module).items():
            if name.startswith("_") or not inspect.isfunction(value):
                continue
            if value.__module__ != module.__name__:
                continue
            self.functions[snake(name)] = value
        self.own = self.functions.get(snake(self.stem))

    def __repr__(self):
        return f"handler-table({self.filename!r}, own={self.own is not None}, functions={sorted(self.functions)!r})"


class Cli:
    """
    Dispatch context shared by the front-end, the built-ins and every handler.

    Attributes
    - command: the Command being dispatched (None before the first dispatch).
    - commands: CommandRegistry of every known command.
    - directories: dict prefix -> project directory (relative to root_dir when saved).
    - root_dir: absolute path of the project root.
    - show_stack: log the traceback lines of handler errors.
    - tpl: the Tpl created by get_tpl(), None until then.
    """

    # Sidecar file, stored in the project root.
    FILE = ".courier"

    # Single-segment commands, answered by methods of this class.
    BUILTINS = frozenset({"config", "install", "readme", "update"})

    def __init__(self, root_dir=None, /, show_stack=True):
        """
        Raises
        - ProjectRootNotFoundError: when root_dir is not given and no directory
          above the running script (or the current directory) holds pyproject.toml.
        """
        self.command = None
        self.commands = CommandRegistry()
        self.directories = {}
        self.root_dir = os.path.abspath(root_dir) if root_dir else find_root()
        self.show_stack = show_stack
        self.tpl = None
        self._handlers = {}

        if self.root_dir is None:
            raise ProjectRootNotFoundError("Unable to find the project root (no pyproject.toml found)")
        self.reload()

    # Configuration

    @property
    def config_file(self):
        return os.path.join(self.root_dir, self.FILE)

    def load_config(self):
        """
        Read the sidecar file.

        Returns
        - dict: the parsed configuration.
        - None: when the file does not exist or is malformed (logged).
        """
        if not os.path.isfile(self.config_file):
            return None
        try:
            with open(self.config_file, encoding="utf-8") as file:
                config = json.load(file)
        except json.JSONDecodeError as error:
            fault = MalformedConfigError(
                f"Malformed configuration file {self.FILE} ({error.lineno}:{error.colno}): {error.msg}",
                source=self.config_file,
            )
            self.log("error", "%s", fault)
            return None
        if not isinstance(config, Mapping):
            self.log("error", "%s", MalformedConfigError(f"Configuration file {self.FILE} must hold an object"))
            return None
        return config

    def _parse_config(self):
        if config := self.load_config():
            if isinstance(directories := config.get("directories"), Mapping):
                self.directories = dict(directories)
            self.commands.parse(config.get("commands") or {})

    def reload(self):
        """
        Rebuild the registry and the directory map from the sidecar file.
        """
        self.commands = CommandRegistry()
        self.directories = {}
        self.commands.parse({"update": "Update the configuration file"})
        self._parse_config()

    def save(self, properties=("commands", "directories")):
        """
        Write the sidecar file.

        Parameters
        - properties: Iterable[str] | Mapping
          Names of the attributes to store, or the mapping to store as is.
          Output is indented with 4 spaces and keys are sorted.
        """
        if not isinstance(properties, Mapping):
            properties = {name: self._export(name) for name in sorted(properties)}
        with open(self.config_file, "w", encoding="utf-8") as file:
            file.write(json.dumps(properties, indent=4, sort_keys=True, ensure_ascii=False) + "\n")
        logger.debug("Saved %s", self.config_file)

    def _export(self, name):
        value = getattr(self, name)
        if isinstance(value, CommandRegistry):
            return value.to_config()
        return value

    def resolve_dir(self, directory):
        """
        Resolve a project directory against this context (see courier.directories.resolve_dir).
        """
        return resolve_dir(directory, self.root_dir)

    def _project_dir(self, prefix):
        directory = self.directories[prefix]
        if not isinstance(directory, str):
            fault = MalformedConfigError(
                f"Directory of {prefix!r} in {self.FILE} must be a string, got {directory!r}",
                source=self.config_file,
            )
            self.log("error", "%s", fault)
            return self.root_dir
        if not os.path.isabs(directory):
            if os.path.dirname(directory) or directory.startswith("."):
                directory = os.path.join(self.root_dir, directory)
        return self.resolve_dir(directory) or self.root_dir

    # Logging

    def log(self, level, message, *args, markup=False):
        """
        Log through the courier logger; level is a name ("info", "error"...) or a number.
        """
        if isinstance(level, str):
            level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
        logger.log(level, message, *args, extra={"markup": True} if markup else None)

    def log_exception(self, error):
        """
        Log an exception with the file and position it was raised from.

        The location is the innermost traceback frame, or the position reported
        by a SyntaxError. Paths inside the project are shown relative to the root.
        """
        if isinstance(error, SyntaxError) and error.filename:
            filename, line, column = error.filename, error.lineno, error.offset
        elif frames := traceback.extract_tb(error.__traceback__):
            frame = frames[-1]
            filename, line, column = frame.filename, frame.lineno, (frame.colno or 0) + 1
        else:
            filename, line, column = "<unknown>", 0, 0
        if filename.startswith(self.root_dir + os.sep):
            filename = filename[len(self.root_dir) + 1:]
        self.log("error", "Exception in file %s (%s:%s): %s", filename, line, column, error)
        if self.show_stack:
            for chunk in traceback.format_exception(error):
                for line in chunk.rstrip().splitlines():
                    self.log("error", "%s", line)

    # Dispatch

    def _load(self, filename):
        if (handlers := self._handlers.get(filename)) is None:
            self._handlers[filename] = handlers = HandlerTable(filename)
            handlers.load()
        return handlers

    async def _run(self, handler, argv, label):
        """
        Invoke one handler with (self, argv), awaiting its result when needed.

        Subclasses may override it to act before or after every invocation.
        """
        self.log("info", "Running [magenta]%s[/magenta]", escape(label), markup=True)
        result = handler(self, argv)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _builtin(self, name, argv):
        try:
            result = getattr(self, name)(argv)
            if inspect.isawaitable(result):
                result = await result
        except Exception as error:
            self.log_exception(error)
            return None
        return result

    async def handle(self, command, argv=None):
        """
        Dispatch a command to its handler.

        Parameters
        - command: Command | str
        - argv: Mapping | None
          Parsed arguments, handed to the handler untouched.

        Returns
        - bool: whether a handler answered True (a miss is also logged as an error).
        """
        if isinstance(command, str):
            command = self.commands.get(command) or Command(command)
        argv = {} if argv is None else argv
        self.command = command
        name = command.name
        self.log("debug", "Command: %s -- %s", name, command.description)

        segments = name.split(":")
        result = None
        if len(segments) == 1:
            if name in self.BUILTINS:
                result = await self._builtin(name, argv)
        else:
            root = self.root_dir
            if segments[0] in self.directories:
                root = self._project_dir(segments.pop(0))
            commands_dir = os.path.join(root, "src", "commands")
            method = ""
            while result is not True and segments:
                if filename := locate(commands_dir, segments):
                    result = await self._probe(filename, method, argv)
                method = segments.pop()

        if result is not True:
            self.log("error", "No handler found for command %s", name)
        return result is True

    async def _probe(self, filename, method, argv):
        try:
            handlers = self._load(filename)
            function = handlers.functions.get(snake(method)) if method else None
            if (function := function or handlers.own) is None:
                logger.debug("Nothing to call in %s for %r", filename, method)
                return None
            result = await self._run(function, argv, f"{os.path.basename(filename)}::{function.__name__}(...)")
        except Exception as error:
            self.log_exception(error)
            return None
        if result is not True:
            logger.debug("%s::%s returned %r, continuing", filename, function.__name__, result)
        return result

    # Collaborators

    def get_tpl(self):
        """
        Return the template manager, created on first use.
        """
        if self.tpl is None:
            self.tpl = Tpl(self)
        return self.tpl

    async def script(self, cmd, args=(), options=None):
        """
        Run a process and wait for it (see courier.spawn.Spawn.run).
        """
        return await Spawn(self).run(cmd, args, options)

    def configure(self, parser):
        """
        Add every registered command to an argparse parser, dispatching to handle().
        """
        return builders.configure(parser, self.commands, self.handle)

    # Built-in commands

    def config(self, argv):
        return _config.config(self, argv)

    async def install(self, argv):
        return await _install.install(self, argv)

    def readme(self, argv):
        return _readme.readme(self, argv)

    def update(self, argv=None):
        return _config.config(self, {})


__all__ = (
    "locate",
    "HandlerTable",
    "Cli",
)
