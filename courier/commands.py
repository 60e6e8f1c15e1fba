"""
Courier command layer: command models and the registry that holds them.

What this module provides
- Command: a named, described bundle of Option specs.
  • Built from a plain string (the description) or from a record whose empty-string
    key holds the description and whose other keys are option specs.
  • Options are keyed by their resolved one-character name, not by the record key:
    the record key is a human label, the option's own name is authoritative.

- CommandRegistry: mapping from fully-qualified command name to Command.
  • parse(config, prefix) flattens a nested configuration into colon-joined names.
  • Later registrations win (last-write-wins); nothing is removed while dispatching.
  • One registry is owned by each Cli context, so several independent instances
    can coexist (tests build many of them).

Configuration shapes
    {
        "create": {
            "":  "Create an element",
            "n": "Name of the element|name|string"
        },
        "ftp": {
            "upload":   "Upload the build",
            "download": {"": "Fetch a remote file", "f": "Remote file|file|string"}
        },
        "update": "Update the configuration file"
    }

  registers "create", "ftp:upload", "ftp:download" and "update". A string value,
  an empty record, a record holding the "" key or a record with at least one
  option record ({"name": "n", "type": "string"}, only Option fields) is a
  command; any other record is a namespace and is walked recursively.
"""
import logging
from collections.abc import Mapping

from .faults import MalformedOptionError
from .options import Option
from .utils import *

logger = logging.getLogger(__name__)


class Command:
    """
    A command exposed on the command line.

    Attributes
    - name: str
      Colon-segmented path, e.g. "ftp:upload".
    - description: str
      One-line help text.
    - options: dict[str, Option]
      Accepted options keyed by their short name.

    Lifecycle
    - Built once at start-up from merged sources and left untouched while
      dispatching; parse() may be called again to merge more options.
    """

    __introspectable__ = (
        "name",
        "description",
        "options",
    )

    def __init__(self, name, config=Unset, /):
        """
        Construct a command from its name and configuration.

        Parameters
        - name: str
          Fully-qualified command name.
        - config: str | Mapping | Unset
          A string is the description. A mapping is parsed with parse().

        Raises
        - TypeError: when name is not a non-empty string.
        - MalformedOptionError: when one of the options is malformed.
        """
        if not isinstance(name, str) or not name:
            raise TypeError("command name must be a non-empty string")
        self.name = name
        self.description = config if isinstance(config, str) else ""
        self.options = {}
        self.parse(config)

    @property
    def segments(self):
        """
        Return the colon-separated parts of the name as a tuple.
        """
        return tuple(self.name.split(":"))

    def parse(self, config, /):
        """
        Merge a configuration record into this command.

        Keys are processed in sorted order.
        - "" sets the description.
        - Any other key becomes an Option, accepting:
          • an Option instance (re-parsed from its pipe string),
          • a string shorthand, read as "<key>|<value>",
          • a mapping with the full Option fields.

        Returns
        - bool: whether config was a mapping and had entries to process.
        """
        processed = False
        for key, value in iterate(config):
            processed = True
            if key == "":
                self.description = value or ""
                continue
            if isinstance(value, Option):
                value = str(value)
            elif isinstance(value, str):
                value = f"{key}|{value}"
            option = Option(value)
            self.options[option.name] = option
        return processed

    def to_config(self):
        """
        Return the record stored in the sidecar file for this command.
        """
        config = {"": self.description}
        for name, option in sorted(self.options.items()):
            config[name] = option.to_config()
        return config

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return (self.name, self.description, self.options) == (other.name, other.description, other.options)

    __hash__ = None

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def _is_leaf(value):
    """
    Tell whether a configuration value describes a command (True) or a namespace (False).
    """
    if not isinstance(value, Mapping):
        return True
    return not value or "" in value or any(map(_is_option, value.values()))


def _is_option(value):
    if isinstance(value, Option):
        return True
    return isinstance(value, Mapping) and bool(value) and set(value) <= set(Option.__introspectable__)


class CommandRegistry(Mapping):
    """
    Flat mapping from fully-qualified command name to Command.

    The registry is read-only for dispatch (Mapping interface); population goes
    through register() and parse().
    """

    def __init__(self, config=Unset, /):
        self._commands = {}
        if config is not Unset:
            self.parse(config)

    def __getitem__(self, name):
        return self._commands[name]

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return f"command-registry({sorted(self._commands)!r})"

    def register(self, command, /):
        """
        Add a command, replacing any previous entry with the same name.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")
        self._commands[command.name] = command
        return command

    def parse(self, config, prefix="", /):
        """
        Flatten a nested command configuration into the registry.

        Parameters
        - config: Mapping
          Keys are command names (or namespace names); values are descriptions,
          command records, or nested namespaces.
        - prefix: str
          Name of the enclosing namespace; children are registered as
          "<prefix>:<key>".

        Behavior
        - Keys are walked in sorted order.
        - A command whose options are malformed is logged and skipped; the rest
          of the configuration is still registered.

        Returns
        - bool: whether any entries were processed.
        """
        processed = False
        for key, value in iterate(config):
            processed = True
            name = prefix + ":" + key if prefix else key
            if not _is_leaf(value):
                self.parse(value, name)
                continue
            try:
                self.register(Command(name, value if isinstance(value, Mapping) else {"": value}))
            except MalformedOptionError as error:
                logger.error("Skipping command %s: %s", name, error)
        return processed

    def to_config(self):
        """
        Return the "commands" section of the sidecar file (sorted by name).
        """
        return {name: self._commands[name].to_config() for name in sorted(self._commands)}


__all__ = (
    "Command",
    "CommandRegistry",
)
