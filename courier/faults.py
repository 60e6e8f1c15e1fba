"""
Courier faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- CourierError: base type that carries message + options and knows how to render
  itself in a friendly, actionable way with rich.
- trigger(): central entry point to surface a fault (print-and-exit in shell mode, raise otherwise).

UX goals
- Short titles, one-sentence bodies, a single clear hint.
- Readable styling, configurable via __styles__ in __main__.

Integration
- Models raise these faults like any other exception (most of them also derive from the
  matching builtin, e.g. MalformedOptionError is a ValueError).
- The entry point catches CourierError and calls trigger(fault, shell=True).
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    Stable numeric identifiers of courier faults.

    The thousands digit groups them: 211xx configuration, 212xx project layout,
    213xx module installation, 214xx processes. Numbers never change once
    released; hosts relabel them through __codes__ (see normalize()).
    """
    # --- configuration errors (211xx) ---
    MALFORMED_OPTION            = 21101
    MALFORMED_CONFIG            = 21102

    # --- project layout errors (212xx) ---
    PROJECT_ROOT_NOT_FOUND      = 21201

    # --- module installation errors (213xx) ---
    UNKNOWN_MODULE_FORMAT       = 21301
    MODULE_EXISTS               = 21302

    # --- process errors (214xx) ---
    PROCESS_FAILED              = 21401

    def normalize(self):
        """
        Label shown for this code: __main__.__codes__[code] when the host defines
        one, else the number as a string.
        """
        return str(getattr(sys.modules["__main__"], "__codes__", {}).get(self, self.value))


class CourierError(Exception):
    """
    Base class of every courier fault.

    Subclasses pin a code, a title and a default hint; instances carry the message
    and any extra context as read-only options. str(fault) is the plain message so
    faults read naturally in logs.
    """
    code = None
    title = "error"
    hint = ""

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = sys.modules["__main__"]

        styles = defaultdict(str, {
            "prog-name": "bold white",
            "code": "bold cyan",
            "error-title": "bold magenta",
            "error-message": "default",
            "hint-arrow": "dim green",
            "hint": "italic green",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", "courier"), "prog-name"),
            " — ",
            text(self.code.normalize() if self.code else "?", "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        if not (hint := self.options.get("hint", self.hint)):
            return Group(header, message)
        return Group(header, message, Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, /, **overrides):
        fault = type(self).__new__(type(self))
        fault.__dict__.update(self.__dict__)
        fault.args = self.args
        fault.options = MappingProxyType({**self.options, **overrides})
        return fault


class MalformedOptionError(CourierError, ValueError):
    code = FaultCode.MALFORMED_OPTION
    title = "malformed option"
    hint = "short option names must be exactly one character"


class MalformedConfigError(CourierError, ValueError):
    code = FaultCode.MALFORMED_CONFIG
    title = "malformed configuration"
    hint = "fix the file or run the 'update' command to rebuild it"


class ProjectRootNotFoundError(CourierError, FileNotFoundError):
    code = FaultCode.PROJECT_ROOT_NOT_FOUND
    title = "project root not found"
    hint = "run courier from inside a project that has a pyproject.toml"


class UnknownModuleFormatError(CourierError, ValueError):
    code = FaultCode.UNKNOWN_MODULE_FORMAT
    title = "unknown module format"
    hint = "use file~<path>, git~<url>, hg~<url> or a path starting with '.' or '/'"


class ModuleExistsError(CourierError, FileExistsError):
    code = FaultCode.MODULE_EXISTS
    title = "module already exists"
    hint = "remove the directory or install it with file~<path>"


class ProcessError(CourierError):
    """
    A spawned process exited with a non-zero code.

    The exit code is available as exit_code (also mirrored in options).
    """
    code = FaultCode.PROCESS_FAILED
    title = "process failed"

    def __init__(self, exit_code, /, **options):
        super().__init__(f"Error: {exit_code}", exit_code=exit_code, **options)
        self.exit_code = exit_code


def trigger(fault, /, **options):
    """
    Report a fault.

    options are merged into a copy of the fault (copy.replace) before it is
    reported: with shell=True it is printed to stderr and the process exits with
    status 1, otherwise the copy is raised.

    Raises
    - TypeError: when fault does not implement __trigger__ and __replace__.
    """
    if not all(callable(getattr(fault, name, None)) for name in ("__trigger__", "__replace__")):
        raise TypeError("trigger() argument must implement __trigger__ and __replace__")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "CourierError",
    "MalformedOptionError",
    "MalformedConfigError",
    "ProjectRootNotFoundError",
    "UnknownModuleFormatError",
    "ModuleExistsError",
    "ProcessError",
    "trigger",
)
