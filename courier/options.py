r"""
Courier option specifications.

Overview
- Option: a named flag accepted by a command, with a one-character short name,
  an optional long alias, a description, a type, a default and a required marker.

Accepted sources
- A mapping with any of the recognised fields:
    {"name": "n", "alias": "name", "description": "...", "type": "string", "default": "x"}
  Unknown keys are ignored.
- A pipe string with positional fields in this order:
    name|description|alias|type|default
  e.g. "n|Name of the element to create|name|string"

Normalisation (applied to both sources)
- Short-name-first: when both name and alias are given and name is longer than
  alias, the two are swapped.
- The resolved name must be exactly one character (MalformedOptionError otherwise).
- An alias equal to the name is dropped.
- Missing default: boolean options default to False; every other type becomes
  required with a None default. An empty trailing field ("...|string|") is an
  explicit empty default and keeps the option optional.

Serialisation
- str(option) is the inverse of the pipe parse:
    name|description|alias[|type[|]]
  type is omitted for booleans, and a trailing "|" marks a non-required value option.
- option.to_config() drops the leading "name|" part, the form stored in the sidecar
  file where the name is already the key.

Quick example:
    >>> option = Option("name|Name of the element|n|string")
    >>> option.name, option.alias, option.required
    ('n', 'name', True)
    >>> str(option)
    'n|Name of the element|name|string'
"""
from collections.abc import Mapping

from .faults import MalformedOptionError
from .utils import *

# Type assigned when a source does not name one.
BOOLEAN = "boolean"


class Option:
    """
    Named flag specification of a command.

    Instances are plain, mutable records: the dispatcher never changes them after
    start-up, but configuration commands may re-parse them.
    """

    __introspectable__ = (
        "name",
        "alias",
        "description",
        "type",
        "default",
        "required",
    )

    def __init__(self, config=Unset, /):
        """
        Build an option from a pipe string or a mapping.

        Parameters
        - config: str | Mapping | Unset
          Source of the option. Unset leaves an empty boolean option, useful only
          as a target for parse_string()/parse_mapping().

        Raises
        - MalformedOptionError: when the resolved short name is not one character.
        - TypeError: when config is neither a string nor a mapping.
        """
        self.alias = ""
        self.default = None
        self.description = ""
        self.name = ""
        self.required = False
        self.type = BOOLEAN

        if isinstance(config, str):
            self.parse_string(config)
        elif isinstance(config, Mapping):
            self.parse_mapping(config)
        elif config is not Unset:
            raise TypeError("option config must be a string or a mapping")

    def parse_string(self, config, /):
        """
        Parse a pipe-delimited option description.

        Fields are positional: name, description, alias, type, default. Missing
        trailing fields keep their defaults; extra fields are ignored.
        """
        fields = config.split("|")
        fields += [Unset] * (5 - len(fields))
        name, description, alias, type, default = fields[:5]
        self._apply(config, name, alias, description, type, default)
        return True

    def parse_mapping(self, config, /):
        """
        Parse a structured option record (see the module docstring for the fields).
        """
        self._apply(
            config,
            config.get("name", ""),
            config.get("alias", Unset),
            config.get("description", Unset),
            config.get("type", Unset),
            config.get("default", Unset),
            config.get("required", Unset),
        )
        return True

    def _apply(self, source, name, alias, description, type, default, required=Unset):
        name = str(coalesce(name, ""))
        alias = str(coalesce(alias, "") or "")
        if alias and len(name) > len(alias):
            name, alias = alias, name
        if len(name) != 1:
            raise MalformedOptionError(
                f"Short option name must be a single character: {name!r} -- {source!r}",
                source=source,
            )
        self.name = name
        if alias and alias != name:
            self.alias = alias
        if description:
            self.description = description
        if type:
            self.type = type
        if default is Unset:
            if self.type == BOOLEAN:
                self.default = False
            else:
                self.required = True
        else:
            self.default = default
        if required is not Unset:
            self.required = bool(required)

    def to_config(self):
        """
        Return the sidecar form of this option: str(self) without its "name|" prefix.
        """
        return str(self)[len(self.name) + 1:]

    def __str__(self):
        segments = [self.name, self.description, self.alias]
        if self.type != BOOLEAN:
            segments.append(self.type)
            if not self.required:
                segments.append("")
        return "|".join(segments)

    def __eq__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__introspectable__)

    __hash__ = None

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "option(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Option",
)
