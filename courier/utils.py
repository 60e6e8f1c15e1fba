"""
Shared helpers of the courier package.

- Unset: marker for "no value given", distinct from None. Option defaults need
  both: None means "required value", a missing default means "derive one".
- coalesce(value, default): Unset -> default, anything else unchanged.
- kebab(text) / snake(text): command segment <-> Python identifier
  ("fromFiles" -> "from-files" -> "from_files").
- iterate(mapping): (key, value) pairs in sorted key order; configuration is
  always walked this way so results do not depend on file order.
- find_up(start, marker) / scandir(directory, filter): filesystem walks used
  by directory resolution, discovery and templates.

    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> kebab("installModule")
    'install-module'
    >>> snake("install-module")
    'install_module'
"""
import functools
import os
import re
from collections.abc import Mapping
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is exactly one instance; calling UnsetType() returns it, copies return
    it, and the type cannot be subclassed. The marker is falsy.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, object otherwise.

    None, 0, "" and other falsy values are real values and are kept:
        coalesce(None, "x") -> None
    """
    return default if object is Unset else object

@functools.cache
def kebab(text, /):
    """
    Convert camelCase, PascalCase or snake_case text into kebab-case.

    Leading and trailing separators are trimmed, runs of separators collapse
    into a single hyphen.

    Examples
    - kebab("fromFiles")    -> "from-files"
    - kebab("from_files")   -> "from-files"
    - kebab("HTTPServer")   -> "http-server"
    """
    if not isinstance(text, str):
        raise TypeError("kebab() argument must be a string")
    text = re.sub(r"([a-z\d])([A-Z])", r"\1-\2", text)
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", text)
    return re.sub(r"[-_\s]+", "-", text).strip("-").lower()


@functools.cache
def snake(text, /):
    """
    Convert a kebab-case (or camelCase) command segment into a Python identifier.

    Examples
    - snake("from-files") -> "from_files"
    - snake("upload")     -> "upload"
    """
    if not isinstance(text, str):
        raise TypeError("snake() argument must be a string")
    return kebab(text).replace("-", "_")


def iterate(object, /):
    """
    Yield the (key, value) pairs of a mapping in sorted key order.

    Non-mappings yield nothing, so callers can walk loosely typed configuration
    without guarding every level.
    """
    if isinstance(object, Mapping):
        for key in sorted(object):
            yield key, object[key]


def find_up(start, marker, /):
    """
    Walk upward from start until a directory containing marker is found.

    Parameters
    - start: str | PathLike
      A file or directory. Files start the search at their parent directory.
    - marker: str
      File name to look for (e.g., "pyproject.toml").

    Returns
    - str: absolute path of the first directory holding the marker.
    - None: when the filesystem root is reached without a match.
    """
    directory = os.path.abspath(start)
    if not os.path.isdir(directory):
        directory = os.path.dirname(directory)
    while True:
        if os.path.exists(os.path.join(directory, marker)):
            return directory
        parent = os.path.dirname(directory)
        if parent == directory:
            return None
        directory = parent


def scandir(directory, filter=None, /):
    """
    List every file below directory (recursively), sorted.

    When filter is given (a regex string or compiled pattern), files whose path
    matches it are skipped. Cache folders (__pycache__) are always skipped.
    """
    if isinstance(filter, str):
        filter = re.compile(filter)
    files = []
    for root, dirs, names in os.walk(directory):
        dirs[:] = sorted(name for name in dirs if name != "__pycache__")
        for name in names:
            path = os.path.join(root, name)
            if filter is not None and filter.search(path):
                continue
            files.append(path)
    return sorted(files)


# The only UnsetType instance.
Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "kebab",
    "snake",
    "iterate",
    "find_up",
    "scandir",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
