"""
Project directory resolution.

A namespace prefix in the directory map points at a project, written either as
an absolute path, a path relative to the current directory, or a bare package
name. resolve_dir() turns any of those into the project's root (the nearest
directory holding the marker file).
"""
import importlib.machinery
import os
import sys

from .utils import find_up, snake

# File that marks the root of a project.
MARKER = "pyproject.toml"


def _resolve_module(name, root_dir):
    """
    Locate a bare name as an importable module, searching root_dir first.

    Returns the directory containing the module (the package directory for
    packages), or None when nothing importable matches.
    """
    if not snake(name).isidentifier():
        return None
    try:
        spec = importlib.machinery.PathFinder.find_spec(snake(name), [root_dir, *sys.path])
    except (ImportError, ValueError):
        return None
    if spec is None:
        return None
    if spec.submodule_search_locations:
        return os.path.abspath(next(iter(spec.submodule_search_locations)))
    if spec.origin and os.path.isabs(spec.origin):
        return os.path.dirname(spec.origin)
    return None


def resolve_dir(directory, root_dir, /):
    """
    Resolve a directory reference to the root of the project that holds it.

    Steps
    - absolute paths are used as they are;
    - bare names (no directory component) are tried as importable modules on a
      search path rooted at root_dir, then sys.path;
    - anything else (and unresolvable names) is joined to the current directory;
    - finally walk upward until a directory holding MARKER is found.

    Returns
    - str: the project root.
    - None: when directory is empty or no marker exists up to the filesystem root.
    """
    if not directory:
        return None
    directory = os.fspath(directory)
    if not os.path.isabs(directory):
        resolved = None
        if not os.path.dirname(directory):
            resolved = _resolve_module(directory, root_dir)
        directory = resolved or os.path.join(os.getcwd(), directory)
    return find_up(directory, MARKER)


def find_root(start=None, /):
    """
    Find the project root for the running program.

    Starts at start, or at the __main__ script's directory, or at the current
    directory, and walks upward to MARKER. Returns None when nothing is found.
    """
    if start is None:
        main = getattr(sys.modules.get("__main__"), "__file__", None)
        start = os.path.dirname(os.path.abspath(main)) if main else os.getcwd()
    return find_up(start, MARKER)


__all__ = (
    "MARKER",
    "resolve_dir",
    "find_root",
)
