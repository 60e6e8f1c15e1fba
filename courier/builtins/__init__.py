"""
Built-in commands answered by the Cli itself.

Each module exposes one handler taking (cli, argv); their docstrings declare
the commands harvested into the configuration file.
"""
from . import config, install, readme

__all__ = (
    "config",
    "install",
    "readme",
)
