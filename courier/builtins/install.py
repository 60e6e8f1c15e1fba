"""
Module installation.

Modules are given as positional arguments:
- file~<path>             an existing project directory
- git~<url>, hg~<url>     cloned next to the project root
- /abs/path, ./rel/path   an existing project directory

Cloned projects holding a pyproject.toml are installed in editable mode with
the running interpreter's pip. The configuration file is rebuilt afterwards.
"""
import logging
import os
import sys

from ..directories import MARKER
from ..faults import ModuleExistsError, UnknownModuleFormatError
from . import config as _config

logger = logging.getLogger(__name__)

# Separator between the module type and its location.
SEP = "~"

# Version control tools able to clone a module.
REPOSITORIES = ("git", "hg")


async def clone(cli, kind, url):
    """
    Clone a repository next to the project root and return the new directory.

    Raises
    - ModuleExistsError: when the target directory already exists.
    """
    name = os.path.basename(url.rstrip("/"))
    if name.endswith("." + kind):
        name = name[:-len(kind) - 1]
    outdir = os.path.dirname(cli.root_dir)
    target = os.path.join(outdir, name)
    if os.path.exists(target):
        raise ModuleExistsError(
            f"Module {name} already exists, remove the directory or use file~{target}",
            directory=target,
        )
    logger.debug("Installing module %s in %s", name, outdir)
    await cli.script(kind, ["clone", url], {"cwd": outdir})
    if os.path.isfile(os.path.join(target, MARKER)):
        await cli.script(sys.executable, ["-m", "pip", "install", "-e", "."], {"cwd": target})
    return target


async def install(cli, argv):
    """
    Install modules from paths or repository URLs.

    @command
    """
    directories = []
    for module in argv.get("_") or []:
        kind, sep, location = module.partition(SEP)
        if sep and kind == "file":
            directories.append(os.path.abspath(location))
        elif sep and kind in REPOSITORIES:
            if os.path.isdir(target := await clone(cli, kind, location)):
                directories.append(target)
        elif os.path.isabs(module) or module.startswith("."):
            directories.append(os.path.abspath(module))
        else:
            raise UnknownModuleFormatError(f"Unknown module format: {module}", module=module)

    logger.debug("Updating configuration")
    return _config.config(cli, {"directories": directories})


__all__ = (
    "SEP",
    "clone",
    "install",
)
