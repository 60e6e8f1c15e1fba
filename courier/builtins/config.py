"""
Sidecar maintenance: harvest the commands of every known project and rewrite the
configuration file.
"""
import os
import re
from collections.abc import Mapping

from ..discovery import from_files, parse_commands
from ..utils import kebab, scandir


def module_key(directory, /):
    """
    Directory map key of a project: its kebab-cased folder name without a
    leading "...courier-" part ("courier-ftp" -> "ftp", "courier" -> "courier").
    """
    name = kebab(os.path.basename(os.path.normpath(directory)))
    return re.sub(r"(^|.+-)courier-?", "", name) or "courier"


def to_directories(directories, /):
    """
    Normalise the --directories value (a path, a list of paths or a mapping) to {key: path}.

    An empty string stands for the current directory.
    """
    if isinstance(directories, str):
        directories = [directories or os.getcwd()]
    elif isinstance(directories, Mapping):
        directories = list(directories.values())
    elif not directories:
        return {}
    return {module_key(directory): directory for directory in directories}


def harvest(cli, prefix, directory):
    """
    Commands declared below <directory>/src/commands in sidecar form, named "<prefix><name>".
    """
    commands_dir = os.path.join(directory, "src", "commands")
    if not os.path.isdir(commands_dir):
        cli.log("error", "Directory %s does not exist", commands_dir)
        return {}
    if not (commands := from_files(scandir(commands_dir), commands_dir)):
        cli.log("error", "Directory %s has no commands", commands_dir)
    return parse_commands(commands, prefix)


def config(cli, argv):
    """
    Build the configuration file from the commands of the registered projects.

    @command
    @option d Directories holding projects|directories|string|
    """
    directories = dict(cli.directories) | to_directories(argv.get("directories"))
    commands = parse_commands(from_files(scandir(os.path.dirname(__file__))))

    kept = {}
    for prefix in sorted(directories):
        directory = os.path.normpath(os.path.join(cli.root_dir, directories[prefix]))
        if not os.path.isdir(directory):
            cli.log("error", "Directory %s not found", directory)
            continue
        if found := harvest(cli, prefix + ":", directory):
            commands.update(found)
            kept[prefix] = os.path.relpath(directory, cli.root_dir)

    cli.save({"commands": commands, "directories": kept})
    cli.reload()
    return True


__all__ = (
    "module_key",
    "to_directories",
    "harvest",
    "config",
)
