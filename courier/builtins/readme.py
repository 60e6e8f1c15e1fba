"""
README generation from the commands a project declares.
"""
import os
import tomllib

from ..directories import MARKER
from ..discovery import from_files
from ..options import Option
from ..utils import scandir

# Template used when --template is not given.
TEMPLATE = os.path.join(os.path.dirname(__file__), "readme.md.j2")

# Option columns of the command tables.
COLUMNS = (
    ("name", "Name"),
    ("alias", "Alias"),
    ("description", "Description"),
    ("type", "Type"),
    ("required", "Required"),
)


def _cell(option, field):
    value = getattr(option, field)
    if field == "name":
        return "-" + value
    if field == "alias":
        return "--" + value if value else ""
    if isinstance(value, bool):
        return ":heavy_check_mark:" if value else ""
    return str(value)


def table(config, /):
    """
    Aligned markdown table of the options of one discovered command.

    Returns
    - dict with "headers" (titles), "separators" (dashes) and "options" (rows),
      every column padded to the same width.
    """
    options = [value for key, value in sorted(config.items()) if key and isinstance(value, Option)]
    rows = [[title for _, title in COLUMNS]]
    rows += [[_cell(option, field) for field, _ in COLUMNS] for option in options]
    widths = [max(len(row[index]) for row in rows) for index in range(len(COLUMNS))]
    rows = [[cell.ljust(width) for cell, width in zip(row, widths)] for row in rows]
    return {
        "headers": rows[0],
        "separators": ["-" * width for width in widths],
        "options": rows[1:],
    }


def project_metadata(directory, /):
    """
    The [project] table of <directory>/pyproject.toml ({} when missing).
    """
    filename = os.path.join(directory, MARKER)
    if not os.path.isfile(filename):
        return {}
    with open(filename, "rb") as file:
        return tomllib.load(file).get("project", {})


def readme(cli, argv):
    """
    Generate the README.md of a project from its commands.

    @command
    @option d Project directory|directory|string|
    @option t Template to render|template|string|
    """
    if not (directory := cli.resolve_dir(argv.get("directory") or os.getcwd())):
        cli.log("error", "Project directory not found: %s", argv.get("directory") or os.getcwd())
        return True
    commands_dir = os.path.join(directory, "src", "commands")
    if not os.path.isdir(commands_dir):
        cli.log("error", "Directory %s does not exist", commands_dir)
        return True

    commands = [
        {"name": name, "description": config.get("", "")} | table(config)
        for name, config in from_files(scandir(commands_dir), commands_dir).items()
    ]
    context = project_metadata(directory) | {"commands": commands}
    content = cli.get_tpl().render(argv.get("template") or TEMPLATE, context)
    with open(os.path.join(directory, "README.md"), "w", encoding="utf-8") as file:
        file.write(content)
    cli.log("info", "Generated %s", os.path.join(directory, "README.md"))
    return True


__all__ = (
    "TEMPLATE",
    "table",
    "project_metadata",
    "readme",
)
