"""
Template rendering for command handlers (Jinja2).

A Tpl owns one Jinja2 environment (no autoescaping, block whitespace trimmed)
preloaded with the filters of courier.filters. Templates are addressed by file
path; files ending in ".j2" are rendered, anything else is copied as is.

    tpl = cli.get_tpl()
    tpl.from_dir("templates/module", {"name": "ftp", "relative": "templates/module", "outdir": target})
"""
import importlib.util
import logging
import os

from jinja2 import Environment

from .filters import FILTERS
from .utils import scandir

logger = logging.getLogger(__name__)

# Extension of the files rendered by generate().
EXTENSION = ".j2"


class Tpl:
    """
    Template manager bound to a Cli context.
    """

    def __init__(self, cli=None):
        self.cli = cli
        self.env = Environment(
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters.update(FILTERS)

    def compile(self, filename):
        """
        Compile a template file and return the Jinja2 template.
        """
        with open(filename, encoding="utf-8") as file:
            return self.env.from_string(file.read())

    def render(self, filename, context=None):
        """
        Render a template file; the output is stripped and ends with a single newline.
        """
        return self.compile(filename).render(context or {}).strip() + "\n"

    def generate(self, filename, context=None):
        """
        Render or copy one file and optionally write the result.

        Behavior
        - "<name>.j2" is rendered and the output is named "<name>"; other files
          are copied byte for byte.
        - The output name is context["transform"](name) when transform is callable,
          otherwise name with the context["relative"] part removed.
        - When context["outdir"] is set the result is written below it (parent
          directories are created).

        Returns
        - str | bytes: the rendered text, or the raw bytes of a copied file.
        """
        context = context or {}
        if filename.endswith(EXTENSION):
            content = self.render(filename, context)
            filename = filename[:-len(EXTENSION)]
        else:
            with open(filename, "rb") as file:
                content = file.read()

        if callable(transform := context.get("transform")):
            filename = transform(filename)
        elif relative := context.get("relative"):
            filename = filename.replace(relative, "", 1)

        if outdir := context.get("outdir"):
            target = os.path.join(outdir, filename.lstrip(os.sep))
            os.makedirs(os.path.dirname(target), exist_ok=True)
            if isinstance(content, bytes):
                with open(target, "wb") as file:
                    file.write(content)
            else:
                with open(target, "w", encoding="utf-8") as file:
                    file.write(content)
            logger.debug("Generated %s", target)
        return content

    def from_dir(self, directory, context=None, filter=None):
        """
        Generate every file below directory; filter (regex) skips matching paths.
        """
        return [self.generate(filename, context) for filename in scandir(directory, filter)]

    def load_helpers(self, directory):
        """
        Register extra filters from a directory of Python modules.

        Each "<name>.py" must define a function called <name>; it becomes the
        filter <name>. Modules without it are skipped with a warning.
        """
        if not directory or not os.path.isdir(directory):
            return
        for filename in scandir(directory):
            stem, extension = os.path.splitext(os.path.basename(filename))
            if extension != ".py" or stem.startswith("_"):
                continue
            spec = importlib.util.spec_from_file_location(f"courier.helpers.{stem}", filename)
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            if callable(helper := getattr(module, stem, None)):
                self.env.filters[stem] = helper
            else:
                logger.warning("Helper module %s does not define %s()", filename, stem)


__all__ = (
    "EXTENSION",
    "Tpl",
)
