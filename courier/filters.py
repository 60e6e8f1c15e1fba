"""
Built-in template filters registered on every Tpl environment.
"""
from collections.abc import Mapping

from rich.console import Console
from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.text import Text

from .utils import kebab, snake

_console = Console(force_terminal=True, color_system="standard", highlight=False)


def capitalize(value, /):
    """
    Upper-case the first character and leave the rest untouched.
    """
    text = str(value)
    return text[:1].upper() + text[1:]


def color(value, color, /, bold=False):
    """
    Wrap text in the ANSI escapes of a rich color name ("red", "cyan", "#ff8800"...).

    Unknown colors leave the text unchanged.
    """
    style = f"bold {color}" if bold else str(color)
    try:
        Style.parse(style)
    except StyleSyntaxError:
        return str(value)
    with _console.capture() as capture:
        _console.print(Text(str(value), style=style), end="", soft_wrap=True)
    return capture.get()


def spaces(items, property, value="", /):
    """
    Padding that aligns value with the longest property among items.

        {{ command.name }}{{ commands|spaces("name", command.name) }} {{ command.description }}
    """
    if not items or not property:
        return ""

    def measure(item):
        field = item.get(property, "") if isinstance(item, Mapping) else getattr(item, property, "")
        return len(str(field))

    return " " * max(0, max(map(measure, items)) - len(str(value)))


FILTERS = {
    "capitalize": capitalize,
    "color": color,
    "kebab": kebab,
    "snake": snake,
    "spaces": spaces,
}


__all__ = (
    "FILTERS",
    "capitalize",
    "color",
    "spaces",
)
