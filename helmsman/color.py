"""
ANSI color helpers for plain strings.

Each helper wraps any object's str() in the escape sequences of one of the
eight standard terminal colors (foreground or background) and resets after it:

    >>> red("Hello")
    '\\x1b[31mHello\\x1b[0m'

They are pure functions, usable for app names, action output or custom help
text. Rich renderables should use styles instead.
"""
from rich.color import ColorSystem
from rich.style import Style

from .utils import rename

_COLORS = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")


def _painter(name, style):
    @rename(name)
    def paint(text):
        return style.render(str(text), color_system=ColorSystem.STANDARD)
    paint.__doc__ = "Return str(text) %s." % (
        "on a %s background" % name[3:] if name.startswith("bg_") else "in %s" % name
    )
    return paint


for _color in _COLORS:
    globals()[_color] = _painter(_color, Style(color=_color))
    globals()["bg_" + _color] = _painter("bg_" + _color, Style(bgcolor=_color))
del _color


__all__ = _COLORS + tuple("bg_" + color for color in _COLORS)
