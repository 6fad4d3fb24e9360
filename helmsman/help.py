"""
Help and version rendering (rich-based, color-aware).

Layout of a command's help
- head: program name, version and author (app only).
- usage: the declared usage string, or one synthesized from the route.
- description paragraph.
- commands/subcommands table (name, aliases, description).
- flags section: every flag in scope, names first, then type and description.

Styling
- A palette of named styles, overridable through a mapping named __styles__
  defined in __main__ (same keys as below).
- When colorful is False styling is suppressed entirely.
- An app's custom helptext (if any) replaces the rendered help of the app itself.
"""
import io
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .flags import FlagType
from .utils import *


def _options(path):
    root = path[0]
    return getattr(root, "colorful", True), getattr(root, "fancy", False)


def render(path, /, *, colorful=Unset, fancy=Unset):
    """
    Build the help renderable for the last command of `path`.

    Parameters
    - path: commands from the root to the command to describe.
    - colorful / fancy: override the app's presentation options.
    """
    from .context import scope

    if not path:
        raise ValueError("render() path cannot be empty")

    colorful = coalesce(colorful, _options(path)[0])
    fancy = coalesce(fancy, _options(path)[1])
    command = path[-1]

    styles = defaultdict(str, {
        # === head ===
        "program-name": "bold #FF4D94",
        "version": "#36C5F0",
        "author": "italic #A3A3A3",
        "usage-label": "bold #00E6FF",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",

        # === children table ===
        "children-title": "bold #FFFFFF",
        "children-table": "#4B5563",
        "children": "bold #36C5F0",
        "children-aliases": "#36C5F0 dim",
        "children-description": "#9CA3AF",

        # === flags ===
        "group-label": "bold #FFFFFF",
        "flag-name": "bold #22C55E",
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",
        "argument-description": "#9CA3AF",

        # === fancy panel ===
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    route = " ".join(step.name for step in path if step.name)
    renders = []

    if len(path) == 1 and (getattr(command, "version", None) or getattr(command, "author", None)):
        head = Text.assemble(text(command.name, styler("program-name")))
        if command.version:
            head.append(" ").append(text(command.version, styler("version")))
        if command.author:
            head.append("\n").append(text(command.author, styler("author")))
        renders.append(head.append("\n"))

    usage = Text()
    usage.append("usage", styler("usage-label")).append(":").append(" ")
    if command.usage:
        usage.append(text(command.usage, styler("usage-section")))
    else:
        usage.append(text(route or command.name, styler("program-name")))
        if command.children:
            usage.append(" [command]")
        if scope(path):
            usage.append(" [flags]")
        usage.append(" [args]")
    renders.append(usage.append("\n"))

    if command.descr:
        renders.append(text(command.descr, styler("description-section")).append("\n"))

    if command.children:
        table = Table(
            "name", "aliases", "help",
            title=text("subcommands" if len(path) > 1 else "commands", styler("children-title")),
            box=ROUNDED,
            style=styler("children-table"),
            header_style=styler("children-title"),
        )
        for child in command.children:
            if child.descr:
                help = text(child.descr, styler("children-description"))
            else:
                help = text("run '%s %s --help' for details" % (route, child.name), styler("children-description"))
            table.add_row(
                text(child.name, styler("children")),
                text(", ".join(child.aliases), styler("children-aliases")),
                help,
            )
        renders.append(table)

    if flags := scope(path):
        section = Text()
        section.append(text("flags", styler("group-label"))).append(":").append("\n")
        # declaration order reads better than deepest-first
        for flag in reversed(flags.values()):
            style = "flag-name" if flag.type is FlagType.BOOL else "option-name"
            line = Text("  ")
            line.append(Text(" | ").join(
                text(("--" if name == flag.name else "-") + name, styler(style)) for name in flag.names
            ))
            if flag.type is not FlagType.BOOL:
                line.append(" ").append(text("<%s>" % flag.type, styler("metavar")))
            if flag.descr:
                line.append(" " * max(2, 28 - len(line))).append(text(flag.descr, styler("argument-description")))
            section.append(line).append("\n")
        renders.append(section)

    if isinstance(renders[-1], Text):
        renders[-1].rstrip()

    renderable = Group(*renders)
    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{route or command.name} help".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )
    return renderable


def show(path, /, console=Unset):
    """
    Print the help of the last command of `path` (stdout by default).
    """
    console = coalesce(console, Console())
    if len(path) == 1 and getattr(path[0], "helptext", None):
        console.print(Text(str(path[0].helptext)))
        return
    console.print(render(path))


def plaintext(path, /, *, width=80):
    """
    Return the help of the last command of `path` as uncolored text.
    """
    console = Console(width=width, color_system=None, file=io.StringIO())
    if len(path) == 1 and getattr(path[0], "helptext", None):
        console.print(Text(str(path[0].helptext)))
    else:
        console.print(render(path, colorful=False))
    return console.file.getvalue()


def version(app, /, console=Unset):
    """
    Print "name version" for an app.
    """
    console = coalesce(console, Console())
    colorful = getattr(app, "colorful", True)
    console.print(Text.assemble(
        (app.name, "bold #FF4D94" if colorful else ""),
        " ",
        (str(app.version or "unknown"), "#36C5F0" if colorful else ""),
    ))


__all__ = (
    "render",
    "show",
    "plaintext",
    "version",
)
