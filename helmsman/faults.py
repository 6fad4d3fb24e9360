"""
Helmsman faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- FlagErrorKind: the closed set of flag retrieval failures (undefined, type
  mismatch, not found, missing value, unparsable value).
- CommandException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- FlagError and its five kinds: raised by the typed Context accessors.
- ActionError: raised by user actions to report a failed run.
- trigger(): central entry point to surface a fault (respecting shell/fancy/colorful).

Propagation
- Nothing in the resolution/dispatch core raises on its own: flag errors are
  raised by the accessors to the action that asked, which decides whether to
  ignore, default, log, or escalate them.
- App.run() escalates uncaught faults through trigger(): in non-shell mode they
  are raised again; in shell mode they are rendered via rich and the process
  exits with status 1.
"""
import copy
import sys
from collections import defaultdict
from enum import Enum, IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - flags (112xx)
      • UNDEFINED_FLAG, FLAG_TYPE_MISMATCH, FLAG_NOT_FOUND,
        MISSING_FLAG_VALUE, INVALID_FLAG_VALUE
    - actions (113xx)
      • ACTION_FAILED

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- flag retrieval errors (112xx) ---
    UNDEFINED_FLAG     = 11201
    FLAG_TYPE_MISMATCH = 11202
    FLAG_NOT_FOUND     = 11203
    MISSING_FLAG_VALUE = 11204
    INVALID_FLAG_VALUE = 11205

    # --- action errors (113xx) ---
    ACTION_FAILED      = 11301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class FlagErrorKind(Enum):
    """
    flag retrieval failure kinds, in the order the accessors check them.
    """
    UNDEFINED = "Undefined"
    TYPE_ERROR = "TypeError"
    NOT_FOUND = "NotFound"
    ARGUMENT_ERROR = "ArgumentError"
    VALUE_TYPE_ERROR = "ValueTypeError"

    def __str__(self):
        return self.value


class CommandException(Exception):
    """
    base fault: a lowercased message plus read-only rendering options.

    options commonly carried: title, code, hint, tool (the app), shell, fancy,
    colorful. subclasses may declare class-level `code` and `title` defaults.
    """
    code = Unset
    title = "command error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType({"code": type(self).code, "title": type(self).title} | options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

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

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", getattr(tool, "name", None) or "helmsman"), styler("prog-name"))

        code = self.options["code"]
        header = Text.assemble(
            "[ ",
            prog,
            *((" — ", text(code.normalize(), styler("code"))) if code else ()),
            " | ",
            text(self.options["title"].title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class FlagError(CommandException):
    """
    base of the five flag retrieval failures; `flag` is the requested name.
    """
    kind = Unset
    title = "flag error"

    @property
    def flag(self):
        return self.options.get("flag")


class UndefinedFlagError(FlagError):
    kind = FlagErrorKind.UNDEFINED
    code = FaultCode.UNDEFINED_FLAG
    title = "undefined flag"


class FlagTypeError(FlagError):
    kind = FlagErrorKind.TYPE_ERROR
    code = FaultCode.FLAG_TYPE_MISMATCH
    title = "flag type mismatch"


class FlagNotFoundError(FlagError):
    kind = FlagErrorKind.NOT_FOUND
    code = FaultCode.FLAG_NOT_FOUND
    title = "flag not found"


class FlagArgumentError(FlagError):
    kind = FlagErrorKind.ARGUMENT_ERROR
    code = FaultCode.MISSING_FLAG_VALUE
    title = "missing flag value"


class FlagValueTypeError(FlagError):
    kind = FlagErrorKind.VALUE_TYPE_ERROR
    code = FaultCode.INVALID_FLAG_VALUE
    title = "invalid flag value"


class ActionError(CommandException):
    """
    raised by an action to report that the requested work failed.
    """
    code = FaultCode.ACTION_FAILED
    title = "action failed"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console and the process exits;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "FlagErrorKind",
    "CommandException",
    "FlagError",
    "UndefinedFlagError",
    "FlagTypeError",
    "FlagNotFoundError",
    "FlagArgumentError",
    "FlagValueTypeError",
    "ActionError",
    "trigger",
)
