"""
Per-invocation execution context handed to actions.

A Context bundles the positional arguments left for the matched command and
the flag occurrences visible to it, and exposes typed accessors over them:

    def greet(context):
        if context.bool_flag("bye"):
            print("bye,", *context.args)
        try:
            print("age:", context.int_flag("age"))
        except FlagNotFoundError:
            pass

Visibility follows the command path: a flag declared on the matched command
or on any of its ancestors is in scope, and a descendant redeclaring a name
shadows the ancestor's declaration.
"""
import logging

from .faults import *
from .flags import FlagType
from .utils import *

logger = logging.getLogger(__name__)


def scope(path, /):
    """
    Flags visible at the end of a command path, keyed by flag name.

    The mapping is ordered deepest command first so that lookups see a
    descendant's declaration before an ancestor's.
    """
    flags = {}
    for command in reversed(path):
        for flag in command.flags:
            flags.setdefault(flag.name, flag)
    return flags


def designate(flags, key, /):
    """
    Find the flag a key (name or alias, as typed) designates, or None.

    Exact names win over aliases; within each pass the deepest declaration wins.
    """
    for flag in flags.values():
        if flag.name == key:
            return flag
    for flag in flags.values():
        if key in flag.aliases:
            return flag
    return None


class Context(metaclass=DescriptorType):
    """
    Read-only view of one dispatch: matched command, positionals and flags.

    Properties
    - command: the matched command.
    - path: commands from the root to the matched command.
    - args: positional arguments left after command resolution.
    - flags: flag name -> last Occurrence captured for it.
    - scope: flag name -> Flag, for every flag visible to the command.
    """

    __introspectable__ = (
        "command",
        "path",
        "args",
        "flags",
        "scope",
    )
    __displayable__ = (
        "command",
        "args",
        "flags",
    )

    def __new__(cls, path, /, args=(), occurrences=()):
        if not path:
            raise ValueError(f"{cls.__typename__} path cannot be empty")

        self = super().__new__(cls)
        self._path = tuple(path)
        self._command = self._path[-1]
        self._args = tuple(args)
        self._scope = scope(self._path)
        self._flags = {}

        for occurrence in occurrences:
            if (flag := designate(self._scope, occurrence.key)) is None:
                logger.debug("dropping occurrence %r: no flag in scope of %r", occurrence.key, self._command.name)
                continue
            # last occurrence wins
            self._flags[flag.name] = occurrence

        return self

    def bool_flag(self, name, /):
        """
        Return True when the bool flag `name` (or one of its aliases) was given.

        Never raises: undeclared flags, non-bool flags and absent flags are all False.
        """
        flag = designate(self._scope, name)
        if flag is None or flag.type is not FlagType.BOOL:
            return False
        return flag.name in self._flags

    def string_flag(self, name, /):
        """
        Return the value of the string flag `name`.

        Raises one of the FlagError kinds when it cannot.
        """
        return self._value(name, FlagType.STRING)

    def int_flag(self, name, /):
        """
        Return the value of the int flag `name`, parsed as a base-10 integer.

        Raises one of the FlagError kinds when it cannot.
        """
        return self._value(name, FlagType.INT)

    def float_flag(self, name, /):
        """
        Return the value of the float flag `name`.

        Raises one of the FlagError kinds when it cannot.
        """
        return self._value(name, FlagType.FLOAT)

    get_bool_flag = bool_flag
    get_string_flag = string_flag
    get_int_flag = int_flag
    get_float_flag = float_flag

    def _value(self, name, type, /):
        """
        resolve, check and convert one flag value.

        checks (in order)
        - the name or alias is declared in scope          → UndefinedFlagError
        - the declared type is the requested one          → FlagTypeError
        - an occurrence was captured                      → FlagNotFoundError
        - the occurrence carries a value                  → FlagArgumentError
        - the value parses as the requested type          → FlagValueTypeError
        """
        route = " ".join(command.name for command in self._path if command.name)

        if (flag := designate(self._scope, name)) is None:
            raise UndefinedFlagError(
                "flag %r is not defined for %r" % (name, route or self._command.name),
                flag=name,
                hint="declare it with Flag(%r, ...) on the command or one of its parents" % name,
            )
        if flag.type is not type:
            raise FlagTypeError(
                "flag %r is declared as %s, not %s" % (name, flag.type, type),
                flag=name,
                hint="read it with context.%s_flag(%r)" % (flag.type, name),
            )
        try:
            occurrence = self._flags[flag.name]
        except KeyError:
            raise FlagNotFoundError(
                "flag %r was not provided" % name,
                flag=name,
                hint="pass it as '--%s <%s>'" % (flag.name, flag.type),
            ) from None
        if occurrence.value is None:
            raise FlagArgumentError(
                "flag %r requires a value" % name,
                flag=name,
                hint="use '--%s <%s>' or '--%s=<%s>'" % (flag.name, flag.type, flag.name, flag.type),
            )
        try:
            return type.convert(occurrence.value)
        except ValueError:
            raise FlagValueTypeError(
                "flag %r expects %s value, got %r" % (name, "an int" if type is FlagType.INT else "a " + type, occurrence.value),
                flag=name,
                value=occurrence.value,
                hint="pass a valid %s after '--%s'" % (type, flag.name),
            ) from None

    def help(self):
        """
        Print the help of the matched command (custom help text for the app, if set).
        """
        from .help import show
        show(self._path)


__all__ = (
    "Context",
)
