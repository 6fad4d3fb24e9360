"""
Helmsman command layer: declare, resolve, and dispatch command trees.

What this module provides
- Command: a named, optionally aliased node of the command tree carrying flags,
  children (subcommands) and an optional action.
- App: the root Command, with program metadata (version, author, custom help)
  and presentation/runtime options (shell, fancy, colorful).
- resolve(root, positionals): greedy, leftmost descent through the tree.
- dispatch(root, argv): extract → resolve → build Context → run the action.
- command(...): decorator/factory building a Command from an action.
- invoke(obj, prompt): convenience runner for apps, commands, or plain callables.

Core ideas
- Configuration first: descriptors are built once (constructor keywords or the
  fluent builder methods alias/flag/include/command), validated and frozen by
  finalize(), then shared read-only across any number of dispatches.
- Resolution never fails: unmatched tokens become the matched command's args.
- Flag errors are not raised here; they surface from the Context accessors to
  the action that asked for a value.

Quick start
    from helmsman import App, Flag, FlagType, invoke

    app = App("greeter", version="1.0.0")

    @app.command("hello", "h", flags=[Flag("bye", FlagType.BOOL, "b")])
    def hello(context):
        print("bye" if context.bool_flag("bye") else "hello", *context.args)

    if __name__ == "__main__":
        app.run()          # or: invoke(app, "hello --bye world")

Design notes
- Sibling commands and the flags of one command must not share names or aliases;
  collisions are reported by finalize() as ValueError.
- A command without an action falls back to the root's action; with neither,
  dispatch does nothing.
"""
import inspect
import logging
import os.path
import shlex
import sys
from collections import namedtuple
from collections.abc import Iterable

from rich.text import Text

from .context import Context, designate
from .faults import *
from .flags import Flag
from .help import show, version
from .tokens import extract
from .utils import *
from .utils import _NAME

logger = logging.getLogger(__name__)

Resolution = namedtuple("Resolution", ("command", "remaining_args", "path"))
Resolution.__doc__ = """
outcome of resolve().

- command: the deepest command matched by the positional tokens.
- remaining_args: positionals left after the matched command names.
- path: commands from the root to the matched command.
"""


def _sanitize_text(cls, field, value, /):
    """
    Internal: validate an optional text field (descr, usage, version, ...).

    Unset becomes None; strings are trimmed and must not be empty.
    """
    if not isinstance(value, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    return coalesce(value)


def _check_unique(command, kind, items, /):
    """
    Internal: reject names/aliases shared by two items of one level.
    """
    owners = {}
    for item in items:
        for name in item.names:
            if owners.setdefault(name, item) is not item:
                raise ValueError(
                    f"{type(command).__typename__} {command.name!r} {kind} name {name!r} is already in use"
                )
            elif [*item.names].count(name) > 1:
                raise ValueError(
                    f"{type(command).__typename__} {command.name!r} {kind} name {name!r} is repeated"
                )
    if len(set(map(id, items))) != len(items):
        raise ValueError(f"{type(command).__typename__} {command.name!r} declares the same {kind} twice")


class Command(metaclass=DescriptorType):
    """
    Node of the command tree.

    Responsibilities
    - Introspection: exposes name, aliases, descr, usage, flags, children and
      action as read-only properties.
    - Composition: owns its flags and children; builder methods return self so
      declarations can be chained until the tree is finalized.
    - Invocation: calling a command with a Context runs its action (if any).

    Lifecycle
    - Constructed with keywords or built fluently (alias, flag, include, command).
    - finalize() validates the whole subtree and freezes it; every builder
      method raises TypeError afterwards.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "descr",
        "usage",
        "flags",
        "children",
        "action",
    )

    def __new__(
            cls,
            name,
            /,
            *aliases,
            descr=Unset,
            usage=Unset,
            action=Unset,
            flags=(),
            children=(),
    ):
        """
        Construct a Command.

        Parameters
        - name: str
          Token that selects the command on the command line.
        - aliases: str
          Alternate tokens; each argument may hold several comma-joined aliases.
        - descr: Unset | str
          Short description; defaults to the action's docstring.
        - usage: Unset | str
          Usage line shown in help; synthesized when Unset.
        - action: Unset | Callable[[Context], Any]
          Handler run when the command is matched.
        - flags: Iterable[Flag]
        - children: Iterable[Command]

        Raises
        - TypeError / ValueError on malformed metadata.
        """
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif "," in name:
            raise ValueError(f"{cls.__typename__} 'name' must be a single name")
        names = split_aliases(cls, name, *aliases)

        if action is not Unset and not callable(action):
            raise TypeError(f"{cls.__typename__} 'action' must be callable")
        if isinstance(action, Command):
            raise TypeError(f"{cls.__typename__} 'action' cannot be a command; use include() instead")
        if descr is Unset and action is not Unset:
            descr = inspect.getdoc(action) or Unset

        self = super().__new__(cls)
        self._name = names[0]
        self._aliases = list(names[1:])
        self._descr = _sanitize_text(cls, "descr", descr)
        self._usage = _sanitize_text(cls, "usage", usage)
        self._action = coalesce(action)
        self._flags = []
        self._children = []
        self._frozen = False

        if not isinstance(flags, Iterable) or not isinstance(children, Iterable):
            raise TypeError(f"{cls.__typename__} 'flags' and 'children' must be iterables")
        for flag in flags:
            self.flag(flag)
        for child in children:
            self.include(child)
        return self

    @property
    def names(self):
        """
        Name followed by every alias, in declaration order.
        """
        return (self.name,) + self.aliases

    @property
    def frozen(self):
        return self._frozen

    def matches(self, token, /):
        """
        Tell whether a positional token selects this command (exact, case-sensitive).
        """
        return token == self._name or token in self._aliases

    def _mutable(self):
        if self._frozen:
            raise TypeError(f"{type(self).__typename__} {self.name!r} is finalized and cannot be modified")

    def alias(self, *aliases):
        """
        Add aliases (comma-joined strings are split). Returns self.
        """
        self._mutable()
        self._aliases.extend(split_aliases(type(self), *aliases))
        return self

    def flag(self, flag, /):
        """
        Declare a flag on this command. Returns self.
        """
        self._mutable()
        if not isinstance(flag, Flag):
            raise TypeError(f"{type(self).__typename__} flags must be flag instances")
        self._flags.append(flag)
        return self

    def include(self, child, /):
        """
        Attach an existing command as the last child. Returns self.
        """
        self._mutable()
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} children must be commands")
        if isinstance(child, App):
            raise TypeError(f"{type(self).__typename__} children cannot be apps")
        if child is self:
            raise ValueError(f"{type(self).__typename__} {self.name!r} cannot include itself")
        self._children.append(child)
        return self

    def handler(self, action, /):
        """
        Register the action of this command (once).

        Returns the action, enabling decorator-style usage: @cmd.handler
        """
        self._mutable()
        if not callable(action) or isinstance(action, Command):
            raise TypeError(f"{type(self).__typename__} action must be callable")
        if self._action is not None:
            raise TypeError(f"{type(self).__typename__} {self.name!r} action cannot be overridden")
        self._action = action
        if self._descr is None and (doc := inspect.getdoc(action)):
            self._descr = doc
        return action

    def command(self, source=Unset, /, *aliases, **metadata):
        """
        Create a subcommand from an action and attach it under this command.

        Modes (same as the module-level command())
        - @cmd.command                → name derived from the function
        - @cmd.command("name", "n")   → explicit name and aliases
        - cmd.command(function)       → direct mode

        Returns the created child (not self), so it can be chained further.
        """
        built = command(source, *aliases, **metadata)
        if isinstance(built, Command):
            self.include(built)
            return built

        @rename("command")
        def wrapper(action, /):
            self.include(child := built(action))
            return child

        return wrapper

    def finalize(self):
        """
        Validate the whole subtree and freeze it. Idempotent; returns self.

        Checks
        - flag names/aliases are unique within each command;
        - sibling command names/aliases are unique;
        - no command appears twice on one path (no cycles).

        Raises
        - ValueError on the first collision found.
        """
        _finalize(self, ())
        return self

    def __call__(self, context, /):
        if self._action is None:
            return None
        return self._action(context)


def _finalize(command, lineage, /):
    if any(command is ancestor for ancestor in lineage):
        raise ValueError(f"{type(command).__typename__} {command.name!r} is its own ancestor")
    _check_unique(command, "flag", command._flags)
    _check_unique(command, "command", command._children)
    for child in command._children:
        _finalize(child, lineage + (command,))
    command._frozen = True


def _program():
    """
    Internal: default app name, the basename of sys.argv[0] ("app" when unusable).
    """
    program = os.path.basename(sys.argv[0]) if sys.argv else ""
    return program if _NAME.fullmatch(program) else "app"


class App(Command):
    """
    Root of a command tree, with program metadata and runtime options.

    Extra properties
    - version, author: shown in the help head and by the version flag.
    - helptext: custom help text replacing the rendered help of the app.
    - helpers: flag keys ("h", "help") that print help instead of running an action.
    - versioners: flag keys ("v", "version") that print the version (app level only).
    - shell: when True, run() renders uncaught faults and exits with status 1;
      otherwise they are raised.
    - fancy / colorful: presentation of help and faults.

    Helper and versioner keys only apply while no flag in scope claims them.
    """

    __introspectable__ = (
        "version",
        "author",
        "helptext",
        "helpers",
        "versioners",
        "shell",
        "fancy",
        "colorful",
    )
    __displayable__ = (
        "name",
        "version",
        "descr",
        "usage",
        "flags",
        "children",
        "action",
        "shell",
    )

    def __new__(
            cls,
            name=Unset,
            /,
            *,
            version=Unset,
            author=Unset,
            descr=Unset,
            usage=Unset,
            action=Unset,
            flags=(),
            children=(),
            helptext=Unset,
            helpers=("h", "help"),
            versioners=("v", "version"),
            shell=False,
            fancy=False,
            colorful=True,
    ):
        """
        Construct an App.

        Parameters (in addition to Command's)
        - name: Unset | str
          Program name; defaults to the basename of sys.argv[0].
        - version, author, helptext: Unset | str
        - helpers, versioners: Iterable[str]
          Flag keys (without dashes) triggering help / version output; empty disables.
        - shell, fancy, colorful: bool
        """
        name = coalesce(name, _program())

        self = super().__new__(cls, name, descr=descr, usage=usage, action=action, flags=flags, children=children)
        self._version = _sanitize_text(cls, "version", version)
        self._author = _sanitize_text(cls, "author", author)
        self._helptext = _sanitize_text(cls, "helptext", helptext)

        for field, keys in (("helpers", helpers), ("versioners", versioners)):
            if isinstance(keys, str):
                keys = (keys,)
            if not isinstance(keys, Iterable):
                raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")
            setattr(self, "_" + field, split_aliases(cls, *keys))

        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        return self

    def run(self, argv=Unset, /):
        """
        Finalize the tree and dispatch argv (sys.argv when Unset).

        Uncaught faults raised by the action (ActionError, or a FlagError the
        action chose not to handle) are surfaced through trigger(): raised in
        non-shell mode, rendered to stderr with exit status 1 in shell mode.
        """
        argv = sys.argv if argv is Unset else argv
        self.finalize()
        try:
            dispatch(self, argv)
        except CommandException as fault:
            trigger(fault, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)


def resolve(root, positionals, /):
    """
    walk the command tree against positional tokens.

    algorithm
    - start at the root with a cursor on the first positional.
    - while tokens remain, pick the first child (declaration order) whose name
      or aliases equal the token; descend and advance on a match, stop otherwise.
    - greedy and without backtracking: once matched, a command stays matched and
      the unmatched suffix becomes its remaining args.

    returns a Resolution; never fails (degenerately, the root with every positional).
    """
    if not isinstance(root, Command):
        raise TypeError("resolve() first argument must be a command")

    positionals = tuple(positionals)
    path = [root]
    cursor = 0
    while cursor < len(positionals):
        token = positionals[cursor]
        for child in path[-1].children:
            if child.matches(token):
                break
        else:
            break
        path.append(child)
        cursor += 1

    return Resolution(path[-1], positionals[cursor:], tuple(path))


def dispatch(root, argv, /):
    """
    run the command selected by argv.

    phases
    - drop argv[0] (the program's own invocation name).
    - extract positionals and flag occurrences (see tokens.extract).
    - resolve the positionals against the tree (see resolve).
    - build the Context: remaining args, plus the occurrences of every flag
      declared on the matched command or its ancestors.
    - for an App root: a helper key prints the matched command's help, a
      versioner key on the app itself prints its version; both only when no
      flag in scope claims that key.
    - run the matched command's action, else the root's action, else nothing.
    """
    if not isinstance(root, Command):
        raise TypeError("dispatch() first argument must be a command")
    argv = tuple(argv)
    if not all(isinstance(token, str) for token in argv):
        raise TypeError("dispatch() argv must be a sequence of strings")

    root.finalize()

    positionals, occurrences = extract(argv[1:])
    resolution = resolve(root, positionals)
    logger.debug(
        "resolved %r to %r (args=%r)",
        argv[1:], " ".join(command.name for command in resolution.path), resolution.remaining_args,
    )
    context = Context(resolution.path, resolution.remaining_args, occurrences)

    if isinstance(root, App):
        keys = [occurrence.key for occurrence in occurrences if designate(context.scope, occurrence.key) is None]
        if any(key in root.helpers for key in keys):
            logger.debug("help requested for %r", resolution.command.name)
            show(resolution.path)
            return
        if resolution.command is root and any(key in root.versioners for key in keys):
            logger.debug("version requested for %r", root.name)
            version(root)
            return

    if resolution.command.action is not None:
        resolution.command(context)
    elif root.action is not None:
        logger.debug("%r has no action; falling back to %r", resolution.command.name, root.name)
        root(context)
    else:
        logger.debug("no action to run for %r", resolution.command.name)


def command(source=Unset, /, *aliases, **metadata):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:     cmd = command(function, descr=...)
    - Decorator:  @command                        (name from the function)
                  @command("name", "alias", ...)  (explicit name and aliases)

    The function becomes the command's action; underscores in a derived name
    become dashes and surrounding underscores are dropped.

    Returns
    - Command | Callable[[Callable], Command]
    """
    if isinstance(source, Command):
        raise TypeError("command() cannot wrap a command; use include() instead")

    if callable(source):
        if aliases:
            raise TypeError("command() aliases require an explicit name")
        name = source.__name__.strip("_").replace("_", "-")
        return Command(name, action=source, **metadata)

    if source is not Unset and not isinstance(source, str):
        raise TypeError("command() argument must be a callable or a name")

    @rename("command")
    def wrapper(action, /):
        if not callable(action) or isinstance(action, Command):
            raise TypeError("@command() must be applied to a callable")
        name = coalesce(source, action.__name__.strip("_").replace("_", "-"))
        return Command(name, *aliases, action=action, **metadata)

    return wrapper


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for apps, commands or callables.

    Parameters
    - object: App (run), Command (dispatched as a root) or a plain callable
      (wrapped as the action of an anonymous App).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    The program name (object's name) is prepended as argv[0].
    """
    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() prompt must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    if isinstance(object, App):
        return object.run([object.name, *tokens])
    if isinstance(object, Command):
        return dispatch(object, [object.name, *tokens])
    if callable(object):
        return invoke(App(action=object), tokens)

    raise TypeError("invoke() first argument must be an app, a command, or a callable")


__all__ = (
    "Resolution",
    "Command",
    "App",
    "resolve",
    "dispatch",
    "command",
    "invoke",
)
