"""
Helmsman utilities (internal helpers, carefully exposed)

Scope
- Building blocks shared by the flag and command layers so that both expose
  the same semantics: read-only introspection, stable reprs, name validation.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables for clean tracebacks.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers are
    returned as immutable views (tuple, MappingProxyType, frozenset).

- DescriptorType
  • Metaclass for descriptors (flags, commands): derives __typename__, wires
    mirror() properties for __introspectable__ names, provides __repr__/__rich_repr__.

- split_aliases(cls, *names)
  • Normalize declared names/aliases: comma-joined strings are split and trimmed,
    shapes are validated, duplicates are rejected.

Stability and contract
- These utilities are re-exported via __all__; names not in __all__ are internal.
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations and isinstance() (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when the sentinel appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0 or "" are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Shallow read-only view of a container (tuple / MappingProxyType / frozenset).
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" on the instance and returns an immutable view
    for container types, so builders can keep mutating their private lists
    while consumers only ever see snapshots.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


class DescriptorType(type):
    """
    Metaclass that turns declarative classes into introspectable descriptors.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens);
      it is used as the subject of every validation message.
    - Expose every name listed in __introspectable__ as a read-only property
      (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations; __displayable__
      (when set) narrows the fields shown, otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


# A name cannot start with a dash (the dash belongs to the token, not to the name),
# and cannot contain whitespace, commas or '=' (they would never survive tokenization).
_NAME = re.compile(r"[^\s,=\-][^\s,=]*")


def split_aliases(cls, /, *names):
    """
    Normalize a sequence of declared names into a tuple of distinct strings.

    Each item may be a single name or a comma-joined list ("a, ag"); pieces are
    split on ',' and trimmed. Order of first appearance is preserved.

    Raises
    - TypeError: when an item is not a string.
    - ValueError: when a piece is empty, malformed, or repeated.
    """
    aliases = []
    for item in names:
        if not isinstance(item, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        for alias in item.split(","):
            if not (alias := alias.strip()):
                raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
            elif not _NAME.fullmatch(alias):
                raise ValueError(f"{cls.__typename__} name {alias!r} is malformed")
            elif alias in aliases:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            aliases.append(alias)
    return tuple(aliases)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "DescriptorType",
    "split_aliases",
)
