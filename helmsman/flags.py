r"""
Helmsman flag specifications.

Overview
- FlagType: closed set of value kinds a flag can carry (bool, string, int, float).
  Each member knows how to coerce the textual value captured on the command line.
- Flag: named, optionally aliased, typed switch declared on a command.

Metadata (sanitized on construction)
- name: non-empty, no leading dash, no whitespace, no ',' and no '='.
- aliases: same shape as name; comma-joined strings are split ("a, ag").
  The name and aliases must not collide with each other.
- type: FlagType member or its string value ("bool", "string", "int", "float").
- descr: Unset | str (short help), non-empty when provided.

Matching
- A flag is designated on the command line by its name or any alias, with one
  or two leading dashes (`--age`, `-a`); the dash count is not significant.

Quick example:
    >>> from helmsman.flags import Flag, FlagType
    >>> age = Flag("age", FlagType.INT, "a, ag", descr="age of the greeted person")
    >>> age.matches("ag")
    True
    >>> age.type.convert("10")
    10
"""
from enum import StrEnum

from rich.text import Text

from .utils import *


class FlagType(StrEnum):
    """
    value kinds a flag can declare.

    - BOOL: presence-only switch; a value token, if any, is ignored.
    - STRING: value passed through unchanged.
    - INT: value parsed as a base-10 integer.
    - FLOAT: value parsed as a floating point number.
    """
    BOOL = "bool"
    STRING = "string"
    INT = "int"
    FLOAT = "float"

    def convert(self, value, /):
        """
        coerce a captured textual value into this type.

        raises ValueError when the text does not parse; bool flags always
        convert to True since only their presence matters.
        """
        match self:
            case FlagType.BOOL:
                return True
            case FlagType.STRING:
                return value
            case FlagType.INT:
                return int(value, 10)
            case FlagType.FLOAT:
                return float(value)


class Flag(metaclass=DescriptorType):
    """
    Named, typed flag specification.

    A Flag is immutable once built: every field is exposed through a read-only
    property. It is owned by exactly one command; uniqueness across sibling
    flags is checked by the command when the tree is finalized.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "type",
        "descr",
    )

    def __new__(cls, name, type=FlagType.BOOL, /, *aliases, descr=Unset):
        """
        Construct a Flag.

        Parameters
        - name: str
          Canonical name, used as the key of the flag in a Context.
        - type: FlagType | str
          Value kind; strings are looked up by value ("int" -> FlagType.INT).
        - aliases: str
          Alternate names. Each argument may hold several comma-joined aliases.
        - descr: Unset | str
          Short description for help output. If Unset, becomes None.

        Raises
        - TypeError: when a field has the wrong type.
        - ValueError: when a name is malformed or duplicated, or the type is unknown.
        """
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif "," in name:
            raise ValueError(f"{cls.__typename__} 'name' must be a single name")
        names = split_aliases(cls, name, *aliases)

        if not isinstance(type, FlagType):
            if not isinstance(type, str):
                raise TypeError(f"{cls.__typename__} 'type' must be a flag-type")
            try:
                type = FlagType(type.strip().lower())
            except ValueError:
                raise ValueError(f"{cls.__typename__} 'type' must be one of %s" % ", ".join(
                    repr(member.value) for member in FlagType
                )) from None

        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        self = super().__new__(cls)
        self._name = names[0]
        self._aliases = names[1:]
        self._type = type
        self._descr = coalesce(descr)
        return self

    @property
    def names(self):
        """
        Name followed by every alias, in declaration order.
        """
        return (self.name,) + self.aliases

    @property
    def usage(self):
        """
        Usage fragment for help output, e.g. "--age(-a, -ag) <int>".
        """
        usage = "--" + self.name
        if self.aliases:
            usage += "(%s)" % ", ".join("-" + alias for alias in self.aliases)
        if self.type is not FlagType.BOOL:
            usage += " <%s>" % self.type
        return usage

    def matches(self, key, /):
        """
        Tell whether a key as typed on the command line designates this flag.
        """
        return key == self.name or key in self.aliases


__all__ = (
    "FlagType",
    "Flag",
)
