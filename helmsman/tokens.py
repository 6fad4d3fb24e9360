"""
Token classification: split a raw token list into positionals and flag occurrences.

The extractor knows nothing about declared flags. It records every flag-like
token as an Occurrence (key as typed, optional value) and leaves type checking
to the context accessors, so the same token list always yields the same split.
"""
from collections import namedtuple

Occurrence = namedtuple("Occurrence", ("key", "value"))
Occurrence.__doc__ = """
one flag token captured on the command line.

- key: the flag name or alias as typed, without its leading dashes.
- value: the inline ("--key=value") or following token, or None when absent.
"""


def _split(token, /):
    """
    return (key, value) for a flag token; value is None when there is no '='.
    """
    body = token[2:] if token.startswith("--") else token[1:]
    key, sep, value = body.partition("=")
    return key, value if sep else None


def extract(tokens, /):
    """
    partition tokens into (positionals, occurrences).

    rules
    - a token starting with '--' is a long flag, a token starting with a single
      '-' is a short flag; both split on the first '=' into key/value.
    - without '=', the next token is consumed as the value when it exists and
      does not start with '-' (whatever the flag's eventual type).
    - any other token is a positional, kept in its original relative order.

    edge cases
    - "--key=" yields value "" (present but empty).
    - a trailing "--key" yields value None.

    returns two tuples; every input token lands in exactly one of them.
    """
    tokens = tuple(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("extract() tokens must be strings")

    positionals = []
    occurrences = []

    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1

        if not token.startswith("-"):
            positionals.append(token)
            continue

        key, value = _split(token)
        if value is None and index < len(tokens) and not tokens[index].startswith("-"):
            value = tokens[index]
            index += 1
        occurrences.append(Occurrence(key, value))

    return tuple(positionals), tuple(occurrences)


__all__ = (
    "Occurrence",
    "extract",
)
