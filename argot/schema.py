"""
Argot schema registry.

A Schema is the ordered collection a parser matches tokens against:
- flags, looked up by long name ("number") or short alias ("n");
- positionals, kept in declaration order (their matching priority).

Registration fails fast. A name shared by two specs (flag or positional) or an
alias shared by two flags raises ValueError immediately, and so do the names
the parse result keeps for itself ("remaining", "halted"); these are defects in
the program, never user errors, so they never wait for parse time.

Quick example:
    >>> schema = Schema(descr="copy files")
    >>> schema.flag("force", "f", descr="overwrite existing files")
    >>> schema.positional("sources", nargs="+")
    >>> schema.positional("destination")
"""
from collections.abc import Mapping
from types import MappingProxyType

from rich.text import Text

from .arguments import *
from .utils import *

# Attributes of the parse result that would shadow a spec of the same name.
RESERVED = frozenset({"remaining", "halted"})


class Schema:
    """
    Ordered registry of flag and positional specs.

    Specs are immutable, so a schema may be shared by successive parses; each
    parse keeps its own binding state.
    """

    descr = mirror("descr")
    epilog = mirror("epilog")

    def __init__(self, *, descr=Unset, epilog=Unset):
        for key, value in (("descr", descr), ("epilog", epilog)):
            if not isinstance(value, str | Text | Unset):
                raise TypeError(f"schema '{key}' must be a string")
            elif isinstance(value, str) and not value.strip():
                raise ValueError(f"schema '{key}' cannot be empty")
        self._descr = coalesce(descr)
        self._epilog = coalesce(epilog)
        self._flags = {}
        self._shorts = {}
        self._positionals = []

    @property
    def flags(self) -> Mapping[str, Flag]:
        return MappingProxyType(self._flags)

    @property
    def positionals(self) -> tuple[Positional, ...]:
        return tuple(self._positionals)

    @property
    def has_digit_alias(self):
        """True when any flag registers a digit short alias ("-1"); negative numbers then read as flags."""
        return any(short.isdigit() for short in self._shorts)

    def _claim(self, name):
        if name in RESERVED:
            raise ValueError(f"schema name {name!r} is reserved by the parse result")
        if name in self._flags or any(positional.name == name for positional in self._positionals):
            raise ValueError(f"schema name {name!r} is already in use")

    def add_flag(self, flag, /):
        """Register a Flag; its name and alias must be unused."""
        if not isinstance(flag, Flag):
            raise TypeError("add_flag() argument must be a flag")
        self._claim(flag.name)
        if flag.short is not None and flag.short in self._shorts:
            raise ValueError(f"schema short alias {flag.short!r} is already in use")
        self._flags[flag.name] = flag
        if flag.short is not None:
            self._shorts[flag.short] = flag
        return flag

    def add_positional(self, positional, /):
        """Register a Positional after the ones already declared."""
        if not isinstance(positional, Positional):
            raise TypeError("add_positional() argument must be a positional")
        self._claim(positional.name)
        self._positionals.append(positional)
        return positional

    def flag(self, *args, **kwargs):
        """Build a Flag from the given metadata, register it and return it."""
        return self.add_flag(Flag(*args, **kwargs))

    def positional(self, *args, **kwargs):
        """Build a Positional from the given metadata, register it and return it."""
        return self.add_positional(Positional(*args, **kwargs))

    def find(self, name, /):
        """Return the flag registered under the long name, or None."""
        return self._flags.get(name)

    def find_short(self, char, /):
        """Return the flag registered under the short alias, or None."""
        return self._shorts.get(char)

    def specs(self):
        """Iterate over every spec: flags in registration order, then positionals."""
        yield from self._flags.values()
        yield from self._positionals

    def __contains__(self, name):
        return name in self._flags or any(positional.name == name for positional in self._positionals)

    def __repr__(self):
        return f"schema(flags={list(self._flags)!r}, positionals={[x.name for x in self._positionals]!r})"


__all__ = (
    "Schema",
)
