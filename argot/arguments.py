r"""
Argot argument specifications.

Overview
- Specs
  • Flag: named option introduced by "--name" and, optionally, a one-character
    short alias ("-n"). Its binding strategy decides what an occurrence does.
  • Positional: argument identified by its position, with an occurrence arity
    across the whole command line (required, optional or variadic).

- Binding strategies (Binding enum, the tagged union for flags)
  • SWITCH: presence-only, arity (0, 0), binds True.
  • COUNTER: presence-only, arity (0, 0), each occurrence adds one.
  • SCALAR: one value per occurrence, a later occurrence replaces the value.
  • VECTOR: values per occurrence from 'nargs', collected or replaced on repeat.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Metadata (sanitized on construction)
- Shared (all specs)
  • name: non-empty identifier matching r"[^\W\d_](-?[^\W_]+)*" for flags; any
    non-empty string without whitespace for positionals.
  • type: registered converter name, Converter, or callable (see argot.converters).
  • choices: Iterable (duplicates rejected unless a Set).
  • descr: Unset | str | Text (short help), non-empty when provided.
  • halt: bool (divert the remaining tokens once satisfied).
  • hidden: bool (suppresses from help and usage).
- Flag only
  • short: Unset | single character.
  • binding: Binding (defaults to SWITCH, or SCALAR when 'type' or 'choices' are given).
  • nargs: Unset | "?" | "+" | "*" | int (>=1) | (low, high), VECTOR only.
  • collect: Unset | bool, VECTOR only.
- Positional only
  • nargs: Unset | "?" | "+" | "*" | int (>=1) | (low, high).

Quick example:
    >>> Flag("verbose", "v", binding=Binding.COUNTER)
    >>> Flag("number", "n", type="integer")
    >>> Flag("vals", binding=Binding.VECTOR, type="integer", nargs=3)
    >>> Positional("sources", nargs="+")
"""
import functools
import operator
import re
from collections.abc import Iterable, Set
from enum import Enum
from typing import NamedTuple

from rich.text import Text

from .converters import Registry
from .utils import *


class Arity(NamedTuple):
    """Inclusive (low, high) bounds; high may be infinity."""
    low: int
    high: int | float

    @property
    def bounded(self):
        return self.high != infinity

    def __str__(self):
        return f"{self.low}..{'inf' if not self.bounded else self.high}"


class Binding(Enum):
    """Value binding strategy of a flag."""
    SWITCH = "switch"
    COUNTER = "counter"
    SCALAR = "scalar"
    VECTOR = "vector"


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages and help output.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(name='verbose', short='v', binding=<Binding.COUNTER: 'counter'>, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _resolve_nargs(cls, nargs, /):
    """
    Internal: translate an 'nargs' declaration into Arity bounds.

    - int n  -> (n, n)
    - "?"    -> (0, 1)
    - "+"    -> (1, infinity)
    - "*"    -> (0, infinity)
    - (low, high) -> validated as given; high may be infinity.
    """
    match nargs:
        case "?":
            return Arity(0, 1)
        case "+":
            return Arity(1, infinity)
        case "*":
            return Arity(0, infinity)
        case str():
            raise ValueError(f"{cls.__typename__} 'nargs' must be one of '?', '+', or '*'")
        case bool():
            raise TypeError(f"{cls.__typename__} 'nargs' must be a string, an integer, or a pair")
        case int() if nargs < 1:
            raise ValueError(f"{cls.__typename__} 'nargs' must be a positive integer")
        case int():
            return Arity(nargs, nargs)
        case (int() as low, int() | float() as high):
            if low < 0 or (isinstance(high, float) and high != infinity):
                raise ValueError(f"{cls.__typename__} 'nargs' bounds must be non-negative integers or infinity")
            if high < max(low, 1):
                raise ValueError(f"{cls.__typename__} 'nargs' upper bound must be positive and not below the lower bound")
            return Arity(low, high)
        case _:
            raise TypeError(f"{cls.__typename__} 'nargs' must be a string, an integer, or a pair")


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every spec.

    Responsibilities
    - descr: Unset | str | Text; trimmed, non-empty when provided, None when omitted.
    - type: resolved through the converter registry (unknown names raise ValueError).
    - choices: must be iterable of strings. If not a Set, duplicates are rejected
      and the collection is normalized to a tuple.

    The dict is modified in place.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    try:
        metadata["type"] = Registry.lookup(metadata["type"])
    except KeyError as exception:
        raise ValueError(f"{cls.__typename__} 'type' is unknown ({exception.args[0]})") from None
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'type' must be a type name or a callable") from None

    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be iterable")
    if not isinstance(choices, Set):
        sanitized = []
        for choice in choices:
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        choices = tuple(sanitized)
    else:
        choices = frozenset(choices)
    if not all(isinstance(choice, str) for choice in choices):
        raise TypeError(f"{cls.__typename__} 'choices' must contain only strings")
    metadata["choices"] = choices


def _sanitize_flag_metadata(cls, metadata, /):
    r"""
    Internal: validate names and the binding strategy of a Flag.

    Responsibilities
    - name: long name without dashes, matching r"[^\W\d_](-?[^\W_]+)*"
      ("number", "dry-run"); unicode letters are allowed.
    - short: Unset or a single non-dash, non-space character ("n", "3").
    - binding: Binding, defaulting to SCALAR when a type or choices are given,
      SWITCH otherwise.
    - arity: (0, 0) for SWITCH/COUNTER, (1, 1) for SCALAR, nargs for VECTOR
      (defaulting to (1, 1)).
    - collect: VECTOR only; defaults to True without nargs and False with it.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid long option name without dashes")
    metadata["name"] = name

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short == "-" or short.isspace()):
        raise ValueError(f"{cls.__typename__} 'short' must be a single character other than '-'")
    metadata["short"] = coalesce(short)

    if metadata["binding"] is Unset:
        typed = metadata["type"] is not Unset or bool(metadata["choices"])
        metadata["binding"] = Binding.SCALAR if typed else Binding.SWITCH
    if not isinstance(binding := metadata["binding"], Binding):
        raise TypeError(f"{cls.__typename__} 'binding' must be a Binding")

    nargs = metadata.pop("nargs")
    collect = metadata["collect"]
    match binding:
        case Binding.SWITCH | Binding.COUNTER:
            if nargs is not Unset or collect is not Unset:
                raise TypeError(f"{binding.value} {cls.__typename__} takes no 'nargs' nor 'collect'")
            if metadata["type"] is not Unset or metadata["choices"]:
                raise TypeError(f"{binding.value} {cls.__typename__} takes no 'type' nor 'choices'")
            metadata["arity"] = Arity(0, 0)
            metadata["collect"] = binding is Binding.COUNTER
        case Binding.SCALAR:
            if nargs is not Unset or collect is not Unset:
                raise TypeError(f"scalar {cls.__typename__} takes no 'nargs' nor 'collect'")
            metadata["arity"] = Arity(1, 1)
            metadata["collect"] = False
        case Binding.VECTOR:
            metadata["arity"] = _resolve_nargs(cls, coalesce(nargs, 1))
            if not isinstance(collect, bool | Unset):
                raise TypeError(f"{cls.__typename__} 'collect' must be a boolean")
            metadata["collect"] = coalesce(collect, nargs is Unset)

    metadata["type"] = coalesce(metadata["type"], "string")


class Flag(metaclass=ArgumentType):
    """
    Named option specification.

    Flag declares a "--name" option, its optional "-x" alias, and how each
    occurrence binds (see Binding). Instances are immutable: every field is
    exposed through a read-only property and no parse state lives on the spec.

    Defaults (materialized when the flag never occurs)
    - SWITCH: False; COUNTER: 0; SCALAR: None; VECTOR: [] (copied per parse).
    """

    __introspectable__ = (
        "name",
        "short",
        "binding",
        "type",
        "arity",
        "collect",
        "default",
        "choices",
        "descr",
        "halt",
        "hidden",
    )

    def __new__(
            cls,
            name,
            short=Unset,
            /,
            binding=Unset,
            type=Unset,
            nargs=Unset,
            collect=Unset,
            default=Unset,
            choices=(),
            descr=Unset,
            *,
            halt=False,
            hidden=False
    ):
        """
        Construct a Flag spec with the provided metadata.

        Parameters
        - name: str
          Long option name without the leading dashes ("number" for "--number").
        - short: Unset | str
          One-character alias ("n" for "-n").
        - binding: Unset | Binding
          Occurrence strategy; inferred from 'type'/'choices' when omitted.
        - type: Unset | str | Converter | Callable
          Value converter for SCALAR/VECTOR flags; "string" when omitted.
        - nargs: Unset | "?" | "+" | "*" | int | (low, high)
          Values per occurrence of a VECTOR flag.
        - collect: Unset | bool
          VECTOR repeat policy: append (True) or replace (False).
        - default: Any
          Value used when the flag never occurs.
        - choices: Iterable[str]
          Accepted literal values, checked before conversion.
        - descr: Unset | str
          Short description for help. If Unset, becomes None.
        - halt: bool
          Once bound, the tokens after this one are diverted into 'remaining'.
        - hidden: bool
          Suppress from help and usage.
        """
        metadata = {
            "name": name,
            "short": short,
            "binding": binding,
            "type": type,
            "nargs": nargs,
            "collect": collect,
            "default": default,
            "choices": choices,
            "descr": descr,
            "halt": bool(halt),
            "hidden": bool(hidden),
        }
        _sanitize_flag_metadata(cls, metadata)
        _sanitize_metadata(cls, metadata)

        if metadata["default"] is Unset:
            metadata["default"] = {
                Binding.SWITCH: False,
                Binding.COUNTER: 0,
                Binding.SCALAR: None,
                Binding.VECTOR: [],
            }[metadata["binding"]]

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def valued(self):
        """True when an occurrence takes values (SCALAR or VECTOR)."""
        return self._arity.high > 0

    @property
    def label(self):
        """Metavar shown in usage and help: the upper-cased name."""
        return self._name.upper().replace("-", "_")


class Positional(metaclass=ArgumentType):
    """
    Positional argument specification.

    Positional declares a value identified by its position. Its arity counts
    occurrences across the whole command line: a required scalar is (1, 1),
    an optional scalar (0, 1), and a variadic positional (high > 1) binds a list.

    Defaults (materialized when nothing was bound)
    - scalar: None; variadic: [] (copied per parse).
    """

    __introspectable__ = (
        "name",
        "type",
        "arity",
        "default",
        "choices",
        "descr",
        "halt",
        "hidden",
    )

    def __new__(
            cls,
            name,
            /,
            type="string",
            nargs=Unset,
            default=Unset,
            choices=(),
            descr=Unset,
            *,
            halt=False,
            hidden=False
    ):
        """
        Construct a Positional spec with the provided metadata.

        Parameters
        - name: str
          Identifier used in diagnostics, help and the result namespace.
        - type: str | Converter | Callable
          Value converter ("string" by default).
        - nargs: Unset | "?" | "+" | "*" | int | (low, high)
          Occurrence arity; required scalar when omitted.
        - default: Any
          Value used when nothing was bound.
        - choices: Iterable[str]
          Accepted literal values, checked before conversion.
        - descr: Unset | str
          Short description for help. If Unset, becomes None.
        - halt: bool
          Once a value is bound, the tokens after it are diverted into 'remaining'.
        - hidden: bool
          Suppress from help and usage.
        """
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        elif re.search(r"\s", name):
            raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace")

        metadata = {
            "name": name,
            "type": type,
            "arity": Arity(1, 1) if nargs is Unset else _resolve_nargs(cls, nargs),
            "default": default,
            "choices": choices,
            "descr": descr,
            "halt": bool(halt),
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)

        if metadata["default"] is Unset:
            metadata["default"] = [] if metadata["arity"].high > 1 else None

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def variadic(self):
        """True when more than one occurrence can be bound (the value is a list)."""
        return self._arity.high > 1

    @property
    def optional(self):
        return self._arity.low == 0


__all__ = (
    # Public API surface for consumers of argot.arguments.
    # These names are re-exported from the package __init__.

    # Classes (specifications)
    "Flag",
    "Positional",

    # Types
    "Arity",
    "Binding",
)

# Internal metaclass, not part of the public API.
del ArgumentType
