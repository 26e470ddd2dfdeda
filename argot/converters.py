"""
Argot value converters (text -> typed value).

Scope
- Converter: a parse function paired with a human-readable type name used in
  diagnostics ("invalid value '42x' for option '--number': expected integer").
- Registry: a process-wide lookup table of converters keyed by declared type name.
- Built-ins: "string", "integer" and "real", registered on import.

Contract
- A converter receives the raw token text and returns the typed value, or raises
  ValueError/TypeError to reject it. The engine treats any such exception as a
  conversion failure and never binds a partial result.
- Numeric converters consume the whole token: "42x", " 42", "+42" and "4_2" are rejected.

Custom types
    >>> @converter("even", typename="even integer")
    ... def even(text):
    ...     if (value := Registry.lookup("integer")(text)) % 2:
    ...         raise ValueError("odd number")
    ...     return value
    ...
    >>> schema.flag("pairs", type="even")
"""
import logging
import math
import re

from .utils import *

logger = logging.getLogger(__name__)

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

# Decimal or scientific notation, plus inf/infinity/nan; sign is '-' only.
_REAL = re.compile(r"-?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:e[-+]?\d+)?)", re.IGNORECASE | re.ASCII)
_INTEGER = re.compile(r"-?\d+", re.ASCII)


class Converter:
    """
    Callable pairing a parse function with the type name shown in diagnostics.

    Converters are immutable; `parse` and `typename` are read-only.
    """

    parse = mirror("parse")
    typename = mirror("typename")

    def __init__(self, parse, /, typename=Unset):
        if not callable(parse):
            raise TypeError("converter 'parse' must be callable")
        if not isinstance(typename, str | Unset):
            raise TypeError("converter 'typename' must be a string")
        self._parse = parse
        # Plain callables (int, float, a user function) are named after themselves.
        self._typename = coalesce(typename, getattr(parse, "__name__", type(parse).__name__))

    def __call__(self, text, /):
        return self._parse(text)

    def __repr__(self):
        return f"converter(typename={self._typename!r})"


class Registry:
    """
    Registry of converters keyed by declared type name.

    Lookups accept a registered name, a Converter (returned unchanged) or any
    other callable (wrapped in a Converter named after the callable).
    """

    _converters = {}

    @classmethod
    def register(cls, name, parse, /, typename=Unset):
        """Register a parse function under the given declared type name."""
        if not isinstance(name, str):
            raise TypeError("register() 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("register() 'name' cannot be empty")
        if not isinstance(parse, Converter):
            parse = Converter(parse, coalesce(typename, name))
        if name in cls._converters:
            logger.debug("replacing converter %r", name)
        cls._converters[name] = parse
        return parse

    @classmethod
    def lookup(cls, type, /):
        """Resolve a declared type (name, Converter or callable) into a Converter."""
        if isinstance(type, Converter):
            return type
        if isinstance(type, str):
            try:
                return cls._converters[type]
            except KeyError:
                raise KeyError(f"no converter registered for type {type!r}") from None
        if callable(type):
            return Converter(type)
        raise TypeError("lookup() argument must be a type name or a callable")

    @classmethod
    def names(cls):
        """List all registered type names."""
        return list(cls._converters.keys())


def converter(name, /, typename=Unset):
    """
    Decorator to register a parse function as a named converter.

    Usage:
        @converter("color", typename="color name")
        def color(text): ...

    The decorated function is returned as its Converter.
    """

    @rename("converter")
    def wrapper(parse, /):
        if not callable(parse):
            raise TypeError("@converter() must be applied to a callable")
        return Registry.register(name, parse, typename)

    return wrapper


def is_number(text, /):
    """
    Tell whether a token reads as a plain real number ("-42", "-4.2", "-1e5", "-inf").

    Token classification relies on this so bare negative numbers are values,
    not short option clusters.
    """
    return _REAL.fullmatch(text) is not None


@converter("string", typename="")
def _string(text, /):
    return text


@converter("integer", typename="integer")
def _integer(text, /):
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer literal {text!r}")
    if not INT64_MIN <= (value := int(text)) <= INT64_MAX:
        raise ValueError(f"integer {text!r} out of range")
    return value


@converter("real", typename="real number")
def _real(text, /):
    if not _REAL.fullmatch(text):
        raise ValueError(f"invalid real literal {text!r}")
    # Overflow to infinity only when infinity was spelled out.
    if math.isinf(value := float(text)) and "inf" not in text.lower():
        raise ValueError(f"real number {text!r} out of range")
    return value


__all__ = (
    # Types
    "Converter",
    "Registry",

    # Decorators
    "converter",

    # Functions
    "is_number",
)
