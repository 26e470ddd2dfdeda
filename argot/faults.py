"""
Argot faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  error. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- ParseError: base type carrying the message and its context (token, index,
  argument, hint) and knowing how to render itself through rich.
- One subclass per error kind; every kind aborts the parse the same way.

UX goals
- Position-first messages: every message names the 1-based token position
  ("at third position") so users can find the culprit in long command lines.
- Soft but technical language: one-sentence lowercase bodies, a single clear hint.
- Styling is configurable via __styles__ in __main__ and only applied when colorful.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - options (1111x)
      • UNKNOWN_OPTION, OPTION_ARITY
    - positionals (1112x)
      • MISSING_POSITIONAL, SUPERFLUOUS_ARGUMENT
    - values (1113x)
      • INVALID_CHOICE, CONVERSION

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- option errors (1111x) ---
    UNKNOWN_OPTION              = 11111
    OPTION_ARITY                = 11112

    # --- positional errors (1112x) ---
    MISSING_POSITIONAL          = 11121
    SUPERFLUOUS_ARGUMENT        = 11122

    # --- value errors (1113x) ---
    INVALID_CHOICE              = 11131
    CONVERSION                  = 11132

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseError(Exception):
    """
    Base of every user-facing parse error.

    Options (all optional)
    - token: the offending token as written ("--numbr", "42x").
    - index: 1-based position of the token in the argument list.
    - argument: the spec involved, when one was resolved.
    - hint: one actionable sentence.
    - prog / colorful: rendering context merged in by the parser.
    """
    __code__ = Unset

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return type(self).__code__

    @property
    def token(self):
        return self.options.get("token")

    @property
    def index(self):
        return self.options.get("index")

    @property
    def argument(self):
        return self.options.get("argument")

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-label": "#9CE19C dim",  # gentle green label
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        text = Text.assemble(
            (self.options.get("prog", "argot"), styler("prog-name")),
            ": ",
            ("error", styler("error-title")),
            ": ",
            (self.message, styler("error-message")),
        )
        if self.hint:
            text.append("\n").append("hint", styler("hint-label")).append(": ").append(self.hint, styler("hint"))
        return text

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})

    def __str__(self):
        return self.message


class UnknownOptionError(ParseError):
    __code__ = FaultCode.UNKNOWN_OPTION


class OptionArityError(ParseError):
    __code__ = FaultCode.OPTION_ARITY


class MissingPositionalError(ParseError):
    __code__ = FaultCode.MISSING_POSITIONAL


class SuperfluousArgumentError(ParseError):
    __code__ = FaultCode.SUPERFLUOUS_ARGUMENT


class InvalidChoiceError(ParseError):
    __code__ = FaultCode.INVALID_CHOICE


class ConversionError(ParseError):
    __code__ = FaultCode.CONVERSION


__all__ = (
    "ParseError",
    "UnknownOptionError",
    "OptionArityError",
    "MissingPositionalError",
    "SuperfluousArgumentError",
    "InvalidChoiceError",
    "ConversionError",
    "FaultCode",
)
