"""
Argot matching engine (token classification and binding).

Overview
- Matcher walks the raw tokens once, left to right, and decides for every token
  which spec it belongs to and how many following tokens it consumes.
- Slot holds the per-parse binding state of one spec (value and bound count);
  specs themselves stay immutable.
- Namespace is the materialized result: spec name -> value, plus the verbatim
  'remaining' tokens of a halted scan.

Token classification
- A token is a flag token when it is not exactly "--", has at least two
  characters, starts with "-" and, unless a flag registers a digit short
  alias, does not read as a plain number ("-42", "-4.2", "-1e5").
- The first bare "--" switches flag recognition off; each later "--" moves on
  to the next positional (segmenting several variadic positionals), unless the
  positional before it already gave way on its last token.

Flag tokens
- "--name" and "--name=value" (the inline form only for one-value flags).
- "-x", "-xVALUE" (when x takes exactly one value), "-xyz" (every character but
  the last must be a zero-arity flag; the last one is the active flag).
- The active flag takes up to arity.high following tokens, stopping at the
  first flag token; fewer than arity.low is an error.

Positional negotiation
- Positional tokens are counted up front (flags and the values they take are
  simulated, "--" is not counted). A variadic positional keeps absorbing tokens
  while more are left than the later positionals strictly need, and yields
  once the slack reaches zero. A positional whose minimum is met is skipped
  before binding when the tokens left are all needed by later positionals:
  with "x?" then "y", the single token "v" binds y and leaves x unset, where
  binding strictly by position would report y as missing.

Halt
- Once a halt-marked spec is bound (after the whole short cluster and its
  values), every later token is captured verbatim into 'remaining' and the
  scan ends. 'remaining' is replaced, never appended to.
"""
import logging
from collections.abc import Mapping

from .arguments import *
from .converters import is_number
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


class Slot:
    """Binding state of one spec during a single parse."""

    def __init__(self, spec, /):
        self.spec = spec
        self.value = Unset
        self.count = 0

    def occur(self, values, /):
        """Record a flag occurrence with its already converted values."""
        flag = self.spec
        match flag.binding:
            case Binding.SWITCH:
                self.value = True
            case Binding.COUNTER:
                self.value = coalesce(self.value, flag.default) + 1
            case Binding.SCALAR:
                self.value, = values
            case Binding.VECTOR:
                # The first occurrence never extends the default.
                if self.value is Unset or not flag.collect:
                    self.value = []
                self.value.extend(values)
        self.count += len(values) if flag.valued else 1

    def push(self, value, /):
        """Bind one positional occurrence."""
        if self.spec.variadic:
            if self.value is Unset:
                self.value = []
            self.value.append(value)
        else:
            self.value = value
        self.count += 1

    def result(self):
        value = coalesce(self.value, self.spec.default)
        return list(value) if isinstance(value, list) else value


class Namespace(Mapping):
    """
    Parse result: spec name -> bound value (or its default).

    Attribute access maps underscores to dashes, so ns.dry_run reads "dry-run".
    'remaining' holds the verbatim tokens diverted by a halt (or by non-strict
    mode) and 'halted' tells whether the scan stopped early.
    """

    def __init__(self, values=(), /, remaining=(), halted=False):
        self._values = dict(values)
        self._remaining = tuple(remaining)
        self._halted = bool(halted)

    remaining = mirror("remaining")
    halted = mirror("halted")

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __getattr__(self, name):
        values = self.__dict__.get("_values", {})
        for key in (name, name.replace("_", "-")):
            if key in values:
                return values[key]
        raise AttributeError(f"namespace has no argument {name!r}")

    def __eq__(self, other):
        if isinstance(other, Namespace):
            return (self._values, self._remaining, self._halted) == (other._values, other._remaining, other._halted)
        return super().__eq__(other)

    __hash__ = None

    def __repr__(self):
        fields = ", ".join(f"{key}={value!r}" for key, value in self._values.items())
        return f"namespace({fields}, remaining={list(self._remaining)!r})"


def _quantity(arity, /):
    if arity.low == arity.high:
        return "a value" if arity.low == 1 else f"{arity.low} values"
    return f"at least {arity.low} value{'s' * (arity.low != 1)}"


class Matcher:
    """
    Single-pass state machine binding tokens to the specs of a schema.

    A Matcher is used for one parse: scan() binds the tokens (raising a
    ParseError on the first problem), check() verifies the positional
    minimums, namespace() materializes the result.
    """

    def __init__(self, schema, /, *, strict=True):
        self.schema = schema
        self.strict = strict
        self.slots = {spec.name: Slot(spec) for spec in schema.specs()}
        self.positionals = schema.positionals
        self.delimited = False
        self.halted = False
        self.cursor = 0
        self.yielded = False
        self.left = 0
        self.remaining = ()
        self._digits = schema.has_digit_alias

    def is_flag(self, token, /):
        """Tell whether a token is a flag token (see module overview)."""
        if token == "--" or len(token) < 2 or not token.startswith("-"):
            return False
        return self._digits or not is_number(token)

    def _tally(self, tokens):
        """Count the tokens that will be bound positionally, simulating flag value consumption."""
        count = 0
        delimited = False
        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1
            if token == "--":
                delimited = True
                continue
            if delimited or not self.is_flag(token):
                count += 1
                continue

            halts = False
            if token.startswith("--"):
                name, inline, _ = token[2:].partition("=")
                flag = self.schema.find(name)
            else:
                flag = self.schema.find_short(token[1])
                inline = flag is not None and flag.arity == (1, 1) and len(token) > 2
                if not inline:
                    halts = any(getattr(self.schema.find_short(char), "halt", False) for char in token[1:-1])
                    flag = self.schema.find_short(token[-1])
            if flag is None:
                continue

            if not inline:
                taken = 0
                while index < len(tokens) and taken < flag.arity.high and not self.is_flag(tokens[index]):
                    index += 1
                    taken += 1
            if halts or flag.halt:
                break
        return count

    def _unmet(self, start, /):
        """Sum of the minimums still unmet by the positionals from 'start' on."""
        return sum(
            max(0, positional.arity.low - self.slots[positional.name].count)
            for positional in self.positionals[start:]
        )

    def _halt(self, tokens, start, /):
        self.remaining = tuple(tokens[start:])
        self.halted = True
        logger.debug("halted, remaining %r", list(self.remaining))

    def _convert(self, spec, value, label, position, /):
        """Check the choices then convert; nothing is bound here."""
        if spec.choices and value not in spec.choices:
            raise InvalidChoiceError(
                "invalid value %r for %s at %s position" % (value, label, ordinal(position)),
                token=value,
                index=position,
                argument=spec,
                hint="possible values: " + ", ".join(
                    spec.choices if isinstance(spec.choices, tuple) else sorted(spec.choices)
                ),
            )
        try:
            return spec.type(value)
        except (ValueError, TypeError) as exception:
            expected = f": expected {typename}" if (typename := spec.type.typename) else ""
            raise ConversionError(
                "invalid value %r for %s at %s position%s" % (value, label, ordinal(position), expected),
                token=value,
                index=position,
                argument=spec,
                hint=str(exception) or f"{label} expects {typename or 'a different value'}",
            ) from exception

    def _short(self, char, token, position, /):
        if (flag := self.schema.find_short(char)) is None:
            raise UnknownOptionError(
                "unknown option '-%s' in %r at %s position" % (char, token, ordinal(position)),
                token=token,
                index=position,
                hint="check the spelling of the option or use '--' before values starting with '-'",
            )
        return flag

    def _flag(self, tokens, index, /):
        """Handle the flag token at 'index'; return the index of the next unread token."""
        token = tokens[index]
        position = index + 1
        inline = Unset
        halts = False

        if token.startswith("--"):
            name, equals, value = token[2:].partition("=")
            written = "--" + name
            if (flag := self.schema.find(name)) is None:
                raise UnknownOptionError(
                    "unknown option %r at %s position" % (written, ordinal(position)),
                    token=token,
                    index=position,
                    hint="check the spelling of the option or use '--' before values starting with '-'",
                )
            if equals:
                if flag.arity != (1, 1):
                    raise OptionArityError(
                        "option %r cannot take an inline value at %s position because it takes %s" % (
                            written, ordinal(position), _quantity(flag.arity) if flag.valued else "no value"
                        ),
                        token=token,
                        index=position,
                        argument=flag,
                        hint=f"pass the values of {written} as separate arguments" if flag.valued else f"drop the value after {written}",
                    )
                inline = value
        else:
            flag = self._short(token[1], token, position)
            written = "-" + token[1]
            if flag.arity == (1, 1) and len(token) > 2:
                inline = token[2:]
            else:
                for char in token[1:-1]:
                    bundled = self._short(char, token, position)
                    if bundled.valued:
                        raise OptionArityError(
                            "option '-%s' requires %s and must end the cluster %r at %s position" % (
                                char, _quantity(bundled.arity), token, ordinal(position)
                            ),
                            token=token,
                            index=position,
                            argument=bundled,
                            hint=f"move '-{char}' to the end of the cluster or pass it separately",
                        )
                    logger.debug("bundled flag %r in %r", bundled.name, token)
                    self.slots[bundled.name].occur(())
                    halts |= bundled.halt
                flag = self._short(token[-1], token, position)
                written = "-" + token[-1]

        next = index + 1
        if inline is not Unset:
            values = [(inline, position)]
        else:
            values = []
            while next < len(tokens) and len(values) < flag.arity.high and not self.is_flag(tokens[next]):
                values.append((tokens[next], next + 1))
                next += 1
            if len(values) < flag.arity.low:
                raise OptionArityError(
                    "option %r requires %s but %d %s given at %s position" % (
                        written, _quantity(flag.arity), len(values), "was" if len(values) == 1 else "were", ordinal(position)
                    ),
                    token=token,
                    index=position,
                    argument=flag,
                    hint=f"pass {_quantity(flag.arity)} after {written}",
                )

        label = "option %r" % written
        converted = [self._convert(flag, value, label, where) for value, where in values]
        self.slots[flag.name].occur(converted)
        logger.debug("flag %r bound %r", flag.name, converted)

        if halts or flag.halt:
            self._halt(tokens, next)
        return next

    def _positional(self, tokens, index, /):
        token = tokens[index]
        position = index + 1

        while self.cursor < len(self.positionals):
            positional = self.positionals[self.cursor]
            slot = self.slots[positional.name]
            if slot.count >= positional.arity.high:
                self.cursor += 1
            elif slot.count >= positional.arity.low and self.left <= self._unmet(self.cursor + 1):
                logger.debug("positional %r yields to the ones after it", positional.name)
                self.cursor += 1
            else:
                break
        else:
            if self.strict:
                raise SuperfluousArgumentError(
                    "superfluous argument %r at %s position" % (token, ordinal(position)),
                    token=token,
                    index=position,
                    hint="remove the extra argument or quote it if it belongs to another one",
                )
            logger.debug("no positional left for %r", token)
            self._halt(tokens, index)
            return

        value = self._convert(positional, token, "argument %r" % positional.name, position)
        slot.push(value)
        self.left -= 1
        self.yielded = False
        logger.debug("positional %r bound %r", positional.name, value)

        if positional.halt:
            self._halt(tokens, index + 1)
        elif slot.count >= positional.arity.high or (
            slot.count >= positional.arity.low and self.left == self._unmet(self.cursor + 1)
        ):
            # A following "--" closes this segment instead of skipping the next positional.
            self.cursor += 1
            self.yielded = True

    def scan(self, tokens, /):
        """Bind every token, or raise the first ParseError met."""
        tokens = list(tokens)
        self.left = self._tally(tokens)
        logger.debug("scanning %r (%d positional tokens)", tokens, self.left)

        index = 0
        while index < len(tokens) and not self.halted:
            token = tokens[index]
            if token == "--":
                if self.delimited and self.yielded:
                    self.yielded = False
                elif self.delimited:
                    self.cursor += 1
                    logger.debug("delimiter moves to positional #%d", self.cursor)
                self.delimited = True
                index += 1
            elif not self.delimited and self.is_flag(token):
                index = self._flag(tokens, index)
            else:
                self._positional(tokens, index)
                index += 1
        return self

    def check(self):
        """Raise MissingPositionalError for the first positional below its minimum."""
        for positional in self.positionals:
            if (count := self.slots[positional.name].count) < positional.arity.low:
                if count == 0:
                    message = "missing required argument %r" % positional.name
                else:
                    message = "argument %r requires %s but only %d were given" % (
                        positional.name, _quantity(positional.arity), count
                    )
                raise MissingPositionalError(
                    message,
                    argument=positional,
                    hint=f"pass {_quantity(positional.arity)} for {positional.name!r}",
                )
        return self

    def namespace(self):
        return Namespace(
            ((name, slot.result()) for name, slot in self.slots.items()),
            remaining=self.remaining,
            halted=self.halted,
        )


__all__ = (
    "Matcher",
    "Namespace",
    "Slot",
)
