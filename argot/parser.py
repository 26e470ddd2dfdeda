"""
Argot parser (configuration and outcome).

Parser is the caller-facing entry point. It owns the configuration (program
name, version string, built-in help, exit-on-error, strict mode, output sink,
exit handler) and turns one Matcher pass into an Outcome:

- PARSED:  every token was bound and every positional minimum is met, or the
           scan halted (the halted part is left to a downstream parser).
- HELP:    "--help"/"-h" was given; help went to the output sink, exit(0).
- VERSION: "--version" was given; the version string went to the sink, exit(0).
- ERROR:   the first ParseError was written with the usage synopsis to the
           error sink, exit(1) when exit-on-error is on.

The exit handler may return (tests, embedding): the outcome is returned then.

Quick example:
    >>> parser = Parser("cp", version="1.0")
    >>> def build(schema):
    ...     schema.flag("force", "f")
    ...     schema.positional("sources", nargs="+")
    ...     schema.positional("destination")
    ...
    >>> outcome = parser.parse(build, ["-f", "a", "b", "dir"])
    >>> outcome.namespace.sources
    ['a', 'b']
"""
import enum
import logging
import os
import shlex
import sys
from collections.abc import Iterable

from . import render
from .engine import Matcher
from .faults import ParseError
from .schema import Schema
from .sinks import ConsoleOutput
from .utils import *

logger = logging.getLogger(__name__)


class Status(enum.Enum):
    PARSED = "parsed"
    HELP = "help"
    VERSION = "version"
    ERROR = "error"


class Outcome:
    """
    Terminal result of a parse.

    Truthy unless the parse failed. 'namespace' is available for every status
    but ERROR; 'fault' only for ERROR. unwrap() returns the namespace or raises
    the fault.
    """

    def __init__(self, status, /, namespace=None, fault=None):
        self._status = status
        self._namespace = namespace
        self._fault = fault

    @property
    def status(self):
        return self._status

    @property
    def namespace(self):
        return self._namespace

    @property
    def fault(self):
        return self._fault

    @property
    def halted(self):
        return self._namespace is not None and self._namespace.halted

    @property
    def remaining(self):
        return self._namespace.remaining if self._namespace is not None else ()

    def unwrap(self):
        if self._fault is not None:
            raise self._fault
        return self._namespace

    def __bool__(self):
        return self._status is not Status.ERROR

    def __repr__(self):
        return f"outcome(status={self._status.value!r}, namespace={self._namespace!r}, fault={self._fault!r})"


def _sanitize_parser_metadata(metadata, /):
    """
    Internal: validate parser configuration.

    - program: Unset | non-empty str; defaults to __main__.__prog__ or the
      basename of sys.argv[0].
    - version: Unset | non-empty str; enables the built-in --version flag.
    - output: Unset | object with out()/err(); defaults to ConsoleOutput.
    - exit: callable taking the status code.
    - offset: int >= 2, help description column.
    """
    for key in ("program", "version"):
        if not isinstance(value := metadata[key], str | Unset):
            raise TypeError(f"parser '{key}' must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"parser '{key}' cannot be empty")
        metadata[key] = value

    main = __import__("__main__")
    metadata["program"] = coalesce(
        metadata["program"],
        getattr(main, "__prog__", os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argot"),
    )
    metadata["version"] = coalesce(metadata["version"])

    if metadata["output"] is Unset:
        metadata["output"] = ConsoleOutput(colorful=metadata["colorful"])
    elif not all(callable(getattr(metadata["output"], name, None)) for name in ("out", "err")):
        raise TypeError("parser 'output' must provide out() and err() methods")

    if not callable(metadata["exit"]):
        raise TypeError("parser 'exit' must be callable")

    if not isinstance(offset := metadata["offset"], int) or isinstance(offset, bool):
        raise TypeError("parser 'offset' must be an integer")
    elif offset < 2:
        raise ValueError("parser 'offset' must be at least 2")


class Parser:
    """
    Configured entry point turning an argument list into an Outcome.

    A Parser holds no parse state: it may be reused for successive or
    concurrent parses, each of which builds its own schema copy and matcher.
    """

    program = mirror("program")
    version = mirror("version")
    output = mirror("output")
    strict = mirror("strict")
    colorful = mirror("colorful")

    def __init__(
            self,
            program=Unset,
            /,
            version=Unset,
            *,
            help=True,
            exit_on_error=True,
            strict=True,
            output=Unset,
            exit=sys.exit,
            colorful=False,
            offset=35
    ):
        """
        Configure a parser.

        Parameters
        - program: Unset | str
          Name shown in usage and errors.
        - version: Unset | str
          Version string; registers the built-in --version flag when given.
        - help: bool
          Register the built-in --help/-h flag.
        - exit_on_error: bool
          Call the exit handler with status 1 after reporting an error.
        - strict: bool
          Reject tokens no positional can take; otherwise divert them (and
          everything after them) into 'remaining'.
        - output: Unset | sink with out()/err()
          Where help, version and errors are written (ConsoleOutput by default).
        - exit: Callable[[int], Any]
          Exit handler (sys.exit by default).
        - colorful: bool
          Style help and errors with the palette (see argot.render).
        - offset: int
          Help description column.
        """
        metadata = {
            "program": program,
            "version": version,
            "help": bool(help),
            "exit_on_error": bool(exit_on_error),
            "strict": bool(strict),
            "output": output,
            "exit": exit,
            "colorful": bool(colorful),
            "offset": offset,
        }
        _sanitize_parser_metadata(metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def schema(self, source=Unset, /):
        """
        Build a fresh Schema holding the built-in flags followed by 'source'.

        'source' may be a Schema (its specs are copied over, the instance is
        left untouched), a callable receiving the fresh schema, or Unset.
        """
        schema = Schema()
        if isinstance(source, Schema):
            schema = Schema(
                descr=Unset if source.descr is None else source.descr,
                epilog=Unset if source.epilog is None else source.epilog,
            )

        if self._help:
            schema.flag("help", "h", halt=True, descr="show this help message and exit")
        if self._version is not None:
            schema.flag("version", halt=True, descr="show the version string and exit")

        match source:
            case Schema():
                for flag in source.flags.values():
                    schema.add_flag(flag)
                for positional in source.positionals:
                    schema.add_positional(positional)
            case _ if source is Unset:
                pass
            case _ if callable(source):
                source(schema)
            case _:
                raise TypeError("schema() argument must be a schema or a callable")
        return schema

    def usage(self, source=Unset, /):
        """Return the usage synopsis of a schema as rich Text."""
        return render.usage(self.schema(source), self._program, colorful=self._colorful)

    def help(self, source=Unset, /):
        """Return the help page of a schema as rich Text."""
        return render.help(self.schema(source), self._program, offset=self._offset, colorful=self._colorful)

    def _fail(self, fault, schema):
        fault = fault.__replace__(prog=self._program, colorful=self._colorful)
        self._output.err(fault)
        self._output.err("\n")
        self._output.err(render.usage(schema, self._program, colorful=self._colorful).append("\n"))
        logger.debug("parse failed with %s", fault.code.name)
        if self._exit_on_error:
            self._exit(1)
        return Outcome(Status.ERROR, fault=fault)

    def parse(self, source, argv=Unset, /):
        """
        Parse an argument list against a schema.

        Parameters
        - source: Schema | Callable[[Schema], Any]
          The caller's specs (see schema()).
        - argv: Unset | str | Iterable[str]
          Unset reads sys.argv[1:]; a string is split shell-style.

        Returns
        - Outcome (see Status). When the exit handler terminates the process,
          help, version and errors never return.
        """
        if argv is Unset:
            argv = sys.argv[1:]
        elif isinstance(argv, str):
            argv = shlex.split(argv)
        elif not isinstance(argv, Iterable):
            raise TypeError("parse() 'argv' must be a string or an iterable of strings")
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("parse() 'argv' must contain only strings")

        schema = self.schema(source)
        matcher = Matcher(schema, strict=self._strict)
        try:
            matcher.scan(argv)
        except ParseError as fault:
            return self._fail(fault, schema)

        namespace = matcher.namespace()
        if self._help and namespace["help"]:
            self._output.out(render.help(schema, self._program, offset=self._offset, colorful=self._colorful))
            self._exit(0)
            return Outcome(Status.HELP, namespace)
        if self._version is not None and namespace["version"]:
            self._output.out(self._version + "\n")
            self._exit(0)
            return Outcome(Status.VERSION, namespace)
        if matcher.halted:
            return Outcome(Status.PARSED, namespace)

        try:
            matcher.check()
        except ParseError as fault:
            return self._fail(fault, schema)
        return Outcome(Status.PARSED, namespace)


__all__ = (
    "Parser",
    "Outcome",
    "Status",
)
