"""
Argot output sinks.

A parser never prints or exits on its own: it writes through an output sink
and terminates through an exit handler, both injectable.

- ConsoleOutput: rich consoles bound to stdout ('out') and stderr ('err').
- BufferOutput: collects plain text in memory (tests, embedding).
- The default exit handler is sys.exit; a handler that returns lets the parse
  hand back its best-effort outcome instead.
"""
import io

from rich.console import Console
from rich.text import Text


class ConsoleOutput:
    """Write rich renderables to the terminal; help/version to stdout, errors to stderr."""

    def __init__(self, *, colorful=False):
        options = {"highlight": False, "markup": False, "emoji": False, "no_color": not colorful}
        self.stdout = Console(**options)
        self.stderr = Console(stderr=True, **options)

    def out(self, renderable, /):
        self.stdout.print(renderable, end="", soft_wrap=True)

    def err(self, renderable, /):
        self.stderr.print(renderable, end="", soft_wrap=True)


class BufferOutput:
    """Collect everything written as plain text; 'stdout' and 'stderr' read it back."""

    def __init__(self):
        self._stdout = io.StringIO()
        self._stderr = io.StringIO()

    @staticmethod
    def _plain(renderable):
        if isinstance(renderable, Text):
            return renderable.plain
        if hasattr(renderable, "__rich__"):
            return BufferOutput._plain(renderable.__rich__())
        return str(renderable)

    def out(self, renderable, /):
        self._stdout.write(self._plain(renderable))

    def err(self, renderable, /):
        self._stderr.write(self._plain(renderable))

    @property
    def stdout(self):
        return self._stdout.getvalue()

    @property
    def stderr(self):
        return self._stderr.getvalue()


__all__ = (
    "ConsoleOutput",
    "BufferOutput",
)
