"""
Argot help and usage rendering.

Both renderers are pure functions of a Schema (and the program name): they
never look at parse state, so they can run before, after, or without a parse.

Layout
- usage:  "usage: prog [-h] [--number NUMBER] [--tag TAG]... pos [rest...]"
- help:   usage line, description, "positional arguments:" and
          "optional arguments:" sections (descriptions aligned on a column set
          by 'offset', at least two spaces away from the names), then the epilog.

Palette keys
- usage-label, program-name, description-section, epilog-section
- group-label, flag-name, metavar, choice, argument-description

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed and the output is plain text.
"""
from collections import defaultdict

from rich.text import Text

from .arguments import *
from .utils import *


def _palette(colorful):
    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "description-section": "italic #A3A3A3",  # Neutral gray
        "epilog-section": "#737373",  # Dim footer gray

        # === Groups / arguments ===
        "group-label": "bold #FFFFFF",  # Pure white headers
        "argument-description": "#9CA3AF",  # Muted gray
        "flag-name": "bold #22C55E",  # GREEN for flags
        "metavar": "bold #FFD600",  # AMBER for parameters
        "choice": "bold #FF4D94",  # MAGENTA → choices stand out
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _choices(spec, styler):
    choices = spec.choices if isinstance(spec.choices, tuple) else sorted(spec.choices)
    return Text.assemble("{", Text(",").join(Text(choice, styler("choice")) for choice in choices), "}")


def _repeat(label, arity, /):
    """Shape a label after an arity: LOW copies, then [LABEL] or [LABEL...] for the optional rest."""
    parts = [label.copy() for _ in range(arity.low)]
    if arity.high - arity.low == 1:
        parts.append(Text.assemble("[", label, "]"))
    elif arity.high > arity.low:
        parts.append(Text.assemble("[", label, "...]"))
    return Text(" ").join(parts)


def _metavar(flag, styler):
    label = _choices(flag, styler) if flag.choices else Text(flag.label, styler("metavar"))
    return _repeat(label, flag.arity)


def usage(schema, program, /, *, colorful=False):
    """
    Build the usage synopsis of a schema as rich Text ("usage: prog ...").

    Flags come first in registration order ("[--name NAME]", followed by "..."
    when repeated occurrences accumulate), then positionals in declaration order.
    """
    styler = _palette(colorful)
    inputs = []

    for flag in filter(lambda x: not x.hidden, schema.flags.values()):
        entry = Text.assemble("[", Text("--" + flag.name, styler("flag-name")))
        if flag.valued:
            entry.append(" ").append(_metavar(flag, styler))
        entry.append("]")
        if flag.collect:
            entry.append("...")
        inputs.append(entry)

    for positional in filter(lambda x: not x.hidden, schema.positionals):
        label = _choices(positional, styler) if positional.choices else Text(positional.name, styler("metavar"))
        inputs.append(_repeat(label, positional.arity))

    text = Text.assemble(("usage", styler("usage-label")), ": ", (program, styler("program-name")))
    if inputs:
        text.append(" ").append(Text(" ").join(inputs))
    return text


def help(schema, program, /, *, offset=35, colorful=False):
    """
    Build the full help page of a schema as rich Text.

    Descriptions start 'offset' columns after the two-space row indent; names
    too wide for that column keep a two-space gap instead.
    """
    if not isinstance(offset, int) or offset < 2:
        raise ValueError("help() 'offset' must be an integer of at least 2")
    styler = _palette(colorful)

    def row(names, descr):
        size = len(names)
        section = Text("  ").append(names)
        if descr:
            section.append(" " * (2 if size > offset - 2 else offset - size))
            section.append(Text(str(descr), styler("argument-description")))
        return section.append("\n")

    page = usage(schema, program, colorful=colorful).append("\n\n")

    if schema.descr:
        page.append(Text(str(schema.descr), styler("description-section"))).append("\n\n")

    if positionals := [x for x in schema.positionals if not x.hidden]:
        page.append("positional arguments", styler("group-label")).append(":\n")
        for positional in positionals:
            names = _choices(positional, styler) if positional.choices else Text(positional.name, styler("metavar"))
            page.append(row(names, positional.descr))
        page.append("\n")

    if flags := [x for x in schema.flags.values() if not x.hidden]:
        page.append("optional arguments", styler("group-label")).append(":\n")
        for flag in flags:
            names = Text()
            if flag.short is not None:
                names.append("-" + flag.short, styler("flag-name")).append(", ")
            else:
                names.append("    ")
            names.append("--" + flag.name, styler("flag-name"))
            if flag.valued:
                names.append(" ").append(_metavar(flag, styler))
            page.append(row(names, flag.descr))
        page.append("\n")

    if schema.epilog:
        page.append(Text(str(schema.epilog), styler("epilog-section"))).append("\n")

    page.rstrip()
    return page.append("\n")


__all__ = (
    "usage",
    "help",
)
