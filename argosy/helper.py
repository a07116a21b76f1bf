"""
Help and debug rendering (rich).

Views
- summary: usage line, help aliases, common flags and the targets table with
  flag/argument counts and descriptions.
- target: detailed help of one target (description, positional arguments
  table, flags table).
- registry: debug dump of the registered flags and the last executed schedule.

Palette keys
- usage-label, program-name, usage-section, description-section
- section-label, table-border, table-header
- flag-name, metavar, type, priority, target-name, count, description
- panel-title

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed entirely.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

PALETTE = {
    # === Head sections ===
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",

    # === Tables ===
    "section-label": "bold #FFFFFF",
    "table-border": "#4B5563",
    "table-header": "bold #FFFFFF",

    # === Cells ===
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "type": "italic #FFD600",
    "priority": "#00E6FF",
    "target-name": "bold #36C5F0",
    "count": "#D1D5DB",
    "description": "#9CA3AF",

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",
}


class Renderer:
    """
    builds the rich renderables of the help and debug views.

    - prog: program name shown in usage lines (__main__.__prog__ wins).
    - colorful: apply the palette.
    - fancy: wrap every view in a titled panel.
    """

    def __init__(self, prog, /, *, colorful=False, fancy=False):
        main = __import__("__main__")
        self.prog = getattr(main, "__prog__", prog)
        self.colorful = colorful
        self.fancy = fancy
        self._styles = defaultdict(str, PALETTE | getattr(main, "__styles__", {}))

    def styler(self, style):
        return self._styles[style] if self.colorful else ""

    def text(self, fragment, style=""):
        # Normalize to Text; styles are dropped in non-colorful mode.
        if fragment is None:
            return Text("")
        if not self.colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), self.styler(style))

    def _table(self, title, *columns):
        return Table(
            *columns,
            title=self.text(title, "section-label"),
            title_justify="left",
            box=ROUNDED,
            style=self.styler("table-border"),
            header_style=self.styler("table-header"),
        )

    def _usage(self, *segments):
        usage = Text.assemble(self.text("usage", "usage-label"), ": ", self.text(self.prog, "program-name"))
        for segment in segments:
            usage.append(" ").append(self.text(segment, "usage-section"))
        return usage

    def _flag_names(self, flag):
        names = "--" + flag.name
        if flag.short is not None:
            names = "-%s, %s" % (flag.short, names)
        return self.text(names, "flag-name")

    def _flags(self, title, flags):
        table = self._table(title, "flag", "argument", "priority", "description")
        for flag in flags:
            if flag.argument is not None:
                argument = Text.assemble(
                    self.text("<%s>" % flag.argument, "metavar"),
                    " ",
                    self.text(str(flag.type), "type"),
                )
                descr = Text.assemble(
                    self.text(flag.descr, "description"),
                    "\n",
                    self.text("%s: %s" % (flag.argument, flag.argdescr), "description"),
                )
            else:
                argument = Text("")
                descr = self.text(flag.descr, "description")
            table.add_row(self._flag_names(flag), argument, self.text(flag.priority, "priority"), descr)
        return table

    def _wrap(self, title, renders):
        renderable = Group(*renders)
        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", title.upper(), " ]", style=self.styler("panel-title")),
                title_align="left",
            )
        return renderable

    def summary(self, common, targets, /):
        """
        usage summary.

        - common: the common FlagSpecs.
        - targets: iterable of (name, flag count, argument count, description).
        """
        renders = [
            self._usage("[common flags]", "<target>", "[target flags]", "[arguments]"),
            self.text(
                "run '%s -h', '%s --help' or '%s help' for this summary, "
                "'%s --help-target <target>' for the details of a target"
                % ((self.prog,) * 4),
                "description-section",
            ),
        ]
        if common:
            renders.append(self._flags("common flags", common))

        table = self._table("targets", "target", "flags", "arguments", "description")
        for name, flags, arguments, descr in targets:
            table.add_row(
                self.text(name, "target-name"),
                self.text(flags, "count"),
                self.text(arguments, "count"),
                self.text(descr or "no description", "description"),
            )
        renders.append(table)
        return self._wrap("%s help" % self.prog, renders)

    def target(self, name, context, /):
        """
        detailed help of the target loaded into context.
        """
        arguments = context.arguments
        renders = [self._usage(name, "[flags]", *(
            "<%s%s>" % (spec.name, "..." * spec.variadic) for spec in arguments
        ))]
        if context.descr:
            renders.append(self.text(context.descr, "description-section"))

        if arguments:
            table = self._table("arguments", "argument", "type", "description")
            for spec in arguments:
                table.add_row(
                    self.text(spec.name, "metavar"),
                    self.text(spec.typename, "type"),
                    self.text(spec.descr, "description"),
                )
            renders.append(table)

        if flags := [flag for flag in context.registry if flag not in context.common]:
            renders.append(self._flags("flags", flags))
        if common := [flag for flag in context.registry if flag in context.common]:
            renders.append(self._flags("common flags", common))
        return self._wrap("%s %s" % (self.prog, name), renders)

    def registry(self, context, /):
        """
        debug dump: registered flags and the schedule executed last.
        """
        renders = [self._flags("registered flags (%d)" % len(context.registry), context.registry)]

        table = self._table("schedule", "order", "priority", "flag")
        for index, invocation in enumerate(context.schedule, 1):
            table.add_row(
                self.text(index, "count"),
                self.text(invocation.priority, "priority"),
                self.text("--" + invocation.flag, "flag-name"),
            )
        renders.append(table)
        return self._wrap("%s debug" % self.prog, renders)


__all__ = (
    "Renderer",
    "PALETTE",
)
