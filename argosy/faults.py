"""
Argosy faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain (usage, definition, environment, warnings) to
  keep logs and searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- CommandHalt: control signal used by terminating handlers (help) to end the
  run successfully; not a fault.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Exit statuses
- usage errors (the command line is wrong) exit with 1.
- definition errors (a target or flag declaration is wrong) exit with 2.
- environment errors (a dependency is missing) exit with 3.

Integration
- Engine components raise faults directly; the dispatcher surfaces them with
  trigger(fault, **ctx). In non-shell mode the exception propagates; in shell
  mode it is rendered via rich and the process exits with the fault status.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping
    - usage (11xxx): the command line does not match the declarations.
      • UNKNOWN_TARGET, UNKNOWN_FLAG, UNKNOWN_FLAG_NAME,
        ARGUMENT_TYPE_MISMATCH, MISSING_ARGUMENT
    - definition (21xxx): a target or flag declaration is malformed.
      • INVALID_FLAG_SPEC, DUPLICATE_FLAG, DUPLICATE_FLAG_NAME,
        INVALID_ARGUMENT_SPEC, TARGET_HANDLER_MISSING
    - environment (31xxx): the host system lacks something.
      • MISSING_DEPENDENCY
    - warnings (12xxx)
      • UNUSED_ARGUMENTS
    """
    # --- usage errors (11xxx) ---
    UNKNOWN_TARGET              = 11101
    UNKNOWN_FLAG                = 11111
    UNKNOWN_FLAG_NAME           = 11112
    ARGUMENT_TYPE_MISMATCH      = 11121
    MISSING_ARGUMENT            = 11122

    # --- definition errors (21xxx) ---
    INVALID_FLAG_SPEC           = 21101
    DUPLICATE_FLAG              = 21102
    DUPLICATE_FLAG_NAME         = 21103
    INVALID_ARGUMENT_SPEC       = 21111
    TARGET_HANDLER_MISSING      = 21121

    # --- environment errors (31xxx) ---
    MISSING_DEPENDENCY          = 31101

    # --- warnings (12xxx) ---
    UNUSED_ARGUMENTS            = 12121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, kind, /):
    # Shared layout for errors and warnings: header, message, hint (optionally in a panel).
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    tool = options.get("tool")
    prog = text(getattr(main, "__prog__", getattr(tool, "name", "argosy")), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(options["code"].normalize() if "code" in options else "", styler("code")),
        " | ",
        text(str(options.get("title", kind)).title(), styler(kind + "-title")),
        " ]"
    )
    message = text(fault.message, styler(kind + "-message"))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options.get("hint"), styler("hint")))
    body = [message, hint]
    if docs := options.get("docs"):
        body.append(text(docs, styler("docs")))

    if fancy:
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class CommandException(Exception):
    """
    base type of every engine error.

    - message: lowercased, one-sentence description naming the failing item.
    - options: read-only mapping with title, code, hint and context
      (flag, argument, target, expected, inferred, ...).
    - status: process exit status used in shell mode.
    """
    status = 1

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        self.options.get("console", console).print(self)
        sys.exit(self.status)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# --- usage errors ---
class UnknownTargetError(CommandException): ...
class UnknownFlagError(CommandException): ...
class UnknownFlagNameError(CommandException): ...
class ArgumentTypeMismatchError(CommandException): ...
class MissingArgumentError(CommandException): ...


# --- definition errors ---
class DefinitionError(CommandException):
    status = 2


class InvalidFlagSpecError(DefinitionError): ...
class DuplicateFlagError(DefinitionError): ...
class DuplicateFlagNameError(DefinitionError): ...
class InvalidArgumentSpecError(DefinitionError): ...
class TargetHandlerMissingError(DefinitionError): ...


# --- environment errors ---
class MissingDependencyError(CommandException):
    status = 3


class CommandWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnusedArgumentsWarning(CommandWarning): ...


class CommandHalt(Exception):
    """
    stop the run early with the given exit status (0 by default).

    raised by terminating flag handlers such as --help once their output has
    been produced; the dispatcher turns it into its return status.
    """

    def __init__(self, status=0, /):
        super().__init__(status)
        self.status = status


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions
      are raised and warnings are emitted through the warnings module.

    typical options
    - tool, shell, fancy, colorful, console, and any context the renderer may
      want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "DefinitionError",
    "UnknownTargetError",
    "UnknownFlagError",
    "UnknownFlagNameError",
    "ArgumentTypeMismatchError",
    "MissingArgumentError",
    "InvalidFlagSpecError",
    "DuplicateFlagError",
    "DuplicateFlagNameError",
    "InvalidArgumentSpecError",
    "TargetHandlerMissingError",
    "MissingDependencyError",
    "CommandWarning",
    "UnusedArgumentsWarning",
    "CommandHalt",
    "FaultCode",
    "trigger",
    "getdoc",
)
