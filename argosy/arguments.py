r"""
Argosy flag and positional argument specifications.

Overview
- Specs
  • FlagSpec: named switch with an optional single-character short form, a
    long name, a priority (0-9) and an optional typed argument.
  • ArgumentSpec: positional, typed argument of a target; the last one of a
    target may be variadic ("string..." or variadic=True).

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ through read-only properties.

Metadata (sanitized on construction)
- FlagSpec
  • short: None | str (exactly one character, not '-').
  • name: str, non-empty, no whitespace, not starting with '-'.
  • descr: str, non-empty.
  • priority: int in [0, 9].
  • argument/type/argdescr: all three or none; type in {any, int, float, string}.
- ArgumentSpec
  • name/descr: non-empty strings.
  • type: {any, int, float, string}, optionally suffixed with "..." for variadic.

Handlers
- A FlagSpec forwards calls to its bound callback. The callback is bound at
  construction (callback=...) or later, once, with bind(); target files may
  leave it to the flag_name_<identifier> naming convention.

Quick example:
    >>> verbose = FlagSpec("v", "verbose", "talk more", 0, callback=print)
    >>> output = FlagSpec(None, "out", "output path", 1, "path", "string", "where to write")
    >>> extra = ArgumentSpec("extra", "string...", "anything else")
"""
import builtins
import functools
import operator
import re

from .faults import FaultCode, InvalidFlagSpecError, InvalidArgumentSpecError, getdoc
from .inference import ArgType
from .utils import *


class SpecType(type):
    """
    Metaclass that turns specs into introspectable, read-only records.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for messages and help output.
    - Expose the names listed in __introspectable__ as read-only properties
      backed by "_{name}" attributes.
    - Provide stable __repr__/__rich_repr__ for diagnostics.
    """
    __introspectable__ = ()

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _invalid_flag(message, name, /):
    return InvalidFlagSpecError(
        message,
        title="invalid flag",
        code=FaultCode.INVALID_FLAG_SPEC,
        flag=name,
        hint="add_flag(<short|None>, <name>, <description>, <priority 0-9>"
             "[, <argument>, <any|int|float|string>, <argument description>])",
        docs=getdoc(FaultCode.INVALID_FLAG_SPEC),
    )


def _sanitize_flag_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the metadata of a FlagSpec.

    Mutates the dict in place; raises InvalidFlagSpecError on the first
    violation found (checked in order: name, short, descr, priority,
    argument).
    """
    # long name first, so every later message can name the flag
    if not isinstance(name := metadata["name"], str) or not (name := name.strip()):
        raise _invalid_flag("flag name cannot be empty", name)
    if name.startswith("-") or re.search(r"\s", name):
        raise _invalid_flag("flag name %r must not start with '-' or contain spaces" % name, name)
    metadata["name"] = name

    match short := metadata["short"]:
        case None | UnsetType():
            metadata["short"] = None
        case str() if len(short) == 1 and short != "-" and not short.isspace():
            pass
        case str() if not short:
            raise _invalid_flag("short form of flag %r cannot be empty" % name, name)
        case str():
            raise _invalid_flag("short form %r of flag %r is invalid; it must be a single character other than '-'" % (short, name), name)
        case _:
            raise _invalid_flag("short form of flag %r must be a string or None" % name, name)

    if not isinstance(descr := metadata["descr"], str) or not (descr := descr.strip()):
        raise _invalid_flag("description for flag %r cannot be empty" % name, name)
    metadata["descr"] = descr

    if (priority := metadata["priority"]) is Unset:
        raise _invalid_flag("must provide a priority for flag %r" % name, name)
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise _invalid_flag("priority <%s> for flag %r is not a number" % (priority, name), name)
    if not 0 <= priority <= 9:
        raise _invalid_flag("priority <%d> for flag %r must be within 0-9" % (priority, name), name)

    argument, type, argdescr = metadata["argument"], metadata["type"], metadata["argdescr"]
    if argument is Unset or argument is None:
        if coalesce(type) is not None or coalesce(argdescr) is not None:
            raise _invalid_flag("flag %r declares an argument type or description without an argument" % name, name)
        metadata["argument"] = metadata["type"] = metadata["argdescr"] = None
        return

    if not isinstance(argument, str) or not (argument := argument.strip()):
        raise _invalid_flag("argument name for flag %r cannot be empty" % name, name)
    if coalesce(type) is None or type == "":
        raise _invalid_flag("argument type must be provided for flag '%s':'%s'" % (name, argument), name)
    try:
        type = ArgType.parse(type)
    except ValueError:
        raise _invalid_flag("flag argument type for '%s':'%s' (%s) is invalid" % (name, argument, type), name) from None
    if not isinstance(argdescr, str) or not (argdescr := argdescr.strip()):
        raise _invalid_flag("argument description must be provided for flag '%s':'%s'" % (name, argument), name)

    metadata["argument"] = argument
    metadata["type"] = type
    metadata["argdescr"] = argdescr


class FlagSpec(metaclass=SpecType):
    """
    Named switch specification.

    A FlagSpec is a small record plus a handler: calling it forwards to
    the bound callback, with the consumed argument value when the flag declares
    one.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    - identifier: handler identifier derived from the long name.
    - bound: whether a callback has been bound.
    """

    __introspectable__ = (
        "short",
        "name",
        "descr",
        "priority",
        "argument",
        "type",
        "argdescr",
    )

    def __new__(
            cls,
            short,
            name,
            descr=Unset,
            priority=Unset,
            argument=Unset,
            type=Unset,
            argdescr=Unset,
            *,
            callback=Unset
    ):
        """
        Construct a FlagSpec with the provided metadata.

        Parameters
        - short: None | str
          Single-character short form ("v" for -v); None for a long-only flag.
        - name: str
          Long name ("verbose" for --verbose).
        - descr: str
          Short description for help.
        - priority: int
          Execution priority 0-9; lower runs first.
        - argument, type, argdescr: str, str | ArgType, str
          Optional argument name, declared type and description; all three or none.
        - callback: Callable
          Handler; called with no arguments, or with the argument value.

        Raises
        - InvalidFlagSpecError: on any malformed field.
        """
        metadata = {
            "short": short,
            "name": name,
            "descr": descr,
            "priority": priority,
            "argument": argument,
            "type": type,
            "argdescr": argdescr,
        }
        _sanitize_flag_metadata(cls, metadata)

        self = super().__new__(cls)
        self._callback = Unset
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        if callback is not Unset:
            self.bind(callback)
        return self

    @property
    def identifier(self):
        """handler identifier: 'flag_name_' + identifier(long name)."""
        return "flag_name_" + identifier(self._name)

    @property
    def bound(self):
        return self._callback is not Unset

    @property
    def callback(self):
        return coalesce(self._callback)

    def bind(self, callback, /):
        """
        Bind the handler once; returns the callback (decorator friendly).
        """
        if not builtins.callable(callback):
            raise TypeError(f"{type(self).__typename__} handler must be callable")
        if self._callback is not Unset:
            raise TypeError(f"{type(self).__typename__} {self._name!r} handler can be bound only once")
        self._callback = callback
        return callback

    def __call__(self, *params):
        # Unbound specs never reach the scheduler (the loader rejects them).
        return self._callback(*params)


def _invalid_argument(name, type, descr, /):
    return InvalidArgumentSpecError(
        "add_argument usage is: add_argument(<name>, <%s>[...], <description>); "
        "what you provided: add_argument(%r, %r, %r)" % ("|".join(ArgType), name, type, descr),
        title="invalid argument",
        code=FaultCode.INVALID_ARGUMENT_SPEC,
        argument=name,
        hint="every positional argument needs a name, a type and a description",
        docs=getdoc(FaultCode.INVALID_ARGUMENT_SPEC),
    )


class ArgumentSpec(metaclass=SpecType):
    """
    Positional argument specification of a target.

    A type written with a trailing "..." (e.g. "string...") marks the argument
    as variadic; so does variadic=True. A variadic argument consumes every
    remaining token and must be the last one declared.
    """

    __introspectable__ = (
        "name",
        "type",
        "descr",
        "variadic",
    )

    def __new__(cls, name, type, descr, /, *, variadic=False):
        if isinstance(type, str) and type.endswith("..."):
            type, variadic = type[:-3], True

        if not isinstance(name, str) or not name.strip() or not isinstance(descr, str) or not descr.strip():
            raise _invalid_argument(name, type, descr)
        try:
            type = ArgType.parse(type)
        except ValueError:
            raise _invalid_argument(name, type, descr) from None

        self = super().__new__(cls)
        self._name = name.strip()
        self._type = type
        self._descr = descr.strip()
        self._variadic = bool(variadic)
        return self

    @property
    def typename(self):
        """declared type as written in help ("string", "int...")."""
        return str(self._type) + "..." * self._variadic


__all__ = (
    "FlagSpec",
    "ArgumentSpec",
)

del SpecType
