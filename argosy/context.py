"""
Dispatch context: the state shared by every phase of one invocation.

A Context owns
- the flag registry of the running target (common flags always included once
  the registry has been cleared),
- the positional ArgumentSpecs, description and handler declared by the
  target,
- the mode toggles flipped by the built-in flags (preserve_flags, ignore_deps,
  print_flags),
- the last executed schedule, for the debug dump.

Targets never reach global state: the registration helpers (add_flag,
add_argument, describe) are methods of the context handed to them.
"""
import logging

from .arguments import FlagSpec, ArgumentSpec
from .faults import FaultCode, InvalidArgumentSpecError, getdoc
from .registry import FlagRegistry
from .scheduler import schedule
from .utils import *

logger = logging.getLogger(__name__)


class Context:
    """
    mutable state of a single dispatch.

    attributes
    - registry: FlagRegistry of the running target.
    - target: name of the running target (None during the common phase).
    - preserve_flags, ignore_deps, print_flags: mode toggles.
    - schedule: invocations executed by the last flag phase.
    """

    descr = mirror("descr")
    arguments = mirror("arguments")
    common = mirror("common")

    def __init__(self, common=(), /):
        self._common = tuple(common)
        self._arguments = []
        self._descr = None
        self.handler = None
        self.target = None
        self.schedule = []
        self.preserve_flags = False
        self.ignore_deps = False
        self.print_flags = False
        self.registry = FlagRegistry(self._common)

    def add_flag(
            self,
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
        declare a flag of the running target.

        with a callback the flag is registered bound and the callback is
        returned; without one a binder is returned, so add_flag also works as
        a decorator:

            @add_flag("v", "verbose", "talk more", 0)
            def verbose(): ...

        raises InvalidFlagSpecError, DuplicateFlagError or DuplicateFlagNameError.
        """
        spec = self.registry.register(
            FlagSpec(short, name, descr, priority, argument, type, argdescr, callback=callback)
        )
        return spec.callback if spec.bound else spec.bind

    def add_argument(self, name, type, descr, /, *, variadic=False):
        """
        declare the next positional argument of the running target.

        the type may carry a "..." suffix ("string...") to make the argument
        variadic; nothing can be declared after a variadic argument.
        """
        spec = ArgumentSpec(name, type, descr, variadic=variadic)
        if self._arguments and self._arguments[-1].variadic:
            raise InvalidArgumentSpecError(
                "argument %r is declared after the variadic argument %r"
                % (spec.name, self._arguments[-1].name),
                title="invalid argument",
                code=FaultCode.INVALID_ARGUMENT_SPEC,
                argument=spec.name,
                target=self.target,
                hint="a variadic argument must be the last one",
                docs=getdoc(FaultCode.INVALID_ARGUMENT_SPEC),
            )
        self._arguments.append(spec)
        logger.debug("registered argument %r", spec)
        return spec

    def describe(self, descr, /):
        """set the description shown for the running target."""
        if not isinstance(descr, str):
            raise TypeError("describe() argument must be a string")
        self._descr = descr.strip() or None

    def reset(self, *, force=False):
        """
        prepare the context for a new target registration.

        positional specs, description and handler are always dropped; flags
        survive when preserve_flags is set unless the reset is forced. A
        cleared registry gets the common flags back. Returns whether the
        registry was cleared.
        """
        self._arguments.clear()
        self._descr = None
        self.handler = None
        if cleared := self.registry.reset(force=force, preserve=self.preserve_flags):
            for flag in self._common:
                self.registry.register(flag)
        return cleared

    def spawn(self):
        """
        return a child context for nested registrations (help rendering).

        the child shares the common flags and copies the mode toggles; its
        registry is a copy of this one in preserve mode, a fresh one otherwise.
        """
        child = type(self)(self._common)
        child.preserve_flags = self.preserve_flags
        child.ignore_deps = self.ignore_deps
        if self.preserve_flags:
            child.registry = self.registry.copy()
        return child

    def plan(self, pending, /):
        """order pending invocations by priority and remember them for the debug dump."""
        self.schedule = schedule(pending)
        return self.schedule

    def __repr__(self):
        return "context(target=%r, flags=%d, arguments=%d)" % (self.target, len(self.registry), len(self._arguments))


__all__ = (
    "Context",
)
