"""
Flag registry: the set of flags known while a target runs.

Two mappings are kept in sync
- long name -> FlagSpec
- short form -> long name

Uniqueness
- a short form may map to exactly one long name (DuplicateFlagError).
- a long name may be registered once (DuplicateFlagNameError).

The registry is cleared before every target registration unless preserve mode
is on; a forced reset always clears.
"""
import logging

from .arguments import FlagSpec
from .faults import FaultCode, DuplicateFlagError, DuplicateFlagNameError, getdoc

logger = logging.getLogger(__name__)


class FlagRegistry:
    """
    mapping of the flags available to the current target.

    iteration yields specs in registration order; `in` tests long names.
    """

    def __init__(self, flags=(), /):
        self._flags = {}
        self._shorts = {}
        for flag in flags:
            self.register(flag)

    def register(self, flag, /):
        """
        add a FlagSpec; returns it.

        raises DuplicateFlagError when the short form already belongs to
        another flag, DuplicateFlagNameError when the long name is taken.
        """
        if not isinstance(flag, FlagSpec):
            raise TypeError("register() argument must be a flag-spec")

        if flag.short is not None and self._shorts.get(flag.short, flag.name) != flag.name:
            raise DuplicateFlagError(
                "flag -%s is already used by flag --%s" % (flag.short, self._shorts[flag.short]),
                title="duplicate flag",
                code=FaultCode.DUPLICATE_FLAG,
                flag=flag.name,
                hint="pick another short form for --%s" % flag.name,
                docs=getdoc(FaultCode.DUPLICATE_FLAG),
            )
        if flag.name in self._flags:
            raise DuplicateFlagNameError(
                "flag name --%s is already used" % flag.name,
                title="duplicate flag name",
                code=FaultCode.DUPLICATE_FLAG_NAME,
                flag=flag.name,
                hint="every flag of a target needs a distinct long name",
                docs=getdoc(FaultCode.DUPLICATE_FLAG_NAME),
            )

        self._flags[flag.name] = flag
        if flag.short is not None:
            self._shorts[flag.short] = flag.name
        logger.debug("registered flag %r", flag)
        return flag

    def reset(self, *, force=False, preserve=False):
        """
        forget every flag unless preserve is set and the reset is not forced.

        returns True when the registry was cleared.
        """
        if preserve and not force:
            logger.debug("registry preserved (%d flags)", len(self._flags))
            return False
        self._flags.clear()
        self._shorts.clear()
        logger.debug("registry cleared")
        return True

    def lookup(self, short, /):
        """return the flag registered under a short form, or None."""
        if (name := self._shorts.get(short)) is None:
            return None
        return self._flags[name]

    def lookup_by_name(self, name, /):
        """return the flag registered under a long name, or None."""
        return self._flags.get(name)

    def copy(self):
        registry = type(self)()
        registry._flags = dict(self._flags)
        registry._shorts = dict(self._shorts)
        return registry

    def __len__(self):
        return len(self._flags)

    def __iter__(self):
        return iter(tuple(self._flags.values()))

    def __contains__(self, name):
        return name in self._flags

    def __repr__(self):
        return "flag-registry(%s)" % ", ".join(map(repr, self._flags))


__all__ = (
    "FlagRegistry",
)
