"""
Targets: named subcommands and how they are loaded.

A target is loaded into a Context: loading registers its flags and positional
arguments and yields the handler that receives the resolved arguments.

Kinds
- BuiltinTarget: an in-process registration function taking the context and
  returning the handler (or setting context.handler).
- FileTarget: a "<targets>/<name>.py" script executed on every load with
  add_flag, add_argument, describe and context injected as globals.

File target conventions
- handler: the function named "target_<identifier(name)>".
- description: a module-level "description" string, else the docstring.
- flags registered without a callback bind to "flag_name_<identifier(flag)>".

Example target file (targets/build.py):

    '''compile the project'''
    add_flag("v", "verbose", "talk more", 0)
    add_argument("target", "string", "what to build")

    def flag_name_verbose():
        ...

    def target_build(target):
        ...
"""
import logging
import pathlib
import runpy

from .faults import FaultCode, TargetHandlerMissingError, getdoc
from .utils import *

logger = logging.getLogger(__name__)


def _missing(message, target, hint, /, **context):
    return TargetHandlerMissingError(
        message,
        title="missing handler",
        code=FaultCode.TARGET_HANDLER_MISSING,
        target=target,
        hint=hint,
        docs=getdoc(FaultCode.TARGET_HANDLER_MISSING),
        **context,
    )


class Target:
    """
    base of every target kind.

    subclasses implement _register(context) and return the handler (or None);
    load() performs the common bookkeeping and checks.
    """

    name = mirror("name")

    def __init__(self, name, /):
        if not isinstance(name, str) or not name or name.startswith("-"):
            raise ValueError("target name must be a non-empty string not starting with '-'")
        self._name = name

    @property
    def identifier(self):
        return "target_" + identifier(self._name)

    def load(self, context, /, *, strict=True):
        """
        register the target into the context; returns the handler.

        raises TargetHandlerMissingError when the target or one of its flags
        ends up without a handler. Help rendering loads with strict=False,
        which only registers.
        """
        context.target = self._name
        handler = self._register(context)
        if handler is None:
            handler = context.handler
        if not strict:
            return handler
        if not callable(handler):
            raise _missing(
                "no handler found for target %r" % self._name,
                self._name,
                self._hint(),
            )
        context.handler = handler

        for flag in context.registry:
            if not flag.bound:
                raise _missing(
                    "no handler found for flag --%s of target %r" % (flag.name, self._name),
                    self._name,
                    "define %s() or pass a callback to add_flag" % flag.identifier,
                    flag=flag.name,
                )
        logger.debug("loaded target %r (%d flags, %d arguments)",
                     self._name, len(context.registry), len(context.arguments))
        return handler

    def _register(self, context, /):
        raise NotImplementedError

    def _hint(self):
        return "return the handler from the registration function"

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__.lower(), self._name)


class BuiltinTarget(Target):
    """target registered by an in-process function."""

    def __init__(self, name, register, /, descr=None):
        super().__init__(name)
        if not callable(register):
            raise TypeError("builtin target registration must be callable")
        self._register_function = register
        self._descr = descr

    def _register(self, context, /):
        if self._descr is not None:
            context.describe(self._descr)
        return self._register_function(context)


class FileTarget(Target):
    """target defined by a python script of the targets directory."""

    path = mirror("path")

    def __init__(self, name, path, /):
        super().__init__(name)
        self._path = pathlib.Path(path)

    def _register(self, context, /):
        namespace = runpy.run_path(
            str(self._path),
            init_globals={
                "add_flag": context.add_flag,
                "add_argument": context.add_argument,
                "describe": context.describe,
                "context": context,
            },
            run_name="argosy.targets." + identifier(self._name),
        )

        if context.descr is None:
            if isinstance(descr := namespace.get("description", namespace.get("__doc__")), str):
                context.describe(descr)

        for flag in context.registry:
            if not flag.bound and callable(callback := namespace.get(flag.identifier)):
                flag.bind(callback)

        return namespace.get(self.identifier)

    def _hint(self):
        return "define %s() in %s" % (self.identifier, self._path)


def discover(directory, /):
    """
    return the file targets of a directory, by name and sorted.

    every "<name>.py" file is a target, except names starting with "_".
    """
    if directory is None or not (directory := pathlib.Path(directory)).is_dir():
        return {}
    return {
        path.stem: FileTarget(path.stem, path)
        for path in sorted(directory.glob("*.py"))
        if not path.stem.startswith("_")
    }


def locate(directory, name, /):
    """return the FileTarget named name in directory, or None."""
    if directory is None or name.startswith("_") or "/" in name or "\\" in name:
        return None
    if not (path := pathlib.Path(directory) / (name + ".py")).is_file():
        return None
    return FileTarget(name, path)


__all__ = (
    "Target",
    "BuiltinTarget",
    "FileTarget",
    "discover",
    "locate",
)
