"""
Argosy dispatcher: from an argument vector to a target handler call.

Command line
    prog [common-flag [arg]]... <target> [target-flag [arg]]... [positional]...

Phases (State, logged at debug level on every transition)
- SELECTING_COMMON: forced context reset, common flags parsed and executed,
  then the dependency check (skipped with --ignore-deps).
- SELECTING_TARGET: the next token names the target; an empty stream prints
  the summary and succeeds. Builtin targets win over files.
- REGISTERING: context reset (honouring preserve mode) and target load.
- PARSING_FLAGS / EXECUTING_FLAGS: target flags drained from the stream, then
  run in priority order.
- RESOLVING_POSITIONALS: remaining tokens matched against the declared
  positional arguments.
- INVOKING: handler(*arguments); its return value is the dispatch result.

Built-in flags (present in every registry)
- -h, --help                 print the summary, stop with status 0.
- --help-target <target>     print the details of a target, stop with status 0.
- --debug--preserve-flags    keep registered flags across registry resets.
- --ignore-deps              skip the dependency check.

Built-in targets
- help                       print the summary.
- debug [--print-flags]      dump the registry and the executed schedule.

Surfacing faults
- dispatch() raises; __invoke__() routes faults through trigger(), which
  raises in library mode (shell=False) and renders then exits in shell mode.
"""
import logging
import pathlib
import shlex
import shutil
import sys
from collections import deque
from collections.abc import Iterable
from enum import Enum, auto

from rich.console import Console

from .arguments import FlagSpec
from .context import Context
from .faults import *
from .helper import Renderer
from .parser import parse_flags, resolve_arguments
from .registry import FlagRegistry
from .scheduler import execute
from .targets import BuiltinTarget, discover, locate
from .utils import *

logger = logging.getLogger(__name__)


class State(Enum):
    SELECTING_COMMON = auto()
    SELECTING_TARGET = auto()
    REGISTERING = auto()
    PARSING_FLAGS = auto()
    EXECUTING_FLAGS = auto()
    RESOLVING_POSITIONALS = auto()
    INVOKING = auto()
    DONE = auto()


class Dispatcher:
    """
    Multi-target command line dispatcher.

    Parameters
    - name: str
      Program name used in help and fault headers (__main__.__prog__ wins).
    - targets: str | PathLike | None
      Directory holding "<name>.py" target files; None for builtin targets only.
    - dependencies: Iterable[str]
      Executables that must be found on PATH before any target runs.
    - shell: bool
      Render faults and exit with their status instead of raising.
    - fancy, colorful: bool
      Help and fault rendering options.
    - console: rich Console used for help output (stdout by default).
    - stderr: rich Console used for faults in shell mode (stderr by default).

    Quick example:
        >>> app = Dispatcher("tool", "targets")
        >>> @app.flag("q", "quiet", "print nothing", 0)
        ... def quiet(): ...
        >>> @app.target("hello", descr="say hello")
        ... def hello(context):
        ...     context.add_argument("who", "string", "who to greet")
        ...     return lambda who: print("hello", who)
        >>> app.dispatch(["hello", "world"])
    """

    name = mirror("name")
    dependencies = mirror("dependencies")

    def __init__(
            self,
            name,
            /,
            targets=None,
            dependencies=(),
            *,
            shell=False,
            fancy=False,
            colorful=False,
            console=Unset,
            stderr=Unset
    ):
        if not isinstance(name, str) or not name.strip():
            raise TypeError("Dispatcher() name must be a non-empty string")
        self._name = name.strip()
        self._directory = pathlib.Path(targets) if targets is not None else None
        self._dependencies = tuple(dependencies)
        self.shell = shell
        self.fancy = fancy
        self.colorful = colorful
        self.console = coalesce(console, Console())
        self.stderr = coalesce(stderr, Console(stderr=True))
        self.state = State.DONE
        self.context = None

        self._builtins = {}
        self._common = [
            FlagSpec("h", "help", "print this summary", 0, callback=self._help),
            FlagSpec(None, "help-target", "print the details of a target", 0,
                     "target", "string", "name of the target", callback=self._help_target),
            FlagSpec(None, "debug--preserve-flags", "keep flags registered across targets", 0,
                     callback=self._preserve_flags),
            FlagSpec(None, "ignore-deps", "skip the dependency check", 0,
                     callback=self._ignore_deps),
        ]

        self.target("help", descr="print the summary of every target")(self._help_registration)
        self.target("debug", descr="print the registered flags and the executed schedule")(
            self._debug_registration
        )

    # --- declarations ---

    def flag(self, short, name, descr=Unset, priority=Unset, argument=Unset, type=Unset, argdescr=Unset):
        """
        Declare a common flag; returns a decorator binding its handler.

        Common flags are registered in every registry, next to the built-in
        ones, and may be passed before or after the target name.
        """
        @rename("flag")
        def wrapper(callback, /):
            spec = FlagSpec(short, name, descr, priority, argument, type, argdescr, callback=callback)
            FlagRegistry((*self._common, spec))
            self._common.append(spec)
            return callback
        return wrapper

    def target(self, name, /, descr=None):
        """
        Declare a builtin target; returns a decorator taking the registration
        function. The function receives the context and returns the handler.
        """
        @rename("target")
        def wrapper(register, /):
            self._builtins[name] = BuiltinTarget(name, register, descr)
            return register
        return wrapper

    # --- built-in flags and targets ---

    def _help(self):
        self._print(self.summary())
        raise CommandHalt(0)

    def _help_target(self, name):
        self._print(self.detail(name))
        raise CommandHalt(0)

    def _preserve_flags(self):
        self.context.preserve_flags = True

    def _ignore_deps(self):
        self.context.ignore_deps = True

    def _help_registration(self, context):
        def help():
            self._print(self.summary())
            return 0
        return help

    def _debug_registration(self, context):
        def print_flags():
            context.print_flags = True

        context.add_flag(None, "print-flags", "print the registered flags and the executed schedule", 1,
                         callback=print_flags)

        def debug():
            if context.print_flags:
                self._print(self._renderer().registry(context))
        return debug

    # --- rendering ---

    def _renderer(self):
        return Renderer(self._name, colorful=self.colorful, fancy=self.fancy)

    def _print(self, renderable, /):
        self.console.print(renderable)

    def targets(self):
        """every known target by name: builtins first, then the targets directory."""
        return self._builtins | {
            name: target for name, target in discover(self._directory).items() if name not in self._builtins
        }

    def summary(self):
        """
        Return the summary renderable.

        every target is loaded into a spawned context after a forced reset, so
        its counts never include preserved or common flags.
        """
        rows = []
        for name, target in self.targets().items():
            child = self._spawn()
            child.reset(force=True)
            target.load(child, strict=False)
            rows.append((
                name,
                len([flag for flag in child.registry if flag not in child.common]),
                len(child.arguments),
                child.descr,
            ))
        return self._renderer().summary(tuple(self._common), rows)

    def detail(self, name, /):
        """
        Return the detailed help renderable of a target.

        the target is loaded into a spawned context honouring preserve mode.
        """
        target = self._resolve(name)
        child = self._spawn()
        child.reset()
        target.load(child, strict=False)
        return self._renderer().target(name, child)

    def _spawn(self):
        if self.context is None:
            return Context(self._common)
        return self.context.spawn()

    # --- dispatch ---

    def _transition(self, state, /):
        logger.debug("%s: %s -> %s", self._name, self.state.name, state.name)
        self.state = state

    def _resolve(self, name, /):
        if (target := self._builtins.get(name)) is not None:
            return target
        if (target := locate(self._directory, name)) is not None:
            return target
        raise UnknownTargetError(
            "unknown target %r" % name,
            title="unknown target",
            code=FaultCode.UNKNOWN_TARGET,
            target=name,
            hint="run '%s help' to list the available targets" % self._name,
            docs=getdoc(FaultCode.UNKNOWN_TARGET),
        )

    def _check_dependencies(self):
        for dependency in self._dependencies:
            if shutil.which(dependency) is None:
                raise MissingDependencyError(
                    "dependency %r is not installed" % dependency,
                    title="missing dependency",
                    code=FaultCode.MISSING_DEPENDENCY,
                    dependency=dependency,
                    hint="install %s or pass --ignore-deps" % dependency,
                    docs=getdoc(FaultCode.MISSING_DEPENDENCY),
                )
            logger.debug("dependency %r found", dependency)

    def _options(self):
        return dict(tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful, console=self.stderr)

    def dispatch(self, argv, /):
        """
        Run one command line (a list of tokens, program name excluded).

        Returns the handler's return value; 0 after printing help. Faults
        propagate as CommandException subclasses.
        """
        stream = deque(argv)
        # a nested run (from a handler or flag) hands context and state back to the outer one
        previous = self.context, self.state
        context = self.context = Context(self._common)
        try:
            self._transition(State.SELECTING_COMMON)
            context.reset(force=True)
            execute(context.plan(parse_flags(stream, context.registry)))
            if not context.ignore_deps:
                self._check_dependencies()

            self._transition(State.SELECTING_TARGET)
            if not stream:
                self._print(self.summary())
                return 0
            name = stream.popleft()
            target = self._resolve(name)

            self._transition(State.REGISTERING)
            context.reset()
            handler = target.load(context)

            self._transition(State.PARSING_FLAGS)
            pending = parse_flags(stream, context.registry)

            self._transition(State.EXECUTING_FLAGS)
            execute(context.plan(pending))

            self._transition(State.RESOLVING_POSITIONALS)
            arguments = resolve_arguments(stream, context.arguments, target=name, **self._options())

            self._transition(State.INVOKING)
            return handler(*arguments)
        except CommandHalt as halt:
            logger.debug("%s: halted with status %d", self._name, halt.status)
            return halt.status
        finally:
            if previous[1] is State.DONE:
                self._transition(State.DONE)
            else:
                logger.debug("%s: back to %s", self._name, previous[1].name)
                self.context, self.state = previous

    def __invoke__(self, prompt=Unset):
        """
        Execute the dispatcher with a token stream and return the exit status.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Behavior
        - Faults go through trigger(): raised when shell=False; rendered and
          turned into the process exit status when shell=True. Unknown flags
          print the summary before the fault in shell mode.
        - An int returned by the handler is the exit status; anything else is 0.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            result = self.dispatch(tokens)
        except CommandException as fault:
            if self.shell and isinstance(fault, UnknownFlagError | UnknownFlagNameError):
                self._print(self.summary())
            trigger(fault, **self._options())
            raise  # trigger() exits in shell mode and raises otherwise

        status = result if isinstance(result, int) and not isinstance(result, bool) else 0
        if self.shell and status:
            sys.exit(status)
        return status


def invoke(object, prompt=Unset, /):
    """
    Convenience runner: call object.__invoke__(prompt) and return its status.

    Raises
    - TypeError: when object does not implement __invoke__.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Dispatcher",
    "State",
    "invoke",
)
