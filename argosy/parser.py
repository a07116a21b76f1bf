"""
Flag token parser and positional argument resolver.

Both work on an argument stream: a collections.deque of raw tokens that is
only ever consumed at its head.

Flags
- "--name" resolves by long name, "-abc" resolves each character by short form.
- a flag declaring an argument consumes the next stream token, type-checked
  against the declared type. Several flags of one cluster each consume their
  own token, left to right ("-oi out 3").
- parsing stops at the first token not starting with "-" and at a bare "-",
  which is left in the stream as a positional token.
- no "--flag=value" form; such a token is looked up as a flag name verbatim.

Positionals
- each declared argument consumes one token; a trailing variadic argument
  consumes every remaining token (possibly none).
- tokens nobody consumed are reported with UnusedArgumentsWarning.
"""
import functools
import logging

from .faults import *
from .inference import accepts
from .scheduler import ScheduledInvocation

logger = logging.getLogger(__name__)


def _mismatch(token, type, inferred, /, **context):
    what = "flag --%s" % context["flag"] if "flag" in context else "argument %r" % context["argument"]
    return ArgumentTypeMismatchError(
        "%s expects %s, got %r (%s)" % (what, type, token, inferred),
        title="argument type mismatch",
        code=FaultCode.ARGUMENT_TYPE_MISMATCH,
        expected=str(type),
        inferred=str(inferred),
        hint="pass a value of type %s" % type,
        docs=getdoc(FaultCode.ARGUMENT_TYPE_MISMATCH),
        **context,
    )


def _consume(stream, flag, /):
    # pops and type-checks the argument of a flag
    if not stream:
        raise MissingArgumentError(
            "flag --%s requires an argument <%s>" % (flag.name, flag.argument),
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            flag=flag.name,
            argument=flag.argument,
            hint="%s: %s" % (flag.argument, flag.argdescr),
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        )
    token = stream.popleft()
    accepted, inferred = accepts(flag.type, token)
    if not accepted:
        raise _mismatch(token, flag.type, inferred, flag=flag.name, argument=flag.argument)
    return token


def _unknown_short(short, token, /):
    return UnknownFlagError(
        "unknown flag -%s in %r" % (short, token),
        title="unknown flag",
        code=FaultCode.UNKNOWN_FLAG,
        flag=short,
        hint="run with --help to list the available flags",
        docs=getdoc(FaultCode.UNKNOWN_FLAG),
    )


def _unknown_name(name, /):
    return UnknownFlagNameError(
        "unknown flag name --%s" % name,
        title="unknown flag name",
        code=FaultCode.UNKNOWN_FLAG_NAME,
        flag=name,
        hint="run with --help to list the available flags",
        docs=getdoc(FaultCode.UNKNOWN_FLAG_NAME),
    )


def parse_flags(stream, registry, /):
    """
    drain the leading flag tokens of the stream.

    returns the pending ScheduledInvocations in parse order; nothing is run.
    raises UnknownFlagError, UnknownFlagNameError, MissingArgumentError or
    ArgumentTypeMismatchError on the first bad token.
    """
    pending = []
    while stream and stream[0].startswith("-") and stream[0] != "-":
        token = stream.popleft()
        if token.startswith("--"):
            if (flag := registry.lookup_by_name(name := token[2:])) is None:
                raise _unknown_name(name)
            flags = [flag]
        else:
            flags = []
            for short in token[1:]:
                if (flag := registry.lookup(short)) is None:
                    raise _unknown_short(short, token)
                flags.append(flag)

        for flag in flags:
            if flag.argument is not None:
                invoke = functools.partial(flag, _consume(stream, flag))
            else:
                invoke = flag
            pending.append(ScheduledInvocation(flag.priority, invoke, flag.name))
            logger.debug("parsed --%s from %r", flag.name, token)
    return pending


def resolve_arguments(stream, specs, /, *, target=None, **options):
    """
    consume positional tokens according to the declared ArgumentSpecs.

    returns the raw tokens in declaration order; the tokens of a variadic
    argument are appended individually. Leftover tokens trigger an
    UnusedArgumentsWarning with the given trigger options and are dropped.
    """
    arguments = []
    for spec in specs:
        if spec.variadic:
            while stream:
                arguments.append(_check(stream.popleft(), spec, target))
            break
        if not stream:
            raise MissingArgumentError(
                "missing argument <%s> (%s)" % (spec.name, spec.typename)
                + (" for target %r" % target if target else ""),
                title="missing argument",
                code=FaultCode.MISSING_ARGUMENT,
                argument=spec.name,
                target=target,
                hint="%s: %s" % (spec.name, spec.descr),
                docs=getdoc(FaultCode.MISSING_ARGUMENT),
            )
        arguments.append(_check(stream.popleft(), spec, target))

    if stream:
        unused = tuple(stream)
        stream.clear()
        trigger(UnusedArgumentsWarning(
            "ignoring unused arguments: %s" % " ".join(unused),
            title="unused arguments",
            code=FaultCode.UNUSED_ARGUMENTS,
            arguments=unused,
            target=target,
            hint="see --help-target %s" % target if target else "see --help",
        ), **options)
    logger.debug("resolved arguments %r", arguments)
    return arguments


def _check(token, spec, target, /):
    accepted, inferred = accepts(spec.type, token)
    if not accepted:
        raise _mismatch(token, spec.type, inferred, argument=spec.name, target=target)
    return token


__all__ = (
    "parse_flags",
    "resolve_arguments",
)
