"""
Priority scheduling of parsed flags.

Parsed flags are not run as they are read: each becomes a ScheduledInvocation
and the whole batch is reordered by priority (0 first, 9 last) before anything
executes. Within one priority, parse order is kept.
"""
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import NamedTuple

logger = logging.getLogger(__name__)

PRIORITIES = range(10)


class ScheduledInvocation(NamedTuple):
    """a pending flag handler call."""
    priority: int
    invoke: Callable[[], object]
    flag: str


def schedule(pending, /):
    """
    return the invocations ordered by priority bucket (stable within a bucket).

    priorities outside 0-9 are rejected when the flag is declared, so every
    pending invocation lands in a bucket.
    """
    buckets = defaultdict(list)
    for invocation in pending:
        buckets[invocation.priority].append(invocation)

    ordered = []
    for priority in PRIORITIES:
        ordered.extend(buckets.pop(priority, ()))
    if buckets:
        raise ValueError("invocation priorities must be within 0-9, got %s" % sorted(buckets))

    logger.debug("schedule: %s", ", ".join("%s@%d" % (i.flag, i.priority) for i in ordered) or "<empty>")
    return ordered


def execute(ordered, /):
    """
    run the invocations in order; the first exception propagates.
    """
    for invocation in ordered:
        logger.debug("executing --%s (priority %d)", invocation.flag, invocation.priority)
        invocation.invoke()


__all__ = (
    "ScheduledInvocation",
    "schedule",
    "execute",
    "PRIORITIES",
)
