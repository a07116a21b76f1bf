"""
Priority scheduler tests.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argosy.scheduler import ScheduledInvocation, schedule, execute


class TestSchedule(TestCase):
    def testBucketsInPriorityOrder(self):
        calls = []
        pending = [
            ScheduledInvocation(3, lambda: calls.append("a"), "a"),
            ScheduledInvocation(0, lambda: calls.append("b"), "b"),
            ScheduledInvocation(3, lambda: calls.append("c"), "c"),
            ScheduledInvocation(1, lambda: calls.append("d"), "d"),
        ]
        ordered = schedule(pending)
        self.assertEqual([i.priority for i in ordered], [0, 1, 3, 3])
        execute(ordered)
        self.assertEqual(calls, ["b", "d", "a", "c"])

    def testEmpty(self):
        self.assertEqual(schedule([]), [])
        execute([])

    def testOutOfRangePriorityRejected(self):
        with self.assertRaises(ValueError):
            schedule([ScheduledInvocation(10, lambda: None, "late")])

    def testExecuteStopsOnFirstError(self):
        calls = []

        def fail():
            raise RuntimeError("boom")

        ordered = [
            ScheduledInvocation(0, fail, "fail"),
            ScheduledInvocation(1, lambda: calls.append("late"), "late"),
        ]
        with self.assertRaises(RuntimeError):
            execute(ordered)
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
