"""
Spec tests (FlagSpec, ArgumentSpec).

Scope
- FlagSpec: metadata sanitization, the all-or-none argument triple, handler
  binding and call forwarding.
- ArgumentSpec: type parsing and the variadic forms.
- Introspection: repr/rich repr and read-only attributes.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argosy import (
    FlagSpec,
    ArgumentSpec,
    ArgType,
    FaultCode,
    InvalidFlagSpecError,
    InvalidArgumentSpecError,
)


class TestFlagSpec(TestCase):
    def testMinimalFlag(self):
        f = FlagSpec("v", "verbose", "talk more", 0)
        self.assertEqual(f.short, "v")
        self.assertEqual(f.name, "verbose")
        self.assertEqual(f.priority, 0)
        self.assertIsNone(f.argument)
        self.assertIsNone(f.type)
        self.assertFalse(f.bound)

    def testLongOnlyFlag(self):
        self.assertIsNone(FlagSpec(None, "ignore-deps", "skip checks", 0).short)

    def testArgumentTriple(self):
        f = FlagSpec("o", "out", "output", 1, "path", "STRING", "where to write")
        self.assertEqual((f.argument, f.type, f.argdescr), ("path", ArgType.STRING, "where to write"))

    def testShortMustBeSingleCharacter(self):
        for short in ("vv", "", "-", " "):
            with self.subTest(short=short):
                with self.assertRaises(InvalidFlagSpecError) as context:
                    FlagSpec(short, "verbose", "talk more", 0)
                self.assertEqual(context.exception.options["code"], FaultCode.INVALID_FLAG_SPEC)

    def testNameRules(self):
        for name in ("", "  ", "-verbose", "two words"):
            with self.subTest(name=name):
                with self.assertRaises(InvalidFlagSpecError):
                    FlagSpec("v", name, "talk more", 0)

    def testDescriptionRequired(self):
        with self.assertRaises(InvalidFlagSpecError):
            FlagSpec("v", "verbose")
        with self.assertRaises(InvalidFlagSpecError):
            FlagSpec("v", "verbose", " ", 0)

    def testPriorityRules(self):
        for priority in ("1", 1.0, True, -1, 10):
            with self.subTest(priority=priority):
                with self.assertRaises(InvalidFlagSpecError):
                    FlagSpec("v", "verbose", "talk more", priority)
        with self.assertRaises(InvalidFlagSpecError):
            FlagSpec("v", "verbose", "talk more")
        self.assertEqual(FlagSpec("v", "verbose", "talk more", 9).priority, 9)

    def testArgumentNeedsTypeAndDescription(self):
        with self.assertRaises(InvalidFlagSpecError):
            FlagSpec("o", "out", "output", 1, "path")
        with self.assertRaises(InvalidFlagSpecError):
            FlagSpec("o", "out", "output", 1, "path", "string")
        with self.assertRaises(InvalidFlagSpecError):
            FlagSpec("o", "out", "output", 1, "path", "bool", "where to write")

    def testTypeWithoutArgumentRejected(self):
        with self.assertRaises(InvalidFlagSpecError):
            FlagSpec("o", "out", "output", 1, type="string")

    def testCallForwardsToCallback(self):
        received = []
        f = FlagSpec("o", "out", "output", 1, "path", "string", "where", callback=received.append)
        f("/tmp")
        self.assertEqual(received, ["/tmp"])

    def testBindOnce(self):
        f = FlagSpec("v", "verbose", "talk more", 0)
        callback = lambda: None  # NOQA: E-731
        self.assertIs(f.bind(callback), callback)
        self.assertTrue(f.bound)
        with self.assertRaises(TypeError):
            f.bind(callback)

    def testBindRequiresCallable(self):
        with self.assertRaises(TypeError):
            FlagSpec("v", "verbose", "talk more", 0).bind("nope")

    def testIdentifier(self):
        self.assertEqual(FlagSpec(None, "debug--preserve-flags", "keep", 0).identifier, "flag_name_debug_preserve_flags")

    def testReadOnly(self):
        f = FlagSpec("v", "verbose", "talk more", 0)
        with self.assertRaises(AttributeError):
            f.name = "quiet"

    def testRepr(self):
        text = repr(FlagSpec("v", "verbose", "talk more", 0))
        self.assertTrue(text.startswith("flag-spec("))
        self.assertIn("name='verbose'", text)


class TestArgumentSpec(TestCase):
    def testPlain(self):
        a = ArgumentSpec("target", "string", "what to build")
        self.assertEqual((a.name, a.type, a.variadic), ("target", ArgType.STRING, False))
        self.assertEqual(a.typename, "string")

    def testVariadicSuffix(self):
        a = ArgumentSpec("extra", "int...", "numbers")
        self.assertIs(a.type, ArgType.INT)
        self.assertTrue(a.variadic)
        self.assertEqual(a.typename, "int...")

    def testVariadicKeyword(self):
        self.assertTrue(ArgumentSpec("extra", "any", "anything", variadic=True).variadic)

    def testInvalid(self):
        for name, type, descr in (("", "string", "d"), ("x", "bool", "d"), ("x", "string", ""), ("x", None, "d")):
            with self.subTest(name=name, type=type, descr=descr):
                with self.assertRaises(InvalidArgumentSpecError) as context:
                    ArgumentSpec(name, type, descr)
                self.assertEqual(context.exception.status, 2)


if __name__ == "__main__":
    unittest.main()
