"""
Type inference tests.

Scope
- classify(): the int -> float -> string precedence on raw tokens.
- accepts(): permissive declared types and exact matching for int/float.
- ArgType.parse(): case-insensitive names, rejection of unknown names.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argosy import ArgType
from argosy.inference import classify, accepts


class TestClassify(TestCase):
    def testDigitsAreInt(self):
        for token in ("0", "42", "007"):
            with self.subTest(token=token):
                self.assertIs(classify(token), ArgType.INT)

    def testDecimalsAreFloat(self):
        for token in ("3.14", "2.", "+1.5", "-0.25"):
            with self.subTest(token=token):
                self.assertIs(classify(token), ArgType.FLOAT)

    def testSignedIntegerIsFloat(self):
        self.assertIs(classify("-3"), ArgType.FLOAT)
        self.assertIs(classify("+12"), ArgType.FLOAT)

    def testEverythingElseIsString(self):
        for token in ("", "abc", "1e5", ".5", "1.2.3", "12a", "/tmp"):
            with self.subTest(token=token):
                self.assertIs(classify(token), ArgType.STRING)

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            classify(42)


class TestAccepts(TestCase):
    def testPermissiveTypesSkipInference(self):
        self.assertEqual(accepts(ArgType.ANY, "5.5"), (True, None))
        self.assertEqual(accepts("string", "5"), (True, None))

    def testIntRequiresInt(self):
        self.assertEqual(accepts(ArgType.INT, "5"), (True, ArgType.INT))
        self.assertEqual(accepts(ArgType.INT, "5.5"), (False, ArgType.FLOAT))

    def testFloatRejectsInt(self):
        self.assertEqual(accepts(ArgType.FLOAT, "5"), (False, ArgType.INT))
        self.assertEqual(accepts(ArgType.FLOAT, "5.0"), (True, ArgType.FLOAT))


class TestArgTypeParse(TestCase):
    def testCaseInsensitive(self):
        self.assertIs(ArgType.parse("INT"), ArgType.INT)
        self.assertIs(ArgType.parse(" Float "), ArgType.FLOAT)

    def testPassThrough(self):
        self.assertIs(ArgType.parse(ArgType.ANY), ArgType.ANY)

    def testUnknownRejected(self):
        for value in ("bool", "", None, 1):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    ArgType.parse(value)

    def testPermissive(self):
        self.assertTrue(ArgType.ANY.permissive)
        self.assertTrue(ArgType.STRING.permissive)
        self.assertFalse(ArgType.INT.permissive)
        self.assertFalse(ArgType.FLOAT.permissive)


if __name__ == "__main__":
    unittest.main()
