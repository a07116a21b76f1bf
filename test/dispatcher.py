"""
Dispatcher behavioral tests.

Scope
- end-to-end dispatch against file targets written to a temporary directory
  and builtin targets declared with @app.target.
- built-in flags (--help, --help-target, --debug--preserve-flags,
  --ignore-deps) and built-in targets (help, debug).
- fault surfacing through __invoke__ in library and shell modes.

Conventions
- Test method names follow CamelCase per project convention.
- Help output is captured with consoles writing to io.StringIO.
"""
import io
import pathlib
import tempfile
import textwrap
import unittest
from unittest import TestCase

from rich.console import Console

from argosy import (
    Dispatcher,
    State,
    invoke,
    ArgumentTypeMismatchError,
    DuplicateFlagNameError,
    MissingArgumentError,
    MissingDependencyError,
    TargetHandlerMissingError,
    UnknownFlagError,
    UnknownTargetError,
)

BUILD = '''
"""build a target"""
add_flag("v", "verbose", "talk more", 0)
add_flag("o", "out", "output directory", 1, "path", "string", "where to write")
add_flag("j", "jobs", "parallel jobs", 2, "count", "int", "how many")
add_argument("target", "string", "what to build")
add_argument("extra", "string...", "more arguments")

options = {"verbose": False, "out": None, "jobs": None}


def flag_name_verbose():
    options["verbose"] = True


def flag_name_out(path):
    options["out"] = path


def flag_name_jobs(count):
    options["jobs"] = count


def target_build(target, *extra):
    return dict(options, target=target, extra=list(extra))
'''

DEPLOY = '''
description = "deploy the build"

@add_flag("n", "dry-run", "print what would happen", 0)
def dry_run():
    context.dry_run = True


def target_deploy():
    return 7 if getattr(context, "dry_run", False) else 0
'''

BROKEN = '''
"""no handler here"""
add_argument("x", "any", "whatever")
'''

UNBOUND = '''
add_flag("q", "quiet", "talk less", 0)


def target_unbound():
    return 0
'''


class DispatcherTestCase(TestCase):
    def setUp(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        self.directory = pathlib.Path(directory.name)
        for name, source in (("build", BUILD), ("deploy", DEPLOY), ("broken", BROKEN), ("unbound", UNBOUND)):
            (self.directory / (name + ".py")).write_text(textwrap.dedent(source))
        (self.directory / "_helpers.py").write_text("raise RuntimeError('never loaded')\n")
        self.app = self.make()

    def make(self, **options):
        return Dispatcher(
            "tool",
            self.directory,
            console=Console(file=io.StringIO(), width=200),
            stderr=Console(file=io.StringIO(), width=200),
            **options,
        )

    def output(self, app=None):
        return (app or self.app).console.file.getvalue()


class TestDispatch(DispatcherTestCase):
    def testBuildScenario(self):
        result = self.app.dispatch("build -v --out /tmp a b c".split())
        self.assertEqual(result["target"], "a")
        self.assertEqual(result["extra"], ["b", "c"])
        self.assertTrue(result["verbose"])
        self.assertEqual(result["out"], "/tmp")
        self.assertEqual(self.app.state, State.DONE)

    def testShortAndLongFormsAreEquivalent(self):
        short = self.app.dispatch(["build", "-v", "-o", "/tmp", "a"])
        long = self.app.dispatch(["build", "--verbose", "--out", "/tmp", "a"])
        self.assertEqual(short, long)

    def testEveryLoadStartsFresh(self):
        self.app.dispatch(["build", "-v", "a"])
        self.assertFalse(self.app.dispatch(["build", "a"])["verbose"])

    def testVariadicMayBeEmpty(self):
        self.assertEqual(self.app.dispatch(["build", "a"])["extra"], [])

    def testFlagArgumentTypes(self):
        self.assertEqual(self.app.dispatch(["build", "--out", "5", "a"])["out"], "5")
        self.assertEqual(self.app.dispatch(["build", "-j", "4", "a"])["jobs"], "4")
        with self.assertRaises(ArgumentTypeMismatchError):
            self.app.dispatch(["build", "-j", "5.5", "a"])

    def testMissingPositional(self):
        with self.assertRaises(MissingArgumentError):
            self.app.dispatch(["build", "-v"])

    def testUnknownTargetFlag(self):
        with self.assertRaises(UnknownFlagError):
            self.app.dispatch(["build", "-x", "a"])

    def testTargetFlagsAreNotCommon(self):
        with self.assertRaises(UnknownFlagError):
            self.app.dispatch(["-v", "build", "a"])

    def testUnknownTarget(self):
        with self.assertRaises(UnknownTargetError):
            self.app.dispatch(["nope"])
        with self.assertRaises(UnknownTargetError):
            self.app.dispatch(["_helpers"])

    def testDecoratedFileFlagAndDescription(self):
        self.assertEqual(self.app.dispatch(["deploy"]), 0)
        self.assertEqual(self.app.dispatch(["deploy", "-n"]), 7)
        self.assertEqual(self.app.context.descr, "deploy the build")

    def testMissingTargetHandler(self):
        with self.assertRaises(TargetHandlerMissingError) as context:
            self.app.dispatch(["broken", "x"])
        self.assertEqual(context.exception.status, 2)

    def testMissingFlagHandler(self):
        with self.assertRaises(TargetHandlerMissingError) as context:
            self.app.dispatch(["unbound"])
        self.assertEqual(context.exception.options["flag"], "quiet")


class TestBuiltins(DispatcherTestCase):
    def testEmptyArgvPrintsSummary(self):
        self.assertEqual(self.app.dispatch([]), 0)
        output = self.output()
        for name in ("build", "deploy", "help", "debug", "--help-target"):
            self.assertIn(name, output)
        self.assertNotIn("_helpers", output)

    def testSummaryDoesNotRunHandlers(self):
        self.assertEqual(self.app.dispatch(["-h"]), 0)
        self.assertIn("build a target", self.output())

    def testHelpFlagHaltsTheTarget(self):
        self.assertEqual(self.app.dispatch(["build", "--help", "a"]), 0)
        self.assertIn("targets", self.output())

    def testHelpTarget(self):
        self.assertEqual(self.app.dispatch(["help"]), 0)
        self.assertIn("deploy the build", self.output())

    def testHelpTargetDetails(self):
        self.assertEqual(self.app.dispatch(["--help-target", "build"]), 0)
        output = self.output()
        for fragment in ("--out", "<path>", "extra", "string...", "what to build"):
            self.assertIn(fragment, output)

    def testHelpTargetOfUnknownTarget(self):
        with self.assertRaises(UnknownTargetError):
            self.app.dispatch(["--help-target", "nope"])

    def testHelpTargetRequiresArgument(self):
        with self.assertRaises(MissingArgumentError):
            self.app.dispatch(["--help-target"])

    def testDebugPrintFlags(self):
        self.assertIsNone(self.app.dispatch(["debug", "--print-flags"]))
        output = self.output()
        self.assertIn("print-flags", output)
        self.assertIn("schedule", output)

    def testDebugWithoutFlagPrintsNothing(self):
        self.app.dispatch(["debug"])
        self.assertEqual(self.output(), "")

    def testPreserveFlagsToggle(self):
        self.app.dispatch(["--debug--preserve-flags", "build", "a"])
        self.assertTrue(self.app.context.preserve_flags)
        self.assertIn("verbose", self.app.context.registry)

    def testCommonFlagsAvailableInTargets(self):
        self.assertEqual(self.app.dispatch(["build", "--ignore-deps", "a"])["target"], "a")


class TestDeclarations(DispatcherTestCase):
    def testBuiltinTarget(self):
        @self.app.target("add", descr="add two numbers")
        def add(context):
            context.add_argument("left", "int", "left operand")
            context.add_argument("right", "int", "right operand")
            return lambda left, right: int(left) + int(right)

        self.assertEqual(self.app.dispatch(["add", "2", "3"]), 5)
        with self.assertRaises(ArgumentTypeMismatchError):
            self.app.dispatch(["add", "2", "x"])

    def testBuiltinTargetWinsOverFile(self):
        @self.app.target("build")
        def build(context):
            return lambda: "builtin"

        self.assertEqual(self.app.dispatch(["build"]), "builtin")

    def testBuiltinTargetWithoutHandler(self):
        @self.app.target("empty")
        def empty(context):
            pass

        with self.assertRaises(TargetHandlerMissingError):
            self.app.dispatch(["empty"])

    def testCommonFlag(self):
        seen = []

        @self.app.flag("q", "quiet", "print nothing", 0)
        def quiet():
            seen.append("quiet")

        self.app.dispatch(["-q", "build", "a"])
        self.app.dispatch(["build", "-q", "a"])
        self.assertEqual(seen, ["quiet", "quiet"])

    def testCommonFlagClashesWithBuiltin(self):
        with self.assertRaises(DuplicateFlagNameError):
            self.app.flag(None, "help", "again", 0)(lambda: None)


class TestNestedDispatch(DispatcherTestCase):
    def setUp(self):
        super().setUp()
        self.inner = []

        @self.app.target("inner")
        def inner(context):
            return lambda: self.inner.append(self.app.state)

        @self.app.target("outer")
        def outer(context):
            context.add_flag("n", "nested", "run the inner target", 0,
                             callback=lambda: self.app.dispatch(["inner"]))

            def handler():
                seen = self.app.context, self.app.state
                self.app.dispatch(["inner"])
                return context, seen, (self.app.context, self.app.state)
            return handler

    def testBuiltinFlagsAfterNestedRunReachTheOuterContext(self):
        context, _, _ = self.app.dispatch(["outer", "-n", "--debug--preserve-flags"])
        self.assertTrue(context.preserve_flags)
        self.assertEqual(self.inner, [State.INVOKING, State.INVOKING])

    def testOuterContextAndStateRestored(self):
        context, before, after = self.app.dispatch(["outer"])
        self.assertIs(before[0], context)
        self.assertEqual(before, after)
        self.assertEqual(after[1], State.INVOKING)
        self.assertIs(self.app.context, context)
        self.assertEqual(self.app.state, State.DONE)


class TestDependencies(DispatcherTestCase):
    def setUp(self):
        super().setUp()
        self.app = self.make(dependencies=["argosy-missing-dependency"])

    def testMissingDependency(self):
        with self.assertRaises(MissingDependencyError) as context:
            self.app.dispatch(["build", "a"])
        self.assertEqual(context.exception.status, 3)

    def testIgnoreDeps(self):
        self.assertEqual(self.app.dispatch(["--ignore-deps", "build", "a"])["target"], "a")


class TestInvoke(DispatcherTestCase):
    def testStringPrompt(self):
        self.assertEqual(self.app.__invoke__("deploy -n"), 7)

    def testNonIntResultIsSuccess(self):
        self.assertEqual(invoke(self.app, ["build", "a"]), 0)

    def testLibraryModeRaises(self):
        with self.assertRaises(UnknownTargetError):
            invoke(self.app, "nope")

    def testShellModeExits(self):
        app = self.make(shell=True)
        for prompt, status in (("nope", 1), ("broken x", 2), ("build -j x a", 1)):
            with self.subTest(prompt=prompt):
                with self.assertRaises(SystemExit) as context:
                    invoke(app, prompt)
                self.assertEqual(context.exception.code, status)
        self.assertIn("unknown target", app.stderr.file.getvalue())

    def testShellModeUnknownFlagPrintsSummary(self):
        app = self.make(shell=True)
        with self.assertRaises(SystemExit):
            invoke(app, "build -x a")
        self.assertIn("targets", self.output(app))

    def testShellModeStatusFromHandler(self):
        app = self.make(shell=True)
        with self.assertRaises(SystemExit) as context:
            invoke(app, "deploy -n")
        self.assertEqual(context.exception.code, 7)

    def testInvalidPrompt(self):
        with self.assertRaises(TypeError):
            invoke(self.app, 42)
        with self.assertRaises(TypeError):
            invoke(object(), "build")


if __name__ == "__main__":
    unittest.main()
