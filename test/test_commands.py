"""
Command layer tests (declaration, finalization, resolution, dispatch).

Scope
- Validate resolve(): greedy descent, aliases, unmatched suffixes.
- Validate dispatch(): action selection, root fallback, no-op, help/version keys.
- Validate finalize(): uniqueness checks and freezing.
- Validate App.run() / invoke() fault surfacing in shell and non-shell modes.

Conventions
- Test method names follow CamelCase per project convention.
- Actions record the Context they receive instead of printing.
"""
import contextlib
import io
import unittest
from unittest import TestCase

from helmsman import (
    App,
    Command,
    Flag,
    FlagType,
    command,
    dispatch,
    invoke,
    resolve,
    ActionError,
    FlagNotFoundError,
)


def calculator():
    root = Command("calc")
    add = Command("add", "a")
    add.include(Command("sub", "s"))
    root.include(add).include(Command("mul"))
    return root


class TestResolve(TestCase):
    """Greedy, leftmost resolution against the command tree."""

    def testNestedMatch(self):
        resolution = resolve(calculator(), ["add", "sub", "1", "2"])
        self.assertEqual(resolution.command.name, "sub")
        self.assertEqual(resolution.remaining_args, ("1", "2"))
        self.assertEqual([step.name for step in resolution.path], ["calc", "add", "sub"])

    def testNoMatchStaysAtRoot(self):
        root = calculator()
        resolution = resolve(root, ["div", "1", "2"])
        self.assertIs(resolution.command, root)
        self.assertEqual(resolution.remaining_args, ("div", "1", "2"))

    def testAliasEquivalence(self):
        root = calculator()
        self.assertEqual(resolve(root, ["a", "s", "1"]), resolve(root, ["add", "sub", "1"]))

    def testNoBacktracking(self):
        resolution = resolve(calculator(), ["add", "mul", "1"])
        self.assertEqual(resolution.command.name, "add")
        self.assertEqual(resolution.remaining_args, ("mul", "1"))

    def testMatchOnlyAtFront(self):
        resolution = resolve(calculator(), ["1", "add"])
        self.assertEqual(resolution.command.name, "calc")
        self.assertEqual(resolution.remaining_args, ("1", "add"))

    def testCaseSensitive(self):
        self.assertEqual(resolve(calculator(), ["ADD"]).command.name, "calc")

    def testEmptyPositionals(self):
        root = calculator()
        resolution = resolve(root, [])
        self.assertIs(resolution.command, root)
        self.assertEqual(resolution.remaining_args, ())

    def testDeterministic(self):
        root = calculator()
        self.assertEqual(resolve(root, ["add", "x"]), resolve(root, ["add", "x"]))

    def testRootMustBeCommand(self):
        with self.assertRaises(TypeError):
            resolve("calc", [])


class TestDispatch(TestCase):
    """Action selection and the help/version conventions."""

    def setUp(self):
        self.calls = []

        def record(name):
            def action(context):
                self.calls.append((name, context))
            return action

        self.app = App("cli", version="1.2.3", action=record("root"), flags=[Flag("verbose", FlagType.BOOL, "v")])
        self.hello = Command(
            "hello", "h",
            descr="say hello",
            action=record("hello"),
            flags=[Flag("age", FlagType.INT, "a"), Flag("bye", FlagType.BOOL, "b")],
        )
        self.idle = Command("idle")
        self.app.include(self.hello).include(self.idle)

    def testMatchedActionRuns(self):
        dispatch(self.app, ["cli", "hello", "--age", "3", "bob"])
        (name, context), = self.calls
        self.assertEqual(name, "hello")
        self.assertEqual(context.args, ("bob",))
        self.assertEqual(context.int_flag("age"), 3)

    def testFlagsBeforeCommandName(self):
        dispatch(self.app, ["cli", "-a", "3", "h", "bob"])
        (name, context), = self.calls
        self.assertEqual(name, "hello")
        self.assertEqual(context.int_flag("a"), 3)

    def testProgramNameDiscarded(self):
        dispatch(self.app, ["hello"])
        (name, context), = self.calls
        self.assertEqual(name, "root")
        self.assertEqual(context.args, ())

    def testRootActionFallback(self):
        dispatch(self.app, ["cli", "idle", "x"])
        (name, context), = self.calls
        self.assertEqual(name, "root")
        self.assertIs(context.command, self.idle)
        self.assertEqual(context.args, ("x",))

    def testNoActionIsNoop(self):
        root = Command("bare", children=[Command("child")])
        self.assertIsNone(dispatch(root, ["bare", "child", "x"]))

    def testAncestorFlagsVisible(self):
        dispatch(self.app, ["cli", "hello", "-v"])
        self.assertTrue(self.calls[0][1].bool_flag("verbose"))

    def testHelpFlagRendersHelp(self):
        with contextlib.redirect_stdout(io.StringIO()) as output:
            dispatch(self.app, ["cli", "hello", "--help"])
        self.assertEqual(self.calls, [])
        self.assertIn("cli hello", output.getvalue())
        self.assertIn("say hello", output.getvalue())

    def testShortHelpFlag(self):
        with contextlib.redirect_stdout(io.StringIO()) as output:
            dispatch(self.app, ["cli", "-h"])
        self.assertEqual(self.calls, [])
        self.assertIn("hello", output.getvalue())

    def testDeclaredFlagClaimsHelpKey(self):
        self.idle.flag(Flag("help", FlagType.BOOL))
        dispatch(self.app, ["cli", "idle", "--help"])
        (name, context), = self.calls
        self.assertTrue(context.bool_flag("help"))

    def testVersionFlag(self):
        with contextlib.redirect_stdout(io.StringIO()) as output:
            dispatch(self.app, ["cli", "--version"])
        self.assertEqual(self.calls, [])
        self.assertEqual(output.getvalue().strip(), "cli 1.2.3")

    def testVersionOnlyAtAppLevel(self):
        dispatch(self.app, ["cli", "hello", "--version"])
        self.assertEqual(self.calls[0][0], "hello")

    def testDeclaredFlagClaimsVersionKey(self):
        dispatch(self.app, ["cli", "-v"])
        (name, context), = self.calls
        self.assertEqual(name, "root")
        self.assertTrue(context.bool_flag("verbose"))

    def testCustomHelperKeys(self):
        app = App("cli", helpers=("usage",), action=lambda context: self.calls.append(context))
        with contextlib.redirect_stdout(io.StringIO()) as output:
            dispatch(app, ["cli", "--usage"])
        self.assertEqual(self.calls, [])
        self.assertIn("usage:", output.getvalue())
        dispatch(app, ["cli", "--help"])
        self.assertEqual(len(self.calls), 1)

    def testCustomHelpText(self):
        app = App("cli", helptext="custom help", children=[Command("sub", descr="sub help")])
        with contextlib.redirect_stdout(io.StringIO()) as output:
            dispatch(app, ["cli", "--help"])
        self.assertEqual(output.getvalue().strip(), "custom help")
        with contextlib.redirect_stdout(io.StringIO()) as output:
            dispatch(app, ["cli", "sub", "--help"])
        self.assertIn("sub help", output.getvalue())

    def testContextHelp(self):
        app = App("cli", children=[Command("show", descr="show things", action=lambda context: context.help())])
        with contextlib.redirect_stdout(io.StringIO()) as output:
            dispatch(app, ["cli", "show"])
        self.assertIn("show things", output.getvalue())

    def testSharedAcrossRuns(self):
        dispatch(self.app, ["cli", "hello", "--age", "1"])
        dispatch(self.app, ["cli", "hello", "--age", "2"])
        self.assertEqual([context.int_flag("age") for _, context in self.calls], [1, 2])

    def testArgvMustBeStrings(self):
        with self.assertRaises(TypeError):
            dispatch(self.app, ["cli", 1])


class TestFinalize(TestCase):
    """Uniqueness checks and freezing."""

    def testSiblingNameCollision(self):
        root = Command("root", children=[Command("add"), Command("add")])
        with self.assertRaises(ValueError):
            root.finalize()

    def testSiblingAliasCollision(self):
        root = Command("root", children=[Command("add", "a"), Command("all", "a")])
        with self.assertRaises(ValueError):
            root.finalize()

    def testAliasCollidesWithSiblingName(self):
        root = Command("root", children=[Command("add"), Command("all", "add")])
        with self.assertRaises(ValueError):
            root.finalize()

    def testSameNameAtDifferentLevelsAllowed(self):
        root = Command("root", children=[Command("add", children=[Command("add")])])
        self.assertIs(root.finalize(), root)

    def testFlagCollisions(self):
        for flags in (
                [Flag("age", FlagType.INT), Flag("age", FlagType.STRING)],
                [Flag("age", FlagType.INT, "a"), Flag("all", FlagType.BOOL, "a")],
                [Flag("age", FlagType.INT), Flag("all", FlagType.BOOL, "age")],
        ):
            with self.subTest(flags=flags), self.assertRaises(ValueError):
                Command("root", flags=flags).finalize()

    def testNestedCollisionReported(self):
        root = Command("root", children=[Command("add", children=[Command("x"), Command("x")])])
        with self.assertRaises(ValueError):
            root.finalize()

    def testSameChildTwice(self):
        child = Command("child")
        root = Command("root").include(child).include(child)
        with self.assertRaises(ValueError):
            root.finalize()

    def testCycleRejected(self):
        first, second = Command("first"), Command("second")
        first.include(second)
        second.include(first)
        with self.assertRaises(ValueError):
            first.finalize()

    def testSelfInclusionRejected(self):
        root = Command("root")
        with self.assertRaises(ValueError):
            root.include(root)

    def testFrozenAfterFinalize(self):
        child = Command("child")
        root = Command("root", children=[child]).finalize()
        self.assertTrue(root.frozen)
        self.assertTrue(child.frozen)
        with self.assertRaises(TypeError):
            root.flag(Flag("late"))
        with self.assertRaises(TypeError):
            child.include(Command("late"))
        with self.assertRaises(TypeError):
            child.alias("c")

    def testFinalizeIdempotent(self):
        root = Command("root").finalize()
        self.assertIs(root.finalize(), root)


class TestDeclaration(TestCase):
    """Constructors, builders and decorators."""

    def testBuilderChaining(self):
        root = Command("root").alias("r, rt").flag(Flag("x")).include(Command("child"))
        self.assertEqual(root.aliases, ("r", "rt"))
        self.assertEqual(root.names, ("root", "r", "rt"))
        self.assertEqual([flag.name for flag in root.flags], ["x"])
        self.assertEqual([child.name for child in root.children], ["child"])

    def testCollectionsAreSnapshots(self):
        root = Command("root")
        children = root.children
        root.include(Command("child"))
        self.assertEqual(children, ())
        self.assertEqual(len(root.children), 1)

    def testInvalidMembers(self):
        with self.assertRaises(TypeError):
            Command("root").flag("x")
        with self.assertRaises(TypeError):
            Command("root").include("child")
        with self.assertRaises(TypeError):
            Command("root").include(App("nested"))
        with self.assertRaises(TypeError):
            Command("root", action="not callable")
        with self.assertRaises(ValueError):
            Command("root", descr="")

    def testDescrFromDocstring(self):
        def action(context):
            """Greet someone."""
        self.assertEqual(Command("greet", action=action).descr, "Greet someone.")
        self.assertEqual(Command("greet", descr="explicit", action=action).descr, "explicit")

    def testCommandDecoratorWithName(self):
        root = Command("root")

        @root.command("hello", "h", descr="say hello")
        def hello(context):
            pass

        self.assertIsInstance(hello, Command)
        self.assertEqual(hello.names, ("hello", "h"))
        self.assertIs(root.children[0], hello)
        self.assertEqual(hello.descr, "say hello")

    def testBareCommandDecorator(self):
        root = Command("root")

        @root.command
        def say_hello(context):
            """Say hello."""

        self.assertEqual(say_hello.name, "say-hello")
        self.assertEqual(say_hello.descr, "Say hello.")
        self.assertIs(root.children[0], say_hello)

    def testModuleCommandFactory(self):
        def _build_(context):
            pass

        self.assertEqual(command(_build_).name, "build")
        self.assertEqual(command("make", "m")(_build_).names, ("make", "m"))
        with self.assertRaises(TypeError):
            command(Command("x"))
        with self.assertRaises(TypeError):
            command(42)

    def testHandlerOnlyOnce(self):
        root = Command("root")

        @root.handler
        def first(context):
            pass

        self.assertIs(root.action, first)
        with self.assertRaises(TypeError):
            root.handler(lambda context: None)

    def testAppDefaults(self):
        app = App("cli")
        self.assertEqual(app.helpers, ("h", "help"))
        self.assertEqual(app.versioners, ("v", "version"))
        self.assertFalse(app.shell)
        self.assertFalse(app.fancy)
        self.assertTrue(app.colorful)
        self.assertIsNone(app.version)
        self.assertEqual(app.aliases, ())

    def testAppKeysNormalized(self):
        app = App("cli", helpers="help, h", versioners=())
        self.assertEqual(app.helpers, ("help", "h"))
        self.assertEqual(app.versioners, ())
        with self.assertRaises(ValueError):
            App("cli", helpers=("--help",))


class TestRun(TestCase):
    """App.run() and invoke() fault surfacing."""

    def testActionErrorRaisedOutsideShell(self):
        def fail(context):
            raise ActionError("boom")

        with self.assertRaises(ActionError) as caught:
            App("cli", action=fail).run(["cli"])
        self.assertEqual(caught.exception.message, "boom")
        self.assertFalse(caught.exception.options["shell"])

    def testActionErrorExitsInShell(self):
        def fail(context):
            raise ActionError("boom", hint="try again")

        app = App("cli", action=fail, shell=True, colorful=False)
        with contextlib.redirect_stderr(io.StringIO()) as output, self.assertRaises(SystemExit) as caught:
            app.run(["cli"])
        self.assertEqual(caught.exception.code, 1)
        self.assertIn("boom", output.getvalue())
        self.assertIn("try again", output.getvalue())
        self.assertIn("cli", output.getvalue())

    def testUnhandledFlagErrorSurfaces(self):
        app = App("cli", action=lambda context: context.int_flag("age"), flags=[Flag("age", FlagType.INT)])
        with self.assertRaises(FlagNotFoundError):
            app.run(["cli"])

    def testOtherExceptionsPropagate(self):
        def fail(context):
            raise RuntimeError("bug")

        with self.assertRaises(RuntimeError):
            App("cli", action=fail, shell=True).run(["cli"])

    def testRunFinalizes(self):
        app = App("cli", children=[Command("x"), Command("x")])
        with self.assertRaises(ValueError):
            app.run(["cli"])

    def testInvokeStringPrompt(self):
        seen = []
        app = App("cli", children=[Command("hello", action=seen.append, flags=[Flag("name", FlagType.STRING)])])
        invoke(app, "hello --name 'Jane Doe' extra")
        context, = seen
        self.assertEqual(context.string_flag("name"), "Jane Doe")
        self.assertEqual(context.args, ("extra",))

    def testInvokeIterablePrompt(self):
        seen = []
        invoke(Command("tool", action=seen.append), ["a", "b"])
        self.assertEqual(seen[0].args, ("a", "b"))

    def testInvokeCallable(self):
        seen = []
        invoke(seen.append, "x y")
        self.assertEqual(seen[0].args, ("x", "y"))

    def testInvokeRejectsBadInput(self):
        with self.assertRaises(TypeError):
            invoke(App("cli"), 42)
        with self.assertRaises(TypeError):
            invoke(App("cli"), ["ok", 1])
        with self.assertRaises(TypeError):
            invoke(42, "")


if __name__ == "__main__":
    unittest.main()
