# python
"""
Matching engine behavioral tests (classification, clusters, arity, negotiation, halt).

Scope
- Validate token classification (long/short forms, '=' values, clusters, negative numbers).
- Validate flag binding strategies (switch, counter, scalar, vector collect/replace).
- Validate positional negotiation (optional, variadic, greedy-but-fair distribution).
- Validate '--' delimiting and segmenting, halt hand-off and non-strict pass-through.

Conventions
- Test method names follow CamelCase per project convention.
- Parses go through a Parser whose output is buffered and whose exit handler records
  statuses instead of terminating, so error paths return a failed Outcome.
"""

from __future__ import annotations

import math
import unittest
from unittest import TestCase

from argot import (
    Binding,
    BufferOutput,
    ConversionError,
    InvalidChoiceError,
    Matcher,
    MissingPositionalError,
    OptionArityError,
    Parser,
    Schema,
    SuperfluousArgumentError,
    UnknownOptionError,
    converter,
)


def parse(source, argv, **options):
    statuses = []
    output = BufferOutput()
    parser = Parser("test", version="0.1", output=output, exit=statuses.append, **options)
    return parser.parse(source, argv), output, statuses


def args(schema):
    schema.flag("foo", "f", descr="a boolean flag")
    schema.flag("opt", "o", type="string", descr="an optional string")
    schema.flag("verbose", "v", binding=Binding.COUNTER, descr="a counted flag")
    schema.flag("number", "n", type="integer", descr="a number flag")
    schema.flag("fnum", type="real", descr="a real number flag")
    schema.positional("pos", descr="a positional argument")
    schema.positional("int", type="integer", nargs="?", descr="a positional int argument")
    schema.positional("double", type="real", nargs="?", descr="a positional double argument")


class TestFlags(TestCase):
    """Long and short flag forms against a mixed schema."""

    def testNoArgumentsIsMissingPositional(self):
        outcome, _, statuses = parse(args, [])
        self.assertFalse(outcome)
        self.assertIsInstance(outcome.fault, MissingPositionalError)
        self.assertEqual(statuses, [1])

    def testSinglePositionalKeepsDefaults(self):
        ns = parse(args, ["pos"])[0].unwrap()
        self.assertFalse(ns.foo)
        self.assertIsNone(ns.opt)
        self.assertEqual(ns.verbose, 0)
        self.assertEqual(ns.pos, "pos")
        self.assertIsNone(ns.number)

    def testLongSwitchBeforeAndAfterPositional(self):
        for argv in (["--foo", "pos"], ["pos", "--foo"]):
            ns = parse(args, argv)[0].unwrap()
            self.assertTrue(ns.foo)
            self.assertEqual(ns.pos, "pos")

    def testShortClusterCountsRepeats(self):
        ns = parse(args, ["-fvvv", "pos"])[0].unwrap()
        self.assertTrue(ns.foo)
        self.assertEqual(ns.verbose, 3)

    def testClusterEndingInValueFlag(self):
        ns = parse(args, ["-fvvvo", "optval", "pos"])[0].unwrap()
        self.assertTrue(ns.foo)
        self.assertEqual(ns.verbose, 3)
        self.assertEqual(ns.opt, "optval")
        self.assertIsNone(ns.number)
        self.assertEqual(ns.pos, "pos")

    def testLongValueFlag(self):
        ns = parse(args, ["-fvvv", "--opt", "optval", "pos"])[0].unwrap()
        self.assertEqual(ns.opt, "optval")

    def testValueFlagWithoutValueFails(self):
        outcome, _, _ = parse(args, ["--opt"])
        self.assertIsInstance(outcome.fault, OptionArityError)

    def testNumberWithoutValueFails(self):
        outcome, _, _ = parse(args, ["pos", "--number"])
        self.assertIsInstance(outcome.fault, OptionArityError)

    def testIntegerConversion(self):
        self.assertEqual(parse(args, ["--number", "42", "pos"])[0].unwrap().number, 42)
        self.assertEqual(parse(args, ["--number", "-42", "pos"])[0].unwrap().number, -42)

    def testIntegerConversionFailures(self):
        for value in ("foo", "42x"):
            outcome, output, _ = parse(args, ["--number", value, "pos"])
            self.assertIsInstance(outcome.fault, ConversionError)
            self.assertIn("integer", outcome.fault.message)
            self.assertIn(repr(value), output.stderr)

    def testRealConversion(self):
        self.assertEqual(parse(args, ["--fnum", "42", "pos"])[0].unwrap().fnum, 42.0)
        self.assertAlmostEqual(parse(args, ["--fnum", "42.542", "pos"])[0].unwrap().fnum, 42.542)
        self.assertAlmostEqual(parse(args, ["--fnum", "-42.542", "pos"])[0].unwrap().fnum, -42.542)
        self.assertIsInstance(parse(args, ["--fnum", "foo", "pos"])[0].fault, ConversionError)

    def testNegativeNumbersArePositionals(self):
        ns = parse(args, ["pos", "-42", "-52.2"])[0].unwrap()
        self.assertEqual(ns.pos, "pos")
        self.assertEqual(ns.int, -42)
        self.assertAlmostEqual(ns.double, -52.2)

    def testEqualsSyntax(self):
        self.assertEqual(parse(args, ["--number=5", "pos"])[0].unwrap().number, 5)
        self.assertEqual(parse(args, ["--opt=", "pos"])[0].unwrap().opt, "")

    def testEqualsSyntaxWithEmptyNumberFails(self):
        self.assertIsInstance(parse(args, ["--number=", "pos"])[0].fault, ConversionError)

    def testShortEqualsIsPartOfTheValue(self):
        self.assertIsInstance(parse(args, ["-n=6", "pos"])[0].fault, ConversionError)

    def testShortValueShorthand(self):
        self.assertEqual(parse(args, ["-obaz", "pos"])[0].unwrap().opt, "baz")

    def testSwitchThenValueFlagInCluster(self):
        ns = parse(args, ["-fo", "baz", "pos"])[0].unwrap()
        self.assertTrue(ns.foo)
        self.assertEqual(ns.opt, "baz")

    def testEqualsSyntaxOnSwitchFails(self):
        outcome, _, _ = parse(args, ["--foo=yes", "pos"])
        self.assertIsInstance(outcome.fault, OptionArityError)

    def testUnknownLongOption(self):
        outcome, output, _ = parse(args, ["pos", "--bogus"])
        self.assertIsInstance(outcome.fault, UnknownOptionError)
        self.assertEqual(outcome.fault.index, 2)
        self.assertIn("unknown option '--bogus' at second position", output.stderr)

    def testUnknownShortOptionInCluster(self):
        outcome, _, _ = parse(args, ["-fxv", "pos"])
        self.assertIsInstance(outcome.fault, UnknownOptionError)
        self.assertIn("'-x'", outcome.fault.message)

    def testValueFlagInsideClusterFails(self):
        outcome, _, _ = parse(args, ["-ofv", "pos"])
        # '-o' takes exactly one value, so "fv" is its shorthand value.
        self.assertEqual(outcome.unwrap().opt, "fv")
        outcome, _, _ = parse(args, ["-fov", "pos"])
        self.assertIsInstance(outcome.fault, OptionArityError)
        self.assertIn("'-o'", outcome.fault.message)

    def testLaterScalarOccurrenceReplaces(self):
        ns = parse(args, ["-o", "one", "--opt", "two", "pos"])[0].unwrap()
        self.assertEqual(ns.opt, "two")


class TestVectorFlags(TestCase):
    """Fixed-arity and repeated vector flags."""

    @staticmethod
    def vec(schema):
        schema.flag("vec", binding=Binding.VECTOR, type="integer", nargs=3)

    def testExactArity(self):
        self.assertEqual(parse(self.vec, ["--vec", "1", "2", "3"])[0].unwrap().vec, [1, 2, 3])

    def testTooFewValues(self):
        for argv in (["--vec"], ["--vec", "1"], ["--vec", "1", "2"]):
            outcome, _, _ = parse(self.vec, argv)
            self.assertIsInstance(outcome.fault, OptionArityError)

    def testTooManyValues(self):
        outcome, _, _ = parse(self.vec, ["--vec", "1", "2", "3", "4"])
        self.assertIsInstance(outcome.fault, SuperfluousArgumentError)

    def testValuesStopAtFlagTokens(self):
        def build(schema):
            schema.flag("vals", binding=Binding.VECTOR, nargs="+")
            schema.flag("x", "x")

        ns = parse(build, ["--vals", "a", "b", "-x"])[0].unwrap()
        self.assertEqual(ns.vals, ["a", "b"])
        self.assertTrue(ns.x)

    def testReplacePolicy(self):
        def build(schema):
            schema.flag("vals", binding=Binding.VECTOR, type="integer", collect=False)

        ns = parse(build, ["--vals", "1", "--vals", "2", "--vals", "3"])[0].unwrap()
        self.assertEqual(ns.vals, [3])

    def testCollectPolicy(self):
        def build(schema):
            schema.flag("vals", binding=Binding.VECTOR, type="integer")

        ns = parse(build, ["--vals", "1", "--vals", "2", "--vals", "3"])[0].unwrap()
        self.assertEqual(ns.vals, [1, 2, 3])

    def testFirstOccurrenceDropsDefault(self):
        def build(schema):
            schema.flag("tag", "t", binding=Binding.VECTOR, default=["base"])

        self.assertEqual(parse(build, [])[0].unwrap().tag, ["base"])
        self.assertEqual(parse(build, ["-t", "a", "-t", "b"])[0].unwrap().tag, ["a", "b"])

    def testOptionalValues(self):
        def build(schema):
            schema.flag("level", binding=Binding.VECTOR, type="integer", nargs="?")
            schema.positional("rest", nargs="*")

        ns = parse(build, ["--level"])[0].unwrap()
        self.assertEqual(ns.level, [])
        ns = parse(build, ["--level", "2", "x"])[0].unwrap()
        self.assertEqual(ns.level, [2])
        self.assertEqual(ns.rest, ["x"])

    def testFailedConversionLeavesPreviousValues(self):
        def build(schema):
            schema.flag("vals", binding=Binding.VECTOR, type="integer", nargs=2)

        matcher = Matcher(Parser("test", exit=lambda status: None).schema(build))
        with self.assertRaises(ConversionError):
            matcher.scan(["--vals", "1", "2", "--vals", "3", "x"])
        self.assertEqual(matcher.slots["vals"].value, [1, 2])
        self.assertEqual(matcher.slots["vals"].count, 2)


class TestPositionals(TestCase):
    """Optional, variadic and negotiated positionals."""

    def testOptionalYieldsToRequiredAfterIt(self):
        def build(schema):
            schema.positional("x", nargs="?")
            schema.positional("y")

        ns = parse(build, ["v"])[0].unwrap()
        self.assertIsNone(ns.x)
        self.assertEqual(ns.y, "v")
        ns = parse(build, ["u", "v"])[0].unwrap()
        self.assertEqual((ns.x, ns.y), ("u", "v"))

    def testOptionalWithDefault(self):
        def build(schema):
            schema.positional("pos", nargs="?", default="def")

        self.assertEqual(parse(build, [])[0].unwrap().pos, "def")
        self.assertEqual(parse(build, ["bar"])[0].unwrap().pos, "bar")
        outcome, output, _ = parse(build, ["foo", "foo"])
        self.assertIsInstance(outcome.fault, SuperfluousArgumentError)
        self.assertIn("superfluous argument 'foo' at second position", output.stderr)

    def testTwoOptionalsFillLeftToRight(self):
        def build(schema):
            schema.positional("x", type="integer", nargs="?", default=1000)
            schema.positional("y", type="integer", nargs="?")

        ns = parse(build, [])[0].unwrap()
        self.assertEqual((ns.x, ns.y), (1000, None))
        ns = parse(build, ["42"])[0].unwrap()
        self.assertEqual((ns.x, ns.y), (42, None))
        ns = parse(build, ["42", "42"])[0].unwrap()
        self.assertEqual((ns.x, ns.y), (42, 42))

    def testChoicesWithCustomType(self):
        letters = {"a": "A", "b": "B", "c": "C"}

        def build(schema):
            schema.positional("pos", type=letters.__getitem__, choices=("a", "b", "c"))

        outcome, output, _ = parse(build, ["foo"])
        self.assertIsInstance(outcome.fault, InvalidChoiceError)
        self.assertIn("possible values: a, b, c", output.stderr)
        self.assertEqual(parse(build, ["a"])[0].unwrap().pos, "A")
        self.assertEqual(parse(build, ["c"])[0].unwrap().pos, "C")

    def testChoicesAreCheckedBeforeConversion(self):
        def build(schema):
            schema.positional("pos", type="integer", choices=("1", "2"))

        outcome, _, _ = parse(build, ["x"])
        self.assertIsInstance(outcome.fault, InvalidChoiceError)
        self.assertEqual(parse(build, ["2"])[0].unwrap().pos, 2)

    def testRegisteredConverterTypeName(self):
        @converter("even-for-tests", typename="even integer")
        def even(text):
            if int(text) % 2:
                raise ValueError("odd number")
            return int(text)

        def build(schema):
            schema.positional("pairs", type="even-for-tests")

        self.assertEqual(parse(build, ["4"])[0].unwrap().pairs, 4)
        outcome, output, _ = parse(build, ["3"])
        self.assertIn("expected even integer", outcome.fault.message)
        self.assertIn("hint: odd number", output.stderr)

    def testVariadicZeroToInfinity(self):
        def build(schema):
            schema.positional("param", nargs="*")

        self.assertEqual(parse(build, [])[0].unwrap().param, [])
        self.assertEqual(parse(build, ["a"])[0].unwrap().param, ["a"])
        self.assertEqual(parse(build, ["a", "b"])[0].unwrap().param, ["a", "b"])

    def testVariadicOneToInfinity(self):
        def build(schema):
            schema.positional("param", nargs="+")

        self.assertIsInstance(parse(build, [])[0].fault, MissingPositionalError)
        self.assertEqual(parse(build, ["a"])[0].unwrap().param, ["a"])
        self.assertEqual(parse(build, ["a", "b"])[0].unwrap().param, ["a", "b"])

    def testFixedCountPositional(self):
        def build(schema):
            schema.positional("point", type="integer", nargs=2)
            schema.positional("label")

        ns = parse(build, ["1", "2", "here"])[0].unwrap()
        self.assertEqual(ns.point, [1, 2])
        self.assertEqual(ns.label, "here")
        outcome, _, _ = parse(build, ["1"])
        self.assertIsInstance(outcome.fault, MissingPositionalError)
        self.assertIn("requires 2 values but only 1 were given", outcome.fault.message)

    def testGreedyButFairDistribution(self):
        def build(schema):
            schema.positional("a", nargs="+")
            schema.positional("b", nargs="+")
            schema.positional("c", nargs="+")

        ns = parse(build, ["1", "2", "3"])[0].unwrap()
        self.assertEqual((ns.a, ns.b, ns.c), (["1"], ["2"], ["3"]))
        ns = parse(build, ["1", "2", "3", "4", "5"])[0].unwrap()
        self.assertEqual((ns.a, ns.b, ns.c), (["1", "2", "3"], ["4"], ["5"]))

    def testCopyStyle(self):
        def build(schema):
            schema.positional("source", nargs="+")
            schema.positional("destination")

        ns = parse(build, ["src1", "src2", "dst"])[0].unwrap()
        self.assertEqual(ns.source, ["src1", "src2"])
        self.assertEqual(ns.destination, "dst")

    def testFlagValuesAreNotCountedAsPositionals(self):
        def build(schema):
            schema.flag("opt", "o", type="string")
            schema.positional("source", nargs="+")
            schema.positional("destination")

        ns = parse(build, ["--opt", "x", "a", "b", "c"])[0].unwrap()
        self.assertEqual(ns.opt, "x")
        self.assertEqual(ns.source, ["a", "b"])
        self.assertEqual(ns.destination, "c")

    def testOptionalVariadicYieldsToRequired(self):
        def build(schema):
            schema.positional("files", nargs="*")
            schema.positional("target")

        ns = parse(build, ["t"])[0].unwrap()
        self.assertEqual((ns.files, ns.target), ([], "t"))
        ns = parse(build, ["a", "b", "t"])[0].unwrap()
        self.assertEqual((ns.files, ns.target), (["a", "b"], "t"))


class TestDelimiter(TestCase):
    """Bare '--' handling."""

    @staticmethod
    def colors(schema):
        schema.positional("cool", nargs="*")
        schema.positional("okay", nargs="*")
        schema.positional("bad", nargs="*")

    def testWithoutDelimiterFirstVariadicTakesAll(self):
        argv = ["blue", "green", "yellow", "red", "purple", "orange"]
        ns = parse(self.colors, argv)[0].unwrap()
        self.assertEqual(ns.cool, argv)
        self.assertEqual((ns.okay, ns.bad), ([], []))

    def testRepeatedDelimiterSegmentsVariadics(self):
        argv = ["--", "blue", "green", "--", "yellow", "red", "--", "purple", "orange"]
        ns = parse(self.colors, argv)[0].unwrap()
        self.assertEqual(ns.cool, ["blue", "green"])
        self.assertEqual(ns.okay, ["yellow", "red"])
        self.assertEqual(ns.bad, ["purple", "orange"])

    def testDelimiterAfterYieldedVariadicDoesNotSkip(self):
        def build(schema):
            schema.positional("a", nargs="+")
            schema.positional("b", nargs="+")

        ns = parse(build, ["--", "1", "2", "--", "3"])[0].unwrap()
        self.assertEqual(ns.a, ["1", "2"])
        self.assertEqual(ns.b, ["3"])

    def testDelimiterAfterYieldedOptionalVariadic(self):
        def build(schema):
            schema.positional("files", nargs="*")
            schema.positional("target")

        ns = parse(build, ["--", "a", "--", "t"])[0].unwrap()
        self.assertEqual(ns.files, ["a"])
        self.assertEqual(ns.target, "t")

    def testDelimiterAfterFilledScalar(self):
        def build(schema):
            schema.positional("head")
            schema.positional("tail", nargs="+")

        ns = parse(build, ["--", "x", "--", "y", "z"])[0].unwrap()
        self.assertEqual((ns.head, ns.tail), ("x", ["y", "z"]))

    def testDelimiterDisablesFlags(self):
        ns = parse(args, ["--", "--foo"])[0].unwrap()
        self.assertFalse(ns.foo)
        self.assertEqual(ns.pos, "--foo")

    def testDelimiterAsFlagValue(self):
        ns = parse(args, ["--opt", "--", "pos"])[0].unwrap()
        self.assertEqual(ns.opt, "--")
        self.assertEqual(ns.pos, "pos")

    def testDigitAliasTurnsNegativeNumbersIntoFlags(self):
        def build(schema):
            schema.flag("one", "1")
            schema.positional("values", nargs="*")

        ns = parse(build, ["-1", "x"])[0].unwrap()
        self.assertTrue(ns.one)
        outcome, _, _ = parse(build, ["-42"])
        self.assertIsInstance(outcome.fault, UnknownOptionError)
        self.assertEqual(parse(build, ["--", "-42"])[0].unwrap().values, ["-42"])


class TestHalt(TestCase):
    """Halt hand-off to downstream parsers and non-strict pass-through."""

    @staticmethod
    def parent(schema):
        schema.flag("device", "d", type="string")
        schema.positional("command", choices=("start", "stop"), halt=True)

    def testHaltedPositionalKeepsTheRestVerbatim(self):
        outcome, _, _ = parse(self.parent, ["start", "--power", "5"])
        self.assertTrue(outcome.halted)
        ns = outcome.unwrap()
        self.assertEqual(ns.command, "start")
        self.assertEqual(ns.remaining, ("--power", "5"))

    def testSubcommandParse(self):
        def start(schema):
            schema.flag("power", "p", type="integer")
            schema.positional("system")

        parent = parse(self.parent, ["-d", "gpu", "start", "-p", "5", "core"])[0].unwrap()
        self.assertEqual(parent.device, "gpu")
        child = parse(start, parent.remaining)[0].unwrap()
        self.assertEqual((child.power, child.system), (5, "core"))

    def testHaltSkipsMissingPositionalCheck(self):
        def build(schema):
            schema.positional("command", halt=True)
            schema.positional("target")

        outcome, _, statuses = parse(build, ["run"])
        self.assertTrue(outcome)
        self.assertEqual(outcome.remaining, ())
        self.assertEqual(statuses, [])

    def testDelimiterThenHaltReplacesRemaining(self):
        ns = parse(self.parent, ["--", "start", "--power", "--", "5"])[0].unwrap()
        self.assertEqual(ns.command, "start")
        self.assertEqual(ns.remaining, ("--power", "--", "5"))

    def testHaltThenDelimiterIsVerbatim(self):
        ns = parse(self.parent, ["stop", "--", "-f"])[0].unwrap()
        self.assertEqual(ns.remaining, ("--", "-f"))

    def testHaltFlagAfterItsValue(self):
        def build(schema):
            schema.flag("exec", "e", type="string", halt=True)
            schema.positional("rest", nargs="*")

        ns = parse(build, ["--exec", "ls", "-l", "dir"])[0].unwrap()
        self.assertEqual(ns.exec, "ls")
        self.assertEqual(ns.rest, [])
        self.assertEqual(ns.remaining, ("-l", "dir"))

    def testHaltInsideClusterFinishesTheCluster(self):
        def build(schema):
            schema.flag("stop", "s", halt=True)
            schema.flag("verbose", "v", binding=Binding.COUNTER)
            schema.flag("out", "o", type="string")

        ns = parse(build, ["-svo", "file", "tail"])[0].unwrap()
        self.assertTrue(ns.stop)
        self.assertEqual(ns.verbose, 1)
        self.assertEqual(ns.out, "file")
        self.assertEqual(ns.remaining, ("tail",))

    def testNonStrictPassThrough(self):
        def ssh(schema):
            schema.flag("port", "p", type="integer")
            schema.positional("host")

        outcome, _, _ = parse(ssh, ["-p", "21", "myserver", "rm", "-rf", "/"], strict=False)
        ns = outcome.unwrap()
        self.assertEqual((ns.port, ns.host), (21, "myserver"))
        self.assertEqual(ns.remaining, ("rm", "-rf", "/"))

        outcome, output, _ = parse(ssh, ["-p", "21", "myserver", "rm", "-rf", "/"])
        self.assertIsInstance(outcome.fault, SuperfluousArgumentError)
        self.assertIn("superfluous", output.stderr)


class TestMatcher(TestCase):
    """Matcher used directly, without a Parser."""

    def testIsFlag(self):
        matcher = Matcher(Schema())
        for token in ("--x", "-x", "-xyz", "--", "-"):
            self.assertEqual(matcher.is_flag(token), token not in ("--", "-"))
        for token in ("-42", "-4.2", "-1e5", "-inf", "x", ""):
            self.assertFalse(matcher.is_flag(token))

    def testDeterministicAcrossFreshMatchers(self):
        schema = Parser("test", exit=lambda status: None).schema(args)
        argv = ["-fvv", "--number=3", "pos", "-1", "2.5"]
        first = Matcher(schema).scan(argv).check().namespace()
        second = Matcher(schema).scan(argv).check().namespace()
        self.assertEqual(first, second)
        self.assertEqual(first.verbose, 2)
        self.assertTrue(math.isclose(first.double, 2.5))

    def testCounterCountsEveryOccurrence(self):
        schema = Schema()
        schema.flag("verbose", "v", binding=Binding.COUNTER)
        for k in range(5):
            ns = Matcher(schema).scan(["--verbose"] * k).namespace()
            self.assertEqual(ns.verbose, k)

    def testNamespaceAttributeAccess(self):
        schema = Schema()
        schema.flag("dry-run")
        ns = Matcher(schema).scan(["--dry-run"]).namespace()
        self.assertTrue(ns.dry_run)
        self.assertTrue(ns["dry-run"])
        with self.assertRaises(AttributeError):
            ns.missing


if __name__ == "__main__":
    unittest.main()
