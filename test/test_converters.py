# python
"""
Converter tests (built-in types, registry, number classification).

Scope
- Validate the built-in "string", "integer" and "real" converters, including range
  limits and whole-token matching.
- Validate registry lookups (names, Converter instances, plain callables) and registration.
- Validate is_number, which drives negative-number classification.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import math
import unittest
from unittest import TestCase

from argot import Converter, Registry, converter, is_number


class TestBuiltins(TestCase):
    """Behavioral tests for the registered converters."""

    def testString(self):
        string = Registry.lookup("string")
        self.assertEqual(string(""), "")
        self.assertEqual(string(" -x "), " -x ")
        self.assertEqual(string.typename, "")

    def testInteger(self):
        integer = Registry.lookup("integer")
        self.assertEqual(integer("42"), 42)
        self.assertEqual(integer("-42"), -42)
        self.assertEqual(integer("007"), 7)
        self.assertEqual(integer(str(2 ** 63 - 1)), 2 ** 63 - 1)
        self.assertEqual(integer(str(-2 ** 63)), -2 ** 63)
        self.assertEqual(integer.typename, "integer")

    def testIntegerRejects(self):
        integer = Registry.lookup("integer")
        for text in ("", "foo", "42x", " 42", "+42", "4_2", "4.2", "1e3", str(2 ** 63), str(-2 ** 63 - 1)):
            with self.subTest(text=text), self.assertRaises(ValueError):
                integer(text)

    def testReal(self):
        real = Registry.lookup("real")
        self.assertEqual(real("42"), 42.0)
        self.assertEqual(real("-4.2"), -4.2)
        self.assertEqual(real(".5"), 0.5)
        self.assertEqual(real("5."), 5.0)
        self.assertEqual(real("1e5"), 1e5)
        self.assertEqual(real("-1E-3"), -1e-3)
        self.assertEqual(real("inf"), math.inf)
        self.assertEqual(real("-Infinity"), -math.inf)
        self.assertTrue(math.isnan(real("nan")))
        self.assertEqual(real.typename, "real number")

    def testRealRejects(self):
        real = Registry.lookup("real")
        for text in ("", "foo", "4.2x", "+4.2", "1e", ".", "1_000.5", "1e999"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                real(text)


class TestRegistry(TestCase):
    """Lookup and registration of converters."""

    def testBuiltinNames(self):
        self.assertTrue({"string", "integer", "real"} <= set(Registry.names()))

    def testLookupForms(self):
        custom = Converter(str.upper, "shout")
        self.assertIs(Registry.lookup(custom), custom)
        wrapped = Registry.lookup(int)
        self.assertIsInstance(wrapped, Converter)
        self.assertEqual(wrapped("3"), 3)
        self.assertEqual(wrapped.typename, "int")

    def testLookupErrors(self):
        with self.assertRaises(KeyError):
            Registry.lookup("no-such-type")
        with self.assertRaises(TypeError):
            Registry.lookup(42)

    def testDecoratorRegisters(self):
        @converter("upper-for-tests", typename="upper-case text")
        def upper(text):
            return text.upper()

        self.assertIsInstance(upper, Converter)
        self.assertIs(Registry.lookup("upper-for-tests"), upper)
        self.assertEqual(upper("abc"), "ABC")
        self.assertEqual(upper.typename, "upper-case text")

    def testRegisterDefaultsTypenameToName(self):
        registered = Registry.register("hex-for-tests", lambda text: int(text, 16))
        self.assertEqual(registered.typename, "hex-for-tests")
        self.assertEqual(Registry.lookup("hex-for-tests")("ff"), 255)

    def testRegisterValidation(self):
        with self.assertRaises(TypeError):
            Registry.register(1, str)
        with self.assertRaises(ValueError):
            Registry.register("  ", str)
        with self.assertRaises(TypeError):
            Converter("not callable")
        with self.assertRaises(TypeError):
            converter("bad-for-tests")(42)


class TestNumbers(TestCase):
    """Number classification used to tell negative numbers from short clusters."""

    def testNumbers(self):
        for text in ("42", "-42", "-4.2", "-.5", "-1e5", "-1E+5", "-inf", "-nan"):
            with self.subTest(text=text):
                self.assertTrue(is_number(text))

    def testNotNumbers(self):
        for text in ("-", "--", "-x", "-1x", "-e5", "--42", "-4-2", ""):
            with self.subTest(text=text):
                self.assertFalse(is_number(text))


if __name__ == "__main__":
    unittest.main()
