"""
Conversions module behavioral tests (built-ins, factories, registry).

Conventions
- Test method names follow CamelCase per project convention.
- Registered names are prefixed with "test-" since the registry is process-wide.
"""
import pathlib
import time
import unittest
from unittest import TestCase

from argot import (
    Conversion,
    ConversionError,
    ConversionWarning,
    choice,
    conversion_registry,
    convert,
    ranged,
    register_conversion,
    resolve_conversion,
    warn_conversion,
)


class TestBuiltins(TestCase):
    """Behavioral tests for the built-in conversions."""

    def testString(self):
        self.assertEqual(convert(conversion_registry["string"], " raw "), " raw ")

    def testInteger(self):
        integer = conversion_registry["integer"]
        self.assertEqual(integer("42"), 42)
        self.assertEqual(integer("-7"), -7)
        self.assertEqual(integer("1_000"), 1000)
        with self.assertRaises(ConversionError):
            integer("4.2")
        with self.assertRaises(ConversionError):
            integer("0x10")

    def testNumber(self):
        number = conversion_registry["number"]
        self.assertEqual(number("2.5"), 2.5)
        self.assertIsInstance(number("3"), float)
        with self.assertRaises(ConversionError):
            number("two")

    def testBoolean(self):
        boolean = conversion_registry["boolean"]
        for raw in ("yes", "TRUE", "on", "1"):
            self.assertIs(boolean(raw), True, msg=raw)
        for raw in ("no", "False", "OFF", "0"):
            self.assertIs(boolean(raw), False, msg=raw)
        with self.assertRaises(ConversionError):
            boolean("maybe")

    def testKeyword(self):
        keyword = conversion_registry["keyword"]
        self.assertEqual(keyword("dry-run"), "dry-run")
        self.assertEqual(keyword("Fast"), "fast")
        for raw in ("dry_run", "-x", "x-", "2fast", ""):
            with self.assertRaises(ConversionError, msg=raw):
                keyword(raw)

    def testKeywordRejectsLongInputQuickly(self):
        keyword = conversion_registry["keyword"]
        for raw in ("a" * 40 + "!", "a-" * 40 + "!", "ab-" * 2000 + "_"):
            started = time.perf_counter()
            with self.assertRaises(ConversionError):
                keyword(raw)
            self.assertLess(time.perf_counter() - started, 1.0, msg=raw[:10])
        self.assertEqual(keyword("a" * 5000), "a" * 5000)

    def testWarnConversionOutsideBind(self):
        with self.assertWarns(ConversionWarning) as context:
            warn_conversion("legacy spelling")
        self.assertEqual(str(context.warning), "legacy spelling")
        self.assertNotIn("name", context.warning.options)
        self.assertEqual(context.warning.options["title"], "conversion warning")

    def testPath(self):
        path = conversion_registry["path"]
        self.assertEqual(path("a/b.txt"), pathlib.Path("a/b.txt"))
        with self.assertRaises(ConversionError):
            path("")

    def testResultTypeChecked(self):
        broken = Conversion("broken", lambda raw: 1, str)
        with self.assertRaises(ConversionError):
            convert(broken, "x")

    def testFunctionErrorsPropagate(self):
        def explode(raw):
            raise KeyError(raw)

        with self.assertRaises(KeyError):
            convert(Conversion("explode", explode), "x")


class TestFactories(TestCase):
    """Behavioral tests for choice() and ranged()."""

    def testChoice(self):
        mode = choice("fast", "slow")
        self.assertEqual(mode("fast"), "fast")
        self.assertEqual(mode.name, "choice(fast, slow)")
        with self.assertRaises(ConversionError):
            mode("Fast")

    def testChoiceValidation(self):
        with self.assertRaises(TypeError):
            choice()
        with self.assertRaises(TypeError):
            choice("a", 1)
        with self.assertRaises(ValueError):
            choice("a", "a")

    def testRanged(self):
        level = ranged("integer", minimum=1, maximum=3)
        self.assertEqual(level("2"), 2)
        self.assertEqual(level.returns, int)
        with self.assertRaises(ConversionError):
            level("0")
        with self.assertRaises(ConversionError):
            level("4")
        with self.assertRaises(ConversionError):
            level("two")

    def testRangedOpenSide(self):
        positive = ranged("number", minimum=0)
        self.assertEqual(positive("1e9"), 1e9)
        with self.assertRaises(ConversionError):
            positive("-0.5")

    def testRangedBoundsChecked(self):
        with self.assertRaises(ValueError):
            ranged("integer", minimum=5, maximum=1)


class TestRegistry(TestCase):
    """Behavioral tests for registration and resolution."""

    def testRegisterAndResolve(self):
        hexadecimal = register_conversion("test-hex", lambda raw: int(raw, 16), int)
        self.assertIs(resolve_conversion("test-hex"), hexadecimal)
        self.assertEqual(hexadecimal("ff"), 255)

    def testRegisterDuplicateRejected(self):
        register_conversion("test-duplicate", str, str)
        with self.assertRaises(ValueError):
            register_conversion("test-duplicate", str, str)
        replaced = register_conversion("test-duplicate", str.upper, str, replace=True)
        self.assertIs(conversion_registry["test-duplicate"], replaced)

    def testBuiltinNamesCannotBeOverwritten(self):
        with self.assertRaises(ValueError):
            register_conversion("integer", int, int)

    def testResolveClass(self):
        conversion = resolve_conversion(pathlib.PurePosixPath)
        self.assertEqual(conversion.name, "PurePosixPath")
        self.assertIs(conversion.returns, pathlib.PurePosixPath)
        self.assertEqual(conversion("a/b"), pathlib.PurePosixPath("a/b"))

    def testResolveCallable(self):
        def upper(raw):
            return raw.upper()

        conversion = resolve_conversion(upper)
        self.assertEqual(conversion.name, "upper")
        self.assertEqual(conversion("abc"), "ABC")

    def testResolveRejects(self):
        with self.assertRaises(ValueError):
            resolve_conversion("no-such-conversion")
        with self.assertRaises(TypeError):
            resolve_conversion(42)

    def testConversionValidation(self):
        with self.assertRaises(TypeError):
            Conversion("x", 42)
        with self.assertRaises(ValueError):
            Conversion(" ", str)
        with self.assertRaises(TypeError):
            Conversion("x", str, "str")


if __name__ == "__main__":
    unittest.main()
