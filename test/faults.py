"""
Faults module behavioral tests (payloads, rendering, triggering).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked in plain mode (no colors) on a captured console.
"""
import io
import unittest
import warnings
from unittest import TestCase, mock

from rich.console import Console

from argot.faults import *


def render(fault):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(fault)
    return console.file.getvalue()


class TestFaults(TestCase):
    """Behavioral tests for fault types and helpers."""

    def testCodesAreStable(self):
        self.assertEqual(UnknownOptionError.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(MissingMandatoryParameterError.code, FaultCode.MISSING_MANDATORY_PARAMETER)
        self.assertEqual(DuplicateOptionError.code, FaultCode.DUPLICATE_OPTION)
        self.assertEqual(ConversionFailedError.code, FaultCode.CONVERSION_FAILED)
        self.assertEqual(UnexpectedArgumentError.code, FaultCode.UNEXPECTED_ARGUMENT)
        self.assertEqual(UnknownCommandError.code, FaultCode.UNKNOWN_COMMAND)
        self.assertEqual(ConversionWarning.code, FaultCode.CONVERSION_WARNING)
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "21101")

    def testPayloadIsReadOnly(self):
        fault = DuplicateOptionError("option '--file' was already provided", name="file")
        self.assertEqual(fault.options["name"], "file")
        self.assertEqual(str(fault), "option '--file' was already provided")
        with self.assertRaises(TypeError):
            fault.options["name"] = "other"

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            UnknownOptionError(42)
        with self.assertRaises(TypeError):
            ConversionWarning(42)

    def testReplaceMergesOptions(self):
        fault = UnknownOptionError("unknown option '--x'", identifier="--x")
        replaced = fault.__replace__(shell=False, hint="check the spelling")
        self.assertIsNot(replaced, fault)
        self.assertIsInstance(replaced, UnknownOptionError)
        self.assertEqual(replaced.options["identifier"], "--x")
        self.assertEqual(replaced.options["hint"], "check the spelling")
        self.assertNotIn("hint", fault.options)

    def testReplaceKeepsCause(self):
        try:
            try:
                int("many")
            except ValueError as error:
                raise ConversionFailedError("invalid value 'many'", name="count") from error
        except ConversionFailedError as fault:
            original = fault
        replaced = original.__replace__(shell=False)
        self.assertIsInstance(replaced.__cause__, ValueError)
        self.assertIs(replaced.__cause__, original.__cause__)
        self.assertIs(replaced.__traceback__, original.__traceback__)
        with self.assertRaises(ConversionFailedError) as context:
            trigger(original, shell=False)
        self.assertIs(context.exception.__cause__, original.__cause__)

    def testPlainRendering(self):
        output = render(UnknownOptionError(
            "unknown option '--x'",
            title="unknown option",
            hint="did you mean '--y'?",
        ))
        self.assertIn("21101", output)
        self.assertIn("Unknown Option", output)
        self.assertIn("unknown option '--x'", output)
        self.assertIn("did you mean '--y'?", output)

    def testFancyRendering(self):
        output = render(UnexpectedArgumentError("unexpected argument 'b'", fancy=True))
        self.assertIn("21113", output)
        self.assertIn("unexpected argument 'b'", output)

    def testTriggerRaisesOutsideShell(self):
        with self.assertRaises(ConversionFailedError) as context:
            trigger(ConversionFailedError("bad value", name="count"), shell=False, extra=1)
        self.assertEqual(context.exception.options["name"], "count")
        self.assertEqual(context.exception.options["extra"], 1)

    def testTriggerPrintsAndExitsInShell(self):
        stream = io.StringIO()
        with mock.patch("argot.faults.console", Console(file=stream, width=120, color_system=None)):
            with self.assertRaises(SystemExit) as context:
                trigger(UnknownCommandError("unknown command 'rn'"), shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unknown command 'rn'", stream.getvalue())

    def testTriggerWarnsOutsideShell(self):
        with self.assertWarns(ConversionWarning):
            trigger(ConversionWarning("legacy spelling"))

    def testTriggerPrintsWarningsInShell(self):
        stream = io.StringIO()
        with mock.patch("argot.faults.console", Console(file=stream, width=120, color_system=None)):
            with warnings.catch_warnings():
                warnings.simplefilter("error")
                trigger(ConversionWarning("legacy spelling"), shell=True)
        self.assertIn("legacy spelling", stream.getvalue())

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.UNKNOWN_OPTION))
        with self.assertRaises(TypeError):
            getdoc(21101)


if __name__ == "__main__":
    unittest.main()
