"""
Tests for the internal helpers.

This module verifies:
- The Unset sentinel: singleton identity, falsy semantics, copy/pickle
  identity, thread-safe construction and finality.
- coalesce(), rename(), mirror() and ordinal().
- Registry: copy-on-write publication, duplicate protection, replacement.
- IntrospectableType: typename, mirrored read-only fields, repr.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from argot.utils import *
from argot.utils import IntrospectableType


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), UnsetType())
        self.assertIs(Unset, UnsetType())

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testNotEqualToNoneOrFalse(self) -> None:
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionWithTypes(self) -> None:
        """
        Unset takes part in isinstance() unions as its own type.
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(42, str | Unset)

    def testThreadSafetySingleton(self) -> None:
        results: list[UnsetType] = []
        lock: Lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce(), rename(), mirror() and ordinal().
    """

    def testCoalesceReplacesOnlyUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, "fallback"), 0)
        self.assertIsNone(coalesce(None, "fallback"))

    def testRenameDirectAndDecorator(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__name__, "decorated")

    def testRenameRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorIsReadOnly(self) -> None:
        class Holder:
            value = mirror("value")

            def __init__(self):
                self._value = (1, 2)

        holder = Holder()
        self.assertEqual(holder.value, (1, 2))
        with self.assertRaises(AttributeError):
            holder.value = ()

    def testOrdinal(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(113), "113th")


class RegistryTest(TestCase):
    """
    Test suite for the copy-on-write Registry.
    """

    def setUp(self) -> None:
        self.registry = Registry("entry", {"one": 1})

    def testLookup(self) -> None:
        self.assertEqual(self.registry["one"], 1)
        self.assertEqual(list(self.registry), ["one"])
        self.assertEqual(len(self.registry), 1)
        self.assertEqual(self.registry.kind, "entry")

    def testRegisterPublishesNewSnapshot(self) -> None:
        before = self.registry._snapshot
        self.assertEqual(self.registry.register("two", 2), 2)
        self.assertEqual(self.registry["two"], 2)
        self.assertNotIn("two", before)

    def testDuplicateRejectedUnlessReplace(self) -> None:
        with self.assertRaises(ValueError):
            self.registry.register("one", 10)
        self.registry.register("one", 10, replace=True)
        self.assertEqual(self.registry["one"], 10)

    def testNameValidation(self) -> None:
        with self.assertRaises(TypeError):
            self.registry.register(42, 1)
        with self.assertRaises(ValueError):
            self.registry.register("  ", 1)

    def testConcurrentRegistration(self) -> None:
        def worker(index):
            self.registry.register(f"entry-{index}", index)

        threads = [Thread(target=worker, args=(index,)) for index in range(32)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(self.registry), 33)
        for index in range(32):
            self.assertEqual(self.registry[f"entry-{index}"], index)


class IntrospectableTypeTest(TestCase):
    """
    Test suite for the metaclass shared by specs and programs.
    """

    def setUp(self) -> None:
        class SampleShape(metaclass=IntrospectableType):
            __introspectable__ = ("name", "size", "hidden")
            __displayable__ = ("name", "size")

            def __init__(self, name, size):
                self._name = name
                self._size = size
                self._hidden = True

        self.shape = SampleShape("box", 3)

    def testTypename(self) -> None:
        self.assertEqual(type(self.shape).__typename__, "sample-shape")

    def testMirroredFieldsAreReadOnly(self) -> None:
        self.assertEqual(self.shape.name, "box")
        self.assertTrue(self.shape.hidden)
        with self.assertRaises(AttributeError):
            self.shape.name = "crate"

    def testRepr(self) -> None:
        self.assertEqual(repr(self.shape), "sample-shape(name='box', size=3)")
        self.assertEqual(list(self.shape.__rich_repr__()), [("name", "box"), ("size", 3)])

    def testSharedBySpecsAndPrograms(self) -> None:
        from argot import OptionSpec, Program

        self.assertIs(type(OptionSpec), IntrospectableType)
        self.assertIs(type(Program), IntrospectableType)


if __name__ == '__main__':
    unittest.main()
