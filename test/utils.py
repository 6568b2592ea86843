"""
Utility helpers tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from linescript.utils import Unset, UnsetType, coalesce, mirror, ordinal, pluralize, rename


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType): ...

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertEqual(coalesce("", "x"), "")
        self.assertIsNone(coalesce(Unset))


class TestHelpers(TestCase):

    def testRename(self):
        @rename("renamed")
        def function(): ...

        self.assertEqual(function.__name__, "renamed")
        with self.assertRaises(TypeError):
            rename(1, "x")

    def testMirrorCopies(self):
        class Owner:
            items = mirror("items")

            def __init__(self):
                self._items = {"a": [1]}

        owner = Owner()
        owner.items["a"].append(2)
        self.assertEqual(owner.items, {"a": [1]})

    def testPluralize(self):
        self.assertEqual(pluralize("argument", 1), "argument")
        self.assertEqual(pluralize("argument", 2), "arguments")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("prefix"), "prefixes")

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(113), "113th")


if __name__ == "__main__":
    unittest.main()
