"""
Registry tests: keyword lookup, suggestions, strict foreign prefixes.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from linescript.commands import CopyCommand, OutputCommand, RunCommand
from linescript.faults import FaultCode, UnknownCommandError
from linescript.registry import Registry, standard
from linescript.schemas import Parameter, Schema


class TestRegistry(TestCase):

    def testStandardCommands(self):
        self.assertEqual(
            list(standard),
            ["OUTPUT", "WORKDIR", "KUBECONFIG", "AS", "FROM", "COPY", "CAPTURE", "RUN"],
        )
        self.assertIs(standard["OUTPUT"], OutputCommand.__schema__)
        self.assertFalse(standard.strict)

    def testAcceptsBareSchemas(self):
        spec = Schema("PING", Parameter("host", default=True), factory=dict)
        registry = Registry(spec, OutputCommand)
        self.assertIs(registry.lookup("PING"), spec)
        self.assertEqual(len(registry), 2)
        self.assertIn("OUTPUT", registry)

    def testRejectsOtherItems(self):
        with self.assertRaises(TypeError):
            Registry(object)

    def testRejectsDuplicateKeywords(self):
        with self.assertRaises(ValueError):
            Registry(OutputCommand, OutputCommand.__schema__)

    def testUnknownCommandSuggestsCloseMatch(self):
        with self.assertRaises(UnknownCommandError) as context:
            standard.lookup("OUTPT")
        self.assertEqual(context.exception.code, FaultCode.UNKNOWN_COMMAND)
        self.assertEqual(context.exception.keyword, "OUTPT")
        self.assertIn("OUTPUT", context.exception.options["suggestions"])

    def testKeywordsAreCaseSensitive(self):
        with self.assertRaises(UnknownCommandError) as context:
            standard.lookup("output")
        self.assertEqual(context.exception.options["suggestions"][0], "OUTPUT")

    def testUnknownCommandWithoutMatch(self):
        with self.assertRaises(UnknownCommandError) as context:
            Registry(OutputCommand).lookup("ZZZ")
        self.assertEqual(context.exception.options["suggestions"], [])

    def testForeignIsEmptyWhenNotStrict(self):
        self.assertEqual(standard.foreign(OutputCommand.__schema__), frozenset())

    def testForeignWhenStrict(self):
        registry = Registry(OutputCommand, CopyCommand, RunCommand, strict=True)
        self.assertEqual(registry.foreign(OutputCommand.__schema__), frozenset({"paths", "cmd"}))
        self.assertEqual(registry.foreign(RunCommand.__schema__), frozenset({"path", "paths"}))

    def testSharedNamesAreNotForeign(self):
        spec = Schema("SAVE", Parameter("path", default=True), factory=dict)
        registry = Registry(OutputCommand, spec, strict=True)
        self.assertEqual(registry.foreign(spec), frozenset())

    def testSchemasAreReadOnly(self):
        with self.assertRaises(TypeError):
            standard.schemas["PING"] = None


if __name__ == "__main__":
    unittest.main()
