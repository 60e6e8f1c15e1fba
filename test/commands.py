"""
Command model and registry tests (descriptions, option keys, nested configuration).

Scope
- Validate how Command records are parsed and serialised.
- Validate how CommandRegistry flattens namespaces and recovers from bad leaves.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Command, CommandRegistry, Option).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from courier import Command, CommandRegistry, Option


class TestCommand(TestCase):
    """Behavioral tests for Command."""

    def testStringConfigIsDescription(self):
        command = Command("build", "Build the project")
        self.assertEqual(command.description, "Build the project")
        self.assertEqual(command.options, {})

    def testMappingConfig(self):
        command = Command("create", {"": "Create an element", "n": "Name of the element|name|string"})
        self.assertEqual(command.description, "Create an element")
        self.assertEqual(command.options["n"].alias, "name")
        self.assertTrue(command.options["n"].required)

    def testOptionsAreKeyedByResolvedName(self):
        command = Command("run", {"label": "Verbose output|v"})
        self.assertEqual(list(command.options), ["v"])
        self.assertEqual(command.options["v"].alias, "label")

    def testOptionInstanceIsReparsed(self):
        option = Option("f|File|file|string")
        command = Command("read", {"f": option})
        self.assertEqual(command.options["f"], option)
        self.assertIsNot(command.options["f"], option)

    def testSegments(self):
        self.assertEqual(Command("ftp:upload").segments, ("ftp", "upload"))

    def testEmptyNameRaises(self):
        with self.assertRaises(TypeError):
            Command("")

    def testToConfig(self):
        config = {"": "Create an element", "n": "Name of the element|name|string"}
        self.assertEqual(Command("create", config).to_config(), config)


class TestCommandRegistry(TestCase):
    """Behavioral tests for CommandRegistry."""

    def setUp(self):
        self.registry = CommandRegistry()

    def testNestedNamespacesAreFlattened(self):
        self.registry.parse({
            "create": {"": "Create", "n": "Name|name|string"},
            "ftp": {
                "upload": "Upload the build",
                "download": {"": "Fetch a remote file", "f": "Remote file|file|string"},
            },
            "update": "Update the configuration file",
        })
        self.assertEqual(sorted(self.registry), ["create", "ftp:download", "ftp:upload", "update"])
        self.assertEqual(self.registry["ftp:download"].description, "Fetch a remote file")

    def testEmptyMappingIsCommand(self):
        self.registry.parse({"noop": {}})
        self.assertIn("noop", self.registry)

    def testPrefix(self):
        self.registry.parse({"deploy": "Deploy"}, "ops")
        self.assertEqual(list(self.registry), ["ops:deploy"])

    def testLastWriteWins(self):
        self.registry.parse({"build": "First"})
        self.registry.parse({"build": "Second"})
        self.assertEqual(self.registry["build"].description, "Second")
        self.assertEqual(len(self.registry), 1)

    def testMalformedLeafIsSkipped(self):
        with self.assertLogs("courier.commands", "ERROR") as logs:
            processed = self.registry.parse({
                "bad": {"": "Bad", "xy": "Two letters"},
                "good": "Good",
            })
        self.assertTrue(processed)
        self.assertNotIn("bad", self.registry)
        self.assertIn("good", self.registry)
        self.assertIn("Skipping command bad", logs.output[0])

    def testOptionRecordsWithoutDescriptionAreCommand(self):
        self.registry.parse({
            "create": {"n": {"name": "n", "alias": "name", "type": "string"}},
            "ftp": {"upload": {"": "Upload"}},
        })
        self.assertEqual(sorted(self.registry), ["create", "ftp:upload"])
        self.assertEqual(self.registry["create"].description, "")
        self.assertEqual(self.registry["create"].options["n"].alias, "name")

    def testEmptyConfigIsNotProcessed(self):
        self.assertFalse(self.registry.parse({}))

    def testRegisterRejectsNonCommands(self):
        with self.assertRaises(TypeError):
            self.registry.register("build")

    def testToConfigIsSorted(self):
        self.registry.parse({"zip": "Zip", "add": {"": "Add", "v": "Verbose|verbose"}})
        self.assertEqual(list(self.registry.to_config()), ["add", "zip"])
        self.assertEqual(self.registry.to_config()["add"], {"": "Add", "v": "Verbose|verbose"})


if __name__ == "__main__":
    unittest.main()
