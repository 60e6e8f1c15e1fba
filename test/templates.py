"""
Template manager and filter tests.

Conventions
- Test method names follow CamelCase per project convention.
- Templates are written to a temporary directory per test.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from unittest import TestCase

from courier import Tpl
from courier.filters import capitalize, color, spaces


def write(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    mode = "wb" if isinstance(content, bytes) else "w"
    with open(path, mode) as file:
        file.write(content)


class TestTpl(TestCase):
    """Behavioral tests for Tpl."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.base = os.path.realpath(self.tmp.name)
        self.source = os.path.join(self.base, "templates")
        self.outdir = os.path.join(self.base, "out")
        self.tpl = Tpl()

    def tearDown(self):
        self.tmp.cleanup()

    def testRenderIsStrippedWithTrailingNewline(self):
        write(os.path.join(self.source, "hello.j2"), "\n  Hello {{ name|capitalize }}  \n\n")
        self.assertEqual(self.tpl.render(os.path.join(self.source, "hello.j2"), {"name": "world"}), "Hello World\n")

    def testNoAutoescape(self):
        write(os.path.join(self.source, "raw.j2"), "{{ value }}")
        self.assertEqual(self.tpl.render(os.path.join(self.source, "raw.j2"), {"value": "<b>&</b>"}), "<b>&</b>\n")

    def testFromDirRendersAndCopies(self):
        write(os.path.join(self.source, "sub", "name.txt.j2"), "{{ name|kebab }}")
        write(os.path.join(self.source, "data.bin"), b"\x00\x01raw")
        self.tpl.from_dir(self.source, {"name": "FooBar", "relative": self.source, "outdir": self.outdir})
        with open(os.path.join(self.outdir, "sub", "name.txt"), encoding="utf-8") as file:
            self.assertEqual(file.read(), "foo-bar\n")
        with open(os.path.join(self.outdir, "data.bin"), "rb") as file:
            self.assertEqual(file.read(), b"\x00\x01raw")

    def testGenerateReturnsContentWithoutOutdir(self):
        write(os.path.join(self.source, "module.py.j2"), "{{ name|snake }} = True")
        content = self.tpl.generate(os.path.join(self.source, "module.py.j2"), {"name": "my-module"})
        self.assertEqual(content, "my_module = True\n")
        self.assertFalse(os.path.exists(self.outdir))

    def testTransform(self):
        write(os.path.join(self.source, "README.md.j2"), "# {{ title }}")
        context = {
            "title": "Demo",
            "outdir": self.outdir,
            "transform": lambda filename: os.path.basename(filename).lower(),
        }
        self.tpl.generate(os.path.join(self.source, "README.md.j2"), context)
        self.assertTrue(os.path.isfile(os.path.join(self.outdir, "readme.md")))

    def testFromDirFilter(self):
        write(os.path.join(self.source, "keep.txt"), "keep")
        write(os.path.join(self.source, "skip.log"), "skip")
        self.tpl.from_dir(self.source, {"relative": self.source, "outdir": self.outdir}, r"\.log$")
        self.assertEqual(os.listdir(self.outdir), ["keep.txt"])

    def testLoadHelpers(self):
        helpers = os.path.join(self.base, "helpers")
        write(os.path.join(helpers, "shout.py"), "def shout(value):\n    return str(value).upper() + '!'\n")
        write(os.path.join(self.source, "shout.j2"), "{{ 'hi'|shout }}")
        self.tpl.load_helpers(helpers)
        self.assertEqual(self.tpl.render(os.path.join(self.source, "shout.j2")), "HI!\n")

    def testLoadHelpersSkipsModulesWithoutFunction(self):
        helpers = os.path.join(self.base, "helpers")
        write(os.path.join(helpers, "other.py"), "VALUE = 1\n")
        with self.assertLogs("courier.templates", "WARNING"):
            self.tpl.load_helpers(helpers)
        self.assertNotIn("other", self.tpl.env.filters)


class TestFilters(TestCase):
    """Built-in filters."""

    def testCapitalize(self):
        self.assertEqual(capitalize("hello world"), "Hello world")
        self.assertEqual(capitalize(""), "")

    def testSpaces(self):
        items = [{"name": "a"}, {"name": "abcd"}]
        self.assertEqual(spaces(items, "name", "a"), "   ")
        self.assertEqual(spaces(items, "name", "abcd"), "")
        self.assertEqual(spaces([], "name", "a"), "")

    def testColor(self):
        colored = color("text", "red")
        self.assertIn("text", colored)
        self.assertIn("\x1b[", colored)

    def testUnknownColorLeavesText(self):
        self.assertEqual(color("text", "not-a-color"), "text")


if __name__ == "__main__":
    unittest.main()
