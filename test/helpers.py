"""
Tests for the shared helpers.

This module verifies:
- The Unset sentinel (singleton, falsy, sealed) and coalesce().
- Name conversions between command segments and identifiers.
- Sorted iteration and the filesystem helpers.
"""
import copy
import os
import tempfile
import unittest
from unittest import TestCase

from courier.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the Unset sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported instance on every call.
        """
        self.assertIs(UnsetType(), Unset)

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))
        self.assertNotEqual(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyPreservesSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce("", "fallback"), "")


class NamingTest(TestCase):
    """
    kebab() and snake().
    """

    def testKebab(self) -> None:
        self.assertEqual(kebab("fromFiles"), "from-files")
        self.assertEqual(kebab("from_files"), "from-files")
        self.assertEqual(kebab("HTTPServer"), "http-server")
        self.assertEqual(kebab("_private_"), "private")

    def testSnake(self) -> None:
        self.assertEqual(snake("from-files"), "from_files")
        self.assertEqual(snake("installModule"), "install_module")

    def testRejectsNonStrings(self) -> None:
        with self.assertRaises(TypeError):
            kebab(1)


class FilesystemTest(TestCase):
    """
    iterate(), find_up() and scandir().
    """

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = os.path.realpath(self.tmp.name)
        os.makedirs(os.path.join(self.root, "a", "b", "__pycache__"))
        with open(os.path.join(self.root, "marker.courier-test"), "w"):
            pass
        for name in ("a/one.txt", "a/b/two.py", "a/b/__pycache__/two.pyc"):
            with open(os.path.join(self.root, name), "w"):
                pass

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def testIterateSorted(self) -> None:
        self.assertEqual(list(iterate({"b": 2, "a": 1})), [("a", 1), ("b", 2)])
        self.assertEqual(list(iterate("not a mapping")), [])

    def testFindUpFromDirectory(self) -> None:
        self.assertEqual(find_up(os.path.join(self.root, "a", "b"), "marker.courier-test"), self.root)

    def testFindUpFromFile(self) -> None:
        self.assertEqual(find_up(os.path.join(self.root, "a", "one.txt"), "marker.courier-test"), self.root)

    def testFindUpMissing(self) -> None:
        self.assertIsNone(find_up(self.root, "missing.courier-test"))

    def testScandirSortedWithoutCaches(self) -> None:
        files = [os.path.relpath(path, self.root) for path in scandir(self.root)]
        self.assertEqual(files, [os.path.join("a", "b", "two.py"), os.path.join("a", "one.txt"), "marker.courier-test"])

    def testScandirFilter(self) -> None:
        files = scandir(os.path.join(self.root, "a"), r"\.txt$")
        self.assertEqual(files, [os.path.join(self.root, "a", "b", "two.py")])


if __name__ == '__main__':
    unittest.main()
