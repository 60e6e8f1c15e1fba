"""
README generation tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import os
import tempfile
import textwrap
import unittest
from unittest import IsolatedAsyncioTestCase

from courier import Cli, Option
from courier.builtins.readme import project_metadata, table

DEPLOY = '''
def deploy(cli, argv):
    """
    Deploy the project.

    @command
    @option e Target environment|env|string
    @option f Skip confirmations|force
    """


def rollback(cli, argv):
    """
    Roll back the last deployment.

    @command
    """
'''


def write(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as file:
        file.write(textwrap.dedent(content))


class TestReadme(IsolatedAsyncioTestCase):
    """The readme built-in."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = os.path.realpath(self.tmp.name)
        write(os.path.join(self.root, "pyproject.toml"), '[project]\nname = "demo"\ndescription = "Demo project"\n')
        write(os.path.join(self.root, "src", "commands", "deploy.py"), DEPLOY)
        self.cli = Cli(self.root, show_stack=False)

    def tearDown(self):
        self.tmp.cleanup()

    def readme(self):
        with open(os.path.join(self.root, "README.md"), encoding="utf-8") as file:
            return file.read()

    async def testGeneratesReadme(self):
        self.assertTrue(await self.cli.handle("readme", {"directory": self.root}))
        content = self.readme()
        self.assertTrue(content.startswith("# demo\n"))
        self.assertIn("Demo project", content)
        self.assertIn("### `deploy`", content)
        self.assertIn("### `deploy:rollback`", content)
        self.assertIn("--env", content)
        self.assertIn(":heavy_check_mark:", content)

    async def testCustomTemplate(self):
        template = os.path.join(self.root, "custom.md.j2")
        write(template, "{% for command in commands %}{{ command.name }};{% endfor %}")
        await self.cli.handle("readme", {"directory": self.root, "template": template})
        self.assertEqual(self.readme(), "deploy;deploy:rollback;\n")

    def testProjectMetadata(self):
        self.assertEqual(project_metadata(self.root), {"name": "demo", "description": "Demo project"})
        self.assertEqual(project_metadata(os.path.join(self.root, "src")), {})

    def testTableColumnsAreAligned(self):
        rows = table({"": "Deploy", "e": Option("e|Target environment|env|string")})
        self.assertEqual(len(rows["options"]), 1)
        widths = [len(cell) for cell in rows["headers"]]
        self.assertEqual([len(cell) for cell in rows["options"][0]], widths)
        self.assertEqual([len(cell) for cell in rows["separators"]], widths)
        self.assertEqual(rows["options"][0][0].strip(), "-e")


if __name__ == "__main__":
    unittest.main()
