"""
Background process runner used by command handlers.

Spawn runs one subprocess, forwards its output in chunks as it arrives and
settles exactly once: it resolves when the process exits with status 0 and
fails with ProcessError (non-zero exit) or the spawn error otherwise.

    await Spawn(cli).run("git", ["clone", url], {"cwd": target})

Output forwarding
- With stdio="pipe" (default) stdout and stderr are read concurrently; every
  chunk (at most CHUNK_SIZE bytes, not split on lines) goes to
  logger(level, text) with level "info" for stdout and "error" for stderr. The
  default logger writes the non-empty lines of each chunk through cli.log.
- stdio="inherit" leaves both streams attached to the terminal, "ignore"
  discards them.
"""
import asyncio
import codecs
import os
import re
import shlex

from rich.markup import escape

from .faults import ProcessError

CHUNK_SIZE = 65536

_STDIO = {
    "pipe": asyncio.subprocess.PIPE,
    "inherit": None,
    "ignore": asyncio.subprocess.DEVNULL,
}


class Spawn:
    """
    Runner for a single background process.

    Attributes
    - cli: the Cli context whose log() receives the output.
    - settled: set once the run has resolved or failed; later events are ignored.
    - process: the running asyncio process, None once settled.
    """

    def __init__(self, cli):
        self.cli = cli
        self.settled = False
        self.process = None
        self._readers = []

    def _close(self):
        for reader in self._readers:
            if not reader.done():
                reader.cancel()
        self._readers = []
        self.process = None

    def _log(self, level, data):
        """
        Default output logger: one log record per non-empty line.
        """
        color = "red" if level == "error" else "yellow"
        for line in re.split(r"[\r\n]+", str(data).strip()):
            if line := line.strip():
                self.cli.log(level, "[%s]%s[/%s]", color, escape(line), color, markup=True)

    def _on_error(self, future, error):
        if not self.settled:
            self.settled = True
            self._close()
            future.set_exception(error)

    def _on_exit(self, future, code):
        if not self.settled:
            self.settled = True
            self._close()
            if code == 0:
                future.set_result(None)
            else:
                future.set_exception(ProcessError(code))

    @staticmethod
    async def _forward(stream, level, logger):
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while chunk := await stream.read(CHUNK_SIZE):
            if text := decoder.decode(chunk):
                logger(level, text)
        if text := decoder.decode(b"", final=True):
            logger(level, text)

    async def _watch(self, future, process):
        try:
            await asyncio.gather(*self._readers)
            code = await process.wait()
        except Exception as error:
            if process.returncode is None:
                process.kill()
            await process.wait()
            self._on_error(future, error)
        else:
            self._on_exit(future, code)

    async def run(self, cmd, args=(), options=None, logger=None):
        """
        Run a program and wait for it to finish.

        Parameters
        - cmd: str
          Program name or path.
        - args: str | Iterable[str]
          Arguments; a single string is one argument.
        - options: Mapping | None
          cwd (default: current directory), stdio ("pipe", "inherit" or
          "ignore"), shell (run through the system shell), env.
        - logger: Callable[[str, str], Any] | None
          Receives (level, text) for every output chunk when stdio is "pipe".

        Raises
        - ProcessError: when the process exits with a non-zero status.
        - OSError: when the process cannot be started.
        """
        args = [args] if isinstance(args, str) else list(args)
        options = {"cwd": os.getcwd(), "stdio": "pipe", "shell": False, "env": None} | dict(options or {})
        stream = _STDIO[options["stdio"]]
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        try:
            if options["shell"]:
                process = await asyncio.create_subprocess_shell(
                    shlex.join([cmd, *args]), cwd=options["cwd"], env=options["env"], stdout=stream, stderr=stream
                )
            else:
                process = await asyncio.create_subprocess_exec(
                    cmd, *args, cwd=options["cwd"], env=options["env"], stdout=stream, stderr=stream
                )
        except OSError as error:
            self._on_error(future, error)
            return await future

        self.process = process
        if stream is asyncio.subprocess.PIPE:
            if not callable(logger):
                logger = self._log
            self._readers = [
                loop.create_task(self._forward(process.stdout, "info", logger)),
                loop.create_task(self._forward(process.stderr, "error", logger)),
            ]
        watcher = loop.create_task(self._watch(future, process))
        try:
            return await future
        finally:
            await watcher


__all__ = (
    "Spawn",
)
