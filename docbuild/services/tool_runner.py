from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from docbuild.core.config import Settings
from docbuild.core.errors import ToolError, ToolNotFoundError, ToolTimeoutError
from docbuild.core.logging import get_logger
from docbuild.utils.file_utils import bounded, decode_output

logger = get_logger("tools")


def _kill_group(process: subprocess.Popen) -> None:
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_process(command: Sequence[str], cwd: Path, timeout: float) -> subprocess.CompletedProcess:
    """
    Run ``command`` in its own session and wait for it.

    On timeout the whole process group is killed, so helpers a tool started
    (latexmk -> xelatex) die with it, then TimeoutExpired is raised.
    """
    with subprocess.Popen(
        command,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        start_new_session=True,
    ) as process:
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_group(process)
            stdout, stderr = process.communicate()
            raise subprocess.TimeoutExpired(process.args, timeout, output=stdout, stderr=stderr) from None
        except BaseException:
            _kill_group(process)
            raise
    return subprocess.CompletedProcess(process.args, process.returncode, stdout, stderr)


@dataclass(frozen=True)
class ToolResult:
    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    def diagnostic(self, limit: int) -> str:
        return bounded("\n".join(part for part in (self.stdout, self.stderr) if part.strip()), limit)


class ToolRunner:
    """Runs one external tool at a time inside a workspace directory."""

    def __init__(self, settings: Settings) -> None:
        self.timeout = settings.tool_timeout
        self.note_max_chars = settings.note_max_chars

    def run(
        self,
        command: Sequence[str],
        cwd: Path,
        *,
        allowed_codes: Iterable[int] = (0,),
    ) -> ToolResult:
        """
        Execute ``command`` in ``cwd`` and capture its output.

        Raises ToolError when the exit status is not in ``allowed_codes``,
        ToolTimeoutError when the process outlives the configured timeout (its
        process group is killed first) and ToolNotFoundError when the executable is missing.
        """
        command = [str(part) for part in command]
        tool = Path(command[0]).name
        logger.debug("running %s in %s", " ".join(command), cwd)

        try:
            process = run_process(command, cwd=cwd, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise ToolNotFoundError(tool, command) from exc
        except subprocess.TimeoutExpired as exc:
            output = decode_output(exc.stderr) or decode_output(exc.stdout)
            logger.error("%s timed out after %ss", tool, self.timeout)
            raise ToolTimeoutError(
                tool, command, self.timeout, bounded(output, self.note_max_chars)
            ) from exc

        result = ToolResult(
            command=command,
            returncode=process.returncode,
            stdout=decode_output(process.stdout),
            stderr=decode_output(process.stderr),
        )

        if result.returncode not in set(allowed_codes):
            diagnostic = result.diagnostic(self.note_max_chars)
            logger.error("%s failed with status %s: %s", tool, result.returncode, diagnostic)
            raise ToolError(tool, command, result.returncode, diagnostic)

        return result
