from __future__ import annotations

from typing import Sequence


class DocumentError(Exception):
    """Base class for every failure a pipeline reports back in a reply note."""


class ValidationError(DocumentError):
    """The request cannot be processed as given (no files, unsafe paths)."""


class UnsupportedFileError(DocumentError):
    def __init__(self, filename: str) -> None:
        super().__init__(f"file type for {filename} unsupported")
        self.filename = filename


class WorkspaceError(DocumentError):
    """Workspace directories or files could not be created, written or read."""


class ToolError(DocumentError):
    """An external tool exited with a failure status."""

    def __init__(
        self,
        tool: str,
        command: Sequence[str],
        returncode: int | None,
        output: str = "",
        message: str | None = None,
    ) -> None:
        self.tool = tool
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        if message is None:
            message = f"{tool} exited with status {returncode}"
            if output:
                message = f"{message}: {output}"
        super().__init__(message)


class ToolTimeoutError(ToolError):
    def __init__(self, tool: str, command: Sequence[str], timeout: float, output: str = "") -> None:
        super().__init__(
            tool,
            command,
            None,
            output,
            message=f"{tool} timed out after {timeout:g}s",
        )
        self.timeout = timeout


class ToolNotFoundError(ToolError):
    def __init__(self, tool: str, command: Sequence[str]) -> None:
        super().__init__(tool, command, None, message=f"{tool} is not installed or not on PATH")


class ConversionError(DocumentError):
    """An image could not be converted to PDF."""


class MergeError(DocumentError):
    """The prepared documents could not be concatenated."""


class BuildError(DocumentError):
    """The LaTeX build failed."""
