from __future__ import annotations

from pathlib import Path

from docbuild.core.config import Settings
from docbuild.core.errors import ToolError, WorkspaceError
from docbuild.core.logging import get_logger
from docbuild.services.tool_runner import ToolRunner
from docbuild.storage.workspace import Workspace

logger = get_logger("parity")


class PageParityEnforcer:
    """
    Pads a PDF with one blank page when its page count is odd.

    Each component of a merge is padded on its own so that every component
    starts on an odd page of the bound result.
    """

    def __init__(self, settings: Settings, runner: ToolRunner) -> None:
        self.qpdf_bin = settings.qpdf_bin
        self.blank_pdf = settings.blank_pdf.resolve()
        self.warning_code = settings.qpdf_warning_exit_code
        self.runner = runner

    def page_count(self, pdf_path: Path, workspace: Workspace) -> int:
        command = [self.qpdf_bin, "--show-npages", pdf_path.name]
        result = self.runner.run(command, cwd=workspace.path, allowed_codes=(0, self.warning_code))
        try:
            return int(result.stdout.strip())
        except ValueError:
            raise ToolError(
                "qpdf",
                command,
                result.returncode,
                message=f"show-npages output to int: {result.stdout.strip()!r}",
            ) from None

    def enforce_even(self, pdf_path: Path, workspace: Workspace) -> bool:
        """Append the blank page in place when needed; returns whether a page was added."""
        pages = self.page_count(pdf_path, workspace)
        is_odd = pages % 2 == 1
        logger.debug("pdf stats: filename=%s page_count=%s is_odd=%s", pdf_path.name, pages, is_odd)
        if not is_odd:
            return False

        if not self.blank_pdf.is_file():
            raise WorkspaceError(f"blank page pdf missing at {self.blank_pdf}")

        command = [
            self.qpdf_bin,
            "--replace-input",
            pdf_path.name,
            "--pages",
            pdf_path.name,
            str(self.blank_pdf),
            "--",
        ]
        self.runner.run(command, cwd=workspace.path, allowed_codes=(0, self.warning_code))

        padded = self.page_count(pdf_path, workspace)
        if padded != pages + 1:
            raise ToolError(
                "qpdf",
                command,
                0,
                message=f"adding blank page to {pdf_path.name}: expected {pages + 1} pages, found {padded}",
            )
        return True
