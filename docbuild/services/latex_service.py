from __future__ import annotations

from typing import Sequence

from docbuild.core.config import Settings
from docbuild.core.errors import BuildError, ToolError, ToolTimeoutError, ValidationError
from docbuild.core.logging import get_logger
from docbuild.models import InputFile
from docbuild.services.tool_runner import ToolRunner
from docbuild.storage.workspace import Workspace, WorkspaceManager

logger = get_logger("latex")

# Pins xelatex as the engine and turns on synctex for every build.
LATEXMK_CONFIG = b"""
$pdf_mode = 1;
$pdflatex=q/xelatex -synctex=1 %O %S/
"""


class TypesettingPipeline:
    """Builds a PDF from a set of LaTeX sources with latexmk."""

    def __init__(self, settings: Settings, workspaces: WorkspaceManager, runner: ToolRunner) -> None:
        self.latexmk_bin = settings.latexmk_bin
        self.workspaces = workspaces
        self.runner = runner

    def build(self, files: Sequence[InputFile]) -> bytes:
        if not files:
            raise ValidationError("must provide one or more files")

        with self.workspaces.open("build") as workspace:
            workspace.write(".latexmkrc", LATEXMK_CONFIG)
            for upload in files:
                path = workspace.write(upload.name, upload.data, folder=upload.folder)
                logger.debug("wrote %s bytes to %s", len(upload.data), path)

            logger.info("cleaning %s", workspace.path)
            self._step("clean", [self.latexmk_bin, "-C"], workspace)

            logger.info("building %s", workspace.path)
            self._step("build", [self.latexmk_bin, f"-jobname={workspace.id}"], workspace)

            result_name = f"{workspace.id}.pdf"
            if not workspace.file(result_name).is_file():
                raise BuildError(f"latexmk build produced no {result_name}")
            return workspace.read(result_name)

    def _step(self, step: str, command: list[str], workspace: Workspace) -> None:
        try:
            self.runner.run(command, cwd=workspace.path)
        except ToolTimeoutError:
            raise
        except ToolError as exc:
            raise BuildError(f"running latexmk {step}: {exc}") from exc
