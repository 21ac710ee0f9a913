from __future__ import annotations

from typing import Callable, Sequence

from docbuild.core.config import Settings
from docbuild.core.errors import DocumentError, ToolError
from docbuild.core.logging import get_logger
from docbuild.models import FileReply, HealthReply, InputFile
from docbuild.services.image_service import ImageNormalizer
from docbuild.services.latex_service import TypesettingPipeline
from docbuild.services.merge_service import DocumentAssembler
from docbuild.services.parity_service import PageParityEnforcer
from docbuild.services.tool_runner import ToolRunner
from docbuild.storage.workspace import WorkspaceManager

logger = get_logger("builder")


def _one_line(text: str) -> str:
    return " | ".join(line.strip() for line in text.splitlines() if line.strip())


class BuilderService:
    """
    Entry points behind the API: build a LaTeX document, merge files, report health.

    Pipeline failures never escape as exceptions. They come back as a reply with
    ``success=False`` and the first fatal error in ``note``.
    """

    def __init__(self, assembler: DocumentAssembler, pipeline: TypesettingPipeline) -> None:
        self.assembler = assembler
        self.pipeline = pipeline

    @classmethod
    def from_settings(cls, settings: Settings) -> "BuilderService":
        workspaces = WorkspaceManager(settings)
        runner = ToolRunner(settings)
        assembler = DocumentAssembler(
            settings,
            workspaces,
            runner,
            images=ImageNormalizer(settings, workspaces, runner),
            parity=PageParityEnforcer(settings, runner),
        )
        return cls(assembler, TypesettingPipeline(settings, workspaces, runner))

    def build_latex(self, files: Sequence[InputFile]) -> FileReply:
        return self._reply("build", lambda: self.pipeline.build(files))

    def merge(self, files: Sequence[InputFile], force_even: bool = False) -> FileReply:
        return self._reply("merge", lambda: self.assembler.merge(files, force_even))

    def health(self) -> HealthReply:
        return HealthReply(healthy=True)

    @staticmethod
    def _reply(operation: str, produce: Callable[[], bytes]) -> FileReply:
        try:
            data = produce()
        except (DocumentError, OSError) as exc:
            logger.error("%s failed: %s", operation, exc)
            tool_error = exc if isinstance(exc, ToolError) else exc.__cause__
            if isinstance(tool_error, ToolError):
                logger.info("%s command was: %s", tool_error.tool, " ".join(tool_error.command))
            return FileReply(data=b"", success=False, note=_one_line(str(exc)) or f"{operation} failed")

        logger.info("%s successful (%s bytes)", operation, len(data))
        return FileReply(data=data, success=True, note=f"{operation} successful")
