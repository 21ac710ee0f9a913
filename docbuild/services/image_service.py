from __future__ import annotations

from docbuild.core.config import Settings
from docbuild.core.errors import ConversionError, ToolError, ToolTimeoutError
from docbuild.services.tool_runner import ToolRunner
from docbuild.storage.workspace import WorkspaceManager


class ImageNormalizer:
    """Turns a JPEG/PNG into a single A4 page PDF with ImageMagick."""

    def __init__(self, settings: Settings, workspaces: WorkspaceManager, runner: ToolRunner) -> None:
        self.convert_bin = settings.convert_bin
        self.page_size = settings.image_page_size
        self.workspaces = workspaces
        self.runner = runner

    def to_pdf(self, data: bytes) -> bytes:
        with self.workspaces.open("image") as workspace:
            workspace.write("img", data)
            output_name = f"{workspace.id}.pdf"

            command = [
                self.convert_bin,
                "img",
                "-resize",
                self.page_size,
                # transparent PNGs otherwise render with a black background
                "-background",
                "white",
                "-alpha",
                "remove",
                "-page",
                "a4",
                output_name,
            ]
            try:
                self.runner.run(command, cwd=workspace.path)
            except ToolTimeoutError:
                raise
            except ToolError as exc:
                raise ConversionError(str(exc)) from exc

            if not workspace.file(output_name).is_file():
                raise ConversionError("convert produced no output")
            return workspace.read(output_name)
