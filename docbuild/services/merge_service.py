from __future__ import annotations

from io import BytesIO
from typing import List, Sequence

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from docbuild.core.config import Settings
from docbuild.core.errors import (
    ConversionError,
    MergeError,
    ToolError,
    ToolTimeoutError,
    UnsupportedFileError,
    ValidationError,
)
from docbuild.core.logging import get_logger
from docbuild.models import InputFile
from docbuild.services.classifier import ClassifiedKind, classify
from docbuild.services.image_service import ImageNormalizer
from docbuild.services.parity_service import PageParityEnforcer
from docbuild.services.tool_runner import ToolRunner
from docbuild.storage.workspace import WorkspaceManager

logger = get_logger("merge")


class DocumentAssembler:
    """Concatenates PDFs and images, in request order, into one PDF using qpdf."""

    def __init__(
        self,
        settings: Settings,
        workspaces: WorkspaceManager,
        runner: ToolRunner,
        images: ImageNormalizer,
        parity: PageParityEnforcer,
    ) -> None:
        self.qpdf_bin = settings.qpdf_bin
        self.warning_code = settings.qpdf_warning_exit_code
        self.workspaces = workspaces
        self.runner = runner
        self.images = images
        self.parity = parity

    def merge(self, files: Sequence[InputFile], force_even: bool = False) -> bytes:
        if not files:
            raise ValidationError("must provide one or more files")

        prepared = self.prepare(files)

        with self.workspaces.open("merge") as workspace:
            output_name = f"{workspace.id}.pdf"
            command = [self.qpdf_bin, "--empty", output_name, "--pages"]

            for index, document in enumerate(prepared):
                pdf_path = workspace.write(f"{index}.pdf", document)
                logger.debug("wrote %s bytes to %s", len(document), pdf_path)

                if force_even and self.parity.enforce_even(pdf_path, workspace):
                    logger.info("padded %s (%s) with a blank page", pdf_path.name, files[index].name)

                command.append(pdf_path.name)

            command.append("--")

            try:
                result = self.runner.run(command, cwd=workspace.path, allowed_codes=(0, self.warning_code))
            except ToolTimeoutError:
                raise
            except ToolError as exc:
                raise MergeError(f"failed merging pdf files: {exc}") from exc

            if result.returncode == self.warning_code:
                logger.warning("qpdf reported warnings while merging: %s", result.stderr.strip())

            if not workspace.file(output_name).is_file():
                raise MergeError("failed reading produced PDF: qpdf produced no output")
            merged = workspace.read(output_name)

        self._check_readable(merged)
        return merged

    def prepare(self, files: Sequence[InputFile]) -> List[bytes]:
        """Turn every input into PDF bytes; a single unsupported file fails the whole batch."""
        prepared: List[bytes] = []
        for upload in files:
            kind = classify(upload.data)
            logger.info("file info: filename=%s kind=%s bytes=%s", upload.name, kind.value, len(upload.data))

            if kind is ClassifiedKind.PDF:
                prepared.append(upload.data)
            elif kind.is_image:
                try:
                    prepared.append(self.images.to_pdf(upload.data))
                except ConversionError as exc:
                    raise ConversionError(f"failed to convert image {upload.name} to pdf: {exc}") from exc
            elif kind is ClassifiedKind.UNSUPPORTED:
                raise UnsupportedFileError(upload.name)
            else:  # pragma: no cover - new kinds must be handled above
                raise AssertionError(f"unhandled file kind {kind}")
        return prepared

    @staticmethod
    def _check_readable(data: bytes) -> None:
        try:
            len(PdfReader(BytesIO(data)).pages)
        except (PdfReadError, ValueError) as exc:
            raise MergeError(f"failed reading produced PDF: {exc}") from exc
