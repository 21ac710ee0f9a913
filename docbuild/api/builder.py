from fastapi import APIRouter

from docbuild.core.config import get_settings
from docbuild.core.logging import get_logger
from docbuild.models import BuildLatexRequest, FileReply, HealthReply, MergeRequest
from docbuild.services.builder_service import BuilderService

router = APIRouter(prefix="/builder", tags=["Builder"])

logger = get_logger("api")
builder_service = BuilderService.from_settings(get_settings())


# Sync handlers: FastAPI runs each call in its thread pool, so slow builds do not block the loop.
@router.post("/build-latex", response_model=FileReply, summary="Typeset LaTeX sources into one PDF")
def build_latex(payload: BuildLatexRequest) -> FileReply:
    logger.info("build request received with %s files", len(payload.files))
    return builder_service.build_latex(payload.files)


@router.post("/merge", response_model=FileReply, summary="Merge PDFs and images, in order, into one PDF")
def merge(payload: MergeRequest) -> FileReply:
    logger.info("merge request received with %s files (force_even=%s)", len(payload.files), payload.force_even)
    return builder_service.merge(payload.files, payload.force_even)


@router.get("/health", response_model=HealthReply, summary="Report whether the builder accepts requests")
def health() -> HealthReply:
    return builder_service.health()
