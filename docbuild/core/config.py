import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings, loaded once from the environment (and `.env` when present)."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    app_name: str = "docbuild"
    app_version: str = "0.1.0"

    port: int = 50051
    internal_port: int = 50052
    debug: bool = False
    human_logs: bool = False

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    pdf_blank_path: Optional[Path] = None
    workspace_root: Optional[Path] = None

    latexmk_bin: str = "latexmk"
    qpdf_bin: str = "qpdf"
    convert_bin: str = "convert"

    tool_timeout: float = 300.0
    # qpdf exits with 3 when it succeeded but emitted warnings
    qpdf_warning_exit_code: int = 3
    note_max_chars: int = 2000
    image_page_size: str = "595x842"

    @property
    def blank_pdf(self) -> Path:
        return self.pdf_blank_path or (self.base_dir / "assets" / "blank.pdf")

    @property
    def workspaces_dir(self) -> Path:
        return self.workspace_root or Path(tempfile.gettempdir())

    def configure_paths(self) -> None:
        """Create the workspace root when it is missing."""
        self.workspaces_dir.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
