import shutil
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator
from uuid import uuid4

from docbuild.core.config import Settings
from docbuild.core.errors import WorkspaceError
from docbuild.core.logging import get_logger
from docbuild.utils.file_utils import resolve_inside

logger = get_logger("workspace")


@dataclass(frozen=True)
class Workspace:
    id: str
    path: Path

    def file(self, name: str, folder: str = "") -> Path:
        return resolve_inside(self.path, folder, name)

    def write(self, name: str, data: bytes, folder: str = "") -> Path:
        target = self.file(name, folder)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise WorkspaceError(f"writing {name}: {exc}") from exc
        return target

    def read(self, name: str) -> bytes:
        try:
            return self.file(name).read_bytes()
        except OSError as exc:
            raise WorkspaceError(f"reading {name}: {exc}") from exc


class WorkspaceManager:
    """Private scratch directories, one per pipeline execution."""

    def __init__(self, settings: Settings) -> None:
        self.root = settings.workspaces_dir

    def acquire(self, prefix: str = "ws") -> Workspace:
        workspace_id = uuid4().hex
        path = self.root / f"{prefix}-{workspace_id}"
        try:
            # exist_ok=False: a collision must fail, never share a directory
            path.mkdir(parents=False, exist_ok=False)
        except OSError as exc:
            raise WorkspaceError(f"creating workspace {path}: {exc}") from exc

        logger.info("workspace created: %s", path)
        return Workspace(id=workspace_id, path=path)

    def release(self, workspace: Workspace) -> None:
        logger.info("removing workspace: %s", workspace.path)
        try:
            shutil.rmtree(workspace.path)
        except OSError:
            logger.exception("failed removing workspace %s", workspace.path)

    @contextmanager
    def open(self, prefix: str = "ws") -> Iterator[Workspace]:
        workspace = self.acquire(prefix)
        try:
            yield workspace
        finally:
            self.release(workspace)
