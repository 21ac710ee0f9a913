"""
Pytest configuration and fixtures for docbuild tests.
"""

import os
import struct
import subprocess
import tempfile
import zlib
from io import BytesIO
from pathlib import Path

import pytest
from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

# Set test environment variables before importing the app
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="docbuild_test_"))
os.environ["WORKSPACE_ROOT"] = str(_TEST_ROOT / "workspaces")
os.environ["PDF_BLANK_PATH"] = str(_TEST_ROOT / "blank.pdf")

from docbuild.core.config import Settings  # noqa: E402
from docbuild.utils.blank_page import ensure_blank_page  # noqa: E402


def make_pdf(pages: int, label: str = "doc") -> bytes:
    """PDF with ``pages`` pages, each carrying the text ``<label>-<n>``."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    for number in range(1, pages + 1):
        c.drawString(72, 720, f"{label}-{number}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def make_png(width: int = 4, height: int = 4) -> bytes:
    """Tiny opaque red PNG built by hand."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body) & 0xFFFFFFFF)

    row = b"\x00" + b"\xff\x00\x00" * width
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(row * height))
        + chunk(b"IEND", b"")
    )


def page_texts(data: bytes) -> list:
    return [(page.extract_text() or "").strip() for page in PdfReader(BytesIO(data)).pages]


class FakeTools:
    """
    Stand-in for ``run_process`` that emulates qpdf, convert and latexmk.

    PDFs are really read and written (pypdf/reportlab) so page counts and
    ordering can be asserted on the results.
    """

    def __init__(self) -> None:
        self.calls = []
        self.failures = {}
        self.merge_returncode = 0
        self.timeouts = set()
        self.npages_stdout = None
        self.pad_appends = True
        self.merge_output = None  # replacement bytes for the merged file, b"" to leave none

    def fail(self, prefix: tuple, returncode: int, stderr: bytes = b"boom") -> None:
        self.failures[prefix] = (returncode, stderr)

    def commands(self, tool: str) -> list:
        return [command for command, _ in self.calls if Path(command[0]).name == tool]

    def __call__(self, command, cwd=None, timeout=None, **kwargs):
        command = list(command)
        cwd = Path(cwd)
        self.calls.append((command, cwd))

        for prefix in self.timeouts:
            if tuple(command[: len(prefix)]) == prefix:
                raise subprocess.TimeoutExpired(command, timeout, output=b"", stderr=b"still running")
        for prefix, (returncode, stderr) in self.failures.items():
            if tuple(command[: len(prefix)]) == prefix:
                return subprocess.CompletedProcess(command, returncode, stdout=b"", stderr=stderr)

        tool = Path(command[0]).name
        handler = getattr(self, f"_{tool}")
        return handler(command, cwd)

    def _qpdf(self, command, cwd):
        if command[1] == "--show-npages":
            if self.npages_stdout is not None:
                return subprocess.CompletedProcess(command, 0, stdout=self.npages_stdout, stderr=b"")
            pages = len(PdfReader(str(cwd / command[2])).pages)
            return subprocess.CompletedProcess(command, 0, stdout=f"{pages}\n".encode(), stderr=b"")

        if command[1] == "--replace-input":
            target = cwd / command[2]
            sources = command[command.index("--pages") + 1 : command.index("--")]
            if not self.pad_appends:
                sources = sources[:1]
            self._concat(cwd, sources, target)
            return subprocess.CompletedProcess(command, 0, stdout=b"", stderr=b"")

        if command[1] == "--empty":
            sources = command[command.index("--pages") + 1 : command.index("--")]
            output = cwd / command[2]
            self._concat(cwd, sources, output)
            if self.merge_output == b"":
                output.unlink()
            elif self.merge_output is not None:
                output.write_bytes(self.merge_output)
            stderr = b"WARNING: recovered" if self.merge_returncode else b""
            return subprocess.CompletedProcess(command, self.merge_returncode, stdout=b"", stderr=stderr)

        raise AssertionError(f"unexpected qpdf call {command}")

    @staticmethod
    def _concat(cwd, sources, target):
        writer = PdfWriter()
        for source in sources:
            path = Path(source) if os.path.isabs(source) else cwd / source
            writer.append(str(path))
        buffer = BytesIO()
        writer.write(buffer)
        target.write_bytes(buffer.getvalue())

    def _convert(self, command, cwd):
        assert (cwd / command[1]).is_file()
        (cwd / command[-1]).write_bytes(make_pdf(1, "image"))
        return subprocess.CompletedProcess(command, 0, stdout=b"", stderr=b"")

    def _latexmk(self, command, cwd):
        if command[1] == "-C":
            return subprocess.CompletedProcess(command, 0, stdout=b"Latexmk: cleaning", stderr=b"")

        jobname = command[1].split("=", 1)[1]
        if not list(cwd.rglob("*.tex")):
            return subprocess.CompletedProcess(command, 12, stdout=b"", stderr=b"Latexmk: No file name specified")
        (cwd / f"{jobname}.pdf").write_bytes(make_pdf(1, "built"))
        return subprocess.CompletedProcess(command, 0, stdout=b"Output written", stderr=b"")


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to the test's own temporary directory."""
    blank = tmp_path / "blank.pdf"
    ensure_blank_page(blank)
    value = Settings(workspace_root=tmp_path / "workspaces", pdf_blank_path=blank)
    value.configure_paths()
    return value


@pytest.fixture
def workspace_root(settings):
    return settings.workspaces_dir


@pytest.fixture
def fake_tools(monkeypatch):
    """Replace the tool runner's process launcher with the emulator above."""
    tools = FakeTools()
    monkeypatch.setattr("docbuild.services.tool_runner.run_process", tools)
    return tools


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    from fastapi.testclient import TestClient

    from docbuild.main import app

    return TestClient(app)


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_root():
    yield
    import shutil

    shutil.rmtree(_TEST_ROOT, ignore_errors=True)
