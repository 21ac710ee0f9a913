from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas


def ensure_blank_page(path: Path) -> bool:
    """
    Write a single empty A4 page to ``path`` unless a file is already there.

    Returns True when the file was created.
    """
    if path.is_file():
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(path), pagesize=A4)
    # showPage keeps the page even though nothing was drawn on it
    c.showPage()
    c.save()
    return True
