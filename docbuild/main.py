# docbuild/main.py
from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from docbuild.api import routers
from docbuild.core.config import get_settings
from docbuild.core.logging import configure_logging
from docbuild.utils.blank_page import ensure_blank_page

# === Settings and logging ===
settings = get_settings()
logger = configure_logging(settings)

# The blank page has to exist before any force_even merge is served.
if ensure_blank_page(settings.blank_pdf):
    logger.info("blank page written to %s", settings.blank_pdf)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
)

# === Routers ===
for router in routers:
    app.include_router(router)


def run() -> None:
    logger.info(
        "docbuild starting: external_port=%s internal_port=%s debug=%s",
        settings.port,
        settings.internal_port,
        settings.debug,
    )
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level="debug" if settings.debug else "info")


if __name__ == "__main__":
    run()
