"""
taskquest.api.__main__ — Entry point for ``python -m taskquest.api``
=====================================================================

Wiring:
1. Load .env (DATABASE_URL, JWT_SECRET).
2. Load config.yaml (timezone, morning window, port).
3. Serve the FastAPI app with Uvicorn.
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from taskquest.config import load_config_or_default

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("taskquest")


def main() -> None:
    """Bootstrap and serve the TaskQuest API."""
    load_dotenv()

    cfg = load_config_or_default()
    logger.info("Config loaded: timezone %s, port %d", cfg.timezone, cfg.api_port)

    uvicorn.run("taskquest.api.main:app", host="0.0.0.0", port=cfg.api_port)


if __name__ == "__main__":
    main()
