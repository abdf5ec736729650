"""Run the draft room API server.

Usage:
    python -m src.sync.run_server [port] [celebrity_pool_file]

Examples:
    python -m src.sync.run_server
    python -m src.sync.run_server 8080 data/celebrities.csv
"""

import logging
import os
import sys
from pathlib import Path

import uvicorn

from src.celebrity_pool.ingestion import PoolIngestionError, read_celebrity_pool
from src.draft_manager.draft_rules import DraftActionError
from src.logging_config import setup_logging
from src.sync.api_server import create_app

logger = logging.getLogger(__name__)

DEFAULT_HOST = os.getenv("CELEBRITY_DRAFT_HOST", "127.0.0.1")
DEFAULT_PORT = 8000


def seed_draft(app, pool_file: Path) -> None:
    """Initialize the draft from a pool file if no draft exists yet."""
    service = app.state.service
    if service.load_state() is not None:
        logger.info("Existing draft found; not seeding from %s", pool_file)
        return

    names = read_celebrity_pool(pool_file)
    service.apply("init", {"celebrityList": names})
    logger.info("Seeded draft with %d celebrities from %s", len(names), pool_file)


def main(port: int = DEFAULT_PORT, pool_file: Path = None) -> None:
    setup_logging()
    app = create_app()

    if pool_file is not None:
        try:
            seed_draft(app, pool_file)
        except (PoolIngestionError, DraftActionError) as e:
            logger.error("Could not seed draft from %s: %s", pool_file, e)
            sys.exit(1)

    logger.info("Starting draft room on %s:%d", DEFAULT_HOST, port)
    uvicorn.run(app, host=DEFAULT_HOST, port=port)


if __name__ == "__main__":
    port = int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_PORT
    pool_file = Path(sys.argv[2]) if len(sys.argv) > 2 else None
    main(port, pool_file)
