#!/usr/bin/env python3
"""
Container entrypoint: wait for the database, migrate, seed, then exec uvicorn.
"""
import logging
import os
import sys

from resort.core.logging import configure_logging

configure_logging()
logger = logging.getLogger("start_api")

import wait_for_db  # noqa: F401,E402  blocks until Postgres answers

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402

from resort.core.config import settings  # noqa: E402

logger.info("Running migrations")
alembic_cfg = Config(os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini"))
alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
command.upgrade(alembic_cfg, "head")

from resort.seed import run as run_seed  # noqa: E402

logger.info("Seeding defaults")
run_seed()

port = os.getenv("PORT", "8000")
logger.info("Starting API on port %s", port)
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "resort.main:app", "--host", "0.0.0.0", "--port", port],
)
