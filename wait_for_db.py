"""Block until the configured database accepts connections.

Imported by start_api.py before migrations run; can also be run directly.
"""
import logging
import os
import time

import psycopg2

logger = logging.getLogger("wait_for_db")


def _pg_params(database_url: str) -> dict:
    from urllib.parse import urlparse
    # SQLAlchemy URL may start with postgresql+psycopg2://
    url = database_url.replace("postgresql+psycopg2://", "postgresql://").replace("postgres://", "postgresql://")
    p = urlparse(url)
    return {
        "host": p.hostname or "db",
        "port": p.port or 5432,
        "user": p.username or "resort",
        "password": p.password or "resort",
        "dbname": (p.path or "/resort").lstrip("/") or "resort",
    }


def wait(database_url: str, timeout_s: int) -> None:
    if not database_url.startswith(("postgres://", "postgresql")):
        logger.info("Non-Postgres DATABASE_URL, nothing to wait for")
        return
    params = _pg_params(database_url)
    logger.info("Waiting for Postgres at %s:%s db=%s (timeout=%ss)", params["host"], params["port"], params["dbname"], timeout_s)
    start = time.time()
    while True:
        try:
            psycopg2.connect(connect_timeout=3, **params).close()
            logger.info("Postgres is ready")
            return
        except psycopg2.OperationalError:
            if time.time() - start > timeout_s:
                logger.error("Timed out waiting for Postgres")
                raise
            time.sleep(1)


DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise SystemExit("DATABASE_URL is not set")

# No-op when start_api.py already configured logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

wait(DATABASE_URL, int(os.getenv("DB_WAIT_TIMEOUT", "60")))
