import logging

from resort.core.config import settings

_configured = False


def configure_logging() -> None:
    """Install the root handler once (API process and Celery worker)."""
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _configured = True
