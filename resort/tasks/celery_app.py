from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery
from celery.signals import setup_logging

from resort.core.config import settings


def _redis_url_for_celery(url: str) -> str:
    """Celery requires ssl_cert_reqs for rediss:// (e.g. Upstash TLS)."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        new_query = urlencode(qs, doseq=True)
        return urlunparse(parsed._replace(query=new_query))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "resort",
    broker=_redis_url,
    backend=_redis_url,
    include=["resort.tasks.jobs"],
)

celery.conf.timezone = settings.TIMEZONE


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    from resort.core.logging import configure_logging
    configure_logging()


celery.conf.beat_schedule = {
    "purge-expired-otps": {
        "task": "resort.tasks.jobs.purge_expired_otps",
        "schedule": float(settings.OTP_SWEEP_SECONDS),
    },
    "send-booking-reminders-hourly": {
        "task": "resort.tasks.jobs.send_booking_reminders",
        "schedule": 3600.0,
    },
}
