from resort.tasks.celery_app import celery
from resort.tasks import worker_jobs

@celery.task(name="resort.tasks.jobs.purge_expired_otps")
def purge_expired_otps():
    return worker_jobs.purge_expired_otps()

@celery.task(name="resort.tasks.jobs.send_booking_reminders")
def send_booking_reminders(hours_ahead: int = 24):
    return worker_jobs.send_booking_reminders(hours_ahead=hours_ahead)
