import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("villa_backoffice")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Close stays whose check-out date has passed - daily at 02:15
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=15, hour=2),
    },
    # Expired / pending renewal legal documents - daily at 03:00
    "refresh-legal-document-statuses": {
        "task": "documents.refresh_legal_document_statuses",
        "schedule": crontab(minute=0, hour=3),
    },
}
