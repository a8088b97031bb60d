import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("venuebook")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Payment holds whose timer was lost - every minute
    "expire-overdue-holds": {
        "task": "bookings.expire_overdue_holds",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
}
