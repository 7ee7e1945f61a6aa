"""Celery configuration."""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    os.getenv("DJANGO_SETTINGS_MODULE", "config.settings.dev"),
)

app = Celery("uniqverse")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Beat schedule
app.conf.beat_schedule = {
    "refresh-exchange-rates": {
        "task": "currency.tasks.refresh_exchange_rates",
        "schedule": crontab(minute=5),  # Hourly
    },
    "generate-monthly-payouts": {
        "task": "commissions.tasks.generate_monthly_payouts",
        "schedule": crontab(minute=0, hour=2, day_of_month=1),  # 1st of month, 2am
    },
}
