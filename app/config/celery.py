"""
Celery application for background work.

Workers:
    - default queue: weekly payout batch, notification side work
    - "refunds" queue: refund status polling (see CELERY_TASK_ROUTES)

Periodic tasks are stored in the database (django_celery_beat); the weekly
payout schedule row is created by a payments data migration.

Run:
    celery -A config worker -Q celery,refunds -l info
    celery -A config beat -l info
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Looks for tasks.py in every installed app
app.autodiscover_tasks()
