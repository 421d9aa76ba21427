"""
Add celery-beat schedule for the weekly provider payout batch.

This migration creates the periodic task that runs
process_weekly_payouts_task every Friday at 10:00.
"""

from django.db import migrations

TASK_NAME = "Process Weekly Provider Payouts"


def create_periodic_task(apps, schema_editor):
    """Create the crontab schedule and periodic task."""
    CrontabSchedule = apps.get_model("django_celery_beat", "CrontabSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    # Fridays at 10:00
    schedule, _ = CrontabSchedule.objects.get_or_create(
        minute="0",
        hour="10",
        day_of_week="5",
        day_of_month="*",
        month_of_year="*",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "payments.tasks.process_weekly_payouts_task",
            "crontab": schedule,
            "enabled": True,
            "description": (
                "Pays every approved provider for last week's PAID payments "
                "not yet covered by a payout."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
