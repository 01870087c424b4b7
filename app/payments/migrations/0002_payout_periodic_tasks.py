"""
Install the celery-beat schedule for payout retries and status sync.
"""

from django.db import migrations

PERIODIC_TASKS = [
    {
        "name": "payments: retry failed payouts",
        "task": "payments.tasks.retry_failed_payouts",
        "every": 5,
    },
    {
        "name": "payments: sync processing payouts",
        "task": "payments.tasks.sync_processing_payouts",
        "every": 10,
    },
]


def create_periodic_tasks(apps, schema_editor):
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    for task in PERIODIC_TASKS:
        schedule, _ = IntervalSchedule.objects.get_or_create(
            every=task["every"],
            period="minutes",
        )
        PeriodicTask.objects.update_or_create(
            name=task["name"],
            defaults={
                "task": task["task"],
                "interval": schedule,
                "enabled": True,
            },
        )


def remove_periodic_tasks(apps, schema_editor):
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")
    PeriodicTask.objects.filter(name__in=[task["name"] for task in PERIODIC_TASKS]).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0018_improve_crontab_helptext"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
