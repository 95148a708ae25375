"""Celery setup for the cPOP backend."""

import os
import typing as t

import structlog
from celery import Celery
from celery.signals import task_postrun, task_prerun

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "cpop.settings")

app = Celery("cpop")

# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()


@task_prerun.connect
def celery_task_prerun(task_id: str, task: t.Any, *args: t.Any, **kwargs: t.Any) -> None:
    """Bind Celery task context to structlog before task execution.

    Eager tasks run inside the request that queued them and keep its context.
    """
    if getattr(task.request, "is_eager", False):
        return
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        task_id=task_id,
        task_name=task.name,
        retries=getattr(task.request, "retries", 0),
    )


@task_postrun.connect
def celery_task_postrun(task: t.Any = None, *args: t.Any, **kwargs: t.Any) -> None:
    """Clear structlog context after task execution."""
    if task is not None and getattr(task.request, "is_eager", False):
        return
    structlog.contextvars.clear_contextvars()


# run:
# celery -A cpop worker -l INFO
