"""Celery bootstrap: runs the poll cycle from beat instead of the blocking loop.

The worker runs with concurrency 1 and an embedded beat (``-B``), so two
cycles never overlap.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

from celery import Celery
from celery.schedules import schedule as celery_schedule

from .errors import ConfigurationError
from .settings import Settings, clear_environment, get_settings
from .utils.logging import configure_logging

_CELERY_APP: Celery | None = None

POLL_TASK_NAME = "suzbot.tasks.poll.poll_channel"


def create_celery_app(settings: Settings | None = None) -> Celery:
    """Create a Celery instance from the settings."""
    config = settings or get_settings()
    if not config.celery_broker_url:
        raise ConfigurationError("SUZ_CELERY_BROKER_URL is required for the Celery runner.")
    configure_logging(config.log_level, json_enabled=config.log_json)

    app = Celery("suzbot", broker=config.celery_broker_url)
    app.conf.update(
        task_default_queue="suzbot.poll",
        task_soft_time_limit=max(config.poll_interval_minutes * 60 - 30, 60),
        worker_concurrency=1,
        worker_prefetch_multiplier=1,
        task_ignore_result=True,
        beat_schedule=_build_beat_schedule(config),
        timezone="UTC",
        enable_utc=True,
    )

    app.autodiscover_tasks(["suzbot.tasks"], related_name="poll")
    return app


def get_celery_app() -> Celery:
    """Return the singleton Celery instance."""
    global _CELERY_APP
    if _CELERY_APP is None:
        _CELERY_APP = create_celery_app()
        clear_environment()
    return _CELERY_APP


def _build_beat_schedule(settings: Settings) -> Dict[str, Dict[str, Any]]:
    return {
        "poll.suz_news": {
            "task": POLL_TASK_NAME,
            "schedule": celery_schedule(timedelta(minutes=settings.poll_interval_minutes)),
            "options": {"queue": "suzbot.poll", "expires": settings.poll_interval_minutes * 60},
        }
    }

