import pytest

celery = pytest.importorskip("celery")  # noqa: F841

from suzbot.celery_app import POLL_TASK_NAME, create_celery_app
from suzbot.errors import ConfigurationError
from suzbot.settings import Settings


def _make_settings(**overrides) -> Settings:
    values = dict(
        auth_token="secret",
        channel_id="42",
        poll_interval_minutes=10,
        celery_broker_url="redis://localhost:6379/0",
        log_level="DEBUG",
    )
    values.update(overrides)
    return Settings(**values)


def test_create_celery_app_schedules_poll():
    app = create_celery_app(_make_settings())

    schedule = app.conf.beat_schedule["poll.suz_news"]
    assert schedule["task"] == POLL_TASK_NAME
    assert schedule["schedule"].run_every.total_seconds() == 600
    assert app.conf.worker_concurrency == 1


def test_create_celery_app_requires_broker():
    with pytest.raises(ConfigurationError):
        create_celery_app(_make_settings(celery_broker_url=None))
