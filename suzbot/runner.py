"""Blocking poll loop and process entry point."""

from __future__ import annotations

import sys
import time
from typing import Callable, Optional

from suzbot.errors import ExtractionError, FatalError
from suzbot.models.domain import CycleReport
from suzbot.settings import Settings, clear_environment, get_settings
from suzbot.tasks.poll import poll_core
from suzbot.utils.logging import configure_logging, get_logger
from suzbot.utils.privileges import drop_privileges

logger = get_logger(__name__)


def run_forever(
    settings: Settings,
    *,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: Optional[int] = None,
    cycle: Callable[[Settings], CycleReport] = poll_core,
) -> int:
    """Run cycles one after another until a fatal error (or ``max_cycles``).

    A cycle whose listing fetch fails is simply retried at the next poll.
    Returns the number of completed cycles.
    """
    completed = 0
    while max_cycles is None or completed < max_cycles:
        try:
            cycle(settings)
        except ExtractionError as exc:
            logger.error("poll.extraction_failed", extra={"error": str(exc)})
        completed += 1
        if max_cycles is not None and completed >= max_cycles:
            break
        logger.info("poll.sleep", extra={"minutes": settings.poll_interval_minutes})
        sleep(settings.poll_interval_minutes * 60)
    return completed


def main() -> int:
    configure_logging()
    try:
        settings = get_settings()
        clear_environment()
        configure_logging(settings.log_level, json_enabled=settings.log_json)
        if settings.drop_privileges:
            drop_privileges()
        run_forever(settings)
    except FatalError as exc:
        logger.critical("fatal", extra={"error": str(exc), "kind": type(exc).__name__})
        return 1
    except KeyboardInterrupt:
        logger.info("shutdown")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
