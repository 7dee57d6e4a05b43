"""Drops root privileges before the bot touches the network."""

from __future__ import annotations

import os

from suzbot.errors import ConfigurationError
from suzbot.utils.logging import get_logger

logger = get_logger(__name__)

NOBODY_UID = 65534
NOBODY_GID = 65534


def drop_privileges(uid: int = NOBODY_UID, gid: int = NOBODY_GID) -> bool:
    """Switch to ``nobody`` when running as root.

    Returns True when privileges were dropped, False when there was nothing
    to drop. Group membership is changed before the uid, otherwise the
    process would no longer be allowed to change it.
    """
    if not hasattr(os, "geteuid") or os.geteuid() != 0:
        return False
    try:
        os.setgroups([gid])
        os.setgid(gid)
        os.setuid(uid)
    except OSError as exc:
        raise ConfigurationError(f"Failed to drop root: {exc}") from exc
    if os.geteuid() == 0:
        raise ConfigurationError("Failed to drop root: still running as uid 0")
    logger.info("privileges.dropped", extra={"uid": uid, "gid": gid})
    return True
