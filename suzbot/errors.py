"""Error taxonomy for the bot.

``FatalError`` subclasses stop the process: continuing would mean acting on
unknown channel state. Everything else is handled per item or per cycle.
"""

from __future__ import annotations


class SuzBotError(Exception):
    """Base error."""


class FatalError(SuzBotError):
    """Unrecoverable error; the process logs it and exits non-zero."""


class ConfigurationError(FatalError):
    """Missing or malformed configuration."""


class AuthenticationError(FatalError):
    """The chat platform rejected the bot token."""


class ConnectionFailedError(FatalError):
    """The chat connection could not be opened."""


class HistoryReadError(FatalError):
    """Channel history could not be read, so nothing can be deduplicated."""


class ExtractionError(SuzBotError):
    """The listing page could not be fetched."""


class ArchivalError(SuzBotError):
    """The archival service did not accept a URL."""


class ChatError(SuzBotError):
    """A chat platform request failed."""
