"""
Exception hierarchy of the gacha simulator.

Every failure raised by the engine derives from GachaError so that front ends
can catch a single type. Only ConfigurationError is meant to escape to the
user; the other conditions are recovered locally by their callers.
"""

from typing import Any


class GachaError(Exception):
    """
    Base class for all gacha errors.

    Attributes:
        context (dict[str, Any]):
            Extra key/value pairs describing the failure, forwarded to the
            logging helpers.

    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


class PoolUnavailable(GachaError):
    """There are no items to sample from; rolling is disabled until the pool loads."""


class ConfigurationError(GachaError):
    """The weight table or the settings are degenerate; indicates a broken build."""


class StorageCorrupt(GachaError):
    """A persisted record could not be parsed or has the wrong schema version."""
