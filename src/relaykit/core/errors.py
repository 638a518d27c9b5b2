"""Exception hierarchy for RelayKit.

Expected routing outcomes are reported as ``RoutingResult`` values; these
exceptions signal misuse (missing required arguments) or are used
internally before being normalized into results.
"""

from __future__ import annotations


class RelayKitError(Exception):
    """Base exception for all RelayKit errors."""


class InvalidArgumentError(RelayKitError, ValueError):
    """A required argument (party, activity) was missing or invalid."""


class BackChannelError(RelayKitError):
    """A back-channel message carried missing or malformed channel data."""


def require_party(value: object, name: str) -> None:
    """Raise :class:`InvalidArgumentError` if *value* is ``None``."""
    if value is None:
        raise InvalidArgumentError(f"The party ({name}) cannot be None")
