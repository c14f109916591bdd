"""Exception types raised by the briefing pipeline."""

from __future__ import annotations


class PulseError(Exception):
    """Base class for fatal pipeline errors."""


class ConfigError(PulseError):
    """Raised when the run cannot start: missing credential or no enabled sources."""


class NoItemsError(PulseError):
    """Raised when every configured source came back empty."""


class ArchiveWriteError(PulseError):
    """Raised when the briefing archive cannot be persisted."""


class CompletionError(Exception):
    """A single completion request failed (network, timeout, empty reply)."""


__all__ = [
    "ArchiveWriteError",
    "CompletionError",
    "ConfigError",
    "NoItemsError",
    "PulseError",
]
