"""Exceptions raised by procstat."""


class ProcStatError(Exception):
    """Base class for procstat errors."""


class SourceUnavailable(ProcStatError):
    """The statistics source could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(ProcStatError):
    """A configuration value is missing or invalid."""
