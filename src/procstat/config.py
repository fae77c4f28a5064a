"""Runtime configuration for procstat."""

import os
import re
from dataclasses import dataclass, replace
from typing import Mapping

from procstat.exceptions import ConfigError
from procstat.reader import DEFAULT_STAT_PATH

LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

ENV_PREFIX = "PROCSTAT_"


@dataclass(slots=True, frozen=True)
class ExporterConfig:
    """Settings shared by the exporter, the dump command and the dashboard."""

    stat_path: str = DEFAULT_STAT_PATH
    address: str = "0.0.0.0"
    port: int = 8080
    scrape_timeout: float = 5.0  # Seconds
    include_aggregate: bool = False
    # (name, value) pairs; a mapping is accepted and converted
    const_labels: tuple[tuple[str, str], ...] = ()
    log_level: str = "INFO"
    poll_rate: float = 2.0  # Seconds, dashboard only

    def __post_init__(self) -> None:
        if isinstance(self.const_labels, Mapping):
            object.__setattr__(self, "const_labels", tuple(self.const_labels.items()))
        else:
            object.__setattr__(self, "const_labels", tuple(tuple(pair) for pair in self.const_labels))
        if not 0 <= self.port <= 65535:
            raise ConfigError(f"port out of range: {self.port}")
        if self.scrape_timeout <= 0:
            raise ConfigError(f"scrape timeout must be positive: {self.scrape_timeout}")
        if self.poll_rate <= 0:
            raise ConfigError(f"poll rate must be positive: {self.poll_rate}")
        for name, _ in self.const_labels:
            if not LABEL_NAME_RE.match(name) or name.startswith("__"):
                raise ConfigError(f"invalid label name: {name!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExporterConfig":
        """Build a config from PROCSTAT_* environment variables over the defaults."""
        environ = os.environ if environ is None else environ
        overrides: dict[str, object] = {}

        if f"{ENV_PREFIX}STAT_PATH" in environ:
            overrides["stat_path"] = environ[f"{ENV_PREFIX}STAT_PATH"]
        if f"{ENV_PREFIX}ADDRESS" in environ:
            overrides["address"] = environ[f"{ENV_PREFIX}ADDRESS"]
        if f"{ENV_PREFIX}PORT" in environ:
            overrides["port"] = _convert(environ, "PORT", int)
        if f"{ENV_PREFIX}SCRAPE_TIMEOUT" in environ:
            overrides["scrape_timeout"] = _convert(environ, "SCRAPE_TIMEOUT", float)
        if f"{ENV_PREFIX}LOG_LEVEL" in environ:
            overrides["log_level"] = environ[f"{ENV_PREFIX}LOG_LEVEL"].upper()

        return cls(**overrides)

    def with_overrides(self, **changes: object) -> "ExporterConfig":
        """Return a copy with the non-None changes applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _convert(environ: Mapping[str, str], key: str, kind: type) -> object:
    raw = environ[f"{ENV_PREFIX}{key}"]
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"invalid {ENV_PREFIX}{key}: {raw!r}") from None


def parse_label(spec: str) -> tuple[str, str]:
    """Split a "name=value" constant label argument."""
    name, sep, value = spec.partition("=")
    if not sep or not name:
        raise ConfigError(f"label must look like name=value: {spec!r}")
    return name, value
