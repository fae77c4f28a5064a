"""Data models for procstat."""

from dataclasses import dataclass, field

# Core id used for the "all cores combined" row.
AGGREGATE_CORE = -1

# Scalar counters recognized in /proc/stat, in normalized (first char upper) form.
SCALAR_FIELDS = (
    "Intr",
    "Ctxt",
    "Btime",
    "Processes",
    "Procs_running",
    "Procs_blocked",
)


@dataclass(slots=True, frozen=True)
class CoreCounters:
    """Immutable per-core CPU time counters, in clock ticks since boot."""

    id: int  # AGGREGATE_CORE for the combined row
    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0


@dataclass(slots=True)
class SystemSnapshot:
    """Structured result of parsing one read of /proc/stat."""

    cores: list[CoreCounters] = field(default_factory=list)
    scalars: dict[str, int] = field(default_factory=dict)
    aggregate: CoreCounters | None = None

    def scalar(self, name: str) -> int:
        """Get a scalar counter by normalized name, 0 when it was not reported."""
        return self.scalars.get(name, 0)


@dataclass(slots=True, frozen=True)
class ParseResult:
    """Snapshot plus the warnings raised while assembling it."""

    snapshot: SystemSnapshot
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


@dataclass(slots=True, frozen=True)
class Sample:
    """One gauge sample ready for export."""

    namespace: str
    name: str
    value: float
    documentation: str
