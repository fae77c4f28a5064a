"""Mapping snapshots to gauge samples.

Names are derived from the data itself: every dataclass field of a
CoreCounters record and every scalar present in the snapshot becomes one
sample, so adding a counter field needs no change here.
"""

from dataclasses import fields

from procstat.models import CoreCounters, Sample, SystemSnapshot
from procstat.reader import DEFAULT_STAT_PATH, read_snapshot

SCALAR_NAMESPACE = "fs"
AGGREGATE_NAMESPACE = "core_all"


def lower_first(name: str) -> str:
    """Lower-case the first character of a name, leaving the rest unchanged."""
    return name[:1].lower() + name[1:]


def build_name(namespace: str, name: str) -> str:
    """Join a namespace and a metric name the way Prometheus FQNames are built."""
    if not namespace:
        return name
    return f"{namespace}_{name}"


def _make_sample(namespace: str, field_name: str, value: int) -> Sample:
    metric_name = lower_first(field_name)
    return Sample(
        namespace=namespace,
        name=build_name(namespace, metric_name),
        value=float(value),
        documentation=f"{metric_name} info",
    )


def core_samples(namespace: str, core: CoreCounters) -> list[Sample]:
    """One sample per field of a CoreCounters record."""
    return [_make_sample(namespace, f.name, getattr(core, f.name)) for f in fields(core)]


def map_snapshot(snapshot: SystemSnapshot) -> list[Sample]:
    """
    Turn a snapshot into gauge samples.

    Cores are named by their position in the snapshot (core0, core1, ...),
    scalars live under "fs", and the aggregate row, when present, under
    "core_all".
    """
    samples: list[Sample] = []

    for position, core in enumerate(snapshot.cores):
        samples.extend(core_samples(f"core{position}", core))

    if snapshot.aggregate is not None:
        samples.extend(core_samples(AGGREGATE_NAMESPACE, snapshot.aggregate))

    for name, value in snapshot.scalars.items():
        samples.append(_make_sample(SCALAR_NAMESPACE, name, value))

    return samples


def produce_samples(
    path: str = DEFAULT_STAT_PATH, include_aggregate: bool = False
) -> list[Sample]:
    """Read, parse and map the source. Safe to call concurrently."""
    result = read_snapshot(path, include_aggregate=include_aggregate)
    return map_snapshot(result.snapshot)
