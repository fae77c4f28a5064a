"""Parser for the /proc/stat text format.

The input is a sequence of whitespace separated lines:

    cpu  <user> <nice> <system> <idle> <iowait> <irq> <softirq> ...
    cpu0 <user> <nice> <system> <idle> <iowait> <irq> <softirq> ...
    cpu1 ...
    intr <total> ...
    ctxt <value>
    btime <value>
    ...

The first line is always discarded. Per-core rows follow until the first line
that does not start with "cpu"; every line after that is a scalar counter.
Parsing is best effort: bad fields read as zero, bad lines are skipped, and
each degradation is reported as a warning on the returned ParseResult.
"""

import logging
from dataclasses import fields

from procstat.models import (
    AGGREGATE_CORE,
    SCALAR_FIELDS,
    CoreCounters,
    ParseResult,
    SystemSnapshot,
)

logger = logging.getLogger(__name__)

CORE_PREFIX = "cpu"
UINT64_MAX = 2**64 - 1
UINT64_DIGITS = len(str(UINT64_MAX))

# Counter columns of a per-core row, in kernel order.
CORE_COUNTER_FIELDS = tuple(f.name for f in fields(CoreCounters) if f.name != "id")

_KNOWN_SCALARS = frozenset(SCALAR_FIELDS)


def upper_first(name: str) -> str:
    """Upper-case the first character of a name, leaving the rest unchanged."""
    return name[:1].upper() + name[1:]


def parse_uint(token: str) -> int | None:
    """Parse a base 10 unsigned 64-bit integer, or return None if invalid."""
    if not (token.isascii() and token.isdigit()):
        return None
    # Bound the length before int(), huge tokens would raise there
    if len(token.lstrip("0")) > UINT64_DIGITS:
        return None
    value = int(token)
    if value > UINT64_MAX:
        return None
    return value


def is_core_row(tokens: list[str]) -> bool:
    """Check whether a tokenized line is a per-core row."""
    return bool(tokens) and tokens[0].startswith(CORE_PREFIX)


def parse_stat(text: str, include_aggregate: bool = False) -> ParseResult:
    """
    Parse /proc/stat text into a fresh SystemSnapshot.

    Never raises for malformed input. Anything unexpected is logged and turned
    into a warning, and the snapshot assembled up to that point is returned.

    Args:
        text: Raw contents of the statistics source.
        include_aggregate: Also parse the skipped first line into
            snapshot.aggregate when it is a cpu row.
    """
    snapshot = SystemSnapshot()
    warnings: list[str] = []

    try:
        _parse_lines(text, snapshot, warnings, include_aggregate)
    except Exception as exc:
        logger.exception("Unexpected failure while parsing stat data")
        warnings.append(f"parse aborted: {exc!r}")

    if warnings:
        # One line per parse, not per bad line
        logger.warning(
            "Parsed stat data with problems count=%d first=%r",
            len(warnings),
            warnings[0],
        )

    return ParseResult(snapshot=snapshot, warnings=warnings)


def _parse_lines(
    text: str,
    snapshot: SystemSnapshot,
    warnings: list[str],
    include_aggregate: bool,
) -> None:
    """Fill snapshot in place from the lines of text."""
    lines = [
        (lineno, line.split())
        for lineno, line in enumerate(text.splitlines(), start=1)
    ]
    lines = [(lineno, tokens) for lineno, tokens in lines if tokens]
    if not lines:
        return

    # Skip over the aggregated core stats
    (first_lineno, first_tokens), rest = lines[0], lines[1:]
    if include_aggregate:
        if is_core_row(first_tokens):
            snapshot.aggregate = _parse_core(
                first_lineno, first_tokens, warnings, core_id=AGGREGATE_CORE
            )
        else:
            warnings.append(f"line {first_lineno}: no aggregate cpu row")

    index = 0
    while index < len(rest) and is_core_row(rest[index][1]):
        lineno, tokens = rest[index]
        snapshot.cores.append(_parse_core(lineno, tokens, warnings))
        index += 1

    for lineno, tokens in rest[index:]:
        _parse_scalar(lineno, tokens, snapshot, warnings)


def _parse_counter(lineno: int, name: str, token: str, warnings: list[str]) -> int:
    """Parse one counter token, defaulting to 0."""
    value = parse_uint(token)
    if value is None:
        warnings.append(f"line {lineno}: invalid value {token[:32]!r} for {name}")
        return 0
    return value


def _parse_core(
    lineno: int,
    tokens: list[str],
    warnings: list[str],
    core_id: int | None = None,
) -> CoreCounters:
    """Build CoreCounters from a per-core row. Short rows keep zero counters."""
    tag = tokens[0]
    if core_id is None:
        suffix = tag[len(CORE_PREFIX):]
        if not suffix:
            core_id = AGGREGATE_CORE
        else:
            core_id = parse_uint(suffix)
            if core_id is None:
                warnings.append(f"line {lineno}: invalid core id in {tag!r}")
                core_id = 0

    values = tokens[1 : 1 + len(CORE_COUNTER_FIELDS)]
    if len(values) < len(CORE_COUNTER_FIELDS):
        warnings.append(
            f"line {lineno}: expected {len(CORE_COUNTER_FIELDS)} counters "
            f"for {tag}, got {len(values)}"
        )

    counters = {
        name: _parse_counter(lineno, name, token, warnings)
        for name, token in zip(CORE_COUNTER_FIELDS, values)
    }
    return CoreCounters(id=core_id, **counters)


def _parse_scalar(
    lineno: int,
    tokens: list[str],
    snapshot: SystemSnapshot,
    warnings: list[str],
) -> None:
    """Store a "<name> <value>" line if the name is a known scalar."""
    if len(tokens) < 2:
        warnings.append(f"line {lineno}: expected name and value, got {tokens!r}")
        return

    # Trailing tokens (per-IRQ breakdown of intr, softirq) are ignored
    name = upper_first(tokens[0])
    if name not in _KNOWN_SCALARS:
        logger.debug("Ignoring unknown scalar name=%s line=%d", tokens[0], lineno)
        return

    snapshot.scalars[name] = _parse_counter(lineno, name, tokens[1], warnings)
