"""Reading the kernel statistics source."""

import logging

from procstat.exceptions import SourceUnavailable
from procstat.models import ParseResult, SystemSnapshot
from procstat.parser import parse_stat

logger = logging.getLogger(__name__)

DEFAULT_STAT_PATH = "/proc/stat"


def read_stat(path: str = DEFAULT_STAT_PATH) -> str:
    """
    Read the raw text of the statistics source.

    Raises:
        SourceUnavailable: The file is missing, unreadable or the read failed.
    """
    try:
        with open(path, encoding="ascii", errors="replace") as f:
            return f.read()
    except OSError as exc:
        raise SourceUnavailable(path, exc.strerror or str(exc)) from exc


def read_snapshot(path: str = DEFAULT_STAT_PATH, include_aggregate: bool = False) -> ParseResult:
    """Read and parse the source. An unreadable source yields an empty snapshot."""
    try:
        text = read_stat(path)
    except SourceUnavailable as exc:
        logger.error("Failed to read stat source path=%s reason=%s", exc.path, exc.reason)
        return ParseResult(snapshot=SystemSnapshot(), warnings=[str(exc)])

    return parse_stat(text, include_aggregate=include_aggregate)
