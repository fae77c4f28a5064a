"""Shared fixtures: realistic /proc/stat contents written to a temp file."""

import logging

import pytest

SAMPLE_STAT = """\
cpu  10132153 290696 3084719 46828483 16683 0 25195 0 175628 0
cpu0 1393280 32966 572056 13343292 6130 0 17875 0 23933 0
cpu1 1335344 33106 557013 13387834 3561 0 2469 0 23713 0
cpu2 1403491 32573 527468 13398106 3702 0 2134 0 23745 0
cpu3 1346702 32889 539143 13404281 3279 0 2113 0 23791 0
intr 199292231 35 10 0 0 0 0 0 0 1 0 0 0 156 0 0 0
ctxt 433457209
btime 1690000000
processes 175623
procs_running 2
procs_blocked 0
softirq 47628362 0 13624017 3547 1297327 0 0 2145 10768521 0 21932805
"""


@pytest.fixture
def sample_stat() -> str:
    """Text of a four core /proc/stat."""
    return SAMPLE_STAT


@pytest.fixture
def stat_file(tmp_path):
    """Path of a file holding SAMPLE_STAT."""
    path = tmp_path / "stat"
    path.write_text(SAMPLE_STAT)
    return str(path)


@pytest.fixture
def restore_logging():
    """Undo setup_logging() changes to the package logger."""
    logger = logging.getLogger("procstat")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
