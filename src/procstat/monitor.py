"""Background polling of the statistics source for the dashboard."""

import logging
import threading
from queue import Queue

from procstat.models import ParseResult
from procstat.reader import DEFAULT_STAT_PATH, read_snapshot

logger = logging.getLogger(__name__)


class StatMonitor:
    """
    Monitor that reads /proc/stat periodically.

    Runs in a separate daemon thread and pushes a fresh ParseResult to a
    thread-safe Queue on every poll. Read and parse problems never stop the loop.
    """

    def __init__(
        self,
        update_queue: Queue[ParseResult],
        stat_path: str = DEFAULT_STAT_PATH,
        poll_rate: float = 2.0,
    ) -> None:
        """
        Initialize the StatMonitor.

        Args:
            update_queue: Thread-safe queue to push updates to.
            stat_path: Path of the statistics source.
            poll_rate: How often to poll (in seconds). Default 2.0s.
        """
        self._queue = update_queue
        self._stat_path = stat_path
        self._poll_rate = max(0.1, poll_rate)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def stat_path(self) -> str:
        return self._stat_path

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="StatMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def poll_once(self) -> ParseResult:
        """Read and parse the source once."""
        return read_snapshot(self._stat_path)

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(self.poll_once())
            except Exception:
                logger.exception("Poll failed path=%s", self._stat_path)

            # Wait for poll_rate seconds or until stop is requested
            self._stop_event.wait(timeout=self._poll_rate)
