"""Tests for the StatMonitor class."""

from queue import Queue

from procstat.models import ParseResult
from procstat.monitor import StatMonitor


class TestStatMonitor:
    """Tests for StatMonitor class."""

    def test_monitor_creation(self, stat_file):
        """Test StatMonitor can be instantiated."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file)

        assert monitor.poll_rate == 2.0
        assert monitor.stat_path == stat_file
        assert not monitor.is_running

    def test_poll_rate_minimum(self, stat_file):
        """Test poll rate has a minimum value."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file, poll_rate=0.0)
        assert monitor.poll_rate == 0.1

        monitor.poll_rate = 0.01
        assert monitor.poll_rate == 0.1

    def test_monitor_start_stop(self, stat_file):
        """Test StatMonitor can be started and stopped."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file, poll_rate=0.1)

        monitor.start()
        assert monitor.is_running

        monitor.stop()
        assert not monitor.is_running

    def test_monitor_start_idempotent(self, stat_file):
        """Test starting an already running monitor is safe."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file, poll_rate=0.1)

        monitor.start()
        thread1 = monitor._thread
        monitor.start()  # Should not create a new thread
        thread2 = monitor._thread

        assert thread1 is thread2
        monitor.stop()

    def test_monitor_collects_data(self, stat_file):
        """Test StatMonitor reads and queues parse results."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file, poll_rate=0.1)

        monitor.start()
        try:
            result = queue.get(timeout=2.0)
            assert isinstance(result, ParseResult)
            assert len(result.snapshot.cores) == 4
            assert result.snapshot.scalar("Btime") == 1690000000
        finally:
            monitor.stop()

    def test_each_poll_is_a_new_snapshot(self, stat_file):
        """Test consecutive polls never share a snapshot object."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file, poll_rate=0.1)

        monitor.start()
        try:
            first = queue.get(timeout=2.0)
            second = queue.get(timeout=2.0)
        finally:
            monitor.stop()

        assert first.snapshot == second.snapshot
        assert first.snapshot is not second.snapshot

    def test_missing_source_keeps_polling(self, tmp_path):
        """Test monitor keeps running when the source cannot be read."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=str(tmp_path / "missing"), poll_rate=0.1)

        monitor.start()
        try:
            result1 = queue.get(timeout=2.0)
            result2 = queue.get(timeout=2.0)
            assert not result1.ok
            assert result2.snapshot.cores == []
            assert monitor.is_running
        finally:
            monitor.stop()

    def test_loop_survives_unexpected_errors(self, stat_file, monkeypatch):
        """Test an exception inside a poll does not end the thread."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file, poll_rate=0.1)
        calls = []
        original = monitor.poll_once

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("first poll fails")
            return original()

        monkeypatch.setattr(monitor, "poll_once", flaky)

        monitor.start()
        try:
            result = queue.get(timeout=2.0)
            assert result.ok
            assert len(calls) >= 2
        finally:
            monitor.stop()

    def test_daemon_thread(self, stat_file):
        """Test monitor thread is a daemon thread."""
        queue: Queue[ParseResult] = Queue()
        monitor = StatMonitor(queue, stat_path=stat_file, poll_rate=0.1)

        monitor.start()
        try:
            assert monitor._thread is not None
            assert monitor._thread.daemon is True
            assert monitor._thread.name == "StatMonitor"
        finally:
            monitor.stop()
