"""Prometheus exporter for /proc/stat samples."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

from prometheus_client import CollectorRegistry, Counter, generate_latest, start_http_server
from prometheus_client.core import GaugeMetricFamily

from procstat.config import ExporterConfig
from procstat.mapper import map_snapshot
from procstat.models import ParseResult
from procstat.reader import read_snapshot

logger = logging.getLogger(__name__)

SCRAPE_WORKERS = 4


class ProcStatCollector:
    """
    Custom collector that reads the statistics source on every scrape.

    Holds only configuration: each collect() builds its own snapshot, so
    concurrent scrapes never share parse state. Reads run on a small worker
    pool and are bounded by the configured scrape timeout.
    """

    def __init__(self, config: ExporterConfig, scrapes: Counter | None = None) -> None:
        """
        Initialize the collector.

        Args:
            config: Exporter settings (source path, timeout, labels).
            scrapes: Optional counter labelled by result, bumped once per scrape.
        """
        self._config = config
        self._scrapes = scrapes
        self._label_names = [name for name, _ in config.const_labels]
        self._label_values = [value for _, value in config.const_labels]
        self._executor = ThreadPoolExecutor(
            max_workers=SCRAPE_WORKERS,
            thread_name_prefix="procstat-scrape",
        )

    def describe(self):
        # Metric names depend on the host, don't read the source at register time
        return []

    def collect(self):
        result = self._scrape()
        if result is None:
            return

        for sample in map_snapshot(result.snapshot):
            family = GaugeMetricFamily(
                sample.name,
                sample.documentation,
                labels=self._label_names,
            )
            family.add_metric(self._label_values, sample.value)
            yield family

    def close(self) -> None:
        """Stop the worker pool without waiting for hung reads."""
        self._executor.shutdown(wait=False)

    def _scrape(self) -> ParseResult | None:
        future = self._executor.submit(
            read_snapshot,
            self._config.stat_path,
            self._config.include_aggregate,
        )
        try:
            result = future.result(timeout=self._config.scrape_timeout)
        except FutureTimeout:
            # Drop the read if it is still queued behind hung ones
            future.cancel()
            logger.error(
                "Timed out reading stat source path=%s timeout=%.1fs",
                self._config.stat_path,
                self._config.scrape_timeout,
            )
            self._count("failed")
            return None
        except Exception:
            logger.exception("Failed to collect stat samples path=%s", self._config.stat_path)
            self._count("failed")
            return None

        self._count("ok" if result.ok else "degraded")
        return result

    def _count(self, outcome: str) -> None:
        if self._scrapes is not None:
            self._scrapes.labels(result=outcome).inc()


def build_registry(config: ExporterConfig) -> tuple[CollectorRegistry, ProcStatCollector]:
    """Create a registry holding a fresh collector and its scrape counter."""
    registry = CollectorRegistry()
    scrapes = Counter(
        "procstat_scrapes",
        "Scrapes of the stat source by result.",
        ["result"],
        registry=registry,
    )
    collector = ProcStatCollector(config, scrapes=scrapes)
    registry.register(collector)
    return registry, collector


def render(config: ExporterConfig) -> bytes:
    """Collect once and return the text exposition output."""
    registry, collector = build_registry(config)
    try:
        return generate_latest(registry)
    finally:
        collector.close()


def serve(config: ExporterConfig, stop_event: threading.Event | None = None) -> None:
    """
    Serve /metrics until interrupted or until stop_event is set.

    Raises:
        OSError: The listening socket could not be bound.
    """
    stop_event = stop_event or threading.Event()
    registry, collector = build_registry(config)

    logger.info(
        "Starting metrics server address=%s port=%d source=%s",
        config.address,
        config.port,
        config.stat_path,
    )
    try:
        server, thread = start_http_server(config.port, addr=config.address, registry=registry)
    except OSError as exc:
        logger.error("Failed to start metrics server port=%d error=%s", config.port, exc)
        collector.close()
        raise

    try:
        stop_event.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5.0)
        collector.close()
        logger.info("Metrics server stopped")
