"""procstat - Terminal dashboard for /proc/stat counters."""

import time
from enum import Enum
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Static

from procstat.models import CoreCounters, ParseResult
from procstat.monitor import StatMonitor
from procstat.parser import CORE_COUNTER_FIELDS
from procstat.reader import DEFAULT_STAT_PATH


class SortKey(Enum):
    """Sort keys for the core table."""

    CORE = "core"
    USER = "user"
    SYSTEM = "system"
    IDLE = "idle"


def format_count(value: int) -> str:
    """Format a counter as a short human-readable string."""
    for unit in ["", "K", "M", "G", "T"]:
        if value < 1000:
            return f"{value:5d}{unit}" if unit == "" else f"{value:5.1f}{unit}"
        value = value / 1000
    return f"{value:.1f}P"


def format_uptime(seconds: float) -> str:
    """Format an uptime in seconds like top does."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class HeaderStats(Static):
    """Header widget showing the scalar system counters."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._scalars: dict[str, int] = {}
        self._core_count: int = 0
        self._warning_count: int = 0
        self._btime: int = 0

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_system_info(), id="system-info"),
            Static(self._get_scalar_info(), id="scalar-info"),
        )

    def update_stats(self, result: ParseResult) -> None:
        """Update the statistics from a parse result."""
        snapshot = result.snapshot
        self._scalars = dict(snapshot.scalars)
        self._core_count = len(snapshot.cores)
        self._warning_count = len(result.warnings)
        self._btime = snapshot.scalar("Btime")
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            self.query_one("#system-info", Static).update(self._get_system_info())
            self.query_one("#scalar-info", Static).update(self._get_scalar_info())
        except Exception:
            pass  # Widget not mounted yet

    def _get_system_info(self) -> str:
        """Get core count, uptime and parse status."""
        if self._core_count == 0 and not self._scalars:
            return "Waiting for /proc/stat..."

        if self._btime:
            uptime = format_uptime(max(0.0, time.time() - self._btime))
        else:
            uptime = "unknown"
        status = "[green]ok[/green]" if self._warning_count == 0 else (
            f"[yellow]{self._warning_count} warnings[/yellow]"
        )
        return f"Cores: {self._core_count}\nUptime: {uptime}\nParse: {status}"

    def _get_scalar_info(self) -> str:
        """Get one line per scalar counter."""
        return "\n".join(
            f"{name:<14} {value}" for name, value in sorted(self._scalars.items())
        )


class CoreTable(Container):
    """Container for the per-core counter table."""

    DEFAULT_CSS = """
    CoreTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize CoreTable."""
        super().__init__(*args, **kwargs)
        self._current_rows: set[str] = set()
        self._row_order: list[str] = []
        self._cores: list[CoreCounters] = []
        self._sort_key: SortKey = SortKey.CORE
        self._sort_reverse: bool = False

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key and return it."""
        keys = list(SortKey)
        current_index = keys.index(self._sort_key)
        self._sort_key = keys[(current_index + 1) % len(keys)]
        # Counters sort busiest first, core ids ascending
        self._sort_reverse = self._sort_key != SortKey.CORE
        if self._cores:
            self.update_cores(self._cores)
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the core table."""
        yield DataTable(id="core-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#core-table", DataTable)
        table.cursor_type = "row"

        table.add_column("CORE", key="id", width=6)
        for name in CORE_COUNTER_FIELDS:
            table.add_column(name.upper(), key=name, width=9)

    def update_cores(self, cores: list[CoreCounters]) -> None:
        """
        Update the core table with new counters.

        Rows are keyed by position. Cells are updated in place while the
        sorted order is unchanged, otherwise the rows are rebuilt in order.
        """
        table = self.query_one("#core-table", DataTable)

        self._cores = list(cores)
        keyed = {f"core{position}": core for position, core in enumerate(cores)}
        ordered = self._sort_cores(keyed)
        order = [row_key for row_key, _ in ordered]

        if order == self._row_order:
            for row_key, core in ordered:
                self._update_row(table, row_key, core)
        else:
            table.clear()
            for row_key, core in ordered:
                self._add_row(table, row_key, core)

        self._row_order = order
        self._current_rows = set(keyed)

    def _sort_cores(self, keyed: dict[str, CoreCounters]) -> list[tuple[str, CoreCounters]]:
        """Sort cores based on the current sort key."""
        attr = "id" if self._sort_key == SortKey.CORE else self._sort_key.value
        return sorted(
            keyed.items(),
            key=lambda item: getattr(item[1], attr),
            reverse=self._sort_reverse,
        )

    def _update_row(self, table: DataTable, row_key: str, core: CoreCounters) -> None:
        """Update an existing row in place."""
        try:
            table.update_cell(row_key, "id", str(core.id))
            for name in CORE_COUNTER_FIELDS:
                table.update_cell(row_key, name, format_count(getattr(core, name)))
        except Exception:
            pass  # Row may have been removed

    def _add_row(self, table: DataTable, row_key: str, core: CoreCounters) -> None:
        """Add a new row to the table."""
        try:
            table.add_row(
                str(core.id),
                *(format_count(getattr(core, name)) for name in CORE_COUNTER_FIELDS),
                key=row_key,
            )
        except Exception:
            pass  # Row may already exist


class ProcStatApp(App):
    """Main procstat dashboard application."""

    TITLE = "procstat"
    SUB_TITLE = "Kernel CPU counters"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #system-info {
        width: 1fr;
        padding-right: 2;
    }

    #scalar-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, stat_path: str = DEFAULT_STAT_PATH, poll_rate: float = 2.0) -> None:
        """Initialize the ProcStatApp."""
        super().__init__()
        self._update_queue: Queue[ParseResult] = Queue()
        self._monitor = StatMonitor(self._update_queue, stat_path=stat_path, poll_rate=poll_rate)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield CoreTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent result."""
        result = None
        while True:
            try:
                result = self._update_queue.get_nowait()
            except Empty:
                break

        if result is not None:
            self.update_view(result)

    def update_view(self, result: ParseResult) -> None:
        """Update the widgets with a new parse result."""
        self.query_one("#header-stats", HeaderStats).update_stats(result)
        self.query_one(CoreTable).update_cores(result.snapshot.cores)

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        new_sort_key = self.query_one(CoreTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
