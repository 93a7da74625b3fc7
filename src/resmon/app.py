"""resmon - Textual dashboard and command-line entry point."""

import logging

import click
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.logging import TextualHandler
from textual.widgets import Footer, Static

from resmon.config import SamplingIntervals
from resmon.errors import InitializationError
from resmon.models import CpuLoad, Snapshot, SystemMemory, SystemUptime
from resmon.monitor import ResourceMonitor


def format_uptime(uptime: SystemUptime) -> str:
    """Format an uptime breakdown, omitting leading zero units."""
    parts = [
        (uptime.years, "year"),
        (uptime.months, "month"),
        (uptime.days, "day"),
    ]
    words = []
    for value, unit in parts:
        if value or words:
            words.append(f"{value} {unit}{'' if value == 1 else 's'}")
    words.append(f"{uptime.hours:02d}:{uptime.minutes:02d}")
    return ", ".join(words)


def format_memory(memory: SystemMemory) -> str:
    """Format memory as 'available/total unit (used%)'."""
    if not memory.unit:
        return "Loading memory info..."
    unit = memory.unit.upper()
    return f"{memory.available:.1f}{unit} free of {memory.total:.1f}{unit} ({memory.used:.1f}% used)"


def format_host(snapshot: Snapshot) -> str:
    """Format the static platform and CPU identity."""
    platform, cpu = snapshot.platform, snapshot.cpu
    return (
        f"{platform.os} {platform.platform} ({platform.family}) "
        f"kernel {platform.kernel} {platform.arch}\n"
        f"{cpu.vendor_id} {cpu.mhz:.0f} MHz, cache {cpu.cache_size} KB, "
        f"{cpu.cores} cores / {cpu.threads} threads"
    )


def format_cpu(cpu: CpuLoad) -> str:
    """Format aggregate and per-core load as bars."""
    if not cpu.per_core:
        return "Loading CPU info..."
    # Escaped brackets for the bar container
    lines = [f"All   \\[{_bar(cpu.total, 'green')}] {cpu.total:5.1f}%"]
    for core in cpu.per_core:
        lines.append(f"CPU{core.core_number:<2} \\[{_bar(core.load, 'green')}] {core.load:5.1f}%")
    return "\n".join(lines)


def _bar(percent: float, color: str) -> str:
    bar_len = min(int(percent / 5), 20)  # Cap at 20 chars
    return f"[{color}]█[/{color}]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)


class HostInfo(Static):
    """Static platform and CPU identity."""

    DEFAULT_CSS = """
    HostInfo {
        height: auto;
        padding: 1;
        background: $surface;
    }
    """

    def show(self, snapshot: Snapshot) -> None:
        self.update(format_host(snapshot))


class LoadStats(Static):
    """CPU, memory and uptime figures from the latest snapshot."""

    DEFAULT_CSS = """
    LoadStats {
        height: auto;
        min-height: 5;
        padding: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Horizontal(
            Static("Loading CPU info...", id="cpu-info"),
            Static("Loading memory info...", id="mem-info"),
        )

    def show(self, snapshot: Snapshot) -> None:
        self.query_one("#cpu-info", Static).update(format_cpu(snapshot.system_load.cpu))
        self.query_one("#mem-info", Static).update(self._mem_text(snapshot))

    def _mem_text(self, snapshot: Snapshot) -> str:
        memory = snapshot.system_load.memory
        return (
            f"Mem\\[{_bar(memory.used, 'cyan')}]\n"
            f"{format_memory(memory)}\n"
            f"Uptime: {format_uptime(snapshot.uptime)}"
        )


class ResmonApp(App):
    """Live view of a ResourceMonitor's snapshot."""

    TITLE = "resmon"
    SUB_TITLE = "Host Resource Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, monitor: ResourceMonitor) -> None:
        """Initialize the app around an already initialized monitor."""
        super().__init__()
        self._monitor = monitor

    def compose(self) -> ComposeResult:
        yield HostInfo(id="host-info")
        yield LoadStats(id="load-stats")
        yield Footer()

    def on_mount(self) -> None:
        """Start sampling and poll the snapshot for display."""
        self._monitor.start()
        self.set_interval(0.5, self.refresh_stats)

    def refresh_stats(self) -> None:
        """Redraw every panel from the current snapshot."""
        snapshot = self._monitor.snapshot()
        self.query_one(HostInfo).show(snapshot)
        self.query_one(LoadStats).show(snapshot)

    def action_quit(self) -> None:
        """Stop sampling, then exit."""
        self._monitor.stop()
        self.exit()


@click.command()
@click.option(
    "--cpu-interval",
    type=click.FloatRange(min=0, min_open=True),
    default=3.0,
    show_default=True,
    envvar="RESMON_CPU_INTERVAL",
    help="Seconds between CPU load samples.",
)
@click.option(
    "--memory-interval",
    type=click.FloatRange(min=0, min_open=True),
    default=5.0,
    show_default=True,
    envvar="RESMON_MEMORY_INTERVAL",
    help="Seconds between memory samples.",
)
@click.option(
    "--uptime-interval",
    type=click.FloatRange(min=0, min_open=True),
    default=1.0,
    show_default=True,
    envvar="RESMON_UPTIME_INTERVAL",
    help="Seconds between uptime samples.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="RESMON_LOG_LEVEL",
)
def main(cpu_interval, memory_interval, uptime_interval, log_level):
    """Monitor CPU, memory and uptime of this host."""
    logging.basicConfig(level=log_level.upper(), handlers=[TextualHandler()])

    monitor = ResourceMonitor(
        intervals=SamplingIntervals(
            cpu_load=cpu_interval,
            memory=memory_interval,
            uptime=uptime_interval,
        ),
    )
    try:
        monitor.initialize()
    except InitializationError as exc:
        raise click.ClickException(str(exc)) from exc

    ResmonApp(monitor).run()


if __name__ == "__main__":
    main()
