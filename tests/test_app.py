"""Tests for the resmon application."""

import pytest
from click.testing import CliRunner

from resmon import app as app_module
from resmon.app import (
    LoadStats,
    ResmonApp,
    format_cpu,
    format_host,
    format_memory,
    format_uptime,
    main,
)
from resmon.config import SamplingIntervals
from resmon.errors import ProviderError
from resmon.models import CpuCore, CpuLoad, SystemMemory, SystemUptime
from resmon.monitor import ResourceMonitor

from conftest import FakeProvider

SLOW = SamplingIntervals(cpu_load=60.0, memory=60.0, uptime=60.0)


def test_format_uptime_minutes_only():
    assert format_uptime(SystemUptime(minutes=5)) == "00:05"


def test_format_uptime_days():
    assert format_uptime(SystemUptime(days=1, hours=3, minutes=7)) == "1 day, 03:07"


def test_format_uptime_keeps_inner_zero_units():
    uptime = SystemUptime(years=2, months=0, days=3, hours=0, minutes=0)
    assert format_uptime(uptime) == "2 years, 0 months, 3 days, 00:00"


def test_format_memory():
    memory = SystemMemory(unit="gb", total=8.0, available=3.0, used=62.5)
    assert format_memory(memory) == "3.0GB free of 8.0GB (62.5% used)"


def test_format_memory_before_first_sample():
    assert format_memory(SystemMemory()) == "Loading memory info..."


@pytest.fixture
def monitor():
    monitor = ResourceMonitor(FakeProvider(), intervals=SLOW)
    monitor.initialize()
    yield monitor
    monitor.stop()


@pytest.mark.asyncio
async def test_app_creation(monitor):
    """Test ResmonApp can be instantiated."""
    app = ResmonApp(monitor)
    assert app.title == "resmon"
    assert app.sub_title == "Host Resource Monitor"


@pytest.mark.asyncio
async def test_app_compose(monitor):
    """Test ResmonApp composes its panels."""
    app = ResmonApp(monitor)
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#host-info") is not None
        assert pilot.app.query_one("#load-stats") is not None
        assert pilot.app.query_one("#cpu-info") is not None
        assert pilot.app.query_one("#mem-info") is not None


@pytest.mark.asyncio
async def test_app_starts_monitor(monitor):
    app = ResmonApp(monitor)
    async with app.run_test():
        assert monitor.is_running


@pytest.mark.asyncio
async def test_app_quit_binding_stops_monitor(monitor):
    """Test that 'q' stops sampling and exits."""
    app = ResmonApp(monitor)
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert pilot.app._exit
        assert not monitor.is_running


def test_format_host(monitor):
    host = format_host(monitor.snapshot())

    assert "ubuntu 22.04 (debian) kernel 6.5.0-14-generic x86_64" in host
    assert "GenuineIntel 2400 MHz, cache 8192 KB, 4 cores / 8 threads" in host


def test_format_cpu_lists_cores_in_order():
    text = format_cpu(CpuLoad(total=40.0, per_core=(CpuCore(0, 30.0), CpuCore(1, 50.0))))
    lines = text.splitlines()

    assert len(lines) == 3
    assert lines[0].startswith("All") and lines[0].endswith(" 40.0%")
    assert lines[1].startswith("CPU0") and lines[1].endswith(" 30.0%")
    assert lines[2].startswith("CPU1") and lines[2].endswith(" 50.0%")


def test_format_cpu_before_first_sample():
    assert format_cpu(CpuLoad()) == "Loading CPU info..."


@pytest.mark.asyncio
async def test_refresh_stats_after_publish(monitor):
    """Test panels redraw from a freshly published snapshot."""
    app = ResmonApp(monitor)
    async with app.run_test() as pilot:
        monitor.store.publish(
            cpu_load=CpuLoad(total=40.0, per_core=(CpuCore(0, 30.0), CpuCore(1, 50.0))),
            memory=SystemMemory(unit="gb", total=8.0, available=3.0, used=62.5),
            uptime=SystemUptime(days=2, hours=4, minutes=9),
        )
        pilot.app.refresh_stats()
        await pilot.pause()

        assert pilot.app.query_one(LoadStats) is not None


class TestMain:
    """Tests for the command-line entry point."""

    def test_initialization_failure_exits_without_running(self, monkeypatch):
        ran = []
        monkeypatch.setattr(
            app_module,
            "ResourceMonitor",
            lambda intervals: ResourceMonitor(
                FakeProvider(platform=ProviderError("platform", "denied")), intervals=intervals
            ),
        )
        monkeypatch.setattr(ResmonApp, "run", lambda self: ran.append(self))

        result = CliRunner().invoke(main, [])

        assert result.exit_code == 1
        assert "initialization failed: platform: denied" in result.output
        assert ran == []

    def test_intervals_from_options_and_environment(self, monkeypatch):
        built = []

        def build(intervals):
            monitor = ResourceMonitor(FakeProvider(), intervals=intervals)
            built.append(monitor)
            return monitor

        monkeypatch.setattr(app_module, "ResourceMonitor", build)
        monkeypatch.setattr(ResmonApp, "run", lambda self: None)

        result = CliRunner().invoke(
            main,
            ["--cpu-interval", "2", "--memory-interval", "10"],
            env={"RESMON_UPTIME_INTERVAL": "0.5"},
        )

        assert result.exit_code == 0, result.output
        assert built[0].intervals == SamplingIntervals(cpu_load=2.0, memory=10.0, uptime=0.5)
        assert built[0].snapshot().cpu.threads == 8

    def test_rejects_non_positive_interval(self):
        result = CliRunner().invoke(main, ["--memory-interval", "0"])

        assert result.exit_code == 2
