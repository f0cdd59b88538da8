from window_beacon.monitor.channel import EventChannel, EventQueue
from window_beacon.monitor.differ import diff_snapshots
from window_beacon.monitor.event_monitor import MonitorConfig, WindowEventMonitor

__all__ = [
    "EventChannel",
    "EventQueue",
    "MonitorConfig",
    "WindowEventMonitor",
    "diff_snapshots",
]
