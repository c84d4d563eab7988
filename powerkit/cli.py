#!/usr/bin/env python3
"""Command-line interface for powerkit."""

import sys
import json
import logging
import argparse

from powerkit.config import Config
from powerkit.core.engine import PowerEngine
from powerkit.core.events import PowerListener
from powerkit.backends import SystemBus, create_backends

_ACTIONS = {
    "suspend": PowerEngine.suspend,
    "hibernate": PowerEngine.hibernate,
    "hybrid-sleep": PowerEngine.hybrid_sleep,
    "restart": PowerEngine.restart,
    "poweroff": PowerEngine.power_off,
}


def _format_seconds(seconds: int) -> str:
    hours, rest = divmod(int(seconds), 3600)
    return f"{hours}h {rest // 60:02d}m"


def _create_engine(config: Config, listener=None) -> PowerEngine:
    """Create an engine on the system bus with all enabled backends."""
    connection = SystemBus()
    return PowerEngine(
        connection,
        create_backends(connection, config.as_dict()),
        listener=listener,
        interval=config.check_interval,
    )


def status(engine: PowerEngine) -> dict:
    """Collect everything the engine knows into a plain dict."""
    return {
        "backends": [b.name.lower() for b in engine.available_backends()],
        "on_battery": engine.on_battery(),
        "has_battery": engine.has_battery(),
        "battery_left": round(engine.battery_left(), 1),
        "time_to_empty": engine.time_to_empty(),
        "time_to_full": engine.time_to_full(),
        "lid_is_present": engine.lid_is_present(),
        "lid_is_closed": engine.lid_is_closed(),
        "is_docked": engine.is_docked(),
        "can_restart": engine.can_restart(),
        "can_power_off": engine.can_power_off(),
        "can_suspend": engine.can_suspend(),
        "can_hibernate": engine.can_hibernate(),
        "can_hybrid_sleep": engine.can_hybrid_sleep(),
    }


def print_status(engine: PowerEngine, as_json: bool = False) -> None:
    info = status(engine)
    if as_json:
        print(json.dumps(info))
        return

    backends = ", ".join(info["backends"]) or "none"
    source = "battery" if info["on_battery"] else "AC"
    print(f"Backends:  {backends}")
    print(f"Power:     {source}")
    if info["has_battery"]:
        line = f"Battery:   {info['battery_left']:.0f}%"
        if info["on_battery"] and info["time_to_empty"]:
            line += f" ({_format_seconds(info['time_to_empty'])} left)"
        elif not info["on_battery"] and info["time_to_full"]:
            line += f" ({_format_seconds(info['time_to_full'])} to full)"
        print(line)
    if info["lid_is_present"]:
        print(f"Lid:       {'closed' if info['lid_is_closed'] else 'open'}")
    if info["is_docked"]:
        print("Docked:    yes")
    allowed = [name for name in ("restart", "power_off", "suspend", "hibernate", "hybrid_sleep")
               if info[f"can_{name}"]]
    print(f"Allowed:   {', '.join(allowed) or 'nothing'}")


def print_devices(engine: PowerEngine, as_json: bool = False) -> None:
    devices = engine.devices()
    if as_json:
        print(json.dumps([
            {
                "path": d.path,
                "native_path": d.native_path,
                "kind": d.kind,
                "vendor": d.vendor,
                "model": d.model,
                "is_present": d.is_present,
                "percentage": d.percentage,
                "time_to_empty": d.time_to_empty,
                "time_to_full": d.time_to_full,
            }
            for d in devices
        ]))
        return

    if not devices:
        print("No power devices found.")
        return

    print(f"Found {len(devices)} device(s):\n")
    for dev in devices:
        name = " ".join(p for p in (dev.vendor, dev.model) if p) or dev.native_path or dev.path
        print(f"  {name}")
        print(f"    Path:       {dev.path}")
        if dev.native_path:
            print(f"    Native:     {dev.native_path}")
        if dev.is_battery:
            present = "" if dev.is_present else " (not present)"
            print(f"    Battery:    {dev.percentage:.0f}%{present}")
        else:
            print(f"    Online:     {'yes' if dev.online else 'no'}")
        print()


class _PrintListener(PowerListener):
    """Prints each engine event on its own line."""

    def lid_closed(self):
        print("lid closed", flush=True)

    def lid_opened(self):
        print("lid opened", flush=True)

    def switched_to_battery(self):
        print("switched to battery", flush=True)

    def switched_to_ac(self):
        print("switched to AC", flush=True)

    def device_added(self, path):
        print(f"device added: {path}", flush=True)

    def device_removed(self, path):
        print(f"device removed: {path}", flush=True)

    def prepare_for_suspend(self, suspending):
        print("going to sleep" if suspending else "resumed", flush=True)


def watch(config: Config) -> int:
    """Run a Qt event loop and print power events until interrupted."""
    import signal

    from PyQt5.QtCore import QCoreApplication
    from powerkit.core.manager import create_manager

    app = QCoreApplication(sys.argv[:1])
    manager = create_manager(config.as_dict())
    printer = _PrintListener()
    manager.lid_closed.connect(printer.lid_closed)
    manager.lid_opened.connect(printer.lid_opened)
    manager.switched_to_battery.connect(printer.switched_to_battery)
    manager.switched_to_ac.connect(printer.switched_to_ac)
    manager.device_added.connect(printer.device_added)
    manager.device_removed.connect(printer.device_removed)
    manager.prepare_for_suspend.connect(printer.prepare_for_suspend)

    signal.signal(signal.SIGINT, lambda *_: app.quit())
    if not manager.start():
        print("Warning: system bus unavailable, retrying every "
              f"{manager.engine.interval}s", file=sys.stderr)
    print("Watching power events (Ctrl+C to stop)...\n", flush=True)
    try:
        return app.exec_()
    finally:
        manager.stop()


def main():
    parser = argparse.ArgumentParser(
        description="powerkit - power state monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  %(prog)s                  Show power source, battery and capabilities
  %(prog)s --json           Output as JSON
  %(prog)s --list           List all power devices
  %(prog)s --watch          Print lid/power source events as they happen
  %(prog)s --action suspend Suspend through the preferred backend
""",
    )
    parser.add_argument("--list", "-l", action="store_true", help="List power devices")
    parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    parser.add_argument("--watch", "-w", action="store_true", help="Watch for power events")
    parser.add_argument("--action", "-a", choices=sorted(_ACTIONS), default=None,
                        help="Perform a power action")
    parser.add_argument("--interval", "-i", type=int, default=None,
                        help="Liveness check interval in seconds (default: from config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    config = Config()
    if args.interval is not None:
        config["polling.check_interval_seconds"] = args.interval

    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    if args.watch:
        return watch(config)

    engine = _create_engine(config)
    if not engine.start():
        print("Warning: could not connect to the system bus", file=sys.stderr)
    try:
        if args.action:
            error = _ACTIONS[args.action](engine)
            if error:
                print(f"Error: {error}", file=sys.stderr)
                return 1
            return 0
        if args.list:
            print_devices(engine, args.json)
        else:
            print_status(engine, args.json)
    finally:
        engine.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
