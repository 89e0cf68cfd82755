"""CLI entry point for homedash.

Parses arguments, configures logging, and launches the dashboard or one of
the one-shot commands. setup_environment() is called before anything
imports litellm.

Subcommands:
    (none)   interactive Textual dashboard
    status   print the current device values
    watch    stream value changes until Ctrl-C
    toggle   flip one device
    say      classify and dispatch a typed command
"""

import argparse
import asyncio

from homedash.config import HomedashConfig, load_config
from homedash.constants import DEVICE_KEYS
from homedash.errors import HomedashError


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommand support."""
    parser = argparse.ArgumentParser(
        description="Home automation dashboard with voice commands"
    )
    parser.add_argument(
        "--config-file",
        default=None,
        help="JSON config file (default: ~/.config/homedash/config.json)",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use an in-memory store instead of the realtime database",
    )
    parser.add_argument(
        "--device", type=int, default=None, help="Audio input device"
    )
    parser.add_argument(
        "--list-devices", action="store_true", help="List audio devices"
    )

    subparsers = parser.add_subparsers(dest="subcommand")
    subparsers.add_parser("status", help="Print current device values")
    subparsers.add_parser("watch", help="Stream device value changes")
    toggle_parser = subparsers.add_parser("toggle", help="Flip one device")
    toggle_parser.add_argument("key", choices=DEVICE_KEYS)
    say_parser = subparsers.add_parser(
        "say", help="Send a typed command through the intent classifier"
    )
    say_parser.add_argument("text", nargs="+", help="Command text")
    return parser


def list_audio_devices() -> None:
    """Display available audio input devices."""
    import sounddevice as sd
    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(title="Audio Input Devices")
    table.add_column("ID", style="cyan")
    table.add_column("Device", style="white")
    table.add_column("Default", style="green")
    for i, d in enumerate(sd.query_devices()):
        if d["max_input_channels"] > 0:
            is_default = "Yes" if i == sd.default.device[0] else ""
            table.add_row(str(i), d["name"], is_default)
    console.print(table)


def make_store(config: HomedashConfig, offline: bool):
    """Build the store adapter selected by *offline* and the config."""
    from homedash.store import FirebaseStore, MemoryStore

    if offline:
        return MemoryStore()
    if not config.store.database_url:
        raise HomedashError(
            "no database URL: set store.database_url in config.json, "
            "set HOMEDASH_DATABASE_URL, or pass --offline"
        )
    return FirebaseStore(
        database_url=config.store.database_url,
        auth=config.store.auth,
        timeout=config.store.timeout,
        reconnect_delay=config.store.reconnect_delay,
    )


def _run_dashboard(args: argparse.Namespace, config: HomedashConfig) -> int:
    """Run the interactive Textual dashboard."""
    import dataclasses

    from homedash.app import DashboardApp
    from homedash.capture.microphone import VoiceCapture
    from homedash.dashboard import Dashboard
    from homedash.nlu import make_classifier

    capture_config = config.capture
    if args.device is not None:
        capture_config = dataclasses.replace(capture_config, device=args.device)

    dashboard = Dashboard(
        store=make_store(config, args.offline),
        classifier=make_classifier(config.classifier),
        capture=VoiceCapture.from_config(capture_config),
    )
    DashboardApp(dashboard).run()
    return 0


async def _status(store) -> int:
    from rich.console import Console

    from homedash.state import DashboardState, ValueChanged, reduce
    from homedash.ui import render_status_table

    state = DashboardState()
    try:
        for key in DEVICE_KEYS:
            state = reduce(state, ValueChanged(key, await store.read(key)))
    finally:
        await store.close()
    Console().print(render_status_table(state))
    return 0


async def _watch(store) -> int:
    from rich.console import Console

    from homedash.dashboard import Dashboard
    from homedash.state import Notice, ValueChanged
    from homedash.ui import render_change

    console = Console()

    dashboard = Dashboard(store=store)

    def _print(state, event) -> None:
        if isinstance(event, ValueChanged) and event.value is not None:
            console.print(render_change(event.key, event.value))
        elif isinstance(event, Notice):
            console.print(event.text, style="yellow")

    dashboard.add_listener(_print)
    dashboard.start()
    try:
        await asyncio.Event().wait()
    finally:
        await dashboard.aclose()
    return 0


async def _toggle(store, key: str) -> int:
    from rich.console import Console

    from homedash.devices import toggled
    from homedash.ui import render_change

    try:
        value = toggled(await store.read(key))
        await store.write(key, value)
    finally:
        await store.close()
    Console().print(render_change(key, value))
    return 0


async def _say(store, config: HomedashConfig, text: str) -> int:
    from rich.console import Console

    from homedash.dispatch import dispatch
    from homedash.nlu import make_classifier
    from homedash.ui import render_outcome

    classifier = None
    try:
        classifier = make_classifier(config.classifier)
        outcome = await dispatch(text, classifier, store)
    finally:
        if classifier is not None:
            await classifier.close()
        await store.close()
    Console().print(render_outcome(outcome))
    return 0 if outcome.ok else 1


def main() -> int:
    """CLI entry point. Returns exit code."""
    from homedash.env import LOGGER, configure_logging, setup_environment

    setup_environment()
    configure_logging()

    parser = build_arg_parser()
    args = parser.parse_args()

    if args.list_devices:
        list_audio_devices()
        return 0

    try:
        config = load_config(args.config_file)
        if args.subcommand is None:
            return _run_dashboard(args, config)

        store = make_store(config, args.offline)
        if args.subcommand == "status":
            return asyncio.run(_status(store))
        if args.subcommand == "watch":
            return asyncio.run(_watch(store))
        if args.subcommand == "toggle":
            return asyncio.run(_toggle(store, args.key))
        return asyncio.run(_say(store, config, " ".join(args.text)))
    except HomedashError as exc:
        LOGGER.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        return 130
