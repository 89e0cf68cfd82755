"""Rich rendering for the non-interactive CLI commands.

Renderers are pure functions of a state snapshot or a dispatch outcome;
the Textual app styles its own widgets.
"""

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from homedash.constants import STATE_ON
from homedash.devices import DEVICES, device_for_key
from homedash.dispatch import DispatchOutcome
from homedash.state import DashboardState

_SEVERITY_STYLES = {
    "information": "green",
    "warning": "yellow",
    "error": "bold red",
}


def value_style(value: str) -> str:
    return "bold green" if value == STATE_ON else "red"


def render_status_table(state: DashboardState) -> Table:
    """Render the three device values as a table."""
    table = Table(title="Home Automation Dashboard")
    table.add_column("Device", style="cyan")
    table.add_column("Key", style="dim")
    table.add_column("Current")
    for device in DEVICES:
        value = state.value(device.key)
        table.add_row(device.label, device.key, Text(value, style=value_style(value)))
    return table


def render_change(key: str, value: str) -> Text:
    """One line for the ``watch`` stream."""
    line = Text()
    line.append(f"{device_for_key(key).label}: ", style="bold")
    line.append(value, style=value_style(value))
    return line


def render_outcome(outcome: DispatchOutcome) -> Panel:
    """Summarise a dispatch for the ``say`` command."""
    body = Text(outcome.message, style=_SEVERITY_STYLES[outcome.severity])
    if outcome.intent:
        body.append("\nIntent: ", style="cyan")
        body.append(outcome.intent)
    if outcome.ok:
        body.append("\nWrote: ", style="cyan")
        body.append(f"{outcome.key} = {outcome.value}")
    return Panel(body, title="Voice command", padding=(0, 1))
