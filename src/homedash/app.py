"""Textual TUI for the home automation dashboard.

Three device cards mirror the remote store and each has a toggle button.
`l` records one spoken command, `s` sends the transcript to the intent
classifier, and `i` focuses a text box for typing a command instead.
All state comes from the Dashboard controller; widgets only render it.
"""

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Header, Input, Static
from textual.worker import Worker, WorkerState

from homedash.constants import STATE_ON
from homedash.dashboard import Dashboard
from homedash.devices import DEVICES
from homedash.state import DashboardState, Event, Notice


def _value_markup(value: str) -> str:
    colour = "green" if value == STATE_ON else "red"
    return f"Current: [bold {colour}]{value}[/]"


class DashboardApp(App):
    """Device toggles plus voice commands."""

    TITLE = "Home Automation Dashboard"
    AUTO_FOCUS = None

    CSS = """
    #voice-row {
        height: auto;
        padding: 1 2;
    }
    #voice-row Button {
        margin-right: 2;
    }
    #listening {
        padding: 0 2;
    }
    #transcript {
        padding: 0 2;
        color: $success;
    }
    #command-input {
        margin: 0 2;
    }
    #cards {
        height: auto;
        padding: 1 2;
    }
    .card {
        width: 1fr;
        height: auto;
        border: round $primary;
        padding: 1 2;
        margin-right: 2;
        content-align: center middle;
    }
    .card-title {
        text-style: bold;
        margin-bottom: 1;
    }
    .card Static {
        width: 100%;
        content-align: center middle;
    }
    """

    BINDINGS = [
        Binding("l", "listen", "Listen"),
        Binding("s", "send", "Send"),
        Binding("i", "focus_input", "Type"),
        Binding("a", "toggle('alarm')", "Alarm"),
        Binding("o", "toggle('override')", "Override"),
        Binding("m", "toggle('movie_night')", "Movie"),
        Binding("escape", "blur", "Unfocus", show=False),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, dashboard: Dashboard) -> None:
        super().__init__()
        self._dashboard = dashboard

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="voice-row"):
            yield Button("Listen", id="listen", variant="warning")
            yield Button("Send command", id="send", variant="primary")
        yield Static("", id="listening")
        yield Static("", id="transcript")
        yield Input(
            placeholder="...or type a command and press Enter", id="command-input"
        )
        with Horizontal(id="cards"):
            for device in DEVICES:
                with Vertical(classes="card"):
                    yield Static(device.label, classes="card-title")
                    yield Static("", id=f"value-{device.key}")
                    yield Button(f"Toggle {device.label}", id=f"toggle-{device.key}")
        yield Footer()

    def on_mount(self) -> None:
        self._dashboard.add_listener(self._on_state)
        self._render_state(self._dashboard.state)
        self._dashboard.start()

    async def on_unmount(self) -> None:
        await self._dashboard.aclose()

    # ── State → widgets ─────────────────────────────────────────────

    def _on_state(self, state: DashboardState, event: Event) -> None:
        if isinstance(event, Notice):
            self.notify(event.text, severity=event.severity, timeout=3)
            return
        self._render_state(state)

    def _render_state(self, state: DashboardState) -> None:
        for device in DEVICES:
            self.query_one(f"#value-{device.key}", Static).update(
                _value_markup(state.value(device.key))
            )
        if state.listening:
            listening = "Listening: [bold green]Yes[/]"
        else:
            listening = "Listening: [red]No[/]"
        self.query_one("#listening", Static).update(listening)
        transcript = (
            escape(state.transcript)
            if state.transcript
            else "[dim]Waiting for your voice...[/dim]"
        )
        self.query_one("#transcript", Static).update(
            f"Transcript: [i]{transcript}[/i]"
        )
        self.sub_title = "Recording" if state.listening else ""

    # ── Actions ──────────────────────────────────────────────────────

    def action_listen(self) -> None:
        self.run_worker(
            self._dashboard.listen(), group="capture", exit_on_error=False
        )

    def action_send(self) -> None:
        self.run_worker(
            self._dashboard.send(), group="dispatch", exit_on_error=False
        )

    def action_toggle(self, key: str) -> None:
        self.run_worker(
            self._dashboard.toggle(key), group="toggle", exit_on_error=False
        )

    def action_focus_input(self) -> None:
        self.query_one("#command-input", Input).focus()

    def action_blur(self) -> None:
        self.set_focus(None)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state is WorkerState.ERROR:
            self._dashboard.notify(f"Error: {event.worker.error}", "error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id == "listen":
            self.action_listen()
        elif button_id == "send":
            self.action_send()
        elif button_id.startswith("toggle-"):
            self.action_toggle(button_id.removeprefix("toggle-"))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Typed command: use it as the transcript and send it."""
        text = event.value.strip()
        event.input.value = ""
        self.set_focus(None)
        if not text:
            return
        if self._dashboard.type_transcript(text):
            self.action_send()
