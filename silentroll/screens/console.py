"""
Roll Console - the player's single game screen
"""
from textual.app import ComposeResult
from textual.widgets import Header, Footer, Static
from textual.containers import Container, Vertical
from textual.binding import Binding
from textual.screen import Screen
from rich.table import Table
from rich.text import Text

from silentroll.config import GAME_CONFIG, UI_CONFIG

# Which keys make sense in which state
READY_ACTIONS = {
    "join": lambda s: not s.joined,
    "start_round": lambda s: s.joined and not s.round_active,
    "guess": lambda s: s.round_active,
    "decrypt": lambda s: s.joined,
}


def render_stats(session) -> Table:
    """Public flags and whatever the player has decrypted so far"""
    table = Table(title="🎲 SilentRoll", show_header=False, header_style="bold cyan")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Wallet", session.wallet.address)
    table.add_row("Joined", "[green]yes[/green]" if session.joined else "[dim]no[/dim]")
    table.add_row("Round", "[yellow]active[/yellow]" if session.round_active else "[dim]none[/dim]")

    hidden = "[dim]🔒 encrypted[/dim]"
    table.add_row("Points", hidden if session.points is None else f"[bold]{session.points}[/bold]")
    table.add_row("Last roll", hidden if session.roll_sum is None else str(session.roll_sum))

    if session.last_guess is not None:
        table.add_row("Last guess", "BIG" if session.last_guess else "SMALL")
    if session.outcome:
        color = "green" if session.outcome == "win" else "red"
        table.add_row("Outcome", f"[bold {color}]{session.outcome.upper()}[/bold {color}]")

    if UI_CONFIG["show_handles"]:
        table.add_row("Points handle", session.engine.get_points(session.wallet.address))
        table.add_row("Roll handle", session.engine.get_last_roll_sum(session.wallet.address))
    return table


class RollConsoleScreen(Screen):
    """Join, roll, guess and reveal with single keys"""

    CSS = """
    RollConsoleScreen {
        background: $surface;
    }

    #console_container {
        width: 100%;
        height: 100%;
        align: center middle;
    }

    #console_panel {
        width: 90;
        height: auto;
        background: $panel;
        border: solid $primary;
        padding: 1 2;
    }

    #stats {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    #rules {
        width: 100%;
        color: $text-muted;
        margin-bottom: 1;
    }

    #status_message {
        width: 100%;
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("j", "join", "Join"),
        Binding("r", "start_round", "Roll"),
        Binding("b", "guess_big", "Big"),
        Binding("s", "guess_small", "Small"),
        Binding("d", "decrypt", "Decrypt"),
        Binding("escape", "app.quit", "Quit"),
    ]

    def __init__(self, session):
        super().__init__()
        self.session = session

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

        with Container(id="console_container"):
            with Vertical(id="console_panel"):
                yield Static(id="stats")
                yield Static(
                    f"Two hidden dice. Big is {GAME_CONFIG['big_threshold']} or more. "
                    f"A right guess earns {GAME_CONFIG['reward']} encrypted points.",
                    id="rules",
                )
                yield Static(id="status_message")

    def on_mount(self) -> None:
        self.refresh_view()
        # Session actions update status_message while they run
        self.set_interval(0.5, self.refresh_view)

    def refresh_view(self) -> None:
        self.query_one("#stats", Static).update(render_stats(self.session))
        message = self.session.status_message or "Awaiting your next move."
        self.query_one("#status_message", Static).update(Text(message))

    def _run(self, action: str, start) -> None:
        """Run one session action in a worker unless another is in flight"""
        if self.session.action_state != "idle" or not READY_ACTIONS[action](self.session):
            return
        self.run_worker(start(), exclusive=True)

    def action_join(self) -> None:
        self._run("join", self.session.join)

    def action_start_round(self) -> None:
        self._run("start_round", self.session.start_round)

    def action_guess_big(self) -> None:
        self._run("guess", lambda: self.session.submit_guess(True))

    def action_guess_small(self) -> None:
        self._run("guess", lambda: self.session.submit_guess(False))

    def action_decrypt(self) -> None:
        self._run("decrypt", self.session.decrypt_stats)
