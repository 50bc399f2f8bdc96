"""
Loading Screen - shown while the KMS committee generates keys
"""
from textual.app import ComposeResult
from textual.widgets import Header, Footer, Static, LoadingIndicator
from textual.containers import Vertical, Center
from textual.screen import Screen


class LoadingScreen(Screen):
    """Key generation and oracle start-up progress"""

    CSS = """
    LoadingScreen {
        background: $surface;
    }

    #loading_container {
        width: 100%;
        height: 1fr;
        align: center middle;
    }

    #loading_content {
        width: 60;
        height: auto;
    }

    .loading_title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    #status_text {
        width: 100%;
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

        with Center(id="loading_container"):
            with Vertical(id="loading_content"):
                yield Static("🎲 Setting up SilentRoll", classes="loading_title")
                yield LoadingIndicator()
                yield Static("", id="status_text")

    def add_status(self, message: str, style: str = "white"):
        """Replace the status line"""
        self.query_one("#status_text", Static).update(f"[{style}]{message}[/{style}]")
