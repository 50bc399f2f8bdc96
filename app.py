"""
Main Application - SilentRoll console
"""
from textual.app import App
import asyncio

from silentroll.screens import LoadingScreen, RollConsoleScreen
from silentroll.session import GameSession, create_local_session
from silentroll.config import CRYPTO_CONFIG, NETWORK_CONFIG


class SilentRollApp(App):
    """Confidential dice game TUI"""

    TITLE = "SilentRoll"
    SUB_TITLE = "Encrypted Big / Small"

    def __init__(self):
        super().__init__()
        self.session: GameSession = None

    async def on_mount(self) -> None:
        # Key generation is slow; keep the UI responsive
        self.run_worker(self._start_game(), exclusive=True)

    async def _start_game(self) -> None:
        loading_screen = LoadingScreen()
        self.push_screen(loading_screen)
        await asyncio.sleep(0.3)

        loading_screen.add_status(
            f"Generating threshold keys ({CRYPTO_CONFIG['kms_parties']} KMS parties)...", "yellow"
        )
        try:
            self.session = await create_local_session(port=NETWORK_CONFIG["oracle_port"])
        except (RuntimeError, ValueError) as e:
            loading_screen.add_status(f"✗ Setup failed: {e}", "red")
            await asyncio.sleep(3)
            self.exit()
            return

        loading_screen.add_status("✓ Keys ready, oracle online", "green")
        await asyncio.sleep(0.5)
        self.pop_screen()
        self.push_screen(RollConsoleScreen(self.session))


# ============================================================================
# Entry Point
# ============================================================================

async def run_game_tui():
    """Run the game with TUI"""
    app = SilentRollApp()
    await app.run_async()


if __name__ == "__main__":
    asyncio.run(run_game_tui())
