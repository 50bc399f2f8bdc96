"""
Game Logger - Records public game events and revealed results to file
Only logs what the player is entitled to see: contract events and the
values they decrypted. Keys, sealed payloads and hidden dice never appear.
"""
import os
from datetime import datetime
from typing import Optional

from silentroll.config import GAME_CONFIG, UI_CONFIG


class GameLogger:
    """Logs game events to file"""

    def __init__(self, player: str, log_dir: Optional[str] = None):
        self.player = player
        self.log_dir = log_dir or UI_CONFIG["log_dir"]
        self.log_file = os.path.join(self.log_dir, "silentroll.log")

        os.makedirs(self.log_dir, exist_ok=True)

        # Initialize/clear log file
        with open(self.log_file, 'w', encoding='utf-8') as f:
            f.write("=== SilentRoll Log ===\n")
            f.write(f"Player: {player}\n")
            f.write(f"Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write("=" * 50 + "\n\n")

    def log(self, message: str):
        """Write a log message with timestamp"""
        timestamp = datetime.now().strftime('%H:%M:%S')
        with open(self.log_file, 'a', encoding='utf-8') as f:
            f.write(f"[{timestamp}] {message}\n")

    def log_section(self, title: str):
        with open(self.log_file, 'a', encoding='utf-8') as f:
            f.write("\n" + "=" * 50 + "\n")
            f.write(f"{title}\n")
            f.write("=" * 50 + "\n")

    def log_event(self, event: dict):
        """Contract event (name, player, ledger timestamp)"""
        self.log(f"{event['event']} player={event['player']} at={event['timestamp']}")

    def log_revealed_stats(self, points: int, roll_sum: int, guess_big: Optional[bool]):
        """Log values after the player decrypted them"""
        self.log_section("Revealed Stats (Decrypted)")
        self.log(f"Points: {points}")
        self.log(f"Last roll sum: {roll_sum}")
        if guess_big is not None:
            won = (roll_sum >= GAME_CONFIG["big_threshold"]) == guess_big
            self.log(f"  → Guessed {'BIG' if guess_big else 'SMALL'}: {'WIN' if won else 'LOSS'}")
