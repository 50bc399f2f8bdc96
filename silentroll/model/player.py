"""
Player Model

Per-address record of the round engine. Encrypted fields hold ciphertext
handles only; nothing in this record is ever cleartext game data.
"""
from silentroll.service.crypto_ops.handles import ZERO_HANDLE


class PlayerRecord:
    """
    Represents one player's on-ledger state.

    pending_outcome is only meaningful while round_active is set; it is
    consumed when the guess resolves the round.
    """
    def __init__(
        self,
        address: str,
        joined: bool = False,
        round_active: bool = False,
        pending_outcome: str = ZERO_HANDLE,
        last_roll_sum: str = ZERO_HANDLE,
        points: str = ZERO_HANDLE,
        round_started_at: int = 0,
    ):
        self.address = address
        self.joined = joined
        self.round_active = round_active
        self.pending_outcome = pending_outcome
        self.last_roll_sum = last_roll_sum
        self.points = points
        self.round_started_at = round_started_at

    def copy(self) -> "PlayerRecord":
        return PlayerRecord(
            self.address,
            self.joined,
            self.round_active,
            self.pending_outcome,
            self.last_roll_sum,
            self.points,
            self.round_started_at,
        )

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "joined": self.joined,
            "round_active": self.round_active,
            "last_roll_sum": self.last_roll_sum,
            "points": self.points,
            "round_started_at": self.round_started_at,
        }

    def __repr__(self) -> str:
        return (
            f"PlayerRecord(address={self.address}, joined={self.joined}, "
            f"round_active={self.round_active})"
        )
