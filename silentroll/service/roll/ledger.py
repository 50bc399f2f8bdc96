"""
Player Ledger - per-address encrypted game state

Storage is injected (any mutable mapping), so the engine never relies on
ambient global state. Every mutation runs inside transaction(): the block
works on a copy and the copy replaces the stored record only if the block
finishes without raising.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, MutableMapping, Optional

from silentroll.errors import AlreadyEnrolled
from silentroll.model import PlayerRecord
from silentroll.service.crypto_ops.handles import normalize_address


class PlayerLedger:
    """Mapping from player address to PlayerRecord"""

    def __init__(self, store: Optional[MutableMapping[str, PlayerRecord]] = None):
        self._store: MutableMapping[str, PlayerRecord] = store if store is not None else {}
        self._lock = threading.RLock()

    def get(self, player: str) -> PlayerRecord:
        """Read-only snapshot; unknown players get a zero record"""
        player = normalize_address(player)
        with self._lock:
            record = self._store.get(player)
            return record.copy() if record else PlayerRecord(player)

    def enroll(self, player: str, points: str, last_roll_sum: str, pending_outcome: str) -> PlayerRecord:
        """
        Create the record with its zero-valued encrypted fields.

        Raises:
            AlreadyEnrolled: player joined before
        """
        with self.transaction(player) as record:
            if record.joined:
                raise AlreadyEnrolled(f"{record.address} already joined")
            record.joined = True
            record.points = points
            record.last_roll_sum = last_roll_sum
            record.pending_outcome = pending_outcome
        return self.get(player)

    @contextmanager
    def transaction(self, player: str) -> Iterator[PlayerRecord]:
        """
        All-or-nothing update of one record.

        The ledger lock is held for the whole block, so operations are applied
        one after another and a failed one leaves no trace.
        """
        player = normalize_address(player)
        with self._lock:
            working = self.get(player)
            yield working
            self._store[player] = working

    def players(self) -> Dict[str, PlayerRecord]:
        with self._lock:
            return {address: record.copy() for address, record in self._store.items()}
