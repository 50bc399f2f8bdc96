"""
Round Engine - the SilentRoll game contract

State machine per player:

    NoRound --start_round--> RoundOpen --submit_guess--> NoRound

Dice, guess and score only ever exist as ciphertext handles here. Every
state-changing call runs inside a ledger transaction, so a failed call
leaves the record exactly as it was.
"""
import time
from typing import Callable, List, Optional

from silentroll.config import GAME_CONFIG
from silentroll.errors import AlreadyEnrolled, NoActiveRound, NotJoined, RoundAlreadyActive
from silentroll.service.crypto_ops.handles import ZERO_HANDLE, normalize_address
from silentroll.service.roll.ledger import PlayerLedger

# Every possible sum of the dice; the comparison is exact on this domain only
SUM_DOMAIN = range(
    GAME_CONFIG["dice_min"] * GAME_CONFIG["dice_count"],
    GAME_CONFIG["dice_max"] * GAME_CONFIG["dice_count"] + 1,
)


class RoundEngine:
    """Encrypted dice game: enroll, roll, resolve"""

    def __init__(
        self,
        algebra,
        ledger: Optional[PlayerLedger] = None,
        clock: Optional[Callable[[], float]] = None,
        address: Optional[str] = None,
        logger=None,
    ):
        self.algebra = algebra
        self.ledger = ledger or PlayerLedger()
        self.clock = clock or time.time
        self.address = normalize_address(address or GAME_CONFIG["contract_address"])
        self.logger = logger
        self.events: List[dict] = []

    # ========================================================================
    # Events
    # ========================================================================

    def _emit(self, name: str, player: str, **fields):
        event = {"event": name, "player": player, "timestamp": int(self.clock()), **fields}
        self.events.append(event)
        print(f"[Engine] {name}: {player}")
        if self.logger:
            self.logger.log_event(event)

    def _allow_this(self, handle: str):
        self.algebra.allow(handle, self.address)

    # ========================================================================
    # State-changing Operations
    # ========================================================================

    def join_game(self, caller: str):
        """
        Enroll the caller with encryptions of zero.

        The contract may use all three fields; the player may decrypt points
        and last_roll_sum. The pending outcome stays contract-only.

        Raises:
            AlreadyEnrolled: caller joined before
        """
        caller = normalize_address(caller)
        if self.ledger.get(caller).joined:
            raise AlreadyEnrolled(f"{caller} already joined")

        points = self.algebra.encrypt(0)
        last_roll_sum = self.algebra.encrypt(0)
        pending_outcome = self.algebra.encrypt(0)

        for handle in (points, last_roll_sum, pending_outcome):
            self._allow_this(handle)
        for handle in (points, last_roll_sum):
            self.algebra.allow(handle, caller)

        self.ledger.enroll(caller, points, last_roll_sum, pending_outcome)
        self._emit("PlayerJoined", caller)

    def start_round(self, caller: str):
        """
        Roll two hidden dice and store their encrypted sum.

        An open round older than GAME_CONFIG["stale_round_seconds"] is
        abandoned without reward instead of blocking the player forever.

        Raises:
            NotJoined: caller never joined
            RoundAlreadyActive: a round is open and not yet stale
        """
        caller = normalize_address(caller)
        now = int(self.clock())

        with self.ledger.transaction(caller) as record:
            if not record.joined:
                raise NotJoined(f"{caller} has not joined the game")

            abandoned = False
            if record.round_active:
                age = now - record.round_started_at
                if age < GAME_CONFIG["stale_round_seconds"]:
                    raise RoundAlreadyActive(f"{caller} already has an open round")
                abandoned = True

            scratch = []
            total = self.algebra.random_uint(GAME_CONFIG["dice_min"], GAME_CONFIG["dice_max"])
            for _ in range(GAME_CONFIG["dice_count"] - 1):
                die = self.algebra.random_uint(GAME_CONFIG["dice_min"], GAME_CONFIG["dice_max"])
                scratch += [total, die]
                total = self.algebra.add(total, die)
            self._allow_this(total)

            replaced = record.pending_outcome
            record.pending_outcome = total
            record.round_active = True
            record.round_started_at = now

        # Single dice and the outcome this round replaces are unreachable now
        self.algebra.release(*scratch, replaced)

        if abandoned:
            self._emit("RoundAbandoned", caller)
        self._emit("RoundStarted", caller)

    def submit_guess(self, caller: str, encrypted_guess: str, input_proof: str):
        """
        Resolve the open round against an encrypted guess (true = big).

        Raises:
            NoActiveRound: no round is open for the caller
            InvalidCiphertextProof: guess handle not attested for this
                contract and caller, or not an ebool
        """
        caller = normalize_address(caller)

        with self.ledger.transaction(caller) as record:
            if not record.round_active:
                raise NoActiveRound(f"{caller} has no open round")

            guess = self.algebra.from_external(
                encrypted_guess, input_proof, self.address, caller, "ebool"
            )

            is_big = self.algebra.compare_ge(
                record.pending_outcome, GAME_CONFIG["big_threshold"], SUM_DOMAIN
            )
            win = self.algebra.equal(is_big, guess)
            reward = self.algebra.select(win, GAME_CONFIG["reward"], 0)
            points = self.algebra.add(record.points, reward)
            last_roll_sum = record.pending_outcome

            for handle in (points, last_roll_sum):
                self._allow_this(handle)
                self.algebra.allow(handle, caller)

            superseded = (record.points, record.last_roll_sum)
            record.points = points
            record.last_roll_sum = last_roll_sum
            record.pending_outcome = ZERO_HANDLE
            record.round_active = False
            record.round_started_at = 0

        # Only the record's current handles stay decryptable
        self.algebra.release(guess, is_big, win, reward, *superseded)

        self._emit("GuessSubmitted", caller)

    # ========================================================================
    # Reads
    # ========================================================================

    def get_points(self, player: str) -> str:
        return self.ledger.get(player).points

    def get_last_roll_sum(self, player: str) -> str:
        return self.ledger.get(player).last_roll_sum

    def is_joined(self, player: str) -> bool:
        return self.ledger.get(player).joined

    def is_round_active(self, player: str) -> bool:
        return self.ledger.get(player).round_active
