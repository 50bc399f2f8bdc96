"""
Game Session - Orchestrates the player's flow
join -> start round -> guess -> decrypt, with a status line for each step
"""
import asyncio
import threading
import time
import traceback
from typing import Callable, Optional

import uvicorn

from silentroll.config import CRYPTO_CONFIG, GAME_CONFIG, NETWORK_CONFIG
from silentroll.errors import SilentRollError
from silentroll.game_logger import GameLogger
from silentroll.http_server import app, initialize_server
from silentroll.service.crypto_ops import CiphertextAlgebra, ZERO_HANDLE
from silentroll.service.decryption.authorization import PRIMARY_TYPE, create_eip712
from silentroll.service.decryption.network_client import DecryptionNetworkClient
from silentroll.service.decryption.oracle import DecryptionOracle
from silentroll.service.decryption.transport import generate_keypair
from silentroll.service.decryption.user_decrypt import user_decrypt
from silentroll.service.kms.coordinator import KeyCommittee
from silentroll.service.roll.engine import RoundEngine
from silentroll.wallet import Wallet


class GameSession:
    """Client orchestrator - one wallet playing against one engine"""

    def __init__(
        self,
        engine: RoundEngine,
        wallet: Wallet,
        decrypt_client: DecryptionNetworkClient,
        logger: Optional[GameLogger] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.engine = engine
        self.wallet = wallet
        self.decrypt_client = decrypt_client
        self.logger = logger
        self.clock = clock or time.time

        self.action_state = "idle"
        self.status_message = ""

        # Public flags mirrored from the engine
        self.joined = False
        self.round_active = False

        # Revealed values; None until decrypted
        self.last_guess: Optional[bool] = None
        self.points: Optional[int] = None
        self.roll_sum: Optional[int] = None
        self._revealed_handles = (None, None)

    # ========================================================================
    # Derived State
    # ========================================================================

    @property
    def outcome(self) -> Optional[str]:
        """'win' / 'loss' for the last resolved round, once its sum is known"""
        if self.last_guess is None or self.roll_sum is None:
            return None
        is_big = self.roll_sum >= GAME_CONFIG["big_threshold"]
        return "win" if is_big == self.last_guess else "loss"

    def refresh(self):
        """Re-read the public flags; drop revealed values that went stale"""
        address = self.wallet.address
        self.joined = self.engine.is_joined(address)
        self.round_active = self.engine.is_round_active(address)

        current = (self.engine.get_points(address), self.engine.get_last_roll_sum(address))
        if current != self._revealed_handles:
            self.points = None
            self.roll_sum = None

    def _fail(self, action: str, error: Exception):
        self.status_message = f"{action} failed: {type(error).__name__}: {error}"
        print(f"[Session] {self.status_message}")

    def _encrypt_guess(self, big: bool):
        return (
            self.engine.algebra
            .create_encrypted_input(self.engine.address, self.wallet.address)
            .add_bool(big)
            .encrypt()
        )

    # ========================================================================
    # Actions
    # ========================================================================

    async def join(self):
        self.action_state = "joining"
        self.status_message = "Submitting join..."
        try:
            await asyncio.to_thread(self.engine.join_game, self.wallet.address)
            self.status_message = "Welcome to SilentRoll."
        except SilentRollError as e:
            self._fail("Join", e)
        except Exception as e:
            traceback.print_exc()
            self._fail("Join", e)
        finally:
            self.action_state = "idle"
            self.refresh()

    async def start_round(self):
        self.action_state = "starting"
        self.status_message = "Rolling encrypted dice..."
        try:
            await asyncio.to_thread(self.engine.start_round, self.wallet.address)
            self.status_message = "Round active. Choose big or small."
        except SilentRollError as e:
            self._fail("Start", e)
        except Exception as e:
            traceback.print_exc()
            self._fail("Start", e)
        finally:
            self.action_state = "idle"
            self.refresh()

    async def submit_guess(self, big: bool):
        """big=True guesses a sum of 7 or more"""
        self.action_state = "guessing"
        self.status_message = "Encrypting your guess..."
        try:
            encrypted = await asyncio.to_thread(self._encrypt_guess, big)
            self.status_message = "Resolving your guess..."
            await asyncio.to_thread(
                self.engine.submit_guess,
                self.wallet.address,
                encrypted.handles[0],
                encrypted.input_proof,
            )
            self.last_guess = big
            self.status_message = "Guess resolved. Decrypt your stats to see the roll."
        except SilentRollError as e:
            self._fail("Guess", e)
        except Exception as e:
            traceback.print_exc()
            self._fail("Guess", e)
        finally:
            self.action_state = "idle"
            self.refresh()

    async def decrypt_stats(self):
        """Reveal points and last roll sum through the decryption oracle"""
        address = self.wallet.address
        points_handle = self.engine.get_points(address)
        roll_handle = self.engine.get_last_roll_sum(address)
        if ZERO_HANDLE in (points_handle, roll_handle):
            self.status_message = "No encrypted stats available yet."
            return

        self.action_state = "decrypting"
        self.status_message = "Preparing decryption request..."
        try:
            keypair = generate_keypair()
            start_timestamp = int(self.clock())
            duration_days = CRYPTO_CONFIG["duration_days"]
            contract_addresses = [self.engine.address]

            typed_data = create_eip712(keypair.public_key, contract_addresses, start_timestamp, duration_days)
            signature = self.wallet.sign_typed_data(
                typed_data["domain"],
                {PRIMARY_TYPE: typed_data["types"][PRIMARY_TYPE]},
                typed_data["message"],
            )

            self.status_message = "Waiting for the decryption oracle..."
            results = await user_decrypt(
                self.decrypt_client,
                [
                    {"handle": points_handle, "contractAddress": self.engine.address},
                    {"handle": roll_handle, "contractAddress": self.engine.address},
                ],
                keypair.private_key,
                keypair.public_key,
                signature,
                contract_addresses,
                address,
                start_timestamp,
                duration_days,
            )
            self.points = results[points_handle]
            self.roll_sum = results[roll_handle]
            self._revealed_handles = (points_handle, roll_handle)
            self.status_message = "Stats decrypted."
            if self.logger:
                self.logger.log_revealed_stats(self.points, self.roll_sum, self.last_guess)
        except (SilentRollError, ValueError) as e:
            self._fail("Decryption", e)
        except Exception as e:
            traceback.print_exc()
            self._fail("Decryption", e)
        finally:
            self.action_state = "idle"


# ============================================================================
# Local Deployment
# ============================================================================

def start_oracle_server(oracle: DecryptionOracle, port: int = None) -> threading.Thread:
    """Start the decryption oracle HTTP server in a background thread"""
    port = port or NETWORK_CONFIG["oracle_port"]
    initialize_server(oracle)

    def run_server():
        uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")

    server_thread = threading.Thread(target=run_server, daemon=True)
    server_thread.start()
    print(f"[Session] Decryption oracle started at http://127.0.0.1:{port}")
    return server_thread


async def create_local_session(wallet: Optional[Wallet] = None, port: int = None) -> GameSession:
    """
    KMS key generation, game contract, oracle service and client in one
    process.
    """
    wallet = wallet or Wallet()
    logger = GameLogger(wallet.address)
    logger.log("Session setup started")

    committee = KeyCommittee()
    cc, joint_public_key = await asyncio.to_thread(committee.run_dkg_protocol)
    algebra = CiphertextAlgebra(cc, joint_public_key, committee.plain_modulus)
    engine = RoundEngine(algebra, logger=logger)

    port = port or NETWORK_CONFIG["oracle_port"]
    start_oracle_server(DecryptionOracle(algebra, committee), port)
    client = DecryptionNetworkClient(base_url=f"http://127.0.0.1:{port}")
    if not await client.wait_until_ready():
        raise RuntimeError("Decryption oracle did not come up")

    logger.log(f"KMS committee: {committee.num_parties} parties; contract {engine.address}")
    session = GameSession(engine, wallet, client, logger=logger)
    session.refresh()
    return session
