"""
SilentRoll Test Fixtures

Key generation is the expensive part, so one KMS committee and one
ciphertext algebra are shared by the whole session. Everything stateful on
top of them (ledger, engine, clock) is per test.
"""

import pytest

from silentroll.http_server import initialize_server
from silentroll.service.crypto_ops import CiphertextAlgebra
from silentroll.service.decryption.oracle import DecryptionOracle
from silentroll.service.kms.coordinator import KeyCommittee
from silentroll.service.roll.engine import RoundEngine
from silentroll.wallet import Wallet

START_TIME = 1_700_000_000
DAY = 24 * 60 * 60


class FakeClock:
    """Settable ledger / oracle clock."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int):
        self.now += seconds


@pytest.fixture(scope="session")
def committee() -> KeyCommittee:
    """Three-party KMS committee with a joint key."""
    committee = KeyCommittee(num_parties=3)
    committee.run_dkg_protocol()
    return committee


@pytest.fixture(scope="session")
def algebra(committee) -> CiphertextAlgebra:
    return CiphertextAlgebra(committee.cc, committee.joint_public_key, committee.plain_modulus)


@pytest.fixture
def reveal(algebra, committee):
    """Threshold-decrypt a handle directly, bypassing the oracle checks."""
    def _reveal(handle: str) -> int:
        return committee.threshold_decrypt(algebra.ciphertext_for_decryption(handle))
    return _reveal


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(algebra, clock) -> RoundEngine:
    return RoundEngine(algebra, clock=clock)


@pytest.fixture
def wallet() -> Wallet:
    return Wallet.from_seed(bytes(range(32)))


@pytest.fixture
def other_wallet() -> Wallet:
    return Wallet.from_seed(bytes(range(32, 64)))


@pytest.fixture
def fixed_dice(monkeypatch, algebra):
    """Replace the encrypted dice draw with the given faces, in order."""
    def _fix(*faces: int):
        values = iter(faces)
        monkeypatch.setattr(algebra, "random_uint", lambda low, high: algebra.encrypt(next(values)))
    return _fix


@pytest.fixture
def encrypt_guess(algebra, engine):
    """Encrypted guess plus input proof, bound to the engine and a wallet."""
    def _encrypt(wallet: Wallet, big: bool, contract: str = None):
        result = (
            algebra.create_encrypted_input(contract or engine.address, wallet.address)
            .add_bool(big)
            .encrypt()
        )
        return result.handles[0], result.input_proof
    return _encrypt


@pytest.fixture
def play_round(engine, fixed_dice, encrypt_guess):
    """Run one full round with known dice."""
    def _play(wallet: Wallet, dice: tuple, big: bool):
        fixed_dice(*dice)
        engine.start_round(wallet.address)
        handle, proof = encrypt_guess(wallet, big)
        engine.submit_guess(wallet.address, handle, proof)
    return _play


@pytest.fixture
def oracle(algebra, committee, clock) -> DecryptionOracle:
    return DecryptionOracle(algebra, committee, clock=clock)


@pytest.fixture
def served_oracle(oracle):
    """Oracle installed into the HTTP app for the duration of a test."""
    initialize_server(oracle)
    yield oracle
    initialize_server(None)
