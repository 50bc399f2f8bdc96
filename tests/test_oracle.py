"""
Decryption Oracle Tests
"""

import pytest

from silentroll.errors import AuthorizationExpired, HandleOwnershipMismatch, UnauthorizedDecryption
from silentroll.model import UserDecryptRequest
from silentroll.service.decryption.authorization import PRIMARY_TYPE, create_eip712
from silentroll.service.decryption.transport import generate_keypair, open_sealed

DAY = 24 * 60 * 60


def build_request(wallet, pairs, contracts, start, days=10, keypair=None, signer=None, user=None):
    """Signed UserDecryptRequest plus the reveal keypair that opens the answer."""
    keypair = keypair or generate_keypair()
    typed_data = create_eip712(keypair.public_key, contracts, start, days)
    signature = (signer or wallet).sign_typed_data(
        typed_data["domain"],
        {PRIMARY_TYPE: typed_data["types"][PRIMARY_TYPE]},
        typed_data["message"],
    )
    request = UserDecryptRequest(
        handleContractPairs=[{"handle": h, "contractAddress": c} for h, c in pairs],
        publicKey=keypair.public_key,
        signature=signature,
        contractAddresses=contracts,
        userAddress=user or wallet.address,
        startTimestamp=start,
        durationDays=days,
    )
    return request, keypair


def open_result(keypair, response, handle):
    return open_sealed(keypair.private_key, response.results[handle], bytes.fromhex(handle[2:])).decode()


class TestUserDecrypt:
    """Tests for authorized reveals."""

    def test_reveal_stats(self, engine, oracle, wallet, play_round, clock):
        engine.join_game(wallet.address)
        play_round(wallet, (5, 6), True)
        points = engine.get_points(wallet.address)
        roll = engine.get_last_roll_sum(wallet.address)

        request, keypair = build_request(
            wallet, [(points, engine.address), (roll, engine.address)], [engine.address], clock()
        )
        response = oracle.user_decrypt(request)

        assert set(response.results) == {points, roll}
        assert open_result(keypair, response, points) == "10000"
        assert open_result(keypair, response, roll) == "11"

    def test_reveal_bool(self, engine, oracle, algebra, wallet, clock):
        """ebool handles come back as true / false."""
        handle = algebra.encrypt(1, "ebool")
        algebra.allow(handle, wallet.address)
        algebra.allow(handle, engine.address)
        request, keypair = build_request(wallet, [(handle, engine.address)], [engine.address], clock())
        assert open_result(keypair, oracle.user_decrypt(request), handle) == "true"

    def test_sealed_for_requester_only(self, engine, oracle, wallet, clock):
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        request, _ = build_request(wallet, [(points, engine.address)], [engine.address], clock())
        response = oracle.user_decrypt(request)
        with pytest.raises(ValueError):
            open_result(generate_keypair(), response, points)

    def test_expired(self, engine, oracle, wallet, clock):
        """A permit that started 11 days ago with a 10-day window."""
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        request, _ = build_request(wallet, [(points, engine.address)], [engine.address], clock() - 11 * DAY)
        with pytest.raises(AuthorizationExpired):
            oracle.user_decrypt(request)

    def test_other_players_handle(self, engine, oracle, wallet, other_wallet, clock):
        """A valid permit does not open someone else's score."""
        engine.join_game(wallet.address)
        engine.join_game(other_wallet.address)
        victim_points = engine.get_points(other_wallet.address)
        request, _ = build_request(wallet, [(victim_points, engine.address)], [engine.address], clock())
        with pytest.raises(HandleOwnershipMismatch) as excinfo:
            oracle.user_decrypt(request)
        assert excinfo.value.handle == victim_points

    def test_pending_outcome_is_not_revealed(self, engine, oracle, wallet, clock):
        """The hidden dice stay hidden from the player while the round is open."""
        engine.join_game(wallet.address)
        engine.start_round(wallet.address)
        pending = engine.ledger.get(wallet.address).pending_outcome
        request, _ = build_request(wallet, [(pending, engine.address)], [engine.address], clock())
        with pytest.raises(HandleOwnershipMismatch):
            oracle.user_decrypt(request)

    def test_contract_not_signed(self, engine, oracle, wallet, clock):
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        other_contract = "0x" + "99" * 20
        request, _ = build_request(wallet, [(points, engine.address)], [other_contract], clock())
        with pytest.raises(HandleOwnershipMismatch):
            oracle.user_decrypt(request)

    def test_wrong_contract_for_handle(self, engine, oracle, wallet, clock):
        """Signed contract set covers the pair, but the handle is not that contract's."""
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        other_contract = "0x" + "99" * 20
        request, _ = build_request(wallet, [(points, other_contract)], [other_contract], clock())
        with pytest.raises(HandleOwnershipMismatch):
            oracle.user_decrypt(request)

    def test_signed_by_someone_else(self, engine, oracle, wallet, other_wallet, clock):
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        request, _ = build_request(
            wallet, [(points, engine.address)], [engine.address], clock(), signer=other_wallet
        )
        with pytest.raises(UnauthorizedDecryption):
            oracle.user_decrypt(request)

    def test_tampered_signature(self, engine, oracle, wallet, clock):
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        request, _ = build_request(wallet, [(points, engine.address)], [engine.address], clock())
        request.signature = request.signature[:-2] + ("00" if request.signature[-2:] != "00" else "01")
        with pytest.raises(UnauthorizedDecryption):
            oracle.user_decrypt(request)

    def test_permit_reuse_within_window(self, engine, oracle, wallet, play_round, clock):
        """The same permit keeps working for new handles inside its window."""
        engine.join_game(wallet.address)
        keypair = generate_keypair()
        start = clock()
        play_round(wallet, (1, 1), False)
        clock.advance(9 * DAY)
        points = engine.get_points(wallet.address)
        request, _ = build_request(
            wallet, [(points, engine.address)], [engine.address], start, keypair=keypair
        )
        assert open_result(keypair, oracle.user_decrypt(request), points) == "10000"

    def test_bad_public_key(self, engine, oracle, wallet, clock):
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        request, _ = build_request(wallet, [(points, engine.address)], [engine.address], clock())
        request.publicKey = "ab" * 16
        with pytest.raises(ValueError):
            oracle.user_decrypt(request)

    def test_prefixed_public_key(self, engine, oracle, wallet, clock):
        """The reveal key may carry a 0x prefix; it signs the same bytes."""
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        request, keypair = build_request(wallet, [(points, engine.address)], [engine.address], clock())
        request.publicKey = "0x" + keypair.public_key
        assert open_result(keypair, oracle.user_decrypt(request), points) == "0"
