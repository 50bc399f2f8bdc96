"""
Client-side User Decryption Tests
"""

import httpx
import pytest

from silentroll.errors import AuthorizationExpired, DecryptionServiceUnavailable, HandleOwnershipMismatch
from silentroll.http_server import app
from silentroll.service.decryption.authorization import PRIMARY_TYPE, create_eip712
from silentroll.service.decryption.network_client import DecryptionNetworkClient
from silentroll.service.decryption.transport import generate_keypair
from silentroll.service.decryption.user_decrypt import user_decrypt

DAY = 24 * 60 * 60


@pytest.fixture
def asgi_client(served_oracle):
    """Client talking to the in-process oracle app."""
    return DecryptionNetworkClient(
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=app),
        backoff=0,
    )


def permit(wallet, contract, start, days=10):
    keypair = generate_keypair()
    typed_data = create_eip712(keypair.public_key, [contract], start, days)
    signature = wallet.sign_typed_data(
        typed_data["domain"],
        {PRIMARY_TYPE: typed_data["types"][PRIMARY_TYPE]},
        typed_data["message"],
    )
    return keypair, signature


async def reveal_handles(client, wallet, handles, contract, start, days=10):
    keypair, signature = permit(wallet, contract, start, days)
    return await user_decrypt(
        client,
        [{"handle": handle, "contractAddress": contract} for handle in handles],
        keypair.private_key,
        keypair.public_key,
        signature,
        [contract],
        wallet.address,
        start,
        days,
    )


class TestUserDecrypt:
    """Tests for the full reveal handshake over HTTP."""

    @pytest.mark.asyncio
    async def test_reveal(self, asgi_client, engine, wallet, play_round, clock):
        engine.join_game(wallet.address)
        play_round(wallet, (6, 4), False)
        points = engine.get_points(wallet.address)
        roll = engine.get_last_roll_sum(wallet.address)

        results = await reveal_handles(asgi_client, wallet, [points, roll], engine.address, clock())
        assert results == {points: 0, roll: 10}

    @pytest.mark.asyncio
    async def test_idempotent(self, asgi_client, engine, wallet, clock):
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        first = await reveal_handles(asgi_client, wallet, [points], engine.address, clock())
        second = await reveal_handles(asgi_client, wallet, [points], engine.address, clock())
        assert first == second == {points: 0}

    @pytest.mark.asyncio
    async def test_bool_result(self, asgi_client, engine, algebra, wallet, clock):
        handle = algebra.encrypt(0, "ebool")
        algebra.allow(handle, wallet.address)
        algebra.allow(handle, engine.address)
        results = await reveal_handles(asgi_client, wallet, [handle], engine.address, clock())
        assert results == {handle: False}

    @pytest.mark.asyncio
    async def test_error_is_raised_as_same_class(self, asgi_client, engine, wallet, clock):
        engine.join_game(wallet.address)
        points = engine.get_points(wallet.address)
        with pytest.raises(AuthorizationExpired):
            await reveal_handles(asgi_client, wallet, [points], engine.address, clock() - 11 * DAY)

    @pytest.mark.asyncio
    async def test_foreign_handle(self, asgi_client, engine, wallet, other_wallet, clock):
        engine.join_game(other_wallet.address)
        victim_points = engine.get_points(other_wallet.address)
        with pytest.raises(HandleOwnershipMismatch) as excinfo:
            await reveal_handles(asgi_client, wallet, [victim_points], engine.address, clock())
        assert excinfo.value.handle == victim_points


class TestRetry:
    """Tests for the network client's retry policy."""

    @pytest.mark.asyncio
    async def test_5xx_exhausts_retries(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(503, json={"error": "DecryptionServiceUnavailable"})

        client = DecryptionNetworkClient(
            base_url="http://oracle", transport=httpx.MockTransport(handler), retries=3, backoff=0
        )
        with pytest.raises(DecryptionServiceUnavailable):
            await client.request_user_decrypt({})
        assert calls == ["/user_decrypt"] * 3

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = DecryptionNetworkClient(
            base_url="http://oracle", transport=httpx.MockTransport(handler), retries=2, backoff=0
        )
        with pytest.raises(DecryptionServiceUnavailable) as excinfo:
            await client.request_user_decrypt({})
        assert excinfo.value.retryable

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self):
        responses = [
            httpx.Response(502),
            httpx.Response(200, json={"results": {"0x" + "11" * 32: "sealed"}}),
        ]

        def handler(request):
            return responses.pop(0)

        client = DecryptionNetworkClient(
            base_url="http://oracle", transport=httpx.MockTransport(handler), retries=3, backoff=0
        )
        assert await client.request_user_decrypt({}) == {"0x" + "11" * 32: "sealed"}

    @pytest.mark.asyncio
    async def test_4xx_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(410, json={"error": "AuthorizationExpired", "message": "expired", "handle": None})

        client = DecryptionNetworkClient(
            base_url="http://oracle", transport=httpx.MockTransport(handler), retries=3, backoff=0
        )
        with pytest.raises(AuthorizationExpired):
            await client.request_user_decrypt({})
        assert len(calls) == 1
