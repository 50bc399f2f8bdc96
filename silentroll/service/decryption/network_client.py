"""
Network Client - Decryption oracle communication
"""
import asyncio
from typing import Dict, Optional
import httpx

from silentroll.config import NETWORK_CONFIG
from silentroll.errors import ERRORS_BY_NAME, DecryptionServiceUnavailable
from silentroll.model import UserDecryptResponse


class DecryptionNetworkClient:
    """Talks to the decryption oracle over HTTP"""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        retries: int = None,
        backoff: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or NETWORK_CONFIG["oracle_url"]
        self.timeout = timeout or NETWORK_CONFIG["decrypt_request_timeout"]
        self.retries = retries or NETWORK_CONFIG["decrypt_retries"]
        self.backoff = NETWORK_CONFIG["retry_backoff"] if backoff is None else backoff
        self.transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=self.transport)

    @staticmethod
    def _raise_for_error(response: httpx.Response):
        """Turn an oracle error body back into the matching exception"""
        try:
            body = response.json()
        except ValueError:
            body = {}

        error_cls = ERRORS_BY_NAME.get(body.get("error")) if isinstance(body, dict) else None
        if error_cls:
            raise error_cls(body.get("message", ""), handle=body.get("handle"))
        raise ValueError(f"Oracle rejected request ({response.status_code}): {response.text}")

    async def request_user_decrypt(self, payload: dict) -> Dict[str, str]:
        """
        POST /user_decrypt with retry.

        Timeouts, connection failures and 5xx answers are retried with linear
        backoff; 4xx answers are final.

        Returns:
            {handle: sealed_b64}

        Raises:
            DecryptionServiceUnavailable: retries exhausted
        """
        last_error = None
        for attempt in range(self.retries):
            try:
                async with self._client(self.timeout) as client:
                    response = await client.post("/user_decrypt", json=payload)
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
                print(f"[Decrypt] Oracle unreachable (attempt {attempt + 1}/{self.retries}): {last_error}")
            else:
                if response.status_code < 500:
                    if response.status_code != 200:
                        self._raise_for_error(response)
                    return UserDecryptResponse.model_validate(response.json()).results
                last_error = f"HTTP {response.status_code}"
                print(f"[Decrypt] Oracle error (attempt {attempt + 1}/{self.retries}): {last_error}")

            if attempt < self.retries - 1:
                await asyncio.sleep(self.backoff * (attempt + 1))

        raise DecryptionServiceUnavailable(
            f"Decryption oracle unavailable after {self.retries} attempts ({last_error})",
            reason=last_error,
        )

    async def health(self) -> dict:
        """GET /health"""
        try:
            async with self._client(NETWORK_CONFIG["connection_timeout"]) as client:
                response = await client.get("/health")
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise DecryptionServiceUnavailable(f"Health check failed: {e}", reason="health") from e

    async def wait_until_ready(self, attempts: int = 15) -> bool:
        """Poll /health until the oracle answers (server starts in a thread)"""
        for attempt in range(attempts):
            try:
                await self.health()
                return True
            except DecryptionServiceUnavailable:
                await asyncio.sleep(1)
        return False
