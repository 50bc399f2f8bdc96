"""
Decryption Oracle - authorized reveal of handles to their owner

Checks the signed permit, the validity window and the handle ACL, asks the
KMS committee for a threshold decryption and seals each cleartext to the
requester's ephemeral public key. The oracle never sees the matching private
key and never returns a cleartext in the clear.
"""
import asyncio
import time
from typing import Callable, Dict, List, Optional, Tuple

from silentroll.errors import HandleOwnershipMismatch
from silentroll.model import UserDecryptRequest, UserDecryptResponse
from silentroll.service.crypto_ops.handles import handle_type, normalize_address, normalize_handle
from silentroll.service.decryption.authorization import create_eip712, decode_hex, verify_authorization
from silentroll.service.decryption.transport import seal


class DecryptionOracle:
    """User decryption gateway in front of the KMS committee"""

    def __init__(self, algebra, committee, clock: Optional[Callable[[], float]] = None):
        self.algebra = algebra
        self.committee = committee
        self.clock = clock or time.time

    def _check_pairs(self, request: UserDecryptRequest) -> List[Tuple[str, str]]:
        """Every handle must be owned by the requester and by a signed contract"""
        user = normalize_address(request.userAddress)
        signed = {normalize_address(a) for a in request.contractAddresses}

        checked = []
        for pair in request.handleContractPairs:
            try:
                handle = normalize_handle(pair.handle)
                contract = normalize_address(pair.contractAddress)
            except ValueError as e:
                raise HandleOwnershipMismatch(str(e), handle=pair.handle, reason="malformed pair") from e

            if contract not in signed:
                raise HandleOwnershipMismatch(
                    f"Contract {contract} is not covered by the signed permit",
                    handle=handle,
                    reason="contract not signed",
                )
            if not self.algebra.is_allowed(handle, user):
                raise HandleOwnershipMismatch(
                    f"{user} is not allowed to decrypt this handle",
                    handle=handle,
                    reason="user not allowed",
                )
            if not self.algebra.is_allowed(handle, contract):
                raise HandleOwnershipMismatch(
                    f"Handle does not belong to contract {contract}",
                    handle=handle,
                    reason="contract not allowed",
                )
            checked.append((handle, contract))
        return checked

    def _decrypt_to_text(self, handle: str) -> str:
        value = self.committee.threshold_decrypt(self.algebra.ciphertext_for_decryption(handle))
        if handle_type(handle) == "ebool":
            return "true" if value == 1 else "false"
        return str(value)

    def user_decrypt(self, request: UserDecryptRequest) -> UserDecryptResponse:
        """
        Reveal handles to the requesting player.

        All checks run before any decryption, so a rejected request reveals
        nothing at all.

        Raises:
            UnauthorizedDecryption: bad signature or signer is not the user
            AuthorizationExpired: outside the permit's validity window
            HandleOwnershipMismatch: a handle is not the user's or not covered
            ValueError: reveal public key is not 32 bytes of hex
        """
        try:
            public_key = decode_hex(request.publicKey)
        except ValueError as e:
            raise ValueError("Reveal public key must be hex") from e
        if len(public_key) != 32:
            raise ValueError(f"Reveal public key must be 32 bytes, got {len(public_key)}")

        typed_data = create_eip712(
            request.publicKey,
            request.contractAddresses,
            request.startTimestamp,
            request.durationDays,
        )
        verify_authorization(typed_data, request.signature, request.userAddress, now=self.clock())
        pairs = self._check_pairs(request)

        print(f"[Oracle] Revealing {len(pairs)} handle(s) to {normalize_address(request.userAddress)}")

        results: Dict[str, str] = {}
        for handle, _ in pairs:
            if handle in results:
                continue
            cleartext = self._decrypt_to_text(handle)
            results[handle] = seal(request.publicKey, cleartext.encode("utf-8"), bytes.fromhex(handle[2:]))

        return UserDecryptResponse(results=results)

    async def user_decrypt_async(self, request: UserDecryptRequest) -> UserDecryptResponse:
        """Run the threshold decryption off the event loop"""
        return await asyncio.to_thread(self.user_decrypt, request)
