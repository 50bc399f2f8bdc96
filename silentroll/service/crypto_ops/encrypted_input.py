"""
Encrypted Inputs - client-side encryption plus input proof

A player encrypts values for a specific (contract, user) pair. The input
verifier registers the ciphertexts and attests the binding; the contract
only accepts a handle together with a valid attestation for itself and the
calling user.
"""
import hashlib
from typing import List

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from silentroll.errors import InvalidCiphertextProof
from silentroll.service.crypto_ops.handles import normalize_address, normalize_handle

PROOF_DOMAIN = b"silentroll/input-proof/v1"
HANDLE_SIZE = 32
SIGNATURE_SIZE = 64
UINT32_MAX = 2 ** 32 - 1


def _proof_digest(contract_address: str, user_address: str, handles: List[str]) -> bytes:
    payload = PROOF_DOMAIN
    payload += bytes.fromhex(normalize_address(contract_address)[2:])
    payload += bytes.fromhex(normalize_address(user_address)[2:])
    for handle in handles:
        payload += bytes.fromhex(handle[2:])
    return hashlib.sha256(payload).digest()


class InputVerifier:
    """Attests encrypted inputs and checks attestations"""

    def __init__(self):
        self._signing_key = Ed25519PrivateKey.generate()
        self.verifying_key = self._signing_key.public_key()

    def attest(self, contract_address: str, user_address: str, handles: List[str]) -> str:
        """
        Returns:
            hex(num_handles || handles || signature)
        """
        if not 0 < len(handles) < 256:
            raise ValueError("An encrypted input carries between 1 and 255 values")
        signature = self._signing_key.sign(_proof_digest(contract_address, user_address, handles))
        body = bytes([len(handles)]) + b"".join(bytes.fromhex(h[2:]) for h in handles)
        return (body + signature).hex()

    def verify(self, handle: str, input_proof: str, contract_address: str, user_address: str):
        """
        Raises:
            InvalidCiphertextProof: proof malformed, not for this handle, or not
                signed for this (contract, user) pair
        """
        try:
            handle = normalize_handle(handle)
            raw = bytes.fromhex(input_proof[2:] if input_proof.startswith("0x") else input_proof)
        except (ValueError, AttributeError) as e:
            raise InvalidCiphertextProof("Malformed input proof", handle=str(handle), reason="malformed") from e

        if not raw:
            raise InvalidCiphertextProof("Empty input proof", handle=handle, reason="malformed")

        count = raw[0]
        expected = 1 + count * HANDLE_SIZE + SIGNATURE_SIZE
        if count == 0 or len(raw) != expected:
            raise InvalidCiphertextProof("Input proof has the wrong length", handle=handle, reason="malformed")

        handles = [
            "0x" + raw[1 + i * HANDLE_SIZE:1 + (i + 1) * HANDLE_SIZE].hex()
            for i in range(count)
        ]
        if handle not in handles:
            raise InvalidCiphertextProof("Handle is not covered by the input proof", handle=handle, reason="handle not in proof")

        signature = raw[1 + count * HANDLE_SIZE:]
        try:
            self.verifying_key.verify(signature, _proof_digest(contract_address, user_address, handles))
        except InvalidSignature as e:
            raise InvalidCiphertextProof(
                "Input proof was not issued for this contract and user",
                handle=handle,
                reason="bad attestation",
            ) from e


class EncryptedInputResult:
    def __init__(self, handles: List[str], input_proof: str):
        self.handles = handles
        self.input_proof = input_proof


class EncryptedInput:
    """Builder mirroring createEncryptedInput(contract, user).addBool(..).encrypt()"""

    def __init__(self, algebra, contract_address: str, user_address: str):
        self.algebra = algebra
        self.contract_address = normalize_address(contract_address)
        self.user_address = normalize_address(user_address)
        self._values: List[tuple] = []

    def add_bool(self, value: bool) -> "EncryptedInput":
        if not isinstance(value, bool):
            raise TypeError(f"add_bool expects a bool, got {type(value).__name__}")
        self._values.append(("ebool", int(value)))
        return self

    def add_uint32(self, value: int) -> "EncryptedInput":
        if not 0 <= value <= UINT32_MAX:
            raise ValueError(f"{value} does not fit in 32 bits")
        self._values.append(("euint32", value))
        return self

    def encrypt(self) -> EncryptedInputResult:
        if not self._values:
            raise ValueError("Nothing to encrypt")
        handles = [self.algebra.encrypt(value, fhe_type) for fhe_type, value in self._values]
        proof = self.algebra.input_verifier.attest(self.contract_address, self.user_address, handles)
        return EncryptedInputResult(handles, proof)
