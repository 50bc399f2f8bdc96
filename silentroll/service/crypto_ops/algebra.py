"""
Ciphertext Algebra - Facade for encrypted game values

Every encrypted value lives here and is addressed by a handle. Callers only
ever hold handles; the OpenFHE ciphertexts never leave this object except
towards the KMS committee for an authorized threshold decryption.
"""
import secrets
import threading
from typing import Dict, List, Sequence, Tuple

from silentroll.config import CRYPTO_CONFIG
from silentroll.errors import InvalidCiphertextProof
from silentroll.service.crypto_ops.encrypted_input import EncryptedInput, InputVerifier
from silentroll.service.crypto_ops.handles import (
    ZERO_HANDLE,
    HandleACL,
    handle_type,
    mint_handle,
    normalize_handle,
)
from silentroll.service.crypto_ops.scalar_operations import (
    add_encrypted,
    boolean_equal,
    encrypt_scalar,
    is_at_least,
    select_constant,
)


class CiphertextAlgebra:
    """
    Homomorphic operations over handles.

    Facade pattern - delegates arithmetic to scalar_operations, access
    control to HandleACL and input attestation to InputVerifier.
    """

    def __init__(self, cc, joint_public_key, plain_modulus: int = None):
        self.cc = cc
        self.public_key = joint_public_key
        self.plain_modulus = plain_modulus or CRYPTO_CONFIG["plain_modulus"]

        self.acl = HandleACL()
        self.input_verifier = InputVerifier()

        self._ciphertexts: Dict[str, Tuple[str, object]] = {}
        self._lock = threading.Lock()

    # ========================================================================
    # Handle Store
    # ========================================================================

    def _store(self, ciphertext, fhe_type: str) -> str:
        handle = mint_handle(fhe_type)
        with self._lock:
            self._ciphertexts[handle] = (fhe_type, ciphertext)
        return handle

    def _load(self, handle: str, expected_type: str = None):
        handle = normalize_handle(handle)
        with self._lock:
            entry = self._ciphertexts.get(handle)
        if entry is None:
            raise KeyError(f"Unknown handle {handle}")
        fhe_type, ciphertext = entry
        if expected_type and fhe_type != expected_type:
            raise TypeError(f"Handle {handle} is {fhe_type}, expected {expected_type}")
        return ciphertext

    def exists(self, handle: str) -> bool:
        with self._lock:
            return normalize_handle(handle) in self._ciphertexts

    def ciphertext_for_decryption(self, handle: str):
        """Raw ciphertext for the KMS committee (oracle use only)"""
        return self._load(handle)

    def release(self, *handles: str):
        """
        Drop ciphertexts nobody can reach any more, with their ACL entries.

        Unknown handles and the zero handle are ignored.
        """
        for handle in handles:
            if handle == ZERO_HANDLE:
                continue
            handle = normalize_handle(handle)
            with self._lock:
                self._ciphertexts.pop(handle, None)
            self.acl.revoke_all(handle)

    def handles(self) -> List[str]:
        with self._lock:
            return list(self._ciphertexts)

    # ========================================================================
    # Encryption & Randomness
    # ========================================================================

    def encrypt(self, value: int, fhe_type: str = "euint32") -> str:
        """Encrypt a cleartext under the joint public key"""
        if fhe_type == "ebool" and value not in (0, 1):
            raise ValueError(f"ebool must be 0 or 1, got {value}")
        if not 0 <= value < self.plain_modulus:
            raise ValueError(f"{value} is outside the plaintext space")
        ciphertext = encrypt_scalar(self.cc, self.public_key, value, self.plain_modulus)
        return self._store(ciphertext, fhe_type)

    def random_uint(self, low: int, high: int) -> str:
        """
        Encrypted uniform integer in [low, high].

        The draw is encrypted immediately and never returned or logged.
        """
        if low > high:
            raise ValueError(f"Empty range [{low}, {high}]")
        return self.encrypt(low + secrets.randbelow(high - low + 1))

    def create_encrypted_input(self, contract_address: str, user_address: str) -> EncryptedInput:
        return EncryptedInput(self, contract_address, user_address)

    def from_external(
        self,
        handle: str,
        input_proof: str,
        contract_address: str,
        user_address: str,
        expected_type: str,
    ) -> str:
        """
        Accept a player-supplied handle after checking its input proof.

        Raises:
            InvalidCiphertextProof: see InputVerifier.verify; also when the
                handle is unknown or carries the wrong type
        """
        self.input_verifier.verify(handle, input_proof, contract_address, user_address)
        handle = normalize_handle(handle)
        if not self.exists(handle):
            raise InvalidCiphertextProof("Handle was never uploaded", handle=handle, reason="unknown handle")
        if handle_type(handle) != expected_type:
            raise InvalidCiphertextProof(
                f"Expected {expected_type}, got {handle_type(handle)}",
                handle=handle,
                reason="wrong type",
            )
        return handle

    # ========================================================================
    # Homomorphic Operations
    # ========================================================================

    def add(self, left: str, right: str) -> str:
        """euint32 + euint32 (wraps modulo the plaintext modulus)"""
        result = add_encrypted(
            self.cc,
            self._load(left, "euint32"),
            self._load(right, "euint32"),
        )
        return self._store(result, "euint32")

    def compare_ge(self, value: str, threshold: int, domain: Sequence[int]) -> str:
        """ebool for value >= threshold; exact for values inside domain"""
        result = is_at_least(
            self.cc,
            self._load(value, "euint32"),
            threshold,
            domain,
            self.plain_modulus,
        )
        return self._store(result, "ebool")

    def equal(self, left: str, right: str) -> str:
        """ebool == ebool"""
        result = boolean_equal(
            self.cc,
            self._load(left, "ebool"),
            self._load(right, "ebool"),
            self.plain_modulus,
        )
        return self._store(result, "ebool")

    def select(self, condition: str, when_true: int, when_false: int) -> str:
        """euint32 equal to when_true if condition else when_false"""
        result = select_constant(
            self.cc,
            self._load(condition, "ebool"),
            when_true,
            when_false,
            self.plain_modulus,
        )
        return self._store(result, "euint32")

    # ========================================================================
    # Access Control
    # ========================================================================

    def allow(self, handle: str, address: str):
        self.acl.allow(handle, address)

    def is_allowed(self, handle: str, address: str) -> bool:
        return self.acl.is_allowed(handle, address)
