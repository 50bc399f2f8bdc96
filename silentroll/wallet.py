"""
Wallet - the player's signing identity

Stands in for the external wallet: holds an Ed25519 key, derives the player
address from it and signs typed data.
"""
from typing import Any, Dict, List, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from silentroll.service.decryption.authorization import (
    EIP712_TYPES,
    address_from_public_key,
    typed_data_digest,
)


class Wallet:
    """Player wallet (Ed25519)"""

    def __init__(self, private_key: Optional[Ed25519PrivateKey] = None):
        self._private_key = private_key or Ed25519PrivateKey.generate()
        self.public_key_bytes = self._private_key.public_key().public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw
        )
        self.address = address_from_public_key(self.public_key_bytes)

    @classmethod
    def from_seed(cls, seed: bytes) -> "Wallet":
        return cls(Ed25519PrivateKey.from_private_bytes(seed))

    def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        message: Dict[str, Any],
        primary_type: str = "UserDecryptRequestVerification",
    ) -> str:
        """
        Sign a typed message.

        Returns:
            hex(public_key || signature), no 0x prefix
        """
        if "EIP712Domain" not in types:
            types = {"EIP712Domain": EIP712_TYPES["EIP712Domain"], **types}

        digest = typed_data_digest({
            "domain": domain,
            "types": types,
            "primaryType": primary_type,
            "message": message,
        })
        return (self.public_key_bytes + self._private_key.sign(digest)).hex()

    def __repr__(self) -> str:
        return f"Wallet(address={self.address})"
