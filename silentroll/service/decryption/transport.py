"""
Transport Encryption - re-encrypt cleartexts for the requesting player only

The oracle seals each decrypted value to the player's ephemeral X25519 public
key (ECDH + HKDF-SHA256 + AES-GCM, handle bound as associated data). Only the
holder of the matching private key can open it.
"""
import base64
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from silentroll.service.decryption.authorization import decode_hex

HKDF_INFO = b"silentroll/user-decrypt/v1"
NONCE_SIZE = 12
KEY_SIZE = 32


class Keypair:
    """Ephemeral reveal keypair (hex encoded). Lives for one reveal session."""

    def __init__(self, public_key: str, private_key: str):
        self.public_key = public_key
        self.private_key = private_key

    def __repr__(self) -> str:
        return f"Keypair(public_key={self.public_key!r}, private_key=<redacted>)"


def _raw_public(key: X25519PublicKey) -> bytes:
    return key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)


def _raw_private(key: X25519PrivateKey) -> bytes:
    return key.private_bytes(
        serialization.Encoding.Raw,
        serialization.PrivateFormat.Raw,
        serialization.NoEncryption(),
    )


def generate_keypair() -> Keypair:
    """Fresh X25519 keypair for a single user decryption"""
    private = X25519PrivateKey.generate()
    return Keypair(_raw_public(private.public_key()).hex(), _raw_private(private).hex())


def _derive_key(shared_secret: bytes, ephemeral_public: bytes, recipient_public: bytes) -> bytes:
    return HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=None,
        info=HKDF_INFO + ephemeral_public + recipient_public,
    ).derive(shared_secret)


def seal(public_key_hex: str, plaintext: bytes, associated_data: bytes = b"") -> str:
    """
    Encrypt plaintext to the recipient's public key.

    Returns:
        base64(ephemeral_public || nonce || ciphertext)
    """
    try:
        recipient = X25519PublicKey.from_public_bytes(decode_hex(public_key_hex))
    except ValueError as e:
        raise ValueError(f"Invalid reveal public key: {e}") from e

    ephemeral = X25519PrivateKey.generate()
    ephemeral_public = _raw_public(ephemeral.public_key())
    key = _derive_key(ephemeral.exchange(recipient), ephemeral_public, decode_hex(public_key_hex))

    nonce = os.urandom(NONCE_SIZE)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext, associated_data)
    return base64.b64encode(ephemeral_public + nonce + ciphertext).decode("utf-8")


def open_sealed(private_key_hex: str, sealed_b64: str, associated_data: bytes = b"") -> bytes:
    """
    Decrypt a sealed payload with the reveal private key.

    Raises:
        ValueError: payload malformed, tampered with, or sealed to another key
    """
    data = base64.b64decode(sealed_b64)
    if len(data) < KEY_SIZE + NONCE_SIZE + 16:
        raise ValueError("Sealed payload too short")

    ephemeral_public = data[:KEY_SIZE]
    nonce = data[KEY_SIZE:KEY_SIZE + NONCE_SIZE]
    ciphertext = data[KEY_SIZE + NONCE_SIZE:]

    private = X25519PrivateKey.from_private_bytes(decode_hex(private_key_hex))
    shared = private.exchange(X25519PublicKey.from_public_bytes(ephemeral_public))
    key = _derive_key(shared, ephemeral_public, _raw_public(private.public_key()))

    try:
        return AESGCM(key).decrypt(nonce, ciphertext, associated_data)
    except InvalidTag as e:
        raise ValueError("Sealed payload failed authentication") from e
