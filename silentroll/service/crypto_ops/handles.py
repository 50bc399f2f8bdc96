"""
Ciphertext Handles & Access Control

A handle is an opaque 32-byte reference to a ciphertext held by the algebra:
30 random bytes, one FHE type byte and one version byte. Nobody outside the
algebra ever sees the ciphertext itself.
"""
import secrets
import threading
from collections import defaultdict
from typing import Dict, Set

HANDLE_VERSION = 0

FHE_TYPES = {
    "ebool": 0,
    "euint32": 4,
}
FHE_TYPE_NAMES = {v: k for k, v in FHE_TYPES.items()}

ZERO_HANDLE = "0x" + "00" * 32


def mint_handle(fhe_type: str) -> str:
    """Create a fresh handle tagged with its FHE type."""
    body = secrets.token_bytes(30)
    return "0x" + (body + bytes([FHE_TYPES[fhe_type], HANDLE_VERSION])).hex()


def normalize_handle(handle) -> str:
    if isinstance(handle, bytes):
        handle = "0x" + handle.hex()
    handle = handle.lower()
    if not handle.startswith("0x"):
        handle = "0x" + handle
    if len(handle) != 66:
        raise ValueError(f"Malformed handle: {handle}")
    int(handle[2:], 16)
    return handle


def handle_type(handle: str) -> str:
    """FHE type encoded in byte 30 of the handle."""
    type_byte = int(normalize_handle(handle)[62:64], 16)
    return FHE_TYPE_NAMES.get(type_byte, "unknown")


def normalize_address(address: str) -> str:
    address = address.lower()
    if not address.startswith("0x") or len(address) != 42:
        raise ValueError(f"Malformed address: {address}")
    int(address[2:], 16)
    return address


class HandleACL:
    """
    Persistent access list: which addresses may use or decrypt a handle.

    Both the owning player and the contract that computed the handle must be
    allowed before the oracle reveals it.
    """

    def __init__(self):
        self._allowed: Dict[str, Set[str]] = defaultdict(set)
        self._lock = threading.Lock()

    def allow(self, handle: str, address: str):
        with self._lock:
            self._allowed[normalize_handle(handle)].add(normalize_address(address))

    def is_allowed(self, handle: str, address: str) -> bool:
        with self._lock:
            return normalize_address(address) in self._allowed.get(normalize_handle(handle), ())

    def allowed_addresses(self, handle: str) -> Set[str]:
        with self._lock:
            return set(self._allowed.get(normalize_handle(handle), ()))

    def revoke_all(self, handle: str):
        """Forget every grant on a handle that is being released."""
        with self._lock:
            self._allowed.pop(normalize_handle(handle), None)
