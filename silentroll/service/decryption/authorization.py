"""
Decryption Authorization - typed, domain-separated reveal permits

The player signs a structured message binding the reveal public key, the
contracts whose handles may be revealed and a validity window. The digest
follows the EIP-712 layout (0x1901 || domainSeparator || structHash) with
SHA-256 as the hash, so a permit cannot be replayed against another oracle
deployment or chain, or after it expires.
"""
import hashlib
import time
from typing import Any, Dict, List, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from silentroll.config import CRYPTO_CONFIG
from silentroll.errors import AuthorizationExpired, UnauthorizedDecryption
from silentroll.service.crypto_ops.handles import normalize_address

SECONDS_PER_DAY = 24 * 60 * 60

# Tolerated clock drift between the player and the oracle
MAX_CLOCK_SKEW = 300

PRIMARY_TYPE = "UserDecryptRequestVerification"

EIP712_TYPES: Dict[str, List[Dict[str, str]]] = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    PRIMARY_TYPE: [
        {"name": "publicKey", "type": "bytes"},
        {"name": "contractAddresses", "type": "address[]"},
        {"name": "startTimestamp", "type": "uint256"},
        {"name": "durationDays", "type": "uint256"},
    ],
}

PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64

UINT256_LIMIT = 2 ** 256


# ============================================================================
# Typed Data Hashing
# ============================================================================

def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def encode_type(primary_type: str, types: Dict[str, List[Dict[str, str]]]) -> str:
    fields = ",".join(f"{f['type']} {f['name']}" for f in types[primary_type])
    return f"{primary_type}({fields})"


def decode_hex(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def encode_value(field_type: str, value: Any) -> bytes:
    """32-byte word for one field"""
    if field_type == "string":
        return _sha256(value.encode("utf-8"))
    if field_type == "bytes":
        return _sha256(decode_hex(value) if isinstance(value, str) else value)
    if field_type == "uint256":
        value = int(value)
        if not 0 <= value < UINT256_LIMIT:
            raise ValueError(f"{value} does not fit in uint256")
        return value.to_bytes(32, "big")
    if field_type == "address":
        return b"\x00" * 12 + decode_hex(normalize_address(value))
    if field_type.endswith("[]"):
        inner = field_type[:-2]
        return _sha256(b"".join(encode_value(inner, item) for item in value))
    raise ValueError(f"Unsupported typed data field: {field_type}")


def hash_struct(primary_type: str, data: Dict[str, Any], types: Dict[str, List[Dict[str, str]]]) -> bytes:
    encoded = [_sha256(encode_type(primary_type, types).encode("utf-8"))]
    for field in types[primary_type]:
        encoded.append(encode_value(field["type"], data[field["name"]]))
    return _sha256(b"".join(encoded))


def typed_data_digest(typed_data: Dict[str, Any]) -> bytes:
    """Digest the wallet signs"""
    types = typed_data["types"]
    domain_separator = hash_struct("EIP712Domain", typed_data["domain"], types)
    struct_hash = hash_struct(typed_data["primaryType"], typed_data["message"], types)
    return _sha256(b"\x19\x01" + domain_separator + struct_hash)


def create_eip712(
    public_key: str,
    contract_addresses: List[str],
    start_timestamp: int,
    duration_days: int,
) -> Dict[str, Any]:
    """
    Build the typed reveal permit.

    Args:
        public_key: Ephemeral reveal public key (hex)
        contract_addresses: Contracts whose handles may be revealed
        start_timestamp: Unix seconds the permit starts
        duration_days: Validity window in days

    Returns:
        {"domain", "types", "primaryType", "message"}
    """
    return {
        "domain": {
            "name": CRYPTO_CONFIG["eip712_name"],
            "version": CRYPTO_CONFIG["eip712_version"],
            "chainId": CRYPTO_CONFIG["chain_id"],
            "verifyingContract": CRYPTO_CONFIG["verifying_contract"],
        },
        "types": EIP712_TYPES,
        "primaryType": PRIMARY_TYPE,
        "message": {
            "publicKey": public_key,
            "contractAddresses": [normalize_address(a) for a in contract_addresses],
            "startTimestamp": int(start_timestamp),
            "durationDays": int(duration_days),
        },
    }


# ============================================================================
# Signer Recovery
# ============================================================================

def address_from_public_key(public_key: bytes) -> str:
    """Account address: last 20 bytes of sha256(raw Ed25519 public key)"""
    return "0x" + _sha256(public_key)[-20:].hex()


def recover_signer(typed_data: Dict[str, Any], signature: str) -> str:
    """
    Verify a wallet signature and return the signer address.

    The signature is hex(public_key || ed25519_signature); the address is
    derived from the embedded key, so it cannot be claimed by anyone else.
    """
    try:
        raw = decode_hex(signature)
    except ValueError as e:
        raise UnauthorizedDecryption("Signature is not valid hex", reason="malformed signature") from e

    if len(raw) != PUBLIC_KEY_SIZE + SIGNATURE_SIZE:
        raise UnauthorizedDecryption(
            f"Signature must be {PUBLIC_KEY_SIZE + SIGNATURE_SIZE} bytes, got {len(raw)}",
            reason="malformed signature",
        )

    # Raises ValueError for unencodable fields, a malformed request rather than a bad signature
    digest = typed_data_digest(typed_data)

    public_bytes, sig = raw[:PUBLIC_KEY_SIZE], raw[PUBLIC_KEY_SIZE:]
    try:
        Ed25519PublicKey.from_public_bytes(public_bytes).verify(sig, digest)
    except (InvalidSignature, ValueError) as e:
        raise UnauthorizedDecryption("Signature verification failed", reason="bad signature") from e

    return address_from_public_key(public_bytes)


def verify_authorization(
    typed_data: Dict[str, Any],
    signature: str,
    user_address: str,
    now: Optional[float] = None,
):
    """
    Check signer and validity window of a reveal permit.

    Raises:
        UnauthorizedDecryption: signature invalid or signer != user_address
        AuthorizationExpired: window over, not started yet, or out of range
    """
    signer = recover_signer(typed_data, signature)
    if signer != normalize_address(user_address):
        raise UnauthorizedDecryption(
            f"Permit signed by {signer}, not by requester {user_address}",
            reason="signer mismatch",
        )

    check_validity_window(
        typed_data["message"]["startTimestamp"],
        typed_data["message"]["durationDays"],
        now,
    )


def check_validity_window(start_timestamp: int, duration_days: int, now: Optional[float] = None):
    now = time.time() if now is None else now

    if not 1 <= duration_days <= CRYPTO_CONFIG["max_duration_days"]:
        raise AuthorizationExpired(
            f"durationDays must be within 1..{CRYPTO_CONFIG['max_duration_days']}, got {duration_days}",
            reason="invalid duration",
        )
    if start_timestamp > now + MAX_CLOCK_SKEW:
        raise AuthorizationExpired("Permit is not valid yet", reason="starts in the future")
    if now >= start_timestamp + duration_days * SECONDS_PER_DAY:
        raise AuthorizationExpired(
            f"Permit expired {int(now - start_timestamp - duration_days * SECONDS_PER_DAY)}s ago",
            reason="expired",
        )
