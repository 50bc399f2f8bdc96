"""
User Decryption Models

Wire models for the decryption oracle. The reveal private key has no field
here: it never leaves the client.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class HandleContractPair(BaseModel):
    """One ciphertext handle and the contract that owns it"""
    handle: str  # 0x-prefixed 32-byte handle
    contractAddress: str


class UserDecryptRequest(BaseModel):
    """Signed request to reveal handles to their owner"""
    handleContractPairs: List[HandleContractPair] = Field(min_length=1)
    publicKey: str  # Hex X25519 reveal public key
    signature: str  # Hex signer public key || signature
    contractAddresses: List[str] = Field(min_length=1)
    userAddress: str
    startTimestamp: int = Field(ge=0, lt=2 ** 256)
    durationDays: int = Field(ge=0, lt=2 ** 256)  # Window bounds are checked with the signature


class UserDecryptResponse(BaseModel):
    """Sealed cleartexts keyed by handle"""
    results: Dict[str, str]  # handle -> base64 sealed payload


class ErrorResponse(BaseModel):
    """Structured failure - enough context to retry or escalate"""
    error: str
    code: int
    message: str
    handle: Optional[str] = None
