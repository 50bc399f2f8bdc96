"""
SilentRoll Models Package

Ledger records and decryption oracle wire models.
"""

from .player import PlayerRecord
from .decryption import HandleContractPair, UserDecryptRequest, UserDecryptResponse, ErrorResponse

__all__ = [
    "PlayerRecord",
    "HandleContractPair",
    "UserDecryptRequest",
    "UserDecryptResponse",
    "ErrorResponse",
]
