"""
SilentRoll Error Handling

Every failure raised by the round engine or the decryption protocol is a
distinct exception class with a stable code, so a client can decide whether to
retry, ask the player to sign again, or give up.
"""
from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Error codes."""

    # 1xxx - Precondition violations (caller error)
    ALREADY_ENROLLED = 1001
    NOT_JOINED = 1002
    ROUND_ALREADY_ACTIVE = 1003
    NO_ACTIVE_ROUND = 1004

    # 2xxx - Proof / authorization failures
    INVALID_CIPHERTEXT_PROOF = 2001
    UNAUTHORIZED_DECRYPTION = 2002
    AUTHORIZATION_EXPIRED = 2003
    HANDLE_OWNERSHIP_MISMATCH = 2004

    # 3xxx - Infrastructure failures (retryable)
    DECRYPTION_SERVICE_UNAVAILABLE = 3001


class SilentRollError(Exception):
    """Base exception for all SilentRoll errors."""

    code: ErrorCode
    retryable = False

    def __init__(self, message: str, handle: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.handle = handle
        self.reason = reason or message

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "code": int(self.code),
            "message": self.message,
            "handle": self.handle,
        }


# ============================================================================
# Precondition violations
# ============================================================================

class PreconditionError(SilentRollError):
    """Caller error - no retry is meaningful until the caller's state changes."""


class AlreadyEnrolled(PreconditionError):
    code = ErrorCode.ALREADY_ENROLLED


class NotJoined(PreconditionError):
    code = ErrorCode.NOT_JOINED


class RoundAlreadyActive(PreconditionError):
    code = ErrorCode.ROUND_ALREADY_ACTIVE


class NoActiveRound(PreconditionError):
    code = ErrorCode.NO_ACTIVE_ROUND


# ============================================================================
# Proof / authorization failures
# ============================================================================

class SecurityError(SilentRollError):
    """Security-relevant failure - always aborts the whole operation."""


class InvalidCiphertextProof(SecurityError):
    code = ErrorCode.INVALID_CIPHERTEXT_PROOF


class UnauthorizedDecryption(SecurityError):
    code = ErrorCode.UNAUTHORIZED_DECRYPTION


class AuthorizationExpired(SecurityError):
    code = ErrorCode.AUTHORIZATION_EXPIRED


class HandleOwnershipMismatch(SecurityError):
    code = ErrorCode.HANDLE_OWNERSHIP_MISMATCH


# ============================================================================
# Infrastructure failures
# ============================================================================

class InfrastructureError(SilentRollError):
    """Transient failure outside the atomic state transition."""

    retryable = True


class DecryptionServiceUnavailable(InfrastructureError):
    code = ErrorCode.DECRYPTION_SERVICE_UNAVAILABLE


ERRORS_BY_NAME = {
    cls.__name__: cls
    for cls in (
        AlreadyEnrolled,
        NotJoined,
        RoundAlreadyActive,
        NoActiveRound,
        InvalidCiphertextProof,
        UnauthorizedDecryption,
        AuthorizationExpired,
        HandleOwnershipMismatch,
        DecryptionServiceUnavailable,
    )
}
