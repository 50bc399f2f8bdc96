"""
HTTP Server - Decryption Oracle Endpoint
"""
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from silentroll.errors import (
    AuthorizationExpired,
    DecryptionServiceUnavailable,
    HandleOwnershipMismatch,
    SilentRollError,
    UnauthorizedDecryption,
)
from silentroll.model import UserDecryptRequest

app = FastAPI(title="SilentRoll Decryption Oracle")

STATUS_BY_ERROR = {
    UnauthorizedDecryption: 401,
    HandleOwnershipMismatch: 403,
    AuthorizationExpired: 410,
}


# Global state - set by GameSession
class ServerState:
    def __init__(self):
        self.oracle = None

state = ServerState()


def initialize_server(oracle):
    """Initialize server with the decryption oracle"""
    state.oracle = oracle


def _error_response(status_code: int, error: str, code: int, message: str, handle=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "code": code, "message": message, "handle": handle},
    )


@app.exception_handler(RequestValidationError)
async def malformed_request(request: Request, exc: RequestValidationError):
    return _error_response(422, "MalformedRequest", 0, str(exc.errors()))


@app.get("/health")
async def health():
    committee = state.oracle.committee if state.oracle else None
    return {
        "status": "ok" if state.oracle else "starting",
        "kms_parties": committee.num_parties if committee else 0,
    }


@app.post("/user_decrypt")
async def user_decrypt(request: UserDecryptRequest):
    """
    Reveal handles to their owner, sealed to the request's public key
    """
    if state.oracle is None:
        error = DecryptionServiceUnavailable("Oracle not initialized")
        return _error_response(503, **error.to_dict())

    try:
        response = await state.oracle.user_decrypt_async(request)
        print(f"[HTTP] 🔓 user_decrypt: {len(response.results)} sealed value(s)")
        return response.model_dump()

    except SilentRollError as e:
        print(f"[HTTP] ❌ user_decrypt rejected: {type(e).__name__}: {e.reason}")
        return _error_response(STATUS_BY_ERROR.get(type(e), 400), **e.to_dict())

    except ValueError as e:
        return _error_response(422, "MalformedRequest", 0, str(e))

    except Exception as e:
        print(f"[HTTP] ❌ user_decrypt error: {e}")
        traceback.print_exc()
        return _error_response(500, **DecryptionServiceUnavailable(str(e)).to_dict())

