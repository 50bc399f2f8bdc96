"""
User Decryption - client side of the reveal handshake

Sends the signed permit to the oracle and opens the sealed answers locally.
The reveal private key stays in this process.
"""
from typing import Dict, List, Union

from silentroll.model import HandleContractPair, UserDecryptRequest
from silentroll.service.crypto_ops.handles import handle_type, normalize_handle
from silentroll.service.decryption.transport import open_sealed


async def user_decrypt(
    client,
    pairs: List[dict],
    private_key: str,
    public_key: str,
    signature: str,
    contract_addresses: List[str],
    user_address: str,
    start_timestamp: int,
    duration_days: int,
) -> Dict[str, Union[int, bool]]:
    """
    Reveal handles owned by user_address.

    Args:
        client: DecryptionNetworkClient
        pairs: [{"handle": ..., "contractAddress": ...}]
        private_key / public_key: reveal keypair from generate_keypair()
        signature: wallet signature over create_eip712(public_key, ...)

    Returns:
        {handle: int for euint32, bool for ebool}

    Raises:
        whatever the oracle answered (UnauthorizedDecryption,
        AuthorizationExpired, HandleOwnershipMismatch) or
        DecryptionServiceUnavailable after retries
    """
    request = UserDecryptRequest(
        handleContractPairs=[HandleContractPair(**pair) for pair in pairs],
        publicKey=public_key,
        signature=signature,
        contractAddresses=contract_addresses,
        userAddress=user_address,
        startTimestamp=start_timestamp,
        durationDays=duration_days,
    )
    sealed = await client.request_user_decrypt(request.model_dump())

    results: Dict[str, Union[int, bool]] = {}
    for pair in request.handleContractPairs:
        handle = normalize_handle(pair.handle)
        if handle not in sealed:
            raise ValueError(f"Oracle answer is missing handle {handle}")
        cleartext = open_sealed(private_key, sealed[handle], bytes.fromhex(handle[2:])).decode("utf-8")
        results[handle] = cleartext == "true" if handle_type(handle) == "ebool" else int(cleartext)
    return results
