from openfhe import *

from silentroll.config import CRYPTO_CONFIG


# ============================================================================
# OpenFHE Context & Parameters
# ============================================================================

MULTIPARTY_MODES = {
    "NOISE_FLOODING": NOISE_FLOODING_MULTIPARTY,
    "FIXED_NOISE": FIXED_NOISE_MULTIPARTY,
}


def create_openfhe_context(num_parties: int, plain_modulus: int = None, depth: int = None):
    """
    Create BFVrns context for threshold FHE over encrypted scalars.

    Scalars are coefficient-encoded in the constant term, so the plaintext
    modulus only has to be prime (no batching constraint on the ring).

    Args:
        num_parties: Number of KMS parties holding a key share
        plain_modulus: Plaintext modulus (defaults to CRYPTO_CONFIG)
        depth: Multiplicative depth (defaults to CRYPTO_CONFIG)

    Returns:
        OpenFHE CryptoContext configured for multiparty operations
    """
    parameters = CCParamsBFVRNS()

    parameters.SetPlaintextModulus(plain_modulus or CRYPTO_CONFIG["plain_modulus"])

    parameters.SetMultiplicativeDepth(depth or CRYPTO_CONFIG["multiplicative_depth"])

    # Threshold FHE settings
    parameters.SetThresholdNumOfParties(num_parties)
    parameters.SetMultipartyMode(MULTIPARTY_MODES[CRYPTO_CONFIG["multiparty_mode"]])

    cc = GenCryptoContext(parameters)
    cc.Enable(PKESchemeFeature.PKE)
    cc.Enable(PKESchemeFeature.KEYSWITCH)
    cc.Enable(PKESchemeFeature.LEVELEDSHE)
    cc.Enable(PKESchemeFeature.ADVANCEDSHE)
    cc.Enable(PKESchemeFeature.MULTIPARTY)

    return cc
