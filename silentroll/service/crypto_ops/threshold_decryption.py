# ============================================================================
# Threshold Decryption
# ============================================================================

def partial_decrypt_lead(cc, ciphertext, secret_key):
    """
    Lead KMS party's decryption share.

    Returns:
        Partial ciphertext (decryption share)
    """
    return cc.MultipartyDecryptLead([ciphertext], secret_key)[0]


def partial_decrypt_main(cc, ciphertext, secret_key):
    """
    Non-lead KMS party's decryption share.

    Returns:
        Partial ciphertext (decryption share)
    """
    return cc.MultipartyDecryptMain([ciphertext], secret_key)[0]


def fusion_decrypt(cc, partial_ciphertexts):
    """
    Combine decryption shares from every KMS party into the plaintext.
    """
    return cc.MultipartyDecryptFusion(partial_ciphertexts)


def decode_scalar(plaintext, plain_modulus: int) -> int:
    """
    Read the coefficient-encoded scalar out of a fused plaintext.

    OpenFHE decodes coefficients centered around zero; values are normalized
    back into [0, plain_modulus).
    """
    plaintext.SetLength(1)
    return plaintext.GetCoefPackedValue()[0] % plain_modulus
