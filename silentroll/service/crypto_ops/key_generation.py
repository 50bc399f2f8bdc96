from openfhe import *

# ============================================================================
# Distributed Key Generation (DKG)
# ============================================================================

def dkg_keygen_lead(cc):
    """
    Lead KMS party generates the initial keypair.

    Returns:
        KeyPair containing public and secret keys
    """
    return cc.KeyGen()


def dkg_keygen_join(cc, prev_public_key):
    """
    Subsequent KMS parties join the key chain with the previous public key.

    Returns:
        KeyPair whose public key is the extended joint key
    """
    return cc.MultipartyKeyGen(prev_public_key)


def dkg_keyswitch_lead(cc, secret_key):
    """Round 2 (lead): relinearization key share from the lead secret."""
    return cc.KeySwitchGen(secret_key, secret_key)


def dkg_keyswitch_join(cc, secret_key, lead_keyswitch):
    """Round 2 (join): relinearization key share bound to the lead share."""
    return cc.MultiKeySwitchGen(secret_key, secret_key, lead_keyswitch)
