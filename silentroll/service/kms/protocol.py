from silentroll.service.crypto_ops import (
    dkg_keygen_lead,
    dkg_keygen_join,
    dkg_keyswitch_lead,
    dkg_keyswitch_join,
    partial_decrypt_lead,
    partial_decrypt_main,
)


class KMSParty:
    """One key-share holder of the decryption committee"""

    def __init__(self, index: int, cc):
        self.index = index
        self.cc = cc
        self.keypair = None

    @property
    def is_lead(self) -> bool:
        return self.index == 0

    def generate_key(self, prev_public_key=None):
        """Lead generates, the others extend the joint key chain"""
        if self.is_lead:
            self.keypair = dkg_keygen_lead(self.cc)
        else:
            self.keypair = dkg_keygen_join(self.cc, prev_public_key)
        return self.keypair.publicKey

    def generate_keyswitch_key(self, lead_keyswitch=None):
        """KeySwitch share (Round 2)"""
        if self.is_lead:
            return dkg_keyswitch_lead(self.cc, self.keypair.secretKey)
        return dkg_keyswitch_join(self.cc, self.keypair.secretKey, lead_keyswitch)

    def generate_multmult_key(self, combined_key, key_tag):
        """MultiMult share (Round 3)"""
        return self.cc.MultiMultEvalKey(self.keypair.secretKey, combined_key, key_tag)

    def partial_decrypt(self, ciphertext):
        """Decryption share for a single ciphertext"""
        if self.is_lead:
            return partial_decrypt_lead(self.cc, ciphertext, self.keypair.secretKey)
        return partial_decrypt_main(self.cc, ciphertext, self.keypair.secretKey)
