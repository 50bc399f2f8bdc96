from typing import List, Optional

from silentroll.config import CRYPTO_CONFIG
from silentroll.service.crypto_ops import create_openfhe_context, fusion_decrypt, decode_scalar
from silentroll.service.kms.protocol import KMSParty


class KeyCommittee:
    """Runs DKG across the KMS parties and answers threshold decryptions"""

    def __init__(self, num_parties: Optional[int] = None, plain_modulus: Optional[int] = None):
        self.num_parties = num_parties or CRYPTO_CONFIG["kms_parties"]
        self.plain_modulus = plain_modulus or CRYPTO_CONFIG["plain_modulus"]
        self.cc = None
        self.parties: List[KMSParty] = []
        self.joint_public_key = None

    def run_dkg_protocol(self):
        """Joint public key + threshold multiplication key"""
        if self.num_parties < 2:
            raise ValueError("Threshold decryption needs at least 2 KMS parties")

        print("\n" + "=" * 50)
        print(f" KMS: Distributed Key Generation ({self.num_parties} parties)")
        print("=" * 50)

        self.cc = create_openfhe_context(self.num_parties, self.plain_modulus)
        self.parties = [KMSParty(i, self.cc) for i in range(self.num_parties)]

        # Step 1: Key Chain
        public_key = None
        for party in self.parties:
            public_key = party.generate_key(public_key)
            print(f" [KMS {party.index}] Extended key chain")
        self.joint_public_key = public_key
        key_tag = self.joint_public_key.GetKeyTag()
        print(" ✓ Joint public key established")

        # Step 2: KeySwitch shares (Round 2)
        lead_keyswitch = self.parties[0].generate_keyswitch_key()
        shares = [lead_keyswitch] + [
            party.generate_keyswitch_key(lead_keyswitch) for party in self.parties[1:]
        ]
        combined = shares[0]
        for share in shares[1:]:
            combined = self.cc.MultiAddEvalKeys(combined, share, key_tag)

        # Step 3: MultiMult shares (Round 3)
        mult_keys = [party.generate_multmult_key(combined, key_tag) for party in self.parties]
        final_key = mult_keys[0]
        for key in mult_keys[1:]:
            final_key = self.cc.MultiAddEvalMultKeys(final_key, key, final_key.GetKeyTag())
        self.cc.InsertEvalMultKey([final_key])

        print(" ✓ Threshold multiplication key installed!")
        print("=" * 50)
        return self.cc, self.joint_public_key

    def threshold_decrypt(self, ciphertext) -> int:
        """
        Collect a decryption share from every party and fuse them.

        Only the oracle calls this, after the requester's authorization has
        been checked.
        """
        if self.cc is None:
            raise RuntimeError("DKG has not been run")
        partials = [party.partial_decrypt(ciphertext) for party in self.parties]
        plaintext = fusion_decrypt(self.cc, partials)
        return decode_scalar(plaintext, self.plain_modulus)
