"""
Crypto Operations Service - encrypted values and threshold keys for the game

Structure:
- algebra.py: CiphertextAlgebra (Facade over handles)
- scalar_operations.py: Homomorphic add / compare / equal / select
- encrypted_input.py: Client-side encrypted inputs and input proofs
- handles.py: Handle minting and access control
- key_generation.py / threshold_decryption.py: KMS key shares
"""

from .key_generation import (
    dkg_keygen_lead,
    dkg_keygen_join,
    dkg_keyswitch_lead,
    dkg_keyswitch_join,
)
from .threshold_decryption import (
    partial_decrypt_lead,
    partial_decrypt_main,
    fusion_decrypt,
    decode_scalar,
)
from .scalar_operations import (
    encrypt_scalar,
    add_encrypted,
    is_at_least,
    boolean_equal,
    select_constant,
    lagrange_coefficients,
)
from .handles import (
    ZERO_HANDLE,
    HandleACL,
    mint_handle,
    handle_type,
    normalize_handle,
    normalize_address,
)
from .encrypted_input import EncryptedInput, EncryptedInputResult, InputVerifier
from .algebra import CiphertextAlgebra

from .context import create_openfhe_context

__all__ = [
    'CiphertextAlgebra',
    'EncryptedInput',
    'EncryptedInputResult',
    'InputVerifier',
    'HandleACL',
    'ZERO_HANDLE',
    'mint_handle',
    'handle_type',
    'normalize_handle',
    'normalize_address',
    'dkg_keygen_lead',
    'dkg_keygen_join',
    'dkg_keyswitch_lead',
    'dkg_keyswitch_join',
    'partial_decrypt_lead',
    'partial_decrypt_main',
    'fusion_decrypt',
    'decode_scalar',
    'encrypt_scalar',
    'add_encrypted',
    'is_at_least',
    'boolean_equal',
    'select_constant',
    'lagrange_coefficients',
    'create_openfhe_context',
]
