"""
idseal - Identity-bound encryption and recoverable message signatures

Python implementation of identity-based encryption against a key-derivation
service (BLS12-381) and secp256k1 recoverable signatures verified by address.
"""

from .codec import hex_to_bytes, bytes_to_hex
from .envelope import encode_envelope, decode_envelope, is_packaged, DecodedEnvelope
from .keys import DerivedPublicKey, TransportSecretKey
from .crypto import IbeIdentity, IbeSeed, IbeCiphertext, EncryptedVetKey, VetKey
from .hashing import (
    keccak256,
    personal_message_hash,
    derive_address,
    address_to_text,
    normalize_address,
    to_checksum_address,
)
from .signature import (
    find_recovery_id,
    encode_recoverable,
    decode_recovery_byte,
    verify_message,
    sign_message,
)
from .identity import (
    ANONYMOUS_PRINCIPAL,
    principal_from_text,
    principal_to_text,
    self_authenticating_principal,
    IdentityProvider,
    CallerIdentitySource,
    StaticIdentityProvider,
)
from .derivation import (
    KeyDerivationService,
    InMemoryKeyDerivationService,
    CanisterKeyDerivationService,
)
from .signer import RawSigner, LocalSigner
from .models import SignedMessage, VerificationResult
from .config import IdsealConfig
from .concurrency import gather_or_cancel
from .client import IbeClient, SignatureClient
from .types import (
    ENVELOPE_MAGIC,
    IdsealError,
    InvalidEncodingError,
    FieldTooLargeError,
    InvalidEnvelopeError,
    LegacyFormatError,
    KeyFormatError,
    InvalidPublicKeyEncodingError,
    EpochMismatchError,
    RecipientMismatchError,
    DecryptionDeniedError,
    EncryptionError,
    RecoveryIdNotFoundError,
    InvalidAddressFormatError,
    InvalidSignatureError,
    InvalidIdentityError,
    KeyNotFoundError,
    KeyDerivationServiceError,
)

__version__ = "0.1.0"

__all__ = [
    # Codec
    "hex_to_bytes",
    "bytes_to_hex",
    # Envelope
    "encode_envelope",
    "decode_envelope",
    "is_packaged",
    "DecodedEnvelope",
    # Keys
    "DerivedPublicKey",
    "TransportSecretKey",
    # Crypto
    "IbeIdentity",
    "IbeSeed",
    "IbeCiphertext",
    "EncryptedVetKey",
    "VetKey",
    # Hashing
    "keccak256",
    "personal_message_hash",
    "derive_address",
    "address_to_text",
    "normalize_address",
    "to_checksum_address",
    # Signature
    "find_recovery_id",
    "encode_recoverable",
    "decode_recovery_byte",
    "verify_message",
    "sign_message",
    # Identity
    "ANONYMOUS_PRINCIPAL",
    "principal_from_text",
    "principal_to_text",
    "self_authenticating_principal",
    "IdentityProvider",
    "CallerIdentitySource",
    "StaticIdentityProvider",
    # Services
    "KeyDerivationService",
    "InMemoryKeyDerivationService",
    "CanisterKeyDerivationService",
    "RawSigner",
    "LocalSigner",
    # Models
    "SignedMessage",
    "VerificationResult",
    # Config
    "IdsealConfig",
    # Concurrency
    "gather_or_cancel",
    # Client
    "IbeClient",
    "SignatureClient",
    # Constants
    "ENVELOPE_MAGIC",
    # Errors
    "IdsealError",
    "InvalidEncodingError",
    "FieldTooLargeError",
    "InvalidEnvelopeError",
    "LegacyFormatError",
    "KeyFormatError",
    "InvalidPublicKeyEncodingError",
    "EpochMismatchError",
    "RecipientMismatchError",
    "DecryptionDeniedError",
    "EncryptionError",
    "RecoveryIdNotFoundError",
    "InvalidAddressFormatError",
    "InvalidSignatureError",
    "InvalidIdentityError",
    "KeyNotFoundError",
    "KeyDerivationServiceError",
]
