"""
Recoverable message signatures.

Messages are signed over their personal-message hash. The signer only
returns a compact 64-byte signature, so the recovery id is found locally by
recovering each candidate public key and matching it against the signer's
known key. Verifiers hold only the signer's address: they recover the public
key from the signature, compare its address, and then verify the signature
against the recovered key directly.
"""

import logging
from typing import Sequence, Tuple

from coincurve import PublicKey
from coincurve.ecdsa import cdata_to_der, deserialize_compact

from .concurrency import gather_or_cancel
from .hashing import (
    address_to_text,
    derive_address,
    normalize_address,
    personal_message_hash,
    uncompressed_public_key,
)
from .models import SignedMessage, VerificationResult
from .signer import RawSigner
from .types import (
    CHAIN_ID_OFFSET,
    COMPACT_SIGNATURE_SIZE,
    RECOVERABLE_SIGNATURE_SIZE,
    RECOVERY_ID_OFFSET,
    InvalidSignatureError,
    RecoveryIdNotFoundError,
)


logger = logging.getLogger(__name__)

# secp256k1 group order
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

ALL_RECOVERY_IDS = (0, 1, 2, 3)


def recover_public_key(compact: bytes, message_hash: bytes, recovery_id: int) -> bytes:
    """
    Recover the uncompressed public key for a compact signature and recovery id.

    Raises:
        ValueError: If no valid point can be recovered
    """
    public_key = PublicKey.from_signature_and_message(
        bytes(compact) + bytes([recovery_id]), message_hash, hasher=None
    )
    return public_key.format(compressed=False)


def find_recovery_id(compact: bytes, message_hash: bytes, public_key: bytes) -> int:
    """
    Find the recovery id that reproduces a known public key.

    Args:
        compact: 64-byte signature (r || s)
        message_hash: 32-byte signed hash
        public_key: The signer's public key, compressed or uncompressed

    Returns:
        Recovery id in 0..3

    Raises:
        RecoveryIdNotFoundError: If no id reproduces the key
    """
    expected = uncompressed_public_key(public_key)

    for recovery_id in ALL_RECOVERY_IDS:
        try:
            candidate = recover_public_key(compact, message_hash, recovery_id)
        except ValueError:
            continue
        if candidate == expected:
            return recovery_id

    raise RecoveryIdNotFoundError()


def encode_recoverable(compact: bytes, recovery_id: int) -> bytes:
    """Append the recovery byte (27 + id) to a compact signature."""
    if len(compact) != COMPACT_SIGNATURE_SIZE:
        raise InvalidSignatureError(
            f"Compact signature must be {COMPACT_SIGNATURE_SIZE} bytes, got {len(compact)}"
        )
    if recovery_id not in ALL_RECOVERY_IDS:
        raise InvalidSignatureError(f"Recovery id must be 0..3, got {recovery_id}")

    return bytes(compact) + bytes([RECOVERY_ID_OFFSET + recovery_id])


def decode_recovery_byte(v: int) -> int:
    """
    Decode the trailing byte of a 65-byte signature into a recovery id.

    Accepts raw ids (0..3), the offset form (27..30) and the chain-id form
    (35 + 2 * chain_id + parity).

    Raises:
        InvalidSignatureError: For any other value
    """
    if v in ALL_RECOVERY_IDS:
        return v
    if RECOVERY_ID_OFFSET <= v < RECOVERY_ID_OFFSET + len(ALL_RECOVERY_IDS):
        return v - RECOVERY_ID_OFFSET
    if v >= CHAIN_ID_OFFSET:
        return (v - CHAIN_ID_OFFSET) % 2
    raise InvalidSignatureError(f"Unsupported recovery byte: {v}")


def candidate_recovery_ids(
    signature: bytes,
    allow_compact: bool = True,
) -> Tuple[bytes, Sequence[int]]:
    """
    Split a signature into its compact part and the recovery ids to try.

    Raises:
        InvalidSignatureError: On an unsupported length or recovery byte
    """
    if len(signature) == RECOVERABLE_SIGNATURE_SIZE:
        return bytes(signature[:COMPACT_SIGNATURE_SIZE]), (decode_recovery_byte(signature[-1]),)

    if len(signature) == COMPACT_SIGNATURE_SIZE:
        if not allow_compact:
            raise InvalidSignatureError("Signature without recovery byte is not accepted")
        return bytes(signature), ALL_RECOVERY_IDS

    raise InvalidSignatureError(
        f"Signature must be {RECOVERABLE_SIGNATURE_SIZE} or {COMPACT_SIGNATURE_SIZE} bytes, "
        f"got {len(signature)}"
    )


def verify_compact(compact: bytes, message_hash: bytes, public_key: bytes) -> bool:
    """
    Verify a compact ECDSA signature against a public key.

    Both halves of a malleable (r, s) / (r, n - s) pair are accepted.
    """
    r = int.from_bytes(compact[:32], "big")
    s = int.from_bytes(compact[32:], "big")
    if not (0 < r < SECP256K1_ORDER and 0 < s < SECP256K1_ORDER):
        return False
    if s > SECP256K1_ORDER // 2:
        s = SECP256K1_ORDER - s

    normalized = r.to_bytes(32, "big") + s.to_bytes(32, "big")
    try:
        der = cdata_to_der(deserialize_compact(normalized))
        return PublicKey(public_key).verify(der, message_hash, hasher=None)
    except ValueError:
        return False


def verify_message(
    message: str,
    signature: bytes,
    address: str,
    allow_compact: bool = True,
) -> VerificationResult:
    """
    Verify that a message was signed by the holder of an address.

    Each candidate recovery id is tried in turn; a candidate is accepted
    only if the recovered key's address matches and the signature verifies
    directly against that key.

    Args:
        message: Exact message text that was signed
        signature: 65-byte recoverable or 64-byte compact signature
        address: Signer address, ``0x`` + 40 hex digits
        allow_compact: Whether 64-byte signatures (all four ids tried) are accepted

    Returns:
        VALID, INVALID (recoverable but not the signer) or UNRECOVERABLE

    Raises:
        InvalidAddressFormatError: If the address is malformed
        InvalidSignatureError: If the signature length or recovery byte is
            unsupported. Such input is malformed rather than a signature that
            fails to verify, so it never maps to one of the three outcomes.
    """
    message_hash = personal_message_hash(message)
    expected = normalize_address(address)
    compact, recovery_ids = candidate_recovery_ids(signature, allow_compact)

    recovered_any = False
    for recovery_id in recovery_ids:
        try:
            public_key = recover_public_key(compact, message_hash, recovery_id)
        except ValueError:
            logger.debug("Recovery failed for id %d", recovery_id)
            continue

        recovered_any = True
        if address_to_text(derive_address(public_key)) != expected:
            continue

        if verify_compact(compact, message_hash, public_key):
            return VerificationResult.VALID

        logger.debug("Address matched for id %d but direct verification failed", recovery_id)

    if not recovered_any:
        return VerificationResult.UNRECOVERABLE
    return VerificationResult.INVALID


async def sign_message(signer: RawSigner, message: str, key_name: str) -> SignedMessage:
    """
    Sign a message and attach its recovery id.

    Args:
        signer: Raw signer holding the key
        message: Message text
        key_name: Signer key name

    Returns:
        SignedMessage with a 65-byte recoverable signature

    Raises:
        InvalidSignatureError: If the signer returns a malformed signature
        RecoveryIdNotFoundError: If the signature does not belong to the signer's key
    """
    message_hash = personal_message_hash(message)

    public_key, compact = await gather_or_cancel(
        signer.get_public_key(key_name),
        signer.sign_hash(message_hash, key_name),
    )

    if len(compact) != COMPACT_SIGNATURE_SIZE:
        raise InvalidSignatureError(
            f"Signer returned {len(compact)} bytes, expected {COMPACT_SIGNATURE_SIZE}"
        )

    recovery_id = find_recovery_id(compact, message_hash, public_key)
    logger.debug("Signed message with key %s (recovery id %d)", key_name, recovery_id)

    return SignedMessage(
        message=message,
        signature=encode_recoverable(compact, recovery_id),
        public_key=bytes(public_key),
        address=derive_address(public_key),
        recovery_id=recovery_id,
    )
