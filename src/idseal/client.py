"""
High-level idseal clients.

``IbeClient`` encrypts messages for a recipient identity and decrypts
messages addressed to the authenticated caller. ``SignatureClient`` signs
messages with a named key and verifies signatures against an address.
"""

import asyncio
import logging
from typing import Optional, Union

from .codec import bytes_to_hex, hex_to_bytes
from .concurrency import gather_or_cancel
from .config import IdsealConfig
from .crypto import EncryptedVetKey, IbeCiphertext, IbeIdentity, IbeSeed
from .derivation import KeyDerivationService
from .envelope import decode_envelope, encode_envelope
from .identity import CallerIdentitySource, IdentityProvider
from .keys import DerivedPublicKey, TransportSecretKey
from .models import SignedMessage, VerificationResult
from .signature import sign_message, verify_message
from .signer import RawSigner
from .types import (
    MAX_FINGERPRINT_SIZE,
    DecryptionDeniedError,
    EncryptionError,
    EpochMismatchError,
    FieldTooLargeError,
    KeyFormatError,
    LegacyFormatError,
    RecipientMismatchError,
)


logger = logging.getLogger(__name__)


def _as_bytes(data: Union[bytes, str]) -> bytes:
    if isinstance(data, str):
        return hex_to_bytes(data)
    return bytes(data)


def _seal(key_bytes: bytes, fingerprint: bytes, payload: bytes) -> bytes:
    derived_public_key = DerivedPublicKey.deserialize(key_bytes)
    ciphertext = IbeCiphertext.encrypt(
        derived_public_key,
        IbeIdentity.from_bytes(fingerprint),
        payload,
        IbeSeed.random(),
    )
    return ciphertext.serialize()


def _open(
    key_material: bytes,
    transport_key: TransportSecretKey,
    key_bytes: bytes,
    fingerprint: bytes,
    ciphertext: bytes,
) -> bytes:
    derived_public_key = DerivedPublicKey.deserialize(key_bytes)
    vet_key = EncryptedVetKey(key_material).decrypt_and_verify(
        transport_key, derived_public_key, fingerprint
    )
    return IbeCiphertext.deserialize(ciphertext).decrypt(vet_key)


class IbeClient:
    """
    Identity-bound encryption client.

    Senders encrypt for a recipient identity under the service's derived
    public key; the result is a self-describing envelope. Recipients fetch
    decryption key material bound to their authenticated identity and can
    only open envelopes addressed to that identity and produced in the
    current service epoch.

    Example usage:
        ```python
        client = IbeClient(
            service=key_derivation_service,
            identity=session_identity,
            caller=key_derivation_service,
        )

        envelope = await client.encrypt_for("2vxsx-fae", "meet at 20:00")
        plaintext = await recipient_client.decrypt_text(envelope)
        ```
    """

    def __init__(
        self,
        service: KeyDerivationService,
        identity: IdentityProvider,
        caller: CallerIdentitySource,
        config: Optional[IdsealConfig] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            service: Key-derivation service.
            identity: The locally logged-in identity.
            caller: Source of the caller identity as observed by the service.
            config: Key name and context (default: IdsealConfig()).
        """
        self.service = service
        self.identity = identity
        self.caller = caller
        self.config = config or IdsealConfig()

    # MARK: - Sending

    async def encrypt_for(
        self,
        recipient: Union[str, bytes],
        plaintext: Union[str, bytes],
    ) -> bytes:
        """
        Encrypt a message for a recipient.

        Args:
            recipient: Recipient identity text, or its raw fingerprint.
            plaintext: Message text (UTF-8 encoded) or bytes.

        Returns:
            Envelope bytes.

        Raises:
            EncryptionError: If the plaintext is empty.
            InvalidIdentityError: If the recipient text is malformed.
            KeyFormatError: If the service returns a malformed public key.
            FieldTooLargeError: If the fingerprint does not fit the envelope.
        """
        payload = plaintext.encode("utf-8") if isinstance(plaintext, str) else bytes(plaintext)
        if not payload:
            raise EncryptionError("Plaintext must not be empty")

        if isinstance(recipient, str):
            fingerprint = self.identity.fingerprint_of(recipient)
        else:
            fingerprint = bytes(recipient)
        if len(fingerprint) > MAX_FINGERPRINT_SIZE:
            raise FieldTooLargeError(
                "Recipient fingerprint", len(fingerprint), MAX_FINGERPRINT_SIZE
            )

        key_bytes = await self.service.get_derived_public_key(
            self.config.key_name, self.config.context
        )

        # Pairing work is CPU-bound; keep it off the event loop
        ciphertext = await asyncio.to_thread(_seal, key_bytes, fingerprint, payload)

        logger.debug("Encrypted %d bytes for %s", len(payload), self.identity.describe(fingerprint))
        return encode_envelope(fingerprint, key_bytes, ciphertext)

    async def encrypt_for_hex(
        self,
        recipient: Union[str, bytes],
        plaintext: Union[str, bytes],
    ) -> str:
        """Encrypt a message and return the envelope as hex text."""
        return bytes_to_hex(await self.encrypt_for(recipient, plaintext))

    # MARK: - Receiving

    async def decrypt(self, envelope: Union[bytes, str]) -> bytes:
        """
        Decrypt an envelope addressed to the authenticated caller.

        Args:
            envelope: Envelope bytes or their hex encoding.

        Returns:
            The plaintext bytes.

        Raises:
            InvalidEncodingError: If hex text is malformed.
            InvalidEnvelopeError: If the envelope is truncated.
            LegacyFormatError: If the payload predates the envelope format.
            EpochMismatchError: If the service's derived public key changed.
            RecipientMismatchError: If the caller is not the recipient.
            DecryptionDeniedError: If key material or ciphertext fail to verify.
        """
        decoded = decode_envelope(_as_bytes(envelope))
        if not decoded.packaged:
            raise LegacyFormatError()

        transport_key = TransportSecretKey.random()
        transport_public_key = await asyncio.to_thread(transport_key.public_key_bytes)
        key_name, context = self.config.key_name, self.config.context

        key_material, current_key, observed_caller, local_identity = await gather_or_cancel(
            self.service.get_decryption_key_material(transport_public_key, key_name, context),
            self.service.get_derived_public_key(key_name, context),
            self.caller.service_observed_caller_fingerprint(),
            self.identity.current_identity_fingerprint(),
        )

        if bytes(current_key) != decoded.derived_public_key:
            logger.info("Envelope was encrypted under a different derived public key")
            raise EpochMismatchError()

        if local_identity != observed_caller:
            logger.warning(
                "Session identity %s differs from the caller observed by the service %s",
                self.identity.describe(local_identity),
                self.identity.describe(observed_caller),
            )

        if observed_caller != decoded.recipient_fingerprint:
            raise RecipientMismatchError(
                expected=decoded.recipient_fingerprint,
                actual=observed_caller,
                expected_text=self.identity.describe(decoded.recipient_fingerprint),
                actual_text=self.identity.describe(observed_caller),
            )

        try:
            return await asyncio.to_thread(
                _open,
                key_material,
                transport_key,
                current_key,
                observed_caller,
                decoded.ciphertext,
            )
        except (KeyFormatError, DecryptionDeniedError):
            logger.warning("Decryption denied")
            raise DecryptionDeniedError() from None

    async def decrypt_text(self, envelope: Union[bytes, str]) -> str:
        """
        Decrypt an envelope and decode the plaintext as UTF-8.

        Raises:
            UnicodeDecodeError: If the plaintext is not UTF-8 text.
        """
        return (await self.decrypt(envelope)).decode("utf-8")


class SignatureClient:
    """
    Signs messages with a named key and verifies them by signer address.

    Example usage:
        ```python
        client = SignatureClient(signer=my_signer)

        signed = await client.sign_message("release 1.2.6 is frozen")
        result = client.verify_message(
            "release 1.2.6 is frozen", signed.signature, signed.address_text
        )
        assert result is VerificationResult.VALID
        ```
    """

    def __init__(
        self,
        signer: Optional[RawSigner] = None,
        config: Optional[IdsealConfig] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            signer: Raw signer (only needed for signing).
            config: Signing key name and verification policy.
        """
        self.signer = signer
        self.config = config or IdsealConfig()

    async def sign_message(self, message: str) -> SignedMessage:
        """
        Sign a message with the configured signing key.

        Raises:
            ValueError: If the client has no signer.
            RecoveryIdNotFoundError: If the signer's signature does not match its key.
        """
        if self.signer is None:
            raise ValueError("SignatureClient has no signer")
        return await sign_message(
            self.signer, message, self.config.effective_signing_key_name
        )

    def verify_message(
        self,
        message: str,
        signature: Union[bytes, str],
        address: str,
    ) -> VerificationResult:
        """
        Verify a message signature against the signer's address.

        Args:
            message: The exact signed text.
            signature: Signature bytes or hex text (65 or 64 bytes).
            address: Signer address.

        Returns:
            VerificationResult.
        """
        return verify_message(
            message,
            _as_bytes(signature),
            address,
            allow_compact=self.config.allow_compact_signatures,
        )
