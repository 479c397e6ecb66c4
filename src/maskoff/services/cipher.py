"""Symmetric encryption of chat messages at rest.

Messages are encrypted with AES-256-CBC under a key derived from the
configured ``CHAT_SECRET_KEY``. Every write uses a fresh random IV, and the
``iv || ciphertext`` pair is authenticated with HMAC-SHA256 (encrypt-then-MAC)
so tampered or foreign ciphertext is rejected before it is ever unpadded.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from maskoff.core.settings import settings

KEY_LENGTH_BYTES = 32
IV_LENGTH_BYTES = 16
BLOCK_LENGTH_BYTES = algorithms.AES.block_size // 8
MAC_KEY_CONTEXT = "maskoff-chat-mac|"


class DecryptionError(ValueError):
    """Raised when a stored message cannot be decrypted.

    Covers malformed or truncated input, a tag mismatch (tampering or a
    different key) and plaintext that is not valid UTF-8.
    """


@dataclass(frozen=True)
class EncryptedPayload:
    """Ciphertext together with the values needed to decrypt it."""

    ciphertext: bytes
    iv: bytes
    mac: bytes


def derive_key(secret: str) -> bytes:
    """Derive a 32-byte key from a shared secret via SHA-256."""
    return hashlib.sha256(secret.encode("utf-8")).digest()


class MessageCipher:
    """AES-256-CBC message cipher with an HMAC-SHA256 integrity tag."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Chat encryption secret must not be empty")
        self._key = derive_key(secret)
        self._mac_key = derive_key(MAC_KEY_CONTEXT + secret)

    def encrypt(self, plaintext: str) -> EncryptedPayload:
        """Encrypt ``plaintext`` under a freshly generated IV.

        Args:
            plaintext: Message body

        Returns:
            EncryptedPayload; the caller must persist all three fields together
        """
        iv = os.urandom(IV_LENGTH_BYTES)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return EncryptedPayload(ciphertext=ciphertext, iv=iv, mac=self._sign(iv, ciphertext))

    def decrypt(self, ciphertext: bytes, iv: bytes, mac: bytes) -> str:
        """Verify and decrypt a stored message.

        Args:
            ciphertext: AES-CBC output
            iv: Initialization vector used for this ciphertext
            mac: HMAC-SHA256 tag over ``iv || ciphertext``

        Returns:
            The plaintext message body

        Raises:
            DecryptionError: If the payload is malformed, was tampered with,
                was produced under a different key or is not UTF-8
        """
        if len(iv) != IV_LENGTH_BYTES:
            raise DecryptionError(f"Initialization vector must be {IV_LENGTH_BYTES} bytes")
        if not ciphertext or len(ciphertext) % BLOCK_LENGTH_BYTES:
            raise DecryptionError("Ciphertext is truncated or malformed")

        self._verify(iv, ciphertext, mac)

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            data = unpadder.update(padded) + unpadder.finalize()
        except ValueError as err:
            raise DecryptionError("Invalid padding") from err

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecryptionError("Decrypted message is not valid UTF-8") from err

    def _sign(self, iv: bytes, ciphertext: bytes) -> bytes:
        tag = hmac.HMAC(self._mac_key, hashes.SHA256())
        tag.update(iv)
        tag.update(ciphertext)
        return tag.finalize()

    def _verify(self, iv: bytes, ciphertext: bytes, mac: bytes) -> None:
        tag = hmac.HMAC(self._mac_key, hashes.SHA256())
        tag.update(iv)
        tag.update(ciphertext)
        try:
            tag.verify(mac)
        except InvalidSignature as err:
            raise DecryptionError("Message authentication failed") from err


def get_message_cipher() -> MessageCipher:
    """Return a cipher keyed from the configured chat secret."""
    return MessageCipher(settings.chat_secret_key)
