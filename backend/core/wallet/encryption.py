"""
AES-256-CBC encryption for recovery phrases.

Blob layout: salt(16) || iv(16) || ciphertext, stored as base64.
There is no MAC and no version byte; existing records depend on this layout.
"""

import base64
import binascii
import os

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from core.errors import InvalidPassword

# =============================================================================
# CONFIGURATION
# =============================================================================
SALT_SIZE = 16
IV_SIZE = 16
KEY_SIZE = 32
KDF_ITERATIONS = 100_000
HEADER_SIZE = SALT_SIZE + IV_SIZE


def _to_bytes(password: str | bytes) -> bytes:
    return password.encode() if isinstance(password, str) else password


def derive_key(password: str | bytes, salt: bytes) -> bytes:
    """Derive 256-bit key from password using PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(_to_bytes(password))


def encrypt_blob(plaintext: str, password: str | bytes) -> bytes:
    """
    Encrypt plaintext with password.

    A fresh salt and IV are drawn on every call, so encrypting the same
    input twice never yields the same blob.

    Returns:
        salt || iv || ciphertext
    """
    salt = os.urandom(SALT_SIZE)
    iv = os.urandom(IV_SIZE)
    key = derive_key(password, salt)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode()) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return salt + iv + ciphertext


def decrypt_blob(blob: bytes, password: str | bytes) -> str:
    """
    Decrypt a salt || iv || ciphertext blob.

    Raises:
        InvalidPassword: Wrong password, or a short, misaligned or corrupted blob
    """
    if len(blob) < HEADER_SIZE:
        raise InvalidPassword()

    salt = blob[:SALT_SIZE]
    iv = blob[SALT_SIZE:HEADER_SIZE]
    ciphertext = blob[HEADER_SIZE:]
    key = derive_key(password, salt)

    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode()
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidPassword() from e


def encrypt_mnemonic(mnemonic: str, password: str | bytes) -> str:
    """Encrypt a recovery phrase, returning the base64 blob for storage."""
    return base64.b64encode(encrypt_blob(mnemonic, password)).decode()


def decrypt_mnemonic(encrypted_b64: str, password: str | bytes) -> str:
    """
    Decrypt a base64 blob produced by encrypt_mnemonic.

    Raises:
        InvalidPassword: If password is incorrect or the blob is not decodable
    """
    try:
        blob = base64.b64decode(encrypted_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidPassword() from e
    return decrypt_blob(blob, password)
