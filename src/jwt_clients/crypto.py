"""
Symmetric encryption and access-token signing primitives.

Payloads are serialised to compact JSON and encrypted with AES-256 in CTR
mode.  The key is the SHA-256 digest of the caller's secret and a fresh
16-byte initialisation vector is drawn for every call, so encrypting the same
value twice never yields the same ciphertext.  The wire format is::

    base64(iv || ciphertext)

which is what the datastore and submitter services already store, so
existing records decrypt unchanged.

CTR mode carries no authentication tag.  A wrong key is detected because the
recovered bytes are not valid UTF-8 JSON, and that is reported as
:class:`InvalidPayloadError` without exposing any of the recovered bytes.

Access tokens are HS256 JSON Web Tokens.  ``iat`` is stamped here at signing
time and nowhere else.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
import time
from typing import Any, Dict, Optional

import jwt
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


ALGORITHM = "HS256"
IV_LENGTH = 16


class InvalidPayloadError(ValueError):
    """Raised when ciphertext cannot be decrypted into a JSON value."""


def _cipher(key: str, iv: bytes) -> Cipher:
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return Cipher(algorithms.AES(digest), modes.CTR(iv))


def encrypt(key: str, data: Any) -> str:
    """Encrypt a JSON-serialisable value under ``key``."""
    plaintext = json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    iv = os.urandom(IV_LENGTH)
    encryptor = _cipher(key, iv).encryptor()
    ciphertext = encryptor.update(plaintext) + encryptor.finalize()
    return base64.b64encode(iv + ciphertext).decode("ascii")


def decrypt(key: str, ciphertext: str) -> Any:
    """Decrypt ``ciphertext`` produced by :func:`encrypt` and parse the JSON.

    Raises :class:`InvalidPayloadError` if the input is not valid base64, is
    too short to hold an IV and at least one byte, or does not decrypt to
    valid JSON under ``key``.
    """
    try:
        raw = base64.b64decode(ciphertext)
    except (binascii.Error, TypeError, ValueError):
        raise InvalidPayloadError("Payload is not valid base64") from None
    if len(raw) <= IV_LENGTH:
        raise InvalidPayloadError("Payload is too short")
    decryptor = _cipher(key, raw[:IV_LENGTH]).decryptor()
    plaintext = decryptor.update(raw[IV_LENGTH:]) + decryptor.finalize()
    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise InvalidPayloadError("Payload did not decrypt to JSON") from None


def sign_token(claims: Optional[Dict[str, Any]], key: str) -> str:
    """Sign ``claims`` merged with the current ``iat`` using HS256."""
    body: Dict[str, Any] = dict(claims or {})
    body["iat"] = int(time.time())
    return jwt.encode(body, key, algorithm=ALGORITHM)


__all__ = ["ALGORITHM", "InvalidPayloadError", "decrypt", "encrypt", "sign_token"]
