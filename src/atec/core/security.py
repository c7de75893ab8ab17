"""
Security Primitives

Deterministic email encryption, password hashing and JWT issuance/validation.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID

import jwt
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from passlib.context import CryptContext

from atec.core.models import Role

TOKEN_ISSUER = "system"
TOKEN_ALGORITHM = "HS256"

SUBJECT_SIGNUP_VERIFICATION = "signup-verification-token"
SUBJECT_LOGIN = "login-token"
SUBJECT_CHANGE_PASSWORD = "change-password"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenError(Exception):
    """Token is malformed, expired, or fails claim checks."""

    pass


class DecryptionError(Exception):
    """Ciphertext could not be decrypted."""

    pass


def load_signing_key(path: Path) -> bytes:
    """Read the signing key file (surrounding whitespace stripped)."""
    return path.read_bytes().strip()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


class EmailCipher:
    """AES-256-CBC with a fixed IV.

    The same plaintext always yields the same ciphertext, which is what lets
    the users table enforce uniqueness and look rows up by encrypted email.
    """

    def __init__(self, key: bytes, iv: bytes):
        if len(iv) != algorithms.AES.block_size // 8:
            raise ValueError(f"IV must be {algorithms.AES.block_size // 8} bytes, got {len(iv)}")
        self._key = hashlib.sha256(key).digest()
        self._iv = iv

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt and hex encode."""
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode()) + padder.finalize()
        encryptor = self._cipher().encryptor()
        return (encryptor.update(padded) + encryptor.finalize()).hex()

    def decrypt(self, ciphertext: str) -> str:
        """Reverse of encrypt."""
        try:
            raw = bytes.fromhex(ciphertext)
            decryptor = self._cipher().decryptor()
            padded = decryptor.update(raw) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            return (unpadder.update(padded) + unpadder.finalize()).decode()
        except ValueError as e:
            raise DecryptionError(f"failed to decrypt value: {e}") from e


@dataclass(frozen=True)
class TokenClaims:
    """Validated claims of an issued token."""

    subject: str
    user_id: UUID
    role: Role | None
    expires_at: datetime


class TokenIssuer:
    """HS256 JWTs with issuer "system", a fixed subject per purpose, and the user id as audience."""

    def __init__(self, signing_key: bytes):
        self._key = signing_key

    def issue(
        self,
        *,
        subject: str,
        user_id: UUID,
        ttl: timedelta,
        role: Role | None = None,
    ) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "iss": TOKEN_ISSUER,
            "sub": subject,
            "aud": [str(user_id)],
            "iat": now,
            "exp": now + ttl,
        }
        if role is not None:
            payload["role"] = role.value
        return jwt.encode(payload, self._key, algorithm=TOKEN_ALGORITHM)

    def validate(self, token: str, *, subject: str) -> TokenClaims:
        """Decode token and check issuer, subject, expiry and audience.

        Raises:
            TokenError: If any check fails
        """
        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[TOKEN_ALGORITHM],
                issuer=TOKEN_ISSUER,
                options={"require": ["exp", "iss", "sub", "aud"], "verify_aud": False},
            )
        except jwt.PyJWTError as e:
            raise TokenError(f"invalid token: {e}") from e

        if payload.get("sub") != subject:
            raise TokenError("invalid token subject")

        audience = payload.get("aud")
        if isinstance(audience, str):
            audience = [audience]
        if not isinstance(audience, list) or len(audience) != 1:
            raise TokenError("token must have exactly one audience")

        try:
            user_id = UUID(audience[0])
        except (TypeError, ValueError) as e:
            raise TokenError("invalid token audience") from e

        role: Role | None = None
        if "role" in payload:
            try:
                role = Role(payload["role"])
            except ValueError as e:
                raise TokenError(f"unknown role: {payload['role']}") from e

        return TokenClaims(
            subject=subject,
            user_id=user_id,
            role=role,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
