"""
User Service
"""

from __future__ import annotations

from atec.core.auth_context import Principal, require_principal
from atec.core.errors import UsecaseError
from atec.core.schemas import UserProfile
from atec.core.security import DecryptionError, EmailCipher
from atec.repositories import RepositoryError, UserRepository

from .errors import usecase_error_from


class UserService:
    """Account profile reads."""

    def __init__(self, users: UserRepository, cipher: EmailCipher):
        self.users = users
        self.cipher = cipher

    async def profile(self, requester: Principal | None) -> UserProfile:
        """The requester's own profile with the email decrypted."""
        principal = require_principal(requester)

        try:
            user = await self.users.find_by_id(principal.user_id)
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="account not found") from e

        try:
            email = self.cipher.decrypt(user.email)
        except DecryptionError as e:
            raise UsecaseError.internal() from e

        return UserProfile(
            id=user.id,
            email=email,
            username=user.username,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at,
        )
