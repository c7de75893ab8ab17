"""
Auth Service

Account sign-up and verification, login, password reset, and validation of
access tokens into a Principal.
"""

from __future__ import annotations

import logging
from datetime import timedelta

import httpx

from atec.core.auth_context import Principal
from atec.core.background import BackgroundTaskSupervisor
from atec.core.errors import UsecaseError
from atec.core.schemas import (
    InitResetPasswordRequest,
    LoginRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SignupRequest,
    UserCreate,
    UserRecord,
)
from atec.core.security import (
    SUBJECT_CHANGE_PASSWORD,
    SUBJECT_LOGIN,
    SUBJECT_SIGNUP_VERIFICATION,
    EmailCipher,
    TokenError,
    TokenIssuer,
    hash_password,
    verify_password,
)
from atec.notifications import BrevoMailer
from atec.repositories import NotFoundError, RepositoryError, TransactionFactory, UserRepository

from .errors import usecase_error_from
from .rate_limiter import RedisRateLimiter

logger = logging.getLogger(__name__)

MAIL_TIMEOUT_SECONDS = 30.0

EMAIL_TAKEN_MESSAGE = "email is already registered"
INVALID_CREDENTIALS_MESSAGE = "invalid email or password"


class AuthService:
    """Account lifecycle and token handling."""

    def __init__(
        self,
        *,
        users: UserRepository,
        transactions: TransactionFactory,
        cipher: EmailCipher,
        tokens: TokenIssuer,
        mailer: BrevoMailer,
        tasks: BackgroundTaskSupervisor,
        rate_limiter: RedisRateLimiter,
        signup_token_ttl: timedelta,
        login_token_ttl: timedelta,
        change_password_token_ttl: timedelta,
        verification_base_url: str,
        reset_password_base_url: str,
        resend_verification_period: int,
    ):
        self.users = users
        self.transactions = transactions
        self.cipher = cipher
        self.tokens = tokens
        self.mailer = mailer
        self.tasks = tasks
        self.rate_limiter = rate_limiter
        self.signup_token_ttl = signup_token_ttl
        self.login_token_ttl = login_token_ttl
        self.change_password_token_ttl = change_password_token_ttl
        self.verification_base_url = verification_base_url
        self.reset_password_base_url = reset_password_base_url
        self.resend_verification_period = resend_verification_period

    # ========================================================================
    # SIGN-UP & VERIFICATION
    # ========================================================================

    async def signup(self, data: SignupRequest) -> UserRecord:
        """Register an inactive account and mail its verification link.

        The mail goes out after the account is committed; a delivery failure is
        logged and the user can ask for the link again.
        """
        email = self._normalize(data.email)
        encrypted = self.cipher.encrypt(email)

        if await self._find_by_email(encrypted) is not None:
            raise UsecaseError.bad_request(EMAIL_TAKEN_MESSAGE)

        async with self.transactions.begin() as tx:
            try:
                user = await self.users.create(
                    UserCreate(
                        email=encrypted,
                        password=hash_password(data.password),
                        username=data.username,
                    ),
                    tx=tx,
                )
                token = self.tokens.issue(
                    subject=SUBJECT_SIGNUP_VERIFICATION,
                    user_id=user.id,
                    ttl=self.signup_token_ttl,
                )
                await tx.commit()
            except RepositoryError as e:
                raise usecase_error_from(e, conflict=EMAIL_TAKEN_MESSAGE) from e

        logger.info(f"User {user.id} signed up")
        self._send_verification_mail(email, user, token)
        return user

    async def resend_verification(self, data: ResendVerificationRequest) -> None:
        email = self._normalize(data.email)
        encrypted = self.cipher.encrypt(email)

        decision = await self.rate_limiter.reserve(
            "resend-verification",
            encrypted,
            limit=1,
            period=self.resend_verification_period,
        )
        if not decision.allowed:
            raise UsecaseError.too_many_requests(
                f"please wait {decision.retry_after} seconds before requesting another mail"
            )

        user = await self._find_by_email(encrypted)
        if user is None:
            raise UsecaseError.not_found("account not found")
        if user.is_active:
            raise UsecaseError.bad_request("account is already verified")

        token = self.tokens.issue(
            subject=SUBJECT_SIGNUP_VERIFICATION, user_id=user.id, ttl=self.signup_token_ttl
        )
        self._send_verification_mail(email, user, token)

    async def verify(self, validation_token: str) -> None:
        """Activate the account addressed by a sign-up verification token."""
        try:
            claims = self.tokens.validate(validation_token, subject=SUBJECT_SIGNUP_VERIFICATION)
        except TokenError as e:
            raise UsecaseError.bad_request("invalid or expired verification token") from e

        try:
            user = await self.users.find_by_id(claims.user_id)
            if user.is_active:
                return
            await self.users.update(user.id, {"is_active": True})
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="account not found") from e

        logger.info(f"User {user.id} verified")

    # ========================================================================
    # LOGIN
    # ========================================================================

    async def login(self, data: LoginRequest) -> str:
        """Check credentials and issue an access token carrying the user's role."""
        user = await self._find_by_email(self.cipher.encrypt(self._normalize(data.email)))
        if user is None or not verify_password(data.password, user.password):
            raise UsecaseError.unauthorized(INVALID_CREDENTIALS_MESSAGE)

        if not user.is_active:
            raise UsecaseError.forbidden("account is not verified yet")

        return self.tokens.issue(
            subject=SUBJECT_LOGIN, user_id=user.id, ttl=self.login_token_ttl, role=user.role
        )

    def authenticate_access_token(self, token: str) -> Principal:
        """Principal from a login token.

        Raises:
            UsecaseError: Unauthorized if the token is invalid
        """
        try:
            claims = self.tokens.validate(token, subject=SUBJECT_LOGIN)
        except TokenError as e:
            raise UsecaseError.unauthorized("invalid access token") from e

        if claims.role is None:
            raise UsecaseError.unauthorized("invalid access token")

        return Principal(user_id=claims.user_id, role=claims.role)

    # ========================================================================
    # PASSWORD RESET
    # ========================================================================

    async def init_reset_password(self, data: InitResetPasswordRequest) -> None:
        """Mail a password reset link; unknown addresses are silently ignored."""
        email = self._normalize(data.email)
        user = await self._find_by_email(self.cipher.encrypt(email))
        if user is None:
            logger.info("Password reset requested for unknown account")
            return

        token = self.tokens.issue(
            subject=SUBJECT_CHANGE_PASSWORD, user_id=user.id, ttl=self.change_password_token_ttl
        )
        link = str(httpx.URL(self.reset_password_base_url, params={"token": token}))

        self.tasks.spawn(
            lambda: self.mailer.send_reset_password(
                to_email=email, username=user.username, link=link
            ),
            name=f"reset-password-mail-{user.id}",
            timeout=MAIL_TIMEOUT_SECONDS,
        )

    async def reset_password(self, data: ResetPasswordRequest) -> None:
        try:
            claims = self.tokens.validate(data.token, subject=SUBJECT_CHANGE_PASSWORD)
        except TokenError as e:
            raise UsecaseError.bad_request("invalid or expired reset token") from e

        try:
            await self.users.update(claims.user_id, {"password": hash_password(data.new_password)})
        except RepositoryError as e:
            raise usecase_error_from(e, not_found="account not found") from e

        logger.info(f"User {claims.user_id} changed password")

    # ========================================================================
    # HELPERS
    # ========================================================================

    @staticmethod
    def _normalize(email: str) -> str:
        return email.strip().lower()

    async def _find_by_email(self, encrypted: str) -> UserRecord | None:
        try:
            return await self.users.find_by_email(encrypted)
        except NotFoundError:
            return None
        except RepositoryError as e:
            raise usecase_error_from(e) from e

    def _send_verification_mail(self, email: str, user: UserRecord, token: str) -> None:
        link = str(httpx.URL(self.verification_base_url, params={"validation_token": token}))
        self.tasks.spawn(
            lambda: self.mailer.send_account_verification(
                to_email=email, username=user.username, link=link
            ),
            name=f"verification-mail-{user.id}",
            timeout=MAIL_TIMEOUT_SECONDS,
        )
