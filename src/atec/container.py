"""
Service Container

Builds the object graph (database, Redis, repositories, services) once per
application and tears it down on shutdown.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncEngine

from atec.cache import CacheKeeper, DistributedLocker
from atec.config import Settings
from atec.core.background import BackgroundTaskSupervisor
from atec.core.database import create_engine, create_session_factory
from atec.core.security import EmailCipher, TokenIssuer, load_signing_key
from atec.notifications import BrevoMailer
from atec.repositories import (
    ChildRepository,
    PackageRepository,
    ResultRepository,
    TransactionFactory,
    UserRepository,
)
from atec.services import (
    AuthService,
    ChildService,
    PackageService,
    QuestionnaireService,
    RedisRateLimiter,
    ResultImageRenderer,
    UserService,
)


@dataclass
class Container:
    """Everything a request handler may need."""

    settings: Settings
    engine: AsyncEngine
    redis: redis.Redis
    tasks: BackgroundTaskSupervisor
    rate_limiter: RedisRateLimiter
    auth: AuthService
    packages: PackageService
    questionnaires: QuestionnaireService
    children: ChildService
    users: UserService

    async def warm_up(self) -> None:
        """Open the configured number of idle Redis connections."""
        idle = self.settings.REDIS_MIN_IDLE_CONNS
        if idle:
            await asyncio.gather(*(self.redis.ping() for _ in range(idle)))

    async def close(self) -> None:
        """Drain background work, then release connections."""
        await self.tasks.drain(self.settings.SHUTDOWN_GRACE_SECONDS)
        await self.redis.aclose()
        await self.engine.dispose()


def create_redis(settings: Settings) -> redis.Redis:
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD or None,
        decode_responses=True,
        health_check_interval=settings.REDIS_CONN_MAX_LIFETIME_SECONDS,
    )


def build_container(
    settings: Settings,
    *,
    engine: AsyncEngine | None = None,
    redis_client: redis.Redis | None = None,
    signing_key: bytes | None = None,
    mailer: BrevoMailer | None = None,
) -> Container:
    """Wire the application. Keyword arguments replace the configured resources."""
    engine = engine or create_engine(settings.DATABASE_URL)
    redis_client = redis_client or create_redis(settings)
    signing_key = signing_key or load_signing_key(settings.SIGNING_KEY_PATH)
    mailer = mailer or BrevoMailer.from_settings(settings)

    session_factory = create_session_factory(engine)
    tasks = BackgroundTaskSupervisor()

    locker = DistributedLocker(redis_client, default_expiry=settings.LOCK_EXPIRY_SECONDS)
    cache = CacheKeeper(
        redis_client,
        locker,
        default_ttl=settings.CACHE_PACKAGE_TTL_SECONDS,
        nil_ttl=settings.CACHE_NIL_TTL_SECONDS,
        lock_expiry=settings.LOCK_EXPIRY_SECONDS,
        wait_budget=settings.LOCK_WAIT_BUDGET_SECONDS,
    )

    user_repo = UserRepository(session_factory)
    child_repo = ChildRepository(session_factory)
    result_repo = ResultRepository(session_factory)
    package_repo = PackageRepository(
        session_factory,
        cache,
        package_ttl=settings.CACHE_PACKAGE_TTL_SECONDS,
        all_active_ttl=settings.CACHE_ALL_ACTIVE_PACKAGES_TTL_SECONDS,
    )

    cipher = EmailCipher(signing_key, settings.iv)
    rate_limiter = RedisRateLimiter(redis_client)
    packages = PackageService(package_repo)

    return Container(
        settings=settings,
        engine=engine,
        redis=redis_client,
        tasks=tasks,
        rate_limiter=rate_limiter,
        auth=AuthService(
            users=user_repo,
            transactions=TransactionFactory(session_factory),
            cipher=cipher,
            tokens=TokenIssuer(signing_key),
            mailer=mailer,
            tasks=tasks,
            rate_limiter=rate_limiter,
            signup_token_ttl=timedelta(seconds=settings.SIGNUP_TOKEN_TTL_SECONDS),
            login_token_ttl=timedelta(seconds=settings.LOGIN_TOKEN_TTL_SECONDS),
            change_password_token_ttl=timedelta(
                seconds=settings.CHANGE_PASSWORD_TOKEN_TTL_SECONDS
            ),
            verification_base_url=settings.ACCOUNT_VERIFICATION_BASE_URL,
            reset_password_base_url=settings.RESET_PASSWORD_BASE_URL,
            resend_verification_period=settings.RESEND_VERIFICATION_PERIOD_SECONDS,
        ),
        packages=packages,
        questionnaires=QuestionnaireService(
            packages=packages,
            results=result_repo,
            children=child_repo,
            tasks=tasks,
            renderer=ResultImageRenderer(settings.RESULT_FONT_PATH),
            mark_locked_timeout=settings.MARK_LOCKED_TIMEOUT_SECONDS,
        ),
        children=ChildService(child_repo, result_repo),
        users=UserService(user_repo, cipher),
    )
