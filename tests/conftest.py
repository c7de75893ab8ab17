"""
Pytest Configuration and Fixtures

Shared test fixtures for unit, integration and API tests.

Integration and API tests run against a throwaway SQLite database (aiosqlite)
and an in-process Redis (fakeredis), wired through the real service container.
"""

from collections.abc import Callable
from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock

import fakeredis
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from atec.config import Settings
from atec.container import Container, build_container
from atec.core.auth_context import Principal
from atec.core.database import create_engine, create_session_factory
from atec.core.models import Base, Role
from atec.core.schemas import PackageCreate, UserCreate, UserRecord
from atec.core.security import SUBJECT_LOGIN, EmailCipher, TokenIssuer, hash_password
from atec.core.template import ATEC_TEMPLATE
from atec.notifications import BrevoMailer
from atec.repositories import UserRepository

SIGNING_KEY = b"test-signing-key-0123456789abcdef"
IV = bytes.fromhex("00112233445566778899aabbccddeeff")
DEFAULT_PASSWORD = "correct-horse-battery"


def build_package_payload(name: str = "ATEC Test Package") -> dict[str, Any]:
    """A package body that passes every authoring rule.

    Option ids equal option scores, so choosing option k everywhere scores
    k per question.
    """
    questionnaire = {}
    for subtest_id, template in ATEC_TEMPLATE.items():
        questionnaire[str(subtest_id)] = {
            "custom_name": template.name,
            "questions": [f"{template.name} question {i + 1}" for i in range(template.question_count)],
            "options": [
                {"id": score, "description": f"option {score}", "score": score}
                for score in range(template.option_count)
            ],
        }

    return {
        "name": name,
        "questionnaire": questionnaire,
        "indication_categories": [
            {"minimum_score": 0, "maximum_score": 30, "name": "mild", "detail": "mild symptoms"},
            {
                "minimum_score": 31,
                "maximum_score": 50,
                "name": "moderate",
                "detail": "moderate symptoms",
            },
            {
                "minimum_score": 51,
                "maximum_score": 179,
                "name": "severe",
                "detail": "severe symptoms",
            },
        ],
        "image_result_attribute_key": {
            "title": "ATEC Result",
            "total": "Total",
            "indication": "Indication",
            "result_id": "Result ID",
            "submitted_at": "Submitted At",
        },
    }


def build_answer_sheet(option_id: int = 0) -> dict[str, dict[str, int]]:
    """Answers choosing option_id for every question of every subtest."""
    return {
        str(subtest_id): {str(q): option_id for q in range(template.question_count)}
        for subtest_id, template in ATEC_TEMPLATE.items()
    }


# ============================================================================
# Plain data fixtures
# ============================================================================


@pytest.fixture
def package_payload() -> dict[str, Any]:
    """Fresh valid package body (safe to mutate)."""
    return build_package_payload()


@pytest.fixture
def package_create(package_payload) -> PackageCreate:
    return PackageCreate.model_validate(package_payload)


@pytest.fixture
def answer_sheet() -> Callable[[int], dict[str, dict[str, int]]]:
    """Factory for complete answer sheets."""
    return build_answer_sheet


@pytest.fixture
def cipher() -> EmailCipher:
    return EmailCipher(SIGNING_KEY, IV)


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(SIGNING_KEY)


# ============================================================================
# Infrastructure fixtures
# ============================================================================


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a per-test SQLite file."""
    return Settings(
        ENVIRONMENT="local",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'atec.db'}",
        IV_KEY=IV.hex(),
        REDIS_MIN_IDLE_CONNS=0,
        LOCK_WAIT_BUDGET_SECONDS=2.0,
        SHUTDOWN_GRACE_SECONDS=5,
        MAIL_ENABLED=False,
    )


@pytest.fixture
async def async_engine(test_settings):
    """Create async engine with all tables."""
    engine = create_engine(test_settings.DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(async_engine)


@pytest.fixture
async def redis_client():
    """Isolated in-memory Redis."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def mailer() -> AsyncMock:
    return AsyncMock(spec=BrevoMailer)


@pytest.fixture
async def container(test_settings, async_engine, redis_client, mailer) -> Container:
    """Fully wired services over the test database and Redis."""
    services = build_container(
        test_settings,
        engine=async_engine,
        redis_client=redis_client,
        signing_key=SIGNING_KEY,
        mailer=mailer,
    )
    yield services
    await services.tasks.drain(5)


# ============================================================================
# Account fixtures
# ============================================================================


@pytest.fixture
def create_user(session_factory, cipher):
    """Factory inserting an account directly."""
    users = UserRepository(session_factory)
    counter = {"n": 0}

    async def _create(
        role: Role = Role.PARENT,
        *,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
        username: str | None = None,
    ) -> UserRecord:
        counter["n"] += 1
        email = email or f"{role.value}{counter['n']}@example.com"
        return await users.create(
            UserCreate(
                email=cipher.encrypt(email),
                password=hash_password(password),
                username=username or f"{role.value}{counter['n']}",
                role=role,
                is_active=is_active,
            )
        )

    return _create


@pytest.fixture
async def admin_user(create_user) -> UserRecord:
    return await create_user(Role.ADMIN)


@pytest.fixture
async def parent_user(create_user) -> UserRecord:
    return await create_user(Role.PARENT)


@pytest.fixture
def admin_principal(admin_user) -> Principal:
    return Principal(user_id=admin_user.id, role=Role.ADMIN)


@pytest.fixture
def parent_principal(parent_user) -> Principal:
    return Principal(user_id=parent_user.id, role=Role.PARENT)


@pytest.fixture
def auth_header(token_issuer):
    """Factory building the Authorization header for an account."""

    def _header(user: UserRecord) -> dict[str, str]:
        token = token_issuer.issue(
            subject=SUBJECT_LOGIN, user_id=user.id, ttl=timedelta(hours=1), role=user.role
        )
        return {"Authorization": token}

    return _header


@pytest.fixture
async def active_package(container, admin_principal, package_create):
    """An active, still unlocked package."""
    package = await container.packages.create(admin_principal, package_create)
    return await container.packages.change_active_status(admin_principal, package.id, True)
