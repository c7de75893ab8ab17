"""
Tests for the Child Service

Ownership rules and score statistics with mocked repositories.
"""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from atec.core.auth_context import Principal
from atec.core.errors import ErrorKind, UsecaseError
from atec.core.models import Role
from atec.core.schemas import ChildRecord, ChildSearch, ChildUpdate, ResultRecord
from atec.repositories import NotFoundError
from atec.services import ChildService
from atec.services.children import STATISTIC_BATCH_SIZE

PARENT = Principal(user_id=uuid4(), role=Role.PARENT)
STRANGER = Principal(user_id=uuid4(), role=Role.PARENT)
THERAPIST = Principal(user_id=uuid4(), role=Role.THERAPIST)
ADMIN = Principal(user_id=uuid4(), role=Role.ADMIN)


def make_child() -> ChildRecord:
    now = datetime.now(UTC)
    return ChildRecord(
        id=uuid4(),
        parent_user_id=PARENT.user_id,
        name="Kid",
        date_of_birth=date(2019, 6, 1),
        gender=False,
        created_at=now,
        updated_at=now,
    )


def make_result(child_id, grade: int, at: datetime) -> ResultRecord:
    return ResultRecord(
        id=uuid4(),
        package_id=uuid4(),
        child_id=child_id,
        created_by=PARENT.user_id,
        answer={0: {0: 0}},
        result={0: {"name": "Speech", "grade": grade}, 1: {"name": "Social", "grade": 1}},
        created_at=at,
        updated_at=at,
    )


@pytest.fixture
def children() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def results() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(children, results) -> ChildService:
    return ChildService(children, results)


class TestUpdate:
    """Test child updates."""

    async def test_parent_updates_only_sent_fields(self, service, children):
        child = make_child()
        children.find_by_id.return_value = child
        children.update.return_value = child

        await service.update(PARENT, child.id, ChildUpdate(name="New Name"))

        children.update.assert_awaited_once_with(child.id, {"name": "New Name"})

    async def test_other_parent_forbidden(self, service, children):
        children.find_by_id.return_value = make_child()

        with pytest.raises(UsecaseError) as exc_info:
            await service.update(STRANGER, uuid4(), ChildUpdate(name="x"))

        assert exc_info.value.kind is ErrorKind.FORBIDDEN

    async def test_empty_update_rejected(self, service, children):
        children.find_by_id.return_value = make_child()

        with pytest.raises(UsecaseError) as exc_info:
            await service.update(PARENT, uuid4(), ChildUpdate())

        assert exc_info.value.kind is ErrorKind.BAD_REQUEST


class TestStatistics:
    """Test score history."""

    async def test_totals_in_order(self, service, children, results):
        child = make_child()
        children.find_by_id.return_value = child
        start = datetime(2024, 1, 1, tzinfo=UTC)
        results.find_by_child.return_value = [
            make_result(child.id, 3, start),
            make_result(child.id, 5, start + timedelta(days=30)),
        ]

        stats = await service.statistics(PARENT, child.id)

        assert [s.total for s in stats] == [4, 6]
        assert stats[0].created_at < stats[1].created_at

    async def test_pages_through_all_results(self, service, children, results):
        child = make_child()
        children.find_by_id.return_value = child
        now = datetime.now(UTC)
        full_batch = [make_result(child.id, 0, now) for _ in range(STATISTIC_BATCH_SIZE)]
        results.find_by_child.side_effect = [full_batch, NotFoundError("no results found")]

        stats = await service.statistics(THERAPIST, child.id)

        assert len(stats) == STATISTIC_BATCH_SIZE
        assert results.find_by_child.await_args.args == (child.id, STATISTIC_BATCH_SIZE, STATISTIC_BATCH_SIZE)

    async def test_stranger_forbidden(self, service, children):
        children.find_by_id.return_value = make_child()

        with pytest.raises(UsecaseError) as exc_info:
            await service.statistics(STRANGER, uuid4())

        assert exc_info.value.kind is ErrorKind.FORBIDDEN

    async def test_no_results(self, service, children, results):
        children.find_by_id.return_value = make_child()
        results.find_by_child.side_effect = NotFoundError("no results found")

        with pytest.raises(UsecaseError) as exc_info:
            await service.statistics(ADMIN, uuid4())

        assert exc_info.value.kind is ErrorKind.NOT_FOUND


class TestListing:
    """Test listing and search."""

    async def test_search_admin_only(self, service):
        with pytest.raises(UsecaseError) as exc_info:
            await service.search(THERAPIST, ChildSearch())

        assert exc_info.value.kind is ErrorKind.FORBIDDEN

    async def test_list_mine_empty(self, service, children):
        children.find_by_parent.side_effect = NotFoundError("no children found")

        with pytest.raises(UsecaseError) as exc_info:
            await service.list_mine(PARENT, 20, 0)

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.message == "you have no registered children"
