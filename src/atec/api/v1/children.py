"""
Children API Endpoints

Child registration, listing, admin search and score statistics.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from atec.api.deps import get_child_service, get_principal
from atec.core.auth_context import Principal
from atec.core.schemas import (
    ChildCreate,
    ChildRecord,
    ChildSearch,
    ChildStatistic,
    ChildUpdate,
    ChildWithParent,
    SuccessResponse,
)
from atec.services import ChildService

router = APIRouter()


@router.post("", response_model=SuccessResponse[ChildRecord])
async def register_child(
    data: ChildCreate,
    principal: Principal = Depends(get_principal),
    children: ChildService = Depends(get_child_service),
) -> SuccessResponse[ChildRecord]:
    return SuccessResponse(data=await children.register(principal, data))


@router.put("/{child_id}", response_model=SuccessResponse[ChildRecord])
async def update_child(
    child_id: UUID,
    data: ChildUpdate,
    principal: Principal = Depends(get_principal),
    children: ChildService = Depends(get_child_service),
) -> SuccessResponse[ChildRecord]:
    return SuccessResponse(data=await children.update(principal, child_id, data))


@router.get("", response_model=SuccessResponse[list[ChildWithParent]])
async def list_my_children(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    children: ChildService = Depends(get_child_service),
) -> SuccessResponse[list[ChildWithParent]]:
    return SuccessResponse(data=await children.list_mine(principal, limit, offset))


@router.get("/search", response_model=SuccessResponse[list[ChildRecord]])
async def search_children(
    parent_user_id: UUID | None = None,
    name: str | None = None,
    gender: bool | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    children: ChildService = Depends(get_child_service),
) -> SuccessResponse[list[ChildRecord]]:
    """Admin search over all children."""
    criteria = ChildSearch(
        parent_user_id=parent_user_id, name=name, gender=gender, limit=limit, offset=offset
    )
    return SuccessResponse(data=await children.search(principal, criteria))


@router.get("/{child_id}/stats", response_model=SuccessResponse[list[ChildStatistic]])
async def child_statistics(
    child_id: UUID,
    principal: Principal = Depends(get_principal),
    children: ChildService = Depends(get_child_service),
) -> SuccessResponse[list[ChildStatistic]]:
    """Score history of a child (parent, admin or therapist)."""
    return SuccessResponse(data=await children.statistics(principal, child_id))
