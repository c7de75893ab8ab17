"""
Package API Endpoints

Admin authoring of ATEC questionnaire packages.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import APIRouter, Depends

from atec.api.deps import get_optional_principal, get_package_service
from atec.core.auth_context import Principal
from atec.core.schemas import (
    ActivePackage,
    MessageData,
    PackageActivation,
    PackageCreate,
    PackageCreated,
    PackageRecord,
    PackageUpdate,
    SuccessResponse,
)
from atec.services import PackageService

router = APIRouter()


@router.post("", response_model=SuccessResponse[PackageCreated])
async def create_package(
    data: PackageCreate,
    principal: Principal | None = Depends(get_optional_principal),
    packages: PackageService = Depends(get_package_service),
) -> SuccessResponse[PackageCreated]:
    package = await packages.create(principal, data)
    return SuccessResponse(data=PackageCreated(id=package.id))


@router.get("/active", response_model=SuccessResponse[list[ActivePackage]])
async def list_active_packages(
    packages: PackageService = Depends(get_package_service),
) -> SuccessResponse[list[ActivePackage]]:
    """Packages currently offered to respondents."""
    return SuccessResponse(data=await packages.find_active())


@router.put("/{package_id}", response_model=SuccessResponse[PackageRecord])
async def update_package(
    package_id: UUID,
    data: PackageUpdate,
    principal: Principal | None = Depends(get_optional_principal),
    packages: PackageService = Depends(get_package_service),
) -> SuccessResponse[PackageRecord]:
    """Replace package content. Refused once the package is locked."""
    return SuccessResponse(data=await packages.update(principal, package_id, data))


@router.patch("/{package_id}", response_model=SuccessResponse[PackageRecord])
async def change_package_activation(
    package_id: UUID,
    data: PackageActivation,
    principal: Principal | None = Depends(get_optional_principal),
    packages: PackageService = Depends(get_package_service),
) -> SuccessResponse[PackageRecord]:
    return SuccessResponse(
        data=await packages.change_active_status(principal, package_id, data.is_active)
    )


@router.delete("/{package_id}", response_model=SuccessResponse[MessageData])
async def delete_package(
    package_id: UUID,
    principal: Principal | None = Depends(get_optional_principal),
    packages: PackageService = Depends(get_package_service),
) -> SuccessResponse[MessageData]:
    await packages.delete(principal, package_id)
    return SuccessResponse(data=MessageData(message="package deleted"))
