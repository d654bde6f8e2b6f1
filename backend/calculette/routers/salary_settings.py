"""Global salary settings API - history, active record and activation."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from calculette.auth.deps import get_current_user, get_user_roles
from calculette.auth.rbac import can_manage_cost_settings
from calculette.database import get_db
from calculette.models.audit import AuditLog
from calculette.models.user import User
from calculette.schemas.salary_settings import (
    ActiveGlobalSalarySettingsResponse,
    GlobalSalarySettingsCreate,
    GlobalSalarySettingsResponse,
    GlobalSalarySettingsUpdate,
)
from calculette.services import salary_settings_service as service

router = APIRouter(prefix="/api/salary-settings", tags=["salary-settings"])


def _require_manager(roles: list[str]) -> None:
    if not can_manage_cost_settings(roles):
        raise HTTPException(status_code=403, detail="Cannot manage salary settings")


def _describe(s) -> str:
    return f"charges={s.employer_charges_rate};indirect={s.indirect_annual_costs};hours={s.billable_hours_per_year}"


@router.get("", response_model=list[GlobalSalarySettingsResponse])
async def list_salary_settings(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    _require_manager(roles)
    return [GlobalSalarySettingsResponse.model_validate(s) for s in await service.list_settings(db)]


@router.get("/active", response_model=ActiveGlobalSalarySettingsResponse)
async def get_active_salary_settings(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    active = await service.get_active_settings(db)
    if not active:
        return ActiveGlobalSalarySettingsResponse(has_active_settings=False)
    return ActiveGlobalSalarySettingsResponse(
        has_active_settings=True,
        settings=GlobalSalarySettingsResponse.model_validate(active),
    )


@router.post("", response_model=GlobalSalarySettingsResponse, status_code=201)
async def create_salary_settings(
    data: GlobalSalarySettingsCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    _require_manager(roles)
    settings = await service.create_settings(db, data)
    db.add(AuditLog(
        user_id=user.id,
        action="create_salary_settings",
        entity_type="global_salary_settings",
        entity_id=settings.id,
        new_value=_describe(settings),
    ))
    return GlobalSalarySettingsResponse.model_validate(settings)


@router.put("/{settings_id}", response_model=GlobalSalarySettingsResponse)
async def update_salary_settings(
    settings_id: int,
    data: GlobalSalarySettingsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    _require_manager(roles)
    settings = await service.update_settings(db, settings_id, data)
    if not settings:
        raise HTTPException(status_code=404, detail="Salary settings not found")
    db.add(AuditLog(
        user_id=user.id,
        action="update_salary_settings",
        entity_type="global_salary_settings",
        entity_id=settings.id,
        new_value=_describe(settings),
    ))
    return GlobalSalarySettingsResponse.model_validate(settings)


@router.post("/{settings_id}/activate", response_model=GlobalSalarySettingsResponse)
async def activate_salary_settings(
    settings_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    _require_manager(roles)
    settings = await service.activate_settings(db, settings_id)
    if not settings:
        raise HTTPException(status_code=404, detail="Salary settings not found")
    db.add(AuditLog(
        user_id=user.id,
        action="activate_salary_settings",
        entity_type="global_salary_settings",
        entity_id=settings.id,
    ))
    return GlobalSalarySettingsResponse.model_validate(settings)


@router.delete("/{settings_id}", status_code=204)
async def delete_salary_settings(
    settings_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    _require_manager(roles)
    try:
        deleted = await service.delete_settings(db, settings_id)
    except service.SalarySettingsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Salary settings not found")
    db.add(AuditLog(
        user_id=user.id,
        action="delete_salary_settings",
        entity_type="global_salary_settings",
        entity_id=settings_id,
    ))
    return None
