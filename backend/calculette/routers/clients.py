"""Client API routes - identity, commercial configuration and batch import."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from calculette.auth.deps import get_current_user, get_user_roles
from calculette.auth.rbac import can_manage_clients, can_manage_cost_settings, can_view_financials
from calculette.config import get_settings
from calculette.database import get_db
from calculette.engine.types import ClientCommercialConfig
from calculette.models.audit import AuditLog
from calculette.models.client import Client
from calculette.models.user import User
from calculette.schemas.client import ClientCreate, ClientResponse, ClientUpdate, CommercialConfigUpdate
from calculette.schemas.imports import ImportResult, ImportRowError
from calculette.services.client_service import (
    apply_commercial_config,
    client_to_response,
    merge_commercial_config,
    threshold_error,
)
from calculette.services.commercial_config_import import parse_commercial_config_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])


def _config_summary(config: ClientCommercialConfig) -> str:
    return (
        f"target={config.target_margin_percent};min={config.minimum_margin_percent};"
        f"discount={config.discount_percent};vacation={config.forced_vacation_days_per_year};"
        f"rate={config.target_hourly_rate}"
    )


async def _get_client(db: AsyncSession, client_id: int) -> Client:
    client = await db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
    search: str | None = Query(None),
    incomplete_only: bool = Query(False),
    include_inactive: bool = Query(False),
):
    q = select(Client).order_by(Client.name)
    if search:
        q = q.where(or_(Client.name.ilike(f"%{search}%"), Client.code.ilike(f"%{search}%")))
    if not include_inactive:
        q = q.where(Client.is_active.is_(True))
    result = await db.execute(q)
    show_financials = can_view_financials(roles)
    items = [client_to_response(c, show_financials) for c in result.scalars().all()]
    if incomplete_only:
        items = [c for c in items if not c.is_financial_config_complete]
    return items


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    client = await _get_client(db, client_id)
    return client_to_response(client, can_view_financials(roles))


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    if not can_manage_clients(roles):
        raise HTTPException(status_code=403, detail="Cannot create client")
    existing = await db.execute(select(Client).where(Client.code == data.code))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Client code already exists")
    client = Client(**data.model_dump())
    db.add(client)
    await db.flush()
    db.add(AuditLog(
        user_id=user.id,
        action="create_client",
        entity_type="client",
        entity_id=client.id,
        new_value=client.code,
    ))
    await db.refresh(client)
    return client_to_response(client, can_view_financials(roles))


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    if not can_manage_clients(roles):
        raise HTTPException(status_code=403, detail="Cannot edit client")
    client = await _get_client(db, client_id)
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(client, k, v)
    await db.flush()
    await db.refresh(client)
    return client_to_response(client, can_view_financials(roles))


@router.put("/{client_id}/commercial-config", response_model=ClientResponse)
async def update_commercial_config(
    client_id: int,
    data: CommercialConfigUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    if not can_manage_cost_settings(roles):
        raise HTTPException(status_code=403, detail="Only Admin/CFO can edit commercial parameters")
    client = await _get_client(db, client_id)
    old_value = _config_summary(client.commercial_config())
    config = ClientCommercialConfig(**data.model_dump())
    apply_commercial_config(client, config)
    await db.flush()
    db.add(AuditLog(
        user_id=user.id,
        action="update_commercial_config",
        entity_type="client",
        entity_id=client.id,
        old_value=old_value,
        new_value=_config_summary(config),
    ))
    await db.refresh(client)
    logger.info("Commercial configuration of client %s updated (complete=%s)", client.code, config.is_complete)
    return client_to_response(client, True)


@router.post("/commercial-config/import", response_model=ImportResult)
async def import_commercial_config(
    file: Annotated[UploadFile, File()],
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    """Upload CSV or XLSX of client commercial parameters. Valid rows are applied, invalid rows reported."""
    if not can_manage_cost_settings(roles):
        raise HTTPException(status_code=403, detail="Only Admin/CFO can import commercial parameters")
    content = await file.read()
    try:
        parsed = parse_commercial_config_file(
            content,
            file.filename or "upload",
            max_rows=get_settings().import_max_rows,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    errors = list(parsed.errors)
    imported = 0
    codes = {row.client_code for row in parsed.rows}
    result = await db.execute(select(Client).where(Client.code.in_(codes)))
    clients_by_code = {c.code: c for c in result.scalars().all()}
    for row in parsed.rows:
        client = clients_by_code.get(row.client_code)
        if not client:
            errors.append(ImportRowError(line=row.line, column="client_code", message=f"Unknown client code: {row.client_code}"))
            continue
        config = merge_commercial_config(client, row.values)
        problem = threshold_error(config)
        if problem:
            errors.append(ImportRowError(line=row.line, message=problem))
            continue
        old_value = _config_summary(client.commercial_config())
        apply_commercial_config(client, config)
        db.add(AuditLog(
            user_id=user.id,
            action="import_commercial_config",
            entity_type="client",
            entity_id=client.id,
            old_value=old_value,
            new_value=_config_summary(config),
        ))
        imported += 1
    await db.flush()
    errors.sort(key=lambda e: e.line or 0)
    logger.info("Commercial config import %s: %d row(s) applied, %d error(s)", file.filename, imported, len(errors))
    return ImportResult(
        success=not errors,
        imported_count=imported,
        errors=errors,
        message=f"{imported} client(s) updated" + (f", {len(errors)} error(s)" if errors else ""),
    )
