"""Global salary settings lifecycle: many records, exactly one active."""
import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from calculette.models.salary_settings import GlobalSalarySettings
from calculette.schemas.salary_settings import GlobalSalarySettingsCreate, GlobalSalarySettingsUpdate

logger = logging.getLogger(__name__)


class SalarySettingsError(ValueError):
    """A lifecycle rule (active record, last record) would be broken."""


async def list_settings(db: AsyncSession) -> list[GlobalSalarySettings]:
    result = await db.execute(
        select(GlobalSalarySettings).order_by(GlobalSalarySettings.id.desc())
    )
    return list(result.scalars().all())


async def get_active_settings(db: AsyncSession) -> GlobalSalarySettings | None:
    result = await db.execute(
        select(GlobalSalarySettings).where(GlobalSalarySettings.is_active.is_(True))
    )
    return result.scalar_one_or_none()


async def _deactivate_others(db: AsyncSession, keep_id: int | None = None) -> None:
    stmt = update(GlobalSalarySettings).where(GlobalSalarySettings.is_active.is_(True))
    if keep_id is not None:
        stmt = stmt.where(GlobalSalarySettings.id != keep_id)
    await db.execute(stmt.values(is_active=False))
    await db.flush()


async def create_settings(db: AsyncSession, data: GlobalSalarySettingsCreate) -> GlobalSalarySettings:
    """New records are activated immediately; every other record is deactivated."""
    await _deactivate_others(db)
    settings = GlobalSalarySettings(
        label=data.label,
        employer_charges_rate=data.employer_charges_rate,
        indirect_annual_costs=data.indirect_annual_costs,
        billable_hours_per_year=data.billable_hours_per_year,
        is_active=True,
    )
    db.add(settings)
    await db.flush()
    await db.refresh(settings)
    logger.info(
        "Salary settings %s created and activated (charges=%s%%, indirect=%s, hours=%s)",
        settings.id,
        settings.employer_charges_rate,
        settings.indirect_annual_costs,
        settings.billable_hours_per_year,
    )
    return settings


async def update_settings(
    db: AsyncSession,
    settings_id: int,
    data: GlobalSalarySettingsUpdate,
) -> GlobalSalarySettings | None:
    settings = await db.get(GlobalSalarySettings, settings_id)
    if not settings:
        return None
    for k, v in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(settings, k, v)
    await db.flush()
    await db.refresh(settings)
    logger.info("Salary settings %s updated", settings.id)
    return settings


async def activate_settings(db: AsyncSession, settings_id: int) -> GlobalSalarySettings | None:
    """Make one record active and switch the previous one off in the same transaction."""
    settings = await db.get(GlobalSalarySettings, settings_id)
    if not settings:
        return None
    if not settings.is_active:
        await _deactivate_others(db, keep_id=settings.id)
        settings.is_active = True
        await db.flush()
        logger.info("Salary settings %s activated", settings.id)
    await db.refresh(settings)
    return settings


async def delete_settings(db: AsyncSession, settings_id: int) -> bool:
    """Delete an inactive record. Returns False when it does not exist."""
    settings = await db.get(GlobalSalarySettings, settings_id)
    if not settings:
        return False
    if settings.is_active:
        raise SalarySettingsError("Cannot delete the active salary settings; activate another record first")
    total = (await db.execute(select(func.count()).select_from(GlobalSalarySettings))).scalar_one()
    if total <= 1:
        raise SalarySettingsError("Cannot delete the last remaining salary settings")
    await db.delete(settings)
    await db.flush()
    logger.info("Salary settings %s deleted", settings_id)
    return True
