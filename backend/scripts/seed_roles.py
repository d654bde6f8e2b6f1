"""Seed roles, an admin user and the initial global salary settings."""
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from calculette.auth.jwt import get_password_hash
from calculette.database import async_session_maker, init_db
from calculette.models.salary_settings import GlobalSalarySettings
from calculette.models.user import Role, User, UserRole


ROLES = [
    ("admin", "System administrator"),
    ("cfo", "Chief Financial Officer - owns margins and cost settings"),
    ("business_unit_manager", "Business Unit manager"),
    ("account_manager", "Account manager - runs margin simulations"),
    ("viewer", "Read-only viewer"),
]

# Defaults used by the calculette before the CFO enters real figures.
DEFAULT_EMPLOYER_CHARGES_RATE = Decimal("65")
DEFAULT_INDIRECT_ANNUAL_COSTS = Decimal("5000")
DEFAULT_BILLABLE_HOURS_PER_YEAR = 1600


async def seed():
    await init_db()
    async with async_session_maker() as db:
        for name, desc in ROLES:
            r = await db.execute(select(Role).where(Role.name == name))
            if not r.scalar_one_or_none():
                db.add(Role(name=name, description=desc))
        await db.commit()

        admin_role = (await db.execute(select(Role).where(Role.name == "admin"))).scalar_one()
        r = await db.execute(select(User).where(User.email == "admin@calculette.local"))
        if not r.scalar_one_or_none():
            user = User(
                email="admin@calculette.local",
                hashed_password=get_password_hash("admin123"),
                full_name="Admin User",
            )
            db.add(user)
            await db.flush()
            db.add(UserRole(user_id=user.id, role_id=admin_role.id))

        r = await db.execute(select(GlobalSalarySettings).limit(1))
        if not r.scalar_one_or_none():
            db.add(GlobalSalarySettings(
                label="Initial settings",
                employer_charges_rate=DEFAULT_EMPLOYER_CHARGES_RATE,
                indirect_annual_costs=DEFAULT_INDIRECT_ANNUAL_COSTS,
                billable_hours_per_year=DEFAULT_BILLABLE_HOURS_PER_YEAR,
                is_active=True,
            ))
        await db.commit()
    print("Seeded roles, salary settings and admin user (admin@calculette.local / admin123)")


if __name__ == "__main__":
    asyncio.run(seed())
