"""Authentication service."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from calculette.auth.jwt import get_password_hash, verify_password
from calculette.auth.rbac import can_view_financials
from calculette.models.user import User, UserRole
from calculette.schemas.auth import UserCreate, UserLogin, UserResponse


async def load_user_with_roles(db: AsyncSession, user_id: int) -> User | None:
    """User with user_roles and role eagerly loaded, so role_names works outside the session."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.user_roles).selectinload(UserRole.role))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """Create user with roles."""
    user = User(
        email=data.email,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
        business_unit_code=data.business_unit_code,
    )
    db.add(user)
    await db.flush()
    for role_id in data.role_ids:
        db.add(UserRole(user_id=user.id, role_id=role_id))
    await db.flush()
    return await load_user_with_roles(db, user.id)


async def authenticate_user(db: AsyncSession, data: UserLogin) -> User | None:
    """Authenticate user by email and password."""
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(data.password, user.hashed_password):
        return None
    return await load_user_with_roles(db, user.id)


def user_to_response(user: User) -> UserResponse:
    """Convert user to response with roles and financial visibility."""
    roles = user.role_names
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        business_unit_code=user.business_unit_code,
        is_active=user.is_active,
        roles=roles,
        can_view_financials=can_view_financials(roles),
    )
