"""Auth API routes."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calculette.auth.deps import get_current_user
from calculette.auth.jwt import create_access_token
from calculette.database import get_db
from calculette.models.user import User
from calculette.schemas.auth import Token, UserCreate, UserLogin, UserResponse
from calculette.services.auth_service import authenticate_user, create_user, user_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Token)
async def register(
    data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")
    user = await create_user(db, data)
    logger.info("User %s registered with roles %s", user.email, user.role_names)
    token = create_access_token(user.id)
    return Token(access_token=token, user=user_to_response(user))


@router.post("/login", response_model=Token)
async def login(
    data: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    user = await authenticate_user(db, data)
    if not user:
        logger.warning("Failed login for %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    token = create_access_token(user.id)
    return Token(access_token=token, user=user_to_response(user))


@router.get("/me", response_model=UserResponse)
async def me(user: Annotated[User, Depends(get_current_user)]):
    return user_to_response(user)
