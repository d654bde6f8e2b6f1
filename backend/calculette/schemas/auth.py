"""Auth schemas."""
from pydantic import BaseModel, EmailStr


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    business_unit_code: str | None = None
    role_ids: list[int] = []


class UserLogin(BaseModel):
    email: str  # str to allow internal domains like admin@calculette.local
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: str
    business_unit_code: str | None = None
    is_active: bool
    roles: list[str] = []
    can_view_financials: bool = False


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
