from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, Field
from app.schemas.base import TimestampSchema, RequestSchema

class RegisterRequest(RequestSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., alias="fullName", min_length=1)
    user_type: Literal["farmer", "buyer"] = Field(..., alias="userType")

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class AdminUserCreate(RequestSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., alias="fullName", min_length=1)
    user_type: str = Field("farmer", alias="userType")

class AdminUserUpdate(RequestSchema):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, alias="fullName")
    user_type: Optional[str] = Field(None, alias="userType")
    password: Optional[str] = None

class ProfileUpdate(RequestSchema):
    full_name: Optional[str] = Field(None, alias="fullName")
    phone: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")

class User(TimestampSchema):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    rating: Optional[float] = None

class UserWithToken(BaseModel):
    user: User
    access_token: str
    token_type: str

class TokenData(BaseModel):
    user_id: Optional[int] = None
