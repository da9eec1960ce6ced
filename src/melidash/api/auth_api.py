"""
Auth API - registration, login and password reset.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from ..services.admin_service import AdminService, public_user
from ..services.auth_service import AuthService
from .responses import ok
from .state import get_admin, get_auth, get_current_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)
    token: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str = Field(min_length=1)
    password: str = Field(min_length=6)
    confirm_password: str = Field(min_length=6)


@router.get("/register")
async def verify_invite(token: str, admin: AdminService = Depends(get_admin)):
    """Check an invitation token before showing the registration form."""
    invite = admin.verify_invite_token(token)
    return ok({'email': invite['email'], 'expires_at': invite['expires_at']})


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, auth: AuthService = Depends(get_auth)):
    result = auth.register(body.email, body.password, body.name, token=body.token)
    return ok(result, message=result['message'])


@router.post("/login")
async def login(body: LoginRequest, auth: AuthService = Depends(get_auth)):
    result = auth.login(body.email, body.password)
    return ok(result, message=result['message'])


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordRequest, auth: AuthService = Depends(get_auth)):
    result = auth.forgot_password(body.email)
    return ok(result, message=result['message'])


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest, auth: AuthService = Depends(get_auth)):
    result = auth.reset_password(body.token, body.password, body.confirm_password)
    return ok(result, message=result['message'])


@router.get("/me")
async def me(user: dict = Depends(get_current_user)):
    return ok(public_user(user))
