"""
Admin API - users and invitations.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from ..services.admin_service import AdminService, public_invite
from .responses import ok
from .state import get_admin, get_optional_user

router = APIRouter(prefix="/api/admin", tags=["admin"])


class InviteCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    expires_in_days: int = Field(7, ge=1, le=30)


class InviteUpdate(BaseModel):
    id: str
    status: Literal['PENDING', 'ACCEPTED', 'EXPIRED', 'REVOKED']


class UserUpdate(BaseModel):
    name: str = Field(min_length=1)
    role: Literal['ADMIN', 'USER']


@router.get("/invites")
async def list_invites(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    admin: AdminService = Depends(get_admin),
):
    return ok(admin.list_invites(status=status, page=page, limit=limit))


@router.post("/invites")
async def create_invite(
    body: InviteCreate,
    admin: AdminService = Depends(get_admin),
    user: Optional[dict] = Depends(get_optional_user),
):
    invite = admin.create_invite(
        body.email,
        expires_in_days=body.expires_in_days,
        invited_by=user['id'] if user else None,
    )
    return ok(
        {'invite': public_invite(invite), 'invite_url': admin.invite_url(invite['token'])},
        message="Invitation created",
    )


@router.put("/invites")
async def update_invite(body: InviteUpdate, admin: AdminService = Depends(get_admin)):
    return ok({'invite': admin.update_invite(body.id, body.status)}, message="Invitation updated")


@router.get("/users")
async def list_users(
    role: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
    admin: AdminService = Depends(get_admin),
):
    return ok(admin.list_users(role=role, page=page, limit=limit))


@router.put("/users/{user_id}")
async def update_user(user_id: str, body: UserUpdate, admin: AdminService = Depends(get_admin)):
    return ok({'user': admin.update_user(user_id, body.name, body.role)}, message="User updated")


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, admin: AdminService = Depends(get_admin)):
    admin.delete_user(user_id)
    return ok({'id': user_id}, message="User deleted")
