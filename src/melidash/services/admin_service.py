"""
Admin Service - dashboard users and invitations.

The service also owns the in-memory user directory that AuthService reads and
writes.
"""
import math
import secrets
import uuid
from datetime import timedelta
from typing import Optional

from ..config.settings import Settings, get_settings
from ..data import mock_data
from ..engine.models import utcnow
from ..utils.exceptions import ConflictError, NotFoundError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

ROLES = ('ADMIN', 'USER')
INVITE_STATUSES = ('PENDING', 'ACCEPTED', 'EXPIRED', 'REVOKED')

# Never leaves the service
PRIVATE_USER_FIELDS = ('password_hash',)
PRIVATE_INVITE_FIELDS = ('token',)


def paginate(items: list, page: int, limit: int) -> tuple[list, dict]:
    """Slice a list for one page and describe the pagination."""
    page = max(page, 1)
    limit = max(limit, 1)
    offset = (page - 1) * limit
    total = len(items)
    return items[offset:offset + limit], {
        'page': page,
        'limit': limit,
        'total': total,
        'total_pages': math.ceil(total / limit),
    }


def public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS}


def public_invite(invite: dict) -> dict:
    """Invite record without its token; the token only travels inside the invite URL."""
    return {k: v for k, v in invite.items() if k not in PRIVATE_INVITE_FIELDS}


class AdminService:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.users: list[dict] = mock_data.mock_users() if self.settings.use_mock_data else []
        self.invites: list[dict] = []

    # ------------------------------------------------------------------
    # User directory
    # ------------------------------------------------------------------
    def get_user(self, user_id: str) -> Optional[dict]:
        return next((u for u in self.users if u['id'] == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[dict]:
        email = email.strip().lower()
        return next((u for u in self.users if u['email'].lower() == email), None)

    def add_user(self, email: str, name: str, password_hash: Optional[str],
                 role: str = 'USER', invited_by: Optional[str] = None) -> dict:
        if self.get_user_by_email(email):
            raise ConflictError("This email is already in use")

        now = utcnow()
        user = {
            'id': f"u-{uuid.uuid4().hex[:12]}",
            'email': email.strip().lower(),
            'name': name,
            'role': role,
            'password_hash': password_hash,
            'created_at': now,
            'updated_at': now,
            'invited_by': invited_by,
            'invite_accepted_at': now if invited_by else None,
        }
        self.users.append(user)
        logger.info(f"Added user {user['id']} ({user['email']})")
        return user

    def _with_inviter(self, record: dict) -> dict:
        inviter = self.get_user(record['invited_by']) if record.get('invited_by') else None
        return {
            **public_user(record),
            'invited_by_name': inviter['name'] if inviter else None,
            'invited_by_email': inviter['email'] if inviter else None,
        }

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def list_users(self, role: Optional[str] = None, page: int = 1, limit: int = 50) -> dict:
        users = [u for u in self.users if not role or u['role'] == role]
        users.sort(key=lambda u: u['created_at'], reverse=True)
        items, pagination = paginate(users, page, limit)
        return {'users': [self._with_inviter(u) for u in items], 'pagination': pagination}

    def update_user(self, user_id: str, name: str, role: str) -> dict:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        if role not in ROLES:
            raise ValidationError(f"Role must be one of {', '.join(ROLES)}")

        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")

        user.update({'name': name.strip(), 'role': role, 'updated_at': utcnow()})
        logger.info(f"Updated user {user_id} (role={role})")
        return public_user(user)

    def delete_user(self, user_id: str) -> bool:
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if user['role'] == 'ADMIN' and sum(1 for u in self.users if u['role'] == 'ADMIN') <= 1:
            raise ValidationError("Cannot delete the last administrator")

        self.users = [u for u in self.users if u['id'] != user_id]
        logger.info(f"Deleted user {user_id}")
        return True

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------
    def invite_url(self, token: str) -> str:
        return f"{self.settings.app_url}/register?token={token}"

    def list_invites(self, status: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
        self._expire_invites()
        invites = [i for i in self.invites if not status or i['status'] == status]
        invites.sort(key=lambda i: i['created_at'], reverse=True)
        items, pagination = paginate(invites, page, limit)
        return {'invites': [self._with_inviter(public_invite(i)) for i in items], 'pagination': pagination}

    def create_invite(self, email: str, expires_in_days: int = 7, invited_by: Optional[str] = None) -> dict:
        if not 1 <= expires_in_days <= 30:
            raise ValidationError("Invitations expire in 1 to 30 days")

        email = email.strip().lower()
        if self.get_user_by_email(email):
            raise ConflictError("User already exists")

        self._expire_invites()
        if any(i['email'] == email and i['status'] == 'PENDING' for i in self.invites):
            raise ConflictError("There is already a pending invitation for this email")

        now = utcnow()
        invite = {
            'id': str(uuid.uuid4()),
            'email': email,
            'token': secrets.token_hex(32),
            'status': 'PENDING',
            'invited_by': invited_by,
            'expires_at': now + timedelta(days=expires_in_days),
            'created_at': now,
            'updated_at': now,
            'accepted_at': None,
        }
        self.invites.append(invite)
        logger.info(f"Created invitation {invite['id']} for {email}")
        return invite

    def update_invite(self, invite_id: str, status: str) -> dict:
        if status not in INVITE_STATUSES:
            raise ValidationError(f"Status must be one of {', '.join(INVITE_STATUSES)}")

        invite = next((i for i in self.invites if i['id'] == invite_id), None)
        if invite is None:
            raise NotFoundError("Invitation not found")

        now = utcnow()
        invite['status'] = status
        invite['updated_at'] = now
        if status == 'ACCEPTED':
            invite['accepted_at'] = now
        logger.info(f"Invitation {invite_id} is now {status}")
        return public_invite(invite)

    def verify_invite_token(self, token: str) -> dict:
        """Return the pending invitation behind a token or raise."""
        self._expire_invites()
        invite = next((i for i in self.invites if i['token'] == token), None)
        if invite is None:
            raise NotFoundError("Invitation not found")
        if invite['status'] != 'PENDING':
            raise ValidationError(f"Invitation is {invite['status'].lower()}")
        return invite

    def _expire_invites(self):
        now = utcnow()
        for invite in self.invites:
            if invite['status'] == 'PENDING' and invite['expires_at'] <= now:
                invite['status'] = 'EXPIRED'
                invite['updated_at'] = now
