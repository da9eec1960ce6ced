"""
Auth Service - registration, login and password resets.

Passwords are hashed with passlib, sessions are HS256 JWTs (python-jose) and
reset tokens live in memory until used or expired.
"""
import secrets
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config.settings import Settings, get_settings
from ..engine.models import utcnow
from ..utils.exceptions import AuthenticationError, ValidationError
from ..utils.logger import get_logger
from .admin_service import AdminService, public_user

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6
RESET_MESSAGE = "If the email exists in our records you will receive instructions to reset your password."


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class AuthService:
    def __init__(self, directory: AdminService, settings: Optional[Settings] = None):
        self.directory = directory
        self.settings = settings or get_settings()
        # reset token -> (user id, expiry)
        self.reset_tokens: dict[str, tuple] = {}

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------
    def issue_token(self, user: dict) -> str:
        expire = utcnow() + timedelta(days=self.settings.jwt_expire_days)
        claims = {'sub': user['id'], 'email': user['email'], 'role': user['role'], 'exp': expire}
        return jwt.encode(claims, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def decode_token(self, token: str) -> dict:
        try:
            return jwt.decode(token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm])
        except JWTError as e:
            raise AuthenticationError("Invalid or expired token") from e

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def register(self, email: str, password: str, name: str, token: Optional[str] = None) -> dict:
        """Create an account, accepting the invitation when a token is given."""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")
        if not name or not name.strip():
            raise ValidationError("Name is required")

        invite = None
        if token:
            invite = self.directory.verify_invite_token(token)
            if invite['email'] != email.strip().lower():
                raise ValidationError("Invitation was issued for a different email")

        user = self.directory.add_user(
            email=email,
            name=name.strip(),
            password_hash=hash_password(password),
            invited_by=invite['invited_by'] if invite else None,
        )
        if invite:
            self.directory.update_invite(invite['id'], 'ACCEPTED')

        logger.info(f"Registered user {user['id']}")
        return {
            'user': public_user(user),
            'token': self.issue_token(user),
            'message': 'Account created successfully',
        }

    def login(self, email: str, password: str) -> dict:
        user = self.directory.get_user_by_email(email)
        if user is None:
            raise AuthenticationError("Invalid email or password")

        if not user.get('password_hash'):
            raise AuthenticationError("This account signs in through the marketplace")

        if not verify_password(password, user['password_hash']):
            logger.warning(f"Failed login for {user['id']}")
            raise AuthenticationError("Invalid email or password")

        return {
            'user': public_user(user),
            'token': self.issue_token(user),
            'message': 'Logged in successfully',
        }

    def forgot_password(self, email: str) -> dict:
        """Same answer whether or not the email is known."""
        result = {'message': RESET_MESSAGE}
        user = self.directory.get_user_by_email(email)
        if user is None:
            return result

        token = secrets.token_hex(32)
        expiry = utcnow() + timedelta(minutes=self.settings.reset_token_ttl_minutes)
        self.reset_tokens[token] = (user['id'], expiry)
        logger.info(f"Issued password reset token for {user['id']}")

        if self.settings.is_development:
            result['reset_link'] = f"{self.settings.app_url}/reset-password?token={token}"
        return result

    def reset_password(self, token: str, password: str, confirm_password: str) -> dict:
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")

        entry = self.reset_tokens.pop(token, None)
        if entry is None:
            raise ValidationError("Invalid reset token")

        user_id, expiry = entry
        if utcnow() > expiry:
            raise ValidationError("Reset token expired. Request a new password reset.")

        user = self.directory.get_user(user_id)
        if user is None:
            raise ValidationError("Invalid reset token")

        user['password_hash'] = hash_password(password)
        user['updated_at'] = utcnow()
        logger.info(f"Password reset for {user_id}")
        return {'message': 'Password reset. You can now log in with your new password.'}
