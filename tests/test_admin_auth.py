"""
Admin users and invitations, plus the account flows built on top of them.
"""
from datetime import timedelta

import pytest

from melidash.config.settings import Settings
from melidash.services.admin_service import AdminService, paginate
from melidash.services.auth_service import RESET_MESSAGE, AuthService, verify_password
from melidash.utils.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def admin(settings):
    return AdminService(settings)


@pytest.fixture
def auth(admin, settings):
    return AuthService(admin, settings)


def test_paginate():
    items, pagination = paginate(list(range(25)), page=3, limit=10)

    assert items == [20, 21, 22, 23, 24]
    assert pagination == {'page': 3, 'limit': 10, 'total': 25, 'total_pages': 3}
    assert paginate([], 1, 10)[1]['total_pages'] == 0


def test_list_users_hides_password_and_names_inviter(admin):
    result = admin.list_users()

    assert [u['id'] for u in result['users']] == ['u-seller', 'u-admin']
    assert all('password_hash' not in u for u in result['users'])
    assert result['users'][0]['invited_by_name'] == 'Admin'
    assert result['users'][1]['invited_by_name'] is None
    assert result['pagination']['total'] == 2
    assert [u['id'] for u in admin.list_users(role='ADMIN')['users']] == ['u-admin']


def test_update_user(admin):
    user = admin.update_user('u-seller', '  Top Seller ', 'ADMIN')

    assert user['name'] == 'Top Seller'
    assert user['role'] == 'ADMIN'
    assert 'password_hash' not in user

    with pytest.raises(ValidationError):
        admin.update_user('u-seller', 'Seller', 'OWNER')
    with pytest.raises(ValidationError):
        admin.update_user('u-seller', ' ', 'USER')
    with pytest.raises(NotFoundError):
        admin.update_user('missing', 'Name', 'USER')


def test_last_admin_cannot_be_deleted(admin):
    with pytest.raises(ValidationError) as exc:
        admin.delete_user('u-admin')
    assert exc.value.message == "Cannot delete the last administrator"

    admin.update_user('u-seller', 'Seller', 'ADMIN')
    assert admin.delete_user('u-admin')
    with pytest.raises(NotFoundError):
        admin.delete_user('u-admin')


def test_create_invite(admin):
    invite = admin.create_invite(' New@Shop.com ', expires_in_days=3, invited_by='u-admin')

    assert invite['email'] == 'new@shop.com'
    assert invite['status'] == 'PENDING'
    assert len(invite['token']) == 64
    assert invite['expires_at'] - invite['created_at'] == timedelta(days=3)
    assert admin.invite_url(invite['token']) == f"http://localhost:3000/register?token={invite['token']}"

    listed = admin.list_invites()
    assert listed['invites'][0]['invited_by_email'] == 'admin@melidash.com'
    assert 'token' not in listed['invites'][0]


def test_invite_conflicts_and_bounds(admin):
    admin.create_invite('new@shop.com')

    with pytest.raises(ConflictError) as exc:
        admin.create_invite('NEW@shop.com')
    assert exc.value.message == "There is already a pending invitation for this email"

    with pytest.raises(ConflictError):
        admin.create_invite('seller@melidash.com')
    with pytest.raises(ValidationError):
        admin.create_invite('other@shop.com', expires_in_days=31)
    with pytest.raises(ValidationError):
        admin.create_invite('other@shop.com', expires_in_days=0)


def test_expired_invites_are_marked(admin):
    invite = admin.create_invite('late@shop.com')
    invite['expires_at'] = invite['created_at'] - timedelta(seconds=1)

    assert admin.list_invites(status='EXPIRED')['pagination']['total'] == 1
    with pytest.raises(ValidationError) as exc:
        admin.verify_invite_token(invite['token'])
    assert exc.value.message == "Invitation is expired"


def test_update_invite(admin):
    invite = admin.create_invite('new@shop.com')

    revoked = admin.update_invite(invite['id'], 'REVOKED')
    assert revoked['status'] == 'REVOKED'
    assert revoked['accepted_at'] is None
    assert 'token' not in revoked

    with pytest.raises(ValidationError):
        admin.update_invite(invite['id'], 'LOST')
    with pytest.raises(NotFoundError):
        admin.update_invite('missing', 'REVOKED')
    with pytest.raises(NotFoundError):
        admin.verify_invite_token('not-a-token')


def test_register_with_invite_accepts_it(admin, auth):
    invite = admin.create_invite('new@shop.com', invited_by='u-admin')

    result = auth.register('new@shop.com', 'secret1', 'New Seller', token=invite['token'])

    assert result['message'] == 'Account created successfully'
    assert result['user']['invited_by'] == 'u-admin'
    assert 'password_hash' not in result['user']
    assert invite['status'] == 'ACCEPTED'
    assert invite['accepted_at'] is not None

    claims = auth.decode_token(result['token'])
    assert claims['sub'] == result['user']['id']
    assert claims['role'] == 'USER'


def test_register_rejects_bad_input(admin, auth):
    invite = admin.create_invite('new@shop.com')

    with pytest.raises(ValidationError):
        auth.register('new@shop.com', '123', 'Name')
    with pytest.raises(ValidationError):
        auth.register('new@shop.com', 'secret1', '')
    with pytest.raises(ValidationError):
        auth.register('other@shop.com', 'secret1', 'Name', token=invite['token'])
    with pytest.raises(ConflictError):
        auth.register('seller@melidash.com', 'secret1', 'Name')


def test_login(auth):
    auth.register('new@shop.com', 'secret1', 'New Seller')

    result = auth.login('NEW@shop.com', 'secret1')
    assert result['user']['email'] == 'new@shop.com'
    assert auth.decode_token(result['token'])['email'] == 'new@shop.com'

    with pytest.raises(AuthenticationError):
        auth.login('new@shop.com', 'wrong-password')
    with pytest.raises(AuthenticationError):
        auth.login('nobody@shop.com', 'secret1')


def test_marketplace_account_has_no_password(auth):
    with pytest.raises(AuthenticationError) as exc:
        auth.login('seller@melidash.com', 'anything')
    assert exc.value.message == "This account signs in through the marketplace"


def test_decode_rejects_tampered_token(auth):
    with pytest.raises(AuthenticationError):
        auth.decode_token('not.a.jwt')


def test_forgot_password_same_answer_for_unknown_email(auth):
    assert auth.forgot_password('nobody@shop.com') == {'message': RESET_MESSAGE}
    assert auth.reset_tokens == {}


def test_forgot_and_reset_password(admin, auth):
    auth.register('new@shop.com', 'secret1', 'New Seller')

    result = auth.forgot_password('new@shop.com')
    assert result['message'] == RESET_MESSAGE
    token = result['reset_link'].split('token=')[1]
    assert token in auth.reset_tokens

    with pytest.raises(ValidationError):
        auth.reset_password(token, 'newpass1', 'newpass2')

    auth.reset_password(token, 'newpass1', 'newpass1')
    assert verify_password('newpass1', admin.get_user_by_email('new@shop.com')['password_hash'])
    assert auth.login('new@shop.com', 'newpass1')['user']['email'] == 'new@shop.com'

    with pytest.raises(ValidationError):
        auth.reset_password(token, 'again12', 'again12')


def test_reset_link_only_in_development():
    settings = Settings(environment='production', latency_scale=0.0)
    auth = AuthService(AdminService(settings), settings)
    auth.register('new@shop.com', 'secret1', 'New Seller')

    assert 'reset_link' not in auth.forgot_password('new@shop.com')
    assert len(auth.reset_tokens) == 1


def test_expired_reset_token(auth):
    auth.register('new@shop.com', 'secret1', 'New Seller')
    auth.forgot_password('new@shop.com')
    token, (user_id, expiry) = next(iter(auth.reset_tokens.items()))
    auth.reset_tokens[token] = (user_id, expiry - timedelta(hours=2))

    with pytest.raises(ValidationError) as exc:
        auth.reset_password(token, 'newpass1', 'newpass1')
    assert "expired" in exc.value.message
