"""Login, refresh, revocation and account administration.

Every rejection is raised before anything is committed. Audit events are
recorded after the action they describe has been committed.
"""
from typing import Optional

from loguru import logger
from sqlmodel import Session

from gso_library.core.config import settings
from gso_library.models.enums import AuditEventType, LoginFailureReason
from gso_library.models.user import User
from gso_library.schemas.auth import (
    AuthResponse,
    RegisterRequest,
    RoleManagementResponse,
    UpdateCredentialsRequest,
)
from gso_library.services import refresh_token_service, user_service
from gso_library.services.audit_service import record_audit_event
from gso_library.services.errors import (
    AccountDisabledError,
    AuthenticationError,
    InvalidOrExpiredToken,
    NotFoundError,
    ValidationError,
)
from gso_library.services.token_service import AccessClaims, create_access_token

INVALID_CREDENTIALS = 'Invalid username or password'
INVALID_REFRESH_TOKEN = 'Invalid or expired refresh token'


def is_admin(principal: AccessClaims) -> bool:
    return settings.ADMIN_ROLE in principal.roles


def _require_user(session: Session, user_id: str) -> User:
    user = user_service.get_user(session, user_id)
    if user is None:
        raise NotFoundError('User not found')
    return user


def _reject_self_target(admin: AccessClaims, target_id: str, message: str) -> None:
    if target_id == admin.user_id:
        raise ValidationError(message)


def _login_failed(session: Session, username: str, ip_address: Optional[str], reason: LoginFailureReason):
    record_audit_event(
        session,
        AuditEventType.LOGIN_FAILURE,
        username=username,
        ip_address=ip_address,
        detail=reason.value,
    )
    return AuthenticationError(INVALID_CREDENTIALS)


def _issue_session(session: Session, user: User, message: str) -> AuthResponse:
    roles = user_service.role_names(user)
    access_token = create_access_token(user, roles)
    refresh_token = refresh_token_service.issue_refresh_token(session, user.id)
    return AuthResponse(
        message=message,
        token=access_token,
        refresh_token=refresh_token.token,
        user_id=user.id,
        username=user.username,
        roles=roles,
    )


def login(session: Session, username: str, password: str, ip_address: Optional[str] = None) -> AuthResponse:
    user = user_service.get_user_by_username(session, username)
    if user is None:
        raise _login_failed(session, username, ip_address, LoginFailureReason.UNKNOWN_USER)
    # Disabled accounts are rejected before the password is looked at.
    if user.disabled:
        raise _login_failed(session, username, ip_address, LoginFailureReason.DISABLED_ACCOUNT)
    if not user_service.verify_password(user, password):
        raise _login_failed(session, username, ip_address, LoginFailureReason.WRONG_PASSWORD)

    response = _issue_session(session, user, 'Login successful')
    record_audit_event(session, AuditEventType.LOGIN_SUCCESS, username=user.username, ip_address=ip_address)
    return response


def refresh_session(session: Session, token: str, ip_address: Optional[str] = None) -> AuthResponse:
    try:
        user, successor = refresh_token_service.validate_and_rotate(session, token)
    except AccountDisabledError:
        reason = LoginFailureReason.REFRESH_DISABLED_ACCOUNT
    except InvalidOrExpiredToken:
        reason = LoginFailureReason.REFRESH_INVALID
    else:
        roles = user_service.role_names(user)
        record_audit_event(session, AuditEventType.TOKEN_REFRESH, username=user.username, ip_address=ip_address)
        return AuthResponse(
            message='Token refreshed successfully',
            token=create_access_token(user, roles),
            refresh_token=successor.token,
            user_id=user.id,
            username=user.username,
            roles=roles,
        )

    record_audit_event(session, AuditEventType.LOGIN_FAILURE, ip_address=ip_address, detail=reason.value)
    raise AuthenticationError(INVALID_REFRESH_TOKEN)


def revoke_session(session: Session, token: str, requester: AccessClaims) -> None:
    record = refresh_token_service.revoke_refresh_token(session, token, requester.user_id, is_admin(requester))
    logger.info('auth.refresh_token.revoked', user_id=record.user_id, revoked_by=requester.user_id)


def update_credentials(session: Session, requester: AccessClaims, payload: UpdateCredentialsRequest) -> AuthResponse:
    user = _require_user(session, requester.user_id)

    if payload.new_password:
        if not payload.current_password:
            raise ValidationError('Current password is required to change password')
        user_service.change_password(user, payload.current_password, payload.new_password)
    if payload.email:
        user_service.set_email(user, payload.email)

    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(
        'auth.credentials.updated',
        user_id=user.id,
        email_changed=bool(payload.email),
        password_changed=bool(payload.new_password),
    )
    return AuthResponse(message='Credentials updated successfully', user_id=user.id, username=user.username)


def _set_account_state(
    session: Session,
    admin: AccessClaims,
    target_id: str,
    disabled: bool,
    ip_address: Optional[str],
) -> AuthResponse:
    verb = 'disable' if disabled else 'enable'
    _reject_self_target(admin, target_id, f'Admin accounts cannot {verb} themselves')
    user = _require_user(session, target_id)

    user_service.set_disabled(session, user, disabled)
    revoked = 0
    if disabled:
        revoked = refresh_token_service.revoke_all_for_user(session, user.id)
    session.commit()
    session.refresh(user)

    record_audit_event(
        session,
        AuditEventType.ACCOUNT_DISABLE if disabled else AuditEventType.ACCOUNT_ENABLE,
        username=admin.username,
        target_username=user.username,
        ip_address=ip_address,
        detail=f'revoked_tokens={revoked}' if disabled else None,
    )
    return AuthResponse(
        message=f'Account {verb}d successfully',
        user_id=user.id,
        username=user.username,
    )


def disable_account(session: Session, admin: AccessClaims, target_id: str, ip_address: Optional[str] = None) -> AuthResponse:
    return _set_account_state(session, admin, target_id, True, ip_address)


def enable_account(session: Session, admin: AccessClaims, target_id: str, ip_address: Optional[str] = None) -> AuthResponse:
    return _set_account_state(session, admin, target_id, False, ip_address)


def _change_role(
    session: Session,
    admin: AccessClaims,
    target_id: str,
    role_name: str,
    grant: bool,
    ip_address: Optional[str],
) -> RoleManagementResponse:
    _reject_self_target(admin, target_id, 'Admin accounts cannot modify their own permissions')
    user = _require_user(session, target_id)
    role = user_service.get_role(session, role_name)
    if role is None:
        raise ValidationError(f"Role '{role_name}' does not exist")

    held = role.name in user_service.role_names(user)
    if grant and held:
        raise ValidationError(f"User already has the '{role.name}' role")
    if not grant and not held:
        raise ValidationError(f"User does not have the '{role.name}' role")

    if grant:
        user_service.add_role(session, user, role)
    else:
        user_service.remove_role(session, user, role)
    session.commit()
    session.refresh(user)

    record_audit_event(
        session,
        AuditEventType.ROLE_GRANT if grant else AuditEventType.ROLE_REMOVE,
        username=admin.username,
        target_username=user.username,
        ip_address=ip_address,
        detail=f'role={role.name}',
    )
    return RoleManagementResponse(
        message=f"Role '{role.name}' {'granted' if grant else 'removed'} successfully",
        user_id=user.id,
        username=user.username,
        roles=user_service.role_names(user),
    )


def grant_role(
    session: Session, admin: AccessClaims, target_id: str, role_name: str, ip_address: Optional[str] = None
) -> RoleManagementResponse:
    return _change_role(session, admin, target_id, role_name, True, ip_address)


def remove_role(
    session: Session, admin: AccessClaims, target_id: str, role_name: str, ip_address: Optional[str] = None
) -> RoleManagementResponse:
    return _change_role(session, admin, target_id, role_name, False, ip_address)


def register_user(session: Session, admin: AccessClaims, payload: RegisterRequest) -> AuthResponse:
    user = user_service.create_user(
        session,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        roles=[settings.DEFAULT_ROLE],
    )
    logger.info('auth.user.registered', user_id=user.id, username=user.username, registered_by=admin.username)
    return AuthResponse(message='User registered successfully', user_id=user.id, username=user.username)


def reset_password(session: Session, admin: AccessClaims, target_id: str, new_password: str) -> AuthResponse:
    _reject_self_target(admin, target_id, 'Use update-credentials to change your own password')
    user = _require_user(session, target_id)
    user_service.set_password(user, new_password)
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info('auth.password.reset', user_id=user.id, reset_by=admin.username)
    return AuthResponse(message='Password reset successfully', user_id=user.id, username=user.username)


def get_user_detail(session: Session, user_id: str) -> User:
    return _require_user(session, user_id)
