from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlmodel import Session
from gso_library.api.deps import client_ip, get_current_principal, require_admin
from gso_library.db.session import get_session
from gso_library.models.enums import AuditEventType
from gso_library.schemas.auth import (
    AuditEventOut,
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    RoleManagementRequest,
    RoleManagementResponse,
    UpdateCredentialsRequest,
)
from gso_library.schemas.user import UserOut
from gso_library.services import auth_service
from gso_library.services.audit_service import list_audit_events
from gso_library.services.token_service import AccessClaims
from gso_library.services.user_service import list_users, to_user_out

router = APIRouter(prefix='/auth', tags=['auth'])


@router.post('/register', response_model=AuthResponse)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    admin: AccessClaims = Depends(require_admin),
) -> AuthResponse:
    return auth_service.register_user(session, admin, payload)


@router.post('/login', response_model=AuthResponse)
def login(payload: LoginRequest, request: Request, session: Session = Depends(get_session)) -> AuthResponse:
    return auth_service.login(session, payload.username, payload.password, client_ip(request))


@router.post('/refresh', response_model=AuthResponse)
def refresh(payload: RefreshRequest, request: Request, session: Session = Depends(get_session)) -> AuthResponse:
    return auth_service.refresh_session(session, payload.refresh_token, client_ip(request))


@router.post('/revoke-token', status_code=status.HTTP_204_NO_CONTENT)
def revoke_token(
    payload: RefreshRequest,
    session: Session = Depends(get_session),
    principal: AccessClaims = Depends(get_current_principal),
) -> Response:
    auth_service.revoke_session(session, payload.refresh_token, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put('/update-credentials', response_model=AuthResponse)
def update_credentials(
    payload: UpdateCredentialsRequest,
    session: Session = Depends(get_session),
    principal: AccessClaims = Depends(get_current_principal),
) -> AuthResponse:
    return auth_service.update_credentials(session, principal, payload)


@router.post('/disable/{user_id}', response_model=AuthResponse)
def disable_account(
    user_id: str,
    request: Request,
    session: Session = Depends(get_session),
    admin: AccessClaims = Depends(require_admin),
) -> AuthResponse:
    return auth_service.disable_account(session, admin, user_id, client_ip(request))


@router.post('/enable/{user_id}', response_model=AuthResponse)
def enable_account(
    user_id: str,
    request: Request,
    session: Session = Depends(get_session),
    admin: AccessClaims = Depends(require_admin),
) -> AuthResponse:
    return auth_service.enable_account(session, admin, user_id, client_ip(request))


@router.post('/grant-role', response_model=RoleManagementResponse)
def grant_role(
    payload: RoleManagementRequest,
    request: Request,
    session: Session = Depends(get_session),
    admin: AccessClaims = Depends(require_admin),
) -> RoleManagementResponse:
    return auth_service.grant_role(session, admin, payload.user_id, payload.role, client_ip(request))


@router.post('/remove-role', response_model=RoleManagementResponse)
def remove_role(
    payload: RoleManagementRequest,
    request: Request,
    session: Session = Depends(get_session),
    admin: AccessClaims = Depends(require_admin),
) -> RoleManagementResponse:
    return auth_service.remove_role(session, admin, payload.user_id, payload.role, client_ip(request))


@router.post('/reset-password/{user_id}', response_model=AuthResponse)
def reset_password(
    user_id: str,
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
    admin: AccessClaims = Depends(require_admin),
) -> AuthResponse:
    return auth_service.reset_password(session, admin, user_id, payload.new_password)


@router.get('/users', response_model=list[UserOut])
def get_users(
    session: Session = Depends(get_session),
    _: AccessClaims = Depends(require_admin),
) -> list[UserOut]:
    return [to_user_out(user) for user in list_users(session)]


@router.get('/users/{user_id}', response_model=UserOut)
def get_user(
    user_id: str,
    session: Session = Depends(get_session),
    _: AccessClaims = Depends(require_admin),
) -> UserOut:
    return to_user_out(auth_service.get_user_detail(session, user_id))


@router.get('/audit-events', response_model=list[AuditEventOut])
def get_audit_events(
    event_type: Optional[AuditEventType] = None,
    since_id: Optional[int] = None,
    username: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
    _: AccessClaims = Depends(require_admin),
) -> list[AuditEventOut]:
    events = list_audit_events(
        session,
        event_type=event_type,
        since_id=since_id,
        username=username,
        limit=limit,
        offset=offset,
    )
    return [
        AuditEventOut(
            id=record.id,
            event_type=record.event_type,
            username=record.username,
            target_username=record.target_username,
            ip_address=record.ip_address,
            detail=record.detail,
            created_at=record.created_at,
        )
        for record in events
    ]
