from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from jose import JWTError, jwt

from gso_library.core.config import settings
from gso_library.models.user import User
from gso_library.services.errors import AuthenticationError

ACCESS_TOKEN_TYPE = 'access'


@dataclass(frozen=True)
class AccessClaims:
    user_id: str
    username: str
    email: str
    roles: tuple[str, ...] = field(default_factory=tuple)
    expires_at: Optional[datetime] = None

    def has_any_role(self, required: Iterable[str]) -> bool:
        return any(role in self.roles for role in required)


def verify_signing_key() -> None:
    if not settings.JWT_SECRET_KEY or not settings.JWT_SECRET_KEY.strip():
        raise RuntimeError('JWT secret key not configured')


def create_access_token(user: User, roles: Iterable[str], now: Optional[datetime] = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        'sub': user.id,
        'name': user.username,
        'email': user.email or '',
        'roles': sorted(roles),
        'type': ACCESS_TOKEN_TYPE,
        'iss': settings.JWT_ISSUER,
        'aud': settings.JWT_AUDIENCE,
        'iat': issued_at,
        'exp': issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> AccessClaims:
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as exc:
        raise AuthenticationError('Invalid token') from exc

    if payload.get('type') != ACCESS_TOKEN_TYPE:
        raise AuthenticationError('Invalid token type')
    user_id = payload.get('sub')
    if not user_id:
        raise AuthenticationError('Invalid token')

    roles = payload.get('roles') or []
    if isinstance(roles, str):
        roles = [roles]
    return AccessClaims(
        user_id=user_id,
        username=payload.get('name', ''),
        email=payload.get('email', ''),
        roles=tuple(roles),
        expires_at=datetime.fromtimestamp(payload['exp'], tz=timezone.utc),
    )
