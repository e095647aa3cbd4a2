from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gso_library.core.config import settings
from gso_library.services.errors import AuthenticationError, ForbiddenError
from gso_library.services.token_service import AccessClaims, decode_access_token

security = HTTPBearer(auto_error=False)


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AccessClaims:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError('Not authenticated')
    return decode_access_token(credentials.credentials)


def require_roles(*roles: str) -> Callable[..., AccessClaims]:
    """Dependency factory: the caller must hold at least one of ``roles``."""

    def dependency(principal: AccessClaims = Depends(get_current_principal)) -> AccessClaims:
        if not principal.has_any_role(roles):
            raise ForbiddenError('Insufficient role')
        return principal

    return dependency


require_admin = require_roles(settings.ADMIN_ROLE)
