from gso_library.models.base import CreatedAtModel, IDModel, TimestampModel
from gso_library.models.role import Role, UserRoleLink
from gso_library.models.user import User
from gso_library.models.refresh_token import RefreshToken
from gso_library.models.audit_event import AuditEvent

__all__ = [
    'CreatedAtModel',
    'IDModel',
    'TimestampModel',
    'Role',
    'UserRoleLink',
    'User',
    'RefreshToken',
    'AuditEvent',
]
