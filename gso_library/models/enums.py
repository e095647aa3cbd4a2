from enum import Enum


class AuditEventType(str, Enum):
    LOGIN_SUCCESS = 'LoginSuccess'
    LOGIN_FAILURE = 'LoginFailure'
    TOKEN_REFRESH = 'TokenRefresh'
    FILE_DOWNLOAD = 'FileDownload'
    ACCOUNT_DISABLE = 'AccountDisable'
    ACCOUNT_ENABLE = 'AccountEnable'
    ROLE_GRANT = 'RoleGrant'
    ROLE_REMOVE = 'RoleRemove'


class LoginFailureReason(str, Enum):
    UNKNOWN_USER = 'unknown_user'
    DISABLED_ACCOUNT = 'disabled_account'
    WRONG_PASSWORD = 'wrong_password'
    REFRESH_INVALID = 'refresh_invalid'
    REFRESH_DISABLED_ACCOUNT = 'refresh_disabled_account'
