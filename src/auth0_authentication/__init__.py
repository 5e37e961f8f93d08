"""
Auth0 Authentication - request parameter builder and API client
"""

__version__ = "0.1.0"

from .types import PasswordlessType, Credentials, DatabaseUser
from .parameter_builder import (
    ParameterBuilder,
    GRANT_TYPE_REFRESH_TOKEN,
    GRANT_TYPE_PASSWORD,
    GRANT_TYPE_PASSWORD_REALM,
    GRANT_TYPE_AUTHORIZATION_CODE,
    GRANT_TYPE_MFA_OTP,
    GRANT_TYPE_PASSWORDLESS_OTP,
    GRANT_TYPE_TOKEN_EXCHANGE,
    SCOPE_OPENID,
    SCOPE_OFFLINE_ACCESS,
    SCOPE_KEY,
    REFRESH_TOKEN_KEY,
    CONNECTION_KEY,
    REALM_KEY,
    SEND_KEY,
    CLIENT_ID_KEY,
    GRANT_TYPE_KEY,
    AUDIENCE_KEY,
)
from .config import AuthenticationClientConfig, TimeoutConfig, resolve_client_config
from .errors import AuthClientError, AuthenticationError, InvalidCredentialsError
from .client import AuthenticationClient

__all__ = [
    "PasswordlessType", "Credentials", "DatabaseUser",
    "ParameterBuilder",
    "GRANT_TYPE_REFRESH_TOKEN", "GRANT_TYPE_PASSWORD", "GRANT_TYPE_PASSWORD_REALM",
    "GRANT_TYPE_AUTHORIZATION_CODE", "GRANT_TYPE_MFA_OTP", "GRANT_TYPE_PASSWORDLESS_OTP",
    "GRANT_TYPE_TOKEN_EXCHANGE",
    "SCOPE_OPENID", "SCOPE_OFFLINE_ACCESS",
    "SCOPE_KEY", "REFRESH_TOKEN_KEY", "CONNECTION_KEY", "REALM_KEY", "SEND_KEY",
    "CLIENT_ID_KEY", "GRANT_TYPE_KEY", "AUDIENCE_KEY",
    "AuthenticationClientConfig", "TimeoutConfig", "resolve_client_config",
    "AuthClientError", "AuthenticationError", "InvalidCredentialsError",
    "AuthenticationClient",
]
