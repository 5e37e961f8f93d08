"""
Fluent builder for Authentication API request parameters.

Usage:
    parameters = (
        ParameterBuilder.new_builder()
        .set_client_id("{CLIENT_ID}")
        .set_connection("{CONNECTION}")
        .set("{PARAMETER_NAME}", "{PARAMETER_VALUE}")
        .as_dictionary()
    )
"""
import logging
from typing import Dict, Mapping, Optional

from .types import PasswordlessType

logger = logging.getLogger(__name__)
LOG_PREFIX = "[ParameterBuilder]"

# Grant types
GRANT_TYPE_REFRESH_TOKEN = "refresh_token"
GRANT_TYPE_PASSWORD = "password"
GRANT_TYPE_PASSWORD_REALM = "http://auth0.com/oauth/grant-type/password-realm"
GRANT_TYPE_AUTHORIZATION_CODE = "authorization_code"
GRANT_TYPE_MFA_OTP = "http://auth0.com/oauth/grant-type/mfa-otp"
GRANT_TYPE_PASSWORDLESS_OTP = "http://auth0.com/oauth/grant-type/passwordless/otp"
GRANT_TYPE_TOKEN_EXCHANGE = "urn:ietf:params:oauth:grant-type:token-exchange"

# Scopes
SCOPE_OPENID = "openid"
SCOPE_OFFLINE_ACCESS = "openid offline_access"

# Parameter keys
SCOPE_KEY = "scope"
REFRESH_TOKEN_KEY = "refresh_token"
CONNECTION_KEY = "connection"
REALM_KEY = "realm"
SEND_KEY = "send"
CLIENT_ID_KEY = "client_id"
GRANT_TYPE_KEY = "grant_type"
AUDIENCE_KEY = "audience"

# Keys whose values never appear unmasked in logs
SECRET_KEYS = frozenset({
    REFRESH_TOKEN_KEY,
    "password",
    "otp",
    "code",
    "code_verifier",
    "subject_token",
    "mfa_token",
    "client_secret",
})


def mask_value(val: Optional[str]) -> str:
    """Mask sensitive value for logging, showing first 4 chars."""
    if not val:
        return "<empty>"
    if len(val) <= 4:
        return "*" * len(val)
    return val[:4] + "*" * (len(val) - 4)


def _loggable(key: str, value: str) -> str:
    return mask_value(value) if key in SECRET_KEYS else value


class ParameterBuilder:
    """
    Accumulates the string parameters of an Authentication API request.

    Every mutator returns the builder itself so calls can be chained.
    The builder stays usable after as_dictionary(), so one builder can
    produce the bodies of several related requests.
    """

    GRANT_TYPE_REFRESH_TOKEN = GRANT_TYPE_REFRESH_TOKEN
    GRANT_TYPE_PASSWORD = GRANT_TYPE_PASSWORD
    GRANT_TYPE_PASSWORD_REALM = GRANT_TYPE_PASSWORD_REALM
    GRANT_TYPE_AUTHORIZATION_CODE = GRANT_TYPE_AUTHORIZATION_CODE
    GRANT_TYPE_MFA_OTP = GRANT_TYPE_MFA_OTP
    GRANT_TYPE_PASSWORDLESS_OTP = GRANT_TYPE_PASSWORDLESS_OTP
    GRANT_TYPE_TOKEN_EXCHANGE = GRANT_TYPE_TOKEN_EXCHANGE
    SCOPE_OPENID = SCOPE_OPENID
    SCOPE_OFFLINE_ACCESS = SCOPE_OFFLINE_ACCESS
    SCOPE_KEY = SCOPE_KEY
    REFRESH_TOKEN_KEY = REFRESH_TOKEN_KEY
    CONNECTION_KEY = CONNECTION_KEY
    REALM_KEY = REALM_KEY
    SEND_KEY = SEND_KEY
    CLIENT_ID_KEY = CLIENT_ID_KEY
    GRANT_TYPE_KEY = GRANT_TYPE_KEY
    AUDIENCE_KEY = AUDIENCE_KEY

    def __init__(self, parameters: Optional[Mapping[str, Optional[str]]] = None):
        # None seeds are dropped so no key ever maps to None
        self._parameters: Dict[str, str] = {
            k: v for k, v in (parameters or {}).items() if v is not None
        }

    @classmethod
    def new_builder(cls, parameters: Optional[Mapping[str, Optional[str]]] = None) -> "ParameterBuilder":
        """Create a builder seeded with a copy of `parameters`, minus None values."""
        return cls(parameters)

    @classmethod
    def new_authentication_builder(cls) -> "ParameterBuilder":
        """Create a builder with the login defaults, i.e. 'openid' scope."""
        return cls.new_builder().set_scope(SCOPE_OPENID)

    def set_client_id(self, client_id: str) -> "ParameterBuilder":
        return self.set(CLIENT_ID_KEY, client_id)

    def set_grant_type(self, grant_type: str) -> "ParameterBuilder":
        return self.set(GRANT_TYPE_KEY, grant_type)

    def set_connection(self, connection: str) -> "ParameterBuilder":
        return self.set(CONNECTION_KEY, connection)

    def set_realm(self, realm: str) -> "ParameterBuilder":
        """
        Set the 'realm' parameter. A realm identifies the connection that
        resolves the user's credentials.
        """
        return self.set(REALM_KEY, realm)

    def set_scope(self, scope: str) -> "ParameterBuilder":
        return self.set(SCOPE_KEY, scope)

    def set_audience(self, audience: str) -> "ParameterBuilder":
        return self.set(AUDIENCE_KEY, audience)

    def set_refresh_token(self, refresh_token: str) -> "ParameterBuilder":
        return self.set(REFRESH_TOKEN_KEY, refresh_token)

    def set_send(self, passwordless_type: PasswordlessType) -> "ParameterBuilder":
        """Set the 'send' parameter to the delivery channel's value."""
        return self.set(SEND_KEY, passwordless_type.value)

    def set(self, key: str, value: Optional[str]) -> "ParameterBuilder":
        """
        Set a parameter.

        A None value removes the key if present.
        """
        if value is None:
            if self._parameters.pop(key, None) is not None:
                logger.debug(f"{LOG_PREFIX} set: removed '{key}'")
            return self
        self._parameters[key] = value
        logger.debug(f"{LOG_PREFIX} set: {key}={_loggable(key, value)}")
        return self

    def add_all(self, parameters: Mapping[str, Optional[str]]) -> "ParameterBuilder":
        """
        Add every parameter of a mapping.

        None values are skipped; they never remove an existing key.
        """
        added = {k: v for k, v in parameters.items() if v is not None}
        self._parameters.update(added)
        logger.debug(
            f"{LOG_PREFIX} add_all: added={sorted(added)} "
            f"skipped={len(parameters) - len(added)}"
        )
        return self

    def clear_all(self) -> "ParameterBuilder":
        self._parameters.clear()
        return self

    def as_dictionary(self) -> Dict[str, str]:
        """Get a copy of all the parameters set so far."""
        return dict(self._parameters)

    def __repr__(self) -> str:
        masked = {k: _loggable(k, v) for k, v in self._parameters.items()}
        return f"ParameterBuilder({masked!r})"
