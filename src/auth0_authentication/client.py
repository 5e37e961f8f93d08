"""
Authentication API client built on httpx.

Each flow composes its request body with ParameterBuilder and POSTs it
as JSON to the tenant's domain.
"""
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .config import AuthenticationClientConfig, ResolvedConfig, resolve_config
from .errors import AuthenticationError, InvalidCredentialsError
from .parameter_builder import (
    GRANT_TYPE_AUTHORIZATION_CODE,
    GRANT_TYPE_MFA_OTP,
    GRANT_TYPE_PASSWORD,
    GRANT_TYPE_PASSWORD_REALM,
    GRANT_TYPE_PASSWORDLESS_OTP,
    GRANT_TYPE_REFRESH_TOKEN,
    GRANT_TYPE_TOKEN_EXCHANGE,
    ParameterBuilder,
)
from .types import Credentials, DatabaseUser, PasswordlessType

logger = logging.getLogger(__name__)

# Constants
LOG_PREFIX = "[AuthenticationClient]"

SMS_CONNECTION = "sms"
EMAIL_CONNECTION = "email"

USERNAME_KEY = "username"
PASSWORD_KEY = "password"
EMAIL_KEY = "email"
PHONE_NUMBER_KEY = "phone_number"
OTP_KEY = "otp"
MFA_TOKEN_KEY = "mfa_token"
OAUTH_CODE_KEY = "code"
CODE_VERIFIER_KEY = "code_verifier"
REDIRECT_URI_KEY = "redirect_uri"
SUBJECT_TOKEN_KEY = "subject_token"
SUBJECT_TOKEN_TYPE_KEY = "subject_token_type"

OAUTH_TOKEN_PATH = "/oauth/token"
PASSWORDLESS_START_PATH = "/passwordless/start"
SIGN_UP_PATH = "/dbconnections/signup"
CHANGE_PASSWORD_PATH = "/dbconnections/change_password"


class AuthenticationClient:
    """
    Async client for the Authentication API token, passwordless and
    database connection endpoints.
    """

    def __init__(self, config: AuthenticationClientConfig):
        self._config_raw = config
        self._config: ResolvedConfig = resolve_config(config)
        self._client: Optional[httpx.AsyncClient] = config.httpx_client

        # Flag to track if we own the client (created it)
        self._own_client = self._client is None

    @classmethod
    def create(cls, config: AuthenticationClientConfig) -> "AuthenticationClient":
        """Factory method to create a client."""
        return cls(config)

    @property
    def client_id(self) -> str:
        return self._config.client_id

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def connect(self) -> None:
        """Initialize the client if needed."""
        if self._client:
            return

        timeout = httpx.Timeout(
            connect=self._config.timeout.connect,
            read=self._config.timeout.read,
            write=self._config.timeout.write,
            pool=self._config.timeout.pool
        )

        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=timeout,
            headers=self._config.headers,
        )

    async def close(self) -> None:
        """Close the client if we own it."""
        if self._own_client and self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AuthenticationClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Token endpoint flows

    async def login(
        self,
        username_or_email: str,
        password: str,
        realm: Optional[str] = None,
        audience: Optional[str] = None,
        scope: Optional[str] = None,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Credentials:
        """
        Log in with username/email and password.

        Uses the password-realm grant against `realm`, or against the
        configured default database connection when no realm is given.
        With neither, the plain password grant and the tenant's default
        directory are used.
        """
        builder = (
            ParameterBuilder.new_authentication_builder()
            .set_client_id(self.client_id)
            .set(USERNAME_KEY, username_or_email)
            .set(PASSWORD_KEY, password)
        )
        if realm is None:
            realm = self._config.default_database_connection
        if realm is not None:
            builder.set_grant_type(GRANT_TYPE_PASSWORD_REALM).set_realm(realm)
        else:
            builder.set_grant_type(GRANT_TYPE_PASSWORD)
        builder.set(ParameterBuilder.AUDIENCE_KEY, audience)
        if scope is not None:
            builder.set_scope(scope)
        return await self._token(builder, parameters)

    async def login_with_otp(
        self,
        mfa_token: str,
        otp: str,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Credentials:
        """Complete a multi-factor login with a one-time password."""
        builder = (
            ParameterBuilder.new_builder()
            .set_client_id(self.client_id)
            .set_grant_type(GRANT_TYPE_MFA_OTP)
            .set(MFA_TOKEN_KEY, mfa_token)
            .set(OTP_KEY, otp)
        )
        return await self._token(builder, parameters)

    async def login_with_email(
        self,
        email: str,
        verification_code: str,
        realm: str = EMAIL_CONNECTION,
        audience: Optional[str] = None,
        scope: Optional[str] = None,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Credentials:
        """Log in with the code received by email in a passwordless flow."""
        return await self._login_with_passwordless_otp(
            email, verification_code, realm, audience, scope, parameters
        )

    async def login_with_phone_number(
        self,
        phone_number: str,
        verification_code: str,
        realm: str = SMS_CONNECTION,
        audience: Optional[str] = None,
        scope: Optional[str] = None,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Credentials:
        """Log in with the code received by SMS in a passwordless flow."""
        return await self._login_with_passwordless_otp(
            phone_number, verification_code, realm, audience, scope, parameters
        )

    async def token(
        self,
        authorization_code: str,
        code_verifier: str,
        redirect_uri: str,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Credentials:
        """Exchange an authorization code (PKCE) for credentials."""
        builder = (
            ParameterBuilder.new_builder()
            .set_client_id(self.client_id)
            .set_grant_type(GRANT_TYPE_AUTHORIZATION_CODE)
            .set(OAUTH_CODE_KEY, authorization_code)
            .set(CODE_VERIFIER_KEY, code_verifier)
            .set(REDIRECT_URI_KEY, redirect_uri)
        )
        return await self._token(builder, parameters)

    async def renew_auth(
        self,
        refresh_token: str,
        scope: Optional[str] = None,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Credentials:
        """Obtain new credentials with a refresh token."""
        builder = (
            ParameterBuilder.new_builder()
            .set_client_id(self.client_id)
            .set_grant_type(GRANT_TYPE_REFRESH_TOKEN)
            .set_refresh_token(refresh_token)
            .set(ParameterBuilder.SCOPE_KEY, scope)
        )
        return await self._token(builder, parameters)

    async def custom_token_exchange(
        self,
        subject_token_type: str,
        subject_token: str,
        audience: Optional[str] = None,
        scope: Optional[str] = None,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Credentials:
        """Exchange an external token for Auth0 credentials."""
        builder = (
            ParameterBuilder.new_authentication_builder()
            .set_client_id(self.client_id)
            .set_grant_type(GRANT_TYPE_TOKEN_EXCHANGE)
            .set(SUBJECT_TOKEN_TYPE_KEY, subject_token_type)
            .set(SUBJECT_TOKEN_KEY, subject_token)
            .set(ParameterBuilder.AUDIENCE_KEY, audience)
        )
        if scope is not None:
            builder.set_scope(scope)
        return await self._token(builder, parameters)

    # Passwordless start

    async def passwordless_with_email(
        self,
        email: str,
        passwordless_type: PasswordlessType,
        connection: str = EMAIL_CONNECTION,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> None:
        """Send a passwordless code or link by email."""
        builder = (
            ParameterBuilder.new_builder()
            .set_client_id(self.client_id)
            .set(EMAIL_KEY, email)
            .set_send(passwordless_type)
            .set_connection(connection)
        )
        await self._post(PASSWORDLESS_START_PATH, builder, parameters)

    async def passwordless_with_sms(
        self,
        phone_number: str,
        passwordless_type: PasswordlessType,
        connection: str = SMS_CONNECTION,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> None:
        """Send a passwordless code or link by SMS."""
        builder = (
            ParameterBuilder.new_builder()
            .set_client_id(self.client_id)
            .set(PHONE_NUMBER_KEY, phone_number)
            .set_send(passwordless_type)
            .set_connection(connection)
        )
        await self._post(PASSWORDLESS_START_PATH, builder, parameters)

    # Database connections

    def _database_connection(self, connection: Optional[str]) -> str:
        connection = connection or self._config.default_database_connection
        if not connection:
            raise ValueError("a database connection is required when no default is configured")
        return connection

    async def create_user(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
        connection: Optional[str] = None,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> DatabaseUser:
        """
        Create a user in a database connection.

        Falls back to the configured default database connection. A None
        username is left out of the request.
        """
        builder = (
            ParameterBuilder.new_builder()
            .set(USERNAME_KEY, username)
            .set(EMAIL_KEY, email)
            .set(PASSWORD_KEY, password)
            .set_connection(self._database_connection(connection))
            .set_client_id(self.client_id)
        )
        data = await self._post(SIGN_UP_PATH, builder, parameters)
        if not isinstance(data, dict):
            data = {}
        return DatabaseUser.from_dict({"email": email, "username": username, **data})

    async def request_change_password(
        self,
        email: str,
        connection: Optional[str] = None,
        parameters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> None:
        """Ask Auth0 to email the user a password reset link."""
        builder = (
            ParameterBuilder.new_builder()
            .set(EMAIL_KEY, email)
            .set_client_id(self.client_id)
            .set_connection(self._database_connection(connection))
        )
        await self._post(CHANGE_PASSWORD_PATH, builder, parameters)

    # Internals

    async def _login_with_passwordless_otp(
        self,
        username: str,
        verification_code: str,
        realm: str,
        audience: Optional[str],
        scope: Optional[str],
        parameters: Optional[Mapping[str, Optional[str]]],
    ) -> Credentials:
        builder = (
            ParameterBuilder.new_authentication_builder()
            .set_client_id(self.client_id)
            .set_grant_type(GRANT_TYPE_PASSWORDLESS_OTP)
            .set(USERNAME_KEY, username)
            .set(OTP_KEY, verification_code)
            .set_realm(realm)
            .set(ParameterBuilder.AUDIENCE_KEY, audience)
        )
        if scope is not None:
            builder.set_scope(scope)
        return await self._token(builder, parameters)

    async def _token(
        self,
        builder: ParameterBuilder,
        parameters: Optional[Mapping[str, Optional[str]]],
    ) -> Credentials:
        data = await self._post(OAUTH_TOKEN_PATH, builder, parameters)
        if not isinstance(data, dict) or not data.get("access_token"):
            raise InvalidCredentialsError("access_token")
        return Credentials.from_dict(data)

    async def _post(
        self,
        path: str,
        builder: ParameterBuilder,
        parameters: Optional[Mapping[str, Optional[str]]],
    ) -> Any:
        """POST the builder's parameters as JSON and return the decoded body."""
        if parameters:
            builder.add_all(parameters)
        body: Dict[str, str] = builder.as_dictionary()

        if not self._client:
            await self.connect()

        assert self._client is not None

        logger.debug(f"{LOG_PREFIX} Request: POST {path} keys={sorted(body)}")

        try:
            response = await self._client.post(path, json=body)
        except httpx.RequestError as e:
            logger.error(f"{LOG_PREFIX} Request failed: {e}")
            raise e

        res_data: Any = None
        try:
            res_data = response.json()
        except ValueError:
            # Not JSON, or not valid UTF-8
            res_data = response.text or None

        if not response.is_success:
            error = AuthenticationError.from_response_body(response.status_code, res_data)
            logger.debug(f"{LOG_PREFIX} Response: {response.status_code} {path} error={error.code}")
            raise error

        logger.debug(f"{LOG_PREFIX} Response: {response.status_code} {path}")
        return res_data
