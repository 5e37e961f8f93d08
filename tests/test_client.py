"""
Tests for AuthenticationClient.
"""
import json

import httpx
import pytest
import respx
from auth0_authentication.client import AuthenticationClient
from auth0_authentication.config import AuthenticationClientConfig
from auth0_authentication.errors import AuthenticationError, InvalidCredentialsError
from auth0_authentication.types import Credentials, DatabaseUser, PasswordlessType

BASE_URL = "https://tenant.auth0.com"
TOKEN_RESPONSE = {
    "access_token": "at",
    "id_token": "idt",
    "refresh_token": "rt",
    "token_type": "Bearer",
    "expires_in": 86400,
}

@pytest.fixture
def config():
    return AuthenticationClientConfig(domain="tenant.auth0.com", client_id="CLIENT_ID")

def _body(route):
    return json.loads(route.calls.last.request.read())

@pytest.mark.asyncio
async def test_client_factory(config):
    client = AuthenticationClient.create(config)
    assert isinstance(client, AuthenticationClient)
    assert client.client_id == "CLIENT_ID"
    assert client.base_url == BASE_URL

@pytest.mark.asyncio
async def test_client_lifecycle(config):
    async with AuthenticationClient(config) as client:
        assert client._client is not None
        assert not client._client.is_closed

    assert client._client is None

@pytest.mark.asyncio
async def test_external_httpx_client_not_closed():
    http = httpx.AsyncClient(base_url=BASE_URL)
    config = AuthenticationClientConfig(domain=BASE_URL, client_id="CLIENT_ID", httpx_client=http)
    async with AuthenticationClient(config) as client:
        assert client._client is http
    assert not http.is_closed
    await http.aclose()

@pytest.mark.asyncio
async def test_login_with_realm(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            creds = await client.login("user@example.com", "secret", realm="my-db", audience="https://api")

            assert isinstance(creds, Credentials)
            assert creds.access_token == "at"
            assert creds.refresh_token == "rt"
            assert _body(route) == {
                "scope": "openid",
                "client_id": "CLIENT_ID",
                "username": "user@example.com",
                "password": "secret",
                "grant_type": "http://auth0.com/oauth/grant-type/password-realm",
                "realm": "my-db",
                "audience": "https://api",
            }

@pytest.mark.asyncio
async def test_login_without_realm_uses_default_connection(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.login("user", "secret", scope="openid profile")

            assert _body(route) == {
                "scope": "openid profile",
                "client_id": "CLIENT_ID",
                "username": "user",
                "password": "secret",
                "grant_type": "http://auth0.com/oauth/grant-type/password-realm",
                "realm": "Username-Password-Authentication",
            }

@pytest.mark.asyncio
async def test_login_without_any_realm_uses_password_grant():
    config = AuthenticationClientConfig(
        domain="tenant.auth0.com", client_id="CLIENT_ID", default_database_connection=None
    )
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.login("user", "secret")

            assert _body(route) == {
                "scope": "openid",
                "client_id": "CLIENT_ID",
                "username": "user",
                "password": "secret",
                "grant_type": "password",
            }

@pytest.mark.asyncio
async def test_login_extra_parameters_skip_none(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.login("user", "secret", parameters={"device": "phone", "scope": None})

            body = _body(route)
            assert body["device"] == "phone"
            assert body["scope"] == "openid"

@pytest.mark.asyncio
async def test_login_with_otp(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.login_with_otp("mfa-token", "123456")

            assert _body(route) == {
                "client_id": "CLIENT_ID",
                "grant_type": "http://auth0.com/oauth/grant-type/mfa-otp",
                "mfa_token": "mfa-token",
                "otp": "123456",
            }

@pytest.mark.asyncio
async def test_login_with_email_code(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.login_with_email("user@example.com", "4321")

            assert _body(route) == {
                "scope": "openid",
                "client_id": "CLIENT_ID",
                "grant_type": "http://auth0.com/oauth/grant-type/passwordless/otp",
                "username": "user@example.com",
                "otp": "4321",
                "realm": "email",
            }

@pytest.mark.asyncio
async def test_login_with_phone_number_code(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.login_with_phone_number("+15555550100", "4321", audience="https://api")

            body = _body(route)
            assert body["realm"] == "sms"
            assert body["username"] == "+15555550100"
            assert body["audience"] == "https://api"

@pytest.mark.asyncio
async def test_token_exchanges_authorization_code(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.token("auth-code", "verifier", "app://callback")

            assert _body(route) == {
                "client_id": "CLIENT_ID",
                "grant_type": "authorization_code",
                "code": "auth-code",
                "code_verifier": "verifier",
                "redirect_uri": "app://callback",
            }

@pytest.mark.asyncio
async def test_renew_auth(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.renew_auth("rt")

            assert _body(route) == {
                "client_id": "CLIENT_ID",
                "grant_type": "refresh_token",
                "refresh_token": "rt",
            }

@pytest.mark.asyncio
async def test_custom_token_exchange(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)

            await client.custom_token_exchange("urn:acme:token", "external", scope="openid email")

            assert _body(route) == {
                "scope": "openid email",
                "client_id": "CLIENT_ID",
                "grant_type": "urn:ietf:params:oauth:grant-type:token-exchange",
                "subject_token_type": "urn:acme:token",
                "subject_token": "external",
            }

@pytest.mark.asyncio
async def test_passwordless_with_email(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/passwordless/start").respond(200, json={"_id": "1", "email": "user@example.com"})

            result = await client.passwordless_with_email("user@example.com", PasswordlessType.WEB_LINK)

            assert result is None
            assert _body(route) == {
                "client_id": "CLIENT_ID",
                "email": "user@example.com",
                "send": "link",
                "connection": "email",
            }

@pytest.mark.asyncio
async def test_passwordless_with_sms(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/passwordless/start").respond(200, json={})

            await client.passwordless_with_sms("+15555550100", PasswordlessType.CODE, connection="custom-sms")

            assert _body(route) == {
                "client_id": "CLIENT_ID",
                "phone_number": "+15555550100",
                "send": "code",
                "connection": "custom-sms",
            }

@pytest.mark.asyncio
async def test_error_response_raises_authentication_error(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/oauth/token").respond(
                403, json={"error": "invalid_grant", "error_description": "Wrong email or password."}
            )

            with pytest.raises(AuthenticationError) as exc:
                await client.login("user", "wrong")

            assert exc.value.status_code == 403
            assert exc.value.code == "invalid_grant"
            assert exc.value.description == "Wrong email or password."

@pytest.mark.asyncio
async def test_missing_access_token_raises(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/oauth/token").respond(200, json={"id_token": "idt"})

            with pytest.raises(InvalidCredentialsError) as exc:
                await client.renew_auth("rt")

            assert exc.value.missing_field == "access_token"

@pytest.mark.asyncio
async def test_transport_error_propagates(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/oauth/token").mock(side_effect=httpx.ConnectError("boom"))

            with pytest.raises(httpx.ConnectError):
                await client.renew_auth("rt")

@pytest.mark.asyncio
async def test_request_connects_lazily(config):
    client = AuthenticationClient(config)
    with respx.mock(base_url=BASE_URL) as mock:
        mock.post("/oauth/token").respond(200, json=TOKEN_RESPONSE)
        creds = await client.renew_auth("rt")
    assert creds.access_token == "at"
    await client.close()

@pytest.mark.asyncio
async def test_create_user_uses_default_connection(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/dbconnections/signup").respond(
                200, json={"_id": "abc", "email": "user@example.com", "email_verified": False}
            )

            user = await client.create_user("user@example.com", "secret", username="johndoe")

            assert isinstance(user, DatabaseUser)
            assert user.user_id == "abc"
            assert user.username == "johndoe"
            assert _body(route) == {
                "username": "johndoe",
                "email": "user@example.com",
                "password": "secret",
                "connection": "Username-Password-Authentication",
                "client_id": "CLIENT_ID",
            }

@pytest.mark.asyncio
async def test_create_user_without_username(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/dbconnections/signup").respond(200, json={"email": "user@example.com"})

            user = await client.create_user("user@example.com", "secret", connection="other-db")

            assert user.username is None
            assert _body(route) == {
                "email": "user@example.com",
                "password": "secret",
                "connection": "other-db",
                "client_id": "CLIENT_ID",
            }

@pytest.mark.asyncio
async def test_request_change_password(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            route = mock.post("/dbconnections/change_password").respond(
                200, text="We've just sent you an email to reset your password."
            )

            result = await client.request_change_password("user@example.com")

            assert result is None
            assert _body(route) == {
                "email": "user@example.com",
                "client_id": "CLIENT_ID",
                "connection": "Username-Password-Authentication",
            }

@pytest.mark.asyncio
async def test_database_flow_requires_connection():
    config = AuthenticationClientConfig(
        domain="tenant.auth0.com", client_id="CLIENT_ID", default_database_connection=None
    )
    async with AuthenticationClient(config) as client:
        with pytest.raises(ValueError):
            await client.request_change_password("user@example.com")

@pytest.mark.asyncio
async def test_non_utf8_error_body_falls_back_to_text(config):
    async with AuthenticationClient(config) as client:
        with respx.mock(base_url=BASE_URL) as mock:
            mock.post("/oauth/token").respond(500, content=b"\xc3\x28 broken")

            with pytest.raises(AuthenticationError) as exc:
                await client.renew_auth("rt")

            assert exc.value.status_code == 500
            assert exc.value.code is None
            assert isinstance(exc.value.body, str)
