"""
Configuration models and resolution for the authentication client.
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

# Constants
DEFAULT_TIMEOUT_CONNECT = 5.0
DEFAULT_TIMEOUT_READ = 30.0
DEFAULT_TIMEOUT_WRITE = 10.0

DEFAULT_DB_CONNECTION = "Username-Password-Authentication"

ENV_PREFIX = "AUTH0_"


class TimeoutConfig(BaseModel):
    """Timeout configuration."""
    connect: float = DEFAULT_TIMEOUT_CONNECT
    read: float = DEFAULT_TIMEOUT_READ
    write: float = DEFAULT_TIMEOUT_WRITE
    pool: Optional[float] = None


class AuthenticationClientConfig(BaseModel):
    """Authentication client configuration."""
    model_config = {"arbitrary_types_allowed": True}

    domain: str
    client_id: str
    # Realm for password logins without an explicit realm; None selects the password grant
    default_database_connection: Optional[str] = DEFAULT_DB_CONNECTION
    timeout: Optional[Union[float, TimeoutConfig]] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    # Optional pre-configured client (httpx)
    httpx_client: Any = None

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        v = v.strip()
        scheme = "https://"
        for prefix in ("http://", "https://"):
            if v.startswith(prefix):
                scheme, v = prefix, v[len(prefix):]
                break
        host = v.strip("/")
        if not host:
            raise ValueError("domain must not be empty")
        return f"{scheme}{host}"

    @field_validator("client_id")
    @classmethod
    def validate_client_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("client_id must not be empty")
        return v

    @property
    def base_url(self) -> str:
        return self.domain


def normalize_timeout(timeout: Optional[Union[float, TimeoutConfig]]) -> TimeoutConfig:
    """Normalize timeout to TimeoutConfig object."""
    if timeout is None:
        return TimeoutConfig()
    if isinstance(timeout, (int, float)):
        return TimeoutConfig(connect=float(timeout), read=float(timeout), write=float(timeout))
    return timeout


def env_key(name: str) -> str:
    """Environment variable for a config field, e.g. client_id -> AUTH0_CLIENT_ID."""
    return f"{ENV_PREFIX}{name.upper()}"


def resolve(
    name: str,
    arg: Any,
    config: Optional[Dict[str, Any]],
    default: Any
) -> Any:
    """
    Resolve a config field from multiple sources in priority order:
    1. Direct argument (if not None)
    2. AUTH0_<NAME> environment variable
    3. Configuration dictionary entry <name>
    4. Default value
    """
    if arg is not None:
        return arg

    val = os.getenv(env_key(name))
    if val is not None:
        return val

    if config and name in config:
        return config[name]

    return default


def resolve_timeout(
    arg: Optional[float],
    config: Optional[Dict[str, Any]],
) -> Optional[float]:
    """Resolve the timeout in seconds; unparseable values fall back to the defaults."""
    val = resolve("timeout", arg, config, None)
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def resolve_client_config(
    domain: Optional[str] = None,
    client_id: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
    default_database_connection: Optional[str] = None,
) -> AuthenticationClientConfig:
    """Build a client config from arguments, AUTH0_* env vars and a config dict."""
    return AuthenticationClientConfig(
        domain=resolve("domain", domain, config, ""),
        client_id=resolve("client_id", client_id, config, ""),
        default_database_connection=resolve(
            "database_connection",
            default_database_connection,
            config,
            DEFAULT_DB_CONNECTION,
        ),
        timeout=resolve_timeout(timeout, config),
        headers=(config or {}).get("headers", {}),
    )


@dataclass
class ResolvedConfig:
    """Fully resolved configuration ready for usage."""
    base_url: str
    client_id: str
    default_database_connection: Optional[str]
    timeout: TimeoutConfig
    headers: Dict[str, str]


def resolve_config(config: AuthenticationClientConfig) -> ResolvedConfig:
    """Apply defaults and return resolved config."""
    return ResolvedConfig(
        base_url=config.base_url,
        client_id=config.client_id,
        default_database_connection=config.default_database_connection,
        timeout=normalize_timeout(config.timeout),
        headers=config.headers,
    )
