"""
Core type definitions for auth0-authentication.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class PasswordlessType(str, Enum):
    """How a passwordless code or link is delivered to the user."""
    CODE = 'code'
    WEB_LINK = 'link'
    ANDROID_LINK = 'link_android'


@dataclass
class Credentials:
    """Tokens returned by the /oauth/token endpoint."""
    access_token: str
    token_type: str = "Bearer"
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credentials":
        known = {"access_token", "token_type", "id_token", "refresh_token", "expires_in", "scope"}
        expires_in = data.get("expires_in")
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type") or "Bearer",
            id_token=data.get("id_token"),
            refresh_token=data.get("refresh_token"),
            expires_in=int(expires_in) if expires_in is not None else None,
            scope=data.get("scope"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class DatabaseUser:
    """User created in a database connection by /dbconnections/signup."""
    email: str
    username: Optional[str] = None
    email_verified: bool = False
    user_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatabaseUser":
        return cls(
            email=data["email"],
            username=data.get("username"),
            email_verified=bool(data.get("email_verified", False)),
            user_id=data.get("_id") or data.get("user_id"),
        )
