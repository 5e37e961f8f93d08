from typing import Any, Optional


class AuthClientError(Exception):
    """Base exception for authentication client errors."""
    pass


class AuthenticationError(AuthClientError):
    def __init__(
        self,
        status_code: int,
        code: Optional[str] = None,
        description: Optional[str] = None,
        body: Any = None,
    ):
        msg = f"Authentication request failed with status {status_code}"
        if code:
            msg += f": {code}"
        if description:
            msg += f" ({description})"
        super().__init__(msg)
        self.status_code = status_code
        self.code = code
        self.description = description
        self.body = body

    @classmethod
    def from_response_body(cls, status_code: int, body: Any) -> "AuthenticationError":
        """Build the error from a JSON or text response body."""
        if isinstance(body, dict):
            code = body.get("error") or body.get("code")
            description = (
                body.get("error_description")
                or body.get("description")
                or body.get("message")
            )
            return cls(status_code, code, description, body)
        return cls(status_code, None, str(body) if body else None, body)


class InvalidCredentialsError(AuthClientError):
    def __init__(self, missing_field: str):
        super().__init__(f"Token response is missing '{missing_field}'")
        self.missing_field = missing_field
