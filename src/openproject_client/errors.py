from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .response import Response


class OpenProjectClientError(Exception):
    """Base error for client failures."""


class ConfigError(OpenProjectClientError):
    """Bad base URL or incomplete client configuration."""


class RequestError(OpenProjectClientError):
    """The request could not be built (URL resolution or body serialization)."""


class TransportError(OpenProjectClientError):
    """Network-level failure reported by the underlying HTTP client."""


class AuthError(OpenProjectClientError):
    """Credentials could not be attached (login exchange or token signing failed)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DispatchError(OpenProjectClientError):
    """The resource handle could not be routed to a client and result type."""


class DecodeError(OpenProjectClientError):
    """A response body was present but did not match the expected shape."""

    def __init__(self, message: str, *, response: Optional[Response] = None):
        super().__init__(message)
        self.response = response


class StatusError(OpenProjectClientError):
    """
    HTTP status outside 200-299.
    The body is kept untouched on ``response`` for the caller to inspect;
    ``response_json`` / ``response_text`` are convenience views of it.
    """

    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response: Optional[Response] = None,
        response_json: Optional[Dict[str, Any]] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response = response
        self.response_json = response_json
        self.response_text = response_text

    @classmethod
    def from_response(cls, response: Response) -> "StatusError":
        resp = response.http
        response_json: Optional[Dict[str, Any]] = None
        response_text: Optional[str] = None
        message = "request failed"

        # OpenProject error bodies are HAL "Error" objects with a "message" key.
        try:
            parsed = resp.json()
        except ValueError:
            response_text = (resp.text or "")[:500]
        else:
            if isinstance(parsed, dict):
                response_json = parsed
                message = parsed.get("message") or parsed.get("error") or message

        return cls(
            status_code=resp.status_code,
            method=resp.request.method,
            url=str(resp.request.url),
            message=message,
            response=response,
            response_json=response_json,
            response_text=response_text,
        )


__all__ = [
    "OpenProjectClientError",
    "ConfigError",
    "RequestError",
    "TransportError",
    "AuthError",
    "DispatchError",
    "DecodeError",
    "StatusError",
]
