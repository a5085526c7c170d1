"""
Authentication strategies for the OpenProject client.

Every strategy implements ``attach(request)``: it returns an authenticated
copy of the outgoing ``httpx.Request`` and never touches the original (the
header map is copied, everything else is shared). Strategies are also
``httpx.Auth`` implementations, so they plug straight into a bare
``httpx.Client(auth=...)``.

- ``BasicAuth``: static username/password (or OpenProject API key).
- ``CookieSessionAuth``: logs in once against an auth URL and replays the
  session cookies. The login is single-flight per strategy instance.
- ``SignedTokenAuth``: per-request HS256 JWT bound to method, path and query.
"""

from __future__ import annotations

import abc
import hashlib
import logging
import threading
import time
from typing import Callable, Dict, Generator, Mapping, Optional, Union
from urllib.parse import quote

import httpx
import jwt

from .errors import AuthError
from .logging import event_fields

logger = logging.getLogger(__name__)

API_KEY_USERNAME = "apikey"
JWT_QUERY_PARAM = "jwt"
TOKEN_LIFETIME_SECONDS = 59
LOGIN_TIMEOUT_SECONDS = 60.0


def clone_request(request: httpx.Request) -> httpx.Request:
    """Copy of ``request`` with its own header map."""
    return httpx.Request(
        request.method,
        request.url,
        headers=request.headers.copy(),
        content=request.read() or None,
        extensions=dict(request.extensions),
    )


class AuthStrategy(httpx.Auth, abc.ABC):
    """Attach credentials to an outgoing request."""

    requires_request_body = True

    @abc.abstractmethod
    def attach(self, request: httpx.Request) -> httpx.Request:
        """Return an authenticated copy of ``request``."""

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        yield self.attach(request)


class BasicAuth(AuthStrategy):
    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password
        self._basic = httpx.BasicAuth(username, password)

    @classmethod
    def from_api_key(cls, api_key: str) -> "BasicAuth":
        # OpenProject API keys are sent as the password of the "apikey" user
        return cls(API_KEY_USERNAME, api_key)

    def attach(self, request: httpx.Request) -> httpx.Request:
        authorized = clone_request(request)
        return next(self._basic.auth_flow(authorized))

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r})"


class CookieSessionAuth(AuthStrategy):
    """
    Cookie based authentication.

    The first ``attach`` performs a JSON login POST
    (``{"username": ..., "password": ...}``) to ``auth_url`` and keeps the
    cookies the server sets. Later requests reuse them until
    ``clear_session()`` is called; cookie expiry is not tracked, so a stale
    session surfaces as a 401 to the caller.
    """

    def __init__(
        self,
        username: str,
        password: str,
        auth_url: str,
        *,
        http: Optional[httpx.Client] = None,
        timeout_seconds: float = LOGIN_TIMEOUT_SECONDS,
    ):
        self.username = username
        self.password = password
        self.auth_url = auth_url
        self.timeout_seconds = timeout_seconds
        self._http = http
        self._session: Optional[Dict[str, str]] = None
        self._lock = threading.Lock()

    @property
    def session(self) -> Optional[Mapping[str, str]]:
        return dict(self._session) if self._session is not None else None

    def clear_session(self) -> None:
        with self._lock:
            self._session = None

    def ensure_session(self) -> Dict[str, str]:
        session = self._session
        if session is not None:
            return session

        with self._lock:
            # Another caller may have logged in while we waited for the lock
            if self._session is None:
                self._session = self._login()
            return self._session

    def _login(self) -> Dict[str, str]:
        body = {"username": self.username, "password": self.password}
        try:
            if self._http is not None:
                resp = self._http.post(self.auth_url, json=body)
            else:
                with httpx.Client(timeout=self.timeout_seconds) as http:
                    resp = http.post(self.auth_url, json=body)
        except httpx.HTTPError as exc:
            raise AuthError(
                f"cookieauth: login request to {self.auth_url} failed: {exc}"
            ) from exc

        logger.info(
            "op.login", extra=event_fields("POST", self.auth_url, status=resp.status_code)
        )

        if not resp.is_success:
            raise AuthError(
                f"cookieauth: login to {self.auth_url} returned {resp.status_code}",
                status_code=resp.status_code,
            )

        return {cookie.name: cookie.value or "" for cookie in resp.cookies.jar}

    def attach(self, request: httpx.Request) -> httpx.Request:
        session = self.ensure_session()
        authorized = clone_request(request)

        pairs = [f"{name}={value}" for name, value in session.items() if value]
        if pairs:
            existing = authorized.headers.get("Cookie")
            if existing:
                pairs.insert(0, existing)
            authorized.headers["Cookie"] = "; ".join(pairs)
        return authorized

    def __repr__(self) -> str:
        return (
            f"CookieSessionAuth(username={self.username!r}, auth_url={self.auth_url!r})"
        )


def canonicalize_request(method: str, url: Union[httpx.URL, str]) -> str:
    """
    ``METHOD&/path&k1=v1&k2=v2`` with query pairs escaped and sorted.
    The ``jwt`` query parameter is never part of the canonical string.
    """
    url = httpx.URL(url)
    path = "/" + url.path.strip("/").replace("&", "%26")

    pairs = []
    for key in url.params.keys():
        if key == JWT_QUERY_PARAM:
            continue
        value = "".join(url.params.get_list(key))
        pairs.append(f"{quote(key, safe='')}={quote(value, safe='')}")
    pairs.sort()

    return f"{method.upper()}&{path}&{'&'.join(pairs)}"


def query_string_hash(method: str, url: Union[httpx.URL, str]) -> str:
    canonical = canonicalize_request(method, url)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class SignedTokenAuth(AuthStrategy):
    """
    Per-request JWT authentication (``Authorization: JWT <token>``).

    Claims: ``iss`` (issuer), ``iat``, ``exp`` (``iat`` + 59s) and ``qsh``, the
    SHA-256 of the canonical request. Each call signs a fresh token.
    """

    def __init__(
        self,
        secret: Union[str, bytes],
        issuer: str,
        *,
        lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.secret = secret
        self.issuer = issuer
        self.lifetime_seconds = lifetime_seconds
        self._clock = clock

    def claims_for(self, request: httpx.Request) -> Dict[str, object]:
        now = int(self._clock())
        return {
            "iss": self.issuer,
            "iat": now,
            "exp": now + self.lifetime_seconds,
            "qsh": query_string_hash(request.method, request.url),
        }

    def attach(self, request: httpx.Request) -> httpx.Request:
        claims = self.claims_for(request)
        try:
            token = jwt.encode(claims, self.secret, algorithm="HS256")
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise AuthError(f"jwtauth: error signing JWT: {exc}") from exc

        authorized = clone_request(request)
        authorized.headers["Authorization"] = f"JWT {token}"
        return authorized

    def __repr__(self) -> str:
        return f"SignedTokenAuth(issuer={self.issuer!r})"


__all__ = [
    "AuthStrategy",
    "BasicAuth",
    "CookieSessionAuth",
    "SignedTokenAuth",
    "canonicalize_request",
    "query_string_hash",
    "clone_request",
    "API_KEY_USERNAME",
    "JWT_QUERY_PARAM",
    "TOKEN_LIFETIME_SECONDS",
]
