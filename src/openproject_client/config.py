from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .auth import AuthStrategy, BasicAuth, CookieSessionAuth, SignedTokenAuth
from .client import OpenProjectClient
from .errors import ConfigError

ENV_BASE_URL = "OPENPROJECT_BASE_URL"
ENV_API_KEY = "OPENPROJECT_API_KEY"
ENV_USERNAME = "OPENPROJECT_USERNAME"
ENV_PASSWORD = "OPENPROJECT_PASSWORD"
ENV_AUTH_URL = "OPENPROJECT_AUTH_URL"
ENV_JWT_SECRET = "OPENPROJECT_JWT_SECRET"
ENV_JWT_ISSUER = "OPENPROJECT_JWT_ISSUER"
ENV_TIMEOUT = "OPENPROJECT_TIMEOUT_SECONDS"

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    api_key: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    auth_url: Optional[str] = None
    jwt_secret: Optional[str] = None
    jwt_issuer: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _env(name: str) -> Optional[str]:
    val = os.getenv(name, "").strip()
    return val or None


def load_env_config(*, use_dotenv: bool = True) -> ClientConfig:
    """Load client settings from the environment (optional .env)."""
    if use_dotenv:
        load_dotenv()

    timeout_raw = _env(ENV_TIMEOUT)
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS
    except ValueError as exc:
        raise ConfigError(f"{ENV_TIMEOUT} must be a number, got {timeout_raw!r}") from exc

    return ClientConfig(
        base_url=_env(ENV_BASE_URL) or "",
        api_key=_env(ENV_API_KEY),
        username=_env(ENV_USERNAME),
        password=_env(ENV_PASSWORD),
        auth_url=_env(ENV_AUTH_URL),
        jwt_secret=_env(ENV_JWT_SECRET),
        jwt_issuer=_env(ENV_JWT_ISSUER),
        timeout_seconds=timeout,
    )


def auth_from_config(config: ClientConfig) -> AuthStrategy:
    """
    Pick the single authentication strategy the settings describe, in order:
    JWT secret+issuer, cookie login (auth URL+username+password), API key,
    plain username+password.
    """
    if config.jwt_secret and config.jwt_issuer:
        return SignedTokenAuth(config.jwt_secret, config.jwt_issuer)
    if config.auth_url and config.username and config.password:
        return CookieSessionAuth(
            config.username,
            config.password,
            config.auth_url,
            timeout_seconds=config.timeout_seconds,
        )
    if config.api_key:
        return BasicAuth.from_api_key(config.api_key)
    if config.username and config.password:
        return BasicAuth(config.username, config.password)
    raise ConfigError(
        f"No credentials configured: set {ENV_API_KEY}, {ENV_USERNAME}/{ENV_PASSWORD}"
        f" (optionally {ENV_AUTH_URL}) or {ENV_JWT_SECRET}/{ENV_JWT_ISSUER}."
    )


def create_client_from_env(**kwargs) -> OpenProjectClient:
    """Create an OpenProjectClient from environment variables."""
    config = load_env_config()
    if not config.base_url:
        raise ConfigError(f"Missing {ENV_BASE_URL} in environment.")
    kwargs.setdefault("timeout_seconds", config.timeout_seconds)
    return OpenProjectClient(config.base_url, auth=auth_from_config(config), **kwargs)


__all__ = [
    "ClientConfig",
    "load_env_config",
    "auth_from_config",
    "create_client_from_env",
]
