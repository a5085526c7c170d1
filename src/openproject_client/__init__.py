"""openproject_client package exports."""

from .auth import (
    AuthStrategy,
    BasicAuth,
    CookieSessionAuth,
    SignedTokenAuth,
    canonicalize_request,
    query_string_hash,
)
from .client import OpenProjectClient
from .config import (
    ClientConfig,
    auth_from_config,
    create_client_from_env,
    load_env_config,
)
from .dispatch import ResourceKind, ResourceService
from .errors import (
    AuthError,
    ConfigError,
    DecodeError,
    DispatchError,
    OpenProjectClientError,
    RequestError,
    StatusError,
    TransportError,
)
from .filters import Filter, FilterOperator, FilterSpec
from .models import (
    Attachment,
    Category,
    Project,
    Query,
    Status,
    User,
    WikiPage,
    WorkPackage,
)
from .response import Response

__all__ = [
    # Client
    "OpenProjectClient",
    "Response",
    "ResourceKind",
    "ResourceService",
    # Authentication
    "AuthStrategy",
    "BasicAuth",
    "CookieSessionAuth",
    "SignedTokenAuth",
    "canonicalize_request",
    "query_string_hash",
    # Config helpers
    "ClientConfig",
    "load_env_config",
    "auth_from_config",
    "create_client_from_env",
    # Filters
    "Filter",
    "FilterOperator",
    "FilterSpec",
    # Models
    "WorkPackage",
    "User",
    "Project",
    "Status",
    "WikiPage",
    "Attachment",
    "Category",
    "Query",
    # Exceptions
    "OpenProjectClientError",
    "ConfigError",
    "RequestError",
    "TransportError",
    "AuthError",
    "StatusError",
    "DecodeError",
    "DispatchError",
]
