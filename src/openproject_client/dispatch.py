"""
Generic create/read/list/delete dispatch shared by every resource service.

A service is the handle: it names its ``ResourceKind`` and holds its owning
client. ``RESOURCE_ROUTES`` maps each kind to the model that receives single
results and the collection type that receives list results. The table covers
every ``ResourceKind``; anything else is rejected with ``DispatchError``
before a request is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple, Type

from pydantic import BaseModel

from .errors import DispatchError
from .filters import FilterSpec
from .models import (
    Attachment,
    AttachmentCollection,
    Category,
    CategoryCollection,
    PaginatedCollection,
    Project,
    ProjectCollection,
    Query,
    QueryCollection,
    Status,
    StatusCollection,
    User,
    UserCollection,
    WikiPage,
    WorkPackage,
    WorkPackageCollection,
)
from .response import Response

if TYPE_CHECKING:
    from .client import OpenProjectClient


class ResourceKind(str, Enum):
    WORK_PACKAGE = "work_package"
    USER = "user"
    PROJECT = "project"
    STATUS = "status"
    WIKI_PAGE = "wiki_page"
    ATTACHMENT = "attachment"
    CATEGORY = "category"
    QUERY = "query"


@dataclass(frozen=True)
class ResourceRoute:
    model: Type[BaseModel]
    # None for kinds without a list endpoint
    collection: Optional[Type[PaginatedCollection]] = None


RESOURCE_ROUTES = {
    ResourceKind.WORK_PACKAGE: ResourceRoute(WorkPackage, WorkPackageCollection),
    ResourceKind.USER: ResourceRoute(User, UserCollection),
    ResourceKind.PROJECT: ResourceRoute(Project, ProjectCollection),
    ResourceKind.STATUS: ResourceRoute(Status, StatusCollection),
    ResourceKind.WIKI_PAGE: ResourceRoute(WikiPage),
    ResourceKind.ATTACHMENT: ResourceRoute(Attachment, AttachmentCollection),
    ResourceKind.CATEGORY: ResourceRoute(Category, CategoryCollection),
    ResourceKind.QUERY: ResourceRoute(Query, QueryCollection),
}


class ResourceService:
    """Handle for one resource kind, bound to its owning client."""

    kind: ResourceKind

    def __init__(self, client: "OpenProjectClient"):
        self.client = client

    def __repr__(self) -> str:
        kind = getattr(self, "kind", None)
        return f"{type(self).__name__}(kind={getattr(kind, 'value', kind)!r})"


def resolve(handle: object) -> Tuple["OpenProjectClient", ResourceKind, ResourceRoute]:
    kind = getattr(handle, "kind", None)
    client = getattr(handle, "client", None)
    route = RESOURCE_ROUTES.get(kind) if isinstance(kind, ResourceKind) else None
    if route is None or client is None:
        raise DispatchError(f"Null client, object not identified: {handle!r}")
    return client, kind, route


def get(handle: object, endpoint: str) -> Response:
    """GET ``endpoint`` and decode the body into the handle's model."""
    client, kind, route = resolve(handle)
    request = client.new_request("GET", endpoint.rstrip("/"))
    return client.do(request, route.model, resource=kind.value)


def get_list(
    handle: object, endpoint: str, filters: Optional[FilterSpec] = None
) -> Response:
    """GET a collection endpoint; paging values land on the returned response."""
    client, kind, route = resolve(handle)
    if route.collection is None:
        raise DispatchError(f"Resource kind {kind.value!r} has no list endpoint")

    params = filters.to_params() if filters is not None else None
    request = client.new_request("GET", endpoint.rstrip("/"), params=params)
    return client.do(request, route.collection, resource=kind.value)


def create(
    handle: object, endpoint: str, payload: Optional[BaseModel] = None
) -> Response:
    """
    POST ``payload`` (a zero-valued model of the handle's type when omitted)
    and decode the reply into the same type. A reply that cannot be decoded
    raises DecodeError with the response attached.
    """
    client, kind, route = resolve(handle)
    if payload is None:
        payload = route.model()
    elif not isinstance(payload, route.model):
        raise DispatchError(
            f"Payload {type(payload).__name__} does not match resource kind "
            f"{kind.value!r} ({route.model.__name__})"
        )

    request = client.new_request("POST", endpoint, body=payload)
    response = client.send(request, resource=kind.value)
    response.result = client.decode(response, route.model)
    return response


def delete(handle: object, endpoint: str) -> Response:
    """DELETE ``endpoint``; only transport-level response data is returned."""
    client, kind, _ = resolve(handle)
    request = client.new_request("DELETE", endpoint.rstrip("/"))
    return client.send(request, resource=kind.value)


__all__ = [
    "ResourceKind",
    "ResourceRoute",
    "RESOURCE_ROUTES",
    "ResourceService",
    "resolve",
    "get",
    "get_list",
    "create",
    "delete",
]
