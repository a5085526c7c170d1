from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .codec import OpenProjectDate, OpenProjectTime

T = TypeVar("T", bound=BaseModel)


def parse_id_from_href(href: Optional[str]) -> Optional[int]:
    """
    Extracts the ID from a RESTful URL.
    Example: '/api/v3/work_packages/42' -> 42
    """
    if not href:
        return None
    try:
        return int(href.strip("/").split("/")[-1])
    except (ValueError, IndexError):
        return None


class Formattable(BaseModel):
    """Rich text as OpenProject returns it (description, wiki text...)."""

    format: Optional[str] = None
    raw: Optional[str] = None
    html: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class BaseHALModel(BaseModel):
    """
    Base model that handles HAL+JSON patterns.
    _links/_embedded stay loosely typed because OpenProject mixes single link
    objects, arrays of links and null hrefs in the same relation slots.
    Every field has a default so a zero-valued instance can be built for any
    resource kind.
    """

    type_: Optional[str] = Field(default=None, alias="_type")
    links: Dict[str, Any] = Field(default_factory=dict, alias="_links")
    embedded: Dict[str, Any] = Field(default_factory=dict, alias="_embedded")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def _link(self, rel: str) -> Optional[Dict[str, Any]]:
        link = self.links.get(rel)
        return link if isinstance(link, dict) else None

    def link_href(self, rel: str) -> Optional[str]:
        link = self._link(rel)
        return link.get("href") if link else None

    def link_title(self, rel: str) -> Optional[str]:
        link = self._link(rel)
        return link.get("title") if link else None

    def link_id(self, rel: str) -> Optional[int]:
        return parse_id_from_href(self.link_href(rel))

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready body for POST requests; unset fields and empty HAL maps are dropped."""
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        for key in ("_links", "_embedded"):
            if not payload.get(key):
                payload.pop(key, None)
        return payload


# --- Resources ---


class WorkPackage(BaseHALModel):
    id: Optional[int] = None
    subject: Optional[str] = None
    description: Optional[Formattable] = None
    lock_version: Optional[int] = Field(default=None, alias="lockVersion")
    position: Optional[int] = None
    created_at: Optional[OpenProjectTime] = Field(default=None, alias="createdAt")
    updated_at: Optional[OpenProjectTime] = Field(default=None, alias="updatedAt")
    start_date: Optional[OpenProjectDate] = Field(default=None, alias="startDate")
    due_date: Optional[OpenProjectDate] = Field(default=None, alias="dueDate")

    # Note: OpenProject can return null for these fields
    percentage_done: Optional[int] = Field(default=None, alias="percentageDone")
    estimated_time: Optional[str] = Field(default=None, alias="estimatedTime")

    @property
    def description_text(self) -> str:
        if self.description is not None:
            return self.description.raw or ""
        return ""

    @property
    def status_title(self) -> str:
        return self.link_title("status") or "Unknown"

    @property
    def priority_title(self) -> str:
        return self.link_title("priority") or "Normal"

    @property
    def project_id(self) -> Optional[int]:
        return self.link_id("project")

    @property
    def status_id(self) -> Optional[int]:
        return self.link_id("status")


class User(BaseHALModel):
    id: Optional[int] = None
    name: Optional[str] = None
    login: Optional[str] = None
    admin: Optional[bool] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    avatar: Optional[str] = None
    status: Optional[str] = None
    password: Optional[str] = None
    created_at: Optional[OpenProjectTime] = Field(default=None, alias="createdAt")
    updated_at: Optional[OpenProjectTime] = Field(default=None, alias="updatedAt")


class Project(BaseHALModel):
    id: Optional[int] = None
    identifier: Optional[str] = None
    name: Optional[str] = None
    active: Optional[bool] = None
    public: Optional[bool] = None
    description: Optional[Formattable] = None
    created_at: Optional[OpenProjectTime] = Field(default=None, alias="createdAt")
    updated_at: Optional[OpenProjectTime] = Field(default=None, alias="updatedAt")

    @property
    def description_text(self) -> str:
        if self.description is not None:
            return self.description.raw or ""
        return ""


class Status(BaseHALModel):
    id: Optional[int] = None
    name: Optional[str] = None
    is_closed: Optional[bool] = Field(default=None, alias="isClosed")
    is_default: Optional[bool] = Field(default=None, alias="isDefault")
    is_readonly: Optional[bool] = Field(default=None, alias="isReadonly")
    color: Optional[str] = None
    position: Optional[int] = None
    default_done_ratio: Optional[int] = Field(default=None, alias="defaultDoneRatio")


class WikiPage(BaseHALModel):
    id: Optional[int] = None
    title: Optional[str] = None


class Attachment(BaseHALModel):
    id: Optional[int] = None
    title: Optional[str] = None
    file_name: Optional[str] = Field(default=None, alias="fileName")
    file_size: Optional[int] = Field(default=None, alias="fileSize")
    description: Optional[Formattable] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")
    digest: Optional[Dict[str, Any]] = None
    created_at: Optional[OpenProjectTime] = Field(default=None, alias="createdAt")


class Category(BaseHALModel):
    id: Optional[int] = None
    name: Optional[str] = None


class Query(BaseHALModel):
    id: Optional[int] = None
    name: Optional[str] = None
    filters: List[Dict[str, Any]] = Field(default_factory=list)
    sums: Optional[bool] = None
    public: Optional[bool] = None
    hidden: Optional[bool] = None
    starred: Optional[bool] = None
    created_at: Optional[OpenProjectTime] = Field(default=None, alias="createdAt")
    updated_at: Optional[OpenProjectTime] = Field(default=None, alias="updatedAt")


# --- Paginated envelopes ---


class CollectionEmbedded(BaseModel, Generic[T]):
    elements: List[T] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class PaginatedCollection(BaseModel, Generic[T]):
    """HAL collection: ``{total, count, pageSize, offset, _embedded: {elements}}``."""

    type_: Optional[str] = Field(default=None, alias="_type")
    total: int = 0
    count: int = 0
    page_size: int = Field(default=0, alias="pageSize")
    offset: int = 0
    embedded: CollectionEmbedded[T] = Field(
        default_factory=CollectionEmbedded, alias="_embedded"
    )
    links: Dict[str, Any] = Field(default_factory=dict, alias="_links")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def elements(self) -> List[T]:
        return self.embedded.elements


class WorkPackageCollection(PaginatedCollection[WorkPackage]):
    pass


class UserCollection(PaginatedCollection[User]):
    pass


class ProjectCollection(PaginatedCollection[Project]):
    pass


class StatusCollection(PaginatedCollection[Status]):
    pass


class AttachmentCollection(PaginatedCollection[Attachment]):
    pass


class CategoryCollection(PaginatedCollection[Category]):
    pass


class QueryCollection(PaginatedCollection[Query]):
    pass


__all__ = [
    "parse_id_from_href",
    "Formattable",
    "BaseHALModel",
    "WorkPackage",
    "User",
    "Project",
    "Status",
    "WikiPage",
    "Attachment",
    "Category",
    "Query",
    "CollectionEmbedded",
    "PaginatedCollection",
    "WorkPackageCollection",
    "UserCollection",
    "ProjectCollection",
    "StatusCollection",
    "AttachmentCollection",
    "CategoryCollection",
    "QueryCollection",
]
