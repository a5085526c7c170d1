from __future__ import annotations

import json
import mimetypes
from pathlib import Path
from typing import List, Optional, Tuple, Union, cast

from . import dispatch
from .dispatch import ResourceKind, ResourceService
from .errors import RequestError
from .filters import FilterSpec
from .models import (
    Attachment,
    AttachmentCollection,
    Category,
    CategoryCollection,
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

API_PREFIX = "api/v3"

ResourceId = Union[int, str]


class WorkPackageService(ResourceService):
    kind = ResourceKind.WORK_PACKAGE

    def get(self, work_package_id: ResourceId) -> Tuple[WorkPackage, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/work_packages/{work_package_id}")
        return cast(WorkPackage, resp.result), resp

    def list(
        self, filters: Optional[FilterSpec] = None
    ) -> Tuple[List[WorkPackage], Response]:
        resp = dispatch.get_list(self, f"{API_PREFIX}/work_packages", filters)
        return cast(WorkPackageCollection, resp.result).elements, resp

    def create(
        self, work_package: WorkPackage, project: ResourceId
    ) -> Tuple[WorkPackage, Response]:
        """Create a work package (or sub-task) inside ``project`` (id or identifier)."""
        resp = dispatch.create(
            self, f"{API_PREFIX}/projects/{project}/work_packages", work_package
        )
        return cast(WorkPackage, resp.result), resp

    def delete(self, work_package_id: ResourceId) -> Response:
        return dispatch.delete(self, f"{API_PREFIX}/work_packages/{work_package_id}")


class UserService(ResourceService):
    kind = ResourceKind.USER

    def get(self, user_id: ResourceId) -> Tuple[User, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/users/{user_id}")
        return cast(User, resp.result), resp

    def list(self, filters: Optional[FilterSpec] = None) -> Tuple[List[User], Response]:
        resp = dispatch.get_list(self, f"{API_PREFIX}/users", filters)
        return cast(UserCollection, resp.result).elements, resp

    def create(self, user: User) -> Tuple[User, Response]:
        resp = dispatch.create(self, f"{API_PREFIX}/users", user)
        return cast(User, resp.result), resp

    def delete(self, user_id: ResourceId) -> Response:
        return dispatch.delete(self, f"{API_PREFIX}/users/{user_id}")


class ProjectService(ResourceService):
    kind = ResourceKind.PROJECT

    def get(self, project_id: ResourceId) -> Tuple[Project, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/projects/{project_id}")
        return cast(Project, resp.result), resp

    def list(
        self, filters: Optional[FilterSpec] = None
    ) -> Tuple[List[Project], Response]:
        resp = dispatch.get_list(self, f"{API_PREFIX}/projects", filters)
        return cast(ProjectCollection, resp.result).elements, resp

    def create(self, project: Project) -> Tuple[Project, Response]:
        resp = dispatch.create(self, f"{API_PREFIX}/projects", project)
        return cast(Project, resp.result), resp

    def delete(self, project_id: ResourceId) -> Response:
        return dispatch.delete(self, f"{API_PREFIX}/projects/{project_id}")


class StatusService(ResourceService):
    kind = ResourceKind.STATUS

    def get(self, status_id: ResourceId) -> Tuple[Status, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/statuses/{status_id}")
        return cast(Status, resp.result), resp

    def list(
        self, filters: Optional[FilterSpec] = None
    ) -> Tuple[List[Status], Response]:
        resp = dispatch.get_list(self, f"{API_PREFIX}/statuses", filters)
        return cast(StatusCollection, resp.result).elements, resp


class WikiPageService(ResourceService):
    kind = ResourceKind.WIKI_PAGE

    def get(self, wiki_page_id: ResourceId) -> Tuple[WikiPage, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/wiki_pages/{wiki_page_id}")
        return cast(WikiPage, resp.result), resp


class AttachmentService(ResourceService):
    kind = ResourceKind.ATTACHMENT

    def get(self, attachment_id: ResourceId) -> Tuple[Attachment, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/attachments/{attachment_id}")
        return cast(Attachment, resp.result), resp

    def list(self, work_package_id: ResourceId) -> Tuple[List[Attachment], Response]:
        resp = dispatch.get_list(
            self, f"{API_PREFIX}/work_packages/{work_package_id}/attachments"
        )
        return cast(AttachmentCollection, resp.result).elements, resp

    def delete(self, attachment_id: ResourceId) -> Response:
        return dispatch.delete(self, f"{API_PREFIX}/attachments/{attachment_id}")

    def download(self, attachment_id: ResourceId) -> bytes:
        resp = self.client.download(f"{API_PREFIX}/attachments/{attachment_id}/content")
        return resp.http.content

    def upload(
        self,
        work_package_id: ResourceId,
        file_path: str,
        *,
        filename: Optional[str] = None,
        description: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Tuple[Attachment, Response]:
        """
        Attach a file to a work package (multipart ``metadata`` + ``file`` parts).
        Not routed through the generic create: the body is a form, not a model.
        """
        path = Path(file_path)
        if not path.is_file():
            raise RequestError(f"File not found: {file_path}")

        filename = filename or path.name
        ctype = (
            content_type
            or mimetypes.guess_type(filename)[0]
            or "application/octet-stream"
        )
        metadata = {"fileName": filename}
        if description:
            metadata["description"] = {"raw": description}

        with path.open("rb") as fh:
            request = self.client.new_request(
                "POST",
                f"{API_PREFIX}/work_packages/{work_package_id}/attachments",
                files={
                    "metadata": (
                        None,
                        json.dumps(metadata).encode("utf-8"),
                        "application/json",
                    ),
                    "file": (filename, fh, ctype),
                },
            )
            resp = self.client.do(request, Attachment, resource=self.kind.value)
        return cast(Attachment, resp.result), resp


class CategoryService(ResourceService):
    kind = ResourceKind.CATEGORY

    def get(self, category_id: ResourceId) -> Tuple[Category, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/categories/{category_id}")
        return cast(Category, resp.result), resp

    def list(self, project: ResourceId) -> Tuple[List[Category], Response]:
        resp = dispatch.get_list(self, f"{API_PREFIX}/projects/{project}/categories")
        return cast(CategoryCollection, resp.result).elements, resp


class QueryService(ResourceService):
    kind = ResourceKind.QUERY

    def get(self, query_id: ResourceId) -> Tuple[Query, Response]:
        resp = dispatch.get(self, f"{API_PREFIX}/queries/{query_id}")
        return cast(Query, resp.result), resp

    def list(self, filters: Optional[FilterSpec] = None) -> Tuple[List[Query], Response]:
        resp = dispatch.get_list(self, f"{API_PREFIX}/queries", filters)
        return cast(QueryCollection, resp.result).elements, resp

    def create(self, query: Query) -> Tuple[Query, Response]:
        resp = dispatch.create(self, f"{API_PREFIX}/queries", query)
        return cast(Query, resp.result), resp

    def delete(self, query_id: ResourceId) -> Response:
        return dispatch.delete(self, f"{API_PREFIX}/queries/{query_id}")


__all__ = [
    "API_PREFIX",
    "WorkPackageService",
    "UserService",
    "ProjectService",
    "StatusService",
    "WikiPageService",
    "AttachmentService",
    "CategoryService",
    "QueryService",
]
