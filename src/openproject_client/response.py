from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .models import (
    AttachmentCollection,
    CategoryCollection,
    ProjectCollection,
    QueryCollection,
    StatusCollection,
    UserCollection,
    WorkPackageCollection,
)

# Envelope shapes that carry paging info. A new paginated resource adds its
# collection type here.
PAGINATED_ENVELOPES = (
    WorkPackageCollection,
    UserCollection,
    ProjectCollection,
    StatusCollection,
    AttachmentCollection,
    CategoryCollection,
    QueryCollection,
)


@dataclass
class Response:
    """
    OpenProject API response: the raw httpx response, the decoded result (if
    any) and the paging values of list endpoints. Paging fields stay at zero
    for single-resource responses.
    """

    http: httpx.Response
    result: Optional[Any] = None
    total: int = 0
    count: int = 0
    page_size: int = 0
    offset: int = 0

    @property
    def status_code(self) -> int:
        return self.http.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.http.headers

    def populate_page_values(self, value: Any) -> None:
        if isinstance(value, PAGINATED_ENVELOPES):
            self.total = value.total
            self.count = value.count
            self.page_size = value.page_size
            self.offset = value.offset


def new_response(http: httpx.Response, value: Any = None) -> Response:
    resp = Response(http=http, result=value)
    resp.populate_page_values(value)
    return resp


__all__ = ["Response", "new_response", "PAGINATED_ENVELOPES"]
