from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Mapping, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError

from .auth import AuthStrategy
from .errors import (
    ConfigError,
    DecodeError,
    RequestError,
    StatusError,
    TransportError,
)
from .logging import event_fields, redact_url
from .response import Response, new_response
from .services import (
    AttachmentService,
    CategoryService,
    ProjectService,
    QueryService,
    StatusService,
    UserService,
    WikiPageService,
    WorkPackageService,
)

JSON_CONTENT_TYPE = "application/json"
HAL_CONTENT_TYPE = "application/hal+json"


def _parse_base_url(base_url: str) -> httpx.URL:
    base_url = (base_url or "").strip()
    if not base_url:
        raise ConfigError("base_url must be provided.")

    # A trailing slash keeps the base path when relative endpoints are joined
    if not base_url.endswith("/"):
        base_url += "/"

    try:
        parsed = httpx.URL(base_url)
    except httpx.InvalidURL as exc:
        raise ConfigError(f"Invalid base_url {base_url!r}: {exc}") from exc

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigError(f"base_url must be an absolute http(s) URL: {base_url!r}")
    return parsed


class OpenProjectClient:
    """
    Client for the OpenProject API v3.
    - Resolves endpoints against the base URL and attaches the active
      authentication strategy's credentials
    - Blocking calls, one HTTP round trip each, no retries
    - One service handle per resource kind (``client.work_packages``, ...)
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth: AuthStrategy,
        timeout_seconds: float = 10.0,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.Client] = None,
    ):
        self.base_url = _parse_base_url(base_url)
        self.auth = auth
        self.timeout_seconds = timeout_seconds
        self.log = logger or logging.getLogger("openproject_client.client")

        self._owns_http = http is None
        self.http = http or httpx.Client(
            headers={"Accept": HAL_CONTENT_TYPE},
            timeout=timeout_seconds,
        )

        self.work_packages = WorkPackageService(self)
        self.users = UserService(self)
        self.projects = ProjectService(self)
        self.statuses = StatusService(self)
        self.wiki_pages = WikiPageService(self)
        self.attachments = AttachmentService(self)
        self.categories = CategoryService(self)
        self.queries = QueryService(self)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "OpenProjectClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def resolve_url(self, endpoint: str) -> httpx.URL:
        """Resolve ``endpoint`` against the base URL; a leading "/" is ignored."""
        try:
            return self.base_url.join(endpoint.lstrip("/"))
        except (httpx.InvalidURL, TypeError, AttributeError) as exc:
            raise RequestError(f"Invalid endpoint {endpoint!r}: {exc}") from exc

    def new_request(
        self,
        method: str,
        endpoint: str,
        *,
        body: Any = None,
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Request:
        """
        Build an authenticated request.
        - ``body`` (pydantic model or JSON-able value) is sent as JSON
        - ``files`` switches to multipart/form-data
        - Raises RequestError before anything is sent; AuthError if the
          strategy cannot attach credentials
        """
        url = self.resolve_url(endpoint)
        if params:
            url = url.copy_merge_params(dict(params))

        headers: Dict[str, str] = {"Accept": HAL_CONTENT_TYPE}
        content: Optional[bytes] = None
        if files is None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            if body is not None:
                content = self._encode_body(body)

        request = self.http.build_request(
            method.upper(), url, content=content, files=files, headers=headers
        )
        return self.auth.attach(request)

    @staticmethod
    def _encode_body(body: Any) -> bytes:
        try:
            if isinstance(body, BaseModel):
                payload = (
                    body.to_payload()
                    if hasattr(body, "to_payload")
                    else body.model_dump(mode="json", by_alias=True, exclude_none=True)
                )
            else:
                payload = body
            return json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise RequestError(f"Could not serialize request body: {exc}") from exc

    def send(self, request: httpx.Request, *, resource: Optional[str] = None) -> Response:
        """
        Execute ``request`` without decoding the body.
        - Raises TransportError on network failures
        - Raises StatusError (response attached) on non-2xx
        """
        start = time.perf_counter()
        try:
            http_resp = self.http.send(request)
        except httpx.HTTPError as exc:
            self.log.debug(
                "op.request",
                extra=event_fields(
                    request.method, request.url, status="exception", resource=resource
                ),
            )
            raise TransportError(
                f"Network error calling {request.method} {redact_url(request.url)}: {exc}"
            ) from exc

        duration_ms = int((time.perf_counter() - start) * 1000)
        self.log.debug(
            "op.request",
            extra=event_fields(
                request.method,
                request.url,
                status=http_resp.status_code,
                duration_ms=duration_ms,
                resource=resource,
            ),
        )

        response = new_response(http_resp)
        if not http_resp.is_success:
            raise StatusError.from_response(response)
        return response

    def do(
        self,
        request: httpx.Request,
        model: Optional[Type[BaseModel]] = None,
        *,
        resource: Optional[str] = None,
    ) -> Response:
        """
        Execute ``request`` and decode the body into ``model`` when given.
        Paging values are copied onto the response for collection models.
        """
        response = self.send(request, resource=resource)
        if model is None:
            return response

        value = self.decode(response, model)
        response.result = value
        response.populate_page_values(value)
        return response

    @staticmethod
    def decode(response: Response, model: Type[BaseModel]) -> BaseModel:
        http_resp = response.http
        try:
            return model.model_validate_json(http_resp.content)
        except ValidationError as exc:
            snippet = (http_resp.text or "")[:200]
            raise DecodeError(
                f"Response from {http_resp.request.method} {http_resp.request.url} "
                f"did not match {model.__name__}: {exc.error_count()} error(s); "
                f"body snippet: {snippet!r}",
                response=response,
            ) from exc

    def download(self, endpoint: str) -> Response:
        """Authenticated GET returning the raw response (e.g. attachment content)."""
        request = self.new_request("GET", endpoint)
        return self.send(request, resource="download")


__all__ = ["OpenProjectClient", "JSON_CONTENT_TYPE", "HAL_CONTENT_TYPE"]
