"""requests-backed implementation of :class:`~mcapp.core.protocols.ResourceClient`.

This module is the **only** place in the codebase that talks HTTP.  All
``requests`` exceptions and error responses are caught here and
re-raised as :class:`~mcapp.exceptions.McappError` subclasses; nothing
raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import requests

from mcapp.core.models import (
    CATALOG,
    CLUSTER,
    MULTI_CLUSTER_APP,
    MULTI_CLUSTER_APP_REVISION,
    PROJECT,
    TEMPLATE,
    TEMPLATE_VERSION,
)
from mcapp.core.protocols import Page
from mcapp.exceptions import NotFoundError, TransportError
from mcapp.infra.config import ClientConfig

logger = logging.getLogger(__name__)


class RestResourceClient:
    """Concrete :class:`ResourceClient` for the control plane's ``/v3`` API.

    Usage::

        client = RestResourceClient(config)
        page = client.list("cluster")

    This class satisfies the :class:`~mcapp.core.protocols.ResourceClient`
    protocol structurally, no explicit inheritance required.
    """

    _COLLECTIONS: dict[str, str] = {
        CLUSTER: "clusters",
        PROJECT: "projects",
        CATALOG: "catalogs",
        TEMPLATE: "templates",
        TEMPLATE_VERSION: "templateversions",
        MULTI_CLUSTER_APP: "multiclusterapps",
        MULTI_CLUSTER_APP_REVISION: "multiclusterapprevisions",
    }

    def __init__(self, config: ClientConfig, session: requests.Session | None = None) -> None:
        config.require_server()
        base = config.url.rstrip("/")
        self._base_url: str = base if base.endswith("/v3") else f"{base}/v3"
        self._timeout: float = config.timeout
        self._session = session or requests.Session()
        self._session.headers["Authorization"] = f"Bearer {config.token}"
        self._session.headers["Accept"] = "application/json"
        self._session.verify = config.cacert or True

    # ------------------------------------------------------------------
    # URL helpers
    # ------------------------------------------------------------------

    def _collection_url(self, resource_type: str) -> str:
        try:
            path = self._COLLECTIONS[resource_type]
        except KeyError:
            raise TransportError(f"Unknown resource type: {resource_type}") from None
        return f"{self._base_url}/{path}"

    def _resource_url(self, resource_type: str, resource_id: str) -> str:
        return f"{self._collection_url(resource_type)}/{quote(resource_id, safe=':')}"

    # ------------------------------------------------------------------
    # Transport (safe boundary)
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        """Perform one call and ensure only our exceptions escape."""
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method, url, params=params, json=payload, timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(
                f"Request to {url} failed: {exc}",
                hint="Check the server URL and your network connection.",
            ) from exc

        if response.status_code == 404:
            raise NotFoundError(self._error_message(response) or f"Not found: {url}")
        if response.status_code >= 400:
            message = self._error_message(response) or response.reason
            raise TransportError(
                f"{method} {url} failed: {response.status_code} {message}",
                hint="Check your token." if response.status_code in (401, 403) else None,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON returned by {url}") from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return ""
        if isinstance(body, dict):
            return str(body.get("message") or "")
        return ""

    @staticmethod
    def _page(body: Any) -> Page:
        if not isinstance(body, dict):
            raise TransportError("Unexpected collection payload from server")
        data = tuple(entry for entry in body.get("data") or () if isinstance(entry, dict))
        pagination = body.get("pagination") or {}
        return Page(
            data=data,
            next_url=pagination.get("next") or None,
            partial=bool(pagination.get("partial")),
        )

    @staticmethod
    def _record(body: Any) -> dict[str, Any]:
        if not isinstance(body, dict):
            raise TransportError("Unexpected resource payload from server")
        return body

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def list(
        self,
        resource_type: str,
        filters: Mapping[str, str] | None = None,
    ) -> Page:
        body = self._request("GET", self._collection_url(resource_type), params=filters)
        return self._page(body)

    def next_page(self, page: Page) -> Page | None:
        if not page.next_url:
            return None
        return self._page(self._request("GET", page.next_url))

    def by_id(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        return self._record(self._request("GET", self._resource_url(resource_type, resource_id)))

    def create(self, resource_type: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        body = self._request("POST", self._collection_url(resource_type), payload=payload)
        return self._record(body)

    def update(
        self,
        resource_type: str,
        resource_id: str,
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        body = self._request(
            "PUT", self._resource_url(resource_type, resource_id), payload=payload,
        )
        return self._record(body)

    def delete(self, resource_type: str, resource_id: str) -> None:
        self._request("DELETE", self._resource_url(resource_type, resource_id))

    def action(
        self,
        resource_type: str,
        resource_id: str,
        action: str,
        payload: Mapping[str, Any],
    ) -> None:
        self._request(
            "POST",
            self._resource_url(resource_type, resource_id),
            params={"action": action},
            payload=payload,
        )

    def follow_link(self, record: Mapping[str, Any], link: str) -> dict[str, Any]:
        links = record.get("links") or {}
        url = links.get(link) if isinstance(links, Mapping) else None
        if not url:
            raise NotFoundError(f"Resource {record.get('id', '')} has no {link!r} link")
        return self._record(self._request("GET", str(url)))
