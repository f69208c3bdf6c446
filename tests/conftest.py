"""Shared pytest fixtures and configuration for the mcapp test suite.

Guidelines
----------
* No network access in any test.
* The HTTP session is mocked at the infra boundary.
* Core tests run against the in-memory :class:`FakeResourceClient`.
* Polling tests inject a no-op sleep.
"""

from __future__ import annotations

import itertools
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

import pytest

from mcapp.core.models import CLUSTER, PROJECT
from mcapp.core.protocols import Page
from mcapp.exceptions import NotFoundError


class FakeResourceClient:
    """In-memory :class:`~mcapp.core.protocols.ResourceClient`.

    Listings are split into pages of ``page_size`` records so pagination
    is exercised everywhere.  Every call is recorded in ``calls``.
    """

    def __init__(self, page_size: int = 2) -> None:
        self.page_size = page_size
        self.records: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self.links: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[tuple[Any, ...]] = []
        self._cursors: dict[str, list[dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    # -- seeding --------------------------------------------------------

    def add(self, resource_type: str, **record: Any) -> dict[str, Any]:
        self.records[resource_type][record["id"]] = record
        return record

    # -- protocol -------------------------------------------------------

    def _page(self, remaining: list[dict[str, Any]]) -> Page:
        head, rest = remaining[: self.page_size], remaining[self.page_size:]
        next_url = None
        if rest:
            next_url = f"cursor-{next(self._ids)}"
            self._cursors[next_url] = rest
        return Page(data=tuple(head), next_url=next_url, partial=bool(rest))

    def list(self, resource_type: str, filters: Mapping[str, str] | None = None) -> Page:
        self.calls.append(("list", resource_type, dict(filters or {})))
        criteria = {k: v for k, v in (filters or {}).items() if k != "removed_null"}
        matches = [
            r for r in self.records[resource_type].values()
            if all(str(r.get(k, "")) == v for k, v in criteria.items())
        ]
        return self._page(matches)

    def next_page(self, page: Page) -> Page | None:
        if not page.next_url:
            return None
        return self._page(self._cursors.pop(page.next_url))

    def by_id(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        self.calls.append(("by_id", resource_type, resource_id))
        try:
            return dict(self.records[resource_type][resource_id])
        except KeyError:
            raise NotFoundError(f"Not found: {resource_id}") from None

    def create(self, resource_type: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", resource_type, dict(payload)))
        record = {"id": f"cattle-global-data:mcapp-{next(self._ids)}", **payload}
        self.records[resource_type][record["id"]] = record
        return dict(record)

    def update(
        self, resource_type: str, resource_id: str, payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        self.calls.append(("update", resource_type, resource_id, dict(payload)))
        self.records[resource_type][resource_id] = dict(payload)
        return dict(payload)

    def delete(self, resource_type: str, resource_id: str) -> None:
        self.calls.append(("delete", resource_type, resource_id))
        if self.records[resource_type].pop(resource_id, None) is None:
            raise NotFoundError(f"Not found: {resource_id}")

    def action(
        self, resource_type: str, resource_id: str, action: str, payload: Mapping[str, Any],
    ) -> None:
        self.calls.append(("action", resource_type, resource_id, action, dict(payload)))

    def follow_link(self, record: Mapping[str, Any], link: str) -> dict[str, Any]:
        self.calls.append(("follow_link", record.get("id"), link))
        try:
            return self.links[(str(record.get("id")), link)]
        except KeyError:
            raise NotFoundError(f"no {link} link") from None


@pytest.fixture()
def fake_client() -> FakeResourceClient:
    return FakeResourceClient()


@pytest.fixture()
def directory_client(fake_client: FakeResourceClient) -> FakeResourceClient:
    """Two clusters, each with a project named ``myproject``."""
    fake_client.add(CLUSTER, id="c-1", name="mycluster")
    fake_client.add(CLUSTER, id="c-2", name="other")
    fake_client.add(CLUSTER, id="local", name="local")
    fake_client.add(PROJECT, id="c-1:p-1", name="myproject", clusterId="c-1")
    fake_client.add(PROJECT, id="c-1:p-2", name="Default", clusterId="c-1")
    fake_client.add(PROJECT, id="c-2:p-9", name="myproject", clusterId="c-2")
    return fake_client
