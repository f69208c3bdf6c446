"""Generic name-or-ID lookup over any resource type.

:func:`lookup` tries the reference as an ID first and only falls back to
a name query when the ID lookup reports not-found, so a reference that
is already an ID always resolves to itself.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from mcapp.core.protocols import ResourceClient
from mcapp.exceptions import AmbiguousError, NotFoundError

logger = logging.getLogger(__name__)


def list_all(
    client: ResourceClient,
    resource_type: str,
    filters: Mapping[str, str] | None = None,
) -> list[dict[str, Any]]:
    """Return every record of *resource_type*, draining all pages."""
    page = client.list(resource_type, filters)
    records = list(page.data)
    while page.partial:
        next_page = client.next_page(page)
        if next_page is None:
            break
        page = next_page
        records.extend(page.data)
    return records


def lookup(
    client: ResourceClient,
    resource_type: str,
    name_or_id: str,
    *,
    filters: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Resolve *name_or_id* to exactly one record of *resource_type*.

    Parameters
    ----------
    filters:
        Extra list filters narrowing the name query (e.g. ``clusterId``).

    Raises
    ------
    NotFoundError
        If neither an ID nor a name matches.
    AmbiguousError
        If more than one resource carries the name.
    """
    if not name_or_id:
        raise NotFoundError(f"Not found: empty {resource_type} reference")

    try:
        return client.by_id(resource_type, name_or_id)
    except NotFoundError:
        logger.debug("No %s with ID %r, searching by name", resource_type, name_or_id)

    query = {"name": name_or_id, "removed_null": "1"}
    if filters:
        query.update(filters)
    matches = list_all(client, resource_type, query)

    if len(matches) > 1:
        ids = ", ".join(str(m.get("id", "")) for m in matches)
        raise AmbiguousError(
            f"Multiple resources of type {resource_type} found for name {name_or_id}: {ids}",
            hint="Use the resource ID instead of its name.",
        )
    if not matches:
        raise NotFoundError(f"Not found: {resource_type} {name_or_id}")
    return matches[0]
