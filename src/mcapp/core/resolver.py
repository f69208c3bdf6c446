"""Cluster and project name resolution.

A :class:`NameResolver` is built per command invocation and memoises the
IDs it resolves; it must never be shared across invocations because the
remote inventory can change in between.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from mcapp.core.lookup import list_all, lookup
from mcapp.core.models import CLUSTER, PROJECT, Target
from mcapp.core.protocols import ResourceClient
from mcapp.core.scope import concat_scope, parse_scope
from mcapp.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class NameResolver:
    """Turns cluster and project references into canonical IDs.

    Parameters
    ----------
    client:
        Any object satisfying the :class:`ResourceClient` protocol.
    """

    def __init__(self, client: ResourceClient) -> None:
        self._client: ResourceClient = client
        self._cluster_ids: dict[str, str] = {}
        self._project_ids: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Clusters
    # ------------------------------------------------------------------

    def resolve_cluster(self, name_or_id: str) -> str:
        """Return the ID of the cluster named or identified by *name_or_id*.

        Raises
        ------
        NotFoundError
            If no cluster matches.
        AmbiguousError
            If several clusters share the name.
        """
        cached = self._cluster_ids.get(name_or_id)
        if cached is not None:
            logger.debug("Cluster %r resolved from cache", name_or_id)
            return cached
        cluster_id = str(lookup(self._client, CLUSTER, name_or_id)["id"])
        self._cluster_ids[name_or_id] = cluster_id
        return cluster_id

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def resolve_project(self, scope: str) -> str:
        """Return the project ID for a ``cluster:project`` or project-ID scope.

        When the cluster part resolves to itself it was already an ID,
        so the whole scope is looked up as a project (project IDs have
        the form ``<clusterID>:<projectID>``).  Should that fail, the
        project part is looked up by name inside that cluster.  When the
        cluster part is a name, the project part is looked up by name
        within the resolved cluster.
        """
        cached = self._project_ids.get(scope)
        if cached is not None:
            logger.debug("Project %r resolved from cache", scope)
            return cached

        cluster_part, project_part = parse_scope(scope)
        if not cluster_part:
            project_id = self._lookup_project(scope)
        else:
            cluster_id = self.resolve_cluster(cluster_part)
            if cluster_id == cluster_part:
                try:
                    project_id = self._lookup_project(scope)
                except NotFoundError:
                    project_id = self._lookup_project(project_part, cluster_id)
            else:
                project_id = self._lookup_project(project_part, cluster_id)

        self._project_ids[scope] = project_id
        return project_id

    def _lookup_project(self, name_or_id: str, cluster_id: str | None = None) -> str:
        filters = {"clusterId": cluster_id} if cluster_id else None
        return str(lookup(self._client, PROJECT, name_or_id, filters=filters)["id"])

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    def resolve_targets(self, specifiers: Iterable[str]) -> list[str]:
        """Resolve each target specifier to a project ID, in order.

        An empty input yields an empty list; choosing a default target is
        the caller's concern.  The first failure aborts the resolution.
        """
        return [self.resolve_project(spec) for spec in specifiers]


class ClusterProjectDirectory:
    """Readable-name index of every cluster and project.

    Built with :meth:`load`, which drains all pages of both listings.
    """

    def __init__(
        self,
        clusters: dict[str, dict[str, Any]],
        projects: dict[str, dict[str, Any]],
    ) -> None:
        self._clusters = clusters
        self._projects = projects

    @classmethod
    def load(cls, client: ResourceClient) -> ClusterProjectDirectory:
        clusters = {str(c.get("id")): c for c in list_all(client, CLUSTER)}
        projects = {str(p.get("id")): p for p in list_all(client, PROJECT)}
        return cls(clusters, projects)

    def readable_target(self, project_id: str) -> str:
        """Return ``clusterName:projectName`` for *project_id*, or the ID itself."""
        cluster_id, _ = parse_scope(project_id)
        cluster = self._clusters.get(cluster_id)
        project = self._projects.get(project_id)
        if cluster is None or project is None:
            logger.debug("Cannot get readable name for target %r, showing ID", project_id)
            return project_id
        return concat_scope(str(cluster.get("name", "")), str(project.get("name", "")))

    def readable_targets(self, targets: Iterable[Target]) -> list[str]:
        return [self.readable_target(t.project_id) for t in targets]
