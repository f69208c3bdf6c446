"""Tests for MultiClusterAppService (core/app_service.py).

The service runs against the in-memory fake client seeded with a small
catalog: one ``redis`` template with three versions and one installed
app.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from mcapp.core.app_service import MultiClusterAppService
from mcapp.core.models import (
    CATALOG,
    MULTI_CLUSTER_APP,
    MULTI_CLUSTER_APP_REVISION,
    TEMPLATE,
    TEMPLATE_VERSION,
    Answer,
    Target,
)
from mcapp.exceptions import ConfigError, InvalidAnswerError, InvalidVersionError, NotFoundError

_TV_PREFIX = "https://rancher.example/v3/templateversions/"


@pytest.fixture()
def catalog_client(directory_client: Any) -> Any:
    client = directory_client
    client.add(CATALOG, id="library", name="library")
    template = client.add(
        TEMPLATE,
        id="cattle-global-data:library-redis",
        name="redis",
        catalogId="library",
        categories=["Database", "Cache"],
        defaultVersion="1.2.3",
        versionLinks={
            v: f"{_TV_PREFIX}cattle-global-data:library-redis-{v}"
            for v in ("1.10.0", "1.2.3", "1.3.0")
        },
    )
    client.add(TEMPLATE, id="c-1:local-chart", name="local-chart", catalogId="")
    client.add(
        TEMPLATE_VERSION,
        id="cattle-global-data:library-redis-1.2.3",
        version="1.2.3",
        questions=[
            {"variable": "replicas", "default": "1", "required": True},
            {"variable": "password", "type": "password", "required": True},
        ],
    )
    client.add(
        TEMPLATE_VERSION,
        id="cattle-global-data:library-redis-1.3.0",
        version="1.3.0",
        questions=[{"variable": "replicas", "default": "2"}],
    )
    client.add(
        MULTI_CLUSTER_APP,
        id="cattle-global-data:mcapp-redis",
        name="redis-prod",
        state="active",
        templateVersionId="cattle-global-data:library-redis-1.2.3",
        targets=[{"projectId": "c-1:p-1"}, {"projectId": "c-7:p-gone"}],
        answers=[
            {"values": {"replicas": "1"}},
            {"projectId": "c-1:p-1", "values": {"replicas": "3"}},
        ],
        status={"revisionId": "rev2"},
    )
    client.links[("cattle-global-data:library-redis-1.2.3", "template")] = template
    client.links[("cattle-global-data:mcapp-redis", "revisions")] = {
        "data": [
            {"id": "r-2", "name": "rev2", "created": "2024-05-02T00:00:00Z"},
            {"id": "r-1", "name": "rev1", "created": "2024-05-01T00:00:00Z"},
        ],
    }
    client.add(MULTI_CLUSTER_APP_REVISION, id="r-1", name="rev1")
    return client


@pytest.fixture()
def service(catalog_client: Any) -> MultiClusterAppService:
    return MultiClusterAppService(catalog_client)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class TestListApps:
    def test_rows(self, service: MultiClusterAppService) -> None:
        (row,) = service.list_apps()
        assert row.name == "redis-prod"
        assert row.version == "1.2.3"
        assert row.targets == ("mycluster:myproject", "c-7:p-gone")

    def test_empty(self, fake_client: Any) -> None:
        assert MultiClusterAppService(fake_client).list_apps() == []


class TestListTemplates:
    def test_skips_templates_without_catalog(self, service: MultiClusterAppService) -> None:
        rows = service.list_templates()
        assert [r.name for r in rows] == ["redis"]
        assert rows[0].categories == ("Database", "Cache")

    def test_catalog_filter(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        service.list_templates("library")
        template_lists = [c for c in catalog_client.calls if c[:2] == ("list", TEMPLATE)]
        assert template_lists[-1][2] == {"catalogId": "library"}

    def test_unknown_catalog(self, service: MultiClusterAppService) -> None:
        with pytest.raises(NotFoundError):
            service.list_templates("ghost")


class TestVersionsAndRevisions:
    def test_template_versions(self, service: MultiClusterAppService) -> None:
        rows = service.template_versions("redis")
        assert [(r.version, r.current) for r in rows] == [
            ("1.2.3", True), ("1.3.0", False), ("1.10.0", False),
        ]

    def test_app_versions_flags_current(self, service: MultiClusterAppService) -> None:
        rows = service.app_versions("redis-prod")
        assert [r.version for r in rows if r.current] == ["1.2.3"]

    def test_app_revisions(self, service: MultiClusterAppService) -> None:
        rows = service.app_revisions("redis-prod")
        assert [(r.name, r.current) for r in rows] == [("rev1", False), ("rev2", True)]


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

class TestDeleteApps:
    def test_deletes_by_name(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        assert service.delete_apps(["redis-prod"]) == ["cattle-global-data:mcapp-redis"]
        assert catalog_client.records[MULTI_CLUSTER_APP] == {}

    def test_stops_at_first_failure(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        catalog_client.add(MULTI_CLUSTER_APP, id="cattle-global-data:mcapp-2", name="other")
        with pytest.raises(NotFoundError):
            service.delete_apps(["redis-prod", "ghost", "other"])
        assert list(catalog_client.records[MULTI_CLUSTER_APP]) == ["cattle-global-data:mcapp-2"]


# ---------------------------------------------------------------------------
# Install
# ---------------------------------------------------------------------------

class TestPrepareInstall:
    def test_default_version_and_targets(self, service: MultiClusterAppService) -> None:
        app = service.prepare_install(
            "redis",
            "redis-dev",
            set_values=["password=s3cret", "mycluster:myproject:replicas=3"],
            targets=["mycluster:myproject", "other:myproject"],
        )
        assert app.id == ""
        assert app.template_version_id == "cattle-global-data:library-redis-1.2.3"
        assert app.targets == (Target("c-1:p-1"), Target("c-2:p-9"))
        assert Answer(values={"password": "s3cret", "replicas": "1"}) in app.answers
        assert Answer(project_id="c-1:p-1", values={"replicas": "3"}) in app.answers

    def test_explicit_version(self, service: MultiClusterAppService) -> None:
        app = service.prepare_install("redis", "r", version="1.3.0", default_project="c-1:p-2")
        assert app.template_version_id == "cattle-global-data:library-redis-1.3.0"
        assert app.targets == (Target("c-1:p-2"),)
        assert app.answers == (Answer(values={"replicas": "2"}),)

    def test_unknown_version(self, service: MultiClusterAppService) -> None:
        with pytest.raises(InvalidVersionError) as exc_info:
            service.prepare_install("redis", "r", version="9.9.9", default_project="c-1:p-2")
        assert "show-template redis" in (exc_info.value.hint or "")

    def test_required_answer_without_prompter(self, service: MultiClusterAppService) -> None:
        with pytest.raises(InvalidAnswerError, match="password"):
            service.prepare_install("redis", "r", default_project="c-1:p-2")

    def test_prompter_answers_missing_questions(self, service: MultiClusterAppService) -> None:
        prompter = MagicMock()
        prompter.ask.side_effect = lambda question, default: default or "pw"
        app = service.prepare_install(
            "redis", "r", prompter=prompter, default_project="c-1:p-2",
        )
        assert app.answers == (Answer(values={"replicas": "1", "password": "pw"}),)
        assert prompter.ask.call_count == 2

    def test_no_target_no_default_project(self, service: MultiClusterAppService) -> None:
        with pytest.raises(ConfigError):
            service.prepare_install("redis", "r", set_values=["password=x"])

    def test_nothing_written(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        service.prepare_install("redis", "r", set_values=["password=x"], default_project="c-1:p-2")
        assert not [c for c in catalog_client.calls if c[0] in ("create", "update", "delete")]


class TestInstall:
    def test_delegates_to_orchestrator(self, catalog_client: Any) -> None:
        orchestrator = MagicMock()
        service = MultiClusterAppService(catalog_client, orchestrator)
        app = service.prepare_install(
            "redis", "r", set_values=["password=x"], default_project="c-1:p-2",
        )
        on_poll = MagicMock()
        service.install(app, timeout=30, on_poll=on_poll)
        orchestrator.install.assert_called_once_with(app, timeout=30, on_poll=on_poll)


# ---------------------------------------------------------------------------
# Upgrade / rollback
# ---------------------------------------------------------------------------

class TestUpgrade:
    def test_merges_answers_and_keeps_targets(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        service.upgrade(
            "redis-prod", "1.3.0", set_values=["mycluster:myproject:replicas=5"],
        )
        _, _, app_id, payload = next(c for c in catalog_client.calls if c[0] == "update")
        assert app_id == "cattle-global-data:mcapp-redis"
        assert payload["templateVersionId"] == "cattle-global-data:library-redis-1.3.0"
        assert payload["targets"] == [{"projectId": "c-1:p-1"}, {"projectId": "c-7:p-gone"}]
        assert {"projectId": "c-1:p-1", "values": {"replicas": "5"}} in payload["answers"]
        assert {"values": {"replicas": "1"}} in payload["answers"]

    def test_sends_back_server_fields(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        stored = catalog_client.records[MULTI_CLUSTER_APP]["cattle-global-data:mcapp-redis"]
        stored["targets"] = [{"projectId": "c-1:p-1", "appId": "p-1:redis-abc", "state": "active"}]
        stored["roles"] = ["project-member"]
        service.upgrade("redis-prod", "1.3.0")
        payload = next(c for c in catalog_client.calls if c[0] == "update")[3]
        assert payload["targets"] == [
            {"projectId": "c-1:p-1", "appId": "p-1:redis-abc", "state": "active"},
        ]
        assert payload["roles"] == ["project-member"]
        assert payload["name"] == "redis-prod"

    def test_replaces_targets(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        service.upgrade("redis-prod", "1.3.0", targets=["other:myproject"])
        payload = next(c for c in catalog_client.calls if c[0] == "update")[3]
        assert payload["targets"] == [{"projectId": "c-2:p-9"}]


class TestRollback:
    def test_resolves_revision_by_name(
        self, service: MultiClusterAppService, catalog_client: Any,
    ) -> None:
        service.rollback("redis-prod", "rev1")
        assert catalog_client.calls[-1] == (
            "action", MULTI_CLUSTER_APP, "cattle-global-data:mcapp-redis",
            "rollback", {"revisionId": "r-1"},
        )

    def test_unknown_revision(self, service: MultiClusterAppService) -> None:
        with pytest.raises(NotFoundError):
            service.rollback("redis-prod", "rev9")
