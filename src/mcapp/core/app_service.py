"""Core multi-cluster app service: the operations behind every command.

This is the central service class consumed by the CLI layer.  It
depends on a :class:`~mcapp.core.protocols.ResourceClient` injected at
construction time and owns one :class:`~mcapp.core.resolver.NameResolver`,
so a service instance must live for a single command invocation only.

Guarantees
----------
* Pure orchestration, no filesystem access, no ``print()``.
* Only :class:`~mcapp.exceptions.McappError` subclasses escape.
* Every resolution failure aborts the operation before any write.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from mcapp.core.answer_sources import apply_answer_updates, ask_questions
from mcapp.core.answers import from_answers, to_answers
from mcapp.core.installer import DEFAULT_TIMEOUT, InstallOrchestrator, PollCallback
from mcapp.core.lookup import list_all, lookup
from mcapp.core.models import (
    CATALOG,
    MULTI_CLUSTER_APP,
    MULTI_CLUSTER_APP_REVISION,
    TEMPLATE,
    TEMPLATE_VERSION,
    AppRow,
    MultiClusterApp,
    RevisionRow,
    Target,
    Template,
    TemplateRow,
    TemplateVersion,
    VersionRow,
)
from mcapp.core.protocols import AnswerPrompter, ResourceClient
from mcapp.core.records import (
    parse_app,
    parse_revision,
    parse_template,
    parse_template_version,
    template_version_id_from_link,
)
from mcapp.core.resolver import ClusterProjectDirectory, NameResolver
from mcapp.core.sorting import sort_revisions, sort_versions
from mcapp.exceptions import ConfigError, InvalidVersionError

logger = logging.getLogger(__name__)


class MultiClusterAppService:
    """Lists, installs, upgrades, rolls back and deletes multi-cluster apps.

    Parameters
    ----------
    client:
        Any object satisfying the :class:`ResourceClient` protocol.
    orchestrator:
        Install orchestrator; one is built over *client* when omitted.
    """

    def __init__(
        self,
        client: ResourceClient,
        orchestrator: InstallOrchestrator | None = None,
    ) -> None:
        self._client: ResourceClient = client
        self._orchestrator = orchestrator or InstallOrchestrator(client)
        self._resolver = NameResolver(client)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_apps(self) -> list[AppRow]:
        """Return every app with its template version and readable targets."""
        apps = [parse_app(r) for r in list_all(self._client, MULTI_CLUSTER_APP)]
        directory = ClusterProjectDirectory.load(self._client)
        versions: dict[str, str] = {}
        rows: list[AppRow] = []
        for app in apps:
            if app.template_version_id not in versions:
                tv = self._template_version(app.template_version_id)
                versions[app.template_version_id] = tv.version
            rows.append(AppRow(
                id=app.id,
                name=app.name,
                state=app.state,
                version=versions[app.template_version_id],
                targets=tuple(directory.readable_targets(app.targets)),
            ))
        return rows

    def list_templates(self, catalog: str | None = None) -> list[TemplateRow]:
        """Return templates of global catalogs, optionally for one catalog."""
        filters: dict[str, str] = {}
        if catalog:
            filters["catalogId"] = str(lookup(self._client, CATALOG, catalog)["id"])
        rows: list[TemplateRow] = []
        for record in list_all(self._client, TEMPLATE, filters):
            template = parse_template(record)
            if not template.catalog_id:
                continue
            rows.append(TemplateRow(
                id=template.id, name=template.name, categories=template.categories,
            ))
        return rows

    def template_versions(self, template_ref: str) -> list[VersionRow]:
        """Return the installable versions of a template, default flagged."""
        template = self._template(template_ref)
        return sort_versions(template.version_links, template.default_version)

    def app_revisions(self, app_ref: str) -> list[RevisionRow]:
        """Return the revisions of an app oldest first, active one flagged."""
        record = lookup(self._client, MULTI_CLUSTER_APP, app_ref)
        app = parse_app(record)
        collection = self._client.follow_link(record, "revisions")
        revisions = [parse_revision(r) for r in collection.get("data") or ()]
        return sort_revisions(revisions, app.status.revision_id)

    def app_versions(self, app_ref: str) -> list[VersionRow]:
        """Return the template versions an app can move to, current flagged."""
        app = self._app(app_ref)
        tv_record = self._client.by_id(TEMPLATE_VERSION, app.template_version_id)
        current = parse_template_version(tv_record)
        template = parse_template(self._client.follow_link(tv_record, "template"))
        return sort_versions(template.version_links, current.version)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def delete_apps(self, app_refs: Sequence[str]) -> list[str]:
        """Delete each app in order, stopping at the first failure.

        Returns the IDs deleted.
        """
        deleted: list[str] = []
        for ref in app_refs:
            app = self._app(ref)
            self._client.delete(MULTI_CLUSTER_APP, app.id)
            logger.debug("Deleted multi-cluster app %s", app.id)
            deleted.append(app.id)
        return deleted

    def prepare_install(
        self,
        template_ref: str,
        app_name: str,
        *,
        version: str | None = None,
        answers_file: Mapping[str, str] | None = None,
        values_file: Mapping[str, str] | None = None,
        set_values: Sequence[str] = (),
        prompter: AnswerPrompter | None = None,
        targets: Sequence[str] = (),
        default_project: str = "",
    ) -> MultiClusterApp:
        """Build the app that installing *template_ref* as *app_name* would create.

        Without *targets* the app goes to *default_project*.  A
        *prompter* enables interactive questions; without one, template
        defaults are used.  Nothing is written remotely.

        Raises
        ------
        InvalidVersionError
            If *version* is not offered by the template.
        ConfigError
            If no target is given and there is no default project.
        """
        template = self._template(template_ref)
        template_version = self._template_version(
            self._select_version_id(template, template_ref, version),
        )

        answers: dict[str, str] = {}
        apply_answer_updates(
            answers, answers_file=answers_file, values_file=values_file, set_values=set_values,
        )
        ask_questions(template_version.questions, answers, prompter=prompter)

        project_ids = self._resolver.resolve_targets(targets)
        if not project_ids:
            if not default_project:
                raise ConfigError(
                    "No target project given and no current project configured.",
                    hint="Pass --target or set MCAPP_PROJECT.",
                )
            project_ids = [default_project]

        return MultiClusterApp(
            id="",
            name=app_name,
            template_version_id=template_version.id,
            targets=tuple(Target(project_id=pid) for pid in project_ids),
            answers=tuple(to_answers(answers, self._resolver)),
        )

    def install(
        self,
        app: MultiClusterApp,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        on_poll: PollCallback | None = None,
    ) -> MultiClusterApp:
        """Create a prepared *app* and wait until it is installed."""
        return self._orchestrator.install(app, timeout=timeout, on_poll=on_poll)

    def upgrade(
        self,
        app_ref: str,
        version: str,
        *,
        answers_file: Mapping[str, str] | None = None,
        values_file: Mapping[str, str] | None = None,
        set_values: Sequence[str] = (),
        targets: Sequence[str] = (),
    ) -> MultiClusterApp:
        """Move an app to *version*, merging new answers over the current ones.

        Empty *targets* keep the current targets.
        """
        record = self._app_record(app_ref)
        app = parse_app(record)
        answers = from_answers(app.answers)
        apply_answer_updates(
            answers, answers_file=answers_file, values_file=values_file, set_values=set_values,
        )
        new_answers = to_answers(answers, self._resolver)

        current = self._template_version(app.template_version_id)
        project_ids = self._resolver.resolve_targets(targets)
        return self._orchestrator.upgrade(
            record,
            answers=new_answers,
            old_version=current.version,
            new_version=version,
            target_ids=project_ids,
        )

    def rollback(self, app_ref: str, revision_ref: str) -> None:
        app = self._app(app_ref)
        revision = lookup(self._client, MULTI_CLUSTER_APP_REVISION, revision_ref)
        self._orchestrator.rollback(app.id, str(revision["id"]))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _app_record(self, app_ref: str) -> dict[str, Any]:
        record = lookup(self._client, MULTI_CLUSTER_APP, app_ref)
        return self._client.by_id(MULTI_CLUSTER_APP, str(record["id"]))

    def _app(self, app_ref: str) -> MultiClusterApp:
        return parse_app(self._app_record(app_ref))

    def _template(self, template_ref: str) -> Template:
        record = lookup(self._client, TEMPLATE, template_ref)
        return parse_template(self._client.by_id(TEMPLATE, str(record["id"])))

    def _template_version(self, template_version_id: str) -> TemplateVersion:
        return parse_template_version(self._client.by_id(TEMPLATE_VERSION, template_version_id))

    @staticmethod
    def _select_version_id(template: Template, template_ref: str, version: str | None) -> str:
        """Pick the template-version ID for *version*, or the default one."""
        wanted = version or template.default_version
        link = template.version_links.get(wanted)
        if link is None:
            if version:
                raise InvalidVersionError(
                    f"Version {version} for template {template_ref} is invalid",
                    hint=f"Run 'mcapp show-template {template_ref}' for a list of versions.",
                )
            raise InvalidVersionError(f"Template {template_ref} has no default version")
        return template_version_id_from_link(link)
