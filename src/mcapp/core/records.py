"""Raw-record ↔ domain-model conversion (pure).

The control plane speaks camelCase JSON.  Every function here is a
deterministic transform; malformed or missing fields fall back to empty
values rather than raising, since the records come from a trusted API.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from mcapp.core.answer_sources import stringify
from mcapp.core.models import (
    Answer,
    AppStatus,
    Condition,
    MultiClusterApp,
    Question,
    Revision,
    Target,
    Template,
    TemplateVersion,
)


def _str(value: object) -> str:
    return "" if value is None else str(value)


def _dicts(raw: object) -> list[dict[str, Any]]:
    """Return the dict entries of *raw*, or ``[]`` if it is not a list."""
    if not isinstance(raw, list):
        return []
    return [entry for entry in raw if isinstance(entry, dict)]


def _str_map(raw: object) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): _str(v) for k, v in raw.items()}


# ---------------------------------------------------------------------------
# Multi-cluster apps
# ---------------------------------------------------------------------------

def parse_answer(raw: Mapping[str, Any]) -> Answer:
    return Answer(
        cluster_id=_str(raw.get("clusterId")),
        project_id=_str(raw.get("projectId")),
        values=_str_map(raw.get("values")),
    )


def parse_app(raw: Mapping[str, Any]) -> MultiClusterApp:
    """Convert a raw multi-cluster app record into a :class:`MultiClusterApp`."""
    status = raw.get("status") if isinstance(raw.get("status"), dict) else {}
    conditions = tuple(
        Condition(
            type=_str(c.get("type")),
            status=_str(c.get("status")),
            message=_str(c.get("message")),
        )
        for c in _dicts(status.get("conditions"))
    )
    return MultiClusterApp(
        id=_str(raw.get("id")),
        name=_str(raw.get("name")),
        template_version_id=_str(raw.get("templateVersionId")),
        state=_str(raw.get("state")),
        targets=tuple(
            Target(
                project_id=_str(t.get("projectId")),
                app_id=_str(t.get("appId")),
                state=_str(t.get("state")),
            )
            for t in _dicts(raw.get("targets"))
        ),
        answers=tuple(parse_answer(a) for a in _dicts(raw.get("answers"))),
        status=AppStatus(
            revision_id=_str(status.get("revisionId")),
            conditions=conditions,
        ),
        transitioning=_str(raw.get("transitioning")),
        transitioning_message=_str(raw.get("transitioningMessage")),
        links=_str_map(raw.get("links")),
    )


def answer_to_record(answer: Answer) -> dict[str, Any]:
    record: dict[str, Any] = {"values": dict(answer.values)}
    if answer.project_id:
        record["projectId"] = answer.project_id
    elif answer.cluster_id:
        record["clusterId"] = answer.cluster_id
    return record


def target_to_record(target: Target) -> dict[str, Any]:
    record: dict[str, Any] = {"projectId": target.project_id}
    if target.app_id:
        record["appId"] = target.app_id
    if target.state:
        record["state"] = target.state
    return record


def targets_to_records(project_ids: Iterable[str]) -> list[dict[str, Any]]:
    return [{"projectId": project_id} for project_id in project_ids]


def app_to_record(app: MultiClusterApp) -> dict[str, Any]:
    """Build the payload for a create call."""
    record: dict[str, Any] = {
        "name": app.name,
        "templateVersionId": app.template_version_id,
        "targets": [target_to_record(t) for t in app.targets],
        "answers": [answer_to_record(a) for a in app.answers],
    }
    if app.id:
        record["id"] = app.id
    return record


def parse_revision(raw: Mapping[str, Any]) -> Revision:
    return Revision(
        id=_str(raw.get("id")),
        name=_str(raw.get("name")),
        created=_str(raw.get("created")),
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

def parse_question(raw: Mapping[str, Any]) -> Question:
    required = raw.get("required")
    return Question(
        variable=_str(raw.get("variable")),
        label=_str(raw.get("label")),
        description=_str(raw.get("description")),
        type=_str(raw.get("type")) or "string",
        required=bool(required) if not isinstance(required, str) else required.lower() == "true",
        default=stringify(raw.get("default")),
        options=tuple(_str(o) for o in raw.get("options") or ()),
        show_subquestion_if=_str(raw.get("showSubquestionIf")),
        subquestions=tuple(parse_question(q) for q in _dicts(raw.get("subquestions"))),
    )


def parse_template_version(raw: Mapping[str, Any]) -> TemplateVersion:
    return TemplateVersion(
        id=_str(raw.get("id")),
        version=_str(raw.get("version")),
        questions=tuple(parse_question(q) for q in _dicts(raw.get("questions"))),
        links=_str_map(raw.get("links")),
    )


def parse_template(raw: Mapping[str, Any]) -> Template:
    return Template(
        id=_str(raw.get("id")),
        name=_str(raw.get("name")),
        catalog_id=_str(raw.get("catalogId")),
        categories=tuple(_str(c) for c in raw.get("categories") or ()),
        default_version=_str(raw.get("defaultVersion")),
        version_links=_str_map(raw.get("versionLinks")),
    )


def template_version_id_from_link(link: str) -> str:
    """Return the last path segment of a template-version link."""
    return link.rsplit("/", 1)[-1]
