"""Domain models for mcapp.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access.  They carry zero I/O, zero dependencies on
external packages, and are rebuilt with :func:`dataclasses.replace` when
an upgrade needs a modified copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


# ---------------------------------------------------------------------------
# Remote resource types
# ---------------------------------------------------------------------------

CLUSTER: str = "cluster"
PROJECT: str = "project"
CATALOG: str = "catalog"
TEMPLATE: str = "template"
TEMPLATE_VERSION: str = "templateVersion"
MULTI_CLUSTER_APP: str = "multiClusterApp"
MULTI_CLUSTER_APP_REVISION: str = "multiClusterAppRevision"


# ---------------------------------------------------------------------------
# Answers and targets
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Answer:
    """A bundle of answer values sharing one scope.

    A non-empty ``project_id`` means project scope, a non-empty
    ``cluster_id`` means cluster scope, both empty means global scope.
    The two IDs are never set together.
    """

    cluster_id: str = ""
    project_id: str = ""
    values: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Target:
    """A single deployment destination of a multi-cluster app."""

    project_id: str
    app_id: str = ""
    state: str = ""


# ---------------------------------------------------------------------------
# Multi-cluster app
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Condition:
    type: str
    status: str
    message: str = ""


@dataclass(frozen=True, slots=True)
class AppStatus:
    revision_id: str = ""
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True, slots=True)
class MultiClusterApp:
    """Remote multi-cluster app record, as seen by one command invocation."""

    id: str
    name: str
    template_version_id: str
    state: str = ""
    targets: tuple[Target, ...] = ()
    answers: tuple[Answer, ...] = ()
    status: AppStatus = field(default_factory=AppStatus)
    transitioning: str = ""
    """``"yes"``, ``"no"`` or ``"error"`` as reported by the control plane."""

    transitioning_message: str = ""
    links: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Revision:
    """Immutable configuration snapshot of an app."""

    id: str
    name: str
    created: str
    """RFC3339 creation timestamp as sent on the wire."""


# ---------------------------------------------------------------------------
# Catalog templates
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Question:
    """A configurable variable declared by a template version."""

    variable: str
    label: str = ""
    description: str = ""
    type: str = "string"
    required: bool = False
    default: str = ""
    options: tuple[str, ...] = ()
    show_subquestion_if: str = ""
    subquestions: tuple[Question, ...] = ()


@dataclass(frozen=True, slots=True)
class TemplateVersion:
    """One version of a catalog template.

    ``id`` is the composite ``<template-id>-<version>``.
    """

    id: str
    version: str
    questions: tuple[Question, ...] = ()
    links: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Template:
    id: str
    name: str
    catalog_id: str = ""
    categories: tuple[str, ...] = ()
    default_version: str = ""
    version_links: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Display rows
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RevisionRow:
    """A revision prepared for chronological display."""

    name: str
    created: datetime
    current: bool = False

    @property
    def human(self) -> str:
        """Creation time rendered as ``DD Mon YYYY HH:MM:SS TZ``."""
        return self.created.strftime("%d %b %Y %H:%M:%S %Z")


@dataclass(frozen=True, slots=True)
class VersionRow:
    version: str
    current: bool = False


@dataclass(frozen=True, slots=True)
class AppRow:
    """One line of the app listing."""

    id: str
    name: str
    state: str
    version: str
    targets: tuple[str, ...]
    """Readable ``cluster:project`` names, or raw IDs when unknown."""


@dataclass(frozen=True, slots=True)
class TemplateRow:
    id: str
    name: str
    categories: tuple[str, ...]
