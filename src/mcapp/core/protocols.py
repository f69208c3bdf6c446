"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure and CLI adapters must
satisfy.  Core code depends ONLY on these protocols, never on concrete
implementations, preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from mcapp.core.models import Question


@dataclass(frozen=True, slots=True)
class Page:
    """One page of a remote collection listing."""

    data: tuple[dict[str, Any], ...]
    next_url: str | None = None
    partial: bool = False
    """``True`` when more pages remain after this one."""


class ResourceClient(Protocol):
    """Contract for the generic REST resource backend.

    Records are returned as raw, provider-specific dicts; the core layer
    parses them into domain models.  Implementations must map all
    transport exceptions to :class:`~mcapp.exceptions.McappError`
    subclasses.

    Raises
    ------
    NotFoundError
        When the addressed resource does not exist.
    TransportError
        For any other failed call.
    """

    def list(
        self,
        resource_type: str,
        filters: Mapping[str, str] | None = None,
    ) -> Page:
        """Return the first page of *resource_type* matching *filters*."""
        ...  # pragma: no cover

    def next_page(self, page: Page) -> Page | None:
        """Return the page after *page*, or ``None`` when there is none."""
        ...  # pragma: no cover

    def by_id(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        ...  # pragma: no cover

    def create(self, resource_type: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...  # pragma: no cover

    def update(
        self,
        resource_type: str,
        resource_id: str,
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        ...  # pragma: no cover

    def delete(self, resource_type: str, resource_id: str) -> None:
        ...  # pragma: no cover

    def action(
        self,
        resource_type: str,
        resource_id: str,
        action: str,
        payload: Mapping[str, Any],
    ) -> None:
        """Invoke a named resource action (e.g. ``rollback``)."""
        ...  # pragma: no cover

    def follow_link(self, record: Mapping[str, Any], link: str) -> dict[str, Any]:
        """GET the URL stored under ``record["links"][link]``."""
        ...  # pragma: no cover


class AnswerPrompter(Protocol):
    """Contract for interactively asking a template question."""

    def ask(self, question: Question, default: str) -> str:
        """Return the user's answer to *question*.

        Raises
        ------
        InvalidAnswerError
            When the user cancels the prompt.
        """
        ...  # pragma: no cover
