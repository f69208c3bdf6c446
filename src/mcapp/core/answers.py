"""Conversion between flat scoped answer maps and API answer blocks.

The flat map is the single editable representation while answers are
gathered: its keys are ``key`` (global), ``cluster:key`` (cluster scope)
or ``cluster:project:key`` (project scope), where the scope parts may be
names or IDs.  The API instead wants one :class:`Answer` per scope,
keyed by ID.

Guarantees
----------
* :func:`from_answers` is pure and never fails.
* :func:`to_answers` resolves every scope through a
  :class:`~mcapp.core.resolver.NameResolver`; the first resolution
  failure aborts the whole conversion.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from mcapp.core.models import Answer
from mcapp.core.resolver import NameResolver
from mcapp.core.scope import concat_scope

ScopedAnswerMap = dict[str, dict[str, str]]
"""Answer values bucketed by resolved scope ID (``""`` for global)."""


def set_value_in_answer_map(
    answer_map: ScopedAnswerMap,
    scope: str,
    scope_id: str,
    key: str,
    value: str,
) -> None:
    """Store *value* under ``answer_map[scope_id][key]``.

    The same answer may appear twice in one flat map, once written with
    IDs (carried over from the existing app) and once with names
    (supplied by the user).  A name-form value always overrides an
    ID-form one, whatever order they arrive in.
    """
    bucket = answer_map.setdefault(scope_id, {})
    if key not in bucket or scope != scope_id:
        bucket[key] = value


def to_answers(flat: Mapping[str, str], resolver: NameResolver) -> list[Answer]:
    """Group a flat scoped answer map into one :class:`Answer` per scope.

    Raises
    ------
    NotFoundError
        If a cluster or project in a key cannot be found.
    AmbiguousError
        If a cluster or project name in a key is not unique.
    """
    answer_map: ScopedAnswerMap = {}
    for scoped_key, value in flat.items():
        parts = scoped_key.split(":", 2)
        if len(parts) == 1:
            answer_map.setdefault("", {})[scoped_key] = value
        elif len(parts) == 2:
            cluster_ref, key = parts
            cluster_id = resolver.resolve_cluster(cluster_ref)
            set_value_in_answer_map(answer_map, cluster_ref, cluster_id, key, value)
        else:
            project_scope = concat_scope(parts[0], parts[1])
            project_id = resolver.resolve_project(project_scope)
            set_value_in_answer_map(answer_map, project_scope, project_id, parts[2], value)

    answers: list[Answer] = []
    for scope_id, values in answer_map.items():
        # Only project IDs contain ":".
        if ":" in scope_id:
            answers.append(Answer(project_id=scope_id, values=values))
        elif scope_id:
            answers.append(Answer(cluster_id=scope_id, values=values))
        else:
            answers.append(Answer(values=values))
    return answers


def from_answers(answers: Iterable[Answer]) -> dict[str, str]:
    """Flatten answer blocks into an ID-scoped flat answer map."""
    flat: dict[str, str] = {}
    for answer in answers:
        scope = answer.project_id or answer.cluster_id
        for key, value in answer.values.items():
            flat[concat_scope(scope, key) if scope else key] = value
    return flat
