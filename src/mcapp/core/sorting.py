"""Display ordering for app revisions and template versions.

Both functions are pure and deterministic; parse failures are raised,
never skipped.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import semver

from mcapp.core.models import Revision, RevisionRow, VersionRow
from mcapp.exceptions import InvalidVersionError, McappError


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp such as ``2024-05-01T10:00:00Z``.

    Raises
    ------
    McappError
        If *value* is not a valid timestamp.
    """
    normalized = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        return datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise McappError(f"Invalid revision timestamp: {value!r}") from exc


def sort_revisions(revisions: Iterable[Revision], current_revision_id: str) -> list[RevisionRow]:
    """Return revisions oldest first, flagging the app's active revision."""
    rows = [
        RevisionRow(
            name=rev.name,
            created=parse_rfc3339(rev.created),
            current=bool(current_revision_id) and current_revision_id in (rev.name, rev.id),
        )
        for rev in revisions
    ]
    return sorted(rows, key=lambda row: row.created)


def sort_versions(versions: Iterable[str], current_version: str = "") -> list[VersionRow]:
    """Return template versions in ascending semantic-version order.

    Precedence follows Semantic Versioning 2.0.0: a prerelease such as
    ``1.0.0-rc.1`` sorts before ``1.0.0``.

    Raises
    ------
    InvalidVersionError
        If any version string cannot be parsed.
    """
    parsed: list[tuple[semver.Version, str]] = []
    for raw in versions:
        try:
            parsed.append((semver.Version.parse(raw), raw))
        except ValueError as exc:
            raise InvalidVersionError(f"Cannot parse template version {raw!r}") from exc
    parsed.sort(key=lambda pair: pair[0])
    return [
        VersionRow(version=raw, current=bool(current_version) and raw == current_version)
        for _, raw in parsed
    ]
