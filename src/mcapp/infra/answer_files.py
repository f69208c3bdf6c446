"""Reading ``--answers`` and ``--values`` files.

Both accept YAML or JSON (JSON being a YAML subset, one parser covers
both).  Parsing errors are re-raised as
:class:`~mcapp.exceptions.InvalidAnswerError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from mcapp.core.answer_sources import flatten_values, stringify
from mcapp.exceptions import InvalidAnswerError


def _load_mapping(path: Path, kind: str) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidAnswerError(f"Cannot read {kind} file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise InvalidAnswerError(
            f"{kind.capitalize()} file {path} is not valid YAML or JSON",
            hint=str(exc),
        ) from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidAnswerError(f"{kind.capitalize()} file {path} must contain a mapping")
    return raw


def read_answers_file(path: Path) -> dict[str, str]:
    """Return the ``key: value`` answers in *path*, values stringified."""
    return {str(k): stringify(v) for k, v in _load_mapping(path, "answers").items()}


def read_values_file(path: Path) -> dict[str, str]:
    """Return the Helm values in *path* flattened into dotted answer keys."""
    return flatten_values(_load_mapping(path, "values"))
