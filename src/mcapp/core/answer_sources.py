"""Gathering answers from ``--set`` flags, parsed files and template questions.

Reading files is the infra layer's job; this module only merges the
already-parsed mappings and walks template questions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from mcapp.core.models import Question
from mcapp.core.protocols import AnswerPrompter
from mcapp.exceptions import InvalidAnswerError


def stringify(value: object) -> str:
    """Render a parsed YAML/JSON scalar the way the control plane expects."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def flatten_values(values: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a nested Helm values mapping into dotted answer keys.

    ``{"image": {"tag": "1.0"}, "ports": [80]}`` becomes
    ``{"image.tag": "1.0", "ports[0]": "80"}``.
    """
    flat: dict[str, str] = {}

    def _walk(node: Any, path: str) -> None:
        if isinstance(node, Mapping):
            for key, child in node.items():
                _walk(child, f"{path}.{key}" if path else str(key))
        elif isinstance(node, list):
            for index, child in enumerate(node):
                _walk(child, f"{path}[{index}]")
        else:
            flat[path] = stringify(node)

    _walk(values, prefix)
    return flat


def parse_set_values(items: Iterable[str]) -> dict[str, str]:
    """Parse repeated ``--set key=value`` arguments.

    Raises
    ------
    InvalidAnswerError
        If an item has no ``=``.
    """
    parsed: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidAnswerError(
                f"Invalid --set value: {item!r}",
                hint="Use the form --set key=value.",
            )
        parsed[key] = value
    return parsed


def apply_answer_updates(
    answers: dict[str, str],
    *,
    answers_file: Mapping[str, str] | None = None,
    values_file: Mapping[str, str] | None = None,
    set_values: Sequence[str] = (),
) -> None:
    """Merge all user-supplied answer sources into *answers* in place.

    Later sources win: answers file, then values file, then ``--set``.
    """
    if answers_file:
        answers.update(answers_file)
    if values_file:
        answers.update(values_file)
    answers.update(parse_set_values(set_values))


def ask_questions(
    questions: Sequence[Question],
    answers: dict[str, str],
    *,
    prompter: AnswerPrompter | None,
) -> None:
    """Fill *answers* for every template question not already answered.

    With a *prompter* each missing answer is asked interactively;
    without one the question's default is used.  Subquestions are
    visited when the parent's answer equals ``show_subquestion_if``.

    Raises
    ------
    InvalidAnswerError
        If a required question has no default and no prompter is given.
    """
    for question in questions:
        if question.variable not in answers:
            if prompter is not None:
                answers[question.variable] = prompter.ask(question, question.default)
            elif question.required and not question.default:
                raise InvalidAnswerError(
                    f"Installing this app requires a value for {question.variable}",
                    hint="Use --set or --answers, or remove --no-prompt.",
                )
            else:
                answers[question.variable] = question.default

        if (
            question.subquestions
            and question.show_subquestion_if
            and answers.get(question.variable) == question.show_subquestion_if
        ):
            ask_questions(question.subquestions, answers, prompter=prompter)
