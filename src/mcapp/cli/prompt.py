"""Interactive template-question prompts for the CLI layer.

This module is responsible for:

* Choosing the questionary widget that fits a question's type.
* Rendering the question label, description and default.
* Returning the answer as the string the control plane expects.

No business logic lives here; :func:`~mcapp.core.answer_sources.ask_questions`
decides which questions to ask.
"""

from __future__ import annotations

from typing import Any

from mcapp.core.models import Question
from mcapp.exceptions import InvalidAnswerError, MissingDependencyError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms)
# ---------------------------------------------------------------------------

def build_message(question: Question) -> str:
    """Build the single-line prompt, e.g. ``"Replicas (replicaCount):"``."""
    label = question.label or question.variable
    message = label if label == question.variable else f"{label} ({question.variable})"
    if question.description:
        message = f"{message} - {question.description}"
    return f"{message}:"


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "yes", "1")


# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------

class QuestionaryPrompter:
    """Concrete :class:`~mcapp.core.protocols.AnswerPrompter` using questionary.

    Widget per question type: ``boolean`` → confirm, ``enum`` → select,
    ``password`` → masked input, anything else → free text.
    """

    def __init__(self) -> None:
        self._questionary: Any = _import_questionary()

    def ask(self, question: Question, default: str) -> str:
        """Prompt for *question*; raise when the user cancels.

        Raises
        ------
        InvalidAnswerError
            If the prompt is dismissed (Esc / Ctrl+C return ``None``).
        """
        q = self._questionary
        message = build_message(question)

        if question.type == "boolean":
            answer: Any = q.confirm(message, default=_as_bool(default)).ask()
            if answer is not None:
                answer = "true" if answer else "false"
        elif question.type == "enum" and question.options:
            choices = list(question.options)
            answer = q.select(
                message,
                choices=choices,
                default=default if default in choices else None,
            ).ask()
        elif question.type == "password":
            answer = q.password(message).ask()
            if answer == "":
                answer = default
        else:
            answer = q.text(message, default=default).ask()

        if answer is None:
            raise InvalidAnswerError(
                f"No answer given for {question.variable}.",
                hint="Answer the prompt, or pass the value with --set.",
            )
        return str(answer)
