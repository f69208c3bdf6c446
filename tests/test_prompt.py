"""Tests for interactive prompts and the install spinner (cli/prompt.py, cli/progress.py)."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from mcapp.cli.progress import InstallProgress
from mcapp.cli.prompt import QuestionaryPrompter, build_message
from mcapp.core.installer import InstallState
from mcapp.core.models import MultiClusterApp, Question
from mcapp.exceptions import InvalidAnswerError, MissingDependencyError


def _prompter(answer: object) -> tuple[QuestionaryPrompter, MagicMock]:
    questionary = MagicMock()
    for widget in ("confirm", "select", "password", "text"):
        getattr(questionary, widget).return_value.ask.return_value = answer
    with patch("mcapp.cli.prompt._import_questionary", return_value=questionary):
        return QuestionaryPrompter(), questionary


class TestBuildMessage:
    def test_variable_only(self) -> None:
        assert build_message(Question(variable="replicas")) == "replicas:"

    def test_label_and_description(self) -> None:
        question = Question(variable="replicaCount", label="Replicas", description="Pod count")
        assert build_message(question) == "Replicas (replicaCount) - Pod count:"


class TestQuestionaryPrompter:
    def test_text(self) -> None:
        prompter, questionary = _prompter("3")
        assert prompter.ask(Question(variable="replicas"), "1") == "3"
        questionary.text.assert_called_once_with("replicas:", default="1")

    def test_boolean(self) -> None:
        prompter, questionary = _prompter(False)
        answer = prompter.ask(Question(variable="tls", type="boolean"), "true")
        assert answer == "false"
        questionary.confirm.assert_called_once_with("tls:", default=True)

    def test_enum(self) -> None:
        prompter, questionary = _prompter("b")
        question = Question(variable="mode", type="enum", options=("a", "b"))
        assert prompter.ask(question, "z") == "b"
        questionary.select.assert_called_once_with("mode:", choices=["a", "b"], default=None)

    def test_empty_password_keeps_default(self) -> None:
        prompter, _ = _prompter("")
        assert prompter.ask(Question(variable="pw", type="password"), "old") == "old"

    def test_cancelled(self) -> None:
        prompter, _ = _prompter(None)
        with pytest.raises(InvalidAnswerError, match="replicas"):
            prompter.ask(Question(variable="replicas"), "1")

    def test_missing_questionary(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "questionary", None)
        with pytest.raises(MissingDependencyError):
            QuestionaryPrompter()


class TestInstallProgress:
    def _app(self, state: str = "deploying") -> MultiClusterApp:
        return MultiClusterApp(id="x", name="redis", template_version_id="t", state=state)

    def test_updates_while_started(self) -> None:
        progress = InstallProgress("redis", timeout=60)
        progress._progress = MagicMock()
        with progress:
            progress(1, self._app(), InstallState.WAITING)
        progress._progress.update.assert_called_once()
        description = progress._progress.update.call_args.kwargs["description"]
        assert "poll 1" in description and "deploying" in description
        progress._progress.stop.assert_called_once_with()

    def test_ignored_when_stopped(self) -> None:
        progress = InstallProgress("redis", timeout=60)
        progress._progress = MagicMock()
        progress(1, self._app(), InstallState.WAITING)
        progress._progress.update.assert_not_called()

    def test_stop_is_idempotent(self) -> None:
        progress = InstallProgress("redis", timeout=60)
        progress._progress = MagicMock()
        progress.start()
        progress.stop()
        progress.stop()
        progress._progress.stop.assert_called_once_with()

    def test_missing_rich(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "rich.progress", None)
        with pytest.raises(MissingDependencyError):
            InstallProgress("redis", timeout=60)
