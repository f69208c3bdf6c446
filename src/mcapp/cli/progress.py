"""Rich spinner driven by the install orchestrator's poll callback.

This module bridges :class:`~mcapp.core.installer.InstallOrchestrator`'s
``on_poll`` callback with a Rich :class:`~rich.progress.Progress`
spinner.  The core layer only forwards the observed app and state.

Design
------
* :class:`InstallProgress` manages a Rich Progress context.
* :meth:`__call__` is the callback passed to the orchestrator.
* Shutdown-safe: if the spinner is already stopped, calls are
  silently ignored.
"""

from __future__ import annotations

from typing import Any

from mcapp.cli.console import get_rich_console
from mcapp.core.installer import InstallState
from mcapp.core.models import MultiClusterApp
from mcapp.exceptions import MissingDependencyError


class InstallProgress:
    """Callable poll-callback adapter for Rich.

    Usage::

        with InstallProgress("redis-prod", timeout=60) as progress:
            service.install(..., on_poll=progress)
    """

    def __init__(self, app_name: str, *, timeout: int) -> None:
        try:
            from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
        except ModuleNotFoundError as exc:
            raise MissingDependencyError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            TimeElapsedColumn(),
            console=get_rich_console(),
            transient=True,
        )
        self._description = f"Installing {app_name} (timeout {timeout}s)"
        self._task_id: Any = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> InstallProgress:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the spinner."""
        if not self._started:
            self._progress.start()
            self._task_id = self._progress.add_task(self._description, total=None)
            self._started = True

    def stop(self) -> None:
        """Stop the spinner (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Poll callback
    # ------------------------------------------------------------------

    def __call__(self, poll: int, app: MultiClusterApp, state: InstallState) -> None:
        if not self._started:
            return
        self._progress.update(
            self._task_id,
            description=f"{self._description}: poll {poll}, state {app.state or state.value}",
        )
