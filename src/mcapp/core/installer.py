"""Install, upgrade and rollback orchestration for multi-cluster apps.

After creating an app the orchestrator polls it at a fixed interval
until one of the terminal states is reached::

    Waiting ──▶ Installed   (condition Installed=True)
       │──────▶ Failed      (transitioning == "error")
       └──────▶ TimedOut    (polls × interval ≥ timeout)

There is no backoff and no jitter.  The wait blocks the calling thread;
the only way to cancel it is ``KeyboardInterrupt``.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from mcapp.core.models import MULTI_CLUSTER_APP, Answer, MultiClusterApp
from mcapp.core.protocols import ResourceClient
from mcapp.core.records import answer_to_record, app_to_record, parse_app, targets_to_records
from mcapp.exceptions import InstallTimeoutError, RemoteFailureError

logger = logging.getLogger(__name__)

POLL_INTERVAL: int = 2
"""Seconds between two status polls."""

DEFAULT_TIMEOUT: int = 60
"""Default install wait, in seconds."""


class InstallState(enum.Enum):
    WAITING = "waiting"
    INSTALLED = "installed"
    FAILED = "failed"
    TIMED_OUT = "timed-out"


PollCallback = Callable[[int, MultiClusterApp, InstallState], None]


def evaluate_install_state(app: MultiClusterApp) -> InstallState:
    """Classify one observed app record (never returns ``TIMED_OUT``)."""
    for condition in app.status.conditions:
        if condition.type.lower() == "installed" and condition.status.lower() == "true":
            return InstallState.INSTALLED
    if app.transitioning == "error":
        return InstallState.FAILED
    return InstallState.WAITING


def replace_version_suffix(template_version_id: str, old_version: str, new_version: str) -> str:
    """Swap the trailing *old_version* of a composite template-version ID.

    ``"cattle-global-data:redis-1.2.3"`` with ``1.2.3 → 1.3.0`` gives
    ``"cattle-global-data:redis-1.3.0"``.  When the ID does not end with
    *old_version* the new version is appended unchanged.
    """
    if old_version and template_version_id.endswith(old_version):
        template_version_id = template_version_id[: -len(old_version)]
    return template_version_id + new_version


class InstallOrchestrator:
    """Drives create/update calls and waits for installation.

    Parameters
    ----------
    client:
        Any object satisfying the :class:`ResourceClient` protocol.
    interval:
        Seconds between polls.
    sleep:
        Blocking sleep function, injectable for tests.
    """

    def __init__(
        self,
        client: ResourceClient,
        *,
        interval: int = POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client: ResourceClient = client
        self._interval: int = interval
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def install(
        self,
        app: MultiClusterApp,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        on_poll: PollCallback | None = None,
    ) -> MultiClusterApp:
        """Create *app* remotely and wait until it reports installed.

        Raises
        ------
        RemoteFailureError
            If the app transitions to an error state.
        InstallTimeoutError
            If it is not installed within *timeout* seconds.
        """
        created = parse_app(self._client.create(MULTI_CLUSTER_APP, app_to_record(app)))
        logger.debug("Created multi-cluster app %s (%s)", created.name, created.id)
        return self.wait_until_installed(created.id, timeout=timeout, on_poll=on_poll)

    def wait_until_installed(
        self,
        app_id: str,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        on_poll: PollCallback | None = None,
    ) -> MultiClusterApp:
        """Poll *app_id* every interval until a terminal state is reached."""
        polls = 0
        while True:
            if polls * self._interval >= timeout:
                raise InstallTimeoutError(
                    "Timed out waiting for app to be active, "
                    "the app could still be installing.",
                    hint="Run 'mcapp ls' to verify.",
                )
            polls += 1
            self._sleep(self._interval)
            app = parse_app(self._client.by_id(MULTI_CLUSTER_APP, app_id))
            state = evaluate_install_state(app)
            logger.debug("Poll %d of app %s: %s", polls, app_id, state.value)
            if on_poll is not None:
                on_poll(polls, app, state)

            if state is InstallState.INSTALLED:
                return app
            if state is InstallState.FAILED:
                raise RemoteFailureError(
                    app.transitioning_message or f"App {app.name} failed to install"
                )

    # ------------------------------------------------------------------
    # Upgrade / rollback
    # ------------------------------------------------------------------

    def upgrade(
        self,
        record: Mapping[str, Any],
        *,
        answers: Sequence[Answer],
        old_version: str,
        new_version: str,
        target_ids: Sequence[str] = (),
    ) -> MultiClusterApp:
        """Submit the fetched app *record* with new answers and version.

        Every other field of *record* is sent back unchanged.  Only the
        version suffix of the template-version ID changes.  An empty
        *target_ids* leaves the existing targets untouched; a non-empty
        one replaces them wholesale.
        """
        payload = dict(record)
        payload["answers"] = [answer_to_record(a) for a in answers]
        payload["templateVersionId"] = replace_version_suffix(
            str(record.get("templateVersionId") or ""), old_version, new_version,
        )
        if target_ids:
            payload["targets"] = targets_to_records(target_ids)
        app_id = str(record.get("id") or "")
        updated = self._client.update(MULTI_CLUSTER_APP, app_id, payload)
        logger.debug("Updated multi-cluster app %s to %s", app_id, payload["templateVersionId"])
        return parse_app(updated)

    def rollback(self, app_id: str, revision_id: str) -> None:
        """Roll *app_id* back to *revision_id*; no polling."""
        self._client.action(
            MULTI_CLUSTER_APP, app_id, "rollback", {"revisionId": revision_id},
        )
