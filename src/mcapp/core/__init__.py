"""Core / service layer: pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* All remote access goes through the :class:`ResourceClient` protocol.
"""

from mcapp.core.answers import from_answers, to_answers
from mcapp.core.app_service import MultiClusterAppService
from mcapp.core.installer import InstallOrchestrator, InstallState
from mcapp.core.models import Answer, MultiClusterApp, Target
from mcapp.core.protocols import AnswerPrompter, Page, ResourceClient
from mcapp.core.resolver import ClusterProjectDirectory, NameResolver
from mcapp.core.scope import concat_scope, parse_scope

__all__: list[str] = [
    "Answer",
    "AnswerPrompter",
    "ClusterProjectDirectory",
    "InstallOrchestrator",
    "InstallState",
    "MultiClusterApp",
    "MultiClusterAppService",
    "NameResolver",
    "Page",
    "ResourceClient",
    "Target",
    "concat_scope",
    "from_answers",
    "parse_scope",
    "to_answers",
]
