"""Infrastructure layer: external system integration.

This layer wraps all interaction with the control-plane HTTP API, the
configuration sources and the filesystem.  Every raw third-party
exception must be caught here and re-raised as a
:class:`~mcapp.exceptions.McappError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from mcapp.infra.answer_files import read_answers_file, read_values_file
from mcapp.infra.config import ClientConfig, load_config
from mcapp.infra.rest_client import RestResourceClient

__all__: list[str] = [
    "ClientConfig",
    "RestResourceClient",
    "load_config",
    "read_answers_file",
    "read_values_file",
]
