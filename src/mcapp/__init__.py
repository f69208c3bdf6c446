"""mcapp: command-line client for multi-cluster applications.

Lists, installs, upgrades, rolls back and deletes applications deployed
across several clusters and projects of a remote control plane, with a
strict layered architecture.
"""

from mcapp.version import __version__

__all__: list[str] = ["__version__"]
