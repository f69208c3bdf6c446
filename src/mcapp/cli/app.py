"""CLI application entry point and command routing for mcapp.

This module is the **sole error boundary** for the entire application.
It catches :class:`~mcapp.exceptions.McappError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here; all work is delegated to
  :class:`~mcapp.core.app_service.MultiClusterAppService`.
* Sub-commands are dispatched through the explicit :data:`COMMANDS`
  registry; aliases map onto the canonical command name.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from mcapp.cli import exit_codes
from mcapp.cli.console import configure_logging, console
from mcapp.cli.output import FORMATS, OutputWriter
from mcapp.core.installer import DEFAULT_TIMEOUT
from mcapp.exceptions import McappError
from mcapp.version import __version__

if TYPE_CHECKING:
    from mcapp.core.app_service import MultiClusterAppService
    from mcapp.infra.config import ClientConfig

Handler = Callable[[argparse.Namespace], int]


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

_INSTALL_EPILOG = """\
examples:
  # Install the redis template with no other options
  mcapp install redis appFoo

  # Install the redis template and specify an answers file location
  mcapp install --answers /example/answers.yaml redis appFoo

  # Install the redis template and set multiple answers and the version to install
  mcapp install --set foo=bar --set baz=bunk --version 1.0.1 redis appFoo

  # Install the redis template and set target projects to install
  mcapp install --target mycluster:Default --target c-98pjr:p-w6c5f redis appFoo
"""


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="table",
        help="Output format (default: table).",
    )


def _add_answer_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-a",
        "--answers",
        type=Path,
        help="Path to an answers file (a key: value map, JSON or YAML).",
    )
    parser.add_argument("--values", type=Path, help="Path to a Helm values file.")
    parser.add_argument(
        "--set",
        dest="set_values",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set an answer, can be used multiple times. Example: --set foo=bar",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser and all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="mcapp",
        description="Operations with multi-cluster apps.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--config", type=Path, help="Path to the config file.")
    parser.add_argument("--server-url", help="Control plane URL (env: MCAPP_URL).")
    parser.add_argument("--token", help="API token (env: MCAPP_TOKEN).")
    parser.add_argument("--project", help="Current project ID (env: MCAPP_PROJECT).")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    # Without a sub-command the CLI runs ``ls``, so its flags live here too.
    _add_format(parser)
    parser.add_argument("-q", "--quiet", action="store_true", help="Only display app IDs.")
    parser.set_defaults(command="ls")

    sub = parser.add_subparsers(title="commands", metavar="COMMAND")

    ls = sub.add_parser("ls", help="List multi-cluster apps")
    _add_format(ls)
    ls.add_argument("-q", "--quiet", action="store_true", help="Only display IDs.")
    ls.set_defaults(command="ls")

    delete = sub.add_parser("delete", help="Delete multi-cluster apps")
    delete.add_argument("apps", nargs="+", metavar="APP", help="App name or ID.")
    delete.set_defaults(command="delete")

    install = sub.add_parser(
        "install",
        help="Install a multi-cluster app",
        description=(
            "Install a multi-cluster app. This defaults to the newest version of "
            "the app template. Specify a version using '--version' if required."
        ),
        epilog=_INSTALL_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    install.add_argument("template", metavar="TEMPLATE_NAME")
    install.add_argument("app_name", metavar="APP_NAME")
    _add_answer_flags(install)
    install.add_argument("--version", dest="template_version", help="Version of the template to use.")
    install.add_argument(
        "--no-prompt",
        action="store_true",
        help="Use defaults instead of asking when required answers are missing.",
    )
    install.add_argument(
        "-t",
        "--target",
        dest="targets",
        action="append",
        default=[],
        help="Target project name (cluster:project) or ID, can be repeated.",
    )
    install.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds to wait until the app is installed (default: {DEFAULT_TIMEOUT}).",
    )
    install.set_defaults(command="install")

    rollback = sub.add_parser("rollback", help="Roll a multi-cluster app back to a revision")
    rollback.add_argument("app", metavar="APP")
    rollback.add_argument("revision", nargs="?", metavar="REVISION")
    rollback.add_argument(
        "-r",
        "--show-revisions",
        action="store_true",
        help="Show revisions available to roll back to.",
    )
    _add_format(rollback)
    rollback.set_defaults(command="rollback")

    upgrade = sub.add_parser("upgrade", help="Upgrade a multi-cluster app to another version")
    upgrade.add_argument("app", metavar="APP")
    upgrade.add_argument("target_version", nargs="?", metavar="VERSION")
    _add_answer_flags(upgrade)
    upgrade.add_argument(
        "-v",
        "--show-versions",
        action="store_true",
        help="Display versions available to upgrade to.",
    )
    upgrade.add_argument(
        "-t",
        "--target",
        dest="targets",
        action="append",
        default=[],
        help="Target projects replacing all current targets; omit to keep them.",
    )
    _add_format(upgrade)
    upgrade.set_defaults(command="upgrade")

    list_templates = sub.add_parser(
        "list-templates", aliases=["lt"], help="List templates available for installation",
    )
    _add_format(list_templates)
    list_templates.add_argument("--catalog", help="Only list templates of this catalog.")
    list_templates.set_defaults(command="list-templates")

    show_template = sub.add_parser(
        "show-template", aliases=["st"], help="Show versions available for a template",
    )
    show_template.add_argument("template", metavar="TEMPLATE")
    _add_format(show_template)
    show_template.set_defaults(command="show-template")

    show_app = sub.add_parser(
        "show-app", aliases=["sa"], help="Show an app's revisions and available versions",
    )
    show_app.add_argument("app", metavar="APP")
    _add_format(show_app)
    show_app.set_defaults(command="show-app")

    return parser


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def _load_config(args: argparse.Namespace) -> ClientConfig:
    from mcapp.infra.config import load_config

    return load_config(
        args.config,
        overrides={
            "url": args.server_url,
            "token": args.token,
            "project": args.project,
        },
    )


def _build_service(config: ClientConfig) -> MultiClusterAppService:
    """Create a per-invocation service over the configured REST client."""
    from mcapp.core.app_service import MultiClusterAppService
    from mcapp.infra.rest_client import RestResourceClient

    return MultiClusterAppService(RestResourceClient(config))


_REVISION_COLUMNS = (("CURRENT", "current"), ("REVISION", "name"), ("CREATED", "human"))
_VERSION_COLUMNS = (("CURRENT", "current"), ("VERSION", "version"))


def _write_rows(columns: Sequence[tuple[str, str]], rows: Sequence[object], fmt: str) -> None:
    with OutputWriter(columns, fmt) as writer:
        for row in rows:
            writer.write(row)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def _handle_ls(args: argparse.Namespace) -> int:
    rows = _build_service(_load_config(args)).list_apps()
    if args.quiet:
        for row in rows:
            sys.stdout.write(f"{row.id}\n")
        return exit_codes.SUCCESS
    _write_rows(
        (
            ("NAME", "name"),
            ("STATE", "state"),
            ("VERSION", "version"),
            ("TARGET_PROJECTS", "targets"),
        ),
        rows,
        args.format,
    )
    return exit_codes.SUCCESS


def _handle_delete(args: argparse.Namespace) -> int:
    for app_id in _build_service(_load_config(args)).delete_apps(args.apps):
        console.print(f"[green]Deleted[/green] {app_id}")
    return exit_codes.SUCCESS


def _handle_install(args: argparse.Namespace) -> int:
    """Dispatch an install.

    Flow:
    1. Read the answers and values files.
    2. Resolve template, version, answers and targets (may prompt).
    3. Create the app and wait with a Rich spinner.
    """
    from mcapp.cli.progress import InstallProgress
    from mcapp.infra.answer_files import read_answers_file, read_values_file

    prompter = None
    if not args.no_prompt:
        from mcapp.cli.prompt import QuestionaryPrompter

        prompter = QuestionaryPrompter()

    config = _load_config(args)
    service = _build_service(config)
    app = service.prepare_install(
        args.template,
        args.app_name,
        version=args.template_version,
        answers_file=read_answers_file(args.answers) if args.answers else None,
        values_file=read_values_file(args.values) if args.values else None,
        set_values=args.set_values,
        prompter=prompter,
        targets=args.targets,
        default_project=config.project,
    )
    with InstallProgress(app.name, timeout=args.timeout) as progress:
        installed = service.install(app, timeout=args.timeout, on_poll=progress)

    console.print(f"[bold green]Installed[/bold green] {installed.name} ({installed.id})")
    return exit_codes.SUCCESS


def _handle_upgrade(args: argparse.Namespace) -> int:
    from mcapp.infra.answer_files import read_answers_file, read_values_file

    service = _build_service(_load_config(args))
    if args.show_versions:
        _write_rows(_VERSION_COLUMNS, service.app_versions(args.app), args.format)
        return exit_codes.SUCCESS
    if not args.target_version:
        console.print("[yellow]A VERSION is required unless --show-versions is given.[/yellow]")
        return exit_codes.USAGE_ERROR

    app = service.upgrade(
        args.app,
        args.target_version,
        answers_file=read_answers_file(args.answers) if args.answers else None,
        values_file=read_values_file(args.values) if args.values else None,
        set_values=args.set_values,
        targets=args.targets,
    )
    console.print(f"[bold green]Upgraded[/bold green] {app.name} to {args.target_version}")
    return exit_codes.SUCCESS


def _handle_rollback(args: argparse.Namespace) -> int:
    service = _build_service(_load_config(args))
    if args.show_revisions:
        _write_rows(_REVISION_COLUMNS, service.app_revisions(args.app), args.format)
        return exit_codes.SUCCESS
    if not args.revision:
        console.print("[yellow]A REVISION is required unless --show-revisions is given.[/yellow]")
        return exit_codes.USAGE_ERROR

    service.rollback(args.app, args.revision)
    console.print(f"[bold green]Rolled back[/bold green] {args.app} to {args.revision}")
    return exit_codes.SUCCESS


def _handle_list_templates(args: argparse.Namespace) -> int:
    rows = _build_service(_load_config(args)).list_templates(args.catalog)
    _write_rows(
        (("ID", "id"), ("NAME", "name"), ("CATEGORY", "categories")),
        rows,
        args.format,
    )
    return exit_codes.SUCCESS


def _handle_show_template(args: argparse.Namespace) -> int:
    rows = _build_service(_load_config(args)).template_versions(args.template)
    _write_rows((("DEFAULT", "current"), ("VERSION", "version")), rows, args.format)
    return exit_codes.SUCCESS


def _handle_show_app(args: argparse.Namespace) -> int:
    service = _build_service(_load_config(args))
    _write_rows(_REVISION_COLUMNS, service.app_revisions(args.app), args.format)
    sys.stdout.write("\n")
    _write_rows(_VERSION_COLUMNS, service.app_versions(args.app), args.format)
    return exit_codes.SUCCESS


COMMANDS: dict[str, Handler] = {
    "ls": _handle_ls,
    "delete": _handle_delete,
    "install": _handle_install,
    "upgrade": _handle_upgrade,
    "rollback": _handle_rollback,
    "list-templates": _handle_list_templates,
    "show-template": _handle_show_template,
    "show-app": _handle_show_app,
}
"""Canonical command name → handler."""


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the mcapp CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)
    return COMMANDS[args.command](args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except McappError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
