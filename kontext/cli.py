"""Command line interface for managing kubeconfig contexts."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from kontext.add import add_context
from kontext.kubeconfig import KubeConfigError
from kontext.listing import list_contexts
from kontext.merge import merge_context
from kontext.prune import clean_contexts, delete_context

VALID_SCANS = ("alauda", "")
MAX_NAME_LENGTH = 255


class _CommandError(Exception):
    """A command failed; the message is shown to the user."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise _CommandError(message)


def validate_name(name: str) -> None:
    """Raise ValueError unless ``name`` is a usable context name."""
    if not name:
        raise ValueError("context name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"context name too long (max {MAX_NAME_LENGTH} characters)")


def validate_server(server: str) -> None:
    """Raise ValueError if ``server`` is empty."""
    if not server:
        raise ValueError("server address cannot be empty")


def validate_scan(scan: str) -> None:
    """Raise ValueError unless ``scan`` is a known cluster type (or empty)."""
    if scan not in VALID_SCANS:
        raise ValueError(f"scan must be one of: [{' '.join(VALID_SCANS)}]")


def _reject_args(command: str, args: list[str]) -> None:
    if args:
        raise _CommandError(
            f"{command} command does not accept arguments, received: [{' '.join(args)}]"
        )


def _check(prefix: str, check, value: str) -> None:
    try:
        check(value)
    except ValueError as err:
        raise _CommandError(f"{prefix}: {err}") from err


def _run_add(ns: argparse.Namespace) -> None:
    _reject_args("add", ns.args)
    _check("invalid name", validate_name, ns.name)
    _check("invalid server", validate_server, ns.server)
    if not ns.token:
        raise _CommandError("token cannot be empty")
    _check("invalid scan value", validate_scan, ns.scan)
    try:
        add_context(ns.name, ns.server, ns.token, ns.scan or None)
    except KubeConfigError as err:
        raise _CommandError(f"failed to add context: {err}") from err


def _run_list(ns: argparse.Namespace) -> None:
    _reject_args("list", ns.args)
    try:
        list_contexts()
    except KubeConfigError as err:
        raise _CommandError(f"failed to list contexts: {err}") from err


def _run_merge(ns: argparse.Namespace) -> None:
    _reject_args("merge", ns.args)
    if not ns.path:
        raise _CommandError("path to kubeconfig file is required")
    _check("invalid scan value", validate_scan, ns.scan)
    try:
        merge_context(ns.path, ns.name, ns.scan or None)
    except KubeConfigError as err:
        raise _CommandError(f"failed to merge kubeconfig: {err}") from err


def _run_clean(ns: argparse.Namespace) -> None:
    _reject_args("clean", ns.args)
    try:
        clean_contexts()
    except KubeConfigError as err:
        raise _CommandError(f"failed to clean contexts: {err}") from err


def _run_delete(ns: argparse.Namespace) -> None:
    _reject_args("delete", ns.args)
    _check("invalid name", validate_name, ns.name)
    try:
        delete_context(ns.name)
    except KubeConfigError as err:
        raise _CommandError(f'failed to delete context "{ns.name}": {err}') from err


def _build_parser() -> _ArgumentParser:
    parser = _ArgumentParser(
        prog="kontext",
        description=(
            "Kontext is a CLI tool for managing Kubernetes contexts in your kubectl "
            "configuration. It provides commands to add, list, merge, delete, and "
            "clean Kubernetes contexts."
        ),
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    def command(name: str, help_text: str, handler) -> argparse.ArgumentParser:
        sub = commands.add_parser(name, help=help_text, description=help_text)
        sub.add_argument("args", nargs="*", help=argparse.SUPPRESS)
        sub.set_defaults(handler=handler)
        return sub

    scan_help = "Cluster type to scan for sub-clusters (e.g., alauda)"

    add = command("add", "Add a new Kubernetes context", _run_add)
    add.add_argument("--name", required=True,
                     help="Name for the context, cluster, and user (required)")
    add.add_argument("--server", required=True,
                     help="Kubernetes API server address (required)")
    add.add_argument("--token", required=True,
                     help="Kubernetes authentication token (required)")
    add.add_argument("--scan", default="", help=scan_help)

    merge = command("merge", "Merge a kubeconfig file", _run_merge)
    merge.add_argument("--name", default="",
                       help="Optional name prefix for the context, cluster, and user")
    merge.add_argument("--path", required=True, help="Path to the kubeconfig file (required)")
    merge.add_argument("--scan", default="", help=scan_help)

    delete = command("delete", "Delete Kubernetes contexts", _run_delete)
    delete.add_argument(
        "--name", required=True,
        help="Name of the context to delete (supports wildcard patterns, required)",
    )

    command("clean", "Clean invalid Kubernetes contexts", _run_clean)
    command("list", "List all Kubernetes contexts", _run_list)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    parser = _build_parser()
    try:
        ns = parser.parse_args(argv)
        if ns.command is None:
            parser.print_help()
            return 0
        ns.handler(ns)
    except _CommandError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())