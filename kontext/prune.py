"""The clean and delete commands: drop contexts and the entries they leave behind."""

from __future__ import annotations

from kontext.backup import backup_kube_config
from kontext.cluster import ClusterAccessError, validate_cluster_access
from kontext.kubeconfig import (
    Context,
    KubeConfig,
    KubeConfigError,
    clean_context,
    get_kube_config,
    write_config,
)

_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_CYAN = "\033[36m"
_RESET = "\033[0m"


def _context_is_valid(config: KubeConfig, ctx: Context) -> bool:
    cluster = config.clusters.get(ctx.cluster)
    user = config.auth_infos.get(ctx.auth_info)
    if cluster is None or user is None:
        return False
    try:
        validate_cluster_access(cluster.server, user.token)
    except ClusterAccessError:
        return False
    return True


def _report_orphans(removed_clusters: list[str], removed_users: list[str]) -> None:
    for cluster in removed_clusters:
        print(f"{_YELLOW}  ✓ Removed orphaned cluster: {cluster}{_RESET}")
    for user in removed_users:
        print(f"{_YELLOW}  ✓ Removed orphaned user: {user}{_RESET}")


def _print_summary(
    op: str,
    removed_contexts: int,
    current_modified: bool,
    removed_clusters: int,
    removed_users: int,
    backup_path: str,
) -> None:
    print(f"{_CYAN}\n{op} Summary:")
    print(f"  ✓ Removed contexts: {removed_contexts}")
    if current_modified:
        print("  ✓ Current context reset")
    print(f"  ✓ Removed clusters: {removed_clusters}")
    print(f"  ✓ Removed users: {removed_users}")
    if backup_path:
        print(f"  ✓ Backup saved at: {backup_path}")
    print("=" * 50 + _RESET)


def _backup(op: str, config: KubeConfig, path: str) -> str:
    try:
        return backup_kube_config(config, path)
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to create backup: {err}") from err


def clean_contexts() -> list[str]:
    """Remove contexts that are broken or unreachable, then orphaned entries.

    Returns the names of the removed contexts.
    """
    op = "kubeconfig.CleanContextCmd"
    try:
        config, path = get_kube_config()
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to load kubeconfig: {err}") from err

    to_remove = [
        name
        for name in sorted(config.contexts)
        if not _context_is_valid(config, config.contexts[name])
    ]

    current = config.current_context
    current_modified = bool(current) and (
        current not in config.contexts or current in to_remove
    )

    backup_path = ""
    if to_remove or current_modified:
        backup_path = _backup(op, config, path)

    print(f"{_CYAN}[{op}] Cleaning contexts...{_RESET}")
    for name in to_remove:
        del config.contexts[name]
        print(f"{_RED}  ✓ Removed invalid context: {name}{_RESET}")

    if current_modified:
        config.current_context = ""
        print(f"{_RED}  ✓ Cleared current context setting{_RESET}")

    removed_clusters, removed_users = clean_context(config)
    _report_orphans(removed_clusters, removed_users)

    if to_remove or removed_clusters or removed_users or current_modified:
        try:
            write_config(config, path)
        except KubeConfigError as err:
            raise KubeConfigError(
                f"{op}: failed to write updated kubeconfig to {path}: {err}"
            ) from err
    else:
        print(f"{_GREEN}[{op}] No invalid or orphaned resources found. Kubeconfig is healthy.{_RESET}")

    _print_summary(
        op, len(to_remove), current_modified, len(removed_clusters), len(removed_users), backup_path
    )
    return to_remove


def delete_context(name_pattern: str) -> list[str]:
    """Delete the context ``name_pattern``, or all starting with it if it has a ``*``.

    Orphaned clusters and users are removed too. Returns the deleted context names.
    """
    op = "kubeconfig.DeleteContext"
    if not name_pattern:
        raise KubeConfigError(f"{op}: context name or pattern cannot be empty")

    try:
        config, path = get_kube_config()
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to load kubeconfig: {err}") from err

    if "*" in name_pattern:
        prefix = name_pattern.replace("*", "")
        if not prefix:
            raise KubeConfigError(f"{op}: wildcard pattern must include a prefix")
        matched = sorted(name for name in config.contexts if name.startswith(prefix))
        if not matched:
            raise KubeConfigError(f'{op}: no contexts found matching pattern "{name_pattern}"')
    else:
        if name_pattern not in config.contexts:
            raise KubeConfigError(f'{op}: context "{name_pattern}" does not exist')
        matched = [name_pattern]

    current_modified = config.current_context in matched

    backup_path = ""
    if matched or current_modified:
        backup_path = _backup(op, config, path)

    print(f"{_CYAN}[{op}] Deleting contexts...{_RESET}")
    for name in matched:
        del config.contexts[name]
        print(f"{_RED}  ✓ Removed context: {name}{_RESET}")
        if config.current_context == name:
            config.current_context = ""
            print(f"{_RED}  ✓ Cleared current context setting{_RESET}")

    removed_clusters, removed_users = clean_context(config)
    _report_orphans(removed_clusters, removed_users)

    if matched or removed_clusters or removed_users or current_modified:
        try:
            write_config(config, path)
        except KubeConfigError as err:
            raise KubeConfigError(f"{op}: failed to save kubeconfig to {path}: {err}") from err

    _print_summary(
        op, len(matched), current_modified, len(removed_clusters), len(removed_users), backup_path
    )
    return matched