"""The list command: show contexts and resources nothing refers to."""

from __future__ import annotations

from kontext.kubeconfig import KubeConfigError, get_kube_config

_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_CYAN = "\033[36m"
_RESET = "\033[0m"


def list_contexts() -> None:
    """Print every context with its cluster and user, then any orphaned entries."""
    op = "kubeconfig.ListContexts"
    try:
        config, _ = get_kube_config()
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to load kubeconfig: {err}") from err

    used_clusters = {ctx.cluster for ctx in config.contexts.values()}
    used_users = {ctx.auth_info for ctx in config.contexts.values()}

    print(f"{_CYAN}\n===== Active Contexts ({len(config.contexts)}) ====={_RESET}")
    if not config.contexts:
        print(f"{_YELLOW}No contexts found.{_RESET}")
    for ctx_name in sorted(config.contexts):
        ctx = config.contexts[ctx_name]
        cluster = config.clusters.get(ctx.cluster)
        cluster_note = f" ({cluster.server})" if cluster else f" {_RED}(missing){_RESET}"
        user_note = "" if ctx.auth_info in config.auth_infos else f" {_RED}(missing){_RESET}"
        print(f"\n{_GREEN}● {ctx_name}{_RESET}")
        print(f"  ├─ {_YELLOW}Cluster:{_RESET} {ctx.cluster}{cluster_note}")
        print(f"  └─ {_YELLOW}User:{_RESET} {ctx.auth_info}{user_note}")

    orphan_clusters = sorted(name for name in config.clusters if name not in used_clusters)
    orphan_users = sorted(name for name in config.auth_infos if name not in used_users)

    if not orphan_clusters and not orphan_users:
        print(f"\n{_CYAN}===== No Orphaned Resources ====={_RESET}")
        print(f"{_GREEN}All resources are properly referenced.{_RESET}")
        return

    print(f"\n{_CYAN}===== Orphaned Resources ====={_RESET}")
    if orphan_clusters:
        print(f"\n{_RED}Unused Clusters ({len(orphan_clusters)}):{_RESET}")
        for name in orphan_clusters:
            print(f"  × {name} ({config.clusters[name].server})")
    if orphan_users:
        print(f"\n{_RED}Unused Users ({len(orphan_users)}):{_RESET}")
        for name in orphan_users:
            print(f"  × {name}")