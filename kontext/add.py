"""The add command: register a cluster and, optionally, its sub-clusters."""

from __future__ import annotations

from kontext.cluster import ClusterAccessError, ContextConfig, validate_cluster_access
from kontext.cluster import scan as scan_sub_clusters
from kontext.kubeconfig import KubeConfigError, new_context

_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_CYAN = "\033[36m"
_RESET = "\033[0m"


def add_context(
    name: str, server: str, token: str, scan: str | None = None
) -> list[ContextConfig]:
    """Check access to ``server``, then add it (and scanned sub-clusters) as contexts.

    Returns the contexts that were added.
    """
    op = "kubeconfig.AddContext"
    if not name:
        raise KubeConfigError(f"{op}: context name cannot be empty")
    if not server:
        raise KubeConfigError(f"{op}: server address cannot be empty")
    if not token:
        raise KubeConfigError(f"{op}: token cannot be empty")

    try:
        validate_cluster_access(server, token)
    except ClusterAccessError as err:
        raise ClusterAccessError(
            f"{op}: cluster validation failed [server={server}]: {err}"
        ) from err

    contexts = [ContextConfig(name=name, server=server, token=token)]

    if scan is not None:
        try:
            scanned = scan_sub_clusters(name, server, token, scan)
        except ClusterAccessError as err:
            raise ClusterAccessError(
                f'{op}: failed to scan sub-clusters for type "{scan}": {err}'
            ) from err
        if scanned:
            contexts.extend(scanned)
        else:
            print(f'{_YELLOW}[{op}] No sub-clusters found for type "{scan}"{_RESET}')

    print(f"{_CYAN}[{op}] Adding contexts...{_RESET}")
    added: list[ContextConfig] = []
    for ctx in contexts:
        try:
            new_context(ctx.name, ctx.server, ctx.token)
        except KubeConfigError as err:
            print(f"{_RED}  ✗ Failed to add context {ctx.name}: {err}{_RESET}")
            continue
        print(f"{_GREEN}  ✓ Added context: {ctx.name} ({ctx.server}){_RESET}")
        added.append(ctx)

    print(f"{_CYAN}\n{op} Summary:")
    print(f"  ✓ Added contexts: {len(added)}")
    print(f"  ✗ Failed contexts: {len(contexts) - len(added)}")
    print("=" * 50 + _RESET)
    return added