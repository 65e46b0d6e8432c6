"""The merge command: import token-based contexts from another kubeconfig."""

from __future__ import annotations

import os

from kontext.cluster import ClusterAccessError, ContextConfig
from kontext.cluster import scan as scan_sub_clusters
from kontext.kubeconfig import KubeConfigError, get_kube_config, load_config, new_context

_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_CYAN = "\033[36m"
_RESET = "\033[0m"


def _file_stem(file_path: str) -> str:
    base = os.path.basename(file_path)
    dot = base.rfind(".")
    return base[:dot] if dot >= 0 else base


def merge_context(
    file_path: str, name_prefix: str = "", scan: str | None = None
) -> list[ContextConfig]:
    """Add every token-based context of ``file_path`` to the default kubeconfig.

    Context names get ``name_prefix`` (or the file's name) in front. Returns
    the contexts that were added.
    """
    op = "kubeconfig.MergeContext"
    if not file_path:
        raise KubeConfigError(f"{op}: kubeconfig file path cannot be empty")

    try:
        current, _ = get_kube_config()
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to load current kubeconfig: {err}") from err

    try:
        external = load_config(file_path)
    except KubeConfigError as err:
        raise KubeConfigError(
            f"{op}: failed to parse external kubeconfig {file_path}: {err}"
        ) from err

    prefix = name_prefix or _file_stem(file_path)
    configs: list[ContextConfig] = []
    certificate_contexts: list[str] = []

    for ctx_name in sorted(external.contexts):
        ctx = external.contexts[ctx_name]
        cluster = external.clusters.get(ctx.cluster)
        auth_info = external.auth_infos.get(ctx.auth_info)
        if cluster is None or auth_info is None:
            print(
                f"{_YELLOW}[{op}] Skipped context {ctx_name}: missing resources "
                f"(cluster: {str(cluster is not None).lower()}, "
                f"user: {str(auth_info is not None).lower()}){_RESET}"
            )
            continue
        if auth_info.client_certificate_data is not None or auth_info.client_certificate:
            certificate_contexts.append(ctx_name)
            continue
        configs.append(
            ContextConfig(name=f"{prefix}-{ctx_name}", server=cluster.server, token=auth_info.token)
        )

    if certificate_contexts:
        print(
            f"{_YELLOW}[{op}] Skipped {len(certificate_contexts)} certificate-based contexts: "
            f"[{' '.join(certificate_contexts)}]{_RESET}"
        )

    for cfg in configs:
        if cfg.name in current.contexts:
            raise KubeConfigError(
                f'{op}: name conflict detected for context "{cfg.name}"; '
                "use --name to specify a prefix (e.g., --name=prod)"
            )

    print(f"{_CYAN}[{op}] Merging contexts...{_RESET}")
    added: list[ContextConfig] = []
    failed = 0
    for cfg in configs:
        contexts = [cfg]
        if scan is not None:
            try:
                scanned = scan_sub_clusters(cfg.name, cfg.server, cfg.token, scan)
            except ClusterAccessError as err:
                print(f"{_RED}  ✗ Failed to scan sub-clusters for {cfg.name}: {err}{_RESET}")
                failed += 1
                continue
            if scanned:
                contexts.extend(scanned)
            else:
                print(
                    f'{_YELLOW}[{op}] No sub-clusters found for {cfg.name} '
                    f'with type "{scan}"{_RESET}'
                )

        for ctx in contexts:
            try:
                new_context(ctx.name, ctx.server, ctx.token)
            except KubeConfigError as err:
                print(f"{_RED}  ✗ Failed to add context {ctx.name}: {err}{_RESET}")
                failed += 1
                continue
            print(f"{_GREEN}  ✓ Added context: {ctx.name} ({ctx.server}){_RESET}")
            added.append(ctx)

    print(f"{_CYAN}\n{op} Summary:")
    print(f"  ✓ Added contexts: {len(added)}")
    print(f"  ✗ Skipped certificate-based contexts: {len(certificate_contexts)}")
    print(f"  ✗ Failed contexts: {failed}")
    print("=" * 50 + _RESET)
    return added