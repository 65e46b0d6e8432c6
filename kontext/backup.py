"""Timestamped backups of kubeconfig files."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

from kontext.kubeconfig import KubeConfig, KubeConfigError, dump_config

MAX_BACKUPS = 5

_OP = "kubeconfig.BackupKubeConfig"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


def backup_kube_config(config: KubeConfig, kubeconfig_path: str | os.PathLike[str]) -> str:
    """Save a timestamped copy of ``config`` next to ``kubeconfig_path``.

    Only the newest backups are kept; the path of the new one is returned.
    """
    if config is None:
        raise KubeConfigError(f"{_OP}: config cannot be nil")
    if not kubeconfig_path:
        raise KubeConfigError(f"{_OP}: kubeconfig path cannot be empty")

    content = dump_config(config)
    base = Path(kubeconfig_path)
    backup_dir = base.parent
    try:
        backup_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as err:
        raise KubeConfigError(
            f"{_OP}: failed to create backup directory {backup_dir}: {err}"
        ) from err

    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    backup_path = f"{base}.backup-{stamp}"
    try:
        fd = os.open(backup_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
    except OSError as err:
        raise KubeConfigError(
            f"{_OP}: failed to write backup file {backup_path}: {err}"
        ) from err
    print(f"{_GREEN}[{_OP}] Created backup: {backup_path}{_RESET}")

    try:
        _cleanup_old_backups(backup_dir, base)
    except OSError as err:
        print(f"{_YELLOW}[{_OP}] Warning: failed to clean old backups: {err}{_RESET}")

    return backup_path


def _cleanup_old_backups(backup_dir: Path, kubeconfig_path: Path) -> None:
    prefix = kubeconfig_path.name + ".backup-"
    backups = sorted(
        str(entry)
        for entry in backup_dir.iterdir()
        if not entry.is_dir() and entry.name.startswith(prefix)
    )
    for old in backups[: max(len(backups) - MAX_BACKUPS, 0)]:
        os.remove(old)
        print(f"{_YELLOW}[{_OP}] Removed old backup: {old}{_RESET}")