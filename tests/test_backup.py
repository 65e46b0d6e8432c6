import re
from pathlib import Path

import pytest

from kontext.backup import MAX_BACKUPS, backup_kube_config
from kontext.kubeconfig import (
    AuthInfo,
    Cluster,
    Context,
    KubeConfig,
    KubeConfigError,
    load_config,
)


def _config():
    return KubeConfig(
        clusters={"a": Cluster(server="https://a.example.com", insecure_skip_tls_verify=True)},
        auth_infos={"a": AuthInfo(token="token")},
        contexts={"a": Context(cluster="a", auth_info="a")},
        current_context="a",
    )


def test_backup_writes_loadable_copy(tmp_path, capsys):
    kubeconfig = tmp_path / "config"
    backup_path = backup_kube_config(_config(), str(kubeconfig))
    assert re.fullmatch(re.escape(str(kubeconfig)) + r"\.backup-\d{8}-\d{6}", backup_path)
    assert load_config(backup_path) == _config()
    assert "Created backup" in capsys.readouterr().out


def test_backup_creates_directory(tmp_path):
    kubeconfig = tmp_path / "nested" / "dir" / "config"
    backup_path = backup_kube_config(_config(), kubeconfig)
    assert load_config(backup_path) == _config()
    assert backup_path.startswith(str(kubeconfig.parent))


def test_backup_keeps_only_newest(tmp_path):
    kubeconfig = tmp_path / "config"
    old_names = [f"config.backup-2000010{day}-000000" for day in range(1, 8)]
    for name in old_names:
        (tmp_path / name).write_text("old", encoding="utf-8")
    (tmp_path / "other.backup-20000101-000000").write_text("keep", encoding="utf-8")

    backup_path = backup_kube_config(_config(), kubeconfig)

    remaining = sorted(p.name for p in tmp_path.iterdir() if p.name.startswith("config.backup-"))
    assert len(remaining) == MAX_BACKUPS
    assert remaining[-1] == backup_path.rsplit("/", 1)[-1].rsplit("\\", 1)[-1]
    assert remaining[:-1] == old_names[-(MAX_BACKUPS - 1):]
    assert (tmp_path / "other.backup-20000101-000000").exists()


def test_backup_under_limit_removes_nothing(tmp_path):
    kubeconfig = tmp_path / "config"
    (tmp_path / "config.backup-20000101-000000").write_text("old", encoding="utf-8")
    backup_path = backup_kube_config(_config(), kubeconfig)
    names = sorted(p.name for p in tmp_path.iterdir() if p.name.startswith("config.backup-"))
    assert names == sorted(["config.backup-20000101-000000", Path(backup_path).name])
    assert load_config(backup_path) == _config()


def test_backup_rejects_missing_config(tmp_path):
    with pytest.raises(KubeConfigError, match="config cannot be nil"):
        backup_kube_config(None, tmp_path / "config")


def test_backup_rejects_empty_path():
    with pytest.raises(KubeConfigError, match="path cannot be empty"):
        backup_kube_config(_config(), "")