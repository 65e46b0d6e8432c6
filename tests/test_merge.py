import pytest
import responses

from kontext.cluster import ContextConfig
from kontext.kubeconfig import (
    AuthInfo,
    Cluster,
    Context,
    KubeConfig,
    KubeConfigError,
    load_config,
    write_config,
)
from kontext.merge import merge_context

SERVER = "https://one.example.com/k/global"


@pytest.fixture
def kubeconfig(tmp_path, monkeypatch):
    path = tmp_path / "config"
    monkeypatch.setenv("KUBECONFIG", str(path))
    return path


@pytest.fixture
def external(tmp_path):
    path = tmp_path / "ext.yaml"
    config = KubeConfig(
        clusters={"c1": Cluster(server=SERVER)},
        auth_infos={
            "u-token": AuthInfo(token="token"),
            "u-cert": AuthInfo(client_certificate="/tmp/cert.pem"),
        },
        contexts={
            "a": Context(cluster="c1", auth_info="u-token"),
            "b": Context(cluster="c1", auth_info="u-cert"),
            "c": Context(cluster="missing", auth_info="u-token"),
        },
    )
    write_config(config, path)
    return path


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_merge_uses_file_name_as_prefix(kubeconfig, external, capsys):
    added = merge_context(str(external), "", None)
    assert added == [ContextConfig("ext-a", SERVER, "token")]

    config = load_config(kubeconfig)
    assert set(config.contexts) == {"ext-a"}
    assert config.clusters["ext-a"].server == SERVER
    assert config.auth_infos["ext-a"].token == "token"

    out = capsys.readouterr().out
    assert "Skipped context c: missing resources (cluster: false, user: true)" in out
    assert "Skipped 1 certificate-based contexts: [b]" in out


def test_merge_with_explicit_prefix(kubeconfig, external):
    added = merge_context(str(external), "prod", None)
    assert [c.name for c in added] == ["prod-a"]
    assert set(load_config(kubeconfig).contexts) == {"prod-a"}


def test_merge_name_conflict_raises(kubeconfig, external):
    existing = KubeConfig(
        clusters={"ext-a": Cluster(server="https://old.example.com")},
        auth_infos={"ext-a": AuthInfo(token="token")},
        contexts={"ext-a": Context(cluster="ext-a", auth_info="ext-a")},
    )
    write_config(existing, kubeconfig)
    with pytest.raises(KubeConfigError, match="name conflict"):
        merge_context(str(external), "", None)
    assert load_config(kubeconfig).clusters["ext-a"].server == "https://old.example.com"


def test_merge_missing_file_raises(kubeconfig, tmp_path):
    with pytest.raises(KubeConfigError, match="failed to parse external kubeconfig"):
        merge_context(str(tmp_path / "absent.yaml"), "", None)


def test_merge_requires_path(kubeconfig):
    with pytest.raises(KubeConfigError):
        merge_context("", "", None)


def test_merge_with_unsupported_scan_keeps_primary(kubeconfig, external):
    added = merge_context(str(external), "x", "other")
    assert [c.name for c in added] == ["x-a"]


def test_merge_scan_failure_skips_context(kubeconfig, external, mocked, capsys):
    mocked.add(responses.GET, f"{SERVER}/apis", status=500)
    assert merge_context(str(external), "x", "alauda") == []
    assert "Failed to scan sub-clusters for x-a" in capsys.readouterr().out
    assert not kubeconfig.exists()


def test_merge_with_alauda_scan_adds_subclusters(kubeconfig, external, mocked):
    mocked.add(
        responses.GET, f"{SERVER}/apis", json={"groups": [{"name": "platform.tkestack.io"}]}
    )
    mocked.add(
        responses.GET,
        f"{SERVER}/apis/platform.tkestack.io/v1",
        json={"resources": [{"name": "clusters"}]},
    )
    mocked.add(
        responses.GET,
        f"{SERVER}/apis/platform.tkestack.io/v1/clusters",
        json={"items": [{"metadata": {"name": "dev"}}]},
    )
    added = merge_context(str(external), "", "alauda")
    assert [c.name for c in added] == ["ext-a", "ext-a-dev"]
    config = load_config(kubeconfig)
    assert set(config.contexts) == {"ext-a", "ext-a-dev"}
    assert config.clusters["ext-a-dev"].server.endswith("/k/dev")