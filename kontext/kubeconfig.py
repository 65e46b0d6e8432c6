"""Reading, writing and editing kubeconfig files."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

_YELLOW = "\033[33m"
_RESET = "\033[0m"


class KubeConfigError(Exception):
    """Raised when a kubeconfig cannot be loaded, checked or saved."""


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _mapping(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise KubeConfigError(f"{what} must be a mapping")
    return value


def _named_entries(
    data: dict[str, Any], key: str, inner: str
) -> Iterator[tuple[str, dict[str, Any]]]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise KubeConfigError(f"{key!r} must be a list")
    for item in items:
        entry = _mapping(item, f"entry in {key!r}")
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise KubeConfigError(f"entry in {key!r} has no name")
        yield name, _mapping(entry.get(inner), f"{key} entry {name!r}")


@dataclass
class Cluster:
    """A cluster entry: where the API server lives and how to reach it."""

    server: str = ""
    insecure_skip_tls_verify: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Cluster:
        rest = dict(data)
        return cls(
            server=_text(rest.pop("server", "")),
            insecure_skip_tls_verify=bool(rest.pop("insecure-skip-tls-verify", False)),
            extra=rest,
        )

    def _to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"server": self.server}
        if self.insecure_skip_tls_verify:
            out["insecure-skip-tls-verify"] = True
        out.update(self.extra)
        return out


@dataclass
class AuthInfo:
    """A user entry holding the credentials for a cluster."""

    token: str = ""
    client_certificate: str = ""
    client_certificate_data: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> AuthInfo:
        rest = dict(data)
        cert_data = rest.pop("client-certificate-data", None)
        return cls(
            token=_text(rest.pop("token", "")),
            client_certificate=_text(rest.pop("client-certificate", "")),
            client_certificate_data=None if cert_data is None else str(cert_data),
            extra=rest,
        )

    def _to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.client_certificate:
            out["client-certificate"] = self.client_certificate
        if self.client_certificate_data is not None:
            out["client-certificate-data"] = self.client_certificate_data
        if self.token:
            out["token"] = self.token
        out.update(self.extra)
        return out


@dataclass
class Context:
    """A context entry tying a cluster to a user."""

    cluster: str = ""
    auth_info: str = ""
    namespace: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Context:
        rest = dict(data)
        return cls(
            cluster=_text(rest.pop("cluster", "")),
            auth_info=_text(rest.pop("user", "")),
            namespace=_text(rest.pop("namespace", "")),
            extra=rest,
        )

    def _to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"cluster": self.cluster, "user": self.auth_info}
        if self.namespace:
            out["namespace"] = self.namespace
        out.update(self.extra)
        return out


@dataclass
class KubeConfig:
    """The contents of a kubeconfig file, keyed by entry name."""

    clusters: dict[str, Cluster] = field(default_factory=dict)
    auth_infos: dict[str, AuthInfo] = field(default_factory=dict)
    contexts: dict[str, Context] = field(default_factory=dict)
    current_context: str = ""
    preferences: dict[str, Any] = field(default_factory=dict)
    extensions: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> KubeConfig:
        """Build a config from the parsed YAML document."""
        doc = _mapping(data, "kubeconfig document")
        extensions = doc.get("extensions") or []
        if not isinstance(extensions, list):
            raise KubeConfigError("'extensions' must be a list")
        return cls(
            clusters={
                name: Cluster._from_dict(body)
                for name, body in _named_entries(doc, "clusters", "cluster")
            },
            auth_infos={
                name: AuthInfo._from_dict(body)
                for name, body in _named_entries(doc, "users", "user")
            },
            contexts={
                name: Context._from_dict(body)
                for name, body in _named_entries(doc, "contexts", "context")
            },
            current_context=_text(doc.get("current-context", "")),
            preferences=dict(_mapping(doc.get("preferences"), "'preferences'")),
            extensions=list(extensions),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the config as a kubeconfig document, entries sorted by name."""
        out: dict[str, Any] = {
            "apiVersion": "v1",
            "clusters": [
                {"cluster": self.clusters[name]._to_dict(), "name": name}
                for name in sorted(self.clusters)
            ],
            "contexts": [
                {"context": self.contexts[name]._to_dict(), "name": name}
                for name in sorted(self.contexts)
            ],
            "current-context": self.current_context,
            "kind": "Config",
            "preferences": dict(self.preferences),
            "users": [
                {"name": name, "user": self.auth_infos[name]._to_dict()}
                for name in sorted(self.auth_infos)
            ],
        }
        if self.extensions:
            out["extensions"] = list(self.extensions)
        return out


def _parse(text: str, source: str) -> KubeConfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise KubeConfigError(f"invalid YAML in {source}: {err}") from err
    return KubeConfig.from_dict(data)


def default_kubeconfig_path() -> str:
    """Return the kubeconfig path kubectl would use, or "" if none can be chosen."""
    env = os.environ.get("KUBECONFIG", "")
    if env:
        precedence = list(dict.fromkeys(p for p in env.split(os.pathsep) if p))
    else:
        precedence = [os.path.join(os.path.expanduser("~"), ".kube", "config")]
    for candidate in precedence:
        if os.path.exists(candidate):
            return candidate
    return precedence[0] if precedence else ""


def load_config(path: str | os.PathLike[str]) -> KubeConfig:
    """Load and parse the kubeconfig file at ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        raise KubeConfigError(f"failed to read kubeconfig {path}: {err}") from err
    return _parse(text, str(path))


def dump_config(config: KubeConfig) -> str:
    """Serialise a config to kubeconfig YAML."""
    return yaml.safe_dump(config.to_dict(), sort_keys=False, default_flow_style=False)


def write_config(config: KubeConfig, path: str | os.PathLike[str]) -> None:
    """Write a config to ``path`` with owner-only permissions."""
    target = Path(path)
    content = dump_config(config)
    try:
        target.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
    except OSError as err:
        raise KubeConfigError(f"failed to write kubeconfig {target}: {err}") from err


def get_kube_config() -> tuple[KubeConfig, str]:
    """Load the default kubeconfig, or an empty one if the file is missing."""
    op = "kubeconfig.GetKubeConfig"
    path = default_kubeconfig_path()
    if not path:
        raise KubeConfigError(f"{op}: could not determine default kubeconfig path")

    if not os.path.exists(path):
        print(f"{_YELLOW}[{op}] Kubeconfig file not found at {path}, creating new config{_RESET}")
        return KubeConfig(), path

    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        raise KubeConfigError(f"{op}: failed to read kubeconfig file {path}: {err}") from err
    try:
        config = _parse(text, path)
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to parse kubeconfig file {path}: {err}") from err
    return config, path


def check_name_conflicts(config: KubeConfig, name: str) -> None:
    """Raise if ``name`` is already used by a cluster, user or context."""
    op = "kubeconfig.CheckNameConflicts"
    if config is None:
        raise KubeConfigError(f"{op}: config cannot be nil")
    if not name:
        raise KubeConfigError(f"{op}: name cannot be empty")
    if name in config.clusters:
        raise KubeConfigError(f"{op}: cluster named {name!r} already exists")
    if name in config.auth_infos:
        raise KubeConfigError(f"{op}: user named {name!r} already exists")
    if name in config.contexts:
        raise KubeConfigError(f"{op}: context named {name!r} already exists")


def new_context(name: str, server: str, token: str) -> None:
    """Add a cluster, user and context named ``name`` and make it current."""
    op = "kubeconfig.NewContext"
    if not name:
        raise KubeConfigError(f"{op}: context name cannot be empty")
    if not server:
        raise KubeConfigError(f"{op}: server address cannot be empty")
    if not token:
        raise KubeConfigError(f"{op}: token cannot be empty")

    try:
        config, path = get_kube_config()
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to load kubeconfig: {err}") from err

    try:
        check_name_conflicts(config, name)
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: name conflict check failed: {err}") from err

    config.clusters[name] = Cluster(server=server, insecure_skip_tls_verify=True)
    config.auth_infos[name] = AuthInfo(token=token)
    config.contexts[name] = Context(cluster=name, auth_info=name)
    config.current_context = name

    try:
        safe_write_config(config, path)
    except KubeConfigError as err:
        raise KubeConfigError(f"{op}: failed to save kubeconfig to {path}: {err}") from err


def clean_context(config: KubeConfig) -> tuple[list[str], list[str]]:
    """Drop clusters and users no context refers to; return their names."""
    used_clusters = {ctx.cluster for ctx in config.contexts.values()}
    used_users = {ctx.auth_info for ctx in config.contexts.values()}

    removed_clusters = [name for name in config.clusters if name not in used_clusters]
    removed_users = [name for name in config.auth_infos if name not in used_users]

    for name in removed_clusters:
        del config.clusters[name]
    for name in removed_users:
        del config.auth_infos[name]
    return removed_clusters, removed_users


def safe_write_config(config: KubeConfig, path: str | os.PathLike[str]) -> None:
    """Write a config atomically through a temporary file in the same directory."""
    target = Path(path)
    try:
        fd, temp_name = tempfile.mkstemp(
            prefix="kubeconfig-", suffix=".tmp", dir=target.parent
        )
    except OSError as err:
        raise KubeConfigError(f"failed to create temporary file: {err}") from err
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(dump_config(config))
        try:
            os.replace(temp_name, target)
        except OSError as err:
            raise KubeConfigError(f"failed to replace file {target}: {err}") from err
    except OSError as err:
        raise KubeConfigError(f"failed to serialize config: {err}") from err
    finally:
        if os.path.exists(temp_name):
            os.remove(temp_name)