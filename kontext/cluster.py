"""Talking to Kubernetes API servers: access checks and sub-cluster discovery."""

from __future__ import annotations

import posixpath
import warnings
from dataclasses import dataclass
from typing import Any

import requests

from kontext.kubeconfig import KubeConfigError

ALAUDA_GROUP = "platform.tkestack.io"
ALAUDA_GROUP_VERSION = "platform.tkestack.io/v1"

_TIMEOUT = 5.0
_YELLOW = "\033[33m"
_RESET = "\033[0m"


class ClusterAccessError(KubeConfigError):
    """Raised when a cluster cannot be reached or queried."""


@dataclass(frozen=True)
class ContextConfig:
    """A context to be added: its name, API server and bearer token."""

    name: str
    server: str
    token: str


def _base_url(server: str) -> str:
    if "://" not in server:
        server = "https://" + server
    return server.rstrip("/")


def _get(server: str, token: str, path: str) -> requests.Response:
    """GET ``path`` on the server without TLS verification; raise on HTTP errors."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        response = requests.get(
            _base_url(server) + path,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            verify=False,
            timeout=_TIMEOUT,
        )
    response.raise_for_status()
    return response


def _json_object(response: requests.Response) -> dict[str, Any]:
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def validate_cluster_access(server: str, token: str) -> None:
    """Check that ``token`` can list namespaces on ``server``."""
    op = "kubeconfig.ValidateClusterAccess"
    if not server:
        raise ClusterAccessError(f"{op}: server address cannot be empty")
    if not token:
        raise ClusterAccessError(f"{op}: token cannot be empty")
    try:
        _get(server, token, "/api/v1/namespaces")
    except requests.RequestException as err:
        raise ClusterAccessError(f"{op}: failed to access API at {server}: {err}") from err


def sub_cluster_server(server: str, cluster_name: str) -> str:
    """Return ``server`` with its last path segment replaced by ``cluster_name``."""
    protocol = "https://"
    rest = server
    if server.startswith("https://"):
        rest = server[len("https://"):]
    elif server.startswith("http://"):
        protocol = "http://"
        rest = server[len("http://"):]
    parent = posixpath.dirname(rest) or "."
    joined = posixpath.normpath(posixpath.join(parent, cluster_name))
    return protocol + joined.lstrip("/")


def scan(name: str, server: str, token: str, cluster_type: str) -> list[ContextConfig]:
    """Find sub-clusters of the given type behind ``server``."""
    op = "kubeconfig.Scan"
    if not name:
        raise ClusterAccessError(f"{op}: context name cannot be empty")
    if not server:
        raise ClusterAccessError(f"{op}: server address cannot be empty")
    if not token:
        raise ClusterAccessError(f"{op}: token cannot be empty")

    if cluster_type == "alauda":
        return scan_alauda(name, server, token)
    print(f'{_YELLOW}[{op}] Skipped: unsupported clusterType "{cluster_type}"{_RESET}')
    return []


def scan_alauda(name: str, server: str, token: str) -> list[ContextConfig]:
    """List clusters.platform.tkestack.io and build a context for each but "global"."""
    op = "kubeconfig.ScanAlauda"

    try:
        groups = _json_object(_get(server, token, "/apis")).get("groups") or []
    except (requests.RequestException, ValueError) as err:
        raise ClusterAccessError(f"{op}: failed to discover API groups: {err}") from err

    if not any(isinstance(g, dict) and g.get("name") == ALAUDA_GROUP for g in groups):
        print(f"{_YELLOW}[{op}] No {ALAUDA_GROUP} API group found{_RESET}")
        return []

    try:
        resources = (
            _json_object(_get(server, token, f"/apis/{ALAUDA_GROUP_VERSION}")).get("resources")
            or []
        )
    except (requests.RequestException, ValueError) as err:
        print(f"{_YELLOW}[{op}] Failed to discover {ALAUDA_GROUP_VERSION} resources: {err}{_RESET}")
        return []

    if not any(isinstance(r, dict) and r.get("name") == "clusters" for r in resources):
        print(f"{_YELLOW}[{op}] No clusters.{ALAUDA_GROUP} resources found{_RESET}")
        return []

    try:
        response = _get(server, token, f"/apis/{ALAUDA_GROUP_VERSION}/clusters")
    except requests.RequestException as err:
        raise ClusterAccessError(f"{op}: failed to list clusters.{ALAUDA_GROUP}: {err}") from err

    try:
        items = _json_object(response).get("items") or []
        if not isinstance(items, list):
            raise ValueError("'items' must be a list")
        cluster_names = []
        for item in items:
            metadata = item.get("metadata") if isinstance(item, dict) else None
            raw = metadata.get("name") if isinstance(metadata, dict) else None
            cluster_names.append("" if raw is None else str(raw))
    except ValueError as err:
        raise ClusterAccessError(
            f"{op}: failed to parse clusters.{ALAUDA_GROUP} response: {err}"
        ) from err

    return [
        ContextConfig(
            name=f"{name}-{cluster_name}",
            server=sub_cluster_server(server, cluster_name),
            token=token,
        )
        for cluster_name in cluster_names
        if cluster_name.lower() != "global"
    ]