"""Configuration for the cluster DNS scenario.

All names, timeouts and paths the scenario needs live in ScenarioConfig and
are passed explicitly to the cluster client and the scenario. Values can be
overridden through environment variables with the ``CLUSTER_DNS_`` prefix.

Environment Variables:
    CLUSTER_DNS_NAMESPACE_PREFIX: Prefix for generated namespaces (dnsexample)
    CLUSTER_DNS_NAMESPACE_COUNT: Number of namespaces (2)
    CLUSTER_DNS_CLUSTER_DNS_DOMAIN: Cluster DNS domain (cluster.local)
    CLUSTER_DNS_EXAMPLES_DIR: Directory holding the example manifests
    CLUSTER_DNS_KUBECONFIG_PATH: Kubeconfig file (in-cluster config if unset)
    CLUSTER_DNS_CONTEXT: Kubeconfig context
    GOPATH: When set and EXAMPLES_DIR is not, the upstream examples checkout
        under $GOPATH/src/k8s.io/examples/staging/cluster-dns is used if present

Example:
    >>> config = ScenarioConfig(cluster_dns_domain="example.internal")
    >>> config.namespace_names()
    ['dnsexample0', 'dnsexample1']
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cluster_dns_e2e.fixtures.namespaces import generate_namespace_names

# Manifests shipped with the package (copy of the upstream cluster-dns example)
PACKAGED_EXAMPLES_DIR = Path(__file__).parent / "k8s"

# Location of the upstream example inside a Go workspace
GOPATH_EXAMPLES_SUBDIR = "src/k8s.io/examples/staging/cluster-dns"


def default_examples_dir() -> Path:
    """Return the directory holding the example manifests.

    Prefers an upstream examples checkout under ``$GOPATH`` when one exists,
    otherwise the manifests packaged with this module.
    """
    gopath = os.environ.get("GOPATH")
    if gopath:
        candidate = Path(gopath) / GOPATH_EXAMPLES_SUBDIR
        if candidate.is_dir():
            return candidate
    return PACKAGED_EXAMPLES_DIR


class ScenarioConfig(BaseSettings):
    """Settings for one run of the cluster DNS scenario.

    Timeouts are in seconds. Defaults follow the Kubernetes e2e framework
    (2s poll, 5m pod start, 3m service start, 2m service responding,
    15m pods responding); the DNS readiness gate is fixed at one minute.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLUSTER_DNS_",
        frozen=True,
        extra="ignore",
    )

    # Namespaces
    namespace_prefix: str = Field(
        default="dnsexample",
        min_length=1,
        max_length=60,
        description="Prefix for namespace names, suffixed with the index",
    )
    namespace_count: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Number of namespaces the scenario fans out over",
    )

    # Cluster
    cluster_dns_domain: str = Field(
        default="cluster.local",
        min_length=1,
        description="DNS domain of the cluster (e.g. cluster.local)",
    )
    kubeconfig_path: str | None = Field(
        default=None,
        description="Path to kubeconfig file. None tries in-cluster config first.",
    )
    context: str | None = Field(
        default=None,
        description="Kubeconfig context to use. None uses current context.",
    )

    # Manifests
    examples_dir: Path = Field(
        default_factory=default_examples_dir,
        description="Directory with dns-backend-rc.yaml, dns-backend-service.yaml "
        "and dns-frontend-pod.yaml",
    )

    # Timeouts
    kubectl_timeout: int = Field(default=60, ge=1, description="kubectl command timeout")
    poll_interval: float = Field(default=2.0, ge=0.1, description="Poll interval")
    dns_ready_timeout: float = Field(default=60.0, ge=0.0, description="DNS readiness gate")
    pod_start_timeout: float = Field(default=300.0, ge=0.0, description="Pod start timeout")
    service_start_timeout: float = Field(
        default=180.0, ge=0.0, description="Time for a service object to appear"
    )
    service_responding_timeout: float = Field(
        default=120.0, ge=0.0, description="Time for a service to answer through the proxy"
    )
    pods_responding_timeout: float = Field(
        default=900.0, ge=0.0, description="Time for every backend pod to answer"
    )

    # Expectations
    expected_output: str = Field(
        default="Hello World!",
        min_length=1,
        description="Literal the frontend prints once it reached the backend",
    )

    @field_validator("kubeconfig_path")
    @classmethod
    def expand_kubeconfig_path(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        if v is None:
            return None
        return str(Path(v).expanduser())

    def namespace_names(self) -> list[str]:
        """Return the namespace names the scenario runs in, in order."""
        return generate_namespace_names(self.namespace_prefix, self.namespace_count)


__all__ = [
    "PACKAGED_EXAMPLES_DIR",
    "ScenarioConfig",
    "default_examples_dir",
]
