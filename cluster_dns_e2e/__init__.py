"""Cluster DNS end-to-end scenario for Kubernetes.

This package provisions a DNS backend in several isolated namespaces, waits
until it is running, responding and resolvable, then starts a frontend pod in
every namespace that reaches the backend by its fully-qualified service name.

Components:
    config: ScenarioConfig with all timeouts and names (env overridable)
    fixtures: Polling, namespace, kubectl, cluster and manifest helpers
    scenario: ClusterDnsScenario orchestrating the whole flow
    base_classes: IntegrationTestBase owning namespace setup/teardown
    cli: ``cluster-dns-e2e run`` command

Usage:
    from cluster_dns_e2e import ClusterDnsScenario, ScenarioConfig
    from cluster_dns_e2e.fixtures.cluster import ClusterClient

    config = ScenarioConfig()
    scenario = ClusterDnsScenario(ClusterClient.from_config(config), config)
    scenario.run(["dnsexample0", "dnsexample1"])
"""

from __future__ import annotations

from cluster_dns_e2e.config import ScenarioConfig
from cluster_dns_e2e.errors import ManifestError, ScenarioError, SetupError
from cluster_dns_e2e.scenario import ClusterDnsScenario, ScenarioResult

__version__ = "0.1.0"

__all__ = [
    "ClusterDnsScenario",
    "ManifestError",
    "ScenarioConfig",
    "ScenarioError",
    "ScenarioResult",
    "SetupError",
]
