"""Integration test base class for the cluster DNS scenario.

This module provides the IntegrationTestBase class that live-cluster tests
inherit from. It owns the namespace lifecycle the scenario itself leaves to
its caller:

- Kubernetes client setup from ScenarioConfig (fails fast without a cluster)
- Creation of the indexed scenario namespaces
- Teardown of every namespace created during the test

Example:
    from cluster_dns_e2e.base_classes.integration_test_base import IntegrationTestBase

    class TestClusterDns(IntegrationTestBase):

        def test_pod_uses_dns(self) -> None:
            namespaces = self.create_scenario_namespaces()
            ClusterDnsScenario(self.cluster, self.config).run(namespaces)
"""

from __future__ import annotations

from typing import ClassVar

import pytest
import structlog

from cluster_dns_e2e.config import ScenarioConfig
from cluster_dns_e2e.errors import SetupError
from cluster_dns_e2e.fixtures.cluster import ClusterClient

logger = structlog.get_logger(__name__)


class IntegrationTestBase:
    """Base class for tests that run against a live Kubernetes cluster.

    Class Attributes:
        keep_namespaces: Skip namespace deletion in teardown (for debugging).

    Usage:
        class TestMyScenario(IntegrationTestBase):

            def test_something(self) -> None:
                namespaces = self.create_scenario_namespaces()
                # Test implementation...
    """

    keep_namespaces: ClassVar[bool] = False

    config: ScenarioConfig
    cluster: ClusterClient
    _created_namespaces: list[str]

    def setup_method(self) -> None:
        """Set up the cluster client before each test method.

        Raises:
            pytest.fail: If no Kubernetes configuration can be loaded.

        Override:
            Call super().setup_method() first, then add custom setup.
        """
        self._created_namespaces = []
        self.config = self.make_config()
        try:
            self.cluster = ClusterClient.from_config(self.config)
        except SetupError as e:
            pytest.fail(
                f"Kubernetes cluster not available: {e}\n"
                "Point KUBECONFIG or CLUSTER_DNS_KUBECONFIG_PATH at a running cluster"
            )

    def teardown_method(self) -> None:
        """Delete every namespace created during the test.

        Deletion failures are logged so every namespace gets a deletion
        attempt; the first failure is re-raised afterwards.
        """
        if self.keep_namespaces:
            logger.info("namespaces_kept", namespaces=self._created_namespaces)
            self._created_namespaces.clear()
            return

        first_error: SetupError | None = None
        for ns in self._created_namespaces:
            try:
                self.cluster.delete_namespace(ns)
            except SetupError as e:
                logger.error("namespace_cleanup_failed", namespace=ns, error=str(e))
                first_error = first_error or e
        self._created_namespaces.clear()
        if first_error is not None:
            raise first_error

    def make_config(self) -> ScenarioConfig:
        """Return the scenario configuration. Override to customize."""
        return ScenarioConfig()

    def create_scenario_namespaces(self) -> list[str]:
        """Create the ``<prefix><index>`` namespaces and track them for cleanup.

        Returns:
            Names of the created namespaces, ordered by index.

        Raises:
            SetupError: If a namespace cannot be created.
        """
        names = self.config.namespace_names()
        for name in names:
            self.cluster.create_namespace(name)
            self._created_namespaces.append(name)
        return names


__all__ = ["IntegrationTestBase"]
