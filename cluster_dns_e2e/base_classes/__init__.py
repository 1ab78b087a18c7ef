"""Test base classes for the cluster DNS scenario.

Classes:
    IntegrationTestBase: Owns cluster client and namespace lifecycle
"""

from __future__ import annotations

from cluster_dns_e2e.base_classes.integration_test_base import IntegrationTestBase

__all__ = ["IntegrationTestBase"]
