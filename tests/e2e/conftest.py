"""E2E test configuration and fixtures.

E2E tests run the cluster DNS scenario against a live Kubernetes cluster
reachable through the current kubeconfig (or CLUSTER_DNS_KUBECONFIG_PATH),
with kubectl on PATH. A missing cluster fails the tests, it never skips them.
"""

from __future__ import annotations

import shutil

import pytest

from cluster_dns_e2e.logging import configure_logging


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for E2E tests."""
    config.addinivalue_line(
        "markers",
        "e2e: mark test as end-to-end (requires a live Kubernetes cluster)",
    )


@pytest.fixture(scope="session", autouse=True)
def kubectl_available() -> str:
    """Path of the kubectl binary the scenario shells out to.

    Raises:
        pytest.fail: If kubectl is not on PATH.
    """
    path = shutil.which("kubectl")
    if path is None:
        pytest.fail("kubectl not found on PATH; the scenario creates resources with kubectl")
    return path


@pytest.fixture(scope="session", autouse=True)
def scenario_logging() -> None:
    """Emit scenario progress at DEBUG so polling is visible with -s."""
    configure_logging(log_level="DEBUG")
