"""Pytest configuration for cluster_dns_e2e unit tests.

Unit tests never talk to a cluster: the kubernetes CoreV1Api is replaced with
a MagicMock and kubectl with a patched subprocess call.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from kubernetes import client

from cluster_dns_e2e.config import PACKAGED_EXAMPLES_DIR, ScenarioConfig


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "e2e: End-to-end tests requiring a live Kubernetes cluster",
    )


@pytest.fixture
def examples_dir(tmp_path: Path) -> Path:
    """Copy of the packaged example manifests in a temporary directory."""
    target = tmp_path / "cluster-dns"
    shutil.copytree(PACKAGED_EXAMPLES_DIR, target)
    return target


@pytest.fixture
def fast_config(examples_dir: Path) -> ScenarioConfig:
    """ScenarioConfig with short timeouts so polling tests finish quickly."""
    return ScenarioConfig(
        examples_dir=examples_dir,
        poll_interval=0.1,
        dns_ready_timeout=0.3,
        pod_start_timeout=0.3,
        service_start_timeout=0.3,
        service_responding_timeout=0.3,
        pods_responding_timeout=0.3,
    )


@pytest.fixture
def core_api() -> MagicMock:
    """Mocked kubernetes CoreV1Api."""
    return MagicMock(spec=client.CoreV1Api)


@pytest.fixture
def make_pod() -> Callable[..., client.V1Pod]:
    """Factory building V1Pod objects with a name, phase and deletion state."""

    def _make_pod(
        name: str,
        phase: str | None = "Running",
        *,
        deleted: bool = False,
    ) -> client.V1Pod:
        return client.V1Pod(
            metadata=client.V1ObjectMeta(
                name=name,
                deletion_timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc) if deleted else None,
            ),
            status=client.V1PodStatus(phase=phase),
        )

    return _make_pod