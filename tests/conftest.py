"""Root-level test configuration for cluster-dns-e2e.

Root-level tests run the scenario against a live cluster. Unit tests that
need no cluster live in cluster_dns_e2e/tests/.
"""

from __future__ import annotations

from pathlib import Path


# Early import check for better error messages
def _check_test_environment() -> None:
    """Verify the package is importable before collecting cluster tests."""
    try:
        import cluster_dns_e2e as _pkg
    except ImportError:
        raise ImportError(
            "cluster_dns_e2e not found. Install the project first.\n"
            "Run: pip install -e '.[test]' && pytest tests/e2e"
        ) from None
    _ = _pkg.__name__


_check_test_environment()

import pytest  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Path to the repository root."""
    return Path(__file__).parent.parent
