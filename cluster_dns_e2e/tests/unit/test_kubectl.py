"""Unit tests for kubectl helpers.

Tests for cluster_dns_e2e.fixtures.kubectl with subprocess.run patched.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cluster_dns_e2e.errors import SetupError
from cluster_dns_e2e.fixtures.kubectl import (
    create_from_file,
    create_from_stdin,
    namespace_flag,
    run_kubectl,
)


def _make_completed_process(
    returncode: int = 0,
    stdout: str = "",
    stderr: str = "",
) -> subprocess.CompletedProcess[str]:
    """Create a subprocess.CompletedProcess for testing."""
    return subprocess.CompletedProcess(
        args=["kubectl"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


class TestRunKubectl:
    """Tests for run_kubectl()."""

    def test_namespace_flag(self) -> None:
        """Test the namespace flag format."""
        assert namespace_flag("dnsexample0") == "--namespace=dnsexample0"

    @patch("cluster_dns_e2e.fixtures.kubectl.subprocess.run")
    def test_adds_kubeconfig_and_context(self, mock_run: MagicMock) -> None:
        """Test kubeconfig and context become global kubectl flags."""
        mock_run.return_value = _make_completed_process()

        run_kubectl(["get", "pods"], kubeconfig="/tmp/kubeconfig", context="kind-e2e")

        cmd = mock_run.call_args.args[0]
        assert cmd == [
            "kubectl",
            "--kubeconfig=/tmp/kubeconfig",
            "--context=kind-e2e",
            "get",
            "pods",
        ]
        assert mock_run.call_args.kwargs["check"] is False


class TestCreate:
    """Tests for create_from_file() and create_from_stdin()."""

    @patch("cluster_dns_e2e.fixtures.kubectl.subprocess.run")
    def test_create_from_file(self, mock_run: MagicMock) -> None:
        """Test the manifest is created with a namespace flag."""
        mock_run.return_value = _make_completed_process(stdout="created\n")

        out = create_from_file(Path("/m/dns-backend-rc.yaml"), "dnsexample1")

        assert out == "created\n"
        cmd = mock_run.call_args.args[0]
        assert cmd == [
            "kubectl",
            "create",
            "-f",
            "/m/dns-backend-rc.yaml",
            "--namespace=dnsexample1",
        ]

    @patch("cluster_dns_e2e.fixtures.kubectl.subprocess.run")
    def test_create_from_stdin_pipes_text(self, mock_run: MagicMock) -> None:
        """Test manifest text is passed to kubectl on stdin."""
        mock_run.return_value = _make_completed_process()

        create_from_stdin("kind: Pod\n", "dnsexample0")

        cmd = mock_run.call_args.args[0]
        assert cmd[1:4] == ["create", "-f", "-"]
        assert cmd[-1] == "--namespace=dnsexample0"
        assert mock_run.call_args.kwargs["input"] == "kind: Pod\n"

    @patch("cluster_dns_e2e.fixtures.kubectl.subprocess.run")
    def test_nonzero_exit_raises_setup_error(self, mock_run: MagicMock) -> None:
        """Test a failed create is fatal and carries stderr and namespace."""
        mock_run.return_value = _make_completed_process(
            returncode=1,
            stderr='Error from server (AlreadyExists): "dns-backend" already exists\n',
        )

        with pytest.raises(SetupError) as exc_info:
            create_from_file(Path("rc.yaml"), "dnsexample0")

        assert exc_info.value.namespace == "dnsexample0"
        assert "AlreadyExists" in str(exc_info.value)
        assert exc_info.value.command == [
            "kubectl",
            "create",
            "-f",
            "rc.yaml",
            "--namespace=dnsexample0",
        ]
        assert mock_run.call_count == 1

    @patch("cluster_dns_e2e.fixtures.kubectl.subprocess.run")
    def test_missing_binary_raises_setup_error(self, mock_run: MagicMock) -> None:
        """Test a missing kubectl binary is reported as a setup error."""
        mock_run.side_effect = FileNotFoundError("kubectl")

        with pytest.raises(SetupError, match="kubectl not found"):
            create_from_stdin("kind: Pod\n", "dnsexample0")

    @patch("cluster_dns_e2e.fixtures.kubectl.subprocess.run")
    def test_timeout_raises_setup_error(self, mock_run: MagicMock) -> None:
        """Test a hanging kubectl is reported as a setup error."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="kubectl", timeout=5)

        with pytest.raises(SetupError, match="timed out after 5s"):
            create_from_file(Path("rc.yaml"), "dnsexample0", timeout=5)
