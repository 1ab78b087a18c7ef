"""Command line entry point for the cluster DNS scenario.

Runs the scenario outside pytest: creates the scenario namespaces, runs every
step, and deletes the namespaces again. Errors are printed to stderr and
mapped to non-zero exit codes for CI/CD integration.

Example:
    $ cluster-dns-e2e run
    $ cluster-dns-e2e run --kubeconfig ~/.kube/config --context kind-e2e
    $ cluster-dns-e2e run --cluster-domain cluster.local --keep-namespaces -v
"""

from __future__ import annotations

import sys
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import structlog
from pydantic import ValidationError

from cluster_dns_e2e.config import ScenarioConfig
from cluster_dns_e2e.errors import ManifestError, ScenarioError, SetupError
from cluster_dns_e2e.fixtures.cluster import ClusterClient
from cluster_dns_e2e.fixtures.polling import PollingTimeoutError
from cluster_dns_e2e.logging import configure_logging
from cluster_dns_e2e.scenario import ClusterDnsScenario

if TYPE_CHECKING:
    from typing import NoReturn

logger = structlog.get_logger(__name__)


class ExitCode(IntEnum):
    """Exit codes of the ``cluster-dns-e2e`` command."""

    SUCCESS = 0
    """Scenario passed."""

    GENERAL_ERROR = 1
    """Scenario failed for another reason."""

    USAGE_ERROR = 2
    """Invalid options or configuration."""

    SETUP_ERROR = 3
    """Creating or listing cluster resources failed."""

    MANIFEST_ERROR = 4
    """A manifest could not be read or rewritten."""

    TIMEOUT = 5
    """A wait condition timed out."""


def error_exit(message: str, exit_code: ExitCode = ExitCode.GENERAL_ERROR) -> NoReturn:
    """Print ``Error: <message>`` to stderr and exit with ``exit_code``."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


@click.group()
@click.version_option(version="0.1.0", prog_name="cluster-dns-e2e")
def cli() -> None:
    """cluster-dns-e2e - cross-namespace DNS end-to-end scenario."""
    pass


@cli.command("run")
@click.option(
    "--examples-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory with the cluster-dns example manifests.",
)
@click.option("--cluster-domain", default=None, help="Cluster DNS domain (default: cluster.local).")
@click.option("--namespace-prefix", default=None, help="Namespace prefix (default: dnsexample).")
@click.option(
    "--kubeconfig",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to kubeconfig file.",
)
@click.option("--context", default=None, help="Kubeconfig context to use.")
@click.option(
    "--keep-namespaces",
    is_flag=True,
    default=False,
    help="Do not delete the scenario namespaces afterwards.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.option("--json-logs", is_flag=True, default=False, help="Emit logs as JSON lines.")
def run_command(
    examples_dir: Path | None,
    cluster_domain: str | None,
    namespace_prefix: str | None,
    kubeconfig: Path | None,
    context: str | None,
    keep_namespaces: bool,
    verbose: bool,
    json_logs: bool,
) -> None:
    """Run the cluster DNS scenario against the current cluster.

    Options override the CLUSTER_DNS_* environment variables.
    """
    configure_logging(log_level="DEBUG" if verbose else "INFO", json_output=json_logs)

    overrides: dict[str, Any] = {
        "examples_dir": examples_dir,
        "cluster_dns_domain": cluster_domain,
        "namespace_prefix": namespace_prefix,
        "kubeconfig_path": str(kubeconfig) if kubeconfig else None,
        "context": context,
    }
    try:
        config = ScenarioConfig(**{k: v for k, v in overrides.items() if v is not None})
        namespaces = config.namespace_names()
    except (ValidationError, ValueError) as e:
        error_exit(f"Invalid configuration: {e}", ExitCode.USAGE_ERROR)

    created: list[str] = []
    exit_code = ExitCode.SUCCESS
    message = ""
    try:
        cluster = ClusterClient.from_config(config)
        for ns in namespaces:
            cluster.create_namespace(ns)
            created.append(ns)
        result = ClusterDnsScenario(cluster, config).run(namespaces)
    except SetupError as e:
        exit_code, message = ExitCode.SETUP_ERROR, str(e)
    except ManifestError as e:
        exit_code, message = ExitCode.MANIFEST_ERROR, str(e)
    except PollingTimeoutError as e:
        exit_code, message = ExitCode.TIMEOUT, str(e)
    except ScenarioError as e:
        exit_code, message = ExitCode.GENERAL_ERROR, str(e)
    finally:
        if created and not keep_namespaces:
            for ns in created:
                try:
                    cluster.delete_namespace(ns)
                except SetupError as e:
                    logger.error("namespace_cleanup_failed", namespace=ns, error=str(e))

    if exit_code != ExitCode.SUCCESS:
        error_exit(message, exit_code)

    click.echo(
        f"PASS: {result.resolution_target} resolved; "
        f"frontends in {', '.join(result.namespaces)} printed {config.expected_output!r}"
    )


def main() -> None:
    """Console script entry point."""
    cli()


__all__ = ["ExitCode", "cli", "main"]


if __name__ == "__main__":
    main()
