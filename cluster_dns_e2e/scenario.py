"""Cluster DNS scenario orchestration.

Provisions the DNS backend in every namespace, waits until it is running,
responding and resolvable, then creates a frontend pod in every namespace
that reaches the backend of the first namespace by its fully-qualified
service name and checks that the frontend prints the expected greeting.

Steps (namespaces are processed in order, each step completes before the
next one starts):
    1. create backend controllers in all namespaces, then backend services
    2. wait for controlled pods running and the service object
    3. check every backend pod and the service respond
    4. resolve ``dns-backend.<ns0>`` from a backend pod until it prints ``ok``
    5. rewrite the frontend manifest to ``dns-backend.<ns0>.svc.<domain>``
    6. create the frontend in all namespaces
    7. wait until every frontend pod left Pending
    8. wait for the expected output in every frontend log

Any failure is fatal and propagates to the caller.

Example:
    >>> config = ScenarioConfig()
    >>> scenario = ClusterDnsScenario(ClusterClient.from_config(config), config)
    >>> result = scenario.run(config.namespace_names())
    >>> result.resolution_target
    'dns-backend.dnsexample0'
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from cluster_dns_e2e.config import ScenarioConfig
from cluster_dns_e2e.errors import ScenarioError
from cluster_dns_e2e.fixtures.cluster import ClusterClient, label_selector
from cluster_dns_e2e.fixtures.kubectl import create_from_file, create_from_stdin
from cluster_dns_e2e.fixtures.manifests import (
    BACKEND_RC,
    BACKEND_SERVICE,
    FRONTEND_POD,
    MANIFEST_NAMESPACE,
    manifest_path,
    parse_manifest,
    prepare_resource_with_replaced_string,
)
from cluster_dns_e2e.fixtures.namespaces import resolution_target, service_fqdn

logger = structlog.get_logger(__name__)

# Pods created by the backend controller carry this label and name prefix
BACKEND_POD_PREFIX = "dns-backend"
BACKEND_POD_LABELS = {"name": BACKEND_POD_PREFIX}

DNS_OK = "ok"
DNS_ERR = "err"

QUERY_DNS_SCRIPT = """
import socket
try:
    socket.gethostbyname({target!r})
    print({ok!r})
except Exception:
    print({err!r})"""


def query_dns_command(target: str) -> list[str]:
    """Return the command that resolves ``target`` inside a backend pod.

    The command prints ``ok`` when the name resolves and ``err`` otherwise.
    """
    script = QUERY_DNS_SCRIPT.format(target=target, ok=DNS_OK, err=DNS_ERR)
    return ["python", "-c", script]


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of a successful scenario run.

    Attributes:
        namespaces: Namespaces the scenario ran in, in order.
        resolution_target: Name resolved before the frontends were created.
        backend_pods: Number of responding backend pods per namespace.
    """

    namespaces: tuple[str, ...]
    resolution_target: str
    backend_pods: dict[str, int] = field(default_factory=dict)


class ClusterDnsScenario:
    """Runs the cluster DNS scenario against a set of existing namespaces.

    Namespaces must already exist; creating and deleting them belongs to the
    caller (see IntegrationTestBase and the ``cluster-dns-e2e`` CLI).
    """

    def __init__(self, cluster: ClusterClient, config: ScenarioConfig | None = None) -> None:
        self.cluster = cluster
        self.config = config or cluster.config

    def _kubectl_options(self) -> dict[str, object]:
        return {
            "kubeconfig": self.config.kubeconfig_path,
            "context": self.config.context,
            "timeout": self.config.kubectl_timeout,
        }

    # =========================================================================
    # Backend
    # =========================================================================

    def provision_backend(self, namespaces: list[str]) -> None:
        """Create the backend controller in every namespace, then the service.

        Raises:
            SetupError: If any kubectl create fails.
        """
        for workload in (BACKEND_RC, BACKEND_SERVICE):
            path = manifest_path(self.config.examples_dir, workload.manifest)
            for ns in namespaces:
                create_from_file(path, ns, **self._kubectl_options())

    def verify_backend(self, namespaces: list[str]) -> dict[str, int]:
        """Wait until the backend runs and responds in every namespace.

        Running pods may not have initialized the application yet, so every
        pod and the service are queried directly.

        Returns:
            Number of responding backend pods per namespace.

        Raises:
            SetupError: If the controller or pods cannot be read.
            PollingTimeoutError: If any wait condition times out.
        """
        for ns in namespaces:
            self.cluster.wait_for_controlled_pods_running(ns, BACKEND_RC.name)
            self.cluster.wait_for_service(ns, BACKEND_SERVICE.name)

        counts: dict[str, int] = {}
        selector = label_selector(BACKEND_POD_LABELS)
        for ns in namespaces:
            pods = self.cluster.list_pods(ns, selector)
            self.cluster.pods_responding(ns, BACKEND_POD_PREFIX, pods)
            counts[ns] = len(pods)
            logger.info("backend_pods_responding", namespace=ns, pods=len(pods))

            self.cluster.service_responding(ns, BACKEND_SERVICE.name)
        return counts

    # =========================================================================
    # DNS readiness gate
    # =========================================================================

    def wait_for_dns(self, namespace: str) -> str:
        """Wait until the backend service name resolves from inside the cluster.

        The service may exist and respond before its name is published in
        DNS, so a lookup is run from an existing backend pod until it
        succeeds. This runs once, against one namespace.

        Returns:
            The resolution target that resolved.

        Raises:
            ScenarioError: If no backend pod exists to run the lookup in.
            PollingTimeoutError: If the name does not resolve within the DNS
                ready timeout.
        """
        pods = self.cluster.list_pods(namespace, label_selector(BACKEND_POD_LABELS))
        if not pods:
            raise ScenarioError("no running pods found", namespace=namespace)
        pod_name = pods[0].metadata.name

        target = resolution_target(BACKEND_SERVICE.name, namespace)
        logger.info("dns_query_started", namespace=namespace, pod=pod_name, target=target)
        self.cluster.exec_and_look_for_string(
            namespace,
            pod_name,
            query_dns_command(target),
            DNS_OK,
            self.config.dns_ready_timeout,
        )
        logger.info("dns_ready", namespace=namespace, target=target)
        return target

    # =========================================================================
    # Frontend
    # =========================================================================

    def prepare_frontend_manifest(self, backend_namespace: str) -> str:
        """Return the frontend manifest rewired to the backend in ``backend_namespace``.

        Raises:
            ManifestError: If the manifest cannot be read, does not contain
                the service name it is written against, or is not the
                frontend pod.
        """
        domain = self.config.cluster_dns_domain
        path = manifest_path(self.config.examples_dir, FRONTEND_POD.manifest)
        text = prepare_resource_with_replaced_string(
            path,
            service_fqdn(BACKEND_SERVICE.name, MANIFEST_NAMESPACE, domain),
            service_fqdn(BACKEND_SERVICE.name, backend_namespace, domain),
            require_match=True,
        )
        parse_manifest(text, kind="Pod", name=FRONTEND_POD.name, source=str(path))
        return text

    def provision_frontend(self, namespaces: list[str], manifest_text: str) -> None:
        """Create the frontend pod from ``manifest_text`` in every namespace.

        Raises:
            SetupError: If any kubectl create fails.
        """
        for ns in namespaces:
            create_from_stdin(manifest_text, ns, **self._kubectl_options())

    def verify_frontend(self, namespaces: list[str]) -> None:
        """Wait until every frontend was scheduled and printed the expected output.

        The frontend terminates on its own, so only leaving Pending is
        awaited, not Running.

        Raises:
            PollingTimeoutError: If a frontend stays pending or never prints
                the expected output.
        """
        for ns in namespaces:
            self.cluster.wait_for_pod_not_pending(ns, FRONTEND_POD.name)

        for ns in namespaces:
            self.cluster.look_for_string_in_log(
                ns,
                FRONTEND_POD.name,
                FRONTEND_POD.container or FRONTEND_POD.name,
                self.config.expected_output,
                self.config.pod_start_timeout,
            )
            logger.info("frontend_output_found", namespace=ns, pod=FRONTEND_POD.name)

    # =========================================================================
    # Full run
    # =========================================================================

    def run(self, namespaces: list[str]) -> ScenarioResult:
        """Run every step of the scenario in ``namespaces``.

        Args:
            namespaces: Existing namespaces, at least one. The first one hosts
                the backend every frontend resolves.

        Returns:
            ScenarioResult describing the successful run.

        Raises:
            ValueError: If ``namespaces`` is empty.
            ScenarioError: On the first setup or manifest failure.
            PollingTimeoutError: On the first wait condition that times out.
        """
        if not namespaces:
            msg = "At least one namespace is required"
            raise ValueError(msg)

        log = logger.bind(namespaces=list(namespaces))
        log.info("scenario_started")

        self.provision_backend(namespaces)
        counts = self.verify_backend(namespaces)

        target = self.wait_for_dns(namespaces[0])
        manifest_text = self.prepare_frontend_manifest(namespaces[0])

        self.provision_frontend(namespaces, manifest_text)
        self.verify_frontend(namespaces)

        log.info("scenario_passed", resolution_target=target)
        return ScenarioResult(
            namespaces=tuple(namespaces),
            resolution_target=target,
            backend_pods=counts,
        )


__all__ = [
    "BACKEND_POD_LABELS",
    "BACKEND_POD_PREFIX",
    "ClusterDnsScenario",
    "QUERY_DNS_SCRIPT",
    "ScenarioResult",
    "query_dns_command",
]
