"""Kubernetes API access for the cluster DNS scenario.

ClusterClient wraps the ``kubernetes`` CoreV1Api with the operations the
scenario consumes: namespace lifecycle, pod listing and the wait conditions
that gate each step. Every wait goes through wait_for_condition() and
raises PollingTimeoutError naming the namespace and object it waited for.

Example:
    >>> from cluster_dns_e2e.config import ScenarioConfig
    >>> config = ScenarioConfig()
    >>> cluster = ClusterClient.from_config(config)
    >>> cluster.wait_for_pod_not_pending("dnsexample0", "dns-frontend")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.client.exceptions import ApiException
from kubernetes.stream import stream
from urllib3.exceptions import HTTPError

from cluster_dns_e2e.config import ScenarioConfig
from cluster_dns_e2e.errors import SetupError
from cluster_dns_e2e.fixtures.polling import wait_for_condition

if TYPE_CHECKING:
    from kubernetes.client import CoreV1Api, V1Pod

logger = structlog.get_logger(__name__)

POD_RUNNING = "Running"
POD_PENDING = "Pending"


def label_selector(labels: dict[str, str]) -> str:
    """Render a label dict as a selector string (``k1=v1,k2=v2``).

    Example:
        >>> label_selector({"name": "dns-backend"})
        'name=dns-backend'
    """
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


def _pod_phase(pod: Any) -> str | None:
    status = getattr(pod, "status", None)
    return getattr(status, "phase", None)


def _is_deleted(pod: Any) -> bool:
    return pod.metadata.deletion_timestamp is not None


def _describe(error: ApiException | HTTPError) -> str:
    """Short reason for an API rejection or an unreachable API server."""
    if isinstance(error, ApiException):
        return f"{error.status} {error.reason}"
    return f"API server unreachable ({error})"


class ClusterClient:
    """Control-plane operations used by the scenario.

    Attributes:
        config: Scenario configuration supplying poll interval and timeouts.
    """

    def __init__(self, core_api: CoreV1Api, config: ScenarioConfig | None = None) -> None:
        """Initialize the client.

        Args:
            core_api: Configured kubernetes CoreV1Api.
            config: Scenario configuration. Uses defaults if None.
        """
        self._api = core_api
        self.config = config or ScenarioConfig()

    @classmethod
    def from_config(cls, config: ScenarioConfig) -> ClusterClient:
        """Load Kubernetes credentials and build a client.

        Attempts to load configuration in this order:
        1. Explicit kubeconfig path from config
        2. In-cluster configuration
        3. Default kubeconfig (~/.kube/config)

        Raises:
            SetupError: If no usable configuration could be loaded.
        """
        try:
            if config.kubeconfig_path:
                k8s_config.load_kube_config(
                    config_file=config.kubeconfig_path,
                    context=config.context,
                )
                logger.info(
                    "kubeconfig_loaded",
                    kubeconfig_path=config.kubeconfig_path,
                    context=config.context,
                )
            else:
                try:
                    k8s_config.load_incluster_config()
                    logger.info("incluster_config_loaded")
                except k8s_config.ConfigException:
                    k8s_config.load_kube_config(context=config.context)
                    logger.info("kubeconfig_loaded", context=config.context)
        except Exception as e:
            raise SetupError(f"Failed to load Kubernetes configuration: {e}") from e

        return cls(client.CoreV1Api(), config)

    # =========================================================================
    # Namespace lifecycle
    # =========================================================================

    def create_namespace(self, name: str) -> None:
        """Create namespace ``name``.

        Raises:
            SetupError: If the API rejects the request or cannot be reached.
        """
        body = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
        try:
            self._api.create_namespace(body=body)
        except (ApiException, HTTPError) as e:
            raise SetupError(
                f"failed to create namespace: {_describe(e)}",
                namespace=name,
            ) from e
        logger.info("namespace_created", namespace=name)

    def delete_namespace(self, name: str) -> None:
        """Delete namespace ``name``; a namespace that is already gone is ignored.

        Raises:
            SetupError: If the API rejects the request for another reason or
                cannot be reached.
        """
        try:
            self._api.delete_namespace(name=name)
        except (ApiException, HTTPError) as e:
            if isinstance(e, ApiException) and e.status == 404:
                return
            raise SetupError(
                f"failed to delete namespace: {_describe(e)}",
                namespace=name,
            ) from e
        logger.info("namespace_deleted", namespace=name)

    # =========================================================================
    # Queries
    # =========================================================================

    def list_pods(self, namespace: str, selector: str) -> list[V1Pod]:
        """List pods in ``namespace`` matching the label ``selector``.

        Raises:
            SetupError: If the pods cannot be listed.
        """
        try:
            pods = self._api.list_namespaced_pod(namespace=namespace, label_selector=selector)
        except (ApiException, HTTPError) as e:
            raise SetupError(
                f"failed to list pods with selector {selector!r}: {_describe(e)}",
                namespace=namespace,
            ) from e
        return list(pods.items or [])

    # =========================================================================
    # Wait conditions
    # =========================================================================

    def wait_for_controlled_pods_running(self, namespace: str, controller_name: str) -> None:
        """Wait until every pod of replication controller ``controller_name`` runs.

        Raises:
            SetupError: If the controller cannot be read.
            PollingTimeoutError: If the pods are not running within the pod
                start timeout.
        """
        try:
            rc = self._api.read_namespaced_replication_controller(
                name=controller_name, namespace=namespace
            )
        except (ApiException, HTTPError) as e:
            raise SetupError(
                f"failed to get replication controller {controller_name}: {_describe(e)}",
                namespace=namespace,
            ) from e

        selector = label_selector(rc.spec.selector or {})
        replicas = rc.spec.replicas if rc.spec.replicas is not None else 1

        def pods_running() -> bool:
            pods = self._api.list_namespaced_pod(namespace=namespace, label_selector=selector)
            running = [
                p for p in pods.items or [] if not _is_deleted(p) and _pod_phase(p) == POD_RUNNING
            ]
            logger.debug(
                "controlled_pods_running",
                namespace=namespace,
                controller=controller_name,
                running=len(running),
                desired=replicas,
            )
            return len(running) >= replicas

        wait_for_condition(
            pods_running,
            timeout=self.config.pod_start_timeout,
            interval=self.config.poll_interval,
            description=(
                f"{replicas} pods of replication controller {controller_name} "
                f"in {namespace} to be running"
            ),
        )
        logger.info("controlled_pods_running", namespace=namespace, controller=controller_name)

    def wait_for_service(self, namespace: str, service_name: str) -> None:
        """Wait until service ``service_name`` exists in ``namespace``.

        Any API error, not only 404, counts as "not yet" and is retried.

        Raises:
            PollingTimeoutError: If the service does not appear within the
                service start timeout.
        """

        def service_exists() -> bool:
            try:
                self._api.read_namespaced_service(name=service_name, namespace=namespace)
            except ApiException as e:
                logger.debug(
                    "service_not_found",
                    namespace=namespace,
                    service=service_name,
                    status=e.status,
                )
                return False
            return True

        wait_for_condition(
            service_exists,
            timeout=self.config.service_start_timeout,
            interval=self.config.poll_interval,
            description=f"service {service_name} in {namespace} to exist",
        )
        logger.info("service_found", namespace=namespace, service=service_name)

    def service_responding(self, namespace: str, service_name: str) -> None:
        """Wait until ``service_name`` answers a request through the API server proxy.

        Raises:
            PollingTimeoutError: If no non-empty response arrives within the
                service responding timeout.
        """

        def responds() -> bool:
            body = self._api.connect_get_namespaced_service_proxy(
                name=service_name, namespace=namespace
            )
            if not body:
                logger.debug("service_empty_response", namespace=namespace, service=service_name)
                return False
            return True

        wait_for_condition(
            responds,
            timeout=self.config.service_responding_timeout,
            interval=self.config.poll_interval,
            description=f"service {service_name} in {namespace} to respond",
        )
        logger.info("service_responding", namespace=namespace, service=service_name)

    def pods_responding(self, namespace: str, pod_name_prefix: str, pods: list[V1Pod]) -> None:
        """Wait until every pod in ``pods`` answers a request sent directly to it.

        Each round re-reads every pod. A pod whose name does not start with
        ``pod_name_prefix`` or that no longer exists fails immediately; pods
        being deleted are skipped. A pod that is not running, any other API
        error and a failed proxy request make the round fail and are retried.

        Raises:
            SetupError: If a pod name does not match ``pod_name_prefix`` or a
                listed pod was removed.
            PollingTimeoutError: If not all pods respond within the pods
                responding timeout.
        """
        names = [pod.metadata.name for pod in pods]
        for name in names:
            if not name.startswith(pod_name_prefix):
                raise SetupError(
                    f"pod {name} does not start with expected prefix {pod_name_prefix}",
                    namespace=namespace,
                )

        def all_respond() -> bool:
            successes = 0
            for name in names:
                try:
                    current = self._api.read_namespaced_pod(name=name, namespace=namespace)
                except ApiException as e:
                    if e.status != 404:
                        raise
                    raise SetupError(
                        f"pod {name} is no longer a member of the {pod_name_prefix} pods",
                        namespace=namespace,
                    ) from e
                if _is_deleted(current):
                    continue
                if _pod_phase(current) != POD_RUNNING:
                    logger.debug(
                        "pod_not_running",
                        namespace=namespace,
                        pod=name,
                        phase=_pod_phase(current),
                    )
                    return False
                self._api.connect_get_namespaced_pod_proxy(name=name, namespace=namespace)
                successes += 1
            logger.debug(
                "pods_responding_round",
                namespace=namespace,
                responding=successes,
                total=len(names),
            )
            return True

        wait_for_condition(
            all_respond,
            timeout=self.config.pods_responding_timeout,
            interval=self.config.poll_interval,
            description=f"pods {', '.join(names)} in {namespace} to respond",
        )

    def exec_and_look_for_string(
        self,
        namespace: str,
        pod_name: str,
        command: list[str],
        expected: str,
        timeout: float,
    ) -> str:
        """Repeatedly run ``command`` in ``pod_name`` until its output contains ``expected``.

        Returns:
            The output of the successful run.

        Raises:
            PollingTimeoutError: If ``expected`` never appears within ``timeout``.
        """
        output = ""

        def found() -> bool:
            nonlocal output
            output = stream(
                self._api.connect_get_namespaced_pod_exec,
                pod_name,
                namespace,
                command=command,
                stderr=True,
                stdin=False,
                stdout=True,
                tty=False,
            )
            return expected in output

        wait_for_condition(
            found,
            timeout=timeout,
            interval=self.config.poll_interval,
            description=f"{expected!r} in output of exec in pod {pod_name} in {namespace}",
        )
        return output

    def wait_for_pod_not_pending(self, namespace: str, pod_name: str) -> None:
        """Wait until ``pod_name`` has been scheduled and left the Pending phase.

        Raises:
            PollingTimeoutError: If the pod is still pending after the pod
                start timeout.
        """

        def scheduled() -> bool:
            pod = self._api.read_namespaced_pod(name=pod_name, namespace=namespace)
            return _pod_phase(pod) not in (None, POD_PENDING)

        wait_for_condition(
            scheduled,
            timeout=self.config.pod_start_timeout,
            interval=self.config.poll_interval,
            description=f"pod {pod_name} in {namespace} to leave Pending",
        )
        logger.info("pod_scheduled", namespace=namespace, pod=pod_name)

    def look_for_string_in_log(
        self,
        namespace: str,
        pod_name: str,
        container_name: str,
        expected: str,
        timeout: float,
    ) -> str:
        """Poll the log of ``container_name`` in ``pod_name`` until it contains ``expected``.

        Returns:
            The log content that contained ``expected``.

        Raises:
            PollingTimeoutError: If ``expected`` never appears within ``timeout``.
        """
        log = ""

        def found() -> bool:
            nonlocal log
            log = self._api.read_namespaced_pod_log(
                name=pod_name,
                namespace=namespace,
                container=container_name,
            )
            return expected in (log or "")

        wait_for_condition(
            found,
            timeout=timeout,
            interval=self.config.poll_interval,
            description=f"{expected!r} in log of pod {pod_name} in {namespace}",
        )
        return log


__all__ = [
    "ClusterClient",
    "POD_PENDING",
    "POD_RUNNING",
    "label_selector",
]
