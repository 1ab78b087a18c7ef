"""Helpers the cluster DNS scenario is built from.

Utilities:
    wait_for_condition: Poll until condition is true or timeout
    generate_namespace_names: Build ``<prefix><index>`` namespace names
    create_from_file / create_from_stdin: kubectl create wrappers
    prepare_resource_with_replaced_string: Rewrite a manifest before creation

The Kubernetes API wrapper lives in ``cluster_dns_e2e.fixtures.cluster`` and
is imported from there directly.
"""

from __future__ import annotations

from cluster_dns_e2e.fixtures.kubectl import (
    create_from_file,
    create_from_stdin,
    namespace_flag,
    run_kubectl,
)
from cluster_dns_e2e.fixtures.manifests import (
    BACKEND_RC,
    BACKEND_SERVICE,
    FRONTEND_POD,
    Workload,
    manifest_path,
    parse_manifest,
    prepare_resource_with_replaced_string,
    replace_first,
)
from cluster_dns_e2e.fixtures.namespaces import (
    InvalidNamespaceError,
    generate_namespace_names,
    resolution_target,
    service_fqdn,
    validate_namespace,
)
from cluster_dns_e2e.fixtures.polling import (
    PollingTimeoutError,
    wait_for_condition,
)

__all__ = [
    "BACKEND_RC",
    "BACKEND_SERVICE",
    "FRONTEND_POD",
    "InvalidNamespaceError",
    "PollingTimeoutError",
    "Workload",
    "create_from_file",
    "create_from_stdin",
    "generate_namespace_names",
    "manifest_path",
    "namespace_flag",
    "parse_manifest",
    "prepare_resource_with_replaced_string",
    "replace_first",
    "resolution_target",
    "run_kubectl",
    "service_fqdn",
    "validate_namespace",
    "wait_for_condition",
]
