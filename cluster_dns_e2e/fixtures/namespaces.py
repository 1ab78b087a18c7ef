"""Namespace naming for the cluster DNS scenario.

The scenario runs in a fixed number of namespaces named ``<prefix><index>``
(``dnsexample0``, ``dnsexample1``). Names are checked against the Kubernetes
DNS-1123 label rules before anything is created.

Functions:
    generate_namespace_names: Build the indexed namespace names
    validate_namespace: Check if a namespace name is valid for K8s
    resolution_target: Build the ``<service>.<namespace>`` lookup name

Example:
    >>> generate_namespace_names("dnsexample", 2)
    ['dnsexample0', 'dnsexample1']
    >>> resolution_target("dns-backend", "dnsexample0")
    'dns-backend.dnsexample0'
"""

from __future__ import annotations

import re

# K8s namespace constraints
MAX_NAMESPACE_LENGTH = 63
NAMESPACE_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


class InvalidNamespaceError(ValueError):
    """Raised when a namespace name is invalid for Kubernetes."""

    def __init__(self, namespace: str, reason: str) -> None:
        self.namespace = namespace
        self.reason = reason
        super().__init__(f"Invalid namespace '{namespace}': {reason}")


def generate_namespace_names(prefix: str, count: int) -> list[str]:
    """Generate ``count`` namespace names of the form ``<prefix><index>``.

    Args:
        prefix: Namespace prefix (e.g., "dnsexample").
        count: Number of namespaces, at least 1.

    Returns:
        Namespace names ordered by index.

    Raises:
        ValueError: If count is smaller than 1.
        InvalidNamespaceError: If a generated name breaks K8s naming rules.
    """
    if count < 1:
        msg = f"Namespace count must be at least 1, got {count}"
        raise ValueError(msg)

    names = [f"{prefix}{index}" for index in range(count)]
    for name in names:
        if not validate_namespace(name):
            raise InvalidNamespaceError(
                name,
                "must be lowercase alphanumeric or '-', start and end with an "
                f"alphanumeric character, and be at most {MAX_NAMESPACE_LENGTH} characters",
            )
    return names


def validate_namespace(namespace: str) -> bool:
    """Check if a namespace name is valid for Kubernetes.

    Args:
        namespace: The namespace name to validate.

    Returns:
        True if valid, False otherwise.

    Example:
        >>> validate_namespace("dnsexample0")
        True
        >>> validate_namespace("DNS_Example")  # Invalid: uppercase, underscore
        False
    """
    if not namespace:
        return False

    if len(namespace) > MAX_NAMESPACE_LENGTH:
        return False

    return bool(NAMESPACE_PATTERN.match(namespace))


def resolution_target(service_name: str, namespace: str) -> str:
    """Return the name a client resolves to reach ``service_name`` in ``namespace``."""
    return f"{service_name}.{namespace}"


def service_fqdn(service_name: str, namespace: str, cluster_domain: str) -> str:
    """Return the fully-qualified service name, e.g. ``svc.ns.svc.cluster.local``."""
    return f"{service_name}.{namespace}.svc.{cluster_domain}"


# Module exports
__all__ = [
    "InvalidNamespaceError",
    "MAX_NAMESPACE_LENGTH",
    "generate_namespace_names",
    "resolution_target",
    "service_fqdn",
    "validate_namespace",
]
