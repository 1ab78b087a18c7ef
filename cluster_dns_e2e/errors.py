"""Exception hierarchy for the cluster DNS scenario.

Every error raised while running the scenario is fatal: the first one aborts
the run and its message is what the test (or CLI) reports.

Exception Hierarchy:
    ScenarioError (base)
    ├── SetupError     # kubectl or API create/list failed
    └── ManifestError  # manifest could not be read or rewritten

    PollingTimeoutError (TimeoutError) lives in fixtures.polling and is
    raised by every wait condition.

Example:
    >>> from cluster_dns_e2e.errors import SetupError
    >>> raise SetupError("kubectl create failed", namespace="dnsexample0")
    Traceback (most recent call last):
        ...
    SetupError: kubectl create failed (namespace=dnsexample0)
"""

from __future__ import annotations


class ScenarioError(Exception):
    """Base exception for all scenario failures.

    Attributes:
        message: Human-readable error message.
        namespace: Namespace involved in the failure, if any.
    """

    def __init__(self, message: str, *, namespace: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            namespace: Namespace involved in the failure, if any.
        """
        self.message = message
        self.namespace = namespace
        if namespace:
            message = f"{message} (namespace={namespace})"
        super().__init__(message)


class SetupError(ScenarioError):
    """Raised when creating or listing cluster resources fails.

    Creation failures are not expected to be transient, so they are never
    retried.

    Attributes:
        command: The kubectl command that failed, if the failure came from
            the CLI collaborator.
        stderr: Captured stderr of the failed command.
    """

    def __init__(
        self,
        message: str,
        *,
        namespace: str | None = None,
        command: list[str] | None = None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message, namespace=namespace)


class ManifestError(ScenarioError):
    """Raised when a manifest file cannot be opened, read or rewritten.

    Attributes:
        path: Path of the manifest file.
    """

    def __init__(self, message: str, *, path: str) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


__all__ = [
    "ManifestError",
    "ScenarioError",
    "SetupError",
]
