"""kubectl helpers for the cluster DNS scenario.

Manifests are created with the real kubectl binary, either from a file or
from text piped on stdin. A failed create is fatal and never retried.

Functions:
    run_kubectl: Run kubectl and return the completed process
    create_from_file: ``kubectl create -f <path> --namespace=<ns>``
    create_from_stdin: ``kubectl create -f - --namespace=<ns>`` with input text
    namespace_flag: Build the ``--namespace=<ns>`` flag
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import structlog

from cluster_dns_e2e.errors import SetupError

logger = structlog.get_logger(__name__)

KUBECTL = "kubectl"


def namespace_flag(namespace: str) -> str:
    """Return the kubectl flag selecting ``namespace``."""
    return f"--namespace={namespace}"


def run_kubectl(
    args: list[str],
    *,
    input_text: str | None = None,
    kubeconfig: str | None = None,
    context: str | None = None,
    timeout: int = 60,
) -> subprocess.CompletedProcess[str]:
    """Run kubectl command.

    Args:
        args: kubectl arguments (e.g., ["create", "-f", "rc.yaml"]).
        input_text: Text passed to kubectl on stdin.
        kubeconfig: Optional kubeconfig file, passed as ``--kubeconfig``.
        context: Optional kubeconfig context, passed as ``--context``.
        timeout: Command timeout in seconds. Defaults to 60.

    Returns:
        Completed process result with stdout, stderr, and returncode.

    Raises:
        FileNotFoundError: If the kubectl binary is not installed.
        subprocess.TimeoutExpired: If the command exceeds ``timeout``.
    """
    cmd = [KUBECTL]
    if kubeconfig:
        cmd.append(f"--kubeconfig={kubeconfig}")
    if context:
        cmd.append(f"--context={context}")
    cmd.extend(args)
    logger.debug("kubectl_run", command=" ".join(cmd))
    return subprocess.run(
        cmd,
        input=input_text,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )


def _run_or_raise(
    args: list[str],
    namespace: str,
    *,
    input_text: str | None = None,
    kubeconfig: str | None = None,
    context: str | None = None,
    timeout: int = 60,
) -> str:
    cmd = [KUBECTL, *args]
    try:
        result = run_kubectl(
            args,
            input_text=input_text,
            kubeconfig=kubeconfig,
            context=context,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise SetupError("kubectl not found on PATH", namespace=namespace, command=cmd) from e
    except subprocess.TimeoutExpired as e:
        msg = f"kubectl timed out after {timeout}s: {' '.join(cmd)}"
        raise SetupError(msg, namespace=namespace, command=cmd) from e

    if result.returncode != 0:
        raise SetupError(
            f"kubectl failed with exit code {result.returncode}: {' '.join(cmd)}",
            namespace=namespace,
            command=cmd,
            stderr=result.stderr,
        )
    return result.stdout


def create_from_file(
    manifest: Path,
    namespace: str,
    *,
    kubeconfig: str | None = None,
    context: str | None = None,
    timeout: int = 60,
) -> str:
    """Create the resources in ``manifest`` inside ``namespace``.

    Args:
        manifest: Path to the manifest file.
        namespace: Target namespace.
        kubeconfig: Optional kubeconfig file.
        context: Optional kubeconfig context.
        timeout: Command timeout in seconds.

    Returns:
        kubectl stdout.

    Raises:
        SetupError: If kubectl is missing, times out or exits non-zero.
    """
    stdout = _run_or_raise(
        ["create", "-f", str(manifest), namespace_flag(namespace)],
        namespace,
        kubeconfig=kubeconfig,
        context=context,
        timeout=timeout,
    )
    logger.info("manifest_created", manifest=manifest.name, namespace=namespace)
    return stdout


def create_from_stdin(
    manifest_text: str,
    namespace: str,
    *,
    kubeconfig: str | None = None,
    context: str | None = None,
    timeout: int = 60,
) -> str:
    """Create the resources described by ``manifest_text`` inside ``namespace``.

    Same contract as create_from_file(), with the manifest piped on stdin.
    """
    stdout = _run_or_raise(
        ["create", "-f", "-", namespace_flag(namespace)],
        namespace,
        input_text=manifest_text,
        kubeconfig=kubeconfig,
        context=context,
        timeout=timeout,
    )
    logger.info("manifest_created", manifest="<stdin>", namespace=namespace)
    return stdout


__all__ = [
    "KUBECTL",
    "create_from_file",
    "create_from_stdin",
    "namespace_flag",
    "run_kubectl",
]
