"""Manifest handling for the cluster DNS scenario.

The frontend manifest is written against the backend service in the
``development`` namespace. Before it is created, the fully-qualified service
name is rewritten to point at a test namespace.

Functions:
    replace_first: Replace the first occurrence of a literal substring
    prepare_resource_with_replaced_string: Read a manifest and rewrite it
    manifest_path: Resolve a manifest file name in the examples directory
    parse_manifest: Parse manifest text and check its kind and name

Example:
    >>> replace_first("a b a", "a", "c")
    'c b a'
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field

from cluster_dns_e2e.errors import ManifestError

logger = structlog.get_logger(__name__)


class Workload(BaseModel):
    """A deployment unit of the scenario: a manifest and the name it creates.

    Attributes:
        manifest: Manifest file name, relative to the examples directory.
        name: Name of the resource (controller, service or pod) it creates.
        container: Container name, for pods whose logs are read.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    container: str | None = None


BACKEND_RC = Workload(manifest="dns-backend-rc.yaml", name="dns-backend")
BACKEND_SERVICE = Workload(manifest="dns-backend-service.yaml", name="dns-backend")
FRONTEND_POD = Workload(
    manifest="dns-frontend-pod.yaml",
    name="dns-frontend",
    container="dns-frontend",
)

# Namespace the frontend manifest is written against
MANIFEST_NAMESPACE = "development"


def manifest_path(examples_dir: Path, file_name: str) -> Path:
    """Return the path of ``file_name`` inside ``examples_dir``."""
    return Path(examples_dir) / file_name


def replace_first(text: str, old: str, new: str) -> str:
    """Replace the first occurrence of ``old`` in ``text`` with ``new``.

    Later occurrences are left untouched. When ``old`` does not occur the
    input is returned unchanged.
    """
    return text.replace(old, new, 1)


def prepare_resource_with_replaced_string(
    input_file: Path | str,
    old: str,
    new: str,
    *,
    require_match: bool = False,
) -> str:
    """Read a manifest and replace the first occurrence of ``old`` with ``new``.

    Pass enough context in ``old`` that it only matches what you really
    intend to replace.

    Args:
        input_file: Manifest file to read.
        old: Literal substring to replace.
        new: Replacement text.
        require_match: If True, raise when ``old`` does not occur in the
            manifest instead of returning it unchanged.

    Returns:
        The rewritten manifest text.

    Raises:
        ManifestError: If the file cannot be opened or read, or if
            require_match is set and ``old`` does not occur.
    """
    path = Path(input_file)
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError("failed to open file", path=str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"failed to read from file ({e})", path=str(path)) from e

    if old not in data:
        if require_match:
            raise ManifestError(f"expected text {old!r} not found in manifest", path=str(path))
        logger.warning("manifest_replace_no_match", path=str(path), old=old)
        return data

    logger.debug("manifest_rewritten", path=str(path), old=old, new=new)
    return replace_first(data, old, new)


def parse_manifest(
    text: str,
    *,
    kind: str | None = None,
    name: str | None = None,
    source: str = "<string>",
) -> dict[str, Any]:
    """Parse a single-document manifest and optionally check kind and name.

    Args:
        text: Manifest YAML text.
        kind: Expected ``kind``, if it should be checked.
        name: Expected ``metadata.name``, if it should be checked.
        source: File name used in error messages.

    Returns:
        The parsed manifest.

    Raises:
        ManifestError: If the text is not a YAML mapping or kind/name differ.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"invalid YAML ({e})", path=source) from e
    if not isinstance(document, dict):
        raise ManifestError("manifest is not a mapping", path=source)

    if kind is not None and document.get("kind") != kind:
        raise ManifestError(
            f"expected kind {kind!r}, found {document.get('kind')!r}", path=source
        )
    actual_name = (document.get("metadata") or {}).get("name")
    if name is not None and actual_name != name:
        raise ManifestError(f"expected name {name!r}, found {actual_name!r}", path=source)
    return document


__all__ = [
    "BACKEND_RC",
    "BACKEND_SERVICE",
    "FRONTEND_POD",
    "MANIFEST_NAMESPACE",
    "Workload",
    "manifest_path",
    "parse_manifest",
    "prepare_resource_with_replaced_string",
    "replace_first",
]
