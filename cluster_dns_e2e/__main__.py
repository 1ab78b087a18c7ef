"""Allow ``python -m cluster_dns_e2e``."""

from __future__ import annotations

from cluster_dns_e2e.cli import main

main()
