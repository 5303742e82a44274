"""Listing of client scripts agents have saved for reuse."""

from __future__ import annotations

import logging
from pathlib import Path

from kube_discovery_mcp.domains.methods.models import MethodRecord

logger = logging.getLogger(__name__)


def list_cached_scripts(directory: Path) -> list[str]:
    """Return the names of saved ``*.py`` scripts, sorted.

    A missing or unreadable directory yields an empty list.
    """
    try:
        if not directory.is_dir():
            return []
        return sorted(path.name for path in directory.glob("*.py") if path.is_file())
    except OSError as e:
        logger.debug(f"Cannot list scripts in {directory}: {e}")
        return []


def suggested_script_name(record: MethodRecord) -> str:
    """File name an agent should save a script for this method under."""
    return f"{record.action.value}-{record.scope.value}-{record.resource_type}.py".lower()
