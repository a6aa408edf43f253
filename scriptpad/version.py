from __future__ import annotations

import importlib.metadata
from typing import Optional


def get_version() -> Optional[str]:
    try:
        version = importlib.metadata.version("scriptpad")
    except importlib.metadata.PackageNotFoundError:
        return None
    # Drop any local build suffix such as '+g1234abc'
    return version.split('+')[0] or None


def get_version_string() -> str:
    return get_version() or "unknown"
