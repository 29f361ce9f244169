"""Version string for titlescope.

A git checkout reports MAJOR.MINOR from BASE_VERSION with the commit count as
the patch number (e.g. 0.3.12). Anywhere else the installed distribution's
version is used.
"""

from __future__ import annotations

import subprocess
from importlib import metadata
from pathlib import Path

# Bump manually for releases
BASE_VERSION = "0.3"

DIST_NAME = "titlescope"


def _git_patch_number() -> int | None:
    """Commit count of the checkout containing this package, or None outside git."""
    try:
        completed = subprocess.run(
            ["git", "rev-list", "--count", "HEAD"],
            cwd=Path(__file__).resolve().parent,
            capture_output=True,
            text=True,
            timeout=5,
            check=True,
        )
        return int(completed.stdout.strip())
    except (subprocess.SubprocessError, OSError, ValueError):
        return None


def get_version() -> str:
    """Get the full MAJOR.MINOR.PATCH version string."""
    patch = _git_patch_number()
    if patch is not None:
        return f"{BASE_VERSION}.{patch}"
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return f"{BASE_VERSION}.0"


__version__ = get_version()
