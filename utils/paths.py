"""
Path utilities for pipeline.

Handles data-directory relative paths and the scheduler host list.
"""

import os
from pathlib import Path


def resolve_in_data_dir(data_dir: str, name: str) -> Path:
    """
    Resolve a file name relative to the data directory.

    Absolute names are returned unchanged.

    Example:
        resolve_in_data_dir("/runs/protein", "start.gro")
        -> Path("/runs/protein/start.gro")
    """
    path = Path(name)
    if path.is_absolute():
        return path
    return Path(data_dir) / path


def read_host_list(host_file: str) -> list[str]:
    """
    Read the hosts allocated by the scheduler.

    One host per line, blank lines ignored. A host appearing on several
    lines is counted once per line (one line per MPI slot).

    Args:
        host_file: Path to the host file (e.g. $LOADL_HOSTFILE)

    Returns:
        List of host names in file order
    """
    with open(host_file, "r") as f:
        return [line.strip() for line in f if line.strip()]


def is_regular_file(path: Path) -> bool:
    return os.path.isfile(path)
