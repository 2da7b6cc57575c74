"""
Utility modules for pipeline.
"""

from .paths import (
    resolve_in_data_dir,
    read_host_list,
    is_regular_file,
)

__all__ = [
    "resolve_in_data_dir",
    "read_host_list",
    "is_regular_file",
]
