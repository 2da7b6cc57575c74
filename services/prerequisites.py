"""
Prerequisite checks - Validates the inputs of a run before anything starts.

Single responsibility: make sure the data directory, initial .gro file,
topology and manifest exist, and return their resolved paths.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from domain.config import PipelineConfig
from domain.errors import ConfigurationMissing, PrerequisiteMissing
from utils.paths import is_regular_file, resolve_in_data_dir


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPaths:
    """Validated input paths of a run."""

    data_dir: Path
    initial_gro_file: Path
    topology_file: Path
    mdp_list_file: Optional[Path] = None


def check_prerequisites(config: PipelineConfig) -> ResolvedPaths:
    """
    Check that every input of the run exists.

    Args:
        config: Pipeline configuration

    Returns:
        ResolvedPaths with absolute-or-data-dir-relative paths

    Raises:
        PrerequisiteMissing: Data directory, initial .gro or topology missing
        ConfigurationMissing: Manifest given but missing
    """
    # Data directory
    if not config.data_dir:
        raise PrerequisiteMissing(
            "Error: data directory has not been specified", show_usage=True
        )
    data_dir = Path(config.data_dir)
    if not os.path.isdir(data_dir):
        raise PrerequisiteMissing(
            f"Error: {data_dir} is not a directory or doesn't exist", path=data_dir
        )

    # Initial gro file
    if not config.initial_gro_file:
        raise PrerequisiteMissing(
            "Error: Initial .gro file has not been specified", show_usage=True
        )
    initial_gro = resolve_in_data_dir(config.data_dir, config.initial_gro_file)
    if not is_regular_file(initial_gro):
        raise PrerequisiteMissing(
            f"Error: {initial_gro} is not a file or doesn't exist", path=initial_gro
        )

    # List of mdp files
    mdp_list = None
    if config.mdp_list_file:
        mdp_list = resolve_in_data_dir(config.data_dir, config.mdp_list_file)
        if not is_regular_file(mdp_list):
            raise ConfigurationMissing(mdp_list)

    # Topology file
    topology = resolve_in_data_dir(config.data_dir, config.topology_file)
    if not is_regular_file(topology):
        raise PrerequisiteMissing(
            f"Error: {topology} is not a file or doesn't exist", path=topology
        )

    logger.debug(f"Prerequisites satisfied in {data_dir}")
    return ResolvedPaths(
        data_dir=data_dir,
        initial_gro_file=initial_gro,
        topology_file=topology,
        mdp_list_file=mdp_list,
    )
