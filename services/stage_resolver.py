"""
StageResolver service - Builds the ordered list of stages.

Single responsibility: turn a manifest file or the data directory
listing into StageDefinitions.
"""

import logging
from pathlib import Path
from typing import Optional

from domain.errors import ConfigurationMissing
from domain.stage import MDP_SUFFIX, StageDefinition
from utils.paths import resolve_in_data_dir


logger = logging.getLogger(__name__)


def resolve_stages(data_dir: str, mdp_list_file: Optional[str] = None) -> list[StageDefinition]:
    """
    Resolve the ordered stage list for a run.

    With a manifest, stages come in file order, one mdp name per line.
    Without one, every ``*.mdp`` file in the data directory is used,
    sorted by file name (plain string order, independent of locale).

    Args:
        data_dir: Data directory of the run
        mdp_list_file: Optional manifest, relative to data_dir

    Returns:
        List of StageDefinition, possibly empty

    Raises:
        ConfigurationMissing: If the manifest does not exist
    """
    if mdp_list_file:
        manifest_path = resolve_in_data_dir(data_dir, mdp_list_file)
        names = read_manifest(manifest_path)
        logger.info(f"Read {len(names)} mdp files from {manifest_path}")
    else:
        names = list_mdp_files(data_dir)
        logger.info(f"Found {len(names)} mdp files in {data_dir}")

    return [StageDefinition.from_config_name(name) for name in names]


def read_manifest(manifest_path: Path) -> list[str]:
    """
    Read mdp names from a manifest file.

    Entries keep their order and duplicates; blank lines are skipped.
    """
    if not manifest_path.is_file():
        raise ConfigurationMissing(manifest_path)

    with open(manifest_path, "r") as f:
        return [line.strip() for line in f if line.strip()]


def list_mdp_files(data_dir: str) -> list[str]:
    """
    List mdp file names in the data directory, lexicographically sorted.

    Hidden files (names starting with a dot) are skipped, as a shell
    ``*.mdp`` glob would.
    """
    return sorted(
        p.name for p in Path(data_dir).iterdir()
        if p.suffix == MDP_SUFFIX and not p.name.startswith(".") and p.is_file()
    )
