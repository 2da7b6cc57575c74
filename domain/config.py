"""
Configuration domain models.

Validated configuration objects for the pipeline.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigurationConflict


DEFAULT_GROMACS_HOME = "/share/apps/gromacs"
DEFAULT_TOPOLOGY_FILE = "topol.top"


@dataclass(frozen=True)
class GromacsInstall:
    """
    Location of the GROMACS installation.

    Replaces the exported GROMACS / GMXLIB / LD_LIBRARY_PATH variables:
    the environment for child processes is derived from this object
    instead of being set on the current process.
    """

    home: str = DEFAULT_GROMACS_HOME

    def __post_init__(self):
        """Validate installation path."""
        if not self.home:
            raise ValueError("GROMACS home cannot be empty")

    @property
    def bin_dir(self) -> Path:
        return Path(self.home) / "bin"

    @property
    def lib_dir(self) -> Path:
        return Path(self.home) / "lib"

    @property
    def gmxlib(self) -> Path:
        return Path(self.home) / "share" / "gromacs" / "top"

    def executable(self, name: str) -> str:
        """Absolute path of a GROMACS program."""
        return str(self.bin_dir / name)

    def environment(self, base: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """
        Build the environment for GROMACS child processes.

        Args:
            base: Environment to start from (defaults to os.environ)

        Returns:
            New dict; ``base`` is not modified
        """
        env = dict(os.environ if base is None else base)
        env["GROMACS"] = self.home
        env["GMXLIB"] = str(self.gmxlib)
        ld_path = env.get("LD_LIBRARY_PATH", "")
        env["LD_LIBRARY_PATH"] = f"{ld_path}:{self.lib_dir}" if ld_path else str(self.lib_dir)
        return env


@dataclass(frozen=True)
class PipelineConfig:
    """
    Complete pipeline configuration.

    Immutable configuration object validated at creation. Paths other
    than ``data_dir`` are relative to the data directory.
    """

    # Inputs
    data_dir: Optional[str] = None
    initial_gro_file: Optional[str] = None
    topology_file: str = DEFAULT_TOPOLOGY_FILE
    mdp_list_file: Optional[str] = None

    # Execution mode
    mpi: bool = False
    tuned: bool = False

    # Pass-through options
    grompp_maxwarn: Optional[int] = None
    mdrun_threads: Optional[int] = None

    # Installation
    gromacs: GromacsInstall = field(default_factory=GromacsInstall)

    # Behavior
    show_progress: bool = False

    def __post_init__(self):
        """Validate pipeline configuration."""
        if self.mpi and self.mdrun_threads is not None:
            raise ConfigurationConflict(
                "-mpi and -nt options can't be set both at the same time"
            )
        if self.mdrun_threads is not None and self.mdrun_threads <= 0:
            raise ConfigurationConflict(
                f"mdrun_threads must be positive, got {self.mdrun_threads}"
            )
        if self.grompp_maxwarn is not None and self.grompp_maxwarn < 0:
            raise ConfigurationConflict(
                f"grompp_maxwarn must be non-negative, got {self.grompp_maxwarn}"
            )
        if not self.topology_file:
            raise ConfigurationConflict("topology_file cannot be empty")

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PipelineConfig':
        """
        Create PipelineConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated PipelineConfig instance
        """
        gromacs_dict = config_dict.get("gromacs") or {}

        return cls(
            data_dir=config_dict.get("data_dir"),
            initial_gro_file=config_dict.get("initial_gro"),
            topology_file=config_dict.get("topology") or DEFAULT_TOPOLOGY_FILE,
            mdp_list_file=config_dict.get("mdp_list"),
            mpi=_optional_bool(config_dict.get("mpi"), "mpi"),
            tuned=_optional_bool(config_dict.get("tuned"), "tuned"),
            grompp_maxwarn=_optional_int(config_dict.get("grompp_maxwarn"), "grompp_maxwarn"),
            mdrun_threads=_optional_int(config_dict.get("mdrun_threads"), "mdrun_threads"),
            gromacs=GromacsInstall(home=gromacs_dict.get("home") or DEFAULT_GROMACS_HOME),
            show_progress=_optional_bool(config_dict.get("show_progress"), "show_progress"),
        )

    def to_dict(self) -> dict:
        """Inverse of from_dict, used for logging and run summaries."""
        return {
            "data_dir": self.data_dir,
            "initial_gro": self.initial_gro_file,
            "topology": self.topology_file,
            "mdp_list": self.mdp_list_file,
            "mpi": self.mpi,
            "tuned": self.tuned,
            "grompp_maxwarn": self.grompp_maxwarn,
            "mdrun_threads": self.mdrun_threads,
            "show_progress": self.show_progress,
            "gromacs": {"home": self.gromacs.home},
        }


def _optional_int(value, name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationConflict(f"{name} must be an integer, got {value!r}") from None


def _optional_bool(value, name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigurationConflict(f"{name} must be true or false, got {value!r}")
    return value
