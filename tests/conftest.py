"""
Shared pytest fixtures.

Provides a populated data directory and recording stand-ins for the
grompp/mdrun collaborators and the command invoker.
"""

from pathlib import Path

import pytest

from domain.errors import StageFailed
from domain.stage import RunHandle


class RecordingInvoker:
    """CommandInvoker stand-in recording every command."""

    def __init__(self, returncodes=None):
        """
        Args:
            returncodes: Dict mapping program basename + stage id to an
                exit status, e.g. {("grompp", "prod"): 1}
        """
        self.returncodes = returncodes or {}
        self.calls = []

    def run(self, argv, cwd, extra_env=None):
        self.calls.append({"argv": list(argv), "cwd": cwd, "extra_env": dict(extra_env or {})})
        program = Path(argv[0]).name
        stage_id = argv[argv.index("-o") + 1]
        return self.returncodes.get((program, stage_id), 0)

    @property
    def programs(self) -> list[tuple[str, str]]:
        """(program basename, stage id) for every recorded call."""
        return [
            (Path(c["argv"][0]).name, c["argv"][c["argv"].index("-o") + 1])
            for c in self.calls
        ]


class RecordingCollaborators:
    """Prepare/run stand-ins sharing one ordered event log."""

    def __init__(self, fail_prepare=(), fail_run=()):
        self.fail_prepare = set(fail_prepare)
        self.fail_run = set(fail_run)
        self.events = []
        self.invocations = []

    def prepare(self, invocation):
        self.events.append(("prepare", invocation.stage_id))
        self.invocations.append(invocation)
        if invocation.stage_id in self.fail_prepare:
            raise StageFailed("grompp", invocation.stage_id, invocation.config_file, ["grompp"], 1)
        return RunHandle(invocation=invocation)

    def execute(self, handle):
        stage_id = handle.invocation.stage_id
        self.events.append(("run", stage_id))
        if stage_id in self.fail_run:
            raise StageFailed("mdrun", stage_id, handle.invocation.config_file, ["mdrun"], 1)
        return Path(handle.invocation.output_coordinate_file)


def make_data_dir(root: Path, mdp_files=("eq.mdp", "prod.mdp"), initial="start.gro",
                  topology="topol.top") -> Path:
    """Create a data directory with mdp files, an initial .gro and a topology."""
    data_dir = root / "run"
    data_dir.mkdir()
    for name in mdp_files:
        (data_dir / name).write_text("integrator = md\n")
    if initial:
        (data_dir / initial).write_text("protein\n    0\n   1.0 1.0 1.0\n")
    if topology:
        (data_dir / topology).write_text("[ system ]\nprotein\n")
    return data_dir


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Data directory with eq.mdp, prod.mdp, start.gro and topol.top."""
    return make_data_dir(tmp_path)


@pytest.fixture
def host_file(tmp_path) -> Path:
    """LoadLeveler style host file with four slots."""
    path = tmp_path / "hosts"
    path.write_text("node01\nnode01\nnode02\nnode02\n")
    return path


@pytest.fixture
def collaborators() -> RecordingCollaborators:
    return RecordingCollaborators()


@pytest.fixture
def invoker() -> RecordingInvoker:
    return RecordingInvoker()
