"""
Tests for PipelineExecutor.

End-to-end runs against a real data directory with the command invoker
replaced by a recorder, so no GROMACS installation is needed.
"""

import json
import os

import pytest

from domain.config import GromacsInstall, PipelineConfig
from domain.errors import (
    ConfigurationConflict,
    ConfigurationMissing,
    EnvironmentMissing,
    PrerequisiteMissing,
)
from pipeline import PipelineExecutor
from services.execution_mode import ExecutionMode
from conftest import RecordingInvoker, make_data_dir


GROMACS = GromacsInstall(home="/opt/gromacs")


def _config(data_dir, **kwargs):
    kwargs.setdefault("initial_gro_file", "start.gro")
    kwargs.setdefault("gromacs", GROMACS)
    return PipelineConfig(data_dir=str(data_dir), **kwargs)


class TestPipelineExecutor:
    """Tests for PipelineExecutor.run."""

    def test_example_eq_then_prod(self, data_dir, invoker):
        """Test the eq/prod example: directory order and coordinate threading."""
        executor = PipelineExecutor(_config(data_dir), environ={}, invoker=invoker)

        final = executor.run()

        assert final.is_successful
        assert invoker.programs == [
            ("grompp", "eq"), ("mdrun", "eq"),
            ("grompp", "prod"), ("mdrun", "prod"),
        ]
        eq_grompp, _, prod_grompp, _ = (c["argv"] for c in invoker.calls)
        assert eq_grompp[eq_grompp.index("-c") + 1] == "start.gro"
        assert prod_grompp[prod_grompp.index("-c") + 1] == "after_eq.gro"
        assert all(c["cwd"] == str(data_dir) for c in invoker.calls)

    def test_manifest_order(self, data_dir, invoker):
        """Test N manifest entries give N prepare/run pairs in manifest order."""
        (data_dir / "stages.txt").write_text("prod.mdp\neq.mdp\nprod.mdp\n")
        executor = PipelineExecutor(
            _config(data_dir, mdp_list_file="stages.txt"), environ={}, invoker=invoker
        )

        final = executor.run()

        assert final.is_successful
        assert [p for p in invoker.programs if p[0] == "grompp"] == [
            ("grompp", "prod"), ("grompp", "eq"), ("grompp", "prod"),
        ]
        assert len(invoker.calls) == 6

    def test_prepare_failure_aborts(self, tmp_path):
        """Test that a grompp failure in stage k stops the chain at k."""
        data_dir = make_data_dir(tmp_path, mdp_files=("1_min.mdp", "2_eq.mdp", "3_prod.mdp"))
        invoker = RecordingInvoker(returncodes={("grompp", "2_eq"): 1})
        executor = PipelineExecutor(_config(data_dir), environ={}, invoker=invoker)

        final = executor.run()

        assert final.has_error
        assert invoker.programs == [("grompp", "1_min"), ("mdrun", "1_min"), ("grompp", "2_eq")]
        assert "2_eq.mdp" in final.error_message
        assert final.error_details["step"] == "/opt/gromacs/bin/grompp"

    def test_run_failure_aborts(self, data_dir):
        """Test that an mdrun failure stops the chain."""
        invoker = RecordingInvoker(returncodes={("mdrun", "eq"): 1})
        executor = PipelineExecutor(_config(data_dir), environ={}, invoker=invoker)

        final = executor.run()

        assert final.has_error
        assert invoker.programs == [("grompp", "eq"), ("mdrun", "eq")]
        assert "mdrun failed while processing eq.mdp" in final.error_message

    def test_no_mdp_files(self, tmp_path, invoker):
        """Test that a directory without mdp files completes doing nothing."""
        data_dir = make_data_dir(tmp_path, mdp_files=())
        final = PipelineExecutor(_config(data_dir), environ={}, invoker=invoker).run()

        assert final.is_successful
        assert invoker.calls == []

    def test_progress_bar(self, data_dir, invoker):
        """Test that the progress bar does not change the run."""
        executor = PipelineExecutor(_config(data_dir, show_progress=True), environ={}, invoker=invoker)
        assert executor.run().is_successful

    def test_mpi_run_uses_launcher(self, data_dir, host_file, invoker):
        """Test that MPI mode launches mdrun_mpi through mpirun."""
        executor = PipelineExecutor(
            _config(data_dir, mpi=True),
            environ={"LOADL_HOSTFILE": str(host_file)},
            invoker=invoker,
        )

        executor.run()

        assert executor.launch.mode == ExecutionMode.MPI
        mdrun_argv = invoker.calls[1]["argv"]
        assert mdrun_argv[0] == "mpirun"
        assert "/opt/gromacs/bin/mdrun_mpi" in mdrun_argv


class TestPipelineExecutorValidation:
    """Tests for failures raised before any external invocation."""

    def test_mpi_without_host_list(self, data_dir, invoker):
        """Test EnvironmentMissing before anything runs."""
        with pytest.raises(EnvironmentMissing):
            PipelineExecutor(_config(data_dir, mpi=True), environ={}, invoker=invoker)
        assert invoker.calls == []

    def test_mpi_with_threads(self, data_dir):
        """Test ConfigurationConflict before anything runs."""
        with pytest.raises(ConfigurationConflict):
            _config(data_dir, mpi=True, mdrun_threads=4)

    def test_missing_initial_gro(self, data_dir, invoker):
        """Test PrerequisiteMissing for the initial .gro."""
        with pytest.raises(PrerequisiteMissing):
            PipelineExecutor(_config(data_dir, initial_gro_file="x.gro"), environ={}, invoker=invoker)
        assert invoker.calls == []

    def test_missing_manifest(self, data_dir, invoker):
        """Test ConfigurationMissing for the mdp list."""
        with pytest.raises(ConfigurationMissing):
            PipelineExecutor(_config(data_dir, mdp_list_file="list.txt"), environ={}, invoker=invoker)


class TestPipelineExecutorEnvironment:
    """Tests for the environment handed to GROMACS."""

    def test_default_invoker_environment(self, data_dir, monkeypatch):
        """Test that GROMACS variables go to the children, not to os.environ."""
        monkeypatch.delenv("GMXLIB", raising=False)
        executor = PipelineExecutor(_config(data_dir), environ={"LD_LIBRARY_PATH": "/usr/lib"})

        env = executor.preparer.invoker.env

        assert env["GMXLIB"] == "/opt/gromacs/share/gromacs/top"
        assert env["LD_LIBRARY_PATH"] == "/usr/lib:/opt/gromacs/lib"
        assert "GMXLIB" not in os.environ


class TestPlanAndSummary:
    """Tests for dry-run planning and the JSON summary."""

    def test_plan_lists_commands(self, data_dir, invoker):
        """Test that the plan threads coordinates without running anything."""
        executor = PipelineExecutor(_config(data_dir, grompp_maxwarn=1), environ={}, invoker=invoker)

        plan = executor.plan()

        assert [p["stage"] for p in plan] == ["eq", "prod"]
        assert plan[1]["prepare"][plan[1]["prepare"].index("-c") + 1] == "after_eq.gro"
        assert plan[0]["prepare"][-2:] == ["-maxwarn", "1"]
        assert "after_prod.gro" in plan[1]["run"]
        assert invoker.calls == []

    def test_plan_rejects_collaborator_without_command(self, data_dir, collaborators):
        """Test that planning with a collaborator that cannot report its command fails."""
        executor = PipelineExecutor(
            _config(data_dir), environ={}, preparer=collaborators, runner=collaborators
        )

        with pytest.raises(TypeError, match="RecordingCollaborators cannot report its command"):
            executor.plan()
        assert collaborators.events == []

    def test_save_summary(self, data_dir, invoker):
        """Test the JSON summary written into the data directory."""
        executor = PipelineExecutor(_config(data_dir), environ={}, invoker=invoker)
        final = executor.run()

        executor.save_summary("summary.json", final)

        summary = json.loads((data_dir / "summary.json").read_text())
        assert summary["summary"]["state"] == "COMPLETED"
        assert summary["summary"]["completed_stages"] == ["eq", "prod"]
        assert summary["stages"] == ["eq", "prod"]
        assert summary["execution_mode"] == "SINGLE"
