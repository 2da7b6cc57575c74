"""
PipelineExecutor - High-level pipeline orchestrator.

Wires together all services and executes the state machine.

Everything that can be checked without running GROMACS is checked in
the constructor: the execution mode (MPI host list), the input files and
the stage list. A run therefore never starts grompp for a configuration
that is already known to be broken.
"""

import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from tqdm import tqdm

from domain.config import PipelineConfig
from domain.stage import RunHandle, StageInvocation
from orchestration import PipelineState, RunContext, StateMachine
from orchestration.handlers import (
    IdleHandler,
    PreparingHandler,
    ExecutingHandler,
    AdvancingHandler,
)
from services.execution_mode import select_execution_mode
from services.prerequisites import check_prerequisites
from services.stage_resolver import resolve_stages
from services.gromacs import CommandInvoker, GromppPreparer, MdrunRunner


class PipelineExecutor:
    """
    High-level pipeline executor.

    Responsible for:
    1. Validating the environment and the inputs of the run
    2. Creating the GROMACS collaborators with dependency injection
    3. Building the state machine with handlers
    4. Running the pipeline and returning the final context
    """

    def __init__(
        self,
        config: PipelineConfig,
        environ: Optional[Mapping[str, str]] = None,
        invoker: Optional[CommandInvoker] = None,
        preparer=None,
        runner=None,
    ):
        """
        Initialize executor.

        Args:
            config: Validated pipeline configuration
            environ: Environment of the launching process (defaults to os.environ)
            invoker: Command invoker shared by grompp and mdrun
            preparer: Replacement for the grompp collaborator
            runner: Replacement for the mdrun collaborator

        Raises:
            EnvironmentMissing: MPI mode without a host list
            PrerequisiteMissing: Missing data directory, .gro or topology
            ConfigurationMissing: Missing list of mdp files
        """
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        environ = os.environ if environ is None else environ

        self.launch = select_execution_mode(config, environ)
        self.paths = check_prerequisites(config)
        self.stages = tuple(resolve_stages(config.data_dir, config.mdp_list_file))

        data_dir = str(self.paths.data_dir)
        if invoker is None:
            invoker = CommandInvoker(env=config.gromacs.environment(environ))
        self.preparer = preparer or GromppPreparer(config.gromacs, invoker, data_dir)
        self.runner = runner or MdrunRunner(self.launch, invoker, data_dir)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> RunContext:
        """Execute the pipeline and return final context."""
        self.logger.info("Initializing pipeline execution")
        self.logger.info(f"Execution mode: {self.launch.mode}")
        self.logger.info(f"Stages: {', '.join(s.stage_id for s in self.stages) or '-'}")

        initial_context = self._create_initial_context()

        with tqdm(
            total=len(self.stages),
            unit="stage",
            desc="Pipeline",
            disable=not self.config.show_progress,
        ) as progress:
            state_machine = self._build_state_machine(
                on_stage_completed=lambda stage_id: progress.update(1)
            )
            final_context = state_machine.run(initial_context)

        self._log_results(final_context)
        return final_context

    def plan(self) -> list[dict]:
        """
        Commands the run would execute if every stage succeeds.

        Used by --dry-run; nothing is executed.

        Raises:
            TypeError: If a collaborator has no ``command`` method
        """
        planned = []
        coordinate_file = self.config.initial_gro_file
        for stage in self.stages:
            invocation = StageInvocation(
                stage=stage,
                input_coordinate_file=coordinate_file,
                topology_file=self.config.topology_file,
                max_warnings=self.config.grompp_maxwarn,
                threads=self.config.mdrun_threads,
            )
            planned.append({
                "stage": stage.stage_id,
                "prepare": self._command_of(self.preparer, invocation),
                "run": self._command_of(self.runner, RunHandle(invocation=invocation)),
            })
            coordinate_file = invocation.output_coordinate_file
        return planned

    def save_summary(self, summary_path: str, context: RunContext):
        """
        Write the run summary as JSON.

        Args:
            summary_path: Output file, relative paths resolve in the data directory
            context: Final run context
        """
        path = Path(summary_path)
        if not path.is_absolute():
            path = self.paths.data_dir / path

        summary = {
            "summary": context.get_summary(),
            "execution_mode": str(self.launch.mode),
            "stages": [s.stage_id for s in self.stages],
            "config": self.config.to_dict(),
        }
        with open(path, "w") as f:
            json.dump(summary, f, indent=2, default=str)

        self.logger.info(f"Saved run summary to: {path}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _create_initial_context(self) -> RunContext:
        return RunContext(
            config=self.config,
            stages=self.stages,
            current_state=PipelineState.IDLE,
            current_coordinate_file=self.config.initial_gro_file,
        )

    def _build_state_machine(self, on_stage_completed=None) -> StateMachine:
        handlers = {
            PipelineState.IDLE: IdleHandler(),
            PipelineState.PREPARING: PreparingHandler(self.preparer),
            PipelineState.EXECUTING: ExecutingHandler(self.runner),
            PipelineState.ADVANCING: AdvancingHandler(on_stage_completed),
        }
        return StateMachine(handlers)

    @staticmethod
    def _command_of(collaborator, argument) -> list[str]:
        command = getattr(collaborator, "command", None)
        if command is None:
            raise TypeError(
                f"{type(collaborator).__name__} cannot report its command for a dry run"
            )
        return command(argument)

    def _log_results(self, context: RunContext):
        self.logger.info("=" * 60)
        self.logger.info("Pipeline Execution Summary")
        self.logger.info("=" * 60)

        summary = context.get_summary()
        for key, value in summary.items():
            self.logger.info(f"{key:30s}: {value}")

        self.logger.info("=" * 60)
