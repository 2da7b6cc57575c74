#!/usr/bin/env python3
"""
Main entry point for the GROMACS stage pipeline.

Runs a series of grompp and mdrun/mdrun_mpi commands, one pair per mdp
file, feeding the final configuration of each stage (after_<stage>.gro)
into the next one.

The list of mdp files can be given in 2 ways:
  - ``-f <file>``: a file in the data directory listing one mdp file per
    line, processed in the order they are listed
  - nothing: all ``*.mdp`` files in the data directory, sorted by name

Supports:
  - Single-process mdrun (optionally with ``-nt``)
  - MPI mdrun inside a LoadLeveler allocation (``-mpi``)
  - MPI with g_tune_pme auto-tuning (``-mpi -tuned``)
"""

import sys
import logging
import argparse
import yaml

from domain.config import PipelineConfig
from domain.errors import PipelineError
from pipeline.executor import PipelineExecutor


ERROR_RC = 127


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with the pipeline's error status."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(ERROR_RC, f"{self.prog}: error: {message}\n")


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        description="Run a series of grompp and mdrun commands, one per mdp file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -d /home/dmer018/funnel_web_test -i confout.gro
  %(prog)s -d /home/dmer018/funnel_web_test -i confout.gro -f mdp_files.txt
  %(prog)s -d /home/dmer018/funnel_web_test -i confout.gro -mpi -grompp_maxwarn 2

  # Settings from a YAML file, command line values take precedence
  %(prog)s --config run.yaml -nt 8

  # Check inputs and print the commands without running them
  %(prog)s -d /home/dmer018/funnel_web_test -i confout.gro --dry-run
        """
    )

    inputs = parser.add_argument_group("Input Options")
    inputs.add_argument(
        "-d", "--data-dir", dest="data_dir", default=None,
        help="Directory where all input files for the run are located, "
             "and where the mdrun output files will be stored"
    )
    inputs.add_argument(
        "-i", "--initial-gro", dest="initial_gro", default=None,
        help="Initial .gro file used in the first stage (relative to the data directory)"
    )
    inputs.add_argument(
        "-t", "--topology", dest="topology", default=None,
        help="Topology file, relative to the data directory (default: topol.top)"
    )
    inputs.add_argument(
        "-f", "--mdp-list", dest="mdp_list", default=None,
        help="File in the data directory listing the mdp files to process, one per line"
    )

    gromacs = parser.add_argument_group("GROMACS Options")
    gromacs.add_argument(
        "-mpi", "--mpi", dest="mpi", action="store_true", default=None,
        help="Run mdrun_mpi across the hosts of the LoadLeveler allocation"
    )
    gromacs.add_argument(
        "-tuned", "--tuned", dest="tuned", action="store_true", default=None,
        help="Use the g_tune_pme auto-tuning launcher (MPI mode only)"
    )
    gromacs.add_argument(
        "-grompp_maxwarn", "--grompp-maxwarn", dest="grompp_maxwarn", type=int, default=None,
        help="-maxwarn parameter for grompp"
    )
    gromacs.add_argument(
        "-nt", "--nt", dest="mdrun_threads", type=int, default=None,
        help="-nt parameter for mdrun"
    )
    gromacs.add_argument(
        "--gromacs-home", dest="gromacs_home", default=None,
        help="GROMACS installation directory (default: /share/apps/gromacs)"
    )

    general = parser.add_argument_group("General Options")
    general.add_argument(
        "--config", type=str, default=None,
        help="Optional YAML configuration file"
    )
    general.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    general.add_argument(
        "--dry-run", action="store_true",
        help="Validate inputs and print the commands without running them"
    )
    general.add_argument(
        "--progress", dest="show_progress", action="store_true", default=None,
        help="Show a progress bar over the stages"
    )
    general.add_argument(
        "--summary-file", type=str, default=None,
        help="Write the run summary as JSON (relative to the data directory)"
    )

    return parser


def parse_args(argv=None):
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def merge_config(config_dict: dict, args) -> dict:
    """
    Overlay command line values on a configuration dictionary.

    Only options given on the command line override the file.
    """
    merged = dict(config_dict)
    for key in ("data_dir", "initial_gro", "topology", "mdp_list", "mpi", "tuned",
                "grompp_maxwarn", "mdrun_threads", "show_progress"):
        value = getattr(args, key)
        if value is not None:
            merged[key] = value
    if args.gromacs_home is not None:
        merged["gromacs"] = {**(merged.get("gromacs") or {}), "home": args.gromacs_home}
    return merged


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        config_dict = {}
        if args.config:
            logger.info(f"Loading configuration from: {args.config}")
            config_dict = load_config(args.config)

        config = PipelineConfig.from_dict(merge_config(config_dict, args))
        executor = PipelineExecutor(config)

        if args.dry_run:
            logger.info("Dry run mode - configuration is valid, commands:")
            for step in executor.plan():
                print(" ".join(step["prepare"]))
                print(" ".join(step["run"]))
            return 0

        final_context = executor.run()

        if args.summary_file:
            executor.save_summary(args.summary_file, final_context)

        if final_context.is_successful:
            return 0
        logger.error(f"✗ Pipeline failed: {final_context.error_message}")
        return ERROR_RC

    except PipelineError as e:
        logger.error(str(e))
        if e.show_usage:
            build_parser().print_usage(sys.stderr)
        return ERROR_RC
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return ERROR_RC


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
