# pure_disk/cli.py
"""
Command line entry points.

`pure-disk partition` wipes, partitions and formats a disk for a fresh Linux
install. `pure-disk mount` activates swap and mounts the result beneath the
mount root. Both are interactive and take no options; settings come from
pure-disk.toml.
"""
import sys
from typing import Optional

import typer

from pure_disk import core
from pure_disk.config import PureDiskConfig, load_config
from pure_disk.disk import PARTITION_DEPENDENCIES, check_dependencies, plan_dependencies, prepare_disk, select_target
from pure_disk.executors.disk import DiskManager
from pure_disk.mount import MOUNT_DEPENDENCIES, MountSequencer, check_privileges
from pure_disk.prompts import Prompter
from pure_disk.utils.exceptions import PureDiskError, ShellCommandError, UserAbort
from pure_disk.utils.executor import Executor
from pure_disk.utils.logger import RichAppLogger, initialize_app_logger, timestamped_log_name

PARTITION_LOG_PREFIX = "partition_tool"
MOUNT_LOG_PREFIX = "mount_and_activate"

EXIT_OK = 0
EXIT_FAILURE = 1

app = typer.Typer(
    help="Interactive disk preparation for a fresh Linux installation.",
    no_args_is_help=True,
    add_completion=False,
)


def _load_config(config: Optional[PureDiskConfig]) -> Optional[PureDiskConfig]:
    if config is not None:
        return config
    try:
        return load_config()
    except ValueError as e:
        typer.secho(f"Invalid configuration: {e}", fg=typer.colors.RED, err=True)
        return None


def _start_logger(config: PureDiskConfig, prefix: str) -> RichAppLogger:
    core.app_logger = initialize_app_logger(
        app_name="pure_disk",
        log_directory=config.log_directory,
        log_file_name=timestamped_log_name(prefix),
    )
    core.app_logger.info(f"Logging to {core.app_logger.log_file_path}")
    return core.app_logger


def _log_lines(logger: RichAppLogger, header: str, text: str) -> None:
    logger.info(header)
    for line in text.splitlines():
        if line.strip():
            logger.info(line)


def run_partition_tool(config: Optional[PureDiskConfig] = None, manager: Optional[DiskManager] = None,
                       logger: Optional[RichAppLogger] = None) -> int:
    """Runs the partition tool and returns the process exit code."""
    config = _load_config(config)
    if config is None:
        return EXIT_FAILURE
    logger = logger or _start_logger(config, PARTITION_LOG_PREFIX)
    logger.section("Disk partitioning")

    try:
        check_dependencies(PARTITION_DEPENDENCIES)
        manager = manager or DiskManager(Executor(logger_instance=logger))
        prompter = Prompter(logger)

        target = select_target(manager, prompter)
        plan = prompter.confirm_plan(target.device, prompter.gather_plan(config))
        check_dependencies(plan_dependencies(plan))

        prepare_disk(manager, plan, target, logger)
        _log_lines(logger, f"Final layout of {target.device}:", manager.describe_device(target.device))
    except UserAbort as e:
        logger.info(str(e))
        return EXIT_OK
    except KeyboardInterrupt:
        logger.error("Interrupted. The selected disk may be left in an inconsistent state.")
        return EXIT_FAILURE
    except (PureDiskError, ShellCommandError) as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected error")
        return EXIT_FAILURE

    return EXIT_OK


def run_mount_tool(config: Optional[PureDiskConfig] = None, manager: Optional[DiskManager] = None,
                   logger: Optional[RichAppLogger] = None) -> int:
    """Runs the swap/mount tool and returns the process exit code."""
    config = _load_config(config)
    if config is None:
        return EXIT_FAILURE
    logger = logger or _start_logger(config, MOUNT_LOG_PREFIX)
    logger.section("Swap activation and mounting")

    try:
        check_privileges()
        check_dependencies(MOUNT_DEPENDENCIES)
        manager = manager or DiskManager(Executor(logger_instance=logger))
        prompter = Prompter(logger)

        request = prompter.gather_mount_request(config)
        prompter.confirm_mount_request(request)

        MountSequencer(manager, logger).run(request)
        _log_lines(logger, f"Mounted root device {request.root_device}:",
                   manager.describe_device(request.root_device))
    except UserAbort as e:
        logger.info(str(e))
        return EXIT_OK
    except KeyboardInterrupt:
        logger.error("Interrupted. Swap and mounts may be left partially activated.")
        return EXIT_FAILURE
    except (PureDiskError, ShellCommandError) as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected error")
        return EXIT_FAILURE

    return EXIT_OK


@app.command()
def partition():
    """Wipe, partition and format a disk. ALL DATA ON THE DISK IS DESTROYED."""
    raise typer.Exit(code=run_partition_tool())


@app.command()
def mount():
    """Activate swap and mount root, EFI and custom partitions (requires root)."""
    raise typer.Exit(code=run_mount_tool())


def partition_main():
    sys.exit(run_partition_tool())


def mount_main():
    sys.exit(run_mount_tool())
