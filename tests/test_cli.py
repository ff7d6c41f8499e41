import logging

import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock, patch

from pure_disk import cli, core
from pure_disk.cli import app, run_mount_tool, run_partition_tool
from pure_disk.config import PureDiskConfig
from pure_disk.executors.disk import DiskManager
from pure_disk.models import BlockDevice
from pure_disk.utils.exceptions import ShellCommandError

runner = CliRunner()


@pytest.fixture
def manager():
    """A DiskManager double: every operation is recorded, queries return a single spare disk."""
    mock_manager = MagicMock(spec=DiskManager)
    mock_manager.logger = MagicMock()
    mock_manager.list_block_devices.return_value = [BlockDevice(name="/dev/sda", size="465.8G", type="disk")]
    mock_manager.system_disk.return_value = "/dev/nvme0n1"
    mock_manager.mounted_partitions.return_value = []
    mock_manager.describe_device.return_value = "NAME MAJ:MIN RM SIZE RO TYPE MOUNTPOINTS"
    return mock_manager


@pytest.fixture
def all_tools_installed():
    with patch("pure_disk.disk.shutil.which", return_value="/usr/bin/tool") as mock_which:
        yield mock_which


# --- partition tool ---

@patch("pure_disk.prompts.Confirm.ask", return_value=True)
@patch("pure_disk.prompts.Prompt.ask", side_effect=["1", "", "", "", "1"])
def test_partition_tool_success(mock_ask, mock_confirm, manager, mock_rich_logger, all_tools_installed):
    code = run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger)

    assert code == 0
    manager.wipe_table.assert_called_once_with("/dev/sda")
    assert manager.create_partition.call_count == 3
    manager.refresh_table.assert_called_once_with("/dev/sda")
    manager.make_swap.assert_called_once_with("/dev/sda2")
    manager.describe_device.assert_called_once_with("/dev/sda")


@patch("pure_disk.prompts.Confirm.ask", return_value=True)
@patch("pure_disk.prompts.Prompt.ask", side_effect=["1", "", "", "", "1"])
def test_partition_tool_logs_final_layout_line_by_line(mock_ask, mock_confirm, manager, mock_rich_logger,
                                                       all_tools_installed):
    manager.describe_device.return_value = (
        "NAME   MAJ:MIN RM   SIZE RO TYPE MOUNTPOINTS\n"
        "sda      8:0    0 465.8G  0 disk\n"
        "\u2514\u2500sda1   8:1    0   512M  0 part\n"
    )

    assert run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger) == 0

    logged = [c[0][0] for c in mock_rich_logger.info.call_args_list]
    assert "Final layout of /dev/sda:" in logged
    assert "sda      8:0    0 465.8G  0 disk" in logged
    assert not any("\n" in message for message in logged)


@patch("pure_disk.prompts.Prompt.ask", return_value="q")
def test_partition_tool_quit_exits_zero(mock_ask, manager, mock_rich_logger, all_tools_installed):
    code = run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger)

    assert code == 0
    manager.wipe_table.assert_not_called()


@patch("pure_disk.prompts.Confirm.ask", return_value=False)
@patch("pure_disk.prompts.Prompt.ask", side_effect=["1", "", "", "", "1"])
def test_partition_tool_declined_plan_exits_zero(mock_ask, mock_confirm, manager, mock_rich_logger,
                                                  all_tools_installed):
    assert run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger) == 0
    manager.wipe_table.assert_not_called()


@patch("pure_disk.disk.shutil.which", return_value=None)
def test_partition_tool_missing_dependency(mock_which, manager, mock_rich_logger):
    code = run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger)

    assert code == 1
    manager.list_block_devices.assert_not_called()
    assert "sgdisk" in mock_rich_logger.error.call_args[0][0]


@patch("pure_disk.prompts.Confirm.ask", return_value=True)
@patch("pure_disk.prompts.Prompt.ask", side_effect=["1", "", "", "", "1"])
def test_partition_tool_destructive_failure(mock_ask, mock_confirm, manager, mock_rich_logger, all_tools_installed):
    manager.create_partition.side_effect = [None, ShellCommandError("sgdisk", 4, stderr="Could not create partition 2")]

    code = run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger)

    assert code == 1
    assert manager.create_partition.call_count == 2
    manager.wipe_signatures.assert_not_called()
    assert "createPartition: 2" in mock_rich_logger.error.call_args[0][0]
    mock_rich_logger.error.assert_called_once()


@patch("pure_disk.prompts.Prompt.ask", side_effect=KeyboardInterrupt)
def test_partition_tool_interrupted(mock_ask, manager, mock_rich_logger, all_tools_installed):
    code = run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger)

    assert code == 1
    assert "inconsistent" in mock_rich_logger.error.call_args[0][0]


@patch("pure_disk.cli.load_config", side_effect=ValueError("Invalid TOML format in file"))
def test_invalid_config_exits_one(mock_load):
    assert run_partition_tool() == 1
    assert run_mount_tool() == 1


@patch("pure_disk.disk.shutil.which", return_value=None)
def test_partition_tool_writes_timestamped_log(mock_which, tmp_path, manager):
    config = PureDiskConfig(log_directory=str(tmp_path / "logs"))

    assert run_partition_tool(config=config, manager=manager) == 1

    logs = list((tmp_path / "logs").glob("partition_tool_*.log"))
    assert len(logs) == 1
    assert core.app_logger.log_file_path == str(logs[0])
    assert "Required command(s) not installed" in logs[0].read_text(encoding="utf-8")

    for handler in logging.getLogger("pure_disk").handlers[:]:
        handler.close()
        logging.getLogger("pure_disk").removeHandler(handler)


# --- mount tool ---

@patch("pure_disk.mount.os.geteuid", return_value=1000)
def test_mount_tool_requires_root(mock_geteuid, manager, mock_rich_logger, all_tools_installed):
    assert run_mount_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger) == 1
    manager.activate_swap.assert_not_called()


@patch("pure_disk.prompts.Confirm.ask", side_effect=[False, True])
@patch("pure_disk.prompts.Prompt.ask", side_effect=["/dev/sda2", "/dev/sda3", "/dev/sda1"])
@patch("pure_disk.mount.os.geteuid", return_value=0)
def test_mount_tool_success(mock_geteuid, mock_ask, mock_confirm, manager, mock_rich_logger, all_tools_installed):
    assert run_mount_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger) == 0

    manager.activate_swap.assert_called_once_with("/dev/sda2")
    manager.mount_device.assert_any_call("/dev/sda3", "/mnt/gentoo")
    manager.mount_device.assert_any_call("/dev/sda1", "/mnt/gentoo/efi")
    manager.describe_device.assert_called_once_with("/dev/sda3")


@patch("pure_disk.prompts.Confirm.ask", side_effect=[False, True])
@patch("pure_disk.prompts.Prompt.ask", side_effect=["/dev/sda2", "/dev/sda3", "/dev/sda1"])
@patch("pure_disk.mount.os.geteuid", return_value=0)
def test_mount_tool_swap_failure(mock_geteuid, mock_ask, mock_confirm, manager, mock_rich_logger,
                                 all_tools_installed):
    manager.activate_swap.side_effect = ShellCommandError("swapon /dev/sda2", 255, stderr="Invalid argument")

    assert run_mount_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger) == 1
    manager.mount_device.assert_not_called()


# --- typer app ---

@patch.object(cli, "run_partition_tool", return_value=0)
def test_partition_command(mock_run):
    result = runner.invoke(app, ["partition"])
    assert result.exit_code == 0
    mock_run.assert_called_once_with()


@patch.object(cli, "run_mount_tool", return_value=1)
def test_mount_command_propagates_exit_code(mock_run):
    result = runner.invoke(app, ["mount"])
    assert result.exit_code == 1


@patch.object(cli, "run_partition_tool", return_value=0)
def test_partition_main_exits(mock_run):
    with pytest.raises(SystemExit) as excinfo:
        cli.partition_main()
    assert excinfo.value.code == 0


def test_unexpected_error_is_logged_with_traceback(manager, mock_rich_logger, all_tools_installed):
    manager.list_block_devices.side_effect = RuntimeError("lsblk output changed")

    assert run_partition_tool(config=PureDiskConfig(), manager=manager, logger=mock_rich_logger) == 1
    mock_rich_logger.exception.assert_called_once_with("Unexpected error")
