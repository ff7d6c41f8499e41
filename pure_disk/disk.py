from typing import Iterable, List, Sequence
import shutil

from pure_disk.executors.disk import DiskManager, DiskOperations
from pure_disk.formatting import FormatDispatcher, FormatResult
from pure_disk.layout import LayoutExecutor
from pure_disk.models import DeviceTarget, Filesystem, PartitionPlan
from pure_disk.prompts import Prompter
from pure_disk.devices import exclude_system_disk
from pure_disk.utils.exceptions import DependencyMissingError
from pure_disk.utils.logger import RichAppLogger

PARTITION_DEPENDENCIES = (
    "lsblk", "findmnt", "sgdisk", "mkfs.fat", "mkswap", "mkfs.ext4", "mkfs.xfs", "mkfs.btrfs", "partprobe",
    "wipefs",
)

# Only required when the plan actually uses them
OPTIONAL_CREATORS = {
    Filesystem.NTFS: "mkfs.ntfs",
    Filesystem.EXFAT: "mkfs.exfat",
}


def check_dependencies(commands: Iterable[str]) -> None:
    """Raises DependencyMissingError naming every command not found on PATH."""
    missing = [command for command in commands if shutil.which(command) is None]
    if missing:
        raise DependencyMissingError(missing)


def plan_dependencies(plan: PartitionPlan) -> List[str]:
    used = set(plan.filesystems)
    return [command for filesystem, command in OPTIONAL_CREATORS.items() if filesystem in used]


def select_target(manager: DiskManager, prompter: Prompter) -> DeviceTarget:
    """
    Lists candidate disks (the running system's disk excluded) and lets the
    operator pick one. A disk with mounted partitions needs an extra confirmation.
    """
    devices = manager.list_block_devices()
    system_disk = manager.system_disk()
    if system_disk:
        manager.logger.info(f"Excluding system disk {system_disk} from the list.")
    else:
        prompter.confirm_unknown_system_disk()
    target = prompter.select_disk(exclude_system_disk(devices, system_disk))

    mounted = manager.mounted_partitions(target.device)
    if mounted:
        prompter.confirm_mounted_disk(target.device, mounted)
    return target


def prepare_disk(ops: DiskOperations, plan: PartitionPlan, target: DeviceTarget,
                 logger: RichAppLogger) -> Sequence[FormatResult]:
    """
    Wipes `target`, writes the partition table of `plan` and formats every partition.

    Role/filesystem combinations that cannot be formatted are rejected before
    the device is touched.

    Raises:
        UnsupportedFilesystemForRole: before any destructive step.
        DestructiveStepError: a layout or format step failed.
    """
    dispatcher = FormatDispatcher(ops, logger)
    dispatcher.validate(plan)

    logger.info(f"Starting disk preparation on {target.device}")
    LayoutExecutor(ops, plan, target, logger).execute()
    results = dispatcher.format_all(plan, target)
    logger.info("Partitions created and formatted successfully!")
    return results
