# pure_disk/formatting.py
from typing import List, NamedTuple

from pure_disk.executors.disk import DiskOperations
from pure_disk.models import DeviceTarget, Filesystem, PartitionPlan, PartitionRole, PartitionSpec
from pure_disk.utils.exceptions import DestructiveStepError, Failure, ShellCommandError, UnsupportedFilesystemForRole
from pure_disk.utils.logger import RichAppLogger


class FormatResult(NamedTuple):
    spec: PartitionSpec
    path: str
    skipped: bool = False


class FormatDispatcher:
    """
    Puts a filesystem (or swap signature) on every partition of a plan.

    Formatting halts on the first failure. Partitions formatted before it stay
    formatted.
    """

    def __init__(self, ops: DiskOperations, logger: RichAppLogger):
        self.ops = ops
        self.logger = logger

    def validate(self, plan: PartitionPlan) -> None:
        """Rejects role/filesystem combinations that cannot be formatted."""
        for spec in plan.specs:
            if spec.role == PartitionRole.HOME and spec.filesystem == Filesystem.FAT32:
                self.logger.error("Home partition cannot be fat32.")
                raise UnsupportedFilesystemForRole(spec.index, spec.display_name, spec.filesystem.value)

    def format_all(self, plan: PartitionPlan, target: DeviceTarget) -> List[FormatResult]:
        self.validate(plan)
        self.logger.section("Formatting partitions")

        results = []
        for spec in plan.specs:
            results.append(self._format(spec, target.partition_path(spec.index)))
        return results

    def _format(self, spec: PartitionSpec, path: str) -> FormatResult:
        if spec.role == PartitionRole.ROOT and spec.filesystem == Filesystem.FAT32:
            self.logger.warning(
                f"Partition {spec.index} ({path}) is already fat32 from partition creation. "
                f"Skipping {spec.display_name} formatting."
            )
            return FormatResult(spec, path, skipped=True)

        try:
            self.ops.wipe_signatures(path)
            if spec.role == PartitionRole.SWAP:
                self.ops.make_swap(path)
            elif spec.filesystem == Filesystem.FAT32:
                self.ops.make_filesystem(path, Filesystem.FAT32)
            else:
                self.ops.make_filesystem(path, spec.filesystem, spec.volume_label)
        except ShellCommandError as e:
            detail = e.stderr.strip() or str(e)
            raise DestructiveStepError(Failure("format", spec.index), detail) from e

        self.logger.info(f"{spec.display_name} partition ({path}) formatted as {spec.filesystem.value}.")
        return FormatResult(spec, path)
