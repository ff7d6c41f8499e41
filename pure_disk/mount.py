# pure_disk/mount.py
import os

from pure_disk.executors.disk import STICKY_MODE, DiskOperations
from pure_disk.models import MountRequest
from pure_disk.utils.exceptions import (
    DestructiveStepError, Failure, MountFailed, PrivilegeError, ShellCommandError, SwapActivationFailed,
)
from pure_disk.utils.logger import RichAppLogger

MOUNT_DEPENDENCIES = ("lsblk", "swapon", "mount", "mkdir", "chmod")

# Shared temporary directories beneath the mounted root. Only the first is required.
PRIMARY_TMP = "tmp"
SECONDARY_TMP = "var/tmp"


def check_privileges() -> None:
    """Raises PrivilegeError unless running with an effective uid of 0."""
    if os.geteuid() != 0:
        raise PrivilegeError("Please run this tool with sudo or as root.")


def _detail(error: ShellCommandError) -> str:
    return error.stderr.strip() or str(error)


class MountSequencer:
    """
    Activates swap and mounts root, EFI and custom partitions beneath the mount root.

    Root is mounted before anything that lives under it. Any failure ends the run.
    """

    def __init__(self, ops: DiskOperations, logger: RichAppLogger):
        self.ops = ops
        self.logger = logger

    def run(self, request: MountRequest) -> None:
        self.activate_swap(request)
        self.create_mount_points(request)
        self.mount_partitions(request)
        self.set_permissions(request)
        self.logger.info("Swap activated and partitions mounted successfully!")

    def activate_swap(self, request: MountRequest) -> None:
        self.logger.section(f"Activating swap partition ({request.swap_device})")
        try:
            self.ops.activate_swap(request.swap_device)
        except ShellCommandError as e:
            raise SwapActivationFailed(request.swap_device, _detail(e)) from e

    def create_mount_points(self, request: MountRequest) -> None:
        self.logger.section(f"Creating mount points under {request.mount_root}")
        paths = [request.mount_root, request.efi_target]
        paths.extend(request.target_for(mount.mount_point) for mount in request.custom)
        for path in paths:
            self._make_directory(path)

    def mount_partitions(self, request: MountRequest) -> None:
        self.logger.section("Mounting partitions")
        self._mount(request.root_device, request.mount_root)
        self._mount(request.efi_device, request.efi_target)
        for mount in request.custom:
            self._mount(mount.device, request.target_for(mount.mount_point))

    def set_permissions(self, request: MountRequest) -> None:
        primary = request.target_for(PRIMARY_TMP)
        secondary = request.target_for(SECONDARY_TMP)
        self.logger.section(f"Setting permissions for {primary} and {secondary}")

        try:
            self.ops.make_directory(primary)
            self.ops.set_mode(primary, STICKY_MODE)
        except ShellCommandError as e:
            raise DestructiveStepError(Failure("permissions"), f"{primary}: {_detail(e)}") from e

        try:
            self.ops.set_mode(secondary, STICKY_MODE)
        except ShellCommandError as e:
            self.logger.warning(f"Could not set permissions on {secondary}: {_detail(e)}")
            return
        self.logger.info("Permissions set.")

    def _make_directory(self, path: str) -> None:
        try:
            self.ops.make_directory(path)
        except ShellCommandError as e:
            raise MountFailed(path, _detail(e)) from e

    def _mount(self, device: str, target: str) -> None:
        try:
            self.ops.mount_device(device, target)
        except ShellCommandError as e:
            raise MountFailed(target, _detail(e)) from e
        self.logger.info(f"Mounted {device} at {target}.")
