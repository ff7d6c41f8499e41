# pure_disk/executors/disk.py
from typing import List, Optional, Protocol, Tuple

from pure_disk.devices import parse_block_devices, parse_mounted_partitions
from pure_disk.models import BlockDevice, Filesystem
from pure_disk.utils.exceptions import ShellCommandError
from pure_disk.utils.executor import Executor

STICKY_MODE = "1777"


class DiskOperations(Protocol):
    """
    Every privileged operation the layout, format and mount stages need.

    Implementations signal failure by raising ShellCommandError, whose stderr
    carries the external tool's diagnostics.
    """

    def wipe_table(self, device: str) -> None: ...

    def create_partition(self, device: str, index: int, start: str, end: str,
                         type_code: str, label: str) -> None: ...

    def refresh_table(self, device: str) -> None: ...

    def wipe_signatures(self, path: str) -> None: ...

    def make_filesystem(self, path: str, filesystem: Filesystem, label: Optional[str] = None) -> None: ...

    def make_swap(self, path: str) -> None: ...

    def activate_swap(self, device: str) -> None: ...

    def make_directory(self, path: str) -> None: ...

    def mount_device(self, device: str, target: str) -> None: ...

    def set_mode(self, path: str, mode: str) -> None: ...


def filesystem_command(path: str, filesystem: Filesystem, label: Optional[str] = None) -> List[str]:
    """
    Builds the mkfs command line for `filesystem`. Every creator that has a
    force flag gets it, so stale signatures never stop a run.
    """
    if filesystem == Filesystem.FAT32:
        # FAT32 volumes are left unlabelled
        return ["mkfs.fat", "-F", "32", path]
    if filesystem == Filesystem.SWAP:
        return ["mkswap", path]

    if filesystem == Filesystem.EXT4:
        fs_cmd = ["mkfs.ext4", "-F"]
    elif filesystem == Filesystem.XFS:
        fs_cmd = ["mkfs.xfs", "-f"]
    elif filesystem == Filesystem.BTRFS:
        fs_cmd = ["mkfs.btrfs", "-f"]
    elif filesystem == Filesystem.NTFS:
        # -F forces use of a non-whole device, -f skips zeroing
        fs_cmd = ["mkfs.ntfs", "-F", "-f"]
    elif filesystem == Filesystem.EXFAT:
        fs_cmd = ["mkfs.exfat"]
        if label:
            fs_cmd.extend(["-n", label])
        fs_cmd.append(path)
        return fs_cmd
    else:
        raise ValueError(f"Unsupported filesystem: {filesystem}")

    if label:
        fs_cmd.extend(["-L", label])
    fs_cmd.append(path)
    return fs_cmd


class DiskManager:
    """
    Performs disk, partition, filesystem and mount operations by running the
    usual command line tools (sgdisk, partprobe, wipefs, mkfs.*, swapon, mount)
    through the provided Executor.
    """

    def __init__(self, executor: Executor):
        self.executor = executor
        self.logger = executor.logger
        self.logger.debug("Disk manager initialized.")

    # --- DISK LEVEL OPERATIONS ---

    def wipe_table(self, device: str) -> None:
        """Destroys the GPT and MBR data structures on `device` (sgdisk --zap-all)."""
        self.executor.run(
            description=f"Wiping existing GPT data structures on {device}",
            command=["sgdisk", "--zap-all", device],
        )

    def create_partition(self, device: str, index: int, start: str, end: str,
                         type_code: str, label: str) -> None:
        """
        Creates GPT partition `index` on `device`.

        Args:
            start: Start sector; '0' selects the next free sector.
            end: '+<size>' (e.g. '+512M') or '0' for the rest of the free space.
            type_code: sgdisk type code (e.g. 'ef00' for EFI, '8300' for Linux).
            label: GPT partition name.
        """
        command = [
            "sgdisk",
            "-n", f"{index}:{start}:{end}",
            "-t", f"{index}:{type_code}",
            "-c", f"{index}:{label}",
            device,
        ]
        self.executor.run(
            description=f"Creating partition {index} '{label}' on {device} (Size: {'remaining space' if end == '0' else end}, Type: {type_code})",
            command=command,
        )

    def refresh_table(self, device: str) -> None:
        """Informs the kernel of the new partition table without a reboot."""
        self.executor.run(
            description=f"Refreshing partition table of {device}",
            command=["partprobe", device],
        )

    # --- PARTITION LEVEL OPERATIONS ---

    def wipe_signatures(self, path: str) -> None:
        """Erases filesystem signatures on `path`. Succeeds when there are none."""
        self.executor.run(
            description=f"Clearing filesystem signatures on {path}",
            command=["wipefs", "-a", path],
        )

    def make_filesystem(self, path: str, filesystem: Filesystem, label: Optional[str] = None) -> None:
        self.executor.run(
            description=f"Formatting {path} as {filesystem.value}",
            command=filesystem_command(path, filesystem, label),
        )

    def make_swap(self, path: str) -> None:
        self.executor.run(
            description=f"Setting up swap space on {path}",
            command=["mkswap", path],
        )

    # --- SWAP / MOUNT OPERATIONS ---

    def activate_swap(self, device: str) -> None:
        """Enables swap on `device`; a device that is already active is left alone."""
        if device in self.active_swaps():
            self.logger.info(f"Swap on {device} is already active.")
            return
        self.executor.run(
            description=f"Activating swap partition {device}",
            command=["swapon", device],
        )

    def make_directory(self, path: str) -> None:
        self.executor.run(
            description=f"Creating mount point {path}",
            command=["mkdir", "-p", path],
        )

    def mount_device(self, device: str, target: str) -> None:
        self.executor.run(
            description=f"Mounting {device} to {target}",
            command=["mount", device, target],
        )

    def set_mode(self, path: str, mode: str = STICKY_MODE) -> None:
        self.executor.run(
            description=f"Setting mode {mode} on {path}",
            command=["chmod", mode, path],
        )

    # --- READ-ONLY QUERIES ---

    def active_swaps(self) -> List[str]:
        _, stdout, _ = self.executor.execute_command(["swapon", "--show=NAME", "--noheadings"])
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    def list_block_devices(self) -> List[BlockDevice]:
        _, stdout, _ = self.executor.execute_command(["lsblk", "-d", "-p", "-n", "-o", "NAME,SIZE,TYPE"])
        return parse_block_devices(stdout)

    def system_disk(self) -> Optional[str]:
        """
        Returns the disk that hosts the running system's root filesystem, or None
        when it cannot be determined (the caller asks before listing every disk).
        """
        try:
            _, source, _ = self.executor.execute_command(["findmnt", "-n", "-v", "-o", "SOURCE", "/"])
            # btrfs subvolumes report the source as /dev/sda2[/@]
            source = source.strip().split("[", 1)[0]
            if not source.startswith("/dev/"):
                return None
            # -s walks from the root device up through LUKS/LVM to its disk
            _, stdout, _ = self.executor.execute_command(["lsblk", "-n", "-p", "-l", "-s", "-o", "NAME,TYPE", source])
        except ShellCommandError as e:
            self.logger.warning(f"Could not determine the system disk: {e}")
            return None

        for line in stdout.splitlines():
            parts = line.split()
            if len(parts) == 2 and parts[1] == "disk":
                return parts[0]
        return None

    def mounted_partitions(self, device: str) -> List[Tuple[str, str]]:
        _, stdout, _ = self.executor.execute_command(["lsblk", "-n", "-p", "-l", "-o", "NAME,MOUNTPOINT", device])
        return parse_mounted_partitions(stdout)

    def describe_device(self, device: str) -> str:
        _, stdout, _ = self.executor.execute_command(["lsblk", device])
        return stdout
