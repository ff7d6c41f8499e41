# pure_disk/devices.py
"""
Pure helpers around block device names and lsblk output.

The commands producing the output live in pure_disk.executors.disk; these
functions only interpret it so they can be tested without a real system.
"""
from typing import List, Optional, Tuple

from pure_disk.models import BlockDevice, partition_device_path

__all__ = [
    "partition_device_path",
    "parse_block_devices",
    "exclude_system_disk",
    "parse_mounted_partitions",
]


def parse_block_devices(lsblk_output: str) -> List[BlockDevice]:
    """
    Parses `lsblk -d -p -n -o NAME,SIZE,TYPE` output and keeps whole disks only.
    """
    devices: List[BlockDevice] = []
    for line in lsblk_output.splitlines():
        parts = line.split()
        if len(parts) < 3:
            continue
        name, size, dev_type = parts[0], parts[1], parts[2]
        if dev_type == "disk":
            devices.append(BlockDevice(name=name, size=size, type=dev_type))
    return devices


def exclude_system_disk(devices: List[BlockDevice], system_disk: Optional[str]) -> List[BlockDevice]:
    """Drops the disk hosting the running system, if it is known."""
    if not system_disk:
        return list(devices)
    return [device for device in devices if device.name != system_disk]


def parse_mounted_partitions(lsblk_output: str) -> List[Tuple[str, str]]:
    """
    Parses `lsblk -n -p -l -o NAME,MOUNTPOINT <disk>` output into
    (device, mountpoint) pairs for every node that is mounted.
    """
    mounted: List[Tuple[str, str]] = []
    for line in lsblk_output.splitlines():
        parts = line.split(None, 1)
        if len(parts) == 2 and parts[1].strip():
            mounted.append((parts[0], parts[1].strip()))
    return mounted
