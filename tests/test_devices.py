import pydantic
import pytest

from pure_disk.devices import (
    exclude_system_disk, parse_block_devices, parse_mounted_partitions, partition_device_path,
)
from pure_disk.models import BlockDevice, CustomMount, DeviceTarget, MountRequest


@pytest.mark.parametrize("device, index, expected", [
    ("/dev/sda", 1, "/dev/sda1"),
    ("/dev/sdb", 12, "/dev/sdb12"),
    ("/dev/vda", 3, "/dev/vda3"),
    ("/dev/nvme0n1", 1, "/dev/nvme0n1p1"),
    ("/dev/nvme0n1", 3, "/dev/nvme0n1p3"),
    ("/dev/mmcblk0", 2, "/dev/mmcblk0p2"),
    ("/dev/loop7", 1, "/dev/loop7p1"),
])
def test_partition_device_path(device, index, expected):
    assert partition_device_path(device, index) == expected
    assert DeviceTarget(device=device).partition_path(index) == expected


def test_partition_device_path_rejects_index_zero():
    with pytest.raises(ValueError):
        partition_device_path("/dev/sda", 0)


def test_device_target_infix():
    assert DeviceTarget(device="/dev/nvme0n1").uses_p_infix
    assert not DeviceTarget(device="/dev/sda").uses_p_infix
    assert str(DeviceTarget(device="/dev/sda")) == "/dev/sda"


LSBLK_DISKS = """\
/dev/sda     465.8G disk
/dev/sdb      28.9G disk
/dev/sr0      1024M rom
/dev/nvme0n1 953.9G disk
/dev/loop0    73.9M loop
"""


def test_parse_block_devices_keeps_disks_only():
    devices = parse_block_devices(LSBLK_DISKS)
    assert [device.name for device in devices] == ["/dev/sda", "/dev/sdb", "/dev/nvme0n1"]
    assert devices[0] == BlockDevice(name="/dev/sda", size="465.8G", type="disk")


def test_parse_block_devices_ignores_short_lines():
    assert parse_block_devices("\n/dev/sda\n") == []


def test_exclude_system_disk():
    devices = parse_block_devices(LSBLK_DISKS)
    remaining = exclude_system_disk(devices, "/dev/nvme0n1")
    assert [device.name for device in remaining] == ["/dev/sda", "/dev/sdb"]
    assert exclude_system_disk(devices, None) == devices


def test_parse_mounted_partitions():
    output = """\
/dev/sdb
/dev/sdb1 /run/media/usb
/dev/sdb2
/dev/sdb3 /mnt/my data
"""
    assert parse_mounted_partitions(output) == [
        ("/dev/sdb1", "/run/media/usb"),
        ("/dev/sdb3", "/mnt/my data"),
    ]


def test_mount_request_targets():
    request = MountRequest(
        swap_device="/dev/sda2", root_device="/dev/sda3", efi_device="/dev/sda1",
        custom=(CustomMount(device="/dev/sda4", mount_point="/home"),),
        mount_root="/mnt/gentoo/",
    )
    assert request.efi_target == "/mnt/gentoo/efi"
    assert request.target_for("/var/log") == "/mnt/gentoo/var/log"
    assert request.summary_lines()[-1] == "Custom Partition 1: /dev/sda4 mounted at /home"


@pytest.mark.parametrize("mount_point", ["home", "/", "//"])
def test_custom_mount_requires_absolute_mount_point(mount_point):
    with pytest.raises(pydantic.ValidationError):
        CustomMount(device="/dev/sda4", mount_point=mount_point)
