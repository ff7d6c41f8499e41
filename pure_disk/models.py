# pure_disk/models.py

from enum import Enum
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- 1. Enumerations ---

class PartitionRole(str, Enum):
    EFI = "efi"
    SWAP = "swap"
    ROOT = "root"
    HOME = "home"
    CUSTOM = "custom"


class Filesystem(str, Enum):
    FAT32 = "fat32"
    EXT4 = "ext4"
    XFS = "xfs"
    BTRFS = "btrfs"
    NTFS = "ntfs"
    EXFAT = "exfat"
    SWAP = "swap"


# Fixed table positions. Custom partitions follow the last fixed role.
ROLE_INDEX = {
    PartitionRole.EFI: 1,
    PartitionRole.SWAP: 2,
    PartitionRole.ROOT: 3,
    PartitionRole.HOME: 4,
}

# GPT type codes as understood by sgdisk
TYPE_CODES = {
    PartitionRole.EFI: "ef00",
    PartitionRole.SWAP: "8200",
    PartitionRole.ROOT: "8300",
    PartitionRole.HOME: "8300",
    PartitionRole.CUSTOM: "8300",
}

GPT_LABELS = {
    PartitionRole.EFI: "EFI System",
    PartitionRole.SWAP: "Linux Swap",
    PartitionRole.ROOT: "Linux Root",
    PartitionRole.HOME: "Linux Home",
}

UNIT_BYTES = {"M": 2 ** 20, "G": 2 ** 30}


# --- 2. Sizes ---

class FixedSize(BaseModel):
    """An explicit partition size, e.g. 512M or 8G (binary multiples)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed"] = "fixed"
    magnitude: int = Field(ge=0)
    unit: Literal["M", "G"]

    @property
    def bytes(self) -> int:
        return self.magnitude * UNIT_BYTES[self.unit]

    @property
    def sgdisk_end(self) -> str:
        return f"+{self.magnitude}{self.unit}"

    @property
    def is_remaining(self) -> bool:
        return False

    def __str__(self):
        return f"{self.magnitude}{self.unit}"


class RemainingSpace(BaseModel):
    """Sentinel size: extend to the end of the free space on the device."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["remaining"] = "remaining"

    @property
    def sgdisk_end(self) -> str:
        # sgdisk treats an end of 0 as "last usable sector"
        return "0"

    @property
    def is_remaining(self) -> bool:
        return True

    def __str__(self):
        return "remaining space"


REMAINING_SPACE = RemainingSpace()

Size = Union[FixedSize, RemainingSpace]


# --- 3. Partition records ---

class PartitionSpec(BaseModel):
    """One planned partition. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    role: PartitionRole
    size: Size
    filesystem: Filesystem
    name: Optional[str] = None

    @model_validator(mode="after")
    def _check_name(self) -> "PartitionSpec":
        if self.role == PartitionRole.CUSTOM:
            if not self.name or not self.name.strip():
                raise ValueError("Custom partitions require a name.")
        elif self.name is not None:
            raise ValueError(f"Only custom partitions carry a name, not {self.role.value}.")
        return self

    @property
    def type_code(self) -> str:
        return TYPE_CODES[self.role]

    @property
    def gpt_label(self) -> str:
        if self.role == PartitionRole.CUSTOM:
            return f"Linux {self.name}"
        return GPT_LABELS[self.role]

    @property
    def volume_label(self) -> str:
        """Filesystem label: 'root', 'home', or the custom name without leading slashes."""
        if self.role == PartitionRole.CUSTOM:
            return self.name.lstrip("/")
        return self.role.value

    @property
    def display_name(self) -> str:
        if self.role == PartitionRole.CUSTOM:
            return self.name
        return {
            PartitionRole.EFI: "EFI",
            PartitionRole.SWAP: "Swap",
            PartitionRole.ROOT: "Root",
            PartitionRole.HOME: "Home",
        }[self.role]


def plan_summary_lines(device: str, specs) -> List[str]:
    """Plain-text summary, one line per partition, for the log file and the TUI."""
    lines = [f"Disk: {device}"]
    for spec in specs:
        lines.append(f"{spec.index}. {spec.display_name} partition: {spec.size} ({spec.filesystem.value})")
    return lines


class PartitionPlan(BaseModel):
    """
    Ordered, finalized partition layout for one device.

    Built by PlanBuilder; the validator re-checks the layout rules so that a
    plan assembled by hand cannot bypass them.
    """
    model_config = ConfigDict(frozen=True)

    specs: Tuple[PartitionSpec, ...]

    @model_validator(mode="after")
    def _check_layout(self) -> "PartitionPlan":
        leading = [spec.role for spec in self.specs[:3]]
        if leading != [PartitionRole.EFI, PartitionRole.SWAP, PartitionRole.ROOT]:
            raise ValueError("A plan must start with the EFI, Swap and Root partitions.")

        indices = [spec.index for spec in self.specs]
        if indices != list(range(1, len(self.specs) + 1)):
            raise ValueError(f"Partition indices must be contiguous from 1, got {indices}.")

        for spec in self.specs:
            expected = ROLE_INDEX.get(spec.role)
            if expected is not None and spec.index != expected:
                raise ValueError(f"{spec.display_name} must be partition {expected}, not {spec.index}.")

        remaining = [spec.index for spec in self.specs if spec.size.is_remaining]
        if len(remaining) > 1:
            raise ValueError(f"Only one partition may use the remaining space, got {remaining}.")
        if remaining and remaining[0] != len(self.specs):
            raise ValueError(f"Partition {remaining[0]} uses the remaining space but is not the last partition.")
        return self

    @property
    def filesystems(self) -> List[Filesystem]:
        return [spec.filesystem for spec in self.specs]

    def summary_lines(self, device: str) -> List[str]:
        return plan_summary_lines(device, self.specs)


# --- 4. Device target ---

def partition_device_path(device: str, index: int) -> str:
    """
    Device node of partition `index` on `device`.

    Devices whose name ends in a digit (nvme0n1, mmcblk0, loop0) take a 'p'
    infix before the partition number.
    """
    if index < 1:
        raise ValueError(f"Partition index must be >= 1, got {index}.")
    if device[-1:].isdigit():
        return f"{device}p{index}"
    return f"{device}{index}"


class DeviceTarget(BaseModel):
    """The selected block device."""
    model_config = ConfigDict(frozen=True)

    device: str = Field(min_length=1)

    @property
    def uses_p_infix(self) -> bool:
        return self.device[-1:].isdigit()

    def partition_path(self, index: int) -> str:
        return partition_device_path(self.device, index)

    def __str__(self):
        return self.device


class BlockDevice(BaseModel):
    """One row of `lsblk -d -p -n -o NAME,SIZE,TYPE`."""
    model_config = ConfigDict(frozen=True)

    name: str
    size: str
    type: str


# --- 5. Mount request ---

class CustomMount(BaseModel):
    model_config = ConfigDict(frozen=True)

    device: str
    mount_point: str

    @model_validator(mode="after")
    def _check_mount_point(self) -> "CustomMount":
        if not self.mount_point.startswith("/") or self.mount_point.strip("/") == "":
            raise ValueError(f"Mount point must be an absolute path below the root, got '{self.mount_point}'.")
        return self


class MountRequest(BaseModel):
    """Raw device paths typed by the operator for the mount tool."""
    model_config = ConfigDict(frozen=True)

    swap_device: str
    root_device: str
    efi_device: str
    custom: Tuple[CustomMount, ...] = ()
    mount_root: str = "/mnt/gentoo"

    def target_for(self, mount_point: str) -> str:
        """Absolute path of `mount_point` beneath the mount root."""
        return self.mount_root.rstrip("/") + "/" + mount_point.lstrip("/")

    @property
    def efi_target(self) -> str:
        return self.target_for("efi")

    def summary_lines(self) -> List[str]:
        lines = [
            f"Swap Partition: {self.swap_device}",
            f"Root Partition: {self.root_device}",
            f"EFI Partition: {self.efi_device}",
        ]
        for i, mount in enumerate(self.custom, start=1):
            lines.append(f"Custom Partition {i}: {mount.device} mounted at {mount.mount_point}")
        return lines
