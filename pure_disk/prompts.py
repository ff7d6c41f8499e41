# pure_disk/prompts.py
"""
Interactive questions for the partition and mount tools.

Every question and answer is written to the run log at DEBUG level (file
only). Validation errors never leave this module: the operator is asked again.
"""
from typing import List, Optional, Sequence, Tuple

from rich.prompt import Confirm, Prompt
from rich.rule import Rule
from rich.table import Table

from pure_disk.config.models import PureDiskConfig
from pure_disk.models import (
    BlockDevice, CustomMount, DeviceTarget, Filesystem, MountRequest, PartitionPlan, PartitionRole,
    plan_summary_lines,
)
from pure_disk.plan import PlanBuilder
from pure_disk.sizes import parse_size, parse_size_or_default
from pure_disk.utils.exceptions import InvalidChoiceError, NoDisksAvailable, UserAbort, ValidationError
from pure_disk.utils.logger import RichAppLogger

FILESYSTEM_DESCRIPTIONS = {
    Filesystem.EXT4: "common default, stable, widely supported",
    Filesystem.XFS: "high performance, good for large storage",
    Filesystem.BTRFS: "advanced features, snapshots",
    Filesystem.FAT32: "required for EFI partitions",
    Filesystem.NTFS: "Windows compatibility",
    Filesystem.EXFAT: "cross-platform compatibility",
}

# fat32 is never offered for Root or Home
SYSTEM_FILESYSTEMS = (Filesystem.EXT4, Filesystem.XFS, Filesystem.BTRFS, Filesystem.NTFS, Filesystem.EXFAT)
CUSTOM_FILESYSTEMS = (Filesystem.EXT4, Filesystem.XFS, Filesystem.BTRFS, Filesystem.FAT32,
                      Filesystem.NTFS, Filesystem.EXFAT)

QUIT_ANSWERS = ("q", "Q")


class Prompter:
    def __init__(self, logger: RichAppLogger):
        self.logger = logger
        self.console = logger.console

    # --- primitives ---

    def ask(self, question: str, default: str = "") -> str:
        answer = Prompt.ask(f"[yellow]{question}[/]", default=default, show_default=bool(default),
                            console=self.console)
        answer = (answer or "").strip()
        self.logger.debug(f"Prompt: {question} -> '{answer}'")
        return answer

    def ask_yes_no(self, question: str, default: bool) -> bool:
        answer = Confirm.ask(f"[yellow]{question}[/]", default=default, console=self.console)
        self.logger.debug(f"Prompt: {question} -> {'yes' if answer else 'no'}")
        return answer

    def reject(self, error: Exception) -> None:
        """Reports a validation error; the caller asks again."""
        self.logger.print(f"[red]{error}[/]")
        self.logger.debug(f"Rejected answer: {error}")

    # --- disk selection ---

    def select_disk(self, devices: Sequence[BlockDevice]) -> DeviceTarget:
        if not devices:
            raise NoDisksAvailable("No available disks found (excluding system disk).")

        table = Table(title="Available drives")
        table.add_column("Index", justify="right", style="cyan", no_wrap=True)
        table.add_column("Device Name", style="green")
        table.add_column("Size", style="green")
        table.add_column("Type", style="green")
        for i, device in enumerate(devices, start=1):
            table.add_row(str(i), device.name, device.size, device.type)
        self.logger.print(table)

        while True:
            answer = self.ask("Select a disk by number (or 'q' to quit)")
            if answer in QUIT_ANSWERS:
                raise UserAbort("Aborted by user.")
            try:
                device = devices[self._menu_index(answer, len(devices))]
            except InvalidChoiceError as e:
                self.reject(e)
                continue
            self.logger.info(f"Selected disk: {device.name}")
            return DeviceTarget(device=device.name)

    def confirm_unknown_system_disk(self) -> None:
        self.logger.warning("Could not determine the system disk; it may appear in the list below.")
        if not self.ask_yes_no("Continue without excluding the system disk?", default=False):
            raise UserAbort("Aborted by user.")

    def confirm_mounted_disk(self, device: str, mounted: Sequence[Tuple[str, str]]) -> None:
        self.logger.warning(f"The selected disk {device} has mounted partitions:")
        for name, mount_point in mounted:
            self.logger.warning(f"  {name} on {mount_point}")
        if not self.ask_yes_no("Are you sure you want to continue?", default=False):
            raise UserAbort("Aborted by user.")

    # --- partition plan ---

    def select_filesystem(self, label: str, choices: Sequence[Filesystem] = SYSTEM_FILESYSTEMS) -> Filesystem:
        self.logger.print(f"[blue]Choose a filesystem type for {label}:[/]")
        for i, filesystem in enumerate(choices, start=1):
            self.logger.print(f"  [green]{i})[/] {filesystem.value:<6} ({FILESYSTEM_DESCRIPTIONS[filesystem]})")

        while True:
            answer = self.ask(f"Enter your choice (1-{len(choices)})", default="1")
            try:
                filesystem = choices[self._menu_index(answer, len(choices))]
            except InvalidChoiceError as e:
                self.reject(e)
                continue
            self.logger.info(f"Using {filesystem.value} for {label}.")
            return filesystem

    def ask_size(self, question: str, default: Optional[str] = None, allow_remaining: bool = False):
        while True:
            answer = self.ask(question, default=default or "")
            try:
                if default:
                    return parse_size_or_default(answer, default, allow_remaining=allow_remaining)
                return parse_size(answer, allow_remaining=allow_remaining)
            except ValidationError as e:
                self.reject(e)

    def gather_plan(self, config: PureDiskConfig) -> PlanBuilder:
        """Asks for every partition and returns the (not yet finalized) builder."""
        builder = PlanBuilder()
        self.logger.print("[blue]Specify partition sizes (with unit, e.g. 512M or 8G).[/]")
        self.logger.print("[blue]Press Enter to use defaults where shown.[/]")

        size = self.ask_size("EFI partition size", default=config.efi_default_size)
        builder.add_fixed_role(PartitionRole.EFI, size, Filesystem.FAT32)
        self.logger.info("Using fat32 for EFI.")

        size = self.ask_size("Swap partition size", default=config.swap_default_size)
        builder.add_fixed_role(PartitionRole.SWAP, size, Filesystem.SWAP)
        self.logger.info("Using swap for Swap.")

        self.logger.print("[blue]Enter '0' or leave blank to use all remaining space.[/]")
        size = self.ask_size("Root partition size [default: remaining space]", allow_remaining=True)
        if size.is_remaining:
            self.logger.info("Root partition will use the remaining space.")
        builder.add_sized_role(PartitionRole.ROOT, size, self.select_filesystem("Root"))

        if builder.remaining_space_used:
            self.logger.info("Root uses the remaining space; no further partitions can be added.")
            return builder

        if self.ask_yes_no("Create a separate home partition?", default=False):
            size = self.ask_size("Home partition size (e.g. 50G)")
            builder.add_sized_role(PartitionRole.HOME, size, self.select_filesystem("Home"))

        if self.ask_yes_no("Do you want to add custom partitions?", default=False):
            while True:
                self._add_custom_partition(builder)
                if builder.remaining_space_used:
                    self.logger.info("The last custom partition uses the remaining space; no more can be added.")
                    break
                if not self.ask_yes_no("Add another custom partition?", default=False):
                    break

        return builder

    def _add_custom_partition(self, builder: PlanBuilder) -> None:
        index = builder.next_index
        while True:
            name = self.ask(f"Enter name for partition {index} (e.g. /var, /tmp)")
            if not name:
                self.reject(InvalidChoiceError("A partition name is required."))
                continue
            size = self.ask_size(f"Enter size for {name} (e.g. 10G, 500M, or '0' for remaining space)",
                                 allow_remaining=True)
            filesystem = self.select_filesystem(name, CUSTOM_FILESYSTEMS)
            try:
                builder.add_sized_role(PartitionRole.CUSTOM, size, filesystem, name=name)
            except ValidationError as e:
                self.reject(e)
                continue
            return

    def confirm_plan(self, device: str, builder: PlanBuilder) -> PartitionPlan:
        """Shows the summary; the plan is finalized only when the operator agrees."""
        self._summary(plan_summary_lines(device, builder.specs))
        if not self.ask_yes_no("Proceed with these settings?", default=True):
            raise UserAbort("Aborted.")
        self.logger.info("Proceeding...")
        return builder.finalize()

    # --- mount request ---

    def ask_device(self, question: str) -> str:
        while True:
            answer = self.ask(question)
            if answer.startswith("/dev/") and len(answer) > len("/dev/"):
                return answer
            self.reject(InvalidChoiceError(f"'{answer}' is not a device path (e.g. /dev/sda1)."))

    def ask_mount_point(self, device: str) -> str:
        while True:
            answer = self.ask(f"Enter mount point for {device} (e.g. /home, /var)")
            if answer.startswith("/") and answer.strip("/"):
                return answer
            self.reject(InvalidChoiceError(f"'{answer}' is not an absolute mount point below the root."))

    def gather_mount_request(self, config: PureDiskConfig) -> MountRequest:
        swap = self.ask_device("Enter the swap partition (e.g. /dev/sda2)")
        root = self.ask_device("Enter the root partition (e.g. /dev/sda3)")
        efi = self.ask_device("Enter the EFI partition (e.g. /dev/sda1)")

        custom: List[CustomMount] = []
        if self.ask_yes_no("Do you have custom partitions to mount?", default=False):
            while True:
                device = self.ask_device(f"Enter custom partition {len(custom) + 1} (e.g. /dev/sda4)")
                custom.append(CustomMount(device=device, mount_point=self.ask_mount_point(device)))
                if not self.ask_yes_no("Add another custom partition?", default=False):
                    break

        return MountRequest(
            swap_device=swap, root_device=root, efi_device=efi, custom=tuple(custom), mount_root=config.mount_root,
        )

    def confirm_mount_request(self, request: MountRequest) -> None:
        self._summary(request.summary_lines())
        if not self.ask_yes_no("Proceed with activating and mounting partitions?", default=True):
            raise UserAbort("Aborted by user.")
        self.logger.info("Proceeding...")

    # --- helpers ---

    def _summary(self, lines: Sequence[str]) -> None:
        self.logger.print(Rule("SUMMARY", style="yellow"))
        for line in lines:
            self.logger.info(line)
        self.logger.print(Rule(style="yellow"))

    @staticmethod
    def _menu_index(answer: str, count: int) -> int:
        if answer.isascii() and answer.isdigit() and 1 <= int(answer) <= count:
            return int(answer) - 1
        raise InvalidChoiceError(f"Invalid choice '{answer}'. Please enter a number between 1 and {count}.")
