# pure_disk/plan.py
from typing import List, Optional, Tuple

from pure_disk.models import (
    Filesystem, FixedSize, PartitionPlan, PartitionRole, PartitionSpec, Size,
)
from pure_disk.utils.exceptions import (
    DuplicateRemainingSpace, IncompletePlanError, InvalidFilesystemForRole, InvalidSizeFormat,
    PlanAlreadyFinalized, PlanOrderError, RemainingSpaceNotLast,
)

FIXED_ROLES = (PartitionRole.EFI, PartitionRole.SWAP)
SIZED_ROLES = (PartitionRole.ROOT, PartitionRole.HOME, PartitionRole.CUSTOM)

# Roles that must already be in the plan, in order, before a role may be added.
PREDECESSORS = {
    PartitionRole.EFI: (),
    PartitionRole.SWAP: (PartitionRole.EFI,),
    PartitionRole.ROOT: (PartitionRole.EFI, PartitionRole.SWAP),
    PartitionRole.HOME: (PartitionRole.EFI, PartitionRole.SWAP, PartitionRole.ROOT),
}


class PlanBuilder:
    """
    Accumulates PartitionSpecs in table order and hands out an immutable
    PartitionPlan once the operator confirms.

    EFI, Swap and Root take partitions 1-3, Home takes 4 when present, and
    custom partitions follow. Each spec gets the next sequential index.
    """

    def __init__(self):
        self._specs: List[PartitionSpec] = []
        self._plan: Optional[PartitionPlan] = None

    @property
    def specs(self) -> Tuple[PartitionSpec, ...]:
        return tuple(self._specs)

    @property
    def finalized(self) -> bool:
        return self._plan is not None

    @property
    def next_index(self) -> int:
        return len(self._specs) + 1

    @property
    def remaining_space_used(self) -> bool:
        return any(spec.size.is_remaining for spec in self._specs)

    def has_role(self, role: PartitionRole) -> bool:
        return any(spec.role == role for spec in self._specs)

    def add_fixed_role(self, role: PartitionRole, size: Size, filesystem: Filesystem) -> PartitionSpec:
        """Adds the EFI or Swap partition. Both need an explicit size."""
        if role not in FIXED_ROLES:
            raise PlanOrderError(f"{role.value} is not a fixed-size role; use add_sized_role().")
        if not isinstance(size, FixedSize):
            raise InvalidSizeFormat(str(size), f"The {role.value} partition requires a fixed size (e.g. 512M, 8G).")
        return self._add(role, size, filesystem)

    def add_sized_role(self, role: PartitionRole, size: Size, filesystem: Filesystem,
                       name: Optional[str] = None) -> PartitionSpec:
        """Adds Root, Home or a custom partition. `size` may be REMAINING_SPACE."""
        if role not in SIZED_ROLES:
            raise PlanOrderError(f"{role.value} is a fixed-size role; use add_fixed_role().")
        return self._add(role, size, filesystem, name)

    def finalize(self) -> PartitionPlan:
        """Freezes the plan. Further additions fail with PlanAlreadyFinalized."""
        if self._plan is not None:
            return self._plan

        missing = [role.value for role in (PartitionRole.EFI, PartitionRole.SWAP, PartitionRole.ROOT)
                   if not self.has_role(role)]
        if missing:
            raise IncompletePlanError(f"The plan is missing required partition(s): {', '.join(missing)}.")

        self._plan = PartitionPlan(specs=tuple(self._specs))
        return self._plan

    # --- internals ---

    def _add(self, role: PartitionRole, size: Size, filesystem: Filesystem,
             name: Optional[str] = None) -> PartitionSpec:
        if self._plan is not None:
            raise PlanAlreadyFinalized()

        self._check_order(role)
        self._check_filesystem(role, filesystem)
        self._check_remaining(size)

        if role == PartitionRole.CUSTOM:
            name = (name or "").strip()
            if not name:
                raise PlanOrderError("Custom partitions require a name (e.g. /var).")
        else:
            name = None

        spec = PartitionSpec(index=self.next_index, role=role, size=size, filesystem=filesystem, name=name)
        self._specs.append(spec)
        return spec

    def _check_order(self, role: PartitionRole):
        roles = [spec.role for spec in self._specs]

        if role == PartitionRole.CUSTOM:
            if PartitionRole.ROOT not in roles:
                raise PlanOrderError("Custom partitions can only be added after the Root partition.")
            return

        expected = list(PREDECESSORS[role])
        if roles != expected:
            if role in roles:
                raise PlanOrderError(f"The {role.value} partition has already been added.")
            raise PlanOrderError(
                f"The {role.value} partition must follow {', '.join(r.value for r in expected) or 'nothing'}; "
                f"the plan currently holds: {', '.join(r.value for r in roles) or 'nothing'}."
            )

    @staticmethod
    def _check_filesystem(role: PartitionRole, filesystem: Filesystem):
        if role == PartitionRole.EFI and filesystem != Filesystem.FAT32:
            raise InvalidFilesystemForRole(role.value, filesystem.value)
        if role == PartitionRole.SWAP and filesystem != Filesystem.SWAP:
            raise InvalidFilesystemForRole(role.value, filesystem.value)
        if role != PartitionRole.SWAP and filesystem == Filesystem.SWAP:
            raise InvalidFilesystemForRole(role.value, filesystem.value)
        if role == PartitionRole.HOME and filesystem == Filesystem.FAT32:
            raise InvalidFilesystemForRole(role.value, filesystem.value)

    def _check_remaining(self, size: Size):
        holder = next((spec for spec in self._specs if spec.size.is_remaining), None)
        if holder is None:
            return
        if size.is_remaining:
            raise DuplicateRemainingSpace(holder.index)
        raise RemainingSpaceNotLast(holder.index)
