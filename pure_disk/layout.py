# pure_disk/layout.py
from enum import Enum
from typing import Optional

from pure_disk.executors.disk import DiskOperations
from pure_disk.models import DeviceTarget, PartitionPlan
from pure_disk.utils.exceptions import DestructiveStepError, Failure, LayoutStateError, ShellCommandError
from pure_disk.utils.logger import RichAppLogger

# sgdisk start sector '0' means "next free sector"
NEXT_FREE_SECTOR = "0"


class LayoutState(str, Enum):
    UNWIPED = "unwiped"
    WIPED = "wiped"
    PARTITIONS_CREATED = "partitions_created"
    TABLE_REFRESHED = "table_refreshed"
    FAILED = "failed"


class Stage(str, Enum):
    WIPE = "wipe"
    CREATE_PARTITION = "createPartition"
    REFRESH = "refresh"


class LayoutExecutor:
    """
    Writes a PartitionPlan to the target device.

    UNWIPED -> WIPED -> PARTITIONS_CREATED -> TABLE_REFRESHED, or FAILED from
    any state. Each partition's start depends on the previous one, so the first
    failure ends the run: nothing after it is attempted and nothing is retried.
    """

    def __init__(self, ops: DiskOperations, plan: PartitionPlan, target: DeviceTarget, logger: RichAppLogger):
        self.ops = ops
        self.plan = plan
        self.target = target
        self.logger = logger
        self.state = LayoutState.UNWIPED
        self.failure: Optional[Failure] = None

    def execute(self) -> LayoutState:
        """
        Runs every transition. Returns TABLE_REFRESHED on success.

        Raises:
            DestructiveStepError: a step failed; `state` is FAILED and `failure` names the stage.
            LayoutStateError: the executor has already run.
        """
        if self.state != LayoutState.UNWIPED:
            raise LayoutStateError(f"Layout executor already ran (state: {self.state.value}).")

        device = self.target.device
        self.logger.section(f"Partitioning disk {device}")

        self._step(Stage.WIPE, None, LayoutState.WIPED, lambda: self.ops.wipe_table(device))

        for spec in self.plan.specs:
            self._step(
                Stage.CREATE_PARTITION,
                spec.index,
                None,
                lambda spec=spec: self.ops.create_partition(
                    device, spec.index, NEXT_FREE_SECTOR, spec.size.sgdisk_end, spec.type_code, spec.gpt_label
                ),
            )
        self._transition(LayoutState.PARTITIONS_CREATED, Stage.CREATE_PARTITION)

        self._step(Stage.REFRESH, None, LayoutState.TABLE_REFRESHED, lambda: self.ops.refresh_table(device))
        return self.state

    def _step(self, stage: Stage, index: Optional[int], next_state: Optional[LayoutState], action):
        where = f"{stage.value}" if index is None else f"{stage.value} (partition {index})"
        try:
            action()
        except ShellCommandError as e:
            self.state = LayoutState.FAILED
            self.failure = Failure(stage.value, index)
            detail = e.stderr.strip() or str(e)
            self.logger.debug(f"Layout state {self.state.value} after {where}")
            raise DestructiveStepError(self.failure, detail) from e

        self.logger.info(f"Layout stage {where} succeeded.")
        if next_state is not None:
            self._transition(next_state, stage)

    def _transition(self, next_state: LayoutState, stage: Stage):
        self.logger.debug(f"Layout state {self.state.value} -> {next_state.value} after {stage.value}")
        self.state = next_state
