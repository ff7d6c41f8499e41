# pure_disk/utils/exceptions.py
from typing import NamedTuple, Optional


# --- Shell command errors (raised by the Executor) ---

class ShellCommandError(Exception):
    """Base class for errors related to shell command execution."""

    def __init__(self, command: str, exit_code: int = -1, stdout: str = "", stderr: str = "", message: str = "Command execution failed."):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"{message} (Command: '{command}', Exit Code: {exit_code})")


class CommandNotFoundError(ShellCommandError):
    """Raised when the executable specified in the command cannot be found."""

    def __init__(self, command: str, stdout: str = "", stderr: str = ""):
        super().__init__(command, exit_code=127, stdout=stdout, stderr=stderr, message="Command not found.")


class InvalidCommandError(ShellCommandError):
    """Raised when the command string/list is invalid, empty, or improperly formatted."""

    def __init__(self, command: str, message: str):
        super().__init__(command, exit_code=-2, message=message)


class PermissionDeniedError(ShellCommandError):
    """Raised when command execution fails due to permissions."""

    def __init__(self, command: str, stdout: str = "", stderr: str = ""):
        super().__init__(command, exit_code=126, stdout=stdout, stderr=stderr, message="Permission denied.")


# --- Application errors ---

class PureDiskError(Exception):
    """Base class for every pure-disk application error."""


class UserAbort(PureDiskError):
    """The operator chose to quit. Not a failure: the tool exits with code 0."""


# Validation errors are recoverable: the prompt layer re-prompts on them.

class ValidationError(PureDiskError):
    """Base class for operator input and plan construction errors."""


class InvalidSizeFormat(ValidationError):
    def __init__(self, token: str, reason: str = "Use numbers followed by M or G (e.g. 512M, 8G)."):
        self.token = token
        super().__init__(f"Invalid size format '{token}'. {reason}")


class DuplicateRemainingSpace(ValidationError):
    def __init__(self, existing_index: int):
        self.existing_index = existing_index
        super().__init__(
            f"Partition {existing_index} already uses the remaining space; "
            "only one partition may do so."
        )


class RemainingSpaceNotLast(ValidationError):
    def __init__(self, existing_index: int):
        self.existing_index = existing_index
        super().__init__(
            f"Partition {existing_index} consumes the remaining space and must be the last partition."
        )


class InvalidFilesystemForRole(ValidationError):
    def __init__(self, role: str, filesystem: str):
        self.role = role
        self.filesystem = filesystem
        super().__init__(f"Filesystem '{filesystem}' is not allowed for the {role} partition.")


class PlanOrderError(ValidationError):
    """A role was added out of its fixed position in the plan."""


class IncompletePlanError(ValidationError):
    """The plan is missing one of the mandatory EFI, Swap or Root partitions."""


class PlanAlreadyFinalized(ValidationError):
    def __init__(self):
        super().__init__("The partition plan has been finalized and can no longer be changed.")


class InvalidChoiceError(ValidationError):
    """A menu answer, device path or mount point did not validate."""


# Fatal errors.

class DependencyMissingError(PureDiskError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Required command(s) not installed: {', '.join(self.missing)}")


class PrivilegeError(PureDiskError):
    """The mount tool was started without root privileges."""


class LayoutStateError(PureDiskError):
    """A layout executor was run from a state other than UNWIPED."""


class Failure(NamedTuple):
    """Terminal failure record: the stage that failed and, where relevant, the partition index."""
    stage: str
    index: Optional[int] = None

    def __str__(self):
        if self.index is None:
            return self.stage
        return f"{self.stage}: {self.index}"


class DestructiveStepError(PureDiskError):
    """
    A wipe, create, refresh, format, swap or mount step failed.

    The device may be left partially modified. There is no retry and no rollback.
    """

    def __init__(self, failure: Failure, detail: str = ""):
        self.failure = failure
        self.detail = detail
        message = f"Step failed ({failure})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnsupportedFilesystemForRole(DestructiveStepError):
    def __init__(self, index: int, role: str, filesystem: str):
        self.role = role
        self.filesystem = filesystem
        super().__init__(
            Failure("format", index),
            f"{role} partition cannot be formatted as {filesystem}",
        )


class SwapActivationFailed(DestructiveStepError):
    def __init__(self, device: str, detail: str = ""):
        self.device = device
        super().__init__(Failure("swap"), f"could not activate swap on {device}. {detail}".strip())


class MountFailed(DestructiveStepError):
    def __init__(self, path: str, detail: str = ""):
        self.path = path
        super().__init__(Failure("mount"), f"{path}. {detail}".strip())


class NoDisksAvailable(PureDiskError):
    """No candidate disk is left once the system disk is excluded."""
