import pytest
from unittest.mock import MagicMock

from pure_disk.utils.exceptions import ShellCommandError
from pure_disk.utils.logger import RichAppLogger


class FakeDiskOperations:
    """
    Records every DiskOperations call as a tuple (operation, *args).

    `fail_on` maps a call tuple (or its prefix) to the stderr of a
    ShellCommandError raised when that call is made.
    """

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = dict(fail_on or {})

    def _record(self, *call):
        self.calls.append(call)
        for key, stderr in self.fail_on.items():
            if call[:len(key)] == key:
                raise ShellCommandError(command=" ".join(str(c) for c in call), exit_code=1, stderr=stderr)

    def names(self):
        return [call[0] for call in self.calls]

    def wipe_table(self, device):
        self._record("wipe_table", device)

    def create_partition(self, device, index, start, end, type_code, label):
        self._record("create_partition", device, index, start, end, type_code, label)

    def refresh_table(self, device):
        self._record("refresh_table", device)

    def wipe_signatures(self, path):
        self._record("wipe_signatures", path)

    def make_filesystem(self, path, filesystem, label=None):
        self._record("make_filesystem", path, filesystem, label)

    def make_swap(self, path):
        self._record("make_swap", path)

    def activate_swap(self, device):
        self._record("activate_swap", device)

    def make_directory(self, path):
        self._record("make_directory", path)

    def mount_device(self, device, target):
        self._record("mount_device", device, target)

    def set_mode(self, path, mode):
        self._record("set_mode", path, mode)


@pytest.fixture
def mock_rich_logger():
    """Provides a fully-mocked RichAppLogger instance for dependency injection."""
    mock_logger = MagicMock(spec=RichAppLogger)
    mock_logger.console = MagicMock()

    mock_context_manager = MagicMock()
    mock_context_manager.__enter__.return_value = None
    mock_context_manager.__exit__.return_value = None
    mock_logger.execution_step.return_value = mock_context_manager

    return mock_logger


@pytest.fixture
def fake_ops():
    return FakeDiskOperations()


@pytest.fixture
def failing_ops():
    """Factory for a FakeDiskOperations whose calls matching `fail_on` raise ShellCommandError."""
    def factory(fail_on):
        return FakeDiskOperations(fail_on=fail_on)
    return factory
