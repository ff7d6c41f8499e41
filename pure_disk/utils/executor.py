# pure_disk/utils/executor.py

import subprocess
import shlex
from typing import Tuple, Union, List

from pure_disk.utils.exceptions import (
    ShellCommandError, CommandNotFoundError, InvalidCommandError, PermissionDeniedError,
)
from pure_disk.utils.logger import RichAppLogger


class Executor:
    """
    Executes external commands with the injected RichAppLogger handling TUI
    feedback and the run log.

    No timeout is imposed: a command either runs to completion or fails.
    Nothing is ever retried.
    """

    def __init__(self, logger_instance: RichAppLogger):
        self.logger = logger_instance
        self.logger.debug("Executor initialized.")

    def _prepare_command(self, command: Union[str, list]) -> List[str]:
        """
        Prepares the command for execution by shlex.split if it's a string.
        """
        if not command:
            self.logger.error("Attempted to prepare an empty command.")
            raise InvalidCommandError(str(command), "Command cannot be empty.")

        if isinstance(command, str):
            try:
                return shlex.split(command)
            except ValueError as e:
                self.logger.error(f"Failed to parse command string '{command}': {e}")
                raise InvalidCommandError(command, f"Failed to parse command string: {e}")
        elif isinstance(command, list):
            if not all(isinstance(arg, str) for arg in command):
                raise InvalidCommandError(str(command), "All elements in command list must be strings.")
            return command

        self.logger.error(f"Invalid command type: {type(command)}. Expected str or list.")
        raise InvalidCommandError(str(command), "Command must be a string or a list of strings.")

    def execute_command(self,
                        command: Union[str, list],
                        check: bool = True,
                        ) -> Tuple[int, str, str]:
        """
        Executes a command using subprocess.run. This is the low-level execution method,
        used directly for read-only queries that need no progress display.
        """
        prepared = self._prepare_command(command)
        cmd_string_for_log = shlex.join(prepared)

        self.logger.debug(f"Attempting low-level execution: '{cmd_string_for_log}' check={check}")

        try:
            process = subprocess.run(
                prepared,
                capture_output=True,
                text=True,
                check=False
            )
        except FileNotFoundError:
            self.logger.error(f"Command '{cmd_string_for_log}' not found. Ensure it's in the system's PATH.")
            raise CommandNotFoundError(command=cmd_string_for_log, stdout="", stderr="Command not found. Check PATH.")
        except PermissionError as e:
            self.logger.error(f"Permission denied executing '{cmd_string_for_log}': {e}")
            raise PermissionDeniedError(command=cmd_string_for_log, stderr=str(e))
        except (TypeError, ValueError) as e:
            self.logger.error(f"Argument error during low-level command execution '{cmd_string_for_log}': {e}")
            raise InvalidCommandError(cmd_string_for_log, f"Argument error in command execution: {e}")

        stdout = process.stdout or ""
        stderr = process.stderr or ""
        exit_code = process.returncode

        if check and exit_code != 0:
            self.logger.error(f"Command: '{cmd_string_for_log}', Exit Code: {exit_code}, Stderr: {stderr.strip()}")

            if "command not found" in stderr.lower() or exit_code == 127:
                raise CommandNotFoundError(command=cmd_string_for_log, stdout=stdout, stderr=stderr)
            elif "permission denied" in stderr.lower() or exit_code == 126:
                raise PermissionDeniedError(command=cmd_string_for_log, stdout=stdout, stderr=stderr)
            raise ShellCommandError(
                command=cmd_string_for_log,
                exit_code=exit_code,
                stdout=stdout,
                stderr=stderr,
                message=f"Command failed with exit code {exit_code}"
            )

        self.logger.debug(f"Low-level execution of '{cmd_string_for_log}' completed with exit code {exit_code}")
        return exit_code, stdout, stderr

    def run(self,
            description: str,
            command: Union[str, list],
            check: bool = True,
            ) -> Tuple[int, str, str]:
        """
        Executes a command inside the logger's execution_step, which shows a
        progress spinner on the TUI and records RUNNING/COMPLETED/CRITICAL to the log.
        """
        prepared = self._prepare_command(command)

        with self.logger.execution_step(description):
            exit_code, stdout, stderr = self.execute_command(command=prepared, check=check)

            self.logger.debug(f"Command '{description}' completed. Output details:")
            for name, output in (("Stdout", stdout), ("Stderr", stderr)):
                for line in output.splitlines():
                    if line.strip():
                        self.logger.debug(f"  {name}: {line}")

            return exit_code, stdout, stderr
