import shutil
import subprocess
from logging import getLogger
from pathlib import Path
from typing import Optional, Union

from attr import dataclass, field

log = getLogger(__name__)


class AzCmd:
    """Builder for Azure CLI commands."""

    def __init__(self, service: str, action: str):
        """Initialize with service and action (e.g., 'functionapp', 'show')."""
        self.cmd = [service] + action.split()

    def param(self, key: str, value: str) -> "AzCmd":
        """Adds a key-value pair parameter"""
        self.cmd.extend([key, value])
        return self


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandFailed(Exception):
    def __init__(self, result: CommandResult):
        self.result = result
        super().__init__(
            f"Command failed with exit code {result.returncode}: "
            f"{' '.join(result.args)}"
        )


@dataclass
class CommandRunner:
    """
    Runs external commands synchronously. No timeout or retry is applied;
    both belong to the invoked tool.
    """

    env: Optional[dict[str, str]] = None
    history: list[list[str]] = field(factory=list)

    def run(
        self,
        args: list[str],
        cwd: Optional[Union[str, Path]] = None,
        capture: bool = True,
    ) -> CommandResult:
        """
        Run a command and return its result. With `capture=False` the command
        talks to the terminal directly (interactive prompts stay visible) and
        the result carries no output.
        """
        log.debug(f"Running: {' '.join(args)}")
        self.history.append(list(args))

        # az is a .cmd shim on Windows, resolve it through PATH
        executable = shutil.which(args[0]) or args[0]
        try:
            completed = subprocess.run(
                [executable, *args[1:]],
                capture_output=capture,
                text=True,
                cwd=cwd,
                env=self.env,
            )
        except FileNotFoundError as e:
            return CommandResult(args=list(args), returncode=127, stderr=str(e))

        return CommandResult(
            args=list(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def az(self, az_cmd: AzCmd, capture: bool = True) -> CommandResult:
        return self.run(["az", *az_cmd.cmd], capture=capture)

    def check(
        self, args: list[str], cwd: Optional[Union[str, Path]] = None
    ) -> CommandResult:
        """Run a command and raise `CommandFailed` on a non-zero exit."""
        result = self.run(args, cwd=cwd)
        if not result.ok:
            log.error(f"Command failed: {' '.join(args)}")
            if result.stderr:
                log.error(result.stderr.strip())
            raise CommandFailed(result)
        return result

    def check_az(self, az_cmd: AzCmd) -> CommandResult:
        return self.check(["az", *az_cmd.cmd])
