"""
External command execution for pihole-ha.

Package manager, service manager and journal queries all go through
``CommandRunner`` so the apply pipeline can be exercised with a fake.
"""

from __future__ import annotations

import asyncio

from dataclasses import dataclass

import structlog

logger = structlog.get_logger(__name__)

# Return codes follow shell conventions
NOT_EXECUTABLE_RETURNCODE = 126
NOT_FOUND_RETURNCODE = 127
TIMEOUT_RETURNCODE = 124


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return " ".join(self.args)


class CommandRunner:
    """Runs external commands one at a time."""

    def __init__(self, timeout: float = 300.0) -> None:
        """
        Initialize command runner.

        Args:
            timeout: Timeout for each command in seconds
        """
        self.timeout: float = timeout

    async def run(self, *args: str, timeout: float | None = None) -> CommandResult:
        """Run a command and capture its output.

        Never raises for a failing command: a missing executable or a
        timeout are reported through the return code.
        """
        limit = self.timeout if timeout is None else timeout
        logger.debug("Running command", command=" ".join(args))

        try:
            process: asyncio.subprocess.Process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.error("Command not found", command=args[0])
            return CommandResult(args, NOT_FOUND_RETURNCODE, "", f"{args[0]}: command not found")
        except PermissionError as e:
            logger.error("Command not executable", command=args[0], error=str(e))
            return CommandResult(args, NOT_EXECUTABLE_RETURNCODE, "", str(e))

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=limit)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.error("Command timed out", command=" ".join(args), timeout=limit)
            return CommandResult(args, TIMEOUT_RETURNCODE, "", f"timed out after {limit}s")

        result = CommandResult(
            args,
            process.returncode if process.returncode is not None else 1,
            stdout.decode(errors="replace"),
            stderr.decode(errors="replace"),
        )

        if not result.ok:
            logger.debug(
                "Command failed",
                command=result.command_line,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result
