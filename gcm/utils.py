import logging
import os
import subprocess
import time
from typing import Any, Dict, Iterator, List, Optional, Tuple

from rich.console import Console

from gcm.errors import ProcessError

__all__ = ["console", "logger", "SubprocessHandler"]

console = Console()

logger = logging.getLogger(__name__)


class SubprocessHandler:
    """Dedicated class for handling subprocess execution.

    Every external command gcm runs (git, ollama, the editor) goes through this
    class, so resource cleanup and error handling stay in one place.
    """

    def __init__(self, timeout: Optional[int] = None,
                 max_termination_retries: Optional[int] = None,
                 termination_wait: Optional[float] = None) -> None:
        """Initialize the SubprocessHandler with timeout and termination settings.

        Args:
            timeout: Maximum time in seconds to wait for a captured command.
                None means wait indefinitely.
            max_termination_retries: Maximum number of attempts to terminate a process.
            termination_wait: Time to wait between termination attempts in seconds.
        """
        self.timeout: Optional[int] = timeout
        self.max_termination_retries: int = max_termination_retries or 3
        self.termination_wait: float = termination_wait or 0.5

    @staticmethod
    def create_env() -> Dict[str, str]:
        """Create environment with explicit encoding settings for subprocess.

        Returns:
            Dict[str, str]: Environment variables dictionary with encoding settings.
        """
        env = os.environ.copy()
        env['PYTHONIOENCODING'] = 'utf-8'
        return env

    def run_command(self, command: List[str], timeout: Optional[int] = None) -> Tuple[str, str, int]:
        """Execute a command, wait for it and return its captured output.

        Args:
            command: Command to execute as a list of strings.
            timeout: Maximum time in seconds to wait for the process to complete.

        Returns:
            Tuple[str, str, int]: stdout, stderr, and return code.

        Raises:
            TimeoutError: If the process exceeds the timeout.
            OSError: If the command cannot be started.
        """
        timeout = timeout or self.timeout
        logger.debug("Running command: %s", " ".join(command))
        process: Optional[subprocess.Popen[Any]] = None
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
                env=self.create_env(),
            )
            stdout, stderr = process.communicate(timeout=timeout)
            return stdout, stderr, process.returncode
        except subprocess.TimeoutExpired:
            self._terminate_process(process)
            raise TimeoutError(f"Command timed out after {timeout} seconds: {' '.join(command)}")
        finally:
            self._cleanup_process(process)

    def run_attached(self, command: List[str], quiet: bool = False) -> int:
        """Run a command attached to the current terminal and return its exit code.

        Used for programs that talk to the user directly, such as an editor or
        ``ollama pull`` with its progress output.

        With ``quiet`` set the command's stdout is discarded.

        Raises:
            OSError: If the command cannot be started.
        """
        logger.debug("Running attached command: %s", " ".join(command))
        stdout = subprocess.DEVNULL if quiet else None
        return subprocess.run(command, stdout=stdout, check=False).returncode

    def stream_lines(self, command: List[str]) -> Iterator[str]:
        """Start a command and return an iterator over its stdout lines.

        The process is started eagerly so start-up failures surface here rather
        than on first iteration. Lines are yielded as soon as the process
        writes them, without their trailing newline.

        Raises:
            ProcessError: If the command cannot be started.
        """
        logger.debug("Streaming command: %s", command[:3])
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding='utf-8',
                errors='replace',
                bufsize=1,
                env=self.create_env(),
            )
        except OSError as e:
            raise ProcessError(f"Error starting command {command[0]!r}: {e}") from e
        return self._iter_stdout(process)

    def _iter_stdout(self, process: "subprocess.Popen[str]") -> Iterator[str]:
        try:
            assert process.stdout is not None
            for line in process.stdout:
                yield line.rstrip("\r\n")
            returncode = process.wait()
            if returncode:
                logger.warning("Command exited with status %s", returncode)
        finally:
            self._cleanup_process(process)

    def _terminate_process(self, process: Optional[subprocess.Popen[Any]]) -> None:
        """Terminate a process with multiple attempts if needed.

        Args:
            process: The subprocess.Popen object to terminate.
        """
        if process is None or process.poll() is not None:
            return

        # Try to terminate the process gracefully
        try:
            process.terminate()

            for _ in range(self.max_termination_retries):
                if process.poll() is not None:
                    return
                time.sleep(self.termination_wait)

            # If still running, kill it forcefully
            if process.poll() is None:
                process.kill()
        except OSError:
            # Process might already be gone
            logger.debug("Process %s already exited", process.pid)

    def _cleanup_process(self, process: Optional[subprocess.Popen[Any]]) -> None:
        """Clean up process resources.

        Args:
            process: The subprocess.Popen object to clean up.
        """
        if process is None:
            return

        # Close file descriptors
        for fd in [process.stdout, process.stderr]:
            if fd is not None:
                try:
                    fd.close()
                except (IOError, OSError):
                    logger.debug("Failed to close pipe of process %s", process.pid)

        # Ensure process is terminated
        self._terminate_process(process)
