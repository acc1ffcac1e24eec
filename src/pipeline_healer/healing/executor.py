"""Run fix scripts in a working directory."""

import logging
import os
import signal
import subprocess
import tempfile
import time
from contextlib import suppress
from pathlib import Path

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_before_delay,
    wait_fixed,
)

from ..config import SelfHealingOptions

logger = logging.getLogger(__name__)


class ScriptExecutionError(Exception):
    """A fix script exited with a non-zero status."""

    def __init__(self, returncode: int, stdout: str, stderr: str):
        super().__init__(f"Fix script exited with status {returncode}")
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class ScriptRunner:
    """Execute fix scripts with bash, honoring retry and timeout options."""

    def __init__(self, options: SelfHealingOptions | None = None):
        self.options = options or SelfHealingOptions()

    def run(
        self,
        script: str,
        working_directory: Path,
        timeout: float | None = None,
    ) -> tuple[bool, str, str]:
        """
        Run a script and report how it went.

        The timeout bounds the whole call, retries and the delays between
        them included. A retry is only scheduled while its delay still fits
        in the remaining time; timeouts themselves are not retried. On
        timeout the script's whole process group is killed. The script is
        written to a temporary file that is removed again on every exit path.

        Returns:
            Tuple of (success, stdout, error text)
        """
        if timeout is None:
            timeout = self.options.fix_timeout_seconds
        deadline = time.monotonic() + timeout
        script_path: Path | None = None

        try:
            script_path = self._materialize(script)
            completed = self._execute(script_path, Path(working_directory), timeout, deadline)
            return True, completed.stdout, completed.stderr
        except ScriptExecutionError as e:
            return False, e.stdout, e.stderr.strip() or str(e)
        except subprocess.TimeoutExpired as e:
            return False, _decode(e.stdout), f"Fix script timed out after {timeout:g}s"
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            return False, "", str(e)
        finally:
            if script_path is not None:
                script_path.unlink(missing_ok=True)

    def _materialize(self, script: str) -> Path:
        fd, name = tempfile.mkstemp(prefix="pipeline-healer-fix-", suffix=".sh")
        with os.fdopen(fd, "w") as f:
            f.write(script)
        os.chmod(name, 0o755)
        return Path(name)

    def _execute(
        self, script_path: Path, cwd: Path, timeout: float, deadline: float
    ) -> subprocess.CompletedProcess:
        if not self.options.auto_retry:
            return self._execute_once(script_path, cwd, deadline)

        retrying = Retrying(
            stop=stop_after_attempt(self.options.max_retries + 1) | stop_before_delay(timeout),
            wait=wait_fixed(self.options.retry_delay_seconds),
            retry=retry_if_exception_type(ScriptExecutionError),
            before_sleep=_log_retry,
            reraise=True,
        )
        return retrying(self._execute_once, script_path, cwd, deadline)

    def _execute_once(self, script_path: Path, cwd: Path, deadline: float) -> subprocess.CompletedProcess:
        args = ["bash", str(script_path)]
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise subprocess.TimeoutExpired(args, 0)

        with subprocess.Popen(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        ) as process:
            try:
                stdout, stderr = process.communicate(timeout=remaining)
            except subprocess.TimeoutExpired:
                _kill_group(process)
                process.communicate()
                raise

        if process.returncode != 0:
            raise ScriptExecutionError(process.returncode, stdout, stderr)
        return subprocess.CompletedProcess(args, process.returncode, stdout, stderr)


def _kill_group(process: subprocess.Popen) -> None:
    # The script runs as its own session leader, so its pid is the group id
    with suppress(ProcessLookupError):
        os.killpg(process.pid, signal.SIGKILL)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Fix script failed (attempt %d), retrying in %.0fs",
        retry_state.attempt_number,
        retry_state.next_action.sleep if retry_state.next_action else 0,
    )


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
