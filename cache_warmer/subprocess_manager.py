#!/usr/bin/env python3
"""
Subprocess helpers for console invocations.
Runs one command at a time with a timeout and always reaps the child.
"""
import os
import subprocess
from typing import Optional, Dict, Any, List
import logging

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600.0


class SubprocessManager:
    """Context manager for subprocess lifecycle management."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[str] = None,
    ):
        self.timeout = timeout
        self.env = env
        self.cwd = cwd
        self.process: Optional[subprocess.Popen] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._cleanup()

    def _effective_timeout(self) -> float:
        if self.timeout is not None:
            return self.timeout
        timeout_str = os.environ.get("SUBPROCESS_DEFAULT_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            return float(timeout_str)
        except ValueError:
            return DEFAULT_TIMEOUT

    def run_sync(self, cmd: List[str]) -> Dict[str, Any]:
        """Run ``cmd`` and return ``{"ok", "code", "stdout", "stderr"}``.

        Launch failures and timeouts are reported through the result dict
        (codes -2 and -1) rather than raised.
        """
        eff_timeout = self._effective_timeout()
        env = {**os.environ, **self.env} if self.env else None
        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=env,
                cwd=self.cwd,
            )
        except OSError as e:
            logger.error(f"Failed to start {cmd[0]}: {e}")
            return {"ok": False, "code": -2, "stdout": "", "stderr": str(e)}

        try:
            stdout, stderr = self.process.communicate(timeout=eff_timeout)
            return {
                "ok": self.process.returncode == 0,
                "code": self.process.returncode,
                "stdout": stdout.decode("utf-8", errors="ignore") if stdout else "",
                "stderr": stderr.decode("utf-8", errors="ignore") if stderr else "",
            }
        except subprocess.TimeoutExpired:
            logger.warning(f"Command {cmd[0]} timed out after {eff_timeout}s, terminating")
            self.process.kill()
            return {
                "ok": False,
                "code": -1,
                "stdout": "",
                "stderr": f"Command timed out after {eff_timeout}s",
            }
        finally:
            self._cleanup()

    def _cleanup(self) -> None:
        if self.process is None:
            return
        if self.process.stdout:
            self.process.stdout.close()
        if self.process.stderr:
            self.process.stderr.close()
        if self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self.process.kill()
        self.process.wait()
        self.process = None


def run_subprocess_sync(
    cmd: List[str],
    timeout: Optional[float] = None,
    env: Optional[Dict[str, str]] = None,
    cwd: Optional[str] = None,
) -> Dict[str, Any]:
    """Convenience wrapper around :class:`SubprocessManager`."""
    with SubprocessManager(timeout=timeout, env=env, cwd=cwd) as manager:
        return manager.run_sync(cmd)
