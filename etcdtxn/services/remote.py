from __future__ import annotations

"""etcdtxn/services/remote.py

Remote execution facility: run one command on one cluster node.

This module provides:

- CommandResult: structured result (the failure envelope) for one command
- run_command: low-level helper that executes argv and captures its output
- Remote: the narrow interface the etcdctl invoker depends on
- SSHRemote / DockerRemote / LocalRemote: concrete ways of reaching a node
- get_remote: build the Remote selected by settings.remote_transport

Nothing here retries. Timeouts are enforced by run_command and reported as
failure_reason="timeout" with no exit code.
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Protocol

from etcdtxn.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of a single command invocation."""

    success: bool
    output: str
    error: str = ""
    return_code: int | None = None
    command: list[str] | None = None
    node: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_seconds: float | None = None
    failure_reason: str | None = None


def run_command(
    cmd: List[str],
    *,
    stdin: str | None = None,
    timeout: int = 10,
    env: dict[str, str] | None = None,
    node: str | None = None,
) -> CommandResult:
    """Run a command, feed it stdin, and capture stdout/stderr in memory.

    Never raises for process-level failures; they come back as a
    CommandResult with success=False.
    """
    environment = os.environ.copy()
    environment.update(env or {})

    started_at = datetime.utcnow()
    try:
        proc = subprocess.run(
            cmd,
            input=stdin,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
            env=environment,
        )
        finished_at = datetime.utcnow()
        return CommandResult(
            success=proc.returncode == 0,
            output=proc.stdout or "",
            error=proc.stderr or "",
            return_code=proc.returncode,
            command=cmd,
            node=node,
            started_at=started_at,
            finished_at=finished_at,
            duration_seconds=(finished_at - started_at).total_seconds(),
        )
    except subprocess.TimeoutExpired as exc:
        finished_at = datetime.utcnow()
        return CommandResult(
            success=False,
            output=_as_text(exc.stdout),
            error=_as_text(exc.stderr) or "timeout",
            return_code=None,
            command=cmd,
            node=node,
            started_at=started_at,
            finished_at=finished_at,
            duration_seconds=(finished_at - started_at).total_seconds(),
            failure_reason="timeout",
        )
    except OSError as exc:
        finished_at = datetime.utcnow()
        return CommandResult(
            success=False,
            output="",
            error=str(exc),
            return_code=None,
            command=cmd,
            node=node,
            started_at=started_at,
            finished_at=finished_at,
            duration_seconds=(finished_at - started_at).total_seconds(),
            failure_reason="process-spawn-error",
        )


def _as_text(value: str | bytes | None) -> str:
    # TimeoutExpired may carry bytes even when text=True was requested
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class Remote(Protocol):
    """Minimal interface for running a command on a named node."""

    def run(
        self,
        node: str,
        argv: List[str],
        *,
        stdin: str | None = None,
        env: Dict[str, str] | None = None,
    ) -> CommandResult:
        """Execute argv on node and return the captured result.

        Implementations must not retry; callers decide that based on the
        classified outcome.
        """
        ...


class SSHRemote:
    """Runs commands over ssh as `user@node`."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def build_command(
        self,
        node: str,
        argv: List[str],
        env: Dict[str, str] | None = None,
    ) -> List[str]:
        remote_argv = list(argv)
        if env:
            remote_argv = ["env", *(f"{k}={v}" for k, v in env.items()), *remote_argv]
        cmd = [self.settings.ssh_binary, *self.settings.ssh_options]
        if self.settings.ssh_private_key:
            cmd += ["-i", self.settings.ssh_private_key]
        cmd += [f"{self.settings.ssh_user}@{node}", "cd / && " + shlex.join(remote_argv)]
        return cmd

    def run(
        self,
        node: str,
        argv: List[str],
        *,
        stdin: str | None = None,
        env: Dict[str, str] | None = None,
    ) -> CommandResult:
        cmd = self.build_command(node, argv, env)
        return run_command(
            cmd,
            stdin=stdin,
            timeout=self.settings.command_timeout_seconds,
            node=node,
        )


class DockerRemote:
    """Runs commands inside a container named after the node."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def build_command(
        self,
        node: str,
        argv: List[str],
        env: Dict[str, str] | None = None,
    ) -> List[str]:
        cmd = [self.settings.docker_binary, "exec", "-i"]
        for key, value in (env or {}).items():
            cmd += ["-e", f"{key}={value}"]
        return [*cmd, node, *argv]

    def run(
        self,
        node: str,
        argv: List[str],
        *,
        stdin: str | None = None,
        env: Dict[str, str] | None = None,
    ) -> CommandResult:
        cmd = self.build_command(node, argv, env)
        return run_command(
            cmd,
            stdin=stdin,
            timeout=self.settings.command_timeout_seconds,
            node=node,
        )


class LocalRemote:
    """Runs commands on this host; the node only shows up in --endpoints."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def run(
        self,
        node: str,
        argv: List[str],
        *,
        stdin: str | None = None,
        env: Dict[str, str] | None = None,
    ) -> CommandResult:
        return run_command(
            list(argv),
            stdin=stdin,
            timeout=self.settings.command_timeout_seconds,
            env=env,
            node=node,
        )


def get_remote(settings: Settings | None = None) -> Remote:
    settings = settings or get_settings()
    remotes = {
        "ssh": SSHRemote,
        "docker": DockerRemote,
        "local": LocalRemote,
    }
    return remotes[settings.remote_transport](settings)
