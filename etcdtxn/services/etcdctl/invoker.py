from __future__ import annotations

"""etcdtxn/services/etcdctl/invoker.py

Run one etcdctl subcommand on one node.

The invoker always asks for JSON output and points etcdctl at the node's own
client URL, so every call talks to exactly the member it was sent to. It does
not retry; a failed command raises RemoteCommandError carrying the exit code,
stdout and stderr so the caller can classify it.
"""

import logging
from typing import Dict, List

from etcdtxn.config import Settings, get_settings
from etcdtxn.services.etcdctl.errors import RemoteCommandError
from etcdtxn.services.remote import Remote, get_remote

logger = logging.getLogger(__name__)


def client_url(node: str, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    return f"{settings.url_scheme}://{node}:{settings.client_port}"


def peer_url(node: str, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    return f"{settings.url_scheme}://{node}:{settings.peer_port}"


def initial_cluster(nodes: List[str], settings: Settings | None = None) -> str:
    """The --initial-cluster string for a set of nodes: `n1=http://n1:2380,...`."""
    return ",".join(f"{node}={peer_url(node, settings)}" for node in nodes)


class EtcdctlInvoker:
    def __init__(
        self,
        remote: Remote | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.remote = remote or get_remote(self.settings)

    def build_argv(self, node: str, command: str) -> List[str]:
        return [
            self.settings.etcdctl_binary,
            "--endpoints",
            client_url(node, self.settings),
            command,
            "-w",
            "json",
        ]

    def build_env(self) -> Dict[str, str]:
        return {"ETCDCTL_API": self.settings.etcdctl_api}

    def execute(self, node: str, command: str, stdin: str | None = None) -> str:
        """Run `etcdctl <command> -w json` on node and return its stdout."""
        result = self.remote.run(
            node,
            self.build_argv(node, command),
            stdin=stdin,
            env=self.build_env(),
        )
        if not result.success:
            logger.debug(
                "etcdctl %s on %s failed (exit=%s, reason=%s)",
                command,
                node,
                result.return_code,
                result.failure_reason,
            )
            raise RemoteCommandError(result)
        return result.output
