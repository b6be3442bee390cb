from __future__ import annotations

"""etcdtxn/services/etcdctl/client.py

Transactional key-value client that shells out to etcdctl on one node.

    with EtcdctlClient.open("n1") as client:
        res = client.txn(eq("k", CompareFunction.VALUE, 1), Put("k", 2), Get("k"))

Per call: encode the AST, run `etcdctl txn -w json` on the node, then either
decode stdout into a TxnResult or, for exit status 1, classify stderr and
raise TxnFailed. Any other failure (timeouts, ssh errors, other exit codes)
propagates as RemoteCommandError; its effect on the store is unknown.

The client holds no connection, so `close` does nothing and instances can be
shared between threads.
"""

import logging
from typing import Sequence, Union

from etcdtxn.schemas import TxnResult
from etcdtxn.services.diagnostics.error_classifier import classify_failure
from etcdtxn.services.etcdctl.decoder import decode_output
from etcdtxn.services.etcdctl.encoder import encode
from etcdtxn.services.etcdctl.errors import ProtocolViolation, RemoteCommandError, TxnFailed
from etcdtxn.services.etcdctl.invoker import EtcdctlInvoker
from etcdtxn.services.etcdctl.nodes import Node, Txn
from etcdtxn.services.telemetry import FailureTelemetry, get_telemetry

logger = logging.getLogger(__name__)

Branch = Union[Node, Sequence[Node], None]

# etcdctl's exit status for errors reported by the server or client library
ETCDCTL_ERROR_EXIT = 1


class EtcdctlClient:
    def __init__(
        self,
        node: str,
        invoker: EtcdctlInvoker | None = None,
        telemetry: FailureTelemetry | None = None,
    ) -> None:
        self.node = node
        self.invoker = invoker or EtcdctlInvoker()
        self.telemetry = telemetry or get_telemetry()

    @classmethod
    def open(cls, node: str, **kwargs) -> "EtcdctlClient":
        return cls(node, **kwargs)

    def close(self) -> None:
        """Nothing to release; every call is a fresh process."""

    def __enter__(self) -> "EtcdctlClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def txn(
        self,
        predicates: Branch = (),
        true_branch: Branch = (),
        false_branch: Branch = (),
    ) -> TxnResult:
        txn = Txn(predicates or (), true_branch or (), false_branch or ())
        text = encode(txn)
        logger.info("txn on %s: %r\n%s", self.node, txn, text)

        try:
            stdout = self.invoker.execute(self.node, "txn", text)
        except RemoteCommandError as exc:
            if exc.exit_code != ETCDCTL_ERROR_EXIT:
                raise
            error = classify_failure(exc.result)
            logger.warning(
                "txn on %s failed: kind=%s definite=%s: %s",
                self.node,
                error.kind.value,
                error.definite,
                error.description,
            )
            self.telemetry.classified_failure(self.node, error)
            raise TxnFailed(error) from exc

        logger.debug("raw txn response from %s: %s", self.node, stdout)
        try:
            result = decode_output(stdout)
        except ProtocolViolation as exc:
            logger.error("unreadable txn response from %s: %s", self.node, exc)
            self.telemetry.protocol_violation(self.node, str(exc))
            raise
        logger.debug("parsed txn response from %s: %s", self.node, result.model_dump(by_alias=True))
        return result


def client(node: str, **kwargs) -> EtcdctlClient:
    """Construct a client for the given node."""
    return EtcdctlClient.open(node, **kwargs)
