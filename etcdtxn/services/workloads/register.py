from __future__ import annotations

"""etcdtxn/services/workloads/register.py

Linearizable register workload: read, write and compare-and-set on
independent keys, each issued as a single etcdctl transaction.

Completion types follow the usual history convention:
- ok    the operation took effect (or, for reads, observed a value)
- fail  the operation certainly did not take effect
- info  unknown; the operation may or may not have taken effect

Reads never change state, so a read with an unknown outcome is a fail.
Protocol violations are not turned into completions; they propagate.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from etcdtxn.models import OpType
from etcdtxn.schemas import RangeOutcome, TxnResult
from etcdtxn.services.etcdctl.client import EtcdctlClient
from etcdtxn.services.etcdctl.errors import RemoteCommandError, TxnFailed
from etcdtxn.services.etcdctl.literal import stored_key
from etcdtxn.services.etcdctl.nodes import CompareFunction, Get, Put, Value, eq

logger = logging.getLogger(__name__)

READ = "read"
WRITE = "write"
CAS = "cas"


@dataclass(frozen=True)
class Op:
    """An invocation or completion in a register history."""

    process: int
    f: str
    key: Value
    value: Any = None
    type: OpType = OpType.INVOKE
    error: Optional[str] = None
    description: Optional[str] = None
    definite: Optional[bool] = None
    node: Optional[str] = None


def read(process: int, key: Value) -> Op:
    return Op(process=process, f=READ, key=key)


def write(process: int, key: Value, value: Value) -> Op:
    return Op(process=process, f=WRITE, key=key, value=value)


def cas(process: int, key: Value, old: Value, new: Value) -> Op:
    return Op(process=process, f=CAS, key=key, value=[old, new])


def _read_value(result: TxnResult, key: Value) -> Optional[Value]:
    outcome = result.results[0] if result.results else None
    if not isinstance(outcome, RangeOutcome):
        return None
    kv = outcome.kvs.get(stored_key(key))
    return kv.value if kv is not None else None


class RegisterClient:
    """Applies register operations through one EtcdctlClient."""

    def __init__(self, client: EtcdctlClient) -> None:
        self.client = client

    def _apply(self, op: Op) -> Op:
        if op.f == READ:
            res = self.client.txn((), Get(op.key))
            return replace(op, type=OpType.OK, value=_read_value(res, op.key))

        if op.f == WRITE:
            self.client.txn((), Put(op.key, op.value))
            return replace(op, type=OpType.OK)

        if op.f == CAS:
            old, new = op.value
            res = self.client.txn(eq(op.key, CompareFunction.VALUE, old), Put(op.key, new))
            return replace(op, type=OpType.OK if res.succeeded else OpType.FAIL)

        raise ValueError(f"unknown register operation {op.f!r}")

    def invoke(self, op: Op) -> Op:
        """Apply op and return its completion."""
        op = replace(op, node=self.client.node)
        # Reads have no side effects, so an unknown read is a failed read
        unknown = OpType.FAIL if op.f == READ else OpType.INFO

        try:
            return self._apply(op)
        except TxnFailed as exc:
            return replace(
                op,
                type=OpType.FAIL if exc.definite else unknown,
                error=exc.kind.value,
                description=exc.error.description,
                definite=exc.definite,
            )
        except RemoteCommandError as exc:
            logger.warning("%s on %s did not complete: %s", op.f, op.node, exc)
            return replace(
                op,
                type=unknown,
                error=exc.result.failure_reason or "remote-command-error",
                description=str(exc),
                definite=False,
            )
