from __future__ import annotations

"""etcdtxn/services/history.py

Operation history recording.

Responsibilities:
- Create a TestRun row and move it through PENDING -> RUNNING -> terminal
- Append invoke and completion records in the order they happen
- Drive a single operation through an executor (`apply`), recording both ends

A run's history is what a linearizability checker later consumes, so the
recorder never drops a completion: even an operation whose outcome is
unknown is written as `info`.
"""

import logging
import threading
from datetime import datetime
from typing import List, Protocol

from sqlalchemy.orm import Session

from etcdtxn import models
from etcdtxn.services.workloads.register import Op

logger = logging.getLogger(__name__)


class OperationExecutor(Protocol):
    """Anything that turns an invocation into its completion."""

    def invoke(self, op: Op) -> Op:
        ...


def create_run(
    db: Session,
    *,
    name: str,
    workload: str,
    nodes: List[str],
    meta: dict | None = None,
) -> models.TestRun:
    run = models.TestRun(
        name=name,
        workload=workload,
        nodes=list(nodes),
        meta=meta,
        status=models.RunStatus.PENDING,
    )
    db.add(run)
    db.commit()
    db.refresh(run)
    return run


class HistoryRecorder:
    """Appends operations for one TestRun. Safe to share between threads."""

    def __init__(self, db: Session, run: models.TestRun) -> None:
        self.db = db
        self.run = run
        self._lock = threading.Lock()
        self._next_index = (
            db.query(models.Operation).filter(models.Operation.run_id == run.id).count()
        )

    def start(self) -> None:
        with self._lock:
            self.run.status = models.RunStatus.RUNNING
            self.run.started_at = self.run.started_at or datetime.utcnow()
            self.db.commit()

    def _append(self, op: Op) -> models.Operation:
        with self._lock:
            row = models.Operation(
                run_id=self.run.id,
                index=self._next_index,
                process=op.process,
                type=op.type,
                f=op.f,
                key=op.key,
                value=op.value,
                error=op.error,
                description=op.description,
                definite=op.definite,
                node=op.node,
                time=datetime.utcnow(),
            )
            self._next_index += 1
            self.db.add(row)
            self.db.commit()
            return row

    def invoke(self, op: Op) -> models.Operation:
        if op.type is not models.OpType.INVOKE:
            raise ValueError(f"expected an invocation, got {op.type.value}")
        return self._append(op)

    def complete(self, invocation: Op, completion: Op) -> models.Operation:
        if completion.type is models.OpType.INVOKE:
            raise ValueError("completion cannot have type invoke")
        if completion.process != invocation.process:
            raise ValueError(
                f"completion for process {completion.process} does not match "
                f"invocation by process {invocation.process}"
            )
        return self._append(completion)

    def apply(self, op: Op, executor: OperationExecutor) -> Op:
        """Record op, run it through executor, record and return its completion.

        If the executor raises (a protocol violation, say), the operation is
        recorded as info before the exception propagates.
        """
        self.invoke(op)
        try:
            completion = executor.invoke(op)
        except Exception as exc:
            logger.error("process %s crashed during %s: %s", op.process, op.f, exc)
            self.complete(
                op,
                Op(
                    process=op.process,
                    f=op.f,
                    key=op.key,
                    value=op.value,
                    type=models.OpType.INFO,
                    error=type(exc).__name__,
                    description=str(exc),
                    definite=False,
                ),
            )
            raise
        self.complete(op, completion)
        return completion

    def finish(self, status: models.RunStatus = models.RunStatus.COMPLETED) -> models.TestRun:
        with self._lock:
            self.run.status = status
            self.run.finished_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(self.run)
            return self.run
