# etcdtxn/models/__init__.py
from __future__ import annotations

"""
Core ORM models for the operation history.

This module depends on:
- etcdtxn.db.session.Base for the declarative base

It is used by:
- etcdtxn.schemas (for enum references)
- API routes (for querying runs and operations)
- the history recorder, which appends operations as a workload runs

Models:
- TestRun: one run of a workload against a cluster
- Operation: one invoke or completion record in a run's history
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from etcdtxn.db.session import Base


class RunStatus(str, enum.Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class OpType(str, enum.Enum):
    INVOKE = "invoke"
    OK = "ok"
    FAIL = "fail"
    INFO = "info"


class TestRun(Base):
    __tablename__ = "test_runs"
    __test__ = False  # not a pytest class

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    workload = Column(String, nullable=False)

    # Cluster member names, e.g. ["n1", "n2", "n3"]
    nodes = Column(JSON, nullable=False, default=list)

    status = Column(Enum(RunStatus), default=RunStatus.PENDING, nullable=False)
    meta = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    started_at = Column(DateTime, nullable=True)
    finished_at = Column(DateTime, nullable=True)

    operations = relationship(
        "Operation",
        back_populates="run",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Operation.index",
    )


class Operation(Base):
    """
    One history entry. An invocation and its completion are separate rows
    sharing the same process; `index` orders the whole history.
    """

    __tablename__ = "operations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    run_id = Column(String, ForeignKey("test_runs.id", ondelete="CASCADE"), nullable=False)

    index = Column(Integer, nullable=False)
    process = Column(Integer, nullable=False)
    type = Column(Enum(OpType), nullable=False)

    f = Column(String, nullable=False)  # read/write/cas
    key = Column(JSON, nullable=True)
    value = Column(JSON, nullable=True)

    # Set on fail/info completions
    error = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    definite = Column(Boolean, nullable=True)

    node = Column(String, nullable=True)
    time = Column(DateTime, default=datetime.utcnow, nullable=False)

    run = relationship("TestRun", back_populates="operations")
