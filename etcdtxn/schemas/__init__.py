# etcdtxn/schemas/__init__.py
from __future__ import annotations

"""
Pydantic schemas.

Three groups live here:
- Raw*: the JSON etcdctl prints for `txn -w json`, validated as-is
- normalized results (TxnResult and friends) handed back to callers
- *Read: response models for the history browser API

This module depends on:
- etcdtxn.models.RunStatus
- etcdtxn.models.OpType
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from etcdtxn.models import OpType, RunStatus


# ---------- Raw etcdctl JSON ----------
# etcd omits zero-valued fields, hence the defaults.


class RawHeader(BaseModel):
    cluster_id: Optional[int] = None
    member_id: Optional[int] = None
    revision: Optional[int] = None
    raft_term: Optional[int] = None


class RawKV(BaseModel):
    key: str
    value: str = ""
    create_revision: int = 0
    mod_revision: int = 0
    version: int = 0


class RawPutResponse(BaseModel):
    header: Optional[RawHeader] = None


class RawRangeResponse(BaseModel):
    header: Optional[RawHeader] = None
    kvs: List[RawKV] = Field(default_factory=list)
    count: int = 0


class RawTxnResponse(BaseModel):
    header: RawHeader
    succeeded: Optional[bool] = None
    # Each entry is checked by the decoder for its single discriminant key
    responses: List[Dict[str, Any]] = Field(default_factory=list)


# ---------- Normalized results ----------


class ParsedHeader(BaseModel):
    member_id: Optional[int] = Field(default=None, serialization_alias="member-id")
    revision: Optional[int] = None
    raft_term: Optional[int] = Field(default=None, serialization_alias="raft-term")


class KVValue(BaseModel):
    value: Union[int, str]
    version: int
    create_revision: int = Field(serialization_alias="create-revision")
    mod_revision: int = Field(serialization_alias="mod-revision")


class PutOutcome(BaseModel):
    type: Literal["put"] = "put"
    header: Optional[ParsedHeader] = None


class RangeOutcome(BaseModel):
    # No `more` flag: multi-page ranges are unsupported
    type: Literal["range"] = "range"
    header: Optional[ParsedHeader] = None
    count: int
    kvs: Dict[Union[int, str], KVValue] = Field(default_factory=dict)


class TxnResult(BaseModel):
    succeeded: Optional[bool] = None
    header: ParsedHeader
    results: List[Union[PutOutcome, RangeOutcome]] = Field(default_factory=list)


# ---------- History browser ----------


class OperationRead(BaseModel):
    id: str
    index: int
    process: int
    type: OpType
    f: str
    key: Optional[Any] = None
    value: Optional[Any] = None
    error: Optional[str] = None
    description: Optional[str] = None
    definite: Optional[bool] = None
    node: Optional[str] = None
    time: datetime

    class Config:
        from_attributes = True


class TestRunRead(BaseModel):
    id: str
    name: str
    workload: str
    nodes: List[str]
    status: RunStatus
    meta: Optional[dict] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TestRunDetail(TestRunRead):
    operation_count: int = 0
    type_counts: Dict[str, int] = Field(default_factory=dict)
