from __future__ import annotations

"""etcdtxn/services/etcdctl/__init__.py

etcdctl transaction adapter.

- nodes: the transaction AST (Txn, Compare, Put, Get)
- encoder: AST -> `etcdctl txn` stdin text
- invoker: run etcdctl on one node, always with `-w json`
- decoder: etcdctl JSON -> TxnResult
- client: EtcdctlClient, tying the above to the error classifier
"""

from .client import EtcdctlClient, client  # noqa: F401
from .errors import ProtocolViolation, RemoteCommandError, TxnFailed  # noqa: F401
from .nodes import (  # noqa: F401
    Compare,
    CompareFunction,
    CompareOp,
    Get,
    Put,
    Target,
    Txn,
)
