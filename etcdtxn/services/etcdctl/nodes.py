from __future__ import annotations

"""etcdtxn/services/etcdctl/nodes.py

Transaction AST.

A transaction is a guarded multi-operation request: a list of comparisons,
the operations to run when every comparison holds, and the operations to run
otherwise. The node kinds are closed:

- Txn: predicates + true branch + false branch
- Compare: `<function>(key) <op> value`
- Put / Get: single-key operations

`Txn` accepts either a single node or a sequence for each of its three slots;
`as_seq` is the one place where that is normalized.
"""

import enum
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

Value = Union[int, str]


class CompareOp(str, enum.Enum):
    EQ = "="
    LT = "<"
    GT = ">"


class CompareFunction(str, enum.Enum):
    MOD_REVISION = "mod"
    VALUE = "val"
    VERSION = "ver"


@dataclass(frozen=True)
class Target:
    """What a comparison inspects on the key, and the value it expects."""

    function: CompareFunction
    value: Value


@dataclass(frozen=True)
class Compare:
    op: CompareOp
    key: Value
    target: Target


@dataclass(frozen=True)
class Put:
    key: Value
    value: Value


@dataclass(frozen=True)
class Get:
    key: Value


@dataclass(frozen=True)
class Txn:
    predicates: Union["Node", Sequence["Node"]] = ()
    true_branch: Union["Node", Sequence["Node"]] = ()
    false_branch: Union["Node", Sequence["Node"]] = ()


Node = Union[Txn, Compare, Put, Get]
NODE_TYPES = (Txn, Compare, Put, Get)


def as_seq(nodes: Union[Node, Sequence[Node], None]) -> Tuple[Node, ...]:
    """Normalize a bare node (or None) into an ordered tuple of nodes."""
    if nodes is None:
        return ()
    if isinstance(nodes, NODE_TYPES):
        return (nodes,)
    return tuple(nodes)


# Shorthands used by workloads and tests


def eq(key: Value, function: CompareFunction, value: Value) -> Compare:
    return Compare(CompareOp.EQ, key, Target(function, value))


def lt(key: Value, function: CompareFunction, value: Value) -> Compare:
    return Compare(CompareOp.LT, key, Target(function, value))


def gt(key: Value, function: CompareFunction, value: Value) -> Compare:
    return Compare(CompareOp.GT, key, Target(function, value))
