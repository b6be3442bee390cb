from __future__ import annotations

"""etcdtxn/services/etcdctl/encoder.py

Render a transaction AST into the text `etcdctl txn` reads from stdin.

etcdctl reads three blank-line-terminated sections: comparisons, then the
operations to run on success, then the operations to run on failure.

    val("k") = "1"
    <blank>
    put k "2"
    <blank>
    put k "3"
    <blank>
    <trailing empty section>

Every node renders to exactly one line. Encoding is pure: the same AST
always yields byte-identical text.

Quirks of the etcdctl grammar that are reproduced as-is:
- comparisons put the function first, `mod(k) < "5"`, even though the AST
  stores the key before the target
- integers are quoted too: `"5"`
- put/get take the key bare while comparisons take it quoted

Value comparisons differ from plain etcdctl usage for strings: the target is
rendered in literal notation, `val("k") = "\\"1\\""`, because that is the form
`put` stored. Integer targets render the same either way, `val("k") = "1"`.
"""

import json
from functools import singledispatch
from typing import List

from etcdtxn.services.etcdctl.literal import print_literal
from etcdtxn.services.etcdctl.nodes import (
    Compare,
    CompareFunction,
    Get,
    Node,
    Put,
    Txn,
    Value,
    as_seq,
)


def render_token(value: Value) -> str:
    """Render a string or integer as a double-quoted etcdctl token.

    Escaping is best-effort: it covers printable ASCII, including embedded
    quotes and backslashes.
    """
    if isinstance(value, bool):
        raise TypeError("booleans have no etcdctl token form")
    if isinstance(value, int):
        return f'"{value}"'
    if isinstance(value, str):
        return json.dumps(value)
    raise TypeError(f"cannot render {type(value).__name__} as an etcdctl token")


@singledispatch
def encode(node: Node) -> str:
    raise TypeError(f"not a transaction node: {node!r}")


@encode.register
def _(node: Put) -> str:
    return f"put {node.key} {render_token(print_literal(node.value))}"


@encode.register
def _(node: Get) -> str:
    return f"get {node.key}"


@encode.register
def _(node: Compare) -> str:
    function = CompareFunction(node.target.function)
    expected = node.target.value
    if function is CompareFunction.VALUE:
        # Stored values are in literal notation; compare against that form
        expected = print_literal(expected)
    return f"{function.value}({render_token(node.key)}) {node.op.value} {render_token(expected)}"


def _section(nodes: object, allowed: tuple, name: str) -> List[str]:
    lines = []
    for node in as_seq(nodes):
        if not isinstance(node, allowed):
            raise ValueError(f"{type(node).__name__} is not allowed in txn {name}")
        lines.append(encode(node))
    return lines


@encode.register
def _(node: Txn) -> str:
    predicates = _section(node.predicates, (Compare,), "predicates")
    true_branch = _section(node.true_branch, (Put, Get), "true branch")
    false_branch = _section(node.false_branch, (Put, Get), "false branch")
    return "\n".join([*predicates, "", *true_branch, "", *false_branch, "", ""])
