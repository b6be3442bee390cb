from __future__ import annotations

"""Literal notation for keys and values stored in etcd.

Values travel as readable text rather than raw bytes so a wire trace (and
`etcdctl get`) stays human-inspectable. The notation is JSON scalar syntax:
`2` is the integer 2, `"2"` is the string "2". A bare symbol such as `k`,
which is what `put k ...` stores as a key, reads back as the string "k".
"""

import json
import re

from etcdtxn.services.etcdctl.errors import ProtocolViolation
from etcdtxn.services.etcdctl.nodes import Value

_SYMBOL = re.compile(r"^[A-Za-z_*!?$%&=<>.+\-/][\w*!?$%&=<>.+\-/:#']*$")


def _is_supported(value: object) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def print_literal(value: Value) -> str:
    if not _is_supported(value):
        raise TypeError(f"unsupported literal type: {type(value).__name__}")
    return json.dumps(value)


def parse_literal(text: str) -> Value:
    stripped = text.strip()
    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError:
        parsed = None
    else:
        if _is_supported(parsed):
            return parsed

    if _SYMBOL.match(stripped):
        return stripped
    raise ProtocolViolation(f"unreadable literal {text!r}")


def stored_key(key: Value) -> Value:
    """The value a key reads back as once etcd has stored it.

    put/get send keys bare, so the string "5" and the integer 5 name the same
    etcd key and both read back as 5.
    """
    if not _is_supported(key):
        raise TypeError(f"unsupported key type: {type(key).__name__}")
    return parse_literal(str(key))
