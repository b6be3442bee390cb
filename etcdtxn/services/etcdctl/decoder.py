from __future__ import annotations

"""etcdtxn/services/etcdctl/decoder.py

Normalize the JSON `etcdctl txn -w json` prints into a TxnResult.

Shape of the input (abridged):

    {"header": {"member_id": ..., "revision": ..., "raft_term": ...},
     "succeeded": true,
     "responses": [{"Response": {"response_put": {"header": {...}}}},
                   {"Response": {"response_range": {"count": 1, "kvs": [...]}}}]}

Each per-op response must carry exactly one discriminant key. Anything else
means etcdctl and this decoder disagree about the protocol, which is fatal:
no per-op result is ever guessed.

Keys and values come back base64-encoded and hold literal notation (see
literal.py), which is parsed back into native ints and strings.
"""

import base64
import binascii
import json
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from etcdtxn.schemas import (
    KVValue,
    ParsedHeader,
    PutOutcome,
    RangeOutcome,
    RawHeader,
    RawKV,
    RawPutResponse,
    RawRangeResponse,
    RawTxnResponse,
    TxnResult,
)
from etcdtxn.services.etcdctl.errors import ProtocolViolation
from etcdtxn.services.etcdctl.literal import parse_literal
from etcdtxn.services.etcdctl.nodes import Value


def _validate(model: type[BaseModel], raw: Any) -> Any:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise ProtocolViolation(f"malformed {model.__name__}: {exc}") from exc


def parse_header(header: Optional[RawHeader]) -> Optional[ParsedHeader]:
    if header is None:
        return None
    return ParsedHeader(
        member_id=header.member_id,
        revision=header.revision,
        raft_term=header.raft_term,
    )


def _decode_b64(field: str, encoded: str) -> str:
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ProtocolViolation(f"bad base64 in kv {field}: {encoded!r}") from exc


def parse_kv(entry: Union[RawKV, Mapping[str, Any]]) -> Tuple[Value, KVValue]:
    """Interpret one kv entry as (key, KVValue)."""
    kv = entry if isinstance(entry, RawKV) else _validate(RawKV, entry)
    key = parse_literal(_decode_b64("key", kv.key))
    value = parse_literal(_decode_b64("value", kv.value))
    return key, KVValue(
        value=value,
        version=kv.version,
        create_revision=kv.create_revision,
        mod_revision=kv.mod_revision,
    )


def _parse_put(raw: Any) -> PutOutcome:
    put = _validate(RawPutResponse, raw or {})
    return PutOutcome(header=parse_header(put.header))


def _parse_range(raw: Any) -> RangeOutcome:
    rng = _validate(RawRangeResponse, raw or {})
    return RangeOutcome(
        header=parse_header(rng.header),
        count=rng.count,
        kvs=dict(parse_kv(kv) for kv in rng.kvs),
    )


RESPONSE_PARSERS: Dict[str, Callable[[Any], Union[PutOutcome, RangeOutcome]]] = {
    "response_put": _parse_put,
    "response_range": _parse_range,
}


def parse_response(response: Mapping[str, Any]) -> Union[PutOutcome, RangeOutcome]:
    """Interpret one per-op response object."""
    if not isinstance(response, Mapping):
        raise ProtocolViolation(f"per-op response is not an object: {response!r}")

    # etcdctl wraps the oneof in a "Response" envelope
    body = response.get("Response", response) if len(response) == 1 else response
    if not isinstance(body, Mapping):
        raise ProtocolViolation(f"per-op response is not an object: {response!r}")

    keys = list(body.keys())
    if len(keys) != 1:
        raise ProtocolViolation(
            f"expected exactly one response key, got {len(keys)}: {json.dumps(response, default=str)}"
        )

    key = keys[0]
    parser = RESPONSE_PARSERS.get(key)
    if parser is None:
        raise ProtocolViolation(f"unknown response type {key!r}")
    return parser(body[key])


def decode(raw: Any) -> TxnResult:
    """Massage a parsed etcdctl txn response into a TxnResult."""
    if not isinstance(raw, Mapping):
        raise ProtocolViolation(f"txn response is not an object: {raw!r}")
    res = _validate(RawTxnResponse, raw)
    return TxnResult(
        succeeded=res.succeeded,
        header=parse_header(res.header),
        results=[parse_response(r) for r in res.responses],
    )


def decode_output(stdout: str) -> TxnResult:
    """Parse etcdctl's stdout as JSON and decode it."""
    try:
        raw = json.loads(stdout)
    except json.JSONDecodeError as exc:
        raise ProtocolViolation(f"etcdctl printed invalid JSON: {stdout[:200]!r}") from exc
    return decode(raw)
