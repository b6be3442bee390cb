from __future__ import annotations

import pytest

from conftest import FakeRemote, failed, kv_entry, ok, txn_response
from etcdtxn.models import OpType
from etcdtxn.services.etcdctl.client import EtcdctlClient
from etcdtxn.services.etcdctl.errors import ProtocolViolation
from etcdtxn.services.workloads import Op, RegisterClient, cas, read, write

DUPLICATE_KEY = '{"error":"etcdserver: duplicate key given in txn request"}'


@pytest.fixture
def register(etcd_client: EtcdctlClient) -> RegisterClient:
    return RegisterClient(etcd_client)


def test_read_observes_value(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(ok(txn_response([{"response_range": {"count": 1, "kvs": [kv_entry("3", "4")]}}])))

    done = register.invoke(read(0, 3))

    assert done.type is OpType.OK
    assert done.value == 4
    assert done.node == "n1"
    assert fake_remote.calls[0]["stdin"] == "\nget 3\n\n\n"


def test_read_of_missing_key_is_none(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(ok(txn_response([{"response_range": {}}])))
    done = register.invoke(read(0, 3))
    assert done.type is OpType.OK
    assert done.value is None


def test_read_of_numeric_string_key(register: RegisterClient, fake_remote: FakeRemote) -> None:
    # etcd echoes the bare key 5, which decodes as the integer 5
    fake_remote.push(ok(txn_response([{"response_range": {"count": 1, "kvs": [kv_entry("5", "1")]}}])))

    done = register.invoke(read(0, "5"))

    assert done.type is OpType.OK
    assert done.value == 1
    assert done.key == "5"
    assert fake_remote.calls[0]["stdin"] == "\nget 5\n\n\n"


def test_read_of_symbol_key(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(ok(txn_response([{"response_range": {"count": 1, "kvs": [kv_entry("k", '"v"')]}}])))
    done = register.invoke(read(0, "k"))
    assert done.value == "v"


def test_write(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(ok(txn_response([{"response_put": {"header": {"revision": 9}}}])))
    done = register.invoke(write(1, 3, 2))
    assert done.type is OpType.OK
    assert done.value == 2
    assert fake_remote.calls[0]["stdin"] == '\nput 3 "2"\n\n\n'


@pytest.mark.parametrize("succeeded, expected", [(True, OpType.OK), (False, OpType.FAIL)])
def test_cas(register: RegisterClient, fake_remote: FakeRemote, succeeded: bool, expected: OpType) -> None:
    fake_remote.push(ok(txn_response([{"response_put": {}}] if succeeded else [], succeeded=succeeded)))

    done = register.invoke(cas(2, 3, 1, 4))

    assert done.type is expected
    assert fake_remote.calls[0]["stdin"] == 'val("3") = "1"\n\nput 3 "4"\n\n\n'


def test_definite_error_fails(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(failed(DUPLICATE_KEY))
    done = register.invoke(write(1, 3, 2))
    assert done.type is OpType.FAIL
    assert done.definite is True
    assert done.error == "duplicate-key"


def test_indefinite_write_is_info(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(failed("Error: context deadline exceeded"))
    done = register.invoke(write(1, 3, 2))
    assert done.type is OpType.INFO
    assert done.definite is False
    assert done.error == "etcdctl"


def test_indefinite_read_is_fail(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(failed('{"error":"etcdserver: leader changed"}'))
    done = register.invoke(read(1, 3))
    assert done.type is OpType.FAIL
    assert done.error == "unrecognized-structured-error"


def test_remote_failure_is_info(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(failed("", return_code=None, failure_reason="timeout"))
    done = register.invoke(cas(0, 3, 1, 2))
    assert done.type is OpType.INFO
    assert done.error == "timeout"


def test_protocol_violation_propagates(register: RegisterClient, fake_remote: FakeRemote) -> None:
    fake_remote.push(ok(txn_response([{}])))
    with pytest.raises(ProtocolViolation):
        register.invoke(write(0, 3, 1))


def test_unknown_function(register: RegisterClient) -> None:
    with pytest.raises(ValueError):
        register.invoke(Op(process=0, f="append", key=1))
