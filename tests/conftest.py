from __future__ import annotations

import base64
import json
from typing import Any, Dict, List

import pytest
from sqlalchemy.orm import sessionmaker

from etcdtxn import models  # noqa: F401  registers tables on Base
from etcdtxn.config import Settings
from etcdtxn.db.session import Base, create_history_engine
from etcdtxn.services.etcdctl.client import EtcdctlClient
from etcdtxn.services.etcdctl.invoker import EtcdctlInvoker
from etcdtxn.services.remote import CommandResult
from etcdtxn.services.telemetry import FailureTelemetry


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def kv_entry(key: str, value: str, create_revision: int = 1, mod_revision: int = 2, version: int = 1) -> dict:
    """A kv entry as etcdctl prints it, with key/value already in literal notation."""
    return {
        "key": b64(key),
        "value": b64(value),
        "create_revision": create_revision,
        "mod_revision": mod_revision,
        "version": version,
    }


def txn_response(responses: List[dict], succeeded: bool = True, revision: int = 7) -> dict:
    return {
        "header": {"cluster_id": 11, "member_id": 22, "revision": revision, "raft_term": 3},
        "succeeded": succeeded,
        "responses": [{"Response": r} for r in responses],
    }


class FakeRemote:
    """Remote that records calls and replays programmed results."""

    def __init__(self, *results: CommandResult) -> None:
        self.results = list(results)
        self.calls: List[Dict[str, Any]] = []

    def push(self, result: CommandResult) -> None:
        self.results.append(result)

    def run(self, node, argv, *, stdin=None, env=None) -> CommandResult:
        self.calls.append({"node": node, "argv": list(argv), "stdin": stdin, "env": dict(env or {})})
        result = self.results.pop(0)
        result.node = node
        result.command = list(argv)
        return result


def ok(payload: dict) -> CommandResult:
    return CommandResult(success=True, output=json.dumps(payload), return_code=0)


def failed(stderr: str, return_code: int | None = 1, failure_reason: str | None = None) -> CommandResult:
    return CommandResult(
        success=False,
        output="",
        error=stderr,
        return_code=return_code,
        failure_reason=failure_reason,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        etcdctl_binary="/opt/etcd/etcdctl",
        remote_transport="local",
        statsig_server_secret=None,
    )


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def etcd_client(fake_remote: FakeRemote, settings: Settings) -> EtcdctlClient:
    invoker = EtcdctlInvoker(remote=fake_remote, settings=settings)
    return EtcdctlClient("n1", invoker=invoker, telemetry=FailureTelemetry(None, "test"))


@pytest.fixture
def db_session():
    engine = create_history_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
