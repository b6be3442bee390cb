from __future__ import annotations

from etcdtxn.config import Settings
from etcdtxn.services.etcdctl.invoker import EtcdctlInvoker, client_url, initial_cluster, peer_url
from etcdtxn.services.remote import DockerRemote, LocalRemote, SSHRemote, get_remote, run_command


def test_ssh_command(settings: Settings) -> None:
    settings = settings.model_copy(update={"ssh_private_key": "/keys/id_ed25519", "ssh_user": "admin"})
    cmd = SSHRemote(settings).build_command(
        "n2",
        ["/opt/etcd/etcdctl", "txn", "-w", "json"],
        {"ETCDCTL_API": "3"},
    )
    assert cmd[0] == "ssh"
    assert cmd[-2] == "admin@n2"
    assert cmd[-3] == "/keys/id_ed25519"
    assert cmd[-1] == "cd / && env ETCDCTL_API=3 /opt/etcd/etcdctl txn -w json"


def test_ssh_command_quotes_arguments(settings: Settings) -> None:
    cmd = SSHRemote(settings).build_command("n1", ["echo", "two words"])
    assert cmd[-1] == "cd / && echo 'two words'"


def test_docker_command(settings: Settings) -> None:
    cmd = DockerRemote(settings).build_command("n3", ["etcdctl", "txn"], {"ETCDCTL_API": "3"})
    assert cmd == ["docker", "exec", "-i", "-e", "ETCDCTL_API=3", "n3", "etcdctl", "txn"]


def test_get_remote_follows_transport(settings: Settings) -> None:
    assert isinstance(get_remote(settings), LocalRemote)
    assert isinstance(get_remote(settings.model_copy(update={"remote_transport": "ssh"})), SSHRemote)
    assert isinstance(get_remote(settings.model_copy(update={"remote_transport": "docker"})), DockerRemote)


def test_cluster_urls(settings: Settings) -> None:
    assert client_url("n1", settings) == "http://n1:2379"
    assert peer_url("n1", settings) == "http://n1:2380"
    assert initial_cluster(["n1", "n2"], settings) == "n1=http://n1:2380,n2=http://n2:2380"


def test_invoker_argv(settings: Settings) -> None:
    invoker = EtcdctlInvoker(remote=LocalRemote(settings), settings=settings)
    assert invoker.build_argv("n4", "txn") == [
        "/opt/etcd/etcdctl",
        "--endpoints",
        "http://n4:2379",
        "txn",
        "-w",
        "json",
    ]


def test_run_command_feeds_stdin() -> None:
    result = run_command(["cat"], stdin="put k \"1\"\n", node="local")
    assert result.success is True
    assert result.return_code == 0
    assert result.output == 'put k "1"\n'
    assert result.node == "local"
    assert result.duration_seconds is not None


def test_run_command_reports_exit_code() -> None:
    result = run_command(["sh", "-c", "echo boom >&2; exit 1"])
    assert result.success is False
    assert result.return_code == 1
    assert result.error.strip() == "boom"


def test_run_command_spawn_error() -> None:
    result = run_command(["/nonexistent/etcdctl"])
    assert result.success is False
    assert result.return_code is None
    assert result.failure_reason == "process-spawn-error"


def test_run_command_timeout() -> None:
    result = run_command(["sleep", "5"], timeout=1)
    assert result.success is False
    assert result.return_code is None
    assert result.failure_reason == "timeout"
