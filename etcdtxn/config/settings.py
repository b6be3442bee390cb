from __future__ import annotations

"""etcdtxn/config/settings.py

Application configuration using environment-driven settings.

This module centralizes:
- database connection URL for the operation history
- etcdctl location and API version on the cluster nodes
- client/peer URL construction (ports, scheme)
- how commands reach a node (ssh, docker exec, or the local host)
- per-command timeouts
- optional Statsig telemetry
"""
import logging
from functools import lru_cache
from typing import List, Literal

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  app_name: str = "etcdtxn"
  environment: str = "development"
  log_level: str = "INFO"

  # Operation history
  database_url: str = "sqlite:///./etcdtxn.db"

  # etcdctl on the cluster nodes
  etcdctl_binary: str = "/opt/etcd/etcdctl"
  etcdctl_api: str = "3"

  # Cluster addressing
  url_scheme: str = "http"
  client_port: int = 2379
  peer_port: int = 2380

  # Remote execution
  remote_transport: Literal["ssh", "docker", "local"] = "ssh"
  ssh_binary: str = "ssh"
  ssh_user: str = "root"
  ssh_private_key: str | None = None
  ssh_options: List[str] = [
      "-o",
      "BatchMode=yes",
      "-o",
      "StrictHostKeyChecking=no",
  ]
  docker_binary: str = "docker"

  # Upper bound for a single etcdctl invocation (seconds)
  command_timeout_seconds: int = 10

  # Telemetry
  statsig_server_secret: str | None = None

  # CORS for the history browser
  allowed_origins: List[AnyHttpUrl] = [
      "http://localhost:3000",
      "http://127.0.0.1:3000",
  ]

  model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()


def configure_logging(settings: Settings | None = None) -> None:
  """Configure root logging from settings.log_level."""
  settings = settings or get_settings()
  logging.basicConfig(
      level=getattr(logging, settings.log_level.upper(), logging.INFO),
      format="%(asctime)s %(levelname)s %(name)s: %(message)s",
  )
