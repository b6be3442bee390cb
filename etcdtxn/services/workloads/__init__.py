from __future__ import annotations

"""
Workloads built on the etcdctl transaction client.

- register: read / write / cas on independent keys
"""

from .register import CAS, READ, WRITE, Op, RegisterClient, cas, read, write  # noqa: F401
