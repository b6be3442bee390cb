# etcdtxn/__init__.py
from __future__ import annotations

"""
Marks `etcdtxn` as a Python package.

The etcdctl transaction adapter lives in etcdtxn/services/etcdctl, failure
classification in etcdtxn/services/diagnostics, the history browser in
etcdtxn/api.
"""
