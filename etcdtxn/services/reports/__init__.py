# etcdtxn/services/reports/__init__.py
from __future__ import annotations

"""
Reporting utilities for test runs.

High-level helpers exposed:

- build_run_markdown(run=..., operations=...) -> str
- build_run_markdown_from_db(db, run_id) -> str
"""

from .markdown_builder import (  # noqa: F401
    build_run_markdown,
    build_run_markdown_from_db,
    build_type_counts,
)
