from __future__ import annotations

"""
Diagnostics and error classification utilities.

This package currently provides:
- error_classifier: classify failed etcdctl invocations into definite and
  indefinite outcomes that workloads and the history store can act on.

The goal is to keep error handling logic centralized and deterministic.
"""

from .error_classifier import (  # noqa: F401
    ClassifiedError,
    ErrorKind,
    classify_failure,
    classify_stderr,
)
