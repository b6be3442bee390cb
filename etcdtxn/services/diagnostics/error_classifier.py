from __future__ import annotations

"""etcdtxn/services/diagnostics/error_classifier.py

Centralized error classification for failed etcdctl invocations.

This module looks at a failed CommandResult (exit code 1, stderr) and
returns a ClassifiedError: a stable kind plus whether the failure is
*definite* (the operation certainly did not take effect) or not.

The classification is:
- deterministic (no randomness)
- total (it never raises; unknown input maps to an indefinite kind)
- closed (structured errors are matched against KNOWN_ERRORS only)

etcdctl prints gRPC failures as a JSON object on the first stderr line.
The `error` field carries the real diagnostic; `message` is usually
something generic like "retrying of unary invoker failed", so it is never
used for matching.

Kinds:
- DUPLICATE_KEY                  definite; the txn named one key twice
- UNRECOGNIZED_STRUCTURED_ERROR  indefinite; JSON error not in KNOWN_ERRORS
- ADAPTER_ERROR                  indefinite; anything that is not JSON
"""

import enum
import json
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from etcdtxn.services.remote import CommandResult


class ErrorKind(str, enum.Enum):
    DUPLICATE_KEY = "duplicate-key"
    ADAPTER_ERROR = "etcdctl"
    UNRECOGNIZED_STRUCTURED_ERROR = "unrecognized-structured-error"


@dataclass(frozen=True)
class ClassifiedError:
    """Typed outcome of a failed etcdctl invocation."""

    definite: bool
    kind: ErrorKind
    description: str


# (substring of the `error` field, kind, definite?)
KNOWN_ERRORS: Tuple[Tuple[str, ErrorKind, bool], ...] = (
    ("duplicate key", ErrorKind.DUPLICATE_KEY, True),
)


def _first_line(value: Optional[str]) -> str:
    lines = (value or "").splitlines()
    return lines[0].strip() if lines else ""


def _parse_structured(line: str) -> dict[str, Any] | None:
    if not line.startswith("{"):
        return None
    try:
        parsed = json.loads(line)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def classify_stderr(stderr: Optional[str]) -> ClassifiedError:
    """Classify etcdctl's stderr into a ClassifiedError."""
    structured = _parse_structured(_first_line(stderr))

    if structured is None:
        return ClassifiedError(
            definite=False,
            kind=ErrorKind.ADAPTER_ERROR,
            description=stderr or "",
        )

    error = structured.get("error")
    if not isinstance(error, str):
        return ClassifiedError(
            definite=False,
            kind=ErrorKind.UNRECOGNIZED_STRUCTURED_ERROR,
            description=_first_line(stderr),
        )

    for needle, kind, definite in KNOWN_ERRORS:
        if needle in error:
            return ClassifiedError(definite=definite, kind=kind, description=error)

    return ClassifiedError(
        definite=False,
        kind=ErrorKind.UNRECOGNIZED_STRUCTURED_ERROR,
        description=error,
    )


def classify_failure(result: CommandResult) -> ClassifiedError:
    """Classify a failed etcdctl invocation.

    Callers only hand over results that exited with status 1; other exits
    are not etcdctl-level failures and are not classified here.
    """
    return classify_stderr(result.error)
