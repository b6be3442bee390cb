from __future__ import annotations

"""Exceptions raised by the etcdctl transaction adapter."""

from etcdtxn.services.diagnostics.error_classifier import ClassifiedError, ErrorKind
from etcdtxn.services.remote import CommandResult


class ProtocolViolation(ValueError):
    """etcdctl produced output that does not match the expected shape.

    Fatal for the current operation: there is no best-guess result.
    """


class RemoteCommandError(RuntimeError):
    """A remote command exited non-zero, timed out, or failed to spawn."""

    def __init__(self, result: CommandResult) -> None:
        self.result = result
        self.exit_code = result.return_code
        self.stdout = result.output
        self.stderr = result.error
        reason = result.failure_reason or f"exit {result.return_code}"
        super().__init__(f"{reason} on {result.node}: {(result.error or '').strip()}")


class TxnFailed(Exception):
    """An etcdctl transaction failed with a classified error."""

    def __init__(self, error: ClassifiedError) -> None:
        self.error = error
        super().__init__(f"{error.kind.value}: {error.description}")

    @property
    def definite(self) -> bool:
        return self.error.definite

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind
