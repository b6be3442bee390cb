from __future__ import annotations

"""
Markdown report generation for test runs.

This module is deliberately pure and side-effect free: it takes ORM
objects (TestRun, Operation) and returns a markdown string.

It does **not** hit the filesystem or external services.
"""

from collections import Counter, defaultdict
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.orm import Session, selectinload

from etcdtxn import models


def _format_dt(dt: datetime | None) -> str:
    if not dt:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def build_type_counts(operations: Iterable[models.Operation]) -> dict[str, int]:
    counter: Counter[str] = Counter()
    for op in operations:
        counter[op.type.value] += 1
    return dict(counter)


def _build_error_counts(operations: Iterable[models.Operation]) -> dict[str, int]:
    counter: Counter[str] = Counter()
    for op in operations:
        if op.error:
            counter[op.error] += 1
    return dict(counter)


def build_run_markdown(
    *,
    run: models.TestRun,
    operations: List[models.Operation],
) -> str:
    """
    Build a markdown report for a given run.

    Completions are grouped by function and type; unknown (info)
    completions are listed individually because they are what a
    checker has to reason about.
    """
    completions = [op for op in operations if op.type is not models.OpType.INVOKE]
    lines: list[str] = []

    lines.append(f"# Test Run Report: {run.name}")
    lines.append("")
    lines.append(f"**Run ID:** `{run.id}`")
    lines.append(f"**Workload:** `{run.workload}`")
    lines.append(f"**Nodes:** `{', '.join(run.nodes)}`" if run.nodes else "**Nodes:** `-`")
    lines.append(f"**Status:** `{run.status.value}`")
    lines.append(f"**Started at:** {_format_dt(run.started_at)}")
    lines.append(f"**Finished at:** {_format_dt(run.finished_at)}")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Invocations:** {len(operations) - len(completions)}")
    lines.append(f"- **Completions:** {len(completions)}")
    type_counts = build_type_counts(completions)
    if type_counts:
        lines.append("- **By type:**")
        for op_type, count in sorted(type_counts.items()):
            lines.append(f"  - {op_type}: {count}")
    error_counts = _build_error_counts(completions)
    if error_counts:
        lines.append("- **By error:**")
        for error, count in sorted(error_counts.items()):
            lines.append(f"  - {error}: {count}")
    lines.append("")

    lines.append("## Operations")
    lines.append("")
    if not completions:
        lines.append("_No operations were recorded for this run._")
        return "\n".join(lines)

    grouped: dict[str, Counter[str]] = defaultdict(Counter)
    for op in completions:
        grouped[op.f][op.type.value] += 1

    lines.append("| Function | ok | fail | info |")
    lines.append("|----------|----|------|------|")
    for f in sorted(grouped):
        counts = grouped[f]
        lines.append(f"| {f} | {counts['ok']} | {counts['fail']} | {counts['info']} |")
    lines.append("")

    indefinite = [op for op in completions if op.type is models.OpType.INFO]
    if indefinite:
        lines.append("## Indefinite Outcomes")
        lines.append("")
        for op in indefinite:
            where = f" on `{op.node}`" if op.node else ""
            lines.append(
                f"- #{op.index} process {op.process} `{op.f}` key `{op.key}`{where}: "
                f"{op.error or 'unknown'}"
            )
        lines.append("")

    return "\n".join(lines)


def build_run_markdown_from_db(db: Session, run_id: str) -> str:
    """
    Convenience helper that loads a run and its operations from the DB and
    returns the markdown report.
    """
    run = (
        db.query(models.TestRun)
        .options(selectinload(models.TestRun.operations))
        .filter(models.TestRun.id == run_id)
        .first()
    )
    if not run:
        raise ValueError(f"Run {run_id} not found")
    return build_run_markdown(run=run, operations=list(run.operations or []))
