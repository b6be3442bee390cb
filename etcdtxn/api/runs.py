# etcdtxn/api/runs.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from etcdtxn import models, schemas
from etcdtxn.db.session import get_db
from etcdtxn.services.reports import build_run_markdown_from_db, build_type_counts

router = APIRouter(prefix="/runs", tags=["runs"])


def _get_run_or_404(db: Session, run_id: str) -> models.TestRun:
    run = db.query(models.TestRun).filter(models.TestRun.id == run_id).first()
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run


@router.get("", response_model=list[schemas.TestRunRead])
def list_runs(
    db: Session = Depends(get_db),
    workload: str | None = Query(default=None),
    status: models.RunStatus | None = Query(default=None),
) -> list[schemas.TestRunRead]:
    query = db.query(models.TestRun)
    if workload:
        query = query.filter(models.TestRun.workload == workload)
    if status:
        query = query.filter(models.TestRun.status == status)
    return query.order_by(models.TestRun.created_at.desc()).all()


@router.get("/{run_id}", response_model=schemas.TestRunDetail)
def get_run(run_id: str, db: Session = Depends(get_db)) -> schemas.TestRunDetail:
    run = _get_run_or_404(db, run_id)
    operations = list(run.operations or [])
    detail = schemas.TestRunDetail.model_validate(run)
    detail.operation_count = len(operations)
    detail.type_counts = build_type_counts(operations)
    return detail


@router.get("/{run_id}/operations", response_model=list[schemas.OperationRead])
def list_operations(
    run_id: str,
    db: Session = Depends(get_db),
    type: models.OpType | None = Query(default=None),
    f: str | None = Query(default=None),
) -> list[schemas.OperationRead]:
    _get_run_or_404(db, run_id)
    query = db.query(models.Operation).filter(models.Operation.run_id == run_id)
    if type:
        query = query.filter(models.Operation.type == type)
    if f:
        query = query.filter(models.Operation.f == f)
    return query.order_by(models.Operation.index.asc()).all()


@router.get("/{run_id}/report", response_class=PlainTextResponse)
def get_report(run_id: str, db: Session = Depends(get_db)) -> str:
    _get_run_or_404(db, run_id)
    return build_run_markdown_from_db(db, run_id)
