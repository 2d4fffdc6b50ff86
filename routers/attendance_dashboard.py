from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_acting_user_id, require_internal_token
from services.access_scope import Operation
from services.attendance_analytics import (
    attendance_alerts,
    calculate_attendance_summary,
    generate_attendance_insights,
)
from routers.envelope import fail, ok, permission_denied

router = APIRouter(
    prefix="/attendance/dashboard",
    tags=["출결 대시보드"],
    dependencies=[Depends(require_internal_token)],
)


def _date_range(start: Optional[date], end: Optional[date]):
    if start is None and end is None:
        return None
    return (start or date.min, end or date.max)


# ==========================================================
# [DASHBOARD] 학교 출결 요약 + 경고
# ==========================================================
@router.get("/summary")
def get_attendance_summary(
    school_id: int = Query(...),
    start: Optional[date] = Query(None, description="시작일 (예: 2025-03-01)"),
    end: Optional[date] = Query(None, description="종료일"),
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    if start and end and end < start:
        return fail(400, "End date must not be before start date")
    denied = permission_denied(db, user_id, school_id, Operation.VIEW_ANALYTICS)
    if denied:
        return denied

    summary = calculate_attendance_summary(db, school_id, _date_range(start, end))
    return ok(
        {"summary": summary.model_dump(mode="json"), "alerts": attendance_alerts(summary).model_dump()},
        "출결 요약 조회 성공",
    )


@router.get("/insights")
def get_attendance_insights(
    school_id: int = Query(...),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, school_id, Operation.VIEW_ANALYTICS)
    if denied:
        return denied
    summary = calculate_attendance_summary(db, school_id, _date_range(start, end))
    return ok(generate_attendance_insights(summary).model_dump(), "출결 인사이트 조회 성공")
