from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from dependencies.security import get_acting_user_id, require_internal_token
from schemas.grades import GradeFilters, GradesSummaryRequest
from services.access_scope import Operation
from services.analytics_policy import policy_from_settings
from services.grade_analytics import calculate_grades_summary, generate_grades_insights, summarize_grades
from routers.envelope import ok, permission_denied

router = APIRouter(
    prefix="/grades",
    tags=["grades"],
    dependencies=[Depends(require_internal_token)],
)

# 대시보드 임계값은 설정(.env)으로 조정 가능
POLICY = policy_from_settings(settings)


def _filters(academic_year: Optional[str], term: Optional[str], class_id: Optional[int]) -> GradeFilters:
    return GradeFilters(academic_year=academic_year, term=term, class_id=class_id)

# ==========================================================
# [대시보드] 학교 성적 요약
# ==========================================================
@router.get("/summary")
def get_grades_summary(
    school_id: int = Query(...),
    academic_year: Optional[str] = Query(None, description="학년도 (예: 1)"),
    term: Optional[str] = Query(None, description="학기"),
    class_id: Optional[int] = Query(None),
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, school_id, Operation.VIEW_ANALYTICS)
    if denied:
        return denied
    summary = calculate_grades_summary(db, school_id, _filters(academic_year, term, class_id), POLICY)
    return ok(summary.model_dump(), "성적 요약 조회 성공")


# ✅ 호출 측이 성적 행을 직접 넘기는 경우 (DB 조회 없음)
@router.post("/summary")
def summarize_supplied_grades(payload: GradesSummaryRequest):
    summary = summarize_grades(payload.records, payload.filters, POLICY)
    return ok(summary.model_dump(), "성적 요약 계산 성공")


@router.get("/insights")
def get_grades_insights(
    school_id: int = Query(...),
    academic_year: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    class_id: Optional[int] = Query(None),
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, school_id, Operation.VIEW_ANALYTICS)
    if denied:
        return denied
    summary = calculate_grades_summary(db, school_id, _filters(academic_year, term, class_id), POLICY)
    return ok(generate_grades_insights(summary, POLICY).model_dump(), "성적 인사이트 조회 성공")
