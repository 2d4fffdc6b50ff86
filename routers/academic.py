from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_acting_user_id, require_internal_token
from schemas.context import AcademicContext, PermissionCheckRequest, ScopeCheckRequest
from services.academic_context import (
    NO_CURRENT_PERIOD,
    check_curriculum_consistency,
    curriculum_display_info,
    get_current_period,
    resolve_context,
)
from services.academic_periods import set_current_term, set_current_year
from services.access_scope import Operation, validate_permissions, validate_scope
from routers.envelope import fail, from_result, ok, permission_denied

router = APIRouter(
    prefix="/academic",
    tags=["학사 컨텍스트"],
    dependencies=[Depends(require_internal_token)],
)

# ==========================================================
# [1] 컨텍스트 / 교육과정
# ==========================================================

# ✅ 부분 컨텍스트 → 현재 기간 채우기 + 소속 검증
@router.post("/context/resolve")
def resolve_academic_context(partial: AcademicContext, db: Session = Depends(get_db)):
    resolution = resolve_context(db, partial)
    return ok(resolution.model_dump(mode="json"), "컨텍스트 확인 성공")


# ✅ 학년도/학기/학급/과목 교육과정 일관성
@router.post("/curriculum/check")
def check_curriculum(context: AcademicContext, db: Session = Depends(get_db)):
    check = check_curriculum_consistency(db, context)
    return ok(check.model_dump(mode="json"), "교육과정 확인 성공")


# ✅ 교육과정 표시 정보 (Standard / CBC / IGCSE)
@router.get("/curriculum/{curriculum_type}")
def get_curriculum_info(curriculum_type: str):
    return ok(curriculum_display_info(curriculum_type).model_dump(), "교육과정 정보 조회 성공")

# ==========================================================
# [2] 권한
# ==========================================================

@router.post("/scope/check")
def check_scope(
    payload: ScopeCheckRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    check = validate_scope(db, user_id, payload.context, payload.operation)
    return ok(check.model_dump(), "작업 범위 확인 성공")


@router.post("/permissions/check")
def check_permissions(
    payload: PermissionCheckRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    check = validate_permissions(db, user_id, payload.school_id, payload.operation)
    return ok(check.model_dump(), "권한 확인 성공")

# ==========================================================
# [3] 현재 학사 기간
# ==========================================================

@router.get("/periods/current")
def read_current_period(school_id: int = Query(...), db: Session = Depends(get_db)):
    period = get_current_period(db, school_id)
    if period is None:
        return fail(404, NO_CURRENT_PERIOD)
    return ok(period.model_dump(), "현재 학사 기간 조회 성공")


@router.put("/periods/years/{year_id}/current")
def switch_current_year(
    year_id: int,
    school_id: int = Query(...),
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, school_id, Operation.MANAGE_ACADEMIC_STRUCTURE)
    if denied:
        return denied
    return from_result(set_current_year(db, school_id, year_id), "현재 학년도 변경 성공", code=404)


@router.put("/periods/terms/{term_id}/current")
def switch_current_term(
    term_id: int,
    school_id: int = Query(...),
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, school_id, Operation.MANAGE_ACADEMIC_STRUCTURE)
    if denied:
        return denied
    return from_result(set_current_term(db, school_id, term_id), "현재 학기 변경 성공", code=404)
