from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_acting_user_id, require_internal_token
from schemas.grades import GradeEntryRequest, GradeIdsRequest, GradeOverrideRequest, GradeRejectRequest
from services.academic_integration import save_grades
from services.access_scope import Operation
from services.grade_workflow import (
    approve_grades,
    override_grade,
    reject_grades,
    release_grades,
    submit_for_approval,
)
from routers.envelope import from_result, permission_denied

router = APIRouter(
    prefix="/grades",
    tags=["grades"],
    dependencies=[Depends(require_internal_token)],
)

# ==========================================================
# [1단계] 성적 입력 (컨텍스트/권한/교육과정 검사 포함)
# ==========================================================

# ✅ [CREATE] 학급-과목 성적 일괄 입력
@router.post("/entries")
def create_grade_entries(
    payload: GradeEntryRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    return from_result(save_grades(db, user_id, payload), "성적 저장 성공")

# ==========================================================
# [2단계] 승인 워크플로
# ==========================================================

# ✅ [SUBMIT] 교사 draft → pending_approval
@router.post("/submit")
def submit_grades(
    payload: GradeIdsRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.ENTER_GRADES)
    if denied:
        return denied
    return from_result(submit_for_approval(db, user_id, payload.school_id, payload.grade_ids), "성적 제출 성공")


# ✅ [APPROVE] pending_approval → approved
@router.post("/approve")
def approve(
    payload: GradeIdsRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.APPROVE_GRADES)
    if denied:
        return denied
    result = approve_grades(db, user_id, payload.school_id, payload.grade_ids, payload.principal_notes)
    return from_result(result, "성적 승인 성공")


# ✅ [REJECT] pending_approval → rejected
@router.post("/reject")
def reject(
    payload: GradeRejectRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.APPROVE_GRADES)
    if denied:
        return denied
    result = reject_grades(db, user_id, payload.school_id, payload.grade_ids, payload.rejection_reason)
    return from_result(result, "성적 반려 성공")


# ✅ [RELEASE] approved → released
@router.post("/release")
def release(
    payload: GradeIdsRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.APPROVE_GRADES)
    if denied:
        return denied
    return from_result(release_grades(db, user_id, payload.school_id, payload.grade_ids), "성적 공개 성공")

# ==========================================================
# [3단계] 완전 동적 라우터
# ==========================================================

# ✅ [OVERRIDE] 교장 직권 점수 수정
@router.post("/{grade_id}/override")
def override(
    grade_id: int,
    payload: GradeOverrideRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.APPROVE_GRADES)
    if denied:
        return denied
    result = override_grade(db, user_id, payload.school_id, grade_id, payload.new_score, payload.principal_notes)
    return from_result(result, "성적 수정 성공", code=404 if result.error == "Grade not found" else 400)
