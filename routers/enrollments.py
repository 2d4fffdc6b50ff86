from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import get_acting_user_id, require_internal_token
from schemas.enrollments import EnrollmentCreate, PromotionRequest, SubjectAssignmentCreate
from services.access_scope import Operation
from services.enrollment_workflow import ALREADY_ASSIGNED, ALREADY_ENROLLED, assign_subject, enroll, promote
from routers.envelope import from_result, permission_denied

router = APIRouter(tags=["enrollments"], dependencies=[Depends(require_internal_token)])


def _conflict_code(result) -> int:
    return 409 if result.error in (ALREADY_ENROLLED, ALREADY_ASSIGNED) else 400


# ✅ [CREATE] 학생 학급 배정
@router.post("/enrollments")
def create_enrollment(
    payload: EnrollmentCreate,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.MANAGE_ACADEMIC_STRUCTURE)
    if denied:
        return denied
    result = enroll(
        db, payload.school_id, payload.student_id, payload.class_id,
        payload.academic_year_id, payload.term_id,
    )
    return from_result(result, "학생 배정 성공", code=_conflict_code(result))


# ✅ [PROMOTE] 학급 단위 진급 (한 트랜잭션)
@router.post("/enrollments/promote")
def promote_students(
    payload: PromotionRequest,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.MANAGE_ACADEMIC_STRUCTURE)
    if denied:
        return denied
    result = promote(
        db, payload.school_id, payload.from_class_id, payload.to_class_id,
        payload.academic_year_id, payload.term_id, payload.student_ids,
    )
    return from_result(result, f"{result.promoted_count or 0}명 진급 성공")


# ✅ [CREATE] 과목-교사 배정
@router.post("/subject-assignments")
def create_subject_assignment(
    payload: SubjectAssignmentCreate,
    user_id: int = Depends(get_acting_user_id),
    db: Session = Depends(get_db),
):
    denied = permission_denied(db, user_id, payload.school_id, Operation.MANAGE_ACADEMIC_STRUCTURE)
    if denied:
        return denied
    result = assign_subject(
        db, payload.school_id, payload.subject_id, payload.class_id, payload.teacher_id,
        payload.academic_year_id, payload.term_id,
    )
    return from_result(result, "과목 배정 성공", code=_conflict_code(result))
