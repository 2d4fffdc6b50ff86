"""
services/enrollment_workflow.py

학생 학급 배정 / 과목-교사 배정 / 진급.

- 쓰기 전에 relationship_validator 로 참조 무결성을 먼저 확인
- 학년도 · 학기 · 학급(· 과목) 교육과정 유형이 어긋나면 쓰지 않음
- 중복 확인용 조회는 with_for_update() 로 잠근 뒤 삽입
- 도메인 실패는 WorkflowResult(success=False) 로 반환
- DB 장애는 rollback 후 그대로 전파 (전역 핸들러가 503 으로 변환)
- 진급은 한 트랜잭션: 원 학급 비활성화 + 새 학급 등록이 함께 커밋되거나 함께 취소된다
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.enrollments import StudentEnrollment
from models.teacher_assignments import TeacherAssignment
from schemas.context import AcademicContext
from schemas.enrollments import WorkflowResult
from schemas.relationships import StudentEnrollmentRequest, SubjectAssignmentRequest
from services.academic_context import check_curriculum_consistency
from services.academic_repository import AcademicRepository
from services.relationship_validator import validate_relationships

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "Student is already enrolled in this class for the selected academic period"
ALREADY_ASSIGNED = "Subject is already assigned to this class for the selected academic period"
NO_STUDENTS_TO_PROMOTE = "No students found to promote"
CLASS_NOT_IN_SCHOOL = "Class does not belong to this school"
SAME_CLASS_PROMOTION = "Target class must differ from the source class"


def _now():
    return datetime.now(timezone.utc)


def _curriculum_errors(db: Session, school_id: int, academic_year_id: int, term_id: int,
                       class_id: int, subject_id: Optional[int] = None) -> List[str]:
    check = check_curriculum_consistency(db, AcademicContext(
        school_id=school_id,
        academic_year_id=academic_year_id,
        term_id=term_id,
        class_id=class_id,
        subject_id=subject_id,
    ))
    return check.errors


def _commit(db: Session, action: str, **fields) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("%s 실패 %s", action, fields)
        raise


# ==========================================================
# [1] 학생 학급 배정
# ==========================================================
def enroll(db: Session, school_id: int, student_id: int, class_id: int,
           academic_year_id: int, term_id: int) -> WorkflowResult:
    check = validate_relationships(db, StudentEnrollmentRequest(
        student_id=student_id,
        class_id=class_id,
        academic_year_id=academic_year_id,
        term_id=term_id,
    ))
    if not check.valid:
        return WorkflowResult.failed(*check.errors)

    if AcademicRepository(db).get_class(class_id, school_id) is None:
        return WorkflowResult.failed(CLASS_NOT_IN_SCHOOL)

    errors = _curriculum_errors(db, school_id, academic_year_id, term_id, class_id)
    if errors:
        return WorkflowResult.failed(*errors)

    # 같은 (학생, 학급, 기간) 배정 행을 잠그고 중복 확인
    existing = db.execute(
        select(StudentEnrollment).where(
            StudentEnrollment.student_id == student_id,
            StudentEnrollment.class_id == class_id,
            StudentEnrollment.academic_year_id == academic_year_id,
            StudentEnrollment.term_id == term_id,
            StudentEnrollment.is_active.is_(True),
        ).with_for_update()
    ).scalars().first()
    if existing is not None:
        db.rollback()
        return WorkflowResult.failed(ALREADY_ENROLLED)

    enrollment = StudentEnrollment(
        school_id=school_id,
        student_id=student_id,
        class_id=class_id,
        academic_year_id=academic_year_id,
        term_id=term_id,
        enrollment_date=_now(),
        is_active=True,
    )
    db.add(enrollment)
    _commit(db, "학생 배정", student_id=student_id, class_id=class_id)
    db.refresh(enrollment)

    logger.info("학생 배정 student_id=%s class_id=%s", student_id, class_id)
    return WorkflowResult(success=True, data={"enrollment_id": enrollment.id})


# ==========================================================
# [2] 과목-교사 배정
# ==========================================================
def assign_subject(db: Session, school_id: int, subject_id: int, class_id: int, teacher_id: int,
                   academic_year_id: int, term_id: int) -> WorkflowResult:
    check = validate_relationships(db, SubjectAssignmentRequest(
        subject_id=subject_id,
        class_id=class_id,
        teacher_id=teacher_id,
        academic_year_id=academic_year_id,
        term_id=term_id,
    ))
    if not check.valid:
        return WorkflowResult.failed(*check.errors)

    if AcademicRepository(db).get_class(class_id, school_id) is None:
        return WorkflowResult.failed(CLASS_NOT_IN_SCHOOL)

    errors = _curriculum_errors(db, school_id, academic_year_id, term_id, class_id, subject_id)
    if errors:
        return WorkflowResult.failed(*errors)

    # 같은 (과목, 학급, 기간) 배정 행을 잠그고 중복 확인
    existing = db.execute(
        select(TeacherAssignment).where(
            TeacherAssignment.subject_id == subject_id,
            TeacherAssignment.class_id == class_id,
            TeacherAssignment.academic_year_id == academic_year_id,
            TeacherAssignment.term_id == term_id,
            TeacherAssignment.is_active.is_(True),
        ).with_for_update()
    ).scalars().first()
    if existing is not None:
        db.rollback()
        return WorkflowResult.failed(ALREADY_ASSIGNED)

    assignment = TeacherAssignment(
        school_id=school_id,
        teacher_id=teacher_id,
        class_id=class_id,
        subject_id=subject_id,
        academic_year_id=academic_year_id,
        term_id=term_id,
        is_active=True,
        assigned_at=_now(),
    )
    db.add(assignment)
    _commit(db, "과목 배정", subject_id=subject_id, class_id=class_id, teacher_id=teacher_id)
    db.refresh(assignment)

    logger.info("과목 배정 subject_id=%s class_id=%s teacher_id=%s", subject_id, class_id, teacher_id)
    return WorkflowResult(success=True, data={"assignment_id": assignment.id})


# ==========================================================
# [3] 진급
# ==========================================================
def _validate_promotion_target(repo: AcademicRepository, school_id: int, to_class_id: int,
                               academic_year_id: int, term_id: int) -> List[str]:
    errors: List[str] = []
    target = repo.get_class(to_class_id, school_id)
    if target is None:
        errors.append("Target class not found")
    elif not target.is_active:
        errors.append("Target class is not active")
    if repo.get_year(academic_year_id, school_id) is None:
        errors.append("Academic year not found")
    if repo.get_term(term_id, school_id) is None:
        errors.append("Academic term not found")
    return errors


def promote(db: Session, school_id: int, from_class_id: int, to_class_id: int,
            academic_year_id: int, term_id: int,
            student_ids: Optional[List[int]] = None) -> WorkflowResult:
    if from_class_id == to_class_id:
        return WorkflowResult.failed(SAME_CLASS_PROMOTION)

    repo = AcademicRepository(db)
    errors = _validate_promotion_target(repo, school_id, to_class_id, academic_year_id, term_id)
    if errors:
        return WorkflowResult.failed(*errors)

    errors = _curriculum_errors(db, school_id, academic_year_id, term_id, to_class_id)
    if errors:
        return WorkflowResult.failed(*errors)

    stmt = select(StudentEnrollment).where(
        StudentEnrollment.school_id == school_id,
        StudentEnrollment.class_id == from_class_id,
        StudentEnrollment.is_active.is_(True),
    )
    if student_ids is not None:
        stmt = stmt.where(StudentEnrollment.student_id.in_(student_ids))
    enrollments = list(db.execute(stmt.order_by(StudentEnrollment.id).with_for_update()).scalars().all())

    if not enrollments:
        db.rollback()
        return WorkflowResult.failed(NO_STUDENTS_TO_PROMOTE)

    # 한 학생이 원 학급에 활성 행을 여럿 가질 수 있으므로 학생 단위로 한 번만 등록
    promoted_ids = list(dict.fromkeys(e.student_id for e in enrollments))
    try:
        already_in_target = set(db.execute(
            select(StudentEnrollment.student_id).where(
                StudentEnrollment.class_id == to_class_id,
                StudentEnrollment.academic_year_id == academic_year_id,
                StudentEnrollment.term_id == term_id,
                StudentEnrollment.is_active.is_(True),
                StudentEnrollment.student_id.in_(promoted_ids),
            )
        ).scalars().all())

        for enrollment in enrollments:
            enrollment.is_active = False

        now = _now()
        for student_id in promoted_ids:
            if student_id in already_in_target:
                continue
            db.add(StudentEnrollment(
                school_id=school_id,
                student_id=student_id,
                class_id=to_class_id,
                academic_year_id=academic_year_id,
                term_id=term_id,
                enrollment_date=now,
                is_active=True,
            ))
        db.flush()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("진급 실패 from_class_id=%s to_class_id=%s students=%d",
                         from_class_id, to_class_id, len(promoted_ids))
        raise

    logger.info("진급 완료 from_class_id=%s to_class_id=%s count=%d",
                from_class_id, to_class_id, len(promoted_ids))
    return WorkflowResult(
        success=True,
        promoted_count=len(promoted_ids),
        data={"student_ids": promoted_ids, "to_class_id": to_class_id},
    )
