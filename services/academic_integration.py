"""
services/academic_integration.py

학사 컨텍스트를 거친 쓰기 작업.

공통 순서:
  1) resolve_context   : 빈 학년도/학기 채우기 + 학급/과목 소속 확인
  2) validate_scope    : 역할/배정 범위 확인
  3) (성적) 교육과정 일관성 / (시험) 관계 무결성
  4) 쓰기 + 커밋 (실패 시 rollback 후 전파)
"""

import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.attendance import AttendanceRecord
from models.enums import GradeStatus, Role
from models.examinations import Examination
from models.grades import GradeRecord
from schemas.attendance import AttendanceRecordRequest
from schemas.context import AcademicContext
from schemas.enrollments import WorkflowResult
from schemas.examinations import Examination as ExaminationSchema, ExaminationCreate
from schemas.grades import GradeEntryRequest
from schemas.relationships import ExaminationScheduleRequest
from services.academic_context import check_curriculum_consistency, resolve_context
from services.academic_repository import AcademicRepository
from services.access_scope import Operation, validate_scope
from services.grade_workflow import letter_grade_for
from services.relationship_validator import validate_relationships

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


def _checked_context(db: Session, user_id: int, partial: AcademicContext, operation: Operation):
    """(context, role, None) 또는 (None, None, 실패 결과)"""
    resolution = resolve_context(db, partial)
    if not resolution.is_valid:
        return None, None, WorkflowResult.failed(*resolution.errors)

    context = resolution.context
    scope = validate_scope(db, user_id, context, operation)
    if not scope.is_valid:
        return None, None, WorkflowResult.failed(scope.error)
    return context, scope.role, None


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("%s 저장 실패", action)
        raise


def _missing_students(repo: AcademicRepository, student_ids: List[int]) -> List[str]:
    return [f"Student {sid} not found" for sid in dict.fromkeys(student_ids) if repo.get_student(sid) is None]


# ==========================================================
# [1] 성적 입력
# ==========================================================
def save_grades(db: Session, user_id: int, request: GradeEntryRequest) -> WorkflowResult:
    context, role, failure = _checked_context(db, user_id, AcademicContext(
        school_id=request.school_id,
        academic_year_id=request.academic_year_id,
        term_id=request.term_id,
        class_id=request.class_id,
        subject_id=request.subject_id,
    ), Operation.ENTER_GRADES)
    if failure:
        return failure

    curriculum = check_curriculum_consistency(db, context)
    if not curriculum.is_consistent:
        return WorkflowResult.failed(*curriculum.errors)

    repo = AcademicRepository(db)
    errors = _missing_students(repo, [e.student_id for e in request.entries])
    errors += [
        f"Score for student {e.student_id} exceeds the maximum score"
        for e in request.entries if e.score > e.max_score
    ]
    if errors:
        return WorkflowResult.failed(*errors)

    # 교장이 입력하면 바로 승인, 교사는 draft 로 저장 후 제출
    approved = role == Role.PRINCIPAL.value
    status = GradeStatus.APPROVED.value if approved else GradeStatus.DRAFT.value
    now = _now()

    rows = []
    for entry in request.entries:
        percentage = entry.score / entry.max_score * 100
        rows.append(GradeRecord(
            school_id=context.school_id,
            student_id=entry.student_id,
            subject_id=context.subject_id,
            class_id=context.class_id,
            score=entry.score,
            max_score=entry.max_score,
            percentage=percentage,
            letter_grade=letter_grade_for(percentage),
            status=status,
            term=str(context.term_id),
            exam_type=entry.exam_type,
            academic_year=str(context.academic_year_id),
            submitted_by=user_id,
            approved_by=user_id if approved else None,
            approved_at=now if approved else None,
        ))
    db.add_all(rows)
    _commit(db, "성적")

    logger.info("성적 저장 school_id=%s class_id=%s subject_id=%s count=%d status=%s",
                context.school_id, context.class_id, context.subject_id, len(rows), status)
    return WorkflowResult(
        success=True,
        data={"grade_ids": [r.id for r in rows], "status": status, "context": context.model_dump(mode="json")},
    )


# ==========================================================
# [2] 출결 기록 (학생/날짜/세션 단위 upsert)
# ==========================================================
def record_attendance(db: Session, user_id: int, request: AttendanceRecordRequest) -> WorkflowResult:
    context, _, failure = _checked_context(db, user_id, AcademicContext(
        school_id=request.school_id,
        academic_year_id=request.academic_year_id,
        term_id=request.term_id,
        class_id=request.class_id,
    ), Operation.RECORD_ATTENDANCE)
    if failure:
        return failure

    errors = _missing_students(AcademicRepository(db), [e.student_id for e in request.entries])
    if errors:
        return WorkflowResult.failed(*errors)

    # 같은 슬롯이 요청에 여러 번 있으면 마지막 값 사용
    entries = {(e.student_id, e.date, e.session): e for e in request.entries}

    now = _now()
    created = updated = 0
    for entry in entries.values():
        row = db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.school_id == context.school_id,
                AttendanceRecord.class_id == context.class_id,
                AttendanceRecord.student_id == entry.student_id,
                AttendanceRecord.date == entry.date,
                AttendanceRecord.session == entry.session,
            )
        ).scalars().first()
        if row is None:
            row = AttendanceRecord(
                school_id=context.school_id,
                class_id=context.class_id,
                student_id=entry.student_id,
                date=entry.date,
                session=entry.session,
            )
            db.add(row)
            created += 1
        else:
            updated += 1
        row.status = entry.status.value
        row.academic_year = str(context.academic_year_id)
        row.term = str(context.term_id)
        row.submitted_by = user_id
        row.submitted_at = now
    _commit(db, "출결")

    logger.info("출결 저장 school_id=%s class_id=%s created=%d updated=%d",
                context.school_id, context.class_id, created, updated)
    return WorkflowResult(success=True, data={"created": created, "updated": updated})


# ==========================================================
# [3] 시험 일정 등록
# ==========================================================
def create_examination_schedule(db: Session, user_id: int, request: ExaminationCreate) -> WorkflowResult:
    context, _, failure = _checked_context(db, user_id, AcademicContext(
        school_id=request.school_id,
        academic_year_id=request.academic_year_id,
        term_id=request.term_id,
    ), Operation.CREATE_EXAMINATION)
    if failure:
        return failure

    check = validate_relationships(db, ExaminationScheduleRequest(
        class_ids=request.class_ids,
        start_date=request.start_date,
        end_date=request.end_date,
    ))
    if not check.valid:
        return WorkflowResult.failed(*check.errors)

    repo = AcademicRepository(db)
    foreign = [cid for cid in request.class_ids if repo.get_class(cid, context.school_id) is None]
    if foreign:
        return WorkflowResult.failed(*[f"Class {cid} does not belong to this school" for cid in foreign])

    exam = Examination(
        school_id=context.school_id,
        name=request.name,
        exam_type=request.exam_type,
        academic_year_id=context.academic_year_id,
        term_id=context.term_id,
        start_date=request.start_date,
        end_date=request.end_date,
        class_ids=list(request.class_ids),
        created_by=user_id,
    )
    db.add(exam)
    _commit(db, "시험 일정")
    db.refresh(exam)

    logger.info("시험 일정 등록 school_id=%s exam_id=%s classes=%s", context.school_id, exam.id, request.class_ids)
    return WorkflowResult(success=True, data=ExaminationSchema.model_validate(exam).model_dump(mode="json"))
