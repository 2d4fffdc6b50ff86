"""
services/grade_workflow.py

성적 승인 워크플로.

draft → pending_approval → approved | rejected
approved → released

허용되지 않은 전이 대상 행은 건너뛰고, 실제로 바뀐 행 수를 돌려준다.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, FrozenSet, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.enums import GradeStatus
from models.grades import GradeRecord
from schemas.enrollments import WorkflowResult

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[GradeStatus, FrozenSet[GradeStatus]] = {
    GradeStatus.DRAFT: frozenset({GradeStatus.PENDING_APPROVAL}),
    GradeStatus.PENDING_APPROVAL: frozenset({GradeStatus.APPROVED, GradeStatus.REJECTED}),
    GradeStatus.APPROVED: frozenset({GradeStatus.RELEASED}),
    GradeStatus.REJECTED: frozenset(),
    GradeStatus.RELEASED: frozenset(),
}

GRADE_NOT_FOUND = "Grade not found"
SCORE_ABOVE_MAX = "Score cannot exceed the maximum score"

# (하한 %, 등급) 높은 순
LETTER_SCALE = [
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (40, "C"),
    (30, "D+"),
    (20, "D"),
]


def letter_grade_for(percentage: Optional[float]) -> str:
    if percentage is None:
        return "E"
    for minimum, letter in LETTER_SCALE:
        if percentage >= minimum:
            return letter
    return "E"


def can_transition(current: str, target: GradeStatus) -> bool:
    try:
        source = GradeStatus(current)
    except ValueError:
        return False
    return target in ALLOWED_TRANSITIONS[source]


def _now():
    return datetime.now(timezone.utc)


def _transition(
    db: Session,
    school_id: int,
    grade_ids: List[int],
    target: GradeStatus,
    apply: Callable[[GradeRecord], None],
    only: Optional[Callable[[GradeRecord], bool]] = None,
) -> WorkflowResult:
    rows = db.execute(
        select(GradeRecord)
        .where(GradeRecord.school_id == school_id, GradeRecord.id.in_(grade_ids))
        .order_by(GradeRecord.id)
        .with_for_update()
    ).scalars().all()

    updated: List[int] = []
    for row in rows:
        if not can_transition(row.status, target):
            continue
        if only is not None and not only(row):
            continue
        row.status = target.value
        apply(row)
        updated.append(row.id)

    skipped = [gid for gid in grade_ids if gid not in set(updated)]
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("성적 상태 변경 실패 target=%s ids=%s", target.value, grade_ids)
        raise

    logger.info("성적 상태 변경 target=%s updated=%d skipped=%d", target.value, len(updated), len(skipped))
    return WorkflowResult(
        success=True,
        data={"updated_count": len(updated), "updated_ids": updated, "skipped_ids": skipped},
    )


def submit_for_approval(db: Session, teacher_id: int, school_id: int, grade_ids: List[int]) -> WorkflowResult:
    """교사 본인이 입력한 draft 만 제출"""
    now = _now()

    def apply(row: GradeRecord):
        row.submitted_at = now

    return _transition(
        db, school_id, grade_ids, GradeStatus.PENDING_APPROVAL, apply,
        only=lambda row: row.submitted_by == teacher_id,
    )


def approve_grades(db: Session, principal_id: int, school_id: int, grade_ids: List[int],
                   principal_notes: Optional[str] = None) -> WorkflowResult:
    now = _now()

    def apply(row: GradeRecord):
        row.approved_by = principal_id
        row.approved_at = now
        if principal_notes:
            row.principal_notes = principal_notes

    return _transition(db, school_id, grade_ids, GradeStatus.APPROVED, apply)


def reject_grades(db: Session, principal_id: int, school_id: int, grade_ids: List[int],
                  rejection_reason: str) -> WorkflowResult:
    def apply(row: GradeRecord):
        row.approved_by = principal_id
        row.principal_notes = rejection_reason

    return _transition(db, school_id, grade_ids, GradeStatus.REJECTED, apply)


def release_grades(db: Session, principal_id: int, school_id: int, grade_ids: List[int]) -> WorkflowResult:
    now = _now()

    def apply(row: GradeRecord):
        row.released_at = now

    return _transition(db, school_id, grade_ids, GradeStatus.RELEASED, apply)


def override_grade(db: Session, principal_id: int, school_id: int, grade_id: int,
                   new_score: float, principal_notes: Optional[str] = None) -> WorkflowResult:
    """교장 직권 점수 수정: 백분율/등급 재계산 후 approved 로 확정"""
    row = db.execute(
        select(GradeRecord)
        .where(GradeRecord.id == grade_id, GradeRecord.school_id == school_id)
        .with_for_update()
    ).scalars().first()
    if row is None:
        db.rollback()
        return WorkflowResult.failed(GRADE_NOT_FOUND)

    max_score = row.max_score or 100
    if new_score > max_score:
        db.rollback()
        return WorkflowResult.failed(SCORE_ABOVE_MAX)

    previous = row.score
    row.score = new_score
    row.percentage = new_score / max_score * 100
    row.letter_grade = letter_grade_for(row.percentage)
    row.status = GradeStatus.APPROVED.value
    row.approved_by = principal_id
    row.approved_at = _now()
    if principal_notes:
        row.principal_notes = principal_notes

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("성적 직권 수정 실패 grade_id=%s", grade_id)
        raise

    logger.info("성적 직권 수정 grade_id=%s %s → %s", grade_id, previous, new_score)
    return WorkflowResult(
        success=True,
        data={
            "grade_id": grade_id,
            "score": new_score,
            "percentage": row.percentage,
            "letter_grade": row.letter_grade,
            "status": row.status,
        },
    )
