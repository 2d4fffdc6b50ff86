"""
services/academic_periods.py

현재 학년도/학기 플래그(is_current)를 바꾸는 유일한 쓰기 경로.
학교당 현재 행은 하나: 같은 트랜잭션에서 기존 행을 모두 내리고 선택한 행만 올린다.
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.academic_terms import AcademicTerm
from models.academic_years import AcademicYear
from schemas.enrollments import WorkflowResult

logger = logging.getLogger(__name__)


def _switch_current(db: Session, model, row_id: int, school_id: int, label: str) -> WorkflowResult:
    row: Optional[object] = db.execute(
        select(model)
        .where(model.id == row_id, model.school_id == school_id)
        .with_for_update()
    ).scalars().first()
    if row is None:
        return WorkflowResult.failed(f"{label} not found for this school")

    try:
        # 학교 내 현재 행 잠금 후 일괄 해제 → 선택 행만 설정
        db.execute(
            select(model.id).where(model.school_id == school_id).with_for_update()
        ).all()
        db.execute(
            update(model)
            .where(model.school_id == school_id, model.id != row_id)
            .values(is_current=False)
        )
        row.is_current = True
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("%s 현재 기간 변경 실패 school_id=%s id=%s", label, school_id, row_id)
        raise

    logger.info("%s 현재 기간 변경 school_id=%s id=%s", label, school_id, row_id)
    return WorkflowResult(success=True, data={"id": row_id, "school_id": school_id})


def set_current_year(db: Session, school_id: int, year_id: int) -> WorkflowResult:
    return _switch_current(db, AcademicYear, year_id, school_id, "Academic year")


def set_current_term(db: Session, school_id: int, term_id: int) -> WorkflowResult:
    return _switch_current(db, AcademicTerm, term_id, school_id, "Academic term")
