"""
services/academic_context.py

학사 컨텍스트 해석 + 교육과정 일관성 검사.

- resolve_context(): 부분 컨텍스트(school 필수, 나머지 선택)를 완전한 컨텍스트로 채우고
  학년도/학기/학급/과목이 같은 학교에 속하는지 검증한다.
  일반적인 검증 실패는 예외가 아니라 errors 리스트로 돌려준다.
- check_curriculum_consistency(): 학년도 · 학기 · 학급 · 과목에 기록된 교육과정 유형이
  서로 맞는지 확인한다. 학급 값이 기준이다.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from models.enums import CurriculumType
from schemas.context import (
    AcademicContext,
    ContextResolution,
    CurrentPeriod,
    CurriculumCheck,
    CurriculumDisplayInfo,
)
from services.academic_repository import AcademicRepository

logger = logging.getLogger(__name__)

# ==========================================================
# [메시지] 호출 측(UI)이 그대로 표시
# ==========================================================
NO_CURRENT_PERIOD = "No current academic period set for this school"
INVALID_ACADEMIC_YEAR = "Invalid academic year"
INVALID_ACADEMIC_TERM = "Invalid academic term"
TERM_NOT_IN_YEAR = "Academic term does not belong to the selected academic year"
INVALID_CLASS = "Invalid class selected or class does not belong to this school"
INVALID_SUBJECT = "Subject not found or does not belong to this school"
SUBJECT_NOT_IN_CLASS = "Subject is not assigned to this class"
YEAR_NOT_CURRENT = "Academic year is not current"
TERM_NOT_CURRENT = "Academic term is not current"

_LEVEL_LABELS = {
    "academic_year": "Academic year",
    "term": "Academic term",
    "subject": "Subject",
}


def _parse_curriculum(value) -> Optional[CurriculumType]:
    if value is None or value == "":
        return None
    try:
        return CurriculumType(value)
    except ValueError:
        logger.warning("알 수 없는 교육과정 유형: %r", value)
        return None


# ==========================================================
# [1] 현재 학사 기간
# ==========================================================
def get_current_period(db: Session, school_id: int) -> Optional[CurrentPeriod]:
    """
    학교의 현재 학년도/학기를 조회한다.
    - 학교당 현재 행이 하나라는 불변식은 academic_periods 의 쓰기 경로가 보장한다.
    - 둘 중 하나라도 없으면 None (추측해서 채우지 않음)
    """
    repo = AcademicRepository(db)
    years = repo.current_years(school_id)
    terms = repo.current_terms(school_id)

    if len(years) > 1 or len(terms) > 1:
        logger.warning(
            "school_id=%s 에 현재 학사 기간 행이 여러 개입니다 (years=%d, terms=%d)",
            school_id, len(years), len(terms),
        )

    if not years or not terms:
        return None

    year = years[0]
    # 현재 학기가 여러 개라면 현재 학년도에 속한 학기를 우선
    term = next((t for t in terms if t.academic_year_id == year.id), terms[0])
    return CurrentPeriod(academic_year_id=year.id, term_id=term.id)


# ==========================================================
# [2] 컨텍스트 해석
# ==========================================================
def resolve_context(db: Session, partial: AcademicContext) -> ContextResolution:
    repo = AcademicRepository(db)
    errors: List[str] = []
    warnings: List[str] = []
    context = partial.model_copy()
    school_id = context.school_id

    supplied_year = context.academic_year_id is not None
    supplied_term = context.term_id is not None

    # ✅ 학년도/학기가 비어 있으면 현재 기간으로 채움
    if not supplied_year or not supplied_term:
        period = get_current_period(db, school_id)
        if period is None:
            errors.append(NO_CURRENT_PERIOD)
        else:
            if not supplied_year:
                context.academic_year_id = period.academic_year_id
            if not supplied_term:
                context.term_id = period.term_id

    # ✅ 학년도 검증
    year = None
    if context.academic_year_id is not None:
        year = repo.get_year(context.academic_year_id, school_id)
        if year is None:
            errors.append(INVALID_ACADEMIC_YEAR)
        elif supplied_year and not year.is_current:
            warnings.append(YEAR_NOT_CURRENT)

    # ✅ 학기 검증 (학교 소속 + 학년도 소속)
    if context.term_id is not None:
        term = repo.get_term(context.term_id, school_id)
        if term is None:
            errors.append(INVALID_ACADEMIC_TERM)
        else:
            if year is not None and term.academic_year_id != year.id:
                errors.append(TERM_NOT_IN_YEAR)
            if supplied_term and not term.is_current:
                warnings.append(TERM_NOT_CURRENT)

    # ✅ 학급 검증 + 교육과정 유형
    if context.class_id is not None:
        class_ = repo.get_class(context.class_id, school_id)
        if class_ is None:
            errors.append(INVALID_CLASS)
        else:
            class_type = _parse_curriculum(class_.curriculum_type)
            if context.curriculum_type is None:
                context.curriculum_type = class_type
            elif class_type is not None and class_type != context.curriculum_type:
                errors.append(
                    f"Class curriculum type ({class_type.value}) does not match "
                    f"expected type ({context.curriculum_type.value})"
                )

    # ✅ 과목 검증
    if context.subject_id is not None:
        subject = repo.get_subject(context.subject_id, school_id)
        if subject is None:
            errors.append(INVALID_SUBJECT)
        elif context.class_id is not None and subject.class_id != context.class_id:
            errors.append(SUBJECT_NOT_IN_CLASS)

    if errors:
        logger.info("학사 컨텍스트 검증 실패 school_id=%s errors=%s", school_id, errors)

    return ContextResolution(
        context=context,
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
    )


# ==========================================================
# [3] 교육과정 일관성
# ==========================================================
def check_curriculum_consistency(db: Session, context: AcademicContext) -> CurriculumCheck:
    """
    학년도 → 학기 → 학급 → 과목 체인의 교육과정 유형을 모아 비교한다.
    - 학급 값이 기준. 다른 레벨이 다르면 두 값을 모두 적은 오류를 남긴다.
    - 학급이 없으면 먼저 관측된 값(기대값 → 학년도 → 학기 → 과목 순)을 기준으로 삼는다.
    - 쓰기 작업은 is_consistent = False 를 중단 조건으로 다룬다.
    """
    repo = AcademicRepository(db)
    errors: List[str] = []
    observed: Dict[str, Optional[CurriculumType]] = {}

    if context.academic_year_id is not None:
        year = repo.get_year(context.academic_year_id, context.school_id)
        observed["academic_year"] = _parse_curriculum(year.curriculum_type) if year else None
    if context.term_id is not None:
        term = repo.get_term(context.term_id, context.school_id)
        observed["term"] = _parse_curriculum(term.curriculum_type) if term else None
    if context.class_id is not None:
        class_ = repo.get_class(context.class_id, context.school_id)
        if class_ is None:
            errors.append(INVALID_CLASS)
            observed["class"] = None
        else:
            observed["class"] = _parse_curriculum(class_.curriculum_type)
    if context.subject_id is not None:
        subject = repo.get_subject(context.subject_id, context.school_id)
        observed["subject"] = _parse_curriculum(subject.curriculum_type) if subject else None
    observed["expected"] = context.curriculum_type

    class_type = observed.get("class")
    if class_type is not None:
        if context.curriculum_type is not None and context.curriculum_type != class_type:
            errors.append(
                f"Class curriculum type ({class_type.value}) does not match "
                f"expected type ({context.curriculum_type.value})"
            )
        for level, label in _LEVEL_LABELS.items():
            value = observed.get(level)
            if value is not None and value != class_type:
                errors.append(
                    f"{label} curriculum type ({value.value}) does not match "
                    f"class curriculum type ({class_type.value})"
                )
        reference = class_type
    else:
        reference = None
        reference_label = None
        for level, label in (("expected", "Expected"), *_LEVEL_LABELS.items()):
            value = observed.get(level)
            if value is None:
                continue
            if reference is None:
                reference, reference_label = value, label.lower()
            elif value != reference:
                errors.append(
                    f"{label} curriculum type ({value.value}) does not match "
                    f"{reference_label} curriculum type ({reference.value})"
                )

    return CurriculumCheck(
        is_consistent=not errors,
        curriculum_type=reference,
        errors=errors,
        curriculum_types={k: (v.value if v is not None else None) for k, v in observed.items()},
    )


# ==========================================================
# [4] 교육과정 표시 정보 (대시보드 배지용)
# ==========================================================
_DISPLAY_INFO = {
    CurriculumType.CBC: CurriculumDisplayInfo(
        name="Competency-Based Curriculum (CBC)",
        description="Kenyan CBC with performance levels and strand assessments",
        grading_system="Performance Levels (EM, AP, PR, EX)",
        color="blue",
    ),
    CurriculumType.IGCSE: CurriculumDisplayInfo(
        name="International General Certificate of Secondary Education (IGCSE)",
        description="Cambridge IGCSE with letter grades and component scoring",
        grading_system="Letter Grades (A*, A, B, C, D, E, F, G, U)",
        color="purple",
    ),
    CurriculumType.STANDARD: CurriculumDisplayInfo(
        name="Standard Curriculum",
        description="Traditional numeric grading system",
        grading_system="Numeric Scores (0-100) with letter grades",
        color="green",
    ),
}


def curriculum_display_info(curriculum_type: Optional[str]) -> CurriculumDisplayInfo:
    parsed = _parse_curriculum(curriculum_type)
    return _DISPLAY_INFO[parsed or CurriculumType.STANDARD]
