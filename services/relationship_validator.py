"""
services/relationship_validator.py

쓰기 작업 전 참조 무결성 사전 점검.
요청 타입(태그드 유니언)별로 검사 함수를 등록하고, 한 요청의 검사는 모두 실행해
오류를 한 리스트에 모은다 (첫 실패에서 멈추지 않음).
"""

from functools import singledispatch
from typing import List

from sqlalchemy.orm import Session

from models.enums import Role
from schemas.relationships import (
    ExaminationScheduleRequest,
    RelationshipCheck,
    StudentEnrollmentRequest,
    SubjectAssignmentRequest,
)
from services.academic_repository import AcademicRepository


@singledispatch
def _collect_errors(request, repo: AcademicRepository) -> List[str]:
    raise TypeError(f"지원하지 않는 관계 검사 요청: {type(request).__name__}")


@_collect_errors.register
def _(request: StudentEnrollmentRequest, repo: AcademicRepository) -> List[str]:
    errors: List[str] = []

    if repo.get_student(request.student_id) is None:
        errors.append("Student not found")

    class_ = repo.get_class(request.class_id)
    if class_ is None:
        errors.append("Class not found")
    elif not class_.is_active:
        errors.append("Class is not active")

    if repo.get_year(request.academic_year_id) is None:
        errors.append("Academic year not found")
    if repo.get_term(request.term_id) is None:
        errors.append("Academic term not found")
    return errors


@_collect_errors.register
def _(request: SubjectAssignmentRequest, repo: AcademicRepository) -> List[str]:
    errors: List[str] = []

    if repo.get_subject(request.subject_id) is None:
        errors.append("Subject not found")
    if repo.get_class(request.class_id) is None:
        errors.append("Class not found")

    teacher = repo.get_profile(request.teacher_id)
    if teacher is None:
        errors.append("Teacher not found")
    elif teacher.role != Role.TEACHER.value:
        errors.append("Selected user is not a teacher")

    if request.academic_year_id is not None and repo.get_year(request.academic_year_id) is None:
        errors.append("Academic year not found")
    if request.term_id is not None and repo.get_term(request.term_id) is None:
        errors.append("Academic term not found")
    return errors


@_collect_errors.register
def _(request: ExaminationScheduleRequest, repo: AcademicRepository) -> List[str]:
    errors: List[str] = []

    existing = repo.existing_class_ids(request.class_ids)
    for class_id in request.class_ids:
        if class_id not in existing:
            errors.append(f"Class {class_id} not found")

    if request.start_date and request.end_date and request.end_date < request.start_date:
        errors.append("Examination end date must not be before start date")
    return errors


def validate_relationships(db: Session, request) -> RelationshipCheck:
    errors = _collect_errors(request, AcademicRepository(db))
    return RelationshipCheck(valid=not errors, errors=errors)
